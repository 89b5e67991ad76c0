import os
import time
from collections import defaultdict
from contextlib import contextmanager
from pathlib import Path
from typing import Container, Dict, Iterator, Optional, Set, TextIO, Tuple


def is_relative_to(a: Path, b: Path) -> bool:
    try:
        a.relative_to(b)
        return True
    except ValueError:
        return False


def get_files(root: Path, extensions: Container[str]) -> Iterator[Path]:
    """Recursively iterate over files underneath the given root, yielding
    only filenames with the given extensions. Symlinks are followed, but
    any given concrete directory is only scanned once, and directories
    outside of the root are never entered."""
    root_resolved = root.resolve()
    seen: Set[Path] = {root_resolved}

    for base, dirs, files in os.walk(root, followlinks=True):
        base_resolved = Path(base).resolve()
        if not is_relative_to(base_resolved, root_resolved):
            continue

        # Preserve both the actual resolved path and the directory name
        dirs_set = dict(((base_resolved.joinpath(d).resolve(), d) for d in dirs))

        dirs[:] = sorted(
            d_name
            for d_path, d_name in dirs_set.items()
            if d_path not in seen and is_relative_to(d_path, root_resolved)
        )

        seen.update(dirs_set)

        for name in sorted(files):
            ext = os.path.splitext(name)[1]
            if ext not in extensions:
                continue

            path = Path(os.path.join(base, name))
            if is_relative_to(path.resolve(), root_resolved):
                yield path


class PerformanceLogger:
    """Accumulates wall-clock time per named phase across every page rendered in
    the process."""

    _singleton: Optional["PerformanceLogger"] = None

    def __init__(self) -> None:
        self._totals: Dict[str, float] = defaultdict(float)
        self._calls: Dict[str, int] = defaultdict(int)

    @contextmanager
    def start(self, name: str) -> Iterator[None]:
        start_time = time.perf_counter()
        try:
            yield None
        finally:
            self._totals[name] += time.perf_counter() - start_time
            self._calls[name] += 1

    def times(self) -> Dict[str, Tuple[float, int]]:
        """Map each phase name to its total time in seconds and its number of runs."""
        return {name: (total, self._calls[name]) for name, total in self._totals.items()}

    def print(self, file: TextIO) -> None:
        times = self.times()
        if not times:
            return

        width = max(len(name) for name in times)
        for name, (total, calls) in times.items():
            print(f"{name:{width}} {total:.2f}s over {calls} pages", file=file)

    @classmethod
    def singleton(cls) -> "PerformanceLogger":
        if cls._singleton is None:
            cls._singleton = cls()
        return cls._singleton
