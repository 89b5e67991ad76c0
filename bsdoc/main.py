"""bsdoc.

Usage:
  bsdoc render <file> [--output=<path>] [options]
  bsdoc build <source-path> [--output=<path>] [options]
  bsdoc --version

Options:
  -h --help                 Show this screen.
  --version                 Show the version.
  --output=<path>           Where to write the HTML. render writes to stdout by
                            default; build writes next to each source file.
  --config=<path>           Read settings from this file instead of searching for
                            bsdoc.toml.

Environment variables:
  DIAGNOSTICS_FORMAT        JSON, text where text is default
  BSDOC_PERF_SUMMARY        0, 1 where 0 is default

"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from docopt import docopt

from . import __version__
from .diagnostics import CannotOpenFile, Diagnostic, UnterminatedBlock
from .markup import Renderer
from .paragraphparser import UnterminatedBlockError
from .types import ProjectConfig
from .util import PerformanceLogger, get_files

logger = logging.getLogger(__name__)

EXIT_STATUS_ERROR_DIAGNOSTICS = 2


class Backend:
    def __init__(self) -> None:
        self.total_errors = 0
        self.total_diagnostics = 0
        self.total_pages = 0

    def on_diagnostics(self, path: Path, diagnostics: List[Diagnostic]) -> None:
        output = os.environ.get("DIAGNOSTICS_FORMAT", "text")
        self.total_diagnostics += len(diagnostics)

        for diagnostic in diagnostics:
            info = diagnostic.serialize()
            info["path"] = path.as_posix()

            if output == "JSON":
                document: Dict[str, object] = {"diagnostic": info}
                print(json.dumps(document), file=sys.stderr)
            else:
                print(
                    "{severity}({path}:{start}ish): {message}".format(**info),
                    file=sys.stderr,
                )

            if diagnostic.severity >= Diagnostic.Level.error:
                self.total_errors += 1

    def on_page(self, output_path: Optional[Path], html: str) -> None:
        self.total_pages += 1
        if output_path is None:
            sys.stdout.write(html)
            return

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
        logger.info(f"Wrote {output_path}")


def load_config(
    args: Dict[str, Optional[str]], root: Path
) -> Tuple[ProjectConfig, List[Diagnostic]]:
    config_path = args["--config"]
    if not config_path:
        return ProjectConfig.open(root)

    path = Path(config_path).expanduser()
    try:
        return ProjectConfig.load(path)
    except OSError as err:
        return ProjectConfig(root), [CannotOpenFile(path, err.strerror or str(err), 0)]


def render_file(
    renderer: Renderer, backend: Backend, source: Path, output: Optional[Path]
) -> None:
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as err:
        backend.on_diagnostics(
            source, [CannotOpenFile(source, err.strerror or str(err), 0)]
        )
        return

    try:
        html = renderer.render(text)
    except UnterminatedBlockError as err:
        backend.on_diagnostics(source, [UnterminatedBlock(err.terminator, err.lineno)])
        return

    backend.on_page(output, html)


def build(
    renderer: Renderer,
    backend: Backend,
    config: ProjectConfig,
    source_root: Path,
    output_root: Optional[Path],
) -> None:
    for source in get_files(source_root, (config.source_suffix,)):
        relative = source.relative_to(source_root).with_suffix(".html")
        output = (output_root or source_root).joinpath(relative)
        render_file(renderer, backend, source, output)


def main() -> None:
    # docopt will terminate here and display usage instructions if bsdoc is run improperly
    args = docopt(__doc__, version=__version__)

    logging.basicConfig(level=logging.INFO)
    logger.info(f"bsdoc {__version__} starting")

    backend = Backend()
    output = Path(args["--output"]).expanduser() if args["--output"] else None

    if args["render"]:
        source = Path(args["<file>"])
        config, diagnostics = load_config(args, source.parent)
    else:
        source = Path(args["<source-path>"])
        config, diagnostics = load_config(args, source)

    if diagnostics:
        backend.on_diagnostics(config.config_path, diagnostics)

    renderer = Renderer.from_config(config)

    try:
        if args["render"]:
            render_file(renderer, backend, source, output)
        else:
            build(renderer, backend, config, source, output)

        if os.environ.get("BSDOC_PERF_SUMMARY", "0") == "1":
            PerformanceLogger.singleton().print(sys.stderr)
    except KeyboardInterrupt:
        pass
    finally:
        logger.info(
            f"{backend.total_diagnostics} diagnostics; {backend.total_pages} pages"
        )

    exit_code = 0
    if backend.total_errors > 0:
        exit_code = 1 if config.fail_on_diagnostics else EXIT_STATUS_ERROR_DIAGNOSTICS

    sys.exit(exit_code)
