import io
from pathlib import Path

from . import util


def test_get_files(tmp_path: Path) -> None:
    tmp_path.joinpath("index.bsdoc").write_text("# Index\n")
    tmp_path.joinpath("notes.txt").write_text("not a page\n")
    tmp_path.joinpath("guide").mkdir()
    tmp_path.joinpath("guide", "install.bsdoc").write_text("# Install\n")

    assert set(util.get_files(tmp_path, (".bsdoc",))) == {
        tmp_path.joinpath("index.bsdoc"),
        tmp_path.joinpath("guide", "install.bsdoc"),
    }
    assert list(util.get_files(tmp_path, (".md",))) == []


def test_get_files_symlink_loop(tmp_path: Path) -> None:
    tmp_path.joinpath("index.bsdoc").write_text("# Index\n")
    tmp_path.joinpath("loop").symlink_to(tmp_path, target_is_directory=True)

    assert list(util.get_files(tmp_path, (".bsdoc",))) == [
        tmp_path.joinpath("index.bsdoc")
    ]


def test_performance_logger() -> None:
    logger = util.PerformanceLogger()
    with logger.start("parse"):
        pass
    with logger.start("parse"):
        pass

    times = logger.times()
    assert list(times.keys()) == ["parse"]
    total, calls = times["parse"]
    assert total >= 0
    assert calls == 2

    output = io.StringIO()
    logger.print(output)
    assert output.getvalue().startswith("parse ")
    assert output.getvalue().endswith("over 2 pages\n")

    empty = io.StringIO()
    util.PerformanceLogger().print(empty)
    assert empty.getvalue() == ""

    assert util.PerformanceLogger.singleton() is util.PerformanceLogger.singleton()
