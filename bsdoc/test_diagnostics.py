from pathlib import Path

import pytest

from .diagnostics import CannotOpenFile, Diagnostic, UnterminatedBlock


def test_diagnostics() -> None:
    diagnostic = UnterminatedBlock("^@endcode$", (3, 0))
    assert isinstance(diagnostic, UnterminatedBlock)
    assert diagnostic.severity == Diagnostic.Level.error
    assert diagnostic.start == (3, 0)
    assert diagnostic.serialize() == {
        "severity": "ERROR",
        "start": 3,
        "message": "Block is never closed by '^@endcode$'",
    }

    assert diagnostic == UnterminatedBlock("^@endcode$", 3)
    assert diagnostic != UnterminatedBlock("^@endcode$", 4)
    assert diagnostic != CannotOpenFile(Path("foo.bsdoc"), "missing", 3)

    # Make sure attempts to access abstract Diagnostic base class
    # results in TypeError
    with pytest.raises(TypeError):
        Diagnostic("foo", 0).severity


def test_cannot_open_file() -> None:
    diagnostic = CannotOpenFile(Path("docs/index.bsdoc"), "No such file or directory", 0)
    assert diagnostic.message == "Error opening docs/index.bsdoc: No such file or directory"
    assert diagnostic.start == (0, 0)
    assert diagnostic.severity_string == "Error"
