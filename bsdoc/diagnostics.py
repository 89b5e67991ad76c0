import enum
from pathlib import Path
from typing import Dict, Tuple, Union

SerializableType = Union[None, bool, str, int, float]
Position = Union[int, Tuple[int, int]]


class Diagnostic:
    """A problem found while loading a project or rendering a page. The start is a
    line number, or a (line, column) pair."""

    class Level(enum.IntEnum):
        info = 1
        warning = 2
        error = 3

    def __init__(self, message: str, start: Position) -> None:
        self.message = message
        self.start = (start, 0) if isinstance(start, int) else start

    @property
    def severity(self) -> "Diagnostic.Level":
        raise TypeError("Cannot access the severity of an abstract base Diagnostic")

    @property
    def severity_string(self) -> str:
        return self.severity.name.title()

    def serialize(self) -> Dict[str, SerializableType]:
        return {
            "severity": self.severity_string.upper(),
            "start": self.start[0],
            "message": self.message,
        }

    def __eq__(self, other: object) -> bool:
        if type(self) != type(other):
            return False

        assert isinstance(other, Diagnostic)
        return self.message == other.message and self.start == other.start

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, {self.start!r})"


class UnterminatedBlock(Diagnostic):
    severity = Diagnostic.Level.error

    def __init__(self, terminator: str, start: Position) -> None:
        super().__init__(f"Block is never closed by {terminator!r}", start)
        self.terminator = terminator


class CannotOpenFile(Diagnostic):
    severity = Diagnostic.Level.error

    def __init__(self, path: Path, reason: str, start: Position) -> None:
        super().__init__(f"Error opening {path}: {reason}", start)
        self.path = path
        self.reason = reason


class UnmarshallingError(Diagnostic):
    severity = Diagnostic.Level.error

    def __init__(self, reason: str, start: Position) -> None:
        super().__init__(f"Failed to load configuration: {reason}", start)
        self.reason = reason
