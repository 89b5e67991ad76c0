import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, ClassVar, Dict, List, Tuple

import tomli

from .diagnostics import Diagnostic, UnmarshallingError

CONFIG_FILENAME = "bsdoc.toml"
logger = logging.getLogger(__name__)


class LoadError(Exception):
    pass


def _expect_str(key: str, value: object) -> str:
    if not isinstance(value, str):
        raise LoadError(f"{key}: expected a string, got {type(value).__name__}")
    return value


def _expect_bool(key: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise LoadError(f"{key}: expected a boolean, got {type(value).__name__}")
    return value


def _expect_str_list(key: str, value: object) -> List[str]:
    if not isinstance(value, list):
        raise LoadError(f"{key}: expected a list, got {type(value).__name__}")
    return [_expect_str(f"{key}[{i}]", item) for i, item in enumerate(value)]


def _expect_str_dict(key: str, value: object) -> Dict[str, str]:
    if not isinstance(value, dict):
        raise LoadError(f"{key}: expected a table, got {type(value).__name__}")
    return {k: _expect_str(f"{key}.{k}", v) for k, v in value.items()}


@dataclass
class ProjectConfig:
    root: Path
    name: str = field(default="unnamed")
    indent_tags: List[str] = field(default_factory=lambda: ["blockquote"])
    # Extra inline substitutions, pattern -> replacement, applied after the built-in ones
    substitutions: Dict[str, str] = field(default_factory=dict)
    source_suffix: str = field(default=".bsdoc")
    fail_on_diagnostics: bool = field(default=False)

    FIELD_TYPES: ClassVar[Dict[str, Callable[[str, object], object]]] = {
        "name": _expect_str,
        "indent_tags": _expect_str_list,
        "substitutions": _expect_str_dict,
        "source_suffix": _expect_str,
        "fail_on_diagnostics": _expect_bool,
    }

    @property
    def config_path(self) -> Path:
        return self.root.joinpath(CONFIG_FILENAME)

    @classmethod
    def from_dict(cls, root: Path, data: Dict[str, Any]) -> "ProjectConfig":
        """Create a configuration from parsed TOML, raising LoadError on unknown keys
        or mistyped values."""
        options: Dict[str, Any] = {}
        for key, value in data.items():
            checker = cls.FIELD_TYPES.get(key)
            if checker is None:
                raise LoadError(f"Unknown option: {key}")
            options[key] = checker(key, value)

        return cls(root, **options)

    @classmethod
    def load(cls, path: Path) -> Tuple["ProjectConfig", List[Diagnostic]]:
        """Load a configuration file. Raises OSError if the file cannot be read;
        malformed contents are reported as diagnostics and the defaults are used."""
        with path.open("rb") as f:
            try:
                data = tomli.load(f)
                return cls.from_dict(path.parent, data), []
            except (tomli.TOMLDecodeError, LoadError) as err:
                logger.debug(f"Invalid configuration in {path}: {err}")
                return cls(path.parent), [UnmarshallingError(str(err), 0)]

    @classmethod
    def open(cls, root: Path) -> Tuple["ProjectConfig", List[Diagnostic]]:
        """Search the given directory and its parents for a configuration file."""
        path = root.resolve()
        while path.parent != path:
            try:
                return cls.load(path.joinpath(CONFIG_FILENAME))
            except FileNotFoundError:
                pass

            path = path.parent

        return cls(root), []
