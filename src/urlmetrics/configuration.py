"""Helpers to load project-level configuration files."""

from __future__ import annotations

from collections.abc import Iterable, Mapping as ABCMapping
from pathlib import Path
from typing import Any, BinaryIO

import yaml

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

__all__ = [
    "PROJECT_CONFIG_FILENAME",
    "TOOL_SECTION",
    "iter_unique_paths",
    "load_project_config",
    "load_settings_file",
    "pyproject_candidate",
]


PROJECT_CONFIG_FILENAME = "pyproject.toml"
TOOL_SECTION = "urlmetrics"

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def _plain(value: Any) -> Any:
    """Turn nested TOML/YAML containers into plain ``dict``/``list`` values."""

    if isinstance(value, ABCMapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def pyproject_candidate(base: Path) -> Path | None:
    """Map a directory or explicit ``pyproject.toml`` path to the file to read.

    Paths naming any other file return ``None``.
    """

    base = base.expanduser()
    if base.name == PROJECT_CONFIG_FILENAME:
        return base
    if base.suffix:
        return None
    return base / PROJECT_CONFIG_FILENAME


def iter_unique_paths(paths: Iterable[Path]) -> list[Path]:
    """Resolve ``paths`` keeping the first occurrence of each."""

    unique: dict[Path, None] = {}
    for path in paths:
        unique.setdefault(path.expanduser().resolve(strict=False), None)
    return list(unique)


def _parse_toml(handle: BinaryIO, source: Path) -> Any:
    try:
        return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in settings file: {source}") from exc


def _tool_table(document: Any) -> dict[str, Any] | None:
    if not isinstance(document, ABCMapping):
        return None
    section = document.get("tool", {})
    section = section.get(TOOL_SECTION) if isinstance(section, ABCMapping) else None
    return _plain(section) if isinstance(section, ABCMapping) else None


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Return the ``[tool.urlmetrics]`` table and the file it came from.

    ``path`` may be a directory or a ``pyproject.toml``.  ``None`` means there
    is no such file or it has no ``[tool.urlmetrics]`` table.
    """

    candidate = pyproject_candidate(path)
    if candidate is None:
        return None
    candidate = candidate.resolve(strict=False)
    if not candidate.is_file():
        return None
    with candidate.open("rb") as handle:
        section = _tool_table(_parse_toml(handle, candidate))
    if section is None:
        return None
    return section, candidate


def load_settings_file(path: str | Path) -> dict[str, Any]:
    """Load a standalone settings document.

    ``.yaml``/``.yml`` files are parsed with :func:`yaml.safe_load`; anything
    else is read as TOML.  A ``pyproject.toml`` yields its
    ``[tool.urlmetrics]`` table.
    """

    source = Path(path).expanduser()
    if not source.is_file():
        raise FileNotFoundError(source)

    if source.name == PROJECT_CONFIG_FILENAME:
        loaded = load_project_config(source)
        return loaded[0] if loaded is not None else {}

    if source.suffix.lower() in _YAML_SUFFIXES:
        try:
            data = yaml.safe_load(source.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in settings file: {source}") from exc
    else:
        with source.open("rb") as handle:
            data = _parse_toml(handle, source)

    if data is None:
        return {}
    if not isinstance(data, ABCMapping):
        raise TypeError(f"Settings file {source!s} must decode to a mapping")
    return _plain(data)
