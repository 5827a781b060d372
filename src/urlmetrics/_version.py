"""Package version lookup.

Installed distributions report their metadata version; source checkouts fall
back to the newest ``## vX.Y.Z`` heading in ``CHANGELOG.md``.
"""

from __future__ import annotations

import re
from importlib import metadata
from pathlib import Path
from typing import Optional

from packaging.version import InvalidVersion, Version

_DISTRIBUTION = "urlmetrics"
_CHANGELOG_HEADING = re.compile(r"^## v(\d+\.\d+\.\d+)\b", re.MULTILINE)


def _changelog_version() -> Optional[str]:
    # src/urlmetrics/_version.py -> src/ and the repository root.
    for directory in Path(__file__).resolve().parents[1:3]:
        changelog = directory / "CHANGELOG.md"
        if changelog.is_file():
            match = _CHANGELOG_HEADING.search(changelog.read_text(encoding="utf-8"))
            if match:
                return match.group(1)
    return None


def _load_version() -> str:
    try:
        raw = metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        fallback = _changelog_version()
        if fallback is None:
            raise RuntimeError(
                f"Cannot determine the {_DISTRIBUTION!r} version: the package is not "
                "installed and no CHANGELOG.md heading was found."
            ) from None
        raw = fallback

    try:
        release = Version(raw).release
    except InvalidVersion as exc:
        raise RuntimeError(f"{_DISTRIBUTION!r} has an invalid version {raw!r}.") from exc
    if len(release) != 3:
        raise RuntimeError(
            f"{_DISTRIBUTION!r} versions must follow MAJOR.MINOR.PATCH, got {raw!r}."
        )
    return raw


__version__ = _load_version()

__all__ = ["__version__"]
