"""Primitives shared between the group and collection layers."""

from __future__ import annotations

import sys
from typing import Any, Callable, Dict, Hashable, Tuple, TypeVar

__all__ = [
    "MAX_VIEWPORT_WIDTH",
    "QueryKey",
    "ResultCache",
]


# Breakpoints must stay strictly below this value so the last group can start
# one pixel after the largest breakpoint.
MAX_VIEWPORT_WIDTH = sys.maxsize

_V = TypeVar("_V")

QueryKey = Tuple[str, Tuple[Hashable, ...]]


class ResultCache:
    """Memoisation map for derived query results.

    Entries are keyed by the query name and the positional arguments passed to
    the factory, so parameterised queries get one entry per argument value.
    Nothing expires on its own: owners call :meth:`clear` whenever the
    underlying samples change.  Failed computations are not cached.
    """

    __slots__ = ("_data",)

    def __init__(self) -> None:
        self._data: Dict[QueryKey, Any] = {}

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def get_or_create(
        self,
        name: str,
        factory: Callable[..., _V],
        *args: Hashable,
    ) -> _V:
        """Return the cached value for ``(name, args)`` or compute ``factory(*args)``."""

        key = (name, args)
        try:
            return self._data[key]
        except KeyError:
            pass
        value = factory(*args)
        self._data[key] = value
        return value

    def clear(self) -> None:
        """Drop every cached entry."""

        self._data.clear()
