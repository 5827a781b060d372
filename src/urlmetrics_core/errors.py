"""Error types raised by the URL Metric aggregation core."""

from __future__ import annotations

from typing import Any, Mapping, Optional

__all__ = ["InvalidArgumentError"]


class InvalidArgumentError(ValueError):
    """Raised when a configuration value or sample violates a core invariant."""

    __slots__ = ("context",)

    def __init__(self, message: str, *, context: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.context = dict(context or {})
