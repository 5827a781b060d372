"""Errors raised by urlmetrics command handlers and how they are reported."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

__all__ = [
    "EXIT_STATUS",
    "CliError",
    "ErrorPayload",
    "build_error_payload",
    "log_cli_error",
]


# ``usage`` for bad arguments, ``io`` for unreadable or unwritable files.
EXIT_STATUS: Mapping[str, int] = {"runtime": 1, "usage": 2, "io": 3}

_FALLBACK_CATEGORY = "runtime"

_logger = logging.getLogger("urlmetrics.cli")


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """What gets logged and echoed when a command fails."""

    status_code: int
    category: str
    message: str
    context: Mapping[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }


def _loggable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def build_error_payload(
    message: str,
    *,
    category: str = _FALLBACK_CATEGORY,
    status_code: Optional[int] = None,
    context: Optional[Mapping[str, Any]] = None,
) -> ErrorPayload:
    """Resolve the exit status for ``category`` and flatten ``context`` values."""

    category = category or _FALLBACK_CATEGORY
    if status_code is None:
        status_code = EXIT_STATUS.get(category, EXIT_STATUS[_FALLBACK_CATEGORY])
    flattened = {str(key): _loggable(value) for key, value in (context or {}).items()}
    return ErrorPayload(
        status_code=status_code,
        category=category,
        message=message,
        context=flattened,
    )


def log_cli_error(
    payload: ErrorPayload,
    *,
    logger: Optional[logging.Logger] = None,
    exc_info: Optional[BaseException] = None,
) -> None:
    (logger or _logger).error(
        payload.message,
        extra={
            "event": "cli.error",
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class CliError(RuntimeError):
    """A command failed in a way the caller can act on.

    ``logged`` is flipped once the error has been reported so the entry
    point does not log it twice.
    """

    def __init__(
        self,
        message: str,
        *,
        category: str = _FALLBACK_CATEGORY,
        status_code: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
        logged: bool = False,
    ) -> None:
        super().__init__(message)
        self.payload = build_error_payload(
            message, category=category, status_code=status_code, context=context
        )
        self.logged = logged

    @property
    def category(self) -> str:
        return self.payload.category

    @property
    def status_code(self) -> int:
        return self.payload.status_code

    @property
    def context(self) -> dict[str, Any]:
        return dict(self.payload.context)
