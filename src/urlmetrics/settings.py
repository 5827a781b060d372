"""Collection settings parsed from project configuration.

Values coming from configuration files are clamped into range rather than
rejected; each correction emits a :class:`UserWarning` so misconfigured
deployments still aggregate samples.
"""

from __future__ import annotations

import warnings
from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from urlmetrics_core import MAX_VIEWPORT_WIDTH, URLMetric, URLMetricGroupCollection

__all__ = [
    "CollectionSettings",
    "DAY_IN_SECONDS",
    "DEFAULT_BREAKPOINTS",
    "DEFAULT_FRESHNESS_TTL",
    "DEFAULT_SAMPLE_SIZE",
    "normalise_breakpoints",
    "normalise_freshness_ttl",
    "normalise_sample_size",
]


DAY_IN_SECONDS = 86400

# Phone portrait, phone landscape / small tablet, tablet.
DEFAULT_BREAKPOINTS: tuple[int, ...] = (480, 600, 782)
DEFAULT_SAMPLE_SIZE = 3
DEFAULT_FRESHNESS_TTL = DAY_IN_SECONDS


def _warn(message: str) -> None:
    warnings.warn(message, UserWarning, stacklevel=3)


def _coerce_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def normalise_breakpoints(values: Any) -> tuple[int, ...]:
    """Return sorted, unique breakpoints clamped to ``[1, MAX - 1]``."""

    if values is None:
        return DEFAULT_BREAKPOINTS
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        _warn(f"Breakpoints must be a list of integers, got {values!r}; using defaults.")
        return DEFAULT_BREAKPOINTS

    result: set[int] = set()
    for raw in values:
        breakpoint = _coerce_int(raw)
        if breakpoint is None:
            _warn(f"Ignoring non-integer breakpoint {raw!r}.")
            continue
        if breakpoint < 1:
            _warn(f"Breakpoint must be greater than zero, but encountered: {breakpoint}")
            breakpoint = 1
        elif breakpoint >= MAX_VIEWPORT_WIDTH:
            _warn(
                "Breakpoint must be less than the maximum viewport width, "
                f"but encountered: {breakpoint}"
            )
            breakpoint = MAX_VIEWPORT_WIDTH - 1
        result.add(breakpoint)
    return tuple(sorted(result))


def normalise_sample_size(value: Any) -> int:
    if value is None:
        return DEFAULT_SAMPLE_SIZE
    sample_size = _coerce_int(value)
    if sample_size is None:
        _warn(f"Sample size must be an integer, got {value!r}; using {DEFAULT_SAMPLE_SIZE}.")
        return DEFAULT_SAMPLE_SIZE
    if sample_size < 1:
        _warn(f"Sample size must be greater than zero, but provided: {sample_size}")
        return 1
    return sample_size


def normalise_freshness_ttl(value: Any) -> float:
    if value is None:
        return DEFAULT_FRESHNESS_TTL
    if isinstance(value, bool):
        ttl = None
    elif isinstance(value, (int, float)):
        ttl = value
    else:
        try:
            ttl = float(str(value).strip())
        except ValueError:
            ttl = None
    if ttl is None:
        _warn(
            f"Freshness TTL must be a number, got {value!r}; using {DEFAULT_FRESHNESS_TTL}."
        )
        return DEFAULT_FRESHNESS_TTL
    if ttl < 0:
        _warn(f"Freshness TTL must be at least zero, but provided: {ttl}")
        return 0
    return ttl


@dataclass(frozen=True, slots=True)
class CollectionSettings:
    """Configuration scalars needed to build a URL Metric group collection."""

    breakpoints: tuple[int, ...] = DEFAULT_BREAKPOINTS
    sample_size: int = DEFAULT_SAMPLE_SIZE
    freshness_ttl: float = DEFAULT_FRESHNESS_TTL

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "CollectionSettings":
        """Read the ``[collection]`` table of a loaded configuration mapping."""

        section: Mapping[str, Any] = {}
        if config:
            candidate = config.get("collection")
            if isinstance(candidate, ABCMapping):
                section = candidate
        return cls(
            breakpoints=normalise_breakpoints(section.get("breakpoints")),
            sample_size=normalise_sample_size(section.get("sample_size")),
            freshness_ttl=normalise_freshness_ttl(section.get("freshness_ttl")),
        )

    def with_overrides(
        self,
        *,
        breakpoints: Optional[Iterable[Any]] = None,
        sample_size: Optional[Any] = None,
        freshness_ttl: Optional[Any] = None,
    ) -> "CollectionSettings":
        """Return settings with explicitly supplied values normalised and applied."""

        return CollectionSettings(
            breakpoints=(
                normalise_breakpoints(breakpoints) if breakpoints is not None else self.breakpoints
            ),
            sample_size=(
                normalise_sample_size(sample_size) if sample_size is not None else self.sample_size
            ),
            freshness_ttl=(
                normalise_freshness_ttl(freshness_ttl)
                if freshness_ttl is not None
                else self.freshness_ttl
            ),
        )

    def build_collection(
        self,
        url_metrics: Iterable[URLMetric] = (),
        *,
        clock: Optional[Callable[[], float]] = None,
    ) -> URLMetricGroupCollection:
        return URLMetricGroupCollection(
            url_metrics,
            self.breakpoints,
            self.sample_size,
            self.freshness_ttl,
            clock=clock,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "breakpoints": list(self.breakpoints),
            "sample_size": self.sample_size,
            "freshness_ttl": self.freshness_ttl,
        }
