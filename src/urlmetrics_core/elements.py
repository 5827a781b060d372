"""Value objects describing DOM nodes observed in a URL Metric."""

from __future__ import annotations

import math
import weakref
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Mapping, Optional

from urlmetrics_core.errors import InvalidArgumentError

if TYPE_CHECKING:  # pragma: no cover - import for type-checkers only
    from urlmetrics_core.url_metric import URLMetric

__all__ = ["DOMRect", "Element"]


_RECT_FIELDS = ("x", "y", "width", "height", "top", "right", "bottom", "left")


def _coerce_float(payload: Mapping[str, Any], key: str, *, source: str) -> float:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgumentError(
            f"{source} field '{key}' must be a number, got {value!r}",
            context={"field": key, "value": value},
        )
    numeric = float(value)
    if not math.isfinite(numeric):
        raise InvalidArgumentError(
            f"{source} field '{key}' must be finite, got {value!r}",
            context={"field": key, "value": value},
        )
    return numeric


@dataclass(frozen=True)
class DOMRect:
    """Rectangle reported by ``getBoundingClientRect()`` or an intersection."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "DOMRect":
        if not isinstance(payload, Mapping):
            raise InvalidArgumentError(
                f"DOMRect payload must be a mapping, got {type(payload).__name__}"
            )
        x = _coerce_float(payload, "x", source="DOMRect")
        y = _coerce_float(payload, "y", source="DOMRect")
        width = _coerce_float(payload, "width", source="DOMRect")
        height = _coerce_float(payload, "height", source="DOMRect")
        # Older clients only sent the origin and size.
        derived = {
            "top": y,
            "left": x,
            "right": x + width,
            "bottom": y + height,
        }
        edges = {
            key: _coerce_float(payload, key, source="DOMRect") if key in payload else fallback
            for key, fallback in derived.items()
        }
        return cls(x=x, y=y, width=width, height=height, **edges)

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in _RECT_FIELDS}


@dataclass(frozen=True)
class Element:
    """A single DOM node captured by the client for one page load.

    ``xpath`` is stable across samples of the same page and is used as the key
    for every cross-sample aggregate.  The owning :class:`URLMetric` is only
    referenced weakly: samples own their elements, never the reverse.
    """

    xpath: str
    intersection_ratio: float
    intersection_rect: DOMRect
    bounding_client_rect: DOMRect
    is_lcp: bool = False
    is_lcp_candidate: bool = False
    _url_metric_ref: Optional["weakref.ReferenceType[URLMetric]"] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not isinstance(self.xpath, str) or not self.xpath:
            raise InvalidArgumentError(
                "Element xpath must be a non-empty string",
                context={"xpath": self.xpath},
            )
        if not 0.0 <= self.intersection_ratio <= 1.0:
            raise InvalidArgumentError(
                f"Intersection ratio must be between 0 and 1, got {self.intersection_ratio!r}",
                context={"xpath": self.xpath, "intersection_ratio": self.intersection_ratio},
            )

    @property
    def url_metric(self) -> Optional["URLMetric"]:
        """URL Metric this element was captured in, if still alive."""

        ref = self._url_metric_ref
        return ref() if ref is not None else None

    def bind(self, url_metric: "URLMetric") -> "Element":
        """Return a copy of the element pointing back at ``url_metric``."""

        bound = replace(self)
        object.__setattr__(bound, "_url_metric_ref", weakref.ref(url_metric))
        return bound

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Element":
        if not isinstance(payload, Mapping):
            raise InvalidArgumentError(
                f"Element payload must be a mapping, got {type(payload).__name__}"
            )
        for key in ("intersectionRect", "boundingClientRect"):
            if key not in payload:
                raise InvalidArgumentError(
                    f"Element payload is missing '{key}'", context={"field": key}
                )
        return cls(
            xpath=payload.get("xpath"),  # type: ignore[arg-type]
            intersection_ratio=_coerce_float(payload, "intersectionRatio", source="Element"),
            intersection_rect=DOMRect.from_payload(payload["intersectionRect"]),
            bounding_client_rect=DOMRect.from_payload(payload["boundingClientRect"]),
            is_lcp=bool(payload.get("isLCP", False)),
            is_lcp_candidate=bool(payload.get("isLCPCandidate", False)),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "isLCP": self.is_lcp,
            "isLCPCandidate": self.is_lcp_candidate,
            "xpath": self.xpath,
            "intersectionRatio": self.intersection_ratio,
            "intersectionRect": self.intersection_rect.as_dict(),
            "boundingClientRect": self.bounding_client_rect.as_dict(),
        }
