"""URL Metric samples captured from real page loads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from urlmetrics_core.elements import Element, _coerce_float
from urlmetrics_core.errors import InvalidArgumentError

__all__ = ["URLMetric", "Viewport"]


@dataclass(frozen=True)
class Viewport:
    """Inner dimensions of the window that captured a URL Metric."""

    width: int
    height: int

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidArgumentError(
                    f"Viewport {name} must be a non-negative integer, got {value!r}",
                    context={"field": name, "value": value},
                )

    def as_dict(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class URLMetric:
    """One real-user observation of a page load.

    Instances are immutable.  The elements passed in are re-bound on
    construction so :attr:`Element.url_metric` resolves to this sample.
    """

    uuid: str
    url: str
    timestamp: float
    viewport: Viewport
    elements: Sequence[Element] = ()

    def __post_init__(self) -> None:
        bound = tuple(element.bind(self) for element in self.elements)
        object.__setattr__(self, "elements", bound)

    @property
    def viewport_width(self) -> int:
        return self.viewport.width

    @property
    def lcp_element(self) -> Optional[Element]:
        """First element flagged as the LCP element, if any."""

        for element in self.elements:
            if element.is_lcp:
                return element
        return None

    def age(self, now: float) -> float:
        """Seconds elapsed between capture and ``now``."""

        return now - self.timestamp

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "URLMetric":
        """Build a URL Metric from its stored or client-submitted shape."""

        if not isinstance(payload, Mapping):
            raise InvalidArgumentError(
                f"URL Metric payload must be a mapping, got {type(payload).__name__}"
            )
        viewport = payload.get("viewport")
        if not isinstance(viewport, Mapping):
            raise InvalidArgumentError(
                "URL Metric payload requires a 'viewport' mapping",
                context={"uuid": payload.get("uuid")},
            )
        elements = payload.get("elements", ())
        if not isinstance(elements, Sequence) or isinstance(elements, (str, bytes)):
            raise InvalidArgumentError(
                "URL Metric 'elements' must be a list",
                context={"uuid": payload.get("uuid")},
            )
        return cls(
            uuid=str(payload.get("uuid", "")),
            url=str(payload.get("url", "")),
            timestamp=_coerce_float(payload, "timestamp", source="URL Metric"),
            viewport=Viewport(
                width=viewport.get("width"),  # type: ignore[arg-type]
                height=viewport.get("height"),  # type: ignore[arg-type]
            ),
            elements=tuple(Element.from_payload(item) for item in elements),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "uuid": self.uuid,
            "url": self.url,
            "timestamp": self.timestamp,
            "viewport": self.viewport.as_dict(),
            "elements": [element.as_dict() for element in self.elements],
        }
