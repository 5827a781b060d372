"""Reusable factories for constructing URL Metric fixtures in tests."""

from __future__ import annotations

import uuid
from typing import Any, Callable, Iterable

from urlmetrics_core import DOMRect, Element, URLMetric, Viewport

NOW = 1_700_000_000.0


def fixed_clock(now: float = NOW) -> Callable[[], float]:
    return lambda: now


def build_element(
    xpath: str = "/HTML/BODY/DIV/IMG",
    *,
    intersection_ratio: float = 1.0,
    top: float = 0.0,
    height: float = 100.0,
    is_lcp: bool = False,
    is_lcp_candidate: bool | None = None,
) -> Element:
    rect = DOMRect(
        x=0.0,
        y=top,
        width=100.0,
        height=height,
        top=top,
        right=100.0,
        bottom=top + height,
        left=0.0,
    )
    return Element(
        xpath=xpath,
        intersection_ratio=intersection_ratio,
        intersection_rect=rect,
        bounding_client_rect=rect,
        is_lcp=is_lcp,
        is_lcp_candidate=is_lcp if is_lcp_candidate is None else is_lcp_candidate,
    )


def build_url_metric(
    viewport_width: int = 400,
    *,
    viewport_height: int = 800,
    timestamp: float = NOW,
    elements: Iterable[Element] = (),
    url: str = "https://example.com/",
    identifier: str | None = None,
) -> URLMetric:
    return URLMetric(
        uuid=identifier or str(uuid.uuid4()),
        url=url,
        timestamp=timestamp,
        viewport=Viewport(width=viewport_width, height=viewport_height),
        elements=tuple(elements),
    )


def build_payload(
    viewport_width: int = 400,
    *,
    viewport_height: int = 800,
    timestamp: float = NOW,
    lcp_xpath: str | None = "/HTML/BODY/DIV/IMG",
) -> dict[str, Any]:
    """Return a URL Metric in the shape clients submit it."""

    rect = {"x": 0, "y": 10, "width": 300, "height": 200}
    elements = []
    if lcp_xpath is not None:
        elements.append(
            {
                "isLCP": True,
                "isLCPCandidate": True,
                "xpath": lcp_xpath,
                "intersectionRatio": 1,
                "intersectionRect": dict(rect),
                "boundingClientRect": dict(rect),
            }
        )
    elements.append(
        {
            "isLCP": False,
            "isLCPCandidate": False,
            "xpath": "/HTML/BODY/FOOTER/IMG",
            "intersectionRatio": 0,
            "intersectionRect": {"x": 0, "y": 0, "width": 0, "height": 0},
            "boundingClientRect": {"x": 0, "y": 2000, "width": 300, "height": 100},
        }
    )
    return {
        "uuid": str(uuid.uuid4()),
        "url": "https://example.com/",
        "timestamp": timestamp,
        "viewport": {"width": viewport_width, "height": viewport_height},
        "elements": elements,
    }
