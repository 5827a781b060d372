"""Bounded sample window for one viewport-width range."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from urlmetrics_core.elements import Element
from urlmetrics_core.errors import InvalidArgumentError
from urlmetrics_core.runtime.shared import MAX_VIEWPORT_WIDTH
from urlmetrics_core.url_metric import URLMetric

__all__ = ["URLMetricGroup"]


logger = logging.getLogger(__name__)


class URLMetricGroup:
    """URL Metrics captured for viewports within ``[minimum, maximum]`` widths.

    The group keeps at most ``sample_size`` samples.  When a new sample pushes
    the window over capacity the oldest inserted samples are dropped first.

    ``on_change`` is called after every insertion; the owning collection uses
    it to clear results derived from the previous samples.  ``clock`` supplies
    the current time for staleness checks.
    """

    def __init__(
        self,
        url_metrics: Iterable[URLMetric],
        minimum_viewport_width: int,
        maximum_viewport_width: int,
        sample_size: int,
        freshness_ttl: float,
        *,
        on_change: Optional[Callable[[], None]] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        if minimum_viewport_width < 0:
            raise InvalidArgumentError(
                "The minimum viewport width must be at least zero.",
                context={"minimum_viewport_width": minimum_viewport_width},
            )
        if maximum_viewport_width < 1 or maximum_viewport_width > MAX_VIEWPORT_WIDTH:
            raise InvalidArgumentError(
                "The maximum viewport width must be between 1 and the maximum width.",
                context={"maximum_viewport_width": maximum_viewport_width},
            )
        if minimum_viewport_width > maximum_viewport_width:
            raise InvalidArgumentError(
                "The minimum viewport width must not exceed the maximum viewport width.",
                context={
                    "minimum_viewport_width": minimum_viewport_width,
                    "maximum_viewport_width": maximum_viewport_width,
                },
            )
        if sample_size <= 0:
            raise InvalidArgumentError(
                f"Sample size must be greater than zero, but provided: {sample_size}",
                context={"sample_size": sample_size},
            )
        if (
            isinstance(freshness_ttl, bool)
            or not isinstance(freshness_ttl, (int, float))
            or freshness_ttl < 0
        ):
            raise InvalidArgumentError(
                f"Freshness TTL must be a number of at least zero, but provided: {freshness_ttl!r}",
                context={"freshness_ttl": freshness_ttl},
            )

        self._minimum_viewport_width = int(minimum_viewport_width)
        self._maximum_viewport_width = int(maximum_viewport_width)
        self._sample_size = int(sample_size)
        self._freshness_ttl = freshness_ttl
        self._on_change = on_change
        self._clock = clock or time.time
        self._url_metrics: List[URLMetric] = []

        for url_metric in url_metrics:
            self.add_url_metric(url_metric)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(minimum_viewport_width={self._minimum_viewport_width}, "
            f"maximum_viewport_width={self._maximum_viewport_width}, "
            f"url_metrics={len(self._url_metrics)}/{self._sample_size})"
        )

    def __len__(self) -> int:
        return len(self._url_metrics)

    def __iter__(self) -> Iterator[URLMetric]:
        return iter(tuple(self._url_metrics))

    @property
    def minimum_viewport_width(self) -> int:
        return self._minimum_viewport_width

    @property
    def maximum_viewport_width(self) -> int:
        return self._maximum_viewport_width

    @property
    def sample_size(self) -> int:
        return self._sample_size

    @property
    def freshness_ttl(self) -> float:
        return self._freshness_ttl

    @property
    def url_metrics(self) -> tuple[URLMetric, ...]:
        return tuple(self._url_metrics)

    def is_viewport_width_in_range(self, viewport_width: int) -> bool:
        return self._minimum_viewport_width <= viewport_width <= self._maximum_viewport_width

    def add_url_metric(self, url_metric: URLMetric) -> None:
        """Append ``url_metric``, evicting the oldest samples beyond capacity."""

        if not self.is_viewport_width_in_range(url_metric.viewport_width):
            raise InvalidArgumentError(
                "URL Metric is not in the viewport range for group.",
                context={
                    "viewport_width": url_metric.viewport_width,
                    "minimum_viewport_width": self._minimum_viewport_width,
                    "maximum_viewport_width": self._maximum_viewport_width,
                },
            )

        self._url_metrics.append(url_metric)
        overflow = len(self._url_metrics) - self._sample_size
        if overflow > 0:
            evicted = self._url_metrics[:overflow]
            del self._url_metrics[:overflow]
            logger.debug(
                "Evicted %d URL Metric(s) from group %d-%d",
                len(evicted),
                self._minimum_viewport_width,
                self._maximum_viewport_width,
                extra={
                    "event": "group.evict",
                    "context": {"uuids": [item.uuid for item in evicted]},
                },
            )

        if self._on_change is not None:
            self._on_change()

    def is_complete(self) -> bool:
        """Whether the window is full and none of its samples have gone stale.

        A sample whose age equals the freshness TTL still counts as fresh.
        """

        if len(self._url_metrics) < self._sample_size:
            return False
        now = self._clock()
        for url_metric in self._url_metrics:
            if url_metric.age(now) > self._freshness_ttl:
                return False
        return True

    def get_lcp_element(self) -> Optional[Element]:
        """Return the LCP element every reporting sample agrees on.

        Samples that did not identify an LCP element are ignored.  A single
        disagreement on the xpath, or no reporting sample at all, yields
        ``None``.
        """

        consensus: Optional[Element] = None
        for url_metric in self._url_metrics:
            lcp_element = url_metric.lcp_element
            if lcp_element is None:
                continue
            if consensus is None:
                consensus = lcp_element
            elif consensus.xpath != lcp_element.xpath:
                return None
        return consensus

    def get_xpath_elements_map(self) -> Dict[str, List[Element]]:
        elements_by_xpath: Dict[str, List[Element]] = {}
        for url_metric in self._url_metrics:
            for element in url_metric.elements:
                elements_by_xpath.setdefault(element.xpath, []).append(element)
        return elements_by_xpath

    def get_all_element_max_intersection_ratios(self) -> Dict[str, float]:
        ratios: Dict[str, float] = {}
        for xpath, elements in self.get_xpath_elements_map().items():
            ratios[xpath] = max(element.intersection_ratio for element in elements)
        return ratios

    def as_dict(self) -> dict[str, Any]:
        lcp_element = self.get_lcp_element()
        return {
            "freshness_ttl": self._freshness_ttl,
            "sample_size": self._sample_size,
            "minimum_viewport_width": self._minimum_viewport_width,
            "maximum_viewport_width": self._maximum_viewport_width,
            "lcp_element": lcp_element.as_dict() if lcp_element is not None else None,
            "complete": self.is_complete(),
            "url_metrics": [url_metric.as_dict() for url_metric in self._url_metrics],
        }
