"""Partition of URL Metrics into viewport-width groups.

The collection owns one :class:`URLMetricGroup` per breakpoint plus a final
group reaching up to :data:`MAX_VIEWPORT_WIDTH`.  Cross-group queries are
memoised in a :class:`ResultCache` which is cleared whenever a group accepts a
new sample, or on demand via :meth:`URLMetricGroupCollection.clear_cache`.
"""

from __future__ import annotations

import logging
import weakref
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from urlmetrics_core.elements import Element
from urlmetrics_core.errors import InvalidArgumentError
from urlmetrics_core.events import EventDispatcher, URLMetricListener, URLMetricStored
from urlmetrics_core.group import URLMetricGroup
from urlmetrics_core.runtime.shared import MAX_VIEWPORT_WIDTH, ResultCache
from urlmetrics_core.url_metric import URLMetric

__all__ = ["URLMetricGroupCollection"]


logger = logging.getLogger(__name__)


def _normalise_breakpoints(breakpoints: Iterable[int]) -> tuple[int, ...]:
    candidates = list(breakpoints)
    for breakpoint in candidates:
        if (
            isinstance(breakpoint, bool)
            or not isinstance(breakpoint, int)
            or breakpoint < 1
            or breakpoint >= MAX_VIEWPORT_WIDTH
        ):
            raise InvalidArgumentError(
                "Each of the breakpoints must be greater than zero and less than "
                f"the maximum viewport width, but encountered: {breakpoint!r}",
                context={"breakpoint": breakpoint},
            )
    return tuple(sorted(set(candidates)))


class URLMetricGroupCollection:
    """URL Metric groups covering every viewport width from zero upwards.

    With ``n`` breakpoints there are ``n + 1`` groups; with none, a single
    group receives every sample.
    """

    def __init__(
        self,
        url_metrics: Iterable[URLMetric],
        breakpoints: Iterable[int],
        sample_size: int,
        freshness_ttl: float,
        *,
        clock: Optional[Callable[[], float]] = None,
        listeners: Iterable[URLMetricListener] = (),
    ) -> None:
        self._breakpoints = _normalise_breakpoints(breakpoints)

        if isinstance(sample_size, bool) or not isinstance(sample_size, int) or sample_size <= 0:
            raise InvalidArgumentError(
                f"Sample size must be greater than zero, but provided: {sample_size!r}",
                context={"sample_size": sample_size},
            )
        self._sample_size = sample_size

        if (
            isinstance(freshness_ttl, bool)
            or not isinstance(freshness_ttl, (int, float))
            or freshness_ttl < 0
        ):
            raise InvalidArgumentError(
                f"Freshness TTL must be a number of at least zero, but provided: {freshness_ttl!r}",
                context={"freshness_ttl": freshness_ttl},
            )
        self._freshness_ttl = freshness_ttl

        self._clock = clock
        self._cache = ResultCache()
        self._events = EventDispatcher()
        for listener in listeners:
            self._events.subscribe(listener)

        self._groups = self._create_groups()
        for url_metric in url_metrics:
            self._route(url_metric)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(breakpoints={list(self._breakpoints)}, "
            f"sample_size={self._sample_size}, freshness_ttl={self._freshness_ttl})"
        )

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[URLMetricGroup]:
        return iter(self._groups)

    @property
    def breakpoints(self) -> tuple[int, ...]:
        return self._breakpoints

    @property
    def sample_size(self) -> int:
        return self._sample_size

    @property
    def freshness_ttl(self) -> float:
        return self._freshness_ttl

    # ------------------------------------------------------------------
    # Construction and mutation
    # ------------------------------------------------------------------
    def _create_groups(self) -> tuple[URLMetricGroup, ...]:
        groups: List[URLMetricGroup] = []
        minimum_width = 0
        for maximum_width in self._breakpoints:
            groups.append(self._new_group(minimum_width, maximum_width))
            minimum_width = maximum_width + 1
        groups.append(self._new_group(minimum_width, MAX_VIEWPORT_WIDTH))
        return tuple(groups)

    def _new_group(self, minimum_width: int, maximum_width: int) -> URLMetricGroup:
        return URLMetricGroup(
            (),
            minimum_width,
            maximum_width,
            self._sample_size,
            self._freshness_ttl,
            on_change=self._invalidation_handle(),
            clock=self._clock,
        )

    def _invalidation_handle(self) -> Callable[[], None]:
        # Groups only hold a weak reference so they never keep the collection alive.
        return _CacheInvalidator(weakref.ref(self))

    def _route(self, url_metric: URLMetric) -> URLMetricGroup:
        for group in self._groups:
            if group.is_viewport_width_in_range(url_metric.viewport_width):
                group.add_url_metric(url_metric)
                return group
        raise InvalidArgumentError(
            "No group available to add URL Metric to.",
            context={"viewport_width": url_metric.viewport_width, "uuid": url_metric.uuid},
        )

    def add_url_metric(self, url_metric: URLMetric) -> URLMetricGroup:
        """Insert ``url_metric`` into its group and notify subscribers.

        Returns the group that received the sample.
        """

        group = self._route(url_metric)
        logger.debug(
            "Stored URL Metric %s (viewport width %d) in group %d-%d",
            url_metric.uuid,
            url_metric.viewport_width,
            group.minimum_viewport_width,
            group.maximum_viewport_width,
            extra={"event": "collection.add"},
        )
        self._events.emit(URLMetricStored(url_metric=url_metric, group=group, collection=self))
        return group

    def subscribe(self, listener: URLMetricListener) -> None:
        self._events.subscribe(listener)

    def unsubscribe(self, listener: URLMetricListener) -> bool:
        return self._events.unsubscribe(listener)

    def clear_cache(self) -> None:
        self._cache.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_first_group(self) -> URLMetricGroup:
        """Group starting at width zero, typically mobile viewports."""

        return self._groups[0]

    def get_last_group(self) -> URLMetricGroup:
        """Unbounded group after the largest breakpoint, typically desktop."""

        return self._groups[-1]

    def get_group_for_viewport_width(self, viewport_width: int) -> URLMetricGroup:
        return self._cache.get_or_create(
            "get_group_for_viewport_width",
            self._find_group,
            viewport_width,
        )

    def _find_group(self, viewport_width: int) -> URLMetricGroup:
        for group in self._groups:
            if group.is_viewport_width_in_range(viewport_width):
                return group
        raise InvalidArgumentError(
            f"No URL Metric group found for viewport width: {viewport_width!r}",
            context={"viewport_width": viewport_width},
        )

    def is_any_group_populated(self) -> bool:
        return self._cache.get_or_create(
            "is_any_group_populated",
            self._compute_any_group_populated,
        )

    def is_every_group_populated(self) -> bool:
        """Whether each group holds at least one URL Metric.

        The groups need not be full, and their samples may be stale; see
        :meth:`is_every_group_complete` for the stricter check.
        """

        return self._cache.get_or_create(
            "is_every_group_populated",
            self._compute_every_group_populated,
        )

    def is_every_group_complete(self) -> bool:
        return self._cache.get_or_create(
            "is_every_group_complete",
            self._compute_every_group_complete,
        )

    def _compute_any_group_populated(self) -> bool:
        for group in self._groups:
            if len(group) != 0:
                return True
        return False

    def _compute_every_group_populated(self) -> bool:
        for group in self._groups:
            if len(group) == 0:
                return False
        return True

    def _compute_every_group_complete(self) -> bool:
        for group in self._groups:
            if not group.is_complete():
                return False
        return True

    def get_groups_by_lcp_element(self, xpath: str) -> List[URLMetricGroup]:
        return self._cache.get_or_create(
            "get_groups_by_lcp_element",
            self._compute_groups_by_lcp_element,
            xpath,
        )

    def _compute_groups_by_lcp_element(self, xpath: str) -> List[URLMetricGroup]:
        groups: List[URLMetricGroup] = []
        for group in self._groups:
            lcp_element = group.get_lcp_element()
            if lcp_element is not None and lcp_element.xpath == xpath:
                groups.append(group)
        return groups

    def get_common_lcp_element(self) -> Optional[Element]:
        """LCP element shared by every group, when all of them agree."""

        return self._cache.get_or_create(
            "get_common_lcp_element", self._compute_common_lcp_element
        )

    def _compute_common_lcp_element(self) -> Optional[Element]:
        # Without samples in every group there is no telling what an empty
        # group's LCP element would be.
        if not self.is_every_group_populated():
            return None

        common: Optional[Element] = None
        for group in self._groups:
            lcp_element = group.get_lcp_element()
            if lcp_element is None:
                return None
            if common is None:
                common = lcp_element
            elif common.xpath != lcp_element.xpath:
                return None
        return common

    def get_xpath_elements_map(self) -> Dict[str, List[Element]]:
        """Every captured element across all groups keyed by xpath.

        Cost grows with groups × samples × elements, which is why the result
        is always served from the cache.
        """

        return self._cache.get_or_create(
            "get_xpath_elements_map", self._compute_xpath_elements_map
        )

    def _compute_xpath_elements_map(self) -> Dict[str, List[Element]]:
        all_elements: Dict[str, List[Element]] = {}
        for group in self._groups:
            for xpath, elements in group.get_xpath_elements_map().items():
                all_elements.setdefault(xpath, []).extend(elements)
        return all_elements

    def get_all_element_max_intersection_ratios(self) -> Dict[str, float]:
        return self._cache.get_or_create(
            "get_all_element_max_intersection_ratios",
            self._compute_all_element_max_intersection_ratios,
        )

    def _compute_all_element_max_intersection_ratios(self) -> Dict[str, float]:
        ratios: Dict[str, float] = {}
        for group in self._groups:
            for xpath, ratio in group.get_all_element_max_intersection_ratios().items():
                ratios[xpath] = float(max(ratios.get(xpath, 0.0), ratio))
        return ratios

    def get_all_elements_positioned_in_any_initial_viewport(self) -> Dict[str, bool]:
        """Whether each element's top edge was inside some initial viewport.

        Being positioned in the initial viewport does not imply visibility: a
        carousel slide can have an intersection ratio of zero, and a hidden
        menu can sit above the fold.
        """

        return self._cache.get_or_create(
            "get_all_elements_positioned_in_any_initial_viewport",
            self._compute_all_elements_positioned_in_any_initial_viewport,
        )

    def _compute_all_elements_positioned_in_any_initial_viewport(self) -> Dict[str, bool]:
        positioned: Dict[str, bool] = {}
        for xpath, elements in self.get_xpath_elements_map().items():
            positioned[xpath] = any(
                _is_in_initial_viewport(element) for element in elements
            )
        return positioned

    def get_element_max_intersection_ratio(self, xpath: str) -> Optional[float]:
        """Max intersection ratio for ``xpath`` or ``None`` when never captured."""

        return self.get_all_element_max_intersection_ratios().get(xpath)

    def is_element_positioned_in_any_initial_viewport(self, xpath: str) -> Optional[bool]:
        return self.get_all_elements_positioned_in_any_initial_viewport().get(xpath)

    def get_flattened_url_metrics(self) -> List[URLMetric]:
        return [url_metric for group in self._groups for url_metric in group]

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def as_dict(self) -> dict[str, Any]:
        common_lcp_element = self.get_common_lcp_element()
        groups: List[dict[str, Any]] = []
        for group in self._groups:
            group_data = group.as_dict()
            # Collection-wide constants.
            del group_data["freshness_ttl"]
            del group_data["sample_size"]
            groups.append(group_data)
        return {
            "breakpoints": list(self._breakpoints),
            "freshness_ttl": self._freshness_ttl,
            "sample_size": self._sample_size,
            "all_element_max_intersection_ratios": dict(
                self.get_all_element_max_intersection_ratios()
            ),
            "common_lcp_element": (
                common_lcp_element.as_dict() if common_lcp_element is not None else None
            ),
            "every_group_complete": self.is_every_group_complete(),
            "every_group_populated": self.is_every_group_populated(),
            "groups": groups,
        }

    @classmethod
    def from_payload(
        cls,
        payload: Mapping[str, Any],
        *,
        clock: Optional[Callable[[], float]] = None,
    ) -> "URLMetricGroupCollection":
        """Rebuild a collection from a record produced by :meth:`as_dict`."""

        for key in ("breakpoints", "sample_size", "freshness_ttl", "groups"):
            if key not in payload:
                raise InvalidArgumentError(
                    f"Collection payload is missing '{key}'", context={"field": key}
                )
        groups: Sequence[Mapping[str, Any]] = payload["groups"]
        url_metrics = [
            URLMetric.from_payload(item)
            for group in groups
            for item in group.get("url_metrics", ())
        ]
        return cls(
            url_metrics,
            payload["breakpoints"],
            payload["sample_size"],
            payload["freshness_ttl"],
            clock=clock,
        )


class _CacheInvalidator:
    """Callable clearing the cache of a collection that may be gone."""

    __slots__ = ("_collection_ref",)

    def __init__(self, collection_ref: "weakref.ReferenceType[URLMetricGroupCollection]") -> None:
        self._collection_ref = collection_ref

    def __call__(self) -> None:
        collection = self._collection_ref()
        if collection is not None:
            collection.clear_cache()


def _is_in_initial_viewport(element: Element) -> bool:
    url_metric = element.url_metric
    # Unreachable for elements taken from a group: the group holds their sample.
    if url_metric is None:
        return False
    return element.bounding_client_rect.top < url_metric.viewport.height
