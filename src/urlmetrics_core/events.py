"""Notifications emitted when a collection accepts a new URL Metric."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterator, List

from urlmetrics_core.url_metric import URLMetric

if TYPE_CHECKING:  # pragma: no cover - import for type-checkers only
    from urlmetrics_core.collection import URLMetricGroupCollection
    from urlmetrics_core.group import URLMetricGroup

__all__ = ["EventDispatcher", "URLMetricListener", "URLMetricStored"]


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class URLMetricStored:
    """A URL Metric landed in ``group`` of ``collection``."""

    url_metric: URLMetric
    group: "URLMetricGroup"
    collection: "URLMetricGroupCollection"


URLMetricListener = Callable[[URLMetricStored], None]


class EventDispatcher:
    """Ordered set of listeners notified synchronously on :meth:`emit`.

    Listener exceptions are not caught; they propagate to the code that
    inserted the sample.
    """

    __slots__ = ("_listeners",)

    def __init__(self) -> None:
        self._listeners: List[URLMetricListener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def __iter__(self) -> Iterator[URLMetricListener]:
        return iter(tuple(self._listeners))

    def subscribe(self, listener: URLMetricListener) -> None:
        if not callable(listener):
            raise TypeError("listener must be callable")
        if listener in self._listeners:
            return
        self._listeners.append(listener)

    def unsubscribe(self, listener: URLMetricListener) -> bool:
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    def emit(self, event: URLMetricStored) -> None:
        if not self._listeners:
            return
        logger.debug(
            "Dispatching URL Metric %s to %d listener(s)",
            event.url_metric.uuid,
            len(self._listeners),
            extra={"event": "url_metric.stored"},
        )
        for listener in tuple(self._listeners):
            listener(event)
