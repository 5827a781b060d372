"""Viewport-width bucketing and analytics for real-user URL Metrics.

The core groups URL Metric samples into breakpoint groups, keeps a bounded
window of recent samples per group and derives cross-group facts such as the
common LCP element.  It performs no I/O; see :mod:`urlmetrics` for
configuration, persistence and command line helpers.
"""

from urlmetrics_core.collection import URLMetricGroupCollection
from urlmetrics_core.elements import DOMRect, Element
from urlmetrics_core.errors import InvalidArgumentError
from urlmetrics_core.events import EventDispatcher, URLMetricStored
from urlmetrics_core.group import URLMetricGroup
from urlmetrics_core.runtime.shared import MAX_VIEWPORT_WIDTH, ResultCache
from urlmetrics_core.url_metric import URLMetric, Viewport
from urlmetrics_core.visitors import TagVisitor, TagVisitorContext, TagVisitorRegistry

__all__ = [
    "DOMRect",
    "Element",
    "EventDispatcher",
    "InvalidArgumentError",
    "MAX_VIEWPORT_WIDTH",
    "ResultCache",
    "TagVisitor",
    "TagVisitorContext",
    "TagVisitorRegistry",
    "URLMetric",
    "URLMetricGroup",
    "URLMetricGroupCollection",
    "URLMetricStored",
    "Viewport",
]
