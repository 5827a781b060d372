"""Sample age statistics for each breakpoint group."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, List, Optional

import numpy as np

from urlmetrics_core import URLMetricGroup, URLMetricGroupCollection

__all__ = ["FreshnessReport", "freshness_report", "group_freshness"]


@dataclass(frozen=True, slots=True)
class FreshnessReport:
    """How many samples in a group are still within the freshness TTL."""

    minimum_viewport_width: int
    maximum_viewport_width: int
    count: int
    fresh_count: int
    stale_count: int
    oldest_age: Optional[float]
    newest_age: Optional[float]
    mean_age: Optional[float]

    def as_dict(self) -> dict[str, Any]:
        return {
            "minimum_viewport_width": self.minimum_viewport_width,
            "maximum_viewport_width": self.maximum_viewport_width,
            "count": self.count,
            "fresh_count": self.fresh_count,
            "stale_count": self.stale_count,
            "oldest_age": self.oldest_age,
            "newest_age": self.newest_age,
            "mean_age": self.mean_age,
        }


def group_freshness(group: URLMetricGroup, now: float) -> FreshnessReport:
    timestamps = np.fromiter(
        (url_metric.timestamp for url_metric in group), dtype=float, count=len(group)
    )
    if timestamps.size == 0:
        return FreshnessReport(
            minimum_viewport_width=group.minimum_viewport_width,
            maximum_viewport_width=group.maximum_viewport_width,
            count=0,
            fresh_count=0,
            stale_count=0,
            oldest_age=None,
            newest_age=None,
            mean_age=None,
        )
    ages = now - timestamps
    stale = int(np.count_nonzero(ages > group.freshness_ttl))
    return FreshnessReport(
        minimum_viewport_width=group.minimum_viewport_width,
        maximum_viewport_width=group.maximum_viewport_width,
        count=int(timestamps.size),
        fresh_count=int(timestamps.size) - stale,
        stale_count=stale,
        oldest_age=float(np.max(ages)),
        newest_age=float(np.min(ages)),
        mean_age=float(np.mean(ages)),
    )


def freshness_report(
    collection: URLMetricGroupCollection, *, now: float | None = None
) -> List[FreshnessReport]:
    """Return one :class:`FreshnessReport` per group in ascending width order."""

    reference = time.time() if now is None else float(now)
    return [group_freshness(group, reference) for group in collection]
