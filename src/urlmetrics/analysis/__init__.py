"""Diagnostics derived from URL Metric collections."""

from urlmetrics.analysis.freshness import FreshnessReport, freshness_report, group_freshness

__all__ = ["FreshnessReport", "freshness_report", "group_freshness"]
