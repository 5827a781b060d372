"""Shared builders for URL Metric test fixtures."""

from tests.helpers.url_metrics import (
    NOW,
    build_element,
    build_payload,
    build_url_metric,
    fixed_clock,
)

__all__ = [
    "NOW",
    "build_element",
    "build_payload",
    "build_url_metric",
    "fixed_clock",
]
