"""Reading and writing stored URL Metrics."""

from urlmetrics.ingestion.store import (
    iter_url_metrics,
    read_url_metrics,
    write_collection,
    write_url_metrics,
)

__all__ = [
    "iter_url_metrics",
    "read_url_metrics",
    "write_collection",
    "write_url_metrics",
]
