"""Exporters turning URL Metric collections into tabular files."""

from urlmetrics.exporters.tabular import (
    COLUMNS,
    EXPORT_FORMATS,
    export_url_metrics,
    url_metrics_frame,
)

__all__ = ["COLUMNS", "EXPORT_FORMATS", "export_url_metrics", "url_metrics_frame"]
