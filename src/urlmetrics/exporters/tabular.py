"""Flatten URL Metrics into one row per captured element."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from urlmetrics_core import URLMetricGroupCollection

__all__ = ["COLUMNS", "EXPORT_FORMATS", "export_url_metrics", "url_metrics_frame"]


EXPORT_FORMATS = ("csv", "parquet")

COLUMNS = (
    "minimum_viewport_width",
    "maximum_viewport_width",
    "uuid",
    "url",
    "timestamp",
    "viewport_width",
    "viewport_height",
    "xpath",
    "is_lcp",
    "is_lcp_candidate",
    "intersection_ratio",
    "bounding_client_rect_top",
)


def url_metrics_frame(collection: URLMetricGroupCollection) -> pd.DataFrame:
    """Return a :class:`pandas.DataFrame` with one row per sample element.

    Samples without elements still produce one row with empty element columns.
    """

    rows: List[Dict[str, Any]] = []
    for group in collection:
        for url_metric in group:
            base = {
                "minimum_viewport_width": group.minimum_viewport_width,
                "maximum_viewport_width": group.maximum_viewport_width,
                "uuid": url_metric.uuid,
                "url": url_metric.url,
                "timestamp": url_metric.timestamp,
                "viewport_width": url_metric.viewport.width,
                "viewport_height": url_metric.viewport.height,
            }
            if not url_metric.elements:
                rows.append(
                    dict(
                        base,
                        xpath=None,
                        is_lcp=None,
                        is_lcp_candidate=None,
                        intersection_ratio=None,
                        bounding_client_rect_top=None,
                    )
                )
                continue
            for element in url_metric.elements:
                rows.append(
                    dict(
                        base,
                        xpath=element.xpath,
                        is_lcp=element.is_lcp,
                        is_lcp_candidate=element.is_lcp_candidate,
                        intersection_ratio=element.intersection_ratio,
                        bounding_client_rect_top=element.bounding_client_rect.top,
                    )
                )
    return pd.DataFrame(rows, columns=list(COLUMNS))


def export_url_metrics(
    collection: URLMetricGroupCollection, path: str | Path, fmt: str = "csv"
) -> Path:
    """Write :func:`url_metrics_frame` to ``path`` as CSV or Parquet.

    Parquet output needs a pandas engine such as ``pyarrow``.
    """

    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format '{fmt}'.")
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    frame = url_metrics_frame(collection)
    if fmt == "csv":
        frame.to_csv(destination, index=False)
    else:
        frame.to_parquet(destination, index=False)
    return destination
