"""Toolkit around the URL Metric aggregation core.

:mod:`urlmetrics_core` groups samples into viewport breakpoint groups.  This
package adds what a deployment needs around it: settings loaded from
``pyproject.toml`` or YAML, logging setup, sample storage helpers, freshness
diagnostics, tabular export and the ``urlmetrics`` command line tool.
"""

from ._version import __version__
from .analysis.freshness import FreshnessReport, freshness_report
from .configuration import load_project_config, load_settings_file
from .exporters.tabular import export_url_metrics, url_metrics_frame
from .ingestion.store import (
    iter_url_metrics,
    read_url_metrics,
    write_collection,
    write_url_metrics,
)
from .settings import CollectionSettings

__all__ = [
    "CollectionSettings",
    "FreshnessReport",
    "export_url_metrics",
    "freshness_report",
    "iter_url_metrics",
    "load_project_config",
    "load_settings_file",
    "read_url_metrics",
    "url_metrics_frame",
    "write_collection",
    "write_url_metrics",
    "__version__",
]
