"""Logging utilities for urlmetrics."""

from urlmetrics.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
