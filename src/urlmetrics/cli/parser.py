"""Argument parsing helpers for the urlmetrics CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from ..exporters.tabular import EXPORT_FORMATS
from .workflows import _handle_export, _handle_lcp, _handle_summarize


def _add_collection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "samples",
        type=Path,
        help="JSON, JSONL or gzip file with stored URL Metrics.",
    )
    parser.add_argument(
        "--breakpoints",
        nargs="*",
        type=int,
        default=None,
        help="Breakpoint max widths overriding collection.breakpoints.",
    )
    parser.add_argument(
        "--sample-size",
        dest="sample_size",
        type=int,
        default=None,
        help="URL Metrics kept per group (overrides collection.sample_size).",
    )
    parser.add_argument(
        "--freshness-ttl",
        dest="freshness_ttl",
        type=float,
        default=None,
        help="Seconds before a URL Metric is stale (overrides collection.freshness_ttl).",
    )
    parser.add_argument(
        "--now",
        type=float,
        default=None,
        help="Unix timestamp used as the current time for staleness checks.",
    )


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="urlmetrics",
        description="Aggregate real-user URL Metrics into viewport breakpoint groups.",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml holding [tool.urlmetrics].",
    )
    parser.add_argument("--log-level", dest="log_level", default=None)
    parser.add_argument("--log-output", dest="log_output", default=None)
    parser.add_argument("--log-format", dest="log_format", choices=("json", "text"), default=None)

    subparsers = parser.add_subparsers(dest="command", required=True)

    summarize = subparsers.add_parser(
        "summarize", help="Print the serialised breakpoint group collection."
    )
    _add_collection_arguments(summarize)
    summarize.add_argument(
        "--verbose",
        action="store_true",
        help="Append per-group freshness statistics and log the record at debug level.",
    )
    summarize.set_defaults(handler=_handle_summarize)

    lcp = subparsers.add_parser("lcp", help="Report the LCP element per group and overall.")
    _add_collection_arguments(lcp)
    lcp.set_defaults(handler=_handle_lcp)

    export = subparsers.add_parser("export", help="Write one row per captured element.")
    _add_collection_arguments(export)
    export.add_argument("--output", type=Path, required=True, help="Destination file.")
    export.add_argument(
        "--format",
        choices=EXPORT_FORMATS,
        default="csv",
        help="Tabular format (default: csv).",
    )
    export.set_defaults(handler=_handle_export)

    return parser
