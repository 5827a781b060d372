"""Command handlers for the urlmetrics CLI."""

from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path
from typing import Any, Mapping

from ..analysis.freshness import freshness_report
from ..exporters.tabular import export_url_metrics
from .errors import CliError
from .io import load_collection

logger = logging.getLogger(__name__)


def _render(payload: Any) -> str:
    return json.dumps(payload, indent=2, sort_keys=True)


def _handle_summarize(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    collection = load_collection(namespace, config)
    payload: dict[str, Any] = collection.as_dict()
    if namespace.verbose:
        now = namespace.now if namespace.now is not None else time.time()
        payload["freshness"] = [
            report.as_dict() for report in freshness_report(collection, now=now)
        ]
        logger.debug(
            "URL Metric group collection",
            extra={"event": "collection.summary", "context": payload},
        )
    return _render(payload)


def _handle_lcp(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    collection = load_collection(namespace, config)
    common = collection.get_common_lcp_element()
    groups = []
    for group in collection:
        lcp_element = group.get_lcp_element()
        groups.append(
            {
                "minimum_viewport_width": group.minimum_viewport_width,
                "maximum_viewport_width": group.maximum_viewport_width,
                "lcp_xpath": lcp_element.xpath if lcp_element is not None else None,
            }
        )
    return _render(
        {
            "common_lcp_xpath": common.xpath if common is not None else None,
            "groups": groups,
        }
    )


def _handle_export(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    collection = load_collection(namespace, config)
    destination = Path(namespace.output)
    try:
        export_url_metrics(collection, destination, namespace.format)
    except (ImportError, ValueError) as exc:
        raise CliError(
            f"Unable to export URL Metrics as {namespace.format}: {exc}",
            category="usage",
            context={"format": namespace.format, "destination": str(destination)},
        ) from exc
    except OSError as exc:
        raise CliError(
            f"Unable to write '{destination}': {exc}",
            category="io",
            context={"destination": str(destination)},
        ) from exc
    logger.info(
        "Exported URL Metrics",
        extra={
            "event": "cli.export",
            "context": {"destination": str(destination), "format": namespace.format},
        },
    )
    return f"Exported {len(collection.get_flattened_url_metrics())} URL Metrics to {destination}"
