"""Configuration and sample loading helpers for the urlmetrics CLI."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from urlmetrics_core import InvalidArgumentError, URLMetric, URLMetricGroupCollection

from ..configuration import iter_unique_paths, load_project_config, pyproject_candidate
from ..ingestion.store import read_url_metrics
from ..settings import CollectionSettings
from .errors import CliError

CONFIG_ENV_VAR = "URLMETRICS_CONFIG"


def _normalise_cli_config(payload: Mapping[str, Any], source: Path) -> Dict[str, Any]:
    data = {str(key): value for key, value in payload.items()}
    data["_config_path"] = str(source.expanduser().resolve())
    return data


def load_cli_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load CLI defaults from ``pyproject.toml`` files.

    Explicit paths win over ``URLMETRICS_CONFIG``, which wins over the
    ``pyproject.toml`` in the working directory.
    """

    env_config = os.environ.get(CONFIG_ENV_VAR)
    env_path = Path(env_config) if env_config else None

    bases = [base for base in (path, env_path, Path.cwd()) if base is not None]
    candidates = [pyproject_candidate(base) for base in bases]
    for candidate in iter_unique_paths(item for item in candidates if item is not None):
        loaded = load_project_config(candidate)
        if loaded is not None:
            payload, resolved = loaded
            return _normalise_cli_config(payload, resolved)

    return {"_config_path": None}


def resolve_settings(namespace: argparse.Namespace, config: Mapping[str, Any]) -> CollectionSettings:
    """Combine ``[collection]`` settings with command line overrides."""

    return CollectionSettings.from_config(config).with_overrides(
        breakpoints=getattr(namespace, "breakpoints", None),
        sample_size=getattr(namespace, "sample_size", None),
        freshness_ttl=getattr(namespace, "freshness_ttl", None),
    )


def load_url_metrics(path: Path) -> List[URLMetric]:
    try:
        return read_url_metrics(path)
    except FileNotFoundError as exc:
        raise CliError(
            f"URL Metrics file '{path}' does not exist.",
            category="io",
            context={"path": str(path)},
        ) from exc
    except (ValueError, InvalidArgumentError) as exc:
        raise CliError(
            f"Unable to read URL Metrics from '{path}': {exc}",
            category="io",
            context={"path": str(path)},
        ) from exc


def load_collection(
    namespace: argparse.Namespace, config: Mapping[str, Any]
) -> URLMetricGroupCollection:
    """Build the collection described by the parsed arguments."""

    settings = resolve_settings(namespace, config)
    url_metrics = load_url_metrics(Path(namespace.samples))
    now = getattr(namespace, "now", None)
    clock = (lambda: float(now)) if now is not None else None
    try:
        return settings.build_collection(url_metrics, clock=clock)
    except InvalidArgumentError as exc:
        raise CliError(
            str(exc),
            category="usage",
            context=exc.context,
        ) from exc
