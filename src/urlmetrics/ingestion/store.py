"""Persistence helpers for URL Metric samples and collection records.

Samples are stored as newline-delimited JSON, optionally gzip-compressed.
Readers also accept a JSON array of samples or a collection record written by
:func:`write_collection`, whose samples live under ``groups[*].url_metrics``.
"""

from __future__ import annotations

import gzip
import json
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping

from urlmetrics_core import URLMetric, URLMetricGroupCollection

__all__ = [
    "iter_url_metrics",
    "read_url_metrics",
    "write_collection",
    "write_url_metrics",
]


_GZIP_SUFFIXES = {".gz", ".gzip"}
_GZIP_MAGIC = b"\x1f\x8b"


def write_url_metrics(
    url_metrics: Iterable[URLMetric],
    path: str | Path,
    *,
    compress: bool | None = None,
) -> Path:
    """Persist ``url_metrics`` to ``path`` as newline-delimited JSON.

    Parameters
    ----------
    url_metrics:
        Samples to serialise, in the order they should be replayed.
    path:
        Destination file.  Parent directories are created automatically.
    compress:
        Force gzip on or off.  By default the file is compressed when its
        suffix is ``.gz`` or ``.gzip``.
    """

    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    if compress is None:
        compress = destination.suffix in _GZIP_SUFFIXES
    opener = gzip.open if compress else open

    with opener(destination, "wt", encoding="utf8") as handle:
        for url_metric in url_metrics:
            json.dump(url_metric.as_dict(), handle, sort_keys=True)
            handle.write("\n")
    return destination


def iter_url_metrics(path: str | Path) -> Iterator[URLMetric]:
    """Yield samples previously persisted to ``path``."""

    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"URL Metrics file {source} does not exist")

    with source.open("rb") as probe:
        compressed = probe.read(2) == _GZIP_MAGIC

    if compressed:
        with gzip.open(source, "rt", encoding="utf8") as handle:
            text = handle.read()
    else:
        text = source.read_text(encoding="utf8")

    for payload in _iter_payloads(text, source=source):
        yield URLMetric.from_payload(payload)


def read_url_metrics(path: str | Path) -> List[URLMetric]:
    return list(iter_url_metrics(path))


def _iter_payloads(text: str, *, source: Path) -> Iterator[Mapping[str, Any]]:
    stripped = text.lstrip()
    if not stripped:
        return
    if stripped[0] == "[":
        document = _decode(stripped, source=source)
        yield from _as_records(document, source=source)
        return
    if stripped[0] == "{":
        try:
            document = json.loads(stripped)
        except json.JSONDecodeError:
            document = None
        if isinstance(document, Mapping) and "groups" in document:
            for group in document.get("groups") or ():
                yield from _as_records(group.get("url_metrics", ()), source=source)
            return
        if isinstance(document, Mapping):
            yield document
            return
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        record = _decode(line, source=source, line_number=line_number)
        if not isinstance(record, Mapping):
            raise ValueError(f"{source}:{line_number}: expected a JSON object")
        yield record


def _decode(text: str, *, source: Path, line_number: int | None = None) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        location = f"{source}:{line_number}" if line_number is not None else str(source)
        raise ValueError(f"{location}: invalid JSON ({exc.msg})") from exc


def _as_records(document: Any, *, source: Path) -> Iterator[Mapping[str, Any]]:
    if not isinstance(document, list):
        raise ValueError(f"{source}: expected a list of URL Metrics")
    for record in document:
        if not isinstance(record, Mapping):
            raise ValueError(f"{source}: expected each URL Metric to be a JSON object")
        yield record


def write_collection(collection: URLMetricGroupCollection, path: str | Path) -> Path:
    """Write the serialised ``collection`` record as indented JSON."""

    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    with destination.open("w", encoding="utf8") as handle:
        json.dump(collection.as_dict(), handle, indent=2, sort_keys=True)
        handle.write("\n")
    return destination
