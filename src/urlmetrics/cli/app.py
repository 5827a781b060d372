"""Entry point wiring configuration, logging and the urlmetrics commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from ..logging.config import setup_logging
from .errors import CliError, log_cli_error
from .io import load_cli_config
from .parser import build_parser

_LOGGING_DEFAULTS = {"level": "info", "output": "stderr", "format": "json"}


def _bootstrap_parser() -> argparse.ArgumentParser:
    # Options needed before the full parser exists: where the config lives
    # and how to log while loading it.
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config", dest="config_path", type=Path, default=None)
    parser.add_argument("--log-level", dest="log_level", default=None)
    parser.add_argument("--log-output", dest="log_output", default=None)
    parser.add_argument("--log-format", dest="log_format", choices=("json", "text"), default=None)
    return parser


def _logging_section(config: Dict[str, Any], options: argparse.Namespace) -> Dict[str, Any]:
    section = dict(config.get("logging", {}))
    overrides = {
        "level": options.log_level,
        "output": options.log_output,
        "format": options.log_format,
    }
    section.update({key: value for key, value in overrides.items() if value is not None})
    for key, value in _LOGGING_DEFAULTS.items():
        section.setdefault(key, value)
    return section


def _echo(text: str) -> None:
    sys.stdout.write(text if text.endswith("\n") else f"{text}\n")


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Run one urlmetrics command and return its printed output.

    A :class:`CliError` is logged, its message echoed to stdout, and the
    process exits with the error's status code.
    """

    options, remaining = _bootstrap_parser().parse_known_args(args)
    config = load_cli_config(options.config_path)
    config["logging"] = _logging_section(config, options)
    setup_logging(config)

    namespace = build_parser(config).parse_args(list(remaining), namespace=options)
    handler = getattr(namespace, "handler", None)
    if handler is None:
        command = getattr(namespace, "command", None)
        raise CliError(f"Unknown command '{command}'.", category="usage", context={"command": command})

    try:
        result = handler(namespace, config=config)
    except CliError as exc:
        if not exc.logged:
            log_cli_error(exc.payload, exc_info=exc)
            exc.logged = True
        if exc.payload.message:
            _echo(exc.payload.message)
        raise SystemExit(exc.status_code) from exc

    if result:
        _echo(result)
    return result


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
