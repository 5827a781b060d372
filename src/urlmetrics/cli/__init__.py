"""Command line interface for urlmetrics."""

from urlmetrics.cli.app import main, run_cli
from urlmetrics.cli.errors import CliError

__all__ = ["CliError", "main", "run_cli"]
