"""CLI utility functions and error handling.

Errors and warnings go to stderr as plain text; command output goes to
stdout so it can be redirected or piped.

Example:
    from terminus_sites.cli.utils import error_exit, ExitCode

    error_exit("Configuration error", exit_code=ExitCode.USAGE_ERROR)
"""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from typing import NoReturn


class ExitCode(IntEnum):
    """Standard exit codes for CLI commands.

    Values match the ``exit_code`` attributes of the TerminusError
    hierarchy.
    """

    SUCCESS = 0
    """Command completed successfully."""

    GENERAL_ERROR = 1
    """General error (catch-all for failures)."""

    USAGE_ERROR = 2
    """Invalid usage (bad arguments, malformed filter, invalid config)."""

    NOT_FOUND = 3
    """Site or environment not found."""

    AUTHENTICATION_ERROR = 4
    """No valid session."""

    VALIDATION_ERROR = 5
    """Input validation failed (e.g. unknown --env value)."""

    NETWORK_ERROR = 8
    """Network or remote service error."""


def _with_context(prefix: str, message: str, context: dict[str, str | int | bool | None]) -> str:
    context_str = ", ".join(f"{k}={v}" for k, v in context.items() if v is not None)
    if context_str:
        return f"{prefix}: {message} ({context_str})"
    return f"{prefix}: {message}"


def error(message: str, **context: str | int | bool | None) -> None:
    """Print an error message to stderr.

    Example:
        error("Cannot find site", site="proj-1")
        # Output: Error: Cannot find site (site=proj-1)
    """
    click.echo(_with_context("Error", message, context), err=True)


def error_exit(
    message: str,
    exit_code: int = ExitCode.GENERAL_ERROR,
    **context: str | int | bool | None,
) -> NoReturn:
    """Print an error message to stderr and exit with a code.

    Raises:
        SystemExit: Always exits with the specified code.
    """
    error(message, **context)
    sys.exit(int(exit_code))


def warn(message: str, **context: str | int | bool | None) -> None:
    """Print a warning message to stderr."""
    click.echo(_with_context("Warning", message, context), err=True)


def info(message: str) -> None:
    """Print an informational message to stderr.

    Used for progress updates that should not be captured by stdout
    redirection.
    """
    click.echo(message, err=True)


__all__: list[str] = ["ExitCode", "error", "error_exit", "info", "warn"]
