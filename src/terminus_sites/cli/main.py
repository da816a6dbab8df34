"""Main entry point for the terminus CLI.

This module provides the Click-based CLI with hierarchical command groups.

Command Groups:
    terminus sites: Actions on multiple sites (status)

Example:
    $ terminus --help
    $ terminus sites status --env=dev
    $ terminus --log-level=debug sites st --cached
"""

from __future__ import annotations

import sys
from importlib.metadata import version as get_version

import click
from pydantic import ValidationError

from terminus_sites.cli.sites import sites
from terminus_sites.cli.utils import ExitCode, error_exit
from terminus_sites.config import get_config
from terminus_sites.errors import ConfigError
from terminus_sites.logging_config import configure_logging


def _get_version() -> str:
    """Get the terminus-sites package version.

    Returns:
        Version string from package metadata, or 'unknown' if not installed.
    """
    try:
        return get_version("terminus-sites")
    except Exception:
        return "unknown"


@click.group(
    name="terminus",
    help="terminus - Command-line client for the hosting platform.",
    epilog="Use 'terminus <command> --help' for command-specific help.",
    context_settings={
        "help_option_names": ["-h", "--help"],
    },
)
@click.version_option(
    version=_get_version(),
    prog_name="terminus",
    message="%(prog)s %(version)s",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error", "critical"], case_sensitive=False),
    default=None,
    help="Minimum log level (overrides TERMINUS_LOG_LEVEL).",
)
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"], case_sensitive=False),
    default=None,
    help="Log renderer (overrides TERMINUS_LOG_FORMAT).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, log_format: str | None) -> None:
    """Root command group for the terminus CLI.

    Loads configuration once and configures logging before any
    subcommand runs.
    """
    obj = ctx.ensure_object(dict)

    if "config" not in obj:
        try:
            obj["config"] = get_config()
        except ValidationError as e:
            error_exit(f"Configuration error: {e}", exit_code=ExitCode.USAGE_ERROR)
        except ConfigError as e:
            error_exit(f"Configuration error: {e}", exit_code=e.exit_code)

    config = obj["config"]
    configure_logging(
        log_level=(log_level or config.log_level).upper(),
        log_format=(log_format or config.log_format).lower(),
    )


# Register command groups
cli.add_command(sites)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the terminus CLI.

    Args:
        argv: Command-line arguments (uses sys.argv if None).
    """
    try:
        cli(args=argv, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
