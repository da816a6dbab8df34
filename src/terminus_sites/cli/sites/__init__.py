"""Commands acting on multiple sites.

    terminus sites status: Report the status of all available sites
    terminus sites st:     Alias for status

Example:
    $ terminus sites status --team
"""

from __future__ import annotations

import click

from terminus_sites.cli.sites.status import status_command


@click.group(
    name="sites",
    help="Actions on multiple sites.",
)
def sites() -> None:
    """Sites command group."""
    pass


# Register subcommands
sites.add_command(status_command)
sites.add_command(status_command, name="st")


__all__: list[str] = ["sites"]
