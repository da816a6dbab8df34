"""Sites status command implementation.

This module implements the ``terminus sites status`` command (alias ``st``)
which:
- Refreshes the cached site list (unless --cached)
- Filters sites by team, organization, name and owner
- Validates the --env selector against the filtered sites
- Collects per-environment status (PHP, Drush, New Relic, mode, condition)
- Renders a site table and an environment table (or JSON / YAML)

Example:
    $ terminus sites status
    $ terminus sites status --env=live --org
    $ terminus sites st --owner me --name '^proj-' --cached
    $ terminus sites status --format=json
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

import click
import structlog

from terminus_sites.cache import ResponseCache
from terminus_sites.cli.utils import ExitCode, error, info, warn
from terminus_sites.client import TerminusClient
from terminus_sites.environments import ALL_ENVIRONMENTS, resolve_targets
from terminus_sites.errors import TerminusError
from terminus_sites.filters import (
    ALL_ORGANIZATIONS,
    CURRENT_USER,
    SiteFilters,
    apply_filters,
    validate_filters,
)
from terminus_sites.output import OUTPUT_FORMATS, format_report
from terminus_sites.session import load_session
from terminus_sites.sites import SiteRepository
from terminus_sites.status import collect_status

if TYPE_CHECKING:
    import httpx

    from terminus_sites.config import TerminusConfig
    from terminus_sites.schemas.status import StatusReport

logger = structlog.get_logger(__name__)

NO_SITES_MESSAGE = "You have no sites."


def run_status(
    config: TerminusConfig,
    filters: SiteFilters,
    environment: str = ALL_ENVIRONMENTS,
    *,
    cached: bool = False,
    transport: httpx.BaseTransport | None = None,
) -> StatusReport:
    """Run the status pipeline end to end.

    Args:
        config: Client configuration.
        filters: Requested site filters.
        environment: "all" or a specific environment id.
        cached: Use the cached site list instead of refreshing it.
        transport: Optional httpx transport for the API client.

    Returns:
        The collected report.

    Raises:
        TerminusError: Any failure; nothing is rendered in that case.
    """
    session = load_session(config.session_path)
    # Malformed filters fail here, before any request is made
    validate_filters(filters)

    with TerminusClient(config, session, transport=transport) as client:
        repository = SiteRepository(client, ResponseCache(config.cache_dir), session.user_uuid)

        if not cached:
            repository.refresh()
        sites = apply_filters(repository.all(), filters, current_user_id=session.user_uuid)

        if not sites:
            warn(NO_SITES_MESSAGE)

        targets = resolve_targets(sites, environment, repository.environments)
        return collect_status(repository, sites, targets, tz=config.tzinfo)


@click.command(
    name="status",
    help="Report the status of all available sites.",
    epilog="""
Because of the size of this call, the site list is cached; it is also the
basis for loading individual sites by name.

Examples:
    $ terminus sites status
    $ terminus sites status --env=live --org
    $ terminus sites st --owner me --name '^proj-' --cached

Exit Codes:
    0  - Success
    2  - Malformed --name pattern
    3  - Site or environment not found
    4  - Not logged in
    5  - Invalid --env value
    8  - API unavailable
""",
)
@click.option(
    "--env",
    "environment",
    default=ALL_ENVIRONMENTS,
    show_default=True,
    help="Filter sites by environment.",
    metavar="ENV",
)
@click.option(
    "--team",
    is_flag=True,
    default=False,
    help="Filter for sites you are a team member of.",
)
@click.option(
    "--owner",
    is_flag=False,
    flag_value=CURRENT_USER,
    default=None,
    help='Filter for sites a specific user owns. Use "me" for your own user.',
    metavar="[ID]",
)
@click.option(
    "--org",
    is_flag=False,
    flag_value=ALL_ORGANIZATIONS,
    default=None,
    help="Filter sites you can access via the organization. Use 'all' to get all.",
    metavar="[ID]",
)
@click.option(
    "--name",
    "name_pattern",
    default=None,
    help="Filter sites you can access via name (regular expression).",
    metavar="REGEX",
)
@click.option(
    "--cached",
    is_flag=True,
    default=False,
    help="Return the cached site list instead of retrieving it anew.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    default="table",
    show_default=True,
    help="Output format.",
)
@click.pass_context
def status_command(
    ctx: click.Context,
    environment: str,
    team: bool,
    owner: str | None,
    org: str | None,
    name_pattern: str | None,
    cached: bool,
    output_format: str,
) -> None:
    """Report the status of all available sites.

    Args:
        ctx: Click context carrying the loaded configuration.
        environment: Environment selector ("all" or an environment id).
        team: Team membership filter.
        owner: Owner filter ("me" for the current user).
        org: Organization filter ("all" for any organization).
        name_pattern: Site name regular expression.
        cached: Use the cached site list.
        output_format: Output format (table, json, yaml).
    """
    obj = ctx.ensure_object(dict)
    config: TerminusConfig = obj["config"]
    output_format = output_format.lower()
    filters = SiteFilters(team=team, org=org, name=name_pattern, owner=owner)

    if output_format == "table" and not cached:
        info("Retrieving the list of sites...")

    try:
        report = run_status(
            config,
            filters,
            environment,
            cached=cached,
            transport=obj.get("transport"),
        )
    except TerminusError as e:
        logger.debug("sites_status_failed", error_type=type(e).__name__)
        error(str(e))
        sys.exit(e.exit_code)
    except Exception as e:
        logger.error(
            "sites_status_unexpected_error",
            error_type=type(e).__name__,
            error_summary=str(e)[:200] if str(e) else "Unknown error",
        )
        error(f"Status query failed: {e}")
        sys.exit(ExitCode.GENERAL_ERROR)

    click.echo(format_report(report, output_format))


__all__: list[str] = ["NO_SITES_MESSAGE", "run_status", "status_command"]
