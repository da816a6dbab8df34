"""Status aggregation.

Turns filtered sites and resolved (site, environment) targets into an
immutable StatusReport. Any lookup failure aborts the whole collection;
no partial report is produced.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone, tzinfo
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from terminus_sites.schemas.site import ConnectionMode, Environment, Site
from terminus_sites.schemas.status import (
    Condition,
    EnvironmentRow,
    MonitoringState,
    SiteRow,
    StatusReport,
)

if TYPE_CHECKING:
    from terminus_sites.environments import StatusTarget

logger = structlog.get_logger(__name__)

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class StatusSource(Protocol):
    """What the aggregator needs from the site repository."""

    def lookup(self, name: str) -> Site: ...

    def environment(self, site: Site, env_id: str) -> Environment: ...

    def diffstat(self, site: Site, env_id: str) -> dict[str, Any]: ...

    def drush_version(self, site: Site, env_id: str) -> str: ...

    def new_relic_account(self, site: Site) -> Any: ...


def format_created(created: int, tz: tzinfo = timezone.utc) -> str:
    """Format an epoch timestamp as ``DD Mon YYYY hh:mm AM/PM``.

    Month and meridiem are rendered in English regardless of locale.

    Examples:
        >>> format_created(1420070400)
        '01 Jan 2015 12:00 AM'
    """
    dt = datetime.fromtimestamp(created, tz)
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    month = _MONTHS[dt.month - 1]
    return f"{dt.day:02d} {month} {dt.year:04d} {hour:02d}:{dt.minute:02d} {meridiem}"


def site_row(site: Site, tz: tzinfo = timezone.utc) -> SiteRow:
    """Build the site table row for one site."""
    return SiteRow(
        name=site.name,
        service_level=site.service_level,
        framework=site.framework,
        created=format_created(site.created, tz),
        frozen="yes" if site.frozen else "no",
    )


def determine_condition(mode: ConnectionMode | str, has_changes: Any) -> Condition:
    """Return "dirty" only for SFTP mode with pending changes."""
    if ConnectionMode(mode) == ConnectionMode.SFTP and has_changes:
        return Condition.DIRTY
    return Condition.CLEAN


def monitoring_state(account: Any) -> MonitoringState:
    """Return "enabled" if a New Relic account reference is present."""
    return MonitoringState.ENABLED if account else MonitoringState.DISABLED


def environment_row(source: StatusSource, target: StatusTarget) -> EnvironmentRow:
    """Query one (site, environment) pair and build its row.

    Raises:
        NotFoundError: If the site or environment can no longer be resolved.
        RemoteUnavailableError: If any status query fails.
    """
    site = source.lookup(target.site.name)
    environment = source.environment(site, target.environment)

    mode = environment.connection_mode
    changes: dict[str, Any] = {}
    if mode == ConnectionMode.SFTP:
        changes = source.diffstat(site, environment.id)

    return EnvironmentRow(
        name=site.name,
        environment=environment.id,
        php_version=environment.php_version or "",
        drush_version=source.drush_version(site, environment.id),
        newrelic=monitoring_state(source.new_relic_account(site)),
        connection_mode=mode,
        condition=determine_condition(mode, changes),
    )


def collect_status(
    source: StatusSource,
    sites: Iterable[Site],
    targets: Sequence[StatusTarget],
    tz: tzinfo = timezone.utc,
) -> StatusReport:
    """Build the full status report.

    Args:
        source: Repository answering lookups and status queries.
        sites: Filtered sites; one site row each.
        targets: Resolved (site, environment) pairs; one environment row each.
        tz: Timezone for creation dates.

    Returns:
        Site rows and environment rows in input order.
    """
    site_rows = tuple(site_row(site, tz) for site in sites)
    environment_rows = tuple(environment_row(source, target) for target in targets)
    logger.info(
        "status_collected",
        sites=len(site_rows),
        environments=len(environment_rows),
    )
    return StatusReport(sites=site_rows, environments=environment_rows)


__all__: list[str] = [
    "StatusSource",
    "collect_status",
    "determine_condition",
    "environment_row",
    "format_created",
    "monitoring_state",
    "site_row",
]
