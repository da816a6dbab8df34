"""Status report schemas.

Rows are flat records ready for rendering. Column labels map field names
to table headers in fixed display order.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from terminus_sites.schemas.site import ConnectionMode


class Condition(str, Enum):
    """Filesystem state relative to the version-controlled source."""

    CLEAN = "clean"
    DIRTY = "dirty"


class MonitoringState(str, Enum):
    """New Relic subscription state."""

    ENABLED = "enabled"
    DISABLED = "disabled"


class SiteRow(BaseModel):
    """One row of the site table."""

    model_config = ConfigDict(frozen=True)

    name: str
    service_level: str
    framework: str
    created: str
    frozen: str


class EnvironmentRow(BaseModel):
    """One row of the environment table, joining a site and one environment."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    name: str
    environment: str
    php_version: str
    drush_version: str
    newrelic: MonitoringState
    connection_mode: ConnectionMode
    condition: Condition


class StatusReport(BaseModel):
    """Site rows and environment rows collected by one status run."""

    model_config = ConfigDict(frozen=True)

    sites: tuple[SiteRow, ...] = ()
    environments: tuple[EnvironmentRow, ...] = ()


SITE_LABELS: dict[str, str] = {
    "name": "Name",
    "service_level": "Service",
    "framework": "Framework",
    "created": "Created",
    "frozen": "Frozen",
}

ENVIRONMENT_LABELS: dict[str, str] = {
    "name": "Name",
    "environment": "Env",
    "php_version": "PHP",
    "drush_version": "Drush",
    "newrelic": "New Relic",
    "connection_mode": "Mode",
    "condition": "Condition",
}


__all__: list[str] = [
    "ENVIRONMENT_LABELS",
    "SITE_LABELS",
    "Condition",
    "EnvironmentRow",
    "MonitoringState",
    "SiteRow",
    "StatusReport",
]
