"""Pydantic schemas for sites, environments and status rows."""

from __future__ import annotations

from terminus_sites.schemas.session import Session
from terminus_sites.schemas.site import (
    ConnectionMode,
    Environment,
    Membership,
    MembershipType,
    Site,
)
from terminus_sites.schemas.status import (
    ENVIRONMENT_LABELS,
    SITE_LABELS,
    Condition,
    EnvironmentRow,
    MonitoringState,
    SiteRow,
    StatusReport,
)

__all__: list[str] = [
    "ENVIRONMENT_LABELS",
    "SITE_LABELS",
    "Condition",
    "ConnectionMode",
    "Environment",
    "EnvironmentRow",
    "Membership",
    "MembershipType",
    "MonitoringState",
    "Session",
    "Site",
    "SiteRow",
    "StatusReport",
]
