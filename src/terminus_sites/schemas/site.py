"""Site, membership and environment schemas.

Records are built from hosting API responses and are immutable for the
duration of one command invocation.

Key Components:
    MembershipType: How the user reaches a site (team or organization)
    Membership: One association between a site and a team or organization
    Site: A hosted project
    ConnectionMode: Environment filesystem mode (sftp or git)
    Environment: One deployment target of a site
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

# =============================================================================
# Enums
# =============================================================================


class MembershipType(str, Enum):
    """How the current user reaches a site.

    Attributes:
        TEAM: The user is on the site's team.
        ORGANIZATION: The user belongs to an organization the site is part of.
    """

    TEAM = "team"
    ORGANIZATION = "organization"


class ConnectionMode(str, Enum):
    """Filesystem mode of an environment.

    Attributes:
        SFTP: On-server development; the filesystem is writable interactively.
        GIT: Code changes only arrive through version-control deploys.

    Examples:
        >>> ConnectionMode.SFTP.value
        'sftp'
    """

    SFTP = "sftp"
    GIT = "git"


# =============================================================================
# Pydantic Models
# =============================================================================


class Membership(BaseModel):
    """Association between a site and a team or organization.

    Attributes:
        id: User id for team memberships, organization id otherwise.
        name: "Team", or the organization's display name.
        type: Membership type.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str = ""
    type: MembershipType


class Site(BaseModel):
    """A hosted project with one or more environments.

    Attributes:
        id: Opaque unique identifier.
        name: Display name, unique among the user's sites.
        service_level: Service tier label (e.g. "free", "pro").
        framework: Framework label (e.g. "drupal", "wordpress").
        created: Creation time in epoch seconds.
        frozen: Whether the site is frozen.
        owner: User id of the site owner.
        php_version: Site-wide PHP version default, if reported.
        memberships: How the current user reaches this site.

    Examples:
        >>> site = Site(id="abc", name="proj-1", created=1420070400)
        >>> site.frozen
        False
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    service_level: str = ""
    framework: str = ""
    created: int = 0
    frozen: bool = False
    owner: str = ""
    php_version: str | None = None
    memberships: tuple[Membership, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _normalize_api_fields(cls, data: Any) -> Any:
        """Coerce API quirks: null strings and numeric PHP versions."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("service_level", "framework", "owner"):
            if data.get(key) is None:
                data.pop(key, None)
        php_version = data.get("php_version")
        if php_version is not None and not isinstance(php_version, str):
            data["php_version"] = _format_php_version(php_version)
        if data.get("frozen") is None:
            data.pop("frozen", None)
        return data

    def has_membership(self, membership_type: MembershipType) -> bool:
        """Return True if any membership is of the given type."""
        return any(m.type == membership_type for m in self.memberships)

    def with_membership(self, membership: Membership) -> Site:
        """Return a copy with one more membership, ignoring duplicates."""
        if membership in self.memberships:
            return self
        return self.model_copy(update={"memberships": (*self.memberships, membership)})


class Environment(BaseModel):
    """One deployment target of a site.

    Attributes:
        id: "dev", "test", "live" or a multidev environment name.
        on_server_development: Whether on-server (SFTP) development is enabled.
        php_version: PHP runtime version for this environment.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    on_server_development: bool = False
    php_version: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_php_version(cls, data: Any) -> Any:
        if isinstance(data, dict):
            php_version = data.get("php_version")
            if php_version is not None and not isinstance(php_version, str):
                data = {**data, "php_version": _format_php_version(php_version)}
        return data

    @computed_field  # type: ignore[prop-decorator]
    @property
    def connection_mode(self) -> ConnectionMode:
        """Filesystem mode derived from the on-server development flag."""
        return ConnectionMode.SFTP if self.on_server_development else ConnectionMode.GIT


def _format_php_version(value: Any) -> str:
    """Render PHP versions the API reports as numbers (55, 7.4) as "5.5", "7.4"."""
    if isinstance(value, int) and 10 <= value < 100:
        return f"{value // 10}.{value % 10}"
    return str(value)


__all__: list[str] = [
    "ConnectionMode",
    "Environment",
    "Membership",
    "MembershipType",
    "Site",
]
