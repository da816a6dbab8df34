"""Site filters.

Each filter is a pure predicate over a Site. ``apply_filters`` applies the
supplied ones in the fixed order team, organization, name, owner; the result
is an order-preserving subset of the input.

Example:
    >>> filters = SiteFilters(team=True, name="^proj-")
    >>> apply_filters(sites, filters, current_user_id=session.user_uuid)
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from pydantic import BaseModel, ConfigDict

from terminus_sites.errors import InvalidPatternError
from terminus_sites.schemas.site import MembershipType, Site

SitePredicate = Callable[[Site], bool]

ALL_ORGANIZATIONS = "all"
CURRENT_USER = "me"


class SiteFilters(BaseModel):
    """Filters requested on the command line.

    Unset fields are skipped.

    Attributes:
        team: Keep only sites reached through team membership.
        org: Organization id, or "all" for any organization membership.
        name: Regular expression searched in the site name.
        owner: Owner user id, or "me" for the current user.
    """

    model_config = ConfigDict(frozen=True)

    team: bool = False
    org: str | None = None
    name: str | None = None
    owner: str | None = None


def team_filter() -> SitePredicate:
    """Keep sites the user reaches through team membership."""

    def predicate(site: Site) -> bool:
        return site.has_membership(MembershipType.TEAM)

    return predicate


def organization_filter(org_id: str) -> SitePredicate:
    """Keep sites with a membership in ``org_id``, or in any organization for "all"."""

    def predicate(site: Site) -> bool:
        for membership in site.memberships:
            if org_id == ALL_ORGANIZATIONS and membership.type == MembershipType.ORGANIZATION:
                return True
            if membership.id == org_id:
                return True
        return False

    return predicate


def name_filter(pattern: str) -> SitePredicate:
    """Keep sites whose name contains a match for ``pattern``.

    Raises:
        InvalidPatternError: If ``pattern`` is not a valid regular expression.
    """
    try:
        regex = re.compile(pattern)
    except re.error as e:
        raise InvalidPatternError(pattern, str(e)) from e

    def predicate(site: Site) -> bool:
        return regex.search(site.name) is not None

    return predicate


def owner_filter(owner_id: str) -> SitePredicate:
    """Keep sites owned by ``owner_id``.

    "me" must already be resolved; see ``resolve_owner``.
    """

    def predicate(site: Site) -> bool:
        return site.owner == owner_id

    return predicate


def resolve_owner(owner: str, current_user_id: str) -> str:
    """Map "me" to the current user's id; return other values unchanged."""
    return current_user_id if owner == CURRENT_USER else owner


def _build_predicates(filters: SiteFilters, current_user_id: str) -> list[SitePredicate]:
    """Build the requested predicates in application order.

    Construction validates every argument, so a malformed pattern fails
    before any site is inspected.
    """
    predicates: list[SitePredicate] = []
    if filters.team:
        predicates.append(team_filter())
    if filters.org is not None:
        predicates.append(organization_filter(filters.org))
    if filters.name is not None:
        predicates.append(name_filter(filters.name))
    if filters.owner is not None:
        predicates.append(owner_filter(resolve_owner(filters.owner, current_user_id)))
    return predicates


def validate_filters(filters: SiteFilters) -> None:
    """Check filter arguments without inspecting any site.

    Raises:
        InvalidPatternError: If the name filter pattern is malformed.
    """
    if filters.name is not None:
        name_filter(filters.name)


def apply_filters(
    sites: Iterable[Site],
    filters: SiteFilters,
    current_user_id: str,
) -> tuple[Site, ...]:
    """Apply ``filters`` to ``sites``.

    Args:
        sites: Sites to filter.
        filters: Requested filters.
        current_user_id: Id substituted for owner "me".

    Returns:
        Sites passing every requested filter, in input order.

    Raises:
        InvalidPatternError: If the name filter pattern is malformed.
    """
    result = tuple(sites)
    for predicate in _build_predicates(filters, current_user_id):
        result = tuple(site for site in result if predicate(site))
    return result


__all__: list[str] = [
    "ALL_ORGANIZATIONS",
    "CURRENT_USER",
    "SiteFilters",
    "SitePredicate",
    "apply_filters",
    "name_filter",
    "organization_filter",
    "owner_filter",
    "resolve_owner",
    "team_filter",
    "validate_filters",
]
