"""Site repository: the user's sites, their environments and status lookups.

The site list is expensive to build (one request for team sites, one per
organization), so it is cached locally and is the basis for loading
individual sites by name.

Example:
    >>> repository = SiteRepository(client, cache, user_id=session.user_uuid)
    >>> repository.refresh()
    >>> site = repository.lookup("proj-1")
    >>> [env.id for env in repository.environments(site)]
    ['dev', 'test', 'live']
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from terminus_sites.errors import (
    EnvironmentNotFoundError,
    NotFoundError,
    RemoteUnavailableError,
    SiteNotFoundError,
)
from terminus_sites.schemas.site import Environment, Membership, MembershipType, Site

if TYPE_CHECKING:
    from terminus_sites.cache import ResponseCache
    from terminus_sites.client import TerminusClient

logger = structlog.get_logger(__name__)

SITES_CACHE_KEY = "sites"
TEAM_MEMBERSHIP_NAME = "Team"


class SiteRepository:
    """Accessor for the sites visible to one user.

    Args:
        client: API client.
        cache: Local response cache holding the site list.
        user_id: Id of the current user.
    """

    def __init__(self, client: TerminusClient, cache: ResponseCache, user_id: str) -> None:
        self._client = client
        self._cache = cache
        self._user_id = user_id
        self._sites: tuple[Site, ...] | None = None
        self._environments: dict[str, tuple[Environment, ...]] = {}
        self._log = logger.bind(user_id=user_id)

    # -------------------------------------------------------------------------
    # Site list
    # -------------------------------------------------------------------------

    def refresh(self) -> tuple[Site, ...]:
        """Fetch the full site list from the API and overwrite the cache.

        Returns:
            The refreshed site list.

        Raises:
            RemoteUnavailableError: If any request fails. Not retried.
        """
        merged: dict[str, Site] = {}

        team = Membership(id=self._user_id, name=TEAM_MEMBERSHIP_NAME, type=MembershipType.TEAM)
        for item in self._client.user_site_memberships(self._user_id):
            self._merge(merged, _site_record(item), team)

        for item in self._client.user_organization_memberships(self._user_id):
            organization = item.get("organization") or {}
            org_id = organization.get("id") or item.get("id")
            if not org_id:
                continue
            org_name = (organization.get("profile") or {}).get("name") or org_id
            membership = Membership(id=org_id, name=org_name, type=MembershipType.ORGANIZATION)
            for site_item in self._client.organization_site_memberships(org_id):
                self._merge(merged, _site_record(site_item), membership)

        self._sites = tuple(merged.values())
        self._environments.clear()
        self._cache.put(SITES_CACHE_KEY, [site.model_dump(mode="json") for site in self._sites])
        self._log.info("sites_refreshed", count=len(self._sites))
        return self._sites

    def _merge(self, merged: dict[str, Site], data: Any, membership: Membership) -> None:
        """Add a site record to ``merged``, accumulating memberships."""
        if not isinstance(data, dict):
            self._log.warning(
                "site_record_skipped",
                site_id=None,
                record_type=type(data).__name__,
            )
            return
        try:
            site = Site.model_validate(data)
        except ValidationError as e:
            self._log.warning(
                "site_record_skipped",
                site_id=data.get("id"),
                error_count=e.error_count(),
            )
            return
        existing = merged.get(site.id, site)
        merged[site.id] = existing.with_membership(membership)

    def all(self) -> tuple[Site, ...]:
        """Return the current site list.

        Uses the list loaded by ``refresh()``, otherwise the persisted cache.
        A cold cache is filled with a refresh.
        """
        if self._sites is not None:
            return self._sites

        cached = self._cache.get(SITES_CACHE_KEY)
        if cached is None:
            self._log.info("sites_cache_empty")
            return self.refresh()

        try:
            self._sites = tuple(Site.model_validate(item) for item in cached)
        except (TypeError, ValidationError) as e:
            self._log.warning("sites_cache_invalid", error=str(e))
            return self.refresh()
        return self._sites

    cached = all

    def lookup(self, name: str) -> Site:
        """Resolve a site by exact name.

        Raises:
            SiteNotFoundError: If no site has that name.
        """
        for site in self.all():
            if site.name == name:
                return site
        raise SiteNotFoundError(name)

    # -------------------------------------------------------------------------
    # Environments
    # -------------------------------------------------------------------------

    def environments(self, site: Site) -> tuple[Environment, ...]:
        """Return the site's environments in API order (memoized)."""
        if site.id not in self._environments:
            records = self._client.site_environments(site.id)
            environments = []
            for env_id, info in records.items():
                try:
                    data = {**info, "id": info.get("id", env_id)}
                    if data.get("php_version") is None:
                        data["php_version"] = site.php_version
                    environments.append(Environment.model_validate(data))
                except (TypeError, AttributeError, ValidationError) as e:
                    self._log.error(
                        "environment_record_invalid",
                        site_id=site.id,
                        environment=env_id,
                        error_type=type(e).__name__,
                    )
                    raise RemoteUnavailableError(
                        f"sites/{site.id}/environments",
                        "malformed environment record",
                    ) from e
            self._environments[site.id] = tuple(environments)
        return self._environments[site.id]

    def environment(self, site: Site, env_id: str) -> Environment:
        """Return one environment of a site.

        Raises:
            EnvironmentNotFoundError: If the site has no such environment.
        """
        try:
            environments = self.environments(site)
        except NotFoundError as e:
            raise SiteNotFoundError(site.name) from e
        for environment in environments:
            if environment.id == env_id:
                return environment
        raise EnvironmentNotFoundError(site.name, env_id)

    # -------------------------------------------------------------------------
    # Status queries
    # -------------------------------------------------------------------------

    def diffstat(self, site: Site, env_id: str) -> dict[str, Any]:
        """Uncommitted on-server changes of an environment."""
        return self._client.environment_diffstat(site.id, env_id)

    def drush_version(self, site: Site, env_id: str) -> str:
        """Drush version configured for an environment ("" if unset)."""
        value = self._client.environment_settings(site.id, env_id).get("drush_version")
        return "" if value is None else str(value)

    def new_relic_account(self, site: Site) -> Any:
        """New Relic account reference of a site, or None."""
        return self._client.site_new_relic(site.id).get("account")


def _site_record(item: Any) -> Any:
    """Unwrap the site from a membership item; other shapes pass through."""
    return item.get("site", item) if isinstance(item, dict) else item


__all__: list[str] = ["SITES_CACHE_KEY", "SiteRepository"]
