"""Shared pytest configuration and fixtures for terminus-sites tests.

Provides:
- The ``requirement`` marker
- Site / environment builders
- An in-memory fake of the hosting API served through httpx.MockTransport
- A configuration pointing at a temporary cache directory with a session
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from terminus_sites.config import TerminusConfig
from terminus_sites.schemas.site import Membership, MembershipType, Site

USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"
ORG_ID = "33333333-3333-3333-3333-333333333333"


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "requirement(id): mark test as validating a specific requirement",
    )


def make_site(
    name: str,
    *,
    memberships: list[tuple[str, str]] | None = None,
    owner: str = USER_ID,
    frozen: bool = False,
    created: int = 1420070400,
    service_level: str = "pro",
    framework: str = "drupal",
) -> Site:
    """Build a Site; memberships are (type, id) tuples."""
    return Site(
        id=f"id-{name}",
        name=name,
        service_level=service_level,
        framework=framework,
        created=created,
        frozen=frozen,
        owner=owner,
        memberships=tuple(
            Membership(id=mid, name="Team" if mtype == "team" else mid, type=MembershipType(mtype))
            for mtype, mid in (memberships or [])
        ),
    )


class FakeApi:
    """In-memory hosting API.

    Attributes:
        routes: Path (relative to /api/) to JSON body or (status, body) tuple.
        calls: Paths requested, in order.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.calls: list[str] = []

    def add_site(
        self,
        site: dict[str, Any],
        environments: dict[str, dict[str, Any]],
        *,
        team: bool = True,
        org_id: str | None = None,
        new_relic: dict[str, Any] | None = None,
        settings: dict[str, dict[str, Any]] | None = None,
        diffstat: dict[str, dict[str, Any]] | None = None,
    ) -> None:
        """Register a site with its environments and status endpoints."""
        if team:
            self.routes.setdefault(f"users/{USER_ID}/memberships/sites", []).append(
                {"id": f"{site['id']}:{USER_ID}", "site": site}
            )
        if org_id:
            orgs = self.routes.setdefault(f"users/{USER_ID}/memberships/organizations", [])
            if not any(o["organization"]["id"] == org_id for o in orgs):
                orgs.append({"organization": {"id": org_id, "profile": {"name": "Acme"}}})
            self.routes.setdefault(f"organizations/{org_id}/memberships/sites", []).append(
                {"site": site}
            )
        base = f"sites/{site['id']}"
        self.routes[f"{base}/environments"] = environments
        self.routes[f"{base}/new-relic"] = new_relic or {}
        for env_id in environments:
            env_settings = (settings or {}).get(env_id, {"drush_version": "8"})
            self.routes[f"{base}/environments/{env_id}/settings"] = env_settings
            self.routes[f"{base}/environments/{env_id}/on-server-development/diffstat"] = (
                diffstat or {}
            ).get(env_id, {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api/")
        self.calls.append(path)
        if path.startswith("users/") and path.endswith(("/sites", "/organizations")):
            body = self.routes.get(path, [])
        elif path in self.routes:
            body = self.routes[path]
        else:
            return httpx.Response(404, json={"error": "not found"})
        if isinstance(body, tuple):
            status, body = body
            return httpx.Response(status, json=body)
        return httpx.Response(200, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_api() -> FakeApi:
    """Provide an empty fake hosting API."""
    return FakeApi()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Provide a cache directory holding a valid session."""
    path = tmp_path / "cache"
    path.mkdir()
    (path / "session").write_text(
        json.dumps({"session": "test-session-token", "user_uuid": USER_ID, "expires_at": 0})
    )
    return path


@pytest.fixture
def config(cache_dir: Path) -> TerminusConfig:
    """Provide a configuration using the temporary cache directory."""
    return TerminusConfig(
        host="terminus.example.com",
        cache_dir=cache_dir,
        timezone="UTC",
    )
