"""Unit tests for status aggregation."""

from __future__ import annotations

from datetime import timezone
from typing import Any
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest

from terminus_sites.environments import StatusTarget
from terminus_sites.errors import EnvironmentNotFoundError, RemoteUnavailableError
from terminus_sites.schemas.site import ConnectionMode, Environment, Site
from terminus_sites.schemas.status import Condition, MonitoringState
from terminus_sites.status import (
    collect_status,
    determine_condition,
    environment_row,
    format_created,
    monitoring_state,
    site_row,
)
from tests.conftest import make_site


def make_source(
    sites: list[Site],
    environments: dict[tuple[str, str], Environment],
    *,
    diffstat: dict[str, Any] | None = None,
    new_relic: Any = None,
    drush: str = "8",
) -> MagicMock:
    """Build a StatusSource fake backed by dictionaries."""
    by_name = {site.name: site for site in sites}
    source = MagicMock()
    source.lookup.side_effect = lambda name: by_name[name]

    def environment(site: Site, env_id: str) -> Environment:
        try:
            return environments[(site.name, env_id)]
        except KeyError:
            raise EnvironmentNotFoundError(site.name, env_id) from None

    source.environment.side_effect = environment
    source.diffstat.return_value = diffstat or {}
    source.drush_version.return_value = drush
    source.new_relic_account.return_value = new_relic
    return source


class TestFormatCreated:
    """Tests for creation date formatting."""

    @pytest.mark.requirement("status-site-row")
    def test_midnight_is_12_am(self) -> None:
        assert format_created(1420070400) == "01 Jan 2015 12:00 AM"

    @pytest.mark.requirement("status-site-row")
    def test_afternoon(self) -> None:
        # 2016-07-04 15:05:00 UTC
        assert format_created(1467644700) == "04 Jul 2016 03:05 PM"

    def test_timezone_is_applied(self) -> None:
        assert format_created(1420070400, ZoneInfo("America/New_York")) == "31 Dec 2014 07:00 PM"


class TestSiteRow:
    """Tests for site summary rows."""

    @pytest.mark.requirement("status-site-row")
    def test_frozen_yes_no(self) -> None:
        assert site_row(make_site("a", frozen=True)).frozen == "yes"
        assert site_row(make_site("b", frozen=False)).frozen == "no"

    def test_fields(self) -> None:
        row = site_row(make_site("a", service_level="business", framework="wordpress"))
        assert row.name == "a"
        assert row.service_level == "business"
        assert row.framework == "wordpress"
        assert row.created == "01 Jan 2015 12:00 AM"


class TestCondition:
    """Tests for filesystem condition."""

    @pytest.mark.requirement("status-condition")
    def test_sftp_with_changes_is_dirty(self) -> None:
        assert determine_condition("sftp", {"a.txt": {}}) == Condition.DIRTY

    @pytest.mark.requirement("status-condition")
    def test_sftp_without_changes_is_clean(self) -> None:
        assert determine_condition(ConnectionMode.SFTP, {}) == Condition.CLEAN

    @pytest.mark.requirement("status-condition")
    def test_git_with_changes_is_clean(self) -> None:
        """Scenario: git mode with outstanding changes reports clean."""
        assert determine_condition("git", {"a.txt": {}}) == Condition.CLEAN

    @pytest.mark.requirement("status-condition")
    def test_git_mode_does_not_query_diffstat(self) -> None:
        site = make_site("a")
        source = make_source(
            [site],
            {("a", "live"): Environment(id="live", on_server_development=False)},
            diffstat={"a.txt": {}},
        )

        row = environment_row(source, StatusTarget(site, "live"))

        assert row.condition == "clean"
        source.diffstat.assert_not_called()

    @pytest.mark.requirement("status-condition")
    def test_sftp_mode_queries_diffstat(self) -> None:
        site = make_site("a")
        source = make_source(
            [site],
            {("a", "dev"): Environment(id="dev", on_server_development=True)},
            diffstat={"a.txt": {"additions": 1}},
        )

        row = environment_row(source, StatusTarget(site, "dev"))

        assert row.condition == "dirty"
        assert row.connection_mode == "sftp"
        source.diffstat.assert_called_once_with(site, "dev")


class TestMonitoring:
    """Tests for New Relic state."""

    @pytest.mark.requirement("status-newrelic")
    @pytest.mark.parametrize(
        ("account", "expected"),
        [
            ({"id": "123"}, MonitoringState.ENABLED),
            ("acct-1", MonitoringState.ENABLED),
            (None, MonitoringState.DISABLED),
            ({}, MonitoringState.DISABLED),
            ("", MonitoringState.DISABLED),
        ],
    )
    def test_account_presence(self, account: Any, expected: MonitoringState) -> None:
        assert monitoring_state(account) == expected


class TestCollectStatus:
    """Tests for the full aggregation."""

    @pytest.mark.requirement("status-aggregate")
    def test_rows_in_target_order(self) -> None:
        a, b = make_site("a"), make_site("b")
        source = make_source(
            [a, b],
            {
                ("a", "dev"): Environment(id="dev", php_version="7.4"),
                ("a", "live"): Environment(id="live", php_version="8.1"),
                ("b", "dev"): Environment(id="dev", php_version="8.2"),
            },
            new_relic={"id": "nr"},
        )
        targets = [StatusTarget(a, "dev"), StatusTarget(a, "live"), StatusTarget(b, "dev")]

        report = collect_status(source, [a, b], targets, tz=timezone.utc)

        assert [r.name for r in report.sites] == ["a", "b"]
        assert [(r.name, r.environment, r.php_version) for r in report.environments] == [
            ("a", "dev", "7.4"),
            ("a", "live", "8.1"),
            ("b", "dev", "8.2"),
        ]
        assert {r.newrelic for r in report.environments} == {"enabled"}
        assert {r.drush_version for r in report.environments} == {"8"}
        assert isinstance(report.environments, tuple)

    @pytest.mark.requirement("status-aggregate")
    def test_site_rows_without_targets(self) -> None:
        a = make_site("a")
        report = collect_status(make_source([a], {}), [a], [])

        assert len(report.sites) == 1
        assert report.environments == ()

    @pytest.mark.requirement("status-no-partial")
    def test_missing_environment_aborts(self) -> None:
        a = make_site("a")
        source = make_source([a], {("a", "dev"): Environment(id="dev")})
        targets = [StatusTarget(a, "dev"), StatusTarget(a, "gone")]

        with pytest.raises(EnvironmentNotFoundError):
            collect_status(source, [a], targets)

    @pytest.mark.requirement("status-no-partial")
    def test_remote_failure_aborts(self) -> None:
        a = make_site("a")
        source = make_source([a], {("a", "dev"): Environment(id="dev")})
        source.new_relic_account.side_effect = RemoteUnavailableError("https://x/api", "HTTP 503")

        with pytest.raises(RemoteUnavailableError):
            collect_status(source, [a], [StatusTarget(a, "dev")])
