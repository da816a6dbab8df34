"""Unit tests for TerminusClient error mapping and endpoint parsing."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from terminus_sites.client import TerminusClient
from terminus_sites.config import TerminusConfig
from terminus_sites.errors import AuthenticationError, NotFoundError, RemoteUnavailableError
from terminus_sites.schemas.session import Session
from tests.conftest import USER_ID


def make_client(
    config: TerminusConfig,
    handler: Callable[[httpx.Request], httpx.Response],
) -> TerminusClient:
    session = Session(session="secret-token", user_uuid=USER_ID)
    return TerminusClient(config, session, transport=httpx.MockTransport(handler))


class TestRequest:
    """Tests for request construction and error mapping."""

    def test_sends_bearer_token_and_base_path(self, config: TerminusConfig) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        with make_client(config, handler) as client:
            assert client.get("sites/abc/new-relic") == {"ok": True}

        assert seen[0].headers["Authorization"] == "Bearer secret-token"
        assert seen[0].url.host == "terminus.example.com"
        assert seen[0].url.path == "/api/sites/abc/new-relic"

    @pytest.mark.requirement("errors-remote")
    @pytest.mark.parametrize("status", [500, 502, 503, 429])
    def test_server_errors_raise_remote_unavailable(
        self, config: TerminusConfig, status: int
    ) -> None:
        with make_client(config, lambda r: httpx.Response(status)) as client:
            with pytest.raises(RemoteUnavailableError) as exc_info:
                client.get("sites/abc/environments")

        assert exc_info.value.status_code == status
        assert exc_info.value.exit_code == 8

    @pytest.mark.requirement("errors-remote")
    def test_connection_error_raises_remote_unavailable(self, config: TerminusConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with make_client(config, handler) as client:
            with pytest.raises(RemoteUnavailableError, match="Connection refused"):
                client.get("users/x/memberships/sites")

    @pytest.mark.requirement("errors-remote")
    def test_timeout_raises_remote_unavailable(self, config: TerminusConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with make_client(config, handler) as client:
            with pytest.raises(RemoteUnavailableError, match="timed out"):
                client.get("users/x/memberships/sites")

    def test_handler_called_once_without_retry(self, config: TerminusConfig) -> None:
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(503)

        with make_client(config, handler) as client:
            with pytest.raises(RemoteUnavailableError):
                client.get("sites/abc/environments")

        assert len(calls) == 1

    @pytest.mark.parametrize("status", [401, 403])
    def test_unauthorized_raises_authentication_error(
        self, config: TerminusConfig, status: int
    ) -> None:
        with make_client(config, lambda r: httpx.Response(status)) as client:
            with pytest.raises(AuthenticationError):
                client.get("sites/abc/environments")

    def test_not_found(self, config: TerminusConfig) -> None:
        with make_client(config, lambda r: httpx.Response(404)) as client:
            with pytest.raises(NotFoundError):
                client.get("sites/abc/environments")

    def test_invalid_json_raises_remote_unavailable(self, config: TerminusConfig) -> None:
        with make_client(config, lambda r: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(RemoteUnavailableError, match="not valid JSON"):
                client.get("sites/abc/environments")


class TestEndpoints:
    """Tests for endpoint body normalization."""

    def test_membership_lists_accept_dict_bodies(self, config: TerminusConfig) -> None:
        body = {"a": {"site": {"id": "a"}}, "b": {"site": {"id": "b"}}}
        with make_client(config, lambda r: httpx.Response(200, json=body)) as client:
            assert client.user_site_memberships(USER_ID) == list(body.values())

    def test_environments_accept_list_bodies(self, config: TerminusConfig) -> None:
        body = [{"id": "dev"}, {"id": "live"}]
        with make_client(config, lambda r: httpx.Response(200, json=body)) as client:
            assert list(client.site_environments("abc")) == ["dev", "live"]

    def test_empty_diffstat_list(self, config: TerminusConfig) -> None:
        with make_client(config, lambda r: httpx.Response(200, json=[])) as client:
            assert client.environment_diffstat("abc", "dev") == {}

    def test_null_new_relic(self, config: TerminusConfig) -> None:
        with make_client(config, lambda r: httpx.Response(200, content=b"null")) as client:
            assert client.site_new_relic("abc") == {}
