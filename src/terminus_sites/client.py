"""HTTP client for the hosting platform API.

Thin synchronous wrapper around httpx with:
- Session-token authentication
- Structured logging via structlog
- One OpenTelemetry span per request
- Error mapping onto the terminus-sites exception hierarchy

Requests are never retried; a failure propagates to the caller.

Example:
    >>> with TerminusClient(config, session) as client:
    ...     environments = client.site_environments("abc123")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

from terminus_sites import __version__
from terminus_sites.errors import AuthenticationError, NotFoundError, RemoteUnavailableError

if TYPE_CHECKING:
    from types import TracebackType

    from terminus_sites.config import TerminusConfig
    from terminus_sites.schemas.session import Session

logger = structlog.get_logger(__name__)

_TRACER_NAME = "terminus.api"

# OpenTelemetry span attribute names
_SPAN_METHOD = "http.request.method"
_SPAN_PATH = "terminus.api.path"
_SPAN_STATUS = "http.response.status_code"


class TerminusClient:
    """Client for the hosting API endpoints the sites commands need.

    Args:
        config: Connection settings.
        session: Logged-in session supplying the bearer token.
        transport: Optional httpx transport (tests pass an httpx.MockTransport).
    """

    def __init__(
        self,
        config: TerminusConfig,
        session: Session,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._http = httpx.Client(
            base_url=config.base_url,
            headers={
                "Authorization": f"Bearer {session.session.get_secret_value()}",
                "Content-Type": "application/json",
                "User-Agent": f"terminus-sites/{__version__}",
            },
            timeout=config.timeout,
            verify=config.verify_ssl,
            transport=transport,
        )
        self._log = logger.bind(api_host=config.host)
        self._tracer = trace.get_tracer(_TRACER_NAME)

    def __enter__(self) -> TerminusClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying connection pool."""
        self._http.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Perform one API request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Path relative to the API root (e.g. "sites/abc/environments").
            params: Optional query parameters.

        Returns:
            Decoded JSON body.

        Raises:
            AuthenticationError: On HTTP 401 or 403.
            NotFoundError: On HTTP 404.
            RemoteUnavailableError: On transport errors, timeouts, any other
                non-2xx status or a body that is not JSON.
        """
        url = f"{self._config.base_url}/{path}"
        with self._tracer.start_as_current_span(
            "terminus.api.request",
            kind=SpanKind.CLIENT,
        ) as span:
            span.set_attribute(_SPAN_METHOD, method)
            span.set_attribute(_SPAN_PATH, path)

            try:
                response = self._http.request(method, path, params=params)
            except httpx.TimeoutException as e:
                self._log.error("api_request_timeout", path=path, error=str(e))
                span.set_status(Status(StatusCode.ERROR, "timeout"))
                raise RemoteUnavailableError(url, "request timed out") from e
            except httpx.HTTPError as e:
                self._log.error("api_request_failed", path=path, error=str(e))
                span.set_status(Status(StatusCode.ERROR, type(e).__name__))
                raise RemoteUnavailableError(url, str(e) or type(e).__name__) from e

            span.set_attribute(_SPAN_STATUS, response.status_code)
            self._log.debug("api_response", path=path, status_code=response.status_code)

            if response.status_code in (401, 403):
                span.set_status(Status(StatusCode.ERROR, "unauthorized"))
                raise AuthenticationError(
                    f"The API rejected the session (HTTP {response.status_code}). "
                    "Please login again with `terminus auth login`"
                )
            if response.status_code == 404:
                span.set_status(Status(StatusCode.ERROR, "not found"))
                raise NotFoundError(f"Not found: {path}")
            if response.is_error:
                self._log.error(
                    "api_request_rejected",
                    path=path,
                    status_code=response.status_code,
                )
                span.set_status(Status(StatusCode.ERROR, f"HTTP {response.status_code}"))
                raise RemoteUnavailableError(
                    url,
                    f"HTTP {response.status_code}",
                    status_code=response.status_code,
                )

            try:
                return response.json()
            except ValueError as e:
                span.set_status(Status(StatusCode.ERROR, "invalid body"))
                raise RemoteUnavailableError(
                    url,
                    "response body is not valid JSON",
                    status_code=response.status_code,
                ) from e

    def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        """GET ``path`` and return the decoded JSON body."""
        return self.request("GET", path, params=params)

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    def user_site_memberships(self, user_id: str) -> list[dict[str, Any]]:
        """Sites the user reaches through team membership."""
        return _as_list(self.get(f"users/{user_id}/memberships/sites", params={"limit": 1000}))

    def user_organization_memberships(self, user_id: str) -> list[dict[str, Any]]:
        """Organizations the user belongs to."""
        return _as_list(self.get(f"users/{user_id}/memberships/organizations"))

    def organization_site_memberships(self, org_id: str) -> list[dict[str, Any]]:
        """Sites that belong to an organization."""
        return _as_list(
            self.get(f"organizations/{org_id}/memberships/sites", params={"limit": 1000})
        )

    def site_environments(self, site_id: str) -> dict[str, dict[str, Any]]:
        """Environments of a site keyed by environment id, in API order."""
        data = self.get(f"sites/{site_id}/environments")
        if isinstance(data, list):
            return {item["id"]: item for item in data if isinstance(item, dict) and "id" in item}
        return dict(data or {})

    def environment_diffstat(self, site_id: str, env_id: str) -> dict[str, Any]:
        """Uncommitted on-server changes of an environment, keyed by file."""
        data = self.get(f"sites/{site_id}/environments/{env_id}/on-server-development/diffstat")
        if isinstance(data, list):
            return {str(i): item for i, item in enumerate(data)}
        return dict(data or {})

    def environment_settings(self, site_id: str, env_id: str) -> dict[str, Any]:
        """Runtime settings of an environment (drush_version, ...)."""
        return dict(self.get(f"sites/{site_id}/environments/{env_id}/settings") or {})

    def site_new_relic(self, site_id: str) -> dict[str, Any]:
        """New Relic subscription data of a site."""
        return dict(self.get(f"sites/{site_id}/new-relic") or {})


def _as_list(data: Any) -> list[dict[str, Any]]:
    """Accept list bodies and dict bodies keyed by id."""
    if data is None:
        return []
    if isinstance(data, dict):
        return [item for item in data.values() if isinstance(item, dict)]
    return [item for item in data if isinstance(item, dict)]


__all__: list[str] = ["TerminusClient"]
