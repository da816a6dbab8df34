"""Exception hierarchy for terminus-sites.

All exceptions inherit from TerminusError, the base exception class.

Exception Hierarchy:
    TerminusError (base)
    ├── InvalidPatternError        # --name regex does not compile
    ├── NotFoundError              # Lookup by identifier failed
    │   ├── SiteNotFoundError
    │   └── EnvironmentNotFoundError
    ├── AuthenticationError        # No usable session / API rejected it
    ├── InvalidEnvironmentError    # --env matches no site
    ├── RemoteUnavailableError     # API not reachable or misbehaving
    ├── ConfigError                # Config file unreadable or malformed
    └── CacheError                 # Local cache operation failed

Exit Codes:
    1 - General error (TerminusError, CacheError)
    2 - Invalid pattern or config (InvalidPatternError, ConfigError)
    3 - Not found (NotFoundError)
    4 - Authentication error (AuthenticationError)
    5 - Invalid environment (InvalidEnvironmentError)
    8 - Network/remote error (RemoteUnavailableError)

Example:
    >>> from terminus_sites.errors import SiteNotFoundError
    >>> raise SiteNotFoundError("my-site")
    Traceback (most recent call last):
        ...
    SiteNotFoundError: Cannot find site: my-site
"""

from __future__ import annotations

INVALID_ENVIRONMENT_MESSAGE = (
    "Invalid --env argument value. Allowed values are dev, test, live "
    "or a valid multi-site environment."
)


class TerminusError(Exception):
    """Base exception for all terminus-sites errors.

    Attributes:
        exit_code: CLI exit code for this error type (default: 1).
    """

    exit_code: int = 1


class InvalidPatternError(TerminusError):
    """Raised when the site name filter is not a valid regular expression.

    Attributes:
        pattern: The pattern as supplied by the user.
        reason: The compiler's description of the problem.
        exit_code: CLI exit code (2).
    """

    exit_code: int = 2

    def __init__(self, pattern: str, reason: str) -> None:
        """Initialize InvalidPatternError.

        Args:
            pattern: The pattern as supplied by the user.
            reason: The compiler's description of the problem.
        """
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid --name pattern '{pattern}': {reason}")


class NotFoundError(TerminusError):
    """Raised when a site or environment cannot be resolved.

    Attributes:
        exit_code: CLI exit code (3).
    """

    exit_code: int = 3


class SiteNotFoundError(NotFoundError):
    """Raised when no accessible site has the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Cannot find site: {name}")


class EnvironmentNotFoundError(NotFoundError):
    """Raised when a site has no environment with the requested id."""

    def __init__(self, site: str, environment: str) -> None:
        self.site = site
        self.environment = environment
        super().__init__(f"Cannot find environment {environment} on site {site}")


class AuthenticationError(TerminusError):
    """Raised when there is no valid session or the API rejects it.

    Attributes:
        exit_code: CLI exit code (4).
    """

    exit_code: int = 4


class InvalidEnvironmentError(TerminusError):
    """Raised when the --env selector matches no site in the filtered set.

    Attributes:
        environment: The requested environment id.
        exit_code: CLI exit code (5).
    """

    exit_code: int = 5

    def __init__(self, environment: str) -> None:
        """Initialize InvalidEnvironmentError.

        Args:
            environment: The requested environment id.
        """
        self.environment = environment
        super().__init__(INVALID_ENVIRONMENT_MESSAGE)


class RemoteUnavailableError(TerminusError):
    """Raised when the hosting API cannot be reached or answers unexpectedly.

    Wraps transport errors, timeouts and unexpected HTTP statuses. The
    request is never retried.

    Attributes:
        url: The URL that failed.
        status_code: HTTP status code, if a response was received.
        exit_code: CLI exit code (8).

    Example:
        >>> raise RemoteUnavailableError(
        ...     "https://terminus.pantheon.io:443/api/sites/abc/environments",
        ...     "HTTP 503",
        ...     status_code=503,
        ... )
    """

    exit_code: int = 8

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        """Initialize RemoteUnavailableError.

        Args:
            url: The URL that failed.
            reason: Description of the failure.
            status_code: HTTP status code, if a response was received.
        """
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Request to {url} failed: {reason}")


class ConfigError(TerminusError):
    """Raised when the configuration file cannot be read or parsed.

    Attributes:
        path: The configuration file.
        exit_code: CLI exit code (2).
    """

    exit_code: int = 2

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration file {path}: {reason}")


class CacheError(TerminusError):
    """Raised when the local response cache cannot be read or written.

    Attributes:
        operation: The cache operation that failed (lock, write).
        path: The cache path involved.
    """

    def __init__(self, operation: str, reason: str, path: str | None = None) -> None:
        """Initialize CacheError.

        Args:
            operation: The cache operation that failed.
            reason: Description of the failure.
            path: The cache path involved, if known.
        """
        self.operation = operation
        self.reason = reason
        self.path = path
        msg = f"Cache {operation} failed: {reason}"
        if path:
            msg += f" (path: {path})"
        super().__init__(msg)


__all__: list[str] = [
    "INVALID_ENVIRONMENT_MESSAGE",
    "AuthenticationError",
    "CacheError",
    "ConfigError",
    "EnvironmentNotFoundError",
    "InvalidEnvironmentError",
    "InvalidPatternError",
    "NotFoundError",
    "RemoteUnavailableError",
    "SiteNotFoundError",
    "TerminusError",
]
