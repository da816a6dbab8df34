"""Configuration for terminus-sites.

Settings come from ``TERMINUS_*`` environment variables and, optionally,
``~/.terminus/config.yaml``. Environment variables take precedence over
YAML values.

Example:
    >>> config = get_config()
    >>> config.base_url
    'https://terminus.pantheon.io:443/api'
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from terminus_sites.errors import ConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".terminus" / "config.yaml"


class TerminusConfig(BaseSettings):
    """Configuration for the Terminus client.

    Environment Variables:
        TERMINUS_HOST: API host name
        TERMINUS_PROTOCOL: http or https
        TERMINUS_PORT: API port
        TERMINUS_TIMEOUT: HTTP request timeout in seconds
        TERMINUS_VERIFY_SSL: Whether to verify TLS certificates
        TERMINUS_CACHE_DIR: Directory holding the session and cached responses
        TERMINUS_TIMEZONE: IANA timezone used to display dates
        TERMINUS_LOG_LEVEL: Minimum log level
        TERMINUS_LOG_FORMAT: console or json
    """

    model_config = SettingsConfigDict(
        env_prefix="TERMINUS_",
        extra="ignore",
    )

    host: str = Field(
        default="terminus.pantheon.io",
        min_length=1,
        description="API host name",
    )
    protocol: Literal["http", "https"] = Field(
        default="https",
        description="API protocol",
    )
    port: int = Field(
        default=443,
        ge=1,
        le=65535,
        description="API port",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout in seconds",
    )
    verify_ssl: bool = Field(
        default=True,
        description="Whether to verify TLS certificates",
    )
    cache_dir: Path = Field(
        default=Path.home() / ".terminus" / "cache",
        description="Directory holding the session file and cached responses",
    )
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used when formatting creation dates",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Minimum log level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer",
    )

    @field_validator("host")
    @classmethod
    def strip_host(cls, v: str) -> str:
        """Strip whitespace and trailing slashes from the host."""
        return v.strip().rstrip("/")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject timezone names the zoneinfo database does not know."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            msg = f"Unknown timezone: {v}"
            raise ValueError(msg) from e
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: Any) -> Any:
        """Accept log levels in any case."""
        return v.upper() if isinstance(v, str) else v

    @property
    def base_url(self) -> str:
        """Root URL of the hosting API."""
        return f"{self.protocol}://{self.host}:{self.port}/api"

    @property
    def session_path(self) -> Path:
        """Path to the persisted session file."""
        return self.cache_dir / "session"

    @property
    def tzinfo(self) -> ZoneInfo:
        """Timezone object for date formatting."""
        return ZoneInfo(self.timezone)


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Dictionary of configuration values, or empty dict if file doesn't exist.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or is not
            a mapping.
    """
    if not config_path.exists():
        return {}

    import yaml

    try:
        with config_path.open() as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(str(config_path), str(e)) from e

    if not data:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            str(config_path),
            f"expected a mapping, got {type(data).__name__}",
        )
    return data


def get_config(config_path: Path | None = None) -> TerminusConfig:
    """Load configuration from environment and optionally a YAML file.

    Args:
        config_path: Optional path to YAML config file. Defaults to
            ``~/.terminus/config.yaml``.

    Returns:
        Validated TerminusConfig instance.

    Raises:
        pydantic.ValidationError: If configuration values are invalid.
        ConfigError: If the YAML file cannot be loaded.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    yaml_config = load_yaml_config(config_path)

    # Init kwargs would outrank the environment, so only pass YAML keys that
    # have no TERMINUS_* override.
    overrides = {
        str(key): value
        for key, value in yaml_config.items()
        if f"TERMINUS_{str(key).upper()}" not in os.environ
    }
    return TerminusConfig(**overrides)


__all__: list[str] = [
    "DEFAULT_CONFIG_PATH",
    "TerminusConfig",
    "get_config",
    "load_yaml_config",
]
