"""Configuration loader for Timeserver.

Loads configuration from workspace/config.yaml with support for
environment variable resolution (values prefixed with 'env.').
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from timeserver.ratelimit import DEFAULT_CLIENT_IP_HEADERS
from timeserver.security import DEFAULT_ALLOWED_HOSTS, SUPPORTED_PROTOCOL_VERSIONS


class ServerInfoConfig(BaseModel):
    """Server identity reported by ``initialize``."""

    name: str = Field(..., description="Server name")
    version: str = Field(..., description="Server version")
    instructions: str = Field(default="", description="Usage instructions for connecting clients")


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = Field(..., description="API host address")
    port: int = Field(..., description="API port number")
    debug: bool = Field(default=False, description="Debug mode flag")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")


class ProtocolConfig(BaseModel):
    """Protocol version negotiation."""

    supported_versions: list[str] = Field(
        default_factory=lambda: list(SUPPORTED_PROTOCOL_VERSIONS),
        min_length=1,
        description="Protocol versions this server speaks",
    )


class SecurityConfig(BaseModel):
    """Origin allow-list and client identification."""

    allowed_hosts: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_HOSTS),
        description="Hostnames (and their subdomains) accepted in the Origin header",
    )
    client_ip_headers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CLIENT_IP_HEADERS),
        description="Trusted proxy headers, first present wins",
    )


class RateLimitConfig(BaseModel):
    """Fixed-window rate limiting."""

    requests_per_window: int = Field(default=60, gt=0, description="Admitted requests per window per client")
    window_ms: int = Field(default=60_000, gt=0, description="Window length in milliseconds")


class TimeConfig(BaseModel):
    """Defaults used by the time tools."""

    default_timezone: str = Field(default="UTC", description="IANA zone for naive inputs and 'now'")
    default_format: str = Field(default="YYYY-MM-DD HH:mm:ss", description="Default output format")


class ConfigData(BaseModel):
    """Complete configuration data structure."""

    server: ServerInfoConfig = Field(..., description="Server metadata")
    api: APIConfig = Field(..., description="API configuration")
    protocol: ProtocolConfig = Field(default_factory=ProtocolConfig, description="Protocol configuration")
    security: SecurityConfig = Field(default_factory=SecurityConfig, description="Security configuration")
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig, description="Rate limit configuration")
    time: TimeConfig = Field(default_factory=TimeConfig, description="Time tool configuration")


class Config:
    """Global configuration singleton for Timeserver.

    Loads configuration from workspace/config.yaml with environment variable
    resolution. Values prefixed with 'env.' are automatically resolved from
    environment variables.

    Example:
        port: env.TIMESERVER_PORT  # Loads from os.getenv("TIMESERVER_PORT")

    Usage:
        from timeserver.config import Config

        config = Config()  # Uses default workspace path
        print(config.data.server.name)
        print(config.data.rate_limit.requests_per_window)
    """

    _instance: "Config | None" = None

    def __new__(cls, workspace_path: str | None = None) -> "Config":
        """Create or return the singleton instance.

        Args:
            workspace_path: Path to workspace directory. If None, uses WORKSPACE_DIR
                         environment variable or defaults to './workspace'.
                         Only used on first initialization.

        Returns:
            Config: The singleton configuration instance.
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, workspace_path: str | None = None) -> None:
        """Initialize the configuration (only runs once).

        Args:
            workspace_path: Path to workspace directory. Ignored after first init.
        """
        if self._initialized:
            return

        self._workspace_path = self._resolve_workspace_path(workspace_path)
        self._config_file = Path(self._workspace_path) / "config.yaml"
        self._raw_config: dict[str, Any] = {}
        self._data: ConfigData | None = None

        self._load()
        self._initialized = True

    def _resolve_workspace_path(self, workspace_path: str | None) -> str:
        """Resolve the workspace path from parameter or environment."""
        if workspace_path is not None:
            return workspace_path

        env_path = os.getenv("WORKSPACE_DIR")
        if env_path is not None:
            return env_path

        return "./workspace"

    def _load(self) -> None:
        """Load and parse the configuration file."""
        if not self._config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self._config_file}")

        with open(self._config_file, encoding="utf-8") as f:
            self._raw_config = yaml.safe_load(f) or {}

        resolved_config = self._resolve_env_values(self._raw_config)
        self._data = ConfigData.model_validate(resolved_config)

    def _resolve_env_values(self, data: Any) -> Any:
        """Recursively resolve environment variable references.

        Any string value starting with 'env.' is resolved from the
        corresponding environment variable. If not found, defaults to None.
        """
        if isinstance(data, dict):
            return {key: self._resolve_env_values(value) for key, value in data.items()}

        if isinstance(data, list):
            return [self._resolve_env_values(item) for item in data]

        if isinstance(data, str) and data.startswith("env."):
            return os.getenv(data[4:])

        return data

    @property
    def data(self) -> ConfigData:
        """Get the parsed configuration data.

        Raises:
            RuntimeError: If configuration hasn't been loaded.
        """
        if self._data is None:
            raise RuntimeError("Configuration not loaded")
        return self._data

    @property
    def workspace_path(self) -> str:
        """Get the workspace path."""
        return self._workspace_path

    def reload(self) -> None:
        """Reload the configuration from disk."""
        self._load()

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (mainly for testing).

        After calling this, the next Config() call will create a new instance.
        """
        cls._instance = None
