"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for local use. Server deployments usually only need to set the port.
"""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared_kernel.execution_mode import ExecutionMode


class ServerSettings(BaseSettings):
    """HTTP server settings for server mode.

    Environment variables:
        C8Y_MCP_SERVER_HOST: Bind address (default: 0.0.0.0)
        C8Y_MCP_SERVER_PORT: Listen port (default: 3000). PORT and
            SERVER_PORT are honoured as well.
        C8Y_MCP_SERVER_MCP_PATH: Path of the MCP endpoint (default: /mcp)
    """

    model_config = SettingsConfigDict(
        env_prefix="C8Y_MCP_SERVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(
        default=3000,
        description="Listen port",
        ge=1,
        le=65535,
        validation_alias=AliasChoices("C8Y_MCP_SERVER_PORT", "PORT", "SERVER_PORT"),
    )
    mcp_path: str = Field(default="/mcp", description="MCP endpoint path")


class Settings(BaseSettings):
    """Main application settings.

    Environment variables:
        C8Y_MCP_APP_NAME: Name announced to MCP clients
        C8Y_MCP_DEBUG: Enable debug logging (default: false)
        C8Y_MCP_KEYRING_SERVICE: Keyring service holding stored credentials
        C8Y_MCP_EXECUTION_MODE: single_user or server (default: single_user)
        C8Y_MCP_REQUEST_TIMEOUT_SECONDS: Cumulocity request timeout (default: 30)
        C8Y_MCP_DEFAULT_PAGE_SIZE: Page size when a tool call sets none (default: 50)
    """

    model_config = SettingsConfigDict(
        env_prefix="C8Y_MCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="c8y-mcp-server", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    keyring_service: str = Field(
        default="c8y-mcp-server",
        description="Keyring service identifier for stored credentials",
    )
    execution_mode: ExecutionMode = Field(
        default=ExecutionMode.SINGLE_USER,
        description="Where credentials come from",
    )
    request_timeout_seconds: float = Field(
        default=30,
        description="Timeout for requests to Cumulocity",
        ge=1,
        le=300,
    )
    default_page_size: int = Field(
        default=50,
        description="Page size used when a tool call does not set one",
        ge=1,
        le=2000,
    )

    @property
    def server(self) -> ServerSettings:
        """Get server settings."""
        return get_server_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_server_settings() -> ServerSettings:
    """Get cached server settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return ServerSettings()
