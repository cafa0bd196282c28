"""
Application configuration models and helpers.

Centralizes settings management so the MCP tool server, the interactive login
flow and the request forwarder share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import os

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SCOPE = "data:read"


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


def _default_session_file() -> Path:
    return Path.home() / ".config" / "aps-mcp" / "session.json"


class ApsSettings(BaseSettings):
    """Machine credentials and endpoints for Autodesk Platform Services."""

    model_config = SettingsConfigDict(populate_by_name=True)

    client_id: str = Field("", alias="APS_CLIENT_ID")
    client_secret: str = Field("", alias="APS_CLIENT_SECRET")
    scope: str = Field(
        "",
        alias="APS_SCOPE",
        description="Client-credentials scope(s); falls back to data:read when empty.",
    )
    api_base_url: AnyHttpUrl = Field(
        "https://developer.api.autodesk.com", alias="APS_API_BASE_URL"
    )
    auth_base_url: AnyHttpUrl = Field(
        "https://developer.api.autodesk.com/authentication/v2",
        alias="APS_AUTH_BASE_URL",
    )
    http_timeout: float = Field(30.0, alias="APS_HTTP_TIMEOUT")

    @property
    def api_base(self) -> str:
        return str(self.api_base_url).rstrip("/")

    @property
    def api_host(self) -> str:
        return urlparse(self.api_base).netloc.lower()

    @property
    def token_url(self) -> str:
        return f"{str(self.auth_base_url).rstrip('/')}/token"

    @property
    def authorize_url(self) -> str:
        return f"{str(self.auth_base_url).rstrip('/')}/authorize"

    @property
    def effective_scope(self) -> str:
        return self.scope.strip() or DEFAULT_SCOPE


class OAuthSettings(BaseSettings):
    """Interactive (authorization-code) flow configuration."""

    model_config = SettingsConfigDict(populate_by_name=True)

    callback_host: str = Field("127.0.0.1", alias="APS_CALLBACK_HOST")
    callback_port: int = Field(8910, alias="APS_CALLBACK_PORT")
    login_timeout_seconds: float = Field(120.0, alias="APS_LOGIN_TIMEOUT")
    user_scope: str = Field("data:read data:write", alias="APS_USER_SCOPE")
    session_file: Path = Field(
        default_factory=_default_session_file, alias="APS_SESSION_FILE"
    )

    @field_validator("user_scope", mode="before")
    @classmethod
    def _join_scopes(cls, value: str | list[str] | tuple[str, ...]) -> str:
        """Support providing scopes as a comma-separated string or a list."""
        if isinstance(value, (list, tuple)):
            return " ".join(scope.strip() for scope in value if scope.strip())
        return " ".join(scope.strip() for scope in value.replace(",", " ").split())

    def redirect_uri(self, port: int | None = None) -> str:
        return f"http://localhost:{port or self.callback_port}/callback"


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(populate_by_name=True)

    session_secret: Optional[str] = Field(
        None,
        alias="APS_SESSION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting the persisted session."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the MCP server."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    server_name: str = Field("aps-mcp", alias="APS_MCP_SERVER_NAME")
    log_level: str = Field("INFO", alias="APP_LOG_LEVEL")
    aps: ApsSettings = Field(default_factory=ApsSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "ApsSettings",
    "DEFAULT_SCOPE",
    "OAuthSettings",
    "SecuritySettings",
    "get_settings",
]
