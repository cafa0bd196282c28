"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from aps_mcp.core.config import ApsSettings, OAuthSettings


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def aps_settings() -> ApsSettings:
    return ApsSettings(
        client_id="test-client-id",
        client_secret="test-client-secret",
        scope="",
        api_base_url="https://developer.api.autodesk.com",
        auth_base_url="https://developer.api.autodesk.com/authentication/v2",
        http_timeout=5.0,
    )


@pytest.fixture
def oauth_settings(tmp_path) -> OAuthSettings:
    return OAuthSettings(
        callback_host="127.0.0.1",
        callback_port=0,
        login_timeout_seconds=5.0,
        user_scope="data:read data:write",
        session_file=tmp_path / "session.json",
    )
