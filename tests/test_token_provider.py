try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from aps_mcp.core.config import ApsSettings
from aps_mcp.core.errors import ApsConfigurationError
from aps_mcp.services.token_provider import APP_MODE, USER_MODE, ApsTokenProvider


class DummyTokenCache:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str | None]] = []

    async def get_token(self, client_id: str, client_secret: str, scope: str | None = None) -> str:
        self.calls.append((client_id, client_secret, scope))
        return "app-token"


class DummySession:
    def __init__(self, user_token: str | None) -> None:
        self.user_token = user_token

    async def get_valid_token(self, client_id: str, client_secret: str) -> str | None:
        return self.user_token


@pytest.mark.asyncio
async def test_user_session_wins(aps_settings) -> None:
    cache = DummyTokenCache()
    provider = ApsTokenProvider(aps_settings, cache, DummySession("user-token"))

    assert await provider.get_token_with_mode() == ("user-token", USER_MODE)
    assert cache.calls == []


@pytest.mark.asyncio
async def test_falls_back_to_client_credentials(aps_settings) -> None:
    cache = DummyTokenCache()
    provider = ApsTokenProvider(aps_settings, cache, DummySession(None))

    assert await provider.get_token_with_mode() == ("app-token", APP_MODE)
    assert cache.calls == [("test-client-id", "test-client-secret", None)]


@pytest.mark.asyncio
async def test_missing_credentials_are_reported() -> None:
    settings = ApsSettings(client_id="", client_secret="")
    provider = ApsTokenProvider(settings, DummyTokenCache(), DummySession("user-token"))

    with pytest.raises(ApsConfigurationError, match="APS_CLIENT_ID and APS_CLIENT_SECRET"):
        await provider.get_token()
