"""Choose the bearer token every tool call uses."""

from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

from aps_mcp.core.errors import ApsConfigurationError

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from aps_mcp.core.config import ApsSettings
    from aps_mcp.services.interactive_session import InteractiveSessionService
    from aps_mcp.services.token_cache import ClientCredentialsTokenCache

USER_MODE = "3-legged"
APP_MODE = "2-legged"


class ApsTokenProvider:
    """Prefer a valid interactive user token, else fall back to client credentials."""

    def __init__(
        self,
        settings: "ApsSettings",
        token_cache: "ClientCredentialsTokenCache",
        session: "InteractiveSessionService",
    ) -> None:
        self._settings = settings
        self._cache = token_cache
        self._session = session

    def credentials(self) -> Tuple[str, str]:
        if not self._settings.client_id or not self._settings.client_secret:
            raise ApsConfigurationError(
                "APS_CLIENT_ID and APS_CLIENT_SECRET environment variables are required."
            )
        return self._settings.client_id, self._settings.client_secret

    async def get_token_with_mode(self) -> Tuple[str, str]:
        client_id, client_secret = self.credentials()
        user_token = await self._session.get_valid_token(client_id, client_secret)
        if user_token:
            return user_token, USER_MODE
        token = await self._cache.get_token(
            client_id, client_secret, self._settings.scope or None
        )
        return token, APP_MODE

    async def get_token(self) -> str:
        token, _ = await self.get_token_with_mode()
        return token


__all__ = ["APP_MODE", "ApsTokenProvider", "USER_MODE"]
