"""
Factory functions that build the shared clients and services once per process.
"""

from functools import lru_cache
from typing import Optional

from aps_mcp.api.tools import ApsToolHandlers
from aps_mcp.clients import ApsApiClient, ApsOAuthClient, SessionFileStore
from aps_mcp.core.config import AppSettings, get_settings
from aps_mcp.services import (
    ApsTokenProvider,
    ClientCredentialsTokenCache,
    InteractiveSessionService,
    TokenCipherService,
)


@lru_cache()
def _settings() -> AppSettings:
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_oauth_client() -> ApsOAuthClient:
    """Create a singleton APS OAuth client."""
    return ApsOAuthClient(_settings().aps)


@lru_cache()
def get_api_client() -> ApsApiClient:
    """Provide the request forwarder bound to the configured API host."""
    return ApsApiClient(_settings().aps)


@lru_cache()
def get_token_cipher_service() -> Optional[TokenCipherService]:
    """Provide session encryption when APS_SESSION_SECRET is set."""
    secret = _settings().security.session_secret
    if not secret:
        return None
    return TokenCipherService(secret=secret)


@lru_cache()
def get_session_store() -> SessionFileStore:
    settings = _settings()
    return SessionFileStore(settings.oauth.session_file, cipher=get_token_cipher_service())


@lru_cache()
def get_token_cache() -> ClientCredentialsTokenCache:
    """The single client-credentials token slot for this process."""
    return ClientCredentialsTokenCache(get_oauth_client())


@lru_cache()
def get_session_service() -> InteractiveSessionService:
    settings = _settings()
    return InteractiveSessionService(
        oauth_client=get_oauth_client(),
        store=get_session_store(),
        oauth_settings=settings.oauth,
    )


@lru_cache()
def get_token_provider() -> ApsTokenProvider:
    return ApsTokenProvider(
        _settings().aps,
        token_cache=get_token_cache(),
        session=get_session_service(),
    )


def get_tool_handlers() -> ApsToolHandlers:
    """Build the tool handlers from the shared singletons."""
    return ApsToolHandlers(
        settings=_settings(),
        api_client=get_api_client(),
        token_provider=get_token_provider(),
        session=get_session_service(),
    )


__all__ = [
    "get_api_client",
    "get_oauth_client",
    "get_session_service",
    "get_session_store",
    "get_token_cache",
    "get_token_cipher_service",
    "get_token_provider",
    "get_tool_handlers",
]
