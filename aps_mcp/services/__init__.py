"""Service layer exports."""

from .callback_listener import OAuthCallbackListener
from .interactive_session import InteractiveSessionService, SessionState
from .token_cache import ClientCredentialsTokenCache
from .token_cipher import TokenCipherService
from .token_provider import ApsTokenProvider

__all__ = [
    "ApsTokenProvider",
    "ClientCredentialsTokenCache",
    "InteractiveSessionService",
    "OAuthCallbackListener",
    "SessionState",
    "TokenCipherService",
]
