"""Expose constructed client wrappers."""

from .aps_api import ApsApiClient
from .aps_auth import ApsOAuthClient, OAuthStateEncoder
from .session_store import SessionFileStore, SessionStore

__all__ = [
    "ApsApiClient",
    "ApsOAuthClient",
    "OAuthStateEncoder",
    "SessionFileStore",
    "SessionStore",
]
