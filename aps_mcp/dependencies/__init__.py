"""Expose dependency helpers for the MCP server."""

from .clients import (
    get_api_client,
    get_oauth_client,
    get_session_service,
    get_session_store,
    get_token_cache,
    get_token_cipher_service,
    get_token_provider,
    get_tool_handlers,
)
from .config import get_app_settings

__all__ = [
    "get_api_client",
    "get_app_settings",
    "get_oauth_client",
    "get_session_service",
    "get_session_store",
    "get_token_cache",
    "get_token_cipher_service",
    "get_token_provider",
    "get_tool_handlers",
]
