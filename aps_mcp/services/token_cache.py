"""
Client-credentials token cache.

Holds one cached token per process. A token is reused while its scope matches
the request and more than the safety margin of validity remains.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, TYPE_CHECKING

from aps_mcp.core.config import DEFAULT_SCOPE
from aps_mcp.models.oauth import CachedToken

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from aps_mcp.clients.aps_auth import ApsOAuthClient

logger = logging.getLogger(__name__)

SAFETY_MARGIN = timedelta(seconds=60)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClientCredentialsTokenCache:
    """Serve client-credentials tokens from a single in-memory slot.

    Concurrent callers may both refresh an expired slot; the exchange is
    idempotent and the last writer wins.
    """

    def __init__(
        self,
        oauth_client: "ApsOAuthClient",
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._oauth = oauth_client
        self._clock = clock
        self._cached: Optional[CachedToken] = None

    @property
    def cached(self) -> Optional[CachedToken]:
        return self._cached

    async def get_token(
        self, client_id: str, client_secret: str, scope: Optional[str] = None
    ) -> str:
        """Return a cached token or perform a fresh client-credentials exchange."""
        effective_scope = (scope or "").strip() or DEFAULT_SCOPE
        now = self._clock()
        cached = self._cached
        if cached and cached.is_valid_for(effective_scope, margin=SAFETY_MARGIN, now=now):
            return cached.token

        access_token, expires_in = await self._oauth.exchange_client_credentials(
            client_id, client_secret, effective_scope
        )
        self._cached = CachedToken(
            token=access_token,
            expires_at=now + timedelta(seconds=expires_in) - SAFETY_MARGIN,
            scope=effective_scope,
        )
        logger.info(
            "Obtained client-credentials token for scope '%s' (expires in %ss)",
            effective_scope,
            expires_in,
        )
        return access_token


__all__ = ["ClientCredentialsTokenCache", "SAFETY_MARGIN"]
