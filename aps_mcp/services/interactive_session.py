"""
Interactive (authorization-code) user session.

Lifecycle: no session -> awaiting callback -> authenticated, and from there
either authenticated again after a refresh or back to no session after a
logout or a failed refresh.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import uuid
import webbrowser
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, TYPE_CHECKING

import httpx

from aps_mcp.clients.aps_auth import OAuthStateEncoder
from aps_mcp.core.errors import (
    CallbackStateError,
    InteractiveLoginError,
    LoginTimeoutError,
    OAuthTokenExchangeError,
)
from aps_mcp.models.oauth import InteractiveTokenRecord
from aps_mcp.services.callback_listener import OAuthCallbackListener
from aps_mcp.services.token_cache import SAFETY_MARGIN

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from aps_mcp.clients.aps_auth import ApsOAuthClient
    from aps_mcp.clients.session_store import SessionStore
    from aps_mcp.core.config import OAuthSettings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionState(str, enum.Enum):
    NO_SESSION = "no_session"
    AWAITING_CALLBACK = "awaiting_callback"
    AUTHENTICATED = "authenticated"


class InteractiveSessionService:
    """Owns the persisted user token and its refresh lifecycle."""

    def __init__(
        self,
        oauth_client: "ApsOAuthClient",
        store: "SessionStore",
        oauth_settings: "OAuthSettings",
        *,
        browser_opener: Callable[[str], bool] = webbrowser.open,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._oauth = oauth_client
        self._store = store
        self._settings = oauth_settings
        self._open_browser = browser_opener
        self._clock = clock
        self._record: Optional[InteractiveTokenRecord] = None
        self._loaded = False
        self._awaiting_callback = False
        self._refresh_lock = asyncio.Lock()
        self._browser_task: Optional[asyncio.Task[None]] = None
        self.last_refresh_failure: Optional[str] = None

    @property
    def state(self) -> SessionState:
        if self._awaiting_callback:
            return SessionState.AWAITING_CALLBACK
        if self._current_record() is not None:
            return SessionState.AUTHENTICATED
        return SessionState.NO_SESSION

    def _current_record(self) -> Optional[InteractiveTokenRecord]:
        if not self._loaded:
            self._record = self._store.load()
            self._loaded = True
        return self._record

    def _persist(self, record: InteractiveTokenRecord) -> None:
        self._store.save(record)
        self._record = record
        self._loaded = True

    async def login(
        self,
        client_id: str,
        client_secret: str,
        scope: Optional[str] = None,
        callback_port: Optional[int] = None,
    ) -> str:
        """Run the browser-based login and return the new access token."""
        effective_scope = scope or self._settings.user_scope
        encoder = OAuthStateEncoder(secret_key=client_secret)
        nonce = uuid.uuid4().hex
        state = encoder.encode(
            {"nonce": nonce, "issued_at": self._clock().isoformat()}
        )

        def _verify_state(returned: Optional[str]) -> None:
            if not returned:
                raise CallbackStateError("Callback did not include the OAuth state.")
            if encoder.decode(returned).get("nonce") != nonce:
                raise CallbackStateError("OAuth state does not belong to this login attempt.")

        listener: OAuthCallbackListener

        async def _exchange(code: str) -> str:
            issued_at = self._clock()
            access_token, refresh_token, expires_in = await self._oauth.exchange_authorization_code(
                client_id, client_secret, code, listener.redirect_uri
            )
            self._persist(
                InteractiveTokenRecord(
                    access_token=access_token,
                    refresh_token=refresh_token,
                    expires_at=issued_at + timedelta(seconds=expires_in),
                    scope=effective_scope,
                )
            )
            self.last_refresh_failure = None
            return access_token

        listener = OAuthCallbackListener(
            host=self._settings.callback_host,
            port=callback_port or self._settings.callback_port,
            exchange_code=_exchange,
            verify_state=_verify_state,
        )

        authorize_urls: list[str] = []

        def _on_ready(redirect_uri: str) -> None:
            url = self._oauth.build_authorization_url(
                client_id=client_id,
                redirect_uri=redirect_uri,
                scope=effective_scope,
                state=state,
            )
            authorize_urls.append(url)
            self._browser_task = asyncio.create_task(self._launch_browser(url))

        self._awaiting_callback = True
        try:
            access_token = await listener.run(
                _on_ready, timeout=self._settings.login_timeout_seconds
            )
        except LoginTimeoutError as exc:
            logger.warning("Interactive APS login failed: %s", exc)
            if not authorize_urls:
                raise
            raise LoginTimeoutError(
                f"{exc} Open this URL to sign in, then run aps_login again: {authorize_urls[0]}"
            ) from exc
        except InteractiveLoginError as exc:
            logger.warning("Interactive APS login failed: %s", exc)
            raise
        finally:
            self._awaiting_callback = False

        logger.info("Interactive APS login completed (scope '%s')", effective_scope)
        return access_token

    async def _launch_browser(self, url: str) -> None:
        # console browsers block until they exit
        try:
            opened = await asyncio.to_thread(self._open_browser, url)
        except (webbrowser.Error, OSError) as exc:
            logger.warning("Could not open a browser (%s); visit this URL to sign in: %s", exc, url)
            return
        if not opened:
            logger.warning("Could not open a browser; visit this URL to sign in: %s", url)

    async def get_valid_token(self, client_id: str, client_secret: str) -> Optional[str]:
        """Return the user token, refreshing it once when it is about to expire.

        Concurrent callers share a single refresh. A failed refresh clears the
        session and yields ``None`` so callers can fall back to
        client-credentials auth.
        """
        record = self._current_record()
        if record is None:
            return None
        if record.remaining(self._clock()) > SAFETY_MARGIN:
            return record.access_token

        # APS rotates refresh tokens, so only one refresh may use a given token.
        async with self._refresh_lock:
            record = self._reload()
            if record is None:
                return None
            now = self._clock()
            if record.remaining(now) > SAFETY_MARGIN:
                return record.access_token
            return await self._refresh(client_id, client_secret, record, now)

    def _reload(self) -> Optional[InteractiveTokenRecord]:
        self._record = self._store.load()
        self._loaded = True
        return self._record

    async def _refresh(
        self,
        client_id: str,
        client_secret: str,
        record: InteractiveTokenRecord,
        now: datetime,
    ) -> Optional[str]:
        try:
            access_token, refresh_token, expires_in = await self._oauth.refresh_token(
                client_id, client_secret, record.refresh_token, record.scope
            )
        except (OAuthTokenExchangeError, httpx.HTTPError) as exc:
            current = self._reload()
            if current is not None and current.refresh_token != record.refresh_token:
                logger.info("APS user session was refreshed elsewhere; using the stored token")
                return current.access_token if current.remaining(now) > SAFETY_MARGIN else None
            logger.warning(
                "Refreshing the APS user session failed; signing out. "
                "Run aps_login to sign in again. (%s)",
                exc,
            )
            self.logout()
            self.last_refresh_failure = str(exc)
            return None

        self._persist(
            InteractiveTokenRecord(
                access_token=access_token,
                refresh_token=refresh_token,
                expires_at=now + timedelta(seconds=expires_in),
                scope=record.scope,
            )
        )
        logger.info("Refreshed APS user session")
        return access_token

    def logout(self) -> None:
        """Delete the persisted session and forget the in-memory copy."""
        self._store.clear()
        self._record = None
        self._loaded = True
        self.last_refresh_failure = None


__all__ = ["InteractiveSessionService", "SessionState"]
