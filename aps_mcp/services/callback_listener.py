"""
Short-lived local listener that completes the authorization-code handshake.

One listener serves one login attempt: it binds the callback port, honors the
first ``/callback`` request only, and shuts down once that request resolves
the attempt or the timeout elapses.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from html import escape
from typing import Awaitable, Callable, Optional

import httpx
import uvicorn

from aps_mcp.api.callback import create_callback_app, render_page
from aps_mcp.core.errors import (
    CallbackStateError,
    InteractiveLoginError,
    LoginTimeoutError,
    OAuthTokenExchangeError,
)

logger = logging.getLogger(__name__)

CodeExchanger = Callable[[str], Awaitable[str]]
StateVerifier = Callable[[Optional[str]], None]


class OAuthCallbackListener:
    """Serve ``GET /callback`` on a local port until one callback arrives."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        exchange_code: CodeExchanger,
        verify_state: Optional[StateVerifier] = None,
    ) -> None:
        self._host = host
        self._port = port
        self._exchange_code = exchange_code
        self._verify_state = verify_state
        self._claimed = False
        self._result: Optional[asyncio.Future[str]] = None

    @property
    def port(self) -> int:
        return self._port

    @property
    def redirect_uri(self) -> str:
        return f"http://localhost:{self._port}/callback"

    def _future(self) -> asyncio.Future[str]:
        if self._result is None:
            self._result = asyncio.get_running_loop().create_future()
        return self._result

    def _resolve(self, access_token: str) -> None:
        future = self._future()
        if not future.done():
            future.set_result(access_token)

    def _reject(self, exc: InteractiveLoginError) -> None:
        future = self._future()
        if not future.done():
            future.set_exception(exc)

    async def handle_callback(
        self,
        *,
        code: Optional[str],
        state: Optional[str],
        error: Optional[str],
        error_description: Optional[str],
    ) -> tuple[int, str]:
        if self._claimed:
            return 409, render_page(
                "Login already handled",
                "This login attempt has already completed. You can close this window.",
            )
        self._claimed = True

        if error:
            description = escape(error_description or error)
            self._reject(
                InteractiveLoginError(
                    f"APS authorization failed ({escape(error)}): {description}"
                )
            )
            return 400, render_page("Authorization failed", description)

        if not code:
            self._reject(InteractiveLoginError("Callback did not include an authorization code."))
            return 400, render_page(
                "Authorization failed", "No authorization code was received."
            )

        if self._verify_state is not None:
            try:
                self._verify_state(state)
            except CallbackStateError as exc:
                self._reject(exc)
                return 400, render_page("Authorization failed", escape(str(exc)))

        try:
            access_token = await self._exchange_code(code)
        except (OAuthTokenExchangeError, httpx.HTTPError) as exc:
            logger.warning("Authorization code exchange failed: %s", exc)
            self._reject(InteractiveLoginError(f"Token exchange failed: {exc}"))
            return 502, render_page(
                "Authorization failed", escape(f"Token exchange failed: {exc}")
            )
        except Exception as exc:
            logger.exception("Completing the APS login failed")
            failure = InteractiveLoginError(f"Login could not be completed: {exc}")
            failure.__cause__ = exc
            self._reject(failure)
            return 500, render_page(
                "Authorization failed", escape(f"Login could not be completed: {exc}")
            )

        self._resolve(access_token)
        return 200, render_page(
            "Signed in to Autodesk",
            "Authentication complete. You can close this window and return to your assistant.",
        )

    def _bind(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self._host, self._port))
        except OSError as exc:
            sock.close()
            raise InteractiveLoginError(
                f"Cannot listen for the OAuth callback on {self._host}:{self._port}: {exc}"
            ) from exc
        self._port = sock.getsockname()[1]
        return sock

    async def run(self, on_ready: Callable[[str], None], *, timeout: float) -> str:
        """Serve until the first callback resolves the login, then shut down.

        ``on_ready`` receives the redirect URI once the port is accepting
        connections.
        """
        future = self._future()
        sock = self._bind()
        config = uvicorn.Config(
            create_callback_app(self),
            log_level="warning",
            access_log=False,
            lifespan="off",
        )
        server = uvicorn.Server(config)
        serve_task = asyncio.create_task(server.serve(sockets=[sock]))
        try:
            while not server.started:
                if serve_task.done():
                    raise InteractiveLoginError(
                        "OAuth callback listener stopped before it started."
                    )
                await asyncio.sleep(0.01)

            logger.info("Waiting for APS OAuth callback on %s", self.redirect_uri)
            on_ready(self.redirect_uri)
            try:
                return await asyncio.wait_for(future, timeout=timeout)
            except asyncio.TimeoutError:
                raise LoginTimeoutError(
                    f"Timed out after {timeout:g}s waiting for the APS login callback."
                ) from None
        finally:
            server.should_exit = True
            await serve_task
            sock.close()


__all__ = ["OAuthCallbackListener"]
