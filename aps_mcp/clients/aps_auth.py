"""
APS OAuth utilities.

These helpers talk to the APS authentication endpoint for the client
credentials, authorization code and refresh token grants, and sign the
``state`` value carried through the interactive flow.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import json
import logging
from hashlib import sha256
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode

import httpx

from aps_mcp.core.config import ApsSettings
from aps_mcp.core.errors import CallbackStateError, OAuthTokenExchangeError

logger = logging.getLogger(__name__)


class OAuthStateEncoder:
    """Encode and decode OAuth state values to guard against tampering."""

    def __init__(self, secret_key: str) -> None:
        self._secret_key = secret_key.encode("utf-8")

    def encode(self, payload: Dict[str, Any]) -> str:
        serialized = json.dumps(payload, separators=(",", ":"), sort_keys=True)
        signature = hmac.new(self._secret_key, serialized.encode("utf-8"), sha256).digest()
        return base64.urlsafe_b64encode(signature + serialized.encode("utf-8")).decode("utf-8")

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            decoded = base64.urlsafe_b64decode(token.encode("utf-8"))
        except (binascii.Error, ValueError) as exc:
            raise CallbackStateError("OAuth state is not valid base64.") from exc
        signature, serialized = decoded[:32], decoded[32:]
        expected_signature = hmac.new(self._secret_key, serialized, sha256).digest()
        if not hmac.compare_digest(signature, expected_signature):
            raise CallbackStateError("Invalid OAuth state signature.")
        return json.loads(serialized)


class ApsOAuthClient:
    """Build APS authorization URLs and exchange grants for tokens."""

    def __init__(
        self,
        settings: ApsSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def token_url(self) -> str:
        return self._settings.token_url

    def build_authorization_url(
        self, *, client_id: str, redirect_uri: str, scope: str, state: str | None = None
    ) -> str:
        """Construct the APS consent URL."""
        params = {
            "client_id": client_id,
            "response_type": "code",
            "redirect_uri": redirect_uri,
            "scope": scope,
        }
        if state:
            params["state"] = state
        return f"{self._settings.authorize_url}?{urlencode(params)}"

    async def exchange_client_credentials(
        self, client_id: str, client_secret: str, scope: str
    ) -> Tuple[str, int]:
        """
        Perform a client-credentials exchange.

        Returns a tuple of (access_token, expires_in_seconds).
        """
        payload = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
            "scope": scope,
        }
        token_payload = await self._post_token(payload)
        access_token = token_payload.get("access_token")
        expires_in = token_payload.get("expires_in")
        if not access_token or not expires_in:
            raise OAuthTokenExchangeError(
                200, "Incomplete token payload returned from APS."
            )
        return access_token, int(expires_in)

    async def exchange_authorization_code(
        self, client_id: str, client_secret: str, code: str, redirect_uri: str
    ) -> Tuple[str, str, int]:
        """
        Exchange an authorization code for tokens.

        Returns a tuple of (access_token, refresh_token, expires_in_seconds).
        """
        payload = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": redirect_uri,
        }
        token_payload = await self._post_token(payload)
        access_token = token_payload.get("access_token")
        refresh_token = token_payload.get("refresh_token")
        expires_in = token_payload.get("expires_in")

        if not access_token or not refresh_token or not expires_in:
            raise OAuthTokenExchangeError(
                200, "Incomplete token payload returned from APS."
            )

        return access_token, refresh_token, int(expires_in)

    async def refresh_token(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        scope: str | None = None,
    ) -> Tuple[str, str, int]:
        """
        Refresh the access token using a stored refresh token.

        APS rotates refresh tokens; when the response omits one, the stored
        token is returned unchanged.
        """
        payload = {
            "grant_type": "refresh_token",
            "client_id": client_id,
            "client_secret": client_secret,
            "refresh_token": refresh_token,
        }
        if scope:
            payload["scope"] = scope
        token_payload = await self._post_token(payload)
        access_token = token_payload.get("access_token")
        expires_in = token_payload.get("expires_in")

        if not access_token or not expires_in:
            raise OAuthTokenExchangeError(
                200, "Incomplete refresh payload returned from APS."
            )

        return access_token, token_payload.get("refresh_token") or refresh_token, int(expires_in)

    async def _post_token(self, payload: Dict[str, str]) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            timeout=self._settings.http_timeout, transport=self._transport
        ) as client:
            response = await client.post(
                self.token_url,
                data=payload,
                headers={"Accept": "application/json"},
            )

        if not response.is_success:
            logger.warning(
                "APS token request (%s) failed with status %s",
                payload["grant_type"],
                response.status_code,
            )
            raise OAuthTokenExchangeError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as exc:
            raise OAuthTokenExchangeError(response.status_code, response.text) from exc


__all__ = [
    "ApsOAuthClient",
    "OAuthStateEncoder",
]
