"""Generic request forwarder for the APS resource APIs."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import httpx

from aps_mcp.core.config import ApsSettings
from aps_mcp.core.errors import ApsApiError, HostMismatchError

logger = logging.getLogger(__name__)

QueryValue = Union[str, int, float, bool, Sequence[Union[str, int, float, bool]], None]

_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)
_BODY_METHODS = frozenset({"POST", "PATCH"})
_DEFAULT_PORTS = {"http": 80, "https": 443}
DEFAULT_BODY_CONTENT_TYPE = "application/vnd.api+json"


def _origin(url: httpx.URL) -> tuple[str, str, Optional[int]]:
    scheme = url.scheme.lower()
    return scheme, url.host.lower(), url.port or _DEFAULT_PORTS.get(scheme)


def _query_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ApsApiClient:
    """Issue authenticated calls against the configured APS host.

    Paths are relative to the API base (``project/v1/hubs``) or absolute URLs
    with the same scheme, host and port. Any other origin is rejected before
    the bearer token is attached.
    """

    def __init__(
        self,
        settings: ApsSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._base_url = httpx.URL(settings.api_base)

    def build_url(
        self, path: str, query: Optional[Mapping[str, QueryValue]] = None
    ) -> httpx.URL:
        """Resolve ``path`` against the API base and merge ``query`` into it."""
        if _ABSOLUTE_URL.match(path):
            url = httpx.URL(path)
            if _origin(url) != _origin(self._base_url):
                target = f"{url.scheme}://{url.netloc.decode()}"
                allowed = f"{self._base_url.scheme}://{self._base_url.netloc.decode()}"
                raise HostMismatchError(
                    f"Refusing to send credentials to '{target}'. "
                    f"Only {allowed} URLs are allowed."
                )
        else:
            relative = path.lstrip("/")
            url = httpx.URL(f"{str(self._base_url).rstrip('/')}/{relative}")

        if query:
            params = url.params
            for key, value in query.items():
                if value is None:
                    continue
                if isinstance(value, (list, tuple)):
                    for item in value:
                        params = params.add(key, _query_string(item))
                else:
                    params = params.set(key, _query_string(value))
            url = url.copy_with(params=params)
        return url

    async def request(
        self,
        method: str,
        path: str,
        token: str,
        *,
        query: Optional[Mapping[str, QueryValue]] = None,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Call an APS endpoint and return the parsed response body."""
        method = method.upper()
        url = self.build_url(path, query)

        request_headers: Dict[str, str] = {"Authorization": f"Bearer {token}"}
        request_headers.update(headers or {})

        content: Optional[bytes] = None
        if method in _BODY_METHODS and body is not None:
            if not any(key.lower() == "content-type" for key in request_headers):
                request_headers["Content-Type"] = DEFAULT_BODY_CONTENT_TYPE
            content = json.dumps(body).encode("utf-8")

        async with httpx.AsyncClient(
            timeout=self._settings.http_timeout, transport=self._transport
        ) as client:
            response = await client.request(
                method, url, headers=request_headers, content=content
            )

        logger.debug("APS %s %s -> %s", method, url.path, response.status_code)

        if not response.is_success:
            raise ApsApiError(response.status_code, method, url.path, response.text)

        if response.status_code == 204:
            return {"ok": True, "status": 204}

        text = response.text
        if not text:
            return {"ok": True, "status": response.status_code}

        content_type = response.headers.get("content-type", "").lower()
        if "json" in content_type:
            try:
                return json.loads(text)
            except ValueError:
                logger.debug("Unparsable JSON body from %s; returning raw text", url.path)
        return {"ok": True, "status": response.status_code, "body": text}


__all__ = ["ApsApiClient", "DEFAULT_BODY_CONTENT_TYPE", "QueryValue"]
