"""
FastAPI app served by the local OAuth callback listener.

Only ``GET /callback`` is routed; every other path gets FastAPI's 404.
"""

from __future__ import annotations

from html import escape
from typing import Optional, Protocol

from fastapi import FastAPI, Query
from fastapi.responses import HTMLResponse


class CallbackHandler(Protocol):
    async def handle_callback(
        self,
        *,
        code: Optional[str],
        state: Optional[str],
        error: Optional[str],
        error_description: Optional[str],
    ) -> tuple[int, str]:
        """Return the status code and the rendered HTML page."""


def render_page(title: str, message_html: str) -> str:
    """Render a minimal HTML page; ``message_html`` must already be escaped."""
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)}</title></head>"
        "<body style=\"font-family: sans-serif; margin: 3em;\">"
        f"<h2>{escape(title)}</h2><p>{message_html}</p>"
        "</body></html>"
    )


def create_callback_app(handler: CallbackHandler) -> FastAPI:
    """Factory for the callback app bound to one login attempt."""
    app = FastAPI(
        title="APS OAuth callback",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.get("/callback", response_class=HTMLResponse)
    async def oauth_callback(
        code: Optional[str] = Query(default=None),
        state: Optional[str] = Query(default=None),
        error: Optional[str] = Query(default=None),
        error_description: Optional[str] = Query(default=None),
    ) -> HTMLResponse:
        status_code, html = await handler.handle_callback(
            code=code,
            state=state,
            error=error,
            error_description=error_description,
        )
        return HTMLResponse(content=html, status_code=status_code)

    return app


__all__ = ["CallbackHandler", "create_callback_app", "render_page"]
