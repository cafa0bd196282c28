"""Turn APS API failures into a diagnostic record with likely causes and fixes."""

from __future__ import annotations

import json
from typing import Any, Dict, NamedTuple, Optional

from aps_mcp.core.errors import ApsApiError

API_ERROR_SNIPPET_CHARS = 500


class ErrorHint(NamedTuple):
    likely_cause: str
    fix: str


ERROR_HINTS: Dict[int, ErrorHint] = {
    400: ErrorHint(
        "Malformed request - invalid JSON body, bad query parameters, or wrong Content-Type",
        "Check the request body matches the JSON:API format. Ensure query keys like "
        "page[number] are formatted correctly.",
    ),
    401: ErrorHint(
        "Token expired or invalid credentials",
        "Verify APS_CLIENT_ID and APS_CLIENT_SECRET are correct. Tokens expire after "
        "1 hour and are refreshed automatically.",
    ),
    403: ErrorHint(
        "App not provisioned to this BIM 360/ACC account, or insufficient OAuth scopes",
        "Account admin must add your app in Account Settings > Custom Integrations. "
        "Also ensure APS_SCOPE includes the required scopes (e.g. 'data:read data:write').",
    ),
    404: ErrorHint(
        "Resource not found - wrong ID, deleted item, or incorrect path",
        "Verify: hub/project IDs start with 'b.', folder/item IDs are URNs starting "
        "with 'urn:', and the resource exists in ACC/BIM 360.",
    ),
    409: ErrorHint(
        "Conflict - resource already exists or concurrent modification",
        "Check if a folder/item with the same name already exists. Retry after a "
        "brief wait if caused by concurrency.",
    ),
    429: ErrorHint(
        "Rate limit exceeded",
        "Wait 60 seconds before retrying. APS rate limits vary by endpoint "
        "(typically 100-300 req/min).",
    ),
    500: ErrorHint(
        "APS internal server error",
        "Retry after 30 seconds. If persistent, check https://health.autodesk.com "
        "for service status.",
    ),
    503: ErrorHint(
        "APS service temporarily unavailable",
        "Retry after 60 seconds. Check https://health.autodesk.com for service status.",
    ),
}

STATUS_TEXT: Dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    429: "Too Many Requests",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def get_error_context(
    status_code: int,
    method: str,
    path: str,
    response_body: Optional[str] = None,
) -> Dict[str, Any]:
    context: Dict[str, Any] = {
        "error": f"{status_code} {STATUS_TEXT.get(status_code, 'Error')}",
        "method": method,
        "path": path,
    }
    hint = ERROR_HINTS.get(status_code)
    if hint is not None:
        context["likely_cause"] = hint.likely_cause
        context["fix"] = hint.fix
    if response_body:
        try:
            context["api_error"] = json.loads(response_body)
        except ValueError:
            context["api_error"] = response_body[:API_ERROR_SNIPPET_CHARS]
    return context


def describe_api_error(exc: ApsApiError) -> Dict[str, Any]:
    return get_error_context(exc.status_code, exc.method, exc.path, exc.response_body)


__all__ = ["ERROR_HINTS", "ErrorHint", "STATUS_TEXT", "describe_api_error", "get_error_context"]
