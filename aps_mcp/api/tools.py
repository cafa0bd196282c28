"""
Tool handlers behind the MCP server.

Every handler returns a :class:`ToolResponse`; expected failures (bad
arguments, APS errors, missing credentials) come back as error responses
instead of exceptions so the protocol host always receives a result.
"""

from __future__ import annotations

import functools
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel

from aps_mcp.api.docs import APS_DOCS, ISSUES_DOCS, SUBMITTALS_DOCS
from aps_mcp.clients.aps_api import ApsApiClient, QueryValue
from aps_mcp.core.config import AppSettings
from aps_mcp.core.errors import (
    ApsApiError,
    ApsConfigurationError,
    HostMismatchError,
    InteractiveLoginError,
    ToolValidationError,
)
from aps_mcp.schemas.common import to_payload
from aps_mcp.services import data_management as dm
from aps_mcp.services import issues, submittals
from aps_mcp.services.error_context import describe_api_error
from aps_mcp.services.interactive_session import InteractiveSessionService
from aps_mcp.services.token_provider import USER_MODE, ApsTokenProvider
from aps_mcp.services.validation import (
    validate_acc_project_id,
    validate_folder_id,
    validate_hub_id,
    validate_item_id,
    validate_path,
    validate_project_id,
    validate_relative_path,
    validate_required,
)

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "POST", "PATCH", "DELETE")
PROJECTS_PAGE_LIMIT = 100
FOLDER_PAGE_LIMIT = 200
MAX_TREE_DEPTH = 5
SUBMITTALS_DEFAULT_LIMIT = 20


@dataclass(slots=True)
class ToolResponse:
    """Text handed back to the MCP host, flagged when it describes a failure."""

    text: str
    is_error: bool = False


def ok(text: str) -> ToolResponse:
    return ToolResponse(text=text)


def fail(text: str) -> ToolResponse:
    return ToolResponse(text=text, is_error=True)


def _jsonable(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return to_payload(payload)
    if isinstance(payload, list):
        return [_jsonable(entry) for entry in payload]
    if isinstance(payload, dict):
        return {key: _jsonable(value) for key, value in payload.items()}
    return payload


def as_json(payload: Any) -> ToolResponse:
    return ok(json.dumps(_jsonable(payload), indent=2, ensure_ascii=False))


Handler = Callable[..., Awaitable[ToolResponse]]


def tool_boundary(func: Handler) -> Handler:
    """Convert every exception a handler raises into an error response."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> ToolResponse:
        try:
            return await func(*args, **kwargs)
        except ApsApiError as exc:
            logger.warning(
                "%s: APS returned %s for %s %s",
                func.__name__,
                exc.status_code,
                exc.method,
                exc.path,
            )
            return fail(json.dumps(describe_api_error(exc), indent=2, ensure_ascii=False))
        except (
            ToolValidationError,
            HostMismatchError,
            ApsConfigurationError,
            InteractiveLoginError,
        ) as exc:
            return fail(str(exc))
        except Exception as exc:
            logger.exception("Tool handler %s failed", func.__name__)
            return fail(f"Error: {exc}")

    return wrapper


def _method(method: str) -> str:
    normalized = (method or "GET").upper()
    if normalized not in ALLOWED_METHODS:
        raise ToolValidationError(
            f"method must be one of {', '.join(ALLOWED_METHODS)}. Got: '{method}'."
        )
    return normalized


def _clamp(value: Optional[int], default: int, low: int, high: int) -> int:
    return min(max(value or default, low), high)


class ApsToolHandlers:
    """One coroutine per MCP tool, sharing the token provider and forwarder."""

    def __init__(
        self,
        settings: AppSettings,
        api_client: ApsApiClient,
        token_provider: ApsTokenProvider,
        session: InteractiveSessionService,
    ) -> None:
        self._settings = settings
        self._api = api_client
        self._tokens = token_provider
        self._session = session

    async def _request(
        self,
        method: str,
        path: str,
        *,
        query: Optional[Mapping[str, QueryValue]] = None,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        token = await self._tokens.get_token()
        return await self._api.request(
            method, path, token, query=query, body=body, headers=headers
        )

    # Authentication

    @tool_boundary
    async def get_token(self) -> ToolResponse:
        token, mode = await self._tokens.get_token_with_mode()
        if mode == USER_MODE:
            text = (
                f"{mode} token obtained (length {len(token)}). "
                "Tools act as the signed-in user; you don't need to pass the token."
            )
        else:
            text = (
                f"{mode} token obtained (length {len(token)}). "
                "All other tools use this token automatically - you don't need to pass it."
            )
        if self._session.last_refresh_failure:
            text += (
                "\nThe saved user session could not be refreshed and was cleared. "
                "Run aps_login to sign in again."
            )
        return ok(text)

    @tool_boundary
    async def login(
        self, scope: Optional[str] = None, callback_port: Optional[int] = None
    ) -> ToolResponse:
        client_id, client_secret = self._tokens.credentials()
        token = await self._session.login(
            client_id, client_secret, scope=scope, callback_port=callback_port
        )
        return ok(
            f"Signed in to APS (3-legged token, length {len(token)}). "
            f"Session saved to {self._settings.oauth.session_file}; "
            "all tools now act as you until aps_logout."
        )

    @tool_boundary
    async def logout(self) -> ToolResponse:
        self._session.logout()
        return ok(
            "Signed out. Tools use the app's client credentials (2-legged) "
            "until aps_login is run again."
        )

    # Data Management

    @tool_boundary
    async def dm_request(
        self,
        path: str,
        method: str = "GET",
        query: Optional[Dict[str, QueryValue]] = None,
        body: Any = None,
    ) -> ToolResponse:
        validate_path(path)
        data = await self._request(_method(method), path, query=query, body=body)
        return as_json(data)

    @tool_boundary
    async def list_hubs(self) -> ToolResponse:
        raw = await self._request("GET", "project/v1/hubs")
        return as_json(dm.summarize_hubs(raw))

    @tool_boundary
    async def list_projects(self, hub_id: str) -> ToolResponse:
        validate_hub_id(hub_id)
        raw = await self._request(
            "GET",
            f"project/v1/hubs/{hub_id}/projects",
            query={"page[limit]": str(PROJECTS_PAGE_LIMIT)},
        )
        return as_json(dm.summarize_projects(raw))

    @tool_boundary
    async def get_top_folders(self, hub_id: str, project_id: str) -> ToolResponse:
        validate_hub_id(hub_id)
        validate_project_id(project_id)
        raw = await self._request(
            "GET", f"project/v1/hubs/{hub_id}/projects/{project_id}/topFolders"
        )
        return as_json(dm.summarize_top_folders(raw))

    @tool_boundary
    async def get_folder_contents(
        self,
        project_id: str,
        folder_id: str,
        filter_extensions: Optional[List[str]] = None,
        exclude_hidden: bool = False,
        page_limit: Optional[int] = None,
    ) -> ToolResponse:
        validate_project_id(project_id)
        validate_folder_id(folder_id)
        token = await self._tokens.get_token()
        raw = await dm.fetch_folder_contents(
            self._api,
            project_id,
            folder_id,
            token,
            page_limit=_clamp(page_limit, FOLDER_PAGE_LIMIT, 1, FOLDER_PAGE_LIMIT),
        )
        summary = dm.summarize_folder_contents(
            raw,
            filter_extensions=filter_extensions,
            exclude_hidden=exclude_hidden,
            project_id=project_id,
            folder_id=folder_id,
        )
        summary.folder.id = folder_id
        summary.folder.name = await dm.resolve_folder_name(
            self._api, project_id, folder_id, token
        )
        return as_json(summary)

    @tool_boundary
    async def get_item_details(self, project_id: str, item_id: str) -> ToolResponse:
        validate_project_id(project_id)
        validate_item_id(item_id)
        raw = await self._request(
            "GET", dm.item_path(project_id, item_id)
        )
        return as_json(dm.summarize_item(raw, project_id=project_id))

    @tool_boundary
    async def get_folder_tree(
        self, project_id: str, folder_id: str, max_depth: Optional[int] = None
    ) -> ToolResponse:
        validate_project_id(project_id)
        validate_folder_id(folder_id)
        token = await self._tokens.get_token()
        tree = await dm.build_folder_tree(
            self._api,
            project_id,
            folder_id,
            token,
            max_depth=_clamp(max_depth, 3, 1, MAX_TREE_DEPTH),
        )
        return as_json(tree)

    async def docs(self) -> ToolResponse:
        return ok(APS_DOCS)

    # Issues

    @tool_boundary
    async def issues_request(
        self,
        path: str,
        method: str = "GET",
        query: Optional[Dict[str, QueryValue]] = None,
        body: Any = None,
        region: Optional[str] = None,
    ) -> ToolResponse:
        validate_relative_path(path)
        method = _method(method)
        headers = issues.region_headers(region)
        if method in ("POST", "PATCH") and body is not None:
            headers = issues.write_headers(region)
        data = await self._request(method, path, query=query, body=body, headers=headers)
        return as_json(data)

    @tool_boundary
    async def issues_get_types(
        self,
        project_id: str,
        include_subtypes: bool = True,
        region: Optional[str] = None,
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        raw = await self._request(
            "GET",
            issues.issues_path(project_id, "issue-types"),
            query={"include": "subtypes"} if include_subtypes else None,
            headers=issues.region_headers(region),
        )
        return as_json(issues.summarize_issue_types(raw))

    @tool_boundary
    async def issues_list(
        self,
        project_id: str,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        sort_by: Optional[str] = None,
        region: Optional[str] = None,
        **filters: Optional[str],
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        query: Dict[str, QueryValue] = {}
        for argument, key in issues.LIST_FILTERS.items():
            if filters.get(argument):
                query[key] = filters[argument]
        if limit is not None:
            query["limit"] = str(issues.clamp_list_limit(limit))
        if offset is not None:
            query["offset"] = str(offset or 0)
        if sort_by:
            query["sortBy"] = sort_by
        raw = await self._request(
            "GET",
            issues.issues_path(project_id, "issues"),
            query=query,
            headers=issues.region_headers(region),
        )
        return as_json(issues.summarize_issues_list(raw))

    @tool_boundary
    async def issues_get(
        self, project_id: str, issue_id: str, region: Optional[str] = None
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        validate_required(issue_id, "issue_id")
        raw = await self._request(
            "GET",
            issues.issues_path(project_id, f"issues/{issue_id}"),
            headers=issues.region_headers(region),
        )
        return as_json(issues.summarize_issue_detail(raw))

    @tool_boundary
    async def issues_create(
        self,
        project_id: str,
        title: str,
        issue_subtype_id: str,
        status: str,
        *,
        region: Optional[str] = None,
        **fields: Any,
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        validate_required(title, "title")
        validate_required(issue_subtype_id, "issue_subtype_id")
        validate_required(status, "status")
        body = {"title": title, "issueSubtypeId": issue_subtype_id, "status": status}
        body.update(issues.build_issue_body(fields))
        raw = await self._request(
            "POST",
            issues.issues_path(project_id, "issues"),
            body=body,
            headers=issues.write_headers(region),
        )
        return as_json(issues.summarize_issue_detail(raw))

    @tool_boundary
    async def issues_update(
        self,
        project_id: str,
        issue_id: str,
        *,
        region: Optional[str] = None,
        **fields: Any,
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        validate_required(issue_id, "issue_id")
        body = issues.build_issue_body(fields)
        if not body:
            return fail("No fields to update. Provide at least one field to change.")
        raw = await self._request(
            "PATCH",
            issues.issues_path(project_id, f"issues/{issue_id}"),
            body=body,
            headers=issues.write_headers(region),
        )
        return as_json(issues.summarize_issue_detail(raw))

    @tool_boundary
    async def issues_get_comments(
        self,
        project_id: str,
        issue_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        sort_by: Optional[str] = None,
        region: Optional[str] = None,
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        validate_required(issue_id, "issue_id")
        query: Dict[str, QueryValue] = {"limit": limit, "offset": offset}
        if sort_by:
            query["sortBy"] = sort_by
        raw = await self._request(
            "GET",
            issues.issues_path(project_id, f"issues/{issue_id}/comments"),
            query=query,
            headers=issues.region_headers(region),
        )
        return as_json(issues.summarize_comments(raw))

    @tool_boundary
    async def issues_create_comment(
        self,
        project_id: str,
        issue_id: str,
        body: str,
        region: Optional[str] = None,
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        validate_required(issue_id, "issue_id")
        validate_required(body, "body")
        raw = await self._request(
            "POST",
            issues.issues_path(project_id, f"issues/{issue_id}/comments"),
            body={"body": body},
            headers=issues.write_headers(region),
        )
        return as_json(raw)

    @tool_boundary
    async def issues_get_root_causes(
        self, project_id: str, region: Optional[str] = None
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        raw = await self._request(
            "GET",
            issues.issues_path(project_id, "issue-root-cause-categories"),
            query={"include": "rootcauses"},
            headers=issues.region_headers(region),
        )
        return as_json(issues.summarize_root_cause_categories(raw))

    async def issues_docs(self) -> ToolResponse:
        return ok(ISSUES_DOCS)

    # Submittals

    @tool_boundary
    async def submittals_request(
        self,
        project_id: str,
        path: str,
        method: str = "GET",
        query: Optional[Dict[str, QueryValue]] = None,
        body: Any = None,
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        validate_relative_path(path)
        method = _method(method)
        headers = (
            {"Content-Type": "application/json"}
            if method in ("POST", "PATCH") and body is not None
            else None
        )
        data = await self._request(
            method,
            submittals.submittal_path(project_id, path),
            query=query,
            body=body,
            headers=headers,
        )
        return as_json(data)

    @tool_boundary
    async def list_submittal_items(
        self,
        project_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filter_status_id: Optional[str] = None,
        filter_package_id: Optional[str] = None,
        filter_spec_id: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        query: Dict[str, QueryValue] = {
            "limit": submittals.clamp_list_limit(limit or SUBMITTALS_DEFAULT_LIMIT),
            "offset": offset,
            "filter[statusId]": filter_status_id,
            "filter[packageId]": filter_package_id,
            "filter[specId]": filter_spec_id,
            "sort": sort,
        }
        raw = await self._request(
            "GET", submittals.submittal_path(project_id, "items"), query=query
        )
        return as_json(submittals.summarize_submittal_items(raw))

    @tool_boundary
    async def get_submittal_item(self, project_id: str, item_id: str) -> ToolResponse:
        validate_acc_project_id(project_id)
        validate_required(item_id, "item_id")
        raw = await self._request(
            "GET", submittals.submittal_path(project_id, f"items/{item_id}")
        )
        return as_json(submittals.summarize_submittal_item(raw))

    @tool_boundary
    async def list_submittal_packages(
        self,
        project_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        raw = await self._request(
            "GET",
            submittals.submittal_path(project_id, "packages"),
            query={
                "limit": submittals.clamp_list_limit(limit or SUBMITTALS_DEFAULT_LIMIT),
                "offset": offset,
            },
        )
        return as_json(submittals.summarize_submittal_packages(raw))

    @tool_boundary
    async def list_submittal_specs(
        self,
        project_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        raw = await self._request(
            "GET",
            submittals.submittal_path(project_id, "specs"),
            query={
                "limit": submittals.clamp_list_limit(limit or SUBMITTALS_DEFAULT_LIMIT),
                "offset": offset,
            },
        )
        return as_json(submittals.summarize_submittal_specs(raw))

    @tool_boundary
    async def get_submittal_item_attachments(
        self, project_id: str, item_id: str
    ) -> ToolResponse:
        validate_acc_project_id(project_id)
        validate_required(item_id, "item_id")
        raw = await self._request(
            "GET", submittals.submittal_path(project_id, f"items/{item_id}/attachments")
        )
        return as_json(submittals.summarize_submittal_attachments(raw))

    async def submittals_docs(self) -> ToolResponse:
        return ok(SUBMITTALS_DOCS)


__all__ = ["ApsToolHandlers", "ToolResponse", "as_json", "fail", "ok", "tool_boundary"]
