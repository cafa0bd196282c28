"""
MCP server entrypoint exposing Autodesk Platform Services as tools.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from aps_mcp.api.tools import ApsToolHandlers, ToolResponse
from aps_mcp.core.logging import configure_logging
from aps_mcp.dependencies import get_app_settings, get_tool_handlers

HttpMethod = Literal["GET", "POST", "PATCH", "DELETE"]
QueryArgs = Optional[Dict[str, Any]]


def _text(response: ToolResponse) -> str:
    if response.is_error:
        raise ToolError(response.text)
    return response.text


def create_server(handlers: Optional[ApsToolHandlers] = None) -> FastMCP:
    """Factory for the MCP server; ``handlers`` defaults to the process singletons."""
    settings = get_app_settings()
    tools = handlers or get_tool_handlers()
    mcp = FastMCP(settings.server_name)

    # Authentication

    @mcp.tool(name="aps_get_token")
    async def aps_get_token() -> str:
        """Verify APS credentials and report which token (2-legged or 3-legged) tools will use."""
        return _text(await tools.get_token())

    @mcp.tool(name="aps_login")
    async def aps_login(scope: Optional[str] = None, callback_port: Optional[int] = None) -> str:
        """Sign in as an Autodesk user in the browser (3-legged OAuth).

        Opens the APS consent page and waits up to two minutes for the redirect
        to the local callback listener. The session is saved and refreshed
        automatically.
        """
        return _text(await tools.login(scope=scope, callback_port=callback_port))

    @mcp.tool(name="aps_logout")
    async def aps_logout() -> str:
        """Forget the saved user session and fall back to app credentials."""
        return _text(await tools.logout())

    # Data Management

    @mcp.tool(name="aps_dm_request")
    async def aps_dm_request(
        path: str,
        method: HttpMethod = "GET",
        query: QueryArgs = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Raw Data Management call, e.g. path 'project/v1/hubs' or 'data/v1/projects/{id}/folders/{urn}/contents'.

        Prefer the simplified tools for everyday browsing.
        """
        return _text(await tools.dm_request(path, method=method, query=query, body=body))

    @mcp.tool(name="aps_list_hubs")
    async def aps_list_hubs() -> str:
        """List the hubs (accounts) the credentials can see."""
        return _text(await tools.list_hubs())

    @mcp.tool(name="aps_list_projects")
    async def aps_list_projects(hub_id: str) -> str:
        """List projects in a hub. hub_id starts with 'b.'."""
        return _text(await tools.list_projects(hub_id))

    @mcp.tool(name="aps_get_top_folders")
    async def aps_get_top_folders(hub_id: str, project_id: str) -> str:
        """Root folders of a project (e.g. 'Project Files', 'Plans')."""
        return _text(await tools.get_top_folders(hub_id, project_id))

    @mcp.tool(name="aps_get_folder_contents")
    async def aps_get_folder_contents(
        project_id: str,
        folder_id: str,
        filter_extensions: Optional[List[str]] = None,
        exclude_hidden: bool = False,
        page_limit: Optional[int] = None,
    ) -> str:
        """Summarized folder contents with file types, sizes and viewer links.

        filter_extensions keeps only matching files (e.g. ['.rvt', '.dwg']);
        page_limit is 1-200 (default 200).
        """
        return _text(
            await tools.get_folder_contents(
                project_id,
                folder_id,
                filter_extensions=filter_extensions,
                exclude_hidden=exclude_hidden,
                page_limit=page_limit,
            )
        )

    @mcp.tool(name="aps_get_item_details")
    async def aps_get_item_details(project_id: str, item_id: str) -> str:
        """Metadata for one file, merged with its latest (tip) version."""
        return _text(await tools.get_item_details(project_id, item_id))

    @mcp.tool(name="aps_get_folder_tree")
    async def aps_get_folder_tree(
        project_id: str, folder_id: str, max_depth: Optional[int] = None
    ) -> str:
        """Folder hierarchy below a folder, max_depth 1-5 (default 3)."""
        return _text(await tools.get_folder_tree(project_id, folder_id, max_depth=max_depth))

    @mcp.tool(name="aps_docs")
    async def aps_docs() -> str:
        """Data Management quick reference: ID formats, paths, workflows."""
        return _text(await tools.docs())

    # Issues

    @mcp.tool(name="aps_issues_request")
    async def aps_issues_request(
        path: str,
        method: HttpMethod = "GET",
        query: QueryArgs = None,
        body: Optional[Dict[str, Any]] = None,
        region: Optional[str] = None,
    ) -> str:
        """Raw ACC Issues call, e.g. 'construction/issues/v1/projects/{projectId}/issues'."""
        return _text(
            await tools.issues_request(path, method=method, query=query, body=body, region=region)
        )

    @mcp.tool(name="aps_issues_get_types")
    async def aps_issues_get_types(
        project_id: str, include_subtypes: bool = True, region: Optional[str] = None
    ) -> str:
        """Issue categories and their types (subtypes)."""
        return _text(
            await tools.issues_get_types(
                project_id, include_subtypes=include_subtypes, region=region
            )
        )

    @mcp.tool(name="aps_issues_list")
    async def aps_issues_list(
        project_id: str,
        filter_status: Optional[str] = None,
        filter_assigned_to: Optional[str] = None,
        filter_issue_type_id: Optional[str] = None,
        filter_issue_subtype_id: Optional[str] = None,
        filter_due_date: Optional[str] = None,
        filter_created_at: Optional[str] = None,
        filter_search: Optional[str] = None,
        filter_root_cause_id: Optional[str] = None,
        filter_location_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        sort_by: Optional[str] = None,
        region: Optional[str] = None,
    ) -> str:
        """List or search issues; limit is 1-100."""
        return _text(
            await tools.issues_list(
                project_id,
                limit=limit,
                offset=offset,
                sort_by=sort_by,
                region=region,
                filter_status=filter_status,
                filter_assigned_to=filter_assigned_to,
                filter_issue_type_id=filter_issue_type_id,
                filter_issue_subtype_id=filter_issue_subtype_id,
                filter_due_date=filter_due_date,
                filter_created_at=filter_created_at,
                filter_search=filter_search,
                filter_root_cause_id=filter_root_cause_id,
                filter_location_id=filter_location_id,
            )
        )

    @mcp.tool(name="aps_issues_get")
    async def aps_issues_get(
        project_id: str, issue_id: str, region: Optional[str] = None
    ) -> str:
        """One issue with custom attributes, watchers and permitted statuses."""
        return _text(await tools.issues_get(project_id, issue_id, region=region))

    @mcp.tool(name="aps_issues_create")
    async def aps_issues_create(
        project_id: str,
        title: str,
        issue_subtype_id: str,
        status: str,
        description: Optional[str] = None,
        assigned_to: Optional[str] = None,
        assigned_to_type: Optional[str] = None,
        due_date: Optional[str] = None,
        start_date: Optional[str] = None,
        location_id: Optional[str] = None,
        location_details: Optional[str] = None,
        root_cause_id: Optional[str] = None,
        published: Optional[bool] = None,
        watchers: Optional[List[str]] = None,
        custom_attributes: Optional[List[Dict[str, Any]]] = None,
        region: Optional[str] = None,
    ) -> str:
        """Create an issue. Needs the data:write scope."""
        return _text(
            await tools.issues_create(
                project_id,
                title,
                issue_subtype_id,
                status,
                region=region,
                description=description,
                assigned_to=assigned_to,
                assigned_to_type=assigned_to_type,
                due_date=due_date,
                start_date=start_date,
                location_id=location_id,
                location_details=location_details,
                root_cause_id=root_cause_id,
                published=published,
                watchers=watchers,
                custom_attributes=custom_attributes,
            )
        )

    @mcp.tool(name="aps_issues_update")
    async def aps_issues_update(
        project_id: str,
        issue_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
        assigned_to_type: Optional[str] = None,
        due_date: Optional[str] = None,
        start_date: Optional[str] = None,
        location_id: Optional[str] = None,
        location_details: Optional[str] = None,
        root_cause_id: Optional[str] = None,
        published: Optional[bool] = None,
        watchers: Optional[List[str]] = None,
        custom_attributes: Optional[List[Dict[str, Any]]] = None,
        region: Optional[str] = None,
    ) -> str:
        """Change fields on an existing issue; only the given fields are sent."""
        return _text(
            await tools.issues_update(
                project_id,
                issue_id,
                region=region,
                title=title,
                description=description,
                status=status,
                assigned_to=assigned_to,
                assigned_to_type=assigned_to_type,
                due_date=due_date,
                start_date=start_date,
                location_id=location_id,
                location_details=location_details,
                root_cause_id=root_cause_id,
                published=published,
                watchers=watchers,
                custom_attributes=custom_attributes,
            )
        )

    @mcp.tool(name="aps_issues_get_comments")
    async def aps_issues_get_comments(
        project_id: str,
        issue_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        sort_by: Optional[str] = None,
        region: Optional[str] = None,
    ) -> str:
        """Comments on an issue."""
        return _text(
            await tools.issues_get_comments(
                project_id, issue_id, limit=limit, offset=offset, sort_by=sort_by, region=region
            )
        )

    @mcp.tool(name="aps_issues_create_comment")
    async def aps_issues_create_comment(
        project_id: str, issue_id: str, body: str, region: Optional[str] = None
    ) -> str:
        """Add a comment to an issue."""
        return _text(await tools.issues_create_comment(project_id, issue_id, body, region=region))

    @mcp.tool(name="aps_issues_get_root_causes")
    async def aps_issues_get_root_causes(project_id: str, region: Optional[str] = None) -> str:
        """Root cause categories with their root causes."""
        return _text(await tools.issues_get_root_causes(project_id, region=region))

    @mcp.tool(name="aps_issues_docs")
    async def aps_issues_docs() -> str:
        """ACC Issues quick reference."""
        return _text(await tools.issues_docs())

    # Submittals

    @mcp.tool(name="aps_submittals_request")
    async def aps_submittals_request(
        project_id: str,
        path: str,
        method: HttpMethod = "GET",
        query: QueryArgs = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Raw ACC Submittals call; path is relative to the project, e.g. 'items' or 'metadata'."""
        return _text(
            await tools.submittals_request(project_id, path, method=method, query=query, body=body)
        )

    @mcp.tool(name="aps_list_submittal_items")
    async def aps_list_submittal_items(
        project_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filter_status_id: Optional[str] = None,
        filter_package_id: Optional[str] = None,
        filter_spec_id: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> str:
        """Submittal items; limit is 1-200 (default 20)."""
        return _text(
            await tools.list_submittal_items(
                project_id,
                limit=limit,
                offset=offset,
                filter_status_id=filter_status_id,
                filter_package_id=filter_package_id,
                filter_spec_id=filter_spec_id,
                sort=sort,
            )
        )

    @mcp.tool(name="aps_get_submittal_item")
    async def aps_get_submittal_item(project_id: str, item_id: str) -> str:
        """One submittal item."""
        return _text(await tools.get_submittal_item(project_id, item_id))

    @mcp.tool(name="aps_list_submittal_packages")
    async def aps_list_submittal_packages(
        project_id: str, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> str:
        """Submittal packages."""
        return _text(await tools.list_submittal_packages(project_id, limit=limit, offset=offset))

    @mcp.tool(name="aps_list_submittal_specs")
    async def aps_list_submittal_specs(
        project_id: str, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> str:
        """Spec sections."""
        return _text(await tools.list_submittal_specs(project_id, limit=limit, offset=offset))

    @mcp.tool(name="aps_get_submittal_item_attachments")
    async def aps_get_submittal_item_attachments(project_id: str, item_id: str) -> str:
        """Attachments on a submittal item."""
        return _text(await tools.get_submittal_item_attachments(project_id, item_id))

    @mcp.tool(name="aps_submittals_docs")
    async def aps_submittals_docs() -> str:
        """ACC Submittals quick reference."""
        return _text(await tools.submittals_docs())

    return mcp


def main() -> None:
    settings = get_app_settings()
    configure_logging(settings.log_level)
    create_server().run()


if __name__ == "__main__":
    main()


__all__ = ["create_server", "main"]
