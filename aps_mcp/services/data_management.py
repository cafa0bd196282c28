"""Summaries and helpers for the APS Data Management (hubs, projects, folders, items) APIs."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

from aps_mcp.clients.aps_api import ApsApiClient
from aps_mcp.core.errors import ApsApiError
from aps_mcp.schemas.data_management import (
    FileEntry,
    FolderContentsStats,
    FolderContentsSummary,
    FolderEntry,
    FolderRef,
    FolderTreeNode,
    HubSummary,
    ItemSummary,
    ItemVersionSummary,
    ProjectSummary,
    Resource,
    ResourceDocument,
    SingleResourceDocument,
    TopFoldersContext,
    TopFoldersSummary,
)

logger = logging.getLogger(__name__)

VIEWER_BASE_URL = "https://acc.autodesk.com/build/files/projects"
TREE_PAGE_LIMIT = 200
_BYTES_PER_MB = 1024 * 1024
_UNKNOWN = "(unknown)"


def _encode(value: str) -> str:
    return quote(value, safe="")


def _size_mb(size_bytes: Optional[int]) -> Optional[str]:
    if size_bytes is None:
        return None
    return f"{size_bytes / _BYTES_PER_MB:.1f}"


def _extension(name: str) -> Optional[str]:
    if "." not in name:
        return None
    return name.rsplit(".", 1)[-1].lower()


def folder_path(project_id: str, folder_id: str) -> str:
    return f"data/v1/projects/{project_id}/folders/{_encode(folder_id)}"


def item_path(project_id: str, item_id: str) -> str:
    return f"data/v1/projects/{project_id}/items/{_encode(item_id)}"


def build_viewer_url(project_id: str, folder_id: str, item_id: str) -> str:
    """Link to a file in the ACC web viewer."""
    project_guid = project_id[2:] if project_id.startswith("b.") else project_id
    return (
        f"{VIEWER_BASE_URL}/{project_guid}"
        f"?folderUrn={_encode(folder_id)}&entityId={_encode(item_id)}"
        "&viewModel=detail&moduleId=folders"
    )


def summarize_hubs(raw: Any) -> Dict[str, List[HubSummary]]:
    hubs = []
    for hub in ResourceDocument.decode(raw).data:
        attrs = hub.attributes
        extension_type = attrs.extension.type if attrs.extension else None
        hubs.append(
            HubSummary(
                name=attrs.name or _UNKNOWN,
                id=hub.id,
                type=extension_type or hub.type or "",
                region=attrs.region or "US",
            )
        )
    return {"hubs": hubs}


def _platform(extension_type: str) -> str:
    if "bim360" in extension_type:
        return "BIM 360"
    if "accproject" in extension_type:
        return "ACC"
    if "a360" in extension_type:
        return "A360"
    return "Unknown"


def summarize_projects(raw: Any) -> Dict[str, List[ProjectSummary]]:
    projects = []
    for project in ResourceDocument.decode(raw).data:
        attrs = project.attributes
        extension = attrs.extension
        extension_type = (extension.type if extension else None) or ""
        project_type = extension.data.get("projectType") if extension else None
        projects.append(
            ProjectSummary(
                name=attrs.name or _UNKNOWN,
                id=project.id,
                type=extension_type,
                platform=_platform(extension_type),
                status=project_type if isinstance(project_type, str) else None,
                last_modified=attrs.last_modified_time,
            )
        )
    return {"projects": projects}


def _folder_entry(resource: Resource, name: str) -> FolderEntry:
    attrs = resource.attributes
    return FolderEntry(
        name=name,
        id=resource.id,
        last_modified=attrs.last_modified_time or "",
        object_count=attrs.object_count,
        hidden=resource.hidden,
    )


def summarize_top_folders(
    raw: Any,
    hub_name: Optional[str] = None,
    project_name: Optional[str] = None,
) -> TopFoldersSummary:
    folders = []
    for folder in ResourceDocument.decode(raw).data:
        attrs = folder.attributes
        folders.append(_folder_entry(folder, attrs.display_name or attrs.name or _UNKNOWN))
    return TopFoldersSummary(
        context=TopFoldersContext(hub=hub_name, project=project_name),
        folders=folders,
    )


def summarize_folder_contents(
    raw: Any,
    *,
    filter_extensions: Optional[Sequence[str]] = None,
    exclude_hidden: bool = False,
    project_id: Optional[str] = None,
    folder_id: Optional[str] = None,
) -> FolderContentsSummary:
    """Split a contents page into folders and files.

    File sizes and version numbers come from the tip version listed in
    ``included``. ``folder.id`` is left for the caller to fill in.
    """
    document = ResourceDocument.decode(raw)
    versions = document.included_versions()
    wanted = {ext.lstrip(".").lower() for ext in filter_extensions or ()}

    folders: List[FolderEntry] = []
    files: List[FileEntry] = []
    for resource in document.data:
        if exclude_hidden and resource.hidden:
            continue
        attrs = resource.attributes
        if resource.type == "folders":
            folders.append(_folder_entry(resource, attrs.display_name or _UNKNOWN))
        elif resource.type == "items":
            name = attrs.display_name or _UNKNOWN
            ext = _extension(name)
            if ext is None:
                ext = "unknown"
            if wanted and ext not in wanted:
                continue
            tip_id = resource.related_id("tip")
            version = versions.get(tip_id) if tip_id else None
            size_bytes = version.storage_size if version else None
            files.append(
                FileEntry(
                    name=name,
                    item_id=resource.id,
                    version_id=tip_id,
                    type=ext,
                    size_bytes=size_bytes,
                    size_mb=_size_mb(size_bytes),
                    version_number=version.version_number if version else None,
                    last_modified=attrs.last_modified_time or "",
                    created=attrs.create_time or "",
                    hidden=resource.hidden,
                    viewer_url=(
                        build_viewer_url(project_id, folder_id, resource.id)
                        if project_id and folder_id and resource.id
                        else None
                    ),
                )
            )

    file_types: Dict[str, int] = {}
    sizes = [entry.size_bytes for entry in files if entry.size_bytes is not None]
    for entry in files:
        key = f".{entry.type}"
        file_types[key] = file_types.get(key, 0) + 1

    return FolderContentsSummary(
        folder=FolderRef(),
        summary=FolderContentsStats(
            total_items=len(folders) + len(files),
            folder_count=len(folders),
            file_count=len(files),
            file_types=file_types,
            total_size_mb=_size_mb(sum(sizes)) if sizes else None,
        ),
        folders=folders,
        files=files,
    )


def summarize_item(raw: Any, *, project_id: Optional[str] = None) -> Any:
    document = SingleResourceDocument.decode(raw)
    item = document.data
    if item is None:
        return {"error": "No item data found in response"}

    tip_id = item.related_id("tip")
    version_attrs = None
    for resource in document.included:
        if resource.type == "versions" and tip_id and resource.id == tip_id:
            version_attrs = resource.attributes
            break

    parent_id = item.related_id("parent")
    attrs = item.attributes
    name = attrs.display_name or _UNKNOWN
    size_bytes = version_attrs.storage_size if version_attrs else None

    return ItemSummary(
        name=name,
        item_id=item.id,
        type=_extension(name) or "unknown",
        viewer_url=(
            build_viewer_url(project_id, parent_id, item.id)
            if project_id and parent_id and item.id
            else None
        ),
        version=ItemVersionSummary(
            id=tip_id,
            number=version_attrs.version_number if version_attrs else None,
            size_bytes=size_bytes,
            size_mb=_size_mb(size_bytes),
            file_type=version_attrs.file_type if version_attrs else None,
            last_modified=version_attrs.last_modified_time if version_attrs else None,
            created=version_attrs.create_time if version_attrs else None,
        ),
        created=attrs.create_time,
        last_modified=attrs.last_modified_time,
        hidden=item.hidden,
    )


async def resolve_folder_name(
    api_client: ApsApiClient, project_id: str, folder_id: str, token: str
) -> Optional[str]:
    """Best-effort lookup of a folder's display name; ``None`` when it fails."""
    try:
        raw = await api_client.request("GET", folder_path(project_id, folder_id), token)
    except (ApsApiError, httpx.HTTPError) as exc:
        logger.info("Could not resolve name of folder %s: %s", folder_id, exc)
        return None
    data = SingleResourceDocument.decode(raw).data
    return data.attributes.display_name if data else None


async def fetch_folder_contents(
    api_client: ApsApiClient,
    project_id: str,
    folder_id: str,
    token: str,
    *,
    page_limit: int = TREE_PAGE_LIMIT,
) -> Any:
    return await api_client.request(
        "GET",
        f"{folder_path(project_id, folder_id)}/contents",
        token,
        query={"page[limit]": str(page_limit)},
    )


async def build_folder_tree(
    api_client: ApsApiClient,
    project_id: str,
    folder_id: str,
    token: str,
    max_depth: int = 3,
) -> FolderTreeNode:
    """Walk a folder hierarchy, one contents request per expanded folder.

    Subfolders deeper than ``max_depth`` levels are returned as placeholders
    without ``children`` or ``file_count``.
    """
    root = await _expand_folder(api_client, project_id, folder_id, token, max_depth, 0)
    root.name = await resolve_folder_name(api_client, project_id, folder_id, token) or folder_id
    return root


async def _expand_folder(
    api_client: ApsApiClient,
    project_id: str,
    folder_id: str,
    token: str,
    max_depth: int,
    depth: int,
) -> FolderTreeNode:
    raw = await fetch_folder_contents(api_client, project_id, folder_id, token)
    children: List[FolderTreeNode] = []
    file_count = 0
    for resource in ResourceDocument.decode(raw).data:
        if resource.type != "folders":
            file_count += 1
            continue
        name = resource.attributes.display_name or _UNKNOWN
        child_id = resource.id or ""
        if depth < max_depth - 1:
            child = await _expand_folder(
                api_client, project_id, child_id, token, max_depth, depth + 1
            )
            child.name = name
        else:
            child = FolderTreeNode(name=name, id=child_id)
        children.append(child)

    return FolderTreeNode(
        name=folder_id,
        id=folder_id,
        children=children or None,
        file_count=file_count,
    )


__all__ = [
    "TREE_PAGE_LIMIT",
    "build_folder_tree",
    "build_viewer_url",
    "fetch_folder_contents",
    "folder_path",
    "item_path",
    "resolve_folder_name",
    "summarize_folder_contents",
    "summarize_hubs",
    "summarize_item",
    "summarize_projects",
    "summarize_top_folders",
]
