"""Data Management (JSON:API) resource shapes and their summary records."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from aps_mcp.schemas.common import LenientModel, as_dict, decode_many, decode_one


# Raw JSON:API shapes


class ResourceLink(LenientModel):
    id: Optional[str] = None
    type: Optional[str] = None


class Relationship(LenientModel):
    data: Optional[ResourceLink] = None

    @field_validator("data", mode="before")
    @classmethod
    def _single_link_only(cls, value: Any) -> Any:
        # to-many relationships (lists) are not needed by any summary
        return value if isinstance(value, dict) else None


class Extension(LenientModel):
    type: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class ResourceAttributes(LenientModel):
    name: Optional[str] = None
    display_name: Optional[str] = Field(None, alias="displayName")
    last_modified_time: Optional[str] = Field(None, alias="lastModifiedTime")
    create_time: Optional[str] = Field(None, alias="createTime")
    hidden: Optional[bool] = None
    object_count: Optional[int] = Field(None, alias="objectCount")
    region: Optional[str] = None
    storage_size: Optional[int] = Field(None, alias="storageSize")
    version_number: Optional[int] = Field(None, alias="versionNumber")
    file_type: Optional[str] = Field(None, alias="fileType")
    extension: Optional[Extension] = None

    @field_validator("extension", mode="before")
    @classmethod
    def _extension_object(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None


class Resource(LenientModel):
    id: Optional[str] = None
    type: Optional[str] = None
    attributes: ResourceAttributes = Field(default_factory=ResourceAttributes)
    relationships: Dict[str, Relationship] = Field(default_factory=dict)

    @field_validator("attributes", mode="before")
    @classmethod
    def _attributes_object(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator("relationships", mode="before")
    @classmethod
    def _relationship_objects(cls, value: Any) -> Any:
        return {k: v for k, v in as_dict(value).items() if isinstance(v, dict)}

    def related_id(self, name: str) -> Optional[str]:
        relationship = self.relationships.get(name)
        if relationship is None or relationship.data is None:
            return None
        return relationship.data.id

    @property
    def hidden(self) -> bool:
        return self.attributes.hidden is True


class ResourceDocument(BaseModel):
    """A JSON:API document with a primary ``data`` list and an ``included`` side list."""

    data: List[Resource] = Field(default_factory=list)
    included: List[Resource] = Field(default_factory=list)

    @classmethod
    def decode(cls, raw: Any) -> "ResourceDocument":
        body = as_dict(raw)
        return cls(
            data=decode_many(Resource, body.get("data")),
            included=decode_many(Resource, body.get("included")),
        )

    def included_versions(self) -> Dict[str, ResourceAttributes]:
        return {
            resource.id: resource.attributes
            for resource in self.included
            if resource.type == "versions" and resource.id
        }


class SingleResourceDocument(BaseModel):
    data: Optional[Resource] = None
    included: List[Resource] = Field(default_factory=list)

    @classmethod
    def decode(cls, raw: Any) -> "SingleResourceDocument":
        body = as_dict(raw)
        data = body.get("data")
        return cls(
            data=decode_one(Resource, data) if isinstance(data, dict) else None,
            included=decode_many(Resource, body.get("included")),
        )


# Summary records


class HubSummary(BaseModel):
    name: str
    id: Optional[str] = None
    type: str
    region: str


class ProjectSummary(BaseModel):
    name: str
    id: Optional[str] = None
    type: str
    platform: str
    status: Optional[str] = None
    last_modified: Optional[str] = None


class FolderEntry(BaseModel):
    name: str
    id: Optional[str] = None
    last_modified: str
    object_count: Optional[int] = None
    hidden: bool


class FileEntry(BaseModel):
    name: str
    item_id: Optional[str] = None
    version_id: Optional[str] = None
    type: str
    size_bytes: Optional[int] = None
    size_mb: Optional[str] = None
    version_number: Optional[int] = None
    last_modified: str
    created: str
    hidden: bool
    viewer_url: Optional[str] = None


class FolderRef(BaseModel):
    name: Optional[str] = None
    id: str = ""


class FolderContentsStats(BaseModel):
    total_items: int
    folder_count: int
    file_count: int
    file_types: Dict[str, int]
    total_size_mb: Optional[str] = None


class FolderContentsSummary(BaseModel):
    folder: FolderRef = Field(default_factory=FolderRef)
    summary: FolderContentsStats
    folders: List[FolderEntry]
    files: List[FileEntry]


class TopFoldersContext(BaseModel):
    hub: Optional[str] = None
    project: Optional[str] = None


class TopFoldersSummary(BaseModel):
    context: TopFoldersContext = Field(default_factory=TopFoldersContext)
    folders: List[FolderEntry]


class ItemVersionSummary(BaseModel):
    id: Optional[str] = None
    number: Optional[int] = None
    size_bytes: Optional[int] = None
    size_mb: Optional[str] = None
    file_type: Optional[str] = None
    last_modified: Optional[str] = None
    created: Optional[str] = None


class ItemSummary(BaseModel):
    name: str
    item_id: Optional[str] = None
    type: str
    viewer_url: Optional[str] = None
    version: ItemVersionSummary
    created: Optional[str] = None
    last_modified: Optional[str] = None
    hidden: bool


class FolderTreeNode(BaseModel):
    name: str
    id: str
    type: Literal["folder"] = "folder"
    children: Optional[List["FolderTreeNode"]] = None
    file_count: Optional[int] = None


__all__ = [
    "Extension",
    "FileEntry",
    "FolderContentsStats",
    "FolderContentsSummary",
    "FolderEntry",
    "FolderRef",
    "FolderTreeNode",
    "HubSummary",
    "ItemSummary",
    "ItemVersionSummary",
    "ProjectSummary",
    "Relationship",
    "Resource",
    "ResourceAttributes",
    "ResourceDocument",
    "ResourceLink",
    "SingleResourceDocument",
    "TopFoldersContext",
    "TopFoldersSummary",
]
