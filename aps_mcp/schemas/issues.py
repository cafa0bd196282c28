"""ACC Issues response shapes.

The Issues API returns camelCase records under ``results``; the summaries keep
those key names.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from aps_mcp.schemas.common import LenientModel


class Pagination(LenientModel):
    limit: int = 0
    offset: int = 0
    total_results: int = Field(0, alias="totalResults")


class IssueSummary(LenientModel):
    id: Optional[str] = None
    display_id: int = Field(0, alias="displayId")
    title: str = ""
    status: str = ""
    assigned_to: Optional[str] = Field(None, alias="assignedTo")
    assigned_to_type: Optional[str] = Field(None, alias="assignedToType")
    due_date: Optional[str] = Field(None, alias="dueDate")
    start_date: Optional[str] = Field(None, alias="startDate")
    location_details: Optional[str] = Field(None, alias="locationDetails")
    root_cause_id: Optional[str] = Field(None, alias="rootCauseId")
    published: bool = False
    comment_count: int = Field(0, alias="commentCount")
    created_by: str = Field("", alias="createdBy")
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")
    closed_by: Optional[str] = Field(None, alias="closedBy")
    closed_at: Optional[str] = Field(None, alias="closedAt")


class CustomAttributeValue(LenientModel):
    id: str = Field("", validation_alias="attributeDefinitionId")
    value: Any = None
    type: Optional[str] = None
    title: Optional[str] = None


class IssueDetail(IssueSummary):
    description: Optional[str] = None
    issue_type_id: Optional[str] = Field(None, alias="issueTypeId")
    issue_subtype_id: Optional[str] = Field(None, alias="issueSubtypeId")
    location_id: Optional[str] = Field(None, alias="locationId")
    custom_attributes: Optional[List[CustomAttributeValue]] = Field(
        None, alias="customAttributes"
    )
    linked_document_count: int = Field(0, alias="linkedDocumentCount")
    watchers: Optional[List[str]] = None
    permitted_statuses: Optional[List[str]] = Field(None, alias="permittedStatuses")

    @model_validator(mode="before")
    @classmethod
    def _count_linked_documents(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            linked = data.pop("linkedDocuments", None)
            data["linkedDocumentCount"] = len(linked) if isinstance(linked, list) else 0
            for key in ("customAttributes", "watchers", "permittedStatuses"):
                if key in data and not isinstance(data[key], list):
                    data.pop(key)
            if isinstance(data.get("customAttributes"), list):
                data["customAttributes"] = [
                    entry for entry in data["customAttributes"] if isinstance(entry, dict)
                ]
        return data


class IssueSubtype(LenientModel):
    id: Optional[str] = None
    title: str = ""
    code: Optional[str] = None
    is_active: bool = Field(False, alias="isActive")


class IssueType(LenientModel):
    id: Optional[str] = None
    title: str = ""
    is_active: bool = Field(False, alias="isActive")
    subtypes: Optional[List[IssueSubtype]] = None


class IssueComment(LenientModel):
    id: Optional[str] = None
    body: str = ""
    created_by: str = Field("", alias="createdBy")
    created_at: str = Field("", alias="createdAt")


class RootCause(LenientModel):
    id: Optional[str] = None
    title: str = ""
    is_active: bool = Field(False, alias="isActive")


class RootCauseCategory(LenientModel):
    id: Optional[str] = None
    title: str = ""
    is_active: bool = Field(False, alias="isActive")
    root_causes: Optional[List[RootCause]] = Field(None, alias="rootCauses")


class IssuesPage(BaseModel):
    pagination: Pagination
    issues: List[IssueSummary]


class IssueTypesPage(BaseModel):
    pagination: Pagination
    types: List[IssueType]


class CommentsPage(BaseModel):
    pagination: Pagination
    comments: List[IssueComment]


class RootCauseCategoriesPage(BaseModel):
    pagination: Pagination
    categories: List[RootCauseCategory]


__all__ = [
    "CommentsPage",
    "CustomAttributeValue",
    "IssueComment",
    "IssueDetail",
    "IssueSubtype",
    "IssueSummary",
    "IssueType",
    "IssueTypesPage",
    "IssuesPage",
    "Pagination",
    "RootCause",
    "RootCauseCategoriesPage",
    "RootCauseCategory",
]
