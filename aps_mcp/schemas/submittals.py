"""ACC Submittals response shapes, decoded straight into snake_case summaries."""

from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from aps_mcp.schemas.common import LenientModel


class SubmittalPagination(BaseModel):
    total: int
    limit: int
    offset: int


class SubmittalItemSummary(LenientModel):
    id: Optional[str] = None
    title: str = "(untitled)"
    number: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("customIdentifierHumanReadable", "customIdentifier"),
    )
    spec_identifier: Optional[str] = Field(None, validation_alias="specIdentifier")
    subsection: Optional[str] = None
    type: Optional[str] = Field(None, validation_alias=AliasChoices("typeValue", "type"))
    status: Optional[str] = Field(
        None, validation_alias=AliasChoices("statusValue", "status")
    )
    priority: Optional[str] = Field(
        None, validation_alias=AliasChoices("priorityValue", "priority")
    )
    revision: Optional[int] = None
    description: Optional[str] = None
    manager: Optional[str] = None
    subcontractor: Optional[str] = None
    due_date: Optional[str] = Field(None, validation_alias="dueDate")
    required_on_job_date: Optional[str] = Field(None, validation_alias="requiredOnJobDate")
    response: Optional[str] = Field(None, validation_alias="responseValue")
    response_comment: Optional[str] = Field(None, validation_alias="responseComment")
    created_at: Optional[str] = Field(None, validation_alias="createdAt")
    updated_at: Optional[str] = Field(None, validation_alias="updatedAt")
    package_title: Optional[str] = Field(None, validation_alias="packageTitle")
    package_id: Optional[str] = Field(None, validation_alias="package")


class SubmittalPackageSummary(LenientModel):
    id: Optional[str] = None
    title: str = "(untitled)"
    identifier: Optional[int] = None
    spec_identifier: Optional[str] = Field(None, validation_alias="specIdentifier")
    description: Optional[str] = None
    created_at: Optional[str] = Field(None, validation_alias="createdAt")
    updated_at: Optional[str] = Field(None, validation_alias="updatedAt")


class SubmittalSpecSummary(LenientModel):
    id: Optional[str] = None
    identifier: str = ""
    title: str = "(untitled)"
    created_at: Optional[str] = Field(None, validation_alias="createdAt")
    updated_at: Optional[str] = Field(None, validation_alias="updatedAt")


class SubmittalAttachmentSummary(LenientModel):
    id: Optional[str] = None
    name: str = "(unknown)"
    urn: Optional[str] = None
    upload_urn: Optional[str] = Field(None, validation_alias="uploadUrn")
    revision: Optional[int] = None
    category: Optional[str] = Field(
        None, validation_alias=AliasChoices("categoryValue", "category")
    )
    created_at: Optional[str] = Field(None, validation_alias="createdAt")
    created_by: Optional[str] = Field(None, validation_alias="createdBy")


class SubmittalItemsPage(BaseModel):
    pagination: SubmittalPagination
    items: List[SubmittalItemSummary]


class SubmittalPackagesPage(BaseModel):
    pagination: SubmittalPagination
    packages: List[SubmittalPackageSummary]


class SubmittalSpecsPage(BaseModel):
    pagination: SubmittalPagination
    specs: List[SubmittalSpecSummary]


class SubmittalAttachments(BaseModel):
    attachments: List[SubmittalAttachmentSummary]


__all__ = [
    "SubmittalAttachmentSummary",
    "SubmittalAttachments",
    "SubmittalItemSummary",
    "SubmittalItemsPage",
    "SubmittalPackageSummary",
    "SubmittalPackagesPage",
    "SubmittalPagination",
    "SubmittalSpecSummary",
    "SubmittalSpecsPage",
]
