"""ACC Issues paths, request builders and response summaries."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from aps_mcp.schemas.common import as_dict, decode_many, decode_one
from aps_mcp.schemas.issues import (
    CommentsPage,
    IssueComment,
    IssueDetail,
    IssueSummary,
    IssuesPage,
    IssueType,
    IssueTypesPage,
    Pagination,
    RootCauseCategoriesPage,
    RootCauseCategory,
)

ISSUES_BASE = "construction/issues/v1"
MAX_LIST_LIMIT = 100

# tool argument -> Issues API filter key
LIST_FILTERS = {
    "filter_status": "filter[status]",
    "filter_assigned_to": "filter[assignedTo]",
    "filter_issue_type_id": "filter[issueTypeId]",
    "filter_issue_subtype_id": "filter[issueSubtypeId]",
    "filter_due_date": "filter[dueDate]",
    "filter_created_at": "filter[createdAt]",
    "filter_search": "filter[search]",
    "filter_root_cause_id": "filter[rootCauseId]",
    "filter_location_id": "filter[locationId]",
}

# tool argument -> issue body field, shared by create and update
ISSUE_FIELDS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "assigned_to": "assignedTo",
    "assigned_to_type": "assignedToType",
    "due_date": "dueDate",
    "start_date": "startDate",
    "location_id": "locationId",
    "location_details": "locationDetails",
    "root_cause_id": "rootCauseId",
    "published": "published",
    "watchers": "watchers",
    "custom_attributes": "customAttributes",
}


def to_issues_project_id(project_id: str) -> str:
    """The Issues API takes bare project GUIDs; strip a Data Management ``b.`` prefix."""
    return project_id[2:] if project_id.startswith("b.") else project_id


def issues_path(project_id: str, sub_path: str) -> str:
    return f"{ISSUES_BASE}/projects/{to_issues_project_id(project_id)}/{sub_path.lstrip('/')}"


def region_headers(region: Optional[str]) -> Dict[str, str]:
    return {"x-ads-region": region} if region else {}


def write_headers(region: Optional[str]) -> Dict[str, str]:
    return {"Content-Type": "application/json", **region_headers(region)}


def clamp_list_limit(limit: Any) -> int:
    try:
        value = int(limit)
    except (TypeError, ValueError):
        value = 0
    return min(max(value or MAX_LIST_LIMIT, 1), MAX_LIST_LIMIT)


def build_issue_body(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Map snake_case tool arguments onto the camelCase issue body, skipping unset ones."""
    return {
        ISSUE_FIELDS[key]: value
        for key, value in fields.items()
        if key in ISSUE_FIELDS and value is not None
    }


def _pagination(raw: Dict[str, Any]) -> Pagination:
    return decode_one(Pagination, raw.get("pagination"))


def summarize_issues_list(raw: Any) -> IssuesPage:
    body = as_dict(raw)
    return IssuesPage(
        pagination=_pagination(body),
        issues=decode_many(IssueSummary, body.get("results")),
    )


def summarize_issue_detail(raw: Any) -> IssueDetail:
    return decode_one(IssueDetail, raw)


def summarize_issue_types(raw: Any) -> IssueTypesPage:
    body = as_dict(raw)
    return IssueTypesPage(
        pagination=_pagination(body),
        types=decode_many(IssueType, body.get("results")),
    )


def summarize_comments(raw: Any) -> CommentsPage:
    body = as_dict(raw)
    comments: List[IssueComment] = decode_many(IssueComment, body.get("results"))
    return CommentsPage(pagination=_pagination(body), comments=comments)


def summarize_root_cause_categories(raw: Any) -> RootCauseCategoriesPage:
    body = as_dict(raw)
    return RootCauseCategoriesPage(
        pagination=_pagination(body),
        categories=decode_many(RootCauseCategory, body.get("results")),
    )


__all__ = [
    "ISSUES_BASE",
    "ISSUE_FIELDS",
    "LIST_FILTERS",
    "build_issue_body",
    "clamp_list_limit",
    "issues_path",
    "region_headers",
    "summarize_comments",
    "summarize_issue_detail",
    "summarize_issue_types",
    "summarize_issues_list",
    "summarize_root_cause_categories",
    "to_issues_project_id",
    "write_headers",
]
