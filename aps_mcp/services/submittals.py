"""ACC Submittals paths and response summaries."""

from __future__ import annotations

from typing import Any, List, Tuple, Type, TypeVar

from aps_mcp.schemas.common import LenientModel, as_dict, decode_many, decode_one
from aps_mcp.schemas.submittals import (
    SubmittalAttachments,
    SubmittalAttachmentSummary,
    SubmittalItemsPage,
    SubmittalItemSummary,
    SubmittalPackagesPage,
    SubmittalPackageSummary,
    SubmittalPagination,
    SubmittalSpecsPage,
    SubmittalSpecSummary,
)

SUBMITTALS_BASE = "construction/submittals/v2"
MAX_LIST_LIMIT = 200

RecordT = TypeVar("RecordT", bound=LenientModel)


def to_acc_project_id(project_id: str) -> str:
    return project_id[2:] if project_id.startswith("b.") else project_id


def submittal_path(project_id: str, sub_path: str) -> str:
    """``construction/submittals/v2/projects/<guid>/<sub_path>``."""
    sub = sub_path[1:] if sub_path.startswith("/") else sub_path
    return f"{SUBMITTALS_BASE}/projects/{to_acc_project_id(project_id)}/{sub}"


def clamp_list_limit(limit: int) -> int:
    return min(max(limit, 1), MAX_LIST_LIMIT)


def _int_or(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value


def _page(raw: Any, model: Type[RecordT]) -> Tuple[SubmittalPagination, List[RecordT]]:
    body = as_dict(raw)
    records = decode_many(model, body.get("results"))
    pagination = as_dict(body.get("pagination"))
    return (
        SubmittalPagination(
            total=_int_or(pagination.get("totalResults"), len(records)),
            limit=_int_or(pagination.get("limit"), 0),
            offset=_int_or(pagination.get("offset"), 0),
        ),
        records,
    )


def summarize_submittal_items(raw: Any) -> SubmittalItemsPage:
    pagination, items = _page(raw, SubmittalItemSummary)
    return SubmittalItemsPage(pagination=pagination, items=items)


def summarize_submittal_packages(raw: Any) -> SubmittalPackagesPage:
    pagination, packages = _page(raw, SubmittalPackageSummary)
    return SubmittalPackagesPage(pagination=pagination, packages=packages)


def summarize_submittal_specs(raw: Any) -> SubmittalSpecsPage:
    pagination, specs = _page(raw, SubmittalSpecSummary)
    return SubmittalSpecsPage(pagination=pagination, specs=specs)


def summarize_submittal_item(raw: Any) -> SubmittalItemSummary:
    """A single item response; the record is the body itself."""
    return decode_one(SubmittalItemSummary, raw)


def summarize_submittal_attachments(raw: Any) -> SubmittalAttachments:
    # either ``{"results": [...]}`` or a bare list
    results = raw if isinstance(raw, list) else as_dict(raw).get("results")
    return SubmittalAttachments(
        attachments=decode_many(SubmittalAttachmentSummary, results)
    )


__all__ = [
    "SUBMITTALS_BASE",
    "clamp_list_limit",
    "submittal_path",
    "summarize_submittal_attachments",
    "summarize_submittal_item",
    "summarize_submittal_items",
    "summarize_submittal_packages",
    "summarize_submittal_specs",
    "to_acc_project_id",
]
