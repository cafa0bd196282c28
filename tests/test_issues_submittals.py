try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from aps_mcp.schemas.common import to_payload
from aps_mcp.services import issues, submittals


def test_issue_paths_strip_data_management_prefix() -> None:
    assert issues.issues_path("b.abc", "issues") == "construction/issues/v1/projects/abc/issues"
    assert issues.issues_path("abc", "/issue-types") == "construction/issues/v1/projects/abc/issue-types"
    assert submittals.submittal_path("b.abc", "/items/1") == (
        "construction/submittals/v2/projects/abc/items/1"
    )


def test_write_headers_carry_region_only_when_given() -> None:
    assert issues.region_headers(None) == {}
    assert issues.write_headers("EMEA") == {
        "Content-Type": "application/json",
        "x-ads-region": "EMEA",
    }


@pytest.mark.parametrize(
    ("limit", "expected"),
    [(None, 100), (0, 100), (500, 100), (-3, 1), ("25", 25), ("abc", 100)],
)
def test_issue_list_limit_is_clamped(limit, expected) -> None:
    assert issues.clamp_list_limit(limit) == expected


def test_submittal_list_limit_is_clamped() -> None:
    assert submittals.clamp_list_limit(0) == 1
    assert submittals.clamp_list_limit(1000) == 200
    assert submittals.clamp_list_limit(20) == 20


def test_issue_body_skips_unset_fields() -> None:
    body = issues.build_issue_body(
        {
            "title": "Leak",
            "assigned_to": "user-1",
            "due_date": None,
            "published": False,
            "unexpected": "dropped",
        }
    )

    assert body == {"title": "Leak", "assignedTo": "user-1", "published": False}


def test_issues_list_summary() -> None:
    raw = {
        "pagination": {"limit": 2, "offset": 0, "totalResults": 7},
        "results": [
            {
                "id": "i-1",
                "displayId": 12,
                "title": "Cracked slab",
                "status": "open",
                "assignedTo": None,
                "commentCount": 3,
                "createdBy": "u-1",
                "createdAt": "2024-05-01T00:00:00Z",
                "linkedDocuments": [{"urn": "x"}],
            },
            "not-a-record",
        ],
    }

    page = issues.summarize_issues_list(raw)

    assert page.pagination.total_results == 7
    (issue,) = page.issues
    payload = to_payload(issue)
    assert payload["displayId"] == 12
    assert payload["commentCount"] == 3
    assert "assignedTo" not in payload
    assert "linkedDocuments" not in payload


def test_issue_detail_counts_linked_documents() -> None:
    detail = issues.summarize_issue_detail(
        {
            "id": "i-1",
            "title": "Cracked slab",
            "issueSubtypeId": "sub-1",
            "linkedDocuments": [{"urn": "a"}, {"urn": "b"}],
            "customAttributes": [
                {"attributeDefinitionId": "attr-1", "value": "North", "type": "list"},
                "junk",
            ],
            "watchers": "not-a-list",
        }
    )

    payload = to_payload(detail)
    assert payload["linkedDocumentCount"] == 2
    assert payload["issueSubtypeId"] == "sub-1"
    assert payload["customAttributes"] == [{"id": "attr-1", "value": "North", "type": "list"}]
    assert "watchers" not in payload


def test_issue_detail_of_garbage_is_defaults() -> None:
    detail = issues.summarize_issue_detail("oops")
    assert detail.title == ""
    assert detail.linked_document_count == 0


def test_issue_types_comments_and_root_causes() -> None:
    types = issues.summarize_issue_types(
        {
            "results": [
                {
                    "id": "t-1",
                    "title": "Quality",
                    "isActive": True,
                    "subtypes": [{"id": "s-1", "title": "Defect", "code": "QD", "isActive": True}],
                }
            ]
        }
    )
    assert types.types[0].subtypes[0].code == "QD"
    assert types.pagination.total_results == 0

    comments = issues.summarize_comments(
        {"results": [{"id": "c-1", "body": "Fixed", "createdBy": "u-2", "createdAt": "2024"}]}
    )
    assert to_payload(comments.comments[0]) == {
        "id": "c-1",
        "body": "Fixed",
        "createdBy": "u-2",
        "createdAt": "2024",
    }

    categories = issues.summarize_root_cause_categories(
        {"results": [{"id": "rc-1", "title": "Design", "rootCauses": [{"id": "r-1", "title": "Error"}]}]}
    )
    assert categories.categories[0].root_causes[0].title == "Error"


def test_submittal_items_prefer_human_readable_values() -> None:
    page = submittals.summarize_submittal_items(
        {
            "pagination": {"totalResults": 41, "limit": 20, "offset": 20},
            "results": [
                {
                    "id": "s-1",
                    "title": "Door hardware",
                    "customIdentifierHumanReadable": "087100-01",
                    "customIdentifier": 1,
                    "statusValue": "Open",
                    "status": "2",
                    "typeValue": "Product data",
                    "responseValue": "Approved",
                    "package": "pkg-9",
                },
                {"id": "s-2", "customIdentifier": 2, "title": None},
            ],
        }
    )

    assert to_payload(page.pagination) == {"total": 41, "limit": 20, "offset": 20}
    first, second = page.items
    assert first.number == "087100-01"
    assert first.status == "Open"
    assert first.type == "Product data"
    assert first.response == "Approved"
    assert first.package_id == "pkg-9"
    assert second.number == "2"
    assert second.title == "(untitled)"


def test_submittal_pagination_falls_back_to_record_count() -> None:
    page = submittals.summarize_submittal_specs(
        {"pagination": {"limit": "10"}, "results": [{"id": "sp-1", "identifier": "033100"}, {"id": "sp-2"}]}
    )

    assert to_payload(page.pagination) == {"total": 2, "limit": 0, "offset": 0}
    assert [spec.title for spec in page.specs] == ["(untitled)", "(untitled)"]
    assert page.specs[1].identifier == ""


def test_submittal_packages_and_single_item() -> None:
    packages = submittals.summarize_submittal_packages(
        {"results": [{"id": "p-1", "title": "Doors", "identifier": 4, "specIdentifier": "087100"}]}
    )
    assert packages.packages[0].identifier == 4
    assert packages.packages[0].spec_identifier == "087100"

    item = submittals.summarize_submittal_item({"id": "s-1", "priorityValue": "High", "revision": 2})
    assert item.priority == "High"
    assert item.revision == 2


@pytest.mark.parametrize(
    "raw",
    [
        {"results": [{"id": "a-1", "name": "spec.pdf", "categoryValue": "Submittal"}]},
        [{"id": "a-1", "name": "spec.pdf", "category": "Submittal"}],
    ],
)
def test_submittal_attachments_accept_both_shapes(raw) -> None:
    attachments = submittals.summarize_submittal_attachments(raw).attachments

    assert len(attachments) == 1
    assert attachments[0].name == "spec.pdf"
    assert attachments[0].category == "Submittal"


def test_mistyped_issue_fields_fall_back_to_defaults() -> None:
    detail = issues.summarize_issue_detail(
        {"id": "i-1", "title": "Cracked slab", "displayId": "twelve", "published": {"bad": 1}}
    )

    assert detail.id == "i-1"
    assert detail.title == "Cracked slab"
    assert detail.display_id == 0
    assert detail.published is False

    page = submittals.summarize_submittal_items(
        {"results": [{"id": "s-1", "title": "Doors", "revision": "rev-a"}, {"id": "s-2"}]}
    )
    assert [item.id for item in page.items] == ["s-1", "s-2"]
    assert page.items[0].revision is None
