try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from typing import Any

import pytest

from aps_mcp.core.errors import ApsApiError
from aps_mcp.schemas.common import to_payload
from aps_mcp.services import data_management as dm

PROJECT_ID = "b.project-1"
FOLDER_ID = "urn:adsk.wipprod:fs.folder:co.root"


def _file(item_id: str, name: str, version_id: str, **attributes: Any) -> dict:
    return {
        "type": "items",
        "id": item_id,
        "attributes": {"displayName": name, "createTime": "2024-01-01T00:00:00Z", **attributes},
        "relationships": {"tip": {"data": {"type": "versions", "id": version_id}}},
    }


def _version(version_id: str, size: int, number: int = 1) -> dict:
    return {
        "type": "versions",
        "id": version_id,
        "attributes": {"storageSize": size, "versionNumber": number, "fileType": "rvt"},
    }


def _folder(folder_id: str, name: str, **attributes: Any) -> dict:
    return {"type": "folders", "id": folder_id, "attributes": {"displayName": name, **attributes}}


def test_file_size_comes_from_included_tip_version() -> None:
    raw = {
        "data": [_file("urn:item:1", "Model.rvt", "urn:ver:1?version=3")],
        "included": [_version("urn:ver:1?version=3", 1048576, number=3)],
    }

    summary = dm.summarize_folder_contents(raw)

    (entry,) = summary.files
    assert entry.size_bytes == 1048576
    assert entry.size_mb == "1.0"
    assert entry.version_number == 3
    assert entry.version_id == "urn:ver:1?version=3"
    assert summary.summary.total_size_mb == "1.0"


def test_extension_filter_drops_other_files_from_counts() -> None:
    raw = {
        "data": [
            _file("urn:item:1", "Tower.RVT", "v1"),
            _file("urn:item:2", "Site.dwg", "v2"),
            _file("urn:item:3", "Podium.rvt", "v3"),
            _folder("urn:folder:1", "Exports"),
        ]
    }

    summary = dm.summarize_folder_contents(raw, filter_extensions=[".rvt"])

    assert [entry.name for entry in summary.files] == ["Tower.RVT", "Podium.rvt"]
    assert summary.summary.file_types == {".rvt": 2}
    assert summary.summary.folder_count == 1
    assert summary.summary.total_items == 3
    assert "total_size_mb" not in to_payload(summary)["summary"]


def test_hidden_entries_and_viewer_urls() -> None:
    raw = {
        "data": [
            _folder("urn:folder:hidden", "Shadow", hidden=True),
            _file("urn:item:1", "Plan.pdf", "v1", hidden=True),
            _file("urn:adsk.wipprod:dm.lineage:abc", "Notes", "v2"),
        ]
    }

    summary = dm.summarize_folder_contents(
        raw, exclude_hidden=True, project_id=PROJECT_ID, folder_id=FOLDER_ID
    )

    assert summary.folders == []
    (entry,) = summary.files
    assert entry.type == "unknown"
    assert entry.viewer_url == (
        "https://acc.autodesk.com/build/files/projects/project-1"
        "?folderUrn=urn%3Aadsk.wipprod%3Afs.folder%3Aco.root"
        "&entityId=urn%3Aadsk.wipprod%3Adm.lineage%3Aabc"
        "&viewModel=detail&moduleId=folders"
    )
    assert summary.summary.file_types == {".unknown": 1}


def test_malformed_payloads_summarize_to_empty_records() -> None:
    summary = dm.summarize_folder_contents({"data": "nope", "included": None})
    assert summary.files == [] and summary.folders == []
    assert dm.summarize_hubs(None) == {"hubs": []}
    assert dm.summarize_item({}) == {"error": "No item data found in response"}


def test_hubs_and_projects_summaries() -> None:
    hubs = dm.summarize_hubs(
        {
            "data": [
                {
                    "type": "hubs",
                    "id": "b.hub",
                    "attributes": {"name": "Acme", "extension": {"type": "hubs:autodesk.bim360:Account"}},
                },
                {"type": "hubs", "id": "b.other", "attributes": {"region": "EMEA"}},
            ]
        }
    )["hubs"]

    assert [to_payload(hub) for hub in hubs] == [
        {"name": "Acme", "id": "b.hub", "type": "hubs:autodesk.bim360:Account", "region": "US"},
        {"name": "(unknown)", "id": "b.other", "type": "hubs", "region": "EMEA"},
    ]

    projects = dm.summarize_projects(
        {
            "data": [
                {
                    "id": "b.p1",
                    "attributes": {
                        "name": "Tower",
                        "extension": {
                            "type": "projects:autodesk.bim360:Project",
                            "data": {"projectType": "ACC"},
                        },
                    },
                },
                {"id": "b.p2", "attributes": {"extension": {"type": "projects:autodesk.core:A360Project"}}},
                {"id": "b.p3", "attributes": {"extension": {"type": "projects:autodesk.a360:Project"}}},
            ]
        }
    )["projects"]

    assert [project.platform for project in projects] == ["BIM 360", "Unknown", "A360"]
    assert projects[0].status == "ACC"
    assert "status" not in to_payload(projects[1])


def test_top_folders_fall_back_to_name() -> None:
    summary = dm.summarize_top_folders(
        {"data": [{"id": "urn:f1", "attributes": {"name": "Project Files", "objectCount": 4}}]}
    )

    assert to_payload(summary) == {
        "context": {},
        "folders": [
            {
                "name": "Project Files",
                "id": "urn:f1",
                "last_modified": "",
                "object_count": 4,
                "hidden": False,
            }
        ],
    }


def test_item_summary_merges_tip_version_and_parent_folder() -> None:
    raw = {
        "data": {
            "type": "items",
            "id": "urn:item:1",
            "attributes": {"displayName": "Tower.rvt", "createTime": "2024-01-01"},
            "relationships": {
                "tip": {"data": {"type": "versions", "id": "urn:ver:2"}},
                "parent": {"data": {"type": "folders", "id": "urn:folder:9"}},
            },
        },
        "included": [_version("urn:ver:1", 10), _version("urn:ver:2", 2097152, number=2)],
    }

    summary = dm.summarize_item(raw, project_id=PROJECT_ID)

    payload = to_payload(summary)
    assert payload["type"] == "rvt"
    assert payload["version"] == {
        "id": "urn:ver:2",
        "number": 2,
        "size_bytes": 2097152,
        "size_mb": "2.0",
        "file_type": "rvt",
    }
    assert payload["viewer_url"].endswith(
        "?folderUrn=urn%3Afolder%3A9&entityId=urn%3Aitem%3A1&viewModel=detail&moduleId=folders"
    )


class FakeApiClient:
    """Serves canned folder contents keyed by request path."""

    def __init__(self, contents: dict[str, list[dict]], folder_names: dict[str, str]) -> None:
        self._contents = contents
        self._names = folder_names
        self.calls: list[str] = []

    async def request(self, method: str, path: str, token: str, **_: Any) -> Any:
        self.calls.append(path)
        if path.endswith("/contents"):
            folder_id = path.split("/folders/")[1][: -len("/contents")]
            return {"data": self._contents.get(folder_id, [])}
        folder_id = path.split("/folders/")[1]
        if folder_id not in self._names:
            raise ApsApiError(404, method, path, "not found")
        return {"data": {"id": folder_id, "attributes": {"displayName": self._names[folder_id]}}}

    def contents_calls(self) -> list[str]:
        return [path for path in self.calls if path.endswith("/contents")]


def _tree_client() -> FakeApiClient:
    return FakeApiClient(
        contents={
            "root": [_folder("a", "Architecture"), _folder("s", "Structure"), _file("i1", "x.rvt", "v")],
            "a": [_folder("a1", "Level 1"), _file("i2", "a.dwg", "v"), _file("i3", "b.dwg", "v")],
            "s": [],
            "a1": [_file("i4", "c.pdf", "v")],
        },
        folder_names={"root": "Project Files"},
    )


@pytest.mark.asyncio
async def test_tree_with_depth_one_returns_placeholders() -> None:
    client = _tree_client()

    tree = await dm.build_folder_tree(client, PROJECT_ID, "root", "tok", max_depth=1)

    assert client.contents_calls() == [f"data/v1/projects/{PROJECT_ID}/folders/root/contents"]
    assert to_payload(tree) == {
        "name": "Project Files",
        "id": "root",
        "type": "folder",
        "children": [
            {"name": "Architecture", "id": "a", "type": "folder"},
            {"name": "Structure", "id": "s", "type": "folder"},
        ],
        "file_count": 1,
    }


@pytest.mark.asyncio
async def test_tree_expands_until_max_depth() -> None:
    client = _tree_client()

    tree = await dm.build_folder_tree(client, PROJECT_ID, "root", "tok", max_depth=2)

    architecture, structure = tree.children
    assert architecture.name == "Architecture"
    assert architecture.file_count == 2
    assert [child.name for child in architecture.children] == ["Level 1"]
    assert architecture.children[0].children is None
    assert architecture.children[0].file_count is None
    assert structure.children is None and structure.file_count == 0
    assert len(client.contents_calls()) == 3


@pytest.mark.asyncio
async def test_tree_root_keeps_id_when_name_lookup_fails() -> None:
    client = FakeApiClient(contents={"lost": []}, folder_names={})

    tree = await dm.build_folder_tree(client, PROJECT_ID, "lost", "tok", max_depth=3)

    assert tree.name == "lost"
    assert tree.children is None
    assert tree.file_count == 0


def test_mistyped_fields_keep_the_record() -> None:
    raw = {
        "data": [
            _file("urn:item:a", "a.rvt", "va", objectCount="n/a"),
            _file("urn:item:b", "b.rvt", "vb"),
            _folder("urn:folder:1", "Links", objectCount={"count": 3}),
        ],
        "included": [
            {"type": "versions", "id": "va", "attributes": {"storageSize": 2048, "versionNumber": "three"}},
        ],
    }

    summary = dm.summarize_folder_contents(raw)

    assert [entry.name for entry in summary.files] == ["a.rvt", "b.rvt"]
    first = summary.files[0]
    assert first.size_bytes == 2048
    assert first.version_number is None
    assert summary.folders[0].object_count is None
    assert summary.summary.file_types == {".rvt": 2}
    assert summary.summary.total_items == 3
