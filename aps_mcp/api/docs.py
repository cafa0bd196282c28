"""Quick-reference text returned by the ``*_docs`` tools."""

APS_DOCS = """# APS Data Management - Quick Reference

## ID formats
- Hub ID: `b.<account_id>` (e.g. `b.abc12345-6789-...`)
- Project ID: `b.<project_id>`
- Folder URN: `urn:adsk.wipprod:fs.folder:co.<id>`
- Item URN (lineage): `urn:adsk.wipprod:dm.lineage:<id>`
- Version URN: `urn:adsk.wipprod:fs.file:vf.<id>?version=<n>`

## Browsing workflow
```
1. aps_list_hubs                                   -> pick a hub
2. aps_list_projects        hub_id                 -> pick a project
3. aps_get_top_folders      hub_id + project_id    -> root folders
4. aps_get_folder_contents  project_id + folder_id -> files and subfolders
5. aps_get_item_details     project_id + item_id   -> file metadata
6. aps_get_folder_tree      project_id + folder_id -> folder hierarchy
```

Sign in with `aps_login` to act as yourself (3-legged); otherwise the
server uses the app's client credentials (2-legged).

## Raw paths (for aps_dm_request)
| Action | Method | Path |
|--------|--------|------|
| List hubs | GET | project/v1/hubs |
| List projects | GET | project/v1/hubs/{hub_id}/projects |
| Top folders | GET | project/v1/hubs/{hub_id}/projects/{project_id}/topFolders |
| Folder contents | GET | data/v1/projects/{project_id}/folders/{folder_id}/contents |
| Item details | GET | data/v1/projects/{project_id}/items/{item_id} |
| Item tip version | GET | data/v1/projects/{project_id}/items/{item_id}/tip |
| All versions | GET | data/v1/projects/{project_id}/items/{item_id}/versions |
| Search folder | GET | data/v1/projects/{project_id}/folders/{folder_id}/search |
| Create folder | POST | data/v1/projects/{project_id}/folders |

## Query parameters
- `page[number]` - page index (0-based)
- `page[limit]` - items per page (default 25, max 200)
- `filter[type]` - filter by resource type
- `filter[extension.type]` - filter by extension type
- `includeHidden` - include hidden items (default false)

## Common file extensions
.rvt (Revit model), .rfa (Revit family), .nwd/.nwc (Navisworks), .ifc, .dwg,
.dwfx, .pdf

## Errors
| Code | Common cause | Fix |
|------|--------------|-----|
| 401 | Expired or invalid token | Check credentials; tokens refresh automatically |
| 403 | App not provisioned | Admin > Account Settings > Custom Integrations |
| 404 | Wrong ID format | Hub/project use 'b.'; folders/items use 'urn:' |
| 429 | Rate limited | Wait 60 s and reduce request frequency |

Reference: https://aps.autodesk.com/en/docs/data/v2/reference/http/
"""

ISSUES_DOCS = """# ACC Issues - Quick Reference

## Project IDs
The Issues API takes project IDs without the `b.` prefix. The issue tools
accept either form and strip the prefix for you; raw `aps_issues_request`
paths must use the bare GUID.

## Statuses
`draft` -> `open` -> `pending` / `in_progress` / `in_review` / `completed` /
`not_approved` / `in_dispute` -> `closed`

## Workflow
```
1. aps_issues_get_types       project_id                     -> categories and types
2. aps_issues_list            project_id + filters           -> browse issues
3. aps_issues_get             project_id + issue_id          -> one issue
4. aps_issues_create          project_id + title + subtype   -> new issue
5. aps_issues_update          project_id + issue_id + fields -> change an issue
6. aps_issues_get_comments    project_id + issue_id          -> read comments
7. aps_issues_create_comment  project_id + issue_id + body   -> add a comment
8. aps_issues_get_root_causes project_id                     -> root cause categories
```

## Raw paths (for aps_issues_request)
| Action | Method | Path |
|--------|--------|------|
| User profile | GET | construction/issues/v1/projects/{projectId}/users/me |
| Issue types | GET | construction/issues/v1/projects/{projectId}/issue-types?include=subtypes |
| Attribute definitions | GET | construction/issues/v1/projects/{projectId}/issue-attribute-definitions |
| Root cause categories | GET | construction/issues/v1/projects/{projectId}/issue-root-cause-categories?include=rootcauses |
| List / create issues | GET / POST | construction/issues/v1/projects/{projectId}/issues |
| Get / update issue | GET / PATCH | construction/issues/v1/projects/{projectId}/issues/{issueId} |
| Comments | GET / POST | construction/issues/v1/projects/{projectId}/issues/{issueId}/comments |

## Filters (aps_issues_list)
`filter[status]`, `filter[assignedTo]`, `filter[issueTypeId]`,
`filter[issueSubtypeId]`, `filter[dueDate]` (YYYY-MM-DD), `filter[createdAt]`,
`filter[search]`, `filter[locationId]`, `filter[rootCauseId]`

Sort by `createdAt`, `updatedAt`, `displayId`, `title`, `status`,
`assignedTo`, `dueDate`, `startDate` or `closedAt`; prefix `-` for descending.

## Region
Pass `region` (`US`, `EMEA`, `AUS`, `CAN`, `DEU`, `IND`, `JPN`, `GBR`) to send
the `x-ads-region` header.

## Creating an issue
Required: `title`, `issue_subtype_id` (from aps_issues_get_types), `status`.
Writes need the `data:write` scope.

Reference: https://github.com/autodesk-platform-services/aps-sdk-openapi/blob/main/construction/issues/Issues.yaml
"""

SUBMITTALS_DOCS = """# ACC Submittals - Quick Reference

## Project IDs
The Submittals API takes bare project GUIDs; a `b.` prefix is stripped
automatically by the submittal tools.

Base path: `construction/submittals/v2/projects/{projectId}/...`

## Endpoints (relative to the project)
| Action | Method | Path |
|--------|--------|------|
| List / create items | GET / POST | items |
| Get item | GET | items/{itemId} |
| Item attachments | GET | items/{itemId}/attachments |
| Packages | GET | packages |
| Get package | GET | packages/{packageId} |
| Spec sections | GET / POST | specs |
| Item types | GET | item-types |
| Responses | GET | responses |
| Project metadata | GET | metadata |
| Current user | GET | users/me |
| Next custom number | GET | items:next-custom-identifier |

## Item query parameters
- `limit` (max 200), `offset`
- `filter[statusId]` - 1=Required, 2=Open, 3=Closed, 4=Void, 5=Empty, 6=Draft
- `filter[packageId]`, `filter[reviewResponseId]`, `filter[specId]`
- `sort` (e.g. `title`, `createdAt`)

## Numbering
`customIdentifierHumanReadable` is the full display number (e.g. `033100-01`);
`customIdentifier` is the sequence portion.

## Workflow
```
1. aps_list_projects                           -> project ID
2. aps_list_submittal_specs          project_id -> spec sections
3. aps_list_submittal_packages       project_id -> packages
4. aps_list_submittal_items          project_id -> items
5. aps_get_submittal_item            project_id + item_id
6. aps_get_submittal_item_attachments project_id + item_id
```

Reference: https://aps.autodesk.com/en/docs/acc/v1/overview/field-guide/submittals/
"""
