"""Public schema exports."""

from .common import LenientModel, decode_many, decode_one, to_payload
from .data_management import (
    FileEntry,
    FolderContentsSummary,
    FolderEntry,
    FolderTreeNode,
    HubSummary,
    ItemSummary,
    ProjectSummary,
    TopFoldersSummary,
)
from .issues import (
    CommentsPage,
    IssueDetail,
    IssueSummary,
    IssueTypesPage,
    IssuesPage,
    RootCauseCategoriesPage,
)
from .submittals import (
    SubmittalAttachments,
    SubmittalItemsPage,
    SubmittalItemSummary,
    SubmittalPackagesPage,
    SubmittalSpecsPage,
)

__all__ = [
    "LenientModel",
    "decode_many",
    "decode_one",
    "to_payload",
    "FileEntry",
    "FolderContentsSummary",
    "FolderEntry",
    "FolderTreeNode",
    "HubSummary",
    "ItemSummary",
    "ProjectSummary",
    "TopFoldersSummary",
    "CommentsPage",
    "IssueDetail",
    "IssueSummary",
    "IssueTypesPage",
    "IssuesPage",
    "RootCauseCategoriesPage",
    "SubmittalAttachments",
    "SubmittalItemsPage",
    "SubmittalItemSummary",
    "SubmittalPackagesPage",
    "SubmittalSpecsPage",
]
