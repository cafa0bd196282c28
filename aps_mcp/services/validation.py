"""Argument checks run before any APS request is made.

Each validator raises :class:`ToolValidationError` with a hint describing the
expected format.
"""

from __future__ import annotations

import re

from aps_mcp.core.errors import ToolValidationError

_MISSING_VERSION_PREFIX = re.compile(r"^(hubs|projects|folders|items|versions)\b")


def validate_relative_path(path: str) -> None:
    if not path or not isinstance(path, str):
        raise ToolValidationError("path is required and must be a non-empty string.")
    if ".." in path:
        raise ToolValidationError("path must not contain '..'.")


def validate_path(path: str) -> None:
    """Data Management paths must carry their ``project/v1`` or ``data/v1`` prefix."""
    validate_relative_path(path)
    if _MISSING_VERSION_PREFIX.match(path):
        raise ToolValidationError(
            "path looks like it's missing the version prefix. "
            f"Did you mean 'project/v1/{path}' or 'data/v1/{path}'?"
        )


def _require(value: str, field: str) -> None:
    if not value:
        raise ToolValidationError(f"{field} is required.")


def _require_b_prefix(value: str, field: str) -> None:
    _require(value, field)
    if not value.startswith("b."):
        raise ToolValidationError(
            f"{field} should start with 'b.' (e.g. 'b.abc123...'). Got: '{value}'."
        )


def _require_urn(value: str, field: str) -> None:
    _require(value, field)
    if not value.startswith("urn:"):
        raise ToolValidationError(
            f"{field} should be a URN starting with 'urn:'. Got: '{value[:40]}...'."
        )


def validate_hub_id(hub_id: str) -> None:
    _require_b_prefix(hub_id, "hub_id")


def validate_project_id(project_id: str) -> None:
    _require_b_prefix(project_id, "project_id")


def validate_folder_id(folder_id: str) -> None:
    _require_urn(folder_id, "folder_id")


def validate_item_id(item_id: str) -> None:
    _require_urn(item_id, "item_id")


def validate_acc_project_id(project_id: str) -> None:
    """Issues and Submittals accept both ``b.<guid>`` and bare GUIDs."""
    _require(project_id, "project_id")


def validate_required(value: str, field: str) -> None:
    _require(value, field)


__all__ = [
    "validate_acc_project_id",
    "validate_folder_id",
    "validate_hub_id",
    "validate_item_id",
    "validate_path",
    "validate_project_id",
    "validate_relative_path",
    "validate_required",
]
