"""Pydantic input models for the session workflow tools.

This module defines input models for:
- Context bootstrap
- Session start and resume
- Tracker sync
- Checkpoint
- Stale-state checks

Project context, tracker and scope paths go through the same sandbox
normalization as note paths, so invalid paths are rejected before any tool
body runs.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from obsidian_cortex.core.tracker import TrackerUpdate

from .base import VaultScopedInput, validate_optional_folder_path, validate_optional_note_path

_SESSION_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class TrackerUpdateInput(BaseModel):
    """One structured tracker change.

    Omitted fields leave existing values untouched. ``action`` defaults to
    ``upsert``; ``delete`` removes the issue.
    """

    id: str = Field(
        min_length=1,
        description="Issue id, e.g. 'E12' (case-insensitive, stored uppercase)."
    )
    action: Literal["upsert", "delete"] = Field("upsert", description="'upsert' (default) or 'delete'.")
    status: Optional[str] = Field(
        None,
        description="Status; synonyms such as 'wip', 'qa', 'fixed' are normalized."
    )
    note: Optional[str] = Field(None, description="Free-text note.")
    title: Optional[str] = Field(None, description="Short issue title.")
    type: Optional[str] = Field(None, description="Issue type, e.g. 'Defect' or 'Enhancement'.")
    priority: Optional[str] = Field(None, description="Priority label, e.g. 'P1'.")
    owner: Optional[str] = Field(None, description="Owner name.")

    def to_update(self) -> TrackerUpdate:
        return TrackerUpdate(**self.model_dump())

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"id": "E12", "status": "In Validation", "note": "Fix deployed to staging"},
                {"id": "D3", "action": "delete"}
            ]
        }


class _SessionDateInput(VaultScopedInput):
    session_date: Optional[str] = Field(
        None,
        description="Session date in YYYY-MM-DD (default: today, UTC)."
    )

    @field_validator('session_date')
    @classmethod
    def validate_session_date(cls, v: Optional[str]) -> Optional[str]:
        """Accept only real calendar dates in YYYY-MM-DD form."""
        if v is None or not v.strip():
            return None
        cleaned = v.strip()
        if not _SESSION_DATE_PATTERN.match(cleaned):
            raise ValueError(f"Session date must use YYYY-MM-DD format, got '{cleaned}'.")
        try:
            date.fromisoformat(cleaned)
        except ValueError as exc:
            raise ValueError(f"Session date '{cleaned}' is not a valid calendar date.") from exc
        return cleaned


class _RecentActivityInput(VaultScopedInput):
    include_recent: bool = Field(
        False,
        description="Include markdown files modified within the last `days` days."
    )
    recent_path: Optional[str] = Field(
        None,
        description="Folder to restrict the recent scan to."
    )
    days: int = Field(7, ge=1, le=30, description="Recent look-back window in days (1-30).")
    recent_limit: int = Field(10, ge=1, le=50, description="Maximum recent files returned (1-50).")
    include_frontmatter: bool = Field(
        True,
        description="Parse front matter of the loaded notes."
    )

    @field_validator('recent_path')
    @classmethod
    def validate_recent_path(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_folder_path(v)


class ContextBootstrapInput(_RecentActivityInput):
    """Input model for vault_context_bootstrap tool.

    Loads Home, Now and a project context note plus (by default) recent
    activity across the vault.
    """

    project_context_path: Optional[str] = Field(
        None,
        description="Project context note (default: the configured default project context)."
    )
    include_recent: bool = Field(
        True,
        description="Include markdown files modified within the last `days` days."
    )

    @field_validator('project_context_path')
    @classmethod
    def validate_project_context_path(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_note_path(v)

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"days": 3, "recent_limit": 5},
                {"project_context_path": "Work/Projects/Alpha/_Context.md", "include_recent": False}
            ]
        }


class StartSessionInput(_RecentActivityInput):
    """Input model for vault_start_session tool.

    The active project comes from ``override_project_context_path``, else the
    Now note's ``active_project_context`` field, else the configured default.
    """

    override_project_context_path: Optional[str] = Field(
        None,
        description="Explicit project context note, bypassing Now-note routing."
    )

    @field_validator('override_project_context_path')
    @classmethod
    def validate_override(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_note_path(v)

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {},
                {"override_project_context_path": "Work/Projects/Alpha/_Context.md", "include_recent": True}
            ]
        }


class ResumeInput(StartSessionInput, _SessionDateInput):
    """Input model for vault_resume tool."""

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"session_date": "2026-10-18"}
            ]
        }


class TrackerSyncInput(_SessionDateInput):
    """Input model for vault_tracker_sync tool."""

    override_project_context_path: Optional[str] = Field(
        None,
        description="Explicit project context note, bypassing Now-note routing."
    )
    tracker_path: Optional[str] = Field(
        None,
        description="Tracker note (default: the project context's `tracker_path` front matter)."
    )
    updates: list[TrackerUpdateInput] = Field(
        default_factory=list,
        description="Updates applied in order; later updates see earlier ones."
    )
    create_missing: bool = Field(True, description="Create issues for upserts with unknown ids.")
    render_table: bool = Field(True, description="Re-render the Tracker Table section.")
    max_log_entries: int = Field(
        20,
        ge=1,
        le=200,
        description="Tracker Sync Log entries kept, newest first (1-200)."
    )
    log_to_session: bool = Field(
        True,
        description="Append a sync summary to the project's session log for the day."
    )

    @field_validator('override_project_context_path', 'tracker_path')
    @classmethod
    def validate_note_paths(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_note_path(v)

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "updates": [
                        {"id": "E12", "status": "done"},
                        {"id": "E13", "title": "Export fails on empty vault", "type": "Defect"}
                    ]
                }
            ]
        }


class CheckpointInput(_SessionDateInput):
    """Input model for vault_checkpoint tool.

    Empty bullet lists leave the matching project-context section untouched.
    """

    override_project_context_path: Optional[str] = Field(
        None,
        description="Explicit project context note, bypassing Now-note routing."
    )
    status: list[str] = Field(default_factory=list, description="Current Status bullets.")
    priorities: list[str] = Field(default_factory=list, description="Current Priorities bullets.")
    blockers: list[str] = Field(default_factory=list, description="Known Risks/Blockers bullets.")
    next_actions: list[str] = Field(
        default_factory=list,
        description="Next action bullets; only the first 3 are stored."
    )
    summary_note: Optional[str] = Field(
        None,
        description="One-line summary placed first under Current Status."
    )
    include_tracker_sync: bool = Field(True, description="Run a tracker sync after logging.")
    tracker_updates: list[TrackerUpdateInput] = Field(
        default_factory=list,
        description="Updates passed to the tracker sync."
    )

    @field_validator('override_project_context_path')
    @classmethod
    def validate_override(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_note_path(v)

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "summary_note": "Tracker sync shipped",
                    "priorities": ["Release 0.3"],
                    "next_actions": ["Write changelog", "Tag release"],
                    "tracker_updates": [{"id": "E12", "status": "Done"}]
                }
            ]
        }


class StaleStateChecksInput(VaultScopedInput):
    """Input model for vault_stale_state_checks tool."""

    tracker_stale_days: int = Field(7, ge=1, le=365, description="Tracker staleness threshold in days.")
    validation_stale_days: int = Field(
        14,
        ge=1,
        le=365,
        description="Threshold for issues sitting In Validation, in days."
    )
    project_context_stale_days: int = Field(
        14,
        ge=1,
        le=365,
        description="Project context staleness threshold in days."
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {},
                {"tracker_stale_days": 3, "validation_stale_days": 7, "project_context_stale_days": 30}
            ]
        }
