"""Pydantic input models for note operations.

This module defines input models for note management tools:
- Read note content
- Write notes (overwrite, append, prepend)
- Append blocks with a separator
- Delete notes
- Move/rename notes
- Read and update front matter
- Read several notes in one call
"""

from __future__ import annotations

from typing import Any, Literal, Optional
from pydantic import Field, field_validator, model_validator

from obsidian_cortex.core.vault_operations import normalize_note_path

from .base import BaseNoteInput, VaultScopedInput


class ReadNoteInput(BaseNoteInput):
    """Input model for read_vault_note tool.

    Examples:
        >>> ReadNoteInput(path="Home.md")
        >>> ReadNoteInput(path="_Context/Now", include_frontmatter=False)
    """

    include_frontmatter: bool = Field(
        True,
        description=(
            "Parse front matter into a separate field and return the trimmed body. "
            "Set False to receive the raw file text."
        )
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"path": "Home.md", "include_frontmatter": True, "vault": None},
                {"path": "_Context/Now.md", "include_frontmatter": False, "vault": "work"}
            ]
        }


class WriteNoteInput(BaseNoteInput):
    """Input model for write_vault_note tool.

    Creates the note (and its folders) when missing. Existing front matter is
    kept and ``frontmatter`` fields are merged over it.
    """

    content: str = Field(
        description="Markdown body to write. Can be empty to clear the body."
    )

    frontmatter: Optional[dict[str, Any]] = Field(
        None,
        description="Front-matter fields to add or replace (top-level merge)."
    )

    mode: Literal["overwrite", "append", "prepend"] = Field(
        "overwrite",
        description="'overwrite' replaces the body; 'append'/'prepend' add to it."
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "path": "Work/Projects/Alpha/_Context.md",
                    "content": "# Alpha\n\n## Current Status\n\n- Kickoff done",
                    "frontmatter": {"tracker_path": "Work/Projects/Alpha/Tracker.md"},
                    "mode": "overwrite",
                    "vault": None
                }
            ]
        }


class AppendNoteInput(BaseNoteInput):
    """Input model for append_to_vault_note tool.

    Adds content to an existing note without rewriting it. Fails when the note
    does not exist.
    """

    content: str = Field(
        min_length=1,
        description="Markdown content to add. Must not be empty."
    )

    separator: str = Field(
        "\n\n---\n\n",
        description="Text inserted between the existing body and the new content."
    )

    position: Literal["end", "start"] = Field(
        "end",
        description="Add at the 'end' (default) or the 'start' of the body."
    )

    @field_validator('content')
    @classmethod
    def validate_content_not_empty(cls, v: str) -> str:
        """Reject content that is only whitespace."""
        if not v.strip():
            raise ValueError(
                "Content cannot be empty when appending to a note. "
                "Provide the text you want to add to the note."
            )
        return v

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "path": "Work/Projects/Alpha/Session Logs/2026-10-18.md",
                    "content": "## Notes\n\n- Reviewed tracker",
                    "separator": "\n\n---\n\n",
                    "position": "end",
                    "vault": None
                }
            ]
        }


class DeleteNoteInput(BaseNoteInput):
    """Input model for delete_vault_note tool.

    Permanently removes a note file. Always confirm with the user first.
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"path": "Scratch/Temporary.md", "vault": None}
            ]
        }


class MoveNoteInput(VaultScopedInput):
    """Input model for move_vault_note tool.

    Moves or renames a note. The destination must not exist.

    Examples:
        >>> MoveNoteInput(from_path="Inbox/Idea", to_path="Work/Projects/Alpha/Idea")
    """

    from_path: str = Field(
        min_length=1,
        description="Current note path relative to the vault root."
    )

    to_path: str = Field(
        min_length=1,
        description="New note path relative to the vault root."
    )

    @field_validator('from_path', 'to_path')
    @classmethod
    def validate_paths(cls, v: str) -> str:
        """Apply the same normalization as BaseNoteInput to both paths."""
        return normalize_note_path(v)

    @model_validator(mode='after')
    def validate_paths_different(self) -> 'MoveNoteInput':
        """Reject moves onto the same path."""
        if self.from_path == self.to_path:
            raise ValueError(
                "Source and destination must be different. "
                f"Both are set to '{self.from_path}'."
            )
        return self

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "from_path": "Inbox/Idea.md",
                    "to_path": "Work/Projects/Alpha/Idea.md",
                    "vault": None
                }
            ]
        }


class FrontmatterInput(BaseNoteInput):
    """Input model for vault_frontmatter tool.

    ``get`` reads the block; ``set`` replaces it; ``merge`` deep-merges ``data``
    into it. ``set`` and ``merge`` require ``data``.
    """

    action: Literal["get", "set", "merge"] = Field(
        "get",
        description="'get', 'set' (replace) or 'merge' (deep merge)."
    )

    data: Optional[dict[str, Any]] = Field(
        None,
        description="Front-matter fields for set/merge."
    )

    @model_validator(mode='after')
    def validate_data_for_writes(self) -> 'FrontmatterInput':
        """Require ``data`` for set/merge."""
        if self.action != "get" and self.data is None:
            raise ValueError("Data is required for set/merge operations.")
        return self

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"path": "_Context/Now.md", "action": "get", "vault": None},
                {
                    "path": "_Context/Now.md",
                    "action": "merge",
                    "data": {"active_project_context": "Work/Projects/Alpha/_Context.md"},
                    "vault": None
                }
            ]
        }


class BatchReadInput(VaultScopedInput):
    """Input model for vault_batch_read tool.

    Reads up to 20 notes in one call. Results keep the request order and a
    missing note is reported in its own record instead of failing the call.

    Examples:
        >>> BatchReadInput(paths=["Home", "_Context/Now"])
    """

    paths: list[str] = Field(
        min_length=1,
        max_length=20,
        description="Note paths relative to the vault root (1-20); '.md' is added when missing."
    )

    include_frontmatter: bool = Field(
        True,
        description="Parse front matter separately (False returns raw file text)."
    )

    @field_validator('paths')
    @classmethod
    def validate_paths(cls, v: list[str]) -> list[str]:
        """Normalize every path; unsafe paths fail the whole request."""
        return [normalize_note_path(path) for path in v]

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"paths": ["Home.md", "_Context/Now.md"], "include_frontmatter": True, "vault": None}
            ]
        }
