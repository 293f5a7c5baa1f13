"""Base Pydantic models for MCP tool input validation.

This module defines base models that provide common validation patterns
for vault, note and section operations. Other input models inherit from these
bases.

Base Models:
- VaultScopedInput: Optional vault name shared by every tool
- BaseNoteInput: Adds a sandboxed note path
- BaseSectionInput: Adds heading validation for section-based operations
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from obsidian_cortex.core.vault_operations import normalize_note_path, normalize_relative_path


def validate_optional_note_path(value: Optional[str]) -> Optional[str]:
    """Normalize an optional note path; blank values mean "not provided"."""
    if value is None or not value.strip():
        return None
    return normalize_note_path(value)


def validate_optional_folder_path(value: Optional[str]) -> Optional[str]:
    """Normalize an optional folder path; blank values mean "not provided"."""
    if value is None or not value.strip():
        return None
    return normalize_relative_path(value)


class VaultScopedInput(BaseModel):
    """Base model carrying the optional ``vault`` selector."""

    vault: Optional[str] = Field(
        None,
        description=(
            "Vault name (omit to use active vault). "
            "Use list_vaults() to discover available vaults."
        )
    )

    @field_validator('vault')
    @classmethod
    def validate_vault(cls, v: Optional[str]) -> Optional[str]:
        """Validate vault name format.

        Raises:
            ValueError: If vault name is an empty string
        """
        if v is not None and not v.strip():
            raise ValueError(
                "Vault name cannot be empty. "
                "Either omit the vault parameter to use the active vault, "
                "or provide a valid vault name from list_vaults()."
            )

        return v.strip() if v else None


class BaseNoteInput(VaultScopedInput):
    """Base model for note operations with common validation.

    All note-related input models inherit from this class.
    """

    path: str = Field(
        min_length=1,
        description=(
            "Note path relative to the vault root; '.md' is added when missing. "
            "Examples: 'Work/Projects/Alpha/_Context.md', 'Home'. "
            "Either slash style is accepted."
        ),
        examples=["Work/Projects/Alpha/_Context.md", "_Context/Now", "Home.md"]
    )

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate and normalize the note path.

        Enforces:
        - Non-empty path
        - Relative path only (no '/', drive-letter or UNC prefixes)
        - No traversal outside the vault root
        - A '.md' suffix (added when missing)

        Raises:
            ValueError: If the path is empty, absolute or escapes the vault
        """
        return normalize_note_path(v)


class BaseSectionInput(BaseNoteInput):
    """Base model for section manipulation operations.

    Extends BaseNoteInput with heading validation for heading-based operations.
    """

    heading: str = Field(
        min_length=1,
        description=(
            "Heading text to match (case-insensitive, without # markers). "
            "Examples: 'Current Status', 'Next 3 Actions'. "
            "Matches the first occurrence at any level."
        ),
        examples=["Current Status", "Known Risks/Blockers", "Next 3 Actions"]
    )

    @field_validator('heading')
    @classmethod
    def validate_heading(cls, v: str) -> str:
        """Validate heading format.

        Strips whitespace and leading # markers. Ensures heading is not empty.

        Raises:
            ValueError: If heading is empty after stripping
        """
        cleaned = v.strip().lstrip("#").strip()

        if not cleaned:
            raise ValueError(
                "Heading cannot be empty or just '#' markers. "
                "Provide the actual heading text (e.g., 'Current Status')."
            )

        return cleaned
