"""Pydantic input models for section operations."""

from __future__ import annotations

from pydantic import Field, model_validator

from obsidian_cortex.core.markdown_sections import find_boundary_heading

from .base import BaseSectionInput


class UpsertSectionInput(BaseSectionInput):
    """Input model for upsert_vault_section tool.

    Replaces the section under ``heading`` (matched by text at any level) or
    appends it to the end of the note when missing. Content may contain deeper
    subheadings but no heading at ``level`` or shallower, since that would end
    the section and repeat on every upsert.

    Examples:
        >>> UpsertSectionInput(path="Work/Projects/Alpha/_Context", heading="Current Status", content="- Done")
    """

    content: str = Field(
        description="Section body (without the heading line). Can be empty."
    )

    level: int = Field(
        2,
        ge=1,
        le=6,
        description="Heading level written for the section (1-6). Default: 2."
    )

    @model_validator(mode="after")
    def validate_content_headings(self) -> "UpsertSectionInput":
        """Reject content headings that would close the section early."""
        boundary = find_boundary_heading(self.content, self.level)
        if boundary is not None:
            raise ValueError(
                f"Content heading '{boundary}' would end the section; "
                f"use headings deeper than level {self.level} inside section content."
            )
        return self

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "path": "Work/Projects/Alpha/_Context.md",
                    "heading": "Current Status",
                    "content": "- Tracker sync shipped\n- Release notes pending",
                    "level": 2,
                    "vault": None
                }
            ]
        }
