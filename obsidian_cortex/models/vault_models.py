"""Pydantic input models for vault management operations.

This module defines input models for vault management tools:
- List configured vaults
- Set active vault for session
- Recently modified files
- Vault statistics
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .base import VaultScopedInput, validate_optional_folder_path


class ListVaultsInput(BaseModel):
    """Input model for list_vaults tool.

    Takes no parameters; every tool receives a model for API consistency.
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [{}]
        }


class SetActiveVaultInput(BaseModel):
    """Input model for set_active_vault tool.

    Sets the active vault for the MCP session. Subsequent tool calls that omit
    the vault parameter use this vault.

    Examples:
        >>> SetActiveVaultInput(vault="work")
    """

    vault: str = Field(
        min_length=1,
        description=(
            "Vault name from the cortex.yaml configuration. "
            "Use list_vaults() to discover valid names."
        ),
        examples=["work", "personal"]
    )

    @field_validator('vault')
    @classmethod
    def validate_vault(cls, v: str) -> str:
        """Strip whitespace and reject blank names."""
        cleaned = v.strip()

        if not cleaned:
            raise ValueError(
                "Vault name cannot be empty. "
                "Use list_vaults() to see available vaults."
            )

        return cleaned

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"vault": "work"},
                {"vault": "personal"}
            ]
        }


class RecentFilesInput(VaultScopedInput):
    """Input model for vault_recent tool.

    Examples:
        >>> RecentFilesInput(days=3, path="Work/Projects", limit=10)
    """

    days: int = Field(7, ge=1, le=365, description="Files modified in the last N days (1-365).")

    path: Optional[str] = Field(
        None,
        description="Folder to limit the scan to (omit for the whole vault)."
    )

    limit: int = Field(20, ge=1, le=100, description="Maximum files returned (1-100).")

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_folder_path(v)

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"days": 7, "path": None, "limit": 20, "vault": None},
                {"days": 3, "path": "Work/Projects", "limit": 10, "vault": "work"}
            ]
        }


class VaultStatsInput(VaultScopedInput):
    """Input model for vault_stats tool."""

    path: Optional[str] = Field(
        None,
        description="Folder to limit the statistics to (omit for the whole vault)."
    )

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_folder_path(v)

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"path": None, "vault": None},
                {"path": "Work", "vault": "work"}
            ]
        }
