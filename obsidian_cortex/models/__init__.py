"""Pydantic input models for MCP tool validation.

Each model is the input schema of one MCP tool, with field-level validation
and descriptive error messages. Paths are normalized and sandbox-checked here,
before any tool body runs.

Architecture:
- base: VaultScopedInput, BaseNoteInput, BaseSectionInput
- note_models: note read/write/append/delete/move, front matter and batch reads
- section_models: section upsert
- workflow_models: bootstrap, session start/resume, tracker sync, checkpoint,
  stale-state checks
- vault_models: vault listing and selection, recent files and statistics

Usage:
    from obsidian_cortex.models import ReadNoteInput, TrackerSyncInput
"""

from .base import BaseNoteInput, BaseSectionInput, VaultScopedInput
from .note_models import (
    ReadNoteInput,
    WriteNoteInput,
    AppendNoteInput,
    DeleteNoteInput,
    MoveNoteInput,
    FrontmatterInput,
    BatchReadInput,
)
from .section_models import UpsertSectionInput
from .workflow_models import (
    TrackerUpdateInput,
    ContextBootstrapInput,
    StartSessionInput,
    ResumeInput,
    TrackerSyncInput,
    CheckpointInput,
    StaleStateChecksInput,
)
from .vault_models import (
    ListVaultsInput,
    SetActiveVaultInput,
    RecentFilesInput,
    VaultStatsInput,
)

__all__ = [
    # Base models
    "VaultScopedInput",
    "BaseNoteInput",
    "BaseSectionInput",
    # Note models
    "ReadNoteInput",
    "WriteNoteInput",
    "AppendNoteInput",
    "DeleteNoteInput",
    "MoveNoteInput",
    "FrontmatterInput",
    "BatchReadInput",
    # Section models
    "UpsertSectionInput",
    # Workflow models
    "TrackerUpdateInput",
    "ContextBootstrapInput",
    "StartSessionInput",
    "ResumeInput",
    "TrackerSyncInput",
    "CheckpointInput",
    "StaleStateChecksInput",
    # Vault models
    "ListVaultsInput",
    "SetActiveVaultInput",
    "RecentFilesInput",
    "VaultStatsInput",
]
