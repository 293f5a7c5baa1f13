"""Data models for vault metadata, configuration and workflow paths."""

from __future__ import annotations
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from obsidian_cortex.constants import (
    DEFAULT_HOME_PATH,
    DEFAULT_NOW_PATH,
    DEFAULT_PROJECT_CONTEXT_FILENAME,
    DEFAULT_PROJECT_CONTEXT_PATH,
    DEFAULT_PROJECTS_DIR,
    DEFAULT_SESSION_LOG_POINTER_DIR,
    DEFAULT_SESSION_LOGS_DIRNAME,
)


@dataclass(frozen=True)
class VaultMetadata:
    """Normalized metadata describing an Obsidian vault."""

    name: str
    path: Path
    description: str
    exists: bool

    def as_payload(self) -> dict[str, Any]:
        """Return a serializable payload representation."""
        return {
            "name": self.name,
            "path": str(self.path),
            "description": self.description,
            "exists": self.path.is_dir(),
        }


@dataclass(frozen=True)
class WorkflowPaths:
    """Vault-relative locations used by the session workflow macros.

    The defaults mirror the vault layout the workflows were designed around;
    any of them can be overridden from the ``workflow`` block of cortex.yaml.
    """

    home_path: str = DEFAULT_HOME_PATH
    now_path: str = DEFAULT_NOW_PATH
    default_project_context_path: str = DEFAULT_PROJECT_CONTEXT_PATH
    session_log_pointer_dir: str = DEFAULT_SESSION_LOG_POINTER_DIR
    projects_dir: str = DEFAULT_PROJECTS_DIR
    project_context_filename: str = DEFAULT_PROJECT_CONTEXT_FILENAME
    session_logs_dirname: str = DEFAULT_SESSION_LOGS_DIRNAME
    now_context_field: str = "active_project_context"
    tracker_path_field: str = "tracker_path"

    def as_payload(self) -> dict[str, Any]:
        return asdict(self)


class VaultConfiguration:
    """Holds vault metadata, the default vault and workflow paths.

    Provides vault lookup by name and payload serialization for MCP responses.
    """

    def __init__(
        self,
        default_vault: str,
        vaults: dict[str, VaultMetadata],
        workflow: WorkflowPaths | None = None,
    ) -> None:
        self.default_vault = default_vault
        self.vaults = vaults
        self.workflow = workflow or WorkflowPaths()

    def get(self, name: str) -> VaultMetadata:
        """Get vault metadata by name.

        Raises:
            ValueError: If the vault name is not found in configuration.
        """
        try:
            return self.vaults[name]
        except KeyError as exc:
            raise ValueError(
                f"Unknown vault '{name}'. Available vaults: {', '.join(sorted(self.vaults))}"
            ) from exc

    def as_payload(self) -> dict[str, Any]:
        return {
            "default": self.default_vault,
            "vaults": [vault.as_payload() for vault in self.vaults.values()],
            "workflow": self.workflow.as_payload(),
        }
