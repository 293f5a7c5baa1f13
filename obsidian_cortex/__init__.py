"""Obsidian Cortex MCP Server

Session workflows, structured issue trackers and section-level editing for
Obsidian vaults via Model Context Protocol.
"""

from obsidian_cortex.config import get_vault_configuration, load_vault_configuration
from obsidian_cortex.data_models import VaultMetadata, VaultConfiguration, WorkflowPaths
from obsidian_cortex.session import resolve_vault, set_active_vault, get_active_vault
from obsidian_cortex.server import mcp, run_server

# Import tools to register them with the MCP server
from obsidian_cortex import tools  # noqa: F401

__version__ = "0.3.0"
__all__ = [
    "get_vault_configuration",
    "load_vault_configuration",
    "VaultMetadata",
    "VaultConfiguration",
    "WorkflowPaths",
    "resolve_vault",
    "set_active_vault",
    "get_active_vault",
    "mcp",
    "run_server",
]
