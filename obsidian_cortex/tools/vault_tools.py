"""MCP tools for vault management, recent activity and vault statistics."""

import logging
from typing import Any
from mcp.server.fastmcp import Context

from obsidian_cortex.server import mcp
from obsidian_cortex.models import ListVaultsInput, SetActiveVaultInput, RecentFilesInput, VaultStatsInput
from obsidian_cortex.config import get_vault_configuration
from obsidian_cortex.session import (
    set_active_vault as set_active_vault_session,
    get_active_vault,
    get_session_key,
    resolve_vault,
)
from obsidian_cortex.core.vault_activity import recent_files, vault_stats as collect_vault_stats
from obsidian_cortex.tools.boundary import tool_boundary

logger = logging.getLogger(__name__)


@mcp.tool()
@tool_boundary
async def list_vaults(
    input: ListVaultsInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """List configured Obsidian vaults, the workflow paths and session state.

    Args:
        input (ListVaultsInput): Validated input (no fields required)
        ctx (Context, optional): FastMCP context for session state

    Returns:
        {
            "success": True,
            "default": str,    # Configured default vault
            "active": str,     # Active vault for this session (or None)
            "vaults": [{"name", "path", "description", "exists"}],
            "workflow": {...}  # Vault-relative workflow paths
        }

    Error Handling:
        - Config file missing and OBSIDIAN_VAULT_PATH unset → error payload
        - Invalid config format → error payload describing the bad entry
    """
    configuration = get_vault_configuration()
    active = None
    if ctx is not None:
        try:
            active = get_active_vault(ctx).name
        except ValueError:
            active = None

    return {
        "active": active,
        **configuration.as_payload(),
    }


@mcp.tool()
@tool_boundary
async def set_active_vault(
    input: SetActiveVaultInput,
    ctx: Context,
) -> dict[str, Any]:
    """Set the active vault for this MCP session.

    All subsequent tool calls that omit the vault parameter use the active
    vault.

    Args:
        input (SetActiveVaultInput): Validated input containing:
            - vault (str): Vault name from cortex.yaml
        ctx (Context): FastMCP context for session state

    Returns:
        {"success": True, "vault": str, "path": str, "status": "active"}

    Error Handling:
        - Unknown vault → error payload listing available vaults
    """
    metadata = set_active_vault_session(ctx, input.vault)
    logger.info("Active vault for session %s set to '%s'", get_session_key(ctx), metadata.name)
    return {
        "vault": metadata.name,
        "path": str(metadata.path),
        "status": "active",
    }


# ==============================================================================
# ACTIVITY AND STATISTICS
# ==============================================================================

@mcp.tool()
@tool_boundary
async def vault_recent(
    input: RecentFilesInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Find recently modified notes, newest first.

    Args:
        input (RecentFilesInput): Validated input containing:
            - days (int): Files modified in the last N days (default 7)
            - path (str, optional): Folder to limit the scan to
            - limit (int): Maximum files returned (default 20)
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {
            "success": True,
            "vault": str,
            "search_path": str,   # "/" for the whole vault
            "days": int,
            "result_count": int,
            "total_found": int,
            "files": [{"path", "modified", "days_ago"}]
        }

    Error Handling:
        - ValidationError: Absolute or escaping folder path
        - Folder does not exist → {"success": False, "error": "Directory not found: <path>"}
    """
    metadata = resolve_vault(input.vault, ctx)
    recent = recent_files(metadata, input.path, days=input.days, limit=input.limit)
    return {
        "vault": metadata.name,
        "search_path": recent["scope_path"] or "/",
        "days": recent["days"],
        "result_count": len(recent["files"]),
        "total_found": recent["total_found"],
        "files": recent["files"],
    }


@mcp.tool()
@tool_boundary
async def vault_stats(
    input: VaultStatsInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Report file counts, front-matter coverage and activity for a vault or folder.

    Returns:
        {
            "success": True,
            "vault": str,
            "search_path": str,
            "stats": {"total_files", "total_size_kb", "with_frontmatter", "with_tags", "frontmatter_coverage"},
            "activity": {"recently_modified", "stale_over_90_days"},
            "folders": [{"folder", "files", "recently_modified"}],
            "types": {type: count},
            "top_tags": [{"tag", "count"}],
            "health": {"frontmatter_coverage", "stale_content", "recent_activity"}
        }

    Error Handling:
        - Folder does not exist → {"success": False, "error": "Directory not found: <path>"}
    """
    metadata = resolve_vault(input.vault, ctx)
    return collect_vault_stats(metadata, input.path)
