"""Session workflow MCP tools.

This module provides MCP tool wrappers for the deterministic session macros:
- Context bootstrap
- Session start and resume
- Tracker sync
- Checkpoint
- Stale-state checks

All tools delegate to obsidian_cortex.core.workflow.WorkflowOrchestrator.
"""

from typing import Any, Optional

from mcp.server.fastmcp import Context

from obsidian_cortex.server import mcp
from obsidian_cortex.config import get_vault_configuration
from obsidian_cortex.session import resolve_vault
from obsidian_cortex.models import (
    ContextBootstrapInput,
    StartSessionInput,
    ResumeInput,
    TrackerSyncInput,
    CheckpointInput,
    StaleStateChecksInput,
)
from obsidian_cortex.core.workflow import WorkflowOrchestrator
from obsidian_cortex.tools.boundary import tool_boundary


def _orchestrator(vault: Optional[str], ctx: Context | None) -> WorkflowOrchestrator:
    return WorkflowOrchestrator(resolve_vault(vault, ctx), get_vault_configuration().workflow)


# ==============================================================================
# CONTEXT LOADING
# ==============================================================================

@mcp.tool()
@tool_boundary
async def vault_context_bootstrap(
    input: ContextBootstrapInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Load core context in one call: Home, Now, a project context and recent files.

    Returns:
        {
            "success": True,
            "startup_paths": [str],
            "loaded_notes": [{"path", "success", "frontmatter", "content"} | {"path", "success": False, "error"}],
            "loaded_successfully": int,
            "recent": {"enabled", "days", "scope_path", "total_found", "files": [{"path", "modified", "days_ago"}]}
        }

    Error Handling:
        - Missing notes are reported per record, never as a failure
        - recent_path does not exist → error payload
    """
    return _orchestrator(input.vault, ctx).bootstrap_context(
        project_context_path=input.project_context_path,
        include_recent=input.include_recent,
        recent_path=input.recent_path,
        days=input.days,
        recent_limit=input.recent_limit,
        include_frontmatter=input.include_frontmatter,
    )


@mcp.tool()
@tool_boundary
async def vault_start_session(
    input: StartSessionInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Deterministic session start for multi-project workflows.

    Routes to the active project (override, then the Now note's
    ``active_project_context``, then the configured default), bootstraps
    context and summarizes the project's priorities, blockers and next actions.

    Returns:
        {"success": True, "active_project_context_path", "active_project_context_source",
         "active_project_dir", "summary", "bootstrap"}
    """
    return _orchestrator(input.vault, ctx).start_session(
        override_project_context_path=input.override_project_context_path,
        include_recent=input.include_recent,
        recent_path=input.recent_path,
        days=input.days,
        recent_limit=input.recent_limit,
        include_frontmatter=input.include_frontmatter,
    )


@mcp.tool()
@tool_boundary
async def vault_resume(
    input: ResumeInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Deterministic recovery after a context reset.

    Returns the start-session payload plus the day's session log status and a
    read-only tracker snapshot.

    Returns:
        {..., "session_log": {"path", "exists", "error"} | None,
         "tracker_snapshot": {"path", "source", "issue_count", "status_counts",
                              "duplicate_ids", "warnings"} | {"path", "error"} | None}

    Error Handling:
        - Project context missing → error payload
    """
    return _orchestrator(input.vault, ctx).resume(
        override_project_context_path=input.override_project_context_path,
        session_date=input.session_date,
        include_recent=input.include_recent,
        recent_path=input.recent_path,
        days=input.days,
        recent_limit=input.recent_limit,
        include_frontmatter=input.include_frontmatter,
    )


# ==============================================================================
# STATE CHANGES
# ==============================================================================

@mcp.tool()
@tool_boundary
async def vault_tracker_sync(
    input: TrackerSyncInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Deterministic defect/enhancement tracker sync.

    Parses the tracker's JSON state (falling back to importing its table),
    applies the updates in order, re-renders state, table and sync log, and
    optionally logs a summary to the project's session log.

    Returns:
        {"success": True, "project_context_path", "tracker_path", "tracker_existed",
         "parse_source", "warnings", "duplicate_ids", "issue_count", "status_counts",
         "updated_ids", "created_ids", "deleted_ids", "unresolved_ids",
         "session_log_path", "active_project_context_source"}
        or {"success": True, "skipped": True, "reason", ...} when no tracker is configured.

    Error Handling:
        - Unknown ids are reported in unresolved_ids, never as a failure
        - Broken JSON state is reported in warnings
        - Project context missing → error payload
    """
    return _orchestrator(input.vault, ctx).tracker_sync(
        override_project_context_path=input.override_project_context_path,
        tracker_path=input.tracker_path,
        updates=[update.to_update() for update in input.updates],
        create_missing=input.create_missing,
        render_table=input.render_table,
        max_log_entries=input.max_log_entries,
        log_to_session=input.log_to_session,
        session_date=input.session_date,
    )


@mcp.tool()
@tool_boundary
async def vault_checkpoint(
    input: CheckpointInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Deterministic checkpoint: project context sections, session log, pointer note, tracker.

    Returns:
        {"success": True, "active_project_context_path", "active_project_context_source",
         "active_project_dir", "project_context_sections_updated": [{"section", "action"}],
         "session_log_path", "pointer_note": {"path", "updated"}, "summary", "tracker_sync"}

    Error Handling:
        - Project context missing → error payload, nothing written
        - Tracker sync failure → reported inside "tracker_sync"; earlier writes are kept
    """
    return _orchestrator(input.vault, ctx).checkpoint(
        override_project_context_path=input.override_project_context_path,
        status=input.status,
        priorities=input.priorities,
        blockers=input.blockers,
        next_actions=input.next_actions,
        summary_note=input.summary_note,
        session_date=input.session_date,
        include_tracker_sync=input.include_tracker_sync,
        tracker_updates=[update.to_update() for update in input.tracker_updates],
    )


# ==============================================================================
# HEALTH CHECKS
# ==============================================================================

@mcp.tool()
@tool_boundary
async def vault_stale_state_checks(
    input: StaleStateChecksInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Run stale-state health checks across project contexts and trackers.

    Checks:
        - project context not modified in X days
        - tracker configured but missing, or not modified in X days
        - duplicate tracker ids
        - issues In Validation for more than Y days

    Returns:
        {"success": True, "scanned_project_context_count", "checks", "results", "counts"}
    """
    return _orchestrator(input.vault, ctx).stale_state_checks(
        tracker_stale_days=input.tracker_stale_days,
        validation_stale_days=input.validation_stale_days,
        project_context_stale_days=input.project_context_stale_days,
    )
