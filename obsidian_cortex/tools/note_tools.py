"""Note management MCP tools.

This module provides MCP tool wrappers for note-level operations:
- Read note content
- Write notes (overwrite/append/prepend)
- Append blocks with a separator
- Delete notes
- Move/rename notes
- Read, replace or merge front matter
- Read several notes in one call

All tools delegate to core operations in obsidian_cortex.core.note_operations.
"""

from typing import Any

from mcp.server.fastmcp import Context

from obsidian_cortex.server import mcp
from obsidian_cortex.session import resolve_vault
from obsidian_cortex.models import (
    ReadNoteInput,
    WriteNoteInput,
    AppendNoteInput,
    DeleteNoteInput,
    MoveNoteInput,
    FrontmatterInput,
    BatchReadInput,
)
from obsidian_cortex.core.note_operations import (
    read_note,
    write_note,
    append_to_note,
    delete_note,
    move_note,
    manage_frontmatter,
)
from obsidian_cortex.core.vault_activity import batch_read_notes
from obsidian_cortex.tools.boundary import tool_boundary


# ==============================================================================
# READ OPERATIONS
# ==============================================================================

@mcp.tool()
@tool_boundary
async def read_vault_note(
    input: ReadNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Read a note, with its front matter parsed separately by default.

    Args:
        input (ReadNoteInput): Validated input containing:
            - path (str): Note path relative to the vault root
            - include_frontmatter (bool): Parse front matter (default True)
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {"success": True, "vault": str, "path": str, "frontmatter": dict | None, "content": str}
        (raw text in "content" and no "frontmatter" key when include_frontmatter=False)

    Error Handling:
        - ValidationError: Empty, absolute or escaping path
        - Note not found → {"success": False, "error": "Note not found: <path>"}
    """
    metadata = resolve_vault(input.vault, ctx)
    return read_note(metadata, input.path, input.include_frontmatter)


@mcp.tool()
@tool_boundary
async def vault_batch_read(
    input: BatchReadInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Read up to 20 notes in one call.

    Args:
        input (BatchReadInput): Validated input containing:
            - paths (list[str]): Note paths relative to the vault root (1-20)
            - include_frontmatter (bool): Parse front matter (default True)
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {
            "success": True,
            "vault": str,
            "requested": int,
            "successful": int,
            "failed": int,
            "results": [{"path", "success", "frontmatter", "content"} | {"path", "success": False, "error"}]
        }

    Error Handling:
        - ValidationError: Empty list, more than 20 paths, or an unsafe path
        - Missing notes are reported per record, never as a failure
    """
    metadata = resolve_vault(input.vault, ctx)
    return batch_read_notes(metadata, input.paths, input.include_frontmatter)


# ==============================================================================
# WRITE OPERATIONS
# ==============================================================================

@mcp.tool()
@tool_boundary
async def write_vault_note(
    input: WriteNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Create or update a note.

    Missing notes and folders are created. Existing front matter is kept,
    ``frontmatter`` fields are merged over it and ``updated`` is set to today.

    Returns:
        {"success": True, "vault": str, "path": str, "mode": str, "created": bool}

    Examples:
        - Use when: Creating a new project context or tracker note
        - Don't use: Replacing one section → Use upsert_vault_section()
    """
    metadata = resolve_vault(input.vault, ctx)
    return write_note(metadata, input.path, input.content, input.frontmatter, input.mode)


@mcp.tool()
@tool_boundary
async def append_to_vault_note(
    input: AppendNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Add content to the end (or start) of an existing note.

    Convenience tool for running notes and logs; the separator defaults to a
    horizontal rule.

    Returns:
        {"success": True, "vault": str, "path": str, "position": str}

    Error Handling:
        - Note not found → error payload; use write_vault_note() to create it
    """
    metadata = resolve_vault(input.vault, ctx)
    return append_to_note(metadata, input.path, input.content, input.separator, input.position)


@mcp.tool()
@tool_boundary
async def delete_vault_note(
    input: DeleteNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Delete a note permanently. Always confirm with the user first.

    Returns:
        {"success": True, "vault": str, "path": str, "status": "deleted"}
    """
    metadata = resolve_vault(input.vault, ctx)
    return delete_note(metadata, input.path)


@mcp.tool()
@tool_boundary
async def move_vault_note(
    input: MoveNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Move or rename a note. Never overwrites an existing destination.

    Returns:
        {"success": True, "vault": str, "from": str, "to": str}
    """
    metadata = resolve_vault(input.vault, ctx)
    return move_note(metadata, input.from_path, input.to_path)


# ==============================================================================
# FRONTMATTER
# ==============================================================================

@mcp.tool()
@tool_boundary
async def vault_frontmatter(
    input: FrontmatterInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Get, replace (set) or deep-merge (merge) a note's YAML front matter.

    Returns:
        {"success": True, "vault": str, "path": str, "action": str, "frontmatter": dict}

    Error Handling:
        - Missing data for set/merge → ValidationError
        - Values that cannot be stored as YAML → error payload
    """
    metadata = resolve_vault(input.vault, ctx)
    return manage_frontmatter(metadata, input.path, input.action, input.data)
