"""Section manipulation MCP tools.

All tools delegate to core operations in obsidian_cortex.core.note_operations.
"""

from typing import Any

from mcp.server.fastmcp import Context

from obsidian_cortex.server import mcp
from obsidian_cortex.session import resolve_vault
from obsidian_cortex.models import UpsertSectionInput
from obsidian_cortex.core.note_operations import upsert_note_section
from obsidian_cortex.tools.boundary import tool_boundary


# Matches the heading by text at any level, case-insensitively; the rebuilt
# heading uses ``level``. Running the same upsert twice leaves the note unchanged.
@mcp.tool()
@tool_boundary
async def upsert_vault_section(
    input: UpsertSectionInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Replace a markdown section, or append it when the heading is missing.

    The section spans from its heading to the next heading of the same or a
    higher level. Front matter is preserved.

    Args:
        input (UpsertSectionInput): Validated input containing:
            - path (str): Note path
            - heading (str): Heading text (without # markers)
            - content (str): Section body
            - level (int): Heading level 1-6 (default 2)
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {"success": True, "vault": str, "path": str, "heading": str, "action": "updated" | "inserted"}

    Error Handling:
        - Note not found → error payload
        - Level outside 1-6 → ValidationError
    """
    metadata = resolve_vault(input.vault, ctx)
    return upsert_note_section(metadata, input.path, input.heading, input.content, input.level)
