"""MCP tool definitions for Obsidian Cortex.

This module imports all tool submodules to register them with the MCP server.
Each tool module uses the @mcp.tool() decorator to auto-register its tools.
"""

# Import all tool modules to register their @mcp.tool() decorated functions
from obsidian_cortex.tools import vault_tools
from obsidian_cortex.tools import note_tools
from obsidian_cortex.tools import section_tools
from obsidian_cortex.tools import workflow_tools

__all__ = [
    "vault_tools",
    "note_tools",
    "section_tools",
    "workflow_tools",
]
