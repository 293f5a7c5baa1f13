"""FastMCP server initialization and tool registration."""

import logging
from mcp.server.fastmcp import FastMCP

from obsidian_cortex.constants import LOG_LEVEL

# Initialize logger (stderr; stdout carries the stdio transport)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("obsidian_cortex")

# Tool modules are imported in __init__.py to register all @mcp.tool() decorators


def run_server():
    """Start the MCP server with stdio transport."""
    logger.info("Starting Obsidian Cortex MCP Server")
    mcp.run(transport="stdio")
