"""Business logic behind the MCP tools; nothing here depends on the MCP layer."""
