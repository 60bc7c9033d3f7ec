"""MCP tool modules for chuk-mcp-terrain."""
