"""jrnl-mcp: MCP server exposing the jrnl journaling CLI."""

__version__ = "1.0.0"
