"""MCP server that keeps BIG-IP LTM objects in sync with declared state."""

__version__ = "0.1.0"
