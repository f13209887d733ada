"""Ghost MCP Server - Model Context Protocol server for the Ghost Admin API."""

__version__ = "1.0.0"
