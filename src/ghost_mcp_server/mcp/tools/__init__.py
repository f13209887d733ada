"""MCP tool handlers for Ghost operations.

This package contains MCP tool implementations that wrap the core GhostClient
and the post sync engine with async handlers and structured error responses.
"""

from .errors import build_error_response, translate_api_error
from .posts import POSTS_SPECS, POSTS_TOOLS
from .registry import ToolRegistry, ToolSpec, load_permissions_file
from .sync import SYNC_SPECS, SYNC_TOOLS

ALL_SPECS: list[ToolSpec] = POSTS_SPECS + SYNC_SPECS

__all__ = [
    "build_error_response",
    "translate_api_error",
    # Registry
    "ToolSpec",
    "ToolRegistry",
    "load_permissions_file",
    # Spec lists
    "ALL_SPECS",
    "POSTS_SPECS",
    "SYNC_SPECS",
    # Tool lists
    "POSTS_TOOLS",
    "SYNC_TOOLS",
]
