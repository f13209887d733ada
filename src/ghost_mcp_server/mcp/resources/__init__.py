"""MCP resource handlers for Ghost operations.

This package contains MCP resource implementations that expose Ghost posts
as read-only resources via URI templates.
"""

from .posts import (
    POST_RESOURCES,
    handle_list_post_resources,
    handle_read_post_resource,
)

__all__ = [
    "handle_list_post_resources",
    "handle_read_post_resource",
    "POST_RESOURCES",
]
