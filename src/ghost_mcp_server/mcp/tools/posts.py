"""Post tool handlers for MCP server.

This module implements post CRUD operations: browse, read, create, update
and delete. All tools use async handlers with run_sync() to bridge
synchronous GhostClient calls. The ``html`` and ``lexical`` arguments accept
the ``file://<absolute path>`` marker so large content can be passed by
reference.
"""

import logging

import mcp.types as types

from ...core.async_utils import run_sync
from ...core.client import GhostClient
from ...file_handler import resolve_file_references_async
from ...validators import validate_post_id, validate_title
from .constants import (
    BROWSE_FIELDS,
    BROWSE_INCLUDE,
    CONTENT_ARGUMENTS,
    READ_FORMATS,
)
from .errors import json_result
from .registry import ToolSpec

logger = logging.getLogger(__name__)

_CONTENT_HINT = (
    " Pass file://<absolute path> to read the value from a file."
)


# Tool definitions for list_tools()
POSTS_TOOLS = [
    types.Tool(
        name="posts_browse",
        description=(
            "Browse and list posts with essential fields for listing and "
            "discovery (title, status, dates, primary author/tag). Use "
            "posts_read for full post details including content."
        ),
        annotations=types.ToolAnnotations(
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "filter": {
                    "type": "string",
                    "description": "NQL filter, e.g. 'status:draft' or 'tag:news'",
                },
                "limit": {
                    "type": "integer",
                    "minimum": 1,
                    "description": "Posts per page (default: 15)",
                },
                "page": {
                    "type": "integer",
                    "minimum": 1,
                    "description": "Page number (default: 1)",
                },
                "order": {
                    "type": "string",
                    "description": "Sort order, e.g. 'published_at desc'",
                },
            },
            "required": [],
        },
    ),
    types.Tool(
        name="posts_read",
        description=(
            "Read a post by id or slug. Returns complete post data including "
            "lexical and html content, tags, authors and publishing status."
        ),
        annotations=types.ToolAnnotations(
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Post id"},
                "slug": {"type": "string", "description": "Post slug"},
            },
            "required": [],
        },
    ),
    types.Tool(
        name="posts_add",
        description=(
            "Create a new post. Content may be given as HTML or as a Lexical "
            "JSON string; HTML is converted by Ghost."
        ),
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=False,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "title": {
                    "type": "string",
                    "description": "Post title (required)",
                },
                "html": {
                    "type": "string",
                    "description": "Post content as HTML." + _CONTENT_HINT,
                },
                "lexical": {
                    "type": "string",
                    "description": "Post content as a Lexical JSON string."
                    + _CONTENT_HINT,
                },
                "status": {
                    "type": "string",
                    "enum": ["draft", "published", "scheduled"],
                    "description": "Publishing status (default: draft)",
                },
            },
            "required": ["title"],
        },
    ),
    types.Tool(
        name="posts_edit",
        description=(
            "Update an existing post with optimistic locking. Requires the "
            "post's current updated_at for conflict detection."
        ),
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=False,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Post id (required)"},
                "updated_at": {
                    "type": "string",
                    "description": "updated_at value from posts_read (required)",
                },
                "title": {"type": "string", "description": "New title"},
                "html": {
                    "type": "string",
                    "description": "New content as HTML." + _CONTENT_HINT,
                },
                "lexical": {
                    "type": "string",
                    "description": "New content as a Lexical JSON string."
                    + _CONTENT_HINT,
                },
                "status": {
                    "type": "string",
                    "enum": ["draft", "published", "scheduled"],
                    "description": "New publishing status",
                },
            },
            "required": ["id", "updated_at"],
        },
    ),
    types.Tool(
        name="posts_delete",
        description=(
            "Permanently delete a post by id. This cannot be undone."
        ),
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Post id (required)"},
            },
            "required": ["id"],
        },
    ),
]


def _require_post_id(args: dict) -> str:
    post_id = args.get("id") or ""
    is_valid, error_msg = validate_post_id(post_id)
    if not is_valid:
        raise ValueError(error_msg)
    return post_id


def _content_fields(args: dict) -> dict:
    return {
        key: args[key]
        for key in ("title", "html", "lexical", "status")
        if args.get(key) is not None
    }


def _html_markers(data: dict) -> tuple[str | None, str | None]:
    """Return the (source, formats) pair for a write.

    Ghost ignores html unless both markers name it.
    """
    if data.get("html"):
        return "html", "html"
    return None, None


async def _handle_browse(
    client: GhostClient, args: dict
) -> types.CallToolResult:
    """Handle posts_browse."""
    posts = await run_sync(
        client.browse_posts,
        limit=args.get("limit"),
        page=args.get("page"),
        filter=args.get("filter"),
        order=args.get("order"),
        fields=BROWSE_FIELDS,
        include=BROWSE_INCLUDE,
    )
    return json_result(posts)


async def _handle_read(
    client: GhostClient, args: dict
) -> types.CallToolResult:
    """Handle posts_read."""
    if args.get("id"):
        post = await run_sync(
            client.get_post,
            _require_post_id(args),
            formats=READ_FORMATS,
            include="tags,authors",
        )
    elif args.get("slug"):
        post = await run_sync(
            client.get_post_by_slug,
            args["slug"],
            formats=READ_FORMATS,
            include="tags,authors",
        )
    else:
        raise ValueError("Either id or slug is required")
    return json_result(post)


async def _handle_add(
    client: GhostClient, args: dict
) -> types.CallToolResult:
    """Handle posts_add."""
    is_valid, error_msg = validate_title(args.get("title") or "")
    if not is_valid:
        raise ValueError(error_msg)

    args = await resolve_file_references_async(args, CONTENT_ARGUMENTS)
    data = _content_fields(args)
    source, formats = _html_markers(data)

    post = await run_sync(
        client.add_post, data, source=source, formats=formats
    )
    logger.info("Created post %s (%s)", post.get("id"), post.get("slug"))
    return json_result(post)


async def _handle_edit(
    client: GhostClient, args: dict
) -> types.CallToolResult:
    """Handle posts_edit."""
    post_id = _require_post_id(args)
    updated_at = args.get("updated_at")
    if not updated_at:
        raise ValueError(
            "updated_at is required for optimistic locking; "
            "fetch it with posts_read"
        )
    if args.get("title") is not None:
        is_valid, error_msg = validate_title(args["title"])
        if not is_valid:
            raise ValueError(error_msg)

    args = await resolve_file_references_async(args, CONTENT_ARGUMENTS)
    data = _content_fields(args)
    data["updated_at"] = updated_at
    source, formats = _html_markers(data)

    post = await run_sync(
        client.edit_post, post_id, data, source=source, formats=formats
    )
    logger.info("Updated post %s", post_id)
    return json_result(post)


async def _handle_delete(
    client: GhostClient, args: dict
) -> types.CallToolResult:
    """Handle posts_delete."""
    post_id = _require_post_id(args)
    await run_sync(client.delete_post, post_id)
    logger.info("Deleted post %s", post_id)
    return types.CallToolResult(
        content=[
            types.TextContent(
                type="text", text=f"Post with id {post_id} deleted."
            )
        ]
    )


# ToolSpec list for registry-based dispatch
POSTS_SPECS: list[ToolSpec] = [
    ToolSpec(
        tool=POSTS_TOOLS[0],
        permissions=frozenset({"POSTS_READ"}),
        handler=_handle_browse,
    ),
    ToolSpec(
        tool=POSTS_TOOLS[1],
        permissions=frozenset({"POSTS_READ"}),
        handler=_handle_read,
    ),
    ToolSpec(
        tool=POSTS_TOOLS[2],
        permissions=frozenset({"POSTS_WRITE"}),
        handler=_handle_add,
    ),
    ToolSpec(
        tool=POSTS_TOOLS[3],
        permissions=frozenset({"POSTS_WRITE"}),
        handler=_handle_edit,
    ),
    ToolSpec(
        tool=POSTS_TOOLS[4],
        permissions=frozenset({"POSTS_DELETE"}),
        handler=_handle_delete,
    ),
]
