"""Post resource handlers for MCP server.

This module exposes Ghost posts as read-only resources. Agents read a post
with ``post://{post_id}`` and get the full post JSON (lexical and html
formats), or Markdown with ``?format=markdown``.
"""

from urllib.parse import parse_qs

import mcp.types as types
from pydantic_core import Url

from ...converters import html_to_markdown
from ...core.async_utils import run_sync
from ...core.client import GhostClient
from ...core.exceptions import GhostNotFoundError
from ..tools.constants import READ_FORMATS
from ..tools.errors import format_json

URI_PREFIX = "post://"

# Resource definitions for list_resources()
POST_RESOURCES = [
    types.Resource(
        uri="post://{post_id}",  # type: ignore[arg-type]  # MCP AnyUrl/Url type mismatch
        name="Ghost Post",
        description=(
            "Read a post by id as JSON with lexical and html content. "
            "Query param: format=markdown returns the title and body as Markdown. "
            "Example: post://64f1c2a9e4b0a1b2c3d4e5f6"
        ),
        mimeType="application/json",
    ),
]


async def handle_list_post_resources() -> list[types.Resource]:
    """List available post resources."""
    return POST_RESOURCES


async def handle_read_post_resource(uri: Url, client: GhostClient) -> str:
    """Read a post resource by URI.

    Args:
        uri: Resource URI (e.g., post://64f1c2a9e4b0a1b2c3d4e5f6)
        client: Pre-configured GhostClient instance

    Returns:
        Post JSON, Markdown, or an error message for unknown posts.

    Raises:
        ValueError: If the URI does not name a valid post id.
    """
    path = str(uri)
    if path.startswith(URI_PREFIX):
        path = path[len(URI_PREFIX) :]

    if "?" in path:
        path, query_string = path.split("?", 1)
    else:
        query_string = ""
    post_id = path.strip("/")
    output_format = parse_qs(query_string).get("format", ["json"])[0]

    try:
        post = await run_sync(
            client.get_post,
            post_id,
            formats=READ_FORMATS,
            include="tags,authors",
        )
    except GhostNotFoundError:
        return (
            f"Error (not_found): Post '{post_id}' not found.\n\n"
            "Hint: Use the posts_browse tool to find available posts."
        )

    if output_format == "markdown":
        body = html_to_markdown(post.get("html") or "")
        return f"# {post.get('title', '')}\n\n{body}"
    return format_json(post)
