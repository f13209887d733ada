"""MCP tool handlers for bidirectional post sync.

Defines two tools:

- ``posts_pull`` -- write Ghost posts into the local sync directory.
- ``posts_push`` -- update Ghost posts from the local sync directory.

Both take an optional list of post ids and a content format, run the
reconciler off the event loop, and return the JSON report.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import mcp.types as types

from ...core.async_utils import run_sync
from ...core.client import GhostClient
from ...sync.models import SyncFormat, SyncReport
from ...sync.pull import PullReconciler
from ...sync.push import PushReconciler
from ...sync.reporter import format_sync_report, report_to_json
from .constants import SYNC_FORMAT_CHOICES
from .errors import build_error_response, format_json
from .registry import ToolSpec

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

_SYNC_PROPERTIES = {
    "ids": {
        "type": "array",
        "items": {"type": "string"},
        "description": "Post ids to sync (default: all posts)",
    },
    "format": {
        "type": "string",
        "enum": SYNC_FORMAT_CHOICES,
        "description": (
            "Local content format: lexical (alias: structured) -> "
            "lexical.json, html -> html.html, markdown -> markdown.md. "
            "Defaults to the configured sync format."
        ),
    },
}


SYNC_TOOLS: list[types.Tool] = [
    types.Tool(
        name="posts_pull",
        description=(
            "Pull posts from Ghost into the local sync directory "
            "(<sync_dir>/<slug>/meta.json plus one content file). Posts "
            "that are newer remotely are written; unchanged posts are "
            "skipped; local edits at the same or a newer updated_at are "
            "reported as conflicts and never overwritten."
        ),
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": _SYNC_PROPERTIES,
            "required": [],
        },
    ),
    types.Tool(
        name="posts_push",
        description=(
            "Push local post edits from the sync directory to Ghost. A post "
            "is updated only if its local updated_at equals Ghost's exactly; "
            "otherwise it is reported as a conflict (pull first). Local posts "
            "without an id are reported as info; create them with posts_add."
        ),
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": _SYNC_PROPERTIES,
            "required": [],
        },
    ),
]


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _parse_ids(args: dict[str, Any]) -> list[str] | None:
    ids = args.get("ids")
    if ids is None:
        return None
    if not isinstance(ids, list) or not all(
        isinstance(i, str) and i for i in ids
    ):
        raise ValueError("ids must be a list of non-empty post id strings")
    return ids


def _parse_format(args: dict[str, Any], client: GhostClient) -> SyncFormat:
    return SyncFormat.parse(args.get("format") or client.config.sync_format)


def _report_result(report: SyncReport) -> types.CallToolResult:
    structured = report_to_json(report)
    logger.info("%s", format_sync_report(report))
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=format_json(structured))],
        structuredContent=structured,
    )


# ---------------------------------------------------------------------------
# Individual handlers
# ---------------------------------------------------------------------------


async def _handle_pull(
    client: GhostClient, args: dict[str, Any]
) -> types.CallToolResult:
    """Handle the ``posts_pull`` tool."""
    ids = _parse_ids(args)
    fmt = _parse_format(args, client)
    sync_root = Path(client.config.sync_dir)

    reconciler = PullReconciler(client, sync_root, fmt)
    report = await run_sync(reconciler.run, ids)
    return _report_result(report)


async def _handle_push(
    client: GhostClient, args: dict[str, Any]
) -> types.CallToolResult:
    """Handle the ``posts_push`` tool."""
    ids = _parse_ids(args)
    fmt = _parse_format(args, client)
    sync_root = Path(client.config.sync_dir)

    reconciler = PushReconciler(client, sync_root, fmt)
    try:
        report = await run_sync(reconciler.run, ids)
    except FileNotFoundError as exc:
        return build_error_response(
            "not_found",
            str(exc),
            "Run posts_pull first, or point GHOST_SYNC_DIR at an existing directory.",
        )
    return _report_result(report)


# ToolSpec list for registry-based dispatch
SYNC_SPECS: list[ToolSpec] = [
    ToolSpec(
        tool=SYNC_TOOLS[0],
        permissions=frozenset({"POSTS_READ"}),
        handler=_handle_pull,
    ),
    ToolSpec(
        tool=SYNC_TOOLS[1],
        permissions=frozenset({"POSTS_READ", "POSTS_WRITE"}),
        handler=_handle_push,
    ),
]
