"""Error response builders and shared utilities for MCP tool handlers.

This module provides structured error responses with corrective actions
to help AI agents recover from errors without human intervention, plus
shared formatting utilities used across tool modules.
"""

import json
from typing import Any

import mcp.types as types

from ...core.exceptions import (
    GhostAPIError,
    GhostConflictError,
    GhostNotFoundError,
)


def build_error_response(
    error_type: str, message: str, corrective_action: str
) -> types.CallToolResult:
    """Build a structured error response with corrective action.

    Args:
        error_type: Error category (not_found, permission_denied, version_conflict, validation_error, server_error)
        message: Human-readable error description
        corrective_action: Specific action the agent can take to resolve the error

    Returns:
        CallToolResult with isError=True

    Examples:
        >>> build_error_response("not_found", "Post not found", "Use posts_browse to find available posts.")
        CallToolResult(content=[TextContent(...)], isError=True)
    """
    error_text = f"Error ({error_type}): {message}\n\nAction: {corrective_action}"

    return types.CallToolResult(
        content=[types.TextContent(type="text", text=error_text)],
        isError=True,
    )


# ---------------------------------------------------------------------------
# Shared formatting utilities
# ---------------------------------------------------------------------------


def format_json(data: Any) -> str:
    """Pretty-print a JSON-serialisable value for tool output."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def json_result(data: Any) -> types.CallToolResult:
    """Build a successful result whose text is *data* as JSON.

    Dicts are also attached as ``structuredContent``.
    """
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=format_json(data))],
        structuredContent=data if isinstance(data, dict) else None,
    )


# ---------------------------------------------------------------------------
# Ghost API error translation
# ---------------------------------------------------------------------------

_PERMISSION_TYPES = frozenset(
    {"UnauthorizedError", "NoPermissionError", "ForbiddenError"}
)
_VALIDATION_TYPES = frozenset(
    {"ValidationError", "BadRequestError", "RequestNotAcceptableError"}
)


def translate_api_error(
    error: GhostAPIError, post_id: str | None = None
) -> types.CallToolResult:
    """Translate a Ghost Admin API error to a structured error response.

    Args:
        error: The raised GhostAPIError (or subclass)
        post_id: Optional post id for contextual suggestions

    Returns:
        CallToolResult with isError=True and corrective action
    """
    match error:
        case GhostNotFoundError():
            return build_error_response(
                "not_found",
                str(error),
                "Use posts_browse to find available posts.",
            )

        case GhostConflictError():
            action = "Fetch the current post with posts_read"
            if post_id:
                action += f"(id='{post_id}')"
            action += ", then retry with its updated_at."
            return build_error_response(
                "version_conflict", str(error), action
            )

        case _ if (
            error.status_code in (401, 403)
            or error.error_type in _PERMISSION_TYPES
        ):
            return build_error_response(
                "permission_denied",
                str(error),
                "Check GHOST_ADMIN_API_KEY and the integration's access in Ghost Admin.",
            )

        case _ if (
            error.status_code in (400, 422)
            or error.error_type in _VALIDATION_TYPES
        ):
            return build_error_response(
                "validation_error",
                str(error),
                "Check parameter values and retry.",
            )

        case _:
            return build_error_response(
                "server_error",
                str(error),
                "Check Ghost connectivity or retry later.",
            )
