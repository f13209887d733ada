"""Tests for mcp/tools/errors.py: error response builders and utilities.

Covers:
- build_error_response() structure and format
- translate_api_error() mapping of Ghost errors to agent actions
- json_result() text and structuredContent
"""

import json

import mcp.types as types
import pytest

from ghost_mcp_server.core.exceptions import (
    GhostAPIError,
    GhostConflictError,
    GhostNotFoundError,
)
from ghost_mcp_server.mcp.tools.errors import (
    build_error_response,
    format_json,
    json_result,
    translate_api_error,
)

POST_ID = "64f1c2a9e4b0a1b2c3d4e5f6"


def _get_text(result: types.CallToolResult) -> str:
    content = result.content[0]
    assert isinstance(content, types.TextContent)
    return content.text


# ---------------------------------------------------------------------------
# build_error_response
# ---------------------------------------------------------------------------


class TestBuildErrorResponse:
    def test_is_error_flag(self):
        result = build_error_response("not_found", "Not found", "Try again")
        assert isinstance(result, types.CallToolResult)
        assert result.isError is True

    def test_text_format(self):
        result = build_error_response(
            "validation_error", "Title cannot be empty", "Pass a title."
        )
        assert _get_text(result) == (
            "Error (validation_error): Title cannot be empty\n\n"
            "Action: Pass a title."
        )


# ---------------------------------------------------------------------------
# translate_api_error
# ---------------------------------------------------------------------------


class TestTranslateApiError:
    def test_not_found(self):
        result = translate_api_error(
            GhostNotFoundError(404, "Post not found.", "NotFoundError")
        )
        text = _get_text(result)
        assert text.startswith("Error (not_found): Post not found.")
        assert "posts_browse" in text

    def test_conflict_with_post_id(self):
        result = translate_api_error(
            GhostConflictError(409, "Saving failed!", "UpdateCollisionError"),
            post_id=POST_ID,
        )
        text = _get_text(result)
        assert "Error (version_conflict)" in text
        assert (
            f"Fetch the current post with posts_read(id='{POST_ID}'), "
            "then retry with its updated_at."
        ) in text

    def test_conflict_without_post_id(self):
        result = translate_api_error(GhostConflictError(409, "Saving failed!"))
        assert (
            "Fetch the current post with posts_read, then retry"
            in _get_text(result)
        )

    @pytest.mark.parametrize(
        "status,error_type",
        [(401, None), (403, None), (400, "NoPermissionError")],
    )
    def test_permission_denied(self, status, error_type):
        result = translate_api_error(
            GhostAPIError(status, "Denied", error_type)
        )
        text = _get_text(result)
        assert "Error (permission_denied)" in text
        assert "GHOST_ADMIN_API_KEY" in text

    @pytest.mark.parametrize(
        "status,error_type",
        [(422, "ValidationError"), (400, None), (500, "BadRequestError")],
    )
    def test_validation_error(self, status, error_type):
        result = translate_api_error(
            GhostAPIError(status, "Invalid", error_type)
        )
        assert "Error (validation_error)" in _get_text(result)

    def test_server_error(self):
        result = translate_api_error(GhostAPIError(503, "Maintenance"))
        text = _get_text(result)
        assert "Error (server_error): Maintenance (HTTP 503)" in text
        assert result.isError is True


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------


class TestJsonResult:
    def test_dict_is_structured(self):
        data = {"synced": 1, "skipped": 0}

        result = json_result(data)

        assert result.structuredContent == data
        assert json.loads(_get_text(result)) == data
        assert not result.isError

    def test_list_has_no_structured_content(self):
        result = json_result([{"id": POST_ID}])

        assert result.structuredContent is None
        assert json.loads(_get_text(result)) == [{"id": POST_ID}]

    def test_format_json_keeps_unicode(self):
        assert format_json({"title": "Café"}) == '{\n  "title": "Café"\n}'
