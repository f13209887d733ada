"""Tests for the post:// resource handlers and server resource dispatch."""

import json

import pytest
from pydantic_core import Url

from ghost_mcp_server.core.exceptions import GhostNotFoundError
from ghost_mcp_server.mcp import server
from ghost_mcp_server.mcp.resources import (
    POST_RESOURCES,
    handle_list_post_resources,
    handle_read_post_resource,
)
from ghost_mcp_server.mcp.tools.constants import READ_FORMATS

POST_ID = "64f1c2a9e4b0a1b2c3d4e5f6"

POST = {
    "id": POST_ID,
    "title": "Hello World",
    "html": "<h1>Hello</h1><p>Some <strong>bold</strong> text.</p>",
    "lexical": '{"root":{}}',
    "updated_at": "2026-03-01T10:00:00.000Z",
}


@pytest.fixture
def client_with_post(mock_ghost_client):
    mock_ghost_client.get_post.return_value = dict(POST)
    return mock_ghost_client


@pytest.fixture
def installed_client(client_with_post):
    server.set_client(client_with_post)
    yield client_with_post
    server.set_client(None)


class TestListResources:
    async def test_single_template(self):
        resources = await handle_list_post_resources()

        assert resources is POST_RESOURCES
        assert len(resources) == 1
        assert resources[0].name == "Ghost Post"
        assert str(resources[0].uri).startswith("post://")

    async def test_server_lists_post_resources(self):
        assert await server.handle_list_resources() == POST_RESOURCES


class TestReadPostResource:
    async def test_json_by_default(self, client_with_post):
        text = await handle_read_post_resource(
            Url(f"post://{POST_ID}"), client_with_post
        )

        assert json.loads(text) == POST
        client_with_post.get_post.assert_called_once_with(
            POST_ID, formats=READ_FORMATS, include="tags,authors"
        )

    async def test_markdown_format(self, client_with_post):
        text = await handle_read_post_resource(
            Url(f"post://{POST_ID}?format=markdown"), client_with_post
        )

        assert text == "# Hello World\n\n# Hello\n\nSome **bold** text.\n"

    async def test_not_found_returns_hint(self, mock_ghost_client):
        mock_ghost_client.get_post.side_effect = GhostNotFoundError(
            404, "Post not found.", "NotFoundError"
        )

        text = await handle_read_post_resource(
            Url(f"post://{POST_ID}"), mock_ghost_client
        )

        assert text.startswith(f"Error (not_found): Post '{POST_ID}' not found.")
        assert "posts_browse" in text


class TestServerReadResource:
    async def test_dispatches_post_scheme(self, installed_client):
        text = await server.handle_read_resource(Url(f"post://{POST_ID}"))
        assert json.loads(text)["id"] == POST_ID

    async def test_unsupported_scheme(self, installed_client):
        with pytest.raises(ValueError, match="Unsupported URI scheme: ftp"):
            await server.handle_read_resource(Url("ftp://blog.example.com/a"))

    async def test_client_not_initialized(self):
        server.set_client(None)
        with pytest.raises(RuntimeError, match="not initialized"):
            await server.handle_read_resource(Url(f"post://{POST_ID}"))
