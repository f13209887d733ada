"""Tests for the MCP server module: ping, tool dispatch, registry setup
and command line parsing."""

from unittest.mock import patch

import pytest

from ghost_mcp_server.logger import DEFAULT_MCP_LOG_FILE
from ghost_mcp_server.mcp import server
from ghost_mcp_server.mcp.server import (
    PING_SPEC,
    _handle_ping,
    build_parser,
    build_registry,
    handle_call_tool,
    handle_list_tools,
    overrides_from_args,
    run,
)
from ghost_mcp_server.mcp.tools import ALL_SPECS


@pytest.fixture
def installed(mock_ghost_client):
    """Install a mock client and the full registry as server globals."""
    server.set_client(mock_ghost_client)
    server.set_registry(build_registry())
    yield mock_ghost_client
    server.set_client(None)
    server.set_registry(None)


# ---------------------------------------------------------------------------
# Ping
# ---------------------------------------------------------------------------


class TestPing:
    async def test_success(self, mock_ghost_client):
        mock_ghost_client.validate_connection.return_value = "5.96"

        result = await _handle_ping(mock_ghost_client, {})

        assert not result.isError
        assert result.content[0].text == (
            "Ghost MCP server connected successfully. Ghost version: 5.96"
        )

    async def test_failure(self, mock_ghost_client):
        mock_ghost_client.validate_connection.side_effect = ConnectionError(
            "refused"
        )

        result = await _handle_ping(mock_ghost_client, {})

        assert result.isError
        assert "Ghost connection failed: refused" in result.content[0].text

    def test_always_available(self):
        assert PING_SPEC.permissions == frozenset()


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestBuildRegistry:
    def test_all_tools_without_permissions_file(self):
        registry = build_registry()
        assert registry.tool_count() == len(ALL_SPECS) + 1

    def test_read_only_permissions_file(self, tmp_path):
        path = tmp_path / "read-only.permissions"
        path.write_text("# read only\nPOSTS_READ\n")

        names = {t.name for t in build_registry(str(path)).list_tools()}

        assert names == {"ping", "posts_browse", "posts_read", "posts_pull"}

    def test_invalid_permissions_file(self, tmp_path):
        path = tmp_path / "bad.permissions"
        path.write_text("MEMBERS_READ\n")
        with pytest.raises(ValueError, match="Invalid permission"):
            build_registry(str(path))


# ---------------------------------------------------------------------------
# Protocol handlers
# ---------------------------------------------------------------------------


class TestProtocolHandlers:
    async def test_list_tools(self, installed):
        names = [t.name for t in await handle_list_tools()]
        assert names[0] == "ping"
        assert "posts_push" in names

    async def test_call_tool_dispatch(self, installed):
        installed.validate_connection.return_value = "5.96"

        result = await handle_call_tool("ping", None)

        assert "5.96" in result.content[0].text

    async def test_unknown_tool(self, installed):
        result = await handle_call_tool("tags_browse", {})

        assert result.isError
        text = result.content[0].text
        assert text.startswith("Error (unknown_tool): Unknown tool: tags_browse")
        assert "list_tools" in text

    async def test_registry_not_initialized(self):
        server.set_registry(None)
        with pytest.raises(RuntimeError, match="ToolRegistry not initialized"):
            await handle_list_tools()


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------


class TestCommandLine:
    def test_only_given_flags_become_overrides(self):
        args = build_parser().parse_args(
            ["--url", "https://blog.example.com", "--insecure"]
        )

        assert overrides_from_args(args) == {
            "url": "https://blog.example.com",
            "insecure": True,
            "log_file": DEFAULT_MCP_LOG_FILE,
        }

    def test_sync_dir_and_permissions(self, tmp_path):
        args = build_parser().parse_args(
            [
                "--sync-dir",
                str(tmp_path),
                "--permissions-file",
                str(tmp_path / "ro.permissions"),
            ]
        )

        overrides = overrides_from_args(args)

        assert overrides["sync_dir"] == str(tmp_path)
        assert overrides["permissions_file"] == str(tmp_path / "ro.permissions")

    def test_startup_failure_exits_nonzero(self, capsys):
        async def _fail(config_overrides=None):
            raise RuntimeError("Configuration error")

        with patch.object(server, "main", _fail):
            with pytest.raises(SystemExit) as exc_info:
                run(["--admin-api-key", "id:secret"])

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "log_file" in err
        assert "admin_api_key" not in err
