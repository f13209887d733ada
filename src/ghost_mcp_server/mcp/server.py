"""Stdio MCP server exposing Ghost post management and directory sync.

The client, not this process, owns stdin/stdout: every human-readable line
goes to stderr and logging goes to a file.
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from pydantic_core import Url

from .. import __version__
from ..core.async_utils import run_sync
from ..core.client import GhostClient
from ..logger import DEFAULT_MCP_LOG_FILE, setup_logging
from ..version import check_version_consistency
from .lifespan import server_lifespan
from .resources import (
    handle_list_post_resources,
    handle_read_post_resource,
)
from .tools import (
    ALL_SPECS,
    ToolRegistry,
    build_error_response,
    load_permissions_file,
)
from .tools.registry import KNOWN_PERMISSIONS, ToolSpec

logger = logging.getLogger(__name__)

SERVER_NAME = "ghost-mcp-server"

server = Server(SERVER_NAME)


@dataclass
class _State:
    client: GhostClient | None = None
    registry: ToolRegistry | None = None


_state = _State()


# ---------------------------------------------------------------------------
# ping
# ---------------------------------------------------------------------------


def _text_result(text: str, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


async def _handle_ping(
    client: GhostClient, args: dict
) -> types.CallToolResult:
    """Report the Ghost version, proving the Admin API key still works."""
    try:
        version = await run_sync(client.validate_connection)
    except Exception as e:
        return _text_result(
            f"Ghost connection failed: {e}. "
            "Check GHOST_API_URL and GHOST_ADMIN_API_KEY.",
            is_error=True,
        )
    return _text_result(
        f"Ghost MCP server connected successfully. Ghost version: {version}"
    )


PING_SPEC = ToolSpec(
    tool=types.Tool(
        name="ping",
        description=(
            "Check that the server can reach Ghost with its Admin API key "
            "and return the Ghost version"
        ),
        inputSchema={"type": "object", "properties": {}, "required": []},
    ),
    permissions=frozenset(),
    handler=_handle_ping,
)


# ---------------------------------------------------------------------------
# Process-wide state
# ---------------------------------------------------------------------------


def get_client() -> GhostClient:
    if _state.client is None:
        raise RuntimeError(
            "GhostClient not initialized. Server lifespan not started."
        )
    return _state.client


def set_client(client: GhostClient | None) -> None:
    _state.client = client


def get_registry() -> ToolRegistry:
    if _state.registry is None:
        raise RuntimeError("ToolRegistry not initialized.")
    return _state.registry


def set_registry(registry: ToolRegistry | None) -> None:
    _state.registry = registry


# ---------------------------------------------------------------------------
# MCP handlers
# ---------------------------------------------------------------------------


@server.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    return get_registry().list_tools()


@server.list_resources()
async def handle_list_resources() -> list[types.Resource]:
    return await handle_list_post_resources()


@server.read_resource()  # type: ignore[arg-type]  # MCP Url type mismatch
async def handle_read_resource(uri: Url) -> str:
    """Serve ``post://{id}``, optionally with ``?format=markdown``."""
    if uri.scheme != "post":
        raise ValueError(f"Unsupported URI scheme: {uri.scheme}")
    return await handle_read_post_resource(uri, get_client())


@server.call_tool()
async def handle_call_tool(
    name: str, arguments: dict | None
) -> types.CallToolResult:
    client = get_client()
    try:
        return await get_registry().call_tool(name, arguments, client)
    except ValueError as e:
        # name is unknown or filtered out by the permissions file
        return build_error_response(
            "unknown_tool",
            str(e),
            "Use list_tools to see available tools.",
        )


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


def build_registry(permissions_file: str | None = None) -> ToolRegistry:
    """Register ping plus every post and sync tool the permissions allow."""
    granted = None
    if permissions_file:
        granted = load_permissions_file(permissions_file)
        logger.info(
            "Permissions from %s: %s",
            permissions_file,
            ", ".join(sorted(granted)),
        )

    specs = [PING_SPEC, *ALL_SPECS]
    registry = ToolRegistry(specs, granted)
    logger.info("Registered %d of %d tools", registry.tool_count(), len(specs))
    if permissions_file:
        print(
            f"Permissions file: {permissions_file} "
            f"({registry.tool_count()} of {len(specs)} tools enabled)",
            file=sys.stderr,
        )
    return registry


def _warn_if_stale_install() -> None:
    ok, message = check_version_consistency()
    if ok:
        logger.info(message)
        return
    logger.warning(message)
    sys.stderr.write(f"Warning: {message}\n")


async def main(config_overrides: dict | None = None):
    """Serve MCP over stdio until the client disconnects.

    Args:
        config_overrides: Values collected from the command line; see
            :func:`overrides_from_args`.
    """
    overrides = config_overrides or {}

    # before stdio_server takes over stdout
    setup_logging(
        mode="mcp",
        debug=overrides.get("debug", False),
        log_file=overrides.get("log_file"),
    )
    _warn_if_stale_install()
    set_registry(build_registry(overrides.get("permissions_file")))

    # The client is installed here, not in the lifespan: run as
    # `python -m ghost_mcp_server.mcp.server` this module is __main__ and the
    # lifespan would import a second copy of it.
    async with server_lifespan(config_overrides=config_overrides) as ctx:
        set_client(ctx["client"])
        try:
            async with mcp.server.stdio.stdio_server() as (reader, writer):
                await server.run(
                    reader,
                    writer,
                    InitializationOptions(
                        server_name=SERVER_NAME,
                        server_version=__version__,
                        capabilities=server.get_capabilities(
                            notification_options=NotificationOptions(),
                            experimental_capabilities={},
                        ),
                    ),
                )
        finally:
            set_client(None)
            set_registry(None)


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------

_EPILOG = """\
Settings come from, highest first: these flags, GHOST_* environment
variables, a .env file, .ghost_mcp/config.yml, built-in defaults.

Examples:
  ghost-mcp-server --url https://blog.example.com
  ghost-mcp-server --sync-dir ~/blog/posts
  ghost-mcp-server --permissions-file ~/.config/ghost_mcp/drafts.permissions

stdout carries JSON-RPC for the MCP client; messages go to stderr.
"""

# argparse dests that double as config override keys
_OVERRIDE_FLAGS = (
    "url",
    "admin_api_key",
    "sync_dir",
    "insecure",
    "debug",
    "log_file",
    "permissions_file",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="MCP server for the Ghost Admin API with local post sync",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_EPILOG,
    )
    parser.add_argument("--url", help="Ghost site URL (GHOST_API_URL)")
    parser.add_argument(
        "--admin-api-key",
        help="Admin API key as id:secret (GHOST_ADMIN_API_KEY). Visible in "
        "the process list; prefer the environment variable.",
    )
    parser.add_argument(
        "--sync-dir",
        help="Directory posts_pull writes to and posts_push reads from "
        "(GHOST_SYNC_DIR, default ./posts)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate verification (local Ghost only)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Log at DEBUG level"
    )
    parser.add_argument(
        "--log-file",
        default=DEFAULT_MCP_LOG_FILE,
        help=f"Log file (default: {DEFAULT_MCP_LOG_FILE})",
    )
    parser.add_argument(
        "--permissions-file",
        help="Expose only tools covered by the permissions listed in this "
        f"file ({', '.join(sorted(KNOWN_PERMISSIONS))}; one per line)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{SERVER_NAME} {__version__}",
    )
    return parser


def overrides_from_args(args: argparse.Namespace) -> dict:
    """Collect the flags that were actually given."""
    return {
        key: getattr(args, key)
        for key in _OVERRIDE_FLAGS
        if getattr(args, key)
    }


def run(argv: list[str] | None = None) -> None:
    """Console entry point."""
    overrides = overrides_from_args(build_parser().parse_args(argv))

    shown = [key for key in overrides if key != "admin_api_key"]
    if shown:
        print(f"Config overrides from CLI: {', '.join(shown)}", file=sys.stderr)

    try:
        asyncio.run(main(config_overrides=overrides or None))
    except RuntimeError:
        # lifespan already printed the cause
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    run()
