"""Tool registry with permission gating.

Each tool declares the Admin API capabilities it needs. A deployment can
hand the server a permissions file (for example ``POSTS_READ`` alone for a
read-only assistant) and tools needing anything else are never listed and
cannot be called.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

import mcp.types as types
import requests

from ...core.client import GhostClient
from ...core.exceptions import GhostAPIError
from .errors import build_error_response, translate_api_error

logger = logging.getLogger(__name__)

KNOWN_PERMISSIONS = frozenset({"POSTS_READ", "POSTS_WRITE", "POSTS_DELETE"})

ToolHandler = Callable[[GhostClient, dict], Awaitable[types.CallToolResult]]


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """A tool definition bound to its handler.

    Attributes:
        tool: MCP tool definition shown to the agent.
        permissions: Capabilities the tool needs; empty means always on.
        handler: ``async (client, args) -> CallToolResult``.
    """

    tool: types.Tool
    permissions: frozenset[str]
    handler: ToolHandler

    def allowed_by(self, granted: frozenset[str] | None) -> bool:
        return granted is None or self.permissions <= granted


class ToolRegistry:
    """Name-indexed set of the tools this deployment exposes.

    ``allowed_permissions=None`` exposes every spec.
    """

    def __init__(
        self,
        specs: list[ToolSpec],
        allowed_permissions: frozenset[str] | None = None,
    ):
        self._specs = {
            spec.tool.name: spec
            for spec in specs
            if spec.allowed_by(allowed_permissions)
        }

    def list_tools(self) -> list[types.Tool]:
        return [spec.tool for spec in self._specs.values()]

    def tool_count(self) -> int:
        return len(self._specs)

    async def call_tool(
        self,
        name: str,
        arguments: dict | None,
        client: GhostClient,
    ) -> types.CallToolResult:
        """Run a registered tool and turn failures into error results.

        Ghost API errors keep the post id (when given) so a version
        conflict can tell the agent which post to re-read.

        Raises:
            ValueError: ``name`` is unknown or filtered out by permissions.
        """
        spec = self._specs.get(name)
        if spec is None:
            raise ValueError(f"Unknown tool: {name}")

        args = arguments or {}
        try:
            return await spec.handler(client, args)
        except GhostAPIError as e:
            logger.warning("%s: Ghost returned %s", name, e)
            return translate_api_error(e, args.get("id"))
        except requests.RequestException as e:
            logger.warning("%s: request to Ghost failed: %s", name, e)
            return build_error_response(
                "server_error",
                f"Could not reach Ghost: {e}",
                "Check GHOST_API_URL and network connectivity, then retry.",
            )
        except ValueError as e:
            return build_error_response(
                "validation_error", str(e), "Check parameter values and retry."
            )
        except Exception as e:
            logger.exception("%s failed unexpectedly", name)
            return build_error_response(
                "server_error", str(e), "Check the server log or retry later."
            )


def load_permissions_file(path: str | Path) -> frozenset[str]:
    """Read the capabilities granted to this deployment.

    One permission per line; blank lines and ``#`` comments are skipped::

        # drafts assistant: may read and edit, never delete
        POSTS_READ
        POSTS_WRITE

    Raises:
        FileNotFoundError: The file does not exist.
        ValueError: A line names an unknown permission, or none are granted.
    """
    path = Path(path)
    granted: set[str] = set()
    for lineno, raw in enumerate(path.read_text().splitlines(), 1):
        entry = raw.split("#", 1)[0].strip()
        if not entry:
            continue
        if entry not in KNOWN_PERMISSIONS:
            raise ValueError(
                f"Invalid permission '{entry}' at line {lineno} in {path}. "
                f"Expected one of: {', '.join(sorted(KNOWN_PERMISSIONS))}."
            )
        granted.add(entry)
    if not granted:
        raise ValueError(
            f"No permissions found in {path}. "
            "Grant at least one of POSTS_READ, POSTS_WRITE or POSTS_DELETE."
        )
    return frozenset(granted)
