"""Core Ghost client functionality shared by the MCP tools and the sync engine."""

from .async_utils import run_sync
from .client import GhostClient
from .exceptions import GhostAPIError, GhostConflictError, GhostNotFoundError

__all__ = [
    "GhostAPIError",
    "GhostClient",
    "GhostConflictError",
    "GhostNotFoundError",
    "run_sync",
]
