"""Async utilities for bridging blocking HTTP and filesystem work to async MCP handlers."""

import asyncio
from typing import Any, Callable, TypeVar

T = TypeVar("T")


async def run_sync(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a synchronous function in a thread pool without blocking the event loop.

    Used to wrap ``GhostClient`` calls and the sync reconcilers in async
    MCP tool handlers.

    Example:
        # In MCP tool handler:
        post = await run_sync(client.get_post, post_id)
    """
    return await asyncio.to_thread(func, *args, **kwargs)
