"""Lifespan management for MCP server startup and shutdown."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv

from ..config import load_config
from ..config_loader import (
    discover_config_files,
    load_hierarchical_config,
)
from ..config_schema import build_config, to_yaml_fallbacks
from ..core.async_utils import run_sync
from ..core.client import GhostClient

logger = logging.getLogger(__name__)

_REQUIRED_SETTINGS_HINT = "Ensure GHOST_API_URL and GHOST_ADMIN_API_KEY are set."


def _stderr_print(msg: str) -> None:
    """Print message to stderr for user feedback (safe in MCP mode)."""
    print(msg, file=sys.stderr, flush=True)


@asynccontextmanager
async def server_lifespan(
    config_overrides: dict[str, Any] | None = None,
) -> AsyncIterator[dict[str, Any]]:
    """
    Manage server startup and shutdown lifecycle.

    On startup:
    - Load .env file (so values are available for env var lookups and YAML interpolation)
    - Load YAML config file if present (as fallback values)
    - Merge all sources via load_config(): CLI > env vars > .env > YAML > defaults
    - Create GhostClient and validate the Admin API key
    - Fail fast if Ghost is unreachable or rejects the key

    On shutdown:
    - Log shutdown message

    Args:
        config_overrides: Optional dict with config values from CLI
            (url, admin_api_key, sync_dir, insecure, debug)

    Yields:
        Dict with 'client' key containing the initialized GhostClient

    Raises:
        RuntimeError: If configuration is invalid or the Ghost connection fails.
    """
    logger.info("MCP server starting...")
    _stderr_print("Ghost MCP Server starting...")

    try:
        # .env first, so ${VAR} interpolation in YAML can use its values
        load_dotenv()

        yaml_fallbacks: dict[str, Any] | None = None
        config_files = discover_config_files()
        sources = []

        if config_files:
            config_path = config_files[0]
            unified = build_config(load_hierarchical_config())
            yaml_fallbacks = to_yaml_fallbacks(unified)
            sources.append(f"config file: {config_path}")

        overrides = config_overrides or {}
        config = load_config(
            url=overrides.get("url"),
            admin_api_key=overrides.get("admin_api_key"),
            sync_dir=overrides.get("sync_dir"),
            insecure=overrides.get("insecure", False),
            debug=overrides.get("debug", False),
            yaml_fallbacks=yaml_fallbacks,
        )

        if overrides:
            sources.append("CLI arguments")
        sources.append("environment variables")
        source_desc = ", ".join(sources)
        logger.info("Configuration loaded from: %s", source_desc)
        _stderr_print(f"  Configuration loaded from: {source_desc}")
        logger.info("Ghost URL: %s", config.api_url)
        _stderr_print(f"  Ghost URL: {config.api_url}")
        _stderr_print(
            f"  Sync directory: {config.sync_dir} ({config.sync_format})"
        )
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        _stderr_print(f"ERROR: Configuration error: {e}")
        _stderr_print(f"  {_REQUIRED_SETTINGS_HINT}")
        raise RuntimeError(
            f"Configuration error: {e}. {_REQUIRED_SETTINGS_HINT}"
        ) from e

    logger.info("Validating Ghost connection...")
    _stderr_print("  Validating Ghost connection...")
    try:
        client = GhostClient(config)
        version = await run_sync(client.validate_connection)
        logger.info("Successfully connected to Ghost %s", version)
        _stderr_print(f"  Connected to Ghost {version}")
        _stderr_print(
            "Server ready. Waiting for MCP client connection..."
        )
    except Exception as e:
        logger.error("Failed to connect to Ghost: %s", e)
        _stderr_print("ERROR: Ghost connection failed.")
        _stderr_print(f"  {e}")
        _stderr_print("  Check GHOST_API_URL and GHOST_ADMIN_API_KEY.")
        raise RuntimeError(
            f"Ghost connection failed: {e}. Check GHOST_API_URL and GHOST_ADMIN_API_KEY."
        ) from e

    yield {"client": client}

    logger.info("MCP server shutting down")
    _stderr_print("Ghost MCP Server shutting down.")
