"""Unified configuration schema for ghost_mcp_server.

Defines Pydantic models for the YAML config structure with dedicated
sections for the Ghost connection, post sync, and logging. The flattened
form feeds ``load_config()`` as its YAML fallbacks.

Usage:
    from ghost_mcp_server.config_schema import build_config, to_yaml_fallbacks

    unified = build_config(load_hierarchical_config())
    config = load_config(yaml_fallbacks=to_yaml_fallbacks(unified))
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class GhostConfig(BaseModel):
    """Ghost Admin API connection settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    url: str | None = Field(default=None, description="Ghost site URL")
    admin_api_key: str | None = Field(
        default=None, description="Admin API key (<id>:<secret>)"
    )
    api_version: str = Field(
        default="v5.0", description="Accept-Version header value"
    )
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    timeout: int = Field(
        default=60,
        ge=1,
        le=600,
        description="HTTP read timeout in seconds (1-600)",
    )

    model_config = {"frozen": True}


class SyncConfig(BaseModel):
    """Post sync settings.

    Attributes:
        dir: Root directory holding one sub-directory per post slug.
        format: Default content encoding when a caller does not pass one.
    """

    dir: str | None = Field(
        default=None, description="Post sync root directory"
    )
    format: Literal["lexical", "structured", "html", "markdown"] = Field(
        default="lexical", description="Default sync content format"
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()``
    (zero-config) is always valid.
    """

    ghost: GhostConfig = Field(default_factory=GhostConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Missing sections get defaults.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)


# ---------------------------------------------------------------------------
# Adapter: UnifiedConfig -> load_config() fallbacks
# ---------------------------------------------------------------------------


def to_yaml_fallbacks(unified: UnifiedConfig) -> dict[str, Any]:
    """Flatten a ``UnifiedConfig`` into the ``yaml_fallbacks`` dict
    accepted by ``load_config()``.

    ``None`` values are dropped so they never shadow built-in defaults.
    """
    fallbacks = {
        k: v
        for k, v in unified.ghost.model_dump().items()
        if v is not None
    }
    if unified.sync.dir is not None:
        fallbacks["sync_dir"] = unified.sync.dir
    fallbacks["sync_format"] = unified.sync.format
    return fallbacks
