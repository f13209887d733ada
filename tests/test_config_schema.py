"""Tests for config_schema.py: Pydantic config models and adapters.

Covers:
- Section defaults (zero-config is always valid)
- Field bounds and the sync format Literal
- Frozen models
- build_config() from raw dicts
- to_yaml_fallbacks() flattening
"""

import pytest
from pydantic import ValidationError

from ghost_mcp_server.config_schema import (
    GhostConfig,
    LoggingConfig,
    SyncConfig,
    UnifiedConfig,
    build_config,
    to_yaml_fallbacks,
)

KEY = "64f1c2a9e4b0a1b2c3d4e5f6:" + "ab" * 32


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class TestGhostConfig:
    def test_defaults(self):
        cfg = GhostConfig()

        assert cfg.url is None
        assert cfg.admin_api_key is None
        assert cfg.api_version == "v5.0"
        assert cfg.insecure is False
        assert cfg.timeout == 60

    @pytest.mark.parametrize("timeout", [0, 601])
    def test_timeout_bounds(self, timeout):
        with pytest.raises(ValidationError):
            GhostConfig(timeout=timeout)

    def test_frozen(self):
        cfg = GhostConfig(url="https://blog.example.com")
        with pytest.raises(ValidationError):
            cfg.url = "https://other.example.com"  # type: ignore[misc]


class TestSyncConfig:
    def test_defaults(self):
        cfg = SyncConfig()
        assert cfg.dir is None
        assert cfg.format == "lexical"

    @pytest.mark.parametrize(
        "fmt", ["lexical", "structured", "html", "markdown"]
    )
    def test_known_formats(self, fmt):
        assert SyncConfig(format=fmt).format == fmt

    def test_unknown_format_rejected(self):
        with pytest.raises(ValidationError):
            SyncConfig(format="mobiledoc")


def test_logging_defaults():
    cfg = LoggingConfig()
    assert cfg.level == "INFO"
    assert cfg.file is None


# ---------------------------------------------------------------------------
# build_config
# ---------------------------------------------------------------------------


class TestBuildConfig:
    def test_empty_dict_is_zero_config(self):
        assert build_config({}) == UnifiedConfig()

    def test_sections_parsed(self):
        unified = build_config(
            {
                "ghost": {"url": "https://blog.example.com", "timeout": 30},
                "sync": {"dir": "content", "format": "markdown"},
                "logging": {"level": "DEBUG"},
            }
        )

        assert unified.ghost.url == "https://blog.example.com"
        assert unified.ghost.timeout == 30
        assert unified.sync.dir == "content"
        assert unified.sync.format == "markdown"
        assert unified.logging.level == "DEBUG"

    def test_missing_sections_get_defaults(self):
        unified = build_config({"ghost": {"url": "https://blog.example.com"}})

        assert unified.sync == SyncConfig()
        assert unified.logging == LoggingConfig()

    def test_invalid_section_value(self):
        with pytest.raises(ValidationError):
            build_config({"sync": {"format": "rst"}})


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class TestToYamlFallbacks:
    def test_none_values_dropped(self):
        fallbacks = to_yaml_fallbacks(UnifiedConfig())

        assert "url" not in fallbacks
        assert "admin_api_key" not in fallbacks
        assert "sync_dir" not in fallbacks
        assert fallbacks["sync_format"] == "lexical"
        assert fallbacks["timeout"] == 60

    def test_sync_section_flattened(self):
        unified = build_config(
            {
                "ghost": {"url": "https://blog.example.com", "admin_api_key": KEY},
                "sync": {"dir": "content", "format": "html"},
            }
        )

        fallbacks = to_yaml_fallbacks(unified)

        assert fallbacks["url"] == "https://blog.example.com"
        assert fallbacks["admin_api_key"] == KEY
        assert fallbacks["sync_dir"] == "content"
        assert fallbacks["sync_format"] == "html"
