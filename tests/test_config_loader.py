"""Tests for ghost_mcp_server.config_loader: hierarchical config loading."""

import textwrap

import pytest

from ghost_mcp_server.config_loader import (
    CONFIG_ENV_VAR,
    PROJECT_CONFIG_DIR,
    _interpolate_recursive,
    _load_yaml_with_includes,
    discover_config_files,
    interpolate_env_vars,
    load_hierarchical_config,
)


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with CWD and HOME inside tmp_path and no explicit config path."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text))
    return path


# -------------------------------------------------------------------------
# Env var interpolation
# -------------------------------------------------------------------------


class TestInterpolateEnvVars:
    """Tests for ${VAR} and ${VAR:-default} substitution."""

    def test_replaces_set_var(self, monkeypatch):
        monkeypatch.setenv("BLOG_HOST", "blog.local")
        assert interpolate_env_vars("https://${BLOG_HOST}") == "https://blog.local"

    def test_unset_var_replaced_with_empty(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert interpolate_env_vars("${UNSET_VAR_XYZ}") == ""

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert interpolate_env_vars("${UNSET_VAR_XYZ:-posts}") == "posts"

    def test_default_used_when_empty(self, monkeypatch):
        monkeypatch.setenv("EMPTY_VAR_XYZ", "")
        assert interpolate_env_vars("${EMPTY_VAR_XYZ:-lexical}") == "lexical"

    def test_recursive(self, monkeypatch):
        monkeypatch.setenv("GHOST_KEY_FOR_TEST", "id:abcd")
        data = {
            "ghost": {"admin_api_key": "${GHOST_KEY_FOR_TEST}", "timeout": 30},
            "list": ["${GHOST_KEY_FOR_TEST}", 1],
        }
        assert _interpolate_recursive(data) == {
            "ghost": {"admin_api_key": "id:abcd", "timeout": 30},
            "list": ["id:abcd", 1],
        }


# -------------------------------------------------------------------------
# !include
# -------------------------------------------------------------------------


class TestIncludes:
    def test_include_relative_file(self, tmp_path):
        _write(tmp_path / "ghost.yml", "url: https://blog.example.com\n")
        main = _write(tmp_path / "config.yml", "ghost: !include ghost.yml\n")

        assert _load_yaml_with_includes(main) == {
            "ghost": {"url": "https://blog.example.com"}
        }

    def test_circular_include_rejected(self, tmp_path):
        _write(tmp_path / "a.yml", "b: !include b.yml\n")
        _write(tmp_path / "b.yml", "a: !include a.yml\n")

        with pytest.raises(ValueError, match="Circular include"):
            _load_yaml_with_includes(tmp_path / "a.yml")

    def test_missing_include(self, tmp_path):
        main = _write(tmp_path / "config.yml", "ghost: !include nope.yml\n")

        with pytest.raises(FileNotFoundError, match="Include file not found"):
            _load_yaml_with_includes(main)


# -------------------------------------------------------------------------
# Discovery
# -------------------------------------------------------------------------


class TestDiscoverConfigFiles:
    """Tests for discover_config_files() precedence and filtering."""

    def test_none_found(self, isolated):
        assert discover_config_files() == []

    def test_env_var_takes_highest_precedence(self, isolated, monkeypatch):
        custom = _write(isolated / "custom.yml", "ghost: {}\n")
        _write(isolated / PROJECT_CONFIG_DIR / "config.yml", "ghost: {}\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(custom))

        result = discover_config_files()

        assert result[0] == custom.resolve()
        assert len(result) == 2

    def test_project_before_global(self, isolated):
        project = _write(isolated / PROJECT_CONFIG_DIR / "config.yml", "a: 1\n")
        global_cfg = _write(
            isolated / "home" / ".config" / "ghost_mcp" / "config.yml", "b: 2\n"
        )

        assert discover_config_files() == [project, global_cfg]

    def test_yaml_extension_found(self, isolated):
        project = _write(isolated / PROJECT_CONFIG_DIR / "config.yaml", "a: 1\n")
        assert discover_config_files() == [project]


# -------------------------------------------------------------------------
# Hierarchical merge
# -------------------------------------------------------------------------


class TestLoadHierarchicalConfig:
    def test_zero_config(self, isolated):
        assert load_hierarchical_config() == {}

    def test_project_section_replaces_global(self, isolated):
        _write(
            isolated / "home" / ".config" / "ghost_mcp" / "config.yml",
            """\
            ghost:
              url: https://global.example.com
              timeout: 30
            sync:
              dir: global-posts
            """,
        )
        _write(
            isolated / PROJECT_CONFIG_DIR / "config.yml",
            """\
            ghost:
              url: https://project.example.com
            """,
        )

        result = load_hierarchical_config()

        assert result["ghost"] == {"url": "https://project.example.com"}
        assert result["sync"] == {"dir": "global-posts"}

    def test_interpolates_after_merge(self, isolated, monkeypatch):
        monkeypatch.setenv("GHOST_KEY_FOR_TEST", "id:beef")
        _write(
            isolated / PROJECT_CONFIG_DIR / "config.yml",
            """\
            ghost:
              admin_api_key: ${GHOST_KEY_FOR_TEST}
            """,
        )

        assert load_hierarchical_config()["ghost"]["admin_api_key"] == "id:beef"

    def test_non_dict_root_skipped(self, isolated):
        _write(isolated / PROJECT_CONFIG_DIR / "config.yml", "- a\n- b\n")
        assert load_hierarchical_config() == {}
