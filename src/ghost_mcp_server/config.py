"""Configuration for the Ghost MCP server.

Reads Ghost connection settings from CLI args, environment variables,
.env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    GHOST_API_URL: Ghost site URL (required)
    GHOST_ADMIN_API_KEY: Admin API key in ``<id>:<secret>`` form (required)
    GHOST_API_VERSION: Admin API version header (optional, default: v5.0)
    GHOST_SYNC_DIR: Root directory for post sync (optional, default: ./posts)
    GHOST_SYNC_FORMAT: Default sync format (optional, default: lexical)
    GHOST_INSECURE: Skip SSL verification (optional, default: false)
    GHOST_TIMEOUT: HTTP read timeout in seconds (optional, default: 60)
"""

import logging
import os
import re
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "v5.0"
DEFAULT_SYNC_DIR = "posts"
DEFAULT_SYNC_FORMAT = "lexical"
DEFAULT_TIMEOUT = 60

_ADMIN_KEY_RE = re.compile(r"^[0-9a-zA-Z]+:[0-9a-fA-F]+$")
_SYNC_FORMATS = frozenset({"lexical", "structured", "html", "markdown"})


@dataclass
class Config:
    api_url: str
    admin_api_key: str
    api_version: str = DEFAULT_API_VERSION
    sync_dir: str = DEFAULT_SYNC_DIR
    sync_format: str = DEFAULT_SYNC_FORMAT
    insecure: bool = False
    debug: bool = False
    timeout: int = DEFAULT_TIMEOUT


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If URL format, admin key or timeout is invalid.
    """
    config.api_url = config.api_url.strip()

    if not config.api_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid Ghost URL '{config.api_url}': must start with http:// or https://"
        )

    parsed = urlparse(config.api_url)
    if not parsed.hostname:
        raise ValueError(
            f"Invalid Ghost URL '{config.api_url}': URL must include a hostname"
        )

    config.api_url = config.api_url.removesuffix("/")

    config.admin_api_key = config.admin_api_key.strip()
    if not _ADMIN_KEY_RE.match(config.admin_api_key):
        # Never echo the key itself
        raise ValueError(
            "Invalid GHOST_ADMIN_API_KEY: expected '<id>:<hex secret>' "
            "as shown in Ghost Admin > Integrations."
        )

    if not (1 <= config.timeout <= 600):
        raise ValueError(
            f"Invalid timeout {config.timeout}: must be between 1 and 600 seconds"
        )

    config.sync_format = config.sync_format.strip().lower()
    if config.sync_format not in _SYNC_FORMATS:
        raise ValueError(
            f"Invalid sync format '{config.sync_format}': "
            f"must be one of {', '.join(sorted(_SYNC_FORMATS))}"
        )

    if config.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def _resolve_flag(cli_value: bool, env_key: str, fallback: object) -> bool:
    if cli_value:
        return True
    env_value = _get_bool_env(env_key)
    if env_value is not None:
        return env_value
    return bool(fallback)


def load_config(
    url: str | None = None,
    admin_api_key: str | None = None,
    sync_dir: str | None = None,
    insecure: bool = False,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        url: Override Ghost site URL.
        admin_api_key: Override Admin API key.
        sync_dir: Override post sync root directory.
        insecure: Skip SSL verification (CLI flag).
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Flat dict of values from the YAML config file
            (``ghost`` section plus ``sync_dir``). Used as fallback when
            CLI arg and env var are both unset.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If required config (URL, admin key) is missing after
            checking all sources, or a value is malformed.
    """
    fb = yaml_fallbacks or {}

    api_url = url or os.getenv("GHOST_API_URL") or fb.get("url")
    if not api_url:
        raise ValueError(
            "Ghost URL not found. Set GHOST_API_URL environment variable, "
            "pass --url CLI argument, or add 'url' to config.yml."
        )

    api_key = (
        admin_api_key
        or os.getenv("GHOST_ADMIN_API_KEY")
        or fb.get("admin_api_key")
    )
    if not api_key:
        raise ValueError(
            "Ghost Admin API key not found. Set GHOST_ADMIN_API_KEY environment "
            "variable, or add 'admin_api_key' to config.yml."
        )

    api_version = (
        os.getenv("GHOST_API_VERSION")
        or fb.get("api_version")
        or DEFAULT_API_VERSION
    )

    final_sync_dir = (
        sync_dir
        or os.getenv("GHOST_SYNC_DIR")
        or fb.get("sync_dir")
        or DEFAULT_SYNC_DIR
    )

    final_sync_format = (
        os.getenv("GHOST_SYNC_FORMAT")
        or fb.get("sync_format")
        or DEFAULT_SYNC_FORMAT
    )

    timeout_raw = os.getenv("GHOST_TIMEOUT")
    if timeout_raw is not None:
        try:
            final_timeout = int(timeout_raw)
        except ValueError:
            raise ValueError(
                f"Invalid GHOST_TIMEOUT '{timeout_raw}': must be a number between 1 and 600"
            ) from None
    elif "timeout" in fb:
        final_timeout = int(fb["timeout"])
    else:
        final_timeout = DEFAULT_TIMEOUT

    config = Config(
        api_url=api_url,
        admin_api_key=api_key,
        api_version=api_version,
        sync_dir=final_sync_dir,
        sync_format=final_sync_format,
        insecure=_resolve_flag(
            insecure, "GHOST_INSECURE", fb.get("insecure", False)
        ),
        debug=_resolve_flag(debug, "GHOST_DEBUG", fb.get("debug", False)),
        timeout=final_timeout,
    )

    validate_config(config)

    return config
