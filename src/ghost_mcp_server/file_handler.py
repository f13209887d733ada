"""File handler module: path validation, encoding-aware reads, atomic writes,
and the ``file://`` indirection marker for large tool arguments.

All sync functions are pure (no side effects besides file I/O).
Async wrappers compose validation + I/O via run_sync().
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from charset_normalizer import from_bytes

from ghost_mcp_server.core.async_utils import run_sync

# A tool argument starting with this prefix is replaced by the contents of
# the file at the absolute path that follows it.
FILE_REFERENCE_PREFIX = "file://"

# =============================================================================
# Path Validation
# =============================================================================


def validate_file_path(path_str: str) -> Path:
    """Validate and resolve an input file path.

    Args:
        path_str: Absolute path string to an existing file.

    Returns:
        Resolved Path object pointing to the real file.

    Raises:
        ValueError: If path is relative, doesn't exist, or is not a file.
    """
    path = Path(path_str)
    if not path.is_absolute():
        raise ValueError(f"Path must be absolute: {path_str}")
    resolved = path.resolve()
    if not resolved.exists():
        raise ValueError(f"File not found: {path_str}")
    if not resolved.is_file():
        raise ValueError(f"Path is not a file: {path_str}")
    return resolved


# =============================================================================
# File Read/Write
# =============================================================================


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a file with automatic encoding detection.

    Reads raw bytes first, then uses charset-normalizer to detect encoding.
    Defaults to UTF-8 for empty files or when detection fails.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    result = from_bytes(raw).best()
    if result is None:
        encoding = "utf-8"
        content = raw.decode(encoding, errors="replace")
    else:
        encoding = result.encoding
        # ascii is a strict subset of utf-8
        if encoding == "ascii":
            encoding = "utf-8"
        content = str(result)
    return (content, encoding)


def write_file(
    path: Path, content: str, encoding: str = "utf-8"
) -> int:
    """Atomically write content to a file, creating parent directories.

    Writes to a temporary file in the target directory then calls
    ``os.replace()`` so readers never observe a partially written file.

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode(encoding)

    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    return len(encoded)


def read_json_file(path: Path) -> Any:
    """Read and parse a UTF-8 JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def write_json_file(path: Path, data: Any) -> int:
    """Write *data* as pretty-printed JSON (2-space indent, trailing newline)."""
    text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    return write_file(path, text)


# =============================================================================
# File indirection
# =============================================================================


def is_file_reference(value: Any) -> bool:
    """Return True if *value* is a string using the file indirection marker."""
    return isinstance(value, str) and value.startswith(FILE_REFERENCE_PREFIX)


def resolve_file_reference(value: Any) -> Any:
    """Replace a ``file://<absolute path>`` value with the file's contents.

    Values without the prefix are returned unchanged.

    Raises:
        ValueError: If the referenced path is relative, missing, or not a
            regular file.
    """
    if not is_file_reference(value):
        return value

    path_str = value[len(FILE_REFERENCE_PREFIX) :]
    if not Path(path_str).is_absolute():
        raise ValueError(
            f"File reference path must be absolute: {path_str!r}"
        )
    resolved = validate_file_path(path_str)
    content, _encoding = read_file_with_encoding(resolved)
    return content


def resolve_file_references(
    args: dict[str, Any], keys: tuple[str, ...]
) -> dict[str, Any]:
    """Return a copy of *args* with file references in *keys* resolved."""
    resolved = dict(args)
    for key in keys:
        if key in resolved:
            resolved[key] = resolve_file_reference(resolved[key])
    return resolved


# =============================================================================
# Async Wrappers
# =============================================================================


async def resolve_file_references_async(
    args: dict[str, Any], keys: tuple[str, ...]
) -> dict[str, Any]:
    """Async wrapper: resolve file references off the event loop."""
    return await run_sync(resolve_file_references, args, keys)
