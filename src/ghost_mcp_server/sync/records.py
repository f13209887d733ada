"""Local post records on disk.

A sync root holds one directory per post, named by the post's slug::

    <root>/<slug>/meta.json       post fields minus the content field
    <root>/<slug>/lexical.json    or html.html or markdown.md

``LocalPostStore`` reads and writes these records. Writes are atomic per
file (temp file + ``os.replace()``), so an interrupted run never leaves a
half-written ``meta.json`` behind.

Also provides the helpers both reconcilers use to compare a local record
against a remote post: ``split_post()``, ``strip_content()`` and
``compare_timestamps()``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ghost_mcp_server.file_handler import read_json_file, write_json_file
from ghost_mcp_server.sync.codec import CONTENT_FILENAMES, PostCodec
from ghost_mcp_server.sync.models import SyncFormat

logger = logging.getLogger(__name__)

META_FILENAME = "meta.json"


# ------------------------------------------------------------------
# Comparison helpers
# ------------------------------------------------------------------


def strip_content(data: dict[str, Any], content_field: str) -> dict[str, Any]:
    """Return a copy of *data* without *content_field*."""
    return {k: v for k, v in data.items() if k != content_field}


def split_post(
    post: dict[str, Any], content_field: str
) -> tuple[dict[str, Any], str | None]:
    """Split a remote post into (metadata, content field value)."""
    return strip_content(post, content_field), post.get(content_field)


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def compare_timestamps(local: str, remote: str) -> int:
    """Order two ISO 8601 ``updated_at`` values.

    Returns:
        -1 if local is older, 0 if equal, 1 if local is newer.

    Raises:
        ValueError: If either value is not an ISO 8601 timestamp.
    """
    if local == remote:
        return 0
    try:
        local_dt = _parse_timestamp(local)
        remote_dt = _parse_timestamp(remote)
    except (TypeError, ValueError):
        raise ValueError(
            f"invalid updated_at timestamp (local {local!r}, remote {remote!r})"
        ) from None
    if local_dt < remote_dt:
        return -1
    if local_dt > remote_dt:
        return 1
    return 0


# ------------------------------------------------------------------
# Store
# ------------------------------------------------------------------


class LocalPostStore:
    """Read and write post records under a sync root.

    Args:
        root: The sync root directory.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def post_dir(self, slug: str) -> Path:
        return self.root / slug

    def list_dirs(self) -> list[Path]:
        """List post directories, sorted by name.

        Hidden directories are ignored.

        Raises:
            FileNotFoundError: If the sync root does not exist.
        """
        if not self.root.is_dir():
            raise FileNotFoundError(f"Sync directory not found: {self.root}")
        return sorted(
            p
            for p in self.root.iterdir()
            if p.is_dir() and not p.name.startswith(".")
        )

    def read_meta(self, post_dir: Path) -> dict[str, Any]:
        """Read ``meta.json`` from a post directory.

        Raises:
            FileNotFoundError: If there is no ``meta.json``.
            json.JSONDecodeError: If it is not valid JSON.
            ValueError: If it is valid JSON but not an object.
        """
        data = read_json_file(post_dir / META_FILENAME)
        if not isinstance(data, dict):
            raise ValueError(
                f"{META_FILENAME} must hold a JSON object, "
                f"got {type(data).__name__}"
            )
        return data

    def read_content(
        self, post_dir: Path, codec: PostCodec
    ) -> tuple[bool, Any]:
        """Read the active encoding's content file.

        Returns:
            Tuple of (exists, content). A missing file yields
            ``(False, None)``.

        Raises:
            json.JSONDecodeError: If a JSON content file is malformed.
        """
        try:
            return True, codec.read_local(post_dir / codec.filename)
        except FileNotFoundError:
            return False, None

    def write(
        self,
        post_dir: Path,
        meta: dict[str, Any],
        content: Any,
        codec: PostCodec,
    ) -> None:
        """Write ``meta.json`` and the content file, creating the directory."""
        post_dir.mkdir(parents=True, exist_ok=True)
        write_json_file(
            post_dir / META_FILENAME, strip_content(meta, codec.content_field)
        )
        codec.write_local(post_dir / codec.filename, content)

    def foreign_encoding(
        self, post_dir: Path, codec: PostCodec
    ) -> SyncFormat | None:
        """Return the encoding a directory was synced with, if not *codec*'s.

        A directory that holds the active content file, or no content file
        at all, yields ``None``.
        """
        if (post_dir / codec.filename).exists():
            return None
        for fmt, filename in CONTENT_FILENAMES.items():
            if fmt != codec.format and (post_dir / filename).exists():
                return fmt
        return None

    def index_by_id(self) -> dict[str, str]:
        """Map post ids to the directory names that currently hold them.

        Unreadable records are left out.
        """
        index: dict[str, str] = {}
        if not self.root.is_dir():
            return index
        for post_dir in self.list_dirs():
            try:
                meta = self.read_meta(post_dir)
            except (OSError, ValueError) as exc:
                logger.debug("Not indexing %s: %s", post_dir, exc)
                continue
            post_id = meta.get("id")
            if isinstance(post_id, str) and post_id:
                index[post_id] = post_dir.name
        return index


def describe_json_error(path: Path, exc: json.JSONDecodeError) -> str:
    """Message for a malformed local JSON file."""
    return (
        f"invalid JSON in local file {path.parent.name}/{path.name}: "
        f"{exc.msg} (line {exc.lineno}, column {exc.colno})"
    )
