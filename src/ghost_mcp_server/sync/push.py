"""Push reconciler: local post records -> Ghost posts.

Every post directory under the sync root is pushed only when its
``updated_at`` is exactly the value Ghost currently holds. Any difference,
older or newer, means the local copy has not seen the latest remote history,
and the post is reported as a conflict so the caller pulls first.

When timestamps match, the post is updated only if its metadata or content
differs from the remote; otherwise it is skipped. Records without an ``id``
were never created in Ghost and produce an informational note instead of an
error.

Error handling is per-post: a single failure does not abort the run. Only a
failure to list the sync root propagates.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ghost_mcp_server.core.client import GhostClient
from ghost_mcp_server.core.exceptions import GhostNotFoundError
from ghost_mcp_server.sync.codec import create_codec
from ghost_mcp_server.sync.models import (
    PostResult,
    SyncAction,
    SyncDirection,
    SyncFormat,
    SyncReport,
)
from ghost_mcp_server.sync.records import (
    META_FILENAME,
    LocalPostStore,
    describe_json_error,
    split_post,
    strip_content,
)

logger = logging.getLogger(__name__)

CREATE_TOOL_NAME = "posts_add"


class PushReconciler:
    """Reconcile local post records into Ghost.

    Args:
        client: GhostClient used to fetch and update posts.
        sync_root: Directory holding one sub-directory per post.
        fmt: Local content encoding (default: Lexical).
    """

    def __init__(
        self,
        client: GhostClient,
        sync_root: Path,
        fmt: SyncFormat | str | None = SyncFormat.LEXICAL,
    ) -> None:
        self.client = client
        self.codec = create_codec(fmt)
        self.store = LocalPostStore(sync_root)

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(self, ids: list[str] | None = None) -> SyncReport:
        """Push local posts to Ghost.

        Args:
            ids: Post ids to push. ``None`` or empty pushes every local
                record. Directories whose id is not listed are ignored
                without a report entry.

        Returns:
            A ``SyncReport`` with synced/skipped counts, per-post errors
            and informational notes.

        Raises:
            FileNotFoundError: If the sync root does not exist.
        """
        started_at = datetime.now(timezone.utc).isoformat()
        id_filter = set(ids) if ids else None

        post_dirs = self.store.list_dirs()
        logger.info(
            "Pushing from %s (%d director%s) as %s",
            self.store.root,
            len(post_dirs),
            "y" if len(post_dirs) == 1 else "ies",
            self.codec.format.value,
        )

        results: list[PostResult] = []
        for post_dir in post_dirs:
            result = self._push_safely(post_dir, id_filter)
            if result is not None:
                results.append(result)

        report = SyncReport.from_results(
            SyncDirection.PUSH,
            self.codec.format,
            results,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(
            "Push complete: %d synced, %d skipped, %d errors, %d notes",
            report.synced,
            report.skipped,
            len(report.errors),
            len(report.info),
        )
        return report

    # ------------------------------------------------------------------
    # Per-post processing
    # ------------------------------------------------------------------

    def _push_safely(
        self, post_dir: Path, id_filter: set[str] | None
    ) -> PostResult | None:
        try:
            return self._push_dir(post_dir, id_filter)
        except Exception as exc:
            logger.error("Error pushing %s: %s", post_dir, exc)
            meta = self._peek_meta(post_dir)
            return PostResult(
                action=SyncAction.ERROR,
                id=meta.get("id"),
                title=meta.get("title"),
                slug=post_dir.name,
                message=str(exc),
            )

    def _peek_meta(self, post_dir: Path) -> dict[str, Any]:
        try:
            return self.store.read_meta(post_dir)
        except (OSError, ValueError):
            return {}

    def _push_dir(
        self, post_dir: Path, id_filter: set[str] | None
    ) -> PostResult | None:
        """Decide and apply the push action for one local directory.

        Returns ``None`` for directories that are not part of this run.
        """
        slug = post_dir.name
        field = self.codec.content_field

        try:
            meta = self.store.read_meta(post_dir)
        except FileNotFoundError:
            logger.debug("No %s in %s, skipping", META_FILENAME, post_dir)
            return None
        except json.JSONDecodeError as exc:
            return self._error(
                None, None, slug, describe_json_error(post_dir / META_FILENAME, exc)
            )
        except ValueError as exc:
            return self._error(None, None, slug, str(exc))

        post_id = meta.get("id")
        title = meta.get("title")

        if id_filter is not None and (not post_id or post_id not in id_filter):
            return None

        if not post_id:
            logger.info("Local post '%s' has no id", slug)
            return PostResult(
                action=SyncAction.INFO,
                title=title,
                slug=slug,
                message=(
                    f"'{slug}' has no id and was never created in Ghost; "
                    f"use {CREATE_TOOL_NAME} to create it"
                ),
            )

        def error(message: str) -> PostResult:
            return self._error(post_id, title, slug, message)

        local_updated = meta.get("updated_at")
        if not local_updated:
            return error(
                f"local {META_FILENAME} is missing 'updated_at'; "
                "cannot check for conflicts"
            )

        foreign = self.store.foreign_encoding(post_dir, self.codec)
        if foreign is not None:
            return error(
                f"directory '{slug}' holds {foreign.value} content; "
                f"push with format '{foreign.value}'"
            )

        try:
            has_content, local_content = self.store.read_content(
                post_dir, self.codec
            )
        except json.JSONDecodeError as exc:
            return error(
                describe_json_error(post_dir / self.codec.filename, exc)
            )

        try:
            remote = self.client.get_post(post_id, formats=self.codec.formats)
        except GhostNotFoundError:
            return error(
                "Post not found in Ghost; it may have been deleted remotely"
            )

        remote_updated = remote.get("updated_at")
        if remote_updated != local_updated:
            return error(
                f"updated_at mismatch (local {local_updated}, remote "
                f"{remote_updated}): conflict, pull before pushing"
            )

        if field not in remote:
            return error(f"remote response is missing the '{field}' field")

        remote_meta, remote_content = split_post(remote, field)
        local_meta = strip_content(meta, field)
        meta_changed = local_meta != remote_meta
        content_changed = has_content and not self.codec.equals(
            local_content, self.codec.to_local(remote_content)
        )

        if not meta_changed and not content_changed:
            if self.codec.format == SyncFormat.MARKDOWN and not has_content:
                return error(
                    f"markdown file does not exist: {slug}/{self.codec.filename}"
                )
            logger.debug("Unchanged %s", post_dir)
            return PostResult(
                action=SyncAction.SKIPPED, id=post_id, title=title, slug=slug
            )

        payload = dict(local_meta)
        source = None
        if has_content:
            payload[field] = self.codec.to_remote(local_content)
            source = self.codec.source

        self.client.edit_post(
            post_id, payload, source=source, formats=self.codec.formats
        )
        logger.info(
            "Pushed %s (metadata changed: %s, content changed: %s)",
            slug,
            meta_changed,
            content_changed,
        )
        return PostResult(
            action=SyncAction.SYNCED, id=post_id, title=title, slug=slug
        )

    @staticmethod
    def _error(
        post_id: str | None, title: str | None, slug: str, message: str
    ) -> PostResult:
        logger.warning("Push %s (%s): %s", post_id, slug, message)
        return PostResult(
            action=SyncAction.ERROR,
            id=post_id,
            title=title,
            slug=slug,
            message=message,
        )
