"""Pull reconciler: Ghost posts -> local post records.

For each candidate post the reconciler decides, by comparing the local
``meta.json`` against the remote post:

1. No local record -> write (new post).
2. Local ``updated_at`` older than remote -> write (remote is newer).
3. Same ``updated_at``, same metadata and content -> skip.
4. Same ``updated_at``, different metadata or content -> conflict error.
5. Local ``updated_at`` newer than remote -> conflict error.

Malformed local JSON and records lacking ``id`` or ``updated_at`` are
reported as errors. Nothing on disk is changed for any error or skip.

Error handling is per-post: a single failure does not abort the run. Only a
failure of the initial bulk listing propagates.
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
    compare_timestamps,
    describe_json_error,
    split_post,
    strip_content,
)
from ghost_mcp_server.validators import validate_slug_dirname

logger = logging.getLogger(__name__)


class PullReconciler:
    """Reconcile remote posts into the local sync root.

    Args:
        client: GhostClient used to fetch posts.
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
        self._id_index: dict[str, str] | None = None

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(self, ids: list[str] | None = None) -> SyncReport:
        """Pull posts into the sync root.

        Args:
            ids: Post ids to pull. ``None`` or empty pulls every post with
                a single bulk listing.

        Returns:
            A ``SyncReport`` with synced/skipped counts and per-post errors.

        Raises:
            GhostAPIError, requests.RequestException: If the bulk listing
                itself fails.
        """
        started_at = datetime.now(timezone.utc).isoformat()
        results: list[PostResult] = []
        self._id_index = None

        if ids:
            logger.info(
                "Pulling %d post(s) as %s", len(ids), self.codec.format.value
            )
            for post_id in ids:
                results.append(self._pull_by_id(post_id))
        else:
            posts = self.client.browse_posts(
                limit="all", formats=self.codec.formats
            )
            logger.info(
                "Pulling %d post(s) as %s", len(posts), self.codec.format.value
            )
            for post in posts:
                results.append(self._pull_safely(post))

        report = SyncReport.from_results(
            SyncDirection.PULL,
            self.codec.format,
            results,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(
            "Pull complete: %d synced, %d skipped, %d errors",
            report.synced,
            report.skipped,
            len(report.errors),
        )
        return report

    # ------------------------------------------------------------------
    # Per-post processing
    # ------------------------------------------------------------------

    def _pull_by_id(self, post_id: str) -> PostResult:
        try:
            post = self.client.get_post(post_id, formats=self.codec.formats)
        except GhostNotFoundError:
            logger.warning("Post %s not found", post_id)
            return PostResult(
                action=SyncAction.ERROR, id=post_id, message="Post not found"
            )
        except Exception as exc:
            logger.error("Error fetching post %s: %s", post_id, exc)
            return PostResult(
                action=SyncAction.ERROR,
                id=post_id,
                message=f"Failed to fetch post: {exc}",
            )
        return self._pull_safely(post)

    def _pull_safely(self, post: dict[str, Any]) -> PostResult:
        try:
            return self._pull_post(post)
        except Exception as exc:
            logger.error("Error pulling post %s: %s", post.get("id"), exc)
            return PostResult(
                action=SyncAction.ERROR,
                id=post.get("id"),
                title=post.get("title"),
                slug=post.get("slug"),
                message=str(exc),
            )

    def _pull_post(self, post: dict[str, Any]) -> PostResult:
        """Decide and apply the pull action for one remote post."""
        post_id = post.get("id")
        title = post.get("title")
        slug = post.get("slug") or ""
        field = self.codec.content_field

        def error(message: str) -> PostResult:
            logger.warning("Pull %s (%s): %s", post_id, slug, message)
            return PostResult(
                action=SyncAction.ERROR,
                id=post_id,
                title=title,
                slug=slug or None,
                message=message,
            )

        if field not in post:
            return error(f"remote response is missing the '{field}' field")

        is_valid, reason = validate_slug_dirname(slug)
        if not is_valid:
            return error(f"cannot use slug as a local directory: {reason}")

        post_dir = self.store.post_dir(slug)
        self._warn_if_moved(post_id, slug)

        foreign = self.store.foreign_encoding(post_dir, self.codec)
        if foreign is not None:
            return error(
                f"directory '{slug}' holds {foreign.value} content; "
                f"pull with format '{foreign.value}' or remove it first"
            )

        remote_meta, remote_content = split_post(post, field)
        remote_local = self.codec.to_local(remote_content)

        try:
            local_meta = self.store.read_meta(post_dir)
        except FileNotFoundError:
            self.store.write(post_dir, remote_meta, remote_local, self.codec)
            logger.info("Created %s", post_dir)
            return self._synced(post_id, title, slug)
        except json.JSONDecodeError as exc:
            return error(describe_json_error(post_dir / META_FILENAME, exc))
        except ValueError as exc:
            return error(str(exc))

        local_id = local_meta.get("id")
        local_updated = local_meta.get("updated_at")
        if not local_id or not local_updated:
            return error(
                f"local {META_FILENAME} is missing 'id' or 'updated_at'"
            )
        if local_id != post_id:
            return error(
                f"directory '{slug}' holds a different post (id {local_id})"
            )

        remote_updated = post.get("updated_at")
        if not remote_updated:
            return error("remote post is missing 'updated_at'")

        order = compare_timestamps(local_updated, remote_updated)
        if order < 0:
            self.store.write(post_dir, remote_meta, remote_local, self.codec)
            logger.info("Updated %s", post_dir)
            return self._synced(post_id, title, slug)

        if order > 0:
            return error(
                f"conflict: local is newer than remote "
                f"(local {local_updated}, remote {remote_updated})"
            )

        try:
            _exists, local_content = self.store.read_content(
                post_dir, self.codec
            )
        except json.JSONDecodeError as exc:
            return error(
                describe_json_error(post_dir / self.codec.filename, exc)
            )

        meta_same = strip_content(local_meta, field) == remote_meta
        content_same = self.codec.equals(local_content, remote_local)
        if meta_same and content_same:
            logger.debug("Unchanged %s", post_dir)
            return PostResult(
                action=SyncAction.SKIPPED, id=post_id, title=title, slug=slug
            )

        differs = " and ".join(
            name
            for name, same in (("metadata", meta_same), ("content", content_same))
            if not same
        )
        return error(
            f"conflict: same timestamp, different content ({differs} "
            f"differ at updated_at {remote_updated})"
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _synced(post_id: str | None, title: str | None, slug: str) -> PostResult:
        return PostResult(
            action=SyncAction.SYNCED, id=post_id, title=title, slug=slug
        )

    def _warn_if_moved(self, post_id: str | None, slug: str) -> None:
        """Log when a post's id lives in a directory named by an old slug."""
        if not post_id:
            return
        if self._id_index is None:
            self._id_index = self.store.index_by_id()
        previous = self._id_index.get(post_id)
        if previous is not None and previous != slug:
            logger.warning(
                "Post %s is now '%s' but was synced to '%s'; "
                "the old directory is left in place",
                post_id,
                slug,
                previous,
            )
