"""Bidirectional post sync engine.

Public API for synchronising Ghost posts with a local directory tree,
one directory per post::

    <root>/<slug>/meta.json
    <root>/<slug>/lexical.json | html.html | markdown.md

Architecture
------------
Both directions use **optimistic concurrency** on the post's
``updated_at`` timestamp. Pull overwrites local records when the remote is
newer and reports a conflict when the local record is newer or differs at
the same timestamp. Push is stricter: it only updates a post whose local
``updated_at`` equals the remote value exactly.

Modules:

- ``pull``      -- ``PullReconciler``: remote -> local.
- ``push``      -- ``PushReconciler``: local -> remote.
- ``codec``     -- ``PostCodec`` variants for the three encodings.
- ``records``   -- ``LocalPostStore``: read/write local post records.
- ``models``    -- ``SyncFormat``, ``SyncReport`` and friends.
- ``reporter``  -- Human-readable and JSON report formatting.

Usage example
-------------
::

    from pathlib import Path
    from ghost_mcp_server.sync import PullReconciler, report_to_json

    reconciler = PullReconciler(client, Path("posts"), fmt="markdown")
    report = reconciler.run()
    print(report_to_json(report))
"""

from .codec import (
    HtmlCodec,
    LexicalCodec,
    MarkdownCodec,
    PostCodec,
    create_codec,
)
from .models import (
    PostResult,
    SyncAction,
    SyncDirection,
    SyncError,
    SyncFormat,
    SyncNote,
    SyncReport,
)
from .pull import PullReconciler
from .push import PushReconciler
from .records import LocalPostStore
from .reporter import format_sync_report, report_to_json

__all__ = [
    "HtmlCodec",
    "LexicalCodec",
    "LocalPostStore",
    "MarkdownCodec",
    "PostCodec",
    "PostResult",
    "PullReconciler",
    "PushReconciler",
    "SyncAction",
    "SyncDirection",
    "SyncError",
    "SyncFormat",
    "SyncNote",
    "SyncReport",
    "create_codec",
    "format_sync_report",
    "report_to_json",
]
