"""Content codecs for the three local post encodings.

Each codec converts between the remote post's content field and the local
content file, and defines the equality rule used to avoid spurious writes:

- ``LexicalCodec``: remote ``lexical`` JSON string <-> parsed JSON in
  ``lexical.json``. Structural equality.
- ``HtmlCodec``: remote ``html`` <-> ``html.html`` verbatim. Text equality.
- ``MarkdownCodec``: remote ``html`` <-> ``markdown.md``, converted in both
  directions. Text equality on the Markdown form.

Text equality ignores BOM, line-ending style, trailing whitespace and
trailing blank lines.

The ``create_codec()`` factory maps a ``SyncFormat`` to a codec instance.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

from ghost_mcp_server.converters import (
    html_to_markdown,
    markdown_to_html,
    normalize_text,
)
from ghost_mcp_server.file_handler import (
    read_file_with_encoding,
    read_json_file,
    write_file,
    write_json_file,
)
from ghost_mcp_server.sync.models import SyncFormat

# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class PostCodec(Protocol):
    """Protocol that all content codecs must satisfy.

    Attributes:
        format: The encoding this codec implements.
        content_field: Remote post field carrying the content.
        filename: Local content file name inside a post directory.
        formats: Value of the ``formats`` query parameter on reads.
        source: Value of the ``source`` query parameter on writes, or
            ``None`` when Ghost should take the content as-is.
    """

    format: SyncFormat
    content_field: str
    filename: str
    formats: str
    source: str | None

    def to_local(self, remote_content: str | None) -> Any:
        """Convert the remote content field to the local comparison form."""
        ...  # pragma: no cover

    def to_remote(self, local_content: Any) -> str:
        """Convert local content to the remote content field value."""
        ...  # pragma: no cover

    def read_local(self, path: Path) -> Any:
        """Read a local content file.

        Raises:
            FileNotFoundError: If the file does not exist.
            json.JSONDecodeError: If a JSON content file is malformed.
        """
        ...  # pragma: no cover

    def write_local(self, path: Path, content: Any) -> None:
        """Atomically write a local content file."""
        ...  # pragma: no cover

    def equals(self, left: Any, right: Any) -> bool:
        """Return True if two local-form contents are equivalent."""
        ...  # pragma: no cover


# ---------------------------------------------------------------------------
# Lexical
# ---------------------------------------------------------------------------


class LexicalCodec:
    """Lexical structured-tree encoding, stored as pretty-printed JSON."""

    format = SyncFormat.LEXICAL
    content_field = "lexical"
    filename = "lexical.json"
    formats = "lexical"
    source = None

    def to_local(self, remote_content: str | None) -> Any:
        if not remote_content or not remote_content.strip():
            return None
        return json.loads(remote_content)

    def to_remote(self, local_content: Any) -> str:
        if local_content is None:
            return ""
        return json.dumps(local_content, ensure_ascii=False)

    def read_local(self, path: Path) -> Any:
        return read_json_file(path)

    def write_local(self, path: Path, content: Any) -> None:
        write_json_file(path, content)

    def equals(self, left: Any, right: Any) -> bool:
        return left == right


# ---------------------------------------------------------------------------
# Text encodings
# ---------------------------------------------------------------------------


class _TextCodec:
    """Shared behaviour for encodings stored as plain text."""

    content_field = "html"
    formats = "html"
    source: str | None = "html"

    def read_local(self, path: Path) -> str:
        content, _encoding = read_file_with_encoding(path)
        return content

    def write_local(self, path: Path, content: Any) -> None:
        write_file(path, content or "")

    def equals(self, left: Any, right: Any) -> bool:
        return normalize_text(left or "") == normalize_text(right or "")


class HtmlCodec(_TextCodec):
    """Raw HTML passthrough."""

    format = SyncFormat.HTML
    filename = "html.html"

    def to_local(self, remote_content: str | None) -> str:
        return remote_content or ""

    def to_remote(self, local_content: Any) -> str:
        return local_content or ""


class MarkdownCodec(_TextCodec):
    """Markdown derived from the remote HTML.

    HTML cards are kept verbatim inside the Markdown and passed through
    unescaped on the way back.
    """

    format = SyncFormat.MARKDOWN
    filename = "markdown.md"

    def to_local(self, remote_content: str | None) -> str:
        return html_to_markdown(remote_content or "")

    def to_remote(self, local_content: Any) -> str:
        return markdown_to_html(local_content or "")

    def equals(self, left: Any, right: Any) -> bool:
        # two trailing spaces are a hard line break
        return normalize_text(
            left or "", keep_trailing_spaces=True
        ) == normalize_text(right or "", keep_trailing_spaces=True)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_CODEC_MAP: dict[SyncFormat, type] = {
    SyncFormat.LEXICAL: LexicalCodec,
    SyncFormat.HTML: HtmlCodec,
    SyncFormat.MARKDOWN: MarkdownCodec,
}

# Every content file name any codec may write, by encoding
CONTENT_FILENAMES: dict[SyncFormat, str] = {
    fmt: cls.filename for fmt, cls in _CODEC_MAP.items()
}


def create_codec(fmt: SyncFormat | str | None) -> PostCodec:
    """Create the codec for an encoding.

    Args:
        fmt: A ``SyncFormat`` or its string name (``structured`` is
            accepted for Lexical). ``None`` selects Lexical.

    Returns:
        A ``PostCodec`` implementation instance.

    Raises:
        ValueError: If the format is not recognised.
    """
    return _CODEC_MAP[SyncFormat.parse(fmt)]()  # type: ignore[return-value]
