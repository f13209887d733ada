"""Markdown to HTML conversion using mistune."""

import mistune

from .common import ConversionResult

# No "url" plugin: bare URLs stay plain text so output is deterministic.
# escape=False lets raw HTML (including restored HTML cards) through as-is.
_markdown = mistune.create_markdown(
    escape=False,
    plugins=["strikethrough", "table"],
)


def convert_with_warnings(markdown_text: str) -> ConversionResult:
    """
    Render Markdown to HTML.

    Args:
        markdown_text: Markdown source

    Returns:
        ConversionResult with HTML text. Empty input yields empty output.
    """
    if not markdown_text or not markdown_text.strip():
        return ConversionResult(
            text="",
            source_format="markdown",
            target_format="html",
            converted=False,
        )

    html = _markdown(markdown_text)
    return ConversionResult(
        text=str(html),
        source_format="markdown",
        target_format="html",
        converted=True,
    )


def markdown_to_html(markdown_text: str) -> str:
    """Render Markdown to HTML (text only)."""
    return convert_with_warnings(markdown_text).text
