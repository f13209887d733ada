"""Format conversion between Ghost HTML and Markdown."""

from .common import (
    HTML_CARD_BEGIN,
    HTML_CARD_END,
    ConversionResult,
    normalize_text,
    protect_html_cards,
    restore_html_cards,
)
from .html_to_markdown import MarkdownRenderer, html_to_markdown
from .markdown_to_html import markdown_to_html

__all__ = [
    "HTML_CARD_BEGIN",
    "HTML_CARD_END",
    "ConversionResult",
    "MarkdownRenderer",
    "html_to_markdown",
    "markdown_to_html",
    "normalize_text",
    "protect_html_cards",
    "restore_html_cards",
]
