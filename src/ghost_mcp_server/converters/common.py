"""Common types and utilities for format conversion."""

import re
from dataclasses import dataclass, field

# =============================================================================
# Ghost HTML cards
# =============================================================================
#
# Ghost wraps raw HTML cards in a pair of comment markers:
#
#   <!--kg-card-begin: html--><div class="custom">...</div><!--kg-card-end: html-->
#
# These regions must survive HTML -> Markdown conversion verbatim, so they are
# swapped for alphanumeric placeholder tokens before rendering and substituted
# back afterwards. Tokens contain no Markdown syntax characters, so no
# renderer escapes or reflows them.
# =============================================================================

HTML_CARD_BEGIN = "<!--kg-card-begin: html-->"
HTML_CARD_END = "<!--kg-card-end: html-->"

_HTML_CARD_RE = re.compile(
    re.escape(HTML_CARD_BEGIN) + r".*?" + re.escape(HTML_CARD_END),
    re.DOTALL,
)


def _placeholder(index: int) -> str:
    return f"GHOSTHTMLCARD{index}END"


@dataclass
class ConversionResult:
    """Result of format conversion with metadata and warnings.

    Attributes:
        text: Converted text output
        source_format: Format of input text ('html' or 'markdown')
        target_format: Format of output text ('html' or 'markdown')
        converted: True if conversion performed, False for empty input
        warnings: List of warnings about lossy conversions
    """

    text: str
    source_format: str = "unknown"
    target_format: str = "unknown"
    converted: bool = False
    warnings: list[str] = field(default_factory=list)


def protect_html_cards(html: str) -> tuple[str, list[str]]:
    """Replace every HTML card region with a placeholder paragraph.

    Args:
        html: Ghost HTML

    Returns:
        Tuple of (html with placeholders, original regions in order).
        The regions keep their comment markers.
    """
    cards: list[str] = []

    def _swap(match: re.Match[str]) -> str:
        cards.append(match.group(0))
        return f"<p>{_placeholder(len(cards) - 1)}</p>"

    return _HTML_CARD_RE.sub(_swap, html), cards


def restore_html_cards(text: str, cards: list[str]) -> str:
    """Substitute the original HTML card regions back for their placeholders.

    A placeholder still inside its ``<p>`` wrapper is replaced together with
    the wrapper, so this inverts :func:`protect_html_cards` exactly.
    """
    for index, card in enumerate(cards):
        token = _placeholder(index)
        text = text.replace(f"<p>{token}</p>", card).replace(token, card)
    return text


def normalize_text(text: str, keep_trailing_spaces: bool = False) -> str:
    """Normalize text for equality comparison.

    Strips a leading BOM, converts CRLF/CR line endings to LF, removes
    trailing whitespace from each line and drops trailing blank lines.

    Args:
        text: Text to normalize
        keep_trailing_spaces: Leave trailing whitespace inside lines alone.
            Markdown needs this since two trailing spaces are a hard line
            break. Whitespace-only lines still count as blank.
    """
    text = text.removeprefix("\ufeff")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    if keep_trailing_spaces:
        lines = [line if line.strip() else "" for line in text.split("\n")]
        return "\n".join(lines).rstrip()
    lines = [line.rstrip() for line in text.split("\n")]
    return "\n".join(lines).rstrip("\n")
