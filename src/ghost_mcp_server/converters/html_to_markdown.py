"""HTML to Markdown conversion by walking an lxml element tree."""

import re

from lxml import html as lxml_html

from .common import ConversionResult, protect_html_cards, restore_html_cards

_WHITESPACE_RE = re.compile(r"\s+")

# Characters that would start emphasis, links, code spans or raw HTML.
_INLINE_SPECIAL_RE = re.compile(r"([\\`*_\[\]<~]|&(?=#?\w+;))")

# Text at the start of a line that Markdown would read as a block marker:
# ATX headings, blockquotes, bullets, setext underlines, ordered items.
_LINE_START_RE = re.compile(
    r"^(?P<indent> ?)(?P<marker>#{1,6}(?= |$)|>|[-+](?= |$)|[-=]+ *$"
    r"|\d{1,9}(?=[.)](?: |$)))",
    re.MULTILINE,
)


def _escape_line_start(match: re.Match[str]) -> str:
    indent, marker = match.group("indent"), match.group("marker")
    if marker[0].isdigit():
        return f"{indent}{marker}\\"
    return f"{indent}\\{marker}"


def _escape_paragraph(text: str) -> str:
    return _LINE_START_RE.sub(_escape_line_start, text)


_CONTAINER_TAGS = frozenset(
    {
        "div",
        "section",
        "article",
        "header",
        "footer",
        "main",
        "aside",
        "figure",
        "body",
    }
)
_BLOCK_TAGS = _CONTAINER_TAGS | frozenset(
    {
        "p",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "ul",
        "ol",
        "blockquote",
        "pre",
        "hr",
        "table",
        "figcaption",
    }
)


class MarkdownRenderer:
    """Renderer that converts an HTML element tree to Markdown."""

    def __init__(self):
        """Initialize renderer with empty warnings list."""
        self.warnings: list[str] = []

    def render(self, html_text: str) -> ConversionResult:
        """
        Convert HTML to Markdown.

        HTML card regions are protected with placeholders before parsing and
        restored verbatim afterwards. Comments other than card markers are
        dropped.

        Args:
            html_text: Ghost HTML

        Returns:
            ConversionResult with Markdown text and warnings about lossy
            conversions
        """
        self.warnings = []
        if not html_text or not html_text.strip():
            return ConversionResult(
                text="",
                source_format="html",
                target_format="markdown",
                converted=False,
            )

        protected, cards = protect_html_cards(html_text)
        root = lxml_html.fragment_fromstring(protected, create_parent="div")
        markdown = self._blocks(root)
        markdown = restore_html_cards(markdown, cards)

        return ConversionResult(
            text=markdown + "\n" if markdown else "",
            source_format="html",
            target_format="markdown",
            converted=True,
            warnings=self.warnings,
        )

    # -------------------------------------------------------------------------
    # Block level
    # -------------------------------------------------------------------------

    def _blocks(self, element) -> str:
        """Render the children of *element* as blank-line separated blocks.

        Runs of inline content between block children become paragraphs.
        """
        blocks: list[str] = []
        inline: list[str] = [self._text(element.text)]

        def flush() -> None:
            paragraph = "".join(inline).strip()
            if paragraph:
                blocks.append(_escape_paragraph(paragraph))
            inline.clear()

        for child in element:
            if not isinstance(child.tag, str):
                # comment or processing instruction
                pass
            elif child.tag in _BLOCK_TAGS:
                flush()
                block = self._block(child)
                if block:
                    blocks.append(block)
            else:
                inline.append(self._inline(child))
            inline.append(self._text(child.tail))
        flush()

        return "\n\n".join(blocks)

    def _block(self, element) -> str:
        tag = element.tag

        if tag in _CONTAINER_TAGS:
            return self._blocks(element)
        if tag == "p" or tag == "figcaption":
            return _escape_paragraph(self._inline_children(element).strip())
        if len(tag) == 2 and tag[0] == "h" and tag[1] in "123456":
            level = int(tag[1])
            return f"{'#' * level} {self._inline_children(element).strip()}"
        if tag in ("ul", "ol"):
            return self._list(element, ordered=tag == "ol")
        if tag == "blockquote":
            inner = self._blocks(element)
            return "\n".join(
                f"> {line}" if line else ">" for line in inner.split("\n")
            )
        if tag == "pre":
            return self._code_block(element)
        if tag == "hr":
            return "---"
        if tag == "table":
            return self._table(element)
        return self._blocks(element)

    def _list(self, element, ordered: bool) -> str:
        start = int(element.get("start", "1")) if ordered else 1
        items: list[str] = []
        for index, item in enumerate(
            child for child in element if child.tag == "li"
        ):
            marker = f"{start + index}. " if ordered else "- "
            content = self._blocks(item)
            indent = " " * len(marker)
            lines = content.split("\n")
            rendered = [marker + lines[0]] + [
                indent + line if line else "" for line in lines[1:]
            ]
            items.append("\n".join(rendered))
        return "\n".join(items)

    def _code_block(self, element) -> str:
        language = ""
        code_el = element.find("code")
        if code_el is not None:
            for css_class in (code_el.get("class") or "").split():
                if css_class.startswith("language-"):
                    language = css_class[len("language-") :]
                    break
        code = element.text_content().rstrip("\n")
        return f"```{language}\n{code}\n```"

    def _table(self, element) -> str:
        rows = element.xpath(".//tr")
        if not rows:
            return ""
        lines: list[str] = []
        for index, row in enumerate(rows):
            cells = [
                self._inline_children(cell).strip().replace("|", "\\|")
                for cell in row
                if cell.tag in ("td", "th")
            ]
            lines.append("| " + " | ".join(cells) + " |")
            if index == 0:
                lines.append("|" + "|".join(" --- " for _ in cells) + "|")
        if element.xpath(".//*[@colspan or @rowspan]"):
            self.warnings.append(
                "Table cell spanning detected - cells rendered unmerged"
            )
        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Inline level
    # -------------------------------------------------------------------------

    @staticmethod
    def _text(text: str | None) -> str:
        if not text:
            return ""
        return _INLINE_SPECIAL_RE.sub(r"\\\1", _WHITESPACE_RE.sub(" ", text))

    def _inline_children(self, element) -> str:
        parts = [self._text(element.text)]
        for child in element:
            if isinstance(child.tag, str):
                parts.append(self._inline(child))
            parts.append(self._text(child.tail))
        return "".join(parts)

    def _inline(self, element) -> str:
        tag = element.tag

        if tag == "br":
            return "\\\n"
        if tag == "img":
            alt = element.get("alt", "")
            src = element.get("src", "")
            return f"![{alt}]({src})"
        if tag == "code":
            return f"`{element.text_content()}`"

        inner = self._inline_children(element)
        if not inner.strip():
            return inner

        match tag:
            case "strong" | "b":
                return f"**{inner}**"
            case "em" | "i":
                return f"*{inner}*"
            case "s" | "del" | "strike":
                return f"~~{inner}~~"
            case "a":
                href = element.get("href")
                if not href:
                    return inner
                title = element.get("title")
                if title:
                    return f'[{inner}]({href} "{title}")'
                return f"[{inner}]({href})"
            case _:
                return inner


def html_to_markdown(html_text: str) -> str:
    """Convert Ghost HTML to Markdown (text only)."""
    return MarkdownRenderer().render(html_text).text


def convert_with_warnings(html_text: str) -> ConversionResult:
    """Convert Ghost HTML to Markdown, returning warnings."""
    return MarkdownRenderer().render(html_text)
