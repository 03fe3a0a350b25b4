"""
Content Markup.

Note content is stored as opaque text, but the editor toolbar writes a
small, fixed markdown subset into it. This module parses that subset and
renders it as escaped HTML, plain text, or a rich ``Text`` for the
terminal.

Block constructs (one per line):

    # / ## / ###   heading
    > text         quote
    - / * item     bullet list
    1. item        numbered list
    ---            horizontal rule

Inline constructs: ``**bold**``, ``*italic*``, ``<u>underline</u>``,
```code```, ``[text](url)``. Anything else is literal text.
"""

import html
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from urllib.parse import urlparse

from rich.style import Style
from rich.text import Text as RichText

from diary.backend.core.utils import utc_now

PLACEHOLDER = "text"
PREVIEW_LENGTH = 40
UNTITLED = "Untitled"

# =============================================================================
# Document model
# =============================================================================


@dataclass
class Text:
    text: str


@dataclass
class Code:
    text: str


@dataclass
class Strong:
    children: list["Inline"]


@dataclass
class Emphasis:
    children: list["Inline"]


@dataclass
class Underline:
    children: list["Inline"]


@dataclass
class Link:
    children: list["Inline"]
    url: str


Inline = Text | Code | Strong | Emphasis | Underline | Link


@dataclass
class Heading:
    level: int
    children: list[Inline]


@dataclass
class Paragraph:
    lines: list[list[Inline]]


@dataclass
class Quote:
    lines: list[list[Inline]]


@dataclass
class BulletList:
    items: list[list[Inline]] = field(default_factory=list)


@dataclass
class OrderedList:
    items: list[list[Inline]] = field(default_factory=list)
    start: int = 1


@dataclass
class Rule:
    pass


Block = Heading | Paragraph | Quote | BulletList | OrderedList | Rule

# =============================================================================
# Parsing
# =============================================================================

_HEADING_RE = re.compile(r"^(#{1,3}) +(.*)$")
_RULE_RE = re.compile(r"^-{3,}\s*$")
_QUOTE_RE = re.compile(r"^> ?(.*)$")
_BULLET_RE = re.compile(r"^[-*] +(.*)$")
_ORDERED_RE = re.compile(r"^(\d+)\. +(.*)$")

_INLINE_RE = re.compile(
    r"`(?P<code>[^`]+)`"
    r"|\[(?P<link_text>[^\]]+)\]\((?P<link_url>[^)\s]+)\)"
    r"|\*\*(?P<bold>.+?)\*\*"
    r"|<u>(?P<underline>.+?)</u>"
    r"|\*(?P<italic>[^*]+)\*"
)


def parse_inline(text: str) -> list[Inline]:
    """Split one line into inline nodes. Unmatched markers stay literal."""
    nodes: list[Inline] = []
    pos = 0

    for match in _INLINE_RE.finditer(text):
        if match.start() > pos:
            nodes.append(Text(text[pos:match.start()]))

        if match.group("code") is not None:
            nodes.append(Code(match.group("code")))
        elif match.group("link_text") is not None:
            nodes.append(Link(parse_inline(match.group("link_text")), match.group("link_url")))
        elif match.group("bold") is not None:
            nodes.append(Strong(parse_inline(match.group("bold"))))
        elif match.group("underline") is not None:
            nodes.append(Underline(parse_inline(match.group("underline"))))
        else:
            nodes.append(Emphasis(parse_inline(match.group("italic"))))

        pos = match.end()

    if pos < len(text):
        nodes.append(Text(text[pos:]))

    return nodes


def parse(text: str) -> list[Block]:
    """
    Parse note content into blocks.

    Consecutive quote lines form one quote, consecutive list items one
    list, and consecutive plain lines one paragraph. Blank lines separate
    blocks.
    """
    blocks: list[Block] = []
    current: Block | None = None

    for raw_line in text.replace("\r\n", "\n").split("\n"):
        line = raw_line.rstrip()

        if not line.strip():
            current = None
            continue

        if _RULE_RE.match(line):
            blocks.append(Rule())
            current = None
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            blocks.append(Heading(len(heading.group(1)), parse_inline(heading.group(2))))
            current = None
            continue

        quote = _QUOTE_RE.match(line)
        if quote:
            if not isinstance(current, Quote):
                current = Quote([])
                blocks.append(current)
            current.lines.append(parse_inline(quote.group(1)))
            continue

        bullet = _BULLET_RE.match(line)
        if bullet:
            if not isinstance(current, BulletList):
                current = BulletList()
                blocks.append(current)
            current.items.append(parse_inline(bullet.group(1)))
            continue

        ordered = _ORDERED_RE.match(line)
        if ordered:
            if not isinstance(current, OrderedList):
                current = OrderedList(start=int(ordered.group(1)))
                blocks.append(current)
            current.items.append(parse_inline(ordered.group(2)))
            continue

        if not isinstance(current, Paragraph):
            current = Paragraph([])
            blocks.append(current)
        current.lines.append(parse_inline(line))

    return blocks

# =============================================================================
# HTML rendering
# =============================================================================

_SAFE_SCHEMES = {"", "http", "https", "mailto"}


def _safe_url(url: str) -> str | None:
    """Return the URL if its scheme is harmless in an href, else None."""
    if urlparse(url).scheme.lower() in _SAFE_SCHEMES:
        return url
    return None


def _inline_html(nodes: list[Inline]) -> str:
    parts = []
    for node in nodes:
        if isinstance(node, Text):
            parts.append(html.escape(node.text))
        elif isinstance(node, Code):
            parts.append(f"<code>{html.escape(node.text)}</code>")
        elif isinstance(node, Strong):
            parts.append(f"<strong>{_inline_html(node.children)}</strong>")
        elif isinstance(node, Emphasis):
            parts.append(f"<em>{_inline_html(node.children)}</em>")
        elif isinstance(node, Underline):
            parts.append(f"<u>{_inline_html(node.children)}</u>")
        elif isinstance(node, Link):
            url = _safe_url(node.url)
            inner = _inline_html(node.children)
            if url is None:
                parts.append(inner)
            else:
                parts.append(f'<a href="{html.escape(url)}">{inner}</a>')
    return "".join(parts)


def _lines_html(lines: list[list[Inline]]) -> str:
    return "<br>".join(_inline_html(line) for line in lines)


def render_html(text: str) -> str:
    """
    Render note content as HTML.

    All literal text is escaped; the only tags emitted are those of the
    supported constructs. Links with other schemes (``javascript:`` etc.)
    keep their text and lose the anchor.
    """
    out = []
    for block in parse(text):
        if isinstance(block, Heading):
            out.append(f"<h{block.level}>{_inline_html(block.children)}</h{block.level}>")
        elif isinstance(block, Paragraph):
            out.append(f"<p>{_lines_html(block.lines)}</p>")
        elif isinstance(block, Quote):
            out.append(f"<blockquote>{_lines_html(block.lines)}</blockquote>")
        elif isinstance(block, BulletList):
            items = "".join(f"<li>{_inline_html(item)}</li>" for item in block.items)
            out.append(f"<ul>{items}</ul>")
        elif isinstance(block, OrderedList):
            items = "".join(f"<li>{_inline_html(item)}</li>" for item in block.items)
            start = f' start="{block.start}"' if block.start != 1 else ""
            out.append(f"<ol{start}>{items}</ol>")
        elif isinstance(block, Rule):
            out.append("<hr>")
    return "\n".join(out)

# =============================================================================
# Plain text
# =============================================================================


def _inline_plain(nodes: list[Inline]) -> str:
    parts = []
    for node in nodes:
        if isinstance(node, (Text, Code)):
            parts.append(node.text)
        else:
            parts.append(_inline_plain(node.children))
    return "".join(parts)


def to_plain_text(text: str) -> str:
    """Strip all markup, keeping one line per source line of text."""
    lines: list[str] = []
    for block in parse(text):
        if isinstance(block, Heading):
            lines.append(_inline_plain(block.children))
        elif isinstance(block, (Paragraph, Quote)):
            lines.extend(_inline_plain(line) for line in block.lines)
        elif isinstance(block, (BulletList, OrderedList)):
            lines.extend(_inline_plain(item) for item in block.items)
    return "\n".join(lines)


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """One-line plain-text preview, truncated with "..." past ``length``."""
    flat = " ".join(to_plain_text(text).split())
    if len(flat) > length:
        return flat[:length] + "..."
    return flat

# =============================================================================
# Terminal rendering
# =============================================================================

_HEADING_STYLES = {1: "bold underline", 2: "bold", 3: "bold italic"}


def _inline_rich(out: RichText, nodes: list[Inline], style: Style) -> None:
    for node in nodes:
        if isinstance(node, Text):
            out.append(node.text, style=style)
        elif isinstance(node, Code):
            out.append(node.text, style=style + Style(color="cyan", bold=True))
        elif isinstance(node, Strong):
            _inline_rich(out, node.children, style + Style(bold=True))
        elif isinstance(node, Emphasis):
            _inline_rich(out, node.children, style + Style(italic=True))
        elif isinstance(node, Underline):
            _inline_rich(out, node.children, style + Style(underline=True))
        elif isinstance(node, Link):
            url = _safe_url(node.url)
            link_style = Style(color="blue", underline=True, link=url) if url else Style()
            _inline_rich(out, node.children, style + link_style)


def render_rich(text: str, rule_width: int = 40) -> RichText:
    """Render note content as a rich Text for the terminal viewer."""
    out = RichText()
    plain = Style()

    for index, block in enumerate(parse(text)):
        if index:
            out.append("\n\n")

        if isinstance(block, Heading):
            _inline_rich(out, block.children, Style.parse(_HEADING_STYLES[block.level]))
        elif isinstance(block, Paragraph):
            for n, line in enumerate(block.lines):
                if n:
                    out.append("\n")
                _inline_rich(out, line, plain)
        elif isinstance(block, Quote):
            for n, line in enumerate(block.lines):
                if n:
                    out.append("\n")
                out.append("▌ ", style="dim")
                _inline_rich(out, line, Style(italic=True))
        elif isinstance(block, BulletList):
            for n, item in enumerate(block.items):
                if n:
                    out.append("\n")
                out.append("• ")
                _inline_rich(out, item, plain)
        elif isinstance(block, OrderedList):
            for n, item in enumerate(block.items):
                if n:
                    out.append("\n")
                out.append(f"{block.start + n}. ")
                _inline_rich(out, item, plain)
        elif isinstance(block, Rule):
            out.append("─" * rule_width, style="dim")

    return out

# =============================================================================
# Toolbar
# =============================================================================

TOOLBAR: dict[str, tuple[str, str]] = {
    "bold": ("**", "**"),
    "italic": ("*", "*"),
    "underline": ("<u>", "</u>"),
    "heading": ("## ", ""),
    "quote": ("> ", ""),
    "bullet_list": ("- ", ""),
    "numbered_list": ("1. ", ""),
    "code": ("`", "`"),
    "divider": ("---\n", ""),
    "link": ("[", "](url)"),
}


def apply_format(text: str, start: int, end: int, tool: str) -> str:
    """
    Wrap the selection ``text[start:end]`` in a toolbar tool's markers.

    An empty selection is replaced by the placeholder "text".

    Raises:
        KeyError: If ``tool`` is not a toolbar entry
    """
    before, after = TOOLBAR[tool]
    start, end = sorted((max(0, start), min(len(text), end)))
    selected = text[start:end] or PLACEHOLDER
    return text[:start] + before + selected + after + text[end:]

# =============================================================================
# Note list display
# =============================================================================


class _NoteLike(Protocol):
    title: str
    content: str
    created_at: datetime
    updated_at: datetime


@dataclass
class NoteSummary:
    """What a note list row shows."""

    title: str
    preview: str
    timestamp: str


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def relative_time(moment: datetime, now: datetime | None = None) -> str:
    """Describe how long ago ``moment`` was, e.g. "about 2 hours ago"."""
    now = now or utc_now()
    seconds = max(0.0, (now - moment).total_seconds())
    minutes = round(seconds / 60)

    if seconds < 30:
        return "less than a minute ago"
    if minutes < 45:
        return f"{_plural(max(minutes, 1), 'minute')} ago"

    hours = round(minutes / 60)
    if minutes < 90:
        return "about 1 hour ago"
    if hours < 24:
        return f"about {_plural(hours, 'hour')} ago"

    days = round(hours / 24)
    if hours < 42:
        return "1 day ago"
    if days < 30:
        return f"{_plural(days, 'day')} ago"

    months = round(days / 30)
    if days < 45:
        return "about 1 month ago"
    if days < 365:
        return f"{_plural(max(months, 2), 'month')} ago"

    years = round(days / 365)
    return f"about {_plural(years, 'year')} ago"


def summarize(note: _NoteLike, now: datetime | None = None) -> NoteSummary:
    """Build the list row for a note: title, preview and "Created/Updated" stamp."""
    if note.updated_at > note.created_at:
        label, moment = "Updated", note.updated_at
    else:
        label, moment = "Created", note.created_at

    return NoteSummary(
        title=note.title or UNTITLED,
        preview=preview(note.content),
        timestamp=f"{label} {relative_time(moment, now)}",
    )
