"""Structural tree -> body text"""

import re
import string
import unicodedata
from typing import Optional

from mdpost.core.bridge.images import persisted_src
from mdpost.core.models import Node, NodeType


MARKERS: dict[NodeType, str] = {
    NodeType.bold:   "**",
    NodeType.italic: "_",
    NodeType.strike: "~~",
}

# Inline punctuation that would otherwise be read back as markup.
_ESCAPE_RE = re.compile(r'([\\`*_\[\]<>&~#])')
_LINE_START_RE = re.compile(r'^([-+=])')
_ORDERED_START_RE = re.compile(r'^(\d{1,9})([.)])')
_TRAILING_SPACE_RE = re.compile(r'[ \t]+\n')
_LIST_TYPES = (NodeType.bullet_list, NodeType.ordered_list)


def _escape(value: str) -> str:
    return _TRAILING_SPACE_RE.sub("\n", _ESCAPE_RE.sub(r'\\\1', value))


def _escape_line_start(line: str) -> str:
    """Escape a leading character that would turn a paragraph line into a block construct."""
    line = line.lstrip(" \t")
    if _LINE_START_RE.match(line):
        return "\\" + line
    m = _ORDERED_START_RE.match(line)
    if m:
        return f"{m.group(1)}\\{line[m.end(1):]}"
    return line


def _destination(href: str) -> str:
    if re.search(r'[\s()<>]', href):
        return "<" + href.replace("<", "\\<").replace(">", "\\>") + ">"
    return href


def _title(title: str | None) -> str:
    if not title:
        return ""
    return ' "' + title.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _code_span(content: str) -> str:
    content = content.replace("\n", " ")
    longest = max((len(run) for run in re.findall(r'`+', content)), default=0)
    fence = "`" * (longest + 1)
    pad = ""
    if content.startswith("`") or content.endswith("`") or (
            content.startswith(" ") and content.endswith(" ") and content.strip()):
        pad = " "
    return f"{fence}{pad}{content}{pad}{fence}"


def _flank_safe(ch: str) -> bool:
    """True when ch beside a delimiter run never stops the run from opening or closing."""
    return not ch or ch.isspace() or ch in string.punctuation


def _is_punct(ch: str) -> bool:
    return ch in string.punctuation or unicodedata.category(ch)[0] in "PS"


def _entity(ch: str) -> str:
    return f"&#{ord(ch)};"


def _needs_safe_side(marker: str, edge: str) -> bool:
    # '_' cannot flank inside a word; inner punctuation needs space or punctuation outside.
    return marker == "_" or _is_punct(edge)


def _mark_marker(n: Node, core: str, before: str, after: str) -> str:
    """Choose the marker for a mark; italic switches to '*' between word characters."""
    marker = MARKERS[n.type]
    if n.type != NodeType.italic:
        return marker
    intraword = not _flank_safe(before) or not _flank_safe(after)
    if intraword and "*" not in (before, after, core[0], core[-1]):
        return "*"
    return marker


def _render_leaf(n: Node) -> str:
    if n.type == NodeType.text:
        return _escape(n.text or "")
    if n.type == NodeType.line_break:
        return "\\\n"
    if n.type == NodeType.inline_code:
        return _code_span(n.text or "")
    if n.type == NodeType.link:
        return f"[{_render_inline(n.children)}]({_destination(n.href or '')}{_title(n.title)})"
    if n.type == NodeType.image:
        src = persisted_src(n)
        dest = _destination(src) if src else ""
        return f"![{_escape(n.alt or '')}]({dest}{_title(n.title)})"
    return _render_inline(n.children)


def _following(parts: list, start: int) -> tuple[Optional[int], str]:
    """Index and first emitted character of the next non-empty part."""
    for j in range(start, len(parts)):
        part = parts[j]
        if isinstance(part, str):
            if part:
                return j, part[0]
            continue
        inner = _render_inline(part.children)
        if inner:
            return j, inner[0] if inner[0].isspace() else MARKERS[part.type][0]
    return None, ""


def _render_inline(nodes: list[Node]) -> str:
    # Marks are rendered once their neighbours are known, since flanking depends on them.
    parts: list = [n if n.type in MARKERS else _render_leaf(n) for n in nodes]
    out = ""
    for i, part in enumerate(parts):
        if isinstance(part, str):
            if part.startswith("[") and out.endswith("!"):
                out = out[:-1] + "\\!"
            out += part
            continue

        inner = _render_inline(part.children)
        core = inner.strip()
        if not core:
            out += inner
            continue
        lead = inner[:len(inner) - len(inner.lstrip())]
        trail = inner[len(inner.rstrip()):]
        j, next_char = _following(parts, i + 1)
        marker = _mark_marker(part, core, (out + lead)[-1:], (trail or next_char)[:1])

        if not lead and _needs_safe_side(marker, core[0]) and not _flank_safe(out[-1:]):
            out = out[:-1] + _entity(out[-1])
        if (not trail and j is not None and isinstance(parts[j], str)
                and _needs_safe_side(marker, core[-1]) and not _flank_safe(next_char)):
            parts[j] = _entity(next_char) + parts[j][1:]
        out += f"{lead}{marker}{core}{marker}{trail}"
    return out


def _trim_breaks(children: list[Node]) -> list[Node]:
    """Drop leading/trailing hard breaks; they have no text form at a block edge."""
    start, end = 0, len(children)
    while start < end and children[start].type == NodeType.line_break:
        start += 1
    while end > start and children[end - 1].type == NodeType.line_break:
        end -= 1
    return children[start:end]


def _render_paragraph(n: Node) -> str:
    inline = _render_inline(_trim_breaks(n.children))
    lines = [_escape_line_start(line) for line in inline.split("\n")]
    return "\n".join(line for line in lines if line.strip())


def _render_heading(n: Node) -> str:
    level = min(max(n.level or 1, 1), 3)
    inline = _render_inline([c for c in n.children if c.type != NodeType.line_break])
    content = " ".join(part.strip() for part in inline.split("\n") if part.strip())
    return "#" * level + (f" {content}" if content else "")


def _render_code_block(n: Node) -> str:
    content = n.text or ""
    longest = max((len(run) for run in re.findall(r'`+', content)), default=0)
    fence = "`" * max(3, longest + 1)
    opening = fence + (n.language or "")
    return "\n".join([opening, content, fence] if content else [opening, fence])


def _indent(text: str, width: int) -> str:
    pad = " " * width
    return "\n".join(pad + line if line else line for line in text.split("\n"))


def _alternates(block: Node, previous: Optional[NodeType], alternate: bool) -> bool:
    """Alternate markers keep two adjacent lists of one type from merging into one."""
    return block.type in _LIST_TYPES and previous == block.type and not alternate


def _joins_tightly(block: Node) -> bool:
    # Only bullet lists and ordered lists starting at 1 may interrupt a paragraph.
    return block.type == NodeType.bullet_list or (
        block.type == NodeType.ordered_list and (block.start or 1) == 1)


def _render_list_item(item: Node, marker: str) -> str:
    parts = []
    previous = None
    alternate = False
    for child in item.children:
        alternate = _alternates(child, previous, alternate)
        rendered = _render_block(child, alternate)
        previous = child.type
        if not rendered:
            continue
        if parts:
            parts.append("\n" if _joins_tightly(child) else "\n\n")
        parts.append(rendered)
    content = "".join(parts)
    if not content:
        return marker
    width = len(marker) + 1
    first, _, rest = content.partition("\n")
    return f"{marker} {first}" + (("\n" + _indent(rest, width)) if rest else "")


def _render_list(n: Node, alternate: bool = False) -> str:
    items = [c for c in n.children if c.type == NodeType.list_item]
    if n.type == NodeType.bullet_list:
        bullet = "*" if alternate else "-"
        markers = [bullet] * len(items)
    else:
        delim = ")" if alternate else "."
        start = n.start if n.start is not None else 1
        markers = [f"{start + i}{delim}" for i in range(len(items))]
    return "\n".join(_render_list_item(item, m) for item, m in zip(items, markers))


def _render_blockquote(n: Node) -> str:
    inner = _render_blocks(n.children)
    return "\n".join(f"> {line}" if line else ">" for line in inner.split("\n"))


def _render_block(n: Node, alternate: bool = False) -> str:
    if n.type == NodeType.paragraph:
        return _render_paragraph(n)
    if n.type == NodeType.heading:
        return _render_heading(n)
    if n.type == NodeType.code_block:
        return _render_code_block(n)
    if n.type in _LIST_TYPES:
        return _render_list(n, alternate)
    if n.type == NodeType.blockquote:
        return _render_blockquote(n)
    if n.type == NodeType.horizontal_rule:
        return "---"
    if n.type in (NodeType.document, NodeType.list_item):
        return _render_blocks(n.children)
    # Inline node at block level: wrap it in an implicit paragraph.
    return _render_paragraph(Node(type=NodeType.paragraph, children=[n]))


def _render_blocks(blocks: list[Node]) -> str:
    rendered = []
    previous = None
    alternate = False
    for block in blocks:
        alternate = _alternates(block, previous, alternate)
        text = _render_block(block, alternate)
        previous = block.type
        if text:
            rendered.append(text)
    return "\n\n".join(rendered)


def to_text(tree: Node) -> str:
    """Serialize a structural tree to body text ending in a single newline ('' when empty)."""
    blocks = tree.children if tree.type == NodeType.document else [tree]
    out = _render_blocks(blocks)
    return out + "\n" if out else ""
