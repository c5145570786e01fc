"""Body text -> structural tree, built from the markdown-it token stream"""

from functools import lru_cache
from typing import Optional

import structlog
from markdown_it import MarkdownIt

from mdpost.core.bridge.images import DEFAULT_IMAGE_ROUTE, image_node
from mdpost.core.models import Node, NodeType


log = structlog.get_logger(__name__)

MAX_HEADING_LEVEL = 3

# Block tokens that open a container node; the matching *_close pops it.
CONTAINER_OPEN: dict[str, NodeType] = {
    'heading_open':      NodeType.heading,
    'paragraph_open':    NodeType.paragraph,
    'bullet_list_open':  NodeType.bullet_list,
    'ordered_list_open': NodeType.ordered_list,
    'list_item_open':    NodeType.list_item,
    'blockquote_open':   NodeType.blockquote,
}

MARK_OPEN: dict[str, NodeType] = {
    'strong_open': NodeType.bold,
    'em_open':     NodeType.italic,
    's_open':      NodeType.strike,
    'link_open':   NodeType.link,
}


@lru_cache(maxsize=1)
def _parser() -> MarkdownIt:
    """CommonMark with strikethrough; raw HTML disabled so embedded markup arrives as text."""
    return MarkdownIt("commonmark", options_update={"html": False}).enable("strikethrough")


def _heading_level(token) -> int:
    """Heading level from the h1..h6 tag, clamped to the supported range."""
    level = int(token.tag[1:]) if token.tag[1:].isdigit() else 1
    return min(level, MAX_HEADING_LEVEL)


def _append_text(parent: Node, value: str) -> None:
    """Append literal text, merging into a trailing text node."""
    if not value:
        return
    if parent.children and parent.children[-1].type == NodeType.text:
        parent.children[-1].text += value
    else:
        parent.children.append(Node(type=NodeType.text, text=value))


def _strip_final_newline(content: str) -> str:
    return content[:-1] if content.endswith("\n") else content


def _alt_text(token) -> str:
    """Plain-text alt from an image token's parsed label."""
    if not token.children:
        return token.content
    return "".join(child.content for child in token.children)


def _build_inline(tokens: list, context_path: Optional[str], image_route: str) -> list[Node]:
    """Convert an inline token's children into inline nodes."""
    root = Node(type=NodeType.paragraph)
    stack = [root]

    for tok in tokens:
        parent = stack[-1]
        if tok.type in ('text', 'text_special'):
            _append_text(parent, tok.content)
        elif tok.type == 'softbreak':
            _append_text(parent, "\n")
        elif tok.type == 'hardbreak':
            parent.children.append(Node(type=NodeType.line_break))
        elif tok.type == 'code_inline':
            parent.children.append(Node(type=NodeType.inline_code, text=tok.content))
        elif tok.type in MARK_OPEN:
            mark = Node(type=MARK_OPEN[tok.type])
            if mark.type == NodeType.link:
                mark.href = tok.attrGet('href') or ""
                mark.title = tok.attrGet('title') or None
            parent.children.append(mark)
            stack.append(mark)
        elif tok.type.endswith('_close') and tok.type.replace('_close', '_open') in MARK_OPEN:
            if len(stack) > 1:
                stack.pop()
        elif tok.type == 'image':
            parent.children.append(image_node(
                tok.attrGet('src') or "",
                alt=_alt_text(tok),
                title=tok.attrGet('title'),
                context_path=context_path,
                image_route=image_route,
            ))
        else:
            log.debug("inline_degraded_to_text", token=tok.type)
            _append_text(parent, tok.content)

    return root.children


def to_structure(
    body_text: str,
    image_context_path: Optional[str] = None,
    image_route: str = DEFAULT_IMAGE_ROUTE,
    ) -> Node:
    """Parse body text into a Document tree. Unsupported constructs degrade to literal text."""
    root = Node(type=NodeType.document)
    stack = [root]

    for tok in _parser().parse(body_text):
        parent = stack[-1]
        if tok.type in CONTAINER_OPEN:
            container = Node(type=CONTAINER_OPEN[tok.type])
            if container.type == NodeType.heading:
                container.level = _heading_level(tok)
            elif container.type == NodeType.ordered_list:
                start = tok.attrGet('start')
                container.start = int(start) if start is not None else 1
            parent.children.append(container)
            stack.append(container)
        elif tok.type.endswith('_close') and tok.type.replace('_close', '_open') in CONTAINER_OPEN:
            if len(stack) > 1:
                stack.pop()
        elif tok.type == 'inline':
            parent.children.extend(_build_inline(tok.children or [], image_context_path, image_route))
        elif tok.type in ('fence', 'code_block'):
            parent.children.append(Node(
                type=NodeType.code_block,
                text=_strip_final_newline(tok.content),
                language=tok.info.strip() or None,
            ))
        elif tok.type == 'hr':
            parent.children.append(Node(type=NodeType.horizontal_rule))
        else:
            log.debug("block_degraded_to_text", token=tok.type)
            if tok.content.strip():
                paragraph = Node(type=NodeType.paragraph)
                _append_text(paragraph, tok.content.strip())
                parent.children.append(paragraph)

    return root
