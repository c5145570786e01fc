"""Shared data models: metadata values, structural tree nodes, parse/render results"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel


# Closed set of frontmatter value kinds; the codec dispatches exhaustively over it.
MetadataValue = Union[str, bool, int, float, list[str], None]
MetadataMap = dict[str, MetadataValue]


class NodeType(str, Enum):
    """Closed vocabulary of structural tree nodes; every tree is representable as text"""
    document = "document"
    heading = "heading"
    paragraph = "paragraph"
    bold = "bold"
    italic = "italic"
    strike = "strike"
    inline_code = "inline_code"
    code_block = "code_block"
    link = "link"
    image = "image"
    bullet_list = "bullet_list"
    ordered_list = "ordered_list"
    list_item = "list_item"
    blockquote = "blockquote"
    horizontal_rule = "horizontal_rule"
    line_break = "line_break"
    text = "text"


BLOCK_TYPES = {
    NodeType.heading, NodeType.paragraph, NodeType.code_block, NodeType.bullet_list,
    NodeType.ordered_list, NodeType.blockquote, NodeType.horizontal_rule,
}
MARK_TYPES = {NodeType.bold, NodeType.italic, NodeType.strike, NodeType.link}


class Node(BaseModel):
    """A structural tree node. Variant fields are None when they don't apply."""
    type: NodeType
    children: list["Node"] = []
    text: Optional[str] = None          # text, inline_code, code_block
    level: Optional[int] = None         # heading (1-3)
    start: Optional[int] = None         # ordered_list first number
    language: Optional[str] = None      # code_block info string
    href: Optional[str] = None          # link
    title: Optional[str] = None         # link, image
    alt: Optional[str] = None           # image
    display_src: Optional[str] = None   # image: reference the structural view renders
    markdown_src: Optional[str] = None  # image: reference persisted to body text, wins over display_src


def node(type_: Union[NodeType, str], *children: Node, **fields) -> Node:
    """Shorthand constructor: node('paragraph', node('text', text='hi'))."""
    return Node(type=NodeType(type_), children=list(children), **fields)


def text_node(value: str) -> Node:
    return Node(type=NodeType.text, text=value)


@dataclass
class ParsedDocument:
    """A stored document split into its header metadata and body."""
    metadata: MetadataMap = field(default_factory=dict)
    body:     str = ""


@dataclass
class RenderedDocument:
    """Preview HTML for a full stored document plus the metadata parsed from it."""
    html:     str
    metadata: MetadataMap = field(default_factory=dict)


@dataclass(frozen=True)
class AssetRef:
    """References returned by the asset upload collaborator for one stored file."""
    display_reference: str      # resolvable only while editing (e.g. an API route)
    storage_reference: str      # relative to the document, written into the body
