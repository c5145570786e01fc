"""Reserved post metadata fields: validation, defaults, new-post template, meta descriptions"""

import re
from datetime import date
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mdpost.core.bridge.structure import to_structure
from mdpost.core.frontmatter import serialize_document
from mdpost.core.models import MetadataMap, Node, NodeType
from mdpost.core.utils.slug import slugify


log = structlog.get_logger(__name__)

META_DESCRIPTION_LIMIT = 155
NEW_POST_TITLE = "Untitled Post"
NEW_POST_BODY = "\n\nStart writing here...\n"
MARKDOWN_SUFFIXES = ('.md', '.mdx')

_SENTENCE_RE = re.compile(r'[^.!?]+[.!?]+')


class PostStatus(str, Enum):
    draft = "draft"
    published = "published"
    archived = "archived"


class PostMetadata(BaseModel):
    """Typed view of the reserved frontmatter fields; unknown keys pass through."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title:            str = Field(..., min_length=1)
    status:           Optional[PostStatus] = None
    tags:             Optional[list[str]] = None
    featured:         Optional[bool] = None
    featured_image:   Optional[str] = Field(default=None, alias="featuredImage")
    meta_description: Optional[str] = Field(default=None, alias="metaDescription")
    published_at:     Optional[str] = Field(default=None, alias="publishedAt")
    author:           Optional[str] = None
    excerpt:          Optional[str] = None


_FIELD_ERRORS = {
    "title":  "Title is required",
    "status": "Status must be draft, published, or archived",
    "tags":   "Tags must be an array",
}


def validate_metadata(metadata: MetadataMap, description_limit: int = META_DESCRIPTION_LIMIT) -> list[str]:
    """Return human-readable problems with the reserved fields; empty when valid.

    An over-long metaDescription is a soft limit: it is logged, not reported.
    """
    errors: list[str] = []
    try:
        post = PostMetadata.model_validate(metadata)
    except ValidationError as e:
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else ""
            message = _FIELD_ERRORS.get(field, f"{field}: {err['msg']}")
            if message not in errors:
                errors.append(message)
        return errors

    if post.meta_description and len(post.meta_description) > description_limit:
        log.warning(
            "meta_description_too_long",
            length=len(post.meta_description),
            limit=description_limit,
        )
    return errors


def default_metadata(today: Optional[date] = None) -> MetadataMap:
    """Frontmatter for a new post, in the order it is written to disk."""
    today = today or date.today()
    return {
        "title": NEW_POST_TITLE,
        "author": "",
        "publishedAt": today.isoformat(),
        "excerpt": "",
        "featuredImage": "",
        "status": PostStatus.draft.value,
        "featured": False,
        "tags": [],
    }


def new_post(title: str = NEW_POST_TITLE, today: Optional[date] = None) -> str:
    """Stored text of a new post with default frontmatter and a placeholder body."""
    metadata = default_metadata(today)
    metadata["title"] = title or NEW_POST_TITLE
    return serialize_document(metadata, NEW_POST_BODY)


def new_post_path(file_name: str, today: Optional[date] = None) -> str:
    """Workspace-relative path for a new post: blog/YYYY/MM/<slug>/<slug>.md"""
    today = today or date.today()
    name = PurePosixPath(file_name).name
    suffix = next((s for s in MARKDOWN_SUFFIXES if name.endswith(s)), ".md")
    stem = name[:-len(suffix)] if name.endswith(suffix) else name
    slug = slugify(stem) or "untitled"
    return f"blog/{today.year}/{today.month:02d}/{slug}/{slug}{suffix}"


def _collect_text(n: Node, out: list[str]) -> None:
    if n.type in (NodeType.image, NodeType.code_block, NodeType.horizontal_rule):
        return
    if n.type in (NodeType.text, NodeType.inline_code):
        out.append(n.text or "")
    elif n.type == NodeType.line_break:
        out.append(" ")
    for child in n.children:
        _collect_text(child, out)
    if n.type in (NodeType.paragraph, NodeType.heading):
        out.append(" ")


def plain_text(body_text: str) -> str:
    """Body text with markup, images and code blocks removed and whitespace collapsed."""
    out: list[str] = []
    _collect_text(to_structure(body_text), out)
    return re.sub(r'\s+', ' ', "".join(out)).strip()


def generate_meta_description(body_text: str, max_length: int = META_DESCRIPTION_LIMIT) -> str:
    """Whole leading sentences that fit in max_length, else the first sentence cut at a word boundary."""
    clean = plain_text(body_text)
    if not clean:
        return ""

    sentences = _SENTENCE_RE.findall(clean) or [clean]
    result = ""
    for sentence in sentences:
        if len(result) + len(sentence) <= max_length:
            result += sentence
        elif not result:
            result = sentence[:max_length]
            last_space = result.rfind(" ")
            if last_space > max_length * 0.7:
                result = result[:last_space]
            result = result.strip() + "..."
            break
        else:
            break
    return result.strip()
