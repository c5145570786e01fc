"""Image reference handling: display vs. persisted source for the structural view"""

import posixpath
from typing import Optional

from mdpost.core.models import AssetRef, Node, NodeType


RELATIVE_PREFIX = "./"
DEFAULT_IMAGE_ROUTE = "/api/images"


def resolve_display_src(
    src: str,
    context_path: Optional[str],
    image_route: str = DEFAULT_IMAGE_ROUTE,
    ) -> Optional[str]:
    """Map a document-relative './x' reference to a display route, else None.

    'blog/2024/post/post.md' + './images/a.png' -> '/api/images/blog/2024/post/images/a.png'
    """
    if not context_path or not src.startswith(RELATIVE_PREFIX):
        return None
    doc_dir = posixpath.dirname(context_path.strip("/"))
    parts = [image_route.rstrip("/"), doc_dir, src[len(RELATIVE_PREFIX):]]
    return "/".join(p for p in parts if p)


def image_node(
    src: str,
    alt: str = "",
    title: Optional[str] = None,
    context_path: Optional[str] = None,
    image_route: str = DEFAULT_IMAGE_ROUTE,
    ) -> Node:
    """Build an Image node, splitting display and persisted sources when src is document-relative."""
    display = resolve_display_src(src, context_path, image_route)
    if display is None:
        return Node(type=NodeType.image, display_src=src, alt=alt, title=title or None)
    return Node(type=NodeType.image, display_src=display, markdown_src=src, alt=alt, title=title or None)


def image_from_asset(asset: AssetRef, alt: str = "", title: Optional[str] = None) -> Node:
    """Build an Image node for a freshly uploaded asset."""
    return Node(
        type=NodeType.image,
        display_src=asset.display_reference,
        markdown_src=asset.storage_reference,
        alt=alt,
        title=title or None,
    )


def persisted_src(image: Node) -> str:
    """Return the reference written to body text: markdown_src wins over display_src."""
    return image.markdown_src or image.display_src or ""
