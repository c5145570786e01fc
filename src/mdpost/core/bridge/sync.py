"""Semantic comparison of body texts and trees through the structural bridge"""

from mdpost.core.bridge.structure import to_structure
from mdpost.core.bridge.text import to_text
from mdpost.core.models import Node


def normalize_body(body_text: str) -> str:
    """Canonical text form of a body: to_text(to_structure(body))."""
    return to_text(to_structure(body_text))


def semantically_equal(a: str, b: str) -> bool:
    """True when two bodies differ only in formatting the bridge does not preserve."""
    if a == b:
        return True
    return normalize_body(a) == normalize_body(b)


def tree_matches_body(tree: Node, body_text: str) -> bool:
    """True when a tree already expresses body_text, so re-deriving one from the other is a no-op."""
    return semantically_equal(to_text(tree), body_text)
