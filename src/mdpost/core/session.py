"""Document session: the single in-memory source of truth for one open document.

A session holds the metadata mapping and body text of the open document and
derives the other views from them:

- the plain-text view edits ``body_text`` directly (``set_body_from_text``);
  the structural tree goes stale and is re-derived on the next read.
- the structural view hands back a whole tree (``set_body_from_structure``);
  the body is re-derived from it immediately.
- metadata field edits replace one key and never touch the body.

Before a refresh is pushed to the view that did *not* produce an edit, the
proposed content is compared with that view's last-known content through the
structural bridge. Semantically equal content is not pushed, so a view never
receives its own edit back and an interactive control keeps its cursor.

Sessions are not thread safe; callers serialize access.
"""

from typing import Callable, Optional

import structlog

from mdpost.core.bridge.images import DEFAULT_IMAGE_ROUTE, image_from_asset
from mdpost.core.bridge.structure import to_structure
from mdpost.core.bridge.sync import semantically_equal
from mdpost.core.bridge.text import to_text
from mdpost.core.frontmatter import normalize_value, parse_document, serialize_document
from mdpost.core.models import AssetRef, MetadataMap, MetadataValue, Node, NodeType
from mdpost.core.utils.diff import unified_diff
from mdpost.errors import SessionMisuseError


log = structlog.get_logger(__name__)

TextListener = Callable[[str], None]
StructureListener = Callable[[Node], None]


class DocumentSession:
    """One open document; create a new instance (or call open_document) per document."""

    def __init__(self, image_route: str = DEFAULT_IMAGE_ROUTE):
        self.image_route = image_route
        self._text_listeners: list[TextListener] = []
        self._structure_listeners: list[StructureListener] = []
        self._reset()

    def _reset(self) -> None:
        self._open = False
        self._path: Optional[str] = None
        self._metadata: MetadataMap = {}
        self._body = ""
        self._tree: Optional[Node] = None
        self._last_synced_body = ""
        self._saved_text = ""

    def _require_open(self, operation: str) -> None:
        if not self._open:
            raise SessionMisuseError(f"{operation}() called with no open document")

    # --- lifecycle ---

    def open_document(self, stored_text: str, path: Optional[str] = None) -> None:
        """Split stored text into metadata and body, discarding any previous document."""
        parsed = parse_document(stored_text)
        self._reset()
        self._open = True
        self._path = path
        self._metadata = parsed.metadata
        self._body = parsed.body
        self._saved_text = stored_text
        log.debug("document_opened", path=path, keys=len(parsed.metadata))

    def close(self) -> None:
        """Discard the open document and any unsaved state."""
        log.debug("document_closed", path=self._path, dirty=self._open and self.is_dirty)
        self._reset()

    @property
    def is_open(self) -> bool:
        return self._open

    # --- listeners ---

    def on_text_refresh(self, callback: TextListener) -> None:
        """Register a plain-text view; called with the new body after structural edits."""
        self._text_listeners.append(callback)

    def on_structure_refresh(self, callback: StructureListener) -> None:
        """Register a structural view; called with the new tree after text edits."""
        self._structure_listeners.append(callback)

    # --- views ---

    @property
    def path(self) -> Optional[str]:
        self._require_open("path")
        return self._path

    @property
    def metadata(self) -> MetadataMap:
        self._require_open("metadata")
        return {k: list(v) if isinstance(v, list) else v for k, v in self._metadata.items()}

    @property
    def body_text(self) -> str:
        self._require_open("body_text")
        return self._body

    @property
    def last_synced_body_text(self) -> str:
        """Body text the structural tree was last derived from or produced."""
        self._require_open("last_synced_body_text")
        return self._last_synced_body

    @property
    def structural_tree(self) -> Node:
        """Structural view of the body, re-derived lazily when stale."""
        self._require_open("structural_tree")
        if self._tree is None:
            self._tree = to_structure(self._body, self._path, self.image_route)
            self._last_synced_body = self._body
        return self._tree

    # --- edits ---

    def set_body_from_text(self, new_body: str) -> bool:
        """Apply an edit from the plain-text view. Returns True when the structural view was refreshed."""
        self._require_open("set_body_from_text")
        self._body = new_body
        if self._tree is not None and semantically_equal(new_body, self._last_synced_body):
            return False

        self._tree = None
        if not self._structure_listeners:
            return False
        tree = self.structural_tree
        for callback in self._structure_listeners:
            callback(tree)
        return True

    def set_body_from_structure(self, new_tree: Node) -> bool:
        """Apply an edit from the structural view. Returns True when the body changed."""
        self._require_open("set_body_from_structure")
        if new_tree.type != NodeType.document:
            new_tree = Node(type=NodeType.document, children=[new_tree])

        new_body = to_text(new_tree)
        self._tree = new_tree
        if semantically_equal(new_body, self._body):
            self._last_synced_body = self._body
            return False

        self._body = new_body
        self._last_synced_body = new_body
        for callback in self._text_listeners:
            callback(new_body)
        return True

    def set_metadata_field(self, key: str, value: MetadataValue) -> str:
        """Set one metadata key (appended when new) and return the recomputed stored text.

        The value is kept in the form it reads back from the stored header, so a
        multi-line string is stored folded onto one line. Unsupported value types
        raise TypeError and leave the metadata untouched.
        """
        self._require_open("set_metadata_field")
        key = key.strip() if isinstance(key, str) else key
        if not key or not isinstance(key, str) or ":" in key or "\n" in key:
            raise ValueError(f"Invalid metadata key: {key!r}")
        self._metadata[key] = normalize_value(value)
        return self.current_stored_text()

    def remove_metadata_field(self, key: str) -> str:
        """Drop one metadata key if present and return the recomputed stored text."""
        self._require_open("remove_metadata_field")
        self._metadata.pop(key, None)
        return self.current_stored_text()

    def insert_image(self, asset: AssetRef, alt: str = "", title: Optional[str] = None) -> bool:
        """Append an uploaded image as its own paragraph through the structural view."""
        self._require_open("insert_image")
        tree = self.structural_tree.model_copy(deep=True)
        tree.children.append(Node(type=NodeType.paragraph, children=[image_from_asset(asset, alt, title)]))
        return self.set_body_from_structure(tree)

    # --- stored form ---

    def current_stored_text(self) -> str:
        """The stored form of the current metadata and body."""
        self._require_open("current_stored_text")
        return serialize_document(self._metadata, self._body)

    @property
    def is_dirty(self) -> bool:
        self._require_open("is_dirty")
        return self.current_stored_text() != self._saved_text

    def mark_saved(self) -> str:
        """Record the current stored text as persisted and return it."""
        self._require_open("mark_saved")
        self._saved_text = self.current_stored_text()
        return self._saved_text

    def unsaved_diff(self) -> str:
        """Unified diff from the last saved text to the current stored text."""
        self._require_open("unsaved_diff")
        label = self._path or "document"
        return unified_diff(self._saved_text, self.current_stored_text(), f"a/{label}", f"b/{label}")
