"""Asset upload collaborator: store image bytes beside a document"""

import posixpath

import structlog

from mdpost.core.bridge.images import DEFAULT_IMAGE_ROUTE, RELATIVE_PREFIX
from mdpost.core.models import AssetRef
from mdpost.core.utils.slug import safe_filename
from mdpost.errors import AccessDeniedError, StorageIOError
from mdpost.storage.store import FileStore


log = structlog.get_logger(__name__)


def asset_refs(
    document_path: str,
    file_name: str,
    image_route: str = DEFAULT_IMAGE_ROUTE,
    images_dir: str = "images",
    ) -> AssetRef:
    """Compute display and storage references for an asset stored next to document_path."""
    name = safe_filename(posixpath.basename(file_name))
    doc_dir = posixpath.dirname(document_path.strip("/"))
    display = "/".join(p for p in [image_route.rstrip("/"), doc_dir, images_dir, name] if p)
    return AssetRef(display_reference=display, storage_reference=f"{RELATIVE_PREFIX}{images_dir}/{name}")


def save_asset(
    store: FileStore,
    document_path: str,
    file_name: str,
    content: bytes,
    image_route: str = DEFAULT_IMAGE_ROUTE,
    images_dir: str = "images",
    ) -> AssetRef:
    """Write content to <document dir>/<images_dir>/<safe name> and return its references."""
    if not file_name or not document_path:
        raise ValueError("Both a file name and a document path are required")

    refs = asset_refs(document_path, file_name, image_route, images_dir)
    doc_dir = posixpath.dirname(document_path.strip("/"))
    relative = posixpath.join(doc_dir, refs.storage_reference[len(RELATIVE_PREFIX):])
    target = store.resolve(relative)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
    except PermissionError as e:
        raise AccessDeniedError(relative) from e
    except OSError as e:
        raise StorageIOError(relative, e) from e

    log.info("asset_saved", path=relative, size=len(content))
    return refs
