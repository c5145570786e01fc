"""Unit tests for storage/store.py"""

import pytest

from mdpost.errors import AccessDeniedError, DocumentNotFoundError, StorageError
from mdpost.storage.store import FileStore, MemoryStore


@pytest.fixture(name="store")
def store_fixture(tmp_path):
    return FileStore(tmp_path)


def test_memory_store_roundtrip():
    store = MemoryStore()
    store.write("a.md", "text")
    assert store.read("a.md") == "text"


def test_memory_store_missing():
    with pytest.raises(DocumentNotFoundError) as exc:
        MemoryStore().read("nope.md")
    assert exc.value.path == "nope.md"


def test_file_store_write_creates_parents(store, tmp_path):
    store.write("blog/2024/01/post/post.md", "# Hi\n")
    assert (tmp_path / "blog/2024/01/post/post.md").read_text(encoding="utf-8") == "# Hi\n"
    assert store.read("blog/2024/01/post/post.md") == "# Hi\n"


def test_file_store_leading_slash_is_workspace_relative(store, tmp_path):
    store.write("/notes.md", "x")
    assert (tmp_path / "notes.md").exists()


def test_file_store_missing(store):
    with pytest.raises(DocumentNotFoundError):
        store.read("missing.md")


@pytest.mark.parametrize("path", ["../outside.md", "blog/../../outside.md"])
def test_file_store_refuses_escape(store, path):
    with pytest.raises(AccessDeniedError):
        store.read(path)
    with pytest.raises(AccessDeniedError):
        store.write(path, "x")


def test_storage_errors_share_base(store):
    with pytest.raises(StorageError):
        store.read("missing.md")
