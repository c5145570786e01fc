"""Storage collaborator: read/write stored document text by workspace-relative path"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from mdpost.errors import AccessDeniedError, DocumentNotFoundError, StorageIOError


log = structlog.get_logger(__name__)


class DocumentStore(ABC):
    @abstractmethod
    def read(self, path: str) -> str:
        """Return the stored text at path."""
        raise NotImplementedError

    @abstractmethod
    def write(self, path: str, text: str) -> None:
        raise NotImplementedError


@dataclass
class MemoryStore(DocumentStore):
    _docs: dict[str, str] = field(default_factory=dict)

    def read(self, path: str) -> str:
        if path not in self._docs:
            raise DocumentNotFoundError(path)
        return self._docs[path]

    def write(self, path: str, text: str) -> None:
        self._docs[path] = text


class FileStore(DocumentStore):
    """Documents on disk under a content root; paths may not escape the root."""

    def __init__(self, root: Path):
        self.root = Path(root).resolve()

    def resolve(self, path: str) -> Path:
        """Map a workspace-relative path to an absolute path inside root."""
        full = (self.root / path.lstrip("/")).resolve()
        if full != self.root and self.root not in full.parents:
            raise AccessDeniedError(path)
        return full

    def read(self, path: str) -> str:
        full = self.resolve(path)
        try:
            return full.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise DocumentNotFoundError(path) from e
        except PermissionError as e:
            raise AccessDeniedError(path) from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageIOError(path, e) from e

    def write(self, path: str, text: str) -> None:
        full = self.resolve(path)
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            full.write_text(text, encoding="utf-8")
        except PermissionError as e:
            raise AccessDeniedError(path) from e
        except OSError as e:
            raise StorageIOError(path, e) from e
        log.debug("document_written", path=path, size=len(text))
