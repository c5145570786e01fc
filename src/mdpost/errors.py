"""Error taxonomy for the editor core and its storage collaborators"""


class MdpostError(Exception):
    """Base class for errors surfaced to callers."""


class SessionMisuseError(MdpostError, RuntimeError):
    """A DocumentSession method was called with no document open."""


class StorageError(MdpostError):
    """Base class for storage collaborator failures."""

    def __init__(self, path: str, message: str = ""):
        self.path = path
        super().__init__(f"{message}: {path}" if message else path)


class DocumentNotFoundError(StorageError):
    def __init__(self, path: str):
        super().__init__(path, "Document not found")


class AccessDeniedError(StorageError):
    def __init__(self, path: str):
        super().__init__(path, "Access denied")


class StorageIOError(StorageError):
    def __init__(self, path: str, cause: Exception = None):
        self.cause = cause
        super().__init__(path, f"I/O error ({cause})" if cause else "I/O error")
