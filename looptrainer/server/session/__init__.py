"""Practice session persistence with a SQLite primary and a JSON blob fallback."""

from .backends import JSONBlobBackend, SQLiteBackend, StorageBackend
from .dependencies import get_session_store
from .errors import BackendUnavailableError, SessionStorageError
from .models import SessionRecord
from .store import SessionStore

__all__ = [
    "BackendUnavailableError",
    "JSONBlobBackend",
    "SQLiteBackend",
    "SessionRecord",
    "SessionStorageError",
    "SessionStore",
    "StorageBackend",
    "get_session_store",
]
