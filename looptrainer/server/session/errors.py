from __future__ import annotations


class SessionStorageError(Exception):
    """Base class for session persistence failures."""


class BackendUnavailableError(SessionStorageError):
    """Raised when a storage backend cannot be used in this environment."""
