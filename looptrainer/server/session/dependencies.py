from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends

from looptrainer.config import load_storage_settings

from .store import SessionStore

logger = logging.getLogger(__name__)

_SESSION_STORE: Optional[SessionStore] = None


def initialise_session_store() -> SessionStore:
    """Create session store instance using configuration."""
    global _SESSION_STORE
    if _SESSION_STORE is not None:
        return _SESSION_STORE

    settings = load_storage_settings()
    store = SessionStore.from_paths(
        settings.db_path,
        settings.fallback_dir,
        fallback_key=settings.fallback_key,
        db_enabled=settings.db_enabled,
    )
    _SESSION_STORE = store
    logger.info(
        "Initialised session store with DB path %s and fallback dir %s",
        settings.db_path,
        settings.fallback_dir,
    )
    return store


def set_session_store(store: Optional[SessionStore]) -> None:
    global _SESSION_STORE
    _SESSION_STORE = store


def get_session_store(_: SessionStore = Depends(initialise_session_store)) -> SessionStore:
    if _SESSION_STORE is None:
        raise RuntimeError("Session store has not been initialised")
    return _SESSION_STORE
