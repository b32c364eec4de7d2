from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

from .backends import JSONBlobBackend, SQLiteBackend, StorageBackend
from .models import SessionRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionStore:
    """Practice session repository with a primary backend and a silent fallback.

    Every call probes the primary backend first and falls back to the secondary
    within that same call; no "active backend" state survives between calls.
    Failures never reach the caller: a write both backends reject is dropped,
    and an unreadable listing comes back empty.
    """

    def __init__(self, primary: StorageBackend, secondary: StorageBackend) -> None:
        self._primary = primary
        self._secondary = secondary
        self._write_lock = asyncio.Lock()

    @classmethod
    def from_paths(
        cls,
        db_path: str,
        fallback_dir: str,
        *,
        fallback_key: str = "practice-sessions",
        db_enabled: bool = True,
    ) -> "SessionStore":
        return cls(
            SQLiteBackend(db_path, enabled=db_enabled),
            JSONBlobBackend(fallback_dir, fallback_key),
        )

    @property
    def primary(self) -> StorageBackend:
        return self._primary

    @property
    def secondary(self) -> StorageBackend:
        return self._secondary

    async def init(self) -> None:
        """Prepare storage locations. Schema creation stays lazy."""
        blob_path = getattr(self._secondary, "blob_path", None)
        if isinstance(blob_path, Path):
            try:
                await asyncio.to_thread(blob_path.parent.mkdir, parents=True, exist_ok=True)
            except OSError as exc:
                logger.warning("Could not create fallback directory %s: %s", blob_path.parent, exc)
        logger.info(
            "Session store ready (primary=%s, fallback=%s)",
            self._primary.name,
            self._secondary.name,
        )

    async def close(self) -> None:  # pragma: no cover - compatibility placeholder
        return None

    async def save_session(self, session: SessionRecord) -> Optional[SessionRecord]:
        """Persist ``session`` and return the stored copy, or ``None`` if the write was lost."""
        unsaved = session if session.id is None else session.with_id(None)
        async with self._write_lock:
            return await self._with_fallback(
                "save",
                lambda backend: asyncio.to_thread(backend.add, unsaved),
                default=None,
            )

    async def delete_session(self, session_id: int) -> None:
        async with self._write_lock:
            await self._with_fallback(
                "delete",
                lambda backend: asyncio.to_thread(backend.delete, session_id),
                default=None,
            )

    async def get_all_sessions(self) -> list[SessionRecord]:
        return await self._with_fallback(
            "list",
            lambda backend: asyncio.to_thread(backend.list_all),
            default=[],
        )

    async def get_recent_sessions(self, limit: int) -> list[SessionRecord]:
        if limit <= 0:
            return []
        sessions = await self.get_all_sessions()
        return sessions[-limit:]

    async def _with_fallback(
        self,
        operation: str,
        call: Callable[[StorageBackend], Awaitable[T]],
        *,
        default: T,
    ) -> T:
        try:
            return await call(self._primary)
        except Exception as exc:  # noqa: BLE001 - any primary failure falls back
            logger.warning(
                "Primary session backend %s failed during %s, falling back to %s: %s",
                self._primary.name,
                operation,
                self._secondary.name,
                exc,
            )

        try:
            return await call(self._secondary)
        except Exception as exc:  # noqa: BLE001 - secondary failures degrade silently
            logger.error(
                "Fallback session backend %s failed during %s: %s",
                self._secondary.name,
                operation,
                exc,
            )
            return default
