"""Storage backends for practice sessions.

Two implementations share the :class:`StorageBackend` protocol: a transactional
SQLite store keeping one row per session, and a JSON blob store keeping the
whole list under a single key. Both are synchronous; :class:`SessionStore`
drives them from a worker thread.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

try:
    import sqlite3
except ImportError:  # pragma: no cover - interpreter built without sqlite
    sqlite3 = None  # type: ignore[assignment]

from .errors import BackendUnavailableError, SessionStorageError
from .models import SessionRecord, now_ms

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    name: str

    def add(self, session: SessionRecord) -> SessionRecord:
        """Persist ``session`` and return it with its assigned id."""

    def delete(self, session_id: int) -> None:
        """Remove the session with ``session_id``; unknown ids are ignored."""

    def list_all(self) -> list[SessionRecord]:
        """Return every stored session in insertion order."""


_SESSIONS_DDL = """
CREATE TABLE IF NOT EXISTS practice_sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp INTEGER NOT NULL,
    video_id TEXT NOT NULL,
    video_title TEXT NOT NULL DEFAULT '',
    loop_start REAL NOT NULL,
    loop_end REAL NOT NULL,
    playback_rate REAL NOT NULL,
    note TEXT NOT NULL
);
"""

_SELECT_COLUMNS = "id, timestamp, video_id, video_title, loop_start, loop_end, playback_rate, note"


class SQLiteBackend:
    """Primary backend: one row per session keyed by an autoincrement id."""

    name = "sqlite"

    def __init__(self, db_path: str, *, enabled: bool = True) -> None:
        path = Path(db_path)
        if not path.is_absolute():
            path = Path.cwd() / path
        if path.suffix != ".db":
            path = path.with_suffix(".db")
        self._db_path = str(path)
        self._enabled = enabled

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def available(self) -> bool:
        return self._enabled and sqlite3 is not None

    def add(self, session: SessionRecord) -> SessionRecord:
        with self._connect() as connection:
            cursor = connection.execute(
                "INSERT INTO practice_sessions"
                " (timestamp, video_id, video_title, loop_start, loop_end, playback_rate, note)"
                " VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    session.timestamp,
                    session.video_id,
                    session.video_title,
                    session.loop_start,
                    session.loop_end,
                    session.playback_rate,
                    session.note,
                ),
            )
            session_id = cursor.lastrowid
            connection.commit()
        return session.with_id(int(session_id))

    def delete(self, session_id: int) -> None:
        with self._connect() as connection:
            connection.execute("DELETE FROM practice_sessions WHERE id = ?", (session_id,))
            connection.commit()

    def list_all(self) -> list[SessionRecord]:
        with self._connect() as connection:
            connection.row_factory = sqlite3.Row
            cursor = connection.execute(
                f"SELECT {_SELECT_COLUMNS} FROM practice_sessions ORDER BY id ASC"
            )
            rows = cursor.fetchall()
        return [self._row_to_session(row) for row in rows]

    def _connect(self) -> "sqlite3.Connection":
        if not self.available:
            raise BackendUnavailableError(f"{self.name} backend is not available")

        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        connection = sqlite3.connect(self._db_path)
        # The file may have been replaced since the last call.
        connection.execute(_SESSIONS_DDL)
        connection.commit()
        return connection

    @staticmethod
    def _row_to_session(row: "sqlite3.Row") -> SessionRecord:
        return SessionRecord(
            id=row["id"],
            timestamp=row["timestamp"],
            video_id=row["video_id"],
            video_title=row["video_title"],
            loop_start=row["loop_start"],
            loop_end=row["loop_end"],
            playback_rate=row["playback_rate"],
            note=row["note"],
        )


class JSONBlobBackend:
    """Fallback backend: the full session list serialised under one key."""

    name = "json-blob"

    def __init__(self, directory: str, key: str = "practice-sessions") -> None:
        self._directory = Path(directory)
        self._key = key

    @property
    def blob_path(self) -> Path:
        return self._directory / f"{self._key}.json"

    def add(self, session: SessionRecord) -> SessionRecord:
        sessions = self.list_all()
        stored = session.with_id(self._next_id(sessions))
        sessions.append(stored)
        self._write(sessions)
        return stored

    def delete(self, session_id: int) -> None:
        sessions = self.list_all()
        self._write([session for session in sessions if session.id != session_id])

    def list_all(self) -> list[SessionRecord]:
        raw = self._read()
        if raw is None:
            return []
        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError("session blob is not a list")
            return [SessionRecord.from_dict(item) for item in payload]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring unreadable session blob %s: %s", self.blob_path, exc)
            return []

    def _read(self) -> Optional[str]:
        try:
            return self.blob_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read session blob %s: %s", self.blob_path, exc)
            return None

    def _write(self, sessions: list[SessionRecord]) -> None:
        try:
            data = json.dumps([session.to_dict() for session in sessions], allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise SessionStorageError(f"Could not serialise sessions: {exc}") from exc

        self._directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self._directory, prefix=f".{self._key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(data)
            os.replace(tmp_path, self.blob_path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    @staticmethod
    def _next_id(sessions: list[SessionRecord]) -> int:
        candidate = now_ms()
        existing = [session.id for session in sessions if session.id is not None]
        if existing and candidate <= max(existing):
            candidate = max(existing) + 1
        return candidate
