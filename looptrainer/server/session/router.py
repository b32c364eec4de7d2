from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from .dependencies import get_session_store
from .models import SessionRecord, now_ms
from .schemas import (
    DeleteResponse,
    PracticeSession,
    SessionCreateRequest,
    SessionCreateResponse,
    SessionListResponse,
)
from .store import SessionStore

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    limit: Optional[int] = Query(
        default=None,
        ge=1,
        description="Only return the most recently saved N sessions.",
    ),
    store: SessionStore = Depends(get_session_store),
) -> SessionListResponse:
    if limit is None:
        records = await store.get_all_sessions()
    else:
        records = await store.get_recent_sessions(limit)
    return SessionListResponse(sessions=[_to_schema(record) for record in records])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SessionCreateResponse)
async def create_session(
    payload: SessionCreateRequest,
    store: SessionStore = Depends(get_session_store),
) -> SessionCreateResponse:
    record = SessionRecord(
        timestamp=payload.timestamp if payload.timestamp is not None else now_ms(),
        video_id=payload.video_id,
        video_title=payload.video_title,
        loop_start=payload.loop_start,
        loop_end=payload.loop_end,
        playback_rate=payload.playback_rate,
        note=payload.note,
    )
    stored = await store.save_session(record)
    return SessionCreateResponse(
        session=_to_schema(stored or record),
        persisted=stored is not None,
    )


@router.delete("/{session_id}", response_model=DeleteResponse)
async def delete_session(
    session_id: int,
    store: SessionStore = Depends(get_session_store),
) -> DeleteResponse:
    await store.delete_session(session_id)
    return DeleteResponse(success=True)


def _to_schema(record: SessionRecord) -> PracticeSession:
    return PracticeSession(
        id=record.id,
        timestamp=record.timestamp,
        video_id=record.video_id,
        video_title=record.video_title,
        loop_start=record.loop_start,
        loop_end=record.loop_end,
        playback_rate=record.playback_rate,
        note=record.note,
    )
