from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PracticeSession(_CamelModel):
    id: Optional[int] = None
    timestamp: int
    video_id: str
    video_title: str = ""
    loop_start: float
    loop_end: float
    playback_rate: float
    note: str


class SessionCreateRequest(_CamelModel):
    timestamp: Optional[int] = Field(
        default=None,
        description="Creation time in epoch milliseconds; defaults to now.",
    )
    video_id: str = Field(min_length=1, description="Short video identifier, not a URL.")
    video_title: str = ""
    loop_start: float = Field(ge=0)
    loop_end: float = Field(ge=0)
    playback_rate: float = Field(default=1.0, gt=0)
    note: str

    @field_validator("note")
    @classmethod
    def validate_note(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Note must not be empty")
        return value

    @field_validator("loop_start", "loop_end", "playback_rate")
    @classmethod
    def validate_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("Value must be finite")
        return value


class SessionCreateResponse(BaseModel):
    session: PracticeSession
    persisted: bool


class SessionListResponse(BaseModel):
    sessions: list[PracticeSession]


class DeleteResponse(BaseModel):
    success: bool
