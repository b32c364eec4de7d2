from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional


@dataclass(slots=True)
class SessionRecord:
    timestamp: int
    video_id: str
    video_title: str
    loop_start: float
    loop_end: float
    playback_rate: float
    note: str
    id: Optional[int] = None

    def with_id(self, session_id: Optional[int]) -> "SessionRecord":
        return replace(self, id=session_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "videoId": self.video_id,
            "videoTitle": self.video_title,
            "loopStart": self.loop_start,
            "loopEnd": self.loop_end,
            "playbackRate": self.playback_rate,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionRecord":
        raw_id = data.get("id")
        return cls(
            id=int(raw_id) if raw_id is not None else None,
            timestamp=int(data["timestamp"]),
            video_id=str(data["videoId"]),
            video_title=str(data.get("videoTitle") or ""),
            loop_start=float(data["loopStart"]),
            loop_end=float(data["loopEnd"]),
            playback_rate=float(data["playbackRate"]),
            note=str(data["note"]),
        )


def now_ms() -> int:
    return int(time.time() * 1000)
