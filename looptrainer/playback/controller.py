"""Scrub position and loop range state for a single loaded video.

The controller owns everything transient about playback: where the playhead
is, whether the user is dragging it, the loop window and the playback rate.
Player events are fed in through the ``on_*`` methods; every operation that
moves the playhead returns a :class:`SeekInstruction` and, when a player is
attached, forwards it to ``player.seek_to``.

Looping is level triggered: each progress tick at or beyond the loop end asks
for a seek back to the loop start, so a slow tick rate never skips a loop.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from looptrainer.server.session.models import SessionRecord, now_ms

from .player import Player, PlayerMetadata, make_video_url
from .timefmt import format_display, format_loop_boundary, parse_loop_boundary

logger = logging.getLogger(__name__)

JUMP_STEP_SECONDS = 5.0
PLAYBACK_RATES = (0.25, 0.5, 0.75, 1.0, 1.25, 1.5, 2.0)

Boundary = Literal["start", "end"]


@dataclass(slots=True)
class LoopRange:
    start: float = 0.0
    end: float = 0.0
    enabled: bool = False

    @property
    def is_unset(self) -> bool:
        return self.start == 0 and self.end == 0


@dataclass(frozen=True, slots=True)
class SeekInstruction:
    seconds: float
    forced: bool = False


def _unit(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


def _seconds(value: float) -> float:
    if not math.isfinite(value) or value < 0:
        return 0.0
    return float(value)


class LoopController:
    format_display = staticmethod(format_display)
    format_loop_boundary = staticmethod(format_loop_boundary)
    parse_loop_boundary = staticmethod(parse_loop_boundary)

    def __init__(
        self,
        player: Optional[Player] = None,
        *,
        session: Optional[SessionRecord] = None,
        suppress_repeat_loop_seeks: bool = False,
    ) -> None:
        self.player = player
        self.suppress_repeat_loop_seeks = suppress_repeat_loop_seeks
        self.played_fraction = 0.0
        self.duration = 0.0
        self.is_seeking = False
        self.is_playing = False
        self.loop_range = LoopRange()
        self.playback_rate = 1.0
        self.video_id = ""
        self.video_title = ""
        self._session: Optional[SessionRecord] = None
        self._loop_seek_pending = False
        if session is not None:
            self.load_session(session)

    @property
    def current_seconds(self) -> float:
        return self.played_fraction * self.duration

    @property
    def video_url(self) -> Optional[str]:
        return make_video_url(self.video_id) if self.video_id else None

    @property
    def position_label(self) -> str:
        return f"{format_display(self.current_seconds)} / {format_display(self.duration)}"

    @property
    def loop_labels(self) -> tuple[str, str]:
        return (
            format_loop_boundary(self.loop_range.start),
            format_loop_boundary(self.loop_range.end),
        )

    # Player events

    def on_ready(self, fetch_metadata: Callable[[], PlayerMetadata]) -> bool:
        """Resolve video metadata and reset the loop for the freshly loaded video.

        Returns ``False`` when the metadata could not be read; title and id then
        stay as they were (empty unless a saved session seeded them).
        """
        resolved = True
        try:
            metadata = fetch_metadata()
        except Exception as exc:  # noqa: BLE001 - metadata is best effort
            logger.warning("Could not read video metadata: %s", exc)
            resolved = False
        else:
            self.video_title = metadata.title or ""
            self.video_id = metadata.video_id or ""

        session = self._session
        self.loop_range = LoopRange(
            start=session.loop_start if session else 0.0,
            end=session.loop_end if session else 0.0,
            enabled=False,
        )
        self.set_playback_rate(session.playback_rate if session else 1.0)
        return resolved

    def on_duration(self, seconds: float) -> None:
        self.duration = _seconds(seconds)

    def on_play(self) -> None:
        self.is_playing = True

    def on_pause(self) -> None:
        self.is_playing = False

    def on_external_progress(
        self, played_fraction: float, played_seconds: float
    ) -> Optional[SeekInstruction]:
        if self.is_seeking:
            return None

        self.played_fraction = _unit(played_fraction)
        loop = self.loop_range
        if loop.enabled and played_seconds >= loop.end:
            notify = not (self.suppress_repeat_loop_seeks and self._loop_seek_pending)
            self._loop_seek_pending = True
            return self._emit(loop.start, forced=True, notify=notify)

        self._loop_seek_pending = False
        return None

    # User actions

    def toggle_play(self) -> bool:
        self.is_playing = not self.is_playing
        return self.is_playing

    def begin_seek(self, fraction: float) -> None:
        # Dragging the playhead always cancels looping.
        self.is_seeking = True
        self.loop_range.enabled = False
        self.played_fraction = _unit(fraction)

    def commit_seek(self) -> SeekInstruction:
        self.is_seeking = False
        return self._emit(self.current_seconds)

    def set_loop_boundary_to_current(self, which: Boundary) -> LoopRange:
        current = self.current_seconds
        loop = self.loop_range
        if which == "start":
            loop.start = current
            if loop.end <= current:
                loop.end = self.duration
        elif which == "end":
            loop.end = current
            if loop.start >= current:
                loop.start = 0.0
        else:
            raise ValueError(f"Unknown loop boundary: {which!r}")
        loop.enabled = True
        return loop

    def set_loop_boundary_from_text(self, which: Boundary, text: str) -> bool:
        """Set a boundary from typed ``m:ss[.mmm]`` text; keeps the old value on bad input."""
        if which not in ("start", "end"):
            raise ValueError(f"Unknown loop boundary: {which!r}")
        seconds = parse_loop_boundary(text)
        if seconds is None:
            return False
        setattr(self.loop_range, which, seconds)
        return True

    def toggle_loop(self) -> bool:
        loop = self.loop_range
        if not loop.enabled and loop.is_unset:
            loop.start = self.current_seconds
            loop.end = self.duration
        loop.enabled = not loop.enabled
        return loop.enabled

    def jump(self, delta_seconds: float) -> SeekInstruction:
        target = min(max(self.current_seconds + delta_seconds, 0.0), self.duration)
        self.played_fraction = self._fraction_of(target)
        return self._emit(target)

    def jump_back(self) -> SeekInstruction:
        return self.jump(-JUMP_STEP_SECONDS)

    def jump_forward(self) -> SeekInstruction:
        return self.jump(JUMP_STEP_SECONDS)

    def seek_to_text(self, text: str) -> Optional[SeekInstruction]:
        seconds = parse_loop_boundary(text)
        if seconds is None or seconds > self.duration:
            return None
        self.played_fraction = self._fraction_of(seconds)
        return self._emit(seconds)

    def set_playback_rate(self, rate: float) -> bool:
        if not math.isfinite(rate) or rate <= 0:
            logger.warning("Ignoring invalid playback rate %r", rate)
            return False
        self.playback_rate = float(rate)
        if self.player is not None:
            self.player.set_playback_rate(self.playback_rate)
        return True

    def loop_overlay(self) -> tuple[float, float]:
        """Loop band as ``(left, right)`` fractions of the progress bar."""
        if self.duration <= 0:
            return 0.0, 0.0
        return (
            self._fraction_of(self.loop_range.start),
            self._fraction_of(self.loop_range.end),
        )

    # Sessions

    def load_session(self, session: SessionRecord) -> None:
        self._session = session
        self.video_id = session.video_id
        self.video_title = session.video_title
        self.loop_range = LoopRange(start=session.loop_start, end=session.loop_end, enabled=False)
        self.set_playback_rate(session.playback_rate)

    def build_session(self, note: str, timestamp: Optional[int] = None) -> SessionRecord:
        """Snapshot the current loop, rate and note as an unsaved session."""
        if not self.video_id:
            raise ValueError("No video is loaded")
        note = (note or "").strip()
        if not note:
            raise ValueError("A note is required to save a session")
        loop = self.loop_range
        if not loop.is_unset and loop.start >= loop.end:
            raise ValueError("Loop start must be before loop end")

        return SessionRecord(
            timestamp=timestamp if timestamp is not None else now_ms(),
            video_id=self.video_id,
            video_title=self.video_title,
            loop_start=loop.start,
            loop_end=loop.end,
            playback_rate=self.playback_rate,
            note=note,
        )

    def _fraction_of(self, seconds: float) -> float:
        if self.duration <= 0:
            return 0.0
        return _unit(seconds / self.duration)

    def _emit(self, seconds: float, *, forced: bool = False, notify: bool = True) -> SeekInstruction:
        instruction = SeekInstruction(seconds=seconds, forced=forced)
        if notify and self.player is not None:
            self.player.seek_to(seconds)
        return instruction
