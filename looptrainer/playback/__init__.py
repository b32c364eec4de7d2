"""Playback loop and seek control for the practice player."""

from .controller import (
    JUMP_STEP_SECONDS,
    PLAYBACK_RATES,
    LoopController,
    LoopRange,
    SeekInstruction,
)
from .player import Player, PlayerMetadata, extract_video_id, make_video_url
from .timefmt import format_display, format_loop_boundary, parse_loop_boundary

__all__ = [
    "JUMP_STEP_SECONDS",
    "PLAYBACK_RATES",
    "LoopController",
    "LoopRange",
    "Player",
    "PlayerMetadata",
    "SeekInstruction",
    "extract_video_id",
    "format_display",
    "format_loop_boundary",
    "make_video_url",
    "parse_loop_boundary",
]
