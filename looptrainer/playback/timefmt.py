"""Conversions between seconds and the ``m:ss`` / ``m:ss.mmm`` strings shown in the UI."""

from __future__ import annotations

import math
import re
from typing import Optional

_BOUNDARY_PATTERN = re.compile(r"([0-9]+):([0-9]{1,2})(?:\.([0-9]{3}))?")


def _non_negative(seconds: float) -> float:
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def format_display(seconds: float) -> str:
    """Render ``seconds`` as ``m:ss``; minutes are unbounded."""
    minutes, secs = divmod(int(_non_negative(seconds)), 60)
    return f"{minutes}:{secs:02d}"


def format_loop_boundary(seconds: float) -> str:
    """Render ``seconds`` as ``m:ss.mmm``, truncating below the millisecond."""
    # Rounding at 1e-6 ms keeps 0.3 from rendering as 0:00.299.
    total_ms = math.floor(round(_non_negative(seconds) * 1000, 6))
    minutes, remainder = divmod(total_ms, 60_000)
    secs, millis = divmod(remainder, 1000)
    return f"{minutes}:{secs:02d}.{millis:03d}"


def parse_loop_boundary(text: str) -> Optional[float]:
    """Parse ``m:ss`` or ``m:ss.mmm`` into seconds.

    Returns ``None`` for anything else, so that a malformed entry can be told
    apart from a legitimate ``0:00``.
    """
    if not isinstance(text, str):
        return None
    match = _BOUNDARY_PATTERN.fullmatch(text.strip())
    if match is None:
        return None

    minutes, secs, fraction = match.groups()
    value = float(int(minutes) * 60 + int(secs))
    if fraction:
        value += int(fraction) / 1000
    return value
