"""Types describing the external video player the controller drives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import parse_qs, urlparse

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

_SHORT_HOSTS = {"youtu.be"}
_PATH_PREFIXES = ("/embed/", "/shorts/", "/live/", "/v/")


class Player(Protocol):
    def seek_to(self, seconds: float) -> None:
        ...

    def set_playback_rate(self, rate: float) -> None:
        ...


@dataclass(frozen=True, slots=True)
class PlayerMetadata:
    title: str = ""
    video_id: str = ""


def make_video_url(video_id: str) -> str:
    return WATCH_URL.format(video_id=video_id)


def extract_video_id(url: str) -> Optional[str]:
    """Return the short video id from a watch, share or embed URL."""
    parsed = urlparse(url.strip())
    host = (parsed.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]

    if host in _SHORT_HOSTS:
        candidate = parsed.path.lstrip("/").split("/", 1)[0]
        return candidate or None

    if host == "youtube.com" or host.endswith(".youtube.com"):
        if parsed.path == "/watch":
            values = parse_qs(parsed.query).get("v")
            return values[0] if values and values[0] else None
        for prefix in _PATH_PREFIXES:
            if parsed.path.startswith(prefix):
                candidate = parsed.path[len(prefix):].split("/", 1)[0]
                return candidate or None
    return None
