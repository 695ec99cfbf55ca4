from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlparse

WATCH_HOSTS = {"youtube.com", "www.youtube.com", "m.youtube.com", "music.youtube.com"}
SHORT_HOSTS = {"youtu.be", "www.youtu.be"}

_VIDEO_ID = re.compile(r"^[A-Za-z0-9_-]{6,}$")
_TIMESTAMP = re.compile(r"^(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s?)?$")


@dataclass(frozen=True, slots=True)
class YoutubeLink:
    url: str
    video_id: str
    timestamp: Optional[int] = None

    @property
    def is_timestamped(self) -> bool:
        return self.timestamp is not None

    @classmethod
    def parse(cls, url: str) -> "YoutubeLink":
        """Parse a watch, short or live URL. Raises ValueError when it is not a YouTube video link."""
        text = (url or "").strip()
        parsed = urlparse(text)
        if parsed.scheme not in {"http", "https"}:
            raise ValueError(f"not an http(s) URL: {url!r}")
        host = (parsed.hostname or "").lower()
        query = parse_qs(parsed.query)
        if host in SHORT_HOSTS:
            video_id = parsed.path.strip("/")
        elif host in WATCH_HOSTS:
            if parsed.path == "/watch":
                video_id = (query.get("v") or [""])[0]
            elif parsed.path.startswith("/live/"):
                video_id = parsed.path[len("/live/"):].strip("/")
            else:
                raise ValueError(f"unsupported YouTube path: {parsed.path!r}")
        else:
            raise ValueError(f"not a YouTube host: {host or url!r}")
        if not _VIDEO_ID.match(video_id):
            raise ValueError(f"invalid YouTube video id: {video_id!r}")

        raw_time = (query.get("t") or query.get("start") or [None])[0]
        if raw_time is None and parsed.fragment.startswith("t="):
            raw_time = parsed.fragment[2:]
        timestamp = parse_timestamp(raw_time) if raw_time is not None else None
        return cls(url=text, video_id=video_id, timestamp=timestamp)


def parse_timestamp(value: str) -> int:
    """Convert ``90``, ``90s``, ``1m30s`` or ``1h2m3s`` into seconds."""
    cleaned = value.strip().lower()
    match = _TIMESTAMP.match(cleaned)
    if not cleaned or not match:
        raise ValueError(f"invalid timestamp: {value!r}")
    hours, minutes, seconds = (int(part) if part else 0 for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def format_timestamp(seconds: int) -> str:
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
