from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .youtube import YoutubeLink


class CatalogError(Exception):
    """Raised when the catalog cannot be loaded or an operation on it fails."""


class SchemaValidationError(CatalogError):
    def __init__(self, path: Path | str, messages: List[str]) -> None:
        self.path = Path(path)
        self.messages = list(messages)
        joined = "; ".join(self.messages) or "invalid document"
        super().__init__(f"{self.path}: schema validation failed: {joined}")


def file_size_label(path: Path) -> str:
    try:
        size = path.stat().st_size
    except OSError:
        return "unknown"
    return f"{size // 1024 // 1024}MB"


@dataclass(slots=True)
class AudioPair:
    flac: str
    vorbis: str
    duration: Optional[float] = field(default=None, compare=False)
    ondisk_root: Path = field(default=Path("."), repr=False, compare=False)

    def flac_ondisk(self) -> Path:
        return self.ondisk_root / self.flac

    def ogg_ondisk(self) -> Path:
        return self.ondisk_root / self.vorbis

    def flac_size(self) -> str:
        return file_size_label(self.flac_ondisk())

    def ogg_size(self) -> str:
        return file_size_label(self.ogg_ondisk())


@dataclass(slots=True)
class Track:
    id: int
    flac: str
    vorbis: str
    name: Optional[str] = None
    patch_notes: Optional[str] = None
    ondisk_root: Path = field(default=Path("."), repr=False, compare=False)

    def flac_ondisk(self) -> Path:
        return self.ondisk_root / self.flac

    def ogg_ondisk(self) -> Path:
        return self.ondisk_root / self.vorbis

    def flac_size(self) -> str:
        return file_size_label(self.flac_ondisk())

    def ogg_size(self) -> str:
        return file_size_label(self.ogg_ondisk())

    def patch_notes_text(self) -> str:
        return self.patch_notes or ""

    def display_name(self) -> str:
        return self.name or f"Track {self.id}"

    def to_record(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "flac": self.flac,
            "vorbis": self.vorbis,
            "patch_notes": self.patch_notes,
        }


@dataclass(slots=True)
class Recording:
    title: str
    data_folder: str
    stereo_mix: AudioPair
    recorded_date: Optional[str] = None
    torrent: Optional[str] = None
    youtube: Optional[YoutubeLink] = None
    bpm: Optional[float] = None
    tags: List[str] = field(default_factory=list)
    tracks: List[Track] = field(default_factory=list)
    ondisk_root: Path = field(default=Path("."), repr=False, compare=False)

    def has_tag(self, tag: str) -> bool:
        wanted = tag.strip().casefold()
        return any(existing.casefold() == wanted for existing in self.tags)

    def torrent_ondisk(self) -> Optional[Path]:
        if not self.torrent:
            return None
        return self.ondisk_root / self.torrent

    def to_record(self) -> Dict[str, object]:
        return {
            "title": self.title,
            "data_folder": self.data_folder,
            "stereo_mix": {
                "flac": self.stereo_mix.flac,
                "vorbis": self.stereo_mix.vorbis,
                "duration": self.stereo_mix.duration,
            },
            "recorded_date": self.recorded_date,
            "torrent": self.torrent,
            "youtube": self.youtube.url if self.youtube else None,
            "bpm": self.bpm,
            "tags": list(self.tags),
            "tracks": [track.to_record() for track in self.tracks],
        }


@dataclass(slots=True)
class Season:
    title: str
    recordings: List[Recording] = field(default_factory=list)

    def all_tags(self) -> List[str]:
        return list(self.tag_counts())

    def tag_counts(self) -> Dict[str, int]:
        # Tags differing only in case are one tag, shown as first spelled.
        labels: Dict[str, str] = {}
        counts: Dict[str, int] = {}
        for recording in self.recordings:
            for tag in recording.tags:
                key = tag.casefold()
                labels.setdefault(key, tag)
                counts[key] = counts.get(key, 0) + 1
        return {labels[key]: counts[key] for key in sorted(counts)}

    def recordings_with_tag(self, tag: str) -> List[Recording]:
        return [recording for recording in self.recordings if recording.has_tag(tag)]

    def to_record(self) -> Dict[str, object]:
        return {
            "title": self.title,
            "recordings": [recording.to_record() for recording in self.recordings],
        }

    @classmethod
    def from_record(cls, payload: Dict[str, Any], data_root: Optional[Path] = None) -> "Season":
        """Rebuild a season from ``to_record`` output, re-validating every recording."""
        from .schema import SnapshotDocument

        return SnapshotDocument.parse_payload(payload).to_season(data_root or Path("."))
