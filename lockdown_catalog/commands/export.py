from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ..config import PlaylistSettings
from ..loader import write_snapshot
from ..media import AudioInfo
from ..models import CatalogError, Recording, Season
from ..schema import write_json_schemas

logger = logging.getLogger(__name__)

UNKNOWN_DURATION = -1


def _url_part(value: str) -> str:
    return value.replace(" ", "%20")


def recording_url(recording: Recording, settings: PlaylistSettings) -> str:
    return "/".join(
        [
            settings.base_url,
            _url_part(recording.data_folder),
            _url_part(recording.stereo_mix.vorbis),
        ]
    )


def measure_stereo_mix(recording: Recording) -> Optional[float]:
    try:
        info = AudioInfo.read(recording.stereo_mix.ogg_ondisk())
    except CatalogError as exc:
        logger.warning("No duration for %s: %s", recording.title, exc)
        return None
    return info.duration


def recording_duration(recording: Recording) -> int:
    duration = recording.stereo_mix.duration
    if duration is None:
        duration = measure_stereo_mix(recording)
    if duration is None:
        return UNKNOWN_DURATION
    return int(round(duration))


def playlist_lines(season: Season, settings: PlaylistSettings) -> List[str]:
    lines = ["#EXTM3U"]
    for recording in season.recordings:
        duration = recording_duration(recording)
        lines.append(f"#EXTINF:{duration},{settings.artist} - {recording.title}")
        lines.append(recording_url(recording, settings))
    return lines


def write_playlist(season: Season, settings: PlaylistSettings, out: Path) -> Path:
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text("\n".join(playlist_lines(season, settings)) + "\n", encoding="utf-8")
    logger.info("Wrote playlist with %d entries to %s", len(season.recordings), out)
    return out


def export_snapshot(season: Season, out: Path) -> Path:
    for recording in season.recordings:
        if recording.stereo_mix.duration is None:
            recording.stereo_mix.duration = measure_stereo_mix(recording)
    return write_snapshot(season, out)


def export_schemas(out_dir: Path) -> List[Path]:
    return write_json_schemas(out_dir)
