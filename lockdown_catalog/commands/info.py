from __future__ import annotations

from pathlib import Path
from typing import List

from ..media import AudioInfo
from ..models import Season
from ..youtube import format_timestamp


def render_file(path: Path) -> str:
    return f"{path}: {AudioInfo.read(path).describe()}"


def render_season(season: Season) -> List[str]:
    lines = [f"Season {season.title}"]
    for recording in season.recordings:
        header = f"  {recording.title}"
        if recording.recorded_date:
            header += f" [{recording.recorded_date}]"
        if recording.bpm is not None:
            header += f" {recording.bpm:g} BPM"
        lines.append(header)
        link = recording.youtube
        if link is not None:
            if link.timestamp is not None:
                lines.append(f"    youtube: {link.url} (from {format_timestamp(link.timestamp)})")
            else:
                lines.append(f"    youtube: {link.url}")
        if recording.tags:
            lines.append(f"    tags: {', '.join(recording.tags)}")
        mix = recording.stereo_mix
        lines.append(f"    stereo mix: flac {mix.flac_size()}, ogg {mix.ogg_size()}")
        for track in recording.tracks:
            lines.append(
                f"    {track.id:>3} {track.display_name()} "
                f"(flac {track.flac_size()}, ogg {track.ogg_size()})"
            )
            notes = track.patch_notes_text()
            if notes:
                lines.append(f"        {notes}")
    return lines
