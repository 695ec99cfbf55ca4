from __future__ import annotations

from typing import List, Optional

from ..models import Season


def render(season: Season, tag: Optional[str] = None) -> List[str]:
    if tag is None:
        counts = season.tag_counts()
        if not counts:
            return [f"Season {season.title} has no tags yet"]
        width = max(len(name) for name in counts)
        return [f"{name.ljust(width)}  {count}" for name, count in counts.items()]
    matches = season.recordings_with_tag(tag)
    if not matches:
        return [f"No recordings tagged {tag!r}"]
    return [f"{recording.title} ({recording.data_folder})" for recording in matches]


def run(season: Season, tag: Optional[str] = None) -> None:
    for line in render(season, tag):
        print(line)
