from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict, List

from ..models import Recording, Season

NO_TAGS = "no tags"
NO_BPM = "no BPM"
NO_YOUTUBE = "no YouTube link"
NO_TIMESTAMP = "YouTube link without timestamp"
NO_NAME = "unnamed"
NO_PATCH_NOTES = "no patch notes"


@dataclass(slots=True)
class RecordingTodo:
    title: str
    data_folder: str
    recording: List[str] = field(default_factory=list)
    tracks: Dict[int, List[str]] = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        return not self.recording and not self.tracks

    def count(self) -> int:
        return len(self.recording) + sum(len(items) for items in self.tracks.values())

    def to_record(self) -> Dict[str, object]:
        return {
            "title": self.title,
            "data_folder": self.data_folder,
            "recording": list(self.recording),
            "tracks": {str(track_id): items for track_id, items in self.tracks.items()},
        }


def recording_todo(recording: Recording) -> RecordingTodo:
    todo = RecordingTodo(title=recording.title, data_folder=recording.data_folder)
    if not recording.tags:
        todo.recording.append(NO_TAGS)
    if recording.bpm is None:
        todo.recording.append(NO_BPM)
    if recording.youtube is None:
        todo.recording.append(NO_YOUTUBE)
    elif not recording.youtube.is_timestamped:
        todo.recording.append(NO_TIMESTAMP)
    for track in recording.tracks:
        items: List[str] = []
        if not track.name:
            items.append(NO_NAME)
        if not track.patch_notes:
            items.append(NO_PATCH_NOTES)
        if items:
            todo.tracks[track.id] = items
    return todo


def collect(season: Season) -> List[RecordingTodo]:
    todos = [recording_todo(recording) for recording in season.recordings]
    return [todo for todo in todos if not todo.empty]


def render(season: Season, todos: List[RecordingTodo]) -> List[str]:
    if not todos:
        return [f"Season {season.title}: nothing left to fill in"]
    lines = [f"Season {season.title}: help wanted"]
    for todo in todos:
        lines.append(f"  {todo.title} ({todo.data_folder})")
        if todo.recording:
            lines.append(f"    recording: {', '.join(todo.recording)}")
        for track_id, items in todo.tracks.items():
            lines.append(f"    track {track_id}: {', '.join(items)}")
    total = sum(todo.count() for todo in todos)
    lines.append(f"{total} item(s) across {len(todos)} recording(s)")
    return lines


def run(season: Season, *, json_output: bool = False) -> List[RecordingTodo]:
    todos = collect(season)
    if json_output:
        payload = {"season": season.title, "recordings": [todo.to_record() for todo in todos]}
        print(json.dumps(payload, indent=2))
        return todos
    for line in render(season, todos):
        print(line)
    return todos
