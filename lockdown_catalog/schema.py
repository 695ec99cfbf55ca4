"""
Document models for the hand-edited catalog JSON files.

Every season and recording file is parsed through these models, so the
catalog invariants (positive BPM, tag sets, unique track ids, well formed
YouTube links) are enforced in one place. The same models generate the JSON
Schema files editors use to validate the catalog while it is being written.
"""
from __future__ import annotations

import json
import logging
import re
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .models import AudioPair, Recording, SchemaValidationError, Season, Track
from .youtube import YoutubeLink

logger = logging.getLogger(__name__)

JSON_SCHEMA_DIALECT = "http://json-schema.org/draft-07/schema#"
SEASON_SCHEMA_FILENAME = "season.schema.json"
RECORDING_SCHEMA_FILENAME = "recording.schema.json"

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validation_messages(exc: ValidationError) -> List[str]:
    messages: List[str] = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
        messages.append(f"{location}: {err.get('msg', 'invalid value')}")
    return messages


def _optional_text(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class AudioPairDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    flac: str = Field(min_length=1, description="Lossless original, relative to the data folder")
    vorbis: str = Field(min_length=1, description="Ogg Vorbis rendition, relative to the data folder")
    duration: Optional[float] = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        strict=True,
        description="Length in seconds, recorded by export",
    )


class TrackDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int = Field(ge=0, le=255, strict=True)
    name: Optional[str] = Field(default=None, description="Short track name, left empty until someone names it")
    flac: str = Field(min_length=1)
    vorbis: str = Field(min_length=1)
    patch_notes: Optional[str] = None

    @field_validator("name", "patch_notes", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        return _optional_text(value)

    def to_track(self, ondisk_root: Path) -> Track:
        return Track(
            id=self.id,
            name=self.name,
            flac=self.flac,
            vorbis=self.vorbis,
            patch_notes=self.patch_notes,
            ondisk_root=ondisk_root,
        )


class RecordingDocument(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    schema_ref: Optional[str] = Field(default=None, alias="$schema")
    title: str = Field(min_length=1)
    data_folder: str = Field(min_length=1)
    stereo_mix: AudioPairDocument
    recorded_date: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    torrent: Optional[str] = None
    youtube: Optional[str] = Field(default=None, description="YouTube link, ideally with a t= timestamp")
    bpm: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False, strict=True)
    tags: List[str] = Field(default_factory=list, description="Free-form tags, no duplicates")
    tracks: List[TrackDocument] = Field(default_factory=list)

    @field_validator("recorded_date", "torrent", "youtube", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        return _optional_text(value)

    @field_validator("recorded_date")
    @classmethod
    def _check_date(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if not _ISO_DATE.match(value):
            raise ValueError(f"expected YYYY-MM-DD, got {value!r}")
        date.fromisoformat(value)
        return value

    @field_validator("youtube")
    @classmethod
    def _check_youtube(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        YoutubeLink.parse(value)
        return value

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, values: List[str]) -> List[str]:
        cleaned: List[str] = []
        seen: set[str] = set()
        for raw in values:
            tag = raw.strip()
            if not tag:
                raise ValueError("tags must not be empty")
            key = tag.casefold()
            if key in seen:
                raise ValueError(f"duplicate tag {tag!r}")
            seen.add(key)
            cleaned.append(tag)
        return cleaned

    @model_validator(mode="after")
    def _check_track_ids(self) -> "RecordingDocument":
        seen: set[int] = set()
        for track in self.tracks:
            if track.id in seen:
                raise ValueError(f"duplicate track id {track.id}")
            seen.add(track.id)
        return self

    def to_recording(self, data_root: Path) -> Recording:
        ondisk_root = data_root / self.data_folder
        return Recording(
            title=self.title,
            data_folder=self.data_folder,
            stereo_mix=AudioPair(
                flac=self.stereo_mix.flac,
                vorbis=self.stereo_mix.vorbis,
                duration=self.stereo_mix.duration,
                ondisk_root=ondisk_root,
            ),
            recorded_date=self.recorded_date,
            torrent=self.torrent,
            youtube=YoutubeLink.parse(self.youtube) if self.youtube else None,
            bpm=self.bpm,
            tags=list(self.tags),
            tracks=[track.to_track(ondisk_root) for track in self.tracks],
            ondisk_root=ondisk_root,
        )


class SeasonDocument(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    schema_ref: Optional[str] = Field(default=None, alias="$schema")
    title: str = Field(min_length=1)
    recordings: List[str] = Field(
        default_factory=list,
        description="Recording JSON files, relative to this file",
    )

    @field_validator("recordings")
    @classmethod
    def _unique_paths(cls, values: List[str]) -> List[str]:
        seen: set[str] = set()
        for value in values:
            if not value.strip():
                raise ValueError("recording path must not be empty")
            if value in seen:
                raise ValueError(f"recording {value!r} listed twice")
            seen.add(value)
        return values


class SnapshotDocument(BaseModel):
    """A whole season with recordings inline, as written by ``export``."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    recordings: List[RecordingDocument] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_folders(self) -> "SnapshotDocument":
        check_unique_folders(self.recordings)
        return self

    @classmethod
    def parse_payload(cls, payload: Any, source: Path | str = "<snapshot>") -> "SnapshotDocument":
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise SchemaValidationError(source, validation_messages(exc)) from exc

    def to_season(self, data_root: Path) -> Season:
        return Season(
            title=self.title,
            recordings=[document.to_recording(data_root) for document in self.recordings],
        )


def check_unique_folders(recordings: List[RecordingDocument]) -> None:
    seen: Dict[str, str] = {}
    for document in recordings:
        if document.data_folder in seen:
            raise ValueError(
                f"data_folder {document.data_folder!r} used by both "
                f"{seen[document.data_folder]!r} and {document.title!r}"
            )
        seen[document.data_folder] = document.title


def _document_schema(model: type[BaseModel], title: str) -> Dict[str, Any]:
    schema = model.model_json_schema(by_alias=True)
    schema["title"] = title
    return {"$schema": JSON_SCHEMA_DIALECT, **schema}


def build_json_schema() -> Dict[str, Dict[str, Any]]:
    return {
        SEASON_SCHEMA_FILENAME: _document_schema(SeasonDocument, "Modular Lockdown season"),
        RECORDING_SCHEMA_FILENAME: _document_schema(RecordingDocument, "Modular Lockdown recording"),
    }


def write_json_schemas(directory: Path) -> List[Path]:
    directory.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for filename, schema in build_json_schema().items():
        target = directory / filename
        target.write_text(json.dumps(schema, indent=2) + "\n", encoding="utf-8")
        logger.info("Wrote %s", target)
        written.append(target)
    return written
