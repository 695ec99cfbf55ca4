from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .models import CatalogError, Recording, SchemaValidationError, Season
from .schema import (
    RecordingDocument,
    SeasonDocument,
    SnapshotDocument,
    check_unique_folders,
    validation_messages,
)

logger = logging.getLogger(__name__)

DocumentT = TypeVar("DocumentT", bound=BaseModel)


def read_document(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except FileNotFoundError as exc:
        raise CatalogError(f"{path}: file not found") from exc
    except UnicodeDecodeError as exc:
        raise CatalogError(f"{path}: not valid UTF-8 ({exc})") from exc
    except json.JSONDecodeError as exc:
        raise CatalogError(f"{path}: invalid JSON ({exc})") from exc
    except OSError as exc:
        raise CatalogError(f"{path}: cannot read ({exc})") from exc
    if not isinstance(payload, dict):
        raise SchemaValidationError(path, ["<root>: expected a JSON object"])
    schema_path = resolve_schema_ref(path, payload)
    if schema_path is not None and not schema_path.exists():
        logger.warning("%s references missing schema %s", path, schema_path)
    return payload


def resolve_schema_ref(path: Path, payload: Dict[str, Any]) -> Optional[Path]:
    ref = payload.get("$schema")
    if not isinstance(ref, str):
        return None
    if ref.startswith("./") or ref.startswith("../"):
        return path.parent / ref
    return None


def parse_document(path: Path, model: Type[DocumentT]) -> DocumentT:
    payload = read_document(path)
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise SchemaValidationError(path, validation_messages(exc)) from exc


def load_recording(path: Path, data_root: Path) -> Recording:
    document = parse_document(path, RecordingDocument)
    logger.debug("Loaded recording %s from %s", document.title, path)
    return document.to_recording(data_root)


def load_season(path: Path, data_root: Path) -> Season:
    document = parse_document(path, SeasonDocument)
    documents: List[RecordingDocument] = []
    for rel_path in document.recordings:
        documents.append(parse_document(path.parent / rel_path, RecordingDocument))
    try:
        check_unique_folders(documents)
    except ValueError as exc:
        raise SchemaValidationError(path, [f"recordings: {exc}"]) from exc
    recordings = [recording.to_recording(data_root) for recording in documents]
    logger.info("Loaded season %s with %d recording(s)", document.title, len(recordings))
    return Season(title=document.title, recordings=recordings)


def load_snapshot(path: Path, data_root: Optional[Path] = None) -> Season:
    payload = read_document(path)
    snapshot = SnapshotDocument.parse_payload(payload, source=path)
    return snapshot.to_season(data_root or Path("."))


def write_snapshot(season: Season, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(season.to_record(), indent=2) + "\n", encoding="utf-8")
    logger.info("Wrote metadata snapshot to %s", path)
    return path
