from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..models import Recording, Season

logger = logging.getLogger(__name__)

OK = "OK"
ERROR = "ERROR"
SKIPPED = "SKIPPED"


@dataclass(frozen=True, slots=True)
class FileCheck:
    label: str
    path: Optional[Path]
    depth: int

    @property
    def status(self) -> str:
        if self.path is None:
            return SKIPPED
        return OK if self.path.is_file() else ERROR

    def render(self, status: str) -> str:
        indent = "  " * self.depth
        if status == SKIPPED:
            return f"{indent}{self.label}: {status} (not declared)"
        if status == ERROR:
            return f"{indent}{self.label}: {status} (missing {self.path})"
        return f"{indent}{self.label}: {status}"


@dataclass(slots=True)
class ValidationReport:
    season: str
    errors: int = 0
    checks: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.errors == 0

    def summary(self) -> str:
        if self.errors:
            return f"Found {self.errors} errors, review the logs above"
        return "No errors found"

    def record(self, check: FileCheck) -> None:
        status = check.status
        if status == ERROR:
            self.errors += 1
            logger.debug("Missing file %s", check.path)
        self.checks.append(check.render(status))


def check_recording(report: ValidationReport, recording: Recording) -> None:
    report.checks.append(f"  Recording {recording.title} ({recording.data_folder})")
    report.record(FileCheck("Stereo mix", recording.stereo_mix.ogg_ondisk(), 2))
    report.record(FileCheck("Torrent file", recording.torrent_ondisk(), 2))
    for track in recording.tracks:
        report.checks.append(f"    Track {track.id} {track.name or ''}".rstrip())
        report.record(FileCheck("Flac original", track.flac_ondisk(), 3))
        report.record(FileCheck("Ogg vorbis", track.ogg_ondisk(), 3))


def run(season: Season) -> ValidationReport:
    report = ValidationReport(season=season.title)
    report.checks.append(f"Checking season {season.title}:")
    for recording in season.recordings:
        check_recording(report, recording)
    if report.errors:
        logger.warning("Season %s: %d missing file(s)", season.title, report.errors)
    return report
