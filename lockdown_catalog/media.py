from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mutagen import File as MutagenFile
from mutagen import MutagenError

from .config import MediaSettings
from .models import CatalogError, Season

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AudioInfo:
    """Technical details of one audio file."""

    format: str
    channels: Optional[int]
    sample_rate: Optional[int]
    bit_depth: Optional[int]
    duration: float

    @classmethod
    def read(cls, path: Path) -> "AudioInfo":
        if not path.exists():
            raise CatalogError(f"Path {path} does not exist")
        try:
            audio = MutagenFile(path)
        except MutagenError as exc:
            raise CatalogError(f"{path}: cannot read audio ({exc})") from exc
        if audio is None or audio.info is None:
            raise CatalogError(f"{path}: unrecognised audio format")
        info = audio.info
        return cls(
            format=type(audio).__name__,
            channels=getattr(info, "channels", None),
            sample_rate=getattr(info, "sample_rate", None),
            bit_depth=getattr(info, "bits_per_sample", None),
            duration=float(getattr(info, "length", 0.0) or 0.0),
        )

    def duration_label(self) -> str:
        seconds = int(round(self.duration))
        if seconds <= 59:
            return f"{seconds}s"
        minutes, seconds = divmod(seconds, 60)
        return f"{minutes}m {seconds}s"

    def describe(self) -> str:
        parts = [self.format]
        if self.channels:
            parts.append(f"{self.channels}ch")
        if self.sample_rate:
            parts.append(f"{self.sample_rate}Hz")
        if self.bit_depth:
            parts.append(f"{self.bit_depth}bit")
        parts.append(self.duration_label())
        return ", ".join(parts)


@dataclass(slots=True)
class ConversionSummary:
    converted: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def ok(self) -> bool:
        return self.failed == 0


def partial_path(dst: Path) -> Path:
    return dst.with_name(f".{dst.stem}.partial{dst.suffix}")


def convert_to_vorbis(src: Path, dst: Path, settings: MediaSettings) -> None:
    """Encode ``src`` into ``dst``; ``dst`` only appears once ffmpeg succeeded."""
    if not src.exists():
        raise CatalogError(f"Source file {src} does not exist")
    dst.parent.mkdir(parents=True, exist_ok=True)
    partial = partial_path(dst)
    command = [
        settings.ffmpeg,
        "-y",
        "-i",
        str(src),
        "-c:a",
        "libvorbis",
        "-q:a",
        str(settings.vorbis_quality),
        str(partial),
        "-loglevel",
        "error",
    ]
    logger.debug("Running %s", " ".join(command))
    try:
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                timeout=settings.timeout_seconds,
            )
        except FileNotFoundError as exc:
            raise CatalogError(f"ffmpeg executable not found: {settings.ffmpeg}") from exc
        except subprocess.TimeoutExpired as exc:
            raise CatalogError(f"ffmpeg timed out converting {src}") from exc
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise CatalogError(f"ffmpeg returned {result.returncode} for {src}: {stderr[:200]}")
        if not partial.exists():
            raise CatalogError(f"ffmpeg produced no output for {src}")
        partial.replace(dst)
    finally:
        partial.unlink(missing_ok=True)


def convert_all(season: Season, settings: MediaSettings) -> ConversionSummary:
    summary = ConversionSummary()
    for recording in season.recordings:
        pairs = [(recording.stereo_mix.flac_ondisk(), recording.stereo_mix.ogg_ondisk())]
        pairs.extend((track.flac_ondisk(), track.ogg_ondisk()) for track in recording.tracks)
        for src, dst in pairs:
            if dst.exists():
                summary.skipped += 1
                continue
            logger.info("Converting %s -> %s", src, dst.name)
            try:
                convert_to_vorbis(src, dst, settings)
            except CatalogError as exc:
                logger.error("%s", exc)
                summary.failed += 1
                continue
            summary.converted += 1
    return summary
