from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator


class CatalogSettings(BaseModel):
    season: Optional[Path] = None
    data_root: Optional[Path] = None

    @field_validator("season", "data_root", mode="before")
    @classmethod
    def _expand_paths(cls, value: Optional[str | Path]) -> Optional[Path]:
        if value is None:
            return None
        return Path(value).expanduser().resolve()


class MediaSettings(BaseModel):
    ffmpeg: str = "ffmpeg"
    vorbis_quality: int = Field(default=6, ge=0, le=10)
    timeout_seconds: int = Field(default=600, gt=0)


class PlaylistSettings(BaseModel):
    base_url: str = "https://ipfs.io/ipns/mm.em32.net"
    artist: str = "Colin Bendres"

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class Settings(BaseModel):
    catalog: CatalogSettings = CatalogSettings()
    media: MediaSettings = MediaSettings()
    playlist: PlaylistSettings = PlaylistSettings()

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})


def find_config(explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path:
        if not explicit_path.exists():
            raise FileNotFoundError(f"Config file not found: {explicit_path}")
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "config.yaml", cwd / "config.yml"):
        if candidate.exists():
            return candidate
    return None


def load_settings(explicit_path: Optional[Path]) -> Settings:
    config_path = find_config(explicit_path)
    if config_path is None:
        return Settings()
    return Settings.load(config_path)
