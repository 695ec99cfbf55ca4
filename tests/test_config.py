import os
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from lockdown_catalog.config import MediaSettings, Settings, find_config, load_settings


class TestConfig(unittest.TestCase):
    def test_load_yaml(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            path = tmp / "config.yaml"
            path.write_text(
                "catalog:\n"
                f"  season: {tmp}/meta/season.json\n"
                f"  data_root: {tmp}/data\n"
                "media:\n"
                "  vorbis_quality: 4\n"
                "playlist:\n"
                "  base_url: https://example.org/ipns/mm/\n",
                encoding="utf-8",
            )
            settings = Settings.load(path)
        self.assertEqual(settings.catalog.season, (tmp / "meta" / "season.json").resolve())
        self.assertEqual(settings.media.vorbis_quality, 4)
        self.assertEqual(settings.media.ffmpeg, "ffmpeg")
        self.assertEqual(settings.playlist.base_url, "https://example.org/ipns/mm")
        self.assertEqual(settings.playlist.artist, "Colin Bendres")

    def test_empty_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text("", encoding="utf-8")
            settings = Settings.load(path)
        self.assertIsNone(settings.catalog.season)
        self.assertEqual(settings.media.timeout_seconds, 600)

    def test_quality_range(self) -> None:
        with self.assertRaises(ValidationError):
            MediaSettings(vorbis_quality=11)

    def test_find_config_in_cwd(self) -> None:
        cwd = os.getcwd()
        with tempfile.TemporaryDirectory() as tmpdir:
            try:
                os.chdir(tmpdir)
                self.assertIsNone(find_config(None))
                self.assertIsInstance(load_settings(None), Settings)
                Path("config.yml").write_text("media:\n  ffmpeg: /usr/bin/ffmpeg\n", encoding="utf-8")
                self.assertEqual(find_config(None).name, "config.yml")
                self.assertEqual(load_settings(None).media.ffmpeg, "/usr/bin/ffmpeg")
            finally:
                os.chdir(cwd)

    def test_explicit_missing_config(self) -> None:
        with self.assertRaises(FileNotFoundError):
            find_config(Path("/nonexistent/config.yaml"))


if __name__ == "__main__":
    unittest.main()
