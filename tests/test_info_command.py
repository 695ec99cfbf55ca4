import tempfile
import unittest
from pathlib import Path

from lockdown_catalog.commands import info as cmd_info
from lockdown_catalog.models import AudioPair, Recording, Season, Track
from lockdown_catalog.youtube import YoutubeLink


class TestInfoCommand(unittest.TestCase):
    def test_render_season(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            folder = Path(tmpdir) / "ml01"
            folder.mkdir()
            (folder / "mix.ogg").write_bytes(b"x" * 3 * 1024 * 1024)
            recording = Recording(
                title="Lockdown 01",
                data_folder="ml01",
                stereo_mix=AudioPair(flac="mix.flac", vorbis="mix.ogg", ondisk_root=folder),
                recorded_date="2020-04-03",
                youtube=YoutubeLink.parse("https://www.youtube.com/watch?v=abcdef12345&t=90"),
                bpm=118.5,
                tags=["drone"],
                tracks=[Track(id=1, flac="01.flac", vorbis="01.ogg", patch_notes="Mother-32", ondisk_root=folder)],
                ondisk_root=folder,
            )
            lines = cmd_info.render_season(Season(title="S", recordings=[recording]))

        self.assertEqual(lines[0], "Season S")
        self.assertEqual(lines[1], "  Lockdown 01 [2020-04-03] 118.5 BPM")
        self.assertTrue(lines[2].startswith("    youtube: https://www.youtube.com/watch?v=abcdef12345"))
        self.assertTrue(lines[2].endswith("(from 1:30)"))
        self.assertIn("    tags: drone", lines)
        self.assertIn("    stereo mix: flac unknown, ogg 3MB", lines)
        self.assertEqual(lines[-1], "        Mother-32")

    def test_link_without_timestamp(self) -> None:
        recording = Recording(
            title="R",
            data_folder="ml02",
            stereo_mix=AudioPair(flac="mix.flac", vorbis="mix.ogg"),
            youtube=YoutubeLink.parse("https://youtu.be/abcdef12345"),
        )
        lines = cmd_info.render_season(Season(title="S", recordings=[recording]))
        youtube = [line for line in lines if "youtube:" in line]
        self.assertEqual(len(youtube), 1)
        self.assertNotIn("from", youtube[0])


if __name__ == "__main__":
    unittest.main()
