import json
import tempfile
import unittest
from pathlib import Path

from lockdown_catalog.loader import (
    load_recording,
    load_season,
    load_snapshot,
    read_document,
    write_snapshot,
)
from lockdown_catalog.models import CatalogError, SchemaValidationError


def _write(path: Path, payload) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _recording_payload(folder: str, **overrides):
    payload = {
        "title": f"Recording {folder}",
        "data_folder": folder,
        "stereo_mix": {"flac": "mix.flac", "vorbis": "mix.ogg"},
        "tags": ["drone"],
        "tracks": [{"id": 1, "name": "Kick", "flac": "01.flac", "vorbis": "01.ogg"}],
    }
    payload.update(overrides)
    return payload


class TestLoader(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.meta = self.tmp / "metadata"
        self.data = self.tmp / "data"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_load_season_resolves_recordings_relative_to_season(self) -> None:
        _write(self.meta / "recordings" / "ml01.json", _recording_payload("ml01", bpm=118.5))
        _write(self.meta / "recordings" / "ml02.json", _recording_payload("ml02", tags=["acid", "drone"]))
        season_path = _write(
            self.meta / "season.json",
            {"title": "Season One", "recordings": ["recordings/ml01.json", "recordings/ml02.json"]},
        )

        season = load_season(season_path, self.data)

        self.assertEqual(season.title, "Season One")
        self.assertEqual([r.data_folder for r in season.recordings], ["ml01", "ml02"])
        self.assertEqual(season.recordings[0].bpm, 118.5)
        self.assertEqual(season.recordings[1].tracks[0].ogg_ondisk(), self.data / "ml02" / "01.ogg")
        self.assertEqual(season.all_tags(), ["acid", "drone"])

    def test_duplicate_data_folders_rejected(self) -> None:
        _write(self.meta / "a.json", _recording_payload("same"))
        _write(self.meta / "b.json", _recording_payload("same", title="Other"))
        season_path = _write(self.meta / "season.json", {"title": "S", "recordings": ["a.json", "b.json"]})
        with self.assertRaises(SchemaValidationError) as ctx:
            load_season(season_path, self.data)
        self.assertIn("data_folder 'same'", str(ctx.exception))

    def test_schema_error_names_file_and_field(self) -> None:
        path = _write(self.meta / "bad.json", _recording_payload("ml01", bpm=-1))
        with self.assertRaises(SchemaValidationError) as ctx:
            load_recording(path, self.data)
        self.assertEqual(ctx.exception.path, path)
        self.assertTrue(any(message.startswith("bpm:") for message in ctx.exception.messages))

    def test_missing_recording_file(self) -> None:
        season_path = _write(self.meta / "season.json", {"title": "S", "recordings": ["missing.json"]})
        with self.assertRaises(CatalogError) as ctx:
            load_season(season_path, self.data)
        self.assertIn("file not found", str(ctx.exception))

    def test_malformed_json(self) -> None:
        path = self.meta / "broken.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(CatalogError) as ctx:
            read_document(path)
        self.assertIn("invalid JSON", str(ctx.exception))

    def test_non_utf8_file(self) -> None:
        path = self.meta / "latin1.json"
        path.parent.mkdir(parents=True)
        path.write_bytes(b'{"title": "Caf\xe9 \xff\xfe"}')
        with self.assertRaises(CatalogError) as ctx:
            read_document(path)
        self.assertIn("not valid UTF-8", str(ctx.exception))
        self.assertIn(str(path), str(ctx.exception))

    def test_top_level_must_be_object(self) -> None:
        path = _write(self.meta / "list.json", [1, 2])
        with self.assertRaises(SchemaValidationError):
            read_document(path)

    def test_missing_local_schema_only_warns(self) -> None:
        payload = _recording_payload("ml01")
        payload["$schema"] = "./recording.schema.json"
        path = _write(self.meta / "ml01.json", payload)
        with self.assertLogs("lockdown_catalog.loader", level="WARNING") as logs:
            recording = load_recording(path, self.data)
        self.assertEqual(recording.title, "Recording ml01")
        self.assertIn("missing schema", "\n".join(logs.output))

    def test_snapshot_round_trip(self) -> None:
        _write(
            self.meta / "ml01.json",
            _recording_payload("ml01", bpm=90, youtube="https://youtu.be/abcdef12345?t=60"),
        )
        season_path = _write(self.meta / "season.json", {"title": "S", "recordings": ["ml01.json"]})
        season = load_season(season_path, self.data)

        snapshot = write_snapshot(season, self.tmp / "out" / "snapshot.json")
        restored = load_snapshot(snapshot, self.data)

        self.assertEqual(restored, season)
        self.assertEqual(restored.recordings[0].youtube.timestamp, 60)

    def test_snapshot_keeps_stereo_mix_duration(self) -> None:
        payload = _recording_payload("ml01")
        payload["stereo_mix"]["duration"] = 3599.6
        _write(self.meta / "ml01.json", payload)
        season_path = _write(self.meta / "season.json", {"title": "S", "recordings": ["ml01.json"]})

        snapshot = write_snapshot(load_season(season_path, self.data), self.tmp / "snapshot.json")
        record = json.loads(snapshot.read_text(encoding="utf-8"))
        restored = load_snapshot(snapshot)

        self.assertEqual(record["recordings"][0]["stereo_mix"]["duration"], 3599.6)
        self.assertEqual(restored.recordings[0].stereo_mix.duration, 3599.6)


if __name__ == "__main__":
    unittest.main()
