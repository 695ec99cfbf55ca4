from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from .commands import export as cmd_export
from .commands import info as cmd_info
from .commands import tags as cmd_tags
from .commands import todo as cmd_todo
from .commands import validate as cmd_validate
from .config import Settings, load_settings
from .loader import load_season, load_snapshot
from .media import convert_all
from .models import CatalogError, Season

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ShortPathFormatter(logging.Formatter):
    def __init__(self, fmt: str, roots: list[Path]) -> None:
        super().__init__(fmt)
        self.roots = [str(root) for root in roots if root]

    def _shorten(self, message: str) -> str:
        for root in self.roots:
            if not message:
                break
            message = message.replace(f"{root}/", "")
        return message

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        return self._shorten(message)


class ColorFormatter(ShortPathFormatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


class WarningBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lockdown-catalog",
        description="Validate and curate the Modular Lockdown metadata catalog",
    )
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")
    parser.add_argument("-i", "--input", type=Path, help="Path to season.json")
    parser.add_argument(
        "-d",
        "--data",
        type=Path,
        help="Path to data directory (holds every recording's data_folder)",
    )
    parser.add_argument(
        "-m",
        "--metadata",
        type=Path,
        help="Read the catalog from a metadata snapshot instead of season.json",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser(
        "validate",
        help="Validate the JSON files and check every referenced audio file exists",
    )
    todo_parser = subparsers.add_parser(
        "todo", help="List tags, BPM, links, track names and patch notes still missing"
    )
    todo_parser.add_argument(
        "--json", action="store_true", help="Emit machine-readable JSON to stdout"
    )
    tags_parser = subparsers.add_parser("tags", help="Show the tag index")
    tags_parser.add_argument("tag", nargs="?", help="List recordings carrying this tag")
    subparsers.add_parser("convert", help="Convert flacs to ogg, if necessary")
    export_parser = subparsers.add_parser(
        "export", help="Write a metadata snapshot of the whole season"
    )
    export_parser.add_argument("--out", type=Path, required=True, help="Snapshot path")
    playlist_parser = subparsers.add_parser(
        "playlist", help="Write an M3U playlist of the stereo mixes"
    )
    playlist_parser.add_argument("--out", type=Path, default=Path("playlist.m3u"))
    schema_parser = subparsers.add_parser(
        "schema", help="Write JSON Schema files for editor validation"
    )
    schema_parser.add_argument("--out", type=Path, default=Path("."))
    info_parser = subparsers.add_parser(
        "info", help="Describe an audio file, or summarise the season"
    )
    info_parser.add_argument("file", type=Path, nargs="?")
    return parser


def configure_logging(level_name: str, roots: list[Path]) -> WarningBufferHandler:
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    color_handler = logging.StreamHandler()
    color_handler.setFormatter(ColorFormatter(LOG_FORMAT, roots))
    root_logger.addHandler(color_handler)

    warn_buffer = WarningBufferHandler()
    warn_buffer.setFormatter(ShortPathFormatter(LOG_FORMAT, roots))
    root_logger.addHandler(warn_buffer)
    return warn_buffer


def resolve_season(
    args: argparse.Namespace, settings: Settings, *, needs_data: bool
) -> Season:
    data_root: Optional[Path] = args.data or settings.catalog.data_root
    if needs_data:
        season_path = args.input or settings.catalog.season
        if season_path is None:
            raise CatalogError("Missing --input argument")
        if data_root is None:
            raise CatalogError("Missing --data argument")
        return load_season(season_path, data_root)
    if args.input is not None:
        return load_season(args.input, data_root or args.input.parent)
    if args.metadata is not None:
        return load_snapshot(args.metadata, data_root)
    if settings.catalog.season is not None:
        season_path = settings.catalog.season
        return load_season(season_path, data_root or season_path.parent)
    raise CatalogError("Missing --input or --metadata argument")


def dispatch(args: argparse.Namespace, settings: Settings) -> int:
    match args.command:
        case "validate":
            season = resolve_season(args, settings, needs_data=True)
            report = cmd_validate.run(season)
            for line in report.checks:
                print(line)
            print()
            print(report.summary())
            return 0 if report.ok else 1
        case "convert":
            season = resolve_season(args, settings, needs_data=True)
            summary = convert_all(season, settings.media)
            print(
                f"Converted: {summary.converted}, skipped (exists): {summary.skipped}, "
                f"failed: {summary.failed}"
            )
            return 0 if summary.ok else 1
        case "todo":
            season = resolve_season(args, settings, needs_data=False)
            cmd_todo.run(season, json_output=getattr(args, "json", False))
            return 0
        case "tags":
            season = resolve_season(args, settings, needs_data=False)
            cmd_tags.run(season, getattr(args, "tag", None))
            return 0
        case "export":
            season = resolve_season(args, settings, needs_data=False)
            path = cmd_export.export_snapshot(season, args.out)
            print(f"Wrote metadata snapshot to {path}")
            return 0
        case "playlist":
            season = resolve_season(args, settings, needs_data=False)
            path = cmd_export.write_playlist(season, settings.playlist, args.out)
            print(f"Wrote playlist to {path}")
            return 0
        case "schema":
            for path in cmd_export.export_schemas(args.out):
                print(f"Wrote {path}")
            return 0
        case "info":
            if args.file is not None:
                print(cmd_info.render_file(args.file))
                return 0
            season = resolve_season(args, settings, needs_data=False)
            for line in cmd_info.render_season(season):
                print(line)
            return 0
    raise CatalogError(f"Unknown command {args.command}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings(args.config)
    except FileNotFoundError as exc:
        parser.error(str(exc))
    except (yaml.YAMLError, ValidationError) as exc:
        parser.error(f"Invalid config file: {exc}")

    roots = [path.resolve() for path in (args.data, settings.catalog.data_root) if path]
    warn_buffer = configure_logging(args.log_level, roots)
    try:
        return dispatch(args, settings)
    except CatalogError as exc:
        logging.getLogger(__name__).error("%s", exc)
        return 1
    finally:
        if warn_buffer.records:
            print("\n\033[33mWarnings/Errors summary:\033[0m")
            for line in warn_buffer.records:
                print(f" - {line}")


if __name__ == "__main__":
    raise SystemExit(main())
