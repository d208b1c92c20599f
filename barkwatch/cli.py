"""Command-line entry points: ``record``, ``view`` and ``scan``."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Optional, Sequence

from .audio.recorder import BarkListener, DeviceError, StorageError
from .audio.types import AudioEvent
from .config import BarkSettings, get_settings
from .services.logger import LogBuffer
from .store.catalog import RecordingCatalog

EXIT_DEVICE_ERROR = 2
EXIT_STORAGE_ERROR = 3

LOGGER = logging.getLogger("barkwatch.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="barkwatch", description="Record barks and browse them on a timeline.")
    parser.add_argument("--barks-dir", type=Path, help="Directory holding bark_*.wav files.")
    parser.add_argument("--log-level", help="Python logging level (default: INFO).")
    sub = parser.add_subparsers(dest="command", required=True)

    record = sub.add_parser("record", help="Listen to the input device and store one file per bark.")
    record.add_argument("--threshold", type=float, help="Peak amplitude on [0, 1) that starts a bark.")
    record.add_argument("--silence-timeout", type=float, help="Seconds of quiet that end a bark.")
    record.add_argument("--device", help="Input device index or name.")
    record.add_argument("--channels", type=int, help="Channel count (default: device default, max 2).")
    record.add_argument("--duration", type=float, help="Stop after this many seconds.")

    sub.add_parser("view", help="Open the interactive timeline viewer.")
    sub.add_parser("scan", help="Print the reconstructed bark history.")
    return parser


def resolve_settings(args: argparse.Namespace, base: BarkSettings | None = None) -> BarkSettings:
    base = base or get_settings()
    overrides = {}
    if args.barks_dir is not None:
        overrides["barks_dir"] = str(args.barks_dir)
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    if getattr(args, "threshold", None) is not None:
        overrides["amplitude_threshold"] = args.threshold
    if getattr(args, "silence_timeout", None) is not None:
        overrides["silence_timeout_sec"] = args.silence_timeout
    device = getattr(args, "device", None)
    if device is not None:
        overrides["input_device"] = int(device) if device.isdigit() else device
    if getattr(args, "channels", None) is not None:
        overrides["channels"] = args.channels
    if getattr(args, "duration", None) is not None:
        overrides["run_seconds"] = args.duration
    if not overrides:
        return base
    return BarkSettings.model_validate({**base.model_dump(), **overrides})


def format_event(event: AudioEvent) -> str:
    summary = event.loudness_summary
    stats = "-" if summary is None else " ".join(f"{value:.3f}" for value in summary.as_tuple())
    return f"{event.timestamp.strftime('%Y-%m-%d %I:%M:%S %p')}  {event.duration:7.2f}s  {stats}  {event.storage_path.name}"


def run_record(settings: BarkSettings) -> int:
    logger = LogBuffer(settings.log_history)
    listener = BarkListener(settings, logger)
    signal.signal(signal.SIGINT, lambda *_: listener.stop())
    signal.signal(signal.SIGTERM, lambda *_: listener.stop())
    try:
        listener.run(settings.run_seconds)
    except DeviceError as exc:
        LOGGER.critical("Audio device unavailable (device=%r): %s", settings.input_device, exc)
        return EXIT_DEVICE_ERROR
    except StorageError as exc:
        cause = exc.__cause__ or exc
        LOGGER.critical("Cannot store barks under %s: %s", Path(settings.barks_dir).resolve(), cause)
        return EXIT_STORAGE_ERROR
    logger.add("Recorder stopped")
    return 0


def run_scan(settings: BarkSettings) -> int:
    events = RecordingCatalog(Path(settings.barks_dir)).scan()
    for event in events:
        print(format_event(event))
    print(f"{len(events)} bark(s)")
    return 0


def run_view(settings: BarkSettings) -> int:
    from .app import BarkViewerApp

    BarkViewerApp(settings=settings).run()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = resolve_settings(args)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "record":
        return run_record(settings)
    if args.command == "scan":
        return run_scan(settings)
    return run_view(settings)


if __name__ == "__main__":
    sys.exit(main())
