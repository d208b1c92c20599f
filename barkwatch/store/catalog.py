"""Rebuild the bark history from the files on disk.

The directory is the only source of truth: every scan starts from scratch
and nothing is cached between scans.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List

import numpy as np
import soundfile as sf

from ..audio.codec import CodecError, FilenameTimestampCodec
from ..audio.stats import summarize_amplitude
from ..audio.types import AudioEvent

LOGGER = logging.getLogger("barkwatch.catalog")

_READ_ERRORS = (OSError, RuntimeError, sf.SoundFileError)


class PayloadReadError(Exception):
    pass


def read_duration(path: Path) -> float:
    try:
        info = sf.info(str(path))
    except _READ_ERRORS as exc:
        raise PayloadReadError(f"unreadable header: {exc}") from exc
    if info.samplerate <= 0:
        raise PayloadReadError(f"invalid sample rate {info.samplerate}")
    return info.frames / float(info.samplerate)


def read_samples(path: Path) -> np.ndarray:
    """All samples of every channel as float32 in [-1, 1]."""
    try:
        data, _ = sf.read(str(path), dtype="float32", always_2d=False)
    except _READ_ERRORS as exc:
        raise PayloadReadError(f"unreadable samples: {exc}") from exc
    return data


class RecordingCatalog:
    def __init__(self, root: Path | str, *, codec: FilenameTimestampCodec | None = None) -> None:
        self.root = Path(root)
        self.codec = codec or FilenameTimestampCodec()

    def scan(self, root: Path | str | None = None) -> List[AudioEvent]:
        """Return every decodable bark under ``root``, oldest first, ties by path."""
        base = Path(root) if root is not None else self.root
        if not base.is_dir():
            LOGGER.info("Recording directory %s does not exist; nothing to show", base)
            return []
        events: List[AudioEvent] = []
        skipped = 0
        for path in sorted(base.rglob("*")):
            if not self.codec.matches(path.name) or not path.is_file():
                continue
            try:
                timestamp = self.codec.decode(path.name)
            except CodecError as exc:
                skipped += 1
                LOGGER.debug("Skipping %s: %s", path, exc)
                continue
            events.append(self._load_event(path, timestamp))
        events.sort(key=lambda event: (event.timestamp, str(event.storage_path)))
        LOGGER.info("Scanned %s: %d recording(s), %d skipped", base, len(events), skipped)
        return events

    def _load_event(self, path: Path, timestamp: datetime) -> AudioEvent:
        duration = 0.0
        summary = None
        try:
            duration = read_duration(path)
            summary = summarize_amplitude(read_samples(path))
        except PayloadReadError as exc:
            LOGGER.warning("No loudness stats for %s: %s", path.name, exc)
        return AudioEvent(
            timestamp=timestamp,
            storage_path=path,
            duration=duration,
            loudness_summary=summary,
        )


__all__ = ["PayloadReadError", "RecordingCatalog", "read_duration", "read_samples"]
