"""Single-slot playback of stored barks."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional, Protocol

import soundfile as sf

from .logger import LogBuffer


class PlaybackError(RuntimeError):
    pass


class PlaybackSink(Protocol):
    def play(self, path: Path) -> None: ...

    def stop(self) -> None: ...


class SoundDeviceSink:
    """Decodes with soundfile and plays on the default output device."""

    def __init__(self) -> None:
        self._sd = None

    def _load(self):
        if self._sd is None:
            try:
                import sounddevice as sd  # type: ignore
            except (ImportError, OSError) as exc:
                raise PlaybackError(f"sounddevice unavailable: {exc}") from exc
            self._sd = sd
        return self._sd

    def play(self, path: Path) -> None:
        sd = self._load()
        try:
            data, sample_rate = sf.read(str(path), dtype="float32")
        except (OSError, RuntimeError, sf.SoundFileError) as exc:
            raise PlaybackError(f"Cannot decode {path.name}: {exc}") from exc
        try:
            sd.play(data, sample_rate)
        except sd.PortAudioError as exc:
            raise PlaybackError(f"Output device error: {exc}") from exc

    def stop(self) -> None:
        if self._sd is not None:
            self._sd.stop()


class PlaybackController:
    """At most one playback at a time: starting a file stops the current one first."""

    def __init__(self, sink: PlaybackSink, logger: LogBuffer) -> None:
        self.sink = sink
        self.logger = logger
        self._lock = threading.Lock()
        self._current: Optional[Path] = None

    @property
    def current(self) -> Optional[Path]:
        with self._lock:
            return self._current

    def play(self, path: Path) -> None:
        path = Path(path)
        with self._lock:
            if self._current is not None:
                self.sink.stop()
                self._current = None
            try:
                self.sink.play(path)
            except PlaybackError as exc:
                self.logger.add(str(exc), logging.ERROR)
                raise
            self._current = path
        self.logger.add(f"Playing {path.name}")

    def stop(self) -> None:
        with self._lock:
            if self._current is None:
                return
            self.sink.stop()
            stopped, self._current = self._current, None
        self.logger.add(f"Stopped {stopped.name}")
