"""Event-triggered recorder: one 16-bit WAV file per detected bark."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

import numpy as np
import soundfile as sf

from ..config import BarkSettings
from ..services.logger import LogBuffer
from .codec import FilenameTimestampCodec
from .detector import AmplitudeEventDetector
from .types import EventEnd, EventSample, EventStart, Transition

PCM_MAX = 32767
PCM_MIN = -32768

_SINK_ERRORS = (OSError, RuntimeError, sf.SoundFileError)
LOG_FLUSH_SECONDS = 0.25


class DeviceError(RuntimeError):
    """Capture device missing or misconfigured."""


class StorageError(RuntimeError):
    """Per-event file could not be created."""


class EventWriteError(RuntimeError):
    """Writing into an open event file failed; only that event is lost."""


SinkFactory = Callable[[Path, int, int], Any]


def open_wav_sink(path: Path, sample_rate: int, channels: int) -> sf.SoundFile:
    return sf.SoundFile(
        str(path),
        mode="w",
        samplerate=sample_rate,
        channels=channels,
        format="WAV",
        subtype="PCM_16",
    )


def to_pcm16(chunk: np.ndarray) -> np.ndarray:
    scaled = np.round(np.asarray(chunk, dtype=np.float64) * PCM_MAX)
    return np.clip(scaled, PCM_MIN, PCM_MAX).astype(np.int16)


@dataclass(slots=True)
class RecordingSession:
    """The open file of the bark currently being recorded."""

    path: Path
    sink: Any
    timestamp: datetime
    started_at: float
    frames_written: int = field(default=0)


class EventRecorder:
    """Turns detector transitions into files named by :class:`FilenameTimestampCodec`."""

    def __init__(
        self,
        output_dir: Path,
        sample_rate: int,
        channels: int,
        *,
        codec: FilenameTimestampCodec | None = None,
        wall_clock: Callable[[], datetime] | None = None,
        open_sink: SinkFactory = open_wav_sink,
        logger: LogBuffer | None = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.sample_rate = int(sample_rate)
        self.channels = int(channels)
        self.codec = codec or FilenameTimestampCodec()
        self.wall_clock = wall_clock or (lambda: datetime.now().astimezone())
        self.open_sink = open_sink
        self.logger = logger or LogBuffer()
        self._session: RecordingSession | None = None

    @property
    def session(self) -> Optional[RecordingSession]:
        return self._session

    def prepare(self) -> None:
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create {self.output_dir}: {exc}") from exc

    def apply(self, transition: Transition) -> None:
        if isinstance(transition, EventStart):
            self._start(transition.instant)
        elif isinstance(transition, EventSample):
            self._write(transition.chunk)
        elif isinstance(transition, EventEnd):
            self._finish()

    def abort(self) -> None:
        """Close and delete the in-flight file, if any."""
        session = self._session
        self._session = None
        if session is None:
            return
        try:
            session.sink.close()
        except _SINK_ERRORS as exc:
            self.logger.add(f"Closing {session.path} after failure raised: {exc}", logging.WARNING)
        session.path.unlink(missing_ok=True)
        self.logger.add(f"Dropped partial recording {session.path.name}", logging.WARNING)

    def _start(self, instant: float) -> None:
        if self._session is not None:
            self._finish()
        timestamp = self.codec.truncate(self.wall_clock())
        self.prepare()
        path = self._free_path(self.codec.encode(timestamp))
        try:
            path.parent.mkdir(exist_ok=True)
            sink = self.open_sink(path, self.sample_rate, self.channels)
        except _SINK_ERRORS as exc:
            raise StorageError(f"Cannot create {path}: {exc}") from exc
        self._session = RecordingSession(path=path, sink=sink, timestamp=timestamp, started_at=instant)
        self.logger.add(f"Started recording: {path}")

    def _free_path(self, name: str) -> Path:
        """``output_dir/name``, or ``output_dir/<n>/name`` for the first free ``n`` when taken.

        Barks starting within the same second share a name; the catalog scan
        is recursive, so numbered folders keep every one of them.
        """
        path = self.output_dir / name
        slot = 0
        while path.exists():
            slot += 1
            path = self.output_dir / str(slot) / name
        return path

    def _write(self, chunk: np.ndarray) -> None:
        session = self._session
        if session is None:
            return
        frames = to_pcm16(chunk)
        if frames.ndim == 1 and self.channels > 1:
            frames = frames.reshape(-1, self.channels)
        try:
            session.sink.write(frames)
        except _SINK_ERRORS as exc:
            raise EventWriteError(f"Write to {session.path} failed: {exc}") from exc
        session.frames_written += len(frames)

    def _finish(self) -> None:
        session = self._session
        if session is None:
            return
        self._session = None
        try:
            session.sink.close()
        except _SINK_ERRORS as exc:
            raise EventWriteError(f"Closing {session.path} failed: {exc}") from exc
        seconds = session.frames_written / float(self.sample_rate)
        self.logger.add(f"Finished recording: {session.path.name} ({seconds:.1f}s)")


def _load_sounddevice():
    try:
        import sounddevice as sd  # type: ignore
    except (ImportError, OSError) as exc:
        raise DeviceError(f"sounddevice unavailable: {exc}") from exc
    return sd


class BarkListener:
    """Wires a live input stream through the detector into an :class:`EventRecorder`.

    The stream callback only feeds the detector and appends to the open file.
    Fatal storage errors raised there abort the stream and are re-raised from
    :meth:`run` on the calling thread.
    """

    def __init__(
        self,
        settings: BarkSettings,
        logger: LogBuffer,
        *,
        detector: AmplitudeEventDetector | None = None,
        codec: FilenameTimestampCodec | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] | None = None,
        open_sink: SinkFactory = open_wav_sink,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.detector = detector or AmplitudeEventDetector(settings.detector_config())
        self.codec = codec or FilenameTimestampCodec()
        self.clock = clock
        self.wall_clock = wall_clock
        self.open_sink = open_sink
        self.recorder: EventRecorder | None = None
        self._stop = threading.Event()
        self._fatal: BaseException | None = None
        self._sd = None

    def configure(self, sample_rate: int, channels: int) -> EventRecorder:
        self.recorder = EventRecorder(
            Path(self.settings.barks_dir),
            sample_rate,
            channels,
            codec=self.codec,
            wall_clock=self.wall_clock,
            open_sink=self.open_sink,
            logger=self.logger,
        )
        self.recorder.prepare()
        return self.recorder

    def process_block(self, block: np.ndarray, now: float) -> None:
        if self.recorder is None:
            raise RuntimeError("BarkListener.configure() must run before audio is fed")
        for transition in self.detector.feed(block, now):
            try:
                self.recorder.apply(transition)
            except EventWriteError as exc:
                self.logger.add(f"Event dropped: {exc}", logging.ERROR)
                self.recorder.abort()
                self.detector.reset()
                return

    def close(self, now: float | None = None) -> None:
        """Flush an in-flight event to disk."""
        if self.recorder is None:
            return
        for transition in self.detector.finish(self.clock() if now is None else now):
            try:
                self.recorder.apply(transition)
            except EventWriteError as exc:
                self.logger.add(f"Event dropped: {exc}", logging.ERROR)
                self.recorder.abort()

    def stop(self) -> None:
        self._stop.set()

    def run(self, duration: float | None = None) -> None:
        sd = self._sd = _load_sounddevice()
        sample_rate, channels = self._query_device(sd)
        self.configure(sample_rate, channels)
        blocksize = max(1, int(sample_rate * self.settings.block_ms / 1000))
        self._stop.clear()
        self._fatal = None
        try:
            stream = sd.InputStream(
                device=self.settings.input_device,
                channels=channels,
                samplerate=sample_rate,
                dtype="float32",
                blocksize=blocksize,
                callback=self._callback,
            )
        except (sd.PortAudioError, ValueError) as exc:
            raise DeviceError(f"Cannot open input stream: {exc}") from exc
        try:
            # The callback thread only queues log lines; this thread emits them.
            with self.logger.deferred(), stream:
                self.logger.add(
                    f"Listening for barks... ({sample_rate} Hz, {channels} ch, threshold "
                    f"{self.detector.config.amplitude_threshold})"
                )
                self._wait(duration)
        finally:
            self.close()
        if self._fatal is not None:
            raise self._fatal

    def _wait(self, duration: float | None) -> None:
        deadline = None if duration is None else time.monotonic() + duration
        while True:
            timeout = LOG_FLUSH_SECONDS
            if deadline is not None:
                timeout = min(timeout, max(0.0, deadline - time.monotonic()))
            if self._stop.wait(timeout=timeout):
                return
            self.logger.flush()
            if deadline is not None and time.monotonic() >= deadline:
                return

    def _query_device(self, sd) -> tuple[int, int]:
        try:
            info = sd.query_devices(self.settings.input_device, "input")
        except (sd.PortAudioError, ValueError) as exc:
            raise DeviceError(f"No usable input device: {exc}") from exc
        max_channels = int(info.get("max_input_channels", 0))
        if max_channels < 1:
            raise DeviceError(f"Device {info.get('name')!r} has no input channels")
        channels = self.settings.channels or min(max_channels, 2)
        if channels > max_channels:
            raise DeviceError(f"Device {info.get('name')!r} supports {max_channels} channel(s), {channels} requested")
        return int(info["default_samplerate"]), channels

    def _callback(self, indata, frames, time_info, status) -> None:  # noqa: ARG002
        if status:
            self.logger.add(f"Input stream status: {status}", logging.WARNING)
        try:
            self.process_block(indata.copy(), self.clock())
        except StorageError as exc:
            self._fatal = exc
            self._stop.set()
            raise self._sd.CallbackAbort from exc


__all__ = [
    "BarkListener",
    "DeviceError",
    "EventRecorder",
    "EventWriteError",
    "RecordingSession",
    "StorageError",
    "open_wav_sink",
    "to_pcm16",
]
