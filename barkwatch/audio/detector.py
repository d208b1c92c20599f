"""Amplitude-triggered event detector with a silence-timeout hysteresis."""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass

import numpy as np

from .types import DetectorState, EventEnd, EventSample, EventStart, Phase, Transition

DEFAULT_AMPLITUDE_THRESHOLD = 0.05
DEFAULT_SILENCE_TIMEOUT = 5.0


@dataclass(frozen=True, slots=True)
class DetectorConfig:
    """Thresholds on the [-1, 1] normalized scale; timeout in seconds."""

    amplitude_threshold: float = DEFAULT_AMPLITUDE_THRESHOLD
    silence_timeout: float = DEFAULT_SILENCE_TIMEOUT

    def __post_init__(self) -> None:
        if not 0.0 <= self.amplitude_threshold < 1.0:
            raise ValueError(f"amplitude_threshold must be in [0, 1), got {self.amplitude_threshold}")
        if not math.isfinite(self.silence_timeout) or self.silence_timeout <= 0:
            raise ValueError(f"silence_timeout must be positive, got {self.silence_timeout}")


def peak_amplitude(chunk: np.ndarray) -> float:
    data = np.asarray(chunk)
    if data.size == 0:
        return 0.0
    return float(np.max(np.abs(data)))


class AmplitudeEventDetector:
    """Two-phase state machine fed with sample chunks from the capture callback.

    ``Idle -> Active`` when a chunk's peak exceeds the threshold. While active
    every chunk is passed through as :class:`EventSample` and loud chunks
    refresh ``last_loud_at``; the event ends once the silence since the last
    loud chunk exceeds the timeout. All state sits behind one lock so a UI
    thread can take :meth:`snapshot` while the audio thread feeds.
    """

    def __init__(self, config: DetectorConfig | None = None) -> None:
        self.config = config or DetectorConfig()
        self._lock = threading.Lock()
        self._phase = Phase.IDLE
        self._started_at: float | None = None
        self._last_loud_at: float | None = None

    def feed(self, chunk: np.ndarray, now: float) -> list[Transition]:
        loud = peak_amplitude(chunk) > self.config.amplitude_threshold
        transitions: list[Transition] = []
        with self._lock:
            if self._phase is Phase.IDLE:
                if not loud:
                    return transitions
                self._phase = Phase.ACTIVE
                self._started_at = now
                self._last_loud_at = now
                transitions.append(EventStart(now))
            elif loud:
                self._last_loud_at = now
            transitions.append(EventSample(chunk))
            assert self._last_loud_at is not None
            if now - self._last_loud_at > self.config.silence_timeout:
                self._clear()
                transitions.append(EventEnd(now))
        return transitions

    def finish(self, now: float) -> list[Transition]:
        """Close an in-flight event, e.g. when capture is shutting down."""
        with self._lock:
            if self._phase is Phase.IDLE:
                return []
            self._clear()
        return [EventEnd(now)]

    def reset(self) -> None:
        """Drop back to ``Idle`` without emitting ``EventEnd``."""
        with self._lock:
            self._clear()

    def snapshot(self) -> DetectorState:
        with self._lock:
            return DetectorState(self._phase, self._started_at, self._last_loud_at)

    def _clear(self) -> None:
        self._phase = Phase.IDLE
        self._started_at = None
        self._last_loud_at = None


__all__ = ["AmplitudeEventDetector", "DetectorConfig", "peak_amplitude"]
