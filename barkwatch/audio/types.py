"""Dataclasses shared across audio helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import numpy as np


class Phase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass(frozen=True, slots=True)
class EventStart:
    """Detector left ``Idle``; ``instant`` is the monotonic clock reading."""

    instant: float


@dataclass(frozen=True, slots=True, eq=False)
class EventSample:
    """One chunk of normalized float frames belonging to the open event."""

    chunk: np.ndarray


@dataclass(frozen=True, slots=True)
class EventEnd:
    instant: float


Transition = Union[EventStart, EventSample, EventEnd]


@dataclass(frozen=True, slots=True)
class DetectorState:
    """Consistent snapshot of the detector, taken under its lock."""

    phase: Phase
    started_at: Optional[float]
    last_loud_at: Optional[float]


@dataclass(frozen=True, slots=True)
class LoudnessSummary:
    """Five-number summary of absolute amplitude, normalized to [0, 1]."""

    minimum: float
    q1: float
    median: float
    q3: float
    maximum: float

    def as_tuple(self) -> tuple[float, float, float, float, float]:
        return (self.minimum, self.q1, self.median, self.q3, self.maximum)


@dataclass(frozen=True, slots=True)
class AudioEvent:
    """A stored bark, reconstructed from its file during a catalog scan."""

    timestamp: datetime
    storage_path: Path
    duration: float
    loudness_summary: Optional[LoudnessSummary] = None
