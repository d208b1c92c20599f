"""Visible time range of the timeline: pan/zoom, projection and tick spacing."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ..audio.types import AudioEvent

MIN_WINDOW_SECONDS = 1.0
TICK_STEP_MINUTES = 15
DEFAULT_LEAD_IN = timedelta(minutes=5)


class DegenerateWindowError(ValueError):
    """Operation would leave the window empty, inverted or non-finite."""


def local_now() -> datetime:
    return datetime.now().astimezone()


class TimelineWindow:
    """Owns ``visible_start < visible_end``.

    :meth:`pan` and :meth:`zoom` either apply fully or raise
    :class:`DegenerateWindowError` and leave the window untouched. Zooming in
    is floored at ``MIN_WINDOW_SECONDS``; panning is unbounded.
    """

    def __init__(self, visible_start: datetime, visible_end: datetime) -> None:
        if visible_start.tzinfo is None or visible_end.tzinfo is None:
            raise ValueError("TimelineWindow bounds must be timezone-aware")
        if not visible_start < visible_end:
            raise DegenerateWindowError(f"start {visible_start} is not before end {visible_end}")
        self._start = visible_start
        self._end = visible_end

    def __repr__(self) -> str:
        return f"TimelineWindow({self._start.isoformat()} -> {self._end.isoformat()})"

    @property
    def visible_start(self) -> datetime:
        return self._start

    @property
    def visible_end(self) -> datetime:
        return self._end

    @property
    def duration(self) -> timedelta:
        return self._end - self._start

    @property
    def seconds(self) -> float:
        return self.duration.total_seconds()

    # -- presets -----------------------------------------------------------

    @classmethod
    def ending_now(cls, span: timedelta, now: datetime | None = None) -> "TimelineWindow":
        end = now or local_now()
        return cls(end - span, end)

    @classmethod
    def last_hour(cls, now: datetime | None = None) -> "TimelineWindow":
        return cls.ending_now(timedelta(hours=1), now)

    @classmethod
    def last_24_hours(cls, now: datetime | None = None) -> "TimelineWindow":
        return cls.ending_now(timedelta(hours=24), now)

    @classmethod
    def last_week(cls, now: datetime | None = None) -> "TimelineWindow":
        return cls.ending_now(timedelta(days=7), now)

    @classmethod
    def default(
        cls,
        events: Iterable[AudioEvent],
        now: datetime | None = None,
        lead_in: timedelta = DEFAULT_LEAD_IN,
    ) -> "TimelineWindow":
        """From today's first bark (minus ``lead_in``) through now; else the last 24 hours."""
        now = now or local_now()
        today = [
            event.timestamp
            for event in events
            if event.timestamp.astimezone(now.tzinfo).date() == now.date()
        ]
        if today:
            start = min(today) - lead_in
            if start < now:
                return cls(start, now)
        return cls.last_24_hours(now)

    # -- gestures ----------------------------------------------------------

    def pan(self, delta_seconds: float) -> None:
        if not math.isfinite(delta_seconds):
            raise DegenerateWindowError(f"cannot pan by {delta_seconds}")
        try:
            shift = timedelta(seconds=delta_seconds)
            start, end = self._start + shift, self._end + shift
        except OverflowError as exc:
            raise DegenerateWindowError(f"pan by {delta_seconds}s leaves the calendar") from exc
        self._start, self._end = start, end

    def zoom(self, factor: float, pivot_fraction: float = 0.5) -> None:
        """Scale the duration by ``factor`` (>1 zooms out) holding ``pivot_fraction`` fixed."""
        if not math.isfinite(factor) or factor <= 0:
            raise DegenerateWindowError(f"zoom factor must be positive and finite, got {factor}")
        if not math.isfinite(pivot_fraction):
            raise DegenerateWindowError(f"pivot must be finite, got {pivot_fraction}")
        pivot_fraction = min(max(pivot_fraction, 0.0), 1.0)
        old_seconds = self.seconds
        new_seconds = max(old_seconds * factor, MIN_WINDOW_SECONDS)
        if not math.isfinite(new_seconds):
            raise DegenerateWindowError(f"zoom by {factor} overflows")
        try:
            pivot = self._start + timedelta(seconds=old_seconds * pivot_fraction)
            start = pivot - timedelta(seconds=new_seconds * pivot_fraction)
            end = start + timedelta(seconds=new_seconds)
        except OverflowError as exc:
            raise DegenerateWindowError(f"zoom by {factor} leaves the calendar") from exc
        if not start < end:
            raise DegenerateWindowError(f"zoom by {factor} collapses the window")
        self._start, self._end = start, end

    # -- mapping -----------------------------------------------------------

    def project(self, timestamp: datetime) -> Optional[float]:
        """Fraction in [0, 1] across the window, or ``None`` when outside it."""
        if timestamp < self._start or timestamp > self._end:
            return None
        return (timestamp - self._start).total_seconds() / self.seconds

    def timestamp_at(self, fraction: float) -> datetime:
        return self._start + timedelta(seconds=self.seconds * fraction)

    def contains(self, timestamp: datetime) -> bool:
        return self._start <= timestamp <= self._end

    def tick_interval(self, pixel_width: float, min_pixels_per_label: float) -> int:
        """Minutes between labels: a multiple of 15, never below 15.

        The interval is the smallest such multiple for which the window holds
        at most ``pixel_width // min_pixels_per_label`` ticks, counting both
        ends when they fall on a tick, so labels stay at least
        ``min_pixels_per_label`` apart at any zoom level.
        """
        if pixel_width > 0 and min_pixels_per_label > 0:
            max_labels = max(1, int(pixel_width // min_pixels_per_label))
        else:
            max_labels = 1
        # floor(minutes / interval) + 1 <= max_labels  <=>  interval > minutes / max_labels
        minutes_per_label = self.seconds / 60.0 / max_labels
        steps = math.floor(minutes_per_label / TICK_STEP_MINUTES + 1e-9) + 1
        return steps * TICK_STEP_MINUTES

    def ticks(self, pixel_width: float, min_pixels_per_label: float) -> List[datetime]:
        """Tick instants inside the window, aligned to wall-clock multiples of the interval."""
        step = timedelta(minutes=self.tick_interval(pixel_width, min_pixels_per_label))
        midnight = self._start.replace(hour=0, minute=0, second=0, microsecond=0)
        tick = midnight + step * math.ceil((self._start - midnight) / step)
        ticks: List[datetime] = []
        while tick <= self._end:
            ticks.append(tick)
            tick += step
        return ticks


__all__ = ["DegenerateWindowError", "MIN_WINDOW_SECONDS", "TimelineWindow", "local_now"]
