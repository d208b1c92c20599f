"""What the viewer shows: catalog events, the visible window and the selection."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ..audio.types import AudioEvent
from .window import DEFAULT_LEAD_IN, TimelineWindow

PRESETS = ("default", "hour", "day", "week")


class TimelineState:
    """Kivy-free model behind the timeline widget.

    The first scan result resets the view to the default preset; later scans
    only swap the events so the user's pan/zoom survives a refresh, even
    while the directory is still empty.
    """

    def __init__(self, lead_in: timedelta = DEFAULT_LEAD_IN) -> None:
        self.lead_in = lead_in
        self.events: List[AudioEvent] = []
        self.window = TimelineWindow.last_24_hours()
        self.selected: Optional[AudioEvent] = None
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def apply_scan(self, events: Iterable[AudioEvent], now: datetime | None = None) -> bool:
        """Replace the events; returns True when the window was reset."""
        self.events = list(events)
        if self.selected is not None and self.selected not in self.events:
            self.selected = None
        if self._loaded:
            return False
        self._loaded = True
        self.show_preset("default", now)
        return True

    def show_preset(self, name: str, now: datetime | None = None) -> TimelineWindow:
        if name == "hour":
            window = TimelineWindow.last_hour(now)
        elif name == "day":
            window = TimelineWindow.last_24_hours(now)
        elif name == "week":
            window = TimelineWindow.last_week(now)
        elif name == "default":
            window = TimelineWindow.default(self.events, now, lead_in=self.lead_in)
        else:
            raise ValueError(f"unknown preset {name!r}; expected one of {', '.join(PRESETS)}")
        self.window = window
        return window

    def select(self, event: Optional[AudioEvent]) -> None:
        self.selected = event


__all__ = ["PRESETS", "TimelineState"]
