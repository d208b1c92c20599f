"""Kivy entrypoint for the bark timeline viewer."""

from __future__ import annotations

import dataclasses
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from kivy.clock import Clock
from kivy.lang import Builder
from kivy.properties import ListProperty, ObjectProperty, StringProperty
from kivymd.app import MDApp
from kivymd.uix.snackbar import Snackbar

from .audio.types import AudioEvent
from .config import BarkSettings, get_settings
from .services.logger import LogBuffer
from .services.playback import PlaybackController, PlaybackError, SoundDeviceSink
from .services.refresher import CatalogRefresher
from .store.catalog import RecordingCatalog
from .timeline.state import TimelineState
from .ui.components import load_components
from .ui.theme import BarkTheme

LABEL_FORMAT = "%Y-%m-%d %I:%M:%S %p"

VIEWER_KV = """
BWScaffold:
    BWToolbar:
        title: "Bark Timeline"
        right_action_items: [["refresh", lambda x: app.refresh_catalog()]]
    MDBoxLayout:
        size_hint_y: None
        height: "46dp"
        spacing: app.theme.spacing.grid
        PresetButton:
            text: "Reset view"
            icon: "backup-restore"
            on_press: app.show_preset("default")
        PresetButton:
            text: "Last hour"
            icon: "clock-outline"
            on_press: app.show_preset("hour")
        PresetButton:
            text: "Last 24 hours"
            icon: "calendar-today"
            on_press: app.show_preset("day")
        PresetButton:
            text: "Last week"
            icon: "calendar-week"
            on_press: app.show_preset("week")
    TimelineView:
        id: timeline
        size_hint_y: None
        height: app.theme.spacing.timeline_height
        on_select: app.select_event(args[1])
    BodyText:
        text: app.range_text
    BWCard:
        SectionHeading:
            text: "Selected bark"
        BodyText:
            text: app.selection_text
    BWCard:
        size_hint_y: 1
        adaptive_height: False
        SectionHeading:
            text: "Recordings ({})".format(len(app.rows))
        RecycleView:
            data: app.rows
            viewclass: "RecordingRow"
            RecycleBoxLayout:
                orientation: "vertical"
                default_size: None, dp(44)
                default_size_hint: 1, None
                size_hint_y: None
                height: self.minimum_height
    ActivityLog:
"""


def describe_event(event: AudioEvent) -> str:
    text = f"{event.timestamp.strftime(LABEL_FORMAT)}  |  {event.duration:.1f}s"
    summary = event.loudness_summary
    if summary is None:
        return text + "  |  loudness unavailable"
    values = "  ".join(
        f"{name} {value:.3f}"
        for name, value in zip(("min", "q1", "median", "q3", "max"), summary.as_tuple())
    )
    return f"{text}\n{values}"


class BarkViewerApp(MDApp):
    log_lines = ListProperty([])
    rows = ListProperty([])
    selection_text = StringProperty("Click a marker to inspect a bark")
    range_text = StringProperty("")
    playing_path = StringProperty("")
    theme = ObjectProperty(BarkTheme.default())

    def __init__(self, settings: Optional[BarkSettings] = None, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings or get_settings()
        self.theme = BarkTheme.default()
        self.logger = LogBuffer(self.settings.log_history)
        self.catalog = RecordingCatalog(Path(self.settings.barks_dir))
        self.refresher = CatalogRefresher(self.catalog, self._scan_finished, self.logger)
        self.playback = PlaybackController(SoundDeviceSink(), self.logger)
        self.state = TimelineState(lead_in=timedelta(minutes=self.settings.lead_in_minutes))

    def build(self):
        load_components()
        self.theme_cls.theme_style = "Dark"
        self.theme_cls.primary_palette = "Orange"
        self.title = "Bark Viewer"
        root = Builder.load_string(VIEWER_KV)
        timeline = root.ids.timeline
        timeline.style = dataclasses.replace(
            self.theme.scene_style(),
            min_pixels_per_label=self.settings.min_pixels_per_label,
        )
        timeline.window = self.state.window
        return root

    def on_start(self):
        self.refresh_catalog()
        Clock.schedule_interval(lambda dt: self._sync_state(), 0.5)

    def on_stop(self):
        self.playback.stop()

    @property
    def timeline(self):
        return self.root.ids.timeline if self.root else None

    def refresh_catalog(self) -> None:
        self.refresher.refresh()

    def _scan_finished(self, events: List[AudioEvent]) -> None:
        Clock.schedule_once(lambda dt: self._apply_events(events), 0)

    def _apply_events(self, events: List[AudioEvent]) -> None:
        reset = self.state.apply_scan(events)
        self.rows = [
            {
                "label": event.timestamp.strftime(LABEL_FORMAT),
                "detail": f"{event.duration:.1f}s",
                "path": str(event.storage_path),
            }
            for event in self.state.events
        ]
        timeline = self.timeline
        if timeline is None:
            return
        timeline.events = self.state.events
        if self.state.selected is None and timeline.selected is not None:
            timeline.selected = None
            self.selection_text = "Click a marker to inspect a bark"
        if reset:
            timeline.window = self.state.window
            self._sync_state()

    def show_preset(self, name: str) -> None:
        window = self.state.show_preset(name)
        if self.timeline is not None:
            self.timeline.window = window
        self._sync_state()

    def select_event(self, event: AudioEvent) -> None:
        self.state.select(event)
        if self.timeline is not None:
            self.timeline.selected = event
        self.selection_text = describe_event(event)
        self.play_recording(str(event.storage_path))

    def play_recording(self, path: str) -> None:
        try:
            self.playback.play(Path(path))
        except PlaybackError as exc:
            self.playing_path = ""
            self._show_snackbar(f"Playback failed: {exc}")
            return
        self.playing_path = path

    def stop_playback(self) -> None:
        self.playback.stop()
        self.playing_path = ""

    def _sync_state(self) -> None:
        self.log_lines = self.logger.get()
        window = self.state.window
        self.range_text = "{} - {}".format(
            window.visible_start.strftime(LABEL_FORMAT),
            window.visible_end.strftime(LABEL_FORMAT),
        )

    def _show_snackbar(self, text: str) -> None:
        def _display(*_):
            Snackbar(
                text=text,
                duration=1.8,
                bg_color=self.theme.palette.surface,
            ).open()

        Clock.schedule_once(_display, 0)


if __name__ == "__main__":
    BarkViewerApp().run()
