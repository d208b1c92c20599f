"""Reusable Kivy components for the bark viewer."""

from __future__ import annotations

from kivy.factory import Factory
from kivy.lang import Builder
from kivy.properties import StringProperty
from kivymd.uix.boxlayout import MDBoxLayout

from .timeline_view import TimelineView


class RecordingRow(MDBoxLayout):
    """One line of the recordings list; ``path`` identifies the file to play."""

    label = StringProperty("")
    detail = StringProperty("")
    path = StringProperty("")


Factory.register("RecordingRow", cls=RecordingRow)
Factory.register("TimelineView", cls=TimelineView)

COMPONENT_KV = """
<BWScaffold@MDBoxLayout>:
    orientation: "vertical"
    padding: app.theme.spacing.grid
    spacing: app.theme.spacing.section
    canvas.before:
        Color:
            rgba: app.theme.palette.background
        Rectangle:
            pos: self.pos
            size: self.size

<BWToolbar@MDTopAppBar>:
    md_bg_color: app.theme.palette.surface
    specific_text_color: app.theme.palette.text_primary
    elevation: 0
    anchor_title: "left"

<BWCard@MDCard>:
    orientation: "vertical"
    size_hint_y: None
    adaptive_height: True
    padding: app.theme.spacing.card_padding
    spacing: app.theme.spacing.grid
    radius: [18]
    md_bg_color: app.theme.palette.card
    line_color: 0, 0, 0, 0

<SectionHeading@MDLabel>:
    font_style: app.theme.typography.title
    theme_text_color: "Custom"
    text_color: app.theme.palette.text_primary
    bold: True
    size_hint_y: None
    height: self.texture_size[1]

<BodyText@MDLabel>:
    font_style: app.theme.typography.body
    theme_text_color: "Custom"
    text_color: app.theme.palette.text_secondary
    size_hint_y: None
    height: self.texture_size[1]

<PresetButton@MDFillRoundFlatIconButton>:
    size_hint_y: None
    height: "42dp"
    md_bg_color: app.theme.palette.surface
    text_color: app.theme.palette.text_primary
    icon_color: app.theme.palette.accent_muted
    line_color: app.theme.palette.outline

<GhostButton@MDFlatButton>:
    size_hint_y: None
    height: "36dp"
    text_color: app.theme.palette.accent_muted

<RecordingRow>:
    orientation: "horizontal"
    size_hint_y: None
    height: "44dp"
    spacing: app.theme.spacing.grid
    MDLabel:
        text: root.label
        theme_text_color: "Custom"
        text_color: app.theme.palette.accent if app.playing_path == root.path else app.theme.palette.text_primary
        font_style: app.theme.typography.body
    MDLabel:
        text: root.detail
        size_hint_x: 0.6
        theme_text_color: "Custom"
        text_color: app.theme.palette.text_muted
        font_style: app.theme.typography.caption
    GhostButton:
        text: "Play"
        on_press: app.play_recording(root.path)
    GhostButton:
        text: "Stop"
        disabled: app.playing_path != root.path
        on_press: app.stop_playback()

<ActivityLog@BWCard>:
    SectionHeading:
        text: "Live log"
    ScrollView:
        do_scroll_x: False
        size_hint_y: None
        height: "120dp"
        MDLabel:
            text: '\\n'.join(app.log_lines)
            theme_text_color: "Custom"
            text_color: app.theme.palette.text_secondary
            font_style: app.theme.typography.caption
            text_size: self.width, None
            size_hint_y: None
            height: self.texture_size[1]
"""


def load_components() -> None:
    """Register shared KV component templates."""
    Builder.load_string(COMPONENT_KV)


__all__ = ["RecordingRow", "load_components"]
