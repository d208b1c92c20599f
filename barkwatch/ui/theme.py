"""Central theme tokens for the Kivy viewer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from kivy.metrics import dp

from ..timeline.scene import SceneStyle

Color = Tuple[float, float, float, float]


def rgba(value: str, alpha: float = 1.0) -> Color:
    """Convert hex to normalized RGBA."""
    value = value.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected 6 hex chars, got {value!r}")
    r = int(value[0:2], 16) / 255.0
    g = int(value[2:4], 16) / 255.0
    b = int(value[4:6], 16) / 255.0
    return (r, g, b, alpha)


@dataclass(frozen=True)
class Palette:
    background: Color
    surface: Color
    card: Color
    outline: Color
    accent: Color
    accent_muted: Color
    danger: Color
    text_primary: Color
    text_secondary: Color
    text_muted: Color
    timeline_bg: Color
    timeline_grid: Color
    bark: Color
    bark_selected: Color
    envelope: Color


@dataclass(frozen=True)
class Typography:
    title: str
    subtitle: str
    body: str
    caption: str


@dataclass(frozen=True)
class Spacing:
    grid: float
    section: float
    card_padding: float
    timeline_height: float


@dataclass(frozen=True)
class BarkTheme:
    palette: Palette
    typography: Typography
    spacing: Spacing

    @staticmethod
    def default() -> "BarkTheme":
        palette = Palette(
            background=rgba("#0E0F12"),
            surface=rgba("#16181D"),
            card=rgba("#1C1F26"),
            outline=rgba("#2E333D"),
            accent=rgba("#FF8000"),
            accent_muted=rgba("#FFB366"),
            danger=rgba("#F9707A"),
            text_primary=rgba("#F4F5F7"),
            text_secondary=rgba("#C8CCD4"),
            text_muted=rgba("#7D8490"),
            timeline_bg=rgba("#202020"),
            timeline_grid=rgba("#404040"),
            bark=rgba("#FF8000"),
            bark_selected=rgba("#FFD94D"),
            envelope=rgba("#4C8DFF", 0.85),
        )
        typography = Typography(
            title="H6",
            subtitle="Subtitle1",
            body="Body1",
            caption="Caption",
        )
        spacing = Spacing(
            grid=dp(10),
            section=dp(14),
            card_padding=dp(16),
            timeline_height=dp(160),
        )
        return BarkTheme(palette=palette, typography=typography, spacing=spacing)

    def scene_style(self) -> SceneStyle:
        p = self.palette
        return SceneStyle(
            background=p.timeline_bg,
            grid=p.timeline_grid,
            label=p.text_secondary,
            marker=p.bark,
            selected=p.bark_selected,
            whisker=p.text_muted,
            box=p.envelope,
            median=p.text_primary,
            marker_radius=dp(5),
            label_offset=dp(14),
            min_pixels_per_label=dp(80),
        )


__all__ = ["BarkTheme", "Palette", "Typography", "Spacing", "rgba"]
