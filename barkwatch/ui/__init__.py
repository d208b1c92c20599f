"""UI helpers (theme, reusable widgets)."""

from .theme import BarkTheme, Palette, Spacing, Typography, rgba

__all__ = ["BarkTheme", "Palette", "Spacing", "Typography", "rgba"]
