"""Timeline view: window arithmetic and backend-independent drawing."""

from .window import DegenerateWindowError, TimelineWindow

__all__ = ["DegenerateWindowError", "TimelineWindow"]
