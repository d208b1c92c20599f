"""Kivy widget that paints :func:`build_scene` output and feeds gestures back."""

from __future__ import annotations

from kivy.core.text import Label as CoreLabel
from kivy.core.window import Window
from kivy.graphics import Color, Ellipse, Line, Rectangle
from kivy.metrics import sp
from kivy.properties import ListProperty, ObjectProperty
from kivy.uix.widget import Widget

from ..timeline.scene import (
    FillCircle,
    FillRect,
    FrameInput,
    LineSegment,
    SceneStyle,
    Text,
    apply_frame_input,
    build_scene,
    event_at,
)

_TEXTURE_CACHE_LIMIT = 256


class TimelineView(Widget):
    events = ListProperty([])
    selected = ObjectProperty(None, allownone=True)
    window = ObjectProperty(None, allownone=True)
    style = ObjectProperty(SceneStyle())

    def __init__(self, **kwargs):
        self.register_event_type("on_select")
        super().__init__(**kwargs)
        self._textures: dict[str, object] = {}
        self.bind(
            pos=self.redraw,
            size=self.redraw,
            events=self.redraw,
            selected=self.redraw,
            window=self.redraw,
            style=self.redraw,
        )

    def on_select(self, event) -> None:
        pass

    def redraw(self, *_args) -> None:
        self.canvas.clear()
        if self.window is None:
            return
        commands = build_scene(
            self.window,
            self.events,
            self.width,
            self.height,
            selected=self.selected,
            style=self.style,
        )
        with self.canvas:
            for command in commands:
                self._paint(command)

    def _paint(self, command) -> None:
        # Scene space is top-left origin; Kivy's is bottom-left.
        left, top = self.x, self.top
        Color(*command.color)
        if isinstance(command, FillRect):
            Rectangle(
                pos=(left + command.x, top - command.y - command.height),
                size=(command.width, command.height),
            )
        elif isinstance(command, LineSegment):
            Line(
                points=[left + command.x1, top - command.y1, left + command.x2, top - command.y2],
                width=command.width,
            )
        elif isinstance(command, FillCircle):
            r = command.radius
            Ellipse(pos=(left + command.x - r, top - command.y - r), size=(2 * r, 2 * r))
        elif isinstance(command, Text):
            texture = self._texture(command.text)
            w, h = texture.size
            Rectangle(texture=texture, pos=(left + command.x - w / 2, top - command.y - h / 2), size=(w, h))

    def _texture(self, text: str):
        texture = self._textures.get(text)
        if texture is None:
            if len(self._textures) >= _TEXTURE_CACHE_LIMIT:
                self._textures.clear()
            label = CoreLabel(text=text, font_size=sp(12))
            label.refresh()
            texture = self._textures[text] = label.texture
        return texture

    def _frame(self, touch, **kwargs) -> FrameInput:
        return FrameInput(
            pointer_x=touch.x - self.x,
            pointer_y=self.top - touch.y,
            modifiers=frozenset(Window.modifiers),
            **kwargs,
        )

    def _apply(self, frame: FrameInput) -> None:
        if self.window is not None and apply_frame_input(self.window, frame, self.width):
            self.redraw()

    def on_touch_down(self, touch):
        if not self.collide_point(*touch.pos):
            return super().on_touch_down(touch)
        if touch.is_mouse_scrolling:
            # Kivy reports the wheel moving up as "scrolldown".
            steps = 1.0 if touch.button == "scrolldown" else -1.0
            if touch.button in ("scrollleft", "scrollright"):
                self._apply(self._frame(touch, drag_dx=120.0 if touch.button == "scrollleft" else -120.0))
            else:
                self._apply(self._frame(touch, scroll=steps))
            return True
        touch.grab(self)
        touch.ud["timeline_moved"] = False
        return True

    def on_touch_move(self, touch):
        if touch.grab_current is not self:
            return super().on_touch_move(touch)
        if touch.dx:
            touch.ud["timeline_moved"] = True
            self._apply(self._frame(touch, drag_dx=touch.dx))
        return True

    def on_touch_up(self, touch):
        if touch.grab_current is not self:
            return super().on_touch_up(touch)
        touch.ungrab(self)
        if not touch.ud.get("timeline_moved") and self.window is not None:
            event = event_at(self.window, self.events, touch.x - self.x, self.width)
            if event is not None:
                self.dispatch("on_select", event)
        return True


__all__ = ["TimelineView"]
