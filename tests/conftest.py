from contextlib import contextmanager
from datetime import datetime, timezone

import pytest

from signboard.clock import WallClock
from signboard.config import AppConfig, Theme
from signboard.errors import MeasurementError


class FakeRenderer:
    """Records draw calls and measures text as ``len(text) * char_width``."""

    def __init__(self, char_width=8.0, height=20.0, widths=None):
        self.char_width = char_width
        self.height = height
        self.widths = dict(widths or {})
        self.fail_measure = False
        self.calls = []
        self.measured = []
        self.offset = (0.0, 0.0)

    def clear(self, color):
        self.calls.append(("clear", color))

    def draw_text(self, font, text, x, y, size, color):
        self.calls.append(("text", text, x + self.offset[0], y + self.offset[1], size, color))

    def draw_rectangle(self, x, y, w, h, color):
        self.calls.append(("rect", x + self.offset[0], y + self.offset[1], w, h, color))

    def draw_image(self, image, x, y, w, h, opacity=1.0):
        self.calls.append(("image", image, x + self.offset[0], y + self.offset[1], w, h, opacity))

    def measure_text(self, font, text, size):
        if self.fail_measure:
            raise MeasurementError("no font")
        self.measured.append(text)
        return (self.widths.get(text, len(text) * self.char_width), self.height)

    @contextmanager
    def with_offset(self, dx, dy):
        previous = self.offset
        self.offset = (previous[0] + dx, previous[1] + dy)
        try:
            yield
        finally:
            self.offset = previous

    def frame(self):
        return "frame"

    def texts(self):
        return [call[1] for call in self.calls if call[0] == "text"]

    def rects(self):
        return [call for call in self.calls if call[0] == "rect"]

    def reset(self):
        self.calls.clear()
        self.measured.clear()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def theme():
    return Theme(
        fonts={"normal": "normal.ttf", "light": "light.ttf"},
        colors={
            "black": (0, 0, 0),
            "white": (255, 255, 255),
            "red": (255, 0, 0),
            "yellow": (255, 255, 0),
            "background": (200, 220, 255),
            "title": (20, 40, 120),
            "body": (30, 50, 130),
        },
        background=(200, 220, 255),
        title_size=64,
        body_size=18,
    )


@pytest.fixture
def config():
    return AppConfig()


@pytest.fixture
def noon():
    return datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(noon):
    return WallClock(timezone.utc, forced=noon)
