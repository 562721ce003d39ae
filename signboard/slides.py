from __future__ import annotations
import logging
import math
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from .clock import ClockFace, WallClock, fmt_am_pm, fmt_time
from .errors import MeasurementError
from .guide import Event

logger = logging.getLogger(__name__)

TITLE_POSITION = (20, 24)
BODY_POSITION = (20, 96)
DEFAULT_IMAGE_BOX = (400, 100, 200, 200)


class Slide(ABC):
    """A unit of content shown for ``duration`` seconds in the rotation."""

    title: str = ""
    duration: float = 0.0
    time_remaining: float = 0.0

    def reset(self) -> None:
        self.time_remaining = self.duration

    def tick(self, dt: float) -> float:
        self.time_remaining -= dt
        return self.time_remaining

    @property
    def exhausted(self) -> bool:
        return self.time_remaining < 0

    @property
    def progress(self) -> float:
        if self.duration <= 0:
            return 0.0
        return max(0.0, min(1.0, self.time_remaining / self.duration))

    @abstractmethod
    def render(self, renderer, theme) -> None:
        ...

    def _render_title(self, renderer, theme) -> None:
        x, y = TITLE_POSITION
        renderer.draw_text(theme.fonts["light"], self.title, x, y, theme.title_size, theme.colors["title"])


class TextSlide(Slide):
    def __init__(
        self,
        title: str,
        body: str,
        duration: float,
        image: Optional[str] = None,
        image_box: Sequence[float] = DEFAULT_IMAGE_BOX,
        image_opacity: float = 1.0,
    ) -> None:
        self.title = title
        self.body = body
        self.duration = duration
        self.image = image
        self.image_box = tuple(image_box)
        self.image_opacity = image_opacity
        self.reset()

    def render(self, renderer, theme) -> None:
        self._render_title(renderer, theme)
        x, y = BODY_POSITION
        renderer.draw_text(theme.fonts["normal"], self.body, x, y, theme.body_size, theme.colors["body"])
        if self.image:
            ix, iy, iw, ih = self.image_box
            renderer.draw_image(self.image, ix, iy, iw, ih, self.image_opacity)


class EventSlide(Slide):
    """Paginated list of events, ``items_per_page`` rows at a time.

    The slide lasts ``num_pages * page_duration`` seconds. When ``source`` is
    given the items are pulled from it on every reset, so a "Happening Now"
    slide shows the events running at the moment it becomes active.
    """

    row_origin = 100
    row_height = 60

    def __init__(
        self,
        title: str,
        items_per_page: int = 6,
        page_duration: float = 5.0,
        source: Optional[Callable[[], Sequence[Event]]] = None,
        tz=None,
    ) -> None:
        if items_per_page < 1:
            raise ValueError("items_per_page must be at least 1")
        self.title = title
        self.items_per_page = items_per_page
        self.page_duration = page_duration
        self.source = source
        self.tz = tz
        self._items: List[Event] = []
        self.items: List[Event] = []
        self.reset()

    def set_items(self, items: Sequence[Event]) -> None:
        self._items = list(items)
        self.reset()

    def reset(self) -> None:
        if self.source is not None:
            self._items = list(self.source())
        self.items = list(self._items)
        self.num_pages = math.ceil(len(self.items) / self.items_per_page)
        self.duration = self.num_pages * self.page_duration
        self.time_remaining = self.duration
        self.active_page = 0
        self.page_time_remaining = self.page_duration

    def tick(self, dt: float) -> float:
        self.time_remaining -= dt
        self.page_time_remaining -= dt
        if self.page_time_remaining <= 0:
            self.active_page = min(self.active_page + 1, max(0, self.num_pages - 1))
            self.page_time_remaining = self.page_duration
        return self.time_remaining

    def page_items(self) -> List[Event]:
        first = self.active_page * self.items_per_page
        return self.items[first:first + self.items_per_page]

    def render(self, renderer, theme) -> None:
        self._render_title(renderer, theme)
        normal = theme.fonts["normal"]
        colors = theme.colors
        for i, event in enumerate(self.page_items()):
            start = event.start.astimezone(self.tz)
            with renderer.with_offset(0, self.row_origin + i * self.row_height):
                renderer.draw_rectangle(15, 0, 70, 55, colors["body"])
                time_text = fmt_time(start)
                try:
                    w, _ = renderer.measure_text(normal, time_text, 28)
                except MeasurementError as error:
                    logger.debug("Could not measure %r: %s", time_text, error)
                    w = 60
                renderer.draw_text(normal, time_text, 20 + (60 - w), 4, 28, colors["white"])
                renderer.draw_text(normal, fmt_am_pm(start), 50, 28, 24, colors["white"])
                renderer.draw_text(normal, event.name, 90, 0, 36, colors["body"])
                renderer.draw_text(normal, event.location, 90, 30, 24, colors["body"])


class ClockSlide(Slide):
    def __init__(self, duration: float, clock: WallClock, face: ClockFace, title: str = "") -> None:
        self.title = title
        self.duration = duration
        self.clock = clock
        self.face = face
        self.reset()

    def render(self, renderer, theme) -> None:
        if self.title:
            self._render_title(renderer, theme)
        self.face.draw(renderer, self.clock.now().astimezone(self.clock.tz))
