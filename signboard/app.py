from __future__ import annotations
import logging
from typing import Any, List, Optional

from .clock import ClockFace, WallClock
from .config import AppConfig, build_theme
from .errors import MalformedData
from .fps import FpsCounter
from .guide import EventGuide
from .slide_manager import SlideManager
from .slides import ClockSlide, DEFAULT_IMAGE_BOX, EventSlide, Slide, TextSlide
from .ticker import Ticker
from .watch import JsonWatcher

logger = logging.getLogger(__name__)


def _positive_number(entry: dict, key: str, default: Optional[float] = None) -> float:
    value = entry.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise MalformedData(f"Slide {key} must be a positive number, got {value!r}")
    return float(value)


def _string(entry: dict, key: str, default: str = "") -> str:
    value = entry.get(key, default)
    if not isinstance(value, str):
        raise MalformedData(f"Slide {key} must be a string, got {type(value).__name__}")
    return value


class SignApp:
    """A signage screen: rotating slides, a ticker and optional overlays.

    Data arrives through the ``on_*`` reload handlers; ``draw`` is called
    once per frame by the runner.
    """

    def __init__(
        self,
        config: AppConfig,
        renderer,
        clock: WallClock,
        watcher: Optional[JsonWatcher] = None,
    ) -> None:
        self.config = config
        self.renderer = renderer
        self.clock = clock
        self.theme = build_theme(config)
        self.guide = EventGuide()
        self.slides = SlideManager(self.theme, config.display.width, config.slides.progress_height)
        self.ticker: Optional[Ticker] = Ticker.from_config(config, self.theme) if config.ticker.enabled else None
        self.fps: Optional[FpsCounter] = None
        if config.fps.enabled:
            self.fps = FpsCounter(config.fps.x, config.fps.y, config.fps.size, target=config.display.fps)
        self.clock_face = ClockFace(
            config.clock.x,
            config.clock.y,
            config.clock.width,
            config.clock.height,
            config.clock.size,
            self.theme.fonts["normal"],
            self.theme.colors["white"],
            self.theme.colors["body"],
        )
        if watcher is not None:
            self.register(watcher)

    def register(self, watcher: JsonWatcher) -> None:
        watcher.watch_json(self.config.watch.slides, self.on_slides)
        watcher.watch_json(self.config.watch.events, self.on_events)
        if self.ticker is not None:
            watcher.watch_json(self.config.watch.ticker, self.on_ticker)

    def happening_now(self):
        return self.guide.running(self.clock.now())

    def build_slide(self, entry: Any) -> Slide:
        if not isinstance(entry, dict):
            raise MalformedData(f"Slide entry must be an object, got {type(entry).__name__}")
        kind = entry.get("type", "text")
        settings = self.config.slides
        if kind == "text":
            image = entry.get("image")
            if image is not None and not isinstance(image, str):
                raise MalformedData("Slide image must be a path string")
            image_box = entry.get("image_box", DEFAULT_IMAGE_BOX)
            if (
                not isinstance(image_box, (list, tuple))
                or len(image_box) != 4
                or any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in image_box)
            ):
                raise MalformedData("Slide image_box must be [x, y, w, h] numbers")
            return TextSlide(
                _string(entry, "title"),
                _string(entry, "body"),
                _positive_number(entry, "duration"),
                image=image,
                image_box=image_box,
                image_opacity=_positive_number(entry, "opacity", 1.0),
            )
        if kind == "events":
            per_page = entry.get("items_per_page", settings.items_per_page)
            if isinstance(per_page, bool) or not isinstance(per_page, int) or per_page < 1:
                raise MalformedData("items_per_page must be a positive integer")
            return EventSlide(
                _string(entry, "title", settings.happening_now_title),
                items_per_page=per_page,
                page_duration=_positive_number(entry, "page_duration", settings.page_duration),
                source=self.happening_now,
                tz=self.clock.tz,
            )
        if kind == "clock":
            return ClockSlide(
                _positive_number(entry, "duration"),
                self.clock,
                self.clock_face,
                title=_string(entry, "title"),
            )
        raise MalformedData(f"Unknown slide type {kind!r}")

    def on_slides(self, data: Any) -> None:
        if isinstance(data, dict):
            data = data.get("slides")
        if not isinstance(data, list):
            raise MalformedData("Slides data must be a list")
        built: List[Slide] = [self.build_slide(entry) for entry in data]
        if self.config.slides.clock_duration > 0:
            built.append(ClockSlide(self.config.slides.clock_duration, self.clock, self.clock_face))
        self.slides.clear()
        for slide in built:
            self.slides.add(slide)
        logger.info("Slide list rebuilt with %d slides", len(built))

    def on_ticker(self, data: Any) -> None:
        if self.ticker is not None:
            self.ticker.on_reload(data)

    def on_events(self, data: Any) -> None:
        self.guide.on_reload(data)

    def draw(self, dt: float) -> None:
        renderer = self.renderer
        renderer.clear(self.theme.background)
        self.slides.draw(dt, renderer)
        if self.ticker is not None:
            self.ticker.draw(dt, renderer)
        if self.config.clock.overlay:
            self.clock_face.draw(renderer, self.clock.now().astimezone(self.clock.tz))
        if self.fps is not None:
            self.fps.draw(dt, renderer, self.theme)
