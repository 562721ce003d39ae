from __future__ import annotations
import logging
from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import MeasurementError

logger = logging.getLogger(__name__)


def _twelve_hour(hour: int) -> int:
    if hour == 0:
        return 12
    if hour > 12:
        return hour - 12
    return hour


def fmt_time(instant: datetime) -> str:
    return f"{_twelve_hour(instant.hour):>2}:{instant.minute:02d}"


def fmt_am_pm(instant: datetime) -> str:
    return "pm" if instant.hour >= 12 else "am"


def fmt_clock(instant: datetime) -> str:
    return f"{fmt_time(instant)}:{instant.second:02d} {fmt_am_pm(instant)}"


def resolve_timezone(name: Optional[str]) -> tzinfo:
    if not name or name == "auto":
        return datetime.now().astimezone().tzinfo or timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to local time", name)
        return datetime.now().astimezone().tzinfo or timezone.utc


class WallClock:
    """Source of the current instant, with a forced-time override for debugging."""

    def __init__(self, tz: Optional[tzinfo] = None, forced: Optional[datetime] = None) -> None:
        self.tz = tz or timezone.utc
        self.forced: Optional[datetime] = None
        if forced is not None:
            self.force(forced)

    def force(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self.tz)
        self.forced = instant
        logger.info("Clock forced to %s", instant.isoformat())

    def release(self) -> None:
        self.forced = None

    @property
    def is_forced(self) -> bool:
        return self.forced is not None

    def now(self) -> datetime:
        if self.forced is not None:
            return self.forced
        return datetime.now(self.tz)


class ClockFace:
    def __init__(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        size: int,
        font: str,
        color: tuple[int, int, int],
        background: tuple[int, int, int],
    ) -> None:
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.size = size
        self.font = font
        self.color = color
        self.background = background

    def draw(self, renderer, instant: datetime) -> None:
        text = f"{fmt_time(instant)} {fmt_am_pm(instant)}"
        with renderer.with_offset(self.x, self.y):
            renderer.draw_rectangle(0, 0, self.width, self.height, self.background)
            try:
                w, h = renderer.measure_text(self.font, text, self.size)
            except MeasurementError as error:
                logger.debug("Could not measure clock text: %s", error)
                w, h = 0.0, 0.0
            renderer.draw_text(self.font, text, (self.width - w) / 2, (self.height - h) / 2, self.size, self.color)
