from __future__ import annotations
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, List, Optional

from .errors import MalformedData, MeasurementError

logger = logging.getLogger(__name__)

DEFAULT_SAFETY = 100


@dataclass
class TickerItem:
    text: str
    x: float
    width: float
    height: float

    @property
    def end_x(self) -> float:
        return self.x + self.width


class Ticker:
    """Endless right-to-left marquee fed from a cyclic message list.

    Items are kept oldest (leftmost) first. Every frame the queue is topped
    up until its trailing edge reaches ``width``.
    """

    def __init__(
        self,
        width: float,
        y: float,
        size: int,
        speed: float,
        font: str,
        color: tuple[int, int, int],
        safety: int = DEFAULT_SAFETY,
    ) -> None:
        self.width = width
        self.y = y
        self.size = size
        self.speed = speed
        self.font = font
        self.color = color
        self.safety = safety
        self.messages: List[str] = []
        self.next_message_id = 0
        self.items: Deque[TickerItem] = deque()

    @classmethod
    def from_config(cls, config, theme) -> "Ticker":
        return cls(
            width=config.display.width,
            y=config.ticker.y,
            size=config.ticker.size,
            speed=config.ticker.speed,
            font=theme.fonts["normal"],
            color=theme.colors["body"],
            safety=config.ticker.safety,
        )

    def set_messages(self, messages: Any) -> None:
        if not isinstance(messages, list) or not all(isinstance(m, str) for m in messages):
            raise MalformedData("Ticker messages must be a list of strings")
        # queued items and next_message_id survive a reload
        self.messages = list(messages)
        logger.info("Ticker loaded %d messages", len(self.messages))

    def on_reload(self, data: Any) -> None:
        if not isinstance(data, dict) or "messages" not in data:
            raise MalformedData("Ticker data has no 'messages' list")
        self.set_messages(data["messages"])

    @property
    def end_x(self) -> float:
        return self.items[-1].end_x if self.items else 0.0

    def draw(self, dt: float, renderer) -> None:
        dx = dt * self.speed
        for item in self.items:
            renderer.draw_text(self.font, item.text, item.x, self.y, self.size, self.color)
            item.x -= dx
        while self.items and self.items[0].end_x < 0:
            self.items.popleft()
        self._replenish(renderer)

    def _replenish(self, renderer) -> int:
        if not self.messages:
            return 0
        end_x = self.end_x
        inserted = 0
        while end_x < self.width and inserted < self.safety:
            if self.next_message_id >= len(self.messages):
                self.next_message_id %= len(self.messages)
            text = self.messages[self.next_message_id]
            try:
                width, height = renderer.measure_text(self.font, text, self.size)
            except MeasurementError as error:
                logger.warning("Could not measure ticker text %r: %s", text, error)
                break
            item = TickerItem(text=text, x=end_x, width=max(0.0, float(width)), height=float(height))
            self.next_message_id = (self.next_message_id + 1) % len(self.messages)
            self.items.append(item)
            end_x = item.end_x
            inserted += 1
        if end_x < self.width and inserted >= self.safety:
            logger.debug("Ticker hit its insertion limit of %d this frame", self.safety)
        return inserted
