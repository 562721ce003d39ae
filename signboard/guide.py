from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable, List

from .errors import MalformedData

logger = logging.getLogger(__name__)

_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_timestamp(text: Any) -> datetime:
    if not isinstance(text, str):
        raise MalformedData(f"Timestamp must be a string, got {type(text).__name__}")
    cleaned = text.strip()
    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"
    cleaned = _COMPACT_OFFSET.sub(r"\1:\2", cleaned)
    try:
        instant = datetime.fromisoformat(cleaned)
    except ValueError as error:
        raise MalformedData(f"Invalid timestamp {text!r}") from error
    if instant.tzinfo is None:
        instant = instant.astimezone()
    return instant


@dataclass(frozen=True)
class Event:
    name: str
    location: str
    start: datetime
    finish: datetime

    @property
    def duration(self) -> timedelta:
        return self.finish - self.start

    @property
    def duration_hours(self) -> float:
        return self.duration.total_seconds() / 3600

    def is_running(self, instant: datetime) -> bool:
        return self.start <= instant < self.finish


def _build_event(item: Any) -> Event:
    if not isinstance(item, dict):
        raise MalformedData(f"Event entry must be an object, got {type(item).__name__}")
    try:
        name = item["name"]
        start = parse_timestamp(item["start"])
        finish = parse_timestamp(item["finish"])
    except KeyError as error:
        raise MalformedData(f"Event entry is missing {error.args[0]!r}") from error
    location = item.get("location", "")
    if not isinstance(name, str) or not isinstance(location, str):
        raise MalformedData("Event name and location must be strings")
    if finish <= start:
        raise MalformedData(f"Event {name!r} finishes before it starts")
    return Event(name=name, location=location, start=start, finish=finish)


class EventGuide:
    def __init__(self) -> None:
        self.events: List[Event] = []

    def __len__(self) -> int:
        return len(self.events)

    def update(self, raw_items: Iterable[Any]) -> None:
        if not isinstance(raw_items, (list, tuple)):
            raise MalformedData(f"Events must be a list, got {type(raw_items).__name__}")
        events = [_build_event(item) for item in raw_items]
        events.sort(key=lambda event: event.start)
        self.events = events
        logger.info("Guide loaded %d events", len(events))

    def on_reload(self, data: Any) -> None:
        if isinstance(data, dict):
            if "events" not in data:
                raise MalformedData("Guide data has no 'events' list")
            data = data["events"]
        self.update(data)

    def running(self, instant: datetime) -> List[Event]:
        result: List[Event] = []
        for event in self.events:
            if event.start > instant:
                break
            if instant < event.finish:
                result.append(event)
        return result
