from __future__ import annotations
import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Optional
from PIL import Image

from .config import AppConfig
from .display_session import BleDisplaySession

logger = logging.getLogger(__name__)


class FileSink:
    """Writes the most recent frame to a PNG, at most once per ``interval``."""

    def __init__(self, path: Path, interval: float = 1.0, timer: Callable[[], float] = time.monotonic) -> None:
        self.path = Path(path)
        self.interval = interval
        self.timer = timer
        self.last_write: Optional[float] = None
        self.written = 0

    async def __aenter__(self) -> "FileSink":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def show(self, frame: Image.Image) -> bool:
        now = self.timer()
        if self.last_write is not None and now - self.last_write < self.interval:
            return False
        self.last_write = now
        frame.save(self.path, format="PNG")
        self.written += 1
        return True


class PanelSink:
    """Pushes frames to a BLE LED panel, dropping frames while one is in flight."""

    def __init__(self, session: BleDisplaySession, tile_size: tuple[int, int], delay: float = 0.1) -> None:
        self.session = session
        self.tile_size = tile_size
        self.delay = delay
        self._pending: Optional[asyncio.Task] = None
        self.dropped = 0

    @classmethod
    def from_config(cls, config: AppConfig) -> "PanelSink":
        device = config.device
        return cls(BleDisplaySession.from_config(device), (device.tile_width, device.tile_height))

    async def __aenter__(self) -> "PanelSink":
        await self.session.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
            try:
                await self._pending
            except asyncio.CancelledError:
                pass
        await self.session.close()

    def _finished(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Panel transfer failed: %s", error)

    async def show(self, frame: Image.Image) -> bool:
        if self._pending is not None and not self._pending.done():
            self.dropped += 1
            return False
        scaled = frame.resize(self.tile_size, Image.Resampling.LANCZOS)
        self._pending = asyncio.create_task(self.session.send_image(scaled, self.delay))
        self._pending.add_done_callback(self._finished)
        return True


def create_sink(config: AppConfig, path: Optional[Path] = None):
    if config.output.sink == "panel":
        return PanelSink.from_config(config)
    return FileSink(path or Path(config.output.path), config.output.frame_interval)
