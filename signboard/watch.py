from __future__ import annotations
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .errors import MalformedData

logger = logging.getLogger(__name__)

Callback = Callable[[Any], None]


@dataclass
class Watch:
    path: Path
    callback: Callback
    mtime: Optional[float] = None


class JsonWatcher:
    """Delivers parsed JSON files to callbacks when they change on disk.

    Nothing runs in the background: the frame driver calls ``poll`` between
    frames, so callbacks never overlap a draw or each other.
    """

    def __init__(self, root: Optional[Path] = None, interval: float = 0.5) -> None:
        self.root = Path(root) if root else Path.cwd()
        self.interval = interval
        self.watches: Dict[Path, List[Watch]] = {}
        self._last_poll: Optional[float] = None

    def watch_json(self, path: str | Path, on_change: Callback) -> Watch:
        full_path = Path(path)
        if not full_path.is_absolute():
            full_path = self.root / full_path
        watch = Watch(full_path, on_change)
        self.watches.setdefault(full_path, []).append(watch)
        return watch

    def _mtime(self, path: Path) -> Optional[float]:
        try:
            return path.stat().st_mtime
        except FileNotFoundError:
            return None

    def _deliver(self, path: Path, watches: List[Watch]) -> bool:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as error:
            logger.warning("Error reading %s: %s", path.name, error)
            return False
        delivered = True
        for watch in watches:
            try:
                watch.callback(data)
            except MalformedData as error:
                logger.warning("Rejected %s: %s", path.name, error)
                delivered = False
            except Exception:
                logger.exception("Reload handler for %s failed", path.name)
                delivered = False
        if delivered:
            logger.info("Reloaded %s", path.name)
        return delivered

    def _check(self, force: bool) -> int:
        reloaded = 0
        for path, watches in self.watches.items():
            mtime = self._mtime(path)
            if mtime is None:
                continue
            stale = [watch for watch in watches if force or watch.mtime != mtime]
            if not stale:
                continue
            # a rejected payload is not retried until the file changes again
            for watch in stale:
                watch.mtime = mtime
            if self._deliver(path, stale):
                reloaded += 1
        return reloaded

    def load_all(self) -> int:
        self._last_poll = time.monotonic()
        return self._check(force=True)

    def poll(self) -> int:
        now = time.monotonic()
        if self._last_poll is not None and now - self._last_poll < self.interval:
            return 0
        self._last_poll = now
        return self._check(force=False)
