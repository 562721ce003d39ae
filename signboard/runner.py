from __future__ import annotations
import asyncio
import logging
from typing import Optional

from .perf import Perf
from .watch import JsonWatcher

logger = logging.getLogger(__name__)

REPORT_INTERVAL = 5.0


async def run(
    app,
    sink,
    fps: float = 60.0,
    watcher: Optional[JsonWatcher] = None,
    frames: Optional[int] = None,
) -> int:
    """Drive ``app.draw(dt)`` at ``fps`` and hand each frame to ``sink``.

    Reloads are polled between frames. A failing frame is logged and the
    loop carries on with the next one. Returns the number of frames run.
    """
    loop = asyncio.get_running_loop()
    period = 1.0 / fps
    perf = Perf("draw")
    count = 0
    last = loop.time() - period
    async with sink:
        while frames is None or count < frames:
            started = loop.time()
            dt = started - last
            last = started
            try:
                if watcher is not None:
                    watcher.poll()
                perf.start()
                app.draw(dt)
                perf.stop()
                await sink.show(app.renderer.frame())
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Frame %d failed", count)
            perf.report_after(REPORT_INTERVAL)
            count += 1
            await asyncio.sleep(max(0.0, period - (loop.time() - started)))
    return count
