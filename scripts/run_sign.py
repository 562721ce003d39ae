import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.append(str(project_root))

from signboard.app import SignApp
from signboard.clock import WallClock, resolve_timezone
from signboard.config import AppConfig, build_theme, load_config
from signboard.fonts import AssetLocator
from signboard.guide import parse_timestamp
from signboard.output import create_sink
from signboard.render import PillowRenderer
from signboard.runner import run
from signboard.watch import JsonWatcher


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a signage app directory.")
    parser.add_argument("app_dir", type=Path)
    parser.add_argument("--config", type=Path, help="Defaults to APP_DIR/config.yaml")
    parser.add_argument("--sink", choices=("file", "panel"))
    parser.add_argument("--address")
    parser.add_argument("--output", type=Path)
    parser.add_argument("--force-time", help="ISO timestamp the clock is frozen at")
    parser.add_argument("--frames", type=int, help="Stop after this many frames")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def build_app(config: AppConfig, app_dir: Path, force_time: Optional[str]) -> tuple[SignApp, JsonWatcher]:
    clock = WallClock(resolve_timezone(config.clock.timezone))
    forced = force_time or config.clock.force
    if forced:
        clock.force(parse_timestamp(forced))
    theme = build_theme(config)
    renderer = PillowRenderer(
        (config.display.width, config.display.height),
        theme.background,
        AssetLocator(app_dir),
        antialias=config.display.antialias_text,
    )
    watcher = JsonWatcher(app_dir, config.watch.interval)
    app = SignApp(config, renderer, clock, watcher)
    watcher.load_all()
    return app, watcher


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_config(args.config or args.app_dir / "config.yaml")
    if args.address:
        config.device = replace(config.device, address=args.address)
    if args.sink:
        config.output = replace(config.output, sink=args.sink)
    app, watcher = build_app(config, args.app_dir, args.force_time)
    sink = create_sink(config, args.output)
    try:
        asyncio.run(run(app, sink, config.display.fps, watcher, args.frames))
    except KeyboardInterrupt:
        pass
