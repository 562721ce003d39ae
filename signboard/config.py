from __future__ import annotations
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .errors import ConfigError

Color = tuple[int, int, int]


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def _merge_dict(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _merge_dict(result[key], value)
        else:
            result[key] = value
    return result


def parse_color(value: Optional[str]) -> Optional[Color]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        parts = list(value[:3])
    else:
        cleaned = str(value).replace("#", "").replace(" ", "")
        parts = cleaned.split(",") if "," in cleaned else None
    if parts is not None:
        try:
            return tuple(int(part) for part in parts)
        except (TypeError, ValueError) as error:
            raise ConfigError(f"Invalid color {value!r}") from error
    if len(cleaned) == 6:
        try:
            return tuple(int(cleaned[i:i + 2], 16) for i in (0, 2, 4))
        except ValueError:
            pass
    raise ConfigError(f"Invalid color {value!r}")


@dataclass
class DisplayConfig:
    width: int = 640
    height: int = 480
    fps: float = 60.0
    antialias_text: bool = True


@dataclass
class SlidesConfig:
    title_size: int = 64
    body_size: int = 18
    progress_height: int = 4
    items_per_page: int = 6
    page_duration: float = 5.0
    happening_now_title: str = "Happening Now"
    clock_duration: float = 0.0


@dataclass
class TickerConfig:
    enabled: bool = True
    size: int = 24
    speed: float = 100.0
    y: int = 440
    safety: int = 100


@dataclass
class ClockConfig:
    timezone: str = "auto"
    force: Optional[str] = None
    overlay: bool = False
    x: int = 440
    y: int = 380
    width: int = 180
    height: int = 48
    size: int = 28


@dataclass
class FpsConfig:
    enabled: bool = False
    x: int = 540
    y: int = 10
    size: int = 20


@dataclass
class WatchConfig:
    slides: str = "slides.json"
    ticker: str = "ticker.json"
    events: str = "events.json"
    interval: float = 0.5


@dataclass
class DeviceConfig:
    address: Optional[str] = None
    auto_reconnect: bool = True
    reconnect_delay: float = 2.0
    mtu: int = 512
    rotate: int = 0
    brightness: float = 0.85
    scan_timeout: float = 6.0
    max_retries: int = 3
    tile_width: int = 32
    tile_height: int = 32


@dataclass
class OutputConfig:
    sink: str = "file"
    path: str = "frame.png"
    frame_interval: float = 1.0


@dataclass
class Theme:
    fonts: Dict[str, str]
    colors: Dict[str, Color]
    background: Color = (0, 0, 0)
    title_size: int = 64
    body_size: int = 18


@dataclass
class AppConfig:
    display: DisplayConfig = field(default_factory=DisplayConfig)
    theme: Dict[str, Any] = field(default_factory=dict)
    slides: SlidesConfig = field(default_factory=SlidesConfig)
    ticker: TickerConfig = field(default_factory=TickerConfig)
    clock: ClockConfig = field(default_factory=ClockConfig)
    fps: FpsConfig = field(default_factory=FpsConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


DEFAULTS: Dict[str, Any] = {
    "display": {
        "resolution": [640, 480],
        "fps": 60.0,
        "antialias_text": True,
    },
    "theme": {
        "fonts": {
            "normal": "Roboto-Regular.ttf",
            "light": "Roboto-Thin.ttf",
        },
        "colors": {
            "black": "#000000",
            "white": "#FFFFFF",
            "red": "#FF0000",
            "yellow": "#FFFF00",
            "background": "#CCE6FF",
            "title": "#1A3380",
            "body": "#1A3380",
        },
    },
    "slides": {
        "title_size": 64,
        "body_size": 18,
        "progress_height": 4,
        "items_per_page": 6,
        "page_duration": 5.0,
        "happening_now_title": "Happening Now",
        "clock_duration": 0.0,
    },
    "ticker": {
        "enabled": True,
        "size": 24,
        "speed": 100.0,
        "y": 440,
        "safety": 100,
    },
    "clock": {
        "timezone": "auto",
        "force": None,
        "overlay": False,
    },
    "fps": {
        "enabled": False,
    },
    "watch": {
        "slides": "slides.json",
        "ticker": "ticker.json",
        "events": "events.json",
        "interval": 0.5,
    },
    "device": {
        "address": None,
        "auto_reconnect": True,
        "reconnect_delay": 2.0,
        "mtu": 512,
        "rotate": 0,
        "brightness": 0.85,
        "scan_timeout": 6.0,
    },
    "output": {
        "sink": "file",
        "path": "frame.png",
        "frame_interval": 1.0,
    },
}


def _build_display(data: Dict[str, Any]) -> DisplayConfig:
    resolution = data.get("resolution") or [640, 480]
    try:
        width, height = (int(value) for value in resolution)
    except (TypeError, ValueError) as error:
        raise ConfigError(f"Invalid resolution {resolution!r}") from error
    return DisplayConfig(
        width=max(1, width),
        height=max(1, height),
        fps=max(1.0, float(data.get("fps", 60.0))),
        antialias_text=bool(data.get("antialias_text", True)),
    )


def _build_slides(data: Dict[str, Any]) -> SlidesConfig:
    slides = SlidesConfig(**data)
    slides.items_per_page = max(1, int(slides.items_per_page))
    slides.page_duration = max(0.1, float(slides.page_duration))
    slides.clock_duration = max(0.0, float(slides.clock_duration))
    slides.progress_height = max(0, int(slides.progress_height))
    return slides


def _build_ticker(data: Dict[str, Any]) -> TickerConfig:
    ticker = TickerConfig(**data)
    ticker.speed = max(0.0, float(ticker.speed))
    ticker.safety = max(1, int(ticker.safety))
    ticker.size = max(1, int(ticker.size))
    return ticker


def _build_device(data: Dict[str, Any]) -> DeviceConfig:
    device = DeviceConfig(**data)
    if device.rotate not in {0, 90, 180, 270}:
        device = replace(device, rotate=0)
    device = replace(
        device,
        brightness=_clamp(float(device.brightness), 0.1, 1.0),
        scan_timeout=max(1.0, float(device.scan_timeout)),
    )
    env_address = os.getenv("SIGNBOARD_ADDRESS")
    if env_address:
        device = replace(device, address=env_address)
    return device


def _build_output(data: Dict[str, Any]) -> OutputConfig:
    output = OutputConfig(**data)
    if output.sink not in {"file", "panel"}:
        raise ConfigError(f"Unknown output sink {output.sink!r}")
    output.frame_interval = max(0.0, float(output.frame_interval))
    return output


def load_config(path: Optional[Path] = None) -> AppConfig:
    path = path or Path("config.yaml")
    overrides = _load_yaml(path)
    merged = _merge_dict(DEFAULTS, overrides)
    try:
        config = AppConfig(
            display=_build_display(merged.get("display", {})),
            theme=merged.get("theme", {}),
            slides=_build_slides(merged.get("slides", {})),
            ticker=_build_ticker(merged.get("ticker", {})),
            clock=ClockConfig(**merged.get("clock", {})),
            fps=FpsConfig(**merged.get("fps", {})),
            watch=WatchConfig(**merged.get("watch", {})),
            device=_build_device(merged.get("device", {})),
            output=_build_output(merged.get("output", {})),
        )
    except TypeError as error:
        raise ConfigError(f"Unknown option in {path}: {error}") from error
    build_theme(config)
    return config


def build_theme(config: AppConfig) -> Theme:
    data = _merge_dict(DEFAULTS["theme"], config.theme or {})
    colors = {name: parse_color(value) for name, value in data.get("colors", {}).items()}
    fonts = dict(data.get("fonts", {}))
    for required in ("normal", "light"):
        if not fonts.get(required):
            raise ConfigError(f"Theme is missing the {required!r} font")
    return Theme(
        fonts=fonts,
        colors=colors,
        background=colors.get("background", (0, 0, 0)),
        title_size=config.slides.title_size,
        body_size=config.slides.body_size,
    )
