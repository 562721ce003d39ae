from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple
from PIL import Image, ImageDraw, ImageFont

from .errors import MeasurementError
from .fonts import AssetLocator

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]


class PillowRenderer:
    """Immediate-mode drawing surface backed by a Pillow image.

    Coordinates are screen units relative to the current offset, which
    ``with_offset`` translates for the extent of a block.
    """

    def __init__(
        self,
        size: tuple[int, int],
        background: Color = (0, 0, 0),
        assets: Optional[AssetLocator] = None,
        antialias: bool = True,
    ) -> None:
        self.size = size
        self.assets = assets or AssetLocator()
        self.image = Image.new("RGB", size, background)
        self.draw = ImageDraw.Draw(self.image)
        if not antialias:
            self.draw.fontmode = "1"
        self.offset = (0.0, 0.0)
        self._fonts: Dict[tuple[str, int], ImageFont.ImageFont] = {}
        self._images: Dict[str, Optional[Image.Image]] = {}
        self._warned: set[str] = set()

    def _warn_once(self, key: str, message: str, *args) -> None:
        if key in self._warned:
            return
        self._warned.add(key)
        logger.warning(message, *args)

    def load_font(self, font: str, size: int) -> ImageFont.ImageFont:
        key = (font, int(size))
        cached = self._fonts.get(key)
        if cached is not None:
            return cached
        path = self.assets.font(font)
        if path is None:
            self._warn_once(f"font:{font}", "Font %r not found, using the default font", font)
            loaded = ImageFont.load_default(size=max(1, int(size)))
        else:
            try:
                loaded = ImageFont.truetype(str(path), max(1, int(size)))
            except OSError as error:
                raise MeasurementError(f"Cannot load font {path}: {error}") from error
        self._fonts[key] = loaded
        return loaded

    def _load_image(self, reference: str) -> Optional[Image.Image]:
        if reference in self._images:
            return self._images[reference]
        path = self.assets.image(reference)
        loaded: Optional[Image.Image] = None
        if path is None:
            self._warn_once(f"image:{reference}", "Image %r not found", reference)
        else:
            try:
                with Image.open(path) as source:
                    loaded = source.convert("RGBA")
            except OSError as error:
                self._warn_once(f"image:{reference}", "Cannot open image %s: %s", path, error)
        self._images[reference] = loaded
        return loaded

    def _at(self, x: float, y: float) -> tuple[int, int]:
        return (int(round(x + self.offset[0])), int(round(y + self.offset[1])))

    def clear(self, color: Color) -> None:
        self.draw.rectangle([0, 0, self.size[0], self.size[1]], fill=tuple(color))

    def measure_text(self, font: str, text: str, size: int) -> tuple[float, float]:
        loaded = self.load_font(font, size)
        if not text:
            return (0.0, 0.0)
        width = self.draw.textlength(text, font=loaded)
        bbox = self.draw.textbbox((0, 0), text, font=loaded)
        return (float(width), float(bbox[3] - bbox[1]))

    def draw_text(self, font: str, text: str, x: float, y: float, size: int, color: Color) -> None:
        if not text:
            return
        try:
            loaded = self.load_font(font, size)
        except MeasurementError as error:
            self._warn_once(f"font:{font}", "Skipping text: %s", error)
            return
        self.draw.text(self._at(x, y), text, fill=tuple(color), font=loaded)

    def draw_rectangle(self, x: float, y: float, w: float, h: float, color: Color) -> None:
        if w <= 0 or h <= 0:
            return
        left, top = self._at(x, y)
        right, bottom = self._at(x + w, y + h)
        if right <= left or bottom <= top:
            return
        self.draw.rectangle([left, top, right - 1, bottom - 1], fill=tuple(color))

    def draw_image(self, image: str, x: float, y: float, w: float, h: float, opacity: float = 1.0) -> None:
        source = self._load_image(image)
        if source is None or w <= 0 or h <= 0 or opacity <= 0:
            return
        layer = source.resize((max(1, int(round(w))), max(1, int(round(h)))))
        if opacity < 1.0:
            alpha = layer.getchannel("A").point(lambda value: int(value * opacity))
            layer.putalpha(alpha)
        self.image.paste(layer, self._at(x, y), layer)

    @contextmanager
    def with_offset(self, dx: float, dy: float) -> Iterator[None]:
        previous = self.offset
        self.offset = (previous[0] + dx, previous[1] + dy)
        try:
            yield
        finally:
            self.offset = previous

    def frame(self) -> Image.Image:
        return self.image.copy()
