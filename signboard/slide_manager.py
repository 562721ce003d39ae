from __future__ import annotations
import logging
from typing import List, Optional

from .slides import Slide

logger = logging.getLogger(__name__)


class SlideManager:
    """Cycles through slides, each shown until its time runs out.

    The first slide is activated lazily by ``draw``; ``add`` never changes
    which slide is active.
    """

    def __init__(self, theme, width: float, progress_height: float = 4) -> None:
        self.theme = theme
        self.width = width
        self.progress_height = progress_height
        self.slides: List[Slide] = []
        self.active_index = 0
        self.active_slide: Optional[Slide] = None

    def __len__(self) -> int:
        return len(self.slides)

    @property
    def is_empty(self) -> bool:
        return not self.slides

    def add(self, slide: Slide) -> None:
        self.slides.append(slide)

    def clear(self) -> None:
        self.slides = []
        self.active_index = 0
        self.active_slide = None

    def _activate(self, index: int) -> None:
        self.active_index = index
        self.active_slide = self.slides[index]
        self.active_slide.reset()
        logger.debug("Slide %d active: %r", index, self.active_slide.title)

    def draw(self, dt: float, renderer) -> None:
        if not self.slides:
            return
        if self.active_slide is None:
            self._activate(0)
        slide = self.active_slide
        slide.tick(dt)
        try:
            slide.render(renderer, self.theme)
            self._draw_progress(renderer, slide.progress)
        finally:
            # rotation proceeds even when rendering fails
            if slide.exhausted:
                self._activate((self.active_index + 1) % len(self.slides))

    def _draw_progress(self, renderer, fraction: float) -> None:
        filled = fraction * self.width
        renderer.draw_rectangle(0, 0, self.width, self.progress_height, self.theme.colors["black"])
        renderer.draw_rectangle(self.width - filled, 0, filled, self.progress_height, self.theme.colors["white"])
