from __future__ import annotations


class FpsCounter:
    """Smoothed frame rate readout, coloured by distance from the target rate."""

    smoothing = 0.1
    tolerance = 2.0

    def __init__(self, x: float, y: float, size: int, target: float = 60.0) -> None:
        self.x = x
        self.y = y
        self.size = size
        self.target = target
        self.value = 0.0

    def update(self, dt: float) -> float:
        if dt <= 0:
            return self.value
        self.value = self.smoothing * (1 / dt) + (1 - self.smoothing) * self.value
        return self.value

    def color_name(self) -> str:
        if self.value < self.target - self.tolerance:
            return "red"
        if self.value > self.target + self.tolerance:
            return "yellow"
        return "white"

    def draw(self, dt: float, renderer, theme) -> None:
        self.update(dt)
        color = theme.colors.get(self.color_name(), theme.colors["white"])
        renderer.draw_text(theme.fonts["normal"], f"FPS: {self.value:.2f}", self.x, self.y, self.size, color)
