import logging

import pytest

from signboard.fps import FpsCounter
from signboard.perf import Perf


def test_fps_is_exponentially_smoothed():
    counter = FpsCounter(0, 0, 20, target=60)
    assert counter.update(0.1) == pytest.approx(1.0)
    assert counter.update(0.1) == pytest.approx(1.9)
    assert counter.update(0) == pytest.approx(1.9)


def test_fps_colour_tracks_target():
    counter = FpsCounter(0, 0, 20, target=60)
    counter.value = 55
    assert counter.color_name() == "red"
    counter.value = 61
    assert counter.color_name() == "white"
    counter.value = 63
    assert counter.color_name() == "yellow"


def test_fps_draw_uses_theme_colour(renderer, theme):
    counter = FpsCounter(540, 10, 20, target=60)
    counter.draw(1 / 60, renderer, theme)
    call = renderer.calls[-1]
    assert call[1] == "FPS: 6.00"
    assert call[2:4] == (540, 10)
    assert call[5] == theme.colors["red"]


class StepTimer:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_perf_reports_and_clears(caplog):
    timer = StepTimer()
    perf = Perf("draw", timer=timer)
    for duration in (0.002, 0.004):
        perf.start()
        timer.now += duration
        perf.stop()
    assert not perf.report_after(5.0)
    timer.now = 5.0
    with caplog.at_level(logging.DEBUG, logger="signboard.perf"):
        assert perf.report_after(5.0)
    assert "runs 2, mean 3.000 ms, min 2.000 ms, max 4.000 ms" in caplog.text
    assert perf.durations == []
