import pytest
from PIL import Image

from signboard.errors import MeasurementError
from signboard.fonts import AssetLocator
from signboard.render import PillowRenderer


@pytest.fixture
def surface(tmp_path):
    return PillowRenderer((64, 48), background=(0, 0, 0), assets=AssetLocator(tmp_path))


def test_missing_font_falls_back_to_default(surface, caplog):
    width, height = surface.measure_text("Missing-Font.ttf", "Hello", 16)
    assert width > 0
    assert height > 0
    surface.measure_text("Missing-Font.ttf", "Again", 16)
    assert caplog.text.count("not found") == 1


def test_empty_text_measures_zero(surface):
    assert surface.measure_text("any.ttf", "", 16) == (0.0, 0.0)


def test_unreadable_font_raises_measurement_error(tmp_path, surface):
    (tmp_path / "broken.ttf").write_bytes(b"not a font")
    with pytest.raises(MeasurementError):
        surface.measure_text("broken.ttf", "x", 12)
    surface.draw_text("broken.ttf", "x", 0, 0, 12, (255, 255, 255))


def test_rectangle_and_clear(surface):
    surface.clear((10, 20, 30))
    surface.draw_rectangle(4, 4, 8, 8, (255, 0, 0))
    frame = surface.frame()
    assert frame.getpixel((5, 5)) == (255, 0, 0)
    assert frame.getpixel((11, 11)) == (255, 0, 0)
    assert frame.getpixel((12, 12)) == (10, 20, 30)
    surface.draw_rectangle(0, 0, 0, 10, (0, 255, 0))
    assert surface.frame().getpixel((0, 0)) == (10, 20, 30)


def test_offsets_nest_and_restore(surface):
    with surface.with_offset(10, 5):
        with surface.with_offset(10, 5):
            surface.draw_rectangle(0, 0, 2, 2, (0, 0, 255))
        assert surface.offset == (10, 5)
    assert surface.offset == (0.0, 0.0)
    assert surface.frame().getpixel((20, 10)) == (0, 0, 255)


def test_frame_is_a_copy(surface):
    frame = surface.frame()
    surface.draw_rectangle(0, 0, 4, 4, (255, 255, 255))
    assert frame.getpixel((0, 0)) == (0, 0, 0)


def test_draw_image_scales_and_blends(tmp_path, surface):
    Image.new("RGBA", (4, 4), (255, 255, 255, 255)).save(tmp_path / "logo.png")
    surface.draw_image("logo.png", 0, 0, 10, 10)
    assert surface.frame().getpixel((9, 9)) == (255, 255, 255)
    surface.draw_image("logo.png", 20, 0, 10, 10, opacity=0.5)
    red, _, _ = surface.frame().getpixel((25, 5))
    assert 120 <= red <= 135


def test_missing_image_is_skipped(surface, caplog):
    surface.draw_image("nowhere.png", 0, 0, 10, 10)
    assert surface.frame().getpixel((0, 0)) == (0, 0, 0)
    assert "nowhere.png" in caplog.text


def test_asset_locator_matches_loose_names(tmp_path):
    fonts = tmp_path / "assets" / "fonts"
    fonts.mkdir(parents=True)
    (fonts / "Roboto-Regular.ttf").write_bytes(b"")
    locator = AssetLocator(tmp_path)
    assert locator.font("roboto regular") == fonts / "Roboto-Regular.ttf"
    assert locator.font("Roboto-Regular.ttf") == fonts / "Roboto-Regular.ttf"
    assert locator.font("Lato") is None
    assert locator.list_fonts() == ["Roboto-Regular"]
