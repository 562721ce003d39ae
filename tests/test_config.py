import pytest

from signboard.config import build_theme, load_config, parse_color
from signboard.errors import ConfigError


def write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "absent.yaml")
    assert (config.display.width, config.display.height) == (640, 480)
    assert config.slides.items_per_page == 6
    assert config.slides.page_duration == 5.0
    assert config.ticker.safety == 100
    assert config.output.sink == "file"


def test_overrides_are_merged_over_defaults(tmp_path):
    path = write(
        tmp_path,
        """
display:
  resolution: [960, 540]
ticker:
  speed: 60
theme:
  colors:
    title: "#102030"
""",
    )
    config = load_config(path)
    assert (config.display.width, config.display.height) == (960, 540)
    assert config.display.fps == 60.0
    assert config.ticker.speed == 60.0
    assert config.ticker.size == 24
    theme = build_theme(config)
    assert theme.colors["title"] == (16, 32, 48)
    assert theme.colors["white"] == (255, 255, 255)
    assert theme.fonts["normal"] == "Roboto-Regular.ttf"


def test_values_are_normalised(tmp_path):
    path = write(
        tmp_path,
        """
device:
  rotate: 45
  brightness: 3
slides:
  items_per_page: 0
ticker:
  speed: -5
  safety: 0
""",
    )
    config = load_config(path)
    assert config.device.rotate == 0
    assert config.device.brightness == 1.0
    assert config.slides.items_per_page == 1
    assert config.ticker.speed == 0.0
    assert config.ticker.safety == 1


def test_environment_overrides_panel_address(tmp_path, monkeypatch):
    monkeypatch.setenv("SIGNBOARD_ADDRESS", "AA:BB:CC:DD:EE:FF")
    config = load_config(tmp_path / "absent.yaml")
    assert config.device.address == "AA:BB:CC:DD:EE:FF"


def test_unknown_sink_and_options_are_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_config(write(tmp_path, "output:\n  sink: hdmi\n"))
    with pytest.raises(ConfigError):
        load_config(write(tmp_path, "ticker:\n  colour: red\n"))


def test_bad_theme_colour_is_an_error(tmp_path):
    with pytest.raises(ConfigError):
        load_config(write(tmp_path, "theme:\n  colors:\n    body: not-a-colour\n"))


def test_parse_color_forms():
    assert parse_color("#FF8000") == (255, 128, 0)
    assert parse_color("10, 20, 30") == (10, 20, 30)
    assert parse_color([1, 2, 3, 4]) == (1, 2, 3)
    assert parse_color(None) is None
    with pytest.raises(ConfigError):
        parse_color("#GGGGGG")


def test_parse_color_rejects_non_numeric_parts():
    with pytest.raises(ConfigError):
        parse_color("a,b,c")
    with pytest.raises(ConfigError):
        parse_color(["x", 0, 0])
    with pytest.raises(ConfigError):
        parse_color([None, 0, 0])
