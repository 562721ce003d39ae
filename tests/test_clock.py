from datetime import datetime, timedelta, timezone

from signboard.clock import ClockFace, WallClock, fmt_am_pm, fmt_clock, fmt_time, resolve_timezone


def at(hour, minute=0, second=0):
    return datetime(2026, 10, 18, hour, minute, second, tzinfo=timezone.utc)


def test_fmt_time_midnight_is_twelve_am():
    assert fmt_time(at(0, 5)) == "12:05"
    assert fmt_am_pm(at(0, 5)) == "am"


def test_fmt_time_pads_single_digit_hours_with_a_space():
    assert fmt_time(at(9, 7)) == " 9:07"
    assert fmt_am_pm(at(9, 7)) == "am"


def test_fmt_time_noon_and_afternoon():
    assert fmt_time(at(12, 0)) == "12:00"
    assert fmt_am_pm(at(12, 0)) == "pm"
    assert fmt_time(at(13, 30)) == " 1:30"
    assert fmt_am_pm(at(23, 59)) == "pm"


def test_fmt_clock_includes_seconds():
    assert fmt_clock(at(15, 4, 9)) == " 3:04:09 pm"
    assert fmt_clock(at(0, 0, 0)) == "12:00:00 am"


def test_wall_clock_forced_time_and_release():
    tz = timezone(timedelta(hours=-5))
    clock = WallClock(tz)
    clock.force(datetime(2026, 1, 1, 8, 30))
    assert clock.is_forced
    assert clock.now() == datetime(2026, 1, 1, 8, 30, tzinfo=tz)
    clock.release()
    assert not clock.is_forced
    assert clock.now().tzinfo is tz


def test_resolve_timezone_falls_back_for_unknown_names():
    assert resolve_timezone("auto") is not None
    assert resolve_timezone("Not/AZone") is not None


def test_clock_face_centres_time_in_its_box(renderer):
    face = ClockFace(100, 50, 200, 60, 28, "normal.ttf", (255, 255, 255), (0, 0, 0))
    face.draw(renderer, at(14, 5))
    rect = renderer.calls[0]
    assert rect == ("rect", 100, 50, 200, 60, (0, 0, 0))
    text = renderer.calls[1]
    assert text[1] == " 2:05 pm"
    width = len(" 2:05 pm") * renderer.char_width
    assert text[2] == 100 + (200 - width) / 2
    assert text[3] == 50 + (60 - renderer.height) / 2


def test_clock_face_draws_without_measurement(renderer):
    renderer.fail_measure = True
    face = ClockFace(100, 50, 200, 60, 28, "normal.ttf", (255, 255, 255), (0, 0, 0))
    face.draw(renderer, at(14, 5))
    assert renderer.texts() == [" 2:05 pm"]
    assert renderer.calls[1][2:4] == (200.0, 80.0)
