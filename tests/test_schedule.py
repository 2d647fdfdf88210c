from datetime import datetime, timedelta

import pytest

from growlight.domain.models import ScheduleConfig
from growlight.domain.schedule import compute_brightness, describe_timing


@pytest.fixture
def config() -> ScheduleConfig:
    return ScheduleConfig(
        start_hour=8,
        end_hour=20,
        plateau_hours=6,
        plateau_offset_hours=-1,
        step_size=10,
        max_brightness=100,
    )


def at(hh: int, mm: int = 0, ss: int = 0) -> datetime:
    return datetime(2024, 5, 1, hh, mm, ss)


def every_minute(start: datetime, end: datetime):
    t = start
    while t < end:
        yield t
        t += timedelta(minutes=1)


def test_reference_points(config):
    assert compute_brightness(config, at(7, 59, 59)) == 0
    assert compute_brightness(config, at(8)) == 10
    assert compute_brightness(config, at(14)) == 100
    assert compute_brightness(config, at(21)) == 0


def test_off_outside_window(config):
    for t in every_minute(at(0), at(8)):
        assert compute_brightness(config, t) == 0
    for t in every_minute(at(20), at(23, 59)):
        assert compute_brightness(config, t) == 0


def test_plateau_is_max(config):
    # offset -1 shortens sunrise to 2h: plateau runs 10:00-16:00
    for t in every_minute(at(10), at(16)):
        assert compute_brightness(config, t) == 100


def test_sunrise_rises_and_sunset_falls(config):
    sunrise = [compute_brightness(config, t) for t in every_minute(at(8), at(10))]
    assert sunrise == sorted(sunrise)
    assert sunrise[0] == 10

    sunset = [compute_brightness(config, t) for t in every_minute(at(16), at(20))]
    assert sunset == sorted(sunset, reverse=True)
    assert sunset[0] == 100
    assert sunset[-1] == 10


def test_values_quantized_and_capped(config):
    for t in every_minute(at(0), at(23, 59)):
        value = compute_brightness(config, t)
        assert value % config.step_size == 0
        assert 0 <= value <= config.max_brightness


def test_coarse_step_stays_on_grid():
    cfg = ScheduleConfig(start_hour=6, end_hour=18, plateau_hours=4,
                         plateau_offset_hours=0, step_size=15, max_brightness=90)
    for t in every_minute(at(6), at(18)):
        value = compute_brightness(cfg, t)
        assert value % 15 == 0
        assert 15 <= value <= 90
    assert compute_brightness(cfg, at(12)) == 90


def test_idempotent(config):
    t = at(9, 17, 23)
    assert compute_brightness(config, t) == compute_brightness(config, t)


def test_positive_offset_lengthens_sunrise():
    cfg = ScheduleConfig(start_hour=8, end_hour=20, plateau_hours=6,
                         plateau_offset_hours=1, step_size=10, max_brightness=100)
    # sunrise is 4h, so 10:00 is still half way up
    assert compute_brightness(cfg, at(10)) == 60
    assert compute_brightness(cfg, at(12)) == 100
    assert compute_brightness(cfg, at(18)) == 100
    assert compute_brightness(cfg, at(19)) == 60


def test_zero_sunrise_ramp_jumps_to_max():
    cfg = ScheduleConfig(start_hour=8, end_hour=14, plateau_hours=2,
                         plateau_offset_hours=-2, step_size=10, max_brightness=100)
    assert compute_brightness(cfg, at(7, 59, 59)) == 0
    assert compute_brightness(cfg, at(8)) == 100
    assert compute_brightness(cfg, at(9, 59)) == 100
    assert compute_brightness(cfg, at(13)) == 30


def test_negative_ramp_never_raises():
    cfg = ScheduleConfig(start_hour=8, end_hour=14, plateau_hours=2,
                         plateau_offset_hours=-3, step_size=5, max_brightness=50)
    for t in every_minute(at(0), at(23, 59)):
        value = compute_brightness(cfg, t)
        assert value % 5 == 0
        assert 0 <= value <= 50
    assert compute_brightness(cfg, at(8)) == 50

    cfg = ScheduleConfig(start_hour=8, end_hour=14, plateau_hours=2,
                         plateau_offset_hours=5, step_size=5, max_brightness=50)
    for t in every_minute(at(0), at(23, 59)):
        assert 0 <= compute_brightness(cfg, t) <= 50


def test_describe_timing(config):
    report = describe_timing(config, at(14))
    assert report.baseline_ramp_s == 10800
    assert report.plateau_offset_s == -3600
    assert report.sunrise_ramp_s == 7200
    assert report.sunset_ramp_s == 14400
    assert report.sunrise_at == "08:00:00"
    assert report.plateau_start_at == "10:00:00"
    assert report.plateau_end_at == "16:00:00"
    assert report.sunset_at == "20:00:00"
    assert report.brightness_now == 100
    assert "  Plateau brightness: 100%" in report.lines()
