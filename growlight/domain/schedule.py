from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import datetime
from .models import ScheduleConfig


def _seconds_since_midnight(now: datetime) -> int:
    return now.hour * 3600 + now.minute * 60 + now.second


def _hms(seconds: int) -> str:
    return f"{seconds // 3600:02d}:{(seconds // 60) % 60:02d}:{seconds % 60:02d}"


@dataclass(frozen=True)
class _Ramps:
    start_sec: int
    end_sec: int
    plateau_sec: int
    baseline: float
    offset_sec: float
    sunrise: float
    sunset: float

    @property
    def plateau_start(self) -> int:
        return self.start_sec + math.floor(self.sunrise)

    @property
    def plateau_end(self) -> int:
        return self.plateau_start + self.plateau_sec


def _ramps(config: ScheduleConfig) -> _Ramps:
    start_sec = config.start_hour * 3600
    end_sec = config.end_hour * 3600
    plateau_sec = config.plateau_hours * 3600
    baseline = (end_sec - start_sec - plateau_sec) / 2.0
    # Offset moves time from one ramp to the other; total ramp time is fixed
    offset_sec = float(config.plateau_offset_hours * 3600)
    return _Ramps(
        start_sec=start_sec,
        end_sec=end_sec,
        plateau_sec=plateau_sec,
        baseline=baseline,
        offset_sec=offset_sec,
        sunrise=baseline + offset_sec,
        sunset=baseline - offset_sec,
    )


def _ramp_level(config: ScheduleConfig, elapsed: float, ramp: float) -> int:
    """Brightness after ``elapsed`` seconds of a ramp lasting ``ramp`` seconds.

    A ramp with no positive duration is a jump straight to max brightness.
    """
    if ramp <= 0:
        return config.max_brightness
    fraction = elapsed / ramp
    raw = config.step_size + fraction * (config.max_brightness - config.step_size)
    # round half up, matching the lamp app
    result = math.floor(raw / config.step_size + 0.5) * config.step_size
    return max(0, min(result, config.max_brightness))


def compute_brightness(config: ScheduleConfig, now: datetime) -> int:
    """Target brightness percentage for the wall-clock time of ``now``.

    Off outside ``[start_hour, end_hour)``. Inside the window brightness ramps
    linearly up from ``step_size`` during sunrise, holds ``max_brightness`` on
    the plateau and ramps back down during sunset. Output is always a multiple
    of ``step_size`` and never above ``max_brightness``.
    """
    now_sec = _seconds_since_midnight(now)
    r = _ramps(config)

    if now_sec < r.start_sec or now_sec >= r.end_sec:
        return 0

    # Sunrise
    if now_sec < r.start_sec + r.sunrise:
        return _ramp_level(config, now_sec - r.start_sec, r.sunrise)

    # Plateau
    if r.plateau_start <= now_sec < r.plateau_end:
        return config.max_brightness

    # Sunset, counted down towards end_hour
    if now_sec < r.end_sec:
        return _ramp_level(config, r.end_sec - now_sec, r.sunset)

    return 0


@dataclass(frozen=True)
class TimingReport:
    reference: str
    baseline_ramp_s: float
    plateau_offset_s: float
    sunrise_ramp_s: float
    sunset_ramp_s: float
    sunrise_at: str
    plateau_start_at: str
    plateau_end_at: str
    sunset_at: str
    plateau_brightness: int
    brightness_now: int

    def lines(self) -> list[str]:
        return [
            f"Timing data for reference time {self.reference}:",
            f"  Baseline ramp (seconds): {self.baseline_ramp_s:.0f}",
            f"  PlateauOffset (seconds): {self.plateau_offset_s:.0f}",
            f"  Sunrise ramp duration (sec): {self.sunrise_ramp_s:.0f}",
            f"  Sunset ramp duration (sec): {self.sunset_ramp_s:.0f}",
            f"  Sunrise at: {self.sunrise_at}",
            f"  Plateau starts at: {self.plateau_start_at}",
            f"  Plateau brightness: {self.plateau_brightness}%",
            f"  Plateau ends at: {self.plateau_end_at}",
            f"  Sunset at: {self.sunset_at}",
            f"  Brightness now: {self.brightness_now}%",
        ]


def describe_timing(config: ScheduleConfig, now: datetime) -> TimingReport:
    r = _ramps(config)
    return TimingReport(
        reference=now.strftime("%H:%M:%S"),
        baseline_ramp_s=r.baseline,
        plateau_offset_s=r.offset_sec,
        sunrise_ramp_s=r.sunrise,
        sunset_ramp_s=r.sunset,
        sunrise_at=_hms(r.start_sec),
        plateau_start_at=_hms(r.plateau_start % 86400),
        plateau_end_at=_hms(r.plateau_end % 86400),
        sunset_at=_hms(r.end_sec),
        plateau_brightness=config.max_brightness,
        brightness_now=compute_brightness(config, now),
    )
