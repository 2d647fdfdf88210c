from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ScheduleConfig:
    start_hour: int
    end_hour: int
    plateau_hours: int
    plateau_offset_hours: int
    step_size: int
    max_brightness: int


@dataclass(frozen=True)
class AccountConfig:
    email: str
    password: str
    wifi_name: str = ""
    timezone: str = ""
    language: str = "English"


@dataclass(frozen=True)
class LightInfo:
    device_id: str
    group_id: str
    device_name: Optional[str] = None
    light_rate: Optional[int] = None
    is_close: Optional[bool] = None
    device_image: Optional[str] = None


@dataclass(frozen=True)
class TickResult:
    action: str  # "APPLIED" | "REMAINS" | "FAILED"
    target: int
    last_applied: Optional[int]
    reason: str
    ts_local: datetime
