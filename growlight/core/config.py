from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigInvalid
from ..domain.models import AccountConfig, ScheduleConfig


# Brightness is set by the lamp in 5% increments
BRIGHTNESS_QUANTUM = 5


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Growlight Scheduler"
    timezone: str = "Europe/Berlin"

    # "sim" for development, "cloud" drives the real lamp
    mode: str = Field(default="sim")

    # Reconcile loop
    tick_seconds: int = 60

    # Cloud API
    api_base_url: str = "https://api.lgledsolutions.com/api/android"
    request_timeout_seconds: float = 10.0
    token_ttl_seconds: int = 300

    # Config files
    timer_config_path: str = "timer.json"
    account_config_path: str = "account.json"

    log_file: str = "growlight.log"
    log_level: str = "INFO"


settings = Settings()


class TimerFile(BaseModel):
    """On-disk schedule, keyed the way the lamp app exports it."""

    model_config = ConfigDict(populate_by_name=True)

    start_hour: int = Field(alias="StartHour", ge=0, le=23)
    plateau_hours: int = Field(alias="PlateauHour", ge=0)
    end_hour: int = Field(alias="EndHour", ge=0, le=23)
    step_size: int = Field(alias="StepSize", gt=0)
    plateau_offset_hours: int = Field(default=0, alias="PlateauOffset")
    max_brightness: int = Field(alias="Brightness", gt=0, le=100)

    @field_validator("step_size")
    @classmethod
    def _step_is_quantized(cls, v: int) -> int:
        if v % BRIGHTNESS_QUANTUM != 0:
            raise ValueError(f"StepSize must be a multiple of {BRIGHTNESS_QUANTUM}")
        return v

    @model_validator(mode="after")
    def _window_fits_plateau(self) -> "TimerFile":
        if self.end_hour <= self.start_hour + self.plateau_hours:
            raise ValueError("EndHour must be greater than StartHour + PlateauHour")
        return self

    @model_validator(mode="after")
    def _brightness_on_step_grid(self) -> "TimerFile":
        if self.max_brightness % self.step_size != 0:
            raise ValueError("Brightness must be a multiple of StepSize")
        return self

    def to_domain(self) -> ScheduleConfig:
        return ScheduleConfig(
            start_hour=self.start_hour,
            end_hour=self.end_hour,
            plateau_hours=self.plateau_hours,
            plateau_offset_hours=self.plateau_offset_hours,
            step_size=self.step_size,
            max_brightness=self.max_brightness,
        )


class AccountFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(alias="Email", min_length=1)
    password: str = Field(alias="Password", min_length=1)
    wifi_name: str = Field(default="", alias="Wifiname")
    timezone: str = Field(default="", alias="Timezone")
    language: str = Field(default="English", alias="Language")

    def to_domain(self) -> AccountConfig:
        return AccountConfig(
            email=self.email,
            password=self.password,
            wifi_name=self.wifi_name,
            timezone=self.timezone,
            language=self.language,
        )


def _read_json(path: str | Path) -> dict:
    p = Path(path)
    try:
        return json.loads(p.read_text())
    except OSError as e:
        raise ConfigInvalid(f"Cannot read {p}: {e}") from e
    except ValueError as e:
        raise ConfigInvalid(f"Invalid JSON in {p}: {e}") from e


def load_schedule_config(path: str | Path) -> ScheduleConfig:
    data = _read_json(path)
    try:
        return TimerFile.model_validate(data).to_domain()
    except ValidationError as e:
        raise ConfigInvalid(f"Invalid schedule config {path}: {e}") from e


def save_schedule_config(path: str | Path, config: ScheduleConfig) -> None:
    data = TimerFile(
        start_hour=config.start_hour,
        plateau_hours=config.plateau_hours,
        end_hour=config.end_hour,
        step_size=config.step_size,
        plateau_offset_hours=config.plateau_offset_hours,
        max_brightness=config.max_brightness,
    ).model_dump(by_alias=True)
    Path(path).write_text(json.dumps(data, indent=2) + "\n")


def load_account_config(path: str | Path) -> AccountConfig:
    data = _read_json(path)
    try:
        return AccountFile.model_validate(data).to_domain()
    except ValidationError as e:
        raise ConfigInvalid(f"Invalid account config {path}: {e}") from e
