from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import settings
from .errors import ConfigInvalid


def lamp_zone(name: str | None = None) -> ZoneInfo:
    """Zone the schedule hours are read in; defaults to ``settings.timezone``."""
    key = name or settings.timezone
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigInvalid(f"Unknown timezone {key!r}") from e


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_local() -> datetime:
    return now_utc().astimezone(lamp_zone())
