from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
from .interfaces import Lamp
from .models import ScheduleConfig, TickResult
from .schedule import compute_brightness
from ..core.errors import LampControlError

logger = logging.getLogger(__name__)


@dataclass
class ReconcilerState:
    # None until a brightness has been confirmed by the lamp
    last_applied: Optional[int] = None
    last_target: Optional[int] = None
    last_outcome: Optional[str] = None
    last_error: Optional[str] = None
    last_tick_local: Optional[datetime] = None


def _describe(level: int, verb: str = "") -> str:
    lamp = f"Lamp {verb}" if verb else "Lamp"
    if level == 0:
        return f"{lamp} OFF"
    return f"{lamp} ON at {level}% brightness"


class Reconciler:
    """Pushes the scheduled brightness to the lamp, once per change."""

    def __init__(
        self,
        config: ScheduleConfig,
        lamp: Lamp,
        notify: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.config = config
        self._lamp = lamp
        self._notify = notify or logger.info
        self.state = ReconcilerState()

    async def tick(self, now: datetime, force: bool = False) -> TickResult:
        target = compute_brightness(self.config, now)
        last = self.state.last_applied
        self.state.last_target = target
        self.state.last_tick_local = now

        if not force and last is not None and target == last:
            self._notify(_describe(target, "remains"))
            self.state.last_outcome = "REMAINS"
            return TickResult("REMAINS", target, last, "No change", now)

        self._notify(f"Setting lamp to {target}% brightness")
        try:
            await self._lamp.apply_brightness(target)
        except LampControlError as e:
            self.state.last_outcome = "FAILED"
            self.state.last_error = f"{type(e).__name__}: {e}"
            self._notify(f"Failed to set brightness to {target}%: {self.state.last_error}")
            return TickResult("FAILED", target, last, self.state.last_error, now)

        self.state.last_applied = target
        self.state.last_outcome = "APPLIED"
        self.state.last_error = None
        self._notify(f"Status: {_describe(target)}")
        reason = "Forced" if force else ("Initial sync" if last is None else f"Changed from {last}%")
        return TickResult("APPLIED", target, target, reason, now)
