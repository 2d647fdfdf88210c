from __future__ import annotations
import logging
from typing import Any
from ..domain.models import LightInfo

logger = logging.getLogger(__name__)


class SimulatedLamp:
    lamp_id = "lamp_sim_01"

    def __init__(self) -> None:
        self.brightness = 0
        self.is_on = False
        self.commands: list[tuple[str, int | bool]] = []

    async def apply_brightness(self, level: int) -> None:
        self.brightness = int(level)
        self.is_on = self.brightness > 0
        self.commands.append(("brightness", self.brightness))
        logger.info("LAMP brightness=%s%%", self.brightness)

    async def toggle_switch(self, is_on: bool) -> None:
        self.is_on = bool(is_on)
        self.commands.append(("switch", self.is_on))
        logger.info("LAMP switch=%s", "on" if self.is_on else "off")

    async def light_info(self) -> LightInfo:
        return LightInfo(
            device_id=self.lamp_id,
            group_id="",
            device_name="Simulated lamp",
            light_rate=self.brightness,
            is_close=not self.is_on,
        )

    def status(self) -> dict[str, Any]:
        return {
            "authenticated": True,
            "token_age_s": None,
            "device_id": self.lamp_id,
            "group_id": None,
            "brightness": self.brightness,
            "is_on": self.is_on,
        }
