from __future__ import annotations
from typing import Any, Protocol, runtime_checkable
from .models import LightInfo


@runtime_checkable
class Lamp(Protocol):
    lamp_id: str

    async def apply_brightness(self, level: int) -> None:
        ...

    async def toggle_switch(self, is_on: bool) -> None:
        ...

    async def light_info(self) -> LightInfo:
        ...

    def status(self) -> dict[str, Any]:
        ...
