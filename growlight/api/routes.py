from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import settings
from ..core.errors import LampControlError
from ..core.timeutil import now_local
from ..domain.interfaces import Lamp
from ..domain.schedule import compute_brightness, describe_timing
from ..services.scheduler import ScheduleService
from .schemas import SwitchRequest

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependency getters ---
# main.py replaces these via app.dependency_overrides.
def get_service() -> ScheduleService:  # overridden in main
    raise RuntimeError("Schedule service dependency not configured")

def get_lamp() -> Lamp:  # overridden in main
    raise RuntimeError("Lamp dependency not configured")


def _lamp_error(e: LampControlError) -> HTTPException:
    logger.warning("Lamp command failed: %s", e)
    return HTTPException(status_code=502, detail=f"{type(e).__name__}: {e}")


@router.get("/live")
async def get_live(
    svc: ScheduleService = Depends(get_service),
    lamp: Lamp = Depends(get_lamp),
):
    st = svc.reconciler.state
    now = now_local()
    return {
        "app": settings.app_name,
        "mode": settings.mode,
        "now_local": now.isoformat(),
        "target_now": compute_brightness(svc.reconciler.config, now),
        "reconciler": {
            "last_applied": st.last_applied,
            "last_target": st.last_target,
            "last_outcome": st.last_outcome,
            "last_error": st.last_error,
            "last_tick_local": st.last_tick_local.isoformat() if st.last_tick_local else None,
        },
        "lamp_id": lamp.lamp_id,
        "session": lamp.status(),
    }


@router.get("/timing")
async def get_timing(svc: ScheduleService = Depends(get_service)):
    return asdict(describe_timing(svc.reconciler.config, now_local()))


@router.post("/apply-now")
async def apply_now(svc: ScheduleService = Depends(get_service)):
    result = await svc.apply_now()
    if result.action == "FAILED":
        raise HTTPException(status_code=502, detail=result.reason)
    return {
        "ok": True,
        "action": result.action,
        "brightness": result.target,
        "reason": result.reason,
    }


@router.post("/lamp/switch")
async def switch_lamp(req: SwitchRequest, svc: ScheduleService = Depends(get_service)):
    try:
        await svc.switch(req.on)
    except LampControlError as e:
        raise _lamp_error(e)
    return {"ok": True, "on": req.on}


@router.get("/lamp")
async def get_lamp_info(lamp: Lamp = Depends(get_lamp)):
    try:
        info = await lamp.light_info()
    except LampControlError as e:
        raise _lamp_error(e)
    return asdict(info)
