from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI

from .core.config import load_account_config, load_schedule_config, settings
from .core.log import configure_logging
from .core.timeutil import lamp_zone

from .api.routes import router as api_router
import growlight.api.routes as routes_module

from .domain.interfaces import Lamp
from .domain.reconciler import Reconciler
from .drivers.cloud_lamp import CloudLamp
from .drivers.lamp_sim import SimulatedLamp
from .services.scheduler import ScheduleService


logger = logging.getLogger(__name__)


lamp: Lamp | None = None
service: ScheduleService | None = None


def build_lamp() -> Lamp:
    if settings.mode.lower() == "cloud":
        account = load_account_config(settings.account_config_path)
        return CloudLamp(
            account,
            base_url=settings.api_base_url,
            timeout=settings.request_timeout_seconds,
            token_ttl=timedelta(seconds=settings.token_ttl_seconds),
        )

    # default to sim
    return SimulatedLamp()


def get_service() -> ScheduleService:
    assert service is not None
    return service


def get_lamp() -> Lamp:
    assert lamp is not None
    return lamp


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Starting %s (mode=%s)", settings.app_name, settings.mode)

    global lamp, service
    # ConfigInvalid here aborts startup
    lamp_zone()
    config = load_schedule_config(settings.timer_config_path)
    lamp = build_lamp()
    service = ScheduleService(
        reconciler=Reconciler(config, lamp),
        lamp=lamp,
        tick_seconds=settings.tick_seconds,
    )
    await service.start()

    try:
        yield
    finally:
        if service:
            await service.stop()

        logger.info("Shutdown complete")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

# Make the dependency functions in routes resolve to the real ones
app.dependency_overrides[routes_module.get_service] = get_service
app.dependency_overrides[routes_module.get_lamp] = get_lamp

app.include_router(api_router, prefix="/api")


def run() -> None:
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)
