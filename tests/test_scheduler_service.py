import asyncio
from datetime import datetime

import pytest

from growlight.domain.models import ScheduleConfig
from growlight.domain.reconciler import Reconciler
from growlight.drivers.lamp_sim import SimulatedLamp
from growlight.services.scheduler import ScheduleService

pytestmark = pytest.mark.asyncio

CONFIG = ScheduleConfig(
    start_hour=8,
    end_hour=20,
    plateau_hours=6,
    plateau_offset_hours=-1,
    step_size=10,
    max_brightness=100,
)


def make_service(lamp: SimulatedLamp, when: datetime) -> ScheduleService:
    return ScheduleService(
        reconciler=Reconciler(CONFIG, lamp),
        lamp=lamp,
        tick_seconds=3600,
        clock=lambda: when,
    )


async def wait_for_commands(lamp: SimulatedLamp, count: int) -> None:
    for _ in range(200):
        if len(lamp.commands) >= count:
            return
        await asyncio.sleep(0.01)
    raise AssertionError(f"lamp got {lamp.commands}, expected {count} commands")


async def test_loop_applies_on_start_and_stops():
    lamp = SimulatedLamp()
    svc = make_service(lamp, datetime(2024, 5, 1, 14, 0))

    await svc.start()
    await wait_for_commands(lamp, 1)
    await svc.stop()

    assert lamp.commands == [("brightness", 100)]
    assert svc.last_result.action == "APPLIED"
    assert svc.reconciler.state.last_applied == 100


async def test_manual_tick_without_change_sends_nothing():
    lamp = SimulatedLamp()
    svc = make_service(lamp, datetime(2024, 5, 1, 3, 0))

    await svc.tick()
    result = await svc.tick()

    assert result.action == "REMAINS"
    assert lamp.commands == [("brightness", 0)]


async def test_apply_now_forces_command():
    lamp = SimulatedLamp()
    svc = make_service(lamp, datetime(2024, 5, 1, 14, 0))

    await svc.tick()
    result = await svc.apply_now()

    assert result.action == "APPLIED"
    assert lamp.commands == [("brightness", 100), ("brightness", 100)]


async def test_switch_goes_to_lamp():
    lamp = SimulatedLamp()
    svc = make_service(lamp, datetime(2024, 5, 1, 14, 0))

    await svc.switch(False)

    assert lamp.commands == [("switch", False)]
    assert lamp.is_on is False


async def test_manual_switch_resyncs_on_next_tick():
    lamp = SimulatedLamp()
    svc = make_service(lamp, datetime(2024, 5, 1, 14, 0))

    await svc.tick()
    await svc.switch(False)
    assert svc.reconciler.state.last_applied is None

    result = await svc.tick()

    assert result.action == "APPLIED"
    assert lamp.commands == [("brightness", 100), ("switch", False), ("brightness", 100)]
    assert lamp.is_on is True


async def test_loop_survives_unexpected_error():
    class BrokenLamp(SimulatedLamp):
        async def apply_brightness(self, level: int) -> None:
            self.commands.append(("brightness", level))
            raise RuntimeError("driver bug")

    lamp = BrokenLamp()
    svc = make_service(lamp, datetime(2024, 5, 1, 14, 0))

    await svc.start()
    await wait_for_commands(lamp, 1)
    await svc.stop()

    assert svc.reconciler.state.last_applied is None
