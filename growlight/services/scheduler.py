from __future__ import annotations
import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from ..core.timeutil import now_local
from ..domain.interfaces import Lamp
from ..domain.models import TickResult
from ..domain.reconciler import Reconciler
from ..domain.schedule import describe_timing


logger = logging.getLogger(__name__)


class ScheduleService:
    """Runs the reconciler on a fixed interval until stopped.

    ``apply_now`` and ``switch`` share the tick lock with the loop, so a
    manual command never overlaps a scheduled one.
    """

    def __init__(
        self,
        reconciler: Reconciler,
        lamp: Lamp,
        tick_seconds: float = 60,
        clock: Callable[[], datetime] = now_local,
    ) -> None:
        self._reconciler = reconciler
        self._lamp = lamp
        self._tick_seconds = tick_seconds
        self._clock = clock

        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()
        self._lock = asyncio.Lock()
        self.last_result: Optional[TickResult] = None

    @property
    def reconciler(self) -> Reconciler:
        return self._reconciler

    async def start(self) -> None:
        for line in describe_timing(self._reconciler.config, self._clock()).lines():
            logger.info(line)
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name="schedule_loop")

    async def stop(self) -> None:
        self._stop.set()
        if self._task:
            # the running tick finishes (or its request times out) first
            await self._task
            self._task = None

    async def tick(self, force: bool = False) -> TickResult:
        async with self._lock:
            result = await self._reconciler.tick(self._clock(), force=force)
            self.last_result = result
            return result

    async def apply_now(self) -> TickResult:
        logger.info("Manual apply requested")
        return await self.tick(force=True)

    async def switch(self, on: bool) -> None:
        async with self._lock:
            await self._lamp.toggle_switch(on)
            # lamp state no longer matches the last brightness sent
            self._reconciler.state.last_applied = None

    async def _run(self) -> None:
        logger.info("Schedule loop started (tick_seconds=%s)", self._tick_seconds)

        while not self._stop.is_set():
            try:
                await self.tick()
            except Exception as e:
                logger.exception("Schedule loop error: %s", e)

            # sleep with cancellation awareness
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._tick_seconds)
            except asyncio.TimeoutError:
                pass

        logger.info("Schedule loop stopped")
