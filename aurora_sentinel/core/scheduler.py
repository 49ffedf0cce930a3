"""Interval scheduler that drives the engine from the event loop.

Three periodic jobs:
    audio      (~200 ms)  engine.tick()
    countdown  (~1 s)     engine.countdown_tick()
    live feed  (~500 ms)  optional async broadcaster

A job that raises is logged and keeps its schedule.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional

from aurora_sentinel.core.engine import RiskEngine

logger = logging.getLogger(__name__)

Job = Callable[[], Any]


class TickScheduler:
    def __init__(
        self,
        engine: RiskEngine,
        audio_interval: float = 0.2,
        countdown_interval: float = 1.0,
        live_feed: Optional[Callable[[], Awaitable[None]]] = None,
        live_feed_interval: float = 0.5,
    ) -> None:
        self._jobs: list[tuple[str, float, Job]] = [
            ("audio", audio_interval, engine.tick),
            ("countdown", countdown_interval, engine.countdown_tick),
        ]
        if live_feed is not None:
            self._jobs.append(("live_feed", live_feed_interval, live_feed))
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._every(name, interval, job), name=f"tick-{name}")
            for name, interval, job in self._jobs
        ]
        logger.info("Tick scheduler started (%s)", ", ".join(n for n, _, _ in self._jobs))

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Tick scheduler stopped")

    @staticmethod
    async def _every(name: str, interval: float, job: Job) -> None:
        while True:
            try:
                result = job()
                if inspect.isawaitable(result) and not isinstance(result, asyncio.Task):
                    await result
            except Exception:
                logger.error("%s job failed", name, exc_info=True)
            await asyncio.sleep(interval)
