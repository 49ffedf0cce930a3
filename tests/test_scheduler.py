"""Tests for the interval scheduler, against a stand-in engine."""

from __future__ import annotations

import asyncio

import pytest

from aurora_sentinel.core.scheduler import TickScheduler


class _CountingEngine:
    def __init__(self, fail_ticks: bool = False) -> None:
        self.ticks = 0
        self.countdowns = 0
        self._fail = fail_ticks

    def tick(self):
        self.ticks += 1
        if self._fail:
            raise RuntimeError("tick blew up")

    def countdown_tick(self):
        self.countdowns += 1
        return None


class TestTickScheduler:
    @pytest.mark.asyncio
    async def test_runs_jobs_until_stopped(self) -> None:
        engine = _CountingEngine()
        scheduler = TickScheduler(engine, audio_interval=0.01, countdown_interval=0.02)
        scheduler.start()
        assert scheduler.running is True
        await asyncio.sleep(0.1)
        await scheduler.stop()

        assert scheduler.running is False
        assert engine.ticks >= 3
        assert engine.countdowns >= 2
        ticks = engine.ticks
        await asyncio.sleep(0.05)
        assert engine.ticks == ticks

    @pytest.mark.asyncio
    async def test_failing_job_keeps_its_schedule(self) -> None:
        engine = _CountingEngine(fail_ticks=True)
        scheduler = TickScheduler(engine, audio_interval=0.01, countdown_interval=0.01)
        scheduler.start()
        await asyncio.sleep(0.08)
        await scheduler.stop()
        assert engine.ticks >= 3

    @pytest.mark.asyncio
    async def test_async_live_feed_is_awaited(self) -> None:
        pushed = []

        async def feed() -> None:
            pushed.append(1)

        scheduler = TickScheduler(
            _CountingEngine(), audio_interval=1, countdown_interval=1,
            live_feed=feed, live_feed_interval=0.01,
        )
        scheduler.start()
        await asyncio.sleep(0.06)
        await scheduler.stop()
        assert len(pushed) >= 3

    @pytest.mark.asyncio
    async def test_double_start_is_idempotent(self) -> None:
        scheduler = TickScheduler(_CountingEngine(), audio_interval=1, countdown_interval=1)
        scheduler.start()
        first = list(scheduler._tasks)
        scheduler.start()
        assert scheduler._tasks == first
        await scheduler.stop()
