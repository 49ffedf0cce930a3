"""End-to-end tests for the RiskEngine tick pipeline and commands."""

from __future__ import annotations

from datetime import timedelta

import pytest

from aurora_sentinel.core.engine import RiskEngine
from aurora_sentinel.domain.enums import RiskLevel, TriggerKind
from aurora_sentinel.domain.errors import ArmingRejected
from aurora_sentinel.domain.escalation import Armed, Idle
from aurora_sentinel.domain.zone import GeoPoint
from aurora_sentinel.sensors.audio import AudioSampler
from aurora_sentinel.sensors.motion import MotionSampler
from aurora_sentinel.sensors.sources import MotionEvent
from aurora_sentinel.store.zone_cache import ZoneCache

from tests.fakes import FakeAudioSource, FakeMotionProvider, FakeTransport, square_zone
from tests.test_escalation import _at

SILENT = [0] * 16


def _engine(
    transport: FakeTransport | None = None,
    deny_audio: bool = False,
    motion_supported: bool = True,
    presentation_mode: bool = False,
) -> RiskEngine:
    return RiskEngine(
        audio=AudioSampler(FakeAudioSource([SILENT], deny=deny_audio)),
        motion=MotionSampler(FakeMotionProvider(supported=motion_supported)),
        transport=transport or FakeTransport(),
        cooldown=timedelta(seconds=10),
        countdown=timedelta(seconds=10),
        presentation_mode=presentation_mode,
    )


def _shove(engine: RiskEngine, x: float = 30.0) -> None:
    engine.on_motion_event(MotionEvent.model_validate({"acceleration": {"x": x, "y": 0, "z": 0}}))


async def _agitated_engine(transport: FakeTransport | None = None) -> RiskEngine:
    """Night, presentation mode and a hard shove: 0 + 15 + 20 + 20 = 55."""
    engine = _engine(transport, presentation_mode=True)
    await engine.start()
    _shove(engine)
    return engine


class TestStartup:
    @pytest.mark.asyncio
    async def test_sensor_failure_is_isolated(self) -> None:
        engine = _engine(deny_audio=True)
        await engine.start()
        status = engine.sensor_status
        assert "denied" in status["audio"]
        assert status["motion"] == "active"

        _shove(engine, 15.0)
        snapshot = engine.tick(_at(0))
        assert snapshot.audio.score == 0.0
        assert snapshot.motion.score == pytest.approx(7.5)

    @pytest.mark.asyncio
    async def test_stop_reports_stopped(self) -> None:
        engine = _engine()
        await engine.start()
        engine.stop()
        assert engine.sensor_status == {"audio": "stopped", "motion": "stopped"}

    def test_initial_snapshot_exists_before_any_tick(self) -> None:
        engine = _engine()
        snapshot = engine.get_current_snapshot()
        assert snapshot.audio.score == 0.0
        assert snapshot.location.score == 10.0


class TestAutoEscalation:
    @pytest.mark.asyncio
    async def test_high_tick_arms_and_expiry_fires(self) -> None:
        transport = FakeTransport()
        engine = await _agitated_engine(transport)

        snapshot = engine.tick(_at(0))
        assert snapshot.total == pytest.approx(55.0)
        assert snapshot.level == RiskLevel.HIGH
        state = engine.get_escalation_state()
        assert isinstance(state, Armed)
        assert state.trigger_kind == TriggerKind.AUTO

        assert engine.countdown_tick(_at(5)) is None
        task = engine.countdown_tick(_at(10))
        assert task is not None
        outcome = await task

        assert outcome.delivered is True
        assert transport.submitted[0].trigger_kind == TriggerKind.AUTO
        assert transport.submitted[0].score == pytest.approx(55.0)
        assert isinstance(engine.get_escalation_state(), Idle)

    @pytest.mark.asyncio
    async def test_cancel_then_cooldown(self) -> None:
        engine = await _agitated_engine()
        engine.tick(_at(0))
        assert engine.cancel(_at(2)) is True

        engine.tick(_at(5))
        assert isinstance(engine.get_escalation_state(), Idle)
        summary = engine.escalation_summary(_at(5))
        assert summary["cooldown_remaining"] == pytest.approx(7.0)

        engine.tick(_at(12))
        assert isinstance(engine.get_escalation_state(), Armed)

    @pytest.mark.asyncio
    async def test_manual_press_rejected_while_auto_armed(self) -> None:
        engine = await _agitated_engine()
        engine.tick(_at(0))
        with pytest.raises(ArmingRejected):
            engine.arm_manual(_at(1))

    @pytest.mark.asyncio
    async def test_quiet_daytime_never_arms(self) -> None:
        engine = _engine()
        await engine.start()
        day = _at(0) + timedelta(hours=12)
        for i in range(20):
            snapshot = engine.tick(day + timedelta(milliseconds=200 * i))
        assert snapshot.level == RiskLevel.LOW
        assert isinstance(engine.get_escalation_state(), Idle)


class TestManualFlow:
    @pytest.mark.asyncio
    async def test_expiry_and_send_now_submit_once(self) -> None:
        transport = FakeTransport()
        engine = _engine(transport)
        await engine.start()
        engine.arm_manual(_at(0))

        task = engine.countdown_tick(_at(10))
        assert await engine.send_now(_at(10)) is None
        await task

        assert len(transport.submitted) == 1
        assert engine.last_outcome.delivered is True

    @pytest.mark.asyncio
    async def test_failure_is_reported_in_summary(self) -> None:
        engine = _engine(FakeTransport(fail=True))
        await engine.start()
        engine.arm_manual(_at(0))
        outcome = await engine.send_now(_at(3))

        assert outcome.delivered is False
        summary = engine.escalation_summary(_at(4))
        assert summary["state"]["phase"] == "idle"
        assert summary["retry_available"] is True
        assert summary["last_outcome"]["error"] == "backend unavailable"

    @pytest.mark.asyncio
    async def test_summary_while_armed(self) -> None:
        engine = _engine()
        engine.arm_manual(_at(0))
        summary = engine.escalation_summary(_at(3.4))
        assert summary["state"]["phase"] == "armed"
        assert summary["countdown"] == 7
        assert summary["auto_triggered"] is False


class TestLocation:
    @pytest.mark.asyncio
    async def test_refresh_rematches_current_position(self) -> None:
        transport = FakeTransport(zones=[square_zone("quad", "high", name="Quad")])
        engine = _engine(transport)
        engine.update_location(GeoPoint(lat=5, lng=5))
        assert engine.location.matched_zone is None

        assert await engine.refresh_zones() == 1
        assert engine.location.matched_zone.id == "quad"
        assert engine.tick(_at(0)).location.score == 20.0

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_zones(self) -> None:
        transport = FakeTransport(zones=[square_zone("quad", "low")])
        engine = _engine(transport)
        await engine.refresh_zones()
        transport.zone_error = "503 from backend"
        transport.zones = []

        assert await engine.refresh_zones() == 1
        assert [z.id for z in engine.zones.zones] == ["quad"]

    @pytest.mark.asyncio
    async def test_lost_position_scores_as_normal_area(self) -> None:
        transport = FakeTransport(zones=[square_zone("quad", "high")])
        engine = _engine(transport)
        await engine.refresh_zones()
        engine.update_location(GeoPoint(lat=5, lng=5))
        assert engine.tick(_at(0)).location.score == 20.0

        assert engine.update_location(None) is None
        assert engine.tick(_at(1)).location.score == 10.0


class TestModes:
    def test_presentation_mode_heightens_audio(self) -> None:
        engine = _engine()
        engine.set_presentation_mode(True)
        assert engine.presentation_mode is True
        assert engine.heightened_sensitivity is True
        assert engine.tick(_at(0) + timedelta(hours=12)).location.score == 20.0

        engine.set_presentation_mode(False)
        assert engine.heightened_sensitivity is False

    def test_sensitivity_toggle_is_independent(self) -> None:
        engine = _engine()
        engine.set_heightened_sensitivity(True)
        assert engine.heightened_sensitivity is True
        assert engine.presentation_mode is False


class TestZoneCacheOwnership:
    def test_keeps_the_empty_cache_it_was_given(self) -> None:
        cache = ZoneCache()
        engine = RiskEngine(
            audio=AudioSampler(FakeAudioSource([SILENT])),
            motion=MotionSampler(FakeMotionProvider()),
            transport=FakeTransport(),
            zones=cache,
        )
        assert engine.zones is cache

        cache.replace([square_zone("quad", "high")])
        assert engine.update_location(GeoPoint(lat=5, lng=5)).matched_zone.id == "quad"
