"""Tests for the auto-escalation monitor (cooldown, latch, level gate)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from aurora_sentinel.core.countdown import CountdownController
from aurora_sentinel.core.escalation import AutoEscalationMonitor
from aurora_sentinel.core.fusion import classify_level
from aurora_sentinel.domain.enums import TriggerKind
from aurora_sentinel.domain.escalation import Armed
from aurora_sentinel.domain.risk import (
    AudioFactor,
    LocationFactor,
    MotionFactor,
    RiskSnapshot,
    TimeFactor,
)

from tests.fakes import FakeTransport

_BASE = datetime(2026, 3, 14, 2, 0, 0, tzinfo=timezone.utc)


def _snapshot(total: float) -> RiskSnapshot:
    """A snapshot whose factor scores add up to *total*, filled cap by cap."""
    rest = total
    scores = []
    for cap in (35.0, 25.0, 20.0, 20.0):
        part = min(rest, cap)
        scores.append(part)
        rest -= part
    audio, motion, time, location = scores
    return RiskSnapshot(
        audio=AudioFactor(stress=audio / 35, score=audio),
        motion=MotionFactor(intensity=motion / 25, score=motion),
        time=TimeFactor(factor=time / 20, score=time),
        location=LocationFactor(factor=location / 20, score=location),
        total=total,
        level=classify_level(total),
    )


def _at(seconds: float) -> datetime:
    return _BASE + timedelta(seconds=seconds)


@pytest.fixture
def monitor() -> AutoEscalationMonitor:
    return AutoEscalationMonitor(cooldown=timedelta(seconds=10))


@pytest.fixture
def controller(monitor: AutoEscalationMonitor) -> CountdownController:
    return CountdownController(FakeTransport(), monitor, duration=timedelta(seconds=10))


class TestLevelGate:
    def test_high_snapshot_arms(self, monitor, controller) -> None:
        handle = monitor.evaluate(_snapshot(70.0), _at(0), controller)
        assert handle is not None
        assert handle.trigger_kind == TriggerKind.AUTO
        assert isinstance(controller.state, Armed)
        assert monitor.auto_triggered is True

    def test_threshold_total_arms(self, monitor, controller) -> None:
        assert monitor.evaluate(_snapshot(50.0), _at(0), controller) is not None

    @pytest.mark.parametrize("total", [0.0, 24.0, 25.0, 49.9])
    def test_below_high_never_arms(self, monitor, controller, total: float) -> None:
        assert monitor.evaluate(_snapshot(total), _at(0), controller) is None
        assert controller.is_idle


class TestLatchAndCooldown:
    def test_latched_while_armed(self, monitor, controller) -> None:
        first = monitor.evaluate(_snapshot(80.0), _at(0), controller)
        # dip and rise again, well past cooldown
        assert monitor.evaluate(_snapshot(10.0), _at(15), controller) is None
        assert monitor.evaluate(_snapshot(80.0), _at(30), controller) is None
        assert controller.handle.arming_id == first.arming_id

    def test_cancel_of_auto_restarts_cooldown(self, monitor, controller) -> None:
        monitor.evaluate(_snapshot(80.0), _at(0), controller)
        controller.cancel(_at(3))
        assert monitor.auto_triggered is False
        assert monitor.cooldown_remaining(_at(3)) == pytest.approx(10.0)
        assert monitor.evaluate(_snapshot(80.0), _at(12.9), controller) is None
        assert monitor.evaluate(_snapshot(80.0), _at(13), controller) is not None

    def test_cancel_of_manual_leaves_cooldown(self, monitor, controller) -> None:
        controller.arm(TriggerKind.MANUAL, _at(0))
        controller.cancel(_at(1))
        assert monitor.last_event_at is None
        assert monitor.evaluate(_snapshot(80.0), _at(1), controller) is not None

    def test_manual_arming_blocks_auto(self, monitor, controller) -> None:
        controller.arm(TriggerKind.MANUAL, _at(0))
        assert monitor.evaluate(_snapshot(90.0), _at(1), controller) is None
        assert controller.state.trigger_kind == TriggerKind.MANUAL

    def test_cooldown_remaining_before_any_event(self, monitor) -> None:
        assert monitor.cooldown_remaining(_at(0)) == 0.0

    def test_failure_clears_latch_only(self, monitor) -> None:
        monitor.record_arm(_at(0))
        monitor.record_failure()
        assert monitor.auto_triggered is False
        assert monitor.last_event_at == _at(0)
        assert monitor.should_arm(_snapshot(80.0), _at(5), arming_in_progress=False) is False
        assert monitor.should_arm(_snapshot(80.0), _at(10), arming_in_progress=False) is True

    def test_in_progress_flag_blocks(self, monitor) -> None:
        assert monitor.should_arm(_snapshot(80.0), _at(0), arming_in_progress=True) is False
