"""Dashboard WebSocket — pushes the live feed to connected frontends.

Architecture:
    device  →  /ws/sensor      →  engine ticks (fuse + escalate)
                                        ↓
    UI      ←  /ws/dashboard   ←  live_feed every ~500 ms

Clients may also send commands over the same socket:
    {"action": "arm" | "cancel" | "send_now"}
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from aurora_sentinel.core.engine import RiskEngine
from aurora_sentinel.domain.errors import ArmingRejected
from aurora_sentinel.foundation.clock import utc_now
from aurora_sentinel.services.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)


def live_feed_payload(engine: RiskEngine) -> dict[str, Any]:
    """The periodic frame the dashboard renders."""
    audio = engine.audio_features
    motion = engine.motion_features
    snapshot = engine.get_current_snapshot()
    return {
        "type": "live_feed",
        "audio": {"rms": audio.rms, "pitch": audio.pitch_hz, "stress": audio.stress},
        "motion": {"acceleration": motion.acceleration_magnitude, "shake": motion.shake},
        "total": round(snapshot.total, 2),
        "level": snapshot.level.value,
        "escalation": engine.escalation_summary(),
        "sensors": engine.sensor_status,
    }


class LiveFeedPublisher:
    """Scheduler job that broadcasts the live feed when anyone is listening."""

    def __init__(self, engine: RiskEngine, manager: ConnectionManager) -> None:
        self._engine = engine
        self._manager = manager

    async def __call__(self) -> None:
        if self._manager.active_count == 0:
            return
        await self._manager.broadcast_json(live_feed_payload(self._engine))


def create_dashboard_router(engine: RiskEngine, manager: ConnectionManager) -> APIRouter:
    """Factory that wires the dashboard endpoint to an engine and client registry."""

    router = APIRouter()

    @router.websocket("/ws/dashboard")
    async def dashboard(websocket: WebSocket) -> None:
        await manager.connect(websocket)
        await websocket.send_json(live_feed_payload(engine))

        try:
            while True:
                raw = await websocket.receive_json()
                action = raw.get("action") if isinstance(raw, dict) else None
                await websocket.send_json(await _handle_action(engine, action))
        except WebSocketDisconnect:
            pass
        finally:
            manager.disconnect(websocket)

    return router


async def _handle_action(engine: RiskEngine, action: Any) -> dict[str, Any]:
    if action == "arm":
        try:
            handle = engine.arm_manual()
        except ArmingRejected as exc:
            return {"status": "error", "action": action, "detail": str(exc)}
        return {"status": "ok", "action": action, "countdown": handle.remaining(utc_now())}

    if action == "cancel":
        return {"status": "ok", "action": action, "cancelled": engine.cancel()}

    if action == "send_now":
        outcome = await engine.send_now()
        if outcome is None:
            return {"status": "error", "action": action, "detail": "nothing armed"}
        return {
            "status": "ok" if outcome.delivered else "error",
            "action": action,
            "outcome": outcome.model_dump(mode="json"),
        }

    return {"status": "error", "detail": f"unknown action: {action!r}"}
