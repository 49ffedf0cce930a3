"""WebSocket endpoint for device sensor readings.

Path: /ws/sensor

The device streams three kinds of JSON frames:
    {"type": "spectrum", "bins": [0-255, ...], "sample_rate": 48000}
    {"type": "motion", "acceleration": {"x":..,"y":..,"z":..}, ...}
    {"type": "location", "lat": .., "lng": ..}   (lat/lng null = position lost)

Frames are validated at the boundary.  Spectrum frames only refresh the
audio source; the next audio tick consumes them.  Motion frames are
folded into the motion sampler immediately.  No decisions are made on
this path.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from aurora_sentinel.core.engine import RiskEngine
from aurora_sentinel.domain.zone import GeoPoint
from aurora_sentinel.sensors.sources import MotionEvent, PushedSpectrumSource, SpectrumFrame

logger = logging.getLogger(__name__)


def create_sensor_router(engine: RiskEngine, spectrum: PushedSpectrumSource) -> APIRouter:
    """Factory that wires the sensor endpoint to an engine and its audio source."""

    router = APIRouter()

    @router.websocket("/ws/sensor")
    async def ingest_sensor(websocket: WebSocket) -> None:
        await websocket.accept()
        logger.info("Sensor device connected")

        try:
            while True:
                raw = await websocket.receive_json()
                if not isinstance(raw, dict):
                    await websocket.send_json({"status": "error", "detail": "frame must be a JSON object"})
                    continue

                kind = raw.get("type")
                body = {k: v for k, v in raw.items() if k != "type"}

                # ── Validate at the boundary ─────────────────────────────
                try:
                    if kind == "spectrum":
                        spectrum.push(SpectrumFrame.model_validate(body))
                        continue
                    if kind == "motion":
                        features = engine.on_motion_event(MotionEvent.model_validate(body))
                        await websocket.send_json({
                            "status": "accepted",
                            "motion": features.model_dump(mode="json"),
                        })
                        continue
                    if kind == "location":
                        if body.get("lat") is None or body.get("lng") is None:
                            context = engine.update_location(None)
                        else:
                            context = engine.update_location(GeoPoint.model_validate(body))
                        await websocket.send_json({
                            "status": "accepted",
                            "location": context.model_dump(mode="json") if context else None,
                        })
                        continue
                except ValidationError as exc:
                    await websocket.send_json({
                        "status": "error",
                        "detail": f"invalid {kind} frame: {exc.error_count()} validation error(s)",
                    })
                    continue

                await websocket.send_json({
                    "status": "error",
                    "detail": f"unknown frame type: {kind!r}",
                })

        except WebSocketDisconnect:
            logger.info("Sensor device disconnected")

    return router
