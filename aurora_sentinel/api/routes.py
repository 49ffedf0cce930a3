"""REST surface of the engine: read-only views, UI commands, settings.

The UI polls the GET endpoints and issues commands with POST/PUT.  All
handlers run on the engine's event loop, so they observe the same
single-threaded state the tick jobs do.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from aurora_sentinel.core.engine import RiskEngine
from aurora_sentinel.domain.errors import ArmingRejected
from aurora_sentinel.domain.zone import GeoPoint
from aurora_sentinel.explain.builder import build_explanation
from aurora_sentinel.explain.formatter import format_plain
from aurora_sentinel.foundation.clock import utc_now

logger = logging.getLogger(__name__)


class ToggleRequest(BaseModel):
    enabled: bool


class LocationUpdate(BaseModel):
    """A GPS fix.  Omit both fields to report that the position was lost."""

    lat: Optional[float] = Field(None, ge=-90.0, le=90.0)
    lng: Optional[float] = Field(None, ge=-180.0, le=180.0)


def create_engine_router(engine: RiskEngine) -> APIRouter:
    """Factory that wires the REST endpoints to a concrete RiskEngine."""

    router = APIRouter()

    # ── Risk ─────────────────────────────────────────────────────────────

    @router.get("/risk/snapshot")
    async def get_snapshot() -> dict:
        return engine.get_current_snapshot().model_dump(mode="json")

    @router.get("/risk/explanation")
    async def get_explanation() -> dict:
        explanation = build_explanation(
            engine.get_current_snapshot(),
            engine.audio_features,
            engine.motion_features,
            engine.location,
            utc_now(),
            presentation_mode=engine.presentation_mode,
        )
        return {
            "explanation": explanation.model_dump(mode="json"),
            "human_readable": format_plain(explanation),
        }

    # ── Escalation ───────────────────────────────────────────────────────

    @router.get("/escalation")
    async def get_escalation() -> dict:
        return engine.escalation_summary()

    @router.post("/escalation/arm")
    async def arm_manual() -> dict:
        now = utc_now()
        try:
            handle = engine.arm_manual(now)
        except ArmingRejected as exc:
            raise HTTPException(409, str(exc)) from exc
        return {
            "handle": handle.model_dump(mode="json"),
            "countdown": handle.remaining(now),
        }

    @router.post("/escalation/cancel")
    async def cancel() -> dict:
        return {"cancelled": engine.cancel()}

    @router.post("/escalation/send-now")
    async def send_now() -> dict:
        outcome = await engine.send_now()
        if outcome is None:
            raise HTTPException(409, "nothing armed")
        if not outcome.delivered:
            raise HTTPException(502, outcome.error or "alert submission failed")
        return outcome.model_dump(mode="json")

    # ── Settings ─────────────────────────────────────────────────────────

    @router.put("/settings/sensitivity")
    async def set_sensitivity(body: ToggleRequest) -> dict:
        engine.set_heightened_sensitivity(body.enabled)
        return {"heightened_sensitivity": engine.heightened_sensitivity}

    @router.put("/settings/presentation")
    async def set_presentation(body: ToggleRequest) -> dict:
        engine.set_presentation_mode(body.enabled)
        return {
            "presentation_mode": engine.presentation_mode,
            "heightened_sensitivity": engine.heightened_sensitivity,
        }

    # ── Location & zones ─────────────────────────────────────────────────

    @router.post("/location")
    async def update_location(body: LocationUpdate) -> dict:
        if body.lat is None or body.lng is None:
            engine.update_location(None)
            return {"location": None}
        context = engine.update_location(GeoPoint(lat=body.lat, lng=body.lng))
        return {"location": context.model_dump(mode="json") if context else None}

    @router.get("/zones")
    async def list_zones() -> dict:
        return {
            "zones": [z.model_dump(mode="json") for z in engine.zones.zones],
            "skipped": list(engine.zones.skipped),
        }

    @router.post("/zones/refresh")
    async def refresh_zones() -> dict:
        count = await engine.refresh_zones()
        return {"zones": count}

    return router
