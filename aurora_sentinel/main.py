"""aurora-sentinel — real-time risk assessment and auto-escalation.

This is the application entry point.  It wires the samplers, zone cache,
RiskEngine, tick scheduler, and HTTP/WebSocket endpoints together.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI

from aurora_sentinel.api.dependencies import ui_manager
from aurora_sentinel.api.routes import create_engine_router
from aurora_sentinel.api.ws_dashboard import LiveFeedPublisher, create_dashboard_router
from aurora_sentinel.api.ws_sensor import create_sensor_router
from aurora_sentinel.config import settings
from aurora_sentinel.core.engine import RiskEngine
from aurora_sentinel.core.scheduler import TickScheduler
from aurora_sentinel.sensors.audio import AudioSampler
from aurora_sentinel.sensors.motion import MotionSampler
from aurora_sentinel.sensors.sources import PushedMotionProvider, PushedSpectrumSource
from aurora_sentinel.store.zone_cache import ZoneCache
from aurora_sentinel.transport.http import HttpAlertTransport

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger("aurora_sentinel")

# ── Sensors ──────────────────────────────────────────────────────────────────

spectrum_source = PushedSpectrumSource()

audio_sampler = AudioSampler(
    spectrum_source,
    spike_threshold=settings.spike_threshold_normal,
    heightened_threshold=settings.spike_threshold_heightened,
    heightened_gain=settings.heightened_gain,
    pitch_window=settings.pitch_window,
)
motion_sampler = MotionSampler(PushedMotionProvider(), jitter_window=settings.jitter_window)

# ── Engine ───────────────────────────────────────────────────────────────────

transport = HttpAlertTransport(
    settings.api_base_url,
    token=settings.api_token,
    timeout=settings.api_timeout_seconds,
)

engine = RiskEngine(
    audio_sampler,
    motion_sampler,
    transport,
    zones=ZoneCache(),
    cooldown=timedelta(seconds=settings.auto_cooldown_seconds),
    countdown=timedelta(seconds=settings.countdown_seconds),
    presentation_mode=settings.presentation_mode,
    tz_name=settings.timezone,
)

scheduler = TickScheduler(
    engine,
    audio_interval=settings.audio_tick_ms / 1000,
    countdown_interval=settings.countdown_tick_ms / 1000,
    live_feed=LiveFeedPublisher(engine, ui_manager),
    live_feed_interval=settings.live_feed_ms / 1000,
)


# ── Lifespan ─────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    await engine.start()
    await engine.refresh_zones()
    scheduler.start()
    logger.info("%s ready", settings.app_name)

    yield

    await scheduler.stop()
    engine.stop()
    await transport.aclose()
    logger.info("%s shut down", settings.app_name)


# ── App ──────────────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    description="Real-time risk fusion and auto-escalation engine",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Routes ───────────────────────────────────────────────────────────────────

app.include_router(create_engine_router(engine))
app.include_router(create_sensor_router(engine, spectrum_source))
app.include_router(create_dashboard_router(engine, ui_manager))


# ── Health ───────────────────────────────────────────────────────────────────

@app.get("/health")
async def health() -> dict:
    snapshot = engine.get_current_snapshot()
    state = engine.get_escalation_state()
    return {
        "status": "ok",
        "sensors": engine.sensor_status,
        "zones": len(engine.zones),
        "presentation_mode": engine.presentation_mode,
        "risk_total": round(snapshot.total, 2),
        "risk_level": snapshot.level.value,
        "escalation": state.phase.value,
        "dashboard_clients": ui_manager.active_count,
        "scheduler_running": scheduler.running,
    }
