"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "aurora-sentinel"
    debug: bool = False
    log_level: str = "INFO"

    # Tick sources
    audio_tick_ms: int = 200
    countdown_tick_ms: int = 1000
    live_feed_ms: int = 500

    # Escalation
    auto_cooldown_seconds: float = 10.0
    countdown_seconds: int = 10

    # Audio sampler
    spike_threshold_normal: float = 0.7
    spike_threshold_heightened: float = 0.35
    heightened_gain: float = 2.0
    pitch_window: int = 50

    # Motion sampler
    jitter_window: int = 20

    # Transport
    api_base_url: str = "http://localhost:3001/api"
    api_token: str = ""
    api_timeout_seconds: float = 10.0

    # Context
    presentation_mode: bool = False
    timezone: str = "UTC"

    model_config = {"env_prefix": "SENTINEL_"}


settings = Settings()
