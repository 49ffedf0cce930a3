"""Risk fusion — a pure function from current inputs to a RiskSnapshot.

Design principles:
    1. Deterministic: same (audio, motion, location, presentation, now)
       always yields the same snapshot.
    2. No I/O, no hidden state.  The only clock is the *now* argument.
    3. Each factor is capped independently before summing.

Formula:
    audio    = min((rms*0.5 + pitch_var*0.3 + min(spikes/5, 1)*0.2) * 35, 35)
    motion   = min(acc/30*0.6 + jitter/20*0.4, 1) * 25
    time     = factor(hour) * 20      [6,20)→0.2  [20,24)→0.6  [0,4)→1.0  else 0.4
    location = 20 high zone, 12 low zone, 10 no zone; 20 in presentation mode
    total    = audio + motion + time + location

Classification:  total < 25 → LOW,  25 ≤ total < 50 → MEDIUM,  total ≥ 50 → HIGH
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from aurora_sentinel.domain.enums import RiskLevel, ZoneKind
from aurora_sentinel.domain.features import AudioFeatures, MotionFeatures
from aurora_sentinel.domain.risk import (
    AudioFactor,
    LocationFactor,
    MotionFactor,
    RiskSnapshot,
    TimeFactor,
)
from aurora_sentinel.domain.zone import LocationContext
from aurora_sentinel.foundation.clock import local_hour

AUDIO_CAP = 35.0
MOTION_CAP = 25.0
TIME_CAP = 20.0
LOCATION_CAP = 20.0

MEDIUM_THRESHOLD = 25.0
HIGH_THRESHOLD = 50.0

_LOCATION_SCORES = {
    ZoneKind.HIGH: 20.0,
    ZoneKind.LOW: 12.0,
}
_NO_ZONE_SCORE = 10.0


# ── Factor scores ────────────────────────────────────────────────────────────

def audio_score(rms: float, pitch_variance: float, spike_count: int) -> float:
    raw = (
        rms * 0.5
        + pitch_variance * 0.3
        + min(spike_count / 5, 1.0) * 0.2
    ) * AUDIO_CAP
    return max(0.0, min(raw, AUDIO_CAP))


def motion_intensity(acceleration_magnitude: float, jitter: float) -> float:
    raw = (acceleration_magnitude / 30) * 0.6 + (jitter / 20) * 0.4
    return max(0.0, min(raw, 1.0))


def motion_score(acceleration_magnitude: float, jitter: float) -> float:
    return motion_intensity(acceleration_magnitude, jitter) * MOTION_CAP


def time_factor(hour: int) -> float:
    if 6 <= hour < 20:
        return 0.2
    if 20 <= hour < 24:
        return 0.6
    if 0 <= hour < 4:
        return 1.0
    return 0.4


def location_score(location: Optional[LocationContext], presentation_mode: bool = False) -> float:
    if presentation_mode:
        return LOCATION_CAP
    if location is None or location.matched_zone is None:
        return _NO_ZONE_SCORE
    return _LOCATION_SCORES[location.matched_zone.kind]


def classify_level(total: float) -> RiskLevel:
    """Half-open thresholds: 25.0 is MEDIUM, 50.0 is HIGH."""
    if total < MEDIUM_THRESHOLD:
        return RiskLevel.LOW
    if total < HIGH_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


# ── Fusion ───────────────────────────────────────────────────────────────────

def fuse(
    audio: AudioFeatures,
    motion: MotionFeatures,
    location: Optional[LocationContext],
    presentation_mode: bool,
    now: datetime,
    tz_name: str = "UTC",
) -> RiskSnapshot:
    """Combine the four factors into a classified RiskSnapshot.

    Args:
        audio: Latest audio features (zero-features if unavailable).
        motion: Latest motion features (zero-features if unavailable).
        location: Current location context, or None without GPS.
        presentation_mode: Forces the location score to its cap.
        now: The instant being scored; its local hour drives the time factor.
        tz_name: IANA zone used to derive the local hour from an aware *now*.
    """
    a_score = audio_score(audio.rms, audio.pitch_variance, audio.spike_count)
    m_score = motion_score(motion.acceleration_magnitude, motion.jitter)

    t_factor = time_factor(local_hour(now, tz_name))
    t_score = t_factor * TIME_CAP

    l_score = location_score(location, presentation_mode)

    total = min(a_score + m_score + t_score + l_score, 100.0)

    return RiskSnapshot(
        audio=AudioFactor(stress=audio.stress, score=a_score),
        motion=MotionFactor(intensity=motion.intensity, score=m_score),
        time=TimeFactor(factor=t_factor, score=t_score),
        location=LocationFactor(factor=l_score / LOCATION_CAP, score=l_score),
        total=total,
        level=classify_level(total),
    )
