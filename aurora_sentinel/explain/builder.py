"""Explanation builder — pure, deterministic description of a snapshot.

Rules:
    - NEVER modifies engine state
    - Every bullet point is traceable to a specific input field
    - Same inputs → same explanation
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from aurora_sentinel.core.fusion import (
    AUDIO_CAP,
    HIGH_THRESHOLD,
    LOCATION_CAP,
    MEDIUM_THRESHOLD,
    MOTION_CAP,
    TIME_CAP,
)
from aurora_sentinel.domain.enums import RiskLevel, ZoneKind
from aurora_sentinel.domain.explanation import FactorName, FactorSection, RiskExplanation
from aurora_sentinel.domain.features import AudioFeatures, MotionFeatures
from aurora_sentinel.domain.risk import RiskSnapshot
from aurora_sentinel.domain.zone import LocationContext

_HEADLINES = {
    RiskLevel.LOW: "Conditions look normal.",
    RiskLevel.MEDIUM: "Some risk indicators are elevated.",
    RiskLevel.HIGH: "Multiple risk indicators are high; an alert may be raised automatically.",
}


def build_explanation(
    snapshot: RiskSnapshot,
    audio: AudioFeatures,
    motion: MotionFeatures,
    location: Optional[LocationContext],
    now: datetime,
    presentation_mode: bool = False,
) -> RiskExplanation:
    """Describe why *snapshot* scored the way it did.

    Args:
        snapshot: The fused snapshot to explain.
        audio: Audio features the snapshot was fused from.
        motion: Motion features the snapshot was fused from.
        location: Location context, or None without GPS.
        now: Time the explanation is generated for.
        presentation_mode: Whether the location override was active.
    """
    sections = [
        _audio_section(snapshot, audio),
        _motion_section(snapshot, motion),
        _time_section(snapshot, now),
        _location_section(snapshot, location, presentation_mode),
    ]
    dominant = max(sections, key=lambda s: s.score / s.cap).factor

    return RiskExplanation(
        level=snapshot.level,
        total=round(snapshot.total, 2),
        headline=_headline(snapshot),
        generated_at=now,
        sections=sections,
        dominant_factor=dominant,
    )


def _headline(snapshot: RiskSnapshot) -> str:
    base = _HEADLINES[snapshot.level]
    if snapshot.level == RiskLevel.LOW:
        gap = MEDIUM_THRESHOLD - snapshot.total
        return f"{base} {gap:.1f} points below the medium threshold."
    if snapshot.level == RiskLevel.MEDIUM:
        gap = HIGH_THRESHOLD - snapshot.total
        return f"{base} {gap:.1f} points below the high threshold."
    return base


def _share(score: float, total: float) -> float:
    return round(score / total, 4) if total > 0 else 0.0


def _audio_section(snapshot: RiskSnapshot, audio: AudioFeatures) -> FactorSection:
    bullets = [
        f"Loudness (RMS) {audio.rms:.2f}",
        f"Pitch variability {audio.pitch_variance:.2f}",
        f"{audio.spike_count} recent loudness spike(s)",
    ]
    if snapshot.audio.score >= AUDIO_CAP:
        bullets.append("Audio contribution is at its cap")
    return FactorSection(
        factor=FactorName.AUDIO,
        title="Ambient audio",
        bullet_points=bullets,
        score=round(snapshot.audio.score, 2),
        cap=AUDIO_CAP,
        share_of_total=_share(snapshot.audio.score, snapshot.total),
    )


def _motion_section(snapshot: RiskSnapshot, motion: MotionFeatures) -> FactorSection:
    bullets = [
        f"Acceleration {motion.acceleration_magnitude:.1f} m/s²",
        f"Jitter {motion.jitter:.1f}",
    ]
    if motion.shake > 0:
        bullets.append(f"Shake {motion.shake:.1f}")
    return FactorSection(
        factor=FactorName.MOTION,
        title="Device motion",
        bullet_points=bullets,
        score=round(snapshot.motion.score, 2),
        cap=MOTION_CAP,
        share_of_total=_share(snapshot.motion.score, snapshot.total),
    )


def _time_section(snapshot: RiskSnapshot, now: datetime) -> FactorSection:
    factor = snapshot.time.factor
    if factor >= 1.0:
        label = "Late night (00:00-04:00)"
    elif factor >= 0.6:
        label = "Evening (20:00-24:00)"
    elif factor >= 0.4:
        label = "Early morning (04:00-06:00)"
    else:
        label = "Daytime (06:00-20:00)"
    return FactorSection(
        factor=FactorName.TIME,
        title="Time of day",
        bullet_points=[label, f"Evaluated at {now.isoformat(timespec='seconds')}"],
        score=round(snapshot.time.score, 2),
        cap=TIME_CAP,
        share_of_total=_share(snapshot.time.score, snapshot.total),
    )


def _location_section(
    snapshot: RiskSnapshot,
    location: Optional[LocationContext],
    presentation_mode: bool,
) -> FactorSection:
    bullets: list[str] = []
    if location is None:
        bullets.append("Location unavailable; scored as a normal area")
    elif location.matched_zone is None:
        bullets.append(f"At {location.lat:.5f}, {location.lng:.5f}, not inside any risk zone")
    else:
        zone = location.matched_zone
        kind = "high-risk" if zone.kind == ZoneKind.HIGH else "low-risk"
        bullets.append(f"Inside {kind} zone '{zone.name}'")
    if presentation_mode:
        bullets.append("Presentation mode forces the maximum location score")
    return FactorSection(
        factor=FactorName.LOCATION,
        title="Location",
        bullet_points=bullets,
        score=round(snapshot.location.score, 2),
        cap=LOCATION_CAP,
        share_of_total=_share(snapshot.location.score, snapshot.total),
    )
