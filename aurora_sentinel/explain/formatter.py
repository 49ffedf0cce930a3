"""Plain-text rendering of a RiskExplanation for logs and simple clients."""

from __future__ import annotations

from aurora_sentinel.domain.explanation import RiskExplanation


def format_plain(explanation: RiskExplanation) -> str:
    """Deterministic plain-text formatting."""
    lines = [f"Risk {explanation.level.value.upper()}: {explanation.total:.1f}/100"]
    lines.append("=" * 50)
    lines.append(explanation.headline)
    lines.append(f"Largest contributor: {explanation.dominant_factor.value}")
    lines.append("")

    for section in explanation.sections:
        lines.append(
            f"--- {section.title}: {section.score:.1f}/{section.cap:.0f} "
            f"({section.share_of_total:.0%} of total) ---"
        )
        for bp in section.bullet_points:
            lines.append(f"  • {bp}")
        lines.append("")

    return "\n".join(lines)
