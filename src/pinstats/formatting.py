"""Human-readable rendering of scores, strengths and edges."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from pinstats.models import LikelyPlayer
from pinstats.stats import Confidence, Edge, Lopsided, Percent, relative_strength

CONFIDENCE_MARKS = {
    Confidence.HIGH: "▲",
    Confidence.MEDIUM: "△",
    Confidence.LOW: "▼",
}

CONFIDENCE_LEGEND = "▲ high confidence  △ medium  ▼ low (based on likely players' games)"


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def format_score(score: float) -> str:
    """Abbreviate a pinball score: ``2.5B``, ``1.2M``, ``45.7K`` or a plain integer."""

    if score >= 1_000_000_000:
        return f"{score / 1_000_000_000:.1f}B"
    if score >= 1_000_000:
        return f"{score / 1_000_000:.1f}M"
    if score >= 1_000:
        return f"{score / 1_000:.1f}K"
    return f"{score:.0f}"


def format_optional_score(score: Optional[float]) -> str:
    return "-" if score is None else format_score(score)


def format_rel_str(p50: float, league_p50: Optional[float]) -> str:
    """``(+50%)`` style comparison with the league; empty without a baseline."""

    if not league_p50:
        return ""
    rounded = _round_half_away(relative_strength(p50, league_p50))
    if rounded == 0:
        return "(avg)"
    return f"({rounded:+d}%)"


def format_p50(p50: float, league_p50: Optional[float]) -> str:
    rel = format_rel_str(p50, league_p50)
    score = format_score(p50)
    return f"{score} {rel}" if rel else score


def format_likely(players: Sequence[LikelyPlayer]) -> str:
    return ", ".join(f"{p.name} ({p.games})" for p in players) or "-"


def confidence_mark(confidence: Confidence) -> str:
    return CONFIDENCE_MARKS[confidence]


def format_edge(edge: Edge, team1: str, team2: str, confidence: Confidence) -> str:
    """Name the favoured team with its margin; a lopsided edge names the team alone."""

    if isinstance(edge, Lopsided):
        return team1 if edge.favors_first else team2
    if isinstance(edge, Percent):
        rounded = _round_half_away(edge.value)
        if rounded > 0:
            return f"{team1} {rounded}% {confidence_mark(confidence)}"
        if rounded < 0:
            return f"{team2} {-rounded}% {confidence_mark(confidence)}"
    return "Even"
