"""Percentile aggregation and comparison primitives."""

from .compare import (
    Confidence,
    Edge,
    Even,
    Lopsided,
    Percent,
    average_games,
    classify_confidence,
    confidence_level,
    edge_percent,
    likely_score,
    relative_strength,
)
from .percentile import (
    P50,
    P90,
    aggregate,
    aggregate_groups,
    nearest_rank,
    nearest_rank_index,
    select_likely_players,
)

__all__ = [
    "Confidence",
    "Edge",
    "Even",
    "Lopsided",
    "P50",
    "P90",
    "Percent",
    "aggregate",
    "aggregate_groups",
    "average_games",
    "classify_confidence",
    "confidence_level",
    "edge_percent",
    "likely_score",
    "nearest_rank",
    "nearest_rank_index",
    "relative_strength",
    "select_likely_players",
]
