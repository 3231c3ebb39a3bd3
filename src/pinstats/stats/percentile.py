"""Nearest-rank percentiles over raw game scores."""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Dict, Hashable, Iterable, List, Mapping, Sequence, Tuple, TypeVar

from pinstats.models import AggregateStat, LikelyPlayer


K = TypeVar("K", bound=Hashable)

P50 = 0.5
P90 = 0.9


def nearest_rank_index(fraction: float, n: int) -> int:
    """Return the 1-based rank ``floor(fraction * (n + 1))`` clamped to ``[1, n]``."""

    if n < 1:
        raise ValueError("nearest rank is undefined for an empty group")
    index = math.floor(fraction * (n + 1))
    return max(1, min(n, index))


def nearest_rank(sorted_scores: Sequence[float], fraction: float) -> float:
    """Pick the nearest-rank percentile from scores sorted ascending."""

    return float(sorted_scores[nearest_rank_index(fraction, len(sorted_scores)) - 1])


def aggregate(scores: Iterable[float]) -> AggregateStat | None:
    """Summarize a group of scores; an empty group has no stat."""

    ordered = sorted(scores)
    if not ordered:
        return None
    return AggregateStat(
        games=len(ordered),
        p50=nearest_rank(ordered, P50),
        p90=nearest_rank(ordered, P90),
    )


def aggregate_groups(pairs: Iterable[Tuple[K, float]]) -> Dict[K, AggregateStat]:
    """Aggregate ``(group, score)`` pairs; only groups with scores appear."""

    grouped: dict[K, list[float]] = defaultdict(list)
    for key, score in pairs:
        grouped[key].append(score)
    result: Dict[K, AggregateStat] = {}
    for key, scores in grouped.items():
        stat = aggregate(scores)
        if stat is not None:
            result[key] = stat
    return result


def select_likely_players(per_player: Mapping[str, AggregateStat], limit: int) -> List[LikelyPlayer]:
    """Rank players by games played, then P50, and keep the first ``limit``."""

    ranked = sorted(
        per_player.items(),
        key=lambda item: (-item[1].games, -item[1].p50, item[0]),
    )
    return [
        LikelyPlayer(name=name, games=stat.games, p50=stat.p50)
        for name, stat in ranked[: max(0, limit)]
    ]
