"""Arithmetic for comparing scores to baselines and to each other."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union

from pinstats.models import LikelyPlayer


def relative_strength(value: float, baseline: float | None) -> float:
    """Percent by which ``value`` deviates from ``baseline``; 0.0 when there is no baseline."""

    if not baseline:
        return 0.0
    return (value - baseline) / baseline * 100


@dataclass(frozen=True)
class Even:
    """Neither side is ahead, including the no-data-on-either-side case."""

    @property
    def sign(self) -> int:
        return 0

    @property
    def sort_value(self) -> float:
        return 0.0

    def __neg__(self) -> "Even":
        return self


@dataclass(frozen=True)
class Lopsided:
    """Only one side has data, so that side wins outright."""

    favors_first: bool

    @property
    def sign(self) -> int:
        return 1 if self.favors_first else -1

    @property
    def sort_value(self) -> float:
        return math.inf if self.favors_first else -math.inf

    def __neg__(self) -> "Lopsided":
        return Lopsided(favors_first=not self.favors_first)


@dataclass(frozen=True)
class Percent:
    """Signed percentage by which the first side exceeds the second."""

    value: float

    @property
    def sign(self) -> int:
        if self.value > 0:
            return 1
        if self.value < 0:
            return -1
        return 0

    @property
    def sort_value(self) -> float:
        return self.value

    def __neg__(self) -> "Percent":
        return Percent(-self.value)


Edge = Union[Even, Lopsided, Percent]


def edge_percent(a: float, b: float) -> Edge:
    """Compare two values using the weaker one as denominator; positive favors ``a``."""

    low = min(a, b)
    if low == 0:
        if a == b:
            return Even()
        return Lopsided(favors_first=a > b)
    return Percent((a - b) / low * 100)


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def likely_score(players: Sequence[LikelyPlayer]) -> float:
    """Mean P50 across a cohort's likely players (0.0 when there are none)."""

    if not players:
        return 0.0
    return sum(player.p50 for player in players) / len(players)


def average_games(players: Sequence[LikelyPlayer]) -> float:
    if not players:
        return 0.0
    return sum(player.games for player in players) / len(players)


def classify_confidence(min_average: float, *, medium: float = 3.0, high: float = 10.0) -> Confidence:
    if min_average >= high:
        return Confidence.HIGH
    if min_average >= medium:
        return Confidence.MEDIUM
    return Confidence.LOW


def confidence_level(
    players_a: Sequence[LikelyPlayer],
    players_b: Sequence[LikelyPlayer],
    *,
    medium: float = 3.0,
    high: float = 10.0,
) -> Confidence:
    """Rate an edge by the thinner of the two cohorts' average games played."""

    min_average = min(average_games(players_a), average_games(players_b))
    return classify_confidence(min_average, medium=medium, high=high)
