"""Head-to-head comparison of two teams over a venue's machines."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from pinstats.analysis.store import AnalysisStore
from pinstats.analysis.summary import machine_name
from pinstats.models import LikelyPlayer, TeamMachineStats
from pinstats.stats import Confidence, Edge, Lopsided, confidence_level, edge_percent, likely_score


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MachineMatchup:
    machine_key: str
    machine_name: str
    team1_p50: Optional[float]
    team2_p50: Optional[float]
    team1_likely: Tuple[LikelyPlayer, ...]
    team2_likely: Tuple[LikelyPlayer, ...]
    team1_score: Optional[float]
    team2_score: Optional[float]
    edge: Edge
    confidence: Confidence


@dataclass(frozen=True)
class MatchupResult:
    venue_key: str
    team1_key: str
    team2_key: str
    machines: Tuple[MachineMatchup, ...]

    @property
    def has_data(self) -> bool:
        return bool(self.machines)

    @property
    def team1_advantages(self) -> Tuple[MachineMatchup, ...]:
        return tuple(m for m in self.machines if m.edge.sign > 0)

    @property
    def team2_advantages(self) -> Tuple[MachineMatchup, ...]:
        return tuple(m for m in self.machines if m.edge.sign < 0)

    @property
    def contested(self) -> Tuple[MachineMatchup, ...]:
        return tuple(m for m in self.machines if m.edge.sign == 0)


def _compare_machine(
    key: str,
    name: str,
    first: Optional[TeamMachineStats],
    second: Optional[TeamMachineStats],
    *,
    medium: float,
    high: float,
) -> MachineMatchup:
    first_likely = tuple(first.likely_players) if first else ()
    second_likely = tuple(second.likely_players) if second else ()
    first_score = likely_score(first_likely) if first else None
    second_score = likely_score(second_likely) if second else None

    if first is not None and second is not None:
        edge: Edge = edge_percent(first_score, second_score)
        confidence = confidence_level(first_likely, second_likely, medium=medium, high=high)
    else:
        edge = Lopsided(favors_first=first is not None)
        confidence = Confidence.LOW

    return MachineMatchup(
        machine_key=key,
        machine_name=name,
        team1_p50=first.p50 if first else None,
        team2_p50=second.p50 if second else None,
        team1_likely=first_likely,
        team2_likely=second_likely,
        team1_score=first_score,
        team2_score=second_score,
        edge=edge,
        confidence=confidence,
    )


def compare_teams(
    store: AnalysisStore,
    venue_key: str,
    team1_key: str,
    team2_key: str,
    *,
    confidence_medium: float = 3.0,
    confidence_high: float = 10.0,
) -> MatchupResult:
    """Compare the likely players of two teams on every venue machine either has played.

    Machines are ordered by team 1's advantage, largest first.
    """

    first = store.resolve_team_cohort(team1_key)
    second = store.resolve_team_cohort(team2_key)
    venue_machines = store.venue_machine_set(venue_key)
    if not venue_machines:
        logger.debug("Venue %s has no machines on record", venue_key)
        return MatchupResult(venue_key=venue_key, team1_key=first.team_key, team2_key=second.team_key, machines=())

    names = store.machine_display_names()
    first_stats: Dict[str, TeamMachineStats] = {
        stat.machine_key: stat for stat in store.team_machine_stats(first.team_key)
    }
    second_stats: Dict[str, TeamMachineStats] = {
        stat.machine_key: stat for stat in store.team_machine_stats(second.team_key)
    }

    machines = [
        _compare_machine(
            key,
            machine_name(names, key),
            first_stats.get(key),
            second_stats.get(key),
            medium=confidence_medium,
            high=confidence_high,
        )
        for key in venue_machines
        if key in first_stats or key in second_stats
    ]
    machines.sort(key=lambda m: (-m.edge.sort_value, m.machine_name))
    logger.debug(
        "Matchup %s vs %s at %s: %d machines",
        first.team_key,
        second.team_key,
        venue_key,
        len(machines),
    )
    return MatchupResult(
        venue_key=venue_key,
        team1_key=first.team_key,
        team2_key=second.team_key,
        machines=tuple(machines),
    )
