"""Scout a team: where its current roster is strong or weak."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from pinstats.analysis.options import AtVenue
from pinstats.analysis.store import AnalysisStore
from pinstats.analysis.summary import MachineStat, enrich, restrict_to_venue, strongest_weakest


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoutResult:
    team_key: str
    venue_key: Optional[str]
    global_stats: Tuple[MachineStat, ...]
    venue_stats: Tuple[MachineStat, ...] = ()
    strongest: Tuple[MachineStat, ...] = ()
    weakest: Tuple[MachineStat, ...] = ()

    @property
    def has_data(self) -> bool:
        return bool(self.global_stats or self.venue_stats)


def analyze(
    store: AnalysisStore,
    team_key: str,
    option: Optional[AtVenue] = None,
    *,
    min_games: int = 3,
) -> ScoutResult:
    """Per-machine stats for ``team_key`` compared to the league, globally or at a venue.

    Raises ``TeamNotFoundError`` for an unknown team. A team with no recorded
    games yields an empty result.
    """

    cohort = store.resolve_team_cohort(team_key)
    baseline = store.league_baseline()
    names = store.machine_display_names()
    global_stats = enrich(store.team_machine_stats(cohort.team_key), baseline, names)

    if option is None:
        strongest, weakest = strongest_weakest(global_stats, min_games=min_games)
        logger.debug("Scouted %s: %d machines", cohort.team_key, len(global_stats))
        return ScoutResult(
            team_key=cohort.team_key,
            venue_key=None,
            global_stats=tuple(global_stats),
            strongest=strongest,
            weakest=weakest,
        )

    venue_machines = store.venue_machine_set(option.key)
    venue_stats = enrich(store.team_machine_stats(cohort.team_key, option.key), baseline, names)
    at_venue = restrict_to_venue(global_stats, venue_machines, venue_stats)
    strongest, weakest = strongest_weakest(at_venue, min_games=min_games)
    logger.debug(
        "Scouted %s at %s: %d venue machines, %d with venue games",
        cohort.team_key,
        option.key,
        len(at_venue),
        len(venue_stats),
    )
    return ScoutResult(
        team_key=cohort.team_key,
        venue_key=option.key,
        global_stats=tuple(at_venue),
        venue_stats=tuple(venue_stats),
        strongest=strongest,
        weakest=weakest,
    )
