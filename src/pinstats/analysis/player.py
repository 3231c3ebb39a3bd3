"""Single-player machine profile."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from pinstats.analysis.options import AtVenue
from pinstats.analysis.store import AnalysisStore
from pinstats.analysis.summary import MachineStat, enrich, restrict_to_venue, strongest_weakest
from pinstats.errors import PlayerNotFoundError
from pinstats.models import PlayerTeam


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerResult:
    name: str
    team: Optional[PlayerTeam]
    venue_key: Optional[str]
    global_stats: Tuple[MachineStat, ...]
    venue_stats: Tuple[MachineStat, ...] = ()
    strongest: Tuple[MachineStat, ...] = ()
    weakest: Tuple[MachineStat, ...] = ()

    @property
    def has_data(self) -> bool:
        return bool(self.global_stats or self.venue_stats)


def _current_team(store: AnalysisStore, name: str) -> Optional[PlayerTeam]:
    try:
        return store.resolve_player_current_team(name)
    except PlayerNotFoundError:
        logger.debug("No roster history for %s", name)
        return None


def analyze(
    store: AnalysisStore,
    name: str,
    option: Optional[AtVenue] = None,
    *,
    min_games: int = 3,
) -> PlayerResult:
    """Profile one player across machines, globally or at a venue.

    Raises ``PlayerNotFoundError`` when the player has neither scores nor a roster.
    """

    raw = store.single_player_machine_stats(name)
    team = _current_team(store, name)
    if not raw and team is None:
        raise PlayerNotFoundError(name)

    baseline = store.league_baseline()
    names = store.machine_display_names()
    global_stats = enrich(raw, baseline, names)

    if option is None:
        strongest, weakest = strongest_weakest(global_stats, min_games=min_games)
        return PlayerResult(
            name=name,
            team=team,
            venue_key=None,
            global_stats=tuple(global_stats),
            strongest=strongest,
            weakest=weakest,
        )

    venue_machines = store.venue_machine_set(option.key)
    venue_stats = [
        stat
        for stat in enrich(store.single_player_machine_stats(name, option.key), baseline, names)
        if stat.machine_key in venue_machines
    ]
    at_venue = restrict_to_venue(global_stats, venue_machines, venue_stats)
    strongest, weakest = strongest_weakest(at_venue, min_games=min_games)
    logger.debug("Profiled %s at %s: %d venue machines", name, option.key, len(at_venue))
    return PlayerResult(
        name=name,
        team=team,
        venue_key=option.key,
        global_stats=tuple(at_venue),
        venue_stats=tuple(venue_stats),
        strongest=strongest,
        weakest=weakest,
    )
