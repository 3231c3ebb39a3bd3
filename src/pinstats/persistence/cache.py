"""In-memory snapshot of slow-changing reference data in front of a live store."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, TypeVar, Union

from pinstats.analysis.store import LeagueStore
from pinstats.models import (
    Machine,
    PlayerMachineStats,
    PlayerStats,
    PlayerSummary,
    PlayerTeam,
    TeamCohort,
    TeamMachineStats,
    TeamSummary,
    Venue,
)
from pinstats.stats import P50


logger = logging.getLogger(__name__)

Listed = TypeVar("Listed", bound=Union[Machine, Venue, TeamSummary])


@dataclass(frozen=True)
class _Snapshot:
    teams: tuple[TeamSummary, ...]
    venues: tuple[Venue, ...]
    machines: tuple[Machine, ...]
    players: tuple[PlayerSummary, ...]
    names: Dict[str, str]
    baseline: Dict[str, float]
    venue_machines: Dict[str, frozenset[str]]


def _search(items: Sequence[Listed], search: str) -> List[Listed]:
    if not search:
        return list(items)
    needle = search.lower()
    return [item for item in items if needle in item.key.lower() or needle in item.name.lower()]


class InMemoryStore:
    """Serves reference lists, names, baselines and venue machine sets from memory.

    Cohort and score queries pass through to the wrapped store. ``refresh``
    builds a complete snapshot before swapping it in, so readers never see a
    partial one.
    """

    def __init__(self, source: LeagueStore):
        self.source = source
        self._lock = threading.Lock()
        self._snapshot: Optional[_Snapshot] = None

    def refresh(self) -> _Snapshot:
        venues = tuple(self.source.list_venues())
        snapshot = _Snapshot(
            teams=tuple(self.source.list_teams()),
            venues=venues,
            machines=tuple(self.source.list_machines()),
            players=tuple(self.source.list_players()),
            names=dict(self.source.machine_display_names()),
            baseline=dict(self.source.league_baseline(P50)),
            venue_machines={venue.key: self.source.venue_machine_set(venue.key) for venue in venues},
        )
        with self._lock:
            self._snapshot = snapshot
        logger.info(
            "Reference cache refreshed: %d teams, %d venues, %d machines, %d players",
            len(snapshot.teams),
            len(snapshot.venues),
            len(snapshot.machines),
            len(snapshot.players),
        )
        return snapshot

    def _current(self) -> _Snapshot:
        with self._lock:
            snapshot = self._snapshot
        if snapshot is None:
            snapshot = self.refresh()
        return snapshot

    def list_teams(self, search: str = "") -> List[TeamSummary]:
        return _search(self._current().teams, search)

    def list_venues(self, search: str = "") -> List[Venue]:
        return _search(self._current().venues, search)

    def list_machines(self, search: str = "") -> List[Machine]:
        return _search(self._current().machines, search)

    def list_players(self, search: str = "") -> List[PlayerSummary]:
        players = self._current().players
        if not search:
            return list(players)
        needle = search.lower()
        return [
            p
            for p in players
            if needle in p.name.lower() or needle in p.team_key.lower() or needle in p.team_name.lower()
        ]

    def machine_display_names(self) -> Dict[str, str]:
        return dict(self._current().names)

    def league_baseline(self, fraction: float = P50) -> Dict[str, float]:
        if fraction != P50:
            return self.source.league_baseline(fraction)
        return dict(self._current().baseline)

    def venue_machine_set(self, venue_key: str) -> frozenset[str]:
        cached = self._current().venue_machines.get(venue_key.strip().upper())
        if cached is not None:
            return cached
        return self.source.venue_machine_set(venue_key)

    def resolve_team_cohort(self, team_key: str) -> TeamCohort:
        return self.source.resolve_team_cohort(team_key)

    def resolve_player_current_team(self, player_name: str) -> PlayerTeam:
        return self.source.resolve_player_current_team(player_name)

    def team_machine_stats(self, team_key: str, venue_key: Optional[str] = None) -> List[TeamMachineStats]:
        return self.source.team_machine_stats(team_key, venue_key)

    def player_machine_stats(
        self,
        team_key: str,
        machine_key: str,
        venue_key: Optional[str] = None,
    ) -> List[PlayerStats]:
        return self.source.player_machine_stats(team_key, machine_key, venue_key)

    def single_player_machine_stats(
        self,
        player_name: str,
        venue_key: Optional[str] = None,
    ) -> List[PlayerMachineStats]:
        return self.source.single_player_machine_stats(player_name, venue_key)
