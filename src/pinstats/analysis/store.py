"""Read contracts the analyses and presentation layers depend on."""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol

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


class AnalysisStore(Protocol):
    def resolve_team_cohort(self, team_key: str) -> TeamCohort: ...

    def venue_machine_set(self, venue_key: str) -> frozenset[str]: ...

    def machine_display_names(self) -> Dict[str, str]: ...

    def league_baseline(self, fraction: float = 0.5) -> Dict[str, float]: ...

    def team_machine_stats(self, team_key: str, venue_key: Optional[str] = None) -> List[TeamMachineStats]: ...

    def player_machine_stats(
        self,
        team_key: str,
        machine_key: str,
        venue_key: Optional[str] = None,
    ) -> List[PlayerStats]: ...

    def single_player_machine_stats(
        self,
        player_name: str,
        venue_key: Optional[str] = None,
    ) -> List[PlayerMachineStats]: ...

    def resolve_player_current_team(self, player_name: str) -> PlayerTeam: ...


class ReferenceStore(Protocol):
    def list_teams(self, search: str = "") -> List[TeamSummary]: ...

    def list_venues(self, search: str = "") -> List[Venue]: ...

    def list_machines(self, search: str = "") -> List[Machine]: ...

    def list_players(self, search: str = "") -> List[PlayerSummary]: ...


class LeagueStore(AnalysisStore, ReferenceStore, Protocol):
    """Everything the CLI and API need from a store."""
