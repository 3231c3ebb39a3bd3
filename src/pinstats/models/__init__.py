"""Domain records shared across the store, analyses and API."""

from .records import (
    AggregateStat,
    LikelyPlayer,
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

__all__ = [
    "AggregateStat",
    "LikelyPlayer",
    "Machine",
    "PlayerMachineStats",
    "PlayerStats",
    "PlayerSummary",
    "PlayerTeam",
    "TeamCohort",
    "TeamMachineStats",
    "TeamSummary",
    "Venue",
]
