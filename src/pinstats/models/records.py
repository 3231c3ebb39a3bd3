"""Canonical records exchanged between the store and the analyses."""

from __future__ import annotations

from typing import List, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class AggregateStat(BaseModel):
    """Nearest-rank summary of a non-empty group of scores."""

    games: int = Field(..., ge=1)
    p50: float
    p90: float

    model_config = ConfigDict(frozen=True)


class LikelyPlayer(BaseModel):
    """A player expected to play a machine, ranked by play volume."""

    name: str
    games: int = Field(..., ge=1)
    p50: float

    model_config = ConfigDict(frozen=True)


class TeamMachineStats(BaseModel):
    """A team cohort's aggregate on one machine plus its likely players."""

    machine_key: str
    games: int = Field(..., ge=1)
    p50: float
    p90: float
    likely_players: List[LikelyPlayer] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class PlayerStats(BaseModel):
    """One roster player's aggregate on a single machine."""

    name: str
    games: int = Field(..., ge=1)
    p50: float
    p90: float

    model_config = ConfigDict(frozen=True)


class PlayerMachineStats(BaseModel):
    """One named player's aggregate on one machine."""

    machine_key: str
    games: int = Field(..., ge=1)
    p50: float
    p90: float

    model_config = ConfigDict(frozen=True)


class TeamCohort(BaseModel):
    """Players on the roster of a team key's most recent season."""

    team_key: str
    season: int
    player_ids: Tuple[int, ...]

    model_config = ConfigDict(frozen=True)


class PlayerTeam(BaseModel):
    team_key: str
    team_name: str

    model_config = ConfigDict(frozen=True)


class Machine(BaseModel):
    key: str
    name: str

    model_config = ConfigDict(frozen=True)


class Venue(BaseModel):
    key: str
    name: str

    model_config = ConfigDict(frozen=True)


class TeamSummary(BaseModel):
    key: str
    name: str
    venue: str = ""

    model_config = ConfigDict(frozen=True)


class PlayerSummary(BaseModel):
    """A latest-season roster entry."""

    name: str
    team_key: str
    team_name: str

    model_config = ConfigDict(frozen=True)
