from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field

from pinstats.models import LikelyPlayer, PlayerTeam


class MachineStatResponse(BaseModel):
    machine_key: str
    machine_name: str
    games: int
    p50: float
    p90: float
    league_p50: float | None
    relative: float
    likely_players: List[LikelyPlayer] = Field(default_factory=list)
    no_venue_data: bool = False


class ScoutResponse(BaseModel):
    team_key: str
    venue_key: str | None = None
    global_stats: List[MachineStatResponse]
    venue_stats: List[MachineStatResponse] = Field(default_factory=list)
    strongest: List[str] = Field(default_factory=list)
    weakest: List[str] = Field(default_factory=list)


class PlayerProfileResponse(BaseModel):
    name: str
    team: PlayerTeam | None = None
    venue_key: str | None = None
    global_stats: List[MachineStatResponse]
    venue_stats: List[MachineStatResponse] = Field(default_factory=list)
    strongest: List[str] = Field(default_factory=list)
    weakest: List[str] = Field(default_factory=list)


class EdgeResponse(BaseModel):
    kind: Literal["even", "lopsided", "percent"]
    percent: float | None = None
    favors: str | None = None
    label: str


class MachineMatchupResponse(BaseModel):
    machine_key: str
    machine_name: str
    team1_p50: float | None
    team2_p50: float | None
    team1_likely: List[LikelyPlayer]
    team2_likely: List[LikelyPlayer]
    team1_score: float | None
    team2_score: float | None
    edge: EdgeResponse
    confidence: Literal["low", "medium", "high"]


class MatchupResponse(BaseModel):
    venue_key: str
    team1_key: str
    team2_key: str
    machines: List[MachineMatchupResponse]
    team1_advantages: List[str] = Field(default_factory=list)
    team2_advantages: List[str] = Field(default_factory=list)
    contested: List[str] = Field(default_factory=list)


class PlayerPickResponse(BaseModel):
    name: str
    games: int
    p50: float
    p90: float
    league_p50: float | None
    no_venue_data: bool = False


class VerdictResponse(BaseModel):
    assessment: Literal["strong", "weak", "contested"]
    message: str
    ours: str
    theirs: str
    diff: float


class RecommendResponse(BaseModel):
    team_key: str
    machine_key: str
    machine_name: str
    league_p50: float | None
    players: List[PlayerPickResponse]
    venue_key: str | None = None
    venue_players: List[PlayerPickResponse] = Field(default_factory=list)
    opponent_key: str | None = None
    opponent_players: List[PlayerPickResponse] = Field(default_factory=list)
    verdict: VerdictResponse | None = None
