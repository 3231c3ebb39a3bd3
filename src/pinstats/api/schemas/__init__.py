"""Pydantic models for API I/O."""

from .analysis import (
    EdgeResponse,
    MachineMatchupResponse,
    MachineStatResponse,
    MatchupResponse,
    PlayerPickResponse,
    PlayerProfileResponse,
    RecommendResponse,
    ScoutResponse,
    VerdictResponse,
)

__all__ = [
    "EdgeResponse",
    "MachineMatchupResponse",
    "MachineStatResponse",
    "MatchupResponse",
    "PlayerPickResponse",
    "PlayerProfileResponse",
    "RecommendResponse",
    "ScoutResponse",
    "VerdictResponse",
]
