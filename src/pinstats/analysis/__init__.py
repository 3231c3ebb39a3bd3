"""Scout, matchup, recommend and player analyses over an analysis store."""

from . import matchup, player, recommend, scout
from .options import AtVenue, RecommendOption, VsOpponent
from .store import AnalysisStore, LeagueStore, ReferenceStore

__all__ = [
    "AnalysisStore",
    "AtVenue",
    "LeagueStore",
    "RecommendOption",
    "ReferenceStore",
    "VsOpponent",
    "matchup",
    "player",
    "recommend",
    "scout",
]
