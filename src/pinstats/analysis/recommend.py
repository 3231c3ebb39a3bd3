"""Which roster players should play a given machine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Tuple

from pinstats.analysis.options import AtVenue, RecommendOption, VsOpponent
from pinstats.analysis.store import AnalysisStore
from pinstats.analysis.summary import machine_name
from pinstats.models import PlayerStats


logger = logging.getLogger(__name__)

DEFAULT_PICK_MARGIN = 1_000_000.0


class Assessment(str, Enum):
    STRONG = "strong"
    WEAK = "weak"
    CONTESTED = "contested"

    @property
    def message(self) -> str:
        return {
            Assessment.STRONG: "Strong pick - your best player outscores theirs",
            Assessment.WEAK: "Weak pick - their best player outscores yours",
            Assessment.CONTESTED: "Contested - scores are close",
        }[self]


@dataclass(frozen=True)
class PlayerPick:
    name: str
    games: int
    p50: float
    p90: float
    league_p50: Optional[float]
    no_venue_data: bool = False


@dataclass(frozen=True)
class Verdict:
    assessment: Assessment
    ours: PlayerPick
    theirs: PlayerPick
    diff: float


@dataclass(frozen=True)
class RecommendResult:
    team_key: str
    machine_key: str
    machine_name: str
    league_p50: Optional[float]
    players: Tuple[PlayerPick, ...]
    venue_key: Optional[str] = None
    venue_players: Tuple[PlayerPick, ...] = ()
    opponent_key: Optional[str] = None
    opponent_players: Tuple[PlayerPick, ...] = ()
    verdict: Optional[Verdict] = None

    @property
    def has_data(self) -> bool:
        return bool(self.players or self.venue_players or self.opponent_players)


def _picks(stats: Iterable[PlayerStats], league_p50: Optional[float]) -> List[PlayerPick]:
    ordered = sorted(stats, key=lambda s: (-s.p50, -s.games, s.name))
    return [
        PlayerPick(name=s.name, games=s.games, p50=s.p50, p90=s.p90, league_p50=league_p50)
        for s in ordered
    ]


def assess(ours: PlayerPick, theirs: PlayerPick, *, margin: float = DEFAULT_PICK_MARGIN) -> Verdict:
    """Compare two best players; beyond ``margin`` either way is decisive."""

    diff = ours.p50 - theirs.p50
    if diff > margin:
        assessment = Assessment.STRONG
    elif diff < -margin:
        assessment = Assessment.WEAK
    else:
        assessment = Assessment.CONTESTED
    return Verdict(assessment=assessment, ours=ours, theirs=theirs, diff=diff)


def _basic(
    store: AnalysisStore,
    team_key: str,
    machine_key: str,
    baseline: Mapping[str, float],
    names: Mapping[str, str],
) -> RecommendResult:
    league_p50 = baseline.get(machine_key)
    players = _picks(store.player_machine_stats(team_key, machine_key), league_p50)
    return RecommendResult(
        team_key=team_key,
        machine_key=machine_key,
        machine_name=machine_name(names, machine_key),
        league_p50=league_p50,
        players=tuple(players),
    )


def _at_venue(
    store: AnalysisStore,
    team_key: str,
    machine_key: str,
    venue_key: str,
    baseline: Mapping[str, float],
    names: Mapping[str, str],
) -> RecommendResult:
    league_p50 = baseline.get(machine_key)
    venue_players = _picks(store.player_machine_stats(team_key, machine_key, venue_key), league_p50)
    played_here = {pick.name for pick in venue_players}
    players = [
        PlayerPick(
            name=pick.name,
            games=pick.games,
            p50=pick.p50,
            p90=pick.p90,
            league_p50=league_p50,
            no_venue_data=pick.name not in played_here,
        )
        for pick in _picks(store.player_machine_stats(team_key, machine_key), league_p50)
    ]
    return RecommendResult(
        team_key=team_key,
        machine_key=machine_key,
        machine_name=machine_name(names, machine_key),
        league_p50=league_p50,
        players=tuple(players),
        venue_key=venue_key,
        venue_players=tuple(venue_players),
    )


def _vs_opponent(
    store: AnalysisStore,
    team_key: str,
    machine_key: str,
    opponent: VsOpponent,
    baseline: Mapping[str, float],
    names: Mapping[str, str],
    *,
    margin: float,
) -> RecommendResult:
    league_p50 = baseline.get(machine_key)
    ours = _picks(store.player_machine_stats(team_key, machine_key, opponent.venue), league_p50)
    theirs = _picks(store.player_machine_stats(opponent.key, machine_key, opponent.venue), league_p50)
    verdict = assess(ours[0], theirs[0], margin=margin) if ours and theirs else None
    return RecommendResult(
        team_key=team_key,
        machine_key=machine_key,
        machine_name=machine_name(names, machine_key),
        league_p50=league_p50,
        players=tuple(ours),
        venue_key=opponent.venue,
        opponent_key=opponent.key,
        opponent_players=tuple(theirs),
        verdict=verdict,
    )


def recommend(
    store: AnalysisStore,
    team_key: str,
    machine_key: str,
    option: RecommendOption = None,
    *,
    pick_margin: float = DEFAULT_PICK_MARGIN,
) -> RecommendResult:
    """Rank a team's players on one machine, optionally at a venue or against an opponent.

    Raises ``TeamNotFoundError`` when the team or the opponent is unknown.
    """

    team = store.resolve_team_cohort(team_key).team_key
    if isinstance(option, VsOpponent):
        opponent = store.resolve_team_cohort(option.key).team_key
        option = VsOpponent(key=opponent, venue=option.venue)
    baseline = store.league_baseline()
    names = store.machine_display_names()

    if isinstance(option, VsOpponent):
        logger.debug("Recommend %s on %s vs %s", team, machine_key, option.key)
        return _vs_opponent(store, team, machine_key, option, baseline, names, margin=pick_margin)
    if isinstance(option, AtVenue):
        logger.debug("Recommend %s on %s at %s", team, machine_key, option.key)
        return _at_venue(store, team, machine_key, option.key, baseline, names)
    logger.debug("Recommend %s on %s", team, machine_key)
    return _basic(store, team, machine_key, baseline, names)
