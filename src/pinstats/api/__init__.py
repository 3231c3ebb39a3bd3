"""JSON API over the league analyses."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncIterator, Iterator, List, Optional, Sequence

from fastapi import FastAPI, HTTPException, Query

from pinstats.analysis import AtVenue, LeagueStore, VsOpponent, matchup, player, recommend, scout
from pinstats.analysis.matchup import MachineMatchup, MatchupResult
from pinstats.analysis.player import PlayerResult
from pinstats.analysis.recommend import PlayerPick, RecommendResult
from pinstats.analysis.scout import ScoutResult
from pinstats.analysis.summary import MachineStat
from pinstats.api.schemas import (
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
from pinstats.config import Settings, get_settings
from pinstats.errors import NotFoundError, StoreError
from pinstats.formatting import format_edge
from pinstats.models import Machine, PlayerSummary, TeamSummary, Venue
from pinstats.persistence import SQLiteStore
from pinstats.persistence.cache import InMemoryStore
from pinstats.stats import Even, Lopsided


logger = logging.getLogger("uvicorn.error")


@contextmanager
def _http_errors() -> Iterator[None]:
    try:
        yield
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except StoreError as exc:
        logger.error("League store unavailable: %s", exc)
        raise HTTPException(status_code=503, detail="League data is unavailable") from exc


def _machine_stats(stats: Sequence[MachineStat]) -> List[MachineStatResponse]:
    return [
        MachineStatResponse(
            machine_key=stat.machine_key,
            machine_name=stat.machine_name,
            games=stat.games,
            p50=stat.p50,
            p90=stat.p90,
            league_p50=stat.league_p50,
            relative=stat.relative,
            likely_players=list(stat.likely_players),
            no_venue_data=stat.no_venue_data,
        )
        for stat in stats
    ]


def _scout_to_response(result: ScoutResult) -> ScoutResponse:
    return ScoutResponse(
        team_key=result.team_key,
        venue_key=result.venue_key,
        global_stats=_machine_stats(result.global_stats),
        venue_stats=_machine_stats(result.venue_stats),
        strongest=[stat.machine_key for stat in result.strongest],
        weakest=[stat.machine_key for stat in result.weakest],
    )


def _player_to_response(result: PlayerResult) -> PlayerProfileResponse:
    return PlayerProfileResponse(
        name=result.name,
        team=result.team,
        venue_key=result.venue_key,
        global_stats=_machine_stats(result.global_stats),
        venue_stats=_machine_stats(result.venue_stats),
        strongest=[stat.machine_key for stat in result.strongest],
        weakest=[stat.machine_key for stat in result.weakest],
    )


def _edge_to_response(row: MachineMatchup, team1: str, team2: str) -> EdgeResponse:
    label = format_edge(row.edge, team1, team2, row.confidence)
    if isinstance(row.edge, Even):
        return EdgeResponse(kind="even", label=label)
    favors = team1 if row.edge.sign > 0 else team2
    if isinstance(row.edge, Lopsided):
        return EdgeResponse(kind="lopsided", favors=favors, label=label)
    return EdgeResponse(kind="percent", percent=row.edge.value, favors=favors if row.edge.sign else None, label=label)


def _matchup_to_response(result: MatchupResult) -> MatchupResponse:
    team1, team2 = result.team1_key, result.team2_key
    return MatchupResponse(
        venue_key=result.venue_key,
        team1_key=team1,
        team2_key=team2,
        machines=[
            MachineMatchupResponse(
                machine_key=row.machine_key,
                machine_name=row.machine_name,
                team1_p50=row.team1_p50,
                team2_p50=row.team2_p50,
                team1_likely=list(row.team1_likely),
                team2_likely=list(row.team2_likely),
                team1_score=row.team1_score,
                team2_score=row.team2_score,
                edge=_edge_to_response(row, team1, team2),
                confidence=row.confidence.value,
            )
            for row in result.machines
        ],
        team1_advantages=[row.machine_key for row in result.team1_advantages],
        team2_advantages=[row.machine_key for row in result.team2_advantages],
        contested=[row.machine_key for row in result.contested],
    )


def _picks(picks: Sequence[PlayerPick]) -> List[PlayerPickResponse]:
    return [
        PlayerPickResponse(
            name=pick.name,
            games=pick.games,
            p50=pick.p50,
            p90=pick.p90,
            league_p50=pick.league_p50,
            no_venue_data=pick.no_venue_data,
        )
        for pick in picks
    ]


def _recommend_to_response(result: RecommendResult) -> RecommendResponse:
    verdict = None
    if result.verdict is not None:
        verdict = VerdictResponse(
            assessment=result.verdict.assessment.value,
            message=result.verdict.assessment.message,
            ours=result.verdict.ours.name,
            theirs=result.verdict.theirs.name,
            diff=result.verdict.diff,
        )
    return RecommendResponse(
        team_key=result.team_key,
        machine_key=result.machine_key,
        machine_name=result.machine_name,
        league_p50=result.league_p50,
        players=_picks(result.players),
        venue_key=result.venue_key,
        venue_players=_picks(result.venue_players),
        opponent_key=result.opponent_key,
        opponent_players=_picks(result.opponent_players),
        verdict=verdict,
    )


def create_app(store: Optional[LeagueStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    source = store if store is not None else SQLiteStore(settings.db_path, likely_players=settings.likely_players)
    cache = InMemoryStore(source)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            cache.refresh()
        except StoreError as exc:
            logger.warning("Initial cache refresh failed: %s", exc)
        yield

    app = FastAPI(title="pinstats", lifespan=lifespan)
    app.state.store = cache
    app.state.settings = settings

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/teams", response_model=List[TeamSummary])
    def list_teams(search: str = "") -> List[TeamSummary]:
        with _http_errors():
            return cache.list_teams(search)

    @app.get("/venues", response_model=List[Venue])
    def list_venues(search: str = "") -> List[Venue]:
        with _http_errors():
            return cache.list_venues(search)

    @app.get("/machines", response_model=List[Machine])
    def list_machines(search: str = "") -> List[Machine]:
        with _http_errors():
            return cache.list_machines(search)

    @app.get("/players", response_model=List[PlayerSummary])
    def list_players(search: str = "") -> List[PlayerSummary]:
        with _http_errors():
            return cache.list_players(search)

    @app.get("/teams/{team}/scout", response_model=ScoutResponse)
    def scout_team(team: str, venue: Optional[str] = None) -> ScoutResponse:
        option = AtVenue(venue) if venue else None
        with _http_errors():
            result = scout.analyze(cache, team, option, min_games=settings.min_games_for_analysis)
        return _scout_to_response(result)

    @app.get("/matchup", response_model=MatchupResponse)
    def compare(
        venue: str = Query(...),
        team1: str = Query(...),
        team2: str = Query(...),
    ) -> MatchupResponse:
        with _http_errors():
            result = matchup.compare_teams(
                cache,
                venue,
                team1,
                team2,
                confidence_medium=settings.confidence_medium,
                confidence_high=settings.confidence_high,
            )
        return _matchup_to_response(result)

    @app.get("/teams/{team}/recommend/{machine}", response_model=RecommendResponse)
    def recommend_players(
        team: str,
        machine: str,
        venue: Optional[str] = None,
        vs: Optional[str] = None,
    ) -> RecommendResponse:
        if vs:
            option = VsOpponent(vs, venue=venue)
        elif venue:
            option = AtVenue(venue)
        else:
            option = None
        with _http_errors():
            result = recommend.recommend(cache, team, machine, option, pick_margin=settings.pick_margin)
        return _recommend_to_response(result)

    @app.get("/players/{name}", response_model=PlayerProfileResponse)
    def player_profile(name: str, venue: Optional[str] = None) -> PlayerProfileResponse:
        option = AtVenue(venue) if venue else None
        with _http_errors():
            result = player.analyze(cache, name, option, min_games=settings.min_games_for_analysis)
        return _player_to_response(result)

    return app
