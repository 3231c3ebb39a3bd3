from __future__ import annotations

from pathlib import Path
from typing import Iterable, Tuple

import pytest

from pinstats.persistence import SQLiteStore


MACHINES = {
    "TAF": "The Addams Family",
    "TZ": "Twilight Zone",
    "MM": "Medieval Madness",
}


def play(
    store: SQLiteStore,
    match_id: int,
    round_number: int,
    machine_key: str,
    results: Iterable[Tuple[int, int, int]],
    *,
    doubles: bool = False,
) -> int:
    """Record one game; ``results`` holds ``(player_id, team_id, score)`` in play order."""

    game_id = store.insert_game(
        match_id=match_id,
        round_number=round_number,
        machine_key=machine_key,
        is_doubles=doubles,
    )
    for position, (player_id, team_id, score) in enumerate(results, start=1):
        store.insert_game_result(
            game_id=game_id,
            player_id=player_id,
            team_id=team_id,
            position=position,
            score=score,
        )
    return game_id


def seed_league(store: SQLiteStore) -> dict[str, int]:
    """Season 23: TTT (Alice, Bob) hosts KNR (Carol, Dave, Eve) at STN."""

    ids: dict[str, int] = {}
    ids["season"] = store.upsert_season(23)
    ids["STN"] = store.upsert_venue("STN", "Seattle Tavern and Pool Hall")
    ids["GPA"] = store.upsert_venue("GPA", "Georgetown Pizza and Arcade")

    for key, name in MACHINES.items():
        store.upsert_machine(key, name)
    for venue, machine in (("STN", "TAF"), ("STN", "TZ"), ("GPA", "MM"), ("GPA", "TZ")):
        store.upsert_venue_machine(ids[venue], machine)

    ids["TTT"] = store.upsert_team("TTT", "The Trailer Trashers", season_id=ids["season"], home_venue_id=ids["STN"])
    ids["KNR"] = store.upsert_team("KNR", "Knight Riders", season_id=ids["season"], home_venue_id=ids["GPA"])

    for name in ("Alice", "Bob", "Carol", "Dave", "Eve"):
        ids[name] = store.upsert_player(name)
    for name, team in (("Alice", "TTT"), ("Bob", "TTT"), ("Carol", "KNR"), ("Dave", "KNR"), ("Eve", "KNR")):
        store.upsert_roster(ids[name], ids[team])

    ids["match"] = store.upsert_match(
        key="mnp-23-1-TTT-KNR",
        season_id=ids["season"],
        week=1,
        home_team_id=ids["TTT"],
        away_team_id=ids["KNR"],
        venue_id=ids["STN"],
        date="2025-01-15",
    )
    ttt, knr, match = ids["TTT"], ids["KNR"], ids["match"]
    play(
        store,
        match,
        1,
        "TAF",
        [(ids["Alice"], ttt, 500), (ids["Bob"], ttt, 400), (ids["Carol"], knr, 300), (ids["Dave"], knr, 200)],
        doubles=True,
    )
    play(store, match, 2, "TZ", [(ids["Alice"], ttt, 100), (ids["Carol"], knr, 150)])
    play(store, match, 3, "TAF", [(ids["Bob"], ttt, 350), (ids["Dave"], knr, 250)])
    play(store, match, 4, "MM", [(ids["Alice"], ttt, 600), (ids["Carol"], knr, 700)])
    return ids


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "league.db"


@pytest.fixture
def league(db_path: Path) -> Tuple[SQLiteStore, dict[str, int]]:
    store = SQLiteStore(db_path)
    return store, seed_league(store)


@pytest.fixture
def store(league: Tuple[SQLiteStore, dict[str, int]]) -> SQLiteStore:
    return league[0]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
