from pathlib import Path
from urllib.parse import quote

import pytest
from httpx import ASGITransport, AsyncClient

from pinstats.api import create_app
from pinstats.config import Settings
from pinstats.persistence.cache import InMemoryStore

from tests.fakes import FakeStore, team_stat


@pytest.fixture
async def client(store, db_path):
    app = create_app(store=store, settings=Settings(db_path=db_path))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        async_client.app = app
        yield async_client


@pytest.mark.anyio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.anyio
async def test_app_wraps_store_in_cache(client: AsyncClient):
    assert isinstance(client.app.state.store, InMemoryStore)


@pytest.mark.anyio
async def test_reference_lists(client: AsyncClient):
    teams = (await client.get("/teams")).json()
    assert [t["key"] for t in teams] == ["KNR", "TTT"]
    assert teams[1]["venue"] == "Seattle Tavern and Pool Hall (STN)"

    venues = (await client.get("/venues", params={"search": "tavern"})).json()
    assert venues == [{"key": "STN", "name": "Seattle Tavern and Pool Hall"}]

    machines = (await client.get("/machines", params={"search": "addams"})).json()
    assert machines == [{"key": "TAF", "name": "The Addams Family"}]


@pytest.mark.anyio
async def test_player_list_does_not_shadow_profiles(client: AsyncClient):
    response = await client.get("/players", params={"search": "knight"})
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["Carol", "Dave", "Eve"]
    assert response.json()[0] == {"name": "Carol", "team_key": "KNR", "team_name": "Knight Riders"}

    profile = await client.get("/players/Carol")
    assert profile.status_code == 200
    assert profile.json()["team"]["team_key"] == "KNR"


@pytest.mark.anyio
async def test_scout(client: AsyncClient):
    response = await client.get("/teams/TTT/scout")
    assert response.status_code == 200
    payload = response.json()
    assert [m["machine_key"] for m in payload["global_stats"]] == ["TAF", "MM", "TZ"]
    taf = payload["global_stats"][0]
    assert (taf["games"], taf["p50"], taf["p90"], taf["league_p50"]) == (3, 400, 500, 300)
    assert [p["name"] for p in taf["likely_players"]] == ["Bob", "Alice"]
    assert payload["strongest"] == ["TAF"]


@pytest.mark.anyio
async def test_scout_at_venue(client: AsyncClient):
    payload = (await client.get("/teams/TTT/scout", params={"venue": "GPA"})).json()

    assert payload["venue_key"] == "GPA"
    assert payload["venue_stats"] == []
    assert all(m["no_venue_data"] for m in payload["global_stats"])


@pytest.mark.anyio
async def test_unknown_team_is_404(client: AsyncClient):
    response = await client.get("/teams/ZZZ/scout")
    assert response.status_code == 404
    assert "ZZZ" in response.json()["detail"]


@pytest.mark.anyio
async def test_matchup(client: AsyncClient):
    response = await client.get("/matchup", params={"venue": "STN", "team1": "TTT", "team2": "KNR"})
    assert response.status_code == 200
    payload = response.json()
    assert [m["machine_key"] for m in payload["machines"]] == ["TAF", "TZ"]
    taf = payload["machines"][0]
    assert taf["edge"]["kind"] == "percent"
    assert taf["edge"]["favors"] == "TTT"
    assert taf["edge"]["label"] == "TTT 70% ▼"
    assert taf["confidence"] == "low"
    assert payload["team1_advantages"] == ["TAF"]
    assert payload["team2_advantages"] == ["TZ"]


@pytest.mark.anyio
async def test_matchup_requires_all_parameters(client: AsyncClient):
    response = await client.get("/matchup", params={"venue": "STN", "team1": "TTT"})
    assert response.status_code == 422


@pytest.mark.anyio
async def test_recommend_vs_opponent(client: AsyncClient):
    response = await client.get("/teams/TTT/recommend/TAF", params={"vs": "KNR"})
    assert response.status_code == 200
    payload = response.json()
    assert [p["name"] for p in payload["players"]] == ["Alice", "Bob"]
    assert [p["name"] for p in payload["opponent_players"]] == ["Carol", "Dave"]
    assert payload["verdict"]["assessment"] == "contested"
    assert payload["verdict"]["diff"] == 200


@pytest.mark.anyio
async def test_player(client: AsyncClient):
    response = await client.get(f"/players/{quote('Alice')}")
    assert response.status_code == 200
    payload = response.json()
    assert payload["team"] == {"team_key": "TTT", "team_name": "The Trailer Trashers"}
    assert [m["machine_key"] for m in payload["global_stats"]] == ["MM", "TAF", "TZ"]


@pytest.mark.anyio
async def test_unknown_player_is_404(client: AsyncClient):
    response = await client.get("/players/Nobody")
    assert response.status_code == 404


@pytest.mark.anyio
async def test_store_failure_is_503(tmp_path: Path):
    source = FakeStore(teams={"TTT": [team_stat("TAF", 3, 400)]})
    app = create_app(store=source, settings=Settings(db_path=tmp_path / "unused.db"))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        source.fail = True
        response = await client.get("/teams/TTT/scout")
    assert response.status_code == 503
