import pytest

from pinstats.analysis import AtVenue, scout
from pinstats.errors import StoreError, TeamNotFoundError

from tests.fakes import FakeStore, team_stat


def _keys(stats):
    return [stat.machine_key for stat in stats]


def test_scout_global(store):
    result = scout.analyze(store, "ttt")

    assert result.team_key == "TTT"
    assert result.venue_key is None
    assert _keys(result.global_stats) == ["TAF", "MM", "TZ"]
    taf = result.global_stats[0]
    assert taf.machine_name == "The Addams Family"
    assert taf.league_p50 == 300
    assert taf.relative == pytest.approx(100 / 3)
    assert [p.name for p in taf.likely_players] == ["Bob", "Alice"]
    # Only TAF reaches three games.
    assert _keys(result.strongest) == ["TAF"]
    assert result.weakest == ()
    assert result.has_data


def test_scout_at_home_venue(store):
    result = scout.analyze(store, "TTT", AtVenue("STN"))

    assert _keys(result.venue_stats) == ["TAF", "TZ"]
    assert _keys(result.global_stats) == ["TAF", "TZ"]
    assert not any(stat.no_venue_data for stat in result.global_stats)


def test_scout_at_unplayed_venue_flags_missing_data(store):
    result = scout.analyze(store, "TTT", AtVenue("GPA"))

    assert result.venue_stats == ()
    assert _keys(result.global_stats) == ["MM", "TZ"]
    assert all(stat.no_venue_data for stat in result.global_stats)
    assert result.has_data


def test_scout_unknown_team(store):
    with pytest.raises(TeamNotFoundError):
        scout.analyze(store, "ZZZ")


def _summary_store() -> FakeStore:
    return FakeStore(
        teams={
            "TTT": [
                team_stat("A", 5, 200),
                team_stat("B", 4, 150),
                team_stat("C", 3, 120),
                team_stat("D", 3, 90),
                team_stat("E", 6, 50),
                team_stat("F", 2, 500),
            ],
            "NEW": [],
        },
        baseline={key: 100.0 for key in "ABCDEF"},
    )


def test_strongest_and_weakest():
    result = scout.analyze(_summary_store(), "TTT")

    assert _keys(result.strongest) == ["A", "B", "C"]
    assert _keys(result.weakest) == ["E", "D", "C"]


def test_summary_respects_min_games():
    result = scout.analyze(_summary_store(), "TTT", min_games=4)

    assert _keys(result.strongest) == ["A", "B", "E"]
    assert result.weakest == ()


def test_missing_baseline_gives_zero_strength():
    store = _summary_store()
    store.baseline = {}
    result = scout.analyze(store, "TTT")

    assert all(stat.relative == 0.0 and stat.league_p50 is None for stat in result.global_stats)


def test_team_without_games():
    result = scout.analyze(_summary_store(), "NEW")

    assert result.global_stats == ()
    assert result.strongest == ()
    assert not result.has_data


def test_store_failure_propagates():
    store = _summary_store()
    store.fail = True
    with pytest.raises(StoreError):
        scout.analyze(store, "TTT")
