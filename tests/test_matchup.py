import pytest

from pinstats.analysis import matchup
from pinstats.errors import TeamNotFoundError
from pinstats.stats import Confidence, Lopsided, Percent

from tests.fakes import FakeStore, team_stat


def test_matchup_at_stn(store):
    result = matchup.compare_teams(store, "STN", "TTT", "KNR")

    assert [m.machine_key for m in result.machines] == ["TAF", "TZ"]
    taf, tz = result.machines
    assert taf.team1_score == 425
    assert taf.team2_score == 250
    assert isinstance(taf.edge, Percent)
    assert taf.edge.value == pytest.approx(70.0)
    assert taf.confidence == Confidence.LOW
    assert tz.edge == Percent(-50.0)
    assert [m.machine_key for m in result.team1_advantages] == ["TAF"]
    assert [m.machine_key for m in result.team2_advantages] == ["TZ"]
    assert result.contested == ()


def test_matchup_orders_by_team_one_edge(store):
    result = matchup.compare_teams(store, "GPA", "TTT", "KNR")

    assert [m.machine_key for m in result.machines] == ["MM", "TZ"]
    assert result.machines[0].edge.value == pytest.approx(-100 / 6)


def test_matchup_unknown_venue_is_empty(store):
    result = matchup.compare_teams(store, "XYZ", "TTT", "KNR")

    assert result.machines == ()
    assert not result.has_data


def test_matchup_unknown_team(store):
    with pytest.raises(TeamNotFoundError):
        matchup.compare_teams(store, "STN", "TTT", "ZZZ")


def _fake() -> FakeStore:
    return FakeStore(
        teams={
            "TTT": [
                team_stat("A", 4, 300, ("Alice", 4, 300)),
                team_stat("B", 24, 500, ("Alice", 12, 400), ("Bob", 12, 600)),
                team_stat("E", 2, 100, ("Bob", 2, 100)),
                team_stat("Z", 9, 900, ("Bob", 9, 900)),
            ],
            "KNR": [
                team_stat("B", 20, 500, ("Carol", 10, 500), ("Dave", 10, 500)),
                team_stat("C", 3, 200, ("Carol", 3, 200)),
                team_stat("E", 2, 100, ("Dave", 2, 100)),
            ],
        },
        venues={"STN": frozenset({"A", "B", "C", "D", "E"})},
        names={"A": "Alpha", "B": "Bravo", "C": "Charlie", "E": "Echo"},
    )


def test_one_sided_machines_are_lopsided():
    result = matchup.compare_teams(_fake(), "STN", "TTT", "KNR")

    assert [m.machine_key for m in result.machines] == ["A", "B", "E", "C"]
    alpha, bravo, echo, charlie = result.machines
    assert alpha.edge == Lopsided(favors_first=True)
    assert alpha.confidence == Confidence.LOW
    assert alpha.team2_p50 is None
    assert alpha.team2_score is None
    assert alpha.team2_likely == ()
    assert charlie.edge == Lopsided(favors_first=False)
    assert charlie.team1_p50 is None
    assert bravo.edge == Percent(0.0)
    assert bravo.confidence == Confidence.HIGH
    assert echo.edge.sign == 0
    assert [m.machine_key for m in result.contested] == ["B", "E"]


def test_machines_outside_venue_are_ignored():
    result = matchup.compare_teams(_fake(), "STN", "TTT", "KNR")

    assert "Z" not in [m.machine_key for m in result.machines]
    assert "D" not in [m.machine_key for m in result.machines]


def test_confidence_thresholds_are_passed_through():
    result = matchup.compare_teams(_fake(), "STN", "TTT", "KNR", confidence_medium=1.0, confidence_high=100.0)

    bravo = next(m for m in result.machines if m.machine_key == "B")
    assert bravo.confidence == Confidence.MEDIUM
