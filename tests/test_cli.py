import pytest

from pinstats.cli import EXIT_NOT_FOUND, EXIT_OK, EXIT_STORE_ERROR, main

from tests.conftest import play


@pytest.fixture
def run(store, db_path, capsys):
    def _run(*argv: str):
        code = main(["--db", str(db_path), *argv])
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    return _run


def test_scout(run):
    code, out, _ = run("scout", "TTT")

    assert code == EXIT_OK
    assert "Strongest: The Addams Family" in out


def test_scout_at_venue_marks_missing_data(run):
    code, out, _ = run("scout", "TTT", "--venue", "GPA")

    assert code == EXIT_OK
    assert "*No GPA data" in out


def test_scout_unknown_team(run):
    code, out, err = run("scout", "ZZZ")

    assert code == EXIT_NOT_FOUND
    assert "No such team" in err
    assert out == ""


def test_matchup(run):
    code, out, _ = run("matchup", "STN", "TTT", "KNR")

    assert code == EXIT_OK
    assert "TTT advantage: The Addams Family" in out
    assert "KNR advantage: Twilight Zone" in out
    assert "high confidence" in out


def test_matchup_without_venue_machines(run):
    code, out, _ = run("matchup", "XYZ", "TTT", "KNR")

    assert code == EXIT_OK
    assert "No machines with data" in out


def test_recommend_vs_opponent(run):
    code, out, _ = run("recommend", "TTT", "TAF", "--vs", "KNR")

    assert code == EXIT_OK
    assert "Contested" in out
    assert "Carol" in out


def test_player(run):
    code, out, _ = run("player", "Alice")

    assert code == EXIT_OK
    assert "The Trailer Trashers" in out


def test_player_unknown(run):
    code, _, err = run("player", "Nobody")

    assert code == EXIT_NOT_FOUND
    assert "No such player" in err


def test_list_commands(run):
    code, out, _ = run("teams", "trash")
    assert code == EXIT_OK
    assert "TTT" in out
    assert "KNR" not in out

    _, out, _ = run("venues")
    assert "GPA" in out and "STN" in out

    _, out, _ = run("machines", "tz")
    assert "Twilight Zone" in out
    assert "Medieval" not in out


def test_unreadable_database(tmp_path, capsys):
    code = main(["--db", str(tmp_path), "teams"])

    assert code == EXIT_STORE_ERROR
    assert "Error" in capsys.readouterr().err


def test_players_command(run):
    code, out, _ = run("players", "knight")

    assert code == EXIT_OK
    assert "Carol" in out and "Eve" in out
    assert "Alice" not in out


def test_stored_names_are_not_markup(run, league):
    store, ids = league
    zed = store.upsert_player("Zed [/]")
    store.upsert_roster(zed, ids["TTT"])
    play(store, ids["match"], 5, "TAF", [(zed, ids["TTT"], 450)])

    code, out, _ = run("recommend", "TTT", "TAF")
    assert code == EXIT_OK
    assert "Zed [/]" in out

    code, out, _ = run("player", "Zed [/]")
    assert code == EXIT_OK
    assert "Zed [/]" in out

    code, out, _ = run("players", "zed")
    assert code == EXIT_OK
    assert "Zed [/]" in out


def test_empty_machine_key_has_no_games(run):
    code, out, _ = run("recommend", "TTT", "")

    assert code == EXIT_OK
    assert "No games found" in out
