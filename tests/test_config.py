from pathlib import Path

import pytest

from pinstats.config import cache_dir, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "PINSTATS_DB_PATH",
        "PINSTATS_LIKELY_PLAYERS",
        "PINSTATS_MIN_GAMES",
        "PINSTATS_PICK_MARGIN",
        "PINSTATS_CONFIDENCE_MEDIUM",
        "PINSTATS_CONFIDENCE_HIGH",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    settings = load_settings()

    assert settings.db_path == tmp_path / "pinstats" / "pinstats.db"
    assert settings.likely_players == 2
    assert settings.min_games_for_analysis == 3
    assert settings.pick_margin == 1_000_000
    assert (settings.confidence_medium, settings.confidence_high) == (3.0, 10.0)


def test_cache_dir_without_xdg(monkeypatch):
    monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
    assert cache_dir() == Path.home() / ".cache" / "pinstats"


def test_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("PINSTATS_DB_PATH", str(tmp_path / "league.db"))
    monkeypatch.setenv("PINSTATS_LIKELY_PLAYERS", "3")
    monkeypatch.setenv("PINSTATS_PICK_MARGIN", "250000")
    settings = load_settings()

    assert settings.db_path == tmp_path / "league.db"
    assert settings.likely_players == 3
    assert settings.pick_margin == 250_000


def test_invalid_values_fall_back_with_warning(monkeypatch, caplog):
    monkeypatch.setenv("PINSTATS_LIKELY_PLAYERS", "many")
    monkeypatch.setenv("PINSTATS_MIN_GAMES", "0")
    with caplog.at_level("WARNING"):
        settings = load_settings()

    assert settings.likely_players == 2
    assert settings.min_games_for_analysis == 1
    assert "PINSTATS_LIKELY_PLAYERS" in caplog.text


def test_inverted_confidence_thresholds_use_defaults(monkeypatch, caplog):
    monkeypatch.setenv("PINSTATS_CONFIDENCE_MEDIUM", "12")
    monkeypatch.setenv("PINSTATS_CONFIDENCE_HIGH", "4")
    with caplog.at_level("WARNING"):
        settings = load_settings()

    assert (settings.confidence_medium, settings.confidence_high) == (3.0, 10.0)
    assert "PINSTATS_CONFIDENCE_HIGH" in caplog.text
