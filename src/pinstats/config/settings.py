"""Runtime settings resolved from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


logger = logging.getLogger(__name__)

_DB_PATH_ENV = "PINSTATS_DB_PATH"
_LIKELY_PLAYERS_ENV = "PINSTATS_LIKELY_PLAYERS"
_MIN_GAMES_ENV = "PINSTATS_MIN_GAMES"
_PICK_MARGIN_ENV = "PINSTATS_PICK_MARGIN"
_CONFIDENCE_MEDIUM_ENV = "PINSTATS_CONFIDENCE_MEDIUM"
_CONFIDENCE_HIGH_ENV = "PINSTATS_CONFIDENCE_HIGH"

_LIKELY_PLAYERS_DEFAULT = 2
_MIN_GAMES_DEFAULT = 3
_PICK_MARGIN_DEFAULT = 1_000_000.0
_CONFIDENCE_MEDIUM_DEFAULT = 3.0
_CONFIDENCE_HIGH_DEFAULT = 10.0


@dataclass(frozen=True)
class Settings:
    db_path: Path
    likely_players: int = _LIKELY_PLAYERS_DEFAULT
    min_games_for_analysis: int = _MIN_GAMES_DEFAULT
    pick_margin: float = _PICK_MARGIN_DEFAULT
    confidence_medium: float = _CONFIDENCE_MEDIUM_DEFAULT
    confidence_high: float = _CONFIDENCE_HIGH_DEFAULT


def _env_float(name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def cache_dir() -> Path:
    """Return the pinstats cache directory, honouring XDG_CACHE_HOME."""

    base = os.getenv("XDG_CACHE_HOME")
    if base:
        return Path(base) / "pinstats"
    return Path.home() / ".cache" / "pinstats"


def load_settings() -> Settings:
    """Build settings from the current environment."""

    env_db = os.getenv(_DB_PATH_ENV)
    db_path = Path(env_db) if env_db else cache_dir() / "pinstats.db"

    medium = _env_float(_CONFIDENCE_MEDIUM_ENV, _CONFIDENCE_MEDIUM_DEFAULT, clamp_min=0.0)
    high = _env_float(_CONFIDENCE_HIGH_ENV, _CONFIDENCE_HIGH_DEFAULT, clamp_min=0.0)
    if high < medium:
        logger.warning(
            "%s (%.1f) is below %s (%.1f); using defaults",
            _CONFIDENCE_HIGH_ENV,
            high,
            _CONFIDENCE_MEDIUM_ENV,
            medium,
        )
        medium, high = _CONFIDENCE_MEDIUM_DEFAULT, _CONFIDENCE_HIGH_DEFAULT

    return Settings(
        db_path=db_path,
        likely_players=_env_int(_LIKELY_PLAYERS_ENV, _LIKELY_PLAYERS_DEFAULT, min_value=1),
        min_games_for_analysis=_env_int(_MIN_GAMES_ENV, _MIN_GAMES_DEFAULT, min_value=1),
        pick_margin=_env_float(_PICK_MARGIN_ENV, _PICK_MARGIN_DEFAULT, clamp_min=0.0),
        confidence_medium=medium,
        confidence_high=high,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return process-wide settings, loaded once."""

    return load_settings()
