"""SQLite-backed store for league scores, rosters and venues."""

from __future__ import annotations

import logging
import sqlite3
from collections import defaultdict
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from pinstats.errors import PlayerNotFoundError, StoreError, TeamNotFoundError
from pinstats.models import (
    AggregateStat,
    Machine,
    PlayerMachineStats,
    PlayerStats,
    PlayerSummary,
    PlayerTeam,
    TeamCohort,
    TeamMachineStats,
    TeamSummary,
    Venue,
)
from pinstats.stats import P50, aggregate_groups, nearest_rank, select_likely_players


logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS machines (
    key TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    manufacturer TEXT,
    year INTEGER
);

CREATE TABLE IF NOT EXISTS seasons (
    id INTEGER PRIMARY KEY,
    number INTEGER NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS players (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS venues (
    id INTEGER PRIMARY KEY,
    key TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL
);

-- Team keys repeat across seasons; a (key, season) pair is one roster.
CREATE TABLE IF NOT EXISTS teams (
    id INTEGER PRIMARY KEY,
    key TEXT NOT NULL,
    name TEXT NOT NULL,
    season_id INTEGER NOT NULL REFERENCES seasons(id),
    home_venue_id INTEGER REFERENCES venues(id),
    UNIQUE(key, season_id)
);

CREATE TABLE IF NOT EXISTS venue_machines (
    venue_id INTEGER NOT NULL REFERENCES venues(id),
    machine_key TEXT NOT NULL,
    PRIMARY KEY (venue_id, machine_key)
);

CREATE TABLE IF NOT EXISTS rosters (
    player_id INTEGER NOT NULL REFERENCES players(id),
    team_id INTEGER NOT NULL REFERENCES teams(id),
    role TEXT NOT NULL DEFAULT 'P',
    PRIMARY KEY (player_id, team_id)
);

CREATE TABLE IF NOT EXISTS matches (
    id INTEGER PRIMARY KEY,
    key TEXT NOT NULL UNIQUE,
    season_id INTEGER NOT NULL REFERENCES seasons(id),
    week INTEGER NOT NULL,
    date TEXT,
    home_team_id INTEGER NOT NULL REFERENCES teams(id),
    away_team_id INTEGER NOT NULL REFERENCES teams(id),
    venue_id INTEGER REFERENCES venues(id)
);

CREATE TABLE IF NOT EXISTS games (
    id INTEGER PRIMARY KEY,
    match_id INTEGER NOT NULL REFERENCES matches(id),
    round INTEGER NOT NULL,
    machine_key TEXT,
    is_doubles INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS game_results (
    game_id INTEGER NOT NULL REFERENCES games(id),
    player_id INTEGER NOT NULL REFERENCES players(id),
    team_id INTEGER NOT NULL REFERENCES teams(id),
    position INTEGER NOT NULL,
    score INTEGER,
    PRIMARY KEY (game_id, player_id)
);

CREATE INDEX IF NOT EXISTS idx_game_results_player ON game_results(player_id);
CREATE INDEX IF NOT EXISTS idx_games_machine ON games(machine_key);
CREATE INDEX IF NOT EXISTS idx_teams_key ON teams(key);
"""

# Every recorded score with the machine it was played on and where the match happened.
_SCORES_SQL = """
    SELECT p.id AS player_id, p.name AS player_name, g.machine_key AS machine_key, gr.score AS score
    FROM game_results gr
    JOIN players p ON p.id = gr.player_id
    JOIN games g ON g.id = gr.game_id
    JOIN matches m ON m.id = g.match_id
    WHERE gr.score IS NOT NULL AND g.machine_key IS NOT NULL
"""


def _normalize_key(key: str) -> str:
    return key.strip().upper()


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


def _like_pattern(search: str) -> str:
    """Case-folded substring pattern for LIKE ... ESCAPE '\\' with wildcards taken literally."""

    escaped = search.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SQLiteStore:
    """Store implementing the analysis read contract over a SQLite file."""

    def __init__(self, db_path: Path | str, *, likely_players: int = 2):
        self._use_uri = isinstance(db_path, str) and db_path.startswith("file:")
        self.db_path: Path | str = db_path if self._use_uri else Path(db_path)
        self.likely_players = likely_players
        self._ensure_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        except sqlite3.Error as exc:
            logger.exception("Unable to open database %s", self.db_path)
            raise StoreError(f"Unable to open database {self.db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            logger.exception("Query failed against %s", self.db_path)
            raise StoreError(f"Query failed: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA)

    # Loading helpers. The sync pipeline populates the database through these.

    def upsert_machine(
        self,
        key: str,
        name: str,
        *,
        manufacturer: Optional[str] = None,
        year: Optional[int] = None,
    ) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO machines (key, name, manufacturer, year) VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    name = excluded.name,
                    manufacturer = excluded.manufacturer,
                    year = excluded.year
                """,
                (key, name, manufacturer, year),
            )

    def upsert_season(self, number: int) -> int:
        with self._connect() as conn:
            conn.execute("INSERT INTO seasons (number) VALUES (?) ON CONFLICT(number) DO NOTHING", (number,))
            row = conn.execute("SELECT id FROM seasons WHERE number = ?", (number,)).fetchone()
        return int(row["id"])

    def upsert_player(self, name: str) -> int:
        with self._connect() as conn:
            conn.execute("INSERT INTO players (name) VALUES (?) ON CONFLICT(name) DO NOTHING", (name,))
            row = conn.execute("SELECT id FROM players WHERE name = ?", (name,)).fetchone()
        return int(row["id"])

    def upsert_venue(self, key: str, name: str) -> int:
        key = _normalize_key(key)
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO venues (key, name) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET name = excluded.name",
                (key, name),
            )
            row = conn.execute("SELECT id FROM venues WHERE key = ?", (key,)).fetchone()
        return int(row["id"])

    def upsert_team(
        self,
        key: str,
        name: str,
        *,
        season_id: int,
        home_venue_id: Optional[int] = None,
    ) -> int:
        key = _normalize_key(key)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO teams (key, name, season_id, home_venue_id) VALUES (?, ?, ?, ?)
                ON CONFLICT(key, season_id) DO UPDATE SET
                    name = excluded.name,
                    home_venue_id = excluded.home_venue_id
                """,
                (key, name, season_id, home_venue_id),
            )
            row = conn.execute(
                "SELECT id FROM teams WHERE key = ? AND season_id = ?",
                (key, season_id),
            ).fetchone()
        return int(row["id"])

    def upsert_venue_machine(self, venue_id: int, machine_key: str) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO venue_machines (venue_id, machine_key) VALUES (?, ?)
                ON CONFLICT(venue_id, machine_key) DO NOTHING
                """,
                (venue_id, machine_key),
            )

    def upsert_roster(self, player_id: int, team_id: int, role: str = "P") -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO rosters (player_id, team_id, role) VALUES (?, ?, ?)
                ON CONFLICT(player_id, team_id) DO UPDATE SET role = excluded.role
                """,
                (player_id, team_id, role),
            )

    def upsert_match(
        self,
        *,
        key: str,
        season_id: int,
        week: int,
        home_team_id: int,
        away_team_id: int,
        venue_id: Optional[int],
        date: Optional[str] = None,
    ) -> int:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO matches (key, season_id, week, date, home_team_id, away_team_id, venue_id)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    week = excluded.week,
                    date = excluded.date,
                    home_team_id = excluded.home_team_id,
                    away_team_id = excluded.away_team_id,
                    venue_id = excluded.venue_id
                """,
                (key, season_id, week, date, home_team_id, away_team_id, venue_id),
            )
            row = conn.execute("SELECT id FROM matches WHERE key = ?", (key,)).fetchone()
        return int(row["id"])

    def insert_game(self, *, match_id: int, round_number: int, machine_key: str, is_doubles: bool = False) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO games (match_id, round, machine_key, is_doubles) VALUES (?, ?, ?, ?)",
                (match_id, round_number, machine_key, int(is_doubles)),
            )
            game_id = cursor.lastrowid
        return int(game_id)

    def insert_game_result(
        self,
        *,
        game_id: int,
        player_id: int,
        team_id: int,
        position: int,
        score: Optional[int],
    ) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO game_results (game_id, player_id, team_id, position, score)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(game_id, player_id) DO UPDATE SET
                    team_id = excluded.team_id,
                    position = excluded.position,
                    score = excluded.score
                """,
                (game_id, player_id, team_id, position, score),
            )

    # Cohort resolution.

    def resolve_team_cohort(self, team_key: str) -> TeamCohort:
        """Return the players on the roster of the latest season that used ``team_key``."""

        key = _normalize_key(team_key)
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT MAX(s.number) AS season
                FROM teams t
                JOIN seasons s ON s.id = t.season_id
                WHERE t.key = ?
                """,
                (key,),
            ).fetchone()
            if row is None or row["season"] is None:
                raise TeamNotFoundError(key)
            season = int(row["season"])
            rows = conn.execute(
                """
                SELECT DISTINCT r.player_id
                FROM rosters r
                JOIN teams t ON t.id = r.team_id
                JOIN seasons s ON s.id = t.season_id
                WHERE t.key = ? AND s.number = ?
                ORDER BY r.player_id
                """,
                (key, season),
            ).fetchall()
        return TeamCohort(team_key=key, season=season, player_ids=tuple(int(r["player_id"]) for r in rows))

    def venue_machine_set(self, venue_key: str) -> frozenset[str]:
        """Machine keys ever associated with a venue; empty when the venue is unknown."""

        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT DISTINCT vm.machine_key
                FROM venue_machines vm
                JOIN venues v ON v.id = vm.venue_id
                WHERE v.key = ?
                """,
                (_normalize_key(venue_key),),
            ).fetchall()
        return frozenset(row["machine_key"] for row in rows)

    def resolve_player_current_team(self, player_name: str) -> PlayerTeam:
        """Return the team of the player's most recent roster membership."""

        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT t.key, t.name
                FROM rosters r
                JOIN players p ON p.id = r.player_id
                JOIN teams t ON t.id = r.team_id
                JOIN seasons s ON s.id = t.season_id
                WHERE p.name = ?
                ORDER BY s.number DESC, t.key
                LIMIT 1
                """,
                (player_name,),
            ).fetchone()
        if row is None:
            raise PlayerNotFoundError(player_name)
        return PlayerTeam(team_key=row["key"], team_name=row["name"])

    # Aggregates.

    def machine_display_names(self) -> Dict[str, str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT key, name FROM machines").fetchall()
        return {row["key"]: row["name"] for row in rows}

    def league_baseline(self, fraction: float = P50) -> Dict[str, float]:
        """Per-machine percentile over every player on a latest-season roster."""

        with self._connect() as conn:
            rows = conn.execute(
                _SCORES_SQL
                + """
                AND p.id IN (
                    SELECT r.player_id
                    FROM rosters r
                    JOIN teams t ON t.id = r.team_id
                    WHERE t.season_id = (
                        SELECT s.id FROM seasons s
                        JOIN teams t2 ON t2.season_id = s.id
                        ORDER BY s.number DESC
                        LIMIT 1
                    )
                )
                """
            ).fetchall()
        by_machine: dict[str, list[float]] = defaultdict(list)
        for row in rows:
            by_machine[row["machine_key"]].append(float(row["score"]))
        return {machine: nearest_rank(sorted(scores), fraction) for machine, scores in by_machine.items()}

    def _cohort_scores(
        self,
        player_ids: Sequence[int],
        *,
        machine_key: Optional[str] = None,
        venue_key: Optional[str] = None,
        venue_machines_only: bool = False,
    ) -> List[sqlite3.Row]:
        if not player_ids:
            return []
        query = _SCORES_SQL + f" AND p.id IN ({_placeholders(len(player_ids))})"
        params: list[object] = list(player_ids)
        if machine_key is not None:
            query += " AND g.machine_key = ?"
            params.append(machine_key)
        if venue_key:
            venue_key = _normalize_key(venue_key)
            query += " AND m.venue_id = (SELECT id FROM venues WHERE key = ?)"
            params.append(venue_key)
            if venue_machines_only:
                query += """
                    AND g.machine_key IN (
                        SELECT vm.machine_key FROM venue_machines vm
                        JOIN venues v ON v.id = vm.venue_id
                        WHERE v.key = ?
                    )
                """
                params.append(venue_key)
        with self._connect() as conn:
            return conn.execute(query, tuple(params)).fetchall()

    def team_machine_stats(self, team_key: str, venue_key: Optional[str] = None) -> List[TeamMachineStats]:
        """Per-machine aggregates for a team's current roster across all seasons.

        With a venue, only games from matches played there on machines the venue
        has are counted. Ordered by games played, then P50, descending.
        """

        cohort = self.resolve_team_cohort(team_key)
        rows = self._cohort_scores(cohort.player_ids, venue_key=venue_key, venue_machines_only=True)

        per_machine = aggregate_groups((row["machine_key"], float(row["score"])) for row in rows)
        per_player = aggregate_groups(
            ((row["machine_key"], row["player_name"]), float(row["score"])) for row in rows
        )
        players_by_machine: dict[str, dict[str, AggregateStat]] = defaultdict(dict)
        for (machine_key, player_name), stat in per_player.items():
            players_by_machine[machine_key][player_name] = stat

        stats = [
            TeamMachineStats(
                machine_key=machine_key,
                games=stat.games,
                p50=stat.p50,
                p90=stat.p90,
                likely_players=select_likely_players(players_by_machine[machine_key], self.likely_players),
            )
            for machine_key, stat in per_machine.items()
        ]
        stats.sort(key=lambda s: (-s.games, -s.p50, s.machine_key))
        return stats

    def player_machine_stats(
        self,
        team_key: str,
        machine_key: str,
        venue_key: Optional[str] = None,
    ) -> List[PlayerStats]:
        """Per-player aggregates for a team's current roster on one machine, best P50 first."""

        cohort = self.resolve_team_cohort(team_key)
        rows = self._cohort_scores(cohort.player_ids, machine_key=machine_key, venue_key=venue_key)
        per_player = aggregate_groups((row["player_name"], float(row["score"])) for row in rows)
        stats = [
            PlayerStats(name=name, games=stat.games, p50=stat.p50, p90=stat.p90)
            for name, stat in per_player.items()
        ]
        stats.sort(key=lambda s: (-s.p50, -s.games, s.name))
        return stats

    def single_player_machine_stats(
        self,
        player_name: str,
        venue_key: Optional[str] = None,
    ) -> List[PlayerMachineStats]:
        """Per-machine aggregates for one named player, most played first."""

        query = _SCORES_SQL + " AND p.name = ?"
        params: list[object] = [player_name]
        if venue_key:
            query += " AND m.venue_id = (SELECT id FROM venues WHERE key = ?)"
            params.append(_normalize_key(venue_key))
        with self._connect() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        per_machine = aggregate_groups((row["machine_key"], float(row["score"])) for row in rows)
        stats = [
            PlayerMachineStats(machine_key=key, games=stat.games, p50=stat.p50, p90=stat.p90)
            for key, stat in per_machine.items()
        ]
        stats.sort(key=lambda s: (-s.games, -s.p50, s.machine_key))
        return stats

    # Reference lists.

    def list_teams(self, search: str = "") -> List[TeamSummary]:
        """Teams of the latest season, optionally filtered by key or name."""

        query = """
            SELECT t.key, t.name, COALESCE(v.name || ' (' || v.key || ')', '') AS venue
            FROM teams t
            JOIN seasons s ON s.id = t.season_id
            LEFT JOIN venues v ON v.id = t.home_venue_id
            WHERE s.number = (SELECT MAX(s2.number) FROM seasons s2 JOIN teams t2 ON t2.season_id = s2.id)
        """
        params: list[str] = []
        if search:
            query += " AND (LOWER(t.key) LIKE ? ESCAPE '\\' OR LOWER(t.name) LIKE ? ESCAPE '\\')"
            pattern = _like_pattern(search)
            params.extend([pattern, pattern])
        query += " ORDER BY t.key"
        with self._connect() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [TeamSummary(key=row["key"], name=row["name"], venue=row["venue"]) for row in rows]

    def list_venues(self, search: str = "") -> List[Venue]:
        query = "SELECT key, name FROM venues"
        params: list[str] = []
        if search:
            query += " WHERE LOWER(key) LIKE ? ESCAPE '\\' OR LOWER(name) LIKE ? ESCAPE '\\'"
            pattern = _like_pattern(search)
            params.extend([pattern, pattern])
        query += " ORDER BY key"
        with self._connect() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [Venue(key=row["key"], name=row["name"]) for row in rows]

    def list_machines(self, search: str = "") -> List[Machine]:
        """Machines that have been played at least once."""

        query = """
            SELECT m.key, m.name
            FROM machines m
            WHERE m.key IN (SELECT DISTINCT machine_key FROM games WHERE machine_key IS NOT NULL)
        """
        params: list[str] = []
        if search:
            query += " AND (LOWER(m.key) LIKE ? ESCAPE '\\' OR LOWER(m.name) LIKE ? ESCAPE '\\')"
            pattern = _like_pattern(search)
            params.extend([pattern, pattern])
        query += " ORDER BY m.key"
        with self._connect() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [Machine(key=row["key"], name=row["name"]) for row in rows]

    def list_players(self, search: str = "") -> List[PlayerSummary]:
        """Players on latest-season rosters, matched by player name, team key or team name."""

        query = """
            SELECT p.name, t.key AS team_key, t.name AS team_name
            FROM rosters r
            JOIN players p ON p.id = r.player_id
            JOIN teams t ON t.id = r.team_id
            JOIN seasons s ON s.id = t.season_id
            WHERE s.number = (SELECT MAX(s2.number) FROM seasons s2 JOIN teams t2 ON t2.season_id = s2.id)
        """
        params: list[str] = []
        if search:
            query += (
                " AND (LOWER(p.name) LIKE ? ESCAPE '\\' OR LOWER(t.key) LIKE ? ESCAPE '\\'"
                " OR LOWER(t.name) LIKE ? ESCAPE '\\')"
            )
            pattern = _like_pattern(search)
            params.extend([pattern, pattern, pattern])
        query += " ORDER BY p.name, t.key"
        with self._connect() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [
            PlayerSummary(name=row["name"], team_key=row["team_key"], team_name=row["team_name"]) for row in rows
        ]
