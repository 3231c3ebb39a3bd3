"""Command-line interface for scouting teams, matchups, picks and players."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pinstats.analysis import AtVenue, VsOpponent, matchup, player, recommend, scout
from pinstats.analysis.recommend import PlayerPick, RecommendResult
from pinstats.analysis.summary import MachineStat
from pinstats.config import Settings, load_settings
from pinstats.errors import NotFoundError, StoreError
from pinstats.formatting import (
    CONFIDENCE_LEGEND,
    format_edge,
    format_likely,
    format_optional_score,
    format_p50,
    format_score,
)
from pinstats.persistence import SQLiteStore


logger = logging.getLogger(__name__)

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_STORE_ERROR = 2


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pinstats", description="Pinball league scouting and strategy")
    parser.add_argument("--db", type=Path, default=None, help="SQLite database path (default from PINSTATS_DB_PATH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    scout_cmd = commands.add_parser("scout", help="Show a team's strengths and weaknesses")
    scout_cmd.add_argument("team", help="Team key (e.g., TTT)")
    scout_cmd.add_argument("--venue", default=None, help="Restrict to a venue's machines")

    matchup_cmd = commands.add_parser("matchup", help="Compare two teams at a venue")
    matchup_cmd.add_argument("venue", help="Venue key")
    matchup_cmd.add_argument("team1", help="First team key")
    matchup_cmd.add_argument("team2", help="Second team key")

    recommend_cmd = commands.add_parser("recommend", help="Rank a team's players on a machine")
    recommend_cmd.add_argument("team", help="Team key")
    recommend_cmd.add_argument("machine", help="Machine key")
    recommend_cmd.add_argument("--venue", default=None, help="Venue key")
    recommend_cmd.add_argument("--vs", default=None, help="Opponent team key")

    player_cmd = commands.add_parser("player", help="Show a player's machine profile")
    player_cmd.add_argument("name", help="Player name")
    player_cmd.add_argument("--venue", default=None, help="Restrict to a venue's machines")

    for name, help_text in (
        ("teams", "List current-season teams"),
        ("venues", "List venues"),
        ("machines", "List machines that have been played"),
        ("players", "List current-season players"),
    ):
        list_cmd = commands.add_parser(name, help=help_text)
        list_cmd.add_argument("search", nargs="?", default="", help="Filter by key or name")

    serve_cmd = commands.add_parser("serve", help="Run the JSON API")
    serve_cmd.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_cmd.add_argument("--port", type=int, default=8000, help="Bind port")

    return parser.parse_args(argv)


def _machine_table(title: str, stats: Sequence[MachineStat], *, flag_missing: bool = False) -> Table:
    table = Table(title=escape(title))
    table.add_column("Machine")
    table.add_column("Games", justify="right")
    table.add_column("P50", justify="right")
    table.add_column("P90", justify="right")
    table.add_column("Likely players")
    for stat in stats:
        name = f"{stat.machine_name}*" if flag_missing and stat.no_venue_data else stat.machine_name
        table.add_row(
            escape(name),
            str(stat.games),
            format_p50(stat.p50, stat.league_p50),
            format_score(stat.p90),
            escape(format_likely(stat.likely_players)) if stat.likely_players else "",
        )
    return table


def _names(stats: Sequence[MachineStat]) -> str:
    return escape(", ".join(s.machine_name for s in stats))


def _print_summary(strongest: Sequence[MachineStat], weakest: Sequence[MachineStat]) -> None:
    if strongest:
        console.print("[bold green]Strongest:[/bold green] " + _names(strongest))
    if weakest:
        console.print("[bold red]Weakest:[/bold red] " + _names(weakest))


def _print_machine_stats(
    label: str,
    venue_key: Optional[str],
    global_stats: Sequence[MachineStat],
    venue_stats: Sequence[MachineStat],
) -> None:
    if venue_key is None:
        console.print(_machine_table(label, global_stats))
        return
    if venue_stats:
        console.print(_machine_table(f"{label} at {venue_key}", venue_stats))
    console.print(_machine_table(f"{label} (all venues, {venue_key} machines)", global_stats, flag_missing=True))
    if any(stat.no_venue_data for stat in global_stats):
        console.print(escape(f"*No {venue_key} data"))


def _run_scout(store: SQLiteStore, settings: Settings, args: argparse.Namespace) -> None:
    option = AtVenue(args.venue) if args.venue else None
    result = scout.analyze(store, args.team, option, min_games=settings.min_games_for_analysis)
    if not result.has_data:
        console.print(escape(f"No games found for {result.team_key}"))
        return
    _print_machine_stats(result.team_key, result.venue_key, result.global_stats, result.venue_stats)
    _print_summary(result.strongest, result.weakest)


def _run_player(store: SQLiteStore, settings: Settings, args: argparse.Namespace) -> None:
    option = AtVenue(args.venue) if args.venue else None
    result = player.analyze(store, args.name, option, min_games=settings.min_games_for_analysis)
    header = result.name
    if result.team is not None:
        header += f" ({result.team.team_name}, {result.team.team_key})"
    console.print(f"[bold]{escape(header)}[/bold]")
    if not result.has_data:
        console.print(escape(f"No games found for {result.name}"))
        return
    _print_machine_stats(result.name, result.venue_key, result.global_stats, result.venue_stats)
    _print_summary(result.strongest, result.weakest)


def _run_matchup(store: SQLiteStore, settings: Settings, args: argparse.Namespace) -> None:
    result = matchup.compare_teams(
        store,
        args.venue,
        args.team1,
        args.team2,
        confidence_medium=settings.confidence_medium,
        confidence_high=settings.confidence_high,
    )
    if not result.has_data:
        console.print(escape(f"No machines with data for {result.team1_key} or {result.team2_key} at {args.venue}"))
        return
    team1, team2 = result.team1_key, result.team2_key
    table = Table(title=escape(f"{team1} vs {team2} at {args.venue}"))
    table.add_column("Machine")
    table.add_column(escape(f"{team1} P50"), justify="right")
    table.add_column(escape(f"{team1} likely"))
    table.add_column(escape(f"{team2} P50"), justify="right")
    table.add_column(escape(f"{team2} likely"))
    table.add_column("Edge")
    for row in result.machines:
        table.add_row(
            escape(row.machine_name),
            format_optional_score(row.team1_p50),
            escape(format_likely(row.team1_likely)),
            format_optional_score(row.team2_p50),
            escape(format_likely(row.team2_likely)),
            escape(format_edge(row.edge, team1, team2, row.confidence)),
        )
    console.print(table)
    console.print(CONFIDENCE_LEGEND)
    for label, rows in (
        (f"{team1} advantage", result.team1_advantages),
        (f"{team2} advantage", result.team2_advantages),
        ("Contested", result.contested),
    ):
        if rows:
            console.print(f"[bold]{escape(label)}:[/bold] " + escape(", ".join(r.machine_name for r in rows)))


def _picks_table(title: str, picks: Sequence[PlayerPick], *, flag_missing: bool = False) -> Table:
    table = Table(title=escape(title))
    table.add_column("Player")
    table.add_column("Games", justify="right")
    table.add_column("P50", justify="right")
    table.add_column("P90", justify="right")
    for pick in picks:
        name = f"{pick.name}*" if flag_missing and pick.no_venue_data else pick.name
        table.add_row(escape(name), str(pick.games), format_p50(pick.p50, pick.league_p50), format_score(pick.p90))
    return table


def _print_recommendation(result: RecommendResult) -> None:
    title = f"{result.team_key} on {result.machine_name}"
    if result.league_p50:
        title += f" (league P50 {format_score(result.league_p50)})"
    if result.opponent_key is not None:
        where = f" at {result.venue_key}" if result.venue_key else ""
        console.print(_picks_table(f"{title}{where}", result.players))
        console.print(_picks_table(f"{result.opponent_key} on {result.machine_name}{where}", result.opponent_players))
        if result.verdict is not None:
            console.print(f"[bold]{escape(result.verdict.assessment.message)}[/bold]")
        return
    if result.venue_key is not None:
        if result.venue_players:
            console.print(_picks_table(f"{title} at {result.venue_key}", result.venue_players))
        console.print(_picks_table(f"{title} (all venues)", result.players, flag_missing=True))
        if any(pick.no_venue_data for pick in result.players):
            console.print(escape(f"*No {result.venue_key} data"))
        return
    console.print(_picks_table(title, result.players))


def _run_recommend(store: SQLiteStore, settings: Settings, args: argparse.Namespace) -> None:
    if args.vs:
        option = VsOpponent(args.vs, venue=args.venue)
    elif args.venue:
        option = AtVenue(args.venue)
    else:
        option = None
    result = recommend.recommend(store, args.team, args.machine, option, pick_margin=settings.pick_margin)
    if not result.has_data:
        console.print(escape(f"No games found for {result.team_key} on {result.machine_name}"))
        return
    _print_recommendation(result)


def _run_list(store: SQLiteStore, args: argparse.Namespace) -> None:
    table = Table()
    if args.command == "players":
        table.add_column("Name")
        table.add_column("Team Key")
        table.add_column("Team")
        for entry in store.list_players(args.search):
            table.add_row(escape(entry.name), escape(entry.team_key), escape(entry.team_name))
        console.print(table)
        return
    table.add_column("Key")
    table.add_column("Name")
    if args.command == "teams":
        table.add_column("Venue")
        for team in store.list_teams(args.search):
            table.add_row(escape(team.key), escape(team.name), escape(team.venue))
    elif args.command == "venues":
        for venue in store.list_venues(args.search):
            table.add_row(escape(venue.key), escape(venue.name))
    else:
        for machine in store.list_machines(args.search):
            table.add_row(escape(machine.key), escape(machine.name))
    console.print(table)


def _run_serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    from pinstats.api import create_app

    uvicorn.run(create_app(settings=settings), host=args.host, port=args.port)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings()
    db_path = args.db or settings.db_path

    if args.command == "serve":
        _run_serve(replace(settings, db_path=db_path), args)
        return EXIT_OK

    try:
        store = SQLiteStore(db_path, likely_players=settings.likely_players)
        if args.command == "scout":
            _run_scout(store, settings, args)
        elif args.command == "matchup":
            _run_matchup(store, settings, args)
        elif args.command == "recommend":
            _run_recommend(store, settings, args)
        elif args.command == "player":
            _run_player(store, settings, args)
        else:
            _run_list(store, args)
    except NotFoundError as exc:
        err_console.print(f"[red bold]Error:[/red bold] {escape(str(exc))}")
        return EXIT_NOT_FOUND
    except StoreError as exc:
        logger.debug("Store failure", exc_info=True)
        err_console.print(f"[red bold]Error:[/red bold] {escape(str(exc))}")
        return EXIT_STORE_ERROR
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
