"""Machine enrichment and Strongest/Weakest selection shared by scout and player."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import AbstractSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pinstats.models import LikelyPlayer, PlayerMachineStats, TeamMachineStats
from pinstats.stats import relative_strength


SUMMARY_SIZE = 3


@dataclass(frozen=True)
class MachineStat:
    """Per-machine aggregate ready for display."""

    machine_key: str
    machine_name: str
    games: int
    p50: float
    p90: float
    league_p50: Optional[float]
    relative: float
    likely_players: Tuple[LikelyPlayer, ...] = ()
    no_venue_data: bool = False


def machine_name(names: Mapping[str, str], machine_key: str) -> str:
    return names.get(machine_key) or machine_key


def enrich(
    stats: Iterable[Union[TeamMachineStats, PlayerMachineStats]],
    baseline: Mapping[str, float],
    names: Mapping[str, str],
) -> List[MachineStat]:
    """Attach display name, league P50 and relative strength, keeping input order."""

    enriched = []
    for stat in stats:
        league_p50 = baseline.get(stat.machine_key)
        enriched.append(
            MachineStat(
                machine_key=stat.machine_key,
                machine_name=machine_name(names, stat.machine_key),
                games=stat.games,
                p50=stat.p50,
                p90=stat.p90,
                league_p50=league_p50,
                relative=relative_strength(stat.p50, league_p50),
                likely_players=tuple(getattr(stat, "likely_players", ())),
            )
        )
    return enriched


def restrict_to_venue(
    global_stats: Sequence[MachineStat],
    venue_machines: AbstractSet[str],
    venue_stats: Sequence[MachineStat],
) -> List[MachineStat]:
    """Keep venue machines only and flag those with no games at the venue itself."""

    played_here = {stat.machine_key for stat in venue_stats}
    return [
        replace(stat, no_venue_data=stat.machine_key not in played_here)
        for stat in global_stats
        if stat.machine_key in venue_machines
    ]


def strongest_weakest(
    stats: Sequence[MachineStat],
    *,
    min_games: int = 3,
) -> Tuple[Tuple[MachineStat, ...], Tuple[MachineStat, ...]]:
    """Best three machines by relative strength and, when more qualify, the worst three.

    Only machines with at least ``min_games`` games are considered. Weakest is
    listed weakest first.
    """

    qualified = sorted(
        (stat for stat in stats if stat.games >= min_games),
        key=lambda stat: stat.relative,
        reverse=True,
    )
    strongest = tuple(qualified[:SUMMARY_SIZE])
    weakest: Tuple[MachineStat, ...] = ()
    if len(qualified) > SUMMARY_SIZE:
        weakest = tuple(reversed(qualified[-SUMMARY_SIZE:]))
    return strongest, weakest
