"""Mode selectors shared by the analyses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class AtVenue:
    """Restrict an analysis to one venue."""

    key: str


@dataclass(frozen=True)
class VsOpponent:
    """Compare against an opponent's roster, optionally at a venue."""

    key: str
    venue: Optional[str] = None


RecommendOption = Union[None, AtVenue, VsOpponent]
