"""Exceptions shared by the store, the analyses and the presentation layers."""

from __future__ import annotations


class NotFoundError(LookupError):
    """Raised when a key does not resolve to any roster or history."""

    kind = "entity"

    def __init__(self, key: str):
        super().__init__(f"No such {self.kind}: {key!r}")
        self.key = key


class TeamNotFoundError(NotFoundError):
    kind = "team"


class PlayerNotFoundError(NotFoundError):
    kind = "player"


class StoreError(RuntimeError):
    """Raised when the storage collaborator cannot answer a query."""
