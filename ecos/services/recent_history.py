"""In-memory list of the most recent scenario queries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class RecentQuery:
    location: str
    period: Optional[str]
    scenario_id: str
    created_at: datetime

    @property
    def key(self) -> tuple[str, str]:
        return (self.location.strip().casefold(), (self.period or "").strip().casefold())


class RecentQueryStore:
    """Bounded, most-recent-first store de-duplicated by (location, period)."""

    def __init__(self, limit: int = 5) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self._limit = limit
        self._entries: list[RecentQuery] = []

    def remember(self, entry: RecentQuery) -> None:
        """Insert ``entry`` at the front, replacing an older entry with the same key."""

        self._entries = [item for item in self._entries if item.key != entry.key]
        self._entries.insert(0, entry)
        del self._entries[self._limit :]

    def list(self) -> list[RecentQuery]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()


__all__ = ["RecentQuery", "RecentQueryStore"]
