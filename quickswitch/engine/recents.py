"""Bounded, persisted list of recently visited destinations."""

import json
import time
from typing import Callable, List, Optional

from loguru import logger

from .bus import EventBus
from .models import CandidateItem, RecentDestination
from .storage import KeyValueStore


RECENT_DESTINATIONS_KEY = "quickSwitcher:recentDestinations"
MAX_RECENTS = 10


def _now_ms() -> int:
    return int(time.time() * 1000)


class RecencyStore:
    """
    Most-recent-first list of destinations, persisted as one JSON array.

    Storage failures never reach the caller: reads degrade to an empty
    list and writes are logged while the in-memory list keeps the update.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        key: str = RECENT_DESTINATIONS_KEY,
        max_recents: int = MAX_RECENTS,
        clock: Callable[[], int] = _now_ms,
        bus: Optional[EventBus] = None
    ):
        if max_recents < 1:
            raise ValueError("max_recents must be at least 1")
        self.storage = storage
        self.key = key
        self.max_recents = max_recents
        self.clock = clock
        self.bus = bus

        self._entries: List[RecentDestination] = []
        self._loaded = False

    @property
    def entries(self) -> List[RecentDestination]:
        """Current in-memory list; reads storage only on first access."""
        if not self._loaded:
            return self.load()
        return list(self._entries)

    def load(self) -> List[RecentDestination]:
        """Read the stored list. Returns [] on any read failure."""
        try:
            raw = self.storage.get(self.key)
            entries = self._parse(raw) if raw else []
        except Exception as e:
            logger.warning(f"Failed to load recent destinations: {e}")
            entries = []

        self._entries = entries
        self._loaded = True
        return list(entries)

    def record(self, item: CandidateItem) -> None:
        """Upsert item at the front, trim to max_recents and persist."""
        entries = self.entries
        visited = RecentDestination(
            id=item.id,
            kind=item.kind,
            last_visited_at=self.clock(),
            destination=item.destination,
        )

        entries = [e for e in entries if e.key != visited.key]
        entries.insert(0, visited)
        self._entries = entries[:self.max_recents]
        self._loaded = True

        self._save()

        if self.bus is not None:
            self.bus.publish(
                "recents.updated",
                source="recency_store",
                id=item.id,
                kind=item.kind.value,
                count=len(self._entries),
            )

    def _save(self) -> None:
        payload = json.dumps([e.to_dict() for e in self._entries])
        try:
            self.storage.set(self.key, payload)
        except Exception as e:
            logger.warning(f"Failed to save recent destinations: {e}")

    def _parse(self, raw: str) -> List[RecentDestination]:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON array, got {type(data).__name__}")

        # Normalise: drop duplicates (first wins) and trim
        entries = []
        seen = set()
        for record in data:
            entry = RecentDestination.from_dict(record)
            if entry.key in seen:
                continue
            seen.add(entry.key)
            entries.append(entry)
        return entries[:self.max_recents]
