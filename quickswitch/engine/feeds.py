"""
Holders for the two external item sources.

The space feed is pushed to by the host. The direct-message feed is
filled by an async fetch whose outcome is an explicit result value;
only the most recently started fetch may be applied.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Iterable, Optional, Sequence, Tuple, TypeVar, Union

from loguru import logger

from .bus import EventBus


@dataclass(frozen=True)
class SpaceSummary:
    """A space as reported by the host."""
    id: str
    label: str
    avatar_ref: Optional[str] = None
    has_unread: bool = False
    mention_count: int = 0


@dataclass(frozen=True)
class DirectMessageSummary:
    """A direct conversation as reported by the host."""
    id: str
    counterpart_label: Optional[str] = None
    counterpart_id: Optional[str] = None
    avatar_ref: Optional[str] = None
    unread_count: int = 0


T = TypeVar("T")


@dataclass(frozen=True)
class FeedSnapshot(Generic[T]):
    items: Tuple[T, ...] = ()
    is_loading: bool = False


@dataclass(frozen=True)
class FetchSuccess:
    items: Tuple[DirectMessageSummary, ...]


@dataclass(frozen=True)
class FetchFailure:
    error: BaseException


FetchResult = Union[FetchSuccess, FetchFailure]

DirectMessageFetcher = Callable[[], Awaitable[Iterable[DirectMessageSummary]]]


class SpaceFeed:
    """Space list pushed by the host."""

    EVENT = "feed.spaces.changed"

    def __init__(self, bus: EventBus):
        self.bus = bus
        self._snapshot: FeedSnapshot[SpaceSummary] = FeedSnapshot()

    @property
    def snapshot(self) -> FeedSnapshot[SpaceSummary]:
        return self._snapshot

    def update(self, items: Sequence[SpaceSummary], is_loading: bool = False) -> None:
        self._snapshot = FeedSnapshot(items=tuple(items), is_loading=is_loading)
        self.bus.publish(self.EVENT, source="space_feed", count=len(self._snapshot.items))

    def set_loading(self, is_loading: bool = True) -> None:
        self.update(self._snapshot.items, is_loading=is_loading)


class DirectMessageFeed:
    """
    Direct-message list filled by an async fetch.

    Each fetch gets a generation token from begin_fetch(). apply() drops
    any result whose token is not the latest, so a slow older response
    never overwrites newer data.
    """

    EVENT = "feed.direct_messages.changed"

    def __init__(self, bus: EventBus):
        self.bus = bus
        self._snapshot: FeedSnapshot[DirectMessageSummary] = FeedSnapshot()
        self._generation = 0
        self._stats = {"applied": 0, "stale": 0, "failed": 0}

    @property
    def snapshot(self) -> FeedSnapshot[DirectMessageSummary]:
        return self._snapshot

    @property
    def generation(self) -> int:
        return self._generation

    def begin_fetch(self) -> int:
        """Mark the feed loading and return the token for this fetch."""
        self._generation += 1
        self._set(FeedSnapshot(items=self._snapshot.items, is_loading=True))
        return self._generation

    def apply(self, token: int, result: FetchResult) -> bool:
        """Apply a fetch result. Returns False if the result was stale."""
        if token != self._generation:
            logger.debug(
                f"Dropping stale direct-message fetch {token} "
                f"(latest is {self._generation})"
            )
            self._stats["stale"] += 1
            return False

        if isinstance(result, FetchFailure):
            logger.warning(f"Direct-message fetch failed: {result.error}")
            self._stats["failed"] += 1
            self._set(FeedSnapshot(items=(), is_loading=False))
        else:
            self._stats["applied"] += 1
            self._set(FeedSnapshot(items=tuple(result.items), is_loading=False))
        return True

    async def refresh(self, fetcher: DirectMessageFetcher) -> bool:
        """Run one fetch end to end. Returns whether its result was applied."""
        token = self.begin_fetch()
        try:
            items = await fetcher()
            result: FetchResult = FetchSuccess(items=tuple(items))
        except asyncio.CancelledError as e:
            # Latest fetch cancelled: settle as empty so loading clears
            self.apply(token, FetchFailure(error=e))
            raise
        except Exception as e:
            result = FetchFailure(error=e)
        return self.apply(token, result)

    def get_stats(self):
        return dict(self._stats)

    def _set(self, snapshot: FeedSnapshot[DirectMessageSummary]) -> None:
        self._snapshot = snapshot
        self.bus.publish(
            self.EVENT,
            source="direct_message_feed",
            count=len(snapshot.items),
            is_loading=snapshot.is_loading,
        )
