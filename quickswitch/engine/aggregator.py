"""Merges space and direct-message feeds into one candidate list."""

from typing import List, Set

from loguru import logger

from .bus import Event, EventBus
from .feeds import DirectMessageFeed, DirectMessageSummary, FeedSnapshot, SpaceFeed, SpaceSummary
from .models import CandidateItem, CandidateKey, CandidateKind, CandidateSnapshot


UNKNOWN_USER_LABEL = "Unknown User"


def space_destination(space_id: str) -> str:
    return f"/servers/{space_id}"


def direct_message_destination(room_id: str) -> str:
    return f"/channels/@me/{room_id}"


def space_to_candidate(space: SpaceSummary) -> CandidateItem:
    return CandidateItem(
        id=space.id,
        kind=CandidateKind.SPACE,
        label=space.label,
        destination=space_destination(space.id),
        has_unread=space.has_unread,
        mention_count=max(0, space.mention_count or 0),
        avatar_ref=space.avatar_ref,
    )


def direct_message_to_candidate(dm: DirectMessageSummary) -> CandidateItem:
    unread = max(0, dm.unread_count or 0)
    return CandidateItem(
        id=dm.id,
        kind=CandidateKind.DIRECT_MESSAGE,
        label=dm.counterpart_label or dm.counterpart_id or UNKNOWN_USER_LABEL,
        destination=direct_message_destination(dm.id),
        has_unread=unread > 0,
        mention_count=unread,
        avatar_ref=dm.avatar_ref,
    )


def aggregate(
    spaces: FeedSnapshot[SpaceSummary],
    direct_messages: FeedSnapshot[DirectMessageSummary]
) -> CandidateSnapshot:
    """Spaces first, then direct messages, each in feed order."""
    candidates: List[CandidateItem] = []
    seen: Set[CandidateKey] = set()

    converted = [space_to_candidate(s) for s in spaces.items]
    converted += [direct_message_to_candidate(d) for d in direct_messages.items]

    for candidate in converted:
        if candidate.key in seen:
            logger.debug(f"Skipping duplicate candidate {candidate.kind.value}:{candidate.id}")
            continue
        seen.add(candidate.key)
        candidates.append(candidate)

    return CandidateSnapshot(
        candidates=tuple(candidates),
        is_loading=spaces.is_loading or direct_messages.is_loading,
    )


class CandidateAggregator:
    """Rebuilds the candidate snapshot whenever either feed changes."""

    EVENT = "candidates.changed"

    def __init__(self, space_feed: SpaceFeed, dm_feed: DirectMessageFeed, bus: EventBus):
        self.space_feed = space_feed
        self.dm_feed = dm_feed
        self.bus = bus
        self._snapshot = aggregate(space_feed.snapshot, dm_feed.snapshot)

        self.bus.subscribe("feed.*", self._on_feed_changed)

    @property
    def snapshot(self) -> CandidateSnapshot:
        return self._snapshot

    def close(self) -> None:
        self.bus.unsubscribe("feed.*", self._on_feed_changed)

    def _on_feed_changed(self, event: Event) -> None:
        self._snapshot = aggregate(self.space_feed.snapshot, self.dm_feed.snapshot)
        self.bus.publish(
            self.EVENT,
            source="aggregator",
            count=len(self._snapshot.candidates),
            is_loading=self._snapshot.is_loading,
        )
