"""Data models for the quick switcher."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class CandidateKind(str, Enum):
    """Kinds of destinations the switcher can jump to."""
    SPACE = "space"
    DIRECT_MESSAGE = "dm"


CandidateKey = Tuple[str, CandidateKind]


@dataclass(frozen=True)
class CandidateItem:
    """A navigable target produced by the aggregator."""
    id: str
    kind: CandidateKind
    label: str
    destination: str
    secondary_label: Optional[str] = None
    has_unread: bool = False
    mention_count: int = 0
    avatar_ref: Optional[str] = None

    def __post_init__(self):
        if self.mention_count < 0:
            raise ValueError("mention_count must be >= 0")

    @property
    def key(self) -> CandidateKey:
        return (self.id, self.kind)


@dataclass(frozen=True)
class RecentDestination:
    """A destination the user navigated to, as persisted."""
    id: str
    kind: CandidateKind
    last_visited_at: int  # epoch milliseconds
    destination: str

    @property
    def key(self) -> CandidateKey:
        return (self.id, self.kind)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "lastVisitedAt": self.last_visited_at,
            "destination": self.destination,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecentDestination":
        """Build from a persisted record. Raises on a malformed record."""
        if not isinstance(data, dict):
            raise ValueError(f"Recent destination must be an object, got {type(data).__name__}")
        record_id = data["id"]
        destination = data["destination"]
        visited = data["lastVisitedAt"]
        if not isinstance(record_id, str) or not isinstance(destination, str):
            raise ValueError("Recent destination id and destination must be strings")
        if isinstance(visited, bool) or not isinstance(visited, (int, float)):
            raise ValueError("lastVisitedAt must be a number")
        return cls(
            id=record_id,
            kind=CandidateKind(data["kind"]),
            last_visited_at=int(visited),
            destination=destination,
        )


@dataclass(frozen=True)
class ScoredItem:
    """
    A candidate as it appears in the ranked output.

    score is None for the empty-query ordering, where no score is used.
    """
    item: CandidateItem
    score: Optional[float] = None

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def kind(self) -> CandidateKind:
        return self.item.kind

    @property
    def key(self) -> CandidateKey:
        return self.item.key

    @property
    def label(self) -> str:
        return self.item.label

    @property
    def destination(self) -> str:
        return self.item.destination


@dataclass(frozen=True)
class CandidateSnapshot:
    """Aggregated candidates at one point in time."""
    candidates: Tuple[CandidateItem, ...] = field(default_factory=tuple)
    is_loading: bool = False
