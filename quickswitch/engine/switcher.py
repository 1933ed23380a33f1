"""Quick switcher: wires feeds, ranking and selection together."""

from typing import List, Optional

from loguru import logger

from .aggregator import CandidateAggregator
from .bus import Event, EventBus, Handler
from .config import SwitcherConfig
from .controller import Navigator, SelectionController
from .feeds import DirectMessageFeed, SpaceFeed
from .models import CandidateItem, ScoredItem
from .ranker import Ranker
from .recents import RecencyStore
from .storage import KeyValueStore


class QuickSwitcher:
    """
    Host-facing interface of the switcher.

    Results are recomputed whenever the query, the candidates or the
    recents change; each recomputation replaces the controller's list
    (resetting the selection) and emits results.changed.
    """

    RESULTS_EVENT = "results.changed"

    def __init__(
        self,
        recency_store: RecencyStore,
        navigator: Navigator,
        bus: Optional[EventBus] = None,
        ranker: Optional[Ranker] = None,
        space_feed: Optional[SpaceFeed] = None,
        dm_feed: Optional[DirectMessageFeed] = None
    ):
        self.bus = bus or EventBus()
        self.ranker = ranker or Ranker()
        self.space_feed = space_feed or SpaceFeed(self.bus)
        self.dm_feed = dm_feed or DirectMessageFeed(self.bus)

        self.recency_store = recency_store
        if self.recency_store.bus is None:
            self.recency_store.bus = self.bus

        self.aggregator = CandidateAggregator(self.space_feed, self.dm_feed, self.bus)
        self.controller = SelectionController(self.recency_store, navigator, self.bus)

        self._query = ""

        self.bus.subscribe(CandidateAggregator.EVENT, self._on_data_changed)
        self.bus.subscribe("recents.updated", self._on_data_changed)

        self._refresh()

    @classmethod
    def from_config(
        cls,
        config: SwitcherConfig,
        storage: KeyValueStore,
        navigator: Navigator
    ) -> "QuickSwitcher":
        bus = EventBus()
        store = RecencyStore(
            storage,
            key=config.recents.storage_key,
            max_recents=config.recents.max_recents,
            bus=bus,
        )
        return cls(store, navigator, bus=bus, ranker=Ranker(config.ranking.to_weights()))

    # Host interface

    def set_query(self, query: str) -> None:
        self._query = query
        self._refresh()

    def get_query(self) -> str:
        return self._query

    def move_down(self) -> None:
        self.controller.move_down()

    def move_up(self) -> None:
        self.controller.move_up()

    def select(self, index: int) -> bool:
        return self.controller.select(index)

    def commit(self) -> Optional[CandidateItem]:
        return self.controller.commit()

    def commit_item(self, item: CandidateItem) -> CandidateItem:
        return self.controller.commit_item(item)

    def dismiss(self) -> None:
        self.controller.dismiss()

    def handle_key(self, key: str) -> bool:
        return self.controller.handle_key(key)

    def get_results(self) -> List[ScoredItem]:
        return self.controller.results

    def get_selected_index(self) -> int:
        return self.controller.selected_index

    def is_loading(self) -> bool:
        return self.aggregator.snapshot.is_loading

    def subscribe(self, handler: Handler, event_pattern: str = RESULTS_EVENT) -> None:
        """Register for result changes (or any other switcher event)."""
        self.bus.subscribe(event_pattern, handler)

    def unsubscribe(self, handler: Handler, event_pattern: str = RESULTS_EVENT) -> None:
        self.bus.unsubscribe(event_pattern, handler)

    def close(self) -> None:
        self.bus.unsubscribe(CandidateAggregator.EVENT, self._on_data_changed)
        self.bus.unsubscribe("recents.updated", self._on_data_changed)
        self.aggregator.close()

    # Internals

    def _on_data_changed(self, event: Event) -> None:
        logger.debug(f"Re-ranking after {event.type}")
        self._refresh()

    def _refresh(self) -> None:
        snapshot = self.aggregator.snapshot
        results = self.ranker.rank(self._query, snapshot.candidates, self.recency_store.entries)
        self.controller.set_results(results)
        self.bus.publish(
            self.RESULTS_EVENT,
            source="quick_switcher",
            query=self._query,
            count=len(results),
            is_loading=snapshot.is_loading,
        )
