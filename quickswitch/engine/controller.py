"""Keyboard selection over the ranked results."""

from typing import List, Optional, Protocol, Sequence

from loguru import logger

from .bus import EventBus
from .models import CandidateItem, ScoredItem
from .recents import RecencyStore


class Navigator(Protocol):
    """Performs the actual page transition. Fire-and-forget."""

    def go(self, destination: str) -> None:
        ...


class SelectionController:
    """
    Tracks the highlighted result and commits choices.

    Commit path:
    1. Record the item in the recency store
    2. Hand its destination to the navigator
    """

    KEY_DOWN = "ArrowDown"
    KEY_UP = "ArrowUp"
    KEY_ENTER = "Enter"
    KEY_ESCAPE = "Escape"

    def __init__(self, recency_store: RecencyStore, navigator: Navigator, bus: EventBus):
        self.recency_store = recency_store
        self.navigator = navigator
        self.bus = bus

        self._results: List[ScoredItem] = []
        self._selected_index = 0

    @property
    def results(self) -> List[ScoredItem]:
        return list(self._results)

    @property
    def selected_index(self) -> int:
        return self._selected_index

    @property
    def selected(self) -> Optional[ScoredItem]:
        if not self._results:
            return None
        return self._results[self._selected_index]

    def set_results(self, results: Sequence[ScoredItem]) -> None:
        """Replace the result list; selection goes back to the top."""
        self._results = list(results)
        self._selected_index = 0
        self._notify()

    def move_down(self) -> None:
        if not self._results:
            return
        self._selected_index = (self._selected_index + 1) % len(self._results)
        self._notify()

    def move_up(self) -> None:
        if not self._results:
            return
        self._selected_index = (self._selected_index - 1) % len(self._results)
        self._notify()

    def select(self, index: int) -> bool:
        """Point the selection at index, as on pointer hover."""
        if not 0 <= index < len(self._results):
            logger.debug(f"Ignoring selection of index {index} ({len(self._results)} results)")
            return False
        self._selected_index = index
        self._notify()
        return True

    def commit(self) -> Optional[CandidateItem]:
        """Commit the highlighted result. No-op on an empty list."""
        selected = self.selected
        if selected is None:
            return None
        return self.commit_item(selected.item)

    def commit_item(self, item: CandidateItem) -> CandidateItem:
        """Commit a specific item, as on pointer click."""
        self.recency_store.record(item)
        logger.debug(f"Navigating to {item.destination}")
        self.navigator.go(item.destination)
        return item

    def dismiss(self) -> None:
        """Tell the host to close the switcher. State is left as is."""
        self.bus.publish("switcher.dismissed", source="selection_controller")

    def handle_key(self, key: str) -> bool:
        """Dispatch a key name. Returns True if the key was consumed."""
        if key == self.KEY_DOWN:
            self.move_down()
        elif key == self.KEY_UP:
            self.move_up()
        elif key == self.KEY_ENTER:
            self.commit()
        elif key == self.KEY_ESCAPE:
            self.dismiss()
        else:
            return False
        return True

    def _notify(self) -> None:
        self.bus.publish(
            "selection.changed",
            source="selection_controller",
            index=self._selected_index,
            count=len(self._results),
        )
