"""Tests for keyboard selection and commit."""

import pytest

from quickswitch.engine.bus import EventBus
from quickswitch.engine.controller import SelectionController
from quickswitch.engine.models import CandidateItem, CandidateKind, ScoredItem
from quickswitch.engine.recents import RecencyStore
from quickswitch.engine.storage import InMemoryKeyValueStore


class RecordingNavigator:
    def __init__(self):
        self.destinations = []

    def go(self, destination: str) -> None:
        self.destinations.append(destination)


def results(*ids: str):
    return [
        ScoredItem(item=CandidateItem(
            id=i, kind=CandidateKind.SPACE, label=i.upper(), destination=f"/servers/{i}"
        ))
        for i in ids
    ]


@pytest.fixture
def storage():
    return InMemoryKeyValueStore()


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def controller(storage, navigator, bus):
    return SelectionController(RecencyStore(storage), navigator, bus)


class TestNavigation:
    """Arrow keys wrap in both directions."""

    def test_initial_state(self, controller):
        assert controller.results == []
        assert controller.selected_index == 0
        assert controller.selected is None

    def test_move_down_wraps(self, controller):
        controller.set_results(results("a", "b", "c"))

        controller.move_down()
        controller.move_down()
        assert controller.selected_index == 2

        controller.move_down()
        assert controller.selected_index == 0

    def test_move_up_wraps(self, controller):
        controller.set_results(results("a", "b", "c"))

        controller.move_up()
        assert controller.selected_index == 2

        controller.move_up()
        assert controller.selected_index == 1

    def test_moves_on_empty_list_are_noops(self, controller):
        controller.move_down()
        controller.move_up()
        assert controller.selected_index == 0

    def test_single_result(self, controller):
        controller.set_results(results("a"))
        controller.move_down()
        assert controller.selected_index == 0
        controller.move_up()
        assert controller.selected_index == 0

    def test_new_results_reset_selection(self, controller):
        controller.set_results(results("a", "b", "c"))
        controller.move_down()

        controller.set_results(results("c", "b"))

        assert controller.selected_index == 0

    def test_select_index(self, controller):
        controller.set_results(results("a", "b", "c"))

        assert controller.select(2)
        assert controller.selected.id == "c"

        assert not controller.select(3)
        assert not controller.select(-1)
        assert controller.selected_index == 2

    def test_selection_events(self, controller, bus):
        events = []
        bus.subscribe("selection.changed", events.append)

        controller.set_results(results("a", "b"))
        controller.move_down()

        assert [e.data["index"] for e in events] == [0, 1]


class TestCommit:
    """Commit records the recent and then navigates."""

    def test_commit_selected(self, controller, navigator, storage):
        controller.set_results(results("a", "b"))
        controller.move_down()

        committed = controller.commit()

        assert committed.id == "b"
        assert navigator.destinations == ["/servers/b"]
        assert [e.id for e in controller.recency_store.load()] == ["b"]

    def test_commit_empty_does_nothing(self, controller, navigator, storage):
        assert controller.commit() is None
        assert navigator.destinations == []
        assert storage.writes == 0

    def test_records_before_navigating(self, storage, bus):
        order = []

        class OrderedNavigator:
            def go(self, destination):
                order.append(("go", destination))

        store = RecencyStore(storage, bus=bus)
        bus.subscribe("recents.updated", lambda e: order.append(("recorded", e.data["id"])))
        controller = SelectionController(store, OrderedNavigator(), bus)
        controller.set_results(results("a"))

        controller.commit()

        assert order == [("recorded", "a"), ("go", "/servers/a")]

    def test_commit_item(self, controller, navigator):
        controller.set_results(results("a", "b"))
        item = results("z")[0].item

        controller.commit_item(item)

        assert navigator.destinations == ["/servers/z"]
        assert controller.recency_store.load()[0].id == "z"


class TestKeys:
    """Key dispatch and dismiss."""

    def test_handle_key(self, controller, navigator):
        controller.set_results(results("a", "b", "c"))

        assert controller.handle_key("ArrowDown")
        assert controller.handle_key("ArrowDown")
        assert controller.handle_key("ArrowUp")
        assert controller.selected_index == 1

        assert controller.handle_key("Enter")
        assert navigator.destinations == ["/servers/b"]

    def test_unknown_key_not_consumed(self, controller):
        assert not controller.handle_key("Tab")

    def test_dismiss_emits_and_keeps_state(self, controller, bus):
        dismissed = []
        bus.subscribe("switcher.dismissed", dismissed.append)
        controller.set_results(results("a", "b"))
        controller.move_down()

        assert controller.handle_key("Escape")

        assert len(dismissed) == 1
        assert controller.selected_index == 1
        assert len(controller.results) == 2
