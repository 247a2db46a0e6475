import pytest

from tabdesk.ui.documents.drag_coordinator import DragCoordinator, DragSession, reorder_state
from tabdesk.ui.documents.models import DocumentDescriptor, EditorState, Pane, SplitDirection, Tab, frozen_tabs
from tabdesk.ui.documents.store import EditorStore


def split_state():
    tabs = {p: Tab(DocumentDescriptor(p), "x", "x") for p in ("a", "b", "c", "d")}
    return EditorState(
        tabs=frozen_tabs(tabs),
        panes=(Pane("pane-1", ("a", "b", "c"), "b", 50), Pane("pane-2", ("d",), "d", 50)),
        active_pane_id="pane-1",
        split_direction=SplitDirection.VERTICAL,
    )


@pytest.fixture
def store(qapp):
    return EditorStore(split_state())


@pytest.fixture
def drags(store):
    return DragCoordinator(store)


class TestReorder:

    def test_reorder_moves_tab(self, drags, store):
        assert drags.reorder("pane-1", 0, 2) is True
        pane = store.state.pane("pane-1")
        assert pane.tab_ids == ("b", "c", "a")
        assert pane.active_tab_id == "b"

    def test_reorder_same_index_is_noop(self, drags, store):
        before = store.state
        assert drags.reorder("pane-1", 1, 1) is False
        assert store.state is before

    def test_reorder_out_of_range(self, drags):
        assert drags.reorder("pane-1", 0, 3) is False
        assert drags.reorder("pane-1", -1, 0) is False
        assert reorder_state(split_state(), "pane-9", 0, 1) is None

    def test_reorder_to_end(self, drags, store):
        assert drags.reorder_to_end("pane-1", 0) is True
        assert store.state.pane("pane-1").tab_ids == ("b", "c", "a")


class TestMove:

    def test_move_tab_appends_and_focuses(self, drags, store):
        assert drags.move_tab("b", "pane-1", "pane-2") is True
        state = store.state
        assert state.pane("pane-1").tab_ids == ("a", "c")
        assert state.pane("pane-1").active_tab_id == "c"
        assert state.pane("pane-2").tab_ids == ("d", "b")
        assert state.pane("pane-2").active_tab_id == "b"
        assert state.active_pane_id == "pane-2"
        assert state.check_invariants() == []

    def test_move_rejects_same_pane_and_foreign_tab(self, drags, store):
        before = store.state
        assert drags.move_tab("a", "pane-1", "pane-1") is False
        assert drags.move_tab("d", "pane-1", "pane-2") is False
        assert drags.move_tab("a", "pane-1", "pane-3") is False
        assert store.state is before


class TestDragSession:

    def test_start_drag_captures_position(self, drags):
        session = drags.start_drag("c", "pane-1")
        assert session == DragSession("c", "pane-1", 2)
        assert drags.current_session == session

    def test_start_drag_unknown_tab(self, drags):
        assert drags.start_drag("d", "pane-1") is None
        assert drags.current_session is None

    def test_drop_on_tab_reorders(self, drags, store):
        session = drags.start_drag("c", "pane-1")
        assert drags.drop(session, "pane-1", "a") is True
        assert store.state.pane("pane-1").tab_ids == ("c", "a", "b")
        assert drags.current_session is None

    def test_drop_on_empty_space_moves_to_end(self, drags, store):
        session = drags.start_drag("a", "pane-1")
        assert drags.drop(session, "pane-1") is True
        assert store.state.pane("pane-1").tab_ids == ("b", "c", "a")

    def test_drop_on_other_pane_moves(self, drags, store):
        session = drags.start_drag("a", "pane-1")
        assert drags.drop(session, "pane-2", "d") is True
        assert store.state.pane("pane-2").tab_ids == ("d", "a")

    def test_stale_session_is_rejected(self, drags, store):
        """A drop whose payload no longer matches the state changes nothing."""
        session = drags.start_drag("a", "pane-1")
        drags.reorder("pane-1", 0, 2)
        before = store.state

        assert drags.drop(session, "pane-2") is False
        assert store.state is before
        assert drags.current_session is None

    def test_session_for_removed_pane_is_rejected(self, drags, store):
        session = drags.start_drag("d", "pane-2")
        store.set(EditorState())
        assert drags.drop(session, "pane-1") is False

    def test_drop_on_unknown_target_tab(self, drags, store):
        session = drags.start_drag("a", "pane-1")
        before = store.state
        assert drags.drop(session, "pane-1", "zzz") is False
        assert store.state is before

    def test_end_drag_clears_session(self, drags):
        drags.start_drag("a", "pane-1")
        drags.end_drag()
        assert drags.current_session is None
