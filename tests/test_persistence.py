"""
Layout persistence tests: serialization shape and tolerant restore.
"""
import pytest

from conftest import A, B, C, D, doc
from tabdesk.ui.documents.errors import LayoutFormatError
from tabdesk.ui.documents.models import SplitDirection
from tabdesk.ui.documents.persistence import PersistedLayout


def layout(*panes, active="pane-1", direction=None):
    return {
        "panes": [
            {"id": pid, "tabPaths": list(paths), "activeTabPath": active_path, "size": size}
            for pid, paths, active_path, size in panes
        ],
        "activePaneId": active,
        "splitDirection": direction,
    }


class TestSerialize:

    @pytest.mark.asyncio
    async def test_camel_case_payload(self, manager):
        await manager.open_file(doc(A))
        await manager.open_file(doc(B))
        manager.split_pane(SplitDirection.HORIZONTAL, B)

        data = manager.get_persisted_state().to_dict()

        assert data == {
            "panes": [
                {"id": "pane-1", "tabPaths": [A], "activeTabPath": A, "size": 50},
                {"id": "pane-2", "tabPaths": [B], "activeTabPath": B, "size": 50},
            ],
            "activePaneId": "pane-2",
            "splitDirection": "horizontal",
        }

    def test_snake_case_names_accepted(self):
        parsed = PersistedLayout.from_dict({"panes": [{"id": "pane-1", "tab_paths": [A]}], "active_pane_id": "pane-1"})
        assert parsed.panes[0].tab_paths == [A]

    @pytest.mark.parametrize("payload", [
        {"panes": "nope"},
        {"panes": [{"tabPaths": [A]}]},
        {"panes": [{"id": "p1"}, {"id": "p2"}, {"id": "p3"}]},
        {"panes": [], "splitDirection": "diagonal"},
    ])
    def test_malformed_payload(self, payload):
        with pytest.raises(LayoutFormatError):
            PersistedLayout.from_dict(payload)


class TestRestore:

    @pytest.mark.asyncio
    async def test_round_trip(self, manager, fake_io):
        await manager.open_file(doc(A))
        await manager.open_file(doc(B))
        manager.split_pane(SplitDirection.VERTICAL, B)
        manager.resize_panes([30, 70])
        saved = manager.get_persisted_state()

        manager.store.reset()
        state = await manager.restore_state(saved, [A, B, C])

        assert state.pane("pane-1").tab_ids == (A,)
        assert state.pane("pane-2").tab_ids == (B,)
        assert [p.size for p in state.panes] == [30, 70]
        assert state.active_pane_id == "pane-2"
        assert state.split_direction is SplitDirection.VERTICAL
        assert manager.get_tab(B).content == "bravo"
        assert manager.state is state

    @pytest.mark.asyncio
    async def test_unknown_paths_are_dropped(self, manager):
        state = await manager.restore_state(
            layout(("pane-1", [A, B, C], B, 100)), live_documents=[A, C]
        )
        assert state.pane("pane-1").tab_ids == (A, C)
        # Persisted active path vanished, first surviving tab takes over
        assert state.pane("pane-1").active_tab_id == A
        assert state.check_invariants() == []

    @pytest.mark.asyncio
    async def test_unreadable_paths_are_dropped(self, manager, fake_io):
        fake_io.fail_reads.add(B)
        state = await manager.restore_state(layout(("pane-1", [A, B], B, 100)), [A, B])
        assert state.pane("pane-1").tab_ids == (A,)
        assert B not in state.tabs

    @pytest.mark.asyncio
    async def test_empty_second_pane_is_dropped(self, manager):
        state = await manager.restore_state(
            layout(("pane-1", [A], A, 40), ("pane-2", [D], D, 60), active="pane-2", direction="vertical"),
            [A],
        )
        assert [p.id for p in state.panes] == ["pane-1"]
        assert state.panes[0].size == 100
        assert state.active_pane_id == "pane-1"
        assert state.split_direction is None
        assert state.check_invariants() == []

    @pytest.mark.asyncio
    async def test_nothing_survives(self, manager):
        state = await manager.restore_state(layout(("pane-3", [D], D, 100)), [])
        assert len(state.panes) == 1
        assert state.panes[0].tab_ids == ()
        assert state.check_invariants() == []

    @pytest.mark.asyncio
    async def test_path_in_both_panes_kept_once(self, manager):
        state = await manager.restore_state(
            layout(("pane-1", [A, B], A, 50), ("pane-2", [B, C], B, 50), direction="horizontal"),
            [A, B, C],
        )
        assert state.pane("pane-1").tab_ids == (A, B)
        assert state.pane("pane-2").tab_ids == (C,)
        assert state.pane("pane-2").active_tab_id == C
        assert state.check_invariants() == []

    @pytest.mark.asyncio
    async def test_bad_sizes_and_missing_direction_repaired(self, manager):
        state = await manager.restore_state(
            layout(("pane-1", [A], A, 80), ("pane-2", [B], B, 80)), [A, B]
        )
        assert [p.size for p in state.panes] == [50, 50]
        assert state.split_direction is SplitDirection.VERTICAL
        assert state.check_invariants() == []

    @pytest.mark.asyncio
    async def test_duplicate_pane_ids_renamed(self, manager):
        state = await manager.restore_state(
            layout(("pane-1", [A], A, 50), ("pane-1", [B], B, 50), direction="vertical"), [A, B]
        )
        assert [p.id for p in state.panes] == ["pane-1", "pane-2"]
        assert state.check_invariants() == []

    @pytest.mark.asyncio
    async def test_restore_uses_descriptors(self, manager):
        from tabdesk.ui.documents.models import DocumentDescriptor

        live = [DocumentDescriptor(A, name="Alpha notes", tokens=42)]
        state = await manager.restore_state(layout(("pane-1", [A], A, 100)), live)
        assert state.tabs[A].name == "Alpha notes"
        assert state.tabs[A].document.tokens == 42

    @pytest.mark.asyncio
    async def test_malformed_dict_leaves_state(self, manager):
        await manager.open_file(doc(A))
        before = manager.state
        with pytest.raises(LayoutFormatError):
            await manager.restore_state({"panes": 5}, [A])
        assert manager.state is before
