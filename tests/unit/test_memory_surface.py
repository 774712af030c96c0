"""Tests for MemoryListSurface batch semantics."""

from __future__ import annotations

import pytest

from listkit.errors import ErrorCode, ListKitSurfaceInconsistencyError
from listkit.models import IndexPath, Item, Section, Snapshot
from listkit.surface import ListSurface, MemoryListSurface


def _t(value: str) -> Item:
    return Item("text", value)


def _section(identifier, *values, header=None) -> Section:
    return Section(identifier, tuple(_t(v) for v in values), header)


def _snap(*sections: Section) -> Snapshot:
    return Snapshot(sections)


def _run(surface: MemoryListSurface, *calls) -> list:
    """Run one batch of ``(method_name, *args)`` calls; return completions."""
    received: list = []
    surface.begin_batch()
    for name, *args in calls:
        getattr(surface, name)(*args)
    surface.end_batch(received.append)
    return received


class TestProtocol:
    def test_satisfies_list_surface_protocol(self):
        assert isinstance(MemoryListSurface(), ListSurface)

    def test_initial_snapshot_round_trips(self):
        snap = _snap(_section("A", "a", header="Letters"), _section("B"))
        assert MemoryListSurface(snap).snapshot() == snap


class TestBatches:
    def test_item_move_within_section(self):
        surface = MemoryListSurface(_snap(_section("A", "a", "b", "c")))
        assert _run(surface, ("move_item", IndexPath(0, 0), IndexPath(0, 2))) == [None]
        assert surface.snapshot() == _snap(_section("A", "b", "c", "a"))

    def test_section_move_and_insert(self):
        surface = MemoryListSurface(_snap(_section("A"), _section("B"), _section("C")))
        new_section = _section("N", "n")
        _run(
            surface,
            ("insert_sections", [1], [new_section], [[object()]]),
            ("move_section", 2, 0),
        )
        assert [s.identifier for s in surface.snapshot().sections] == ["C", "N", "A", "B"]

    def test_deletes_use_pre_update_and_inserts_post_update_indices(self):
        surface = MemoryListSurface(_snap(_section("A", "a", "b", "c", "d")))
        _run(
            surface,
            ("delete_items", [IndexPath(0, 0), IndexPath(0, 2)]),
            ("insert_items", [IndexPath(0, 0), IndexPath(0, 3)], [_t("x"), _t("y")], [1, 2]),
        )
        assert surface.snapshot() == _snap(_section("A", "x", "b", "d", "y"))

    def test_cross_section_move_with_section_delete(self):
        surface = MemoryListSurface(_snap(_section("A", "a"), _section("B", "b")))
        _run(
            surface,
            ("delete_sections", [1]),
            ("move_item", IndexPath(0, 0), IndexPath(0, 0)),
        )
        assert surface.snapshot() == _snap(_section("A", "a"))

    def test_reload_replaces_cell_in_place(self):
        surface = MemoryListSurface(_snap(_section("A", "a", "b")))
        cell = object()
        _run(surface, ("reload_item", IndexPath(0, 1), _t("b"), cell))
        assert surface.cell_at(IndexPath(0, 1)) is cell
        assert surface.batches_committed == 1

    def test_calls_are_recorded(self):
        surface = MemoryListSurface(_snap(_section("A", "a")))
        _run(surface, ("delete_items", [IndexPath(0, 0)]))
        assert [name for name, _ in surface.calls] == ["begin_batch", "delete_items", "end_batch"]
        assert surface.mutation_calls() == ["delete_items"]


class TestRejection:
    @pytest.mark.parametrize(
        "calls",
        [
            [("delete_sections", [5])],
            [("delete_sections", [0, 0])],
            [("delete_items", [IndexPath(0, 9)])],
            [("move_item", IndexPath(0, 0), IndexPath(0, 7))],
            [("move_section", 0, 4)],
            [("insert_items", [IndexPath(3, 0)], [_t("x")], [None])],
            [
                ("delete_items", [IndexPath(0, 0)]),
                ("move_item", IndexPath(0, 0), IndexPath(0, 1)),
            ],
            [
                ("insert_sections", [1], [_section("N")], [[]]),
                ("insert_items", [IndexPath(1, 0)], [_t("x")], [None]),
            ],
        ],
    )
    def test_inconsistent_batch_is_rejected_atomically(self, calls):
        snap = _snap(_section("A", "a", "b"))
        surface = MemoryListSurface(snap)

        received = _run(surface, *calls)

        assert len(received) == 1
        assert isinstance(received[0], ListKitSurfaceInconsistencyError)
        assert received[0].code == ErrorCode.SURFACE_INCONSISTENCY
        assert surface.snapshot() == snap
        assert surface.batches_committed == 0

    def test_mutation_outside_batch_raises(self):
        with pytest.raises(ListKitSurfaceInconsistencyError):
            MemoryListSurface().delete_sections([0])

    def test_nested_begin_raises(self):
        surface = MemoryListSurface()
        surface.begin_batch()
        with pytest.raises(ListKitSurfaceInconsistencyError):
            surface.begin_batch()

    def test_end_without_begin_reports_error(self):
        received = []
        MemoryListSurface().end_batch(received.append)
        assert isinstance(received[0], ListKitSurfaceInconsistencyError)


class TestCancellation:
    def test_cancel_discards_staged_mutations(self):
        snap = _snap(_section("A", "a", "b"))
        surface = MemoryListSurface(snap)

        surface.begin_batch()
        surface.delete_items([IndexPath(0, 0)])
        surface.insert_sections([1], [_section("B", "c")], [[None]])
        surface.cancel_batch()

        assert not surface.in_batch
        assert surface.snapshot() == snap
        assert surface.batches_committed == 0
        assert surface.mutation_calls() == ["delete_items", "insert_sections"]

    def test_surface_accepts_a_batch_after_cancel(self):
        surface = MemoryListSurface(_snap(_section("A", "a")))
        surface.begin_batch()
        surface.delete_items([IndexPath(0, 0)])
        surface.cancel_batch()

        assert _run(surface, ("insert_items", [IndexPath(0, 1)], [_t("b")], [None])) == [None]
        assert surface.snapshot() == _snap(_section("A", "a", "b"))

    def test_cancel_without_begin_raises(self):
        with pytest.raises(ListKitSurfaceInconsistencyError):
            MemoryListSurface().cancel_batch()

    def test_fail_next_batch_reports_error_once(self):
        snap = _snap(_section("A", "a"))
        surface = MemoryListSurface(snap)
        error = RuntimeError("animation interrupted")
        surface.fail_next_batch(error)

        first = _run(surface, ("delete_items", [IndexPath(0, 0)]))
        assert first == [error]
        assert surface.snapshot() == snap
        assert surface.batches_committed == 0

        second = _run(surface, ("delete_items", [IndexPath(0, 0)]))
        assert second == [None]
        assert surface.snapshot() == _snap(_section("A"))


class TestDeferredCompletion:
    def test_completion_waits_for_flush(self):
        surface = MemoryListSurface(defer_completion=True)
        received = _run(surface, ("insert_sections", [0], [_section("A")], [[]]))

        assert received == []
        assert surface.pending_completions == 1
        assert surface.snapshot() == _snap(_section("A"))

        assert surface.flush() == 1
        assert received == [None]
        assert surface.pending_completions == 0
