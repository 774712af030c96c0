"""Tests for reconciler error handling.

Covers surface calls raising mid-batch, surfaces reporting failure through
their completion, duplicate completion signals and error propagation when
no completion is attached.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from listkit.cells import ModelableCell
from listkit.config import ListKitConfig
from listkit.diff.planner import diff
from listkit.diff.reconciler import Reconciler
from listkit.errors import (
    ErrorCode,
    ListKitSurfaceInconsistencyError,
    ListKitWidgetApplyError,
)
from listkit.models import EditOp, EditScript, IndexPath, Item, Section, Snapshot
from listkit.surface import MemoryListSurface

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _snap(*sections: Section) -> Snapshot:
    return Snapshot(sections)


def _section(identifier, *values) -> Section:
    return Section(identifier, tuple(Item("text", v) for v in values))


_OLD = _snap(_section("A", "a"))
_NEW = _snap(_section("A", "a", "b"))


def _capturing_surface() -> tuple[MagicMock, list]:
    """A mock surface that stores batch completions instead of calling them."""
    captured: list = []
    surface = MagicMock()
    surface.end_batch.side_effect = captured.append
    return surface, captured


class _MoveRejectingSurface(MemoryListSurface):
    """Stages everything except item moves, which raise."""

    def move_item(self, from_path, to_path):
        super().move_item(from_path, to_path)
        raise RuntimeError("widget exploded")


class _Fragile:
    pass


class _FragileCell(ModelableCell):
    model_type = _Fragile

    def set_model(self, item):
        raise ValueError("cannot bind model")


# =========================================================================
# Surface raising mid-batch
# =========================================================================


class TestSurfaceRaises:
    def test_batch_is_cancelled_and_cycle_fails(self, registry):
        surface = MagicMock()
        surface.insert_items.side_effect = RuntimeError("widget exploded")
        reconciler = Reconciler(registry, snapshot=_OLD)
        results = []

        reconciler.apply(diff(_OLD, _NEW), surface, results.append)

        surface.cancel_batch.assert_called_once()
        surface.end_batch.assert_not_called()
        assert len(results) == 1
        error = results[0].error
        assert isinstance(error, ListKitWidgetApplyError)
        assert error.code == ErrorCode.WIDGET_APPLY_FAILURE
        assert isinstance(error.cause, RuntimeError)
        assert reconciler.snapshot == _OLD
        assert not reconciler.busy

    def test_partial_batch_never_reaches_the_surface(self, registry):
        old = _snap(_section("A", "x", "y", "q"))
        new = _snap(_section("A", "w", "q", "x"))
        surface = _MoveRejectingSurface(old)
        reconciler = Reconciler(registry, snapshot=old)
        results = []

        reconciler.apply(diff(old, new), surface, results.append)

        assert "insert_items" in surface.mutation_calls()
        assert isinstance(results[0].error, ListKitWidgetApplyError)
        assert surface.snapshot() == reconciler.snapshot == old
        assert not surface.in_batch
        assert surface.batches_committed == 0

    def test_full_snapshot_resyncs_after_partial_failure(self, registry):
        old = _snap(_section("A", "x", "y", "q"))
        surface = _MoveRejectingSurface(old)
        reconciler = Reconciler(registry, snapshot=old)
        results = []

        reconciler.apply(diff(old, _snap(_section("A", "w", "q", "x"))), surface, results.append)
        resync = _snap(_section("A", "x", "y", "q", "w"))
        reconciler.apply(diff(reconciler.snapshot, resync), surface, results.append)

        assert [r.succeeded for r in results] == [False, True]
        assert surface.snapshot() == reconciler.snapshot == resync

    def test_cancel_batch_raising_still_fails_the_cycle(self, registry):
        surface = MagicMock()
        surface.insert_items.side_effect = RuntimeError("widget exploded")
        surface.cancel_batch.side_effect = RuntimeError("cannot cancel")
        reconciler = Reconciler(registry, snapshot=_OLD)
        results = []

        reconciler.apply(diff(_OLD, _NEW), surface, results.append)

        assert str(results[0].error.cause) == "widget exploded"
        assert not reconciler.busy

    def test_begin_batch_raising_fails_without_end_batch(self, registry):
        surface = MagicMock()
        surface.begin_batch.side_effect = RuntimeError("no batch for you")
        reconciler = Reconciler(registry, snapshot=_OLD)
        results = []

        reconciler.apply(diff(_OLD, _NEW), surface, results.append)

        surface.end_batch.assert_not_called()
        assert isinstance(results[0].error, ListKitWidgetApplyError)
        assert not reconciler.busy

    def test_end_batch_raising_fails_the_cycle(self, registry):
        surface = MagicMock()
        surface.end_batch.side_effect = RuntimeError("commit failed")
        reconciler = Reconciler(registry, snapshot=_OLD)
        results = []

        reconciler.apply(diff(_OLD, _NEW), surface, results.append)

        assert isinstance(results[0].error, ListKitWidgetApplyError)
        assert reconciler.snapshot == _OLD
        assert not reconciler.busy


# =========================================================================
# Cell construction
# =========================================================================


class TestCellConstruction:
    def test_cell_raising_fails_before_the_batch(self, registry):
        registry.register("fragile", _FragileCell)
        surface = MemoryListSurface(_OLD)
        reconciler = Reconciler(registry, snapshot=_OLD)
        new = _snap(Section("A", (Item("text", "a"), Item("fragile", 1))))

        with pytest.raises(ListKitWidgetApplyError) as exc_info:
            reconciler.apply(diff(_OLD, new), surface)

        assert isinstance(exc_info.value.cause, ValueError)
        assert exc_info.value.context["kind"] == "fragile"
        assert surface.calls == []
        assert not reconciler.busy
        assert reconciler.snapshot == _OLD

    def test_cell_raising_inside_inserted_section(self, registry):
        registry.register("fragile", _FragileCell)
        reconciler = Reconciler(registry, snapshot=_OLD)
        new = _snap(_section("A", "a"), Section("B", (Item("fragile", 2),)))

        with pytest.raises(ListKitWidgetApplyError):
            reconciler.apply(diff(_OLD, new), MemoryListSurface(_OLD))
        assert not reconciler.busy


# =========================================================================
# Surface reporting failure
# =========================================================================


class TestSurfaceReportsFailure:
    def test_error_in_completion_keeps_baseline(self, registry):
        surface, captured = _capturing_surface()
        reconciler = Reconciler(registry, snapshot=_OLD)
        results = []

        reconciler.apply(diff(_OLD, _NEW), surface, results.append)
        assert results == []
        assert reconciler.busy

        captured[0](RuntimeError("animation interrupted"))

        assert isinstance(results[0].error, ListKitWidgetApplyError)
        assert str(results[0].error.cause) == "animation interrupted"
        assert reconciler.snapshot == _OLD
        assert not reconciler.busy

    def test_reported_failure_leaves_surface_on_baseline(self, registry):
        surface = MemoryListSurface(_OLD, defer_completion=True)
        surface.fail_next_batch(RuntimeError("animation interrupted"))
        reconciler = Reconciler(registry, snapshot=_OLD)
        results = []

        reconciler.apply(diff(_OLD, _NEW), surface, results.append)
        surface.flush()

        assert isinstance(results[0].error, ListKitWidgetApplyError)
        assert surface.snapshot() == reconciler.snapshot == _OLD

    def test_inconsistent_batch_from_memory_surface(self, registry):
        snap = _snap(_section("A", "a"))
        bogus = EditScript(
            old=snap, new=snap, ops=(EditOp.item_delete("A", 5, Item("text", "zz")),),
        )
        surface = MemoryListSurface(snap)
        reconciler = Reconciler(registry, snapshot=snap)
        results = []

        reconciler.apply(bogus, surface, results.append)

        error = results[0].error
        assert isinstance(error, ListKitWidgetApplyError)
        assert isinstance(error.cause, ListKitSurfaceInconsistencyError)
        assert error.cause.context["index_path"] == IndexPath(0, 5)
        assert surface.snapshot() == snap

    def test_failure_metrics(self, registry, metrics):
        surface, captured = _capturing_surface()
        reconciler = Reconciler(registry, ListKitConfig(metrics=metrics), snapshot=_OLD)
        reconciler.apply(diff(_OLD, _NEW), surface, lambda result: None)
        captured[0](RuntimeError("x"))

        assert {
            "name": "listkit.apply_total", "value": 1, "tags": {"outcome": "failure"},
        } in metrics.increments

    def test_reconciler_usable_after_failure(self, registry):
        surface, captured = _capturing_surface()
        reconciler = Reconciler(registry, snapshot=_OLD)
        results = []

        reconciler.apply(diff(_OLD, _NEW), surface, results.append)
        captured[0](RuntimeError("first"))
        reconciler.apply(diff(_OLD, _NEW), surface, results.append)
        captured[1](None)

        assert [r.succeeded for r in results] == [False, True]
        assert reconciler.snapshot == _NEW


# =========================================================================
# Completion contract
# =========================================================================


class TestCompletionContract:
    def test_duplicate_completion_is_ignored(self, registry):
        surface, captured = _capturing_surface()
        reconciler = Reconciler(registry, snapshot=_OLD)
        results = []

        reconciler.apply(diff(_OLD, _NEW), surface, results.append)
        captured[0](None)
        captured[0](RuntimeError("late failure"))

        assert len(results) == 1
        assert results[0].succeeded
        assert reconciler.snapshot == _NEW

    def test_failure_without_completion_raises_on_delivering_stack(self, registry):
        surface, captured = _capturing_surface()
        reconciler = Reconciler(registry, snapshot=_OLD)
        reconciler.apply(diff(_OLD, _NEW), surface)

        with pytest.raises(ListKitWidgetApplyError):
            captured[0](RuntimeError("boom"))
        assert reconciler.snapshot == _OLD

    def test_synchronous_failure_without_completion_raises_from_apply(self, registry):
        snap = _snap(_section("A", "a"))
        bogus = EditScript(old=snap, new=snap, ops=(EditOp.section_delete(3, "Z"),))
        reconciler = Reconciler(registry, snapshot=snap)

        with pytest.raises(ListKitWidgetApplyError):
            reconciler.apply(bogus, MemoryListSurface(snap))
        assert not reconciler.busy
