"""Reconciler: apply an edit script to a list surface.

Takes the :class:`EditScript` produced by :class:`DiffPlanner` and drives a
:class:`ListSurface` through exactly one batch.  Consecutive operations of
the same type are grouped into one surface call.  Item operations address
sections by identifier; the reconciler translates them into pre-update
(deletes, move sources, reloads) or post-update (inserts, move
destinations) section indices.

The reconciler holds the baseline, i.e. the snapshot the surface last
committed.  It only advances when the surface reports success.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

from listkit.cells import CellRegistry, ModelableCell, PlaceholderCell
from listkit.config import ListKitConfig
from listkit.errors import (
    ListKitBusyError,
    ListKitError,
    ListKitStaleScriptError,
    ListKitUnresolvedKindError,
    ListKitWidgetApplyError,
)
from listkit.models import (
    ApplyResult,
    EditOp,
    EditOpType,
    EditScript,
    IndexPath,
    Item,
    ReconcileWarning,
    Snapshot,
)
from listkit.observability import NoopMetricsHook, get_logger

log = get_logger("listkit.reconciler")

ApplyCompletion = Callable[[ApplyResult], None]


class _Cycle:
    """State of one batch between ``begin_batch`` and its completion."""

    __slots__ = ("completion", "done", "script", "started", "warnings")

    def __init__(
        self,
        script: EditScript,
        warnings: list[ReconcileWarning],
        completion: ApplyCompletion | None,
    ) -> None:
        self.script = script
        self.warnings = warnings
        self.completion = completion
        self.started = time.perf_counter()
        self.done = False


class Reconciler:
    """Serializes edit scripts against a list surface.

    Parameters
    ----------
    registry:
        Cell registry used to realise inserted and reloaded items.
    config:
        listkit configuration.
    snapshot:
        Initial baseline.  Defaults to the empty snapshot.
    """

    def __init__(
        self,
        registry: CellRegistry,
        config: ListKitConfig | None = None,
        snapshot: Snapshot | None = None,
    ) -> None:
        self._registry = registry
        self._config = config if config is not None else ListKitConfig()
        self._metrics = (
            self._config.metrics if self._config.metrics is not None else NoopMetricsHook()
        )
        self._snapshot = snapshot if snapshot is not None else Snapshot()
        self._cycle: _Cycle | None = None

    @property
    def snapshot(self) -> Snapshot:
        """The last successfully applied snapshot."""
        return self._snapshot

    @property
    def busy(self) -> bool:
        return self._cycle is not None

    def apply(
        self,
        script: EditScript,
        surface: Any,
        completion: ApplyCompletion | None = None,
    ) -> None:
        """Apply *script* to *surface* in one batch.

        Pre-flight checks run before the surface is touched and raise
        synchronously.  Once the batch is open, every outcome is reported
        through *completion*.  Without a completion, a failed cycle raises
        its error on the stack that delivers the surface's completion.
        A surface call raising mid-batch cancels the batch, so the surface
        keeps showing the baseline.

        Parameters
        ----------
        script:
            Edit script computed against :attr:`snapshot`.
        surface:
            A :class:`ListSurface` implementation.
        completion:
            Called once with the :class:`ApplyResult` of the cycle.

        Raises
        ------
        ListKitBusyError
            If a previous batch has not completed yet.
        ListKitStaleScriptError
            If ``config.verify_baseline`` is set and ``script.old`` is not
            the current baseline.
        ListKitUnresolvedKindError
            If an entering item has no registered cell and the policy is
            ``"raise"``.
        ListKitWidgetApplyError
            If a cell class raises while being created or bound.
        """
        if self._cycle is not None:
            raise ListKitBusyError(
                message="A batch is already awaiting completion",
                context={"pending_ops": len(self._cycle.script)},
            )
        if self._config.verify_baseline and script.old != self._snapshot:
            raise ListKitStaleScriptError(
                message="Edit script was not computed against the applied snapshot",
                context={
                    "script_sections": script.old.number_of_sections,
                    "baseline_sections": self._snapshot.number_of_sections,
                },
            )

        warnings: list[ReconcileWarning] = []
        cells = self._resolve_cells(script, warnings)

        cycle = _Cycle(script, warnings, completion)
        self._cycle = cycle
        log.debug(
            "batch started",
            extra={"extra_fields": {"op": "apply", "ops": len(script)}},
        )

        def on_complete(error: Exception | None) -> None:
            self._complete(cycle, error)

        try:
            surface.begin_batch()
        except Exception as exc:
            self._complete(cycle, exc)
            return

        try:
            self._emit(script, surface, cells)
        except Exception as exc:
            self._abort(cycle, surface, exc)
            return

        try:
            surface.end_batch(on_complete)
        except Exception as exc:
            if cycle.done:
                raise
            self._complete(cycle, exc)

    def _abort(self, cycle: _Cycle, surface: Any, error: Exception) -> None:
        """Discard a half-issued batch so the surface keeps showing the baseline."""
        try:
            surface.cancel_batch()
        except Exception as cancel_error:
            log.error(
                "batch could not be cancelled, surface may not match the baseline",
                exc_info=cancel_error,
                extra={"extra_fields": {"op": "apply", "ops": len(cycle.script)}},
            )
        self._complete(cycle, error)

    # ------------------------------------------------------------------
    # Pre-flight
    # ------------------------------------------------------------------

    def _resolve_cells(
        self, script: EditScript, warnings: list[ReconcileWarning],
    ) -> dict[int, Any]:
        """Realise a cell for every entering item, keyed by op position.

        ``SECTION_INSERT`` positions map to a list of cells, one per item.
        """
        cells: dict[int, Any] = {}
        for position, op in enumerate(script.ops):
            if op.op_type == EditOpType.SECTION_INSERT and op.section is not None:
                cells[position] = [self._make_cell(item, warnings) for item in op.section.items]
            elif op.op_type in (EditOpType.ITEM_INSERT, EditOpType.ITEM_RELOAD):
                cells[position] = self._make_cell(op.item, warnings)
        return cells

    def _make_cell(self, item: Item, warnings: list[ReconcileWarning]) -> ModelableCell:
        try:
            return self._registry.make_cell(item)
        except ListKitUnresolvedKindError as exc:
            if self._config.unresolved_kind_policy != "placeholder":
                raise

            log.warning(
                "no cell registered for kind, using placeholder",
                extra={"extra_fields": {"kind": item.kind}},
            )
            self._metrics.increment(
                "listkit.unresolved_kind_total", tags={"kind": item.kind},
            )
            warnings.append(
                ReconcileWarning(code=exc.code, message=exc.message, context={"kind": item.kind})
            )
            cell = PlaceholderCell()
            cell.set_model(item)
            return cell
        except ListKitError:
            raise
        except Exception as exc:
            raise ListKitWidgetApplyError(
                message=f"Cell for kind {item.kind!r} could not be created: {exc}",
                context={"kind": item.kind, "item": item},
                cause=exc,
            ) from exc

    # ------------------------------------------------------------------
    # Batch emission
    # ------------------------------------------------------------------

    def _emit(self, script: EditScript, surface: Any, cells: dict[int, Any]) -> None:
        """Issue the surface calls for *script*, grouping consecutive ops."""
        old, new = script.old, script.new
        ops = script.ops

        i = 0
        while i < len(ops):
            op_type = ops[i].op_type
            j = i
            while j < len(ops) and ops[j].op_type == op_type:
                j += 1
            group = range(i, j)

            if op_type == EditOpType.SECTION_DELETE:
                surface.delete_sections([ops[k].index for k in group])
            elif op_type == EditOpType.SECTION_INSERT:
                surface.insert_sections(
                    [ops[k].index for k in group],
                    [ops[k].section for k in group],
                    [cells[k] for k in group],
                )
            elif op_type == EditOpType.SECTION_MOVE:
                for k in group:
                    surface.move_section(ops[k].index, ops[k].to_index)
            elif op_type == EditOpType.ITEM_DELETE:
                surface.delete_items([_old_path(old, ops[k]) for k in group])
            elif op_type == EditOpType.ITEM_INSERT:
                surface.insert_items(
                    [_new_path(new, ops[k]) for k in group],
                    [ops[k].item for k in group],
                    [cells[k] for k in group],
                )
            elif op_type == EditOpType.ITEM_MOVE:
                for k in group:
                    op = ops[k]
                    surface.move_item(
                        _old_path(old, op),
                        IndexPath(new.section_index(op.to_section_id), op.to_index),
                    )
            elif op_type == EditOpType.ITEM_RELOAD:
                for k in group:
                    surface.reload_item(_old_path(old, ops[k]), ops[k].item, cells[k])
            i = j

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def _complete(self, cycle: _Cycle, error: Exception | None) -> None:
        if cycle.done:
            log.warning(
                "duplicate batch completion ignored",
                extra={"extra_fields": {"error": repr(error) if error else None}},
            )
            return
        cycle.done = True
        self._cycle = None

        elapsed_ms = (time.perf_counter() - cycle.started) * 1000
        failure = error

        if failure is None:
            self._snapshot = cycle.script.new
            result = ApplyResult.from_script(cycle.script, cycle.warnings)
            outcome = "success"
        else:
            if not isinstance(failure, ListKitWidgetApplyError):
                failure = ListKitWidgetApplyError(
                    message=f"List surface failed to apply the batch: {failure}",
                    context={"ops": len(cycle.script)},
                    cause=failure,
                )
            result = ApplyResult.from_script(cycle.script, cycle.warnings, error=failure)
            outcome = "failure"

        self._metrics.increment("listkit.apply_total", tags={"outcome": outcome})
        self._metrics.timing("listkit.apply_duration_ms", elapsed_ms)
        log_fn = log.info if failure is None else log.error
        log_fn(
            "batch completed" if failure is None else "batch failed",
            extra={
                "extra_fields": {
                    "op": "apply",
                    "outcome": outcome,
                    "ops": len(cycle.script),
                    "warnings": len(cycle.warnings),
                    "duration_ms": round(elapsed_ms, 3),
                }
            },
        )

        if cycle.completion is not None:
            cycle.completion(result)
        elif result.error is not None:
            raise result.error


def _old_path(old: Snapshot, op: EditOp) -> IndexPath:
    return IndexPath(old.section_index(op.section_id), op.index)


def _new_path(new: Snapshot, op: EditOp) -> IndexPath:
    return IndexPath(new.section_index(op.section_id), op.index)
