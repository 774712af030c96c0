"""Diff planner: compute the edit script between two snapshots.

Given the currently applied snapshot and the desired one, the planner
produces an :class:`EditScript` that a list surface can apply in a single
batch.  Matching is by identity: sections by identifier, items by their
fused ``(kind, value)`` key.  Elements whose relative order survives stay
put, everything else that survives is moved, and the rest is inserted or
deleted.

The planner is pure: it never touches a surface and gives the same script
for the same pair of snapshots.
"""

from __future__ import annotations

import json
import sys
import time
from collections import Counter
from collections.abc import Hashable, Set
from typing import Any

from listkit.config import ListKitConfig
from listkit.models import EditOp, EditScript, Snapshot
from listkit.observability import NoopMetricsHook, get_logger

from .identity import item_locations, match_sections
from .lcs_matcher import lcs_match

log = get_logger("listkit.planner")


class DiffPlanner:
    """Plans edit scripts for list updates.

    Parameters
    ----------
    config:
        listkit configuration (metrics and debug flags).
    """

    def __init__(self, config: ListKitConfig | None = None) -> None:
        self._config = config if config is not None else ListKitConfig()
        self._metrics = (
            self._config.metrics if self._config.metrics is not None else NoopMetricsHook()
        )

    def plan(self, old: Snapshot, new: Snapshot) -> EditScript:
        """Compute the edit script transforming *old* into *new*.

        Operations are emitted in the order the batch contract requires:

        1. section deletes (ascending old index)
        2. section inserts (ascending new index)
        3. section moves (ascending destination)
        4. item deletes (ascending old index path)
        5. item inserts (ascending new index path)
        6. item moves (ascending destination index path)

        A section whose header or footer changed is replaced (delete plus
        insert).  Items of inserted, deleted or replaced sections travel
        with their section and produce no item operations.

        Parameters
        ----------
        old:
            The snapshot currently shown by the surface.
        new:
            The desired snapshot.

        Returns
        -------
        EditScript

        Raises
        ------
        ListKitDuplicateIdentityError
            If either snapshot breaks its identity invariants.
        """
        old.validate()
        new.validate()

        started = time.perf_counter()

        if not old.sections and not new.sections:
            ops: list[EditOp] = []
        elif not new.sections:
            # Fast path: everything goes, no item-level diffing.
            ops = [
                EditOp.section_delete(index, section.identifier)
                for index, section in enumerate(old.sections)
            ]
        elif not old.sections:
            ops = [
                EditOp.section_insert(index, section)
                for index, section in enumerate(new.sections)
            ]
        else:
            ops = self._build_ops(old, new)

        script = EditScript(old=old, new=new, ops=tuple(ops))
        elapsed_ms = (time.perf_counter() - started) * 1000

        _emit_diff_metrics(self._metrics, script, elapsed_ms)
        if self._config.debug_dump_diff:
            _dump_script(script)

        log.debug(
            "edit script planned",
            extra={
                "extra_fields": {
                    "op": "plan",
                    "ops": len(script),
                    "old_sections": old.number_of_sections,
                    "new_sections": new.number_of_sections,
                    "duration_ms": round(elapsed_ms, 3),
                }
            },
        )
        return script

    def _build_ops(self, old: Snapshot, new: Snapshot) -> list[EditOp]:
        match = match_sections(old, new)
        ops = self._section_ops(old, new, match.kept)
        ops.extend(self._item_ops(old, new, match.kept))
        return ops

    def _section_ops(
        self, old: Snapshot, new: Snapshot, kept: Set[Hashable],
    ) -> list[EditOp]:
        """Section deletes, inserts and moves, in that order."""
        ops: list[EditOp] = [
            EditOp.section_delete(index, section.identifier)
            for index, section in enumerate(old.sections)
            if section.identifier not in kept
        ]
        ops.extend(
            EditOp.section_insert(index, section)
            for index, section in enumerate(new.sections)
            if section.identifier not in kept
        )

        old_order = [s.identifier for s in old.sections if s.identifier in kept]
        new_order = [s.identifier for s in new.sections if s.identifier in kept]
        stable = {old_order[i] for i, _ in lcs_match(old_order, new_order)}

        for identifier in new_order:
            if identifier in stable:
                continue
            ops.append(
                EditOp.section_move(
                    old.section_index(identifier),
                    new.section_index(identifier),
                    identifier,
                )
            )
        return ops

    def _item_ops(
        self, old: Snapshot, new: Snapshot, kept: Set[Hashable],
    ) -> list[EditOp]:
        """Item deletes, inserts and moves within kept sections."""
        old_locations = item_locations(old, kept)
        new_locations = item_locations(new, kept)

        deletes: list[EditOp] = []
        for section in old.sections:
            if section.identifier not in kept:
                continue
            for index, item in enumerate(section.items):
                if item.key not in new_locations:
                    deletes.append(EditOp.item_delete(section.identifier, index, item))

        inserts: list[EditOp] = []
        moves: list[EditOp] = []
        for section in new.sections:
            if section.identifier not in kept:
                continue
            identifier = section.identifier
            old_section = old.section_with_identifier(identifier)

            # Items that stay in this section keep their place when their
            # relative order is unchanged.
            staying_old = [
                item.key for item in old_section.items
                if item.key in new_locations
                and new_locations[item.key].section_id == identifier
            ]
            staying_new = [
                item.key for item in section.items
                if item.key in old_locations
                and old_locations[item.key].section_id == identifier
            ]
            stable = {staying_old[i] for i, _ in lcs_match(staying_old, staying_new)}

            for index, item in enumerate(section.items):
                source = old_locations.get(item.key)
                if source is None:
                    inserts.append(EditOp.item_insert(identifier, index, item))
                elif item.key not in stable:
                    moves.append(
                        EditOp.item_move(
                            source.section_id, source.index, identifier, index, item,
                        )
                    )

        return deletes + inserts + moves


def diff(old: Snapshot, new: Snapshot) -> EditScript:
    """Compute the edit script from *old* to *new* with default settings."""
    return DiffPlanner().plan(old, new)


def _emit_diff_metrics(metrics: Any, script: EditScript, elapsed_ms: float) -> None:
    """Emit ``diff_ops_total`` counters grouped by operation type."""
    op_counts: Counter[str] = Counter(op.op_type.value for op in script)
    for op_type_val, count in op_counts.items():
        metrics.increment(
            "listkit.diff_ops_total", count, tags={"op_type": op_type_val},
        )
    metrics.timing("listkit.diff_duration_ms", elapsed_ms)


def _dump_script(script: EditScript) -> None:
    print(
        "[listkit] Edit script:",
        json.dumps(script.to_dicts(), indent=2, ensure_ascii=False, default=repr),
        file=sys.stderr,
    )
