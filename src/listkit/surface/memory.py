"""In-memory list surface.

:class:`MemoryListSurface` keeps its content in plain lists and applies
batches with the same index conventions a platform list widget uses:
removals and move sources in pre-update coordinates, insertions and move
destinations in post-update coordinates.  A batch that does not describe a
valid transition is rejected as a whole and the content is left untouched.

It is the reference surface for tests and headless use, and records every
call it receives in :attr:`MemoryListSurface.calls`.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from listkit.errors import ListKitSurfaceInconsistencyError
from listkit.models import IndexPath, Item, Section, Snapshot

from .protocol import BatchCompletion


@dataclass
class _Row:
    item: Item
    cell: Any = None


@dataclass
class _SurfaceSection:
    section: Section
    rows: list[_Row] = field(default_factory=list)


@dataclass
class _Batch:
    section_deletes: list[int] = field(default_factory=list)
    section_inserts: list[tuple[int, Section, list[Any]]] = field(default_factory=list)
    section_moves: list[tuple[int, int]] = field(default_factory=list)
    item_deletes: list[IndexPath] = field(default_factory=list)
    item_inserts: list[tuple[IndexPath, Item, Any]] = field(default_factory=list)
    item_moves: list[tuple[IndexPath, IndexPath]] = field(default_factory=list)
    item_reloads: list[tuple[IndexPath, Item, Any]] = field(default_factory=list)


def _inconsistent(reason: str, **context: Any) -> ListKitSurfaceInconsistencyError:
    return ListKitSurfaceInconsistencyError(
        message=f"Invalid batch update: {reason}",
        context={"reason": reason, **context},
    )


class MemoryListSurface:
    """A list surface that lives in memory.

    Parameters
    ----------
    snapshot:
        Initial content.  Defaults to an empty list.
    width:
        Nominal surface width, reported to sizing hooks.
    defer_completion:
        Hold batch completions until :meth:`flush` is called, the way an
        animated widget signals completion only after its animation ends.
    """

    def __init__(
        self,
        snapshot: Snapshot | None = None,
        *,
        width: float = 320.0,
        defer_completion: bool = False,
    ) -> None:
        self.width = width
        self.defer_completion = defer_completion
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.batches_committed = 0
        self._sections: list[_SurfaceSection] = []
        self._batch: _Batch | None = None
        self._deferred: list[tuple[BatchCompletion, Exception | None]] = []
        self._fail_next: Exception | None = None
        if snapshot is not None:
            self._sections = [
                _SurfaceSection(section, [_Row(item) for item in section.items])
                for section in snapshot.sections
            ]

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def in_batch(self) -> bool:
        return self._batch is not None

    @property
    def pending_completions(self) -> int:
        return len(self._deferred)

    def snapshot(self) -> Snapshot:
        """Return the displayed content as a snapshot."""
        return Snapshot(
            tuple(
                Section(
                    s.section.identifier,
                    tuple(row.item for row in s.rows),
                    s.section.header,
                    s.section.footer,
                )
                for s in self._sections
            )
        )

    def cell_at(self, index_path: IndexPath) -> Any:
        return self._sections[index_path.section].rows[index_path.item].cell

    def mutation_calls(self) -> list[str]:
        """Names of the recorded calls, batch brackets excluded."""
        return [
            name for name, _ in self.calls
            if name not in ("begin_batch", "end_batch", "cancel_batch")
        ]

    # ------------------------------------------------------------------
    # ListSurface
    # ------------------------------------------------------------------

    def begin_batch(self) -> None:
        self.calls.append(("begin_batch", ()))
        if self._batch is not None:
            raise _inconsistent("begin_batch called while a batch is open")
        self._batch = _Batch()

    def end_batch(self, completion: BatchCompletion) -> None:
        self.calls.append(("end_batch", ()))
        batch, self._batch = self._batch, None

        error: Exception | None = None
        if batch is None:
            error = _inconsistent("end_batch called without begin_batch")
        elif self._fail_next is not None:
            error, self._fail_next = self._fail_next, None
        else:
            try:
                self._sections = self._commit(batch)
                self.batches_committed += 1
            except ListKitSurfaceInconsistencyError as exc:
                error = exc

        if self.defer_completion:
            self._deferred.append((completion, error))
        else:
            completion(error)

    def cancel_batch(self) -> None:
        self.calls.append(("cancel_batch", ()))
        if self._batch is None:
            raise _inconsistent("cancel_batch called without begin_batch")
        self._batch = None

    def fail_next_batch(self, error: Exception) -> None:
        """Make the next :meth:`end_batch` discard its batch and report *error*.

        Mirrors a widget that gives up on a batch (an interrupted
        animation, an internal assertion) and signals the failure through
        the completion.
        """
        self._fail_next = error

    def flush(self) -> int:
        """Deliver held completions in order and return how many ran."""
        delivered = 0
        while self._deferred:
            completion, error = self._deferred.pop(0)
            completion(error)
            delivered += 1
        return delivered

    def insert_sections(
        self,
        indices: Sequence[int],
        sections: Sequence[Section],
        cells: Sequence[Sequence[Any]],
    ) -> None:
        self.calls.append(("insert_sections", (list(indices),)))
        batch = self._require_batch()
        if not (len(indices) == len(sections) == len(cells)):
            raise _inconsistent("insert_sections arguments differ in length")
        for index, section, section_cells in zip(indices, sections, cells):
            batch.section_inserts.append((index, section, list(section_cells)))

    def delete_sections(self, indices: Sequence[int]) -> None:
        self.calls.append(("delete_sections", (list(indices),)))
        self._require_batch().section_deletes.extend(indices)

    def move_section(self, from_index: int, to_index: int) -> None:
        self.calls.append(("move_section", (from_index, to_index)))
        self._require_batch().section_moves.append((from_index, to_index))

    def insert_items(
        self,
        index_paths: Sequence[IndexPath],
        items: Sequence[Item],
        cells: Sequence[Any],
    ) -> None:
        self.calls.append(("insert_items", (list(index_paths),)))
        batch = self._require_batch()
        if not (len(index_paths) == len(items) == len(cells)):
            raise _inconsistent("insert_items arguments differ in length")
        batch.item_inserts.extend(zip(index_paths, items, cells))

    def delete_items(self, index_paths: Sequence[IndexPath]) -> None:
        self.calls.append(("delete_items", (list(index_paths),)))
        self._require_batch().item_deletes.extend(index_paths)

    def move_item(self, from_path: IndexPath, to_path: IndexPath) -> None:
        self.calls.append(("move_item", (from_path, to_path)))
        self._require_batch().item_moves.append((from_path, to_path))

    def reload_item(self, index_path: IndexPath, item: Item, cell: Any) -> None:
        self.calls.append(("reload_item", (index_path,)))
        self._require_batch().item_reloads.append((index_path, item, cell))

    # ------------------------------------------------------------------
    # Batch application
    # ------------------------------------------------------------------

    def _require_batch(self) -> _Batch:
        if self._batch is None:
            raise _inconsistent("mutation outside of a batch")
        return self._batch

    def _commit(self, batch: _Batch) -> list[_SurfaceSection]:
        """Compute the post-batch content without touching the current one."""
        old = self._sections
        n_old = len(old)

        def check_old_path(path: IndexPath, op: str) -> None:
            if not 0 <= path.section < n_old or path.section in deleted:
                raise _inconsistent(f"{op} from a missing section", index_path=path)
            if not 0 <= path.item < len(old[path.section].rows):
                raise _inconsistent(f"{op} from a missing item", index_path=path)

        # -- sections ---------------------------------------------------
        deleted: set[int] = set()
        for index in batch.section_deletes:
            if not 0 <= index < n_old or index in deleted:
                raise _inconsistent("section delete out of range or repeated", index=index)
            deleted.add(index)

        moved_from: set[int] = set()
        for from_index, _ in batch.section_moves:
            if not 0 <= from_index < n_old or from_index in deleted or from_index in moved_from:
                raise _inconsistent("invalid section move source", index=from_index)
            moved_from.add(from_index)

        n_new = n_old - len(deleted) + len(batch.section_inserts)
        # origin[t]: old index of new section t, or None for an inserted one.
        origin: list[int | None] = [None] * n_new
        placed: list[bool] = [False] * n_new
        inserted: dict[int, _SurfaceSection] = {}

        for index, section, cells in batch.section_inserts:
            if not 0 <= index < n_new or placed[index]:
                raise _inconsistent("section insert out of range or repeated", index=index)
            if len(cells) != len(section.items):
                raise _inconsistent("section insert cell count mismatch", index=index)
            placed[index] = True
            inserted[index] = _SurfaceSection(
                section, [_Row(item, cell) for item, cell in zip(section.items, cells)]
            )

        for from_index, to_index in batch.section_moves:
            if not 0 <= to_index < n_new or placed[to_index]:
                raise _inconsistent("invalid section move destination", index=to_index)
            placed[to_index] = True
            origin[to_index] = from_index

        untouched = iter(
            i for i in range(n_old) if i not in deleted and i not in moved_from
        )
        for t in range(n_new):
            if not placed[t]:
                origin[t] = next(untouched)

        # -- items ------------------------------------------------------
        reloaded: dict[IndexPath, _Row] = {}
        for path, item, cell in batch.item_reloads:
            check_old_path(path, "reload")
            reloaded[path] = _Row(item, cell)

        removed: dict[int, set[int]] = defaultdict(set)
        for path in batch.item_deletes:
            check_old_path(path, "delete")
            if path.item in removed[path.section] or path in reloaded:
                raise _inconsistent("item deleted twice or also reloaded", index_path=path)
            removed[path.section].add(path.item)

        incoming: dict[int, dict[int, _Row]] = defaultdict(dict)

        def receive(path: IndexPath, row: _Row, op: str) -> None:
            if not 0 <= path.section < n_new or origin[path.section] is None:
                raise _inconsistent(f"{op} into a missing or inserted section", index_path=path)
            if path.item < 0 or path.item in incoming[path.section]:
                raise _inconsistent(f"{op} destination invalid or repeated", index_path=path)
            incoming[path.section][path.item] = row

        for from_path, to_path in batch.item_moves:
            check_old_path(from_path, "move")
            if from_path.item in removed[from_path.section] or from_path in reloaded:
                raise _inconsistent("item moved twice, deleted or reloaded", index_path=from_path)
            removed[from_path.section].add(from_path.item)
            receive(to_path, old[from_path.section].rows[from_path.item], "move")

        for path, item, cell in batch.item_inserts:
            receive(path, _Row(item, cell), "insert")

        # -- assemble ---------------------------------------------------
        result: list[_SurfaceSection] = []
        for t in range(n_new):
            source = origin[t]
            if source is None:
                result.append(inserted[t])
                continue
            survivors = [
                reloaded.get(IndexPath(source, i), row)
                for i, row in enumerate(old[source].rows)
                if i not in removed[source]
            ]
            arriving = incoming.get(t, {})
            total = len(survivors) + len(arriving)
            if any(j >= total for j in arriving):
                raise _inconsistent(
                    "item destination beyond the end of its section",
                    index_path=IndexPath(t, max(arriving)),
                )
            remaining = iter(survivors)
            rows = [arriving[j] if j in arriving else next(remaining) for j in range(total)]
            result.append(_SurfaceSection(old[source].section, rows))

        return result
