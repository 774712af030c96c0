"""List surface capability protocol.

A list surface is the external, platform-owned sectioned list widget.  The
reconciler drives it through this protocol only.  Index conventions inside
a batch:

* ``delete_sections``, ``delete_items``, ``reload_item`` and the *from*
  side of moves use positions in the arrangement **before** the batch;
* ``insert_sections``, ``insert_items`` and the *to* side of moves use
  positions in the arrangement **after** the batch.

``end_batch`` must call its completion exactly once on every exit path:
with ``None`` when the batch was committed, or with the exception that
prevented it.  ``cancel_batch`` closes an open batch without showing any
of it; the reconciler uses it when a mutation call raises.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol, runtime_checkable

from listkit.models import IndexPath, Item, Section

BatchCompletion = Callable[[Exception | None], None]


@runtime_checkable
class ListSurface(Protocol):
    """Mutation capability of a sectioned list widget."""

    def begin_batch(self) -> None:
        """Open a batch.  Nothing is shown until :meth:`end_batch`."""
        ...

    def end_batch(self, completion: BatchCompletion) -> None:
        """Commit the batch atomically and signal *completion*."""
        ...

    def cancel_batch(self) -> None:
        """Discard the open batch.  The displayed content is left untouched."""
        ...

    def insert_sections(
        self,
        indices: Sequence[int],
        sections: Sequence[Section],
        cells: Sequence[Sequence[Any]],
    ) -> None:
        """Insert *sections* at post-update *indices*.

        ``cells[k]`` holds one realised cell per item of ``sections[k]``.
        """
        ...

    def delete_sections(self, indices: Sequence[int]) -> None:
        """Delete the sections at pre-update *indices*, items included."""
        ...

    def move_section(self, from_index: int, to_index: int) -> None:
        ...

    def insert_items(
        self,
        index_paths: Sequence[IndexPath],
        items: Sequence[Item],
        cells: Sequence[Any],
    ) -> None:
        """Insert *items* (rendered by *cells*) at post-update paths."""
        ...

    def delete_items(self, index_paths: Sequence[IndexPath]) -> None:
        ...

    def move_item(self, from_path: IndexPath, to_path: IndexPath) -> None:
        ...

    def reload_item(self, index_path: IndexPath, item: Item, cell: Any) -> None:
        """Re-render the item at pre-update *index_path* in place."""
        ...
