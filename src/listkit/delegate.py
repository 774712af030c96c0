"""Delegate and data-source hooks with no-op defaults.

A list surface reports lifecycle events (display, selection, highlight,
context menus) and asks sizing and editing questions.  :class:`ListAdapter`
forwards them, uninterpreted, to a :class:`ListDelegate` and a
:class:`ListDataSource`.  Subclass either one and override only the
methods you need; every default does nothing or answers "no opinion".

Index paths passed to these hooks are in the coordinates of the applied
snapshot.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from listkit.cells.base import Size
from listkit.models import IndexPath, Item, Section

SUPPLEMENTARY_HEADER = "header"
SUPPLEMENTARY_FOOTER = "footer"


class ListDelegate:
    """Lifecycle notifications from the list surface."""

    def modify_cell(self, cell: Any, index_path: IndexPath) -> None:
        """Last chance to adjust *cell* after its model was bound."""

    def will_display(self, cell: Any, index_path: IndexPath) -> None:
        pass

    def did_end_displaying(self, cell: Any, index_path: IndexPath) -> None:
        pass

    def did_select(self, item: Item, index_path: IndexPath) -> None:
        pass

    def did_deselect(self, item: Item, index_path: IndexPath) -> None:
        pass

    def did_highlight(self, item: Item, index_path: IndexPath) -> None:
        pass

    def did_unhighlight(self, item: Item, index_path: IndexPath) -> None:
        pass

    def perform_primary_action(self, item: Item, index_path: IndexPath) -> None:
        pass

    def modify_supplementary_element(
        self, view: Any, section: Section, kind: str, index_path: IndexPath,
    ) -> None:
        pass

    def will_display_supplementary_element(
        self, view: Any, section: Section, kind: str, index_path: IndexPath,
    ) -> None:
        pass

    def did_end_displaying_supplementary_element(
        self, view: Any, section: Section, kind: str, index_path: IndexPath,
    ) -> None:
        pass

    def will_display_context_menu(
        self, configuration: Any, animator: Any, item: Item, index_path: IndexPath,
    ) -> None:
        pass

    def will_end_context_menu_interaction(
        self, configuration: Any, animator: Any, item: Item, index_path: IndexPath,
    ) -> None:
        pass


class ListDataSource:
    """Queries the list surface asks about its content.

    Returning ``None`` from :meth:`size` or :meth:`supplementary_element`
    lets :class:`ListAdapter` fall back to the registered cell class or to
    :class:`TableSupplementaryView`.
    """

    def size(self, item: Item, index_path: IndexPath) -> Size | None:
        return None

    def supplementary_element(
        self, section: Section, kind: str, index_path: IndexPath,
    ) -> Any | None:
        return None

    def section_index_titles(self) -> list[str] | None:
        return None

    def prefetch(self, items: Sequence[Item], index_paths: Sequence[IndexPath]) -> None:
        pass

    def cancel_prefetch(
        self, items: Sequence[Item], index_paths: Sequence[IndexPath],
    ) -> None:
        pass

    def can_edit(self, item: Item, index_path: IndexPath) -> bool:
        return False

    def commit(self, item: Item, style: str, index_path: IndexPath) -> None:
        """Commit an edit (e.g. ``"delete"``) performed on *item*."""

    def can_move(self, item: Item, index_path: IndexPath) -> bool:
        return False

    def move(self, item: Item, source: IndexPath, destination: IndexPath) -> None:
        pass
