"""Incremental construction of :class:`Snapshot` objects.

Snapshots are immutable; :class:`SnapshotBuilder` collects sections and
items in a mutable draft and freezes it with :meth:`SnapshotBuilder.build`.
It is what :meth:`ListAdapter.reload_data` hands to the caller's build
function.

Usage::

    builder = SnapshotBuilder()
    builder.append_section("contacts", header="Contacts")
    builder.append("contact", ["ada", "grace"])
    snapshot = builder.build()
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field
from typing import Any

from listkit.errors import ListKitDuplicateIdentityError
from listkit.models import Item, Section, Snapshot


@dataclass
class _DraftSection:
    identifier: Hashable
    header: Any = None
    footer: Any = None
    items: list[Item] = field(default_factory=list)

    def freeze(self) -> Section:
        return Section(self.identifier, tuple(self.items), self.header, self.footer)


class SnapshotBuilder:
    """Mutable draft of a snapshot.

    Parameters
    ----------
    base:
        Optional snapshot to start from.  Its sections and items are
        copied into the draft.
    """

    def __init__(self, base: Snapshot | None = None) -> None:
        self._sections: list[_DraftSection] = []
        if base is not None:
            for section in base.sections:
                self._sections.append(
                    _DraftSection(
                        identifier=section.identifier,
                        header=section.header,
                        footer=section.footer,
                        items=list(section.items),
                    )
                )

    @property
    def section_identifiers(self) -> list[Hashable]:
        return [draft.identifier for draft in self._sections]

    def append_section(
        self,
        identifier: Hashable,
        header: Any = None,
        footer: Any = None,
    ) -> Hashable:
        """Append an empty section and return its identifier.

        Raises
        ------
        ListKitDuplicateIdentityError
            If a section with *identifier* is already in the draft.
        """
        if self._find(identifier) is not None:
            raise ListKitDuplicateIdentityError(
                message=f"Duplicate section identifier {identifier!r}",
                context={"scope": "section", "duplicate": identifier},
            )
        self._sections.append(_DraftSection(identifier, header, footer))
        return identifier

    def append_sections(self, sections: Iterable[Section]) -> None:
        """Append fully formed sections, items included."""
        for section in sections:
            self.append_section(section.identifier, section.header, section.footer)
            self._sections[-1].items.extend(section.items)

    def append(
        self,
        kind: str,
        values: Iterable[Hashable],
        section: Hashable | None = None,
    ) -> list[Item]:
        """Append one item of *kind* per value to a section.

        Parameters
        ----------
        kind:
            Cell kind of every appended item.
        values:
            Content values, in display order.
        section:
            Identifier of the target section.  Defaults to the last
            appended section.

        Returns
        -------
        list[Item]
            The items that were appended.

        Raises
        ------
        ValueError
            If the draft has no sections, or *section* is unknown.
        """
        draft = self._target(section)
        items = [Item(kind, value) for value in values]
        draft.items.extend(items)
        return items

    def append_items(self, items: Iterable[Item], section: Hashable | None = None) -> None:
        self._target(section).items.extend(items)

    def delete_sections(self, identifiers: Iterable[Hashable]) -> None:
        doomed = set(identifiers)
        self._sections = [d for d in self._sections if d.identifier not in doomed]

    def delete_items(self, items: Iterable[Item]) -> None:
        doomed = {item.key for item in items}
        for draft in self._sections:
            draft.items = [item for item in draft.items if item.key not in doomed]

    def build(self) -> Snapshot:
        """Freeze the draft.  The builder can keep being used afterwards."""
        return Snapshot(tuple(draft.freeze() for draft in self._sections))

    # ------------------------------------------------------------------

    def _find(self, identifier: Hashable) -> _DraftSection | None:
        for draft in self._sections:
            if draft.identifier == identifier:
                return draft
        return None

    def _target(self, identifier: Hashable | None) -> _DraftSection:
        if not self._sections:
            raise ValueError("append_section() must be called before appending items")
        if identifier is None:
            return self._sections[-1]
        draft = self._find(identifier)
        if draft is None:
            raise ValueError(f"unknown section {identifier!r}")
        return draft
