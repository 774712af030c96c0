"""Public data models for listkit.

This module contains the identity model (:class:`Item`, :class:`Section`),
the immutable :class:`Snapshot`, the edit-script vocabulary produced by the
diff engine and the result types returned by the reconciler.  Everything a
snapshot is built from is a frozen dataclass so that it can be shared
between update cycles without defensive copies.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any, TypeVar

from listkit.errors import ListKitDuplicateIdentityError

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class EditOpType(str, Enum):
    """Operation types emitted by the diff engine."""

    SECTION_INSERT = "section_insert"
    """A section (with all of its items) enters the list."""

    SECTION_DELETE = "section_delete"
    """A section (with all of its items) leaves the list."""

    SECTION_MOVE = "section_move"
    """A section keeps its identity but changes its relative position."""

    ITEM_INSERT = "item_insert"
    """An item enters a section that exists before and after the update."""

    ITEM_DELETE = "item_delete"
    """An item leaves a section that exists before and after the update."""

    ITEM_MOVE = "item_move"
    """An item keeps its identity but changes position or section."""

    ITEM_RELOAD = "item_reload"
    """An item keeps its position and is re-rendered in place.  Never
    produced by the diff engine while identity and content are fused."""


# ---------------------------------------------------------------------------
# Identity model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Item:
    """One row of a list: a kind tag plus an opaque content value.

    ``(kind, value)`` is simultaneously the item's identity and its
    change-detection key: two items are the same element across snapshots
    exactly when both compare equal.

    Attributes
    ----------
    kind:
        Name of the cell kind that renders this item (see
        :class:`CellRegistry`).
    value:
        The content.  Must be hashable.
    """

    kind: str
    value: Hashable

    def __post_init__(self) -> None:
        if not isinstance(self.kind, str) or not self.kind:
            raise ValueError(f"item kind must be a non-empty string, got {self.kind!r}")
        try:
            hash(self.value)
        except TypeError as exc:
            raise TypeError(
                f"item value must be hashable, got {type(self.value).__name__}"
            ) from exc

    @property
    def key(self) -> tuple[str, Hashable]:
        """The fused identity/equality key."""
        return (self.kind, self.value)

    def value_as(self, tp: type[T]) -> T | None:
        """Return the value if it is an instance of *tp*, else ``None``."""
        if isinstance(self.value, tp):
            return self.value
        return None


@dataclass(frozen=True)
class Section:
    """An ordered group of items with optional header and footer content.

    Attributes
    ----------
    identifier:
        Hashable identity of the section, unique within a snapshot.
    items:
        The section's items in display order.  Any iterable is accepted
        and stored as a tuple.
    header:
        Optional header content (commonly a title string).
    footer:
        Optional footer content.
    """

    identifier: Hashable
    items: tuple[Item, ...] = ()
    header: Any = None
    footer: Any = None

    def __post_init__(self) -> None:
        try:
            hash(self.identifier)
        except TypeError as exc:
            raise TypeError(
                "section identifier must be hashable, got "
                f"{type(self.identifier).__name__}"
            ) from exc
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))
        for item in self.items:
            if not isinstance(item, Item):
                raise TypeError(
                    f"section {self.identifier!r} contains a non-Item entry: {item!r}"
                )

    def has_same_decoration(self, other: Section) -> bool:
        """Return ``True`` when header and footer are equal to *other*'s."""
        return self.header == other.header and self.footer == other.footer


@dataclass(frozen=True, order=True)
class IndexPath:
    """Position of an item: section index and item index within it."""

    section: int
    item: int


@dataclass(frozen=True)
class Snapshot:
    """Immutable, ordered description of a list's content.

    Construction does not check the identity invariants (unique section
    identifiers, unique item keys across the whole snapshot); call
    :meth:`validate`, which the diff engine does on entry.
    """

    sections: tuple[Section, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.sections, tuple):
            object.__setattr__(self, "sections", tuple(self.sections))
        for section in self.sections:
            if not isinstance(section, Section):
                raise TypeError(f"snapshot contains a non-Section entry: {section!r}")

    @classmethod
    def of(cls, *sections: Section) -> Snapshot:
        return cls(sections)

    # -- lookups ----------------------------------------------------------

    @cached_property
    def _section_positions(self) -> dict[Hashable, int]:
        positions: dict[Hashable, int] = {}
        for index, section in enumerate(self.sections):
            positions.setdefault(section.identifier, index)
        return positions

    @cached_property
    def _item_positions(self) -> dict[tuple[str, Hashable], IndexPath]:
        positions: dict[tuple[str, Hashable], IndexPath] = {}
        for path, item in self.iter_items():
            positions.setdefault(item.key, path)
        return positions

    @property
    def section_identifiers(self) -> tuple[Hashable, ...]:
        return tuple(section.identifier for section in self.sections)

    @property
    def number_of_sections(self) -> int:
        return len(self.sections)

    @property
    def item_count(self) -> int:
        return sum(len(section.items) for section in self.sections)

    def number_of_items(self, section_index: int) -> int:
        return len(self.sections[section_index].items)

    def section_index(self, identifier: Hashable) -> int | None:
        return self._section_positions.get(identifier)

    def section_with_identifier(self, identifier: Hashable) -> Section | None:
        index = self.section_index(identifier)
        return None if index is None else self.sections[index]

    def item_at(self, index_path: IndexPath) -> Item:
        """Return the item at *index_path*.

        Raises
        ------
        IndexError
            If either component of *index_path* is out of range.
        """
        if index_path.section < 0 or index_path.item < 0:
            raise IndexError(f"negative index path: {index_path}")
        return self.sections[index_path.section].items[index_path.item]

    def index_path_for(self, item: Item) -> IndexPath | None:
        return self._item_positions.get(item.key)

    def iter_items(self) -> Iterator[tuple[IndexPath, Item]]:
        """Yield ``(index_path, item)`` pairs in display order."""
        for section_index, section in enumerate(self.sections):
            for item_index, item in enumerate(section.items):
                yield IndexPath(section_index, item_index), item

    # -- invariants -------------------------------------------------------

    def validate(self) -> None:
        """Check the snapshot's identity invariants.

        Raises
        ------
        ListKitDuplicateIdentityError
            If two sections share an identifier or two items share a
            ``(kind, value)`` key anywhere in the snapshot.
        """
        seen_sections: dict[Hashable, int] = {}
        for index, section in enumerate(self.sections):
            first = seen_sections.setdefault(section.identifier, index)
            if first != index:
                raise ListKitDuplicateIdentityError(
                    message=f"Duplicate section identifier {section.identifier!r}",
                    context={
                        "scope": "section",
                        "duplicate": section.identifier,
                        "first": first,
                        "second": index,
                    },
                )

        seen_items: dict[tuple[str, Hashable], IndexPath] = {}
        for path, item in self.iter_items():
            first_path = seen_items.setdefault(item.key, path)
            if first_path != path:
                raise ListKitDuplicateIdentityError(
                    message=(
                        f"Duplicate item {item.kind}:{item.value!r} at "
                        f"{_fmt_path(first_path)} and {_fmt_path(path)}"
                    ),
                    context={
                        "scope": "item",
                        "duplicate": item.key,
                        "first": first_path,
                        "second": path,
                    },
                )


def _fmt_path(path: IndexPath) -> str:
    return f"[{path.section}, {path.item}]"


# ---------------------------------------------------------------------------
# Edit script
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EditOp:
    """A single operation in an edit script.

    Section operations address sections by index (``index`` in the old
    snapshot for deletes and move sources, ``to_index``/``index`` in the new
    snapshot for move destinations and inserts).  Item operations address
    sections by identifier; the reconciler resolves the identifier against
    the old snapshot for ``section_id`` and against the new snapshot for
    ``to_section_id`` and for inserts.

    Items entering a section that is itself inserted are never reported as
    ``ITEM_INSERT`` or ``ITEM_MOVE``: they are carried by that section's
    ``SECTION_INSERT`` (``section.items``), and an item that left another
    section for it also gets an ``ITEM_DELETE`` at its old position.  Use
    :meth:`EditScript.inserted_items` to see every entering item.

    Attributes
    ----------
    op_type:
        The kind of operation.
    section_id:
        Identifier of the affected section (source section for moves).
    index:
        Section index for section operations, item index for item
        operations (source index for moves).
    to_section_id:
        Destination section identifier (``ITEM_MOVE`` only).
    to_index:
        Destination index (moves only).
    section:
        The inserted section (``SECTION_INSERT`` only).
    item:
        The affected item (all item operations).
    """

    op_type: EditOpType
    section_id: Hashable = None
    index: int | None = None
    to_section_id: Hashable = None
    to_index: int | None = None
    section: Section | None = None
    item: Item | None = None

    @classmethod
    def section_insert(cls, index: int, section: Section) -> EditOp:
        return cls(
            op_type=EditOpType.SECTION_INSERT,
            section_id=section.identifier,
            index=index,
            section=section,
        )

    @classmethod
    def section_delete(cls, index: int, section_id: Hashable) -> EditOp:
        return cls(op_type=EditOpType.SECTION_DELETE, section_id=section_id, index=index)

    @classmethod
    def section_move(cls, from_index: int, to_index: int, section_id: Hashable) -> EditOp:
        return cls(
            op_type=EditOpType.SECTION_MOVE,
            section_id=section_id,
            index=from_index,
            to_index=to_index,
        )

    @classmethod
    def item_insert(cls, section_id: Hashable, index: int, item: Item) -> EditOp:
        return cls(op_type=EditOpType.ITEM_INSERT, section_id=section_id, index=index, item=item)

    @classmethod
    def item_delete(cls, section_id: Hashable, index: int, item: Item) -> EditOp:
        return cls(op_type=EditOpType.ITEM_DELETE, section_id=section_id, index=index, item=item)

    @classmethod
    def item_move(
        cls,
        from_section_id: Hashable,
        from_index: int,
        to_section_id: Hashable,
        to_index: int,
        item: Item,
    ) -> EditOp:
        return cls(
            op_type=EditOpType.ITEM_MOVE,
            section_id=from_section_id,
            index=from_index,
            to_section_id=to_section_id,
            to_index=to_index,
            item=item,
        )

    @classmethod
    def item_reload(cls, section_id: Hashable, index: int, item: Item) -> EditOp:
        return cls(op_type=EditOpType.ITEM_RELOAD, section_id=section_id, index=index, item=item)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly summary (used by debug dumps and logs)."""
        out: dict[str, Any] = {"op": self.op_type.value, "section_id": self.section_id}
        if self.index is not None:
            out["index"] = self.index
        if self.op_type == EditOpType.ITEM_MOVE:
            out["to_section_id"] = self.to_section_id
        if self.to_index is not None:
            out["to_index"] = self.to_index
        if self.item is not None:
            out["item"] = [self.item.kind, self.item.value]
        return out


@dataclass(frozen=True)
class EditScript:
    """The ordered operations transforming *old* into *new*.

    The script keeps both snapshots so that the reconciler can translate
    section identifiers into the pre-update and post-update coordinate
    spaces and commit *new* as the baseline.
    """

    old: Snapshot
    new: Snapshot
    ops: tuple[EditOp, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.ops, tuple):
            object.__setattr__(self, "ops", tuple(self.ops))

    def __iter__(self) -> Iterator[EditOp]:
        return iter(self.ops)

    def __len__(self) -> int:
        return len(self.ops)

    def count(self, op_type: EditOpType) -> int:
        return sum(1 for op in self.ops if op.op_type == op_type)

    def of_type(self, op_type: EditOpType) -> list[EditOp]:
        return [op for op in self.ops if op.op_type == op_type]

    def inserted_sections(self) -> Counter[Hashable]:
        return Counter(op.section_id for op in self.of_type(EditOpType.SECTION_INSERT))

    def deleted_sections(self) -> Counter[Hashable]:
        return Counter(op.section_id for op in self.of_type(EditOpType.SECTION_DELETE))

    def inserted_items(self) -> Counter[Item]:
        """Items entering the list, including those of inserted sections."""
        counter: Counter[Item] = Counter()
        for op in self.ops:
            if op.op_type == EditOpType.ITEM_INSERT and op.item is not None:
                counter[op.item] += 1
            elif op.op_type == EditOpType.SECTION_INSERT and op.section is not None:
                counter.update(op.section.items)
        return counter

    def deleted_items(self) -> Counter[Item]:
        """Items leaving the list, including those of deleted sections."""
        counter: Counter[Item] = Counter()
        for op in self.ops:
            if op.op_type == EditOpType.ITEM_DELETE and op.item is not None:
                counter[op.item] += 1
            elif op.op_type == EditOpType.SECTION_DELETE and op.index is not None:
                counter.update(self.old.sections[op.index].items)
        return counter

    def to_dicts(self) -> list[dict[str, Any]]:
        return [op.to_dict() for op in self.ops]


# ---------------------------------------------------------------------------
# Reconciliation results
# ---------------------------------------------------------------------------

@dataclass
class ReconcileWarning:
    """A non-fatal issue encountered while applying an edit script.

    Attributes
    ----------
    code:
        A machine-readable warning code (e.g. ``"UNRESOLVED_KIND"``).
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class ApplyResult:
    """Outcome of one apply cycle.

    Attributes
    ----------
    sections_inserted, sections_deleted, sections_moved:
        Section operation counts of the applied script.
    items_inserted, items_deleted, items_moved, items_reloaded:
        Item operation counts of the applied script.
    coalesced:
        Number of superseded update requests absorbed into this cycle.
    warnings:
        Non-fatal issues (e.g. placeholder cells substituted).
    error:
        The :class:`ListKitError` that failed the cycle, or ``None``.
    """

    sections_inserted: int = 0
    sections_deleted: int = 0
    sections_moved: int = 0
    items_inserted: int = 0
    items_deleted: int = 0
    items_moved: int = 0
    items_reloaded: int = 0
    coalesced: int = 0
    warnings: list[ReconcileWarning] = field(default_factory=list)
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def total_ops(self) -> int:
        return (
            self.sections_inserted + self.sections_deleted + self.sections_moved
            + self.items_inserted + self.items_deleted + self.items_moved
            + self.items_reloaded
        )

    @classmethod
    def from_script(
        cls,
        script: EditScript,
        warnings: Iterable[ReconcileWarning] = (),
        error: Exception | None = None,
    ) -> ApplyResult:
        return cls(
            sections_inserted=script.count(EditOpType.SECTION_INSERT),
            sections_deleted=script.count(EditOpType.SECTION_DELETE),
            sections_moved=script.count(EditOpType.SECTION_MOVE),
            items_inserted=script.count(EditOpType.ITEM_INSERT),
            items_deleted=script.count(EditOpType.ITEM_DELETE),
            items_moved=script.count(EditOpType.ITEM_MOVE),
            items_reloaded=script.count(EditOpType.ITEM_RELOAD),
            warnings=list(warnings),
            error=error,
        )
