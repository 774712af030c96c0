"""Identity lookups used by the diff planner.

Sections are recognised across snapshots by their identifier, items by
their fused ``(kind, value)`` key.  This module classifies sections into
kept and replaced ones and indexes item locations inside kept sections.
"""

from __future__ import annotations

from collections.abc import Collection, Hashable
from dataclasses import dataclass

from listkit.models import Snapshot


@dataclass(frozen=True)
class ItemLocation:
    """Where an item sits within a snapshot."""

    section_id: Hashable
    index: int


@dataclass(frozen=True)
class SectionMatch:
    """Result of matching the sections of two snapshots.

    Attributes
    ----------
    kept:
        Identifiers present in both snapshots with unchanged header and
        footer.  Their items are diffed individually.
    replaced:
        Identifiers present in both snapshots whose header or footer
        changed.  They are deleted and re-inserted as a whole.
    """

    kept: frozenset[Hashable]
    replaced: frozenset[Hashable]


def match_sections(old: Snapshot, new: Snapshot) -> SectionMatch:
    """Classify the section identifiers shared by *old* and *new*."""
    kept: set[Hashable] = set()
    replaced: set[Hashable] = set()
    for section in old.sections:
        counterpart = new.section_with_identifier(section.identifier)
        if counterpart is None:
            continue
        if section.has_same_decoration(counterpart):
            kept.add(section.identifier)
        else:
            replaced.add(section.identifier)
    return SectionMatch(kept=frozenset(kept), replaced=frozenset(replaced))


def item_locations(
    snapshot: Snapshot,
    section_ids: Collection[Hashable],
) -> dict[tuple[str, Hashable], ItemLocation]:
    """Map each item key to its location, restricted to *section_ids*.

    Items of other sections are left out: they enter or leave the list
    together with their section.
    """
    locations: dict[tuple[str, Hashable], ItemLocation] = {}
    for section in snapshot.sections:
        if section.identifier not in section_ids:
            continue
        for index, item in enumerate(section.items):
            locations[item.key] = ItemLocation(section.identifier, index)
    return locations
