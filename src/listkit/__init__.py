"""listkit — Keyed diffing and batch reconciliation for sectioned lists.

Public re-exports
-----------------

* **Adapters:** :class:`ListAdapter`, :class:`AsyncListAdapter`
* **Configuration:** :class:`ListKitConfig`
* **Errors:** Every :class:`ListKitError` subclass and :class:`ErrorCode`
* **Models:** Snapshots, edit scripts and result types
* **Engine:** :class:`DiffPlanner`, :func:`diff`, :class:`Reconciler`
* **Surfaces & cells:** :class:`ListSurface`, :class:`MemoryListSurface`,
  :class:`ModelableCell`, :class:`CellRegistry`

Usage::

    from listkit import Item, Section, Snapshot, diff

    old = Snapshot.of(Section("A", [Item("text", "hello")]))
    new = Snapshot.of(Section("A", [Item("text", "hello"), Item("text", "world")]))
    script = diff(old, new)   # one ITEM_INSERT at ("A", 1)
"""

from __future__ import annotations

# ── Adapters ───────────────────────────────────────────────────────────
from listkit.adapter import ListAdapter
from listkit.async_adapter import AsyncListAdapter

# ── Cells ──────────────────────────────────────────────────────────────
from listkit.cells import (
    CellRegistry,
    ModelableCell,
    ModelableSupplementaryView,
    PlaceholderCell,
    TableSupplementaryView,
)

# ── Configuration ───────────────────────────────────────────────────────
from listkit.config import UNRESOLVED_KIND_POLICIES, ListKitConfig

# ── Delegation ─────────────────────────────────────────────────────────
from listkit.delegate import (
    SUPPLEMENTARY_FOOTER,
    SUPPLEMENTARY_HEADER,
    ListDataSource,
    ListDelegate,
)

# ── Engine ─────────────────────────────────────────────────────────────
from listkit.diff import DiffPlanner, Reconciler, diff

# ── Errors ──────────────────────────────────────────────────────────────
from listkit.errors import (
    ErrorCode,
    ListKitBusyError,
    ListKitContextError,
    ListKitDuplicateIdentityError,
    ListKitError,
    ListKitRegistrationError,
    ListKitStaleScriptError,
    ListKitSurfaceInconsistencyError,
    ListKitUnresolvedKindError,
    ListKitWidgetApplyError,
)

# ── Models ──────────────────────────────────────────────────────────────
from listkit.models import (
    ApplyResult,
    EditOp,
    EditOpType,
    EditScript,
    IndexPath,
    Item,
    ReconcileWarning,
    Section,
    Snapshot,
)
from listkit.snapshot import SnapshotBuilder

# ── Surfaces ───────────────────────────────────────────────────────────
from listkit.surface import ListSurface, MemoryListSurface

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Adapters
    "ListAdapter",
    "AsyncListAdapter",
    # Configuration
    "ListKitConfig",
    "UNRESOLVED_KIND_POLICIES",
    # Error base + code enum
    "ListKitError",
    "ErrorCode",
    # Snapshot / diff errors
    "ListKitDuplicateIdentityError",
    "ListKitStaleScriptError",
    # Reconciliation errors
    "ListKitUnresolvedKindError",
    "ListKitWidgetApplyError",
    "ListKitSurfaceInconsistencyError",
    "ListKitBusyError",
    # Adapter / registry errors
    "ListKitContextError",
    "ListKitRegistrationError",
    # Models — identity
    "Item",
    "Section",
    "Snapshot",
    "SnapshotBuilder",
    "IndexPath",
    # Models — edit scripts
    "EditOpType",
    "EditOp",
    "EditScript",
    # Models — result types
    "ApplyResult",
    "ReconcileWarning",
    # Engine
    "DiffPlanner",
    "Reconciler",
    "diff",
    # Surfaces
    "ListSurface",
    "MemoryListSurface",
    # Cells
    "CellRegistry",
    "ModelableCell",
    "PlaceholderCell",
    "ModelableSupplementaryView",
    "TableSupplementaryView",
    # Delegation
    "ListDelegate",
    "ListDataSource",
    "SUPPLEMENTARY_HEADER",
    "SUPPLEMENTARY_FOOTER",
]
