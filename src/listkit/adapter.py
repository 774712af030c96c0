"""List adapter: the entry point that owns a list surface.

:class:`ListAdapter` ties a :class:`ListSurface` to a diff planner, a
reconciler and a cell registry.  Callers submit whole snapshots; the
adapter diffs each one against the applied baseline and runs at most one
apply cycle at a time.  Submissions made while a cycle is in flight wait
in a queue, where a newer snapshot supersedes a queued older one.

Usage::

    from listkit import ListAdapter, MemoryListSurface, ModelableCell

    class ContactCell(ModelableCell):
        model_type = str

    adapter = ListAdapter(MemoryListSurface())
    adapter.register_cell("contact", ContactCell)

    def build(builder):
        builder.append_section("contacts", header="Contacts")
        builder.append("contact", ["ada", "grace"])

    adapter.reload_data(build, completion=lambda result: print(result))

The adapter also forwards the surface's lifecycle notifications and
data-source questions to a :class:`ListDelegate` / :class:`ListDataSource`,
translating index paths into items of the applied snapshot.
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable, Sequence
from typing import Any

from listkit.cells import CellRegistry, ModelableCell, Size, TableSupplementaryView
from listkit.config import ListKitConfig
from listkit.delegate import (
    SUPPLEMENTARY_FOOTER,
    SUPPLEMENTARY_HEADER,
    ListDataSource,
    ListDelegate,
)
from listkit.diff import DiffPlanner, Reconciler
from listkit.errors import ListKitContextError
from listkit.models import ApplyResult, IndexPath, Item, Section, Snapshot
from listkit.observability import NoopMetricsHook, get_logger
from listkit.snapshot import SnapshotBuilder

log = get_logger("listkit.adapter")

ApplyCompletion = Callable[[ApplyResult], None]


class _Request:
    """A submitted snapshot and everyone waiting for it."""

    __slots__ = ("coalesced", "completions", "finished", "snapshot")

    def __init__(self, snapshot: Snapshot, completions: list[ApplyCompletion]) -> None:
        self.snapshot = snapshot
        self.completions = completions
        self.coalesced = 0
        self.finished = False


class ListAdapter:
    """Serialized update front-end for one list surface.

    Parameters
    ----------
    surface:
        The :class:`ListSurface` to drive.
    config:
        listkit configuration.  Mutually exclusive with *kwargs*.
    registry:
        Cell registry.  A new, empty one is created when omitted.
    delegate:
        Receiver of lifecycle notifications.
    data_source:
        Answers sizing, supplementary view and editing questions.
    **kwargs:
        Forwarded to :class:`ListKitConfig` when *config* is not given.
    """

    def __init__(
        self,
        surface: Any,
        *,
        config: ListKitConfig | None = None,
        registry: CellRegistry | None = None,
        delegate: ListDelegate | None = None,
        data_source: ListDataSource | None = None,
        **kwargs: Any,
    ) -> None:
        if config is not None and kwargs:
            raise TypeError("pass either config or configuration keyword arguments, not both")
        self._config = config if config is not None else ListKitConfig(**kwargs)
        self._metrics = (
            self._config.metrics if self._config.metrics is not None else NoopMetricsHook()
        )
        self._surface = surface
        self._registry = registry if registry is not None else CellRegistry()
        self.delegate = delegate if delegate is not None else ListDelegate()
        self.data_source = data_source if data_source is not None else ListDataSource()

        self._planner = DiffPlanner(self._config)
        self._reconciler = Reconciler(self._registry, self._config)
        self._owner = threading.get_ident()

        self._pending: deque[_Request] = deque()
        self._in_flight: _Request | None = None
        self._pumping = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def surface(self) -> Any:
        return self._surface

    @property
    def registry(self) -> CellRegistry:
        return self._registry

    @property
    def config(self) -> ListKitConfig:
        return self._config

    @property
    def snapshot(self) -> Snapshot:
        """The snapshot the surface last committed."""
        return self._reconciler.snapshot

    @property
    def is_updating(self) -> bool:
        """``True`` while a cycle is in flight or a request is queued."""
        return self._in_flight is not None or bool(self._pending)

    @property
    def queue_depth(self) -> int:
        return len(self._pending)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def register_cell(
        self,
        kind: str,
        cell_class: type[ModelableCell],
        *,
        replace: bool = False,
    ) -> None:
        """Register *cell_class* as the renderer of *kind*.

        Raises
        ------
        ListKitRegistrationError
            If the registration is invalid (see :meth:`CellRegistry.register`).
        """
        self._check_context("register_cell")
        self._registry.register(kind, cell_class, replace=replace)

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def apply(self, snapshot: Snapshot, completion: ApplyCompletion | None = None) -> None:
        """Submit *snapshot* as the desired content.

        The snapshot is validated immediately.  It is applied as soon as
        no other cycle is in flight; with ``coalesce_updates`` a later
        submission replaces it while it is still queued, and *completion*
        then receives the result of the cycle that absorbed it.

        Parameters
        ----------
        snapshot:
            The desired content.
        completion:
            Called once with the :class:`ApplyResult` of the cycle that
            applied (or absorbed) this snapshot.

        Raises
        ------
        ListKitContextError
            If called off the thread that created the adapter.
        ListKitDuplicateIdentityError
            If *snapshot* breaks its identity invariants.
        ListKitError
            Cycle errors, when no completion is attached to the cycle and
            it runs on the caller's stack.
        """
        self._check_context("apply")
        snapshot.validate()

        request = _Request(snapshot, [completion] if completion is not None else [])
        if self._config.coalesce_updates and self._pending:
            superseded = self._pending.pop()
            request.completions[:0] = superseded.completions
            request.coalesced = superseded.coalesced + 1
            self._metrics.increment("listkit.updates_coalesced_total")
            log.debug(
                "queued update superseded",
                extra={"extra_fields": {"coalesced": request.coalesced}},
            )

        self._pending.append(request)
        self._metrics.gauge("listkit.update_queue_depth", len(self._pending))
        self._pump()

    def reload_data(
        self,
        build: Callable[[SnapshotBuilder], None],
        completion: ApplyCompletion | None = None,
    ) -> None:
        """Build a snapshot with *build* and submit it.

        *build* receives an empty :class:`SnapshotBuilder` and fills it in.
        """
        self._check_context("reload_data")
        builder = SnapshotBuilder()
        build(builder)
        self.apply(builder.build(), completion)

    def _pump(self) -> None:
        """Start queued cycles until one is left in flight or the queue is empty.

        Surfaces that complete synchronously re-enter through ``_finish``;
        the ``_pumping`` flag turns that re-entry into another loop turn.
        A cycle error with nobody to receive it does not stop the queue:
        the remaining requests still run and the first such error is
        raised once the loop is done.
        """
        if self._pumping:
            return
        self._pumping = True
        first_error: Exception | None = None
        try:
            while self._in_flight is None and self._pending:
                request = self._pending.popleft()
                self._metrics.gauge("listkit.update_queue_depth", len(self._pending))
                try:
                    self._start(request)
                except Exception as exc:
                    if first_error is None:
                        first_error = exc
        finally:
            self._pumping = False
        if first_error is not None:
            raise first_error

    def _start(self, request: _Request) -> None:
        self._in_flight = request
        try:
            script = self._planner.plan(self._reconciler.snapshot, request.snapshot)
            self._reconciler.apply(
                script,
                self._surface,
                completion=lambda result: self._finish(request, result),
            )
        except Exception as exc:
            if request.finished:
                raise
            # Pre-flight failure: the surface was never touched.
            if self._in_flight is request:
                self._in_flight = None
            self._deliver(request, ApplyResult(error=exc))

    def _finish(self, request: _Request, result: ApplyResult) -> None:
        self._in_flight = None
        try:
            self._deliver(request, result)
        finally:
            self._pump()

    def _deliver(self, request: _Request, result: ApplyResult) -> None:
        request.finished = True
        result.coalesced = request.coalesced
        if result.error is not None:
            log.error(
                "update failed",
                extra={
                    "extra_fields": {
                        "error_code": getattr(result.error, "code", None),
                        "completions": len(request.completions),
                    }
                },
            )
        for completion in request.completions:
            completion(result)
        if not request.completions and result.error is not None:
            raise result.error

    def _check_context(self, operation: str) -> None:
        if not self._config.enforce_affinity:
            return
        caller = threading.get_ident()
        if caller != self._owner:
            raise ListKitContextError(
                message=f"ListAdapter.{operation}() called off its owning thread",
                context={
                    "owner_thread": self._owner,
                    "caller_thread": caller,
                    "operation": operation,
                },
            )

    # ------------------------------------------------------------------
    # Lifecycle forwarding
    # ------------------------------------------------------------------

    def modify_cell(self, cell: Any, index_path: IndexPath) -> None:
        self.delegate.modify_cell(cell, index_path)

    def will_display(self, cell: Any, index_path: IndexPath) -> None:
        self.delegate.will_display(cell, index_path)

    def did_end_displaying(self, cell: Any, index_path: IndexPath) -> None:
        self.delegate.did_end_displaying(cell, index_path)

    def did_select(self, index_path: IndexPath) -> None:
        self.delegate.did_select(self.item_at(index_path), index_path)

    def did_deselect(self, index_path: IndexPath) -> None:
        self.delegate.did_deselect(self.item_at(index_path), index_path)

    def did_highlight(self, index_path: IndexPath) -> None:
        self.delegate.did_highlight(self.item_at(index_path), index_path)

    def did_unhighlight(self, index_path: IndexPath) -> None:
        self.delegate.did_unhighlight(self.item_at(index_path), index_path)

    def perform_primary_action(self, index_path: IndexPath) -> None:
        self.delegate.perform_primary_action(self.item_at(index_path), index_path)

    def will_display_supplementary_element(
        self, view: Any, kind: str, index_path: IndexPath,
    ) -> None:
        self.delegate.will_display_supplementary_element(
            view, self.section_at(index_path), kind, index_path,
        )

    def did_end_displaying_supplementary_element(
        self, view: Any, kind: str, index_path: IndexPath,
    ) -> None:
        self.delegate.did_end_displaying_supplementary_element(
            view, self.section_at(index_path), kind, index_path,
        )

    def will_display_context_menu(
        self, configuration: Any, animator: Any, index_path: IndexPath,
    ) -> None:
        self.delegate.will_display_context_menu(
            configuration, animator, self.item_at(index_path), index_path,
        )

    def will_end_context_menu_interaction(
        self, configuration: Any, animator: Any, index_path: IndexPath,
    ) -> None:
        self.delegate.will_end_context_menu_interaction(
            configuration, animator, self.item_at(index_path), index_path,
        )

    # ------------------------------------------------------------------
    # Data-source forwarding
    # ------------------------------------------------------------------

    def size_for_item(self, index_path: IndexPath) -> Size | None:
        """Ask the data source, then the item's cell class, for a size."""
        item = self.item_at(index_path)
        size = self.data_source.size(item, index_path)
        if size is not None:
            return size
        cell_class = self._registry.resolve(item.kind)
        if cell_class is None:
            return None
        return cell_class.size(item.value_as(cell_class.model_type), self._surface)

    def supplementary_view(self, kind: str, index_path: IndexPath) -> Any | None:
        """Return the header/footer view for a section.

        Falls back to a :class:`TableSupplementaryView` showing the
        section's header or footer when it is a string.
        """
        section = self.section_at(index_path)
        view = self.data_source.supplementary_element(section, kind, index_path)
        if view is None:
            content = None
            if kind == SUPPLEMENTARY_HEADER:
                content = section.header
            elif kind == SUPPLEMENTARY_FOOTER:
                content = section.footer
            if isinstance(content, str):
                view = TableSupplementaryView()
                view.set_model(content)
        if view is not None:
            self.delegate.modify_supplementary_element(view, section, kind, index_path)
        return view

    def section_index_titles(self) -> list[str] | None:
        return self.data_source.section_index_titles()

    def prefetch(self, index_paths: Sequence[IndexPath]) -> None:
        self.data_source.prefetch([self.item_at(p) for p in index_paths], index_paths)

    def cancel_prefetch(self, index_paths: Sequence[IndexPath]) -> None:
        self.data_source.cancel_prefetch([self.item_at(p) for p in index_paths], index_paths)

    def can_edit(self, index_path: IndexPath) -> bool:
        return self.data_source.can_edit(self.item_at(index_path), index_path)

    def commit_edit(self, style: str, index_path: IndexPath) -> None:
        self.data_source.commit(self.item_at(index_path), style, index_path)

    def can_move(self, index_path: IndexPath) -> bool:
        return self.data_source.can_move(self.item_at(index_path), index_path)

    def move_item(self, source: IndexPath, destination: IndexPath) -> None:
        self.data_source.move(self.item_at(source), source, destination)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def item_at(self, index_path: IndexPath) -> Item:
        """Return the applied item at *index_path*.

        Raises
        ------
        IndexError
            If *index_path* is outside the applied snapshot.
        """
        return self.snapshot.item_at(index_path)

    def section_at(self, index_path: IndexPath) -> Section:
        if index_path.section < 0:
            raise IndexError(f"negative section index: {index_path.section}")
        return self.snapshot.sections[index_path.section]
