"""Asynchronous list adapter.

:class:`AsyncListAdapter` mirrors :class:`ListAdapter` for code running on
an asyncio event loop.  Submitting a snapshot returns an awaitable that
resolves once the surface has committed it (or a newer snapshot that
absorbed it).  The event loop's thread is the adapter's owning thread.

Usage::

    import asyncio
    from listkit import AsyncListAdapter, Item, MemoryListSurface, Section, Snapshot

    async def main():
        async with AsyncListAdapter(MemoryListSurface()) as adapter:
            adapter.register_cell("contact", ContactCell)
            result = await adapter.apply(
                Snapshot.of(Section("contacts", [Item("contact", "ada")]))
            )
            print(result.items_inserted)

    asyncio.run(main())
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from listkit.adapter import ListAdapter
from listkit.cells import CellRegistry, ModelableCell
from listkit.config import ListKitConfig
from listkit.delegate import ListDataSource, ListDelegate
from listkit.models import ApplyResult, Snapshot
from listkit.snapshot import SnapshotBuilder


class AsyncListAdapter:
    """Awaitable front-end over :class:`ListAdapter`.

    Parameters
    ----------
    surface:
        The :class:`ListSurface` to drive.
    config:
        listkit configuration.  Mutually exclusive with *kwargs*.
    registry, delegate, data_source:
        As for :class:`ListAdapter`.
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
        self._adapter = ListAdapter(
            surface,
            config=config,
            registry=registry,
            delegate=delegate,
            data_source=data_source,
            **kwargs,
        )
        self._waiters: set[asyncio.Future[ApplyResult]] = set()

    @property
    def adapter(self) -> ListAdapter:
        """The underlying synchronous adapter (lifecycle forwarding lives there)."""
        return self._adapter

    @property
    def snapshot(self) -> Snapshot:
        return self._adapter.snapshot

    @property
    def is_updating(self) -> bool:
        return self._adapter.is_updating

    def register_cell(
        self,
        kind: str,
        cell_class: type[ModelableCell],
        *,
        replace: bool = False,
    ) -> None:
        self._adapter.register_cell(kind, cell_class, replace=replace)

    async def apply(self, snapshot: Snapshot) -> ApplyResult:
        """Submit *snapshot* and wait for the cycle that applies it.

        Returns
        -------
        ApplyResult
            The successful result, with ``coalesced`` counting absorbed
            submissions.

        Raises
        ------
        ListKitDuplicateIdentityError
            If *snapshot* breaks its identity invariants.
        ListKitError
            The error of a failed cycle (unresolved kind, widget failure).
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[ApplyResult] = loop.create_future()
        self._waiters.add(future)
        try:
            self._adapter.apply(snapshot, completion=_resolver(future))
            result = await future
        finally:
            self._waiters.discard(future)

        if result.error is not None:
            raise result.error
        return result

    async def reload_data(self, build: Callable[[SnapshotBuilder], None]) -> ApplyResult:
        """Build a snapshot with *build* and apply it."""
        builder = SnapshotBuilder()
        build(builder)
        return await self.apply(builder.build())

    async def close(self) -> None:
        """Cancel every pending :meth:`apply` awaitable."""
        for future in list(self._waiters):
            if not future.done():
                future.cancel()
        self._waiters.clear()

    async def __aenter__(self) -> AsyncListAdapter:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


def _resolver(future: asyncio.Future[ApplyResult]) -> Callable[[ApplyResult], None]:
    def resolve(result: ApplyResult) -> None:
        if not future.done():
            future.set_result(result)

    return resolve
