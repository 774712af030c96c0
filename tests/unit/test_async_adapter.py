"""Tests for AsyncListAdapter."""

from __future__ import annotations

import asyncio

import pytest

from listkit.async_adapter import AsyncListAdapter
from listkit.errors import ListKitUnresolvedKindError
from listkit.models import Item, Section, Snapshot
from listkit.surface import MemoryListSurface


def _snap(*values: str, identifier: str = "A") -> Snapshot:
    return Snapshot.of(Section(identifier, tuple(Item("text", v) for v in values)))


async def _drive(surface: MemoryListSurface, *tasks: asyncio.Task) -> None:
    """Deliver deferred batch completions until every task is done."""
    while not all(task.done() for task in tasks):
        surface.flush()
        await asyncio.sleep(0)


class TestAsyncApply:
    @pytest.mark.asyncio
    async def test_apply_returns_result(self, registry):
        async with AsyncListAdapter(MemoryListSurface(), registry=registry) as adapter:
            result = await adapter.apply(_snap("a", "b"))
            assert result.succeeded
            assert result.sections_inserted == 1
            assert adapter.snapshot == _snap("a", "b")
            assert not adapter.is_updating

    @pytest.mark.asyncio
    async def test_failed_cycle_raises(self, registry):
        adapter = AsyncListAdapter(MemoryListSurface(), registry=registry)
        with pytest.raises(ListKitUnresolvedKindError):
            await adapter.apply(Snapshot.of(Section("A", (Item("ghost", 1),))))
        assert adapter.snapshot == Snapshot()

    @pytest.mark.asyncio
    async def test_waits_for_deferred_completion(self, registry):
        surface = MemoryListSurface(defer_completion=True)
        adapter = AsyncListAdapter(surface, registry=registry)

        task = asyncio.ensure_future(adapter.apply(_snap("a")))
        await asyncio.sleep(0)
        assert not task.done()
        assert adapter.is_updating

        await _drive(surface, task)
        assert task.result().succeeded
        assert adapter.snapshot == _snap("a")

    @pytest.mark.asyncio
    async def test_concurrent_submissions_coalesce(self, registry):
        surface = MemoryListSurface(defer_completion=True)
        adapter = AsyncListAdapter(surface, registry=registry)

        first = asyncio.ensure_future(adapter.apply(_snap("a")))
        second = asyncio.ensure_future(adapter.apply(_snap("a", "b")))
        third = asyncio.ensure_future(adapter.apply(_snap("c", "a")))
        await _drive(surface, first, second, third)

        assert first.result().coalesced == 0
        assert second.result() is third.result()
        assert third.result().coalesced == 1
        assert adapter.snapshot == _snap("c", "a")
        assert surface.batches_committed == 2

    @pytest.mark.asyncio
    async def test_reload_data(self, registry):
        adapter = AsyncListAdapter(MemoryListSurface(), registry=registry)

        def build(builder):
            builder.append_section("A")
            builder.append("text", ["x"])

        result = await adapter.reload_data(build)
        assert result.items_inserted == 0
        assert result.sections_inserted == 1
        assert adapter.snapshot == _snap("x")

    @pytest.mark.asyncio
    async def test_close_cancels_pending_waiters(self, registry):
        surface = MemoryListSurface(defer_completion=True)
        adapter = AsyncListAdapter(surface, registry=registry)

        task = asyncio.ensure_future(adapter.apply(_snap("a")))
        await asyncio.sleep(0)
        await adapter.close()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_register_cell_forwarded(self, registry):
        adapter = AsyncListAdapter(MemoryListSurface())
        adapter.register_cell("text", registry.resolve("text"))
        assert "text" in adapter.adapter.registry
