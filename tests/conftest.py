"""Shared test fixtures for the listkit test suite."""

from __future__ import annotations

from typing import Any

import pytest

from listkit.cells import CellRegistry, ModelableCell
from listkit.config import ListKitConfig
from listkit.surface import MemoryListSurface


class TextCell(ModelableCell):
    model_type = str

    @classmethod
    def size(cls, model: Any, surface: Any) -> tuple[float, float] | None:
        return (float(getattr(surface, "width", 0.0)), 44.0)


class NumberCell(ModelableCell):
    model_type = int


class RecordingMetricsHook:
    """A metrics backend that records all calls for assertion."""

    def __init__(self) -> None:
        self.increments: list[dict[str, Any]] = []
        self.timings: list[dict[str, Any]] = []
        self.gauges: list[dict[str, Any]] = []

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        self.increments.append({"name": name, "value": value, "tags": tags})

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        self.timings.append({"name": name, "ms": ms, "tags": tags})

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        self.gauges.append({"name": name, "value": value, "tags": tags})

    def names(self) -> set[str]:
        return (
            {e["name"] for e in self.increments}
            | {e["name"] for e in self.timings}
            | {e["name"] for e in self.gauges}
        )


@pytest.fixture
def config() -> ListKitConfig:
    """Default test configuration."""
    return ListKitConfig()


@pytest.fixture
def metrics() -> RecordingMetricsHook:
    return RecordingMetricsHook()


@pytest.fixture
def registry() -> CellRegistry:
    """Registry with ``text`` (str) and ``number`` (int) cells."""
    registry = CellRegistry()
    registry.register("text", TextCell)
    registry.register("number", NumberCell)
    return registry


@pytest.fixture
def surface() -> MemoryListSurface:
    return MemoryListSurface()
