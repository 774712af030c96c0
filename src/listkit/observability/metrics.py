"""Metrics hook protocol and no-op default implementation.

listkit emits counters, timings, and gauges around diffing, reconciliation
and the update queue.  By default a :class:`NoopMetricsHook` is used so
there is zero overhead.  Supply any object satisfying :class:`MetricsHook`
through :attr:`ListKitConfig.metrics` to route them to a real backend.

Emitted metric names:

* ``listkit.diff_ops_total``            -- counter, tagged ``op_type``
* ``listkit.diff_duration_ms``          -- timing
* ``listkit.apply_total``               -- counter, tagged ``outcome``
* ``listkit.apply_duration_ms``         -- timing (batch open to completion)
* ``listkit.unresolved_kind_total``     -- counter, tagged ``kind``
* ``listkit.updates_coalesced_total``   -- counter
* ``listkit.update_queue_depth``        -- gauge
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict whose keys and values are
    strings.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric.

        Parameters
        ----------
        name:
            Dot-delimited metric name, e.g. ``"listkit.apply_total"``.
        value:
            Amount to increment by.  Defaults to ``1``.
        tags:
            Optional key-value tags for the data point.
        """
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a timing / duration metric in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that silently discards all data points.

    Used when no :class:`MetricsHook` backend is configured, so call sites
    never need ``if self._metrics is not None`` guards.
    """

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
