"""Configuration for listkit.

:class:`ListKitConfig` is a plain dataclass that captures every tuneable
knob of the diff engine, the reconciler and the list adapters.  Instances
are passed to :class:`DiffPlanner`, :class:`Reconciler`,
:class:`ListAdapter` and :class:`AsyncListAdapter`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

UNRESOLVED_KIND_POLICIES: tuple[str, ...] = ("raise", "placeholder")
"""Accepted values for :attr:`ListKitConfig.unresolved_kind_policy`."""


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class ListKitConfig:
    """Complete configuration for a list adapter.

    Every parameter has a sensible default, so ``ListKitConfig()`` is a
    valid configuration.

    Parameters
    ----------
    unresolved_kind_policy:
        What the reconciler does when an inserted or reloaded item has a
        kind with no registered cell class.

        * ``"raise"`` — fail the whole cycle with
          :class:`ListKitUnresolvedKindError` before the surface is touched.
        * ``"placeholder"`` — substitute a :class:`PlaceholderCell` and
          record a warning on the :class:`ApplyResult`.
    coalesce_updates:
        When a snapshot is submitted while another one is still queued
        (not yet started), drop the queued one and apply only the newest.
        With ``False`` queued snapshots are applied in submission order.
    verify_baseline:
        Reject edit scripts whose ``old`` snapshot is not the currently
        applied baseline with :class:`ListKitStaleScriptError`.
    enforce_affinity:
        Reject adapter calls made from a thread other than the one that
        created the adapter with :class:`ListKitContextError`.
    metrics:
        Optional :class:`MetricsHook` implementation.  Defaults to a no-op.
    debug_dump_diff:
        Write every computed edit script to *stderr* as JSON.
    """

    # ── Reconciliation ─────────────────────────────────────────────────
    unresolved_kind_policy: Literal["raise", "placeholder"] = "raise"

    verify_baseline: bool = True

    # ── Update queue ───────────────────────────────────────────────────
    coalesce_updates: bool = True

    enforce_affinity: bool = True

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_diff: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.unresolved_kind_policy not in UNRESOLVED_KIND_POLICIES:
            raise ValueError(
                "unresolved_kind_policy must be one of "
                f"{', '.join(UNRESOLVED_KIND_POLICIES)}, got {self.unresolved_kind_policy!r}"
            )
        if self.metrics is not None:
            missing = [
                name for name in ("increment", "timing", "gauge")
                if not callable(getattr(self.metrics, name, None))
            ]
            if missing:
                raise ValueError(
                    f"metrics hook is missing required methods: {', '.join(missing)}"
                )
