"""Diff engine and reconciler for list updates.

Exports
-------
DiffPlanner
    Computes the edit script between the applied and the desired snapshot.
diff
    Convenience wrapper around :meth:`DiffPlanner.plan`.
Reconciler
    Applies an edit script to a list surface in one batch.
lcs_match
    Stable-order matching of two sequences of unique keys.
"""

from .lcs_matcher import lcs_match
from .planner import DiffPlanner, diff
from .reconciler import Reconciler

__all__ = [
    "DiffPlanner",
    "Reconciler",
    "diff",
    "lcs_match",
]
