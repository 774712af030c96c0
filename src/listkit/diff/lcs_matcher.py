"""Longest Common Subsequence matching over identity keys.

Finds the longest sequence of elements that appear in the same relative
order in the old and the new arrangement.  Those elements stay where they
are; every other surviving element is reported as a move by the planner.

Because identity keys are unique within a snapshot, the LCS of the two key
sequences is the longest increasing subsequence of the new positions read
in old order, which patience sorting finds in O(n log n) instead of the
quadratic dynamic-programming table.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Hashable, Sequence


def lcs_match(
    old_keys: Sequence[Hashable],
    new_keys: Sequence[Hashable],
) -> list[tuple[int, int]]:
    """Compute LCS-based matched pairs between two sequences of unique keys.

    Parameters
    ----------
    old_keys:
        Keys in their old order.  Must not contain duplicates.
    new_keys:
        Keys in their new order.  Must not contain duplicates.

    Returns
    -------
    list[tuple[int, int]]
        ``(old_idx, new_idx)`` pairs of the elements that keep their
        relative order, sorted by both indices.  Keys present on both sides
        but missing from the result changed their relative position.

    Examples
    --------
    >>> lcs_match(["x", "y"], ["y", "x"])
    [(1, 0)]
    >>> lcs_match(["a", "b", "c"], ["a", "c"])
    [(0, 0), (2, 1)]
    """
    if not old_keys or not new_keys:
        return []

    new_positions = {key: j for j, key in enumerate(new_keys)}

    # Surviving elements in old order, paired with their new index.
    candidates: list[tuple[int, int]] = [
        (i, new_positions[key])
        for i, key in enumerate(old_keys)
        if key in new_positions
    ]

    # tails[k] is the candidate ending the best increasing run of length
    # k + 1 found so far; tail_values mirrors its new index for bisecting.
    tails: list[int] = []
    tail_values: list[int] = []
    predecessors: list[int] = [-1] * len(candidates)

    for pos, (_, new_idx) in enumerate(candidates):
        k = bisect_left(tail_values, new_idx)
        if k > 0:
            predecessors[pos] = tails[k - 1]
        if k == len(tails):
            tails.append(pos)
            tail_values.append(new_idx)
        else:
            tails[k] = pos
            tail_values[k] = new_idx

    # Backtrack to recover the actual matched pairs.
    pairs: list[tuple[int, int]] = []
    pos = tails[-1] if tails else -1
    while pos != -1:
        pairs.append(candidates[pos])
        pos = predecessors[pos]

    pairs.reverse()
    return pairs
