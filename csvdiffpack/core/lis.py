"""Longest strictly increasing subsequence used to decide what moved.

Items outside the longest stable subsequence are the minimal set that must be
reported as moved to explain a reordering. Column and row matching both go
through this module so they share one tie-break rule.
"""

from __future__ import annotations

from typing import Sequence


def stable_positions(values: Sequence[int]) -> list[int]:
    """Return input positions of the longest strictly increasing subsequence.

    Ties resolve toward the earliest predecessor found, and toward the first
    position holding the maximal length.
    """
    count = len(values)
    if count == 0:
        return []

    dp = [1] * count
    parent = [-1] * count

    for i in range(count):
        for j in range(i):
            if values[j] < values[i] and dp[j] + 1 > dp[i]:
                dp[i] = dp[j] + 1
                parent[i] = j

    best = max(dp)
    cursor = dp.index(best)

    positions: list[int] = []
    while cursor != -1:
        positions.append(cursor)
        cursor = parent[cursor]
    positions.reverse()
    return positions


def longest_increasing_subsequence(values: Sequence[int]) -> list[int]:
    """Return the values of the longest strictly increasing subsequence."""
    return [values[position] for position in stable_positions(values)]
