from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np


def lcs_table(a: Sequence[str], b: Sequence[str]) -> np.ndarray:
    """Return the suffix LCS table where ``table[i, j]`` is LCS(a[i:], b[j:])."""
    n, m = len(a), len(b)
    table = np.zeros((n + 1, m + 1), dtype=np.int32)
    for i in range(n - 1, -1, -1):
        below = table[i + 1].tolist()
        row = [0] * (m + 1)
        item = a[i]
        for j in range(m - 1, -1, -1):
            if item == b[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = below[j] if below[j] >= row[j + 1] else row[j + 1]
        table[i] = row
    return table


def lcs_token_matches(a: Sequence[str], b: Sequence[str]) -> List[Tuple[int, int]]:
    """Return index pairs ``(i, j)`` of a longest common subsequence of a and b.

    Backtracking starts from the left: equal elements are matched immediately,
    otherwise the pointer whose advance keeps the larger remaining LCS moves,
    with ties advancing ``a``.
    """
    if not a or not b:
        return []
    table = lcs_table(a, b)
    matches: List[Tuple[int, int]] = []
    i = j = 0
    n, m = len(a), len(b)
    while i < n and j < m:
        if a[i] == b[j]:
            matches.append((i, j))
            i += 1
            j += 1
        elif table[i + 1, j] >= table[i, j + 1]:
            i += 1
        else:
            j += 1
    return matches
