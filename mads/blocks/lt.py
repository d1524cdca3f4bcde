"""
LTMADS poll directions (Audet & Dennis 2006, section 4, boxes on p. 203-204).

For a mesh level ℓ the generator builds a positive basis of N+1 integer
directions:

    b(ℓ)   pivot entry ±2^ℓ, all other entries ±(2^ℓ-1); memoised per level
    L      (N-1)x(N-1) lower triangular, diagonal ±2^ℓ, strictly lower part
           uniform in [-2^ℓ+1, 2^ℓ-1], rows and columns randomly permuted
    d_j    j = pivot: b(ℓ); otherwise a permuted column of L with a 0
           inserted at the pivot coordinate
    d_N+1  -(d_1 + ... + d_N)

Directions are produced lazily; the sequence is consumed once per poll.
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

import numpy as np


class LTDirectionGenerator:
    """
    Randomised lower-triangular direction generator.

    Attributes
    ----------
    b : Dict[int, Tuple[int, np.ndarray]]
        Memo ``level -> (pivot, b(level))``. Grows by one entry per distinct
        level visited and is never overwritten within a run.
    """

    def __init__(self, n: int, rng: Optional[np.random.Generator] = None):
        if n < 1:
            raise ValueError(f"dimension must be positive, got {n}")
        self.n = int(n)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.b: Dict[int, Tuple[int, np.ndarray]] = {}

    # ------------------------------------------------------------------ #
    # run lifecycle
    # ------------------------------------------------------------------ #
    def reset(self, rng: Optional[np.random.Generator] = None) -> None:
        self.b.clear()
        if rng is not None:
            self.rng = rng

    def init(self, x: np.ndarray) -> None:
        pass

    def update(self, x: np.ndarray) -> None:
        pass

    # ------------------------------------------------------------------ #
    # construction
    # ------------------------------------------------------------------ #
    def _signs(self, size: int) -> np.ndarray:
        return self.rng.choice(np.array([-1, 1], dtype=np.int64), size=size)

    def pivot_vector(self, level: int) -> Tuple[int, np.ndarray]:
        """Return the memoised ``(pivot, b(level))``, drawing it on first use."""
        if level in self.b:
            return self.b[level]
        n = self.n
        i = int(self.rng.integers(0, n))
        v = self._signs(n) * (2**level - 1)
        v[i] = int(self._signs(1)[0]) * 2**level
        self.b[level] = (i, v)
        return self.b[level]

    def _lower_triangular(self, level: int) -> np.ndarray:
        m = self.n - 1
        L = np.zeros((m, m), dtype=np.int64)
        if m == 0:
            return L
        rows, cols = np.tril_indices(m, k=-1)
        L[rows, cols] = self.rng.integers(-(2**level) + 1, 2**level, size=rows.size)
        L[np.arange(m), np.arange(m)] = self._signs(m) * 2**level
        rowperm = self.rng.permutation(m)
        colperm = self.rng.permutation(m)
        return L[rowperm][:, colperm]

    def directions(self, level: int) -> Iterator[np.ndarray]:
        """Lazily yield the N+1 poll directions for ``level`` (negative → 0)."""
        level = max(0, int(level))
        i, v = self.pivot_vector(level)
        L = self._lower_triangular(level)
        return self._iterate(i, v, L)

    def _iterate(self, i: int, v: np.ndarray, L: np.ndarray) -> Iterator[np.ndarray]:
        n = self.n
        total = np.zeros(n, dtype=np.int64)
        for j in range(n):
            if j == i:
                d = v.copy()
            else:
                d = np.insert(L[:, j - (j > i)], i, 0)
            total += d
            yield d
        yield -total

    def count(self) -> int:
        return self.n + 1
