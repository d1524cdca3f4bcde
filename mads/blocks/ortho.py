"""
OrthoMADS poll directions (Abramson et al. 2009) with the optional
(suc, neg) reduction of Audet et al. 2014.

Pipeline for one poll at mesh level ℓ:

1) t   : quasi-random index, strictly increasing over the whole run
2) u   : Halton point at index t (one prime base per dimension)
3) q̂   : integer direction, q = normalize(2u - 1) scaled until
          ||round(α q)|| ≥ 2^(ℓ/2), then backed off one 0.1 step
4) H   : scaled Householder matrix (q̂·q̂) I - 2 q̂ q̂ᵀ (orthogonal columns)
5) D   : NoReduction  -> columns of H and their negatives (2N)
         NegReduction -> columns sign-aligned with the last successful
                         displacement, plus their negated sum (N+1)
"""

from __future__ import annotations

import logging
import math
from typing import Iterator, Optional, Union

import numpy as np
from scipy.stats import qmc

# ======================================
# Halton / Householder helpers
# ======================================


def halton_point(n: int, index: int) -> np.ndarray:
    """Unscrambled n-dimensional Halton point with the given index (index 0 is the origin)."""
    engine = qmc.Halton(d=n, scramble=False)
    if index > 0:
        engine.fast_forward(int(index))
    return engine.random(1)[0]


def halton_scale(q: np.ndarray, level: int, max_steps: Optional[int] = None) -> float:
    """
    Smallest α on the 0.1 grid above 2^(ℓ/2)/sqrt(N) - 1/2 with
    ||round(α q)|| ≥ 2^(ℓ/2), for a unit vector q.

    Rounding moves each coordinate by at most 1/2, so any α ≥ 2^(ℓ/2) + sqrt(N)/2
    qualifies; the default step cap is derived from that bound and is never
    reached. An explicit ``max_steps`` below it returns the capped α with a warning.
    """
    n = q.size
    target = 2.0 ** (level / 2.0)
    alpha = max(0.0, target / math.sqrt(n) - 0.5)
    if max_steps is None:
        max_steps = math.ceil(10.0 * (target + math.sqrt(n) / 2.0 - alpha)) + 1
    steps = 0
    while np.linalg.norm(np.round(alpha * q)) < target:
        if steps >= max_steps:
            logging.warning(
                f"OrthoMADS scale search hit its cap ({max_steps} steps) at level {level}; "
                f"using alpha={alpha:.3g}."
            )
            return alpha
        alpha += 0.1
        steps += 1
    return alpha


def normalized_halton_direction(u: np.ndarray, level: int, max_steps: Optional[int] = None) -> np.ndarray:
    """
    Integer direction q̂ of norm close to 2^(ℓ/2) pointing along 2u - 1.

    q̂ = round((α - 0.1) q) with α from `halton_scale`. A back-off that would
    round to the zero vector is skipped, and so is the back-off after a capped
    search.
    """
    n = u.size
    v = 2.0 * np.asarray(u, dtype=float) - 1.0
    nv = np.linalg.norm(v)
    if nv == 0.0:
        logging.debug("Degenerate Halton point; using the first coordinate axis.")
        v = np.zeros(n)
        v[0] = 1.0
        nv = 1.0
    q = v / nv

    alpha = halton_scale(q, level, max_steps)
    if np.linalg.norm(np.round(alpha * q)) < 2.0 ** (level / 2.0):
        return np.round(alpha * q).astype(np.int64)
    q_hat = np.round((alpha - 0.1) * q).astype(np.int64)
    if not np.any(q_hat):
        q_hat = np.round(alpha * q).astype(np.int64)
    return q_hat


def scaled_householder(q: np.ndarray) -> np.ndarray:
    """H = (q·q) I - 2 q qᵀ; integer-valued for integer q."""
    q = np.asarray(q, dtype=np.int64)
    return int(q @ q) * np.eye(q.size, dtype=np.int64) - 2 * np.outer(q, q)


# ======================================
# Reduction strategies
# ======================================


class NoReduction:
    """Poll with all 2N directions (Abramson et al. 2009)."""

    def init(self, x: np.ndarray) -> None:
        pass

    def update(self, x: np.ndarray) -> None:
        pass

    def reset(self) -> None:
        pass

    def active(self) -> bool:
        return False


class NegReduction:
    """
    (suc, neg) reduction (Audet et al. 2014): N+1 directions oriented by the
    last successful displacement ``w``. ``w`` is NaN until the first success.
    """

    def __init__(self, n: int):
        self.n = int(n)
        self.old_incumbent = np.zeros(self.n)
        self.w = np.full(self.n, np.nan)

    def reset(self) -> None:
        self.old_incumbent = np.zeros(self.n)
        self.w = np.full(self.n, np.nan)

    def init(self, x: np.ndarray) -> None:
        self.old_incumbent = np.array(x, dtype=float, copy=True)

    def update(self, x: np.ndarray) -> None:
        x = np.asarray(x, dtype=float)
        self.w = x - self.old_incumbent
        self.old_incumbent = x.copy()

    def active(self) -> bool:
        return not np.isnan(self.w).any()


# ======================================
# Generator
# ======================================


class OrthoDirectionGenerator:
    """
    Deterministic OrthoMADS generator.

    Attributes
    ----------
    t0 : int
        Offset of the Halton index (default 2N).
    lmax : Optional[int]
        Largest mesh level seen so far (None before the first poll).
    tmax : int
        Largest Halton index handed out so far.
    halton : scipy.stats.qmc.Halton
        Unscrambled engine shared by every poll of the run.
    """

    def __init__(
        self,
        n: int,
        t0: Optional[int] = None,
        reduction: Union[NoReduction, NegReduction, None] = None,
        max_scale_steps: Optional[int] = None,
    ):
        if n < 1:
            raise ValueError(f"dimension must be positive, got {n}")
        self.n = int(n)
        self.t0 = 2 * self.n if t0 is None else int(t0)
        self.reduction = reduction if reduction is not None else NegReduction(self.n)
        self.max_scale_steps = max_scale_steps
        self.lmax: Optional[int] = None
        self.tmax = 0
        self.halton = qmc.Halton(d=self.n, scramble=False)

    # ------------------------------------------------------------------ #
    # run lifecycle
    # ------------------------------------------------------------------ #
    def reset(self, rng: Optional[np.random.Generator] = None) -> None:
        self.lmax = None
        self.tmax = 0
        self.halton = qmc.Halton(d=self.n, scramble=False)
        self.reduction.reset()

    def init(self, x: np.ndarray) -> None:
        self.reduction.init(x)

    def update(self, x: np.ndarray) -> None:
        self.reduction.update(x)

    # ------------------------------------------------------------------ #
    # directions
    # ------------------------------------------------------------------ #
    def determine_t(self, level: int) -> int:
        """Next Halton index; strictly increasing whatever the level sequence."""
        if self.lmax is None or level > self.lmax:
            self.lmax = level
            t = max(level + self.t0, self.tmax + 1)
        else:
            t = self.tmax + 1
        self.tmax = t
        return t

    def halton_draw(self, t: int) -> np.ndarray:
        """Halton point t from the run's engine; indices only move forward."""
        skip = t - self.halton.num_generated
        if skip > 0:
            self.halton.fast_forward(skip)
        return self.halton.random(1)[0]

    def householder(self, level: int) -> np.ndarray:
        t = self.determine_t(level)
        u = self.halton_draw(t)
        q = normalized_halton_direction(u, level, self.max_scale_steps)
        return scaled_householder(q)

    def directions(self, level: int) -> Iterator[np.ndarray]:
        H = self.householder(int(level))
        if self.reduction.active():
            return self._negative_reduction(H, self.reduction.w)
        return self._all_directions(H)

    def _all_directions(self, H: np.ndarray) -> Iterator[np.ndarray]:
        n = self.n
        for i in range(n):
            yield H[:, i].copy()
        for i in range(n):
            yield -H[:, i]

    def _negative_reduction(self, H: np.ndarray, w: np.ndarray) -> Iterator[np.ndarray]:
        total = np.zeros(self.n, dtype=np.int64)
        for i in range(self.n):
            d = H[:, i].copy()
            if float(d @ w) < 0:
                d = -d
            total -= d
            yield d
        yield total

    def count(self) -> int:
        return self.n + 1 if self.reduction.active() else 2 * self.n
