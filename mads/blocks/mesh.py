"""
Mesh size controllers for MADS (Audet & Dennis 2006, Eq. 2.1).

Two interchangeable strategies share the same small interface:

    size()        -> current mesh size Δᵐ (> 0)
    level()       -> integer mesh level ℓ
    update(code)  -> coarsen on code > 0, refine on code < 0, keep on 0
    reset(rng)    -> bind the run's random generator, restore the start size

`Mesh` draws its exponents at random inside [0, w⁺] / [w⁻, -1]; `LogMesh` is
the deterministic special case w⁺ = -w⁻ = 1 that stores ℓ directly and never
takes a logarithm.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np


class Mesh:
    """
    General mesh with random power-of-τ updates.

    Parameters
    ----------
    tau : float
        Mesh base τ > 1.
    delta : float
        Initial mesh size Δᵐ in (0, 1].
    w_plus : int
        Largest exponent drawn on success (≥ 0).
    w_minus : int
        Smallest exponent drawn on failure (≤ -1).
    """

    def __init__(self, tau: float = 4.0, delta: float = 1.0, w_plus: int = 1, w_minus: int = -1):
        if tau <= 1:
            raise ValueError(f"tau must be > 1, got {tau}")
        if not (0 < delta <= 1):
            raise ValueError(f"delta must lie in (0, 1], got {delta}")
        if w_plus < 0 or w_minus > -1:
            raise ValueError(f"need w_plus >= 0 and w_minus <= -1, got {w_plus}, {w_minus}")
        self.tau = float(tau)
        self.w_plus = int(w_plus)
        self.w_minus = int(w_minus)
        self.delta0 = float(delta)
        self.delta = float(delta)
        self.rng = np.random.default_rng()

    def reset(self, rng: Optional[np.random.Generator] = None) -> None:
        self.delta = self.delta0
        if rng is not None:
            self.rng = rng

    def update(self, code: int) -> "Mesh":
        if code == 0:
            return self
        if code > 0:
            if self.delta >= 1.0:
                return self
            w = int(self.rng.integers(0, self.w_plus + 1))
        else:
            w = int(self.rng.integers(self.w_minus, 0))
        new = self.delta * self.tau ** w
        # coarsest mesh is 1; underflow keeps the previous positive size
        self.delta = min(1.0, new) if new > 0 else self.delta
        return self

    def size(self) -> float:
        return self.delta

    def level(self) -> int:
        return int(round(-math.log(self.delta, self.tau)))


class LogMesh:
    """Log-space mesh for w⁺ = -w⁻ = 1; stores ℓ = -log_τ(Δᵐ) as an int."""

    def __init__(self, tau: int = 4, delta: float = 1.0):
        if tau <= 1:
            raise ValueError(f"tau must be > 1, got {tau}")
        if delta <= 0:
            raise ValueError(f"delta must be positive, got {delta}")
        self.tau = int(tau)
        self.level0 = int(round(-math.log(delta, self.tau)))
        self.neglog_delta = self.level0

    def reset(self, rng: Optional[np.random.Generator] = None) -> None:
        self.neglog_delta = self.level0

    def update(self, code: int) -> "LogMesh":
        if code > 0:
            self.neglog_delta -= 1
        elif code < 0:
            self.neglog_delta += 1
        return self

    def size(self) -> float:
        if self.neglog_delta <= 0:
            return 1.0
        # τ^-ℓ underflows to 0 far past any sensible min_mesh_size
        return max(float(self.tau) ** (-self.neglog_delta), np.nextafter(0.0, 1.0))

    def level(self) -> int:
        return self.neglog_delta
