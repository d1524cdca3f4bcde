"""Affine map between the user box [lb, ub] and the canonical box [-1, 1]^N."""

from __future__ import annotations

import numpy as np

from .aux import ConfigurationError


class CoordinateTransform:
    """
    `to` maps canonical → user coordinates, `from_user` maps user → canonical.

    Dimensions with lb == ub are fixed: their canonical interval collapses to
    [0, 0], `to` always returns lb there and `from_user` returns 0, so no
    division by a zero width ever happens.
    """

    def __init__(self, lowerbound: np.ndarray, upperbound: np.ndarray):
        lb = np.asarray(lowerbound, dtype=float).reshape(-1)
        ub = np.asarray(upperbound, dtype=float).reshape(-1)
        if lb.shape != ub.shape:
            raise ConfigurationError(f"bound shapes differ: {lb.shape} vs {ub.shape}")
        if not (np.all(np.isfinite(lb)) and np.all(np.isfinite(ub))):
            raise ConfigurationError("bounds must be finite")
        if np.any(lb > ub):
            bad = np.flatnonzero(lb > ub)
            raise ConfigurationError(f"lower bound exceeds upper bound in dimensions {bad.tolist()}")
        self.lb = lb
        self.ub = ub
        self.width = ub - lb
        self.fixed = self.width == 0.0
        self._safe_width = np.where(self.fixed, 1.0, self.width)
        # canonical box: [-1, 1], collapsed to [0, 0] on fixed dimensions
        self.lower = np.where(self.fixed, 0.0, -1.0)
        self.upper = np.where(self.fixed, 0.0, 1.0)

    @property
    def n(self) -> int:
        return self.lb.size

    def to(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        return (x + 1.0) / 2.0 * self.width + self.lb

    def from_user(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        z = 2.0 * (x - self.lb) / self._safe_width - 1.0
        return np.where(self.fixed, 0.0, z)

    def clip(self, x: np.ndarray) -> np.ndarray:
        return np.clip(x, self.lower, self.upper)
