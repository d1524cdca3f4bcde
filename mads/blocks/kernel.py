"""
Gaussian kernel smoothing and evaluation cache for RobustMADS
(Audet, Ihaddadene, Le Digabel & Tribes 2018).

Every evaluated point is kept in an append-only `EvaluationCache`. Each cached
point carries a Nadaraya–Watson estimate of the objective built from all
evaluations so far, with a Gaussian bandwidth σ = β Δᵐ tied to the mesh.
"""

from __future__ import annotations

import math
from typing import List

import numpy as np
from scipy.spatial.distance import cdist


class GaussKernel:
    """Gaussian kernel ψ(x, y) = exp(-||x - y||² / (2σ²)) / sqrt(2πσ²)."""

    def __init__(self, beta: float = 1.0, sigma2: float = 1.0):
        if beta <= 0:
            raise ValueError(f"beta must be positive, got {beta}")
        self.beta = float(beta)
        self.sigma2 = float(sigma2)

    def set_mesh_size(self, delta: float) -> None:
        self.sigma2 = (self.beta * float(delta)) ** 2

    def self_weight(self) -> float:
        return 1.0 / math.sqrt(2.0 * math.pi * self.sigma2)

    def __call__(self, X: np.ndarray, x: np.ndarray) -> np.ndarray:
        """Kernel weights between the rows of X (k, n) and the point x (n,)."""
        if X.shape[0] == 0:
            return np.zeros(0)
        d2 = cdist(X, np.asarray(x, dtype=float)[None, :], metric="sqeuclidean")[:, 0]
        return self.self_weight() * np.exp(-d2 / (2.0 * self.sigma2))


class EvaluationCache:
    """
    Append-only record of evaluations.

    Attributes
    ----------
    x : np.ndarray
        Evaluated points, shape (k, n).
    y : np.ndarray
        Raw objective values, shape (k,).
    f : np.ndarray
        Smoothed estimates per cached point.
    P : np.ndarray
        Cumulative kernel weight per cached point.
    incumbents : List[int]
        Indices that have been the running minimiser, in order.
    """

    def __init__(self, n: int):
        self.n = int(n)
        self.reset()

    def reset(self) -> None:
        self.x = np.zeros((0, self.n), dtype=np.float64)
        self.y = np.zeros(0, dtype=np.float64)
        self.f = np.zeros(0, dtype=np.float64)
        self.P = np.zeros(0, dtype=np.float64)
        self.incumbents: List[int] = []

    def __len__(self) -> int:
        return self.y.size

    def push(self, x: np.ndarray, y: float, f: float, p: float) -> int:
        """Append one evaluation with its smoothed value and weight; return its index."""
        x = np.asarray(x, dtype=np.float64).reshape(1, self.n)
        self.x = np.vstack([self.x, x])
        self.y = np.append(self.y, float(y))
        self.f = np.append(self.f, float(f))
        self.P = np.append(self.P, float(p))
        return self.y.size - 1

    def smooth(self, kernel: GaussKernel, x: np.ndarray, y: float) -> int:
        """
        Blend the observation (x, y) into every cached estimate, then append x
        with its own self-normalised estimate. Returns the new index.
        """
        k0 = kernel.self_weight()
        if len(self) == 0:
            return self.push(x, y, y, k0)
        psi = kernel(self.x, x)
        # running weighted blend of the old estimates with the new observation
        P_new = self.P + psi
        self.f = (self.f * self.P + psi * y) / P_new
        self.P = P_new
        p = float(psi.sum()) + k0
        f = (float(self.y @ psi) + k0 * y) / p
        return self.push(x, y, f, p)

    def argmin(self) -> int:
        return int(np.argmin(self.f))
