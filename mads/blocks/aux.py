# aux.py
# Shared MADS infrastructure: configuration, enums, errors and small helpers.

from __future__ import annotations

# =========================
# Standard library
# =========================
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence

# =========================
# Third-party
# =========================
import numpy as np


# ======================================
# Errors
# ======================================
class MADSError(Exception):
    """Base class for errors raised by the MADS package."""


class ConfigurationError(MADSError, ValueError):
    """Invalid bounds, dimensions, method names or option values."""


class InfeasibleStart(MADSError, ValueError):
    """The initial point violates at least one constraint."""


# ======================================
# Enums
# ======================================
class Verbosity(Enum):
    """Reporting levels, ordered from quiet to chatty."""

    SILENT = 0
    FINAL = 1
    ITER = 2
    STEP = 3
    DEBUG = 4

    def __ge__(self, other: "Verbosity") -> bool:
        return self.value >= other.value


class StoppingReason(Enum):
    """Why the optimization loop stopped."""

    MIN_MESH_SIZE = "min_mesh_size"
    MAX_ITERATIONS = "max_iterations"
    MAX_EVALUATIONS = "max_evaluations"
    MAX_TIME = "max_time"
    F_TARGET_REACHED = "f_target_reached"
    F_TOL_REACHED = "f_tol_reached"
    X_TOL_REACHED = "x_tol_reached"


# ======================================
# Global configuration
# ======================================
@dataclass
class MADSConfig:
    """
    Non-algorithmic options for a MADS run: stopping criteria, reporting,
    trace storage and seeding.

    Notes
    -----
    • Algorithm behaviour (mesh, poll generator, acceptance) is chosen by the
      method object passed to ``minimize``, not here.
    • ``f_tol`` / ``x_tol`` equal to 0 disable the stagnation tests.
    """

    # ---------------- Stopping criteria ----------------
    max_iterations: int = 10_000
    max_evaluations: int = sys.maxsize
    max_time: float = np.inf  # wall-clock seconds
    min_mesh_size: float = np.finfo(float).eps / 2
    f_target: float = -np.inf  # stop once f < f_target
    f_tol: float = 0.0  # |f_k - f_{k-1}| below this counts as stagnation
    x_tol: float = 0.0  # ||x_k - x_{k-1}|| below this counts as stagnation
    stagnation_patience: int = 5  # consecutive stagnating iterations to stop

    # ---------------- Reporting ----------------
    verbosity: Verbosity = Verbosity.SILENT
    log_interval: int = 1  # print every N iterations at ITER level
    store_trace: bool = False

    # ---------------- Reproducibility ----------------
    seed: Optional[int] = None


def validate_config(cfg: MADSConfig) -> None:
    """Raise ConfigurationError on option values the loop cannot honour."""
    if not isinstance(cfg.verbosity, Verbosity):
        raise ConfigurationError(f"verbosity must be a Verbosity, got {cfg.verbosity!r}")
    if cfg.max_iterations < 0:
        raise ConfigurationError(f"max_iterations must be non-negative, got {cfg.max_iterations}")
    if cfg.max_evaluations < 1:
        raise ConfigurationError(f"max_evaluations must be positive, got {cfg.max_evaluations}")
    if cfg.max_time <= 0:
        raise ConfigurationError(f"max_time must be positive, got {cfg.max_time}")
    if cfg.min_mesh_size < 0:
        raise ConfigurationError(f"min_mesh_size must be non-negative, got {cfg.min_mesh_size}")
    if cfg.f_tol < 0 or cfg.x_tol < 0:
        raise ConfigurationError(f"f_tol and x_tol must be non-negative, got {cfg.f_tol}, {cfg.x_tol}")
    if cfg.stagnation_patience < 1:
        raise ConfigurationError(f"stagnation_patience must be positive, got {cfg.stagnation_patience}")
    if cfg.log_interval < 1:
        raise ConfigurationError(f"log_interval must be positive, got {cfg.log_interval}")


# ======================================
# Helpers
# ======================================
def as_bound_vector(b, n: int, name: str) -> np.ndarray:
    """Broadcast a scalar bound or validate a vector bound of length n."""
    if b is None:
        raise ConfigurationError(f"{name} is required; unbounded optimization is not supported")
    arr = np.asarray(b, dtype=float)
    if arr.ndim == 0:
        return np.full(n, float(arr))
    arr = arr.reshape(-1)
    if arr.size != n:
        raise ConfigurationError(f"{name} must have length {n}, got {arr.size}")
    return arr.copy()


def is_feasible(constraints: Iterable[Callable[[np.ndarray], bool]], x: np.ndarray) -> bool:
    """True iff every constraint predicate accepts x (short-circuits)."""
    for c in constraints:
        if not c(x):
            return False
    return True


def constraint_list(constraints: Optional[Sequence[Callable]]) -> list:
    if constraints is None:
        return []
    out = list(constraints)
    for c in out:
        if not callable(c):
            raise ConfigurationError(f"constraint {c!r} is not callable")
    return out
