"""
High-level entry points: the `Problem` builder and ``solve``.

``solve`` maps a method name onto a constructor through the single
`METHOD_CONSTRUCTORS` table, turns keyword options into a `MADSConfig` and
delegates to ``minimize``.

Example
-------
    p = Problem(lambda x: float(np.sum(x ** 2)), 2)
    p.set_initial([1.0, 2.0]).set_bounds(-5.0, 5.0)
    result = solve(p, max_evals=1000, seed=0)
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence, TextIO, Union

import numpy as np

from .blocks.aux import ConfigurationError, MADSConfig, Verbosity, as_bound_vector
from .mads import MADS, LtMADS, OrthoMADS, RobustLtMADS, RobustMADS, RobustOrthoMADS
from .optimize import MADSResult, minimize

METHOD_CONSTRUCTORS: Dict[str, Callable[[int], MADS]] = {
    "LtMADS": LtMADS,
    "OrthoMADS": OrthoMADS,
    "RobustLtMADS": RobustLtMADS,
    "RobustOrthoMADS": RobustOrthoMADS,
    "MADS": MADS,
    "RobustMADS": RobustMADS,
}


def make_method(name: str, n: int) -> MADS:
    if name not in METHOD_CONSTRUCTORS:
        raise ConfigurationError(
            f"Unknown method {name!r}. Valid methods: {sorted(METHOD_CONSTRUCTORS)}"
        )
    return METHOD_CONSTRUCTORS[name](n)


class Problem:
    """
    Mutable problem definition (builder). Every setter returns ``self``.

    Defaults: x0 = 0, lb = -1, ub = 1, no constraints.
    """

    def __init__(self, f: Callable[[np.ndarray], float], n: int):
        if n < 1:
            raise ConfigurationError(f"dimension must be positive, got {n}")
        self.f = f
        self.n = int(n)
        self.x0 = np.zeros(self.n)
        self.lb = -np.ones(self.n)
        self.ub = np.ones(self.n)
        self.constraints: List[Callable[[np.ndarray], bool]] = []

    def set_initial(self, x0: Sequence[float]) -> "Problem":
        x0 = np.asarray(x0, dtype=float).reshape(-1)
        if x0.size != self.n:
            raise ConfigurationError(f"x0 must have length {self.n}, got {x0.size}")
        self.x0 = x0.copy()
        return self

    def set_bounds(self, lb, ub) -> "Problem":
        """Bounds for all dimensions; scalars broadcast."""
        self.lb = as_bound_vector(lb, self.n, "lb")
        self.ub = as_bound_vector(ub, self.n, "ub")
        return self

    def set_bound(self, i: int, lb: float, ub: float) -> "Problem":
        """Bounds for the single dimension ``i`` (0-based)."""
        if not (0 <= i < self.n):
            raise ConfigurationError(f"Dimension {i} out of range 0:{self.n - 1}")
        self.lb[i] = float(lb)
        self.ub[i] = float(ub)
        return self

    def add_constraint(self, c: Callable[[np.ndarray], bool]) -> "Problem":
        if not callable(c):
            raise ConfigurationError(f"constraint {c!r} is not callable")
        self.constraints.append(c)
        return self

    def clear_constraints(self) -> "Problem":
        self.constraints.clear()
        return self

    def __repr__(self) -> str:
        return f"Problem(n={self.n}, constraints={len(self.constraints)})"


def solve(
    f: Union[Problem, Callable[[np.ndarray], float]],
    x0: Optional[Sequence[float]] = None,
    *,
    lb=None,
    ub=None,
    max_evals: int = 10_000,
    max_iters: int = 10_000,
    method: str = "OrthoMADS",
    verbosity: Verbosity = Verbosity.SILENT,
    constraints: Optional[Sequence[Callable[[np.ndarray], bool]]] = None,
    seed: Optional[int] = None,
    min_mesh_size: float = np.finfo(float).eps / 2,
    f_target: float = -np.inf,
    f_tol: float = 0.0,
    x_tol: float = 0.0,
    max_time: float = np.inf,
    log_interval: int = 1,
    store_trace: bool = False,
    io: Optional[TextIO] = None,
) -> MADSResult:
    """
    Solve ``min f(x)`` s.t. ``lb <= x <= ub`` and every constraint holds.

    ``f`` may be a `Problem`, in which case x0, bounds and constraints are
    taken from it and must not be passed again.
    """
    if isinstance(f, Problem):
        if x0 is not None or lb is not None or ub is not None or constraints is not None:
            raise ConfigurationError("x0, bounds and constraints come from the Problem; do not pass them")
        problem = f
        f, x0, lb, ub, constraints = problem.f, problem.x0, problem.lb, problem.ub, problem.constraints

    if x0 is None:
        raise ConfigurationError("x0 is required")
    if lb is None or ub is None:
        raise ConfigurationError("Bounds are required. Please provide both `lb` and `ub`.")

    x0 = np.asarray(x0, dtype=float).reshape(-1)
    n = x0.size
    lb_vec = as_bound_vector(lb, n, "lb")
    ub_vec = as_bound_vector(ub, n, "ub")
    mads = make_method(method, n)

    cfg = MADSConfig(
        max_iterations=max_iters,
        max_evaluations=max_evals,
        max_time=max_time,
        min_mesh_size=min_mesh_size,
        f_target=f_target,
        f_tol=f_tol,
        x_tol=x_tol,
        verbosity=verbosity,
        log_interval=log_interval,
        store_trace=store_trace,
        seed=seed,
    )
    return minimize(
        mads,
        f,
        x0,
        lowerbound=lb_vec,
        upperbound=ub_vec,
        constraints=constraints,
        config=cfg,
        io=io,
    )
