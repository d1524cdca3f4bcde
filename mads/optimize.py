# optimize.py
# MADS main loop: Search -> Poll -> mesh update -> stopping criteria.
# All mesh/direction arithmetic happens in the canonical box [-1, 1]^N;
# the objective and constraints are always called in user coordinates.

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence, TextIO, Tuple

import numpy as np

from .blocks.aux import (
    ConfigurationError,
    InfeasibleStart,
    MADSConfig,
    StoppingReason,
    as_bound_vector,
    constraint_list,
    is_feasible,
    validate_config,
)
from .blocks.transform import CoordinateTransform
from .mads import MADS
from .report import IterationPrinter


# ----------------------------- result structs ----------------------------- #


@dataclass
class OptimizationTrace:
    """Incumbent snapshots, one per iteration (points in user coordinates)."""

    x: List[np.ndarray] = field(default_factory=list)
    f: List[float] = field(default_factory=list)
    iterations: List[int] = field(default_factory=list)

    def push(self, x: np.ndarray, fx: float, k: int) -> None:
        self.x.append(np.array(x, dtype=float, copy=True))
        self.f.append(float(fx))
        self.iterations.append(int(k))

    def __len__(self) -> int:
        return len(self.f)

    def __iter__(self) -> Iterator[Tuple[np.ndarray, float, int]]:
        return iter(zip(self.x, self.f, self.iterations))

    def as_arrays(self):
        return {
            "x": np.asarray(self.x, dtype=float),
            "f": np.asarray(self.f, dtype=float),
            "iterations": np.asarray(self.iterations, dtype=int),
        }


@dataclass
class MADSResult:
    f: float
    x: np.ndarray
    stopping_reason: StoppingReason
    iterations: int
    evaluations: int
    elapsed: float
    trace: Optional[OptimizationTrace] = None


class _CountingObjective:
    """Objective in canonical coordinates that counts its evaluations."""

    def __init__(self, f: Callable[[np.ndarray], float], to: Callable[[np.ndarray], np.ndarray]):
        self.f = f
        self.to = to
        self.count = 0

    def __call__(self, x: np.ndarray) -> float:
        self.count += 1
        return float(self.f(self.to(x)))


# ------------------------------- main loop -------------------------------- #


def minimize(
    method: MADS,
    f: Callable[[np.ndarray], float],
    x0: Sequence[float],
    lowerbound=None,
    upperbound=None,
    constraints: Optional[Sequence[Callable[[np.ndarray], bool]]] = None,
    config: Optional[MADSConfig] = None,
    io: Optional[TextIO] = None,
) -> MADSResult:
    """
    Minimize ``f`` over the box [lowerbound, upperbound] with a MADS method.

    Parameters
    ----------
    method : MADS
        Method template (`LtMADS`, `OrthoMADS`, `RobustLtMADS`, ...). Its
        state is copied per run, so the same object may be reused.
    f : callable
        Objective, called with a point in user coordinates.
    x0 : array_like
        Start point; clamped into the bounds before use.
    lowerbound, upperbound : float or array_like
        Finite bounds (scalars broadcast). Required.
    constraints : sequence of callables, optional
        Predicates returning True when a point is feasible.
    config : MADSConfig, optional
        Stopping criteria, reporting, trace and seed.
    io : text stream, optional
        Destination of the verbosity-gated report (default stdout).

    Raises
    ------
    ConfigurationError
        Missing/invalid bounds, dimension mismatch or invalid options.
    InfeasibleStart
        The clamped start point violates a constraint.
    """
    cfg = config if config is not None else MADSConfig()
    validate_config(cfg)

    x0 = np.asarray(x0, dtype=float).reshape(-1)
    n = x0.size
    if n != method.n:
        raise ConfigurationError(f"x0 has length {n} but the method was built for n={method.n}")
    lb = as_bound_vector(lowerbound, n, "lowerbound")
    ub = as_bound_vector(upperbound, n, "upperbound")
    transform = CoordinateTransform(lb, ub)
    x0 = np.clip(x0, lb, ub)

    cons = constraint_list(constraints)
    if not is_feasible(cons, x0):
        raise InfeasibleStart(f"x0 = {x0} doesn't satisfy all constraints.")

    rng = np.random.default_rng(cfg.seed)
    ctx = method.spawn(rng)
    printer = IterationPrinter(cfg.verbosity, io, cfg.log_interval)

    f_internal = _CountingObjective(f, transform.to)
    c_internal = [(lambda x, c=c: c(transform.to(x))) for c in cons]

    start = time.perf_counter()
    incumbent = transform.from_user(x0)
    fincumbent = f_internal(incumbent)
    ctx.init(incumbent, fincumbent)

    printer.start(n, f"{type(method).__name__}[{type(method.poll).__name__}]")
    trace = OptimizationTrace() if cfg.store_trace else None

    def finish(reason: StoppingReason, k: int) -> MADSResult:
        result = MADSResult(
            f=float(fincumbent),
            x=transform.to(incumbent),
            stopping_reason=reason,
            iterations=k,
            evaluations=f_internal.count,
            elapsed=time.perf_counter() - start,
            trace=trace,
        )
        printer.final(result)
        return result

    prev_incumbent = incumbent.copy()
    prev_fincumbent = fincumbent
    stall = 0

    for k in range(1, cfg.max_iterations + 1):
        # budget exhausted by the previous iteration
        if f_internal.count >= cfg.max_evaluations:
            return finish(StoppingReason.MAX_EVALUATIONS, k - 1)

        search = ctx.run_search(f_internal, c_internal, incumbent, fincumbent)
        if search.hasimproved != 1:
            polled = ctx.run_poll(f_internal, c_internal, incumbent, fincumbent, transform.clip)
            incumbent, fincumbent, code = polled
            stage = "poll"
        else:
            incumbent, fincumbent, code = search
            ctx.last_directions = 0
            stage = "search"

        ctx.mesh.update(code)
        if trace is not None:
            trace.push(transform.to(incumbent), fincumbent, k)

        delta = ctx.mesh.size()
        printer.iteration(k, fincumbent, delta, code)
        printer.step(k, stage, code, search.fx, fincumbent, delta)
        printer.debug(k, ctx.last_directions, ctx.acceptance.cache_size(), ctx.mesh.level())

        # ---- stopping criteria (fixed order) ----
        if delta < cfg.min_mesh_size:
            return finish(StoppingReason.MIN_MESH_SIZE, k)
        if fincumbent < cfg.f_target:
            return finish(StoppingReason.F_TARGET_REACHED, k)
        if f_internal.count >= cfg.max_evaluations:
            return finish(StoppingReason.MAX_EVALUATIONS, k)
        if time.perf_counter() - start > cfg.max_time:
            return finish(StoppingReason.MAX_TIME, k)

        if code <= 0 and (cfg.f_tol > 0 or cfg.x_tol > 0):
            f_stalled = cfg.f_tol > 0 and abs(fincumbent - prev_fincumbent) < cfg.f_tol
            x_stalled = cfg.x_tol > 0 and np.linalg.norm(incumbent - prev_incumbent) < cfg.x_tol
            stall = stall + 1 if (f_stalled or x_stalled) else 0
            if stall >= cfg.stagnation_patience:
                reason = StoppingReason.F_TOL_REACHED if f_stalled else StoppingReason.X_TOL_REACHED
                return finish(reason, k)
        else:
            stall = 0

        prev_incumbent = incumbent.copy()
        prev_fincumbent = fincumbent

    return finish(StoppingReason.MAX_ITERATIONS, cfg.max_iterations)
