# poll.py
# Poll stage and incumbent acceptance for MADS / RobustMADS.
# - Opportunistic: the first direction whose acceptance code is >= 0 wins
# - PlainAcceptance: strict decrease of the raw objective
# - KernelAcceptance: argmin of the kernel-smoothed cache (noisy objectives)

from __future__ import annotations

from typing import Callable, Iterable, Sequence, Tuple

import numpy as np

from .blocks.aux import is_feasible
from .blocks.kernel import EvaluationCache, GaussKernel
from .blocks.search import StageResult

Acceptance = Tuple[int, np.ndarray, float]


class PlainAcceptance:
    """x becomes the incumbent iff f(x) < f(incumbent)."""

    def reset(self) -> None:
        pass

    def init(self, x: np.ndarray, fx: float, mesh_size: float) -> None:
        pass

    def cache_size(self) -> int:
        return 0

    def evaluate(self, x: np.ndarray, fx: float, f_incumbent: float, mesh_size: float) -> Acceptance:
        return (1 if fx < f_incumbent else -1), x, fx


class KernelAcceptance:
    """
    Robust acceptance: the incumbent is the cached point with the lowest
    smoothed value.

    Codes
    -----
    +1 : the just-evaluated point is the new minimiser
     0 : another cached point became the minimiser ("cache success")
    -1 : the running minimiser is unchanged
    """

    def __init__(self, kernel: GaussKernel, cache: EvaluationCache):
        self.kernel = kernel
        self.cache = cache

    def reset(self) -> None:
        self.cache.reset()

    def init(self, x: np.ndarray, fx: float, mesh_size: float) -> None:
        self.kernel.set_mesh_size(mesh_size)
        idx = self.cache.smooth(self.kernel, x, fx)
        self.cache.incumbents.append(idx)

    def cache_size(self) -> int:
        return len(self.cache)

    def evaluate(self, x: np.ndarray, fx: float, f_incumbent: float, mesh_size: float) -> Acceptance:
        cache = self.cache
        self.kernel.set_mesh_size(mesh_size)
        new = cache.smooth(self.kernel, x, fx)
        i = cache.argmin()
        if i == new:
            code = 1
        elif not cache.incumbents or i != cache.incumbents[-1]:
            code = 0
        else:
            code = -1
        if code >= 0:
            cache.incumbents.append(i)
        return code, cache.x[i].copy(), float(cache.f[i])


def poll(
    directions: Iterable[np.ndarray],
    mesh_size: float,
    f: Callable[[np.ndarray], float],
    constraints: Sequence[Callable[[np.ndarray], bool]],
    x: np.ndarray,
    fx: float,
    acceptance,
    generator,
    clip: Callable[[np.ndarray], np.ndarray],
) -> Tuple[StageResult, int]:
    """
    Poll around x along ``directions``. Returns the stage result and the
    number of directions consumed.
    """
    used = 0
    for d in directions:
        used += 1
        x_new = clip(x + mesh_size * d)
        if not is_feasible(constraints, x_new):
            continue
        f_new = f(x_new)
        code, incumbent, f_incumbent = acceptance.evaluate(x_new, f_new, fx, mesh_size)
        if code >= 0:
            generator.update(incumbent)
            return StageResult(incumbent, f_incumbent, code), used
    return StageResult(x, fx, -1), used
