# branin.py
# Small demonstrations of the MADS solvers on Rosenbrock, Branin and a noisy sphere.
# Run from the repository root:  python -m mads.examples.branin

import math

import numpy as np

from mads.blocks.aux import MADSConfig, Verbosity
from mads.mads import OrthoMADS, RobustOrthoMADS
from mads.optimize import minimize
from mads.solve import Problem, solve

# ---------------------------
# Test problems
# ---------------------------


def rosenbrock(x: np.ndarray, a: float = 1.0, b: float = 100.0) -> float:
    """
    Rosenbrock function in 2D:
        f(x, y) = (a - x)^2 + b (y - x^2)^2
    Global min at (x, y) = (a, a^2), f = 0
    """
    x1, x2 = x
    return (a - x1) ** 2 + b * (x2 - x1 ** 2) ** 2


def branin(x: np.ndarray) -> float:
    """
    Branin (2D) on domain x1 in [-5, 10], x2 in [0, 15].
    Standard form (global minima ~ 0.397887 at three points).
    """
    x1, x2 = x
    a = 1.0
    b = 5.1 / (4.0 * math.pi ** 2)
    c = 5.0 / math.pi
    r = 6.0
    s = 10.0
    t = 1.0 / (8.0 * math.pi)
    return a * (x2 - b * x1 ** 2 + c * x1 - r) ** 2 + s * (1 - t) * math.cos(x1) + s


# Keep inside a circle:  x1^2 + x2^2 <= R^2
def inside_circle(R: float):
    def g(x: np.ndarray) -> bool:
        return x[0] ** 2 + x[1] ** 2 <= R ** 2
    return g


def noisy_sphere(sigma: float, seed: int = 0):
    rng = np.random.default_rng(seed)

    def f(x: np.ndarray) -> float:
        return float(np.sum(x ** 2) + sigma * rng.standard_normal())
    return f


# ---------------------------
# Main: run a few scenarios
# ---------------------------

if __name__ == "__main__":
    np.set_printoptions(precision=6, suppress=True)

    # 1) Rosenbrock through the builder
    p = Problem(rosenbrock, 2).set_initial([-1.2, 1.0]).set_bounds(-5.0, 5.0)
    res = solve(p, method="LtMADS", max_evals=5000, seed=1, verbosity=Verbosity.FINAL)

    # 2) Branin + circle, OrthoMADS, per-iteration table every 25 iterations
    cfg = MADSConfig(max_evaluations=2000, verbosity=Verbosity.ITER, log_interval=25)
    res = minimize(
        OrthoMADS(2),
        branin,
        [3.0, 0.0],
        lowerbound=[-5.0, 0.0],
        upperbound=[10.0, 15.0],
        constraints=[inside_circle(60.0 ** 0.5)],
        config=cfg,
    )
    print(f"-> Branin DONE. x* = {res.x}, f* = {res.f:.9f} ({res.stopping_reason.value})")

    # 3) Noisy sphere with the kernel-smoothed variant
    cfg = MADSConfig(max_evaluations=3000, seed=3, verbosity=Verbosity.FINAL)
    res = minimize(RobustOrthoMADS(3), noisy_sphere(0.05), [2.0, -1.0, 0.5],
                   lowerbound=-4.0, upperbound=4.0, config=cfg)
