"""Tests for the Problem builder and the ``solve`` facade."""

import numpy as np
import pytest

from mads.blocks.aux import ConfigurationError, InfeasibleStart, StoppingReason
from mads.mads import MADS, RobustMADS
from mads.solve import METHOD_CONSTRUCTORS, Problem, make_method, solve


@pytest.mark.parametrize("name", sorted(METHOD_CONSTRUCTORS))
def test_every_named_method_improves_sphere(name, sphere):
    res = solve(sphere, [3.0, -2.0], lb=-5.0, ub=5.0, method=name, max_evals=400, seed=0)
    assert res.evaluations >= 1
    assert res.f < sphere([3.0, -2.0])


@pytest.mark.parametrize("name", sorted(METHOD_CONSTRUCTORS))
def test_make_method_builds_requested_dimension(name):
    m = make_method(name, 4)
    assert isinstance(m, MADS)
    assert m.n == 4
    assert isinstance(m, RobustMADS) == name.startswith("Robust")


def test_unknown_method():
    with pytest.raises(ConfigurationError, match="Unknown method"):
        make_method("NelderMead", 2)


def test_missing_bounds(sphere, counting):
    f = counting(sphere)
    with pytest.raises(ConfigurationError, match="Bounds are required"):
        solve(f, [1.0, 1.0], lb=-1.0)
    assert f.calls == 0


def test_missing_start(sphere):
    with pytest.raises(ConfigurationError):
        solve(sphere, lb=-1.0, ub=1.0)


def test_options_reach_the_loop(sphere):
    res = solve(sphere, [3.0, -2.0], lb=-5.0, ub=5.0, max_iters=3, store_trace=True)
    assert res.stopping_reason is StoppingReason.MAX_ITERATIONS
    assert len(res.trace) == 3


def test_keyword_constraints(sphere):
    res = solve(sphere, [3.0, -2.0], lb=-5.0, ub=5.0, constraints=[lambda x: x[1] <= -1.0], max_evals=800)
    assert res.x[1] <= -1.0


class TestProblem:
    def test_defaults(self, sphere):
        p = Problem(sphere, 3)
        assert np.array_equal(p.x0, np.zeros(3))
        assert np.array_equal(p.lb, -np.ones(3))
        assert np.array_equal(p.ub, np.ones(3))
        assert p.constraints == []

    def test_setters_chain_and_broadcast(self, sphere):
        p = Problem(sphere, 2).set_initial([0.5, 0.5]).set_bounds(-2.0, 3.0).set_bound(1, 0.0, 1.0)
        assert np.array_equal(p.lb, [-2.0, 0.0])
        assert np.array_equal(p.ub, [3.0, 1.0])

    def test_bad_lengths(self, sphere):
        p = Problem(sphere, 2)
        with pytest.raises(ConfigurationError):
            p.set_initial([1.0, 2.0, 3.0])
        with pytest.raises(ConfigurationError):
            p.set_bounds([-1.0, -1.0, -1.0], 1.0)

    def test_set_bound_out_of_range(self, sphere):
        p = Problem(sphere, 2)
        with pytest.raises(ConfigurationError, match="out of range"):
            p.set_bound(2, 0.0, 1.0)
        with pytest.raises(ConfigurationError):
            p.set_bound(-1, 0.0, 1.0)

    def test_constraints(self, sphere):
        p = Problem(sphere, 2).add_constraint(lambda x: True).add_constraint(lambda x: x[0] > -1)
        assert len(p.constraints) == 2
        with pytest.raises(ConfigurationError):
            p.add_constraint(3.0)
        p.clear_constraints()
        assert p.constraints == []

    def test_invalid_dimension(self, sphere):
        with pytest.raises(ConfigurationError):
            Problem(sphere, 0)

    def test_solve_problem(self, sphere):
        p = Problem(sphere, 2).set_initial([4.0, 4.0]).set_bounds(-5.0, 5.0).add_constraint(lambda x: x[0] >= 0.5)
        res = solve(p, max_evals=1000)
        assert res.x[0] >= 0.5
        assert res.f < 32.0

    def test_problem_rejects_duplicate_inputs(self, sphere):
        p = Problem(sphere, 2)
        with pytest.raises(ConfigurationError):
            solve(p, [0.0, 0.0])
        with pytest.raises(ConfigurationError):
            solve(p, lb=-1.0, ub=1.0)

    def test_infeasible_problem_start(self, sphere):
        p = Problem(sphere, 2).add_constraint(lambda x: x[0] > 0.5)
        with pytest.raises(InfeasibleStart):
            solve(p)
