"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest


@pytest.fixture
def rng():
    """Seeded generator for reproducible draws."""
    return np.random.default_rng(42)


@pytest.fixture
def sphere():
    """f(x) = sum(x^2) in user coordinates."""
    def f(x):
        return float(np.sum(np.asarray(x) ** 2))
    return f


@pytest.fixture
def counting():
    """Wrap an objective so the test can see how often it was called."""
    def wrap(f):
        def g(x):
            g.calls += 1
            return f(x)
        g.calls = 0
        return g
    return wrap
