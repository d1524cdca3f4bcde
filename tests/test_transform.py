"""Tests for the user-box <-> canonical-box coordinate transform."""

import numpy as np
import pytest

from mads.blocks.aux import ConfigurationError
from mads.blocks.transform import CoordinateTransform


class TestCoordinateTransform:
    @pytest.fixture
    def tr(self):
        return CoordinateTransform(np.array([-10.0, 0.0, 2.0]), np.array([10.0, 15.0, 3.0]))

    def test_round_trip_canonical(self, tr, rng):
        for p in rng.uniform(-1.0, 1.0, size=(50, 3)):
            assert np.allclose(tr.from_user(tr.to(p)), p, atol=1e-12)

    def test_corners(self, tr):
        assert np.allclose(tr.to(-np.ones(3)), tr.lb)
        assert np.allclose(tr.to(np.ones(3)), tr.ub)
        assert np.allclose(tr.from_user(np.array([0.0, 7.5, 2.5])), 0.0)

    def test_fixed_dimension_collapses(self):
        tr = CoordinateTransform(np.array([-1.0, 2.0]), np.array([1.0, 2.0]))
        with np.errstate(all="raise"):
            z = tr.from_user(np.array([0.5, 2.0]))
            assert z[1] == 0.0
            assert tr.to(np.array([0.5, 0.9]))[1] == 2.0
        assert np.array_equal(tr.clip(np.array([3.0, 0.7])), [1.0, 0.0])

    def test_clip_to_canonical_box(self, tr):
        assert np.array_equal(tr.clip(np.array([-2.0, 0.3, 1.5])), [-1.0, 0.3, 1.0])

    def test_rejects_inverted_bounds(self):
        with pytest.raises(ConfigurationError):
            CoordinateTransform(np.array([1.0]), np.array([0.0]))

    def test_rejects_infinite_bounds(self):
        with pytest.raises(ConfigurationError):
            CoordinateTransform(np.array([-np.inf]), np.array([0.0]))
