"""Tests for the OrthoMADS direction generator and its helpers."""

import logging
import math

import numpy as np
import pytest

from mads.blocks.ortho import (
    NegReduction,
    NoReduction,
    OrthoDirectionGenerator,
    halton_point,
    halton_scale,
    normalized_halton_direction,
    scaled_householder,
)


class TestHalton:
    def test_known_values(self):
        assert np.allclose(halton_point(2, 1), [0.5, 1 / 3])
        assert np.allclose(halton_point(2, 2), [0.25, 2 / 3])
        assert np.allclose(halton_point(3, 4), [0.125, 4 / 9, 4 / 5])

    def test_index_zero_is_origin(self):
        assert np.allclose(halton_point(3, 0), 0.0)


class TestScaling:
    @pytest.mark.parametrize("level", [0, 1, 2, 5, 10])
    def test_integer_nonzero_direction(self, level):
        q = normalized_halton_direction(halton_point(3, 7), level)
        assert q.dtype.kind == "i"
        assert np.any(q != 0)

    def test_norm_tracks_level(self):
        u = halton_point(2, 9)
        n6 = np.linalg.norm(normalized_halton_direction(u, 6))
        n12 = np.linalg.norm(normalized_halton_direction(u, 12))
        assert n12 > 4 * n6

    def test_cap_falls_back_and_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            q = normalized_halton_direction(halton_point(2, 5), 16, max_steps=1)
        assert np.any(q != 0)
        assert "scale search hit its cap" in caplog.text

    @pytest.mark.parametrize("level", [24, 25, 26, 27])
    @pytest.mark.parametrize("index", [5, 50, 123])
    def test_deep_levels_reach_target_norm(self, level, index, caplog):
        u = halton_point(2, index)
        v = 2.0 * u - 1.0
        q = v / np.linalg.norm(v)
        target = 2.0 ** (level / 2.0)
        with caplog.at_level(logging.WARNING):
            alpha = halton_scale(q, level)
            q_hat = normalized_halton_direction(u, level)
        assert np.linalg.norm(np.round(alpha * q)) >= target
        assert np.array_equal(q_hat, np.round((alpha - 0.1) * q).astype(np.int64))
        assert np.linalg.norm(q_hat) >= target - 0.1 - math.sqrt(2)
        assert caplog.records == []

    def test_householder_columns_orthogonal(self):
        q = np.array([3, -1, 2])
        H = scaled_householder(q)
        assert np.array_equal(H.T @ H, (q @ q) ** 2 * np.eye(3, dtype=int))


class TestOrthoDirectionGenerator:
    def test_first_index_is_level_plus_offset(self):
        g = OrthoDirectionGenerator(2)
        assert g.determine_t(3) == 3 + 4

    def test_index_strictly_increasing_under_oscillation(self):
        g = OrthoDirectionGenerator(3)
        ts = [g.determine_t(level) for level in [0, -1, -2, -1, 0, 1, 2, 1, 3, 0, 4, 4]]
        assert all(b > a for a, b in zip(ts, ts[1:]))

    def test_no_reduction_yields_2n_negated_pairs(self):
        g = OrthoDirectionGenerator(3, reduction=NoReduction())
        dirs = list(g.directions(4))
        assert len(dirs) == 6
        assert g.count() == 6
        for k in range(3):
            assert np.array_equal(dirs[k + 3], -dirs[k])

    def test_neg_reduction_falls_back_before_first_success(self):
        g = OrthoDirectionGenerator(3, reduction=NegReduction(3))
        g.init(np.zeros(3))
        assert len(list(g.directions(2))) == 6

    def test_neg_reduction_yields_n_plus_one_summing_to_zero(self):
        g = OrthoDirectionGenerator(3, reduction=NegReduction(3))
        g.init(np.zeros(3))
        g.update(np.array([0.1, -0.2, 0.05]))
        dirs = list(g.directions(4))
        assert len(dirs) == 4
        assert g.count() == 4
        assert np.array_equal(np.sum(dirs, axis=0), np.zeros(3, dtype=int))

    def test_neg_reduction_aligns_with_last_displacement(self):
        g = OrthoDirectionGenerator(2, reduction=NegReduction(2))
        g.init(np.array([0.5, 0.5]))
        g.update(np.array([0.25, 0.75]))
        w = g.reduction.w
        assert np.allclose(w, [-0.25, 0.25])
        for d in list(g.directions(3))[:-1]:
            assert d @ w >= 0

    def test_engine_draws_match_halton_sequence(self):
        g = OrthoDirectionGenerator(2, reduction=NoReduction())
        for level in [0, 1, 3, 2, 5, 5]:
            t = g.determine_t(level)
            assert np.allclose(g.halton_draw(t), halton_point(2, t))
            assert g.halton.num_generated == t + 1

    def test_reset_rewinds_engine(self):
        g = OrthoDirectionGenerator(2, reduction=NoReduction())
        first = [list(g.directions(level)) for level in (0, 2, 1)]
        g.reset()
        assert g.halton.num_generated == 0
        again = [list(g.directions(level)) for level in (0, 2, 1)]
        for a, b in zip(first, again):
            assert all(np.array_equal(da, db) for da, db in zip(a, b))

    def test_deterministic(self):
        a = OrthoDirectionGenerator(3, reduction=NoReduction())
        b = OrthoDirectionGenerator(3, reduction=NoReduction())
        for level in [0, 1, 0, 2]:
            for da, db in zip(a.directions(level), b.directions(level)):
                assert np.array_equal(da, db)

    def test_reset_restarts_index_sequence(self):
        g = OrthoDirectionGenerator(2, reduction=NegReduction(2))
        first = [g.determine_t(level) for level in (0, 1, 0)]
        g.update(np.ones(2))
        g.reset()
        assert [g.determine_t(level) for level in (0, 1, 0)] == first
        assert not g.reduction.active()
