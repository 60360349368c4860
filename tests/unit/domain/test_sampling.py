"""Unit tests for the sampling helpers used by the Monte Carlo simulators."""

import math

import numpy as np
import pytest

from src.domain.services.sampling import (
    BoxMullerSampler,
    batch_bounds,
    batch_count,
    batch_seeds,
    box_muller_factory,
    crosses_checkpoint,
    lognormal_step_params,
)


# ---------------------------------------------------------------------------
# BoxMullerSampler
# ---------------------------------------------------------------------------


class TestBoxMullerSampler:
    def test_shape(self):
        sampler = BoxMullerSampler(np.random.default_rng(0))
        assert sampler.standard_normal((3, 4)).shape == (3, 4)

    def test_draws_are_finite(self):
        sampler = BoxMullerSampler(np.random.default_rng(1))
        assert np.isfinite(sampler.standard_normal((10_000,))).all()

    def test_moments_are_standard_normal(self):
        draws = BoxMullerSampler(np.random.default_rng(2)).standard_normal((200_000,))
        assert draws.mean() == pytest.approx(0.0, abs=0.01)
        assert draws.std() == pytest.approx(1.0, abs=0.01)

    def test_same_seed_same_draws(self):
        a = box_muller_factory(np.random.SeedSequence(5)).standard_normal((50,))
        b = box_muller_factory(np.random.SeedSequence(5)).standard_normal((50,))
        np.testing.assert_array_equal(a, b)


# ---------------------------------------------------------------------------
# Batching
# ---------------------------------------------------------------------------


class TestBatching:
    def test_bounds_cover_total(self):
        assert list(batch_bounds(450, 200)) == [(0, 0, 200), (1, 200, 400), (2, 400, 450)]

    def test_bounds_exact_multiple(self):
        assert list(batch_bounds(400, 200)) == [(0, 0, 200), (1, 200, 400)]

    def test_batch_count_rounds_up(self):
        assert batch_count(450, 200) == 3
        assert batch_count(400, 200) == 2
        assert batch_count(1, 200) == 1

    def test_seeds_one_per_batch(self):
        assert len(batch_seeds(1, 4)) == 4

    def test_seeds_are_reproducible(self):
        first = [s.generate_state(1)[0] for s in batch_seeds(9, 3)]
        second = [s.generate_state(1)[0] for s in batch_seeds(9, 3)]
        assert first == second

    def test_child_seed_independent_of_batch_count(self):
        short = batch_seeds(9, 2)[1].generate_state(2)
        long = batch_seeds(9, 10)[1].generate_state(2)
        np.testing.assert_array_equal(short, long)


class TestCrossesCheckpoint:
    def test_block_reaching_multiple(self):
        assert crosses_checkpoint(150, 200, 450, 200)

    def test_block_inside_interval(self):
        assert not crosses_checkpoint(100, 150, 450, 200)

    def test_block_passing_multiple(self):
        assert crosses_checkpoint(50, 100, 450, 60)

    def test_final_block_always_reports(self):
        assert crosses_checkpoint(400, 450, 450, 200)
        assert crosses_checkpoint(0, 50, 50, 1000)


# ---------------------------------------------------------------------------
# lognormal_step_params
# ---------------------------------------------------------------------------


class TestLognormalStepParams:
    def test_zero_volatility_annual(self):
        mu, sigma = lognormal_step_params(0.07, 0.0, 1)
        assert math.exp(mu) == pytest.approx(1.07)
        assert sigma == 0.0

    def test_monthly_compounds_to_annual(self):
        mu, _ = lognormal_step_params(0.07, 0.0, 12)
        assert math.exp(12 * mu) == pytest.approx(1.07)

    def test_volatility_scaled_by_sqrt_periods(self):
        _, sigma = lognormal_step_params(0.07, 0.12, 12)
        assert sigma == pytest.approx(0.12 / math.sqrt(12))

    def test_drift_correction(self):
        mu, _ = lognormal_step_params(0.0, 0.2, 1)
        assert mu == pytest.approx(-0.02)

    def test_return_at_or_below_minus_one_raises(self):
        with pytest.raises(ValueError):
            lognormal_step_params(-1.0, 0.1, 12)

    def test_negative_volatility_raises(self):
        with pytest.raises(ValueError):
            lognormal_step_params(0.05, -0.1, 12)
