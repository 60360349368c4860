"""Unit tests for ScoringService."""

import math

import pytest

from src.domain.models.enums import Grade
from src.domain.models.scoring import BucketTable, ScoreBucket, ScoringConfig
from src.domain.services.scoring import ScoringService


@pytest.fixture
def service() -> ScoringService:
    return ScoringService()


# ---------------------------------------------------------------------------
# Sub-scores
# ---------------------------------------------------------------------------


class TestProfitability:
    @pytest.mark.parametrize(
        "cagr, points",
        [(0.15, 40), (0.12, 40), (0.10, 32), (0.06, 24), (0.04, 16), (0.0, 8), (-0.01, 0)],
    )
    def test_cagr_buckets(self, service, cagr, points):
        assert service.score(cagr, 0.5, -1.0, -0.9).profitability == points


class TestStability:
    @pytest.mark.parametrize(
        "volatility, points",
        [(0.10, 15), (0.18, 12), (0.20, 12), (0.30, 9), (0.35, 5), (0.40, 2), (0.9, 2)],
    )
    def test_volatility_buckets(self, service, volatility, points):
        assert service.score(0.0, volatility, 0.0, 0.0).volatility_score == points

    @pytest.mark.parametrize(
        "mdd, points",
        [(-0.10, 15), (-0.20, 12), (-0.35, 8), (-0.50, 4), (-0.55, 1), (-0.80, 1)],
    )
    def test_mdd_scored_by_magnitude(self, service, mdd, points):
        assert service.score(0.0, 0.1, 0.0, mdd).mdd_score == points

    def test_stability_is_sum_of_parts(self, service):
        score = service.score(0.0, 0.2, 0.0, -0.35)
        assert score.stability == score.volatility_score + score.mdd_score == 20


class TestEfficiency:
    @pytest.mark.parametrize(
        "sharpe, points",
        [(1.5, 30), (1.0, 25), (0.8, 20), (0.6, 15), (0.4, 10), (0.1, 5), (-0.2, 0)],
    )
    def test_sharpe_buckets(self, service, sharpe, points):
        assert service.score(0.0, 0.1, sharpe, 0.0).efficiency == points


# ---------------------------------------------------------------------------
# Totals and grades
# ---------------------------------------------------------------------------


class TestScore:
    def test_perfect_portfolio(self, service):
        score = service.score(0.15, 0.10, 1.5, -0.10)
        assert score.total == 100
        assert score.grade is Grade.S

    def test_mid_range_portfolio(self, service):
        score = service.score(0.09, 0.20, 0.8, -0.25)
        assert (score.profitability, score.stability, score.efficiency) == (32, 24, 20)
        assert score.total == 76
        assert score.grade is Grade.B

    def test_weak_portfolio(self, service):
        score = service.score(-0.05, 0.5, -0.5, -0.7)
        assert score.total == 3
        assert score.grade is Grade.D

    def test_total_within_bounds(self, service):
        for args in [(1.0, 0.0, 5.0, 0.0), (-1.0, 5.0, -5.0, -1.0)]:
            assert 0 <= service.score(*args).total <= 100

    def test_non_finite_inputs_score_fallbacks(self, service):
        score = service.score(math.nan, math.nan, math.nan, math.nan)
        assert score.total == 3
        assert score.grade is Grade.D

    def test_infinite_sharpe_is_top_bucket(self, service):
        assert service.score(0.0, 0.0, math.inf, 0.0).efficiency == 30

    def test_is_pure(self, service):
        assert service.score(0.09, 0.2, 0.8, -0.25) == service.score(0.09, 0.2, 0.8, -0.25)

    def test_custom_config(self, service):
        config = ScoringConfig(
            profitability=BucketTable(buckets=(ScoreBucket(threshold=0.0, points=40),)),
        )
        assert service.score(0.01, 0.5, -1.0, -0.9, config=config).profitability == 40
