"""Tests for AnalysisConfig and CorrelationMatrix in src/domain/models/assumptions.py."""

import pytest
from pydantic import ValidationError

from src.domain.models.assumptions import AnalysisConfig, CorrelationMatrix
from src.domain.settings import AnalyticsSettings


# --- AnalysisConfig ---

def test_analysis_config_defaults():
    config = AnalysisConfig.default()
    assert config.risk_free_rate == 0.035
    assert config.trading_days_per_year == 252


def test_analysis_config_zero_trading_days_raises():
    with pytest.raises(ValidationError):
        AnalysisConfig(trading_days_per_year=0)


def test_analysis_config_from_settings():
    settings = AnalyticsSettings(risk_free_rate=0.04, trading_days_per_year=250)
    config = AnalysisConfig.from_settings(settings)
    assert config.risk_free_rate == 0.04
    assert config.trading_days_per_year == 250


# --- CorrelationMatrix ---

def test_correlation_matrix_empty_default():
    matrix = CorrelationMatrix()
    assert matrix.size == 0
    assert matrix.as_lists() == []


def test_from_upper_triangle_mirrors_entries():
    matrix = CorrelationMatrix.from_upper_triangle(["A", "B", "C"], {(0, 1): 0.5, (1, 2): -0.3})
    values = matrix.as_lists()
    assert values[1][0] == 0.5
    assert values[2][1] == -0.3


def test_from_upper_triangle_missing_pair_is_zero():
    matrix = CorrelationMatrix.from_upper_triangle(["A", "B", "C"], {(0, 1): 0.5})
    assert matrix.get_correlation("A", "C") == 0.0


def test_from_upper_triangle_diagonal_is_one():
    matrix = CorrelationMatrix.from_upper_triangle(["A", "B"], {(0, 0): 0.2, (0, 1): 0.1})
    assert matrix.values[0][0] == 1.0
    assert matrix.values[1][1] == 1.0


def test_get_correlation_unknown_ticker_returns_none():
    matrix = CorrelationMatrix.from_upper_triangle(["A", "B"], {(0, 1): 0.1})
    assert matrix.get_correlation("A", "Z") is None


def test_get_correlation_is_symmetric():
    matrix = CorrelationMatrix.from_upper_triangle(["A", "B"], {(0, 1): 0.7})
    assert matrix.get_correlation("A", "B") == matrix.get_correlation("B", "A") == 0.7


def test_non_square_matrix_raises():
    with pytest.raises(ValidationError):
        CorrelationMatrix(tickers=("A", "B"), values=((1.0, 0.0),))


def test_non_unit_diagonal_raises():
    with pytest.raises(ValidationError):
        CorrelationMatrix(tickers=("A",), values=((0.9,),))


def test_asymmetric_matrix_raises():
    with pytest.raises(ValidationError):
        CorrelationMatrix(tickers=("A", "B"), values=((1.0, 0.2), (0.3, 1.0)))


def test_out_of_range_correlation_raises():
    with pytest.raises(ValidationError):
        CorrelationMatrix(tickers=("A", "B"), values=((1.0, 1.5), (1.5, 1.0)))
