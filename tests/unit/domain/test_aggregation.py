"""Unit tests for PortfolioValueService.

Each test class corresponds to one public method (or closely related group
of methods) on PortfolioValueService.
"""

import math
from datetime import date, timedelta

import pandas as pd
import pytest

from src.domain.models.holdings import AssetData, DividendProfile, Holding
from src.domain.models.market_data import PriceSeries
from src.domain.services.aggregation import PortfolioValueService


@pytest.fixture
def service() -> PortfolioValueService:
    return PortfolioValueService()


def _day(n: int) -> date:
    return date(2024, 1, 1) + timedelta(days=n)


def _asset(ticker: str, closes: list[float], start: int = 0, **dividends) -> AssetData:
    return AssetData(
        ticker=ticker,
        prices=PriceSeries.from_pairs(
            ticker, [(_day(start + i), c) for i, c in enumerate(closes)]
        ),
        dividends=DividendProfile(**dividends),
    )


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def growth_and_flat() -> list[AssetData]:
    """A grows 10 % per step; B is flat."""
    return [
        _asset("A", [100.0, 110.0, 121.0]),
        _asset("B", [50.0, 50.0, 50.0]),
    ]


# ---------------------------------------------------------------------------
# portfolio_value_series
# ---------------------------------------------------------------------------


class TestPortfolioValueSeries:
    def test_buy_and_hold_values(self, service, growth_and_flat):
        holdings = [Holding(ticker="A", weight=0.5), Holding(ticker="B", weight=0.5)]
        values = service.portfolio_value_series(holdings, growth_and_flat)
        assert list(values) == pytest.approx([1.0, 1.05, 1.105])

    def test_starts_at_total_weight(self, service, growth_and_flat):
        holdings = [Holding(ticker="A", weight=0.3), Holding(ticker="B", weight=0.3)]
        values = service.portfolio_value_series(holdings, growth_and_flat)
        assert values.iloc[0] == pytest.approx(0.6)

    def test_indexed_by_common_dates(self, service):
        assets = [_asset("A", [1.0, 2.0, 3.0]), _asset("B", [1.0, 1.0, 1.0], start=1)]
        holdings = [Holding(ticker="A", weight=0.5), Holding(ticker="B", weight=0.5)]
        values = service.portfolio_value_series(holdings, assets)
        assert list(values.index) == [_day(1), _day(2)]

    def test_repeated_ticker_weights_are_summed(self, service, growth_and_flat):
        holdings = [
            Holding(ticker="A", weight=0.25),
            Holding(ticker="A", weight=0.25),
            Holding(ticker="B", weight=0.5),
        ]
        values = service.portfolio_value_series(holdings, growth_and_flat)
        assert list(values) == pytest.approx([1.0, 1.05, 1.105])

    def test_holding_without_data_is_ignored(self, service, growth_and_flat):
        holdings = [Holding(ticker="A", weight=1.0), Holding(ticker="ZZZ", weight=0.5)]
        values = service.portfolio_value_series(holdings, growth_and_flat)
        assert list(values) == pytest.approx([1.0, 1.1, 1.21])

    def test_no_matching_data_is_empty(self, service, growth_and_flat):
        values = service.portfolio_value_series([Holding(ticker="ZZZ", weight=1.0)], growth_and_flat)
        assert isinstance(values, pd.Series)
        assert values.empty

    def test_no_common_dates_is_empty(self, service):
        assets = [_asset("A", [1.0, 2.0]), _asset("B", [1.0, 2.0], start=10)]
        holdings = [Holding(ticker="A", weight=0.5), Holding(ticker="B", weight=0.5)]
        assert service.portfolio_value_series(holdings, assets).empty

    def test_zero_total_weight_is_empty(self, service, growth_and_flat):
        holdings = [Holding(ticker="A", weight=0.0), Holding(ticker="B", weight=0.0)]
        assert service.portfolio_value_series(holdings, growth_and_flat).empty


# ---------------------------------------------------------------------------
# cagr
# ---------------------------------------------------------------------------


class TestCagr:
    def test_two_annual_steps_of_ten_percent(self, service):
        assert service.cagr([100.0, 110.0, 121.0], periods_per_year=1) == pytest.approx(0.10)

    def test_flat_series_is_exactly_zero(self, service):
        assert service.cagr([100.0] * 300) == 0.0

    def test_daily_year_of_growth(self, service):
        # 253 points span 252 steps, i.e. one year.
        values = [100.0 * 1.2 ** (i / 252) for i in range(253)]
        assert service.cagr(values) == pytest.approx(0.2)

    def test_accepts_pandas_series(self, service):
        assert service.cagr(pd.Series([1.0, 2.0]), periods_per_year=1) == pytest.approx(1.0)

    def test_single_point_is_zero(self, service):
        assert service.cagr([100.0]) == 0.0

    def test_empty_is_zero(self, service):
        assert service.cagr([]) == 0.0

    def test_non_positive_first_value_is_zero(self, service):
        assert service.cagr([0.0, 10.0], periods_per_year=1) == 0.0

    def test_total_loss_is_minus_one(self, service):
        assert service.cagr([100.0, 0.0], periods_per_year=1) == -1.0


# ---------------------------------------------------------------------------
# max_drawdown
# ---------------------------------------------------------------------------


class TestMaxDrawdown:
    def test_deepest_decline_from_running_peak(self, service):
        assert service.max_drawdown([100.0, 120.0, 90.0, 130.0, 65.0]) == pytest.approx(-0.5)

    def test_monotonic_increase_is_zero(self, service):
        assert service.max_drawdown([1.0, 2.0, 3.0]) == 0.0

    def test_never_positive(self, service):
        assert service.max_drawdown([3.0, 2.0, 1.0]) <= 0.0

    def test_empty_is_zero(self, service):
        assert service.max_drawdown([]) == 0.0


# ---------------------------------------------------------------------------
# price_return / total_return / cagr_with_dividends
# ---------------------------------------------------------------------------


class TestReturns:
    def test_price_return(self, service):
        assert service.price_return([100.0, 150.0]) == pytest.approx(0.5)

    def test_price_return_empty_is_zero(self, service):
        assert service.price_return([]) == 0.0

    def test_total_return_splits_price_and_dividend(self, service):
        total, price, dividend = service.total_return([1.0, 1.2], 0.02, periods_per_year=1)
        assert price == pytest.approx(0.2)
        assert dividend == pytest.approx(0.02)
        assert total == pytest.approx(0.22)

    def test_total_return_dividend_scales_with_years(self, service):
        _, _, dividend = service.total_return([1.0, 1.0, 1.0], 0.03, periods_per_year=1)
        assert dividend == pytest.approx(0.06)

    def test_total_return_unusable_series(self, service):
        assert service.total_return([], 0.02) == (0.0, 0.0, 0.0)

    def test_cagr_with_dividends_is_additive(self, service):
        result = service.cagr_with_dividends([100.0, 110.0, 121.0], 0.02, periods_per_year=1)
        assert result == pytest.approx(0.12)


# ---------------------------------------------------------------------------
# sharpe_ratio
# ---------------------------------------------------------------------------


class TestSharpeRatio:
    def test_excess_return_over_volatility(self, service):
        assert service.sharpe_ratio(0.10, 0.20) == pytest.approx(0.325)

    def test_custom_risk_free_rate(self, service):
        assert service.sharpe_ratio(0.10, 0.20, risk_free_rate=0.0) == pytest.approx(0.5)

    def test_zero_volatility_is_zero(self, service):
        assert service.sharpe_ratio(0.10, 0.0) == 0.0

    def test_nan_volatility_is_zero(self, service):
        assert service.sharpe_ratio(0.10, math.nan) == 0.0


# ---------------------------------------------------------------------------
# dividend_metrics
# ---------------------------------------------------------------------------


class TestDividendMetrics:
    def test_growth_averaged_over_payers_only(self, service):
        assets = [
            _asset("A", [1.0], dividend_yield=0.04, dividend_growth_rate=0.05),
            _asset("B", [1.0]),
        ]
        holdings = [Holding(ticker="A", weight=0.5), Holding(ticker="B", weight=0.5)]
        dividend_yield, growth = service.dividend_metrics(holdings, assets)
        assert dividend_yield == pytest.approx(0.02)
        assert growth == pytest.approx(0.05)

    def test_weighted_by_holding_weight(self, service):
        assets = [
            _asset("A", [1.0], dividend_yield=0.03, dividend_growth_rate=0.06),
            _asset("B", [1.0], dividend_yield=0.01, dividend_growth_rate=0.02),
        ]
        holdings = [Holding(ticker="A", weight=0.75), Holding(ticker="B", weight=0.25)]
        dividend_yield, growth = service.dividend_metrics(holdings, assets)
        assert dividend_yield == pytest.approx(0.025)
        assert growth == pytest.approx(0.05)

    def test_no_payers(self, service):
        holdings = [Holding(ticker="A", weight=1.0)]
        assert service.dividend_metrics(holdings, [_asset("A", [1.0])]) == (0.0, 0.0)

    def test_zero_weight(self, service):
        assets = [_asset("A", [1.0], dividend_yield=0.04)]
        assert service.dividend_metrics([Holding(ticker="A", weight=0.0)], assets) == (0.0, 0.0)


# ---------------------------------------------------------------------------
# Standalone per-asset metrics
# ---------------------------------------------------------------------------


class TestAssetMetrics:
    def test_asset_cagr(self, service):
        asset = _asset("A", [100.0, 110.0, 121.0])
        assert service.asset_cagr(asset, periods_per_year=1) == pytest.approx(0.1)

    def test_asset_cagr_with_dividends(self, service):
        asset = _asset("A", [100.0, 110.0, 121.0], dividend_yield=0.03)
        assert service.asset_cagr_with_dividends(asset, periods_per_year=1) == pytest.approx(0.13)

    def test_asset_max_drawdown(self, service):
        asset = _asset("A", [100.0, 80.0, 120.0])
        assert service.asset_max_drawdown(asset) == pytest.approx(-0.2)

    def test_asset_volatility(self, service):
        asset = _asset("A", [100.0, 110.0, 99.0])
        # Returns are +10 % and -10 %, population std 0.1.
        assert service.asset_volatility(asset, periods_per_year=1) == pytest.approx(0.1)

    def test_asset_volatility_single_price_is_zero(self, service):
        assert service.asset_volatility(_asset("A", [100.0])) == 0.0

    def test_asset_total_return(self, service):
        asset = _asset("A", [100.0, 120.0], dividend_yield=0.02)
        total, price, dividend = service.asset_total_return(asset, periods_per_year=1)
        assert (total, price, dividend) == pytest.approx((0.22, 0.2, 0.02))
