"""Portfolio value aggregation and the return metrics derived from it.

The portfolio value series models one unit of currency split by weight
across the holdings on the first common date and then held without
rebalancing (units = weight / first price). Weights therefore drift with
prices, as in a real buy-and-hold account.

Two dividend models coexist deliberately:
  cagr_with_dividends — additive: price CAGR + weighted-average yield. Used
                        for PortfolioMetrics and the Sharpe ratio.
  ProjectionService.historical_performance — compounds the monthly yield
                        into each ticker's month-end value series.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
import pandas as pd

from src.domain.models.holdings import AssetData, Holding, index_assets
from src.domain.services.alignment import ReturnAlignmentService
from src.domain.services.risk import RiskService

logger = logging.getLogger(__name__)


def _as_array(values: Sequence[float] | pd.Series) -> np.ndarray:
    if isinstance(values, pd.Series):
        return values.to_numpy(dtype=float)
    return np.asarray(values, dtype=float)


def _years_spanned(point_count: int, periods_per_year: int) -> float:
    """Elapsed years covered by point_count observations (point_count − 1 steps)."""
    if point_count < 2:
        return 0.0
    return (point_count - 1) / periods_per_year


def _matched(
    holdings: list[Holding], assets: list[AssetData]
) -> list[tuple[Holding, AssetData]]:
    """Pair each holding with its AssetData, dropping holdings with no data."""
    by_ticker = index_assets(assets)
    return [(h, by_ticker[h.ticker]) for h in holdings if h.ticker in by_ticker]


class PortfolioValueService:
    """Builds the buy-and-hold value series and derives return metrics.

    The class is stateless; all configuration is passed per-call.
    """

    def __init__(
        self,
        alignment: ReturnAlignmentService | None = None,
        risk: RiskService | None = None,
    ) -> None:
        self._alignment = alignment or ReturnAlignmentService()
        self._risk = risk or RiskService()

    # ------------------------------------------------------------------
    # Value series
    # ------------------------------------------------------------------

    def portfolio_value_series(
        self,
        holdings: list[Holding],
        assets: list[AssetData],
    ) -> pd.Series:
        """Daily value of the buy-and-hold portfolio on the common dates.

        Holdings without AssetData are ignored; weights of repeated tickers
        are summed.

        Args:
            holdings: Ticker/weight pairs.
            assets: Price and dividend data; looked up by ticker.

        Returns:
            Float Series indexed by date, ascending. Empty when there are no
            matched holdings, no common dates, or zero total weight.
        """
        matched = _matched(holdings, assets)
        if not matched:
            return pd.Series(dtype=float)

        weights: dict[str, float] = {}
        priced: dict[str, AssetData] = {}
        for holding, asset in matched:
            weights[holding.ticker] = weights.get(holding.ticker, 0.0) + holding.weight
            priced.setdefault(holding.ticker, asset)

        tickers = list(weights)
        prices = self._alignment.aligned_prices([priced[t].prices for t in tickers])
        if prices.empty:
            logger.warning(
                "No common dates across %d holdings; value series is empty", len(tickers)
            )
            return pd.Series(dtype=float)
        if sum(weights.values()) <= 0:
            logger.warning("Total holding weight is zero; value series is empty")
            return pd.Series(dtype=float)

        first = prices.iloc[0].to_numpy(dtype=float)
        units = np.array([weights[t] for t in tickers], dtype=float) / first
        values = prices.to_numpy(dtype=float) @ units
        return pd.Series(values, index=prices.index, dtype=float)

    # ------------------------------------------------------------------
    # Series statistics
    # ------------------------------------------------------------------

    def cagr(
        self,
        values: Sequence[float] | pd.Series,
        periods_per_year: int = 252,
    ) -> float:
        """Compound annual growth rate of a value series.

        (last / first) ^ (m / steps) − 1, where steps = len(values) − 1 is
        the number of elapsed periods. Returns 0.0 for fewer than two points
        or a non-positive first value.
        """
        v = _as_array(values)
        if v.size < 2 or v[0] <= 0:
            return 0.0
        years = _years_spanned(v.size, periods_per_year)
        ratio = v[-1] / v[0]
        if ratio <= 0:
            return -1.0
        return float(ratio ** (1.0 / years) - 1.0)

    def max_drawdown(self, values: Sequence[float] | pd.Series) -> float:
        """Most negative peak-to-trough decline, (value − peak) / peak.

        Always ≤ 0; 0.0 for an empty series.
        """
        v = _as_array(values)
        if v.size == 0:
            return 0.0
        peaks = np.maximum.accumulate(v)
        with np.errstate(divide="ignore", invalid="ignore"):
            drawdowns = np.where(peaks > 0, (v - peaks) / peaks, 0.0)
        return float(min(0.0, drawdowns.min()))

    def price_return(self, values: Sequence[float] | pd.Series) -> float:
        v = _as_array(values)
        if v.size == 0 or v[0] <= 0:
            return 0.0
        return float((v[-1] - v[0]) / v[0])

    def total_return(
        self,
        values: Sequence[float] | pd.Series,
        dividend_yield: float,
        periods_per_year: int = 252,
    ) -> tuple[float, float, float]:
        """Split total return into price and dividend parts.

        dividend part = dividend_yield × years spanned by the series.

        Returns:
            (total, price, dividend); all 0.0 when the series is unusable.
        """
        v = _as_array(values)
        if v.size == 0 or v[0] <= 0:
            return 0.0, 0.0, 0.0
        price = self.price_return(v)
        dividend = dividend_yield * _years_spanned(v.size, periods_per_year)
        return price + dividend, price, dividend

    def cagr_with_dividends(
        self,
        values: Sequence[float] | pd.Series,
        dividend_yield: float,
        periods_per_year: int = 252,
    ) -> float:
        """Additive dividend-adjusted CAGR: price CAGR + dividend yield.

        This approximation does not compound the yield; see
        ProjectionService.historical_performance for the compounding model.
        """
        return self.cagr(values, periods_per_year) + dividend_yield

    def sharpe_ratio(
        self,
        portfolio_return: float,
        volatility: float,
        risk_free_rate: float = 0.035,
    ) -> float:
        if not volatility > 0:
            return 0.0
        return (portfolio_return - risk_free_rate) / volatility

    # ------------------------------------------------------------------
    # Dividends
    # ------------------------------------------------------------------

    def dividend_metrics(
        self,
        holdings: list[Holding],
        assets: list[AssetData],
    ) -> tuple[float, float]:
        """Weighted-average dividend yield and dividend growth rate.

        Yield is averaged over every matched holding. Growth is averaged only
        over the dividend-paying subset, weighted by holding weight.

        Returns:
            (yield, growth_rate); (0.0, 0.0) when total weight is zero.
        """
        total_weight = 0.0
        weighted_yield = 0.0
        payer_weight = 0.0
        weighted_growth = 0.0
        for holding, asset in _matched(holdings, assets):
            profile = asset.dividends
            total_weight += holding.weight
            weighted_yield += profile.dividend_yield * holding.weight
            if profile.pays_dividend:
                payer_weight += holding.weight
                weighted_growth += profile.dividend_growth_rate * holding.weight
        if total_weight <= 0:
            return 0.0, 0.0
        growth = weighted_growth / payer_weight if payer_weight > 0 else 0.0
        return weighted_yield / total_weight, growth

    # ------------------------------------------------------------------
    # Standalone per-asset metrics
    # ------------------------------------------------------------------

    def asset_cagr(self, asset: AssetData, periods_per_year: int = 252) -> float:
        return self.cagr(asset.prices.to_series(), periods_per_year)

    def asset_cagr_with_dividends(
        self, asset: AssetData, periods_per_year: int = 252
    ) -> float:
        return self.asset_cagr(asset, periods_per_year) + asset.dividends.dividend_yield

    def asset_max_drawdown(self, asset: AssetData) -> float:
        return self.max_drawdown(asset.prices.to_series())

    def asset_volatility(self, asset: AssetData, periods_per_year: int = 252) -> float:
        """Annualised volatility of the asset's own daily returns."""
        (returns,) = self._alignment.align_returns([asset.prices])
        return self._risk.annualized_volatility(returns.returns, periods_per_year)

    def asset_total_return(
        self, asset: AssetData, periods_per_year: int = 252
    ) -> tuple[float, float, float]:
        return self.total_return(
            asset.prices.to_series(), asset.dividends.dividend_yield, periods_per_year
        )
