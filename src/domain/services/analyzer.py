"""Portfolio analyzer: the end-to-end historical analysis pipeline.

analyze():
  1. align daily returns on common dates → correlation matrix
  2. buy-and-hold value series → CAGR, total return, max drawdown
  3. correlation-aware volatility from per-asset annualised volatility
  4. Sharpe ratio on the additive dividend-adjusted CAGR
  5. dividend yield / growth
  6. composite score

When fewer than two common dates exist there is no correlation signal and
analyze() delegates to analyze_simplified(), which weight-averages each
asset's standalone metrics and uses the diversification-factor volatility.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from src.domain.models.analysis import (
    DividendBreakdown,
    MetricBreakdown,
    PortfolioAnalysis,
    PortfolioBreakdowns,
    PortfolioMetrics,
    SectorAllocation,
)
from src.domain.models.assumptions import AnalysisConfig
from src.domain.models.enums import MetricType
from src.domain.models.holdings import AssetData, Holding, index_assets
from src.domain.models.scoring import ScoringConfig
from src.domain.services.aggregation import PortfolioValueService
from src.domain.services.alignment import ReturnAlignmentService
from src.domain.services.risk import RiskService
from src.domain.services.scoring import ScoringService

logger = logging.getLogger(__name__)

UNKNOWN_SECTOR = "Other"


def _ordered_assets(
    holdings: list[Holding], assets: list[AssetData]
) -> tuple[list[AssetData], list[float]]:
    """Distinct held assets in first-holding order, with their summed weights."""
    by_ticker = index_assets(assets)
    weights: dict[str, float] = {}
    for holding in holdings:
        if holding.ticker in by_ticker:
            weights[holding.ticker] = weights.get(holding.ticker, 0.0) + holding.weight
    return [by_ticker[t] for t in weights], list(weights.values())


class PortfolioAnalyzer:
    """Orchestrates alignment, risk, aggregation and scoring.

    The class is stateless; all configuration is passed per-call.
    """

    def __init__(
        self,
        alignment: ReturnAlignmentService | None = None,
        risk: RiskService | None = None,
        values: PortfolioValueService | None = None,
        scoring: ScoringService | None = None,
    ) -> None:
        self._alignment = alignment or ReturnAlignmentService()
        self._risk = risk or RiskService()
        self._values = values or PortfolioValueService(self._alignment, self._risk)
        self._scoring = scoring or ScoringService()

    # ------------------------------------------------------------------
    # Portfolio-level analysis
    # ------------------------------------------------------------------

    def analyze(
        self,
        holdings: list[Holding],
        assets: list[AssetData],
        config: AnalysisConfig | None = None,
        scoring_config: ScoringConfig | None = None,
    ) -> PortfolioAnalysis:
        """Compute metrics, score and correlation matrix for a portfolio.

        Degenerate input (no holdings, no matching asset data, zero total
        weight) yields PortfolioAnalysis.empty() rather than raising.

        Args:
            holdings: Ticker/weight pairs.
            assets: Price and dividend data per ticker.
            config: Risk-free rate and annualisation factor.
            scoring_config: Bucket tables and grade breakpoints.

        Returns:
            PortfolioAnalysis; correlation_aware is False when the simplified
            fallback was used.
        """
        config = config or AnalysisConfig.default()
        ordered, weights = _ordered_assets(holdings, assets)
        if not ordered or sum(weights) <= 0:
            return PortfolioAnalysis.empty()

        returns = self._alignment.align_returns([a.prices for a in ordered])
        if all(r.is_empty for r in returns):
            logger.warning(
                "No aligned daily returns for %d assets; using simplified analysis",
                len(ordered),
            )
            return self.analyze_simplified(holdings, assets, config, scoring_config)

        m = config.trading_days_per_year
        correlation = self._risk.correlation_matrix(returns)
        series = self._values.portfolio_value_series(holdings, ordered)

        cagr = self._values.cagr(series, m)
        dividend_yield, dividend_growth = self._values.dividend_metrics(holdings, ordered)
        cagr_with_dividends = self._values.cagr_with_dividends(series, dividend_yield, m)
        total, price, dividend = self._values.total_return(series, dividend_yield, m)
        volatilities = [self._values.asset_volatility(a, m) for a in ordered]
        volatility = self._risk.portfolio_volatility(weights, volatilities, correlation)
        mdd = self._values.max_drawdown(series)
        sharpe = self._values.sharpe_ratio(cagr_with_dividends, volatility, config.risk_free_rate)

        metrics = PortfolioMetrics(
            cagr=cagr,
            cagr_with_dividends=cagr_with_dividends,
            total_return=total,
            price_return=price,
            dividend_return=dividend,
            volatility=volatility,
            sharpe_ratio=sharpe,
            max_drawdown=mdd,
            dividend_yield=dividend_yield,
            dividend_growth_rate=dividend_growth,
        )
        return PortfolioAnalysis(
            metrics=metrics,
            score=self._scoring.score(cagr, volatility, sharpe, mdd, scoring_config),
            correlation=correlation,
            correlation_aware=True,
            trading_days=len(series),
        )

    def analyze_simplified(
        self,
        holdings: list[Holding],
        assets: list[AssetData],
        config: AnalysisConfig | None = None,
        scoring_config: ScoringConfig | None = None,
    ) -> PortfolioAnalysis:
        """Analysis from weight-averaged standalone asset metrics.

        Each metric is Σ w_i·x_i / Σ w_i over the matched holdings; volatility
        uses RiskService.simplified_portfolio_volatility. No correlation
        matrix is produced.
        """
        config = config or AnalysisConfig.default()
        ordered, weights = _ordered_assets(holdings, assets)
        total_weight = sum(weights)
        if not ordered or total_weight <= 0:
            return PortfolioAnalysis.empty()

        m = config.trading_days_per_year

        def weighted(metric: Callable[[AssetData], float]) -> float:
            return sum(w * metric(a) for a, w in zip(ordered, weights)) / total_weight

        cagr = weighted(lambda a: self._values.asset_cagr(a, m))
        cagr_with_dividends = weighted(lambda a: self._values.asset_cagr_with_dividends(a, m))
        price = weighted(lambda a: self._values.asset_total_return(a, m)[1])
        dividend = weighted(lambda a: self._values.asset_total_return(a, m)[2])
        mdd = weighted(self._values.asset_max_drawdown)
        volatility = self._risk.simplified_portfolio_volatility(
            weights, [self._values.asset_volatility(a, m) for a in ordered]
        )
        sharpe = self._values.sharpe_ratio(cagr_with_dividends, volatility, config.risk_free_rate)
        dividend_yield, dividend_growth = self._values.dividend_metrics(holdings, ordered)

        metrics = PortfolioMetrics(
            cagr=cagr,
            cagr_with_dividends=cagr_with_dividends,
            total_return=price + dividend,
            price_return=price,
            dividend_return=dividend,
            volatility=volatility,
            sharpe_ratio=sharpe,
            max_drawdown=mdd,
            dividend_yield=dividend_yield,
            dividend_growth_rate=dividend_growth,
        )
        return PortfolioAnalysis(
            metrics=metrics,
            score=self._scoring.score(cagr, volatility, sharpe, mdd, scoring_config),
            correlation_aware=False,
        )

    # ------------------------------------------------------------------
    # Per-holding breakdowns
    # ------------------------------------------------------------------

    def breakdowns(
        self,
        holdings: list[Holding],
        assets: list[AssetData],
        analysis: PortfolioAnalysis | None = None,
        config: AnalysisConfig | None = None,
    ) -> PortfolioBreakdowns:
        """Rank each holding's standalone metrics against the portfolio.

        CAGR (dividend-adjusted) and Sharpe rank descending, volatility
        ascending, MDD by ascending magnitude. A holding is favourable when it
        is at least as good as the portfolio figure. Dividend rows sort by
        yield, highest first.

        Args:
            holdings: Ticker/weight pairs; one row per matched holding.
            assets: Price and dividend data per ticker.
            analysis: Portfolio analysis to compare against; computed if None.
            config: Risk-free rate and annualisation factor.
        """
        config = config or AnalysisConfig.default()
        if analysis is None:
            analysis = self.analyze(holdings, assets, config)
        portfolio = analysis.metrics
        by_ticker = index_assets(assets)
        matched = [(h, by_ticker[h.ticker]) for h in holdings if h.ticker in by_ticker]
        m = config.trading_days_per_year

        cagr_rows, vol_rows, mdd_rows, sharpe_rows = [], [], [], []
        dividend_rows: list[DividendBreakdown] = []
        for holding, asset in matched:
            cagr = self._values.asset_cagr_with_dividends(asset, m)
            volatility = self._values.asset_volatility(asset, m)
            mdd = self._values.asset_max_drawdown(asset)
            sharpe = self._values.sharpe_ratio(cagr, volatility, config.risk_free_rate)
            cagr_rows.append((holding, asset, cagr))
            vol_rows.append((holding, asset, volatility))
            mdd_rows.append((holding, asset, mdd))
            sharpe_rows.append((holding, asset, sharpe))
            dividend_rows.append(
                DividendBreakdown(
                    ticker=holding.ticker,
                    name=asset.display_name,
                    weight=holding.weight,
                    dividend_yield=asset.dividends.dividend_yield,
                    dividend_growth_rate=asset.dividends.dividend_growth_rate,
                    contribution=asset.dividends.dividend_yield * holding.weight,
                )
            )

        return PortfolioBreakdowns(
            cagr=_rank(MetricType.CAGR, cagr_rows, portfolio.cagr_with_dividends),
            volatility=_rank(MetricType.VOLATILITY, vol_rows, portfolio.volatility),
            mdd=_rank(MetricType.MDD, mdd_rows, portfolio.max_drawdown),
            sharpe=_rank(MetricType.SHARPE, sharpe_rows, portfolio.sharpe_ratio),
            dividends=tuple(sorted(dividend_rows, key=lambda d: -d.dividend_yield)),
        )

    def sector_allocation(
        self,
        holdings: list[Holding],
        assets: list[AssetData],
    ) -> list[SectorAllocation]:
        """Total weight per sector, largest first; missing sectors go to "Other"."""
        by_ticker = index_assets(assets)
        totals: dict[str, float] = {}
        for holding in holdings:
            asset = by_ticker.get(holding.ticker)
            if asset is None:
                continue
            sector = asset.sector or UNKNOWN_SECTOR
            totals[sector] = totals.get(sector, 0.0) + holding.weight
        return [
            SectorAllocation(sector=sector, weight=weight)
            for sector, weight in sorted(totals.items(), key=lambda item: -item[1])
        ]


def _rank(
    metric: MetricType,
    rows: list[tuple[Holding, AssetData, float]],
    benchmark: float,
) -> tuple[MetricBreakdown, ...]:
    """Order rows best-first and flag those at least as good as the benchmark.

    MDD is compared by magnitude.
    """
    measure: Callable[[float], float] = abs if metric is MetricType.MDD else float
    direction = -1.0 if metric.higher_is_better else 1.0

    def favorable(value: float) -> bool:
        if metric.higher_is_better:
            return measure(value) >= measure(benchmark)
        return measure(value) <= measure(benchmark)

    ordered = sorted(rows, key=lambda row: direction * measure(row[2]))
    return tuple(
        MetricBreakdown(
            metric=metric,
            ticker=holding.ticker,
            name=asset.display_name,
            value=value,
            weight=holding.weight,
            contribution=value * holding.weight,
            is_favorable=favorable(value),
            rank=index + 1,
        )
        for index, (holding, asset, value) in enumerate(ordered)
    )
