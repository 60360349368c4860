"""Portfolio projection (forward GBM bands) and historical month-end performance.

project_portfolio normalises the portfolio to 1.0 today and simulates monthly
lognormal steps, reporting the 20th/50th/80th percentile value at every month.

historical_performance resamples each ticker's daily closes to month ends and
compounds the monthly dividend yield into the value: value_k =
price_k / price_0 × (1 + yield / 12)^k. This is the compounding dividend
model; PortfolioMetrics.cagr_with_dividends uses the additive one.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from src.domain.models.analysis import AssetPerformance, HistoricalPerformance, ProjectionBands
from src.domain.models.enums import Frequency
from src.domain.models.holdings import AssetData, Holding, index_assets
from src.domain.services.sampling import (
    SamplerFactory,
    box_muller_factory,
    lognormal_step_params,
)
from src.domain.settings import AnalyticsSettings, get_settings

logger = logging.getLogger(__name__)

_MONTHS_PER_YEAR = Frequency.MONTHLY.periods_per_year


class ProjectionService:
    """Forward projection and historical performance series.

    The random source is injected through sampler_factory. Projection length,
    trial count and seed default to the AnalyticsSettings passed in.
    """

    def __init__(
        self,
        settings: AnalyticsSettings | None = None,
        sampler_factory: SamplerFactory = box_muller_factory,
    ) -> None:
        self._settings = settings or get_settings()
        self._sampler_factory = sampler_factory

    # ------------------------------------------------------------------
    # Forward projection
    # ------------------------------------------------------------------

    def project_portfolio(
        self,
        cagr: float,
        volatility: float,
        years: int | None = None,
        trial_count: int | None = None,
        seed: int | None = None,
    ) -> ProjectionBands:
        """Monthly percentile bands of a normalised GBM projection.

        Per month k the trial values are sorted and the entries at
        int(n × 0.2), n // 2 and int(n × 0.8) (clamped) become worst, median
        and best. Month 0 is 1.0 in every band.

        Args:
            cagr: Expected annual growth rate (fraction, > −1).
            volatility: Annual volatility (fraction, ≥ 0).
            years: Projection length in years (> 0); settings.projection_years if None.
            trial_count: Number of simulated paths (> 0); settings.projection_trials
                if None.
            seed: Root seed; settings.seed if None, and fresh OS entropy when
                that is unset too.

        Raises:
            ValueError: If years or trial_count is not positive, or a rate is
                out of range.
        """
        settings = self._settings
        years = settings.projection_years if years is None else years
        trial_count = settings.projection_trials if trial_count is None else trial_count
        seed = settings.seed if seed is None else seed
        if years <= 0:
            raise ValueError(f"years must be > 0, got {years}")
        if trial_count <= 0:
            raise ValueError(f"trial_count must be > 0, got {trial_count}")
        mu, sigma = lognormal_step_params(cagr, volatility, _MONTHS_PER_YEAR)
        months = years * _MONTHS_PER_YEAR

        sampler = self._sampler_factory(np.random.SeedSequence(seed))
        log_steps = np.empty((months, trial_count), dtype=float)
        for month in range(months):
            log_steps[month] = mu + sigma * sampler.standard_normal((trial_count,))
        values = np.exp(np.cumsum(log_steps, axis=0))
        values.sort(axis=1)

        low = int(trial_count * 0.2)
        mid = trial_count // 2
        high = min(int(trial_count * 0.8), trial_count - 1)
        logger.debug("Projected %d trials over %d months", trial_count, months)
        return ProjectionBands(
            best=(1.0, *(float(v) for v in values[:, high])),
            median=(1.0, *(float(v) for v in values[:, mid])),
            worst=(1.0, *(float(v) for v in values[:, low])),
            trial_count=trial_count,
        )

    # ------------------------------------------------------------------
    # Historical performance
    # ------------------------------------------------------------------

    def historical_performance(
        self,
        holdings: list[Holding],
        assets: list[AssetData],
    ) -> HistoricalPerformance:
        """Month-end value series per ticker and for the weighted portfolio.

        Each month the portfolio value is the weight-average over the tickers
        that have a value that month; a month with none repeats the previous
        value. The portfolio series is rescaled to start at 1.0.

        Args:
            holdings: Ticker/weight pairs; weights of repeated tickers add up.
            assets: Price and dividend data; looked up by ticker.

        Returns:
            HistoricalPerformance; empty when no holding has usable prices.
        """
        by_ticker = index_assets(assets)
        weights: dict[str, float] = {}
        for holding in holdings:
            if holding.ticker in by_ticker and not by_ticker[holding.ticker].prices.is_empty:
                weights[holding.ticker] = weights.get(holding.ticker, 0.0) + holding.weight
        if not weights:
            return HistoricalPerformance()

        per_ticker = {t: _monthly_total_value(by_ticker[t]) for t in weights}
        frame = pd.concat(per_ticker, axis=1).sort_index()

        w = pd.Series(weights)
        present = frame.notna()
        weight_present = present.mul(w, axis=1).sum(axis=1)
        weighted = frame.mul(w, axis=1).sum(axis=1, skipna=True)
        portfolio = (weighted / weight_present.where(weight_present > 0)).ffill().dropna()
        if portfolio.empty or portfolio.iloc[0] <= 0:
            logger.warning("No positively weighted month-end values; historical series is empty")
            return HistoricalPerformance()
        portfolio = portfolio / portfolio.iloc[0]

        dates = tuple(ts.date() for ts in portfolio.index)
        asset_series = tuple(
            AssetPerformance(
                ticker=ticker,
                name=by_ticker[ticker].display_name,
                dates=tuple(ts.date() for ts in series.index),
                values=tuple(float(v) for v in series),
            )
            for ticker, series in per_ticker.items()
        )
        return HistoricalPerformance(
            dates=dates,
            year_labels=tuple(dict.fromkeys(str(d.year) for d in dates)),
            values=tuple(float(v) for v in portfolio),
            assets=asset_series,
        )


def _monthly_total_value(asset: AssetData) -> pd.Series:
    """Month-end price relative to the first month, with compounded dividends."""
    daily = asset.prices.to_series()
    daily.index = pd.to_datetime(daily.index)
    monthly = daily.resample("ME").last().dropna()
    growth = (1.0 + asset.dividends.dividend_yield / _MONTHS_PER_YEAR) ** np.arange(len(monthly))
    return monthly / monthly.iloc[0] * growth
