"""Portfolio analysis result models.

PortfolioMetrics  — scalar risk/return statistics for a portfolio
PortfolioAnalysis — metrics + score + correlation matrix for one analysis call
MetricBreakdown   — one holding's contribution to a portfolio metric, ranked
DividendBreakdown — one holding's dividend yield, growth and contribution
SectorAllocation  — total weight per sector

All are derived, recomputed on demand and never mutated after creation.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from .assumptions import CorrelationMatrix
from .enums import MetricType
from .scoring import PortfolioScore


class PortfolioMetrics(BaseModel):
    """Scalar portfolio statistics, all expressed as fractions.

    cagr                 — price-only compound annual growth rate
    cagr_with_dividends  — cagr + weighted-average dividend yield (additive)
    total_return         — price_return + dividend_return
    price_return         — (last − first) / first of the portfolio value series
    dividend_return      — weighted-average yield × years observed
    volatility           — annualised, correlation-aware when available
    sharpe_ratio         — (cagr_with_dividends − rf) / volatility
    max_drawdown         — most negative peak-to-trough decline (≤ 0)
    dividend_yield       — weighted-average yield across all holdings
    dividend_growth_rate — weighted average across dividend payers only
    """

    model_config = ConfigDict(frozen=True)

    cagr: float = 0.0
    cagr_with_dividends: float = 0.0
    total_return: float = 0.0
    price_return: float = 0.0
    dividend_return: float = 0.0
    volatility: float = Field(default=0.0, ge=0.0)
    sharpe_ratio: float = 0.0
    max_drawdown: float = Field(default=0.0, le=0.0)
    dividend_yield: float = Field(default=0.0, ge=0.0)
    dividend_growth_rate: float = 0.0

    @classmethod
    def zero(cls) -> PortfolioMetrics:
        return cls()


class PortfolioAnalysis(BaseModel):
    """Full result of one historical portfolio analysis.

    correlation_aware is False when no aligned return data existed and the
    simplified (diversification-factor) volatility was used instead.
    trading_days is the number of common dates the value series covered.
    """

    model_config = ConfigDict(frozen=True)

    metrics: PortfolioMetrics = Field(default_factory=PortfolioMetrics)
    score: PortfolioScore = Field(default_factory=PortfolioScore.zero)
    correlation: CorrelationMatrix = Field(default_factory=CorrelationMatrix)
    correlation_aware: bool = False
    trading_days: int = Field(default=0, ge=0)

    @classmethod
    def empty(cls) -> PortfolioAnalysis:
        return cls()


class MetricBreakdown(BaseModel):
    """One holding's standalone value for a metric and its weighted contribution.

    rank 1 = most favourable holding for this metric. is_favorable compares
    the holding against the portfolio-level figure in the metric's own
    direction (higher CAGR/Sharpe, lower volatility/|MDD|).
    """

    model_config = ConfigDict(frozen=True)

    metric: MetricType
    ticker: str
    name: str
    value: float
    weight: float = Field(ge=0.0, le=1.0)
    contribution: float
    is_favorable: bool
    rank: int = Field(ge=1)


class DividendBreakdown(BaseModel):
    """One holding's dividend profile and its contribution to portfolio yield."""

    model_config = ConfigDict(frozen=True)

    ticker: str
    name: str
    weight: float = Field(ge=0.0, le=1.0)
    dividend_yield: float = Field(ge=0.0)
    dividend_growth_rate: float
    contribution: float = Field(ge=0.0)


class SectorAllocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    sector: str
    weight: float = Field(ge=0.0)


class PortfolioBreakdowns(BaseModel):
    """Ranked per-holding breakdowns for every supported metric."""

    model_config = ConfigDict(frozen=True)

    cagr: tuple[MetricBreakdown, ...] = ()
    volatility: tuple[MetricBreakdown, ...] = ()
    mdd: tuple[MetricBreakdown, ...] = ()
    sharpe: tuple[MetricBreakdown, ...] = ()
    dividends: tuple[DividendBreakdown, ...] = ()

    def for_metric(self, metric: MetricType) -> tuple[MetricBreakdown, ...]:
        return {
            MetricType.CAGR: self.cagr,
            MetricType.VOLATILITY: self.volatility,
            MetricType.MDD: self.mdd,
            MetricType.SHARPE: self.sharpe,
        }[metric]


class AssetPerformance(BaseModel):
    """Month-end value series for one ticker, starting at 1.0 (dividends compounded)."""

    model_config = ConfigDict(frozen=True)

    ticker: str
    name: str
    dates: tuple[date, ...] = ()
    values: tuple[float, ...] = ()

    @property
    def total_return(self) -> float:
        return (self.values[-1] if self.values else 1.0) - 1.0


class HistoricalPerformance(BaseModel):
    """Month-end portfolio value series (start = 1.0) with per-ticker series.

    Dividends are compounded monthly into each ticker's value, unlike the
    additive cagr_with_dividends in PortfolioMetrics.
    """

    model_config = ConfigDict(frozen=True)

    dates: tuple[date, ...] = ()
    year_labels: tuple[str, ...] = ()
    values: tuple[float, ...] = ()
    assets: tuple[AssetPerformance, ...] = ()

    @property
    def total_return(self) -> float:
        return (self.values[-1] if self.values else 1.0) - 1.0

    @property
    def cagr(self) -> float:
        if len(self.values) < 2 or self.values[0] <= 0:
            return 0.0
        years = (len(self.values) - 1) / 12.0
        return (self.values[-1] / self.values[0]) ** (1.0 / years) - 1.0


class ProjectionBands(BaseModel):
    """Monthly percentile bands of a normalised (start = 1.0) portfolio projection.

    best/median/worst are the 80th/50th/20th percentile values at each month.
    """

    model_config = ConfigDict(frozen=True)

    best: tuple[float, ...]
    median: tuple[float, ...]
    worst: tuple[float, ...]
    trial_count: int = Field(gt=0)

    @property
    def total_months(self) -> int:
        return len(self.median) - 1

    @property
    def final_return_range(self) -> tuple[float, float, float]:
        """(best, median, worst) cumulative returns at the final month."""
        return (self.best[-1] - 1.0, self.median[-1] - 1.0, self.worst[-1] - 1.0)
