"""Risk and correlation engine.

Pearson correlation over aligned return series, the correlation matrix, and
portfolio volatility. The correlation-aware volatility and the simplified
diversification-factor fallback are kept as separate, explicitly named
methods; callers choose which one applies.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import numpy as np

from src.domain.models.assumptions import CorrelationMatrix
from src.domain.models.market_data import ReturnSeries

logger = logging.getLogger(__name__)

# Heuristic fallback: each extra holding trims 5 % off the weighted volatility,
# capped at a 30 % reduction.
_DIVERSIFICATION_STEP = 0.05
_DIVERSIFICATION_CAP = 0.3


class RiskService:
    """Pure computation service for correlation and volatility.

    The class is stateless; all configuration is passed per-call.
    """

    # ------------------------------------------------------------------
    # Correlation
    # ------------------------------------------------------------------

    def pearson_correlation(self, a: Sequence[float], b: Sequence[float]) -> float:
        """Pearson correlation using uncorrected sums.

        cov / sqrt(var_a · var_b), where the sums are not divided by n (the
        factors cancel). Returns 0.0 rather than NaN when the lengths differ,
        either series is empty, or either series has zero variance.
        """
        x = np.asarray(a, dtype=float)
        y = np.asarray(b, dtype=float)
        if x.size == 0 or x.shape != y.shape:
            return 0.0
        dx = x - x.mean()
        dy = y - y.mean()
        denominator = math.sqrt(float(np.dot(dx, dx)) * float(np.dot(dy, dy)))
        if not denominator > 0 or not math.isfinite(denominator):
            return 0.0
        corr = float(np.dot(dx, dy)) / denominator
        return min(1.0, max(-1.0, corr))

    def correlation_matrix(self, return_series: list[ReturnSeries]) -> CorrelationMatrix:
        """Build the correlation matrix for aligned return series.

        Only the upper triangle is computed; it is mirrored and the diagonal
        fixed at 1.0. Tickers keep input order.

        Args:
            return_series: Output of ReturnAlignmentService.align_returns().

        Returns:
            CorrelationMatrix; empty for empty input.
        """
        tickers = [rs.ticker for rs in return_series]
        upper: dict[tuple[int, int], float] = {}
        for i in range(len(return_series)):
            for j in range(i + 1, len(return_series)):
                upper[(i, j)] = self.pearson_correlation(
                    return_series[i].returns, return_series[j].returns
                )
        return CorrelationMatrix.from_upper_triangle(tickers, upper)

    # ------------------------------------------------------------------
    # Volatility
    # ------------------------------------------------------------------

    def annualized_volatility(
        self,
        returns: Sequence[float],
        periods_per_year: int = 252,
    ) -> float:
        """Population standard deviation of periodic returns, annualised by √m."""
        r = np.asarray(returns, dtype=float)
        if r.size == 0:
            return 0.0
        return float(np.std(r, ddof=0)) * math.sqrt(periods_per_year)

    def portfolio_volatility(
        self,
        weights: Sequence[float],
        volatilities: Sequence[float],
        correlation: CorrelationMatrix | Sequence[Sequence[float]],
    ) -> float:
        """Correlation-aware portfolio volatility.

        σ_p = sqrt(max(0, Σ_i Σ_j w_i w_j σ_i σ_j ρ_ij))

        The max(0, ·) absorbs tiny negative variances from roundoff on
        near-singular matrices. With a single holding of weight 1 the result
        is exactly that holding's volatility.

        Args:
            weights: Holding weights, in correlation-matrix order.
            volatilities: Annualised per-holding volatilities, same order.
            correlation: CorrelationMatrix or a plain n×n nested sequence.

        Returns:
            Annualised portfolio volatility; 0.0 when inputs are empty or
            their dimensions disagree.
        """
        rho_rows = (
            correlation.values if isinstance(correlation, CorrelationMatrix) else correlation
        )
        w = np.asarray(weights, dtype=float)
        s = np.asarray(volatilities, dtype=float)
        rho = np.asarray(rho_rows, dtype=float)
        n = w.size
        if n == 0 or s.size != n or rho.shape != (n, n):
            if n or s.size or rho.size:
                logger.warning(
                    "Dimension mismatch: %d weights, %d volatilities, correlation %s; "
                    "portfolio volatility set to 0",
                    n,
                    s.size,
                    rho.shape,
                )
            return 0.0
        scaled = w * s
        variance = float(scaled @ rho @ scaled)
        return math.sqrt(max(0.0, variance))

    def simplified_portfolio_volatility(
        self,
        weights: Sequence[float],
        volatilities: Sequence[float],
    ) -> float:
        """Fallback volatility when no correlation data is available.

        Weight-averaged volatility scaled by 1 − min(0.3, (n − 1) × 0.05).
        This is a heuristic, not a statistical estimate.
        """
        w = np.asarray(weights, dtype=float)
        s = np.asarray(volatilities, dtype=float)
        if w.size == 0 or s.size != w.size:
            return 0.0
        total_weight = float(w.sum())
        if total_weight <= 0:
            return 0.0
        weighted = float(np.dot(w, s)) / total_weight
        factor = 1.0 - min(_DIVERSIFICATION_CAP, (w.size - 1) * _DIVERSIFICATION_STEP)
        return weighted * factor
