"""Scoring service: maps portfolio metrics to a bounded composite score.

total = profitability (CAGR, ≤ 40)
      + stability (volatility ≤ 15 + |MDD| ≤ 15)
      + efficiency (Sharpe, ≤ 30)

Every sub-score is a bucket-table lookup from the ScoringConfig passed in,
so the result is a pure function of (metrics, config).
"""

from __future__ import annotations

import logging
import math

from src.domain.models.scoring import PortfolioScore, ScoringConfig

logger = logging.getLogger(__name__)


class ScoringService:
    """Pure computation service for the composite portfolio score.

    The class is stateless; all configuration is passed per-call.
    """

    def score(
        self,
        cagr: float,
        volatility: float,
        sharpe: float,
        mdd: float,
        config: ScoringConfig | None = None,
    ) -> PortfolioScore:
        """Score a portfolio from its headline metrics.

        Volatility is looked up as-is; MDD by magnitude. A non-finite metric
        matches no bucket and scores its table's fallback.

        Args:
            cagr: Price-only CAGR (fraction).
            volatility: Annualised volatility (fraction, ≥ 0).
            sharpe: Sharpe ratio.
            mdd: Maximum drawdown (fraction, ≤ 0).
            config: Bucket tables and grade breakpoints; defaults if None.

        Returns:
            PortfolioScore with sub-scores, total and grade.
        """
        config = config or ScoringConfig.default()
        if not all(math.isfinite(x) for x in (cagr, volatility, sharpe, mdd)):
            logger.warning(
                "Non-finite metric in score input (cagr=%s, volatility=%s, sharpe=%s, mdd=%s)",
                cagr,
                volatility,
                sharpe,
                mdd,
            )

        profitability = config.profitability.lookup(cagr)
        volatility_score = config.volatility.lookup(volatility)
        mdd_score = config.mdd.lookup(abs(mdd))
        efficiency = config.efficiency.lookup(sharpe)

        stability = volatility_score + mdd_score
        total = profitability + stability + efficiency
        return PortfolioScore(
            profitability=profitability,
            volatility_score=volatility_score,
            mdd_score=mdd_score,
            stability=stability,
            efficiency=efficiency,
            total=total,
            grade=config.grade_for(total),
        )
