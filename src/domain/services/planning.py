"""Retirement planner: target assets, deterministic D-day and the two-phase projection.

The planner ties the simulators together:
  1. target_assets from desired income and the real post-retirement return
  2. deterministic months_to_target (the D-day) at the pre-retirement return
  3. accumulation simulation bounded by int(D-day × failure multiplier)
  4. decumulation simulation from the target (or the current assets when the
     target is already reached) at the post-retirement return, with the
     volatility looked up for that return
"""

from __future__ import annotations

import logging
import math

from src.domain.models.plan import PlanProjection, RetirementPlan
from src.domain.models.simulation import AccumulationConfig, DecumulationConfig
from src.domain.services.accumulation import (
    AccumulationSimulator,
    CancelCheck,
    ProgressCallback,
)
from src.domain.services.decumulation import DecumulationSimulator
from src.domain.settings import AnalyticsSettings, get_settings

logger = logging.getLogger(__name__)

# Years of income required when the real return is not positive.
_FALLBACK_INCOME_YEARS = 50

# (upper bound on annual return in %, volatility in %); first match wins.
_VOLATILITY_TABLE: tuple[tuple[float, float], ...] = (
    (2.5, 1.0),
    (4.0, 4.5),
    (6.0, 7.0),
    (7.0, 11.0),
    (8.0, 13.0),
    (9.0, 15.0),
    (10.0, 17.0),
    (12.0, 21.0),
    (15.0, 27.0),
    (20.0, 30.0),
)
_VOLATILITY_CEILING = 35.0


def target_assets(
    desired_monthly_income: float,
    post_retirement_return: float,
    inflation_rate: float,
) -> float:
    """Assets needed to fund the income from real returns alone.

    annual_income / (post_retirement_return − inflation_rate); 50 years of
    income when the real rate is zero or negative.
    """
    annual_income = desired_monthly_income * 12
    real_rate = post_retirement_return - inflation_rate
    if real_rate <= 0:
        return annual_income * _FALLBACK_INCOME_YEARS
    return annual_income / real_rate


def months_to_target(
    current_assets: float,
    target: float,
    monthly_contribution: float,
    annual_return: float,
    max_months: int = 1200,
) -> int:
    """Deterministic months until the balance reaches target.

    Contribution is added at the start of each month, then the month's
    return (1 + r)^(1/12) − 1 is applied. Returns 0 if already at target and
    max_months if the target is never reached within the cap.

    Raises:
        ValueError: If annual_return ≤ −1.
    """
    if annual_return <= -1.0:
        raise ValueError(f"annual_return must be > -1, got {annual_return}")
    if current_assets >= target:
        return 0
    monthly_rate = (1 + annual_return) ** (1 / 12) - 1
    balance = current_assets
    months = 0
    while balance < target and months < max_months:
        balance = (balance + monthly_contribution) * (1 + monthly_rate)
        months += 1
    return months


def volatility_for_return(annual_return: float) -> float:
    """Default annual volatility assumed for an expected annual return.

    Step table over the return in percent; returns a fraction.
    """
    percent = annual_return * 100
    for upper, volatility in _VOLATILITY_TABLE:
        if percent < upper:
            return volatility / 100
    return _VOLATILITY_CEILING / 100


class RetirementPlanner:
    """Runs the full two-phase retirement projection for a RetirementPlan.

    Simulation defaults (trial counts, horizons, month cap, progress interval) come
    from the AnalyticsSettings passed in, as do the pre-retirement volatility
    and failure multiplier when the plan leaves them unset. The plan can
    override the trial count and seed.
    """

    def __init__(
        self,
        settings: AnalyticsSettings | None = None,
        accumulation: AccumulationSimulator | None = None,
        decumulation: DecumulationSimulator | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._accumulation = accumulation or AccumulationSimulator()
        self._decumulation = decumulation or DecumulationSimulator()

    def run(
        self,
        plan: RetirementPlan,
        progress_callback: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> PlanProjection:
        """Project a plan through accumulation and decumulation.

        Progress is reported as (completed, total) over the trials of both
        phases combined.

        Raises:
            SimulationCancelledError: If should_cancel() returned True.
        """
        settings = self._settings
        overrides = {}
        if plan.trial_count is not None:
            overrides["trial_count"] = plan.trial_count
        if plan.seed is not None:
            overrides["seed"] = plan.seed

        target = target_assets(
            plan.desired_monthly_income, plan.post_retirement_return, plan.inflation_rate
        )
        d_day = months_to_target(
            plan.current_assets,
            target,
            plan.monthly_contribution,
            plan.pre_retirement_return,
            settings.max_months,
        )
        multiplier = _or_default(
            plan.failure_threshold_multiplier, settings.failure_threshold_multiplier
        )
        pre_volatility = _or_default(plan.pre_retirement_volatility, settings.default_volatility)
        bound = int(d_day * multiplier)
        progress = 100.0 if target <= 0 else min(plan.current_assets / target * 100, 100.0)

        accumulation_config = AccumulationConfig.from_settings(
            settings, max_months=bound, track_paths=True, **overrides
        )
        decumulation_config = DecumulationConfig.from_settings(
            settings, spending_ratio=plan.spending_ratio, **overrides
        )
        grand_total = accumulation_config.trial_count + decumulation_config.trial_count
        logger.debug(
            "Plan: target %.2f, D-day %d months, accumulation bound %d months",
            target,
            d_day,
            bound,
        )

        def phase_progress(offset: int) -> ProgressCallback | None:
            if progress_callback is None:
                return None
            return lambda completed, _total: progress_callback(offset + completed, grand_total)

        accumulation = self._accumulation.simulate(
            plan.current_assets,
            plan.monthly_contribution,
            target,
            plan.pre_retirement_return,
            pre_volatility,
            accumulation_config,
            progress_callback=phase_progress(0),
            should_cancel=should_cancel,
        )

        start_assets = plan.current_assets if d_day == 0 else target
        post_volatility = volatility_for_return(plan.post_retirement_return)
        decumulation = self._decumulation.simulate(
            start_assets,
            plan.desired_monthly_income,
            plan.post_retirement_return,
            post_volatility,
            decumulation_config,
            progress_callback=phase_progress(accumulation_config.trial_count),
            should_cancel=should_cancel,
        )

        return PlanProjection(
            target_assets=target,
            months_to_retirement=d_day,
            progress_percent=progress if math.isfinite(progress) else 0.0,
            accumulation_bound_months=bound,
            accumulation=accumulation,
            decumulation=decumulation,
            decumulation_start_assets=start_assets,
            pre_retirement_volatility=pre_volatility,
            post_retirement_volatility=post_volatility,
        )


def _or_default(value: float | None, default: float) -> float:
    return default if value is None else value
