"""Retirement plan models.

RetirementPlan is the caller-supplied savings plan; PlanProjection is the
planner's output combining the deterministic D-day with both simulation
phases. Rates are fractions (0.065 = 6.5 %), amounts are in one currency.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .enums import ConfidenceLevel
from .simulation import AccumulationResult, DecumulationResult


class RetirementPlan(BaseModel):
    """Inputs for one retirement projection.

    pre_retirement_volatility  — annual volatility while saving
    failure_threshold_multiplier — accumulation bound as a multiple of the
                                 deterministic months-to-target
    (both None: the planner uses the configured defaults, 15 % and 1.1)
    spending_ratio             — scales retirement spending in decumulation
    trial_count / seed         — override the configured simulation defaults
    """

    model_config = ConfigDict(frozen=True)

    current_assets: float = Field(ge=0.0)
    monthly_contribution: float = Field(ge=0.0)
    desired_monthly_income: float = Field(ge=0.0)
    pre_retirement_return: float = Field(gt=-1.0)
    post_retirement_return: float = Field(gt=-1.0)
    inflation_rate: float = 0.0
    pre_retirement_volatility: float | None = Field(default=None, ge=0.0)
    failure_threshold_multiplier: float | None = Field(default=None, gt=0.0)
    spending_ratio: float = Field(default=1.0, ge=0.0)
    trial_count: int | None = Field(default=None, gt=0)
    seed: int | None = Field(default=None, ge=0)


class PlanProjection(BaseModel):
    """Planner output.

    months_to_retirement is the deterministic D-day, capped at the planner's
    month limit when the target is never reached. decumulation_start_assets
    is the balance the retirement phase was simulated from.
    """

    model_config = ConfigDict(frozen=True)

    target_assets: float = Field(ge=0.0)
    months_to_retirement: int = Field(ge=0)
    progress_percent: float = Field(ge=0.0, le=100.0)
    accumulation_bound_months: int = Field(ge=0)
    accumulation: AccumulationResult
    decumulation: DecumulationResult
    decumulation_start_assets: float = Field(ge=0.0)
    pre_retirement_volatility: float = Field(ge=0.0)
    post_retirement_volatility: float = Field(ge=0.0)

    @property
    def is_retired(self) -> bool:
        return self.months_to_retirement == 0

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return self.accumulation.confidence_level
