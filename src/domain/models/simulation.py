"""Monte Carlo simulation domain models.

AccumulationConfig / AccumulationResult — first-passage simulation of the
    savings phase: how many months until the balance reaches a target.
DecumulationConfig / DecumulationResult — depletion simulation of the
    retirement phase: five percentile paths over a long and a short horizon
    plus one deterministic zero-volatility reference path.

Configs reject invalid parameters (non-positive trial counts, negative
horizons) at construction; results are created once per run and never
mutated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import ConfidenceLevel, PathLabel

if TYPE_CHECKING:
    from src.domain.settings import AnalyticsSettings

ACCUMULATION_PERCENTILES: tuple[float, ...] = (0.10, 0.50, 0.90)


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------


class AccumulationConfig(BaseModel):
    """Run parameters for the accumulation simulator.

    trial_count       — number of independent trials
    max_months        — first-passage bound; trials not at target by then fail
    track_paths       — materialise representative best/median/worst paths
    seed              — root seed; None draws fresh OS entropy
    progress_interval — trials between progress reports and cancellation polls
    """

    model_config = ConfigDict(frozen=True)

    trial_count: int = Field(default=30_000, gt=0)
    max_months: int = Field(default=1200, ge=0)
    track_paths: bool = False
    seed: int | None = Field(default=None, ge=0)
    progress_interval: int = Field(default=200, gt=0)

    @classmethod
    def default(cls) -> AccumulationConfig:
        return cls()

    @classmethod
    def from_settings(cls, settings: AnalyticsSettings, **overrides) -> AccumulationConfig:
        values = {
            "trial_count": settings.accumulation_trials,
            "max_months": settings.max_months,
            "seed": settings.seed,
            "progress_interval": settings.progress_interval,
        }
        values.update(overrides)
        return cls(**values)


class SimulationPath(BaseModel):
    """One real simulated trajectory, indexed by period (month or year).

    values[0] is the starting balance. months_to_target is set for
    accumulation paths that reached the target; depletion_year is set for
    decumulation paths that ran out of money.
    """

    model_config = ConfigDict(frozen=True)

    values: tuple[float, ...]
    months_to_target: int | None = Field(default=None, ge=0)
    depletion_year: int | None = Field(default=None, ge=1)

    @property
    def final_value(self) -> float:
        return self.values[-1] if self.values else 0.0

    @property
    def is_depleted(self) -> bool:
        return self.depletion_year is not None


class RepresentativePaths(BaseModel):
    """Actual trials whose months-to-target equal the 10th/50th/90th percentiles.

    best is the fastest (10th percentile month), worst the slowest.
    """

    model_config = ConfigDict(frozen=True)

    best: SimulationPath
    median: SimulationPath
    worst: SimulationPath


class AccumulationResult(BaseModel):
    """Aggregate outcome of an accumulation run.

    success_months holds the first-passage month of every successful trial,
    sorted ascending; failed trials appear only in failure_count.
    """

    model_config = ConfigDict(frozen=True)

    trial_count: int = Field(ge=0)
    success_months: tuple[int, ...] = ()
    failure_count: int = Field(default=0, ge=0)
    representative_paths: RepresentativePaths | None = None

    @model_validator(mode="after")
    def _counts_add_up(self) -> AccumulationResult:
        if len(self.success_months) + self.failure_count != self.trial_count:
            raise ValueError(
                f"successes ({len(self.success_months)}) + failures "
                f"({self.failure_count}) must equal trial_count ({self.trial_count})"
            )
        if any(a > b for a, b in zip(self.success_months, self.success_months[1:])):
            raise ValueError("success_months must be sorted ascending")
        return self

    @classmethod
    def empty(cls) -> AccumulationResult:
        return cls(trial_count=0)

    @property
    def success_count(self) -> int:
        return len(self.success_months)

    @property
    def success_rate(self) -> float:
        if self.trial_count == 0:
            return 0.0
        return self.success_count / self.trial_count

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return ConfidenceLevel.from_success_rate(self.success_rate)

    def percentile_month(self, p: float) -> int | None:
        """Success month at index int(count * p), clamped; None if no successes."""
        count = len(self.success_months)
        if count == 0:
            return None
        index = min(max(int(count * p), 0), count - 1)
        return self.success_months[index]

    @property
    def best_months(self) -> int | None:
        return self.percentile_month(0.10)

    @property
    def median_months(self) -> int | None:
        return self.percentile_month(0.50)

    @property
    def worst_months(self) -> int | None:
        return self.percentile_month(0.90)

    def year_distribution(self) -> dict[int, int]:
        """Histogram of successful trials keyed by whole years (months // 12)."""
        histogram: dict[int, int] = {}
        for month in self.success_months:
            year = month // 12
            histogram[year] = histogram.get(year, 0) + 1
        return dict(sorted(histogram.items()))


# ---------------------------------------------------------------------------
# Decumulation
# ---------------------------------------------------------------------------


class DecumulationConfig(BaseModel):
    """Run parameters for the decumulation simulator.

    horizon_years       — long-horizon length of every path
    short_horizon_years — independently ranked short view (≤ horizon_years)
    spending_ratio      — scales annual spending (monthly_spending × 12)
    progress_interval   — trials between progress reports and cancellation polls
    """

    model_config = ConfigDict(frozen=True)

    trial_count: int = Field(default=30_000, gt=0)
    horizon_years: int = Field(default=40, gt=0)
    short_horizon_years: int = Field(default=10, gt=0)
    spending_ratio: float = Field(default=1.0, ge=0.0)
    seed: int | None = Field(default=None, ge=0)
    progress_interval: int = Field(default=200, gt=0)

    @model_validator(mode="after")
    def _short_within_long(self) -> DecumulationConfig:
        if self.short_horizon_years > self.horizon_years:
            raise ValueError(
                f"short_horizon_years ({self.short_horizon_years}) cannot exceed "
                f"horizon_years ({self.horizon_years})"
            )
        return self

    @classmethod
    def default(cls) -> DecumulationConfig:
        return cls()

    @classmethod
    def from_settings(cls, settings: AnalyticsSettings, **overrides) -> DecumulationConfig:
        values = {
            "trial_count": settings.decumulation_trials,
            "horizon_years": settings.horizon_years,
            "short_horizon_years": settings.short_horizon_years,
            "seed": settings.seed,
            "progress_interval": settings.progress_interval,
        }
        values.update(overrides)
        return cls(**values)


class PercentilePathSet(BaseModel):
    """Five labelled real trials selected by percentile rank of their outcome."""

    model_config = ConfigDict(frozen=True)

    horizon_years: int = Field(gt=0)
    very_best: SimulationPath
    lucky: SimulationPath
    median: SimulationPath
    unlucky: SimulationPath
    very_worst: SimulationPath

    def path(self, label: PathLabel) -> SimulationPath:
        return getattr(self, label.value)

    def as_dict(self) -> dict[PathLabel, SimulationPath]:
        return {label: self.path(label) for label in PathLabel}


class DecumulationResult(BaseModel):
    """Long- and short-horizon percentile path sets plus the deterministic path.

    depletion_rate is the share of trials depleted within the long horizon.
    """

    model_config = ConfigDict(frozen=True)

    trial_count: int = Field(gt=0)
    long_horizon: PercentilePathSet
    short_horizon: PercentilePathSet
    deterministic: SimulationPath
    depletion_rate: float = Field(ge=0.0, le=1.0)

    @property
    def survival_rate(self) -> float:
        return 1.0 - self.depletion_rate
