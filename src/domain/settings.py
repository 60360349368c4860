"""Environment-driven defaults for the analytics engine.

Callers build explicit config objects via the ``from_settings()`` factories
on AnalysisConfig, AccumulationConfig and DecumulationConfig. RetirementPlanner
and ProjectionService take an instance for their own defaults.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.domain.models.enums import Frequency


class AnalyticsSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="ANALYTICS_", extra="ignore"
    )

    risk_free_rate: float = 0.035
    trading_days_per_year: int = Field(default=Frequency.DAILY.periods_per_year, gt=0)

    accumulation_trials: int = Field(default=30_000, gt=0)
    max_months: int = Field(default=1200, ge=0)
    decumulation_trials: int = Field(default=30_000, gt=0)
    horizon_years: int = Field(default=40, gt=0)
    short_horizon_years: int = Field(default=10, gt=0)
    projection_trials: int = Field(default=5_000, gt=0)
    projection_years: int = Field(default=10, gt=0)
    progress_interval: int = Field(default=200, gt=0)

    failure_threshold_multiplier: float = Field(default=1.1, gt=0.0)
    default_volatility: float = Field(default=0.15, ge=0.0)

    seed: int | None = Field(default=None, ge=0)


@lru_cache(maxsize=1)
def get_settings() -> AnalyticsSettings:
    return AnalyticsSettings()
