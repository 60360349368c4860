"""Domain enumerations for the retirement analytics engine.

All string-valued enums use str mixin so they serialize cleanly to JSON
and remain comparable to plain strings.
"""

from enum import Enum


class Frequency(str, Enum):
    DAILY = "daily"
    MONTHLY = "monthly"
    ANNUAL = "annual"

    @property
    def periods_per_year(self) -> int:
        """Standard annualisation factor for this frequency."""
        return {
            Frequency.DAILY: 252,
            Frequency.MONTHLY: 12,
            Frequency.ANNUAL: 1,
        }[self]


class Grade(str, Enum):
    """Letter grade derived from the composite portfolio score."""

    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class MetricType(str, Enum):
    """Portfolio metrics that support a per-holding breakdown."""

    CAGR = "cagr"
    VOLATILITY = "volatility"
    MDD = "mdd"
    SHARPE = "sharpe"

    @property
    def higher_is_better(self) -> bool:
        return self in (MetricType.CAGR, MetricType.SHARPE)


class PathLabel(str, Enum):
    """Percentile bands retained from a decumulation run.

    Trials are ranked ascending by outcome, so the 90th percentile is the
    best outcome and the 10th the worst.
    """

    VERY_BEST = "very_best"
    LUCKY = "lucky"
    MEDIAN = "median"
    UNLUCKY = "unlucky"
    VERY_WORST = "very_worst"

    @property
    def percentile(self) -> int:
        return {
            PathLabel.VERY_BEST: 90,
            PathLabel.LUCKY: 70,
            PathLabel.MEDIAN: 50,
            PathLabel.UNLUCKY: 30,
            PathLabel.VERY_WORST: 10,
        }[self]


class ConfidenceLevel(str, Enum):
    """Qualitative reading of an accumulation success rate."""

    VERY_HIGH = "very_high"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    VERY_LOW = "very_low"

    @classmethod
    def from_success_rate(cls, success_rate: float) -> "ConfidenceLevel":
        if success_rate >= 0.95:
            return cls.VERY_HIGH
        if success_rate >= 0.85:
            return cls.HIGH
        if success_rate >= 0.70:
            return cls.MODERATE
        if success_rate >= 0.50:
            return cls.LOW
        return cls.VERY_LOW
