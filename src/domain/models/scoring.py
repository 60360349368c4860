"""Scoring domain models.

ScoringConfig holds the fixed bucket tables that map scalar portfolio
metrics to points, plus the grade breakpoints. PortfolioScore is the bounded
result: profitability (≤ 40) + stability (≤ 30, itself volatility ≤ 15 plus
MDD ≤ 15) + efficiency (≤ 30) = total (≤ 100), with a letter grade.

SafetyScore is the four-part retirement-readiness score (25 points each).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import Grade

_MAX_PROFITABILITY = 40
_MAX_VOLATILITY = 15
_MAX_MDD = 15
_MAX_EFFICIENCY = 30


class ScoreBucket(BaseModel):
    """One row of a bucket table.

    For a higher-is-better table the row matches when value ≥ threshold;
    for a lower-is-better table it matches when value < threshold.
    """

    model_config = ConfigDict(frozen=True)

    threshold: float
    points: int = Field(ge=0)


class BucketTable(BaseModel):
    """Ordered half-open buckets with a fallback for values matching no row.

    Rows are evaluated in order, so thresholds must be strictly decreasing
    (higher_is_better) or strictly increasing (lower is better), and points
    must never increase from one row to the next.
    """

    model_config = ConfigDict(frozen=True)

    buckets: tuple[ScoreBucket, ...]
    fallback: int = Field(default=0, ge=0)
    higher_is_better: bool = True

    @model_validator(mode="after")
    def _ordered(self) -> BucketTable:
        thresholds = [b.threshold for b in self.buckets]
        points = [b.points for b in self.buckets] + [self.fallback]
        pairs = list(zip(thresholds, thresholds[1:]))
        if self.higher_is_better:
            ordered = all(a > b for a, b in pairs)
        else:
            ordered = all(a < b for a, b in pairs)
        if not ordered:
            raise ValueError(
                "bucket thresholds must be strictly "
                f"{'decreasing' if self.higher_is_better else 'increasing'}, "
                f"got {thresholds}"
            )
        if any(a < b for a, b in zip(points, points[1:])):
            raise ValueError(f"bucket points must be non-increasing, got {points}")
        return self

    @property
    def max_points(self) -> int:
        return max([b.points for b in self.buckets] + [self.fallback])

    def lookup(self, value: float) -> int:
        """Points for value; NaN matches no row and scores the fallback."""
        for bucket in self.buckets:
            if self.higher_is_better and value >= bucket.threshold:
                return bucket.points
            if not self.higher_is_better and value < bucket.threshold:
                return bucket.points
        return self.fallback


def _table(rows: list[tuple[float, int]], fallback: int, higher_is_better: bool) -> BucketTable:
    return BucketTable(
        buckets=tuple(ScoreBucket(threshold=t, points=p) for t, p in rows),
        fallback=fallback,
        higher_is_better=higher_is_better,
    )


def _default_profitability() -> BucketTable:
    return _table([(0.12, 40), (0.08, 32), (0.05, 24), (0.03, 16), (0.0, 8)], 0, True)


def _default_volatility() -> BucketTable:
    return _table([(0.18, 15), (0.25, 12), (0.32, 9), (0.40, 5)], 2, False)


def _default_mdd() -> BucketTable:
    return _table([(0.20, 15), (0.30, 12), (0.40, 8), (0.55, 4)], 1, False)


def _default_efficiency() -> BucketTable:
    return _table(
        [(1.2, 30), (0.9, 25), (0.7, 20), (0.5, 15), (0.3, 10), (0.0, 5)], 0, True
    )


class GradeBreakpoint(BaseModel):
    """Minimum total score required for a grade."""

    model_config = ConfigDict(frozen=True)

    min_total: int = Field(ge=0, le=100)
    grade: Grade


def _default_grades() -> tuple[GradeBreakpoint, ...]:
    return (
        GradeBreakpoint(min_total=90, grade=Grade.S),
        GradeBreakpoint(min_total=80, grade=Grade.A),
        GradeBreakpoint(min_total=70, grade=Grade.B),
        GradeBreakpoint(min_total=60, grade=Grade.C),
    )


class ScoringConfig(BaseModel):
    """Bucket tables and grade breakpoints for the composite score.

    profitability — CAGR table, higher is better (≤ 40 points)
    volatility    — annualised volatility table, lower is better (≤ 15)
    mdd           — |max drawdown| table, lower is better (≤ 15)
    efficiency    — Sharpe ratio table, higher is better (≤ 30)
    grades        — descending min_total breakpoints; below all → fallback_grade
    """

    model_config = ConfigDict(frozen=True)

    profitability: BucketTable = Field(default_factory=_default_profitability)
    volatility: BucketTable = Field(default_factory=_default_volatility)
    mdd: BucketTable = Field(default_factory=_default_mdd)
    efficiency: BucketTable = Field(default_factory=_default_efficiency)
    grades: tuple[GradeBreakpoint, ...] = Field(default_factory=_default_grades)
    fallback_grade: Grade = Grade.D

    @model_validator(mode="after")
    def _within_caps(self) -> ScoringConfig:
        caps = {
            "profitability": (self.profitability, _MAX_PROFITABILITY),
            "volatility": (self.volatility, _MAX_VOLATILITY),
            "mdd": (self.mdd, _MAX_MDD),
            "efficiency": (self.efficiency, _MAX_EFFICIENCY),
        }
        for name, (table, cap) in caps.items():
            if table.max_points > cap:
                raise ValueError(
                    f"{name} table awards up to {table.max_points} points; cap is {cap}"
                )
        minimums = [g.min_total for g in self.grades]
        if any(a <= b for a, b in zip(minimums, minimums[1:])):
            raise ValueError(f"grade breakpoints must be strictly decreasing, got {minimums}")
        return self

    @classmethod
    def default(cls) -> ScoringConfig:
        return cls()

    def grade_for(self, total: int) -> Grade:
        for breakpoint in self.grades:
            if total >= breakpoint.min_total:
                return breakpoint.grade
        return self.fallback_grade


class PortfolioScore(BaseModel):
    """Bounded composite score; a pure function of the portfolio metrics."""

    model_config = ConfigDict(frozen=True)

    profitability: int = Field(ge=0, le=_MAX_PROFITABILITY)
    volatility_score: int = Field(ge=0, le=_MAX_VOLATILITY)
    mdd_score: int = Field(ge=0, le=_MAX_MDD)
    stability: int = Field(ge=0, le=_MAX_VOLATILITY + _MAX_MDD)
    efficiency: int = Field(ge=0, le=_MAX_EFFICIENCY)
    total: int = Field(ge=0, le=100)
    grade: Grade

    @model_validator(mode="after")
    def _parts_add_up(self) -> PortfolioScore:
        if self.stability != self.volatility_score + self.mdd_score:
            raise ValueError(
                f"stability ({self.stability}) must equal volatility_score + mdd_score "
                f"({self.volatility_score} + {self.mdd_score})"
            )
        if self.total != self.profitability + self.stability + self.efficiency:
            raise ValueError(
                f"total ({self.total}) must equal profitability + stability + efficiency"
            )
        return self

    @classmethod
    def zero(cls, grade: Grade = Grade.D) -> PortfolioScore:
        """Neutral score for an empty or unanalysable portfolio."""
        return cls(
            profitability=0,
            volatility_score=0,
            mdd_score=0,
            stability=0,
            efficiency=0,
            total=0,
            grade=grade,
        )


class SafetyScore(BaseModel):
    """Retirement-readiness score: four components of up to 25 points each."""

    model_config = ConfigDict(frozen=True)

    goal_fulfillment: float = Field(ge=0.0, le=25.0)
    return_safety: float = Field(ge=0.0, le=25.0)
    diversification: float = Field(ge=0.0, le=25.0)
    growth: float = Field(ge=0.0, le=25.0)
    change: float = 0.0

    @property
    def total(self) -> float:
        return self.goal_fulfillment + self.return_safety + self.diversification + self.growth
