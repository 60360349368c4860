"""Domain model package.

All domain objects are pure Pydantic models with no infrastructure
dependencies. Import from this package to avoid coupling application code
to individual module paths.
"""

from .analysis import (
    AssetPerformance,
    DividendBreakdown,
    HistoricalPerformance,
    MetricBreakdown,
    PortfolioAnalysis,
    PortfolioBreakdowns,
    PortfolioMetrics,
    ProjectionBands,
    SectorAllocation,
)
from .assumptions import AnalysisConfig, CorrelationMatrix
from .enums import ConfidenceLevel, Frequency, Grade, MetricType, PathLabel
from .holdings import AssetData, DividendProfile, Holding
from .market_data import PricePoint, PriceSeries, ReturnSeries
from .plan import PlanProjection, RetirementPlan
from .scoring import (
    BucketTable,
    GradeBreakpoint,
    PortfolioScore,
    SafetyScore,
    ScoreBucket,
    ScoringConfig,
)
from .simulation import (
    AccumulationConfig,
    AccumulationResult,
    DecumulationConfig,
    DecumulationResult,
    PercentilePathSet,
    RepresentativePaths,
    SimulationPath,
)

__all__ = [
    # enums
    "ConfidenceLevel",
    "Frequency",
    "Grade",
    "MetricType",
    "PathLabel",
    # market data
    "PricePoint",
    "PriceSeries",
    "ReturnSeries",
    # holdings
    "AssetData",
    "DividendProfile",
    "Holding",
    # assumptions
    "AnalysisConfig",
    "CorrelationMatrix",
    # scoring
    "BucketTable",
    "GradeBreakpoint",
    "PortfolioScore",
    "SafetyScore",
    "ScoreBucket",
    "ScoringConfig",
    # analysis
    "AssetPerformance",
    "DividendBreakdown",
    "HistoricalPerformance",
    "MetricBreakdown",
    "PortfolioAnalysis",
    "PortfolioBreakdowns",
    "PortfolioMetrics",
    "ProjectionBands",
    "SectorAllocation",
    # simulation
    "AccumulationConfig",
    "AccumulationResult",
    "DecumulationConfig",
    "DecumulationResult",
    "PercentilePathSet",
    "RepresentativePaths",
    "SimulationPath",
    # plan
    "PlanProjection",
    "RetirementPlan",
]
