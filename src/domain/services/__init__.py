"""Domain services package."""

from .accumulation import AccumulationSimulator
from .aggregation import PortfolioValueService
from .alignment import ReturnAlignmentService
from .analyzer import PortfolioAnalyzer
from .decumulation import DecumulationSimulator
from .planning import RetirementPlanner
from .projection import ProjectionService
from .risk import RiskService
from .safety import SafetyScoreService
from .scoring import ScoringService

__all__ = [
    "AccumulationSimulator",
    "DecumulationSimulator",
    "PortfolioAnalyzer",
    "PortfolioValueService",
    "ProjectionService",
    "RetirementPlanner",
    "ReturnAlignmentService",
    "RiskService",
    "SafetyScoreService",
    "ScoringService",
]
