"""Analysis assumption domain models.

AnalysisConfig holds the explicit parameters that drive a historical
portfolio analysis (risk-free rate, annualisation factor). It is passed into
every analysis call rather than read from ambient constants.

CorrelationMatrix holds the pairwise Pearson correlations over the holdings'
aligned return series. It is built from the upper triangle and mirrored, so
symmetry holds by construction; the diagonal is always exactly 1.0.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import Frequency

if TYPE_CHECKING:
    from src.domain.settings import AnalyticsSettings

_SYMMETRY_TOL = 1e-12
# Finite-sample correlations may stray marginally outside [-1, 1].
_CORR_BOUND_TOL = 1e-9


class AnalysisConfig(BaseModel):
    """Parameters for one portfolio analysis.

    risk_free_rate       — annual rate subtracted in the Sharpe ratio (3.5 %)
    trading_days_per_year — annualisation factor for daily series (252)
    """

    model_config = ConfigDict(frozen=True)

    risk_free_rate: float = Field(default=0.035)
    trading_days_per_year: int = Field(default=Frequency.DAILY.periods_per_year, gt=0)

    @classmethod
    def default(cls) -> AnalysisConfig:
        return cls()

    @classmethod
    def from_settings(cls, settings: AnalyticsSettings) -> AnalysisConfig:
        return cls(
            risk_free_rate=settings.risk_free_rate,
            trading_days_per_year=settings.trading_days_per_year,
        )


class CorrelationMatrix(BaseModel):
    """Symmetric n×n correlation matrix keyed by ticker order.

    values[i][j] is corr(tickers[i], tickers[j]). Use from_upper_triangle()
    to build from pairwise computations; an empty matrix (no tickers) is the
    neutral value for an empty portfolio.
    """

    model_config = ConfigDict(frozen=True)

    tickers: tuple[str, ...] = ()
    values: tuple[tuple[float, ...], ...] = ()

    @model_validator(mode="after")
    def _square_symmetric_unit_diagonal(self) -> CorrelationMatrix:
        n = len(self.tickers)
        if len(self.values) != n or any(len(row) != n for row in self.values):
            raise ValueError(
                f"values must be {n}×{n} to match the {n} tickers provided"
            )
        for i in range(n):
            if self.values[i][i] != 1.0:
                raise ValueError(f"diagonal entry ({i}, {i}) must be 1.0")
            for j in range(i + 1, n):
                a, b = self.values[i][j], self.values[j][i]
                if abs(a - b) > _SYMMETRY_TOL:
                    raise ValueError(f"matrix is not symmetric at ({i}, {j})")
                if abs(a) > 1.0 + _CORR_BOUND_TOL:
                    raise ValueError(
                        f"correlation at ({i}, {j}) is outside [-1, 1]: {a}"
                    )
        return self

    @classmethod
    def from_upper_triangle(
        cls,
        tickers: list[str],
        upper: dict[tuple[int, int], float],
    ) -> CorrelationMatrix:
        """Build from upper-triangle entries keyed by (i, j) with i < j.

        Missing pairs default to 0.0 (no correlation signal). The diagonal
        is fixed at 1.0 regardless of any (i, i) key supplied.
        """
        n = len(tickers)
        rows = [[0.0] * n for _ in range(n)]
        for i in range(n):
            rows[i][i] = 1.0
            for j in range(i + 1, n):
                value = float(upper.get((i, j), 0.0))
                rows[i][j] = value
                rows[j][i] = value
        return cls(tickers=tuple(tickers), values=tuple(tuple(r) for r in rows))

    @property
    def size(self) -> int:
        return len(self.tickers)

    def get_correlation(self, ticker_i: str, ticker_j: str) -> float | None:
        """Return corr(i, j), or None if either ticker is not in the matrix."""
        try:
            i = self.tickers.index(ticker_i)
            j = self.tickers.index(ticker_j)
        except ValueError:
            return None
        return self.values[i][j]

    def as_lists(self) -> list[list[float]]:
        return [list(row) for row in self.values]
