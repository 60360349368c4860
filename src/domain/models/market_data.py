"""Market data domain models.

PricePoint   — a single closing-price observation for one ticker at one date.
PriceSeries  — the ordered daily closing prices for one ticker.
ReturnSeries — simple returns derived from a PriceSeries restricted to the
               dates shared by every series in an analysis.

All are immutable value objects. PriceSeries is owned by the caller; services
read it but never copy or mutate it.
"""

from __future__ import annotations

from datetime import date

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, model_validator


class PricePoint(BaseModel):
    """Closing price for one trading date. close must be strictly positive."""

    model_config = ConfigDict(frozen=True)

    price_date: date
    close: float = Field(gt=0.0)


class PriceSeries(BaseModel):
    """Daily closing prices for one ticker.

    Points need not be sorted; to_series() returns them in ascending date
    order. When a date appears more than once the last observation wins.
    """

    model_config = ConfigDict(frozen=True)

    ticker: str = Field(min_length=1)
    points: tuple[PricePoint, ...] = ()

    @classmethod
    def from_pairs(cls, ticker: str, pairs: list[tuple[date, float]]) -> PriceSeries:
        """Named constructor from (date, close) tuples."""
        return cls(
            ticker=ticker,
            points=tuple(PricePoint(price_date=d, close=c) for d, c in pairs),
        )

    @property
    def is_empty(self) -> bool:
        return not self.points

    def dates(self) -> set[date]:
        return {p.price_date for p in self.points}

    def to_series(self) -> pd.Series:
        """Return closes as a pandas Series indexed by date, ascending."""
        if not self.points:
            return pd.Series(dtype=float, name=self.ticker)
        series = pd.Series(
            [p.close for p in self.points],
            index=pd.Index([p.price_date for p in self.points]),
            dtype=float,
            name=self.ticker,
        )
        series = series[~series.index.duplicated(keep="last")]
        return series.sort_index()


class ReturnSeries(BaseModel):
    """Simple returns for one ticker over aligned trading dates.

    dates[k] is the later date of the k-th return step. An empty series means
    no correlation signal is available for this ticker.
    """

    model_config = ConfigDict(frozen=True)

    ticker: str
    dates: tuple[date, ...] = ()
    returns: tuple[float, ...] = ()

    @model_validator(mode="after")
    def _lengths_match(self) -> ReturnSeries:
        if len(self.dates) != len(self.returns):
            raise ValueError(
                f"dates ({len(self.dates)}) and returns ({len(self.returns)}) "
                "must have the same length"
            )
        return self

    def __len__(self) -> int:
        return len(self.returns)

    @property
    def is_empty(self) -> bool:
        return not self.returns
