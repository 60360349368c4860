"""Holdings domain models.

A Holding is a (ticker, weight) pair. Weights across a portfolio
conventionally sum to 1.0, but that is validated by the caller, not here:
the analytics engine accepts any non-negative weights and treats a zero
total weight as degenerate input.

AssetData bundles everything the engine needs to know about one ticker:
its price history, its dividend profile and optional display metadata.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .market_data import PriceSeries


class Holding(BaseModel):
    """A single position in a portfolio. weight is the allocation in [0, 1]."""

    model_config = ConfigDict(frozen=True)

    ticker: str = Field(min_length=1)
    weight: float = Field(ge=0.0, le=1.0)


class DividendProfile(BaseModel):
    """Trailing dividend yield and its annual growth rate, both as fractions.

    dividend_growth_rate may be negative (dividend cuts).
    """

    model_config = ConfigDict(frozen=True)

    dividend_yield: float = Field(default=0.0, ge=0.0)
    dividend_growth_rate: float = 0.0

    @property
    def pays_dividend(self) -> bool:
        return self.dividend_yield > 0.0


class AssetData(BaseModel):
    """Price history, dividend profile and metadata for one ticker."""

    model_config = ConfigDict(frozen=True)

    ticker: str = Field(min_length=1)
    prices: PriceSeries
    dividends: DividendProfile = Field(default_factory=DividendProfile)
    name: str | None = None
    sector: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.ticker


def index_assets(assets: list[AssetData]) -> dict[str, AssetData]:
    """Map ticker → AssetData; the first occurrence of a ticker wins."""
    indexed: dict[str, AssetData] = {}
    for asset in assets:
        indexed.setdefault(asset.ticker, asset)
    return indexed
