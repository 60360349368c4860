"""Return series alignment: restrict price histories to shared trading dates.

Correlation is only meaningful between returns measured over the same
periods, so every holding's series is cut down to the intersection of all
holdings' dates before differencing.
"""

from __future__ import annotations

import logging
from datetime import date

import pandas as pd

from src.domain.models.market_data import PriceSeries, ReturnSeries

logger = logging.getLogger(__name__)


class ReturnAlignmentService:
    """Aligns multiple PriceSeries on their common dates.

    The class is stateless; all configuration is passed per-call.
    """

    def aligned_prices(self, series: list[PriceSeries]) -> pd.DataFrame:
        """Inner-join closing prices on date.

        Columns are positional (0..n-1) in input order so that two holdings
        sharing a ticker still get their own column. Duplicate dates within
        one series keep the last observation.

        Args:
            series: One PriceSeries per holding.

        Returns:
            DataFrame indexed by the common dates, ascending. Empty when the
            input is empty or any series is empty.
        """
        if not series:
            return pd.DataFrame()
        frame = pd.concat(
            [s.to_series() for s in series],
            axis=1,
            join="inner",
            keys=range(len(series)),
        )
        return frame.sort_index()

    def common_dates(self, series: list[PriceSeries]) -> list[date]:
        """Dates present in every series, ascending."""
        return list(self.aligned_prices(series).index)

    def align_returns(self, series: list[PriceSeries]) -> list[ReturnSeries]:
        """Simple returns for each series over adjacent common dates.

        r_i = (p_i − p_{i−1}) / p_{i−1}, computed only when the earlier price is
        positive; otherwise that step is dropped for that holding alone, so
        the resulting series may be shorter than len(common_dates) − 1.

        Fewer than two common dates yields an empty ReturnSeries for every
        holding, which downstream code treats as "no correlation signal".

        Args:
            series: One PriceSeries per holding.

        Returns:
            One ReturnSeries per input series, in input order.
        """
        prices = self.aligned_prices(series)
        if len(prices.index) < 2:
            if series:
                logger.warning(
                    "Only %d common date(s) across %d price series; "
                    "returning empty return series",
                    len(prices.index),
                    len(series),
                )
            return [ReturnSeries(ticker=s.ticker) for s in series]

        previous = prices.shift(1)
        returns = (prices - previous) / previous
        valid = previous > 0

        aligned: list[ReturnSeries] = []
        for column, source in enumerate(series):
            mask = valid[column]
            steps = returns[column][mask]
            aligned.append(
                ReturnSeries(
                    ticker=source.ticker,
                    dates=tuple(steps.index),
                    returns=tuple(float(r) for r in steps),
                )
            )
        return aligned
