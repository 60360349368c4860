"""Unit tests for ReturnAlignmentService.

Each test class corresponds to one public method on ReturnAlignmentService.
"""

from datetime import date, timedelta

import pytest

from src.domain.models.market_data import PriceSeries
from src.domain.services.alignment import ReturnAlignmentService


@pytest.fixture
def service() -> ReturnAlignmentService:
    return ReturnAlignmentService()


def _day(n: int) -> date:
    return date(2024, 1, 1) + timedelta(days=n)


def _series(ticker: str, start: int, closes: list[float]) -> PriceSeries:
    return PriceSeries.from_pairs(ticker, [(_day(start + i), c) for i, c in enumerate(closes)])


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def overlapping() -> list[PriceSeries]:
    """A covers days 0-3, B covers days 1-4; common dates are days 1-3."""
    return [
        _series("A", 0, [100.0, 110.0, 121.0, 133.1]),
        _series("B", 1, [50.0, 40.0, 60.0, 70.0]),
    ]


# ---------------------------------------------------------------------------
# common_dates
# ---------------------------------------------------------------------------


class TestCommonDates:
    def test_intersection_of_dates(self, service, overlapping):
        assert service.common_dates(overlapping) == [_day(1), _day(2), _day(3)]

    def test_empty_input(self, service):
        assert service.common_dates([]) == []

    def test_disjoint_series(self, service):
        series = [_series("A", 0, [1.0, 2.0]), _series("B", 10, [1.0, 2.0])]
        assert service.common_dates(series) == []

    def test_empty_series_empties_intersection(self, service, overlapping):
        assert service.common_dates(overlapping + [PriceSeries(ticker="C")]) == []

    def test_unsorted_points_come_back_ascending(self, service):
        series = PriceSeries.from_pairs("A", [(_day(2), 3.0), (_day(0), 1.0), (_day(1), 2.0)])
        assert service.common_dates([series]) == [_day(0), _day(1), _day(2)]


# ---------------------------------------------------------------------------
# align_returns
# ---------------------------------------------------------------------------


class TestAlignReturns:
    def test_one_series_per_input(self, service, overlapping):
        result = service.align_returns(overlapping)
        assert [r.ticker for r in result] == ["A", "B"]

    def test_returns_use_only_common_dates(self, service, overlapping):
        a, b = service.align_returns(overlapping)
        assert a.returns == pytest.approx((0.1, 0.1))
        assert b.returns == pytest.approx((-0.2, 0.5))

    def test_return_dates_are_later_date_of_each_step(self, service, overlapping):
        a, _ = service.align_returns(overlapping)
        assert a.dates == (_day(2), _day(3))

    def test_lengths_match_across_holdings(self, service, overlapping):
        a, b = service.align_returns(overlapping)
        assert len(a) == len(b) == 2

    def test_single_common_date_gives_empty_series(self, service):
        series = [_series("A", 0, [1.0, 2.0]), _series("B", 1, [5.0, 6.0])]
        result = service.align_returns(series)
        assert all(r.is_empty for r in result)
        assert [r.ticker for r in result] == ["A", "B"]

    def test_no_common_dates_gives_empty_series(self, service):
        series = [_series("A", 0, [1.0, 2.0]), _series("B", 10, [1.0, 2.0])]
        assert all(r.is_empty for r in service.align_returns(series))

    def test_empty_input_gives_empty_list(self, service):
        assert service.align_returns([]) == []

    def test_duplicate_date_keeps_last_observation(self, service):
        series = PriceSeries.from_pairs(
            "A", [(_day(0), 100.0), (_day(0), 200.0), (_day(1), 220.0)]
        )
        (result,) = service.align_returns([series])
        assert result.returns == pytest.approx((0.1,))

    def test_same_ticker_twice_keeps_both_columns(self, service):
        series = _series("A", 0, [1.0, 2.0, 4.0])
        result = service.align_returns([series, series])
        assert result[0].returns == result[1].returns == pytest.approx((1.0, 1.0))
