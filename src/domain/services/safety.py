"""Retirement safety score: four 25-point components, 100 in total.

goal fulfillment — passive income as a share of desired income
return safety    — annualised passive income yield on assets; full marks in
                   the 3–8 % band
diversification  — number of asset types held, out of seven
growth           — month-on-month real asset growth; 0 % real = 12.5 points,
                   ±2 % real = 25 / 0 points
"""

from __future__ import annotations

from src.domain.models.scoring import SafetyScore

_COMPONENT_MAX = 25.0
_ASSET_TYPE_COUNT = 7
_SAFE_YIELD_BAND = (3.0, 8.0)
_HIGH_YIELD_PENALTY = 2.0
_HIGH_YIELD_FLOOR = 10.0
_GROWTH_NEUTRAL = 12.5
_GROWTH_FULL_SCALE_PCT = 2.0


def _clamp(value: float) -> float:
    return max(0.0, min(value, _COMPONENT_MAX))


class SafetyScoreService:
    """Pure computation service for the safety score.

    Rates are fractions (0.025 = 2.5 %); amounts share one currency.
    """

    def goal_fulfillment(self, monthly_passive_income: float, desired_monthly_income: float) -> float:
        if desired_monthly_income <= 0:
            return 0.0
        return _clamp(monthly_passive_income / desired_monthly_income * _COMPONENT_MAX)

    def return_safety(self, monthly_passive_income: float, total_assets: float) -> float:
        if total_assets <= 0:
            return 0.0
        yield_pct = monthly_passive_income * 12 / total_assets * 100
        low, high = _SAFE_YIELD_BAND
        if low <= yield_pct <= high:
            return _COMPONENT_MAX
        if yield_pct < low:
            return _clamp(yield_pct / low * _COMPONENT_MAX)
        excess = yield_pct - high
        return max(_COMPONENT_MAX - excess * _HIGH_YIELD_PENALTY, _HIGH_YIELD_FLOOR)

    def diversification(self, asset_type_count: int) -> float:
        count = max(0, min(asset_type_count, _ASSET_TYPE_COUNT))
        return count / _ASSET_TYPE_COUNT * _COMPONENT_MAX

    def growth(
        self,
        current_assets: float,
        previous_assets: float,
        inflation_rate: float = 0.025,
    ) -> float:
        """Score month-on-month growth net of one month of inflation.

        No previous balance scores the neutral 12.5.
        """
        if previous_assets <= 0:
            return _GROWTH_NEUTRAL
        growth_pct = (current_assets - previous_assets) / previous_assets * 100
        real_pct = growth_pct - inflation_rate * 100 / 12
        return _clamp(_GROWTH_NEUTRAL + real_pct / _GROWTH_FULL_SCALE_PCT * _GROWTH_NEUTRAL)

    def score(
        self,
        monthly_passive_income: float,
        desired_monthly_income: float,
        current_assets: float,
        previous_assets: float,
        asset_type_count: int,
        inflation_rate: float = 0.025,
        previous_total: float | None = None,
    ) -> SafetyScore:
        """Compute all four components and the change from a previous total.

        Args:
            monthly_passive_income: This month's passive income.
            desired_monthly_income: Target retirement income per month.
            current_assets: Total assets this month.
            previous_assets: Total assets last month (≤ 0 if unknown).
            asset_type_count: Number of distinct asset types held.
            inflation_rate: Annual inflation as a fraction.
            previous_total: Last period's total score; change is 0 if None.

        Returns:
            SafetyScore; its ``total`` property sums the four components.
        """
        result = SafetyScore(
            goal_fulfillment=self.goal_fulfillment(monthly_passive_income, desired_monthly_income),
            return_safety=self.return_safety(monthly_passive_income, current_assets),
            diversification=self.diversification(asset_type_count),
            growth=self.growth(current_assets, previous_assets, inflation_rate),
        )
        if previous_total is None:
            return result
        return result.model_copy(update={"change": result.total - previous_total})
