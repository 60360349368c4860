"""Decumulation-phase Monte Carlo: how a retirement balance evolves under spending.

Per trial and year: subtract monthly_spending × 12 × spending_ratio; if the
balance is then ≤ 0 the trial is depleted (the year is recorded and the path
stays at 0 from then on); otherwise apply one annual lognormal step.

All paths live in one (trials × (years + 1)) arena. Trials are ranked
ascending by outcome, ties broken by earlier depletion first, and the trials
at ranks trials·p // 100 for p in 10/30/50/70/90 are kept. The long and the
short horizon are ranked independently over the same trials.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import numpy as np

from src.domain.errors import SimulationCancelledError
from src.domain.models.enums import Frequency, PathLabel
from src.domain.models.simulation import (
    DecumulationConfig,
    DecumulationResult,
    PercentilePathSet,
    SimulationPath,
)
from src.domain.services.sampling import (
    RNG_BLOCK_SIZE,
    SamplerFactory,
    batch_bounds,
    batch_count,
    batch_seeds,
    box_muller_factory,
    crosses_checkpoint,
    lognormal_step_params,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
CancelCheck = Callable[[], bool]

_NOT_DEPLETED = 0
_YEARLY = Frequency.ANNUAL.periods_per_year
_MONTHS_PER_YEAR = Frequency.MONTHLY.periods_per_year


class DecumulationSimulator:
    """Depletion simulator for the retirement phase.

    The random source is injected through sampler_factory; everything else
    is passed per-call.
    """

    def __init__(self, sampler_factory: SamplerFactory = box_muller_factory) -> None:
        self._sampler_factory = sampler_factory

    def simulate(
        self,
        initial_asset: float,
        monthly_spending: float,
        annual_return: float,
        annual_volatility: float,
        config: DecumulationConfig | None = None,
        progress_callback: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> DecumulationResult:
        """Run the decumulation simulation.

        Args:
            initial_asset: Balance at retirement (≥ 0).
            monthly_spending: Spending per month before spending_ratio (≥ 0).
            annual_return: Expected annual return as a fraction (> −1).
            annual_volatility: Annual volatility as a fraction (≥ 0).
            config: Trial count, horizons, spending ratio, seed, progress interval.
            progress_callback: Called with (completed, total) each time the
                completed count passes a multiple of progress_interval, and at the end.
            should_cancel: Polled at the start and after each progress report;
                a True result aborts.

        Returns:
            DecumulationResult with long- and short-horizon percentile paths
            and the deterministic zero-volatility path.

        Raises:
            ValueError: If an amount is negative or a rate is out of range.
            SimulationCancelledError: If should_cancel() returned True.
        """
        config = config or DecumulationConfig.default()
        if initial_asset < 0:
            raise ValueError(f"initial_asset must be ≥ 0, got {initial_asset}")
        if monthly_spending < 0:
            raise ValueError(f"monthly_spending must be ≥ 0, got {monthly_spending}")
        mu, sigma = lognormal_step_params(annual_return, annual_volatility, _YEARLY)
        annual_spending = monthly_spending * _MONTHS_PER_YEAR * config.spending_ratio

        total = config.trial_count
        years = config.horizon_years
        arena = np.empty((total, years + 1), dtype=float)
        depletion = np.full(total, _NOT_DEPLETED, dtype=np.int64)
        seeds = batch_seeds(config.seed, batch_count(total, RNG_BLOCK_SIZE))
        logger.debug(
            "Decumulation start: %d trials, %d years, annual spending %.2f",
            total,
            years,
            annual_spending,
        )

        poll = True
        for index, start, stop in batch_bounds(total, RNG_BLOCK_SIZE):
            if poll and should_cancel is not None and should_cancel():
                raise SimulationCancelledError(start, total)
            sampler = self._sampler_factory(seeds[index])
            arena[start:stop], depletion[start:stop] = _simulate_paths(
                lambda size: sampler.standard_normal((size,)),
                stop - start,
                initial_asset,
                annual_spending,
                mu,
                sigma,
                years,
            )
            poll = crosses_checkpoint(start, stop, total, config.progress_interval)
            if not poll:
                continue
            logger.debug("Decumulation progress: %d/%d trials", stop, total)
            if progress_callback is not None:
                progress_callback(stop, total)

        deterministic_mu, _ = lognormal_step_params(annual_return, 0.0, _YEARLY)
        deterministic_values, deterministic_depletion = _simulate_paths(
            lambda size: np.zeros(size),
            1,
            initial_asset,
            annual_spending,
            deterministic_mu,
            0.0,
            years,
        )
        deterministic = _to_path(deterministic_values[0], int(deterministic_depletion[0]), years)

        depletion_rate = float(np.count_nonzero(depletion)) / total
        logger.debug("Decumulation done: depletion rate %.4f", depletion_rate)
        return DecumulationResult(
            trial_count=total,
            long_horizon=_percentile_paths(arena, depletion, years),
            short_horizon=_percentile_paths(arena, depletion, config.short_horizon_years),
            deterministic=deterministic,
            depletion_rate=depletion_rate,
        )


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _simulate_paths(
    draw: Callable[[int], np.ndarray],
    size: int,
    initial_asset: float,
    annual_spending: float,
    mu: float,
    sigma: float,
    years: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Yearly balances (size × (years + 1)) and depletion years (0 = never)."""
    paths = np.empty((size, years + 1), dtype=float)
    paths[:, 0] = initial_asset
    depletion = np.full(size, _NOT_DEPLETED, dtype=np.int64)
    balance = np.full(size, float(initial_asset))
    depleted = np.zeros(size, dtype=bool)
    for year in range(1, years + 1):
        # One draw per trial per year, depleted trials included.
        z = draw(size)
        balance = balance - annual_spending
        newly = ~depleted & (balance <= 0)
        depletion[newly] = year
        depleted |= newly
        balance = np.where(depleted, 0.0, balance * np.exp(mu + z * sigma))
        paths[:, year] = balance
    return paths, depletion


def _to_path(values: np.ndarray, depletion_year: int, years: int) -> SimulationPath:
    return SimulationPath(
        values=tuple(float(v) for v in values[: years + 1]),
        depletion_year=depletion_year if _NOT_DEPLETED < depletion_year <= years else None,
    )


def _percentile_paths(
    arena: np.ndarray,
    depletion: np.ndarray,
    years: int,
) -> PercentilePathSet:
    """Rank trials on their balance at ``years`` and pick the labelled ranks."""
    outcome = arena[:, years]
    never = np.iinfo(np.int64).max
    tie_break = np.where(depletion == _NOT_DEPLETED, never, depletion)
    # lexsort: last key is primary.
    order = np.lexsort((tie_break, outcome))
    total = arena.shape[0]
    chosen = {}
    for label in PathLabel:
        trial = int(order[total * label.percentile // 100])
        chosen[label.value] = _to_path(arena[trial], int(depletion[trial]), years)
    return PercentilePathSet(horizon_years=years, **chosen)
