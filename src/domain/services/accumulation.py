"""Accumulation-phase Monte Carlo: months until savings reach a target.

Per trial and month: add the contribution, then multiply by
exp(mu_m + z·sigma_m) with mu_m = ln(1 + r)/12 − ½σ²/12 and
sigma_m = σ/√12. A trial succeeds at the first month (month 0 included)
where its balance is at or above the target; trials still short after
max_months fail.

Trials run vectorised in blocks of RNG_BLOCK_SIZE; progress_interval only
controls how often progress is reported. Only each trial's success month is
kept; representative paths are recovered by replaying the block that
produced them from its seed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import numpy as np

from src.domain.errors import SimulationCancelledError
from src.domain.models.enums import Frequency
from src.domain.models.simulation import (
    ACCUMULATION_PERCENTILES,
    AccumulationConfig,
    AccumulationResult,
    RepresentativePaths,
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

_MONTHS_PER_YEAR = Frequency.MONTHLY.periods_per_year
_NOT_REACHED = -1


class AccumulationSimulator:
    """First-passage simulator for the savings phase.

    The random source is injected through sampler_factory so tests can
    substitute a deterministic sampler; everything else is passed per-call.
    """

    def __init__(self, sampler_factory: SamplerFactory = box_muller_factory) -> None:
        self._sampler_factory = sampler_factory

    def simulate(
        self,
        initial_asset: float,
        monthly_contribution: float,
        target_asset: float,
        mean_annual_return: float,
        annual_volatility: float,
        config: AccumulationConfig | None = None,
        progress_callback: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> AccumulationResult:
        """Run the accumulation simulation.

        Args:
            initial_asset: Starting balance (≥ 0).
            monthly_contribution: Amount added at the start of every month (≥ 0).
            target_asset: Balance that counts as success (≥ 0).
            mean_annual_return: Expected annual return as a fraction (> −1).
            annual_volatility: Annual volatility as a fraction (≥ 0).
            config: Trial count, month bound, seed, progress interval, path tracking.
            progress_callback: Called with (completed, total) each time the
                completed count passes a multiple of progress_interval, and at the end.
            should_cancel: Polled at the start and after each progress report;
                a True result aborts.

        Returns:
            AccumulationResult with sorted success months and, when
            config.track_paths is set, representative best/median/worst paths.

        Raises:
            ValueError: If an amount is negative or a rate is out of range.
            SimulationCancelledError: If should_cancel() returned True.
        """
        config = config or AccumulationConfig.default()
        for name, amount in (
            ("initial_asset", initial_asset),
            ("monthly_contribution", monthly_contribution),
            ("target_asset", target_asset),
        ):
            if amount < 0:
                raise ValueError(f"{name} must be ≥ 0, got {amount}")
        mu, sigma = lognormal_step_params(mean_annual_return, annual_volatility, _MONTHS_PER_YEAR)

        total = config.trial_count
        seeds = batch_seeds(config.seed, batch_count(total, RNG_BLOCK_SIZE))
        outcomes = np.full(total, _NOT_REACHED, dtype=np.int64)
        logger.debug(
            "Accumulation start: %d trials, max %d months, target %.2f",
            total,
            config.max_months,
            target_asset,
        )

        poll = True
        for index, start, stop in batch_bounds(total, RNG_BLOCK_SIZE):
            if poll and should_cancel is not None and should_cancel():
                raise SimulationCancelledError(start, total)
            outcomes[start:stop], _ = self._run_batch(
                seeds[index],
                stop - start,
                initial_asset,
                monthly_contribution,
                target_asset,
                mu,
                sigma,
                config.max_months,
            )
            poll = crosses_checkpoint(start, stop, total, config.progress_interval)
            if not poll:
                continue
            logger.debug("Accumulation progress: %d/%d trials", stop, total)
            if progress_callback is not None:
                progress_callback(stop, total)

        success_months = np.sort(outcomes[outcomes != _NOT_REACHED])
        result = AccumulationResult(
            trial_count=total,
            success_months=tuple(int(m) for m in success_months),
            failure_count=int(total - success_months.size),
        )
        logger.debug(
            "Accumulation done: success rate %.4f over %d trials", result.success_rate, total
        )

        if not config.track_paths or result.success_count == 0:
            return result

        replay = (
            seeds,
            initial_asset,
            monthly_contribution,
            target_asset,
            mu,
            sigma,
            config,
        )
        best, median, worst = (
            self._representative_path(outcomes, result.percentile_month(p), *replay)
            for p in ACCUMULATION_PERCENTILES
        )
        return result.model_copy(
            update={
                "representative_paths": RepresentativePaths(best=best, median=median, worst=worst)
            }
        )

    # ------------------------------------------------------------------
    # Batch kernel
    # ------------------------------------------------------------------

    def _run_batch(
        self,
        seed_sequence: np.random.SeedSequence,
        size: int,
        initial_asset: float,
        monthly_contribution: float,
        target_asset: float,
        mu: float,
        sigma: float,
        max_months: int,
        record_history: bool = False,
    ) -> tuple[np.ndarray, list[np.ndarray] | None]:
        """Simulate one batch; return success months (−1 = failed) and history.

        One normal draw per trial is taken each month in month order, so the
        draws for month t do not depend on max_months. The loop stops once
        every trial in the batch has reached the target.
        """
        sampler = self._sampler_factory(seed_sequence)
        balance = np.full(size, float(initial_asset))
        months = np.full(size, _NOT_REACHED, dtype=np.int64)
        history = [balance.copy()] if record_history else None

        months[balance >= target_asset] = 0
        pending = months == _NOT_REACHED
        for month in range(1, max_months + 1):
            if not pending.any():
                break
            z = sampler.standard_normal((size,))
            balance = np.maximum((balance + monthly_contribution) * np.exp(mu + z * sigma), 0.0)
            reached = pending & (balance >= target_asset)
            months[reached] = month
            pending &= ~reached
            if history is not None:
                history.append(balance.copy())
        return months, history

    def _representative_path(
        self,
        outcomes: np.ndarray,
        month: int,
        seeds: list[np.random.SeedSequence],
        initial_asset: float,
        monthly_contribution: float,
        target_asset: float,
        mu: float,
        sigma: float,
        config: AccumulationConfig,
    ) -> SimulationPath:
        """Replay the first trial that succeeded at exactly ``month``."""
        trial = int(np.flatnonzero(outcomes == month)[0])
        batch_index, offset = divmod(trial, RNG_BLOCK_SIZE)
        start = batch_index * RNG_BLOCK_SIZE
        size = min(RNG_BLOCK_SIZE, config.trial_count - start)
        _, history = self._run_batch(
            seeds[batch_index],
            size,
            initial_asset,
            monthly_contribution,
            target_asset,
            mu,
            sigma,
            month,
            record_history=True,
        )
        values = tuple(float(step[offset]) for step in history[: month + 1])
        return SimulationPath(values=values, months_to_target=month)
