"""Seedable standard-normal sampling for the Monte Carlo simulators.

Trials run in blocks of RNG_BLOCK_SIZE. Each block draws from its own
generator, spawned from one root numpy.random.SeedSequence, so a block's
stream depends only on (seed, block index). That keeps results reproducible
for a fixed seed, independent of how often progress is reported, and lets a
single block be replayed to recover the path of any trial in it.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator
from typing import Protocol

import numpy as np

# Trials per random stream. Changing it changes the simulated numbers.
RNG_BLOCK_SIZE = 50


class NormalSampler(Protocol):
    """Draws independent standard normal variates."""

    def standard_normal(self, size: tuple[int, ...]) -> np.ndarray: ...


class BoxMullerSampler:
    """Box–Muller transform over a numpy Generator.

    z = sqrt(−2 ln u1) · cos(2π u2), with u1, u2 uniform on (0, 1]. Using
    1 − U[0, 1) keeps ln(u1) finite.
    """

    def __init__(self, rng: np.random.Generator) -> None:
        self._rng = rng

    def standard_normal(self, size: tuple[int, ...]) -> np.ndarray:
        u1 = 1.0 - self._rng.random(size)
        u2 = 1.0 - self._rng.random(size)
        return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * math.pi * u2)


SamplerFactory = Callable[[np.random.SeedSequence], NormalSampler]


def box_muller_factory(seed_sequence: np.random.SeedSequence) -> NormalSampler:
    return BoxMullerSampler(np.random.default_rng(seed_sequence))


def batch_seeds(seed: int | None, batch_count: int) -> list[np.random.SeedSequence]:
    """One independent child SeedSequence per block.

    A None seed draws fresh OS entropy, so runs are not reproducible.
    """
    return np.random.SeedSequence(seed).spawn(batch_count)


def batch_bounds(total: int, batch_size: int) -> Iterator[tuple[int, int, int]]:
    """Yield (batch_index, start, stop) trial ranges covering [0, total)."""
    for index, start in enumerate(range(0, total, batch_size)):
        yield index, start, min(start + batch_size, total)


def batch_count(total: int, batch_size: int) -> int:
    return -(-total // batch_size)


def crosses_checkpoint(start: int, stop: int, total: int, interval: int) -> bool:
    """True when the trials [start, stop) pass a multiple of interval or finish the run.

    Progress is reported, and cancellation polled, only after such a block.
    """
    return stop >= total or stop // interval > start // interval


def lognormal_step_params(
    annual_return: float,
    annual_volatility: float,
    periods_per_year: int,
) -> tuple[float, float]:
    """Per-period drift and volatility of a lognormal (GBM) return.

    mu    = ln(1 + r) / m − ½ σ² / m
    sigma = σ / √m

    The expected per-period growth factor is then (1 + r)^(1/m).

    Raises:
        ValueError: If annual_return ≤ −1 or annual_volatility < 0.
    """
    if annual_return <= -1.0:
        raise ValueError(f"annual_return must be > -1, got {annual_return}")
    if annual_volatility < 0:
        raise ValueError(f"annual_volatility must be ≥ 0, got {annual_volatility}")
    variance = annual_volatility**2
    mu = math.log1p(annual_return) / periods_per_year - 0.5 * variance / periods_per_year
    sigma = annual_volatility / math.sqrt(periods_per_year)
    return mu, sigma
