"""
Monte-Carlo propagation of indefinite truth values through strength formulas.

Each premise <[L, U], b, k> is turned into a family of beta distributions:
first-order means are drawn from a widened interval [L1, U1], and for each
mean, second-order samples are drawn from Beta(k * mean, k * (1 - mean)).
The formula is applied to the samples, the second-order axis is averaged,
and the conclusion interval is the central b-credible interval of the
resulting distribution of means.
"""

import torch
from torch.distributions import Beta
from typing import Callable, List, Optional, Sequence, Tuple

from .values import (
    TruthValue, IndefiniteTruthValue,
    DEFAULT_CREDIBILITY, DEFAULT_LOOKAHEAD, DEFAULT_K,
)

# Keeps beta parameters strictly positive at the interval ends
BETA_EPSILON = 1e-3


def widen_interval(lower: float, upper: float, credibility: float) -> Tuple[float, float]:
    """Interval whose central fraction b is [L, U]."""
    delta = (upper - lower) * (1.0 - credibility) / (2.0 * credibility)
    return max(0.0, lower - delta), min(1.0, upper + delta)


def sample_premise(tv: IndefiniteTruthValue, n_first_order: int,
                   n_second_order: int) -> torch.Tensor:
    """
    Draw a (n_first_order, n_second_order) tensor of probability samples.

    Row i holds draws from the beta distribution centred on the i-th
    first-order mean.
    """
    lower, upper = widen_interval(tv.lower, tv.upper, tv.credibility)
    u = torch.rand(n_first_order, dtype=torch.float64)
    means = lower + (upper - lower) * u
    alpha = tv.lookahead * means + BETA_EPSILON
    beta = tv.lookahead * (1.0 - means) + BETA_EPSILON
    return Beta(alpha, beta).sample((n_second_order,)).T.contiguous()


def propagate(formula: Callable[..., torch.Tensor],
              premises: Sequence[TruthValue],
              credibility: float = DEFAULT_CREDIBILITY,
              lookahead: float = DEFAULT_LOOKAHEAD,
              n_first_order: int = 100,
              n_second_order: int = 100,
              seed: Optional[int] = None,
              k: float = DEFAULT_K) -> IndefiniteTruthValue:
    """
    Propagate premises through ``formula`` and return the conclusion.

    Args:
        formula: Strength formula taking one tensor per premise, in order
        premises: Premise truth values; simple ones are converted first
        credibility: Credibility b of the conclusion interval
        lookahead: Lookahead k stored on the conclusion
        n_first_order: Number of first-order means per premise
        n_second_order: Number of beta samples per mean
        seed: Seed for a reproducible draw; the global RNG state is left untouched

    Returns:
        IndefiniteTruthValue for the conclusion
    """
    if not premises:
        raise ValueError("propagate needs at least one premise")
    if n_first_order < 2 or n_second_order < 1:
        raise ValueError("Need at least 2 first-order and 1 second-order samples")

    indefinite = [tv.to_indefinite(credibility, lookahead, k) for tv in premises]
    with torch.random.fork_rng(devices=[], enabled=seed is not None):
        if seed is not None:
            torch.manual_seed(seed)
        samples: List[torch.Tensor] = [
            sample_premise(tv, n_first_order, n_second_order) for tv in indefinite
        ]

    with torch.no_grad():
        conclusions = formula(*samples)
        means = conclusions.mean(dim=1).clamp(0.0, 1.0)
        tail = (1.0 - credibility) / 2.0
        bounds = torch.quantile(means, torch.tensor([tail, 1.0 - tail], dtype=torch.float64))

    lower, upper = float(bounds[0]), float(bounds[1])
    return IndefiniteTruthValue(min(lower, upper), max(lower, upper), credibility, lookahead)
