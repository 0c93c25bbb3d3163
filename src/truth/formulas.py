"""
Strength and count formulas for the term-logic inference rules.

Strength formulas take floats or tensors and return float64 tensors, so the
same code serves single inferences, batched inference over many premise
sets, Monte-Carlo propagation of indefinite truth values and gradient-based
sensitivity analysis.
"""

import torch
from typing import Union

Number = Union[float, torch.Tensor]

EPS = 1e-9

# Uncertainty factor applied to the evidence count of every conclusion
DEFAULT_DISCOUNT = 0.9

# P(B | not A) when nothing better is known
DEFAULT_MODUS_PONENS_STRENGTH = 0.2


def _t(x: Number) -> torch.Tensor:
    if isinstance(x, torch.Tensor):
        return x if x.dtype == torch.float64 else x.to(torch.float64)
    return torch.tensor(float(x), dtype=torch.float64)


def _unit(x: torch.Tensor) -> torch.Tensor:
    return torch.clamp(x, 0.0, 1.0)


def _safe(denominator: torch.Tensor, degenerate: torch.Tensor) -> torch.Tensor:
    # Keeps the unused branch of torch.where free of inf/nan, including gradients
    return torch.where(degenerate, torch.ones_like(denominator), denominator)


def deduction_strength(sA: Number, sB: Number, sC: Number,
                       sAB: Number, sBC: Number) -> torch.Tensor:
    """
    Independence-based deduction: (A->B, B->C) => A->C.

        sAC = sAB * sBC + (1 - sAB) * (sC - sB * sBC) / (1 - sB)

    When sB is (numerically) 1 the second term is undefined and sC is used.
    ``sA`` is unused by the formula itself but kept in the signature so all
    term-probability arguments line up with the consistency check.
    """
    sB, sC, sAB, sBC = _t(sB), _t(sC), _t(sAB), _t(sBC)
    sB, sC, sAB, sBC = torch.broadcast_tensors(sB, sC, sAB, sBC)
    degenerate = (1.0 - sB) < EPS
    denominator = _safe(1.0 - sB, degenerate)
    value = sAB * sBC + (1.0 - sAB) * (sC - sB * sBC) / denominator
    return _unit(torch.where(degenerate, sC, value))


def deduction_consistency(sA: Number, sB: Number, sAB: Number) -> torch.Tensor:
    """
    Whether sAB is attainable given the term probabilities sA and sB.

    A conditional probability P(B|A) must lie within
    [max(0, (sA + sB - 1) / sA), min(1, sB / sA)].
    """
    sA, sB, sAB = torch.broadcast_tensors(_t(sA), _t(sB), _t(sAB))
    empty = sA < EPS
    safe_a = _safe(sA, empty)
    lower = torch.clamp((sA + sB - 1.0) / safe_a, min=0.0)
    upper = torch.clamp(sB / safe_a, max=1.0)
    ok = (sAB >= lower - 1e-6) & (sAB <= upper + 1e-6)
    return torch.where(empty, torch.ones_like(ok), ok)


def inversion_strength(sA: Number, sB: Number, sAB: Number) -> torch.Tensor:
    """Bayes inversion: sBA = sAB * sA / sB (0.5 when sB vanishes)."""
    sA, sB, sAB = torch.broadcast_tensors(_t(sA), _t(sB), _t(sAB))
    degenerate = sB < EPS
    value = sAB * sA / _safe(sB, degenerate)
    return _unit(torch.where(degenerate, torch.full_like(value, 0.5), value))


def induction_strength(sA: Number, sB: Number, sC: Number,
                       sAB: Number, sAC: Number) -> torch.Tensor:
    """(A->B, A->C) => B->C, computed as inversion of A->B followed by deduction."""
    sBA = inversion_strength(sA, sB, sAB)
    return deduction_strength(sB, sA, sC, sBA, sAC)


def abduction_strength(sA: Number, sB: Number, sC: Number,
                       sAB: Number, sCB: Number) -> torch.Tensor:
    """
    (A->B, C->B) => A->C.

        sAC = sAB * sCB * sC / sB + (1 - sAB) * (1 - sCB) * sC / (1 - sB)
    """
    sB, sC, sAB, sCB = torch.broadcast_tensors(_t(sB), _t(sC), _t(sAB), _t(sCB))
    low = sB < EPS
    high = (1.0 - sB) < EPS
    first = sAB * sCB * sC / _safe(sB, low)
    second = (1.0 - sAB) * (1.0 - sCB) * sC / _safe(1.0 - sB, high)
    value = torch.where(low, torch.zeros_like(first), first) + \
        torch.where(high, torch.zeros_like(second), second)
    return _unit(torch.where(low & high, sC, value))


def modus_ponens_strength(sA: Number, sAB: Number,
                          sB_given_not_A: Number = DEFAULT_MODUS_PONENS_STRENGTH) -> torch.Tensor:
    """(A, A->B) => B with sB = sA * sAB + (1 - sA) * P(B | not A)."""
    sA, sAB, other = torch.broadcast_tensors(_t(sA), _t(sAB), _t(sB_given_not_A))
    return _unit(sA * sAB + (1.0 - sA) * other)


def similarity_from_inheritance(sAB: Number, sBA: Number) -> torch.Tensor:
    """Sim(A, B) = |A and B| / |A or B| = 1 / (1/sAB + 1/sBA - 1)."""
    sAB, sBA = torch.broadcast_tensors(_t(sAB), _t(sBA))
    zero = (sAB < EPS) | (sBA < EPS)
    inverse = 1.0 / _safe(sAB, zero) + 1.0 / _safe(sBA, zero) - 1.0
    value = 1.0 / _safe(inverse, zero)
    return _unit(torch.where(zero, torch.zeros_like(value), value))


def inheritance_from_similarity(sA: Number, sB: Number, sim: Number) -> torch.Tensor:
    """sAB = (1 + sB / sA) * sim / (1 + sim)."""
    sA, sB, sim = torch.broadcast_tensors(_t(sA), _t(sB), _t(sim))
    degenerate = sA < EPS
    value = (1.0 + sB / _safe(sA, degenerate)) * sim / (1.0 + sim)
    return _unit(torch.where(degenerate, sim, value))


def negation_strength(s: Number) -> torch.Tensor:
    return _unit(1.0 - _t(s))


def conjunction_strength(*strengths: Number) -> torch.Tensor:
    """Probability of a conjunction under independence."""
    if not strengths:
        raise ValueError("conjunction_strength needs at least one argument")
    result = _t(strengths[0])
    for s in strengths[1:]:
        result = result * _t(s)
    return _unit(result)


def disjunction_strength(*strengths: Number) -> torch.Tensor:
    """Probability of a disjunction under independence."""
    if not strengths:
        raise ValueError("disjunction_strength needs at least one argument")
    remaining = 1.0 - _t(strengths[0])
    for s in strengths[1:]:
        remaining = remaining * (1.0 - _t(s))
    return _unit(1.0 - remaining)


def revision_strength(s1: Number, n1: Number, s2: Number, n2: Number) -> torch.Tensor:
    """Count-weighted average of two strengths."""
    s1, n1, s2, n2 = torch.broadcast_tensors(_t(s1), _t(n1), _t(s2), _t(n2))
    total = n1 + n2
    empty = total < EPS
    value = (s1 * n1 + s2 * n2) / _safe(total, empty)
    return _unit(torch.where(empty, (s1 + s2) / 2, value))


def discounted_min_count(*counts: float, discount: float = DEFAULT_DISCOUNT) -> float:
    """A conclusion is never better supported than its weakest premise."""
    if not counts:
        return 0.0
    return discount * min(counts)


def deduction_count(nAB: float, nBC: float, discount: float = DEFAULT_DISCOUNT) -> float:
    return discounted_min_count(nAB, nBC, discount=discount)


def inversion_count(nAB: float, discount: float = DEFAULT_DISCOUNT) -> float:
    return discount * nAB
