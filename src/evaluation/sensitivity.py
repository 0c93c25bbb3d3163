"""
Sensitivity of strength formulas to errors in their inputs.
"""

from typing import Callable, Dict, List, Sequence

import torch

from truth.formulas import deduction_strength


def error_magnification(formula: Callable[..., torch.Tensor],
                        inputs: Sequence[float]) -> Dict[str, object]:
    """
    First-order error propagation through ``formula`` at ``inputs``.

    The magnification is the L1 norm of the gradient: the largest change
    in the output per unit of error in every input.

    Returns:
        Dict with the output value, the gradient and the magnification
    """
    if not inputs:
        raise ValueError("error_magnification needs at least one input")
    x = torch.tensor([float(v) for v in inputs], dtype=torch.float64, requires_grad=True)
    output = formula(*x.unbind())
    (gradient,) = torch.autograd.grad(output, x)
    return {
        "value": output.item(),
        "gradient": gradient.tolist(),
        "magnification": gradient.abs().sum().item(),
    }


def chain_error_growth(depth: int, link_strength: float = 0.8,
                       term_strength: float = 0.5) -> List[float]:
    """
    Magnification of link errors along a deduction chain.

    The chain A0->A1->...->A(depth) is collapsed left to right; entry i
    is the magnification of the conclusion A0->A(i+1) with respect to all
    link strengths used so far.
    """
    if depth < 1:
        raise ValueError(f"depth must be at least 1: {depth}")
    links = torch.full((depth + 1,), float(link_strength), dtype=torch.float64,
                       requires_grad=True)
    s = links[0]
    growth = []
    for i in range(1, depth + 1):
        s = deduction_strength(term_strength, term_strength, term_strength, s, links[i])
        (gradient,) = torch.autograd.grad(s, links, retain_graph=True)
        growth.append(gradient.abs().sum().item())
    return growth
