"""
Inference control: forward and backward chaining, batch deduction and explanations.
"""

from .chainer import Chainer, Explanation, ProofNode, ProofOrigin
from .forward import ForwardChainer, ChainerResult
from .backward import BackwardChainer, Answer
from .batch import BatchDeduction

__all__ = [
    "Chainer", "Explanation", "ProofNode", "ProofOrigin",
    "ForwardChainer", "ChainerResult", "BackwardChainer", "Answer", "BatchDeduction"
]
