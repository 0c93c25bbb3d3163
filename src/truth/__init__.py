"""
Truth values and the probabilistic formulas that propagate them.
"""

from .values import (
    SimpleTruthValue, IndefiniteTruthValue, TruthValue, DEFAULT_TV, DEFAULT_K,
    count_to_confidence, confidence_to_count, revise, truth_value_from_dict
)
from .indefinite import propagate

__all__ = [
    "SimpleTruthValue", "IndefiniteTruthValue", "TruthValue", "DEFAULT_TV", "DEFAULT_K",
    "count_to_confidence", "confidence_to_count", "revise", "truth_value_from_dict",
    "propagate"
]
