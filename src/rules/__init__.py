"""
Probabilistic term logic inference rules.
"""

from .base import InferenceRule, LinkRule, Conclusion
from .term_logic import (
    DeductionRule, InductionRule, AbductionRule, InversionRule, ModusPonensRule,
    SimilarityRule, InheritanceFromSimilarityRule
)
from .boolean import NegationRule, ConjunctionRule, DisjunctionRule
from .registry import RuleRegistry, create_default_rules

__all__ = [
    "InferenceRule", "LinkRule", "Conclusion",
    "DeductionRule", "InductionRule", "AbductionRule", "InversionRule", "ModusPonensRule",
    "SimilarityRule", "InheritanceFromSimilarityRule",
    "NegationRule", "ConjunctionRule", "DisjunctionRule",
    "RuleRegistry", "create_default_rules"
]
