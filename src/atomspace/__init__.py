"""
Knowledge representation: atoms, the AtomSpace hypergraph and inference trails.
"""

from .atoms import (
    Atom, AtomType, Node, Link,
    concept, predicate, variable, inheritance, similarity, implication, evaluation,
    list_, and_, or_, not_, is_variable, has_variables, variables
)
from .attention import AttentionValue
from .space import AtomSpace, AtomRecord, Match
from .trail import InferenceTrail
from .unify import unify, unify_all, substitute

__all__ = [
    "Atom", "AtomType", "Node", "Link",
    "concept", "predicate", "variable", "inheritance", "similarity", "implication",
    "evaluation", "list_", "and_", "or_", "not_", "is_variable", "has_variables", "variables",
    "AttentionValue", "AtomSpace", "AtomRecord", "Match", "InferenceTrail",
    "unify", "unify_all", "substitute"
]
