"""
Boolean connectives under an independence assumption.

These rules only run backwards: an AndLink, OrLink or NotLink goal is
evaluated from the truth values of its parts. Run forwards they would
combine every pair of atoms in the space.
"""

from typing import Iterator, Tuple

import torch

from atomspace.atoms import Atom, AtomType, Link, variable
from atomspace.unify import Bindings
from truth.formulas import conjunction_strength, disjunction_strength, negation_strength

from .base import InferenceRule

A, B = variable("A"), variable("B")


class ConnectiveRule(InferenceRule):
    """Evaluates a connective link from its outgoing atoms."""

    link_type: AtomType = AtomType.AND
    forward = False
    discount = 1.0

    def __init__(self, config=None):
        super().__init__([A, B], Link(self.link_type, (A, B)), config=config)

    def match_backward(self, target: Atom) -> Iterator[Tuple[Bindings, Tuple[Atom, ...]]]:
        if isinstance(target, Link) and target.type == self.link_type:
            yield {}, target.outgoing

    def conclusion_for(self, premises: Tuple[Atom, ...], bindings: Bindings) -> Atom:
        return Link(self.link_type, tuple(premises))


class NegationRule(ConnectiveRule):
    """A => not A"""

    name = "negation"
    link_type = AtomType.NOT

    def __init__(self, config=None):
        InferenceRule.__init__(self, [A], Link(AtomType.NOT, (A,)), config=config)

    def strength(self, s) -> torch.Tensor:
        return negation_strength(s)


class ConjunctionRule(ConnectiveRule):
    """(A, B, ...) => A and B and ..."""

    name = "conjunction"
    link_type = AtomType.AND

    def strength(self, *strengths) -> torch.Tensor:
        return conjunction_strength(*strengths)


class DisjunctionRule(ConnectiveRule):
    """(A, B, ...) => A or B or ..."""

    name = "disjunction"
    link_type = AtomType.OR

    def strength(self, *strengths) -> torch.Tensor:
        return disjunction_strength(*strengths)
