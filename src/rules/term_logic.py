"""
First-order term logic rules over inheritance and implication links.
"""

from typing import Optional

import torch

from atomspace.atoms import AtomType, Link, variable
from data.schema import ReasonerConfig
from truth.formulas import (
    deduction_strength, deduction_consistency, inversion_strength,
    induction_strength, abduction_strength, modus_ponens_strength,
    similarity_from_inheritance, inheritance_from_similarity,
)

from .base import LinkRule

A, B, C = variable("A"), variable("B"), variable("C")


def _coherent(*checks) -> bool:
    return all(bool(deduction_consistency(*args)) for args in checks)


class DeductionRule(LinkRule):
    """(A->B, B->C) => A->C"""

    name = "deduction"

    def build(self):
        return [self.link(A, B), self.link(B, C)], self.link(A, C), [A, B, C], [(A, C)]

    def strength(self, sAB, sBC, sA, sB, sC) -> torch.Tensor:
        return deduction_strength(sA, sB, sC, sAB, sBC)

    def consistent(self, premise_strengths, term_strengths) -> bool:
        sAB, sBC = premise_strengths
        sA, sB, sC = term_strengths
        return _coherent((sA, sB, sAB), (sB, sC, sBC))


class InductionRule(LinkRule):
    """(A->B, A->C) => B->C"""

    name = "induction"

    def build(self):
        return [self.link(A, B), self.link(A, C)], self.link(B, C), [A, B, C], [(B, C)]

    def strength(self, sAB, sAC, sA, sB, sC) -> torch.Tensor:
        return induction_strength(sA, sB, sC, sAB, sAC)

    def consistent(self, premise_strengths, term_strengths) -> bool:
        sAB, sAC = premise_strengths
        sA, sB, sC = term_strengths
        return _coherent((sA, sB, sAB), (sA, sC, sAC))


class AbductionRule(LinkRule):
    """(A->B, C->B) => A->C"""

    name = "abduction"

    def build(self):
        return [self.link(A, B), self.link(C, B)], self.link(A, C), [A, B, C], [(A, C)]

    def strength(self, sAB, sCB, sA, sB, sC) -> torch.Tensor:
        return abduction_strength(sA, sB, sC, sAB, sCB)

    def consistent(self, premise_strengths, term_strengths) -> bool:
        sAB, sCB = premise_strengths
        sA, sB, sC = term_strengths
        return _coherent((sA, sB, sAB), (sC, sB, sCB))


class InversionRule(LinkRule):
    """A->B => B->A (Bayes rule)"""

    name = "inversion"

    def build(self):
        return [self.link(A, B)], self.link(B, A), [A, B], [(A, B)]

    def strength(self, sAB, sA, sB) -> torch.Tensor:
        return inversion_strength(sA, sB, sAB)

    def consistent(self, premise_strengths, term_strengths) -> bool:
        (sAB,) = premise_strengths
        sA, sB = term_strengths
        return _coherent((sA, sB, sAB))


class ModusPonensRule(LinkRule):
    """(A, A=>B) => B"""

    name = "modus_ponens"
    link_types = (AtomType.IMPLICATION,)

    def __init__(self, link_type: AtomType = AtomType.IMPLICATION,
                 config: Optional[ReasonerConfig] = None):
        super().__init__(link_type, config)

    def build(self):
        return [A, self.link(A, B)], B, [], [(A, B)]

    def strength(self, sA, sAB) -> torch.Tensor:
        return modus_ponens_strength(sA, sAB, self.config.modus_ponens_default)


class SimilarityRule(LinkRule):
    """(A->B, B->A) => A<->B"""

    name = "similarity"
    link_types = (AtomType.INHERITANCE,)

    def build(self):
        return ([self.link(A, B), self.link(B, A)], Link(AtomType.SIMILARITY, (A, B)),
                [], [(A, B)])

    def strength(self, sAB, sBA) -> torch.Tensor:
        return similarity_from_inheritance(sAB, sBA)


class InheritanceFromSimilarityRule(LinkRule):
    """A<->B => A->B"""

    name = "inheritance_from_similarity"
    link_types = (AtomType.INHERITANCE,)

    def build(self):
        return [Link(AtomType.SIMILARITY, (A, B))], self.link(A, B), [A, B], [(A, B)]

    def strength(self, sim, sA, sB) -> torch.Tensor:
        return inheritance_from_similarity(sA, sB, sim)
