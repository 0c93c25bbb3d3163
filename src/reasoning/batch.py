"""
Vectorized deduction over every chained pair of links in the space.
"""

import logging
from typing import List, Optional, Tuple

import torch

from atomspace.atoms import AtomType, Link
from atomspace.space import AtomSpace
from atomspace.trail import InferenceTrail
from data.schema import ReasonerConfig
from rules.base import Conclusion
from rules.term_logic import DeductionRule
from truth.formulas import deduction_consistency, deduction_strength
from truth.values import SimpleTruthValue

logger = logging.getLogger(__name__)


class BatchDeduction:
    """
    One-shot deduction for all L(A,B), L(B,C) pairs with A != C.

    Strengths and consistency checks are computed in a single tensor call.
    Indefinite premises enter through their midpoints and implied counts.
    """

    def __init__(self, space: AtomSpace, link_type: AtomType = AtomType.INHERITANCE,
                 config: Optional[ReasonerConfig] = None):
        self.space = space
        self.config = config or ReasonerConfig()
        self.rule = DeductionRule(link_type, self.config)
        self.link_type = link_type

    def _has_evidence(self, link: Link) -> bool:
        tv = self.space.get_tv(link)
        return tv.to_simple(self.space.k).count > 0 and \
            tv.confidence(self.space.k) >= self.config.min_confidence

    def collect(self) -> List[Tuple[Link, Link]]:
        """All premise pairs, ordered by the string form of the first link."""
        pairs = []
        first_links = sorted(self.space.get_atoms_by_type(self.link_type), key=str)
        for ab in first_links:
            if not self._has_evidence(ab):
                continue
            a, b = ab.outgoing
            for bc in sorted(self.space.links_from(b, self.link_type), key=str):
                if bc.outgoing[1] != a and self._has_evidence(bc):
                    pairs.append((ab, bc))
        return pairs

    def run(self, commit: bool = False) -> List[Conclusion]:
        """
        Compute every deduction conclusion.

        Args:
            commit: Revise the conclusions into the space

        Returns:
            Conclusions that passed the consistency, circularity and
            confidence filters
        """
        pairs = self.collect()
        if not pairs:
            return []

        space, k = self.space, self.space.k
        term = self.rule.term_strength
        sA = torch.tensor([term(space, ab.outgoing[0]) for ab, _ in pairs], dtype=torch.float64)
        sB = torch.tensor([term(space, ab.outgoing[1]) for ab, _ in pairs], dtype=torch.float64)
        sC = torch.tensor([term(space, bc.outgoing[1]) for _, bc in pairs], dtype=torch.float64)
        sAB = torch.tensor([space.get_tv(ab).strength for ab, _ in pairs], dtype=torch.float64)
        sBC = torch.tensor([space.get_tv(bc).strength for _, bc in pairs], dtype=torch.float64)

        strengths = deduction_strength(sA, sB, sC, sAB, sBC)
        if self.config.check_consistency:
            ok = deduction_consistency(sA, sB, sAB) & deduction_consistency(sB, sC, sBC)
        else:
            ok = torch.ones_like(strengths, dtype=torch.bool)

        conclusions = []
        for i, (ab, bc) in enumerate(pairs):
            if not bool(ok[i]):
                continue
            atom = Link(self.link_type, (ab.outgoing[0], bc.outgoing[1]))
            trails = [space.get_trail(ab), space.get_trail(bc)]
            if any(atom in trail for trail in trails):
                continue
            count = self.rule.count([space.get_tv(ab).to_simple(k).count,
                                     space.get_tv(bc).to_simple(k).count])
            tv = SimpleTruthValue(float(strengths[i]), count)
            if tv.confidence(k) < self.config.min_confidence:
                continue
            trail = InferenceTrail.merge(*trails, head=(ab, bc), max_size=space.trail_max_size)
            conclusions.append(Conclusion(f"batch_{self.rule.id}", atom, tv, (ab, bc), trail))

        logger.info("Batch deduction: %d pairs, %d conclusions", len(pairs), len(conclusions))
        if commit:
            for conclusion in conclusions:
                if not self.config.revise_asserted and conclusion.atom in space \
                        and space.is_asserted(conclusion.atom):
                    continue
                space.revise(conclusion.atom, conclusion.tv, conclusion.trail)
        return conclusions
