"""
Shared chainer machinery: recording conclusions and explaining them.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from atomspace.atoms import Atom
from atomspace.space import AtomSpace
from data.schema import ReasonerConfig
from rules.base import Conclusion, InferenceRule
from rules.registry import RuleRegistry, create_default_rules
from truth.values import TruthValue

logger = logging.getLogger(__name__)


class ProofOrigin(str, Enum):
    """Where an atom's truth value came from."""
    ASSERTED = "asserted"
    INFERRED = "inferred"
    UNKNOWN = "unknown"


@dataclass
class ProofNode:
    """
    A node in a proof tree.

    Children are the premises of the inference that produced ``atom``.
    """
    atom: Atom
    tv: Optional[TruthValue]
    origin: ProofOrigin
    rule: Optional[str] = None
    confidence: float = 0.0
    children: List["ProofNode"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "atom": self.atom.to_sexpr(),
            "tv": self.tv.to_dict() if self.tv is not None else None,
            "origin": self.origin.value,
            "rule": self.rule,
            "confidence": self.confidence,
            "children": [child.to_dict() for child in self.children],
        }

    def depth(self) -> int:
        return 1 + max((child.depth() for child in self.children), default=0)


@dataclass
class Explanation:
    """Why an atom has the truth value it has."""
    atom: Atom
    exists: bool
    is_asserted: bool
    is_inferred: bool
    rules_applied: List[str] = field(default_factory=list)
    supporting_atoms: List[Atom] = field(default_factory=list)
    proof_tree: Optional[ProofNode] = None
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "atom": self.atom.to_sexpr(),
            "exists": self.exists,
            "is_asserted": self.is_asserted,
            "is_inferred": self.is_inferred,
            "rules_applied": self.rules_applied,
            "supporting_atoms": [atom.to_sexpr() for atom in self.supporting_atoms],
            "proof_tree": self.proof_tree.to_dict() if self.proof_tree else None,
            "confidence": self.confidence,
        }


class Chainer:
    """Base class for the forward and backward chainers."""

    def __init__(self, space: AtomSpace,
                 rules: Optional[Union[RuleRegistry, Sequence[InferenceRule]]] = None,
                 config: Optional[ReasonerConfig] = None):
        self.space = space
        self.config = config or ReasonerConfig()
        if rules is None:
            rules = create_default_rules(self.config)
        elif not isinstance(rules, RuleRegistry):
            rules = RuleRegistry(list(rules))
        self.rules = rules
        self.history: Dict[Atom, List[Conclusion]] = defaultdict(list)

    def record(self, conclusion: Conclusion) -> bool:
        """
        Store a conclusion in the space, revising any existing truth value.

        Returns:
            True if the atom is new or its truth value changed
        """
        if not self.config.revise_asserted and conclusion.atom in self.space \
                and self.space.is_asserted(conclusion.atom):
            logger.debug("%s: %s is a given fact, conclusion not recorded",
                         conclusion.rule, conclusion.atom)
            return False
        is_new = conclusion.atom not in self.space
        changed = self.space.revise(conclusion.atom, conclusion.tv, conclusion.trail)
        if not (is_new or changed):
            return False
        self.history[conclusion.atom].append(conclusion)

        factor = self.config.attention.inferred_importance_factor
        importance = [self.space.get_attention(p).importance for p in conclusion.premises]
        if factor > 0 and importance:
            self.space.boost(conclusion.atom, factor * sum(importance) / len(importance))
        logger.debug("%s: %s %s", conclusion.rule, conclusion.atom, conclusion.tv)
        return True

    def discard(self, atoms: Iterable[Atom]) -> None:
        """Forget the history of atoms removed from the space."""
        for atom in atoms:
            self.history.pop(atom, None)

    def explain(self, atom: Atom, max_depth: int = 10) -> Explanation:
        """Build the proof tree behind ``atom`` from this chainer's history."""
        if atom not in self.space:
            return Explanation(atom, exists=False, is_asserted=False, is_inferred=False)

        tree = self._proof_node(atom, max_depth, set())
        conclusions = self.history.get(atom, [])
        supporting: List[Atom] = []
        for conclusion in conclusions:
            for premise in conclusion.premises:
                if premise not in supporting:
                    supporting.append(premise)
        return Explanation(
            atom=atom,
            exists=True,
            is_asserted=self.space.is_asserted(atom),
            is_inferred=bool(conclusions),
            rules_applied=[c.rule for c in conclusions],
            supporting_atoms=supporting,
            proof_tree=tree,
            confidence=self.space.confidence(atom),
        )

    def _proof_node(self, atom: Atom, depth: int, visiting: set) -> ProofNode:
        tv = self.space.get_tv(atom) if atom in self.space else None
        confidence = tv.confidence(self.space.k) if tv is not None else 0.0
        conclusions = self.history.get(atom)
        if not conclusions:
            asserted = atom in self.space and self.space.is_asserted(atom)
            origin = ProofOrigin.ASSERTED if asserted else ProofOrigin.UNKNOWN
            return ProofNode(atom, tv, origin, confidence=confidence)

        latest = conclusions[-1]
        node = ProofNode(atom, tv, ProofOrigin.INFERRED, latest.rule, confidence)
        if depth <= 0 or atom in visiting:
            return node
        visiting = visiting | {atom}
        node.children = [self._proof_node(p, depth - 1, visiting) for p in latest.premises]
        return node
