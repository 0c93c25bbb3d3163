"""
Pattern-based inference rules.

A rule is a set of premise patterns and a conclusion pattern over shared
variables, plus a strength formula. The same rule object is used by the
forward chainer (start from a focus atom matching one premise, join the
rest against the AtomSpace) and by the backward chainer (unify the
conclusion with a goal, then prove the instantiated premises).
"""

import logging
from abc import ABC, abstractmethod
from itertools import count
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import torch

from atomspace.atoms import Atom, AtomType, Link, Node, has_variables, variable, variables
from atomspace.space import AtomSpace
from atomspace.trail import InferenceTrail
from atomspace.unify import Bindings, substitute, unify_all
from data.schema import ReasonerConfig
from truth.formulas import discounted_min_count
from truth.indefinite import propagate
from truth.values import IndefiniteTruthValue, SimpleTruthValue, TruthValue

logger = logging.getLogger(__name__)


@dataclass
class Conclusion:
    """The outcome of one rule application."""
    rule: str
    atom: Atom
    tv: TruthValue
    premises: Tuple[Atom, ...]
    trail: InferenceTrail
    bindings: Bindings = field(default_factory=dict)


class InferenceRule(ABC):
    """Base class for truth-value-propagating inference rules."""

    name: str = "rule"
    forward: bool = True
    discount: Optional[float] = None  # None: use config.confidence_discount
    _applications = count()

    def __init__(self, premises: Sequence[Atom], conclusion: Atom,
                 terms: Sequence[Atom] = (),
                 distinct: Sequence[Tuple[Node, Node]] = (),
                 config: Optional[ReasonerConfig] = None):
        self.premises = tuple(premises)
        self.conclusion = conclusion
        self.terms = tuple(terms)
        self.distinct = tuple(distinct)
        self.config = config or ReasonerConfig()

    @property
    def id(self) -> str:
        return f"{self.name}[{self.conclusion.type.value}]"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.id})"

    @abstractmethod
    def strength(self, *inputs: torch.Tensor) -> torch.Tensor:
        """Conclusion strength from premise strengths followed by term strengths."""
        pass

    def consistent(self, premise_strengths: List[float], term_strengths: List[float]) -> bool:
        """Whether the premises are probabilistically coherent."""
        return True

    def count(self, counts: List[float]) -> float:
        discount = self.discount if self.discount is not None else self.config.confidence_discount
        return discounted_min_count(*counts, discount=discount)

    # ------------------------------------------------------------------ #
    # Matching
    # ------------------------------------------------------------------ #

    def satisfies_distinct(self, bindings: Bindings) -> bool:
        for left, right in self.distinct:
            a, b = substitute(left, bindings), substitute(right, bindings)
            if a == b:
                return False
        return True

    def match_forward(self, space: AtomSpace, focus: Atom,
                      min_confidence: float = 0.0) -> Iterator[Tuple[Bindings, Tuple[Atom, ...]]]:
        """
        Premise tuples that include ``focus``.

        Yields:
            (bindings, premises) with every premise a stored atom
        """
        seen = set()
        for index, pattern in enumerate(self.premises):
            for bindings in unify_all(pattern, focus):
                remaining = [i for i in range(len(self.premises)) if i != index]
                for result, chosen in self._join(space, remaining, bindings, {index: focus},
                                                 min_confidence):
                    premises = tuple(chosen[i] for i in range(len(self.premises)))
                    key = (premises, substitute(self.conclusion, result))
                    if key not in seen:
                        seen.add(key)
                        yield result, premises

    def _join(self, space: AtomSpace, remaining: List[int], bindings: Bindings,
              chosen: Dict[int, Atom], min_confidence: float):
        if not remaining:
            if self.satisfies_distinct(bindings):
                yield bindings, chosen
            return
        index, rest = remaining[0], remaining[1:]
        pattern = substitute(self.premises[index], bindings)
        if not has_variables(pattern):
            if pattern in space and space.confidence(pattern) >= min_confidence:
                yield from self._join(space, rest, bindings, {**chosen, index: pattern},
                                      min_confidence)
            return
        for match in space.query(pattern, min_confidence=min_confidence):
            merged = {**bindings, **match.bindings}
            yield from self._join(space, rest, merged, {**chosen, index: match.atom},
                                  min_confidence)

    def match_backward(self, target: Atom) -> Iterator[Tuple[Bindings, Tuple[Atom, ...]]]:
        """
        Ways this rule could conclude ``target``.

        Yields:
            (bindings, premises): values for the rule's own variables and
            the premise patterns still to be proven. Both may mention fresh
            variables that proving the premises will bind.
        """
        renaming = self.fresh_variables()
        conclusion = substitute(self.conclusion, renaming)
        premises = [substitute(p, renaming) for p in self.premises]
        for unified in unify_all(conclusion, target):
            bindings = {var: substitute(fresh, unified) for var, fresh in renaming.items()}
            yield bindings, tuple(substitute(p, unified) for p in premises)

    def fresh_variables(self) -> Bindings:
        """Rename the rule's variables apart from every other application."""
        suffix = next(self._applications)
        names = set(variables(self.conclusion))
        for premise in self.premises:
            names |= variables(premise)
        return {var: variable(f"{var.name}_{suffix}") for var in names}

    def conclusion_for(self, premises: Tuple[Atom, ...], bindings: Bindings) -> Atom:
        return substitute(self.conclusion, bindings)

    # ------------------------------------------------------------------ #
    # Truth value computation
    # ------------------------------------------------------------------ #

    def term_strength(self, space: AtomSpace, atom: Atom) -> float:
        """Probability of a term; terms without evidence get the configured default."""
        if atom not in space:
            return self.config.default_node_strength
        tv = space.get_tv(atom)
        if tv.to_simple(space.k).count <= 0:
            return self.config.default_node_strength
        return tv.strength

    def conclude(self, space: AtomSpace, premises: Tuple[Atom, ...],
                 bindings: Bindings) -> Optional[Conclusion]:
        """
        Compute the conclusion of applying this rule to stored premises.

        Returns None when the rule does not apply: missing evidence, an
        ungrounded conclusion, circular evidence, incoherent premises or a
        conclusion below the minimum confidence.
        """
        atom = self.conclusion_for(premises, bindings)
        if has_variables(atom) or not self.satisfies_distinct(bindings):
            return None
        if atom in premises:
            return None

        premise_tvs = [space.get_tv(p) for p in premises]
        counts = [tv.to_simple(space.k).count for tv in premise_tvs]
        if any(n <= 0 for n in counts):
            return None

        trails = [space.get_trail(p) for p in premises]
        if any(atom in trail for trail in trails):
            logger.debug("%s: %s would support itself, skipped", self.id, atom)
            return None

        term_strengths = [self.term_strength(space, substitute(t, bindings)) for t in self.terms]
        premise_strengths = [tv.strength for tv in premise_tvs]
        if self.config.check_consistency and not self.consistent(premise_strengths, term_strengths):
            logger.debug("%s: inconsistent premises for %s", self.id, atom)
            return None

        if any(tv.is_indefinite for tv in premise_tvs):
            settings = self.config.indefinite
            tv = propagate(
                lambda *samples: self.strength(*samples, *term_strengths),
                premise_tvs,
                credibility=settings.credibility,
                lookahead=settings.lookahead,
                n_first_order=settings.n_first_order,
                n_second_order=settings.n_second_order,
                seed=self.config.seed,
                k=space.k,
            )
            # Sampling narrows the interval; evidence stays bounded by the weakest premise
            count = min(tv.to_simple(space.k).count, self.count(counts))
            if count <= 0:
                return None
            tv = IndefiniteTruthValue.from_simple(SimpleTruthValue(tv.mean, count),
                                                  settings.credibility, settings.lookahead,
                                                  space.k)
        else:
            strength = float(self.strength(*premise_strengths, *term_strengths))
            count = self.count(counts)
            if count <= 0:
                return None
            tv = SimpleTruthValue(strength, count)

        if tv.confidence(space.k) < self.config.min_confidence:
            return None

        trail = InferenceTrail.merge(*trails, head=premises, max_size=space.trail_max_size)
        return Conclusion(self.id, atom, tv, tuple(premises), trail, bindings)


class LinkRule(InferenceRule):
    """A rule over binary links of one type (inheritance or implication)."""

    link_types: Tuple[AtomType, ...] = (AtomType.INHERITANCE, AtomType.IMPLICATION)

    def __init__(self, link_type: AtomType = AtomType.INHERITANCE,
                 config: Optional[ReasonerConfig] = None):
        if link_type not in self.link_types:
            raise ValueError(f"{self.name} does not apply to {link_type.value}")
        self.link_type = link_type
        premises, conclusion, terms, distinct = self.build()
        super().__init__(premises, conclusion, terms, distinct, config)

    @property
    def id(self) -> str:
        return f"{self.name}[{self.link_type.value}]"

    @abstractmethod
    def build(self):
        """Return (premises, conclusion, terms, distinct) for ``self.link_type``."""
        pass

    def link(self, a: Atom, b: Atom) -> Link:
        return Link(self.link_type, (a, b))
