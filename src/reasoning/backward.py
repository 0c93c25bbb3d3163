"""
Backward chaining: derive a goal from the rules whose conclusions match it.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from atomspace.atoms import Atom, Link, Node, has_variables, is_variable, variable, variables
from atomspace.unify import Bindings, substitute
from truth.values import TruthValue

from .chainer import Chainer

logger = logging.getLogger(__name__)


@dataclass
class Answer:
    """A stored atom satisfying the query, with bindings for its variables."""
    atom: Atom
    tv: TruthValue
    bindings: Dict[Node, Atom] = field(default_factory=dict)


def canonical(atom: Atom) -> Atom:
    """Rename variables by order of appearance so alpha-equivalent goals compare equal."""
    renaming: Dict[Node, Node] = {}

    def walk(a: Atom) -> Atom:
        if is_variable(a):
            if a not in renaming:
                renaming[a] = variable(f"_{len(renaming)}")
            return renaming[a]
        if isinstance(a, Link):
            return Link(a.type, tuple(walk(child) for child in a.outgoing))
        return a

    return walk(atom)


class BackwardChainer(Chainer):
    """
    Goal-directed chainer.

    A goal is proven by unifying it with rule conclusions, proving the
    instantiated premises recursively (bounded by ``max_depth``), storing
    the derived conclusions and finally querying the space for the goal.
    A goal already being proven higher up the same branch is not expanded
    again.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._expanded: Set[Tuple[Atom, int]] = set()

    def prove(self, target: Atom, max_depth: Optional[int] = None) -> List[Answer]:
        """
        Prove ``target``, which may contain variables.

        Args:
            target: Ground atom or pattern
            max_depth: Rule applications allowed along one branch
                (default: config.max_depth; 0 only looks up stored atoms)

        Returns:
            Answers ordered by strength * confidence, best first
        """
        depth = self.config.max_depth if max_depth is None else max_depth
        if depth < 0:
            raise ValueError(f"max_depth must be non-negative: {depth}")
        self._expanded = set()
        logger.info("Backward chaining on %s (depth %d)", target, depth)

        goal_variables = variables(target)
        answers: Dict[Atom, Answer] = {}
        for bindings in self._solve(target, depth, ()):
            atom = substitute(target, bindings)
            if atom in answers or atom not in self.space:
                continue
            answers[atom] = Answer(
                atom=atom,
                tv=self.space.get_tv(atom),
                bindings={var: substitute(var, bindings) for var in goal_variables},
            )
        results = sorted(answers.values(), key=self._weight, reverse=True)
        logger.info("Found %d answers for %s", len(results), target)
        return results

    def _weight(self, answer: Answer) -> float:
        return answer.tv.strength * answer.tv.confidence(self.space.k)

    def _solve(self, goal: Atom, depth: int, stack: Tuple[Atom, ...]) -> List[Bindings]:
        key = canonical(goal)
        # A goal already open on this branch is only looked up
        if depth > 0 and key not in stack and (key, depth) not in self._expanded:
            self._expanded.add((key, depth))
            self._derive(goal, depth, stack + (key,))

        results = []
        for match in self.space.query(goal, min_confidence=self.config.min_confidence):
            if self.space.get_tv(match.atom).to_simple(self.space.k).count > 0:
                results.append(match.bindings)
        return results

    def _derive(self, goal: Atom, depth: int, stack: Tuple[Atom, ...]) -> None:
        for rule in self.rules:
            for rule_bindings, premises in rule.match_backward(goal):
                for solved in self._solve_all(self._order(premises), {}, depth - 1, stack):
                    ground = tuple(substitute(p, solved) for p in premises)
                    if any(has_variables(p) for p in ground):
                        continue
                    bindings = {var: substitute(value, solved)
                                for var, value in rule_bindings.items()}
                    conclusion = rule.conclude(self.space, ground, bindings)
                    if conclusion is not None:
                        self.record(conclusion)

    def _solve_all(self, premises: Sequence[Atom], bindings: Bindings, depth: int,
                   stack: Tuple[Atom, ...]) -> Iterator[Bindings]:
        if not premises:
            yield bindings
            return
        goal = substitute(premises[0], bindings)
        for found in self._solve(goal, depth, stack):
            yield from self._solve_all(premises[1:], {**bindings, **found}, depth, stack)

    @staticmethod
    def _order(premises: Sequence[Atom]) -> List[Atom]:
        """Bare variables last: they match everything until bound."""
        return sorted(premises, key=lambda p: (is_variable(p), len(variables(p))))
