"""
Forward chaining: apply rules outward from the most important atoms.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from tqdm import tqdm

from atomspace.atoms import Atom, Node
from atomspace.attention import BOOST_ON_ACCESS
from rules.base import Conclusion

from .chainer import Chainer

logger = logging.getLogger(__name__)


@dataclass
class ChainerResult:
    """Conclusions recorded by one run and why the run stopped."""
    inferences: List[Conclusion] = field(default_factory=list)
    steps: int = 0
    stopped_reason: str = ""

    @property
    def atoms(self) -> List[Atom]:
        return [c.atom for c in self.inferences]

    def __len__(self) -> int:
        return len(self.inferences)


class ForwardChainer(Chainer):
    """
    Agenda-driven forward chainer.

    Each step takes the ``batch_size`` most promising atoms off the agenda
    (importance * confidence), uses each as the focus of every forward rule
    and records the conclusions. Atoms that are new or changed go back on
    the agenda. A (rule, premises) combination is only ever tried once.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._executed: Set[Tuple[str, Tuple[Atom, ...], Atom]] = set()

    def priority(self, atom: Atom) -> float:
        return self.space.get_attention(atom).importance * self.space.confidence(atom)

    def default_sources(self) -> List[Atom]:
        """Links with evidence and at least the minimum confidence."""
        sources = []
        for link in self.space.links():
            tv = self.space.get_tv(link)
            if tv.to_simple(self.space.k).count > 0 and \
                    tv.confidence(self.space.k) >= self.config.min_confidence:
                sources.append(link)
        return sources

    def run(self, steps: Optional[int] = None,
            sources: Optional[Iterable[Atom]] = None) -> ChainerResult:
        """
        Chain until the agenda empties or a limit is hit.

        Args:
            steps: Maximum number of steps (default: config.max_steps)
            sources: Initial agenda (default: every link with evidence)

        Returns:
            ChainerResult with the recorded conclusions
        """
        max_steps = steps if steps is not None else self.config.max_steps
        agenda: Dict[Atom, None] = dict.fromkeys(
            sources if sources is not None else self.default_sources()
        )
        result = ChainerResult()
        rules = self.rules.forward_rules
        logger.info("Forward chaining: %d sources, %d rules, at most %d steps",
                    len(agenda), len(rules), max_steps)

        progress = tqdm(total=max_steps, desc="Forward chaining",
                        disable=not self.config.show_progress)
        while True:
            if result.steps >= max_steps:
                result.stopped_reason = "max_steps"
                break
            agenda = {atom: None for atom in agenda if atom in self.space}
            if not agenda:
                result.stopped_reason = "empty_agenda"
                break

            batch = sorted(agenda, key=self.priority, reverse=True)[:self.config.batch_size]
            for atom in batch:
                del agenda[atom]

            new_atoms = self._step(batch, rules, result)
            result.steps += 1
            progress.update(1)
            progress.set_postfix({"inferences": len(result.inferences), "agenda": len(agenda)})
            for atom in new_atoms:
                agenda[atom] = None
            self._maintain_attention(result.steps)

            if len(result.inferences) >= self.config.max_inferences:
                result.stopped_reason = "max_inferences"
                break
            if not new_atoms and not agenda:
                result.stopped_reason = "quiescence"
                break
        progress.close()

        logger.info("Forward chaining stopped (%s) after %d steps with %d inferences",
                    result.stopped_reason, result.steps, len(result.inferences))
        return result

    def _step(self, batch: List[Atom], rules, result: ChainerResult) -> List[Atom]:
        new_atoms: List[Atom] = []
        for focus in batch:
            self.space.boost(focus, BOOST_ON_ACCESS)
            for rule in rules:
                for bindings, premises in rule.match_forward(
                        self.space, focus, self.config.min_confidence):
                    signature = (rule.id, premises, rule.conclusion_for(premises, bindings))
                    if signature in self._executed:
                        continue
                    self._executed.add(signature)

                    conclusion = rule.conclude(self.space, premises, bindings)
                    if conclusion is None or not self.record(conclusion):
                        continue
                    result.inferences.append(conclusion)
                    if conclusion.atom not in new_atoms:
                        new_atoms.append(conclusion.atom)
                    if len(result.inferences) >= self.config.max_inferences:
                        return new_atoms
        return new_atoms

    def _maintain_attention(self, step: int) -> None:
        settings = self.config.attention
        if settings.decay_every and step % settings.decay_every == 0:
            self.space.decay_all()
        over_bound = settings.max_atoms is not None and len(self.space) > settings.max_atoms
        if settings.forget_threshold > 0 or over_bound:
            protected = [atom for atom in self.space if self.space.is_asserted(atom)]
            protected.extend(
                atom for atom in self.space
                if isinstance(atom, Node) and atom.name in settings.protected
            )
            removed = self.space.forget(settings.forget_threshold, protected,
                                        settings.max_atoms, settings.target_fraction)
            self.discard(removed)

    def discard(self, atoms: Iterable[Atom]) -> None:
        """Forget the history and tried signatures involving removed atoms."""
        gone = set(atoms)
        if not gone:
            return
        super().discard(gone)
        self._executed = {
            signature for signature in self._executed
            if signature[2] not in gone and gone.isdisjoint(signature[1])
        }
