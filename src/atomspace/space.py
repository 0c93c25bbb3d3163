"""
The AtomSpace: an in-memory hypergraph of atoms with truth values.

Adding an atom that is already present revises its truth value with the new
evidence. Revision only merges evidence whose inference trails are
disjoint; overlapping evidence is not double counted, the more confident of
the two truth values is kept instead.
"""

import heapq
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from truth.values import TruthValue, DEFAULT_TV, DEFAULT_K, revise

from .atoms import Atom, AtomType, Link, Node, is_variable
from .attention import (
    AttentionValue, BOOST_ON_ACCESS, BOOST_ON_REVISION_MAX, REVISION_CONFIDENCE_THRESHOLD
)
from .trail import InferenceTrail, DEFAULT_TRAIL_SIZE
from .unify import Bindings, unify_all

logger = logging.getLogger(__name__)

DEFAULT_FORGET_THRESHOLD = 0.02
DEFAULT_TARGET_FRACTION = 0.8


@dataclass
class AtomRecord:
    """Everything the space knows about one atom."""
    tv: TruthValue
    attention: AttentionValue = field(default_factory=AttentionValue)
    trail: Optional[InferenceTrail] = None
    asserted: bool = False
    updated_at: int = 0


@dataclass
class Match:
    """A stored atom matching a query pattern, with the variable bindings."""
    atom: Atom
    bindings: Bindings


class AtomSpace:
    """Hypergraph store with type, incoming-set and attention bookkeeping."""

    def __init__(self, k: float = DEFAULT_K, trail_max_size: int = DEFAULT_TRAIL_SIZE):
        self.k = k
        self.trail_max_size = trail_max_size
        self.time = 0
        self._records: Dict[Atom, AtomRecord] = {}
        self._by_type: Dict[AtomType, Set[Atom]] = defaultdict(set)
        self._incoming: Dict[Atom, Set[Link]] = defaultdict(set)

    # ------------------------------------------------------------------ #
    # Adding and revising
    # ------------------------------------------------------------------ #

    def add(self, atom: Atom, tv: Optional[TruthValue] = None,
            trail: Optional[InferenceTrail] = None, asserted: bool = True) -> Atom:
        """
        Add an atom, or revise it if it is already present.

        Args:
            atom: Node or link; a link's outgoing atoms are added too
            tv: Truth value carrying the new evidence (None: no evidence)
            trail: Evidence trail of ``tv``; defaults to the atom itself
            asserted: Whether the atom is a given fact rather than a conclusion

        Returns:
            The atom
        """
        self.revise(atom, tv, trail, asserted)
        return atom

    def revise(self, atom: Atom, tv: Optional[TruthValue] = None,
               trail: Optional[InferenceTrail] = None, asserted: bool = False) -> bool:
        """Add or revise ``atom``; returns True if its truth value changed."""
        self.time += 1
        record = self._records.get(atom)
        if record is None:
            for child in atom.outgoing:
                if child not in self._records:
                    self.revise(child, asserted=False)
            self._records[atom] = AtomRecord(
                tv=tv if tv is not None else DEFAULT_TV,
                trail=trail if trail is not None else InferenceTrail.axiom(atom, self.trail_max_size),
                asserted=asserted,
                updated_at=self.time,
            )
            self._index(atom)
            return tv is not None

        if asserted:
            record.asserted = True
        record.attention = record.attention.boost(BOOST_ON_ACCESS * 0.1)
        if tv is None:
            return False
        return self._merge(atom, record, tv, trail)

    def _merge(self, atom: Atom, record: AtomRecord, tv: TruthValue,
               trail: Optional[InferenceTrail]) -> bool:
        # Direct observations (no trail) are always new evidence
        independent = trail is None or record.trail is None or not record.trail.overlaps(trail)
        if trail is None:
            trail = InferenceTrail.axiom(atom, self.trail_max_size)
        old = record.tv
        new_count = tv.to_simple(self.k).count
        old_count = old.to_simple(self.k).count
        if new_count <= 0:
            return False

        if old_count <= 0:
            record.tv, record.trail = tv, trail
        elif independent:
            record.tv = revise(old, tv, self.k)
            record.trail = InferenceTrail.merge(
                *(t for t in (trail, record.trail) if t is not None),
                max_size=self.trail_max_size,
            )
        elif tv.confidence(self.k) > old.confidence(self.k):
            logger.debug("Overlapping evidence for %s, keeping the more confident value", atom)
            record.tv, record.trail = tv, trail
        else:
            return False

        record.updated_at = self.time
        gain = record.tv.confidence(self.k) - old.confidence(self.k)
        if gain > REVISION_CONFIDENCE_THRESHOLD:
            record.attention = record.attention.boost(
                min(BOOST_ON_REVISION_MAX, BOOST_ON_REVISION_MAX * record.tv.confidence(self.k))
            )
        return record.tv != old

    def set_tv(self, atom: Atom, tv: TruthValue) -> None:
        """Overwrite a truth value without revision."""
        self._record(atom).tv = tv
        self._record(atom).updated_at = self.time

    def remove(self, atom: Atom, recursive: bool = False) -> None:
        """
        Remove an atom.

        Raises:
            KeyError: atom is not in the space
            ValueError: atom is referenced by links and ``recursive`` is False
        """
        self._record(atom)
        incoming = list(self._incoming.get(atom, ()))
        if incoming and not recursive:
            raise ValueError(f"{atom} has {len(incoming)} incoming links")
        for link in incoming:
            if link in self._records:
                self.remove(link, recursive=True)
        del self._records[atom]
        self._by_type[atom.type].discard(atom)
        self._incoming.pop(atom, None)
        for child in atom.outgoing:
            self._incoming[child].discard(atom)

    def _index(self, atom: Atom) -> None:
        self._by_type[atom.type].add(atom)
        for child in atom.outgoing:
            self._incoming[child].add(atom)

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    def _record(self, atom: Atom) -> AtomRecord:
        try:
            return self._records[atom]
        except KeyError:
            raise KeyError(f"Atom not in space: {atom}") from None

    def get_record(self, atom: Atom) -> AtomRecord:
        return self._record(atom)

    def get_tv(self, atom: Atom) -> TruthValue:
        return self._record(atom).tv

    def get_trail(self, atom: Atom) -> InferenceTrail:
        record = self._record(atom)
        return record.trail if record.trail is not None else InferenceTrail.axiom(atom)

    def get_attention(self, atom: Atom) -> AttentionValue:
        return self._record(atom).attention

    def is_asserted(self, atom: Atom) -> bool:
        return self._record(atom).asserted

    def confidence(self, atom: Atom) -> float:
        return self.get_tv(atom).confidence(self.k)

    def get_atoms_by_type(self, atom_type: AtomType) -> List[Atom]:
        return list(self._by_type.get(atom_type, ()))

    def get_incoming(self, atom: Atom, link_type: Optional[AtomType] = None) -> List[Link]:
        links = self._incoming.get(atom, ())
        return [link for link in links if link_type is None or link.type == link_type]

    def links_from(self, atom: Atom, link_type: AtomType) -> List[Link]:
        """Binary links of ``link_type`` whose first atom is ``atom``."""
        return [link for link in self.get_incoming(atom, link_type) if link.outgoing[0] == atom]

    def links_to(self, atom: Atom, link_type: AtomType) -> List[Link]:
        """Binary links of ``link_type`` whose last atom is ``atom``."""
        return [link for link in self.get_incoming(atom, link_type) if link.outgoing[-1] == atom]

    def nodes(self) -> List[Node]:
        return [atom for atom in self._records if isinstance(atom, Node)]

    def links(self) -> List[Link]:
        return [atom for atom in self._records if isinstance(atom, Link)]

    def _candidates(self, pattern: Atom) -> Iterable[Atom]:
        if is_variable(pattern):
            return list(self._records)
        if isinstance(pattern, Node):
            return [pattern] if pattern in self._records else []
        # The incoming set of a ground argument is usually far smaller than the type index
        for child in pattern.outgoing:
            if not is_variable(child) and child in self._records:
                return [link for link in self._incoming.get(child, ()) if link.type == pattern.type]
        return list(self._by_type.get(pattern.type, ()))

    def query(self, pattern: Atom, min_confidence: float = 0.0,
              boost: bool = False) -> List[Match]:
        """
        Find stored atoms unifying with ``pattern``.

        Results are ordered by strength * confidence, best first.
        """
        matches = []
        for candidate in self._candidates(pattern):
            record = self._records[candidate]
            if record.tv.confidence(self.k) < min_confidence:
                continue
            for bindings in unify_all(pattern, candidate):
                matches.append(Match(candidate, bindings))
        matches.sort(key=lambda m: self._weight(m.atom), reverse=True)
        if boost:
            for match in matches:
                self.boost(match.atom, BOOST_ON_ACCESS)
        return matches

    def _weight(self, atom: Atom) -> float:
        tv = self._records[atom].tv
        return tv.strength * tv.confidence(self.k)

    # ------------------------------------------------------------------ #
    # Attention
    # ------------------------------------------------------------------ #

    def boost(self, atom: Atom, amount: float) -> None:
        record = self._record(atom)
        record.attention = record.attention.boost(amount)

    def decay_all(self) -> None:
        for record in self._records.values():
            record.attention = record.attention.decay()

    def forget(self, threshold: float = DEFAULT_FORGET_THRESHOLD,
               protected: Iterable[Atom] = (),
               max_atoms: Optional[int] = None,
               target_fraction: float = DEFAULT_TARGET_FRACTION) -> List[Atom]:
        """
        Remove unimportant atoms.

        Unprotected atoms whose importance fell below ``threshold`` go first.
        If more than ``max_atoms`` remain, the least important of the rest are
        removed until ``target_fraction * max_atoms`` are left. Variables and
        atoms still referenced by links are never removed. Atoms go in order
        of importance, links before nodes of equal importance; a node
        becomes a candidate as soon as its last link is removed.
        """
        keep = set(protected)
        removed = self._remove_least_important(
            [atom for atom, record in self._records.items()
             if atom not in keep and record.attention.importance < threshold]
        )
        if max_atoms is not None and len(self) > max_atoms:
            target = int(max_atoms * target_fraction)
            removed.extend(self._remove_least_important(
                [atom for atom in self._records if atom not in keep],
                limit=len(self) - target,
            ))
            if len(self) > max_atoms:
                logger.warning("Space holds %d atoms after forgetting, above the bound of %d",
                               len(self), max_atoms)
        if removed:
            logger.info("Forgot %d low-importance atoms, %d remain", len(removed), len(self))
        return removed

    def _remove_least_important(self, candidates: List[Atom],
                                limit: Optional[int] = None) -> List[Atom]:
        allowed = {atom for atom in candidates if not is_variable(atom)}
        heap = [(self._forget_key(atom), atom) for atom in allowed if not self._incoming.get(atom)]
        heapq.heapify(heap)
        removed: List[Atom] = []
        while heap and (limit is None or len(removed) < limit):
            _, atom = heapq.heappop(heap)
            if atom not in self._records or self._incoming.get(atom):
                continue
            self.remove(atom)
            removed.append(atom)
            # Outgoing atoms become candidates once their last incoming link is gone
            for child in dict.fromkeys(atom.outgoing):
                if child in allowed and child in self._records and not self._incoming.get(child):
                    heapq.heappush(heap, (self._forget_key(child), child))
        return removed

    def _forget_key(self, atom: Atom) -> Tuple[float, bool, str]:
        return self._records[atom].attention.importance, isinstance(atom, Node), atom.to_sexpr()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, atom: Atom) -> bool:
        return atom in self._records

    def __iter__(self) -> Iterator[Atom]:
        return iter(list(self._records))
