"""
Inference trails.

A trail records which atoms' evidence went into a truth value. Trails let
the reasoner refuse circular inferences (using a conclusion as evidence for
itself) and decide whether two truth values may be revised together.
"""

from typing import Iterable, Iterator, Tuple

from .atoms import Atom

DEFAULT_TRAIL_SIZE = 100


class InferenceTrail:
    """Bounded, ordered set of contributing atoms, newest first."""

    __slots__ = ("_atoms", "_members")

    def __init__(self, atoms: Iterable[Atom] = (), max_size: int = DEFAULT_TRAIL_SIZE):
        if max_size < 1:
            raise ValueError(f"Trail size must be positive: {max_size}")
        ordered = []
        seen = set()
        for atom in atoms:
            if atom not in seen:
                seen.add(atom)
                ordered.append(atom)
            if len(ordered) >= max_size:
                break
        self._atoms: Tuple[Atom, ...] = tuple(ordered)
        self._members = frozenset(self._atoms)

    @classmethod
    def axiom(cls, atom: Atom, max_size: int = DEFAULT_TRAIL_SIZE) -> "InferenceTrail":
        """Trail of an asserted atom: its evidence is its own."""
        return cls((atom,), max_size)

    @classmethod
    def merge(cls, *trails: "InferenceTrail", head: Iterable[Atom] = (),
              max_size: int = DEFAULT_TRAIL_SIZE) -> "InferenceTrail":
        """
        Union of trails.

        ``head`` atoms (usually the premises of a fresh inference) come first,
        so truncation drops the oldest evidence.
        """
        atoms = list(head)
        for trail in trails:
            atoms.extend(trail)
        return cls(atoms, max_size)

    def contains(self, atom: Atom) -> bool:
        return atom in self._members

    def overlaps(self, other: "InferenceTrail") -> bool:
        return not self._members.isdisjoint(other._members)

    def __contains__(self, atom: Atom) -> bool:
        return self.contains(atom)

    def __iter__(self) -> Iterator[Atom]:
        return iter(self._atoms)

    def __len__(self) -> int:
        return len(self._atoms)

    def __eq__(self, other) -> bool:
        return isinstance(other, InferenceTrail) and self._atoms == other._atoms

    def __hash__(self) -> int:
        return hash(self._atoms)

    def __repr__(self) -> str:
        return f"InferenceTrail({len(self._atoms)} atoms)"
