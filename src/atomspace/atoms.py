"""
Atoms: the nodes and links of the knowledge hypergraph.

Atoms are immutable and identified by structure, so an atom built twice is
the same dictionary key. Truth values, attention and trails are not part of
the atom; the AtomSpace stores them alongside.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Set, Tuple, Union


class AtomType(str, Enum):
    """Node and link types."""
    CONCEPT = "ConceptNode"
    PREDICATE = "PredicateNode"
    VARIABLE = "VariableNode"

    INHERITANCE = "InheritanceLink"
    SIMILARITY = "SimilarityLink"
    IMPLICATION = "ImplicationLink"
    EVALUATION = "EvaluationLink"
    LIST = "ListLink"
    AND = "AndLink"
    OR = "OrLink"
    NOT = "NotLink"

    @property
    def is_node(self) -> bool:
        return self.value.endswith("Node")

    @property
    def is_link(self) -> bool:
        return self.value.endswith("Link")

    @classmethod
    def parse(cls, name: str) -> "AtomType":
        """Accept full names ("InheritanceLink") and short ones ("Inheritance")."""
        for atom_type in cls:
            if name in (atom_type.value, atom_type.value[:-4], atom_type.name):
                return atom_type
        raise ValueError(f"Unknown atom type: {name}")


# Links whose outgoing set has a fixed size
FIXED_ARITY = {
    AtomType.INHERITANCE: 2,
    AtomType.SIMILARITY: 2,
    AtomType.IMPLICATION: 2,
    AtomType.EVALUATION: 2,
    AtomType.NOT: 1,
}

# Links whose outgoing set is unordered
SYMMETRIC = {AtomType.SIMILARITY, AtomType.AND, AtomType.OR}


@dataclass(frozen=True)
class Node:
    """A named node."""

    type: AtomType
    name: str

    def __post_init__(self):
        if not isinstance(self.type, AtomType) or not self.type.is_node:
            raise ValueError(f"Not a node type: {self.type}")
        if not self.name:
            raise ValueError("Node name must be non-empty")

    @property
    def is_node(self) -> bool:
        return True

    @property
    def is_link(self) -> bool:
        return False

    @property
    def outgoing(self) -> Tuple["Atom", ...]:
        return ()

    def to_sexpr(self) -> str:
        if self.type == AtomType.VARIABLE:
            return f"${self.name}"
        escaped = self.name.replace("\\", "\\\\").replace('"', '\\"')
        return f'({self.type.value} "{escaped}")'

    def __str__(self) -> str:
        return self.to_sexpr()


@dataclass(frozen=True)
class Link:
    """A typed, ordered tuple of atoms."""

    type: AtomType
    outgoing: Tuple["Atom", ...]

    def __post_init__(self):
        if not isinstance(self.type, AtomType) or not self.type.is_link:
            raise ValueError(f"Not a link type: {self.type}")
        outgoing = tuple(self.outgoing)
        arity = FIXED_ARITY.get(self.type)
        if arity is not None and len(outgoing) != arity:
            raise ValueError(f"{self.type.value} takes {arity} atoms, got {len(outgoing)}")
        if not outgoing:
            raise ValueError(f"{self.type.value} needs at least one atom")
        if self.type in SYMMETRIC:
            outgoing = tuple(sorted(outgoing, key=_sort_key))
        object.__setattr__(self, "outgoing", outgoing)

    @property
    def is_node(self) -> bool:
        return False

    @property
    def is_link(self) -> bool:
        return True

    @property
    def arity(self) -> int:
        return len(self.outgoing)

    def to_sexpr(self) -> str:
        inner = " ".join(atom.to_sexpr() for atom in self.outgoing)
        return f"({self.type.value} {inner})"

    def __str__(self) -> str:
        return self.to_sexpr()


Atom = Union[Node, Link]


def _sort_key(atom: Atom) -> str:
    return atom.to_sexpr()


def is_variable(atom: Atom) -> bool:
    return isinstance(atom, Node) and atom.type == AtomType.VARIABLE


def iter_atoms(atom: Atom) -> Iterator[Atom]:
    """Depth-first walk over an atom and everything it contains."""
    yield atom
    for child in atom.outgoing:
        yield from iter_atoms(child)


def variables(atom: Atom) -> Set[Node]:
    return {a for a in iter_atoms(atom) if is_variable(a)}


def has_variables(atom: Atom) -> bool:
    return any(is_variable(a) for a in iter_atoms(atom))


def concept(name: str) -> Node:
    return Node(AtomType.CONCEPT, name)


def predicate(name: str) -> Node:
    return Node(AtomType.PREDICATE, name)


def variable(name: str) -> Node:
    return Node(AtomType.VARIABLE, name.lstrip("$"))


def inheritance(a: Atom, b: Atom) -> Link:
    return Link(AtomType.INHERITANCE, (a, b))


def similarity(a: Atom, b: Atom) -> Link:
    return Link(AtomType.SIMILARITY, (a, b))


def implication(a: Atom, b: Atom) -> Link:
    return Link(AtomType.IMPLICATION, (a, b))


def evaluation(pred: Atom, args: Atom) -> Link:
    return Link(AtomType.EVALUATION, (pred, args))


def list_(*atoms: Atom) -> Link:
    return Link(AtomType.LIST, atoms)


def and_(*atoms: Atom) -> Link:
    return Link(AtomType.AND, atoms)


def or_(*atoms: Atom) -> Link:
    return Link(AtomType.OR, atoms)


def not_(atom: Atom) -> Link:
    return Link(AtomType.NOT, (atom,))
