"""
Unification of atom patterns containing variables.
"""

from itertools import permutations
from typing import Dict, Iterator, Optional

from .atoms import Atom, Link, Node, SYMMETRIC, is_variable

Bindings = Dict[Node, Atom]

# Symmetric links with more atoms than this are matched positionally
MAX_PERMUTED_ARITY = 4


def resolve(atom: Atom, bindings: Bindings) -> Atom:
    """Follow variable-to-variable bindings, stopping on cycles."""
    seen = set()
    while is_variable(atom) and atom in bindings and atom not in seen:
        seen.add(atom)
        atom = bindings[atom]
    return atom


def substitute(atom: Atom, bindings: Bindings) -> Atom:
    """Replace bound variables throughout ``atom``."""
    if not bindings:
        return atom
    if is_variable(atom):
        value = resolve(atom, bindings)
        if value == atom or is_variable(value):
            return value
        return substitute(value, bindings)
    if isinstance(atom, Link):
        return Link(atom.type, tuple(substitute(child, bindings) for child in atom.outgoing))
    return atom


def _occurs(var: Node, atom: Atom, bindings: Bindings) -> bool:
    atom = resolve(atom, bindings)
    if atom == var:
        return True
    return any(_occurs(var, child, bindings) for child in atom.outgoing)


def _bind(var: Node, value: Atom, bindings: Bindings) -> Optional[Bindings]:
    if var == value:
        return bindings
    if _occurs(var, value, bindings):
        return None
    extended = dict(bindings)
    extended[var] = value
    return extended


def _unify(left: Atom, right: Atom, bindings: Bindings) -> Iterator[Bindings]:
    left = resolve(left, bindings)
    right = resolve(right, bindings)
    if left == right:
        yield bindings
        return
    if is_variable(left):
        result = _bind(left, right, bindings)
        if result is not None:
            yield result
        return
    if is_variable(right):
        result = _bind(right, left, bindings)
        if result is not None:
            yield result
        return
    if not (isinstance(left, Link) and isinstance(right, Link)):
        return
    if left.type != right.type or left.arity != right.arity:
        return

    if left.type in SYMMETRIC and left.arity <= MAX_PERMUTED_ARITY:
        orders = permutations(right.outgoing)
    else:
        orders = iter([right.outgoing])
    for order in orders:
        yield from _unify_sequence(left.outgoing, order, bindings)


def _unify_sequence(lefts, rights, bindings: Bindings) -> Iterator[Bindings]:
    if not lefts:
        yield bindings
        return
    for partial in _unify(lefts[0], rights[0], bindings):
        yield from _unify_sequence(lefts[1:], rights[1:], partial)


def unify_all(pattern: Atom, target: Atom,
              bindings: Optional[Bindings] = None) -> Iterator[Bindings]:
    """All ways ``pattern`` and ``target`` unify (several for symmetric links)."""
    seen = []
    for result in _unify(pattern, target, dict(bindings or {})):
        if result not in seen:
            seen.append(result)
            yield result


def unify(pattern: Atom, target: Atom,
          bindings: Optional[Bindings] = None) -> Optional[Bindings]:
    """
    Most general unifier of two atoms, extending ``bindings``.

    Returns:
        New bindings dict, or None if the atoms do not unify
    """
    return next(unify_all(pattern, target, bindings), None)
