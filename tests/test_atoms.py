"""
Unit tests for atoms, unification, trails and attention values.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from atomspace.atoms import (
    AtomType, Link, Node, concept, predicate, variable, inheritance, similarity,
    evaluation, list_, and_, not_, has_variables, variables
)
from atomspace.attention import AttentionValue, INITIAL_STI
from atomspace.trail import InferenceTrail
from atomspace.unify import unify, unify_all, substitute, resolve


class TestAtoms:
    """Test node and link construction."""

    def test_nodes_are_values(self):
        assert concept("cat") == concept("cat")
        assert hash(concept("cat")) == hash(concept("cat"))
        assert concept("cat") != predicate("cat")

    def test_empty_name(self):
        with pytest.raises(ValueError):
            concept("")

    def test_wrong_type(self):
        with pytest.raises(ValueError):
            Node(AtomType.INHERITANCE, "cat")
        with pytest.raises(ValueError):
            Link(AtomType.CONCEPT, (concept("cat"),))

    def test_arity(self):
        """Test that fixed-arity links check their size."""
        a, b, c = concept("a"), concept("b"), concept("c")
        with pytest.raises(ValueError):
            Link(AtomType.INHERITANCE, (a, b, c))
        with pytest.raises(ValueError):
            Link(AtomType.NOT, (a, b))
        with pytest.raises(ValueError):
            and_()
        assert and_(a, b, c).arity == 3

    def test_symmetric_links_are_canonical(self):
        cat, dog = concept("cat"), concept("dog")
        assert similarity(cat, dog) == similarity(dog, cat)
        assert and_(cat, dog) == and_(dog, cat)
        assert inheritance(cat, dog) != inheritance(dog, cat)

    def test_sexpr(self):
        link = inheritance(concept("cat"), concept("animal"))
        assert link.to_sexpr() == '(InheritanceLink (ConceptNode "cat") (ConceptNode "animal"))'
        assert variable("$x").to_sexpr() == "$x"
        assert str(not_(concept("cat"))) == '(NotLink (ConceptNode "cat"))'

    def test_parse_type(self):
        assert AtomType.parse("InheritanceLink") == AtomType.INHERITANCE
        assert AtomType.parse("Inheritance") == AtomType.INHERITANCE
        assert AtomType.parse("CONCEPT") == AtomType.CONCEPT
        with pytest.raises(ValueError):
            AtomType.parse("Foo")

    def test_variables(self):
        x, y = variable("x"), variable("y")
        atom = evaluation(predicate("likes"), list_(x, concept("fish"), y))
        assert variables(atom) == {x, y}
        assert has_variables(atom)
        assert not has_variables(inheritance(concept("a"), concept("b")))


class TestUnify:
    """Test unification and substitution."""

    def setup_method(self):
        self.x, self.y = variable("x"), variable("y")
        self.cat, self.dog, self.animal = concept("cat"), concept("dog"), concept("animal")

    def test_simple_binding(self):
        bindings = unify(inheritance(self.x, self.animal), inheritance(self.cat, self.animal))
        assert bindings == {self.x: self.cat}

    def test_mismatch(self):
        assert unify(inheritance(self.x, self.animal), inheritance(self.cat, self.dog)) is None
        assert unify(inheritance(self.x, self.animal), similarity(self.cat, self.animal)) is None

    def test_repeated_variable(self):
        pattern = inheritance(self.x, self.x)
        assert unify(pattern, inheritance(self.cat, self.dog)) is None
        assert unify(pattern, inheritance(self.cat, self.cat)) == {self.x: self.cat}

    def test_occurs_check(self):
        assert unify(self.x, inheritance(self.x, self.animal)) is None

    def test_variable_chains(self):
        """Test that variable-to-variable bindings are followed."""
        bindings = unify(inheritance(self.x, self.y), inheritance(self.y, self.cat))
        assert bindings is not None
        assert substitute(self.x, bindings) == self.cat
        assert substitute(inheritance(self.x, self.y), bindings) == inheritance(self.cat, self.cat)

    def test_extends_bindings(self):
        bindings = unify(self.y, self.dog, {self.x: self.cat})
        assert bindings == {self.x: self.cat, self.y: self.dog}

    def test_symmetric_links(self):
        results = list(unify_all(similarity(self.x, self.cat), similarity(self.cat, self.dog)))
        assert results == [{self.x: self.dog}]

    def test_symmetric_links_with_two_variables(self):
        results = list(unify_all(similarity(self.x, self.y), similarity(self.cat, self.dog)))
        assert len(results) == 2

    def test_resolve_stops_on_cycles(self):
        assert resolve(self.x, {self.x: self.y, self.y: self.x}) in (self.x, self.y)

    def test_substitute_leaves_unbound(self):
        atom = inheritance(self.x, self.y)
        assert substitute(atom, {self.x: self.cat}) == inheritance(self.cat, self.y)
        assert substitute(atom, {}) == atom


class TestInferenceTrail:
    """Test bounded evidence trails."""

    def setup_method(self):
        self.a = inheritance(concept("a"), concept("b"))
        self.b = inheritance(concept("b"), concept("c"))
        self.c = inheritance(concept("a"), concept("c"))

    def test_axiom(self):
        trail = InferenceTrail.axiom(self.a)
        assert self.a in trail
        assert len(trail) == 1

    def test_merge_puts_head_first(self):
        trail = InferenceTrail.merge(InferenceTrail.axiom(self.a), InferenceTrail.axiom(self.b),
                                     head=[self.c])
        assert list(trail) == [self.c, self.a, self.b]

    def test_deduplicates(self):
        trail = InferenceTrail([self.a, self.b, self.a])
        assert list(trail) == [self.a, self.b]

    def test_truncation(self):
        trail = InferenceTrail([self.a, self.b, self.c], max_size=2)
        assert len(trail) == 2
        assert self.c not in trail

    def test_overlaps(self):
        first = InferenceTrail([self.a, self.b])
        assert first.overlaps(InferenceTrail([self.b]))
        assert not first.overlaps(InferenceTrail([self.c]))

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            InferenceTrail(max_size=0)


class TestAttentionValue:
    """Test importance bookkeeping."""

    def test_defaults(self):
        av = AttentionValue()
        assert av.sti == INITIAL_STI
        assert av.importance == pytest.approx(0.6 * av.sti + 0.4 * av.lti)

    def test_boost(self):
        av = AttentionValue().boost(0.2)
        assert av.sti == pytest.approx(INITIAL_STI + 0.2)
        assert av.lti > AttentionValue().lti

    def test_boost_is_clamped(self):
        assert AttentionValue(0.9).boost(0.5).sti == 1.0

    def test_non_positive_boost_is_ignored(self):
        av = AttentionValue()
        assert av.boost(0.0) is av

    def test_decay(self):
        av = AttentionValue(0.5, 0.2).decay()
        assert av.sti < 0.5
        assert av.lti < 0.2
