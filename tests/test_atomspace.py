"""
Unit tests for the AtomSpace.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from atomspace.atoms import AtomType, concept, inheritance, similarity, variable
from atomspace.space import AtomSpace
from atomspace.trail import InferenceTrail
from truth.values import SimpleTruthValue, IndefiniteTruthValue, DEFAULT_TV


class TestAtomSpaceBasics:
    """Test adding, looking up and removing atoms."""

    def setup_method(self):
        self.space = AtomSpace()
        self.cat, self.mammal, self.animal = concept("cat"), concept("mammal"), concept("animal")
        self.cat_mammal = inheritance(self.cat, self.mammal)
        self.mammal_animal = inheritance(self.mammal, self.animal)

    def test_add_link_adds_outgoing(self):
        atom = self.space.add(self.cat_mammal, SimpleTruthValue(0.9, 10))
        assert atom == self.cat_mammal
        assert len(self.space) == 3
        assert self.cat in self.space
        assert self.space.get_tv(self.cat) == DEFAULT_TV
        assert not self.space.is_asserted(self.cat)
        assert self.space.is_asserted(self.cat_mammal)

    def test_default_trail_is_axiom(self):
        self.space.add(self.cat_mammal, SimpleTruthValue(0.9, 10))
        assert list(self.space.get_trail(self.cat_mammal)) == [self.cat_mammal]

    def test_missing_atom(self):
        with pytest.raises(KeyError):
            self.space.get_tv(self.cat)

    def test_set_tv(self):
        self.space.add(self.cat)
        self.space.set_tv(self.cat, SimpleTruthValue(0.1, 5))
        assert self.space.get_tv(self.cat) == SimpleTruthValue(0.1, 5)

    def test_indices(self):
        self.space.add(self.cat_mammal, SimpleTruthValue(0.9, 10))
        self.space.add(self.mammal_animal, SimpleTruthValue(0.9, 10))
        assert set(self.space.get_atoms_by_type(AtomType.INHERITANCE)) == {
            self.cat_mammal, self.mammal_animal
        }
        assert set(self.space.get_incoming(self.mammal)) == {self.cat_mammal, self.mammal_animal}
        assert self.space.links_from(self.mammal, AtomType.INHERITANCE) == [self.mammal_animal]
        assert self.space.links_to(self.mammal, AtomType.INHERITANCE) == [self.cat_mammal]
        assert set(self.space.nodes()) == {self.cat, self.mammal, self.animal}
        assert len(self.space.links()) == 2

    def test_remove_with_incoming(self):
        """Test that removing a referenced atom needs recursive=True."""
        self.space.add(self.cat_mammal, SimpleTruthValue(0.9, 10))
        with pytest.raises(ValueError):
            self.space.remove(self.cat)
        self.space.remove(self.cat, recursive=True)
        assert self.cat not in self.space
        assert self.cat_mammal not in self.space
        assert self.space.get_incoming(self.mammal) == []

    def test_remove_missing(self):
        with pytest.raises(KeyError):
            self.space.remove(self.cat)


class TestRevision:
    """Test revision when an atom is added again."""

    def setup_method(self):
        self.space = AtomSpace()
        self.link = inheritance(concept("cat"), concept("animal"))
        self.a = inheritance(concept("cat"), concept("mammal"))
        self.b = inheritance(concept("mammal"), concept("animal"))

    def test_observations_are_revised(self):
        self.space.add(self.link, SimpleTruthValue(0.8, 10))
        self.space.add(self.link, SimpleTruthValue(0.4, 30))
        tv = self.space.get_tv(self.link)
        assert tv.strength == pytest.approx(0.5)
        assert tv.count == pytest.approx(40)

    def test_independent_trails_are_revised(self):
        self.space.add(self.link, SimpleTruthValue(0.8, 10))
        changed = self.space.revise(self.link, SimpleTruthValue(0.4, 30), InferenceTrail([self.a]))
        assert changed
        assert self.space.get_tv(self.link).count == pytest.approx(40)
        trail = self.space.get_trail(self.link)
        assert self.a in trail and self.link in trail

    def test_overlapping_trails_keep_more_confident(self):
        """Test that shared evidence is not counted twice."""
        self.space.revise(self.link, SimpleTruthValue(0.8, 10), InferenceTrail([self.a, self.b]))
        changed = self.space.revise(self.link, SimpleTruthValue(0.6, 5), InferenceTrail([self.a]))
        assert not changed
        assert self.space.get_tv(self.link) == SimpleTruthValue(0.8, 10)

        changed = self.space.revise(self.link, SimpleTruthValue(0.6, 50), InferenceTrail([self.b]))
        assert changed
        assert self.space.get_tv(self.link) == SimpleTruthValue(0.6, 50)
        assert list(self.space.get_trail(self.link)) == [self.b]

    def test_zero_count_never_overrides(self):
        self.space.add(self.link, SimpleTruthValue(0.8, 10))
        assert not self.space.revise(self.link, SimpleTruthValue(0.1, 0))
        assert self.space.get_tv(self.link) == SimpleTruthValue(0.8, 10)

    def test_evidence_replaces_default(self):
        self.space.add(self.link)
        self.space.add(self.link, SimpleTruthValue(0.3, 4))
        assert self.space.get_tv(self.link) == SimpleTruthValue(0.3, 4)

    def test_indefinite_revision(self):
        self.space.add(self.link, IndefiniteTruthValue(0.4, 0.6))
        self.space.add(self.link, IndefiniteTruthValue(0.4, 0.6))
        tv = self.space.get_tv(self.link)
        assert tv.is_indefinite
        assert tv.width < 0.2

    def test_large_confidence_gain_boosts_attention(self):
        self.space.add(self.link, SimpleTruthValue(0.8, 10))
        before = self.space.get_attention(self.link).sti
        self.space.add(self.link, SimpleTruthValue(0.8, 800))
        assert self.space.get_attention(self.link).sti > before + 0.1


class TestQuery:
    """Test pattern queries."""

    def setup_method(self):
        self.space = AtomSpace()
        self.cat = concept("cat")
        self.space.add(inheritance(self.cat, concept("mammal")), SimpleTruthValue(0.9, 100))
        self.space.add(inheritance(self.cat, concept("pet")), SimpleTruthValue(0.6, 100))
        self.space.add(inheritance(self.cat, concept("fish")), SimpleTruthValue(0.1, 1))
        self.space.add(inheritance(concept("dog"), concept("mammal")), SimpleTruthValue(0.9, 100))
        self.x = variable("x")

    def test_query_sorted(self):
        """Test that matches come best first by strength * confidence."""
        matches = self.space.query(inheritance(self.cat, self.x))
        assert [m.bindings[self.x] for m in matches] == [
            concept("mammal"), concept("pet"), concept("fish")
        ]

    def test_query_min_confidence(self):
        matches = self.space.query(inheritance(self.cat, self.x), min_confidence=0.05)
        assert len(matches) == 2

    def test_query_by_target(self):
        matches = self.space.query(inheritance(self.x, concept("mammal")))
        assert {m.bindings[self.x] for m in matches} == {self.cat, concept("dog")}

    def test_query_all_links(self):
        matches = self.space.query(inheritance(self.x, variable("y")))
        assert len(matches) == 4

    def test_query_ground(self):
        matches = self.space.query(inheritance(self.cat, concept("pet")))
        assert len(matches) == 1
        assert matches[0].bindings == {}

    def test_query_symmetric(self):
        self.space.add(similarity(concept("cat"), concept("tiger")), SimpleTruthValue(0.5, 10))
        matches = self.space.query(similarity(concept("tiger"), self.x))
        assert [m.bindings[self.x] for m in matches] == [self.cat]

    def test_query_boost(self):
        link = inheritance(self.cat, concept("pet"))
        before = self.space.get_attention(link).sti
        self.space.query(link, boost=True)
        assert self.space.get_attention(link).sti > before


class TestForgetting:
    """Test attention decay and forgetting."""

    def test_forget_unimportant_links(self):
        space = AtomSpace()
        kept = inheritance(concept("a"), concept("b"))
        dropped = inheritance(concept("c"), concept("d"))
        space.add(kept, SimpleTruthValue(0.5, 10))
        space.add(dropped, SimpleTruthValue(0.5, 10))
        space.boost(kept, 0.5)

        removed = space.forget(threshold=0.1)
        assert dropped in removed
        assert kept in space
        # Nodes freed by the dropped link go in the same pass
        assert concept("c") not in space
        assert concept("a") in space

    def test_protected_atoms_survive(self):
        space = AtomSpace()
        link = inheritance(concept("a"), concept("b"))
        space.add(link, SimpleTruthValue(0.5, 10))
        removed = space.forget(threshold=1.0, protected=[link])
        assert link in space
        assert removed == []

    def test_size_bound_removes_least_important(self):
        space = AtomSpace()
        links = [inheritance(concept(f"a{i}"), concept(f"b{i}")) for i in range(5)]
        for i, link in enumerate(links):
            space.add(link, SimpleTruthValue(0.5, 10))
            space.boost(link, 0.1 * i)
        # 5 links and 10 nodes, trimmed to 60% of 10
        removed = space.forget(threshold=0.0, max_atoms=10, target_fraction=0.6)
        assert len(removed) == 9
        assert len(space) == 6
        assert set(space.links()) == {links[3], links[4]}
        # Each link goes before the more important links, followed by its freed nodes
        assert removed[:3] == [links[0], concept("a0"), concept("b0")]

    def test_size_bound_keeps_variables(self):
        space = AtomSpace()
        space.add(variable("x"))
        space.add(concept("a"))
        space.add(concept("b"))
        removed = space.forget(threshold=0.0, max_atoms=1, target_fraction=1.0)
        assert set(removed) == {concept("a"), concept("b")}
        assert variable("x") in space

    def test_under_size_bound(self):
        space = AtomSpace()
        space.add(inheritance(concept("a"), concept("b")), SimpleTruthValue(0.5, 10))
        assert space.forget(threshold=0.0, max_atoms=3) == []

    def test_decay_all(self):
        space = AtomSpace()
        space.add(concept("a"))
        before = space.get_attention(concept("a")).sti
        space.decay_all()
        assert space.get_attention(concept("a")).sti < before
