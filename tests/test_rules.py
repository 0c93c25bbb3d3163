"""
Unit tests for inference rules and the rule registry.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from atomspace.atoms import AtomType, concept, inheritance, implication, similarity, and_, not_, variable
from atomspace.space import AtomSpace
from atomspace.trail import InferenceTrail
from data.schema import ReasonerConfig
from rules import (
    DeductionRule, InversionRule, ModusPonensRule, SimilarityRule,
    ConjunctionRule, NegationRule, RuleRegistry, create_default_rules
)
from truth.values import SimpleTruthValue, IndefiniteTruthValue


def build_chain(sA=0.2, sB=0.5, sC=0.6, sAB=0.8, sBC=0.9):
    """cat -> mammal -> animal with term probabilities."""
    space = AtomSpace()
    cat, mammal, animal = concept("cat"), concept("mammal"), concept("animal")
    space.add(cat, SimpleTruthValue(sA, 100))
    space.add(mammal, SimpleTruthValue(sB, 100))
    space.add(animal, SimpleTruthValue(sC, 100))
    space.add(inheritance(cat, mammal), SimpleTruthValue(sAB, 40))
    space.add(inheritance(mammal, animal), SimpleTruthValue(sBC, 60))
    return space


class TestDeductionRule:
    """Test deduction matching and conclusions."""

    def setup_method(self):
        self.space = build_chain()
        self.rule = DeductionRule()
        self.cat_mammal = inheritance(concept("cat"), concept("mammal"))
        self.mammal_animal = inheritance(concept("mammal"), concept("animal"))
        self.cat_animal = inheritance(concept("cat"), concept("animal"))

    def test_id(self):
        assert self.rule.id == "deduction[InheritanceLink]"
        assert DeductionRule(AtomType.IMPLICATION).id == "deduction[ImplicationLink]"

    def test_unsupported_link_type(self):
        with pytest.raises(ValueError):
            DeductionRule(AtomType.SIMILARITY)

    def test_match_forward(self):
        matches = list(self.rule.match_forward(self.space, self.cat_mammal))
        assert len(matches) == 1
        bindings, premises = matches[0]
        assert premises == (self.cat_mammal, self.mammal_animal)
        assert self.rule.conclusion_for(premises, bindings) == self.cat_animal

    def test_match_forward_from_either_premise(self):
        matches = list(self.rule.match_forward(self.space, self.mammal_animal))
        assert [premises for _, premises in matches] == [(self.cat_mammal, self.mammal_animal)]

    def test_conclusion(self):
        """Test strength 0.78 and count 0.9 * min(40, 60)."""
        bindings, premises = next(self.rule.match_forward(self.space, self.cat_mammal))
        conclusion = self.rule.conclude(self.space, premises, bindings)
        assert conclusion is not None
        assert conclusion.atom == self.cat_animal
        assert conclusion.rule == "deduction[InheritanceLink]"
        assert conclusion.tv.strength == pytest.approx(0.78)
        assert conclusion.tv.count == pytest.approx(36.0)
        assert self.cat_mammal in conclusion.trail
        assert self.mammal_animal in conclusion.trail

    def test_terms_without_evidence_use_default(self):
        space = AtomSpace()
        space.add(self.cat_mammal, SimpleTruthValue(0.8, 40))
        space.add(self.mammal_animal, SimpleTruthValue(0.9, 60))
        bindings, premises = next(self.rule.match_forward(space, self.cat_mammal))
        conclusion = self.rule.conclude(space, premises, bindings)
        # sA = sB = sC = 0.5
        assert conclusion.tv.strength == pytest.approx(0.74)

    def test_inconsistent_premises(self):
        """Test that P(mammal|cat) = 0.9 is impossible when P(cat) = 0.8 and P(mammal) = 0.2."""
        space = build_chain(sA=0.8, sB=0.2, sAB=0.9)
        bindings, premises = next(self.rule.match_forward(space, self.cat_mammal))
        assert self.rule.conclude(space, premises, bindings) is None

        lenient = DeductionRule(config=ReasonerConfig(check_consistency=False))
        assert lenient.conclude(space, premises, bindings) is not None

    def test_circular_evidence(self):
        """Test that a premise derived from the conclusion cannot support it."""
        self.space.revise(self.cat_mammal, SimpleTruthValue(0.8, 40),
                          InferenceTrail([self.cat_animal]))
        bindings, premises = next(self.rule.match_forward(self.space, self.cat_mammal))
        assert self.rule.conclude(self.space, premises, bindings) is None

    def test_min_confidence(self):
        rule = DeductionRule(config=ReasonerConfig(min_confidence=0.5))
        bindings, premises = next(rule.match_forward(self.space, self.cat_mammal))
        assert rule.conclude(self.space, premises, bindings) is None

    def test_premise_without_evidence(self):
        self.space.set_tv(self.mammal_animal, SimpleTruthValue(0.9, 0))
        bindings, premises = next(self.rule.match_forward(self.space, self.cat_mammal))
        assert self.rule.conclude(self.space, premises, bindings) is None

    def test_indefinite_premise(self):
        self.space.set_tv(self.cat_mammal, IndefiniteTruthValue(0.75, 0.85))
        bindings, premises = next(self.rule.match_forward(self.space, self.cat_mammal))
        conclusion = self.rule.conclude(self.space, premises, bindings)
        assert conclusion.tv.is_indefinite
        assert conclusion.tv.lower < conclusion.tv.upper

    def test_indefinite_premise_count_bound(self):
        """Test that sampling adds no evidence beyond 0.9 * the weakest premise."""
        self.space.set_tv(self.cat_mammal, SimpleTruthValue(0.8, 5))
        self.space.set_tv(self.mammal_animal, IndefiniteTruthValue(0.85, 0.95))
        bindings, premises = next(self.rule.match_forward(self.space, self.cat_mammal))
        conclusion = self.rule.conclude(self.space, premises, bindings)
        assert conclusion.tv.is_indefinite
        assert conclusion.tv.to_simple(self.space.k).count == pytest.approx(4.5)

    def test_match_backward(self):
        """Test that goal bindings are reported for the rule's own variables."""
        matches = list(self.rule.match_backward(self.cat_animal))
        assert len(matches) == 1
        bindings, premises = matches[0]
        A, C = variable("A"), variable("C")
        assert bindings[A] == concept("cat")
        assert bindings[C] == concept("animal")
        first, second = premises
        assert first.outgoing[0] == concept("cat")
        assert second.outgoing[1] == concept("animal")
        # The middle term is a fresh variable shared by both premises
        assert first.outgoing[1] == second.outgoing[0]
        assert first.outgoing[1] != variable("B")

    def test_match_backward_renames_apart(self):
        _, first = next(self.rule.match_backward(self.cat_animal))
        _, second = next(self.rule.match_backward(self.cat_animal))
        assert first[0].outgoing[1] != second[0].outgoing[1]


class TestOtherRules:
    """Test inversion, modus ponens and similarity."""

    def test_inversion(self):
        space = build_chain()
        rule = InversionRule()
        link = inheritance(concept("cat"), concept("mammal"))
        bindings, premises = next(rule.match_forward(space, link))
        conclusion = rule.conclude(space, premises, bindings)
        assert conclusion.atom == inheritance(concept("mammal"), concept("cat"))
        assert conclusion.tv.strength == pytest.approx(0.8 * 0.2 / 0.5)

    def test_modus_ponens(self):
        """Test 0.7 * 0.9 + 0.2 * 0.3 = 0.69."""
        space = AtomSpace()
        rain, wet = concept("rain"), concept("wet")
        space.add(rain, SimpleTruthValue(0.7, 100))
        space.add(implication(rain, wet), SimpleTruthValue(0.9, 50))
        rule = ModusPonensRule()
        assert rule.id == "modus_ponens[ImplicationLink]"

        matches = list(rule.match_forward(space, rain))
        assert len(matches) == 1
        bindings, premises = matches[0]
        conclusion = rule.conclude(space, premises, bindings)
        assert conclusion.atom == wet
        assert conclusion.tv.strength == pytest.approx(0.69)
        assert conclusion.tv.count == pytest.approx(45.0)

    def test_modus_ponens_needs_implication(self):
        with pytest.raises(ValueError):
            ModusPonensRule(AtomType.INHERITANCE)

    def test_similarity(self):
        space = AtomSpace()
        cat, feline = concept("cat"), concept("feline")
        space.add(inheritance(cat, feline), SimpleTruthValue(0.5, 10))
        space.add(inheritance(feline, cat), SimpleTruthValue(0.5, 10))
        rule = SimilarityRule()
        matches = list(rule.match_forward(space, inheritance(cat, feline)))
        assert matches
        bindings, premises = matches[0]
        conclusion = rule.conclude(space, premises, bindings)
        assert conclusion.atom == similarity(cat, feline)
        assert conclusion.tv.strength == pytest.approx(1 / 3)


class TestConnectiveRules:
    """Test the backward-only boolean rules."""

    def setup_method(self):
        self.space = AtomSpace()
        self.cat, self.dog = concept("cat"), concept("dog")
        self.space.add(self.cat, SimpleTruthValue(0.5, 100))
        self.space.add(self.dog, SimpleTruthValue(0.4, 50))

    def test_not_forward(self):
        assert not ConjunctionRule().forward
        assert not NegationRule().forward

    def test_conjunction(self):
        rule = ConjunctionRule()
        goal = and_(self.cat, self.dog)
        bindings, premises = next(rule.match_backward(goal))
        conclusion = rule.conclude(self.space, premises, bindings)
        assert conclusion.atom == goal
        assert conclusion.tv.strength == pytest.approx(0.2)
        assert conclusion.tv.count == pytest.approx(50)

    def test_negation(self):
        rule = NegationRule()
        bindings, premises = next(rule.match_backward(not_(self.cat)))
        assert premises == (self.cat,)
        conclusion = rule.conclude(self.space, premises, bindings)
        assert conclusion.atom == not_(self.cat)
        assert conclusion.tv.strength == pytest.approx(0.5)

    def test_wrong_link_type(self):
        assert list(ConjunctionRule().match_backward(not_(self.cat))) == []


class TestRuleRegistry:
    """Test creating rules by name."""

    def test_names(self):
        names = RuleRegistry.names()
        for name in ["deduction", "induction", "abduction", "inversion", "modus_ponens",
                     "similarity", "inheritance_from_similarity",
                     "negation", "conjunction", "disjunction"]:
            assert name in names

    def test_create_per_link_type(self):
        rules = RuleRegistry.create("deduction")
        assert [rule.id for rule in rules] == [
            "deduction[InheritanceLink]", "deduction[ImplicationLink]"
        ]
        assert len(RuleRegistry.create("modus_ponens")) == 1
        assert len(RuleRegistry.create("similarity")) == 1

    def test_create_with_link_types(self):
        rules = RuleRegistry.create("deduction", link_types=[AtomType.IMPLICATION])
        assert [rule.id for rule in rules] == ["deduction[ImplicationLink]"]

    def test_unknown_rule(self):
        with pytest.raises(ValueError, match="Unknown rule"):
            RuleRegistry.create("telepathy")

    def test_default_rules(self):
        registry = create_default_rules()
        assert len(registry) == 14
        assert len(registry.forward_rules) == 11
        assert registry.get("deduction[InheritanceLink]") is not None

    def test_config_selects_rules(self):
        config = ReasonerConfig(rules=["deduction"], link_types=["InheritanceLink"])
        registry = RuleRegistry.create_from_config(config)
        assert [rule.id for rule in registry] == ["deduction[InheritanceLink]"]
