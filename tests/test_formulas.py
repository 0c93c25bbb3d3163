"""
Unit tests for the strength and count formulas.
"""

import pytest
import torch
import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from truth.formulas import (
    deduction_strength, deduction_consistency, inversion_strength, induction_strength,
    abduction_strength, modus_ponens_strength, similarity_from_inheritance,
    inheritance_from_similarity, negation_strength, conjunction_strength,
    disjunction_strength, revision_strength, discounted_min_count, deduction_count,
    inversion_count
)


def value(x: torch.Tensor) -> float:
    return float(x)


class TestDeduction:
    """Test the independence-based deduction formula."""

    def test_known_value(self):
        """Test sAB=0.8, sBC=0.9, sB=0.5, sC=0.6 gives 0.78."""
        s = deduction_strength(0.2, 0.5, 0.6, 0.8, 0.9)
        assert value(s) == pytest.approx(0.78)

    def test_returns_float64_tensor(self):
        s = deduction_strength(0.2, 0.5, 0.6, 0.8, 0.9)
        assert isinstance(s, torch.Tensor)
        assert s.dtype == torch.float64

    def test_degenerate_middle_term(self):
        """Test that sB = 1 falls back to sC."""
        assert value(deduction_strength(0.2, 1.0, 0.6, 0.8, 0.9)) == pytest.approx(0.6)

    def test_batched(self):
        sAB = torch.tensor([0.8, 1.0, 0.0], dtype=torch.float64)
        s = deduction_strength(0.2, 0.5, 0.6, sAB, 0.9)
        expected = torch.tensor([0.78, 0.9, 0.3], dtype=torch.float64)
        torch.testing.assert_close(s, expected)

    def test_clamped_to_unit_interval(self):
        s = deduction_strength(0.1, 0.5, 0.0, 0.2, 0.9)
        assert 0.0 <= value(s) <= 1.0

    def test_gradients_flow(self):
        sAB = torch.tensor(0.8, dtype=torch.float64, requires_grad=True)
        deduction_strength(0.2, 0.5, 0.6, sAB, 0.9).backward()
        # d/dsAB = sBC - (sC - sB * sBC) / (1 - sB) = 0.9 - 0.3
        assert value(sAB.grad) == pytest.approx(0.6)


class TestConsistency:
    """Test the conditional probability bounds."""

    def test_consistent(self):
        assert bool(deduction_consistency(0.5, 0.2, 0.3))

    def test_too_strong(self):
        """Test that P(B|A) cannot exceed P(B) / P(A)."""
        assert not bool(deduction_consistency(0.5, 0.2, 0.9))

    def test_too_weak(self):
        """Test that P(B|A) must reach (P(A) + P(B) - 1) / P(A)."""
        assert not bool(deduction_consistency(0.8, 0.9, 0.5))

    def test_empty_antecedent(self):
        assert bool(deduction_consistency(0.0, 0.2, 0.9))


class TestInversionFamily:
    """Test inversion, induction and abduction."""

    def test_inversion(self):
        assert value(inversion_strength(0.2, 0.4, 0.8)) == pytest.approx(0.4)

    def test_inversion_of_empty_term(self):
        assert value(inversion_strength(0.2, 0.0, 0.8)) == pytest.approx(0.5)

    def test_induction_is_inversion_then_deduction(self):
        sA, sB, sC, sAB, sAC = 0.3, 0.5, 0.4, 0.6, 0.7
        sBA = inversion_strength(sA, sB, sAB)
        expected = deduction_strength(sB, sA, sC, sBA, sAC)
        torch.testing.assert_close(induction_strength(sA, sB, sC, sAB, sAC), expected)

    def test_abduction_is_inversion_then_deduction(self):
        sA, sB, sC, sAB, sCB = 0.3, 0.5, 0.4, 0.6, 0.7
        sBC = inversion_strength(sC, sB, sCB)
        expected = deduction_strength(sA, sB, sC, sAB, sBC)
        torch.testing.assert_close(abduction_strength(sA, sB, sC, sAB, sCB), expected)
        assert value(expected) == pytest.approx(0.432)


class TestOtherFormulas:
    """Test modus ponens, similarity and the connectives."""

    def test_modus_ponens(self):
        assert value(modus_ponens_strength(0.7, 0.9)) == pytest.approx(0.69)
        assert value(modus_ponens_strength(0.7, 0.9, 0.0)) == pytest.approx(0.63)

    def test_similarity(self):
        assert value(similarity_from_inheritance(0.5, 0.5)) == pytest.approx(1 / 3)
        assert value(similarity_from_inheritance(1.0, 1.0)) == pytest.approx(1.0)
        assert value(similarity_from_inheritance(0.0, 0.7)) == 0.0

    def test_inheritance_from_similarity_inverts_similarity(self):
        sim = similarity_from_inheritance(0.5, 0.5)
        assert value(inheritance_from_similarity(0.3, 0.3, sim)) == pytest.approx(0.5)

    def test_negation(self):
        assert value(negation_strength(0.3)) == pytest.approx(0.7)

    def test_conjunction(self):
        assert value(conjunction_strength(0.5, 0.4)) == pytest.approx(0.2)
        assert value(conjunction_strength(0.5, 0.4, 0.5)) == pytest.approx(0.1)

    def test_disjunction(self):
        assert value(disjunction_strength(0.5, 0.4)) == pytest.approx(0.7)

    def test_connectives_need_arguments(self):
        with pytest.raises(ValueError):
            conjunction_strength()
        with pytest.raises(ValueError):
            disjunction_strength()

    def test_revision_strength(self):
        assert value(revision_strength(0.8, 10, 0.4, 30)) == pytest.approx(0.5)
        assert value(revision_strength(0.8, 0, 0.4, 0)) == pytest.approx(0.6)


class TestCounts:
    """Test the count heuristics."""

    def test_discounted_min(self):
        assert discounted_min_count(10, 20) == pytest.approx(9.0)
        assert discounted_min_count(10, 20, discount=0.5) == pytest.approx(5.0)
        assert discounted_min_count() == 0.0

    def test_deduction_count(self):
        assert deduction_count(40, 60) == pytest.approx(36.0)

    def test_inversion_count(self):
        assert inversion_count(40) == pytest.approx(36.0)
