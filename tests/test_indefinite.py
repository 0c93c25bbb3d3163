"""
Unit tests for Monte-Carlo propagation of indefinite truth values.
"""

import pytest
import torch
import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from truth.indefinite import widen_interval, sample_premise, propagate
from truth.formulas import deduction_strength
from truth.values import IndefiniteTruthValue, SimpleTruthValue


class TestSampling:
    """Test interval widening and premise sampling."""

    def test_widen_interval(self):
        lower, upper = widen_interval(0.4, 0.6, 0.9)
        delta = 0.2 * 0.1 / 1.8
        assert lower == pytest.approx(0.4 - delta)
        assert upper == pytest.approx(0.6 + delta)

    def test_widen_interval_is_clipped(self):
        assert widen_interval(0.0, 1.0, 0.5) == (0.0, 1.0)

    def test_full_credibility_does_not_widen(self):
        assert widen_interval(0.4, 0.6, 1.0) == pytest.approx((0.4, 0.6))

    def test_sample_shape(self):
        samples = sample_premise(IndefiniteTruthValue(0.4, 0.6), 30, 7)
        assert samples.shape == (30, 7)
        assert samples.dtype == torch.float64
        assert bool(((samples >= 0) & (samples <= 1)).all())


class TestPropagate:
    """Test propagating premises through formulas."""

    def test_identity_formula(self):
        """Test that the identity keeps the interval roughly in place."""
        result = propagate(lambda x: x, [IndefiniteTruthValue(0.4, 0.6)], seed=0)
        assert isinstance(result, IndefiniteTruthValue)
        assert result.lower < result.upper
        assert result.mean == pytest.approx(0.5, abs=0.05)
        assert 0.3 < result.lower and result.upper < 0.7

    def test_simple_premises_are_converted(self):
        result = propagate(lambda x: x, [SimpleTruthValue(0.8, 8000)], seed=0)
        assert result.is_indefinite
        assert result.mean == pytest.approx(0.8, abs=0.03)

    def test_seed_is_reproducible(self):
        premises = [IndefiniteTruthValue(0.7, 0.9), IndefiniteTruthValue(0.6, 0.8)]
        first = propagate(lambda a, b: a * b, premises, seed=3)
        second = propagate(lambda a, b: a * b, premises, seed=3)
        assert first == second

    def test_seed_leaves_global_rng_alone(self):
        state = torch.get_rng_state()
        propagate(lambda x: x, [IndefiniteTruthValue(0.4, 0.6)], seed=1)
        assert torch.equal(state, torch.get_rng_state())

    def test_wider_premises_give_wider_conclusions(self):
        narrow = [IndefiniteTruthValue(0.79, 0.81), IndefiniteTruthValue(0.79, 0.81)]
        wide = [IndefiniteTruthValue(0.6, 0.95), IndefiniteTruthValue(0.6, 0.95)]
        product = lambda a, b: a * b
        assert propagate(product, wide, seed=0).width > propagate(product, narrow, seed=0).width

    def test_deduction(self):
        """Test deduction with fixed term probabilities."""
        premises = [IndefiniteTruthValue(0.75, 0.85), IndefiniteTruthValue(0.85, 0.95)]
        result = propagate(
            lambda sAB, sBC: deduction_strength(0.2, 0.5, 0.6, sAB, sBC),
            premises, seed=0,
        )
        assert result.lower <= 0.78 <= result.upper
        assert result.credibility == 0.9
        assert result.lookahead == 20

    def test_conclusion_parameters(self):
        result = propagate(lambda x: x, [IndefiniteTruthValue(0.4, 0.6)],
                           credibility=0.8, lookahead=10, seed=0)
        assert result.credibility == 0.8
        assert result.lookahead == 10

    def test_requires_premises(self):
        with pytest.raises(ValueError):
            propagate(lambda: torch.tensor(0.5), [])

    def test_requires_samples(self):
        with pytest.raises(ValueError):
            propagate(lambda x: x, [IndefiniteTruthValue(0.4, 0.6)], n_first_order=1)
