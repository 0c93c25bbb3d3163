"""
Probabilistic Logic Networks

A probabilistic term-logic reasoner: an AtomSpace hypergraph of
truth-valued atoms, first-order inference rules with simple and
indefinite truth values, and forward and backward chaining.
"""

__version__ = "0.1.0"
__author__ = "PLN Team"
