"""
Consistency optimization of link strengths.
"""

from .consistency import TruthValueOptimizer, ConsistencyTrainer
from .optimizer import get_optimizer, get_scheduler

__all__ = [
    "TruthValueOptimizer", "ConsistencyTrainer", "get_optimizer", "get_scheduler"
]
