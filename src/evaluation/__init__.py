"""
Formula accuracy, interval calibration and sensitivity analysis.
"""

from .metrics import (
    simulate_deduction, compute_metrics, interval_coverage, mean_width, error_report
)
from .sensitivity import error_magnification, chain_error_growth

__all__ = [
    "simulate_deduction", "compute_metrics", "interval_coverage", "mean_width", "error_report",
    "error_magnification", "chain_error_growth"
]
