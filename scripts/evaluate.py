#!/usr/bin/env python3
"""
Evaluate the deduction formula against simulated set frequencies.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

import torch

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from evaluation.metrics import simulate_deduction, compute_metrics, interval_coverage, mean_width
from evaluation.sensitivity import chain_error_growth
from truth.formulas import deduction_strength
from truth.indefinite import propagate
from truth.values import SimpleTruthValue


def evaluate_intervals(data, n_samples: int, count: float, seed: int):
    """Propagate premises as indefinite truth values and check interval coverage."""
    intervals = []
    for i in range(min(n_samples, len(data["actual"]))):
        terms = [float(data[key][i]) for key in ("sA", "sB", "sC")]
        premises = [SimpleTruthValue(float(data["sAB"][i]), count),
                    SimpleTruthValue(float(data["sBC"][i]), count)]
        intervals.append(propagate(
            lambda sAB, sBC: deduction_strength(*terms, sAB, sBC),
            premises,
            seed=seed + i,
        ))
    actual = data["actual"][:len(intervals)]
    return {
        "coverage": interval_coverage(intervals, actual),
        "mean_width": mean_width(intervals),
    }


def main():
    parser = argparse.ArgumentParser(description="Evaluate PLN truth value formulas")
    parser.add_argument("--trials", type=int, default=1000,
                       help="Number of simulated triples of sets")
    parser.add_argument("--universe", type=int, default=1000,
                       help="Universe size for the simulation")
    parser.add_argument("--intervals", type=int, default=0,
                       help="Also test indefinite intervals on this many trials")
    parser.add_argument("--count", type=float, default=20.0,
                       help="Evidence count assumed for premises in the interval test")
    parser.add_argument("--chain_depth", type=int, default=5,
                       help="Depth for the error growth analysis")
    parser.add_argument("--output", type=str, default="reports/evaluation.json",
                       help="Output file for evaluation results")
    parser.add_argument("--seed", type=int, default=42,
                       help="Random seed")
    parser.add_argument("--log-level", type=str, default="WARNING",
                       choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                       help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    torch.manual_seed(args.seed)

    print(f"Simulating {args.trials} deductions in a universe of {args.universe}...")
    data = simulate_deduction(args.trials, args.universe, seed=args.seed, show_progress=True)
    metrics = compute_metrics(data["predicted"], data["actual"])

    results = {"trials": int(len(data["actual"])), "deduction": metrics}
    if args.intervals > 0:
        print(f"Propagating indefinite truth values for {args.intervals} trials...")
        results["intervals"] = evaluate_intervals(data, args.intervals, args.count, args.seed)
    results["chain_error_growth"] = chain_error_growth(args.chain_depth)

    os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
    with open(args.output, 'w') as f:
        json.dump(results, f, indent=2)

    print("Deduction metrics:")
    for key, value in metrics.items():
        print(f"  {key}: {value:.4f}")
    if "intervals" in results:
        print("Interval metrics:")
        for key, value in results["intervals"].items():
            print(f"  {key}: {value:.4f}")
    print("Error magnification by chain depth:")
    for depth, value in enumerate(results["chain_error_growth"], start=1):
        print(f"  {depth}: {value:.4f}")

    print(f"Results saved to {args.output}")


if __name__ == "__main__":
    main()
