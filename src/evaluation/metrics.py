"""
Accuracy and calibration metrics for truth-value formulas.
"""

import numpy as np
from typing import List, Dict, Optional, Sequence, Tuple, Union
from sklearn.metrics import mean_absolute_error, mean_squared_error, max_error, r2_score
import torch
from tqdm import tqdm

from truth.formulas import deduction_strength
from truth.values import IndefiniteTruthValue

Interval = Union[Tuple[float, float], IndefiniteTruthValue]


def simulate_deduction(n_trials: int = 1000, universe_size: int = 1000,
                       seed: Optional[int] = None,
                       show_progress: bool = False) -> Dict[str, np.ndarray]:
    """
    Compare the deduction formula against set frequencies in a finite universe.

    Each trial draws a set B, then sets A and C whose members are picked
    independently given membership in B, which is the situation the
    formula assumes. Trials with an empty A or B, or with B covering the
    whole universe, are skipped.

    Returns:
        Dict of arrays: sA, sB, sC, sAB, sBC, actual (true sAC) and predicted
    """
    rng = np.random.default_rng(seed)
    rows = []
    for _ in tqdm(range(n_trials), desc="Simulating", disable=not show_progress):
        in_b = rng.random(universe_size) < rng.uniform(0.05, 0.95)
        a_given_b, a_given_not_b, c_given_b, c_given_not_b = rng.uniform(0.0, 1.0, size=4)
        in_a = rng.random(universe_size) < np.where(in_b, a_given_b, a_given_not_b)
        in_c = rng.random(universe_size) < np.where(in_b, c_given_b, c_given_not_b)

        n_a, n_b = in_a.sum(), in_b.sum()
        if n_a == 0 or n_b == 0 or n_b == universe_size:
            continue
        rows.append((
            n_a / universe_size,
            n_b / universe_size,
            in_c.sum() / universe_size,
            (in_a & in_b).sum() / n_a,
            (in_b & in_c).sum() / n_b,
            (in_a & in_c).sum() / n_a,
        ))

    data = np.array(rows, dtype=np.float64).reshape(-1, 6)
    sA, sB, sC, sAB, sBC, actual = data.T
    predicted = deduction_strength(*(torch.from_numpy(col.copy()) for col in (sA, sB, sC, sAB, sBC)))
    return {
        "sA": sA, "sB": sB, "sC": sC, "sAB": sAB, "sBC": sBC,
        "actual": actual,
        "predicted": predicted.numpy(),
    }


def compute_metrics(predicted: Sequence[float], actual: Sequence[float]) -> Dict[str, float]:
    """Compute regression metrics of predicted against true strengths."""
    predicted = np.asarray(predicted, dtype=np.float64)
    actual = np.asarray(actual, dtype=np.float64)
    if predicted.shape != actual.shape:
        raise ValueError(f"Shape mismatch: {predicted.shape} vs {actual.shape}")
    if predicted.size == 0:
        raise ValueError("Nothing to evaluate")

    metrics = {
        "mae": mean_absolute_error(actual, predicted),
        "rmse": float(np.sqrt(mean_squared_error(actual, predicted))),
        "max_error": max_error(actual, predicted),
    }
    # R^2 is undefined for fewer than two samples
    if predicted.size > 1:
        metrics["r2"] = r2_score(actual, predicted)
    return {key: float(value) for key, value in metrics.items()}


def _bounds(intervals: Sequence[Interval]) -> np.ndarray:
    pairs = [
        (i.lower, i.upper) if isinstance(i, IndefiniteTruthValue) else tuple(i)
        for i in intervals
    ]
    return np.array(pairs, dtype=np.float64).reshape(-1, 2)


def interval_coverage(intervals: Sequence[Interval], actual: Sequence[float]) -> float:
    """Fraction of true values falling inside their interval."""
    bounds = _bounds(intervals)
    actual = np.asarray(actual, dtype=np.float64)
    if len(bounds) != len(actual):
        raise ValueError(f"Got {len(bounds)} intervals for {len(actual)} values")
    if len(actual) == 0:
        return 0.0
    inside = (actual >= bounds[:, 0]) & (actual <= bounds[:, 1])
    return float(inside.mean())


def mean_width(intervals: Sequence[Interval]) -> float:
    bounds = _bounds(intervals)
    if len(bounds) == 0:
        return 0.0
    return float((bounds[:, 1] - bounds[:, 0]).mean())


def error_report(predicted: Sequence[float], actual: Sequence[float],
                 top_k: int = 5) -> List[Dict[str, float]]:
    """The ``top_k`` largest errors with their indices."""
    predicted = np.asarray(predicted, dtype=np.float64)
    actual = np.asarray(actual, dtype=np.float64)
    errors = np.abs(predicted - actual)
    order = np.argsort(-errors)[:top_k]
    return [
        {"index": int(i), "predicted": float(predicted[i]), "actual": float(actual[i]),
         "error": float(errors[i])}
        for i in order
    ]
