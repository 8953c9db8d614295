"""
Scenario Statistics
===================

Probability-weighted statistics over per-scenario objective values.

Zero-probability scenarios are excluded before anything is summed, so
adding one never changes a result, and weights are normalized by the
total probability so scenario lists need not sum to one.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
from scipy import stats

from ..exceptions import DimensionError, InvalidInputError


def normalized_weights(probabilities: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Normalize positive probabilities.

    Returns:
        (mask, weights): boolean mask of positive-probability entries and
        their weights summing to one
    """
    p = np.asarray(probabilities, dtype=np.float64)
    if np.any(p < 0) or not np.all(np.isfinite(p)):
        raise InvalidInputError("probabilities must be finite and non-negative")
    mask = p > 0
    total = p[mask].sum()
    if total <= 0:
        raise InvalidInputError("total scenario probability must be positive")
    return mask, p[mask] / total


def weighted_mean(values: Sequence[float], probabilities: Sequence[float]) -> float:
    """Σ w_i v_i over positive-probability entries."""
    v = np.asarray(values, dtype=np.float64)
    if v.shape != np.shape(probabilities):
        raise DimensionError(f"{v.size} values but {len(probabilities)} probabilities")
    mask, w = normalized_weights(probabilities)
    return float(np.sum(w * v[mask]))


def weighted_variance(values: Sequence[float], probabilities: Sequence[float]) -> float:
    """Σ w_i (v_i - mean)² over positive-probability entries."""
    v = np.asarray(values, dtype=np.float64)
    if v.shape != np.shape(probabilities):
        raise DimensionError(f"{v.size} values but {len(probabilities)} probabilities")
    mask, w = normalized_weights(probabilities)
    deviation = v[mask] - np.sum(w * v[mask])
    return float(np.sum(w * deviation * deviation))


def confidence_interval(
    estimate: float,
    standard_error: float,
    confidence_level: float = 0.95,
) -> Tuple[float, float]:
    """
    Normal-approximation confidence interval estimate ± z · SE.

    Args:
        estimate: Point estimate (e.g. sample-average objective)
        standard_error: Standard error of the estimate
        confidence_level: Two-sided level in (0, 1)
    """
    if not 0 < confidence_level < 1:
        raise InvalidInputError(f"confidence_level must be in (0,1), got {confidence_level}")
    z = stats.norm.ppf(0.5 + confidence_level / 2)
    return float(estimate - z * standard_error), float(estimate + z * standard_error)
