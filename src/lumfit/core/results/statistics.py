"""Fit statistics and model comparison metrics."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy import stats

if TYPE_CHECKING:
    from lumfit.core.shared.typing import FloatArray


def compute_rss(residuals: FloatArray) -> float:
    """Compute the residual sum of squares.

    This is the single source of truth for RSS calculation.
    """
    return float(np.sum(np.asarray(residuals, dtype=float) ** 2))


def compute_tss(values: FloatArray) -> float:
    """Total sum of squares around the mean."""
    values = np.asarray(values, dtype=float)
    return float(np.sum((values - values.mean()) ** 2))


def compute_degrees_of_freedom(n_data: int, n_params: int) -> int:
    """Compute degrees of freedom, minimum of 1 to avoid division by zero."""
    return max(1, n_data - n_params)


def compute_residual_variance(rss: float, n_data: int, n_params: int) -> float:
    """Residual variance s^2 = RSS / (n - p)."""
    return rss / compute_degrees_of_freedom(n_data, n_params)


def compute_pseudo_r2(observed: FloatArray, fitted: FloatArray) -> float:
    """Pseudo coefficient of determination 1 - RSS/TSS.

    Returns NaN when the observed values have no variance.
    """
    observed = np.asarray(observed, dtype=float)
    tss = compute_tss(observed)
    if tss == 0:
        return float("nan")
    return 1.0 - compute_rss(observed - np.asarray(fitted, dtype=float)) / tss


def compute_bic(log_likelihood: float, n_params: int, n_data: int) -> float:
    """Bayesian Information Criterion -2 lnL + p ln(n)."""
    return -2.0 * log_likelihood + n_params * np.log(n_data)


def profile_cutoff(level: float, n_data: int, n_params: int) -> float:
    """F-distribution cutoff on ΔRSS/s^2 for a one-parameter profile interval."""
    return float(stats.f.ppf(level, 1, compute_degrees_of_freedom(n_data, n_params)))


__all__ = [
    "compute_bic",
    "compute_degrees_of_freedom",
    "compute_pseudo_r2",
    "compute_residual_variance",
    "compute_rss",
    "compute_tss",
    "profile_cutoff",
]
