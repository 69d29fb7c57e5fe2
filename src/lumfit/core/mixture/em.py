"""Fixed-point (EM) iteration for the finite mixture model in log-dose space.

Each component i is a normal distribution of log doses with mean mu_i and
variance sigmab^2 + s_u^2 for grain u; the mixing proportions pi_i sum to 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from lumfit.core.constants import FMM_ITERATIONS

if TYPE_CHECKING:
    from lumfit.core.shared.typing import FloatArray

_INV_SQRT_2PI = 1.0 / np.sqrt(2.0 * np.pi)


@dataclass(frozen=True, slots=True)
class EMState:
    """State after the final iteration.

    Attributes
    ----------
        means: Component means mu_i in log-dose space, after the last update
        proportions: Mixing proportions pi_i, after the last update
        membership: Grain membership probabilities p_ui from the last E-step
        weighted_densities: pi_i * f_ui from the last E-step
    """

    means: FloatArray
    proportions: FloatArray
    membership: FloatArray
    weighted_densities: FloatArray


def initial_means(log_doses: FloatArray, n_components: int) -> FloatArray:
    """Means evenly spaced between min and max: min + (max - min) * i / (k + 1)."""
    low, high = float(np.min(log_doses)), float(np.max(log_doses))
    return low + (high - low) * np.arange(1, n_components + 1) / (n_components + 1)


def component_densities(
    log_doses: FloatArray, weights: FloatArray, means: FloatArray
) -> FloatArray:
    """Unnormalized densities f_ui = sqrt(w_u) exp(-0.5 w_u (y_u - mu_i)^2); shape (n, k)."""
    deviations = log_doses[:, np.newaxis] - means[np.newaxis, :]
    return np.sqrt(weights)[:, np.newaxis] * np.exp(-0.5 * weights[:, np.newaxis] * deviations**2)


def run_em(
    log_doses: FloatArray,
    weights: FloatArray,
    n_components: int,
    n_iterations: int = FMM_ITERATIONS,
) -> EMState:
    """Run a fixed number of fixed-point iterations.

    There is no convergence test; the iteration count is part of the
    estimator's definition.
    """
    means = initial_means(log_doses, n_components)
    proportions = np.full(n_components, 1.0 / n_components)
    membership = np.full((log_doses.size, n_components), 1.0 / n_components)
    weighted = membership.copy()

    with np.errstate(divide="ignore", invalid="ignore", under="ignore"):
        for _ in range(n_iterations):
            weighted = proportions * component_densities(log_doses, weights, means)
            membership = weighted / weighted.sum(axis=1, keepdims=True)
            weight_membership = weights[:, np.newaxis] * membership
            means = (weight_membership * log_doses[:, np.newaxis]).sum(axis=0) / (
                weight_membership.sum(axis=0)
            )
            proportions = membership.mean(axis=0)

    return EMState(
        means=means,
        proportions=proportions,
        membership=membership,
        weighted_densities=weighted,
    )


def mixture_log_likelihood(weighted_densities: FloatArray) -> float:
    """llik = sum_u log(sum_i pi_i f_ui / sqrt(2 pi))."""
    with np.errstate(divide="ignore"):
        return float(np.sum(np.log(_INV_SQRT_2PI * weighted_densities.sum(axis=1))))


def single_component_estimate(
    log_doses: FloatArray, weights: FloatArray
) -> tuple[float, float]:
    """Weighted mean and log likelihood of the one-component model.

    Returns
    -------
        Tuple of (mu0, L0)
    """
    mean = float(np.sum(weights * log_doses) / np.sum(weights))
    densities = np.sqrt(weights) * np.exp(-0.5 * weights * (log_doses - mean) ** 2)
    with np.errstate(divide="ignore"):
        log_likelihood = float(np.sum(np.log(_INV_SQRT_2PI * densities)))
    return mean, log_likelihood


__all__ = [
    "EMState",
    "component_densities",
    "initial_means",
    "mixture_log_likelihood",
    "run_em",
    "single_component_estimate",
]
