"""Finite mixture model for equivalent dose distributions."""

from lumfit.core.mixture.em import EMState, mixture_log_likelihood, run_em
from lumfit.core.mixture.estimator import FiniteMixtureEstimator, fit_finite_mixture
from lumfit.core.mixture.information import information_matrix, invert_information

__all__ = [
    "EMState",
    "FiniteMixtureEstimator",
    "fit_finite_mixture",
    "information_matrix",
    "invert_information",
    "mixture_log_likelihood",
    "run_em",
]
