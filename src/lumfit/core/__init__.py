"""Core module for LumFit - contains data models and the numerical kernels."""

from lumfit.core.domain import (
    Curve,
    CurveFitConfig,
    FitOptions,
    MixtureConfig,
    Observations,
    StimulationConfig,
)
from lumfit.core.fitting import CurveFitter, fit_lm_curve
from lumfit.core.mixture import FiniteMixtureEstimator, fit_finite_mixture
from lumfit.core.results import FitResult, MixtureModel, MixtureSweep

__all__ = [
    "Curve",
    "CurveFitConfig",
    "CurveFitter",
    "FiniteMixtureEstimator",
    "FitOptions",
    "FitResult",
    "MixtureConfig",
    "MixtureModel",
    "MixtureSweep",
    "Observations",
    "StimulationConfig",
    "fit_finite_mixture",
    "fit_lm_curve",
]
