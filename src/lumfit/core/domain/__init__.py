"""Domain objects: curves, dose observations, background subtraction and configuration."""

from lumfit.core.domain.config import (
    CurveFitConfig,
    FitMethodName,
    FitOptions,
    MixtureConfig,
    StimulationConfig,
    build_config,
)
from lumfit.core.domain.curve import (
    BackgroundCorrection,
    BackgroundMethod,
    Curve,
    as_curve,
    subtract_background,
)
from lumfit.core.domain.observations import Observations, as_observations

__all__ = [
    "BackgroundCorrection",
    "BackgroundMethod",
    "Curve",
    "CurveFitConfig",
    "FitMethodName",
    "FitOptions",
    "MixtureConfig",
    "Observations",
    "StimulationConfig",
    "as_curve",
    "as_observations",
    "build_config",
    "subtract_background",
]
