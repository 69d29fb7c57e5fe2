"""LumFit - LM-OSL curve decomposition and finite mixture dose models.

Public API:
    - fit_lm_curve / CurveFitter: Multi-component LM-OSL curve fitting
    - fit_finite_mixture / FiniteMixtureEstimator: Finite mixture model
      for equivalent dose distributions

Configuration:
    - CurveFitConfig, FitOptions, StimulationConfig, MixtureConfig

Services:
    - CurveFitService, MixtureService: File based workflows used by the CLI
"""

import contextlib
from importlib import metadata

__version__ = "0.1.0"

with contextlib.suppress(metadata.PackageNotFoundError):
    __version__ = metadata.version(__name__)

# Configuration
from lumfit.core.domain.config import (
    CurveFitConfig,
    FitOptions,
    MixtureConfig,
    StimulationConfig,
)

# Domain objects
from lumfit.core.domain.curve import Curve
from lumfit.core.domain.observations import Observations

# Kernels (primary API)
from lumfit.core.fitting import CurveFitter, fit_lm_curve
from lumfit.core.mixture import FiniteMixtureEstimator, fit_finite_mixture
from lumfit.core.results import FitResult, MixtureModel, MixtureSweep

# Services
from lumfit.services import CurveFitService, MixtureService

__all__ = [
    # Version
    "__version__",
    # Kernels
    "CurveFitter",
    "fit_lm_curve",
    "FiniteMixtureEstimator",
    "fit_finite_mixture",
    # Results
    "FitResult",
    "MixtureModel",
    "MixtureSweep",
    # Configuration
    "CurveFitConfig",
    "FitOptions",
    "StimulationConfig",
    "MixtureConfig",
    # Domain
    "Curve",
    "Observations",
    # Services
    "CurveFitService",
    "MixtureService",
]
