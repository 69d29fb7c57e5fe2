"""LM-OSL curve fitting: model, parameters, strategies and the fitter."""

from lumfit.core.fitting.attempt import FitDiagnostic, FitOutcome, attempt_fit
from lumfit.core.fitting.contribution import (
    ComponentCurves,
    ContributionMatrix,
    build_contribution_matrix,
)
from lumfit.core.fitting.fitter import CurveFitter, fit_lm_curve
from lumfit.core.fitting.parameters import Parameter, ParameterId, Parameters, ParameterType
from lumfit.core.fitting.profile import (
    ProfileInterval,
    compute_confidence_intervals,
    compute_profile_likelihood,
)
from lumfit.core.fitting.start_values import (
    StartValues,
    candidate_start_values,
    pseudo_start_values,
)
from lumfit.core.fitting.strategies import (
    STRATEGIES,
    LevenbergMarquardtStrategy,
    OptimizationResult,
    PortStrategy,
    get_strategy,
)

__all__ = [
    "STRATEGIES",
    "ComponentCurves",
    "ContributionMatrix",
    "CurveFitter",
    "FitDiagnostic",
    "FitOutcome",
    "LevenbergMarquardtStrategy",
    "OptimizationResult",
    "Parameter",
    "ParameterId",
    "ParameterType",
    "Parameters",
    "PortStrategy",
    "ProfileInterval",
    "StartValues",
    "attempt_fit",
    "build_contribution_matrix",
    "candidate_start_values",
    "compute_confidence_intervals",
    "compute_profile_likelihood",
    "fit_lm_curve",
    "get_strategy",
    "pseudo_start_values",
]
