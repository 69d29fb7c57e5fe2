"""Result containers and fit statistics."""

from lumfit.core.results.curve_fit import ComponentSpec, FitResult
from lumfit.core.results.mixture import (
    MixtureComponent,
    MixtureModel,
    MixtureSweep,
    SingleComponentFit,
)
from lumfit.core.results.statistics import (
    compute_bic,
    compute_pseudo_r2,
    compute_rss,
    compute_tss,
)

__all__ = [
    "ComponentSpec",
    "FitResult",
    "MixtureComponent",
    "MixtureModel",
    "MixtureSweep",
    "SingleComponentFit",
    "compute_bic",
    "compute_pseudo_r2",
    "compute_rss",
    "compute_tss",
]
