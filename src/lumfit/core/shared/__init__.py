"""Shared foundational utilities for LumFit."""

from lumfit.core.shared import reporter, typing
from lumfit.core.shared.exceptions import (
    DataIOError,
    InvalidInputError,
    LumFitError,
    LumFitWarning,
    ModelQualityWarning,
    NumericsError,
    NumericsWarning,
    OptimizationError,
)
from lumfit.core.shared.reporter import CompositeReporter, LoggingReporter, NullReporter, Reporter

__all__ = [
    "CompositeReporter",
    "DataIOError",
    "InvalidInputError",
    "LoggingReporter",
    "LumFitError",
    "LumFitWarning",
    "ModelQualityWarning",
    "NullReporter",
    "NumericsError",
    "NumericsWarning",
    "OptimizationError",
    "Reporter",
    "reporter",
    "typing",
]
