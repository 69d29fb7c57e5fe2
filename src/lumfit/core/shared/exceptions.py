"""Exception and warning taxonomy for LumFit.

This module defines a small, coherent hierarchy of exceptions to improve
error handling across the codebase. Use these instead of generic Exception
to communicate intent and allow callers to handle errors precisely.

Only validation errors are meant to reach the caller of the fitting kernels.
Numerical problems are caught inside the kernels and surfaced as warnings
with the categories defined at the bottom of this module.
"""

from __future__ import annotations


class LumFitError(Exception):
    """Base class for all LumFit-specific exceptions."""


class InvalidInputError(LumFitError, ValueError):
    """Invalid input data or out-of-range argument, raised before computation.

    Attributes
    ----------
        argument: Name of the offending argument (e.g. 'sigmab', 'background')
    """

    def __init__(self, argument: str, message: str) -> None:
        self.argument = argument
        super().__init__(f"Invalid '{argument}': {message}")


class DataIOError(LumFitError):
    """Data loading errors (files, formats, permissions)."""


class OptimizationError(LumFitError):
    """Errors occurring during optimization or strategy selection."""


class NumericsError(LumFitError):
    """Numeric instability or invalid arithmetic conditions (singular matrices, NaNs)."""


class LumFitWarning(UserWarning):
    """Base class for all LumFit warnings."""


class NumericsWarning(LumFitWarning):
    """A numerical step failed and the dependent quantities were left missing."""


class ModelQualityWarning(LumFitWarning):
    """The returned summary contains missing values."""


__all__ = [
    "DataIOError",
    "InvalidInputError",
    "LumFitError",
    "LumFitWarning",
    "ModelQualityWarning",
    "NumericsError",
    "NumericsWarning",
    "OptimizationError",
]
