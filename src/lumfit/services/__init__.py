"""Application service layer for orchestrating LumFit workflows.

This module provides high-level service facades that the CLI and other
adapters can use without knowing core implementation details.
"""

from lumfit.services.curve_fit import CurveFitReport, CurveFitService
from lumfit.services.mixture import MixtureReport, MixtureService

__all__ = [
    "CurveFitReport",
    "CurveFitService",
    "MixtureReport",
    "MixtureService",
]
