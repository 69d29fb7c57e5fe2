"""Single fit attempts.

An attempt never raises on numerical trouble: it returns either a
:class:`FitOutcome` (converged) or a :class:`FitDiagnostic` describing why
the start vector did not lead to a usable fit. The retry loop in the fitter
is then plain iteration over candidate start vectors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from lumfit.core.fitting.computation import residuals
from lumfit.core.fitting.parameters import Parameters
from lumfit.core.fitting.strategies import estimate_uncertainties
from lumfit.core.results.statistics import compute_rss
from lumfit.core.shared.exceptions import OptimizationError

if TYPE_CHECKING:
    from lumfit.core.domain.curve import Curve
    from lumfit.core.fitting.start_values import StartValues
    from lumfit.core.fitting.strategies import OptimizationStrategy
    from lumfit.core.shared.typing import FloatArray


@dataclass(frozen=True, slots=True)
class FitOutcome:
    """A converged fit attempt.

    Attributes
    ----------
        params: Fitted parameters (I1..Ik, xm1..xmk) with standard errors
        start: Start values of the attempt
        method: Name of the strategy used
        residuals: Model minus data at the solution
        rss: Residual sum of squares
        n_evaluations: Number of residual evaluations
        message: Optimizer termination message
        attempt: 1-based attempt number
    """

    params: Parameters
    start: StartValues
    method: str
    residuals: FloatArray
    rss: float
    n_evaluations: int
    message: str
    attempt: int

    @property
    def values(self) -> FloatArray:
        return self.params.get_values()

    @property
    def intensities(self) -> FloatArray:
        return self.params.intensities

    @property
    def positions(self) -> FloatArray:
        return self.params.positions

    @property
    def n_parameters(self) -> int:
        return len(self.params)


@dataclass(frozen=True, slots=True)
class FitDiagnostic:
    """A failed fit attempt.

    Attributes
    ----------
        reason: Human readable failure reason
        start: Start values of the attempt
        method: Name of the strategy used
        pseudo_curve: Model evaluated at the start values
        attempt: 1-based attempt number
        status: Optimizer status code, if the optimizer returned
    """

    reason: str
    start: StartValues
    method: str
    pseudo_curve: FloatArray
    attempt: int
    status: int | None = None


def attempt_fit(
    curve: Curve,
    start: StartValues,
    strategy: OptimizationStrategy,
    attempt: int = 1,
) -> FitOutcome | FitDiagnostic:
    """Run one optimization from the given start values.

    Optimizer exceptions, non-convergence and non-finite solutions are all
    converted into a FitDiagnostic.
    """

    def failed(reason: str, status: int | None = None) -> FitDiagnostic:
        return FitDiagnostic(
            reason=reason,
            start=start,
            method=strategy.name,
            pseudo_curve=start.pseudo_curve(curve.x),
            attempt=attempt,
            status=status,
        )

    try:
        params = Parameters.from_components(start.intensities, start.positions)
        result = strategy.optimize(params, curve)
    except (ValueError, OptimizationError, np.linalg.LinAlgError, FloatingPointError) as exc:
        return failed(f"optimizer error: {exc}")

    if not result.success:
        return failed(f"not converged: {result.message}", result.status)

    values = params.get_values()
    if not np.all(np.isfinite(values)):
        return failed("non-finite parameter values", result.status)

    fit_residuals = residuals(values, curve)
    if not np.all(np.isfinite(fit_residuals)):
        return failed("non-finite residuals at the solution", result.status)

    estimate_uncertainties(params, curve)

    return FitOutcome(
        params=params,
        start=start,
        method=strategy.name,
        residuals=fit_residuals,
        rss=compute_rss(fit_residuals),
        n_evaluations=result.n_evaluations,
        message=result.message,
        attempt=attempt,
    )


__all__ = ["FitDiagnostic", "FitOutcome", "attempt_fit"]
