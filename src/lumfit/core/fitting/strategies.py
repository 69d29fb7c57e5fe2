"""Optimization strategy implementations used by the curve fitter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

import numpy as np
from scipy.optimize import least_squares

from lumfit.core.constants import (
    LEAST_SQUARES_FTOL,
    LEAST_SQUARES_GTOL,
    LEAST_SQUARES_XTOL,
    LM_FIT_MAX_ITERATIONS,
)
from lumfit.core.fitting.computation import jacobian, residuals
from lumfit.core.fitting.parameters import from_internal, internal_gradient, to_internal
from lumfit.core.results.statistics import compute_residual_variance, compute_rss
from lumfit.core.shared.exceptions import OptimizationError

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from collections.abc import Callable

    from lumfit.core.domain.curve import Curve
    from lumfit.core.fitting.parameters import Parameters
    from lumfit.core.shared.typing import FloatArray


class OptimizationStrategy(Protocol):
    """Protocol implemented by all optimization strategies."""

    name: str

    def optimize(self, params: Parameters, curve: Curve) -> OptimizationResult:
        """Optimize the varying parameters against the curve."""
        ...


@dataclass(slots=True)
class OptimizationResult:
    """Normalized result object for strategy executions."""

    x: FloatArray
    cost: float
    success: bool
    status: int
    message: str
    n_evaluations: int
    params: Parameters


def _vary_mask(params: Parameters) -> np.ndarray:
    return np.array([param.vary for param in params.values()], dtype=bool)


def _make_problem(
    params: Parameters, curve: Curve
) -> tuple[Callable[[FloatArray], FloatArray], Callable[[FloatArray], FloatArray]]:
    """Residual and Jacobian functions over the varying parameters only."""
    mask = _vary_mask(params)
    full = params.get_values()

    def expand(values: FloatArray) -> FloatArray:
        expanded = full.copy()
        expanded[mask] = values
        return expanded

    def objective(values: FloatArray) -> FloatArray:
        return residuals(expand(values), curve)

    def objective_jacobian(values: FloatArray) -> FloatArray:
        return jacobian(expand(values), curve)[:, mask]

    return objective, objective_jacobian


class PortStrategy:
    """Bounded trust-region reflective least squares.

    Equivalent of the PORT routines: every parameter is kept within its
    bounds (here >= 0) during the whole optimization.
    """

    name = "port"

    def __init__(
        self,
        *,
        ftol: float = LEAST_SQUARES_FTOL,
        xtol: float = LEAST_SQUARES_XTOL,
        gtol: float = LEAST_SQUARES_GTOL,
        max_nfev: int = LM_FIT_MAX_ITERATIONS,
        verbose: int = 0,
    ) -> None:
        self._ftol = ftol
        self._xtol = xtol
        self._gtol = gtol
        self._max_nfev = max_nfev
        self._verbose = verbose

    def optimize(self, params: Parameters, curve: Curve) -> OptimizationResult:
        """Optimize the given parameters and return result.

        Args:
            params: Parameters container, updated in place
            curve: Curve to fit

        Returns
        -------
            OptimizationResult with final parameters and diagnostics
        """
        if not params.get_vary_names():
            msg = "no varying parameters to optimize"
            raise OptimizationError(msg)

        objective, objective_jacobian = _make_problem(params, curve)
        lower, upper = params.get_vary_bounds()

        result = least_squares(
            objective,
            params.get_vary_values(),
            jac=objective_jacobian,
            bounds=(lower, upper),
            method="trf",
            ftol=self._ftol,
            xtol=self._xtol,
            gtol=self._gtol,
            max_nfev=self._max_nfev,
            verbose=self._verbose,
        )

        params.set_vary_values(np.clip(result.x, lower, upper))

        return OptimizationResult(
            x=result.x,
            cost=float(result.cost),
            success=bool(result.success),
            status=int(result.status),
            message=result.message,
            n_evaluations=int(result.nfev),
            params=params,
        )


class LevenbergMarquardtStrategy:
    """Levenberg-Marquardt on bound-transformed parameters.

    MINPACK's LM has no bound support, so bounded parameters are optimized in
    the unbounded internal space and mapped back afterwards.
    """

    name = "LM"

    def __init__(
        self,
        *,
        ftol: float = LEAST_SQUARES_FTOL,
        xtol: float = LEAST_SQUARES_XTOL,
        gtol: float = LEAST_SQUARES_GTOL,
        max_nfev: int = LM_FIT_MAX_ITERATIONS,
        verbose: int = 0,
    ) -> None:
        self._ftol = ftol
        self._xtol = xtol
        self._gtol = gtol
        self._max_nfev = max_nfev
        # method="lm" only supports verbose 0 or 1
        self._verbose = min(verbose, 1)

    def optimize(self, params: Parameters, curve: Curve) -> OptimizationResult:
        """Optimize the given parameters and return result."""
        if not params.get_vary_names():
            msg = "no varying parameters to optimize"
            raise OptimizationError(msg)

        objective, objective_jacobian = _make_problem(params, curve)
        lower, upper = params.get_vary_bounds()

        def internal_objective(internal: FloatArray) -> FloatArray:
            return objective(from_internal(internal, lower, upper))

        def internal_jacobian(internal: FloatArray) -> FloatArray:
            scale = internal_gradient(internal, lower, upper)
            return objective_jacobian(from_internal(internal, lower, upper)) * scale

        result = least_squares(
            internal_objective,
            to_internal(params.get_vary_values(), lower, upper),
            jac=internal_jacobian,
            method="lm",
            ftol=self._ftol,
            xtol=self._xtol,
            gtol=self._gtol,
            max_nfev=self._max_nfev,
            verbose=self._verbose,
        )

        values = from_internal(result.x, lower, upper)
        params.set_vary_values(values)

        return OptimizationResult(
            x=values,
            cost=float(result.cost),
            success=bool(result.success),
            status=int(result.status),
            message=result.message,
            n_evaluations=int(result.nfev),
            params=params,
        )


def estimate_uncertainties(params: Parameters, curve: Curve) -> None:
    """Populate stderr values from the Jacobian at the solution.

    Cov = inv(J^T J) * RSS / (n - p). Left as NaN when the system is
    underdetermined or J^T J is singular.
    """
    mask = _vary_mask(params)
    n_vary = int(mask.sum())
    if n_vary == 0 or len(curve) <= n_vary:
        return

    values = params.get_values()
    jac = jacobian(values, curve)[:, mask]
    rss = compute_rss(residuals(values, curve))
    variance = compute_residual_variance(rss, len(curve), n_vary)
    try:
        cov = np.linalg.inv(jac.T @ jac) * variance
    except np.linalg.LinAlgError:
        return

    with np.errstate(invalid="ignore"):
        stderr = np.sqrt(np.diag(cov))
    params.set_errors(np.where(np.isfinite(stderr), stderr, np.nan))


STRATEGIES: dict[str, type[OptimizationStrategy]] = {
    "port": PortStrategy,
    "trf": PortStrategy,
    "LM": LevenbergMarquardtStrategy,
    "lm": LevenbergMarquardtStrategy,
    "levenberg-marquardt": LevenbergMarquardtStrategy,
}


def get_strategy(name: str, **kwargs: Any) -> OptimizationStrategy:
    """Return an instantiated strategy by name."""
    try:
        strategy_cls = STRATEGIES[name]
    except KeyError as exc:
        msg = f"Unknown optimization strategy: {name}"
        raise OptimizationError(msg) from exc
    return strategy_cls(**kwargs)


__all__ = [
    "STRATEGIES",
    "LevenbergMarquardtStrategy",
    "OptimizationResult",
    "OptimizationStrategy",
    "PortStrategy",
    "estimate_uncertainties",
    "get_strategy",
]
