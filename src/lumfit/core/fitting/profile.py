"""Profile likelihood confidence intervals for LM-OSL fits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from lumfit.core.constants import (
    CONFIDENCE_LEVEL,
    PROFILE_LIKELIHOOD_NPOINTS,
    PROFILE_LIKELIHOOD_SPAN,
)
from lumfit.core.fitting.computation import residuals
from lumfit.core.fitting.parameters import Parameters  # noqa: TC001
from lumfit.core.fitting.strategies import PortStrategy
from lumfit.core.results.statistics import compute_residual_variance, compute_rss, profile_cutoff
from lumfit.core.shared.exceptions import NumericsError, OptimizationError

if TYPE_CHECKING:
    from lumfit.core.domain.curve import Curve
    from lumfit.core.fitting.strategies import OptimizationStrategy
    from lumfit.core.shared.typing import FloatArray


@dataclass(frozen=True, slots=True)
class ProfileInterval:
    """Profile likelihood interval of a single parameter.

    Attributes
    ----------
        name: Parameter name
        best: Best-fit value
        lower: Lower interval limit
        upper: Upper interval limit
        values: Profiled parameter values (ascending, best value included)
        statistic: ΔRSS / s^2 at each profiled value
    """

    name: str
    best: float
    lower: float
    upper: float
    values: FloatArray
    statistic: FloatArray


def _profile_step(params: Parameters, name: str) -> float:
    param = params[name]
    if np.isfinite(param.stderr) and param.stderr > 0:
        return float(param.stderr)
    return 0.1 * abs(param.value) if param.value != 0 else 0.1


def _profile_side(
    params: Parameters,
    curve: Curve,
    name: str,
    direction: int,
    *,
    best_rss: float,
    variance: float,
    cutoff: float,
    n_points: int,
    span: float,
    strategy: OptimizationStrategy,
) -> tuple[float, list[float], list[float]]:
    """Walk away from the best fit until ΔRSS/s^2 crosses the cutoff."""
    param = params[name]
    best = param.value
    bound = param.min if direction < 0 else param.max
    offsets = span * _profile_step(params, name) * np.arange(1, n_points + 1) / n_points

    warm = params.copy()
    previous_value, previous_stat = best, 0.0
    values: list[float] = []
    stats: list[float] = []

    for offset in offsets:
        value = best + direction * offset
        at_bound = (value - bound) * direction >= 0
        if at_bound:
            value = bound

        trial = warm.copy()
        trial[name].value = float(value)
        trial[name].vary = False
        if trial.get_vary_names():
            try:
                strategy.optimize(trial, curve)
            except (ValueError, OptimizationError) as exc:
                msg = f"profile of '{name}' failed at {value:.6g}: {exc}"
                raise NumericsError(msg) from exc

        stat = (compute_rss(residuals(trial.get_values(), curve)) - best_rss) / variance
        values.append(float(value))
        stats.append(float(stat))

        if stat >= cutoff:
            fraction = (cutoff - previous_stat) / (stat - previous_stat)
            return previous_value + fraction * (value - previous_value), values, stats

        if at_bound:
            return float(bound), values, stats

        previous_value, previous_stat = value, stat
        warm = trial

    msg = f"profile of '{name}' did not reach the {cutoff:.3g} cutoff"
    raise NumericsError(msg)


def compute_profile_likelihood(
    params: Parameters,
    curve: Curve,
    param_name: str,
    level: float = CONFIDENCE_LEVEL,
    n_points: int = PROFILE_LIKELIHOOD_NPOINTS,
    span: float = PROFILE_LIKELIHOOD_SPAN,
    strategy: OptimizationStrategy | None = None,
) -> ProfileInterval:
    """Compute a profile likelihood confidence interval.

    The parameter is stepped away from its best-fit value on each side (up
    to ``span`` standard errors, ``n_points`` steps) while the others are
    re-optimized. The interval limit is where ΔRSS/s^2 crosses the F(1, n-p)
    quantile, linearly interpolated between profile points. A side that
    reaches the parameter bound without crossing uses the bound.

    Raises
    ------
        NumericsError: If a side neither crosses the cutoff nor hits a bound,
            or a profile optimization fails
    """
    strategy = strategy or PortStrategy()
    values = params.get_values()
    n_data, n_params = len(curve), len(params)
    best_rss = compute_rss(residuals(values, curve))
    variance = compute_residual_variance(best_rss, n_data, n_params)
    if not variance > 0:
        msg = "residual variance is zero; profile intervals are undefined"
        raise NumericsError(msg)

    cutoff = profile_cutoff(level, n_data, n_params)
    common = {
        "best_rss": best_rss,
        "variance": variance,
        "cutoff": cutoff,
        "n_points": n_points,
        "span": span,
        "strategy": strategy,
    }
    lower, low_values, low_stats = _profile_side(params, curve, param_name, -1, **common)
    upper, high_values, high_stats = _profile_side(params, curve, param_name, +1, **common)

    best = params[param_name].value
    profiled = np.array([*low_values[::-1], best, *high_values])
    statistic = np.array([*low_stats[::-1], 0.0, *high_stats])
    return ProfileInterval(
        name=param_name,
        best=best,
        lower=float(lower),
        upper=float(upper),
        values=profiled,
        statistic=statistic,
    )


def compute_confidence_intervals(
    params: Parameters,
    curve: Curve,
    level: float = CONFIDENCE_LEVEL,
    n_points: int = PROFILE_LIKELIHOOD_NPOINTS,
    span: float = PROFILE_LIKELIHOOD_SPAN,
    strategy: OptimizationStrategy | None = None,
) -> dict[str, ProfileInterval]:
    """Profile every parameter in the set; see compute_profile_likelihood."""
    return {
        name: compute_profile_likelihood(params, curve, name, level, n_points, span, strategy)
        for name in params
    }


__all__ = ["ProfileInterval", "compute_confidence_intervals", "compute_profile_likelihood"]
