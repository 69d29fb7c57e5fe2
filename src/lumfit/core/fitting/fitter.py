"""Multi-component LM-OSL curve fitting.

The fitter subtracts an optional background, iterates over candidate start
vectors until one attempt converges, and derives the physical quantities of
the fitted components (detrapping rates, initial trap populations and
photoionisation cross-sections) together with the contribution matrix.
"""

from __future__ import annotations

import warnings
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import numpy as np

from lumfit.core.domain.config import (
    CurveFitConfig,
    FitMethodName,
    FitOptions,
    StimulationConfig,
    build_config,
    coerce_options,
    coerce_stimulation,
)
from lumfit.core.domain.curve import (
    BackgroundCorrection,
    BackgroundMethod,
    Curve,
    as_curve,
    subtract_background,
)
from lumfit.core.fitting.attempt import FitDiagnostic, FitOutcome, attempt_fit
from lumfit.core.fitting.computation import calculate_model
from lumfit.core.fitting.contribution import ComponentCurves, build_contribution_matrix
from lumfit.core.fitting.lmosl import (
    detrapping_rate,
    initial_population,
    photoionisation_cross_section,
)
from lumfit.core.fitting.parameters import Parameters, ParameterType
from lumfit.core.fitting.profile import ProfileInterval, compute_confidence_intervals
from lumfit.core.fitting.start_values import (
    StartValues,
    candidate_start_values,
    user_start_values,
)
from lumfit.core.fitting.strategies import OptimizationStrategy, get_strategy
from lumfit.core.results.curve_fit import ComponentSpec, FitResult
from lumfit.core.results.statistics import compute_pseudo_r2
from lumfit.core.shared.exceptions import NumericsError, NumericsWarning
from lumfit.core.shared.reporter import LoggingReporter, Reporter

if TYPE_CHECKING:
    from lumfit.core.shared.typing import TableLike


class CurveFitter:
    """Fit a sum of first-order LM-OSL components to a curve.

    Example:
        >>> fitter = CurveFitter(CurveFitConfig(n_components=2))
        >>> result = fitter.fit(curve)
        >>> result.parameter_table()
    """

    def __init__(
        self,
        config: CurveFitConfig | None = None,
        *,
        reporter: Reporter | None = None,
    ) -> None:
        self.config = config or CurveFitConfig()
        self.reporter = reporter or LoggingReporter()

    @property
    def options(self) -> FitOptions:
        return self.config.options

    def fit(
        self,
        curve: Curve | TableLike,
        background: Curve | TableLike | None = None,
        start_values: TableLike | None = None,
    ) -> FitResult:
        """Fit the curve.

        Args:
            curve: Curve or (n, 2) table of (x, y)
            background: Optional background curve with the same length
            start_values: Optional (k, 2) table of (I, xm) start values;
                disables the automatic start value search

        Returns
        -------
            FitResult; a failed fit has ``success`` False

        Raises
        ------
            InvalidInputError: For malformed curves, a background of different
                length or invalid start values
        """
        config = self.config
        data = as_curve(curve, "curve")
        bg = as_curve(background, "background") if background is not None else None
        user_start = (
            user_start_values(start_values, config.n_components)
            if start_values is not None
            else None
        )

        correction: BackgroundCorrection | None = None
        if bg is not None:
            correction = subtract_background(data, bg, config.background_method)
            self.reporter.info(f"Background subtracted ({config.background_method})")
        fit_curve = correction.corrected if correction is not None else data

        strategy = get_strategy(
            config.fit_method,
            max_nfev=self.options.max_iterations,
            verbose=2 if self.options.trace else 0,
        )

        self.reporter.action(
            f"Fitting {config.n_components}-component LM-OSL curve ({config.fit_method})"
        )
        outcome, diagnostic, n_attempts = self._run_attempts(
            fit_curve, self._candidates(fit_curve, user_start), strategy
        )

        arguments = self._arguments(user_start)
        stimulation_intensity = config.stimulation.intensity

        if outcome is None:
            reason = diagnostic.reason if diagnostic is not None else "no attempt made"
            self.reporter.warning(f"Fitting failed after {n_attempts} attempt(s): {reason}")
            return FitResult(
                curve=data,
                corrected_curve=fit_curve,
                n_components=config.n_components,
                method=config.fit_method,
                outcome=None,
                components=(),
                contributions=None,
                component_curves=None,
                pseudo_r2=float("nan"),
                stimulation_intensity=stimulation_intensity,
                n_attempts=n_attempts,
                background=correction,
                diagnostic=diagnostic,
                arguments=arguments,
            )

        self.reporter.success(
            f"Converged on attempt {outcome.attempt} ({outcome.start.describe()})"
        )
        return self._build_result(
            data, fit_curve, outcome, diagnostic, n_attempts, correction, arguments
        )

    def _candidates(self, curve: Curve, user_start: StartValues | None) -> Iterable[StartValues]:
        if user_start is not None:
            return [user_start]

        advanced = self.options.advanced_search
        if advanced and self.config.fit_method != "port":
            self.reporter.info("The advanced start value search is only used with 'port'")
            advanced = False

        return candidate_start_values(
            curve,
            self.config.n_components,
            advanced=advanced,
            n_samples=self.options.advanced_samples,
            rng=np.random.default_rng(self.options.seed),
        )

    def _run_attempts(
        self,
        curve: Curve,
        candidates: Iterable[StartValues],
        strategy: OptimizationStrategy,
    ) -> tuple[FitOutcome | None, FitDiagnostic | None, int]:
        """Try each candidate in turn; stop at the first converged attempt."""
        max_attempts = self.options.max_attempts
        diagnostic: FitDiagnostic | None = None
        n_attempts = 0

        for start in candidates:
            if max_attempts is not None and n_attempts >= max_attempts:
                self.reporter.warning(f"Stopped after the maximum of {max_attempts} attempts")
                break
            n_attempts += 1
            result = attempt_fit(curve, start, strategy, attempt=n_attempts)
            if isinstance(result, FitOutcome):
                return result, diagnostic, n_attempts
            self.reporter.info(
                f"Attempt {n_attempts} ({start.describe()}) failed: {result.reason}"
            )
            diagnostic = result

        return None, diagnostic, n_attempts

    def _build_result(
        self,
        data: Curve,
        fit_curve: Curve,
        outcome: FitOutcome,
        diagnostic: FitDiagnostic | None,
        n_attempts: int,
        correction: BackgroundCorrection | None,
        arguments: dict[str, Any],
    ) -> FitResult:
        params = _sorted_parameters(outcome.params)
        at_bound = params.get_boundary_params()
        if at_bound:
            self.reporter.warning(f"Parameters at the lower bound 0: {', '.join(at_bound)}")
        intensities = params.intensities
        positions = params.positions
        x_max = fit_curve.x_max
        stimulation_intensity = self.config.stimulation.intensity

        rates = detrapping_rate(positions, x_max)
        populations = initial_population(intensities, positions)
        cross_sections = photoionisation_cross_section(rates, stimulation_intensity)
        with np.errstate(divide="ignore", invalid="ignore"):
            relative = cross_sections / cross_sections[0]

        intervals = self._confidence_intervals(params, fit_curve)

        components = []
        for i in range(len(positions)):
            number = i + 1
            rate_error = population_error = cs_error = None
            intensity_interval = position_interval = None
            if intervals is not None:
                i_lo, i_hi = _limits(intervals[f"I{number}"])
                xm_lo, xm_hi = _limits(intervals[f"xm{number}"])
                rate_error = float(
                    abs(detrapping_rate(xm_lo, x_max) - detrapping_rate(xm_hi, x_max))
                )
                population_error = float(
                    abs(initial_population(i_lo, xm_lo) - initial_population(i_hi, xm_hi))
                )
                cs_error = rate_error / stimulation_intensity
                intensity_interval = (i_lo, i_hi)
                position_interval = (xm_lo, xm_hi)

            components.append(
                ComponentSpec(
                    index=number,
                    intensity=float(intensities[i]),
                    position=float(positions[i]),
                    detrapping_rate=float(rates[i]),
                    initial_population=float(populations[i]),
                    cross_section=float(cross_sections[i]),
                    relative_cross_section=float(relative[i]),
                    intensity_stderr=params[f"I{number}"].stderr,
                    position_stderr=params[f"xm{number}"].stderr,
                    detrapping_rate_error=rate_error,
                    initial_population_error=population_error,
                    cross_section_error=cs_error,
                    intensity_interval=intensity_interval,
                    position_interval=position_interval,
                )
            )

        fitted = calculate_model(params.get_values(), fit_curve.x)
        return FitResult(
            curve=data,
            corrected_curve=fit_curve,
            n_components=self.config.n_components,
            method=self.config.fit_method,
            outcome=outcome,
            components=tuple(components),
            contributions=build_contribution_matrix(fit_curve.x, intensities, positions),
            component_curves=ComponentCurves.evaluate(fit_curve.x, intensities, positions),
            pseudo_r2=compute_pseudo_r2(fit_curve.y, fitted),
            stimulation_intensity=stimulation_intensity,
            n_attempts=n_attempts,
            background=correction,
            diagnostic=diagnostic,
            arguments=arguments,
        )

    def _confidence_intervals(
        self, params: Parameters, curve: Curve
    ) -> dict[str, ProfileInterval] | None:
        if not self.options.compute_confidence_intervals:
            return None

        self.reporter.action("Computing 68% profile likelihood intervals")
        try:
            return compute_confidence_intervals(params, curve)
        except NumericsError as exc:
            message = f"Confidence intervals could not be computed: {exc}"
            self.reporter.warning(message)
            warnings.warn(message, NumericsWarning, stacklevel=4)
            return None

    def _arguments(self, user_start: StartValues | None) -> dict[str, Any]:
        config = self.config
        return {
            "n_components": config.n_components,
            "fit_method": config.fit_method,
            "background_method": config.background_method,
            "start_values": user_start.as_array().tolist() if user_start is not None else None,
            "options": config.options.model_dump(),
            "stimulation": config.stimulation.model_dump(),
        }


def _sorted_parameters(params: Parameters) -> Parameters:
    """Renumber components by ascending xm, keeping their standard errors."""
    amplitudes = params.get_by_type(ParameterType.AMPLITUDE)
    positions = params.get_by_type(ParameterType.POSITION)
    order = np.argsort([p.value for p in positions], kind="stable")

    ordered = Parameters.from_components(
        np.array([amplitudes[i].value for i in order]),
        np.array([positions[i].value for i in order]),
    )
    ordered.set_errors(
        np.array(
            [amplitudes[i].stderr for i in order] + [positions[i].stderr for i in order],
            dtype=float,
        )
    )
    return ordered


def _limits(interval: ProfileInterval) -> tuple[float, float]:
    return interval.lower, interval.upper


def fit_lm_curve(
    curve: Curve | TableLike,
    background: Curve | TableLike | None = None,
    *,
    n_components: int = 3,
    start_values: TableLike | None = None,
    fit_method: FitMethodName | str = "port",
    background_method: BackgroundMethod = "polynomial",
    options: FitOptions | dict[str, Any] | None = None,
    stimulation: StimulationConfig | dict[str, Any] | None = None,
    reporter: Reporter | None = None,
) -> FitResult:
    """Fit an LM-OSL curve with ``n_components`` first-order components.

    Functional counterpart of :class:`CurveFitter`; see its ``fit`` method.

    Raises
    ------
        InvalidInputError: For out-of-range arguments or malformed inputs
    """
    config = build_config(
        CurveFitConfig,
        n_components=n_components,
        fit_method=fit_method,
        background_method=background_method,
        options=coerce_options(options),
        stimulation=coerce_stimulation(stimulation),
    )
    return CurveFitter(config, reporter=reporter).fit(curve, background, start_values)


__all__ = ["CurveFitter", "fit_lm_curve"]