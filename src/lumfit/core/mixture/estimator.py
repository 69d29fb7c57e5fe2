"""Finite mixture model estimator for equivalent dose distributions.

Fits k log-normal dose components with a common overdispersion sigmab to
single-grain equivalent doses (Galbraith & Green 1990; Roberts et al. 2000).
Several component counts can be fitted in one call; the models are then
compared by BIC and by the log likelihood gain of each added component.
"""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING, Any

import numpy as np

from lumfit.core.constants import FMM_ITERATIONS, LLIK_IMPROVEMENT_RATIO
from lumfit.core.domain.config import MixtureConfig, build_config
from lumfit.core.domain.observations import Observations, as_observations
from lumfit.core.mixture.em import mixture_log_likelihood, run_em, single_component_estimate
from lumfit.core.mixture.information import (
    information_matrix,
    invert_information,
    mean_standard_errors,
)
from lumfit.core.parallel import map_parallel
from lumfit.core.results.mixture import (
    MixtureComponent,
    MixtureModel,
    MixtureSweep,
    SingleComponentFit,
)
from lumfit.core.results.statistics import compute_bic
from lumfit.core.shared.exceptions import ModelQualityWarning, NumericsError, NumericsWarning
from lumfit.core.shared.reporter import LoggingReporter, Reporter

if TYPE_CHECKING:
    from collections.abc import Sequence

    from lumfit.core.shared.typing import TableLike


class FiniteMixtureEstimator:
    """Maximum likelihood finite mixture model.

    Example:
        >>> estimator = FiniteMixtureEstimator(sigmab=0.2, n_components=[2, 3, 4])
        >>> sweep = estimator.fit(data)
        >>> sweep.best_k
    """

    def __init__(
        self,
        sigmab: float,
        n_components: int | Sequence[int],
        *,
        grain_probability: bool = False,
        verbose: bool = False,
        n_workers: int = 1,
        n_iterations: int = FMM_ITERATIONS,
        reporter: Reporter | None = None,
    ) -> None:
        self.config = build_config(
            MixtureConfig,
            sigmab=sigmab,
            n_components=n_components,
            grain_probability=grain_probability,
            verbose=verbose,
            n_workers=n_workers,
        )
        self.n_iterations = n_iterations
        self.reporter = reporter or LoggingReporter()

    @classmethod
    def from_config(
        cls, config: MixtureConfig, *, reporter: Reporter | None = None
    ) -> FiniteMixtureEstimator:
        return cls(
            config.sigmab,
            config.n_components,
            grain_probability=config.grain_probability,
            verbose=config.verbose,
            n_workers=config.n_workers,
            reporter=reporter,
        )

    @property
    def sigmab(self) -> float:
        return self.config.sigmab

    def fit(self, observations: Observations | TableLike) -> MixtureModel | MixtureSweep:
        """Fit the mixture model(s).

        Returns
        -------
            MixtureModel for a single k, MixtureSweep for several

        Raises
        ------
            InvalidInputError: If the observations are malformed
        """
        data = as_observations(observations)
        k_values = self.config.n_components
        self.reporter.action(
            f"Fitting finite mixture model(s) k={', '.join(map(str, k_values))} "
            f"to {len(data)} doses (sigmab={self.sigmab})"
        )

        models = map_parallel(
            lambda k: self.fit_model(data, k),
            k_values,
            n_workers=self.config.n_workers,
            progress_callback=self._report_model,
        )

        if not self.config.is_sweep:
            result: MixtureModel | MixtureSweep = models[0]
        else:
            result = self._build_sweep(models)

        if result.has_missing:
            warnings.warn(
                "The results contain missing values (NaN); see the model diagnostics",
                ModelQualityWarning,
                stacklevel=2,
            )
        return result

    def fit_model(self, observations: Observations, n_components: int) -> MixtureModel:
        """Fit the model for a single component count."""
        y = observations.log_doses
        w = observations.weights(self.sigmab)
        n = len(observations)
        k = n_components

        state = run_em(y, w, k, self.n_iterations)
        log_likelihood = mixture_log_likelihood(state.weighted_densities)
        bic = compute_bic(log_likelihood, 2 * k - 1, n)

        information = information_matrix(y, w, state.means, state.proportions, state.membership)
        diagnostics: list[str] = []
        covariance = None
        try:
            covariance = invert_information(information)
        except NumericsError as exc:
            message = f"k={k}: {exc}; standard errors are not available"
            diagnostics.append(message)
            self.reporter.warning(message)
            warnings.warn(message, NumericsWarning, stacklevel=3)

        relative_errors = mean_standard_errors(covariance, k)
        doses = np.exp(state.means)
        components = tuple(
            MixtureComponent(
                dose=float(doses[i]),
                dose_error=float(doses[i] * relative_errors[i]),
                relative_error=float(relative_errors[i]),
                proportion=float(state.proportions[i]),
            )
            for i in range(k)
        )

        return MixtureModel(
            n_components=k,
            components=components,
            log_likelihood=log_likelihood,
            bic=bic,
            grain_probability=state.membership,
            information=information,
            covariance=covariance,
            means=state.means,
            single_component=self.single_component(observations),
            sigmab=self.sigmab,
            n_observations=n,
            diagnostics=tuple(diagnostics),
            arguments=self._arguments(),
        )

    def single_component(self, observations: Observations) -> SingleComponentFit:
        """Reference one-component model: weighted mean in log space."""
        mean, log_likelihood = single_component_estimate(
            observations.log_doses, observations.weights(self.sigmab)
        )
        return SingleComponentFit(
            dose=float(np.exp(mean)),
            sigmab=self.sigmab,
            log_likelihood=log_likelihood,
            bic=compute_bic(log_likelihood, 1, len(observations)),
        )

    def _build_sweep(self, models: list[MixtureModel]) -> MixtureSweep:
        k_values = tuple(model.n_components for model in models)
        bic = np.array([model.bic for model in models])
        log_likelihood = np.array([model.log_likelihood for model in models])

        with np.errstate(divide="ignore", invalid="ignore"):
            ratios = log_likelihood[1:] / log_likelihood[:-1]
        significant = tuple(bool(ratio > LLIK_IMPROVEMENT_RATIO) for ratio in ratios)
        significant_k = next(
            (k_values[i + 1] for i, flagged in enumerate(significant) if flagged), None
        )

        best_k = k_values[int(np.nanargmin(bic))] if np.any(np.isfinite(bic)) else k_values[0]
        self.reporter.info(f"Lowest BIC for k={best_k}")

        return MixtureSweep(
            models=tuple(models),
            k_values=k_values,
            bic=bic,
            log_likelihood=log_likelihood,
            best_k=best_k,
            llik_significant=significant,
            significant_k=significant_k,
            single_component=models[0].single_component,
            sigmab=self.sigmab,
            arguments=self._arguments(),
        )

    def _report_model(self, model: MixtureModel) -> None:
        self.reporter.info(
            f"k={model.n_components}: llik={model.log_likelihood:.3f}, BIC={model.bic:.3f}"
        )

    def _arguments(self) -> dict[str, Any]:
        return self.config.model_dump()


def fit_finite_mixture(
    observations: Observations | TableLike,
    sigmab: float,
    n_components: int | Sequence[int],
    **kwargs: Any,
) -> MixtureModel | MixtureSweep:
    """Functional counterpart of :class:`FiniteMixtureEstimator`.

    Keyword arguments are passed to the estimator constructor.
    """
    return FiniteMixtureEstimator(sigmab, n_components, **kwargs).fit(observations)


__all__ = ["FiniteMixtureEstimator", "fit_finite_mixture"]
