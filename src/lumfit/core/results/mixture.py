"""Finite mixture model results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from lumfit.core.shared.typing import FloatArray


@dataclass(frozen=True, slots=True)
class MixtureComponent:
    """One dose component of a mixture model.

    Attributes
    ----------
        dose: Component dose exp(mu)
        dose_error: Standard error of the dose (NaN when unavailable)
        relative_error: Relative standard error sqrt(Var(mu))
        proportion: Mixing proportion
    """

    dose: float
    dose_error: float
    relative_error: float
    proportion: float


@dataclass(frozen=True, slots=True)
class SingleComponentFit:
    """Reference one-component (common age) model."""

    dose: float
    sigmab: float
    log_likelihood: float
    bic: float


@dataclass(frozen=True, slots=True)
class MixtureModel:
    """Mixture model fitted for one component count k.

    Components are reported in the internal order of the iteration, which is
    ascending in dose for the evenly spaced start means.
    """

    n_components: int
    components: tuple[MixtureComponent, ...]
    log_likelihood: float
    bic: float
    grain_probability: FloatArray
    information: FloatArray
    covariance: FloatArray | None
    means: FloatArray
    single_component: SingleComponentFit
    sigmab: float
    n_observations: int
    diagnostics: tuple[str, ...] = ()
    arguments: dict[str, Any] = field(default_factory=dict)

    @property
    def doses(self) -> FloatArray:
        return np.array([c.dose for c in self.components])

    @property
    def dose_errors(self) -> FloatArray:
        return np.array([c.dose_error for c in self.components])

    @property
    def proportions(self) -> FloatArray:
        return np.array([c.proportion for c in self.components])

    @property
    def has_missing(self) -> bool:
        """True when any component value is NaN."""
        values = [(c.dose, c.dose_error, c.relative_error, c.proportion) for c in self.components]
        return bool(np.isnan(np.asarray(values, dtype=float)).any())

    def summary_frame(self) -> pd.DataFrame:
        """Rows dose, rse, se, proportion; one column comp{i} per component."""
        columns = [f"comp{i}" for i in range(1, self.n_components + 1)]
        return pd.DataFrame(
            [
                [c.dose for c in self.components],
                [c.relative_error for c in self.components],
                [c.dose_error for c in self.components],
                [c.proportion for c in self.components],
            ],
            index=["dose", "rse(dose)", "se(dose)", "proportion"],
            columns=columns,
        )

    def grain_probability_frame(self) -> pd.DataFrame:
        """Membership probability of each grain (rows) in each component."""
        columns = [f"comp{i}" for i in range(1, self.n_components + 1)]
        return pd.DataFrame(self.grain_probability, columns=columns)


@dataclass(frozen=True, slots=True)
class MixtureSweep:
    """Mixture models fitted for several component counts.

    Attributes
    ----------
        models: One model per k, ascending
        k_values: Component counts
        bic: BIC per k
        log_likelihood: Maximum log likelihood per k
        best_k: k with the lowest BIC
        llik_significant: llik(k_{i+1}) / llik(k_i) > 3 for consecutive k
        significant_k: k of the first flagged step, if any
        single_component: Reference one-component model
    """

    models: tuple[MixtureModel, ...]
    k_values: tuple[int, ...]
    bic: FloatArray
    log_likelihood: FloatArray
    best_k: int
    llik_significant: tuple[bool, ...]
    significant_k: int | None
    single_component: SingleComponentFit
    sigmab: float
    arguments: dict[str, Any] = field(default_factory=dict)

    def model(self, k: int) -> MixtureModel:
        """Return the model fitted with k components."""
        for model in self.models:
            if model.n_components == k:
                return model
        msg = f"no model with {k} components in this sweep"
        raise KeyError(msg)

    @property
    def best_model(self) -> MixtureModel:
        return self.model(self.best_k)

    @property
    def summary(self) -> pd.DataFrame:
        """Ragged table: rows c{j}_dose, c{j}_se, c{j}_prop; one column per k.

        Cells for components beyond a model's k are NaN.
        """
        max_k = max(self.k_values)
        index = [f"c{j}_{field_}" for j in range(1, max_k + 1) for field_ in ("dose", "se", "prop")]
        table = np.full((3 * max_k, len(self.models)), np.nan)
        for column, model in enumerate(self.models):
            for j, component in enumerate(model.components):
                table[3 * j : 3 * j + 3, column] = (
                    component.dose,
                    component.dose_error,
                    component.proportion,
                )
        return pd.DataFrame(table, index=index, columns=[f"k={k}" for k in self.k_values])

    @property
    def statistics(self) -> pd.DataFrame:
        """BIC and log likelihood per k."""
        return pd.DataFrame(
            [self.bic, self.log_likelihood],
            index=["BIC", "llik"],
            columns=[f"k={k}" for k in self.k_values],
        )

    @property
    def has_missing(self) -> bool:
        """True when any cell of the summary that belongs to a fitted component is NaN."""
        return any(model.has_missing for model in self.models)


__all__ = ["MixtureComponent", "MixtureModel", "MixtureSweep", "SingleComponentFit"]
