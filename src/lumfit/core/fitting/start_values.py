"""Start values for LM-OSL fits.

Automatic start values come from a table of seven quartz detrapping rates.
A window of ``n_components`` consecutive table entries is tried first at the
fast end of the table and then slid towards the slow end. The optional
advanced search replaces each window by randomly perturbed copies of it.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

import numpy as np

from lumfit.core.constants import (
    ADVANCED_SEARCH_RELATIVE_SD,
    ADVANCED_SEARCH_SAMPLES,
    MAX_COMPONENTS,
    PSEUDO_DETRAPPING_RATES,
)
from lumfit.core.fitting.computation import join_values
from lumfit.core.fitting.lmosl import lmosl_sum
from lumfit.core.shared.exceptions import InvalidInputError

if TYPE_CHECKING:
    from lumfit.core.domain.curve import Curve
    from lumfit.core.shared.typing import FloatArray, TableLike

StartSource = Literal["user", "pseudo", "advanced"]


@dataclass(frozen=True, slots=True)
class StartValues:
    """Start vector for one fit attempt.

    Attributes
    ----------
        intensities: Start values for I1..Ik
        positions: Start values for xm1..xmk
        source: 'user', 'pseudo' (table window) or 'advanced' (perturbed window)
        window: 0-based offset of the pseudo table window (None for user values)
        sample: Index of the random draw within the window (advanced only)
    """

    intensities: FloatArray
    positions: FloatArray
    source: StartSource = "pseudo"
    window: int | None = None
    sample: int | None = None

    @property
    def n_components(self) -> int:
        return int(self.intensities.size)

    @property
    def values(self) -> FloatArray:
        """Parameter vector (I1..Ik, xm1..xmk)."""
        return join_values(self.intensities, self.positions)

    def as_array(self) -> FloatArray:
        """(k, 2) array of (I, xm) rows."""
        return np.column_stack([self.intensities, self.positions])

    def pseudo_curve(self, x: FloatArray) -> FloatArray:
        """Curve obtained by evaluating the model at the start values."""
        return lmosl_sum(x, self.intensities, self.positions)

    def describe(self) -> str:
        if self.source == "user":
            return "user start values"
        label = f"window {self.window}"
        if self.sample is not None:
            label += f", sample {self.sample}"
        return label


def pseudo_start_table(curve: Curve) -> tuple[FloatArray, FloatArray]:
    """Start values for all seven table entries.

    xm = sqrt(max(x) / b). The intensity start is the abscissa of the channel
    closest to xm (the smallest such abscissa on ties).
    """
    rates = np.asarray(PSEUDO_DETRAPPING_RATES, dtype=float)
    positions = np.sqrt(curve.x_max / rates)
    distance = np.abs(curve.x[:, np.newaxis] - positions[np.newaxis, :])
    # argmin returns the first minimum and x is increasing
    intensities = curve.x[np.argmin(distance, axis=0)]
    return intensities, positions


def window_offsets(n_components: int) -> range:
    """Offsets of every window of n_components entries in the table."""
    return range(MAX_COMPONENTS - n_components + 1)


def pseudo_start_values(curve: Curve, n_components: int, window: int = 0) -> StartValues:
    """Start values from one window of the pseudo table."""
    if window not in window_offsets(n_components):
        msg = f"window {window} out of range for {n_components} components"
        raise InvalidInputError("window", msg)
    intensities, positions = pseudo_start_table(curve)
    selection = slice(window, window + n_components)
    return StartValues(
        intensities=intensities[selection].copy(),
        positions=positions[selection].copy(),
        source="pseudo",
        window=window,
    )


def perturbed_start_values(
    base: StartValues,
    rng: np.random.Generator,
    n_samples: int = ADVANCED_SEARCH_SAMPLES,
    relative_sd: float = ADVANCED_SEARCH_RELATIVE_SD,
) -> list[StartValues]:
    """Draw normally distributed start vectors around a base window.

    The standard deviation is ``relative_sd`` times each start value; draws
    are clipped at the lower bound 0.
    """
    shape = (n_samples, base.n_components)
    intensity_draws = rng.normal(base.intensities, relative_sd * np.abs(base.intensities), shape)
    position_draws = rng.normal(base.positions, relative_sd * np.abs(base.positions), shape)
    return [
        StartValues(
            intensities=np.clip(intensity_draws[i], 0.0, None),
            positions=np.clip(position_draws[i], 0.0, None),
            source="advanced",
            window=base.window,
            sample=i,
        )
        for i in range(n_samples)
    ]


def user_start_values(start_values: TableLike, n_components: int) -> StartValues:
    """Validate user supplied (k, 2) start values."""
    try:
        table = np.asarray(start_values, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("start_values", "values must be numeric") from exc

    if table.ndim != 2 or table.shape[1] != 2:
        msg = f"expected a (k, 2) table of (I, xm) pairs, got shape {table.shape}"
        raise InvalidInputError("start_values", msg)
    if table.shape[0] != n_components:
        msg = f"{table.shape[0]} rows given for {n_components} components"
        raise InvalidInputError("start_values", msg)
    if not np.all(np.isfinite(table)) or np.any(table < 0):
        raise InvalidInputError("start_values", "values must be finite and non-negative")

    return StartValues(
        intensities=table[:, 0].copy(),
        positions=table[:, 1].copy(),
        source="user",
    )


def candidate_start_values(
    curve: Curve,
    n_components: int,
    *,
    advanced: bool = False,
    n_samples: int = ADVANCED_SEARCH_SAMPLES,
    rng: np.random.Generator | None = None,
) -> Iterator[StartValues]:
    """Yield start vectors in the order they should be attempted.

    Without the advanced search every window is yielded once. With it, each
    window is replaced by ``n_samples`` perturbed copies.
    """
    generator = rng if rng is not None else np.random.default_rng()

    for window in window_offsets(n_components):
        base = pseudo_start_values(curve, n_components, window)
        if advanced:
            yield from perturbed_start_values(base, generator, n_samples)
        else:
            yield base


__all__ = [
    "StartSource",
    "StartValues",
    "candidate_start_values",
    "perturbed_start_values",
    "pseudo_start_table",
    "pseudo_start_values",
    "user_start_values",
    "window_offsets",
]
