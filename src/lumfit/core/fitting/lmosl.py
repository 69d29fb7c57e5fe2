"""First-order LM-OSL peak shape (Kitis & Pagonis 2008) and derived quantities."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from lumfit.core.shared.typing import FloatArray

_SQRT_E = float(np.exp(0.5))


def lmosl_component(x: FloatArray, intensity: float, position: float) -> FloatArray:
    """Evaluate a single LM-OSL component.

    ``exp(0.5) * I * x / xm * exp(-x^2 / (2 xm^2))``, which peaks at ``x = xm``
    with height ``I``.
    """
    x = np.asarray(x, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return _SQRT_E * intensity * x / position * np.exp(-(x**2) / (2.0 * position**2))


def lmosl_components(x: FloatArray, intensities: FloatArray, positions: FloatArray) -> FloatArray:
    """Evaluate every component; returns an (n, k) array."""
    x = np.asarray(x, dtype=float)[:, np.newaxis]
    intensities = np.asarray(intensities, dtype=float)[np.newaxis, :]
    positions = np.asarray(positions, dtype=float)[np.newaxis, :]
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return _SQRT_E * intensities * x / positions * np.exp(-(x**2) / (2.0 * positions**2))


def lmosl_sum(x: FloatArray, intensities: FloatArray, positions: FloatArray) -> FloatArray:
    """Sum of k LM-OSL components."""
    return lmosl_components(x, intensities, positions).sum(axis=1)


def lmosl_jacobian(x: FloatArray, intensities: FloatArray, positions: FloatArray) -> FloatArray:
    """Analytic Jacobian of the sum with respect to (I1..Ik, xm1..xmk).

    dF/dI = F/I and dF/dxm = F * (x^2 - xm^2) / xm^3, evaluated per
    component. Returns an (n, 2k) array.
    """
    x = np.asarray(x, dtype=float)
    positions = np.asarray(positions, dtype=float)
    intensities = np.asarray(intensities, dtype=float)

    # dF/dI does not depend on I, so evaluate the unit-height shape directly
    shape = lmosl_components(x, np.ones_like(intensities), positions)
    with np.errstate(divide="ignore", invalid="ignore"):
        d_position = (
            shape
            * intensities[np.newaxis, :]
            * (x[:, np.newaxis] ** 2 - positions[np.newaxis, :] ** 2)
            / positions[np.newaxis, :] ** 3
        )
    return np.hstack([shape, d_position])


def detrapping_rate(positions: FloatArray, x_max: float) -> FloatArray:
    """Detrapping probability b = max(t) / xm^2."""
    positions = np.asarray(positions, dtype=float)
    with np.errstate(divide="ignore"):
        return x_max / positions**2


def initial_population(intensities: FloatArray, positions: FloatArray) -> FloatArray:
    """Initial number of trapped electrons n0 = I / exp(-0.5) * xm."""
    return np.asarray(intensities, dtype=float) / np.exp(-0.5) * np.asarray(positions, dtype=float)


def photoionisation_cross_section(rates: FloatArray, stimulation_intensity: float) -> FloatArray:
    """Cross-section (cm^2) from detrapping rates and the photon flux."""
    return np.asarray(rates, dtype=float) / stimulation_intensity


__all__ = [
    "detrapping_rate",
    "initial_population",
    "lmosl_component",
    "lmosl_components",
    "lmosl_jacobian",
    "lmosl_sum",
    "photoionisation_cross_section",
]
