"""Core computational functions for LM-OSL curve fitting.

Parameter vectors are laid out as ``(I1..Ik, xm1..xmk)``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from lumfit.core.fitting.lmosl import lmosl_components, lmosl_jacobian, lmosl_sum

if TYPE_CHECKING:
    from lumfit.core.domain.curve import Curve
    from lumfit.core.shared.typing import FloatArray


def split_values(values: FloatArray) -> tuple[FloatArray, FloatArray]:
    """Split a parameter vector into (intensities, positions)."""
    values = np.asarray(values, dtype=float)
    n_components = values.size // 2
    return values[:n_components], values[n_components:]


def join_values(intensities: FloatArray, positions: FloatArray) -> FloatArray:
    """Inverse of split_values."""
    return np.concatenate(
        [np.asarray(intensities, dtype=float), np.asarray(positions, dtype=float)]
    )


def calculate_model(values: FloatArray, x: FloatArray) -> FloatArray:
    """Evaluate the component sum for a parameter vector."""
    intensities, positions = split_values(values)
    return lmosl_sum(x, intensities, positions)


def calculate_components(values: FloatArray, x: FloatArray) -> FloatArray:
    """Evaluate each component for a parameter vector; shape (n, k)."""
    intensities, positions = split_values(values)
    return lmosl_components(x, intensities, positions)


def residuals(values: FloatArray, curve: Curve) -> FloatArray:
    """Residuals (model - data) for the supplied parameter vector."""
    return calculate_model(values, curve.x) - curve.y


def jacobian(values: FloatArray, curve: Curve) -> FloatArray:
    """Jacobian of the residuals with respect to the parameter vector."""
    intensities, positions = split_values(values)
    return lmosl_jacobian(curve.x, intensities, positions)


__all__ = [
    "calculate_components",
    "calculate_model",
    "jacobian",
    "join_values",
    "residuals",
    "split_values",
]
