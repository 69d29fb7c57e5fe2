"""Measured luminescence curves and background subtraction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

import numpy as np
from numpy.polynomial import Polynomial

from lumfit.core.shared.exceptions import InvalidInputError

if TYPE_CHECKING:
    from lumfit.core.shared.typing import FloatArray, TableLike

BackgroundMethod = Literal["polynomial", "linear", "channel"]

_POLYNOMIAL_DEGREE: dict[str, int] = {"polynomial": 3, "linear": 1}


def _readonly(values: FloatArray) -> FloatArray:
    array = np.array(values, dtype=float)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, slots=True)
class Curve:
    """An (x, y) signal curve with strictly increasing x.

    Attributes
    ----------
        x: Stimulation time (or any abscissa), strictly increasing
        y: Measured intensity
    """

    x: FloatArray
    y: FloatArray

    def __post_init__(self) -> None:
        x = _readonly(self.x)
        y = _readonly(self.y)

        if x.ndim != 1 or y.ndim != 1:
            raise InvalidInputError("curve", "x and y must be one-dimensional")
        if x.size == 0:
            raise InvalidInputError("curve", "curve is empty")
        if x.size != y.size:
            msg = f"x ({x.size}) and y ({y.size}) differ in length"
            raise InvalidInputError("curve", msg)
        if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
            raise InvalidInputError("curve", "curve contains non-finite values")
        if x.size > 1 and np.any(np.diff(x) <= 0):
            raise InvalidInputError("curve", "x values must be strictly increasing")

        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    @classmethod
    def from_array(cls, data: TableLike, name: str = "curve") -> Curve:
        """Build a curve from a two-column table (x in column 0, y in column 1).

        Additional columns are ignored. ``name`` is used in error messages.
        """
        try:
            table = np.asarray(data, dtype=float)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(name, "data must be numeric") from exc

        if table.ndim != 2 or table.shape[1] < 2:
            msg = f"expected a two-column table, got shape {table.shape}"
            raise InvalidInputError(name, msg)
        if table.shape[0] == 0:
            raise InvalidInputError(name, "curve is empty")

        try:
            return cls(x=table[:, 0], y=table[:, 1])
        except InvalidInputError as exc:
            raise InvalidInputError(name, str(exc).split(": ", 1)[-1]) from exc

    def __len__(self) -> int:
        return int(self.x.size)

    @property
    def x_max(self) -> float:
        """Largest abscissa value (total stimulation time for LM-OSL)."""
        return float(self.x[-1])

    def with_y(self, y: FloatArray) -> Curve:
        """Return a new curve sharing x with different intensities."""
        return Curve(x=self.x, y=y)

    def to_array(self) -> FloatArray:
        """Return the curve as an (n, 2) array."""
        return np.column_stack([self.x, self.y])


def as_curve(data: Curve | TableLike, name: str = "curve") -> Curve:
    """Coerce a Curve or a two-column table into a Curve."""
    if isinstance(data, Curve):
        return data
    return Curve.from_array(data, name=name)


@dataclass(frozen=True, slots=True)
class BackgroundCorrection:
    """Outcome of a background subtraction.

    Attributes
    ----------
        method: Subtraction method used
        coefficients: Polynomial coefficients in ascending powers fitted to
            the background curve (None for channel-wise subtraction)
        corrected: Background-corrected signal curve
    """

    method: BackgroundMethod
    coefficients: FloatArray | None
    corrected: Curve

    def evaluate(self, x: FloatArray) -> FloatArray | None:
        """Evaluate the fitted background polynomial at x."""
        if self.coefficients is None:
            return None
        return Polynomial(self.coefficients)(np.asarray(x, dtype=float))


def subtract_background(
    curve: Curve,
    background: Curve,
    method: BackgroundMethod = "polynomial",
) -> BackgroundCorrection:
    """Subtract a background curve from a signal curve.

    Args:
        curve: Signal curve
        background: Background curve with the same number of channels
        method: 'polynomial' (cubic least-squares fit of the background),
            'linear' (straight-line fit) or 'channel' (element-wise)

    Returns
    -------
        BackgroundCorrection holding the corrected curve

    Raises
    ------
        InvalidInputError: If lengths differ or the method is unknown
    """
    if len(curve) != len(background):
        msg = f"lengths of 'curve' ({len(curve)}) and 'background' ({len(background)}) differ"
        raise InvalidInputError("background", msg)

    if method == "channel":
        return BackgroundCorrection(
            method=method,
            coefficients=None,
            corrected=curve.with_y(curve.y - background.y),
        )

    if method not in _POLYNOMIAL_DEGREE:
        raise InvalidInputError("background_method", f"unknown method '{method}'")

    degree = _POLYNOMIAL_DEGREE[method]
    if len(background) <= degree:
        msg = f"at least {degree + 1} background channels are needed for a '{method}' fit"
        raise InvalidInputError("background", msg)

    fitted = Polynomial.fit(background.x, background.y, deg=degree)
    coefficients = fitted.convert().coef
    # convert() can drop trailing zero coefficients
    coefficients = np.pad(coefficients, (0, degree + 1 - coefficients.size))

    return BackgroundCorrection(
        method=method,
        coefficients=_readonly(coefficients),
        corrected=curve.with_y(curve.y - fitted(curve.x)),
    )
