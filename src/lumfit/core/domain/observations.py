"""Equivalent dose observations for mixture modelling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from lumfit.core.shared.exceptions import InvalidInputError

if TYPE_CHECKING:
    from lumfit.core.shared.typing import FloatArray, TableLike


@dataclass(frozen=True, slots=True)
class Observations:
    """Single-grain equivalent doses with their standard errors.

    Attributes
    ----------
        doses: Equivalent doses (> 0)
        errors: Absolute standard errors of the doses (>= 0)
    """

    doses: FloatArray
    errors: FloatArray

    def __post_init__(self) -> None:
        doses = np.array(self.doses, dtype=float)
        errors = np.array(self.errors, dtype=float)

        if doses.ndim != 1 or doses.shape != errors.shape:
            raise InvalidInputError("data", "doses and errors must be 1-D of equal length")
        if doses.size < 2:
            raise InvalidInputError("data", f"at least 2 observations are needed, got {doses.size}")
        if not np.all(np.isfinite(doses)) or np.any(doses <= 0):
            raise InvalidInputError("data", "doses must be finite and positive")
        if not np.all(np.isfinite(errors)) or np.any(errors < 0):
            raise InvalidInputError("data", "dose errors must be finite and non-negative")

        doses.flags.writeable = False
        errors.flags.writeable = False
        object.__setattr__(self, "doses", doses)
        object.__setattr__(self, "errors", errors)

    @classmethod
    def from_array(cls, data: TableLike) -> Observations:
        """Build from an (n, >=2) table of (dose, dose error); extra columns are ignored."""
        try:
            table = np.asarray(data, dtype=float)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError("data", "data must be numeric") from exc

        if table.ndim != 2 or table.shape[1] < 2:
            msg = f"expected an (n, 2) table of dose and dose error, got shape {table.shape}"
            raise InvalidInputError("data", msg)
        return cls(doses=table[:, 0], errors=table[:, 1])

    def __len__(self) -> int:
        return int(self.doses.size)

    @property
    def log_doses(self) -> FloatArray:
        """y = log(dose)."""
        return np.log(self.doses)

    @property
    def relative_errors(self) -> FloatArray:
        """s = error / dose, the standard error of log(dose)."""
        return self.errors / self.doses

    def weights(self, sigmab: float) -> FloatArray:
        """w = 1 / (sigmab^2 + s^2)."""
        with np.errstate(divide="ignore"):
            return 1.0 / (sigmab**2 + self.relative_errors**2)


def as_observations(data: Observations | TableLike) -> Observations:
    """Coerce Observations or an (n, 2) table into Observations."""
    if isinstance(data, Observations):
        return data
    return Observations.from_array(data)


__all__ = ["Observations", "as_observations"]
