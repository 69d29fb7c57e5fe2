"""Parameter management for LM-OSL component fitting.

Parameters are stored as ``I1..Ik`` (amplitudes) followed by ``xm1..xmk``
(peak positions). The vector order used by the optimizers is the insertion
order of the collection.

Bounded parameters can be mapped onto an unbounded internal space (the
MINUIT transform also used by lmfit) so that optimizers without native bound
support, such as Levenberg-Marquardt, still honour them.
"""

from __future__ import annotations

import re
from collections.abc import ItemsView, Iterator, ValuesView  # noqa: TC003
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

import numpy as np


class ParameterType(str, Enum):
    """Types of LM-OSL fitting parameters."""

    AMPLITUDE = "amplitude"  # Peak intensity Im
    POSITION = "position"  # Time of the peak maximum xm
    GENERIC = "generic"


# Both physical parameters are non-negative, without upper bound
_DEFAULT_BOUNDS: dict[ParameterType, tuple[float, float]] = {
    ParameterType.AMPLITUDE: (0.0, np.inf),
    ParameterType.POSITION: (0.0, np.inf),
    ParameterType.GENERIC: (-np.inf, np.inf),
}

_PARAM_TYPE_SHORT_NAMES: dict[ParameterType, str] = {
    ParameterType.AMPLITUDE: "I",
    ParameterType.POSITION: "xm",
    ParameterType.GENERIC: "param",
}

_NAME_PATTERN = re.compile(r"^(I|xm)(\d+)$")


class ParameterId(BaseModel):
    """Structured identifier: parameter type plus 1-based component number."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    param_type: ParameterType
    component: int = Field(ge=1)

    @property
    def name(self) -> str:
        """Parameter name, e.g. 'I1' or 'xm3'."""
        return f"{_PARAM_TYPE_SHORT_NAMES[self.param_type]}{self.component}"

    @classmethod
    def amplitude(cls, component: int) -> ParameterId:
        return cls(param_type=ParameterType.AMPLITUDE, component=component)

    @classmethod
    def position(cls, component: int) -> ParameterId:
        return cls(param_type=ParameterType.POSITION, component=component)

    @classmethod
    def from_name(cls, name: str) -> ParameterId:
        """Parse a parameter name back into a ParameterId."""
        match = _NAME_PATTERN.match(name)
        if match is None:
            msg = f"Cannot parse parameter name: {name}"
            raise ValueError(msg)
        prefix, component = match.groups()
        param_type = ParameterType.AMPLITUDE if prefix == "I" else ParameterType.POSITION
        return cls(param_type=param_type, component=int(component))

    def __str__(self) -> str:
        return self.name


class Parameter(BaseModel):
    """One fitted quantity (an intensity or a peak position) and its bounds.

    Bounds left at +/-inf are replaced by the defaults of ``param_type``;
    ``stderr`` is filled in after a successful fit.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    name: str
    value: float
    min: float = -np.inf
    max: float = np.inf
    vary: bool = True
    param_type: ParameterType = ParameterType.GENERIC
    stderr: float = np.nan
    param_id: ParameterId | None = None

    @model_validator(mode="before")
    @classmethod
    def apply_default_bounds(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("param_type") is None:
            return data
        try:
            lower, upper = _DEFAULT_BOUNDS[ParameterType(data["param_type"])]
        except ValueError:
            return data  # reported by the field validation
        if data.get("min", -np.inf) == -np.inf:
            data["min"] = lower
        if data.get("max", np.inf) == np.inf:
            data["max"] = upper
        return data

    @model_validator(mode="after")
    def check_value_within_bounds(self) -> Parameter:
        if self.min > self.max:
            msg = f"{self.name}: min ({self.min}) > max ({self.max})"
            raise ValueError(msg)
        if not np.isfinite(self.value):
            msg = f"{self.name}: value must be finite, got {self.value}"
            raise ValueError(msg)
        if self.value < self.min or self.value > self.max:
            msg = f"{self.name}: value {self.value} outside bounds [{self.min}, {self.max}]"
            raise ValueError(msg)
        return self

    def __str__(self) -> str:
        state = "" if self.vary else " (fixed)"
        return f"{self.name}={self.value:.6g}{state}"

    def is_at_boundary(self, tol: float = 1e-6) -> bool:
        """True when the value sits on a finite bound, within a relative ``tol``."""
        scale = tol * (1.0 + abs(self.value))
        return bool(abs(self.value - self.min) < scale or abs(self.value - self.max) < scale)


# =============================================================================
# Bound transformation (MINUIT convention)
# =============================================================================


def to_internal(values: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> np.ndarray:
    """Map bounded external values onto the unbounded internal space."""
    values = np.asarray(values, dtype=float)
    internal = values.copy()
    has_lower = np.isfinite(lower)
    has_upper = np.isfinite(upper)

    both = has_lower & has_upper
    only_lower = has_lower & ~has_upper
    only_upper = ~has_lower & has_upper

    internal[both] = np.arcsin(
        np.clip(2.0 * (values[both] - lower[both]) / (upper[both] - lower[both]) - 1.0, -1.0, 1.0)
    )
    internal[only_lower] = np.sqrt((values[only_lower] - lower[only_lower] + 1.0) ** 2 - 1.0)
    internal[only_upper] = np.sqrt((upper[only_upper] - values[only_upper] + 1.0) ** 2 - 1.0)
    return internal


def from_internal(internal: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> np.ndarray:
    """Map internal values back onto the bounded external space."""
    internal = np.asarray(internal, dtype=float)
    values = internal.copy()
    has_lower = np.isfinite(lower)
    has_upper = np.isfinite(upper)

    both = has_lower & has_upper
    only_lower = has_lower & ~has_upper
    only_upper = ~has_lower & has_upper

    values[both] = lower[both] + (np.sin(internal[both]) + 1.0) * (upper[both] - lower[both]) / 2
    values[only_lower] = lower[only_lower] - 1.0 + np.sqrt(internal[only_lower] ** 2 + 1.0)
    values[only_upper] = upper[only_upper] + 1.0 - np.sqrt(internal[only_upper] ** 2 + 1.0)
    return values


def internal_gradient(internal: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> np.ndarray:
    """Derivative of the external values with respect to the internal ones."""
    internal = np.asarray(internal, dtype=float)
    grad = np.ones_like(internal)
    has_lower = np.isfinite(lower)
    has_upper = np.isfinite(upper)

    both = has_lower & has_upper
    only_lower = has_lower & ~has_upper
    only_upper = ~has_lower & has_upper

    grad[both] = np.cos(internal[both]) * (upper[both] - lower[both]) / 2
    grad[only_lower] = internal[only_lower] / np.sqrt(internal[only_lower] ** 2 + 1.0)
    grad[only_upper] = -internal[only_upper] / np.sqrt(internal[only_upper] ** 2 + 1.0)
    return grad


class Parameters(BaseModel):
    """Ordered parameter set of a k-component fit, indexed by name."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    params: dict[str, Parameter] = Field(default_factory=dict)

    @classmethod
    def from_components(
        cls,
        intensities: np.ndarray,
        positions: np.ndarray,
    ) -> Parameters:
        """Create the I1..Ik, xm1..xmk parameter set for k components."""
        intensities = np.asarray(intensities, dtype=float)
        positions = np.asarray(positions, dtype=float)
        if intensities.shape != positions.shape:
            msg = "intensities and positions must have the same length"
            raise ValueError(msg)

        params = cls()
        for index, value in enumerate(intensities, start=1):
            params.add(ParameterId.amplitude(index), value=float(value))
        for index, value in enumerate(positions, start=1):
            params.add(ParameterId.position(index), value=float(value))
        return params

    def add(
        self,
        name: str | ParameterId,
        value: float = 0.0,
        min: float = -np.inf,
        max: float = np.inf,
        vary: bool = True,
        param_type: ParameterType = ParameterType.GENERIC,
    ) -> None:
        """Add a parameter."""
        if isinstance(name, ParameterId):
            param_id = name
            name_str = param_id.name
            if param_type == ParameterType.GENERIC:
                param_type = param_id.param_type
        else:
            param_id = None
            name_str = name

        self.params[name_str] = Parameter(
            name=name_str,
            value=value,
            min=min,
            max=max,
            vary=vary,
            param_type=param_type,
            param_id=param_id,
        )

    def __getitem__(self, key: str) -> Parameter:
        return self.params[key]

    def __setitem__(self, key: str, value: Parameter) -> None:
        self.params[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self.params

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.params)

    def __len__(self) -> int:
        return len(self.params)

    def values(self) -> ValuesView[Parameter]:
        return self.params.values()

    def items(self) -> ItemsView[str, Parameter]:
        return self.params.items()

    def copy(self) -> Parameters:  # type: ignore[override]
        """Copy with independent Parameter objects."""
        return Parameters(params={name: param.model_copy() for name, param in self.params.items()})

    def _varying(self) -> list[Parameter]:
        return [param for param in self.params.values() if param.vary]

    def get_vary_names(self) -> list[str]:
        """Names of the free parameters; this is the optimizer vector order."""
        return [param.name for param in self._varying()]

    def get_vary_values(self) -> np.ndarray:
        return np.array([param.value for param in self._varying()], dtype=float)

    def get_vary_bounds(self) -> tuple[np.ndarray, np.ndarray]:
        """Lower and upper bound arrays of the free parameters."""
        varying = self._varying()
        return (
            np.array([param.min for param in varying], dtype=float),
            np.array([param.max for param in varying], dtype=float),
        )

    def set_vary_values(self, values: np.ndarray) -> None:
        for param, value in zip(self._varying(), values, strict=True):
            param.value = float(value)

    def set_errors(self, errors: np.ndarray) -> None:
        """Store standard errors, ordered like :meth:`get_vary_names`."""
        for param, error in zip(self._varying(), errors, strict=True):
            param.stderr = float(error)

    def get_values(self) -> np.ndarray:
        """All values in vector order ``I1..Ik, xm1..xmk``."""
        return np.array([param.value for param in self.params.values()], dtype=float)

    def get_by_type(self, param_type: ParameterType) -> list[Parameter]:
        """Parameters of one type, in component order."""
        return [param for param in self.params.values() if param.param_type == param_type]

    @property
    def intensities(self) -> np.ndarray:
        return np.array([param.value for param in self.get_by_type(ParameterType.AMPLITUDE)])

    @property
    def positions(self) -> np.ndarray:
        return np.array([param.value for param in self.get_by_type(ParameterType.POSITION)])

    def get_boundary_params(self) -> list[str]:
        """Free parameters that ended on a bound (a vanished component ends at I=0)."""
        return [param.name for param in self._varying() if param.is_at_boundary()]

    def freeze(self, names: list[str]) -> None:
        """Hold the named parameters at their current value; unknown names are ignored."""
        for name in names:
            if name in self.params:
                self.params[name].vary = False
