"""Domain configuration models for LumFit."""

from __future__ import annotations

from collections.abc import Sequence
from numbers import Integral
from typing import Annotated, Any, Literal, TypeVar

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lumfit.core.constants import (
    ADVANCED_SEARCH_SAMPLES,
    DEFAULT_LED_POWER,
    DEFAULT_LED_WAVELENGTH,
    LM_FIT_MAX_ITERATIONS,
    MAX_COMPONENTS,
    MIN_MIXTURE_COMPONENTS,
    PLANCK_CONSTANT,
    SPEED_OF_LIGHT,
)
from lumfit.core.domain.curve import BackgroundMethod
from lumfit.core.shared.exceptions import InvalidInputError

FitMethodName = Literal["port", "LM"]

# Accepted spellings for the two fitting methods
FIT_METHOD_ALIASES: dict[str, FitMethodName] = {
    "port": "port",
    "trf": "port",
    "LM": "LM",
    "lm": "LM",
    "levenberg-marquardt": "LM",
}

ModelT = TypeVar("ModelT", bound=BaseModel)


class FitOptions(BaseModel):
    """Options controlling a single LM-OSL curve fit.

    Example TOML fragment:
        [options]
        advanced_search = true
        compute_confidence_intervals = true
        max_iterations = 500
        seed = 1
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    trace: bool = Field(default=False, description="Print optimizer progress for every attempt.")
    advanced_search: bool = Field(
        default=False,
        description="Try randomly perturbed start values before sliding the start window.",
    )
    compute_confidence_intervals: bool = Field(
        default=False,
        description="Compute 68% profile-likelihood intervals for I and xm.",
    )
    max_iterations: Annotated[int, Field(gt=0)] = Field(
        default=LM_FIT_MAX_ITERATIONS,
        description="Maximum number of function evaluations per attempt.",
    )
    advanced_samples: Annotated[int, Field(gt=0)] = Field(
        default=ADVANCED_SEARCH_SAMPLES,
        description="Random start vectors drawn per window in the advanced search.",
    )
    seed: Annotated[int, Field(ge=0)] | None = Field(
        default=None,
        description="Random seed for the advanced start-value search.",
    )
    max_attempts: Annotated[int, Field(gt=0)] | None = Field(
        default=None,
        description="Upper bound on the total number of fit attempts.",
    )


class StimulationConfig(BaseModel):
    """Optical stimulation source used to convert rates into cross-sections."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    led_power: Annotated[float, Field(gt=0)] = Field(
        default=DEFAULT_LED_POWER,
        description="LED power at the sample position (mW/cm^2).",
    )
    led_wavelength: Annotated[float, Field(gt=0)] = Field(
        default=DEFAULT_LED_WAVELENGTH,
        description="LED peak wavelength (nm).",
    )

    @property
    def photon_energy(self) -> float:
        """Energy of a single stimulation photon (J)."""
        return PLANCK_CONSTANT * SPEED_OF_LIGHT / (self.led_wavelength * 1e-9)

    @property
    def intensity(self) -> float:
        """Photon flux (1/s/cm^2), from Schmidt (2008)."""
        return (self.led_power / 1000.0) / self.photon_energy


class CurveFitConfig(BaseModel):
    """Configuration for an LM-OSL curve fit."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    n_components: Annotated[int, Field(ge=1, le=MAX_COMPONENTS)] = Field(
        default=3,
        description="Number of first-order components in the fitted sum.",
    )
    fit_method: FitMethodName = Field(
        default="port",
        description="'port' (bounded trust region) or 'LM' (Levenberg-Marquardt).",
    )
    background_method: BackgroundMethod = Field(
        default="polynomial",
        description="How the optional background curve is subtracted.",
    )
    options: FitOptions = Field(default_factory=FitOptions)
    stimulation: StimulationConfig = Field(default_factory=StimulationConfig)

    @field_validator("fit_method", mode="before")
    @classmethod
    def normalize_fit_method(cls, v: Any) -> Any:
        """Map accepted aliases onto the canonical method names."""
        if isinstance(v, str):
            return FIT_METHOD_ALIASES.get(v, FIT_METHOD_ALIASES.get(v.lower(), v))
        return v


class MixtureConfig(BaseModel):
    """Configuration for the finite mixture model."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    sigmab: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        description="Common overdispersion in log-dose space (0 to 1).",
    )
    n_components: list[int] = Field(
        description="Component count(s) to fit; a sweep is run for several values.",
        min_length=1,
    )
    grain_probability: bool = Field(
        default=False,
        description="Show per-grain membership probabilities in reports.",
    )
    verbose: bool = Field(default=False, description="Print result tables.")
    n_workers: Annotated[int, Field(ge=1)] = Field(
        default=1,
        description="Number of threads used to evaluate a sweep over k.",
    )

    @field_validator("n_components", mode="before")
    @classmethod
    def wrap_scalar(cls, v: Any) -> Any:
        """Accept a single integer (including numpy integers) as well as a sequence."""
        if isinstance(v, Integral):
            return [int(v)]
        if isinstance(v, Sequence | np.ndarray) and not isinstance(v, str):
            return [int(k) if isinstance(k, Integral) else k for k in v]
        return v

    @field_validator("n_components")
    @classmethod
    def validate_n_components(cls, v: list[int]) -> list[int]:
        """Require k >= 2 and sort the requested values."""
        if any(k < MIN_MIXTURE_COMPONENTS for k in v):
            msg = f"every component count must be at least {MIN_MIXTURE_COMPONENTS}"
            raise ValueError(msg)
        return sorted(set(v))

    @property
    def is_sweep(self) -> bool:
        """True when more than one component count is requested."""
        return len(self.n_components) > 1


def build_config(model: type[ModelT], **values: Any) -> ModelT:
    """Instantiate a config model, translating pydantic errors.

    Raises
    ------
        InvalidInputError: Naming the first offending field
    """
    try:
        return model(**values)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or model.__name__
        raise InvalidInputError(location, first["msg"]) from exc


def coerce_options(options: FitOptions | dict[str, Any] | None) -> FitOptions:
    """Accept FitOptions, a mapping of option values, or None."""
    if isinstance(options, FitOptions):
        return options
    return build_config(FitOptions, **(options or {}))


def coerce_stimulation(
    stimulation: StimulationConfig | dict[str, Any] | None,
) -> StimulationConfig:
    """Accept StimulationConfig, a mapping of values, or None."""
    if isinstance(stimulation, StimulationConfig):
        return stimulation
    return build_config(StimulationConfig, **(stimulation or {}))


__all__ = [
    "FIT_METHOD_ALIASES",
    "BackgroundMethod",
    "CurveFitConfig",
    "FitMethodName",
    "FitOptions",
    "MixtureConfig",
    "StimulationConfig",
    "build_config",
    "coerce_options",
    "coerce_stimulation",
]
