"""LM-OSL curve fit results.

This module defines the frozen result containers returned by the curve
fitter. They hold numbers only; rendering lives in ``lumfit.ui.tables``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from lumfit.core.domain.curve import BackgroundCorrection, Curve
    from lumfit.core.fitting.attempt import FitDiagnostic, FitOutcome
    from lumfit.core.fitting.contribution import ComponentCurves, ContributionMatrix
    from lumfit.core.shared.typing import FloatArray


@dataclass(frozen=True, slots=True)
class ComponentSpec:
    """One fitted LM-OSL component.

    Attributes
    ----------
        index: 1-based component number (ascending xm)
        intensity: Peak intensity Im
        position: Peak position xm
        detrapping_rate: b = max(t) / xm^2
        initial_population: n0 = Im / exp(-0.5) * xm
        cross_section: Photoionisation cross-section (cm^2)
        relative_cross_section: cross_section / cross_section of component 1
        intensity_stderr: Standard error of Im from the covariance matrix
        position_stderr: Standard error of xm from the covariance matrix
        detrapping_rate_error: 1-sigma error of b from the profile interval
        initial_population_error: 1-sigma error of n0 from the profile interval
        cross_section_error: 1-sigma error of the cross-section
        intensity_interval: Profile likelihood interval of Im
        position_interval: Profile likelihood interval of xm
    """

    index: int
    intensity: float
    position: float
    detrapping_rate: float
    initial_population: float
    cross_section: float
    relative_cross_section: float
    intensity_stderr: float = float("nan")
    position_stderr: float = float("nan")
    detrapping_rate_error: float | None = None
    initial_population_error: float | None = None
    cross_section_error: float | None = None
    intensity_interval: tuple[float, float] | None = None
    position_interval: tuple[float, float] | None = None


@dataclass(frozen=True, slots=True)
class FitResult:
    """Result of an LM-OSL curve fit.

    A failed fit is a regular result with ``success`` False, no components
    and the diagnostic of the last attempt.
    """

    curve: Curve
    corrected_curve: Curve
    n_components: int
    method: str
    outcome: FitOutcome | None
    components: tuple[ComponentSpec, ...]
    contributions: ContributionMatrix | None
    component_curves: ComponentCurves | None
    pseudo_r2: float
    stimulation_intensity: float
    n_attempts: int
    background: BackgroundCorrection | None = None
    diagnostic: FitDiagnostic | None = None
    arguments: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.outcome is not None

    @property
    def rss(self) -> float:
        """Residual sum of squares (NaN for a failed fit)."""
        return self.outcome.rss if self.outcome is not None else float("nan")

    @property
    def fitted(self) -> FloatArray | None:
        """Fitted sum curve evaluated at the corrected curve's x."""
        if self.component_curves is None:
            return None
        return self.component_curves.total

    @property
    def pseudo_curve(self) -> FloatArray | None:
        """Model evaluated at the start values of the last failed attempt."""
        if self.diagnostic is None:
            return None
        return self.diagnostic.pseudo_curve

    @property
    def failure_reason(self) -> str | None:
        if self.success or self.diagnostic is None:
            return None
        return self.diagnostic.reason

    def parameter_table(self) -> pd.DataFrame:
        """One-row summary of the fit.

        Columns are ``n.components``, then per component ``Im{i}``, ``xm{i}``,
        ``b{i}``, ``b{i}.error``, ``n0{i}``, ``n0{i}.error``, ``cs{i}``,
        ``rel_cs{i}``, and finally ``pseudo-R^2``. Failed fits give NaN.
        """
        row: dict[str, float] = {"n.components": self.n_components}
        by_index = {component.index: component for component in self.components}

        for i in range(1, self.n_components + 1):
            component = by_index.get(i)
            row[f"Im{i}"] = component.intensity if component else np.nan
            row[f"xm{i}"] = component.position if component else np.nan
            row[f"b{i}"] = component.detrapping_rate if component else np.nan
            row[f"b{i}.error"] = _or_nan(component.detrapping_rate_error if component else None)
            row[f"n0{i}"] = component.initial_population if component else np.nan
            row[f"n0{i}.error"] = _or_nan(
                component.initial_population_error if component else None
            )
            row[f"cs{i}"] = component.cross_section if component else np.nan
            row[f"rel_cs{i}"] = component.relative_cross_section if component else np.nan

        row["pseudo-R^2"] = self.pseudo_r2
        return pd.DataFrame([row])

    def to_dict(self) -> dict[str, Any]:
        """Plain-Python summary, suitable for JSON export."""
        return {
            "success": self.success,
            "n_components": self.n_components,
            "method": self.method,
            "n_attempts": self.n_attempts,
            "pseudo_r2": self.pseudo_r2,
            "rss": self.rss,
            "stimulation_intensity": self.stimulation_intensity,
            "failure_reason": self.failure_reason,
            "components": [
                {
                    "index": c.index,
                    "intensity": c.intensity,
                    "position": c.position,
                    "detrapping_rate": c.detrapping_rate,
                    "detrapping_rate_error": c.detrapping_rate_error,
                    "initial_population": c.initial_population,
                    "initial_population_error": c.initial_population_error,
                    "cross_section": c.cross_section,
                    "cross_section_error": c.cross_section_error,
                    "relative_cross_section": c.relative_cross_section,
                }
                for c in self.components
            ],
            "arguments": dict(self.arguments),
        }


def _or_nan(value: float | None) -> float:
    return float("nan") if value is None else value


__all__ = ["ComponentSpec", "FitResult"]
