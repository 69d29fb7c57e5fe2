"""Component-to-sum contribution matrix and component curves.

The contribution matrix describes, for every channel, the percentage of the
fitted sum carried by each component, laid out as stacked bands (upper edge
``y.c{i}`` and reversed lower edge ``rev.y.c{i}``) so that each band can be
drawn directly as a polygon over ``x`` / ``rev.x``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from lumfit.core.fitting.lmosl import lmosl_components

if TYPE_CHECKING:
    from lumfit.core.shared.typing import FloatArray


def component_percentages(components: FloatArray) -> FloatArray:
    """Per-channel share of each component in the sum, in percent.

    0/0 (and any other NaN) is replaced by 0.
    """
    components = np.asarray(components, dtype=float)
    total = components.sum(axis=1, keepdims=True)
    with np.errstate(divide="ignore", invalid="ignore"):
        percentages = components / total * 100.0
    percentages[np.isnan(percentages)] = 0.0
    return percentages


@dataclass(frozen=True, slots=True)
class ContributionMatrix:
    """Stacked percentage bands of each component.

    Attributes
    ----------
        x: Channel abscissa
        upper: Upper band edges y.c{i}, shape (n, k)
        reversed_lower: Lower band edges in reversed channel order rev.y.c{i}
        contributions: Band widths cont.c{i} (percent of the sum), shape (n, k)
    """

    x: FloatArray
    upper: FloatArray
    reversed_lower: FloatArray
    contributions: FloatArray

    @property
    def n_components(self) -> int:
        return int(self.contributions.shape[1])

    @property
    def total(self) -> FloatArray:
        """cont.sum: row sums of the band widths."""
        return self.contributions.sum(axis=1)

    def column_names(self) -> list[str]:
        names = ["x", "rev.x"]
        for i in range(1, self.n_components + 1):
            names += [f"y.c{i}", f"rev.y.c{i}"]
        names += [f"cont.c{i}" for i in range(1, self.n_components + 1)]
        names.append("cont.sum")
        return names

    def to_array(self) -> FloatArray:
        bands = np.empty((self.x.size, 2 * self.n_components))
        bands[:, 0::2] = self.upper
        bands[:, 1::2] = self.reversed_lower
        return np.column_stack([self.x, self.x[::-1], bands, self.contributions, self.total])

    def to_frame(self) -> pd.DataFrame:
        """Export with columns x, rev.x, y.c1, rev.y.c1, ..., cont.c1, ..., cont.sum."""
        return pd.DataFrame(self.to_array(), columns=self.column_names())


def build_contribution_matrix(
    x: FloatArray,
    intensities: FloatArray,
    positions: FloatArray,
) -> ContributionMatrix:
    """Build the contribution matrix for components ordered by position.

    The first band spans from 100 down to 100 - p1, each following band
    starts where the previous one ended, and the last band spans from p_k
    down to 0. A single component gives the band p1 .. 0.
    """
    x = np.asarray(x, dtype=float)
    percentages = component_percentages(lmosl_components(x, intensities, positions))
    n_components = percentages.shape[1]
    cumulative = np.cumsum(percentages, axis=1)

    upper = np.empty_like(percentages)
    reversed_lower = np.empty_like(percentages)

    upper[:, 0] = 100.0
    reversed_lower[:, 0] = 100.0 - percentages[::-1, 0]
    for i in range(1, n_components - 1):
        upper[:, i] = 100.0 - cumulative[:, i - 1]
        reversed_lower[:, i] = (100.0 - cumulative[:, i])[::-1]
    # the last band always closes at zero; for k == 1 it replaces the first
    upper[:, -1] = percentages[:, -1]
    reversed_lower[:, -1] = 0.0

    contributions = upper - reversed_lower[::-1, :]
    return ContributionMatrix(
        x=x,
        upper=upper,
        reversed_lower=reversed_lower,
        contributions=contributions,
    )


@dataclass(frozen=True, slots=True)
class ComponentCurves:
    """Fitted sum and individual component curves.

    Attributes
    ----------
        x: Channel abscissa
        total: Sum of all components
        components: Component curves, shape (n, k), ordered by position
    """

    x: FloatArray
    total: FloatArray
    components: FloatArray

    @classmethod
    def evaluate(
        cls,
        x: FloatArray,
        intensities: FloatArray,
        positions: FloatArray,
    ) -> ComponentCurves:
        x = np.asarray(x, dtype=float)
        components = lmosl_components(x, intensities, positions)
        return cls(x=x, total=components.sum(axis=1), components=components)

    def to_frame(self) -> pd.DataFrame:
        """Export with columns x, sum, comp.1, ..., comp.k."""
        frame = pd.DataFrame({"x": self.x, "sum": self.total})
        for i in range(self.components.shape[1]):
            frame[f"comp.{i + 1}"] = self.components[:, i]
        return frame


__all__ = [
    "ComponentCurves",
    "ContributionMatrix",
    "build_contribution_matrix",
    "component_percentages",
]
