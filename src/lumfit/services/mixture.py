"""High-level finite mixture model service facade."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lumfit.core.mixture.estimator import FiniteMixtureEstimator
from lumfit.core.shared.reporter import NullReporter, Reporter
from lumfit.io.readers import read_two_column

if TYPE_CHECKING:
    from pathlib import Path

    from lumfit.core.domain.config import MixtureConfig
    from lumfit.core.results.mixture import MixtureModel, MixtureSweep


@dataclass(frozen=True)
class MixtureReport:
    """Result of a file based mixture model fit."""

    result: MixtureModel | MixtureSweep
    data_path: Path
    n_observations: int


class MixtureService:
    """Service for fitting finite mixture models to dose files."""

    def __init__(self, reporter: Reporter | None = None) -> None:
        self._reporter = reporter or NullReporter()

    def fit(self, data_path: Path, config: MixtureConfig) -> MixtureReport:
        """Read (dose, error) pairs and fit the configured component counts.

        Raises
        ------
            DataIOError: If the file cannot be read
            InvalidInputError: If the data are invalid
        """
        data = read_two_column(data_path)
        self._reporter.info(f"Read {len(data)} doses from {data_path}")

        estimator = FiniteMixtureEstimator.from_config(config, reporter=self._reporter)
        result = estimator.fit(data)
        return MixtureReport(result=result, data_path=data_path, n_observations=len(data))
