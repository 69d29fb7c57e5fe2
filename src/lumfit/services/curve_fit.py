"""High-level LM-OSL curve fitting service facade.

CLI and other adapters should import only from this module.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lumfit.core.domain.config import CurveFitConfig
from lumfit.core.fitting.fitter import CurveFitter
from lumfit.core.shared.reporter import NullReporter, Reporter
from lumfit.io.readers import read_two_column
from lumfit.io.writers import write_frame

if TYPE_CHECKING:
    from pathlib import Path

    from lumfit.core.results.curve_fit import FitResult


@dataclass(frozen=True)
class CurveFitReport:
    """Result of a file based curve fit.

    Attributes
    ----------
        result: The curve fit result
        values_path: Signal curve file
        background_path: Background curve file, if any
        contributions_path: Where the contribution matrix was written, if requested
    """

    result: FitResult
    values_path: Path
    background_path: Path | None = None
    contributions_path: Path | None = None


class CurveFitService:
    """Service for LM-OSL curve fitting of curves stored in files.

    Example:
        service = CurveFitService()
        report = service.fit(Path("curve.csv"), CurveFitConfig(n_components=3))
        print(report.result.parameter_table())
    """

    def __init__(self, reporter: Reporter | None = None) -> None:
        """Initialize the service.

        Args:
            reporter: Reporter for status messages (default: silent)
        """
        self._reporter = reporter or NullReporter()

    def fit(
        self,
        values_path: Path,
        config: CurveFitConfig | None = None,
        *,
        background_path: Path | None = None,
        contributions_path: Path | None = None,
    ) -> CurveFitReport:
        """Read the curve(s), fit them and optionally export the contributions.

        Raises
        ------
            DataIOError: If an input file cannot be read or the output written
            InvalidInputError: If the data or configuration is invalid
        """
        config = config or CurveFitConfig()

        values = read_two_column(values_path)
        self._reporter.info(f"Read {len(values)} channels from {values_path}")
        background = read_two_column(background_path) if background_path is not None else None

        result = CurveFitter(config, reporter=self._reporter).fit(values, background)

        written = None
        if contributions_path is not None and result.contributions is not None:
            written = write_frame(result.contributions.to_frame(), contributions_path)
            self._reporter.success(f"Contribution matrix written to {written}")

        return CurveFitReport(
            result=result,
            values_path=values_path,
            background_path=background_path,
            contributions_path=written,
        )
