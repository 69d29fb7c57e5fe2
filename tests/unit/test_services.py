"""Tests for the file based service layer."""

import pandas as pd
import pytest

from lumfit.core.domain.config import CurveFitConfig, MixtureConfig
from lumfit.core.results.mixture import MixtureModel, MixtureSweep
from lumfit.core.shared.exceptions import DataIOError
from lumfit.services import CurveFitService, MixtureService


class TestCurveFitService:
    """Tests for CurveFitService."""

    def test_fit_from_file(self, write_table, pseudo_friendly_curve):
        path = write_table("curve.csv", pseudo_friendly_curve, header="time,counts")
        report = CurveFitService().fit(path, CurveFitConfig(n_components=2))

        assert report.result.success
        assert report.values_path == path
        assert report.background_path is None
        assert report.contributions_path is None

    def test_contributions_written(self, write_table, pseudo_friendly_curve, temp_output_dir):
        path = write_table("curve.csv", pseudo_friendly_curve)
        target = temp_output_dir / "nested" / "contributions.csv"

        report = CurveFitService().fit(
            path, CurveFitConfig(n_components=2), contributions_path=target
        )

        assert report.contributions_path == target
        frame = pd.read_csv(target)
        assert list(frame.columns[:2]) == ["x", "rev.x"]
        assert frame.columns[-1] == "cont.sum"
        assert len(frame) == len(pseudo_friendly_curve)

    def test_background_file(self, write_table, pseudo_friendly_curve):
        background = pseudo_friendly_curve.copy()
        background[:, 1] = 1.0
        signal = pseudo_friendly_curve.copy()
        signal[:, 1] += 1.0

        report = CurveFitService().fit(
            write_table("curve.csv", signal),
            CurveFitConfig(n_components=2),
            background_path=write_table("bg.csv", background),
        )

        assert report.result.success
        assert report.result.background is not None

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataIOError, match="File not found"):
            CurveFitService().fit(tmp_path / "missing.csv")


class TestMixtureService:
    """Tests for MixtureService."""

    def test_single_k(self, write_table, dose_observations):
        path = write_table("doses.csv", dose_observations, header="De,De.error")
        report = MixtureService().fit(path, MixtureConfig(sigmab=0.2, n_components=2))

        assert isinstance(report.result, MixtureModel)
        assert report.n_observations == len(dose_observations)
        assert report.data_path == path

    def test_sweep(self, write_table, dose_observations):
        path = write_table("doses.csv", dose_observations)
        report = MixtureService().fit(path, MixtureConfig(sigmab=0.2, n_components=[2, 3]))

        assert isinstance(report.result, MixtureSweep)
        assert report.result.k_values == (2, 3)
