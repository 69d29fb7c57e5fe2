"""Tests for the LM-OSL curve fitter."""

import pytest

import numpy as np
import pandas as pd
from numpy.testing import assert_allclose

from lumfit.core.domain.config import CurveFitConfig, FitOptions
from lumfit.core.fitting.fitter import CurveFitter, fit_lm_curve
from lumfit.core.shared.exceptions import InvalidInputError, NumericsError, NumericsWarning
from lumfit.core.shared.reporter import NullReporter

START = [[150.0, 50.0], [30.0, 1300.0]]


class RecordingReporter:
    """Test double capturing reporter calls."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def action(self, message: str) -> None:
        self.messages.append(("action", message))

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def of_kind(self, kind: str) -> list[str]:
        return [message for level, message in self.messages if level == kind]


class TestCurveFitter:
    """Tests for successful fits."""

    def test_user_start_values(self, two_component_curve, two_component_truth):
        result = fit_lm_curve(two_component_curve, n_components=2, start_values=START)

        assert result.success
        assert result.n_attempts == 1
        assert len(result.components) == 2
        assert [c.index for c in result.components] == [1, 2]
        positions = [c.position for c in result.components]
        assert_allclose(positions, two_component_truth[:, 1], rtol=0.05)
        assert 0.99 < result.pseudo_r2 <= 1.0

    def test_components_sorted_by_position(self, two_component_curve):
        reversed_start = [[30.0, 1300.0], [150.0, 50.0]]
        result = fit_lm_curve(two_component_curve, n_components=2, start_values=reversed_start)

        positions = [c.position for c in result.components]
        assert positions == sorted(positions)
        assert result.components[0].intensity == pytest.approx(170.0, rel=0.05)

    def test_derived_quantities(self, two_component_curve):
        result = fit_lm_curve(two_component_curve, n_components=2, start_values=START)
        x_max = 4000.0

        for c in result.components:
            assert c.detrapping_rate == pytest.approx(x_max / c.position**2)
            assert c.initial_population == pytest.approx(c.intensity / np.exp(-0.5) * c.position)
            assert c.cross_section == pytest.approx(
                c.detrapping_rate / result.stimulation_intensity
            )
        assert result.components[0].relative_cross_section == pytest.approx(1.0)
        assert result.components[1].relative_cross_section < 1.0
        assert result.components[0].detrapping_rate_error is None

    def test_automatic_start_values(self, pseudo_friendly_curve):
        result = fit_lm_curve(pseudo_friendly_curve, n_components=2, reporter=NullReporter())

        assert result.success
        assert len(result.components) == 2
        positions = [c.position for c in result.components]
        assert positions == sorted(positions)
        assert result.pseudo_r2 <= 1.0
        assert result.outcome.start.source == "pseudo"

    def test_levenberg_marquardt(self, two_component_curve, two_component_truth):
        result = fit_lm_curve(
            two_component_curve, n_components=2, start_values=START, fit_method="LM"
        )
        assert result.success
        assert result.method == "LM"
        assert_allclose(
            [c.position for c in result.components], two_component_truth[:, 1], rtol=0.05
        )

    def test_advanced_search_ignored_with_lm(self, pseudo_friendly_curve):
        reporter = RecordingReporter()
        fit_lm_curve(
            pseudo_friendly_curve,
            n_components=2,
            fit_method="LM",
            options={"advanced_search": True, "max_attempts": 1},
            reporter=reporter,
        )
        assert any("only used with 'port'" in m for m in reporter.of_kind("info"))

    def test_advanced_search_with_port(self, pseudo_friendly_curve):
        result = fit_lm_curve(
            pseudo_friendly_curve,
            n_components=2,
            options={"advanced_search": True, "advanced_samples": 5, "seed": 1},
            reporter=NullReporter(),
        )
        assert result.success
        assert result.outcome.start.source == "advanced"

    def test_background_subtraction(self, two_component_curve):
        background = two_component_curve.copy()
        background[:, 1] = 2.0 + 1e-3 * background[:, 0]
        signal = two_component_curve.copy()
        signal[:, 1] += background[:, 1]

        result = fit_lm_curve(signal, background, n_components=2, start_values=START)

        assert result.success
        assert result.background.method == "polynomial"
        assert_allclose(result.corrected_curve.y, two_component_curve[:, 1], atol=1e-8)
        assert result.components[0].position == pytest.approx(56.0, rel=0.05)

    def test_arguments_echo(self, two_component_curve):
        result = fit_lm_curve(two_component_curve, n_components=2, start_values=START)
        assert result.arguments["n_components"] == 2
        assert result.arguments["fit_method"] == "port"
        assert result.arguments["start_values"] == START
        assert result.arguments["options"]["max_iterations"] == 500

    def test_contributions_and_curves(self, two_component_curve):
        result = fit_lm_curve(two_component_curve, n_components=2, start_values=START)

        assert result.contributions.n_components == 2
        assert_allclose(result.contributions.contributions.sum(axis=1), result.contributions.total)
        assert result.component_curves.components.shape == (1000, 2)
        assert_allclose(result.fitted, result.component_curves.total)


class TestParameterTable:
    """Tests for the one-row parameter table."""

    def test_columns(self, two_component_curve):
        result = fit_lm_curve(two_component_curve, n_components=2, start_values=START)
        table = result.parameter_table()

        assert isinstance(table, pd.DataFrame)
        assert len(table) == 1
        assert list(table.columns) == [
            "n.components",
            "Im1", "xm1", "b1", "b1.error", "n01", "n01.error", "cs1", "rel_cs1",
            "Im2", "xm2", "b2", "b2.error", "n02", "n02.error", "cs2", "rel_cs2",
            "pseudo-R^2",
        ]  # fmt: skip
        assert table["n.components"].iloc[0] == 2
        assert np.isnan(table["b1.error"].iloc[0])

    def test_to_dict(self, two_component_curve):
        summary = fit_lm_curve(two_component_curve, n_components=2, start_values=START).to_dict()
        assert summary["success"] is True
        assert len(summary["components"]) == 2
        assert summary["failure_reason"] is None


class TestConfidenceIntervals:
    """Tests for the interval-derived errors."""

    def test_errors_from_intervals(self, two_component_curve):
        result = fit_lm_curve(
            two_component_curve,
            n_components=2,
            start_values=START,
            options={"compute_confidence_intervals": True},
        )

        for c in result.components:
            xm_lo, xm_hi = c.position_interval
            i_lo, i_hi = c.intensity_interval
            assert xm_lo < c.position < xm_hi
            assert i_lo < c.intensity < i_hi
            expected_b = abs(4000.0 / xm_lo**2 - 4000.0 / xm_hi**2)
            assert c.detrapping_rate_error == pytest.approx(expected_b)
            expected_n0 = abs(i_lo / np.exp(-0.5) * xm_lo - i_hi / np.exp(-0.5) * xm_hi)
            assert c.initial_population_error == pytest.approx(expected_n0)
            assert c.cross_section_error == pytest.approx(
                c.detrapping_rate_error / result.stimulation_intensity
            )

    def test_interval_failure_warns(self, two_component_curve, monkeypatch):
        def broken(*args, **kwargs):
            msg = "profile did not cross"
            raise NumericsError(msg)

        monkeypatch.setattr("lumfit.core.fitting.fitter.compute_confidence_intervals", broken)
        reporter = RecordingReporter()
        fitter = CurveFitter(
            CurveFitConfig(
                n_components=2, options=FitOptions(compute_confidence_intervals=True)
            ),
            reporter=reporter,
        )

        with pytest.warns(NumericsWarning, match="could not be computed"):
            result = fitter.fit(two_component_curve, start_values=START)

        assert result.success
        assert all(c.detrapping_rate_error is None for c in result.components)
        assert any("could not be computed" in m for m in reporter.of_kind("warning"))


class TestFailedFits:
    """Tests for fits that do not converge."""

    def test_all_windows_fail(self, pseudo_friendly_curve):
        result = fit_lm_curve(
            pseudo_friendly_curve,
            n_components=2,
            options={"max_iterations": 1},
            reporter=NullReporter(),
        )

        assert not result.success
        assert result.n_attempts == 6
        assert result.components == ()
        assert result.contributions is None
        assert np.isnan(result.pseudo_r2)
        assert np.isnan(result.rss)
        assert result.failure_reason.startswith("not converged")
        assert result.diagnostic.start.window == 5
        assert result.pseudo_curve.shape == (1000,)

    def test_parameter_table_of_failure(self, pseudo_friendly_curve):
        result = fit_lm_curve(
            pseudo_friendly_curve,
            n_components=2,
            options={"max_iterations": 1},
            reporter=NullReporter(),
        )
        table = result.parameter_table()
        assert table["n.components"].iloc[0] == 2
        assert table.drop(columns="n.components").isna().all(axis=None)

    def test_max_attempts(self, pseudo_friendly_curve):
        reporter = RecordingReporter()
        result = fit_lm_curve(
            pseudo_friendly_curve,
            n_components=2,
            options={"max_iterations": 1, "max_attempts": 2},
            reporter=reporter,
        )
        assert not result.success
        assert result.n_attempts == 2
        assert any("maximum of 2 attempts" in m for m in reporter.of_kind("warning"))

    def test_single_component_tries_every_window(self, pseudo_friendly_curve):
        result = fit_lm_curve(
            pseudo_friendly_curve,
            n_components=1,
            options={"max_iterations": 1},
            reporter=NullReporter(),
        )
        assert result.n_attempts == 7


class TestValidation:
    """Tests for rejected inputs."""

    def test_too_many_components(self, two_component_curve):
        with pytest.raises(InvalidInputError) as excinfo:
            fit_lm_curve(two_component_curve, n_components=8)
        assert excinfo.value.argument == "n_components"

    def test_background_length_mismatch(self, two_component_curve):
        with pytest.raises(InvalidInputError, match="differ") as excinfo:
            fit_lm_curve(two_component_curve, two_component_curve[:100])
        assert excinfo.value.argument == "background"

    def test_start_values_wrong_rows(self, two_component_curve):
        with pytest.raises(InvalidInputError, match="start_values"):
            fit_lm_curve(two_component_curve, n_components=3, start_values=START)

    def test_empty_curve(self):
        with pytest.raises(InvalidInputError, match="empty"):
            fit_lm_curve(np.empty((0, 2)))
