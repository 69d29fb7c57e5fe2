"""Tests for the configuration models."""

import pytest
from pydantic import ValidationError

from lumfit.core.constants import PLANCK_CONSTANT, SPEED_OF_LIGHT
from lumfit.core.domain.config import (
    CurveFitConfig,
    FitOptions,
    MixtureConfig,
    StimulationConfig,
    build_config,
    coerce_options,
    coerce_stimulation,
)
from lumfit.core.shared.exceptions import InvalidInputError


class TestFitOptions:
    """Tests for FitOptions."""

    def test_defaults(self):
        options = FitOptions()
        assert options.trace is False
        assert options.advanced_search is False
        assert options.compute_confidence_intervals is False
        assert options.max_iterations == 500
        assert options.advanced_samples == 30
        assert options.seed is None
        assert options.max_attempts is None

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            FitOptions(unknown=True)

    def test_max_iterations_positive(self):
        with pytest.raises(ValidationError):
            FitOptions(max_iterations=0)

    def test_coerce_options(self):
        options = FitOptions(seed=3)
        assert coerce_options(options) is options
        assert coerce_options({"seed": 4}).seed == 4
        assert coerce_options(None) == FitOptions()

    def test_coerce_options_invalid(self):
        with pytest.raises(InvalidInputError) as excinfo:
            coerce_options({"max_iterations": -1})
        assert excinfo.value.argument == "max_iterations"


class TestStimulationConfig:
    """Tests for the stimulation source."""

    def test_intensity(self):
        config = StimulationConfig()
        energy = PLANCK_CONSTANT * SPEED_OF_LIGHT / (470.0 * 1e-9)
        assert config.photon_energy == pytest.approx(energy)
        assert config.intensity == pytest.approx((36.0 / 1000.0) / energy)
        assert config.intensity == pytest.approx(8.52e16, rel=1e-3)

    def test_positive_power(self):
        with pytest.raises(InvalidInputError, match="led_power"):
            coerce_stimulation({"led_power": 0.0})


class TestCurveFitConfig:
    """Tests for CurveFitConfig."""

    def test_defaults(self):
        config = CurveFitConfig()
        assert config.n_components == 3
        assert config.fit_method == "port"
        assert config.background_method == "polynomial"

    @pytest.mark.parametrize(
        ("alias", "expected"),
        [
            ("port", "port"),
            ("trf", "port"),
            ("LM", "LM"),
            ("lm", "LM"),
            ("Levenberg-Marquardt", "LM"),
        ],
    )
    def test_method_aliases(self, alias, expected):
        assert CurveFitConfig(fit_method=alias).fit_method == expected

    @pytest.mark.parametrize("n_components", [0, 8])
    def test_component_range(self, n_components):
        with pytest.raises(InvalidInputError) as excinfo:
            build_config(CurveFitConfig, n_components=n_components)
        assert excinfo.value.argument == "n_components"

    def test_unknown_method(self):
        with pytest.raises(InvalidInputError, match="fit_method"):
            build_config(CurveFitConfig, fit_method="simplex")

    def test_nested_error_location(self):
        with pytest.raises(InvalidInputError) as excinfo:
            build_config(CurveFitConfig, options={"seed": -1})
        assert excinfo.value.argument == "options.seed"


class TestMixtureConfig:
    """Tests for MixtureConfig."""

    def test_scalar_component_count(self):
        config = MixtureConfig(sigmab=0.2, n_components=3)
        assert config.n_components == [3]
        assert config.is_sweep is False

    def test_components_sorted_and_unique(self):
        config = MixtureConfig(sigmab=0.2, n_components=[4, 2, 3, 2])
        assert config.n_components == [2, 3, 4]
        assert config.is_sweep is True

    @pytest.mark.parametrize("sigmab", [-0.1, 1.5])
    def test_sigmab_range(self, sigmab):
        with pytest.raises(InvalidInputError) as excinfo:
            build_config(MixtureConfig, sigmab=sigmab, n_components=2)
        assert excinfo.value.argument == "sigmab"

    def test_single_component_rejected(self):
        with pytest.raises(InvalidInputError, match="at least 2"):
            build_config(MixtureConfig, sigmab=0.2, n_components=[1, 2])

    def test_workers_positive(self):
        with pytest.raises(InvalidInputError, match="n_workers"):
            build_config(MixtureConfig, sigmab=0.2, n_components=2, n_workers=0)
