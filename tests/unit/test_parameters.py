"""Test Parameter and Parameters classes."""

import pytest

import numpy as np
from numpy.testing import assert_allclose

from lumfit.core.fitting.parameters import (
    Parameter,
    ParameterId,
    Parameters,
    ParameterType,
    from_internal,
    internal_gradient,
    to_internal,
)


class TestParameter:
    """Tests for Parameter class."""

    def test_basic_parameter(self):
        """Should create a basic parameter."""
        param = Parameter(name="xm1", value=10.0, min=0.0, max=20.0, vary=True)
        assert param.name == "xm1"
        assert param.value == 10.0
        assert param.min == 0.0
        assert param.max == 20.0
        assert param.vary is True
        assert np.isnan(param.stderr)

    def test_type_default_bounds(self):
        """Amplitudes and positions default to [0, inf)."""
        amplitude = Parameter(name="I1", value=5.0, param_type=ParameterType.AMPLITUDE)
        position = Parameter(name="xm1", value=5.0, param_type=ParameterType.POSITION)
        generic = Parameter(name="p", value=-5.0)

        assert (amplitude.min, amplitude.max) == (0.0, np.inf)
        assert (position.min, position.max) == (0.0, np.inf)
        assert generic.min == -np.inf

    def test_invalid_bounds_raises(self):
        """Should raise error when min > max."""
        with pytest.raises(ValueError, match=r"min.*>.*max"):
            Parameter(name="bad", value=10.0, min=20.0, max=10.0)

    def test_value_outside_bounds_raises(self):
        """Negative positions are rejected by the default bound."""
        with pytest.raises(ValueError, match="outside bounds"):
            Parameter(name="xm1", value=-1.0, param_type=ParameterType.POSITION)

    def test_non_finite_value_raises(self):
        with pytest.raises(ValueError, match="finite"):
            Parameter(name="I1", value=np.nan)

    def test_str(self):
        param = Parameter(name="xm2", value=25.5, min=1.0, max=100.0)
        assert str(param) == "xm2=25.5"
        param.vary = False
        assert str(param) == "xm2=25.5 (fixed)"

    def test_is_at_boundary(self):
        assert Parameter(name="I1", value=0.0, min=0.0).is_at_boundary() is True
        assert Parameter(name="I1", value=5.0, min=0.0).is_at_boundary() is False


class TestParameterId:
    """Tests for structured parameter identifiers."""

    def test_names(self):
        assert ParameterId.amplitude(1).name == "I1"
        assert ParameterId.position(3).name == "xm3"
        assert str(ParameterId.position(2)) == "xm2"

    def test_from_name(self):
        pid = ParameterId.from_name("xm3")
        assert pid.param_type == ParameterType.POSITION
        assert pid.component == 3

    def test_from_name_invalid(self):
        with pytest.raises(ValueError, match="Cannot parse"):
            ParameterId.from_name("b1")


class TestParameters:
    """Tests for Parameters collection class."""

    def test_from_components_order(self):
        """Vector order is I1..Ik followed by xm1..xmk."""
        params = Parameters.from_components(np.array([10.0, 20.0]), np.array([5.0, 50.0]))

        assert list(params) == ["I1", "I2", "xm1", "xm2"]
        assert_allclose(params.get_values(), [10.0, 20.0, 5.0, 50.0])
        assert_allclose(params.intensities, [10.0, 20.0])
        assert_allclose(params.positions, [5.0, 50.0])
        assert params["I1"].param_type == ParameterType.AMPLITUDE
        assert params["xm2"].min == 0.0

    def test_from_components_length_mismatch(self):
        with pytest.raises(ValueError, match="same length"):
            Parameters.from_components(np.array([1.0]), np.array([1.0, 2.0]))

    def test_vary_values_and_bounds(self):
        params = Parameters.from_components(np.array([1.0, 2.0]), np.array([3.0, 4.0]))
        params.freeze(["I2"])

        assert params.get_vary_names() == ["I1", "xm1", "xm2"]
        assert_allclose(params.get_vary_values(), [1.0, 3.0, 4.0])
        lower, upper = params.get_vary_bounds()
        assert_allclose(lower, 0.0)
        assert np.all(np.isinf(upper))

        params.set_vary_values(np.array([1.5, 3.5, 4.5]))
        assert_allclose(params.get_values(), [1.5, 2.0, 3.5, 4.5])

    def test_set_errors(self):
        params = Parameters.from_components(np.array([1.0]), np.array([3.0]))
        params.set_errors(np.array([0.1, 0.2]))
        assert params["I1"].stderr == pytest.approx(0.1)
        assert params["xm1"].stderr == pytest.approx(0.2)

    def test_copy_is_independent(self):
        params = Parameters.from_components(np.array([1.0]), np.array([3.0]))
        clone = params.copy()
        clone["I1"].value = 9.0
        assert params["I1"].value == 1.0

    def test_boundary_params(self):
        params = Parameters.from_components(np.array([0.0, 2.0]), np.array([3.0, 4.0]))
        assert params.get_boundary_params() == ["I1"]


class TestBoundTransform:
    """Tests for the bounded/internal parameter mapping."""

    lower = np.array([0.0, -np.inf, 0.0, -np.inf])
    upper = np.array([np.inf, 5.0, 10.0, np.inf])

    def test_round_trip(self):
        values = np.array([3.0, 2.0, 7.5, -4.0])
        internal = to_internal(values, self.lower, self.upper)
        assert_allclose(from_internal(internal, self.lower, self.upper), values)

    def test_lower_bound_maps_to_zero(self):
        internal = to_internal(np.array([0.0]), np.array([0.0]), np.array([np.inf]))
        assert_allclose(internal, [0.0])

    def test_from_internal_respects_bounds(self):
        internal = np.array([-50.0, 50.0, 1e3, 7.0])
        values = from_internal(internal, self.lower, self.upper)
        assert values[0] >= 0.0
        assert values[1] <= 5.0
        assert 0.0 <= values[2] <= 10.0
        assert values[3] == 7.0

    def test_gradient_matches_finite_difference(self):
        internal = np.array([1.3, -0.7, 0.4, 2.0])
        step = 1e-6
        numeric = (
            from_internal(internal + step, self.lower, self.upper)
            - from_internal(internal - step, self.lower, self.upper)
        ) / (2 * step)
        assert_allclose(internal_gradient(internal, self.lower, self.upper), numeric, rtol=1e-6)
