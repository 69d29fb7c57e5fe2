"""Tests for equivalent dose observations."""

import pytest

import numpy as np
from numpy.testing import assert_allclose

from lumfit.core.domain.observations import Observations, as_observations
from lumfit.core.shared.exceptions import InvalidInputError


class TestObservations:
    """Tests for Observations."""

    def test_from_array(self):
        obs = Observations.from_array([[10.0, 1.0], [20.0, 4.0], [40.0, 2.0]])
        assert len(obs) == 3
        assert_allclose(obs.log_doses, np.log([10.0, 20.0, 40.0]))
        assert_allclose(obs.relative_errors, [0.1, 0.2, 0.05])

    def test_weights(self):
        obs = Observations(doses=np.array([10.0, 20.0]), errors=np.array([1.0, 0.0]))
        assert_allclose(obs.weights(0.3), [1.0 / (0.09 + 0.01), 1.0 / 0.09])

    def test_extra_columns_ignored(self):
        obs = Observations.from_array(np.array([[10.0, 1.0, 99.0], [20.0, 2.0, 99.0]]))
        assert_allclose(obs.errors, [1.0, 2.0])

    def test_read_only(self):
        obs = Observations.from_array([[10.0, 1.0], [20.0, 2.0]])
        with pytest.raises(ValueError):
            obs.doses[0] = 1.0

    def test_as_observations_passthrough(self):
        obs = Observations.from_array([[10.0, 1.0], [20.0, 2.0]])
        assert as_observations(obs) is obs

    @pytest.mark.parametrize(
        ("table", "match"),
        [
            ([[10.0, 1.0]], "at least 2"),
            ([[10.0, 1.0], [-2.0, 1.0]], "positive"),
            ([[10.0, 1.0], [0.0, 1.0]], "positive"),
            ([[10.0, 1.0], [np.inf, 1.0]], "positive"),
            ([[10.0, -1.0], [20.0, 1.0]], "non-negative"),
            ([[10.0, np.nan], [20.0, 1.0]], "non-negative"),
            (np.ones(4), "shape"),
            ([["a", "b"], ["c", "d"]], "numeric"),
        ],
    )
    def test_invalid(self, table, match):
        with pytest.raises(InvalidInputError, match=match) as excinfo:
            as_observations(table)
        assert excinfo.value.argument == "data"
