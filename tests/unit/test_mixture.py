"""Tests for the finite mixture model kernel and estimator."""

import pytest

import numpy as np
from numpy.testing import assert_allclose

from lumfit.core.domain.observations import Observations
from lumfit.core.mixture.em import (
    component_densities,
    initial_means,
    mixture_log_likelihood,
    run_em,
    single_component_estimate,
)
from lumfit.core.mixture.estimator import FiniteMixtureEstimator, fit_finite_mixture
from lumfit.core.mixture.information import (
    information_matrix,
    invert_information,
    mean_standard_errors,
)
from lumfit.core.results.mixture import MixtureModel, MixtureSweep
from lumfit.core.shared.exceptions import (
    InvalidInputError,
    ModelQualityWarning,
    NumericsError,
    NumericsWarning,
)
from lumfit.core.shared.reporter import NullReporter


@pytest.fixture
def observations(dose_observations):
    return Observations.from_array(dose_observations)


@pytest.fixture
def log_space(observations):
    return observations.log_doses, observations.weights(0.2)


class TestEM:
    """Tests for the fixed-point iteration."""

    def test_initial_means(self):
        assert_allclose(initial_means(np.array([0.0, 3.0, 4.0]), 3), [1.0, 2.0, 3.0])

    def test_component_densities(self):
        y = np.array([0.0, 1.0])
        w = np.array([4.0, 1.0])
        densities = component_densities(y, w, np.array([0.0, 1.0]))
        assert densities.shape == (2, 2)
        assert densities[0, 0] == pytest.approx(2.0)
        assert densities[0, 1] == pytest.approx(2.0 * np.exp(-2.0))
        assert densities[1, 1] == pytest.approx(1.0)

    def test_state(self, log_space):
        y, w = log_space
        state = run_em(y, w, 3)

        assert state.means.shape == (3,)
        assert state.membership.shape == (y.size, 3)
        assert np.all(state.proportions >= 0.0)
        assert np.all(state.proportions <= 1.0)
        assert state.proportions.sum() == pytest.approx(1.0)
        assert_allclose(state.membership.sum(axis=1), 1.0)

    def test_iteration_count_matters(self, log_space):
        y, w = log_space
        one = run_em(y, w, 2, n_iterations=1)
        many = run_em(y, w, 2)
        assert not np.allclose(one.means, many.means)

    def test_log_likelihood(self):
        weighted = np.array([[0.5, 0.5], [1.0, 0.0]])
        expected = 2 * np.log(1.0 / np.sqrt(2 * np.pi))
        assert mixture_log_likelihood(weighted) == pytest.approx(expected)

    def test_single_component_estimate(self):
        y = np.log(np.array([10.0, 20.0, 40.0]))
        w = np.ones(3)
        mean, log_likelihood = single_component_estimate(y, w)
        assert mean == pytest.approx(np.log(20.0))
        expected = np.sum(-0.5 * (y - mean) ** 2 - 0.5 * np.log(2 * np.pi))
        assert log_likelihood == pytest.approx(expected)


class TestInformation:
    """Tests for the information matrix and its inversion."""

    def test_shape_and_symmetry(self, log_space):
        y, w = log_space
        state = run_em(y, w, 3)
        matrix = information_matrix(y, w, state.means, state.proportions, state.membership)

        assert matrix.shape == (5, 5)
        assert_allclose(matrix, matrix.T)

    def test_invert(self):
        matrix = np.array([[2.0, 0.5], [0.5, 1.0]])
        assert_allclose(invert_information(matrix) @ matrix, np.eye(2), atol=1e-12)

    def test_singular(self):
        with pytest.raises(NumericsError, match="singular"):
            invert_information(np.zeros((3, 3)))

    def test_non_finite(self):
        with pytest.raises(NumericsError, match="non-finite"):
            invert_information(np.array([[np.nan, 0.0], [0.0, 1.0]]))

    def test_mean_standard_errors(self):
        covariance = np.diag([9.0, 0.04, 0.09])
        assert_allclose(mean_standard_errors(covariance, 2), [0.2, 0.3])
        assert np.all(np.isnan(mean_standard_errors(None, 3)))


class TestEstimator:
    """Tests for FiniteMixtureEstimator."""

    def test_single_k_returns_model(self, dose_observations):
        model = fit_finite_mixture(dose_observations, 0.2, 2, reporter=NullReporter())

        assert isinstance(model, MixtureModel)
        assert model.n_components == 2
        assert model.n_observations == 50
        assert model.proportions.sum() == pytest.approx(1.0)
        assert model.grain_probability.shape == (50, 2)
        assert model.covariance.shape == (3, 3)
        assert model.bic == pytest.approx(-2 * model.log_likelihood + 3 * np.log(50))
        assert model.diagnostics == ()

    def test_dose_errors(self, dose_observations):
        model = fit_finite_mixture(dose_observations, 0.2, 2, reporter=NullReporter())
        for c in model.components:
            assert c.dose_error == pytest.approx(c.dose * c.relative_error)
            assert 0.0 < c.relative_error < 0.5

    def test_single_component_reference(self, observations):
        estimator = FiniteMixtureEstimator(0.2, 2, reporter=NullReporter())
        reference = estimator.single_component(observations)
        w = observations.weights(0.2)
        mu0 = np.sum(w * observations.log_doses) / np.sum(w)

        assert reference.dose == pytest.approx(np.exp(mu0))
        assert reference.sigmab == 0.2
        assert reference.bic == pytest.approx(-2 * reference.log_likelihood + np.log(50))

    def test_sweep(self, dose_observations):
        sweep = fit_finite_mixture(dose_observations, 0.2, [4, 2, 3], reporter=NullReporter())

        assert isinstance(sweep, MixtureSweep)
        assert sweep.k_values == (2, 3, 4)
        assert [m.n_components for m in sweep.models] == [2, 3, 4]
        assert sweep.bic.shape == (3,)
        assert sweep.best_k == sweep.k_values[int(np.nanargmin(sweep.bic))]
        assert sweep.best_model.n_components == sweep.best_k
        assert len(sweep.llik_significant) == 2
        assert sweep.log_likelihood[1] >= sweep.log_likelihood[0] - 1.0

    def test_significant_step(self, dose_observations):
        sweep = fit_finite_mixture(dose_observations, 0.2, [2, 3, 4], reporter=NullReporter())
        ratios = sweep.log_likelihood[1:] / sweep.log_likelihood[:-1]
        assert sweep.llik_significant == tuple(bool(r > 3.0) for r in ratios)
        steps = zip(sweep.k_values[1:], sweep.llik_significant, strict=True)
        flagged = [k for k, f in steps if f]
        assert sweep.significant_k == (flagged[0] if flagged else None)

    def test_parallel_matches_sequential(self, dose_observations):
        sequential = fit_finite_mixture(dose_observations, 0.2, [2, 3], reporter=NullReporter())
        threaded = fit_finite_mixture(
            dose_observations, 0.2, [2, 3], n_workers=2, reporter=NullReporter()
        )
        assert_allclose(threaded.bic, sequential.bic)
        assert_allclose(threaded.log_likelihood, sequential.log_likelihood)

    def test_singular_information(self, dose_observations, monkeypatch):
        def singular(matrix):
            msg = "information matrix is singular"
            raise NumericsError(msg)

        monkeypatch.setattr("lumfit.core.mixture.estimator.invert_information", singular)

        with pytest.warns(NumericsWarning) as record:
            model = fit_finite_mixture(dose_observations, 0.2, 2, reporter=NullReporter())

        assert model.covariance is None
        assert np.all(np.isnan(model.dose_errors))
        assert np.all(np.isfinite(model.doses))
        assert model.proportions.sum() == pytest.approx(1.0)
        assert len(model.diagnostics) == 1
        assert model.has_missing
        categories = [w.category for w in record]
        assert categories.count(ModelQualityWarning) == 1

    def test_arguments_echo(self, dose_observations):
        model = fit_finite_mixture(dose_observations, 0.2, 2, reporter=NullReporter())
        assert model.arguments["sigmab"] == 0.2
        assert model.arguments["n_components"] == [2]

    def test_invalid_sigmab(self, dose_observations):
        with pytest.raises(InvalidInputError) as excinfo:
            fit_finite_mixture(dose_observations, 1.5, 2)
        assert excinfo.value.argument == "sigmab"

    def test_invalid_component_count(self, dose_observations):
        with pytest.raises(InvalidInputError, match="n_components"):
            FiniteMixtureEstimator(0.2, 1)

    def test_invalid_observations(self):
        estimator = FiniteMixtureEstimator(0.2, 2, reporter=NullReporter())
        with pytest.raises(InvalidInputError, match="positive"):
            estimator.fit([[10.0, 1.0], [-5.0, 1.0]])
