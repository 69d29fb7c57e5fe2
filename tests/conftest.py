"""Pytest fixtures for LumFit tests."""

import pytest

import numpy as np

from lumfit.core.fitting.lmosl import lmosl_sum


def _lmosl_curve(components, noise, seed=42, n_points=1000, x_max=4000.0):
    x = np.linspace(x_max / n_points, x_max, n_points)
    intensities = np.array([c[0] for c in components], dtype=float)
    positions = np.array([c[1] for c in components], dtype=float)
    y = lmosl_sum(x, intensities, positions)
    rng = np.random.default_rng(seed)
    y = y + rng.normal(0.0, noise, n_points)
    return np.column_stack([x, y])


@pytest.fixture
def two_component_curve():
    """LM-OSL curve with components (I, xm) = (170, 56) and (25, 1500).

    1000 channels over 4000 s with a small Gaussian noise.
    """
    return _lmosl_curve([(170.0, 56.0), (25.0, 1500.0)], noise=0.5)


@pytest.fixture
def two_component_truth():
    """True (I, xm) pairs of ``two_component_curve``."""
    return np.array([[170.0, 56.0], [25.0, 1500.0]])


@pytest.fixture
def pseudo_friendly_curve():
    """Two components near the first window of the automatic start table.

    Automatic start positions for a 4000 s curve are 11.2 s and 40 s.
    """
    return _lmosl_curve([(20.0, 12.0), (40.0, 45.0)], noise=0.2, seed=7)


@pytest.fixture
def exact_curve():
    """Noise-free single-component curve."""
    return _lmosl_curve([(100.0, 200.0)], noise=0.0, n_points=200)


@pytest.fixture
def dose_observations():
    """50 equivalent doses from two log-normal populations.

    30 grains around 20 Gy and 20 grains around 60 Gy, 10% spread in log
    space, 5% relative measurement error.
    """
    rng = np.random.default_rng(2024)
    log_doses = np.concatenate(
        [
            np.log(20.0) + rng.normal(0.0, 0.1, 30),
            np.log(60.0) + rng.normal(0.0, 0.1, 20),
        ]
    )
    doses = np.exp(log_doses)
    return np.column_stack([doses, 0.05 * doses])


@pytest.fixture
def temp_output_dir(tmp_path):
    """Create a temporary output directory."""
    output_dir = tmp_path / "test_output"
    output_dir.mkdir()
    return output_dir


@pytest.fixture
def write_table(tmp_path):
    """Write a numeric table to a CSV file and return its path."""

    def _write(name, table, header=None):
        path = tmp_path / name
        lines = [header] if header else []
        lines += [",".join(f"{value:.10g}" for value in row) for row in np.asarray(table)]
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write
