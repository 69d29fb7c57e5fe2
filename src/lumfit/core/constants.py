"""Core constants for LumFit curve fitting and mixture estimation.

These constants define physical constants, reference tables and default
parameters for the numerical kernels. They can be overridden via the
configuration models or CLI arguments where an option exists.
"""

# =============================================================================
# Physical Constants
# =============================================================================

PLANCK_CONSTANT = 6.62607015e-34  # J s
"""Planck constant (exact SI value)."""

SPEED_OF_LIGHT = 299_792_458.0  # m/s
"""Speed of light in vacuum (exact SI value)."""

# =============================================================================
# LM-OSL Curve Fitting
# =============================================================================

MAX_COMPONENTS = 7
"""Maximum number of LM-OSL components (size of the pseudo start table)."""

PSEUDO_DETRAPPING_RATES: tuple[float, ...] = (32.0, 2.5, 0.65, 0.15, 0.025, 0.0025, 0.0003)
"""Detrapping probabilities b (1/s) of the seven quartz OSL components.

Taken from Jain et al. (2003) and used to derive automatic start values:
xm = sqrt(max(t) / b) for each entry.
"""

LM_FIT_MAX_ITERATIONS = 500
"""Default iteration limit for a single nonlinear least-squares attempt."""

LEAST_SQUARES_FTOL = 1e-8
LEAST_SQUARES_XTOL = 1e-8
LEAST_SQUARES_GTOL = 1e-8

ADVANCED_SEARCH_SAMPLES = 30
"""Number of random start vectors drawn per window in the advanced search."""

ADVANCED_SEARCH_RELATIVE_SD = 0.1
"""Standard deviation of the advanced search draws, relative to the start value."""

DEFAULT_LED_POWER = 36.0  # mW/cm^2
DEFAULT_LED_WAVELENGTH = 470.0  # nm

# =============================================================================
# Uncertainty Estimation
# =============================================================================

CONFIDENCE_LEVEL = 0.68
"""Confidence level of the profile-likelihood intervals (1-sigma)."""

PROFILE_LIKELIHOOD_NPOINTS = 12
"""Number of profile points evaluated on each side of the best-fit value."""

PROFILE_LIKELIHOOD_SPAN = 4.0
"""Half-width of the profiled range, in units of the covariance standard error."""

# =============================================================================
# Finite Mixture Model
# =============================================================================

FMM_ITERATIONS = 499
"""Fixed number of EM fixed-point iterations (no convergence test)."""

MIN_MIXTURE_COMPONENTS = 2

LLIK_IMPROVEMENT_RATIO = 3.0
"""Ratio llik(k+1)/llik(k) above which an added component is flagged."""
