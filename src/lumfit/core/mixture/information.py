"""Observed information matrix of the finite mixture model.

Parameters are ordered (pi_1..pi_{k-1}, mu_1..mu_k); pi_k is implied by the
sum-to-one constraint. The matrix is assembled from the per-grain score
contributions as the block matrix [[A, B], [B^T, C]] and inverted to give
the covariance of the estimates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from lumfit.core.shared.exceptions import NumericsError

if TYPE_CHECKING:
    from lumfit.core.shared.typing import FloatArray


def information_matrix(
    log_doses: FloatArray,
    weights: FloatArray,
    means: FloatArray,
    proportions: FloatArray,
    membership: FloatArray,
) -> FloatArray:
    """Assemble the (2k-1) x (2k-1) information matrix.

    Args:
        log_doses: y_u = log(dose)
        weights: w_u = 1 / (sigmab^2 + s_u^2)
        means: Component means mu_i
        proportions: Mixing proportions pi_i
        membership: Membership probabilities p_ui, shape (n, k)

    Returns
    -------
        Information matrix [[A, B], [B^T, C]]
    """
    k = means.size
    a = weights[:, np.newaxis] * (log_doses[:, np.newaxis] - means[np.newaxis, :])
    b = -weights[:, np.newaxis] + a**2

    with np.errstate(divide="ignore", invalid="ignore"):
        ratios = membership / proportions[np.newaxis, :]
        # d_ui = p_ui/pi_i - p_uk/pi_k for i < k
        d = ratios[:, : k - 1] - ratios[:, [k - 1]]
        pa = membership * a
        pa_sums = pa.sum(axis=0)

        block_a = d.T @ d

        block_b = d.T @ pa
        diagonal = np.arange(k - 1)
        block_b[diagonal, diagonal] -= pa_sums[: k - 1] / proportions[: k - 1]
        block_b[:, k - 1] += pa_sums[k - 1] / proportions[k - 1]

        block_c = pa.T @ pa - np.diag((b * membership).sum(axis=0))

    return np.block([[block_a, block_b], [block_b.T, block_c]])


def invert_information(information: FloatArray) -> FloatArray:
    """Invert the information matrix to the covariance matrix.

    Raises
    ------
        NumericsError: If the matrix is singular or the inverse is not finite
    """
    if not np.all(np.isfinite(information)):
        msg = "information matrix contains non-finite values"
        raise NumericsError(msg)
    try:
        covariance = np.linalg.inv(information)
    except np.linalg.LinAlgError as exc:
        msg = f"information matrix is singular: {exc}"
        raise NumericsError(msg) from exc
    if not np.all(np.isfinite(covariance)):
        msg = "covariance matrix contains non-finite values"
        raise NumericsError(msg)
    return covariance


def mean_standard_errors(covariance: FloatArray | None, n_components: int) -> FloatArray:
    """Standard errors of mu_1..mu_k; NaN where unavailable or negative variance."""
    if covariance is None:
        return np.full(n_components, np.nan)
    variances = np.diag(covariance)[n_components - 1 :]
    with np.errstate(invalid="ignore"):
        return np.sqrt(variances)


__all__ = ["information_matrix", "invert_information", "mean_standard_errors"]
