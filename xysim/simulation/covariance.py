"""
Covariance matrices and their Cholesky factors.

The correlated features are generated as ``Z @ U`` where ``Z`` holds
independent normal columns and ``U`` is the upper triangular Cholesky factor
of the target covariance matrix (``U.T @ U == Sigma``).
"""

import logging
from typing import Optional, Tuple

import numpy as np
from numpy.random import Generator
from scipy.linalg import LinAlgError, cholesky

from xysim.constants import MAX_COVARIANCE_TRIES
from xysim.exceptions import CovarianceError

logger = logging.getLogger(__name__)


def cholesky_factor(matrix: np.ndarray) -> np.ndarray:
    """
    Upper triangular Cholesky factor of a symmetric positive definite matrix.

    Raises
    ------
    CovarianceError
        If the matrix is not positive definite.
    """
    if matrix.shape == (0, 0):
        return np.zeros((0, 0))
    try:
        return cholesky(matrix, lower=False)
    except LinAlgError as e:
        raise CovarianceError(f"Could not calculate the cholesky decomposition of the covariance matrix: {e}")


def factor_user_covariance(sigma: np.ndarray, n_vars: int) -> np.ndarray:
    """Check a user supplied covariance matrix and return its Cholesky factor."""
    if sigma.shape != (n_vars, n_vars):
        raise CovarianceError(f"The user-specified covariance matrix has shape {sigma.shape} "
                              f"for {n_vars} variables. Reconsider 'sigma'.")
    if not np.allclose(sigma, sigma.T):
        raise CovarianceError("The user-specified covariance matrix is not symmetric. Reconsider 'sigma'.")
    try:
        return cholesky_factor(sigma)
    except CovarianceError:
        raise CovarianceError("Could not calculate the cholesky decomposition of the covariance matrix. "
                              "Try respecifying your desired covariance matrix.")


def sample_covariance(n_vars: int,
                      cor: Tuple[float, float],
                      rng: Generator,
                      variance_range: Optional[Tuple[float, float]] = None,
                      max_tries: int = MAX_COVARIANCE_TRIES) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample a random covariance matrix that admits a Cholesky decomposition.

    Off-diagonal entries are drawn uniformly from ``cor`` (the upper triangle
    is mirrored to keep the matrix symmetric). The diagonal is fixed to one,
    or drawn uniformly from ``variance_range`` if given.

    Parameters
    ----------
    n_vars : int
        Dimension of the matrix.
    cor : (float, float)
        Range of the off-diagonal entries.
    rng : numpy.random.Generator
        Random stream.
    variance_range : (float, float), optional
        Range of the diagonal entries.
    max_tries : int
        Number of matrices sampled before giving up.

    Returns
    -------
    matrix : np.ndarray, shape (n_vars, n_vars)
        The sampled covariance matrix.
    factor : np.ndarray, shape (n_vars, n_vars)
        Its upper triangular Cholesky factor.

    Raises
    ------
    CovarianceError
        If none of the ``max_tries`` matrices is positive definite.
    """
    if n_vars == 0:
        return np.zeros((0, 0)), np.zeros((0, 0))

    for attempt in range(1, max_tries + 1):
        matrix = rng.uniform(cor[0], cor[1], size=(n_vars, n_vars))
        matrix = np.triu(matrix) + np.triu(matrix, k=1).T
        if variance_range is None:
            np.fill_diagonal(matrix, 1.0)
        else:
            np.fill_diagonal(matrix, rng.uniform(variance_range[0], variance_range[1], size=n_vars))

        try:
            factor = cholesky_factor(matrix)
        except CovarianceError:
            logger.debug(f"Covariance matrix {attempt}/{max_tries} is not positive definite, resampling.")
            continue
        logger.debug(f"Sampled a {n_vars}x{n_vars} covariance matrix after {attempt} attempt(s).")
        return matrix, factor

    raise CovarianceError(f"Could not calculate the cholesky decomposition of the covariance matrix "
                          f"after {max_tries} attempts. Try respecifying your desired correlation interval.")
