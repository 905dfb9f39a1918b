import numpy as np
import pytest

from xysim.exceptions import CovarianceError
from xysim.simulation.covariance import cholesky_factor, factor_user_covariance, sample_covariance


def test_sampled_covariance_structure(rng):
    matrix, factor = sample_covariance(6, (0.0, 0.3), rng)

    assert matrix.shape == (6, 6)
    assert np.allclose(matrix, matrix.T)
    assert np.allclose(np.diag(matrix), 1.0)

    off_diagonal = matrix[~np.eye(6, dtype=bool)]
    assert np.all((off_diagonal >= 0.0) & (off_diagonal <= 0.3))


def test_factor_reproduces_covariance(rng):
    matrix, factor = sample_covariance(8, (0.0, 0.2), rng)

    assert np.allclose(factor, np.triu(factor))
    assert np.allclose(factor.T @ factor, matrix)


def test_sampled_variances(rng):
    matrix, factor = sample_covariance(4, (0.0, 0.1), rng, variance_range=(2.0, 3.0))

    assert np.all((np.diag(matrix) >= 2.0) & (np.diag(matrix) <= 3.0))
    assert np.allclose(factor.T @ factor, matrix)


def test_sampling_fails_after_retries(rng):
    # an all-ones matrix is singular
    with pytest.raises(CovarianceError):
        sample_covariance(3, (1.0, 1.0), rng, max_tries=5)


def test_empty_covariance(rng):
    matrix, factor = sample_covariance(0, (0.0, 0.1), rng)

    assert matrix.shape == (0, 0)
    assert factor.shape == (0, 0)


def test_user_covariance():
    sigma = np.array([[1.0, 0.5], [0.5, 2.0]])
    factor = factor_user_covariance(sigma, 2)

    assert np.allclose(factor.T @ factor, sigma)


@pytest.mark.parametrize("sigma", [
    np.eye(3),                                 # wrong dimension
    np.array([[1.0, 2.0], [2.0, 1.0]]),        # not positive definite
    np.array([[1.0, 0.5], [0.1, 1.0]]),        # not symmetric
])
def test_invalid_user_covariance(sigma):
    with pytest.raises(CovarianceError):
        factor_user_covariance(sigma, 2)


def test_cholesky_factor_not_positive_definite():
    with pytest.raises(CovarianceError):
        cholesky_factor(np.array([[0.0, 0.0], [0.0, 1.0]]))
