import numpy as np
import pandas as pd
import pytest

from xysim.constants import ColumnType
from xysim.simulation.features import FeatureBlock
from xysim.simulation.interactions import compose_target, render_terms, sample_interaction_matrix


def test_no_interactions_gives_diagonal_matrix(rng):
    matrix = sample_interaction_matrix(5, (5, 10), 1, rng)
    diagonal = np.diag(matrix)

    assert np.count_nonzero(matrix - np.diag(diagonal)) == 0
    assert np.all((diagonal >= 5) & (diagonal <= 10))
    assert np.allclose(np.round(diagonal, 2), diagonal)


@pytest.mark.parametrize("depth", [2, 3, 5])
def test_interaction_entries(rng, depth):
    n_vars = 5
    matrix = sample_interaction_matrix(n_vars, (5, 10), depth, rng)
    off_diagonal = matrix - np.diag(np.diag(matrix))

    # at most depth - 1 entries per column, all in [-1, 1]
    assert np.all(np.count_nonzero(off_diagonal, axis=0) <= depth - 1)
    assert np.all(np.abs(off_diagonal) <= 1.0)
    assert np.allclose(np.round(off_diagonal, 2), off_diagonal)
    # the diagonal is never overwritten
    assert np.all(np.diag(matrix) >= 5)


def test_interactions_reproducible():
    first = sample_interaction_matrix(4, (1, 2), 3, np.random.default_rng(7))
    second = sample_interaction_matrix(4, (1, 2), 3, np.random.default_rng(7))

    assert np.array_equal(first, second)


def test_render_terms():
    matrix = np.array([[2.0, 0.0, 0.0],
                       [-0.5, 3.25, 0.0],
                       [0.0, 0.0, 0.0]])
    terms = render_terms(matrix, ["NLIN_1", "LIN_1", "LIN_2"])

    assert terms == ["(2 NLIN_1 * -0.5 LIN_1)", "3.25 LIN_1", ""]


def test_compose_target_ignores_noise():
    frame = pd.DataFrame({"NLIN_1": [1.0, 2.0], "LIN_1": [3.0, 4.0], "NOISE_1": [100.0, 100.0]})
    tags = {"NLIN_1": ColumnType.nonlinear, "LIN_1": ColumnType.linear, "NOISE_1": ColumnType.noise}
    matrix = np.array([[2.0, 0.5],
                       [0.0, 1.0]])

    target = compose_target(FeatureBlock(frame=frame, tags=tags), matrix)

    # row 1: 1*2 + 3*0 + 1*0.5 + 3*1 = 5.5
    assert np.allclose(target, [5.5, 2 * 2 + 2 * 0.5 + 4])
