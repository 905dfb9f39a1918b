import logging
from typing import List, Sequence, Tuple

import numpy as np
from numpy.random import Generator

from xysim.constants import STRUCTURAL
from xysim.simulation.features import FeatureBlock
from xysim.utils import format_weight, parenthesize_negative

logger = logging.getLogger(__name__)


def sample_interaction_matrix(n_vars: int,
                              weights: Tuple[float, float],
                              interactions: int,
                              rng: Generator) -> np.ndarray:
    """
    Sample the weight matrix of the structural features.

    The diagonal holds the direct weight of every feature, drawn uniformly
    from ``weights`` and rounded to two decimals. For an interaction depth
    ``d > 1`` every column additionally receives ``d - 1`` entries in distinct
    rows other than its own. Their values are drawn without replacement from
    zero and ``d - 1`` uniform draws in [-1, 1]; the values of a column are
    drawn before its rows.

    Parameters
    ----------
    n_vars : int
        Number of structural features.
    weights : (float, float)
        Range of the diagonal weights.
    interactions : int
        Interaction depth.
    rng : numpy.random.Generator
        Random stream.

    Returns
    -------
    np.ndarray, shape (n_vars, n_vars)
        Interaction matrix; row i belongs to feature i, column c to term c.
    """
    matrix = np.diag(np.round(rng.uniform(weights[0], weights[1], size=n_vars), 2))

    if interactions > 1:
        size = interactions - 1
        for c in range(n_vars):
            candidates = np.append(0.0, np.round(rng.uniform(-1.0, 1.0, size=size), 2))
            values = rng.choice(candidates, size=size, replace=False)
            rows = rng.choice(np.delete(np.arange(n_vars), c), size=size, replace=False)
            matrix[rows, c] = values

    logger.debug(f"Sampled a {n_vars}x{n_vars} interaction matrix with depth {interactions}.")
    return matrix


def render_terms(matrix: np.ndarray, names: Sequence[str]) -> List[str]:
    """
    Describe every column of the interaction matrix as a product of weighted features.

    Zero weights are omitted, columns without any weight give an empty string.
    Terms containing a minus sign are wrapped in parentheses.

    >>> render_terms(np.array([[2.0, 0.0], [-0.5, 3.0]]), ["NLIN_1", "LIN_1"])
    ['(2 NLIN_1 * -0.5 LIN_1)', '3 LIN_1']
    """
    terms = []
    for c in range(matrix.shape[1]):
        rows = np.flatnonzero(matrix[:, c])
        term = " * ".join(f"{format_weight(matrix[r, c])} {names[r]}" for r in rows)
        terms.append(parenthesize_negative(term) if term else term)
    return terms


def compose_target(transformed: FeatureBlock, matrix: np.ndarray) -> np.ndarray:
    """Pre-noise target: transformed structural features @ matrix @ ones."""
    X = transformed.values(*STRUCTURAL)
    return X @ matrix @ np.ones(matrix.shape[1])
