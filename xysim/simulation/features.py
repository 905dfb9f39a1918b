import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List

import numpy as np
import pandas as pd
from numpy.random import Generator

from xysim.config import VariableSpace
from xysim.constants import PREFIXES, ColumnType
from xysim.exceptions import ConfigurationError
from xysim.utils import variable_names

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Data container
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class FeatureBlock:
    """
    A table of simulated columns together with the type of every column.

    Attributes
    ----------
    frame : pd.DataFrame, shape (n, k)
        Column values.
    tags : dict
        Maps every column name of ``frame`` to its :class:`ColumnType`.
    """
    frame: pd.DataFrame
    tags: Dict[str, ColumnType] = field(default_factory=dict)

    def names(self, *types: ColumnType) -> List[str]:
        """Column names of the given types, in table order."""
        return [name for name in self.frame.columns if self.tags[name] in types]

    def values(self, *types: ColumnType) -> np.ndarray:
        return self.frame[self.names(*types)].to_numpy(dtype=float)


def block_layout(variables: VariableSpace, noise_coll: bool) -> List[ColumnType]:
    """Column types of the correlated block: nonlinear, linear, collinear noise."""
    layout = [ColumnType.nonlinear] * variables.nonlinear + [ColumnType.linear] * variables.linear
    if noise_coll:
        layout += [ColumnType.noise] * variables.noise
    return layout


def _name_columns(layout: List[ColumnType], width: int) -> List[str]:
    names = []
    for column_type in (ColumnType.nonlinear, ColumnType.linear, ColumnType.noise):
        count = layout.count(column_type)
        names += variable_names(PREFIXES[column_type], count, width)
    return names


# ---------------------------------------------------------------------
# Feature generation
# ---------------------------------------------------------------------

def generate_features(n: int,
                      variables: VariableSpace,
                      noise_coll: bool,
                      sig: tuple,
                      factor: np.ndarray,
                      rng: Generator,
                      width: int) -> FeatureBlock:
    """
    Draw the correlated block of raw features.

    Every column gets its own standard deviation drawn from ``sig`` before its
    ``n`` normal variates are drawn. The stacked columns are rotated by the
    Cholesky factor and centered; their variance is not rescaled afterwards.

    Parameters
    ----------
    n : int
        Number of observations.
    variables : VariableSpace
        Block sizes.
    noise_coll : bool
        Whether the noise features are part of the correlated block.
    sig : (float, float)
        Range of the per-column standard deviations.
    factor : np.ndarray
        Upper triangular Cholesky factor of the block's covariance matrix.
    rng : numpy.random.Generator
        Random stream.
    width : int
        Zero padding of the column indices.

    Returns
    -------
    FeatureBlock
        Raw features ordered nonlinear, linear, collinear noise.
    """
    layout = block_layout(variables, noise_coll)
    n_vars = len(layout)

    columns = []
    for _ in range(n_vars):
        sd = rng.uniform(sig[0], sig[1])
        columns.append(rng.normal(0.0, sd, size=n))
    X = np.column_stack(columns) if columns else np.zeros((n, 0))

    # rotation
    X = X @ factor

    # center, keep the variance
    X = X - X.mean(axis=0)

    names = _name_columns(layout, width)
    logger.debug(f"Generated {n_vars} correlated feature(s) for {n} observations.")
    return FeatureBlock(frame=pd.DataFrame(X, columns=names), tags=dict(zip(names, layout)))


def apply_nonlinear(block: FeatureBlock, nlfun: Callable[[np.ndarray], np.ndarray]) -> FeatureBlock:
    """
    Apply ``nlfun`` to every nonlinear column of a copy of ``block``.

    The input block is left untouched; it stays the observed data while the
    returned copy is used to compose the target.
    """
    transformed = block.frame.copy()
    for name in block.names(ColumnType.nonlinear):
        raw = transformed[name].to_numpy(dtype=float)
        try:
            values = np.asarray(nlfun(raw), dtype=float)
        except (TypeError, ValueError) as e:
            raise ConfigurationError("nlfun", f"could not be applied to {name}: {e}")
        if values.shape != raw.shape:
            raise ConfigurationError("nlfun", f"has to return an array of shape {raw.shape}, got {values.shape}.")
        transformed[name] = values
    return replace(block, frame=transformed, tags=dict(block.tags))
