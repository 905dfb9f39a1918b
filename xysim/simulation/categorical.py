"""
Categorical features and their effect on the target.

Every categorical feature is one-hot encoded into one indicator column per
level. The first level of each categorical is the reference class; its
weight is zero so that the weights of the other levels are effects relative
to it.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from numpy.random import Generator

from xysim.config import VariableSpace
from xysim.constants import PREFIXES, ColumnType
from xysim.simulation.features import FeatureBlock
from xysim.utils import format_weight, parenthesize_negative

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DummyBlock:
    """
    One-hot encoded categorical features and their ground truth.

    Attributes
    ----------
    block : FeatureBlock
        Indicator columns ``DUMMY_<feature>__<level>``, all tagged as dummies.
    weights : np.ndarray, shape (k, k)
        Diagonal weight matrix (DW) of the indicator columns, reference levels zeroed.
    reference : np.ndarray of bool, shape (k,)
        Marks the reference level columns.
    terms : list of str
        One term per non-reference indicator column.
    target : np.ndarray, shape (n,)
        Target including the categorical effects.
    """
    block: FeatureBlock
    weights: np.ndarray
    reference: np.ndarray
    terms: List[str]
    target: np.ndarray


def dummy_names(count: int, levels: int, width: int) -> List[str]:
    return [f"{PREFIXES[ColumnType.dummy]}_{i:0{width}d}__{level}"
            for i in range(1, count + 1)
            for level in range(1, levels + 1)]


def generate_categorical(n: int,
                         variables: VariableSpace,
                         target: np.ndarray,
                         rng: Generator,
                         width: int,
                         cat_probs: Optional[Sequence[float]] = None) -> Optional[DummyBlock]:
    """
    Sample categorical features and add their effects to the target.

    Returns ``None`` if no categorical features are requested. Otherwise the
    level probabilities are drawn (unless given), then the labels of every
    categorical, then one uniform multiplier per indicator column. Each weight
    is ``round(mean(target) * U(0.01, 1), 2)`` where the mean is taken once,
    before any categorical effect is added.

    The weights scale with the mean of the target. Without nonlinear features
    the structural target is built from centered columns only, its mean is
    about zero and every weight rounds to zero: the dummies then have no
    effect and drop out of the model equation.
    """
    count, levels = variables.categorical_count, variables.categorical_levels
    if count == 0:
        return None

    if cat_probs is None:
        probs = rng.uniform(0.0, 1.0, size=levels)
        probs = probs / probs.sum()
    else:
        probs = np.asarray(cat_probs, dtype=float)

    # labels 1..levels, the same probabilities for every categorical
    labels = [rng.choice(levels, size=n, p=probs) for _ in range(count)]
    indicators = np.hstack([np.eye(levels)[label] for label in labels])
    names = dummy_names(count, levels, width)

    base = np.mean(target)
    weights = np.round(base * rng.uniform(0.01, 1.0, size=count * levels), 2)
    reference = np.tile(np.arange(levels) == 0, count)

    target = target + indicators[:, ~reference] @ weights[~reference]

    # set reference classes to zero
    weights[reference] = 0.0
    terms = [parenthesize_negative(f"{format_weight(w)} {name}")
             for w, name in zip(weights[~reference], np.asarray(names)[~reference])]

    logger.debug(f"Added {count} categorical feature(s) with {levels} level(s) each.")
    block = FeatureBlock(frame=pd.DataFrame(indicators, columns=names),
                         tags={name: ColumnType.dummy for name in names})
    return DummyBlock(block=block, weights=np.diag(weights), reference=reference, terms=terms, target=target)
