"""
Ground truth of a simulation.

psi is the block diagonal transformation matrix that maps the observed columns
(with the nonlinear function applied to the nonlinear ones) to their exact
contribution to the pre-link target. Its blocks are, in order: the intercept,
the interaction matrix, the dummy weights, an identity for the noise features
and a one for the target itself.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from xysim.constants import TARGET_NAME, ColumnType
from xysim.exceptions import TaskTransformError
from xysim.task import Task
from xysim.utils import format_weight

logger = logging.getLogger(__name__)


class PsiBuilder:
    """
    Collect labeled square blocks and assemble them into one block diagonal matrix.

    Examples
    --------
    >>> psi = (PsiBuilder()
    ...        .add("intercept", [[1.5]], ["(Intercept)"])
    ...        .add("target", [[1.0]], ["y"])
    ...        .build())
    >>> psi.shape
    (2, 2)
    """

    def __init__(self):
        self._blocks: List[Tuple[str, np.ndarray, List[str]]] = []

    def add(self, label: str, block, names: Sequence[str]) -> "PsiBuilder":
        block = np.atleast_2d(np.asarray(block, dtype=float))
        if block.shape != (len(names), len(names)):
            raise ValueError(f"Block '{label}' has shape {block.shape} but {len(names)} column names.")
        self._blocks.append((label, block, list(names)))
        return self

    @property
    def labels(self) -> List[str]:
        return [label for label, _, _ in self._blocks]

    def build(self) -> pd.DataFrame:
        size = sum(block.shape[0] for _, block, _ in self._blocks)
        matrix = np.zeros((size, size))
        names = []
        offset = 0
        for _, block, block_names in self._blocks:
            k = block.shape[0]
            matrix[offset:offset + k, offset:offset + k] = block
            names += block_names
            offset += k
        return pd.DataFrame(matrix, index=names, columns=names)


def build_equation(psi: pd.DataFrame, tags: Dict[str, ColumnType]) -> str:
    """
    Model formula of all columns that enter the target.

    A column enters if its psi column sum is nonzero. The intercept is written
    as ``1``; without it the formula starts with ``-1``.
    """
    sums = psi.sum(axis=0)
    features = []
    for name in psi.columns:
        if tags[name] == ColumnType.target or sums[name] == 0:
            continue
        features.append("1" if tags[name] == ColumnType.intercept else name)
    if "1" not in features:
        features = ["-1"] + features
    return f"{TARGET_NAME} ~ " + " + ".join(features)


def build_tgp(intercept: Optional[float], terms: Sequence[str], noise_sd: float) -> str:
    """
    Human readable target generating process.

    >>> build_tgp(1.5, ["2 LIN_1", "(-3 NLIN_1)"], 0.5)
    'y = 1.5 + 2 LIN_1 - 3 NLIN_1 + e ~ N(0, 0.5)'
    """
    parts = [] if intercept is None else [repr(round(float(intercept), 3))]
    parts += [term for term in terms if term]
    tgp = f"{TARGET_NAME} = " + (" + ".join(parts) if parts else "0")

    # fix negative terms and drop the brackets
    tgp = tgp.replace(" + (-", " - ")
    tgp = tgp.replace("(", "").replace(")", "")

    return tgp + f" + e ~ N(0, {format_weight(noise_sd)})"


def apply_task(target: np.ndarray, task: Task) -> np.ndarray:
    """Apply the link and then the cutoff function of ``task`` to the target."""
    y = np.asarray(target, dtype=float)
    for step in ("link", "cutoff"):
        try:
            out = np.asarray(getattr(task, step)(y), dtype=float)
        except Exception as e:
            raise TaskTransformError(f"Could not apply {step} function: {e}") from e
        if out.shape != y.shape:
            raise TaskTransformError(f"The {step} function returned shape {out.shape}, expected {y.shape}.")
        y = out
    return y
