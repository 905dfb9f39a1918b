"""
Task definitions for simulated targets.

A task maps the continuous simulated target to what a learner finally sees.
``link`` is applied first, ``cutoff`` second; both take and return a 1-D
NumPy array of the same length. Values mapped to NaN are dropped from the
simulated data.
"""

from dataclasses import dataclass
from typing import Callable

import numpy as np


def identity(y: np.ndarray) -> np.ndarray:
    return y


def logistic(y: np.ndarray) -> np.ndarray:
    """Standardize `y` and squash it into (0, 1)."""
    y = np.asarray(y, dtype=float)
    sd = np.std(y, ddof=1)
    z = (y - np.mean(y)) / sd if sd > 0 else y - np.mean(y)
    return 1.0 / (1.0 + np.exp(-z))


def threshold(cutoff: float = 0.5) -> Callable[[np.ndarray], np.ndarray]:
    """Return a function binarizing its input at `cutoff`."""
    def _threshold(y: np.ndarray) -> np.ndarray:
        y = np.asarray(y, dtype=float)
        out = (y > cutoff).astype(float)
        out[np.isnan(y)] = np.nan
        return out
    return _threshold


@dataclass(frozen=True)
class Task:
    """
    Link and cutoff functions applied to the observed target.

    Attributes
    ----------
    name : str
        Human readable name of the task.
    link : callable
        Transformation of the raw target (e.g. identity or logistic).
    cutoff : callable
        Discretization applied after the link (e.g. none or a threshold).
    """
    name: str = "regression"
    link: Callable[[np.ndarray], np.ndarray] = identity
    cutoff: Callable[[np.ndarray], np.ndarray] = identity

    @classmethod
    def regression(cls) -> "Task":
        return cls(name="regression", link=identity, cutoff=identity)

    @classmethod
    def classification(cls, cutoff: float = 0.5) -> "Task":
        return cls(name="classification", link=logistic, cutoff=threshold(cutoff))
