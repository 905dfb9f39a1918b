"""
Validation and normalization of simulation parameters.

All user input passes through :func:`validate_parameters` before anything is
sampled. Malformed input raises :class:`~xysim.exceptions.ConfigurationError`
naming the offending parameter; shape problems that can be repaired are
corrected and reported with a :class:`~xysim.exceptions.ParameterWarning`.
"""

import logging
import numbers
import warnings
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Union

import numpy as np
from numpy.random import Generator

from xysim.exceptions import ConfigurationError, ParameterWarning
from xysim.task import Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariableSpace:
    """
    Number of variables per block.

    Attributes
    ----------
    linear : int
        Number of linear features.
    nonlinear : int
        Number of nonlinear features.
    noise : int
        Number of noise features (never part of the target).
    categorical_count : int
        Number of categorical features.
    categorical_levels : int
        Number of levels of every categorical feature.
    """
    linear: int = 2
    nonlinear: int = 2
    noise: int = 5
    categorical_count: int = 1
    categorical_levels: int = 2

    @property
    def structural(self) -> int:
        """Number of features entering the interaction matrix."""
        return self.linear + self.nonlinear

    @property
    def dummies(self) -> int:
        """Number of one-hot indicator columns."""
        return self.categorical_count * self.categorical_levels

    def correlated(self, noise_coll: bool) -> int:
        """Size of the jointly correlated block of raw features."""
        return self.structural + (self.noise if noise_coll else 0)


@dataclass(frozen=True)
class SimulationConfig:
    """Normalized parameters of one simulation run."""
    n: int
    variables: VariableSpace
    interactions: int
    sig: Tuple[float, float]
    cor: Tuple[float, float]
    weights: Tuple[float, float]
    stn: float
    noise_coll: bool
    intercept: bool
    nlfun: Callable[[np.ndarray], np.ndarray]
    task: Task
    sigma: Optional[np.ndarray] = None
    cat_probs: Optional[Tuple[float, ...]] = None
    random_state: Optional[Union[int, Generator]] = None


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def _warn(message: str) -> None:
    logger.warning(message)
    warnings.warn(message, ParameterWarning, stacklevel=3)


def _numeric_vector(name: str, value: Any) -> np.ndarray:
    if value is None or isinstance(value, (bool, np.bool_)):
        raise ConfigurationError(name, "has to be numeric.")
    try:
        arr = np.atleast_1d(np.asarray(value))
    except (TypeError, ValueError):
        raise ConfigurationError(name, "has to be numeric.")
    if arr.ndim != 1 or arr.dtype.kind not in "iuf":
        raise ConfigurationError(name, "has to be a numeric value or a vector of numeric values.")
    if not np.all(np.isfinite(arr)):
        raise ConfigurationError(name, "must not contain missing or infinite values.")
    return arr.astype(float)


def _scalar(name: str, value: Any) -> float:
    arr = _numeric_vector(name, value)
    if arr.size != 1:
        raise ConfigurationError(name, "has to be a single numeric value.")
    return float(arr[0])


def _count(name: str, value: float) -> int:
    if value < 0 or value != int(value):
        raise ConfigurationError(name, f"has to be a non-negative whole number, got {value:g}.")
    return int(value)


def _range(name: str, value: Any) -> Tuple[float, float]:
    arr = _numeric_vector(name, value)
    if arr.size not in (1, 2):
        raise ConfigurationError(name, "has to be either a numeric range (min, max) or a single numeric value.")
    return float(arr.min()), float(arr.max())


def _boolean(name: str, value: Any) -> bool:
    if not isinstance(value, (bool, np.bool_)):
        raise ConfigurationError(name, "has to be a boolean.")
    return bool(value)


# ---------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------

def validate_parameters(n: Any = 1000,
                        numvars: Any = (2, 2),
                        catvars: Any = (1, 2),
                        noisevars: Any = 5,
                        task: Optional[Task] = None,
                        nlfun: Optional[Callable] = None,
                        interactions: Any = 1,
                        sig: Any = (1, 1),
                        cor: Any = (0, 0.1),
                        weights: Any = (5, 10),
                        sigma: Any = None,
                        stn: Any = 4,
                        noise_coll: Any = False,
                        intercept: Any = True,
                        cat_probs: Any = None,
                        random_state: Optional[Union[int, Generator]] = None) -> SimulationConfig:
    """
    Check all simulation parameters and return a normalized configuration.

    Parameters
    ----------
    n : int
        Number of observations.
    numvars : int or sequence of int
        Number of linear and nonlinear features. Padded with zero or truncated
        to length two (with a warning) if necessary.
    catvars : sequence of int or 0
        Number of categorical features and their number of levels. ``0`` is
        shorthand for ``(0, 0)``.
    noisevars : int
        Number of noise features.
    task : Task
        Link and cutoff applied to the observed target. Defaults to regression.
    nlfun : callable
        Elementwise function applied to the nonlinear features.
    interactions : int
        Interaction depth, reduced to the number of structural features (at least 1) if larger.
    sig, cor, weights : float or (float, float)
        Ranges to sample standard deviations, correlations and weights from.
    sigma : array-like, optional
        Explicit covariance matrix of the correlated features.
    stn : float
        Target to noise variance ratio.
    noise_coll : bool
        Whether noise features are correlated with the structural features.
    intercept : bool
        Whether an intercept enters the target.
    cat_probs : sequence of float, optional
        Level probabilities shared by all categorical features.
    random_state : int or numpy.random.Generator, optional
        Seed or generator for all random draws.

    Returns
    -------
    SimulationConfig
        The normalized configuration.
    """
    # n
    n_value = _scalar("n", n)
    if n_value < 1 or n_value != int(n_value):
        raise ConfigurationError("n", f"has to be a positive whole number, got {n_value:g}.")

    # numvars
    numvars_arr = _numeric_vector("numvars", numvars)
    if numvars_arr.size != 2:
        if numvars_arr.size > 2:
            numvars_arr = numvars_arr[:2]
        else:
            numvars_arr = np.pad(numvars_arr, (0, 2 - numvars_arr.size))
        _warn(f"'numvars' has to be of length two. Following settings are used: "
              f"Linear ({numvars_arr[0]:g}) and nonlinear ({numvars_arr[1]:g})")
    linear = _count("numvars", numvars_arr[0])
    nonlinear = _count("numvars", numvars_arr[1])

    # catvars
    catvars_arr = _numeric_vector("catvars", catvars)
    if catvars_arr.size != 2:
        if catvars_arr.size == 1 and catvars_arr[0] == 0:
            catvars_arr = np.zeros(2)
        else:
            raise ConfigurationError("catvars", "has to be a vector of length two which specifies first the "
                                                "number of categorical features and second their respective "
                                                "number of classes.")
    cat_count = _count("catvars", catvars_arr[0])
    cat_levels = _count("catvars", catvars_arr[1])
    if cat_count == 0:
        cat_levels = 0
    elif cat_levels < 1:
        raise ConfigurationError("catvars", "needs at least one class per categorical feature.")

    # noisevars
    noise = _count("noisevars", _scalar("noisevars", noisevars))

    # interactions
    interaction_depth = _scalar("interactions", interactions)
    if interaction_depth < 1 or interaction_depth != int(interaction_depth):
        raise ConfigurationError("interactions", "has to be a positive whole number.")
    interaction_depth = int(interaction_depth)
    if interaction_depth > max(1, linear + nonlinear):
        interaction_depth = max(1, linear + nonlinear)
        _warn(f"Reduced the interaction depth to {interaction_depth}")

    # signal to noise
    stn_value = _scalar("stn", stn)
    if stn_value <= 0:
        raise ConfigurationError("stn", "has to be a positive numeric value.")

    # nlfun
    if nlfun is None:
        nlfun = np.square
    if not callable(nlfun):
        raise ConfigurationError("nlfun", "has to be a function.")

    # ranges
    sig_range = _range("sig", sig)
    if sig_range[0] < 0:
        raise ConfigurationError("sig", "must not contain negative standard deviations.")
    weight_range = _range("weights", weights)
    cor_range = _range("cor", cor)
    if cor_range[0] < 0 or cor_range[1] > 1:
        raise ConfigurationError("cor", "has to be a numeric range in [0, 1] or a single numeric value.")

    noise_coll = _boolean("noise_coll", noise_coll)
    intercept = _boolean("intercept", intercept)

    # sigma
    if sigma is not None:
        try:
            sigma = np.array(sigma, dtype=float)
        except (TypeError, ValueError):
            raise ConfigurationError("sigma", "could not be coerced to a numeric matrix.")
        if sigma.ndim != 2 or sigma.shape[0] != sigma.shape[1]:
            raise ConfigurationError("sigma", f"has to be a square matrix, got shape {sigma.shape}.")

    # level probabilities
    if cat_probs is not None:
        if cat_count == 0:
            _warn("'cat_probs' is ignored because no categorical features are simulated.")
            cat_probs = None
        else:
            probs = _numeric_vector("cat_probs", cat_probs)
            if probs.size != cat_levels:
                raise ConfigurationError("cat_probs", f"needs one probability per class ({cat_levels}), "
                                                      f"got {probs.size}.")
            if np.any(probs < 0) or probs.sum() <= 0:
                raise ConfigurationError("cat_probs", "has to be non-negative with a positive sum.")
            cat_probs = tuple(float(p) for p in probs / probs.sum())

    # task
    if task is None:
        task = Task.regression()
    if not (callable(getattr(task, "link", None)) and callable(getattr(task, "cutoff", None))):
        raise ConfigurationError("task", "needs callable 'link' and 'cutoff' functions.")

    if random_state is not None and not isinstance(random_state, (numbers.Integral, Generator)):
        raise ConfigurationError("random_state", "has to be an integer seed or a numpy Generator.")

    variables = VariableSpace(linear=linear,
                              nonlinear=nonlinear,
                              noise=noise,
                              categorical_count=cat_count,
                              categorical_levels=cat_levels)

    return SimulationConfig(n=int(n_value),
                            variables=variables,
                            interactions=interaction_depth,
                            sig=sig_range,
                            cor=cor_range,
                            weights=weight_range,
                            stn=stn_value,
                            noise_coll=noise_coll,
                            intercept=intercept,
                            nlfun=nlfun,
                            task=task,
                            sigma=sigma,
                            cat_probs=cat_probs,
                            random_state=random_state)
