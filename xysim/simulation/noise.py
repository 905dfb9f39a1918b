import logging
from typing import Tuple

import numpy as np
import pandas as pd
from numpy.random import Generator

from xysim.constants import PREFIXES, ColumnType
from xysim.simulation.covariance import sample_covariance
from xysim.simulation.features import FeatureBlock
from xysim.utils import variable_names

logger = logging.getLogger(__name__)


def generate_noise_features(n: int,
                            noisevars: int,
                            cor: Tuple[float, float],
                            sig: Tuple[float, float],
                            rng: Generator,
                            width: int) -> FeatureBlock:
    """
    Draw noise features that are correlated among each other only.

    The covariance matrix is sampled like the one of the structural features,
    except that its diagonal is drawn from ``sig``.
    """
    _, factor = sample_covariance(noisevars, cor, rng, variance_range=sig)
    E = rng.standard_normal((n, noisevars)) @ factor
    names = variable_names(PREFIXES[ColumnType.noise], noisevars, width)
    logger.debug(f"Generated {noisevars} independent noise feature(s).")
    return FeatureBlock(frame=pd.DataFrame(E, columns=names),
                        tags={name: ColumnType.noise for name in names})


def intercept_value(target: np.ndarray) -> float:
    """Intercept of the target: 30% of the range of the pre-noise target."""
    if target.size == 0:
        return 0.0
    return 0.3 * float(np.ptp(target))


def calibrate_noise(target: np.ndarray, stn: float, rng: Generator) -> np.ndarray:
    """
    Homoskedastic target noise for a given signal to noise ratio.

    Standard normal draws ``z`` are rescaled by
    ``sqrt(var(target) / (stn * var(z)))`` so that the sample variance of the
    noise is ``var(target) / stn``.

    Parameters
    ----------
    target : np.ndarray, shape (n,)
        Target before noise (including the intercept, if any).
    stn : float
        Target to noise variance ratio.
    rng : numpy.random.Generator
        Random stream.

    Returns
    -------
    np.ndarray, shape (n,)
        The noise to add to the target.
    """
    z = rng.standard_normal(target.shape[0])
    if target.shape[0] < 2:
        return np.zeros_like(z)
    scale = np.sqrt(np.var(target, ddof=1) / (stn * np.var(z, ddof=1)))
    return z * scale
