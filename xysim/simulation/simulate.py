"""
Simulate a labeled tabular data set with a known target generating process.

Data-generating process:
    X   = centered(Z @ U),  Z_j ~ N(0, s_j^2), s_j ~ U(sig), U'U = Sigma
    X*  = X with nlfun applied to the nonlinear columns
    y   = X*[structural] @ INT @ 1 + D @ DW @ 1 + b0 + e
    e   ~ N(0, var(y - e) / stn)

- INT (p x p) holds the direct weight of every structural feature on its
  diagonal and sampled interaction weights off the diagonal.
- D holds the one-hot encoded categorical features, DW their weights with the
  first level of every categorical as reference (weight zero).
- Noise features are observed but never enter y.
- The observed data contain X (not X*), so a learner has to discover nlfun.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np
import pandas as pd
from numpy.random import Generator

from xysim.config import SimulationConfig, validate_parameters
from xysim.constants import INTERCEPT_NAME, STRUCTURAL, TARGET_NAME, ColumnType
from xysim.simulation.categorical import generate_categorical
from xysim.simulation.covariance import factor_user_covariance, sample_covariance
from xysim.simulation.features import FeatureBlock, apply_nonlinear, generate_features
from xysim.simulation.ground_truth import PsiBuilder, apply_task, build_equation, build_tgp
from xysim.simulation.interactions import compose_target, render_terms, sample_interaction_matrix
from xysim.simulation.noise import calibrate_noise, generate_noise_features, intercept_value
from xysim.task import Task
from xysim.utils import check_random_state, index_width

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Data container
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class SimulationResult:
    """
    Simulated data and the ground truth that generated it.

    Attributes
    ----------
    data : pd.DataFrame
        Observed columns: (Intercept), nonlinear, linear, dummy, noise and the
        target ``y`` after the task's link and cutoff. Rows with missing values
        are dropped.
    psi : pd.DataFrame
        Block diagonal transformation matrix, labeled with the columns of ``data``.
    equation : str
        Model formula of all columns with an effect on the target.
    tgp : str
        Human readable target generating process.
    task : Task
        Task whose link and cutoff were applied to the target.
    control : SimulationConfig
        The normalized parameters of the run.
    column_types : dict
        Maps every column of ``data`` to its :class:`ColumnType`.
    noise_sd : float
        Standard deviation of the noise added to the target.
    """
    data: pd.DataFrame
    psi: pd.DataFrame
    equation: str
    tgp: str
    task: Task
    control: SimulationConfig
    column_types: Dict[str, ColumnType]
    noise_sd: float

    def columns_of(self, *types: ColumnType) -> List[str]:
        """Names of the columns of the given types, in table order."""
        return [name for name in self.data.columns if self.column_types[name] in types]


# ---------------------------------------------------------------------
# Core simulator
# ---------------------------------------------------------------------

def simulate(n: int = 1000,
             numvars: Any = (2, 2),
             catvars: Any = (1, 2),
             noisevars: int = 5,
             task: Optional[Task] = None,
             nlfun: Optional[Callable[[np.ndarray], np.ndarray]] = None,
             interactions: int = 1,
             sig: Any = (1, 1),
             cor: Any = (0, 0.1),
             weights: Any = (5, 10),
             sigma: Any = None,
             stn: float = 4,
             noise_coll: bool = False,
             intercept: bool = True,
             cat_probs: Any = None,
             random_state: Optional[Union[int, Generator]] = None) -> SimulationResult:
    """
    Simulate linear, nonlinear, categorical and noise features and a target.

    Parameters
    ----------
    n : int
        Number of observations.
    numvars : (int, int)
        Number of linear and nonlinear features.
    catvars : (int, int) or 0
        Number of categorical features and their number of levels.
    noisevars : int
        Number of noise features.
    task : Task, optional
        Link and cutoff applied to the observed target. Defaults to regression.
    nlfun : callable, optional
        Elementwise function of the nonlinear features. Defaults to ``x ** 2``.
    interactions : int
        Interaction depth; 1 means no interactions.
    sig : float or (float, float)
        Range of the standard deviations of the features.
    cor : float or (float, float)
        Range of the correlations between the features, within [0, 1].
    weights : float or (float, float)
        Range of the direct feature weights.
    sigma : array-like, optional
        Covariance matrix of the correlated features. Sampled from ``cor`` if None.
    stn : float
        Signal to noise ratio, higher values mean less noise.
    noise_coll : bool
        Whether the noise features are correlated with the structural features.
    intercept : bool
        Whether an intercept enters the target.
    cat_probs : sequence of float, optional
        Level probabilities of the categorical features. Sampled if None.
    random_state : int or numpy.random.Generator, optional
        Seed or generator used for every random draw.

    Returns
    -------
    SimulationResult
        Data and the ground truth used to generate it.
    """
    config = validate_parameters(n=n, numvars=numvars, catvars=catvars, noisevars=noisevars, task=task,
                                 nlfun=nlfun, interactions=interactions, sig=sig, cor=cor, weights=weights,
                                 sigma=sigma, stn=stn, noise_coll=noise_coll, intercept=intercept,
                                 cat_probs=cat_probs, random_state=random_state)
    return run_simulation(config)


def run_simulation(config: SimulationConfig) -> SimulationResult:
    """Run all simulation stages for a validated configuration."""
    rng = check_random_state(config.random_state)
    variables = config.variables
    width = index_width([variables.linear, variables.nonlinear, variables.noise, variables.categorical_count])

    # 1) Covariance of the correlated block
    n_vars = variables.correlated(config.noise_coll)
    if config.sigma is not None:
        factor = factor_user_covariance(config.sigma, n_vars)
    else:
        _, factor = sample_covariance(n_vars, config.cor, rng)

    # 2) Raw features and their transformed copy
    raw = generate_features(config.n, variables, config.noise_coll, config.sig, factor, rng, width)
    transformed = apply_nonlinear(raw, config.nlfun)

    # 3) Interactions and the structural part of the target
    structural = raw.names(*STRUCTURAL)
    interaction_matrix = sample_interaction_matrix(variables.structural, config.weights, config.interactions, rng)
    terms = render_terms(interaction_matrix, structural)
    target = compose_target(transformed, interaction_matrix)

    # 4) Categorical effects
    dummies = generate_categorical(config.n, variables, target, rng, width, config.cat_probs)
    if dummies is not None:
        target = dummies.target
        terms += dummies.terms

    # 5) Noise features
    if variables.noise > 0 and not config.noise_coll:
        noise_block = generate_noise_features(config.n, variables.noise, config.cor, config.sig, rng, width)
    else:
        noise_names = raw.names(ColumnType.noise)
        noise_block = FeatureBlock(frame=raw.frame[noise_names], tags={name: ColumnType.noise for name in noise_names})

    # 6) Intercept and target noise
    icept = intercept_value(target) if config.intercept else None
    if icept is not None:
        target = target + icept
    noise = calibrate_noise(target, config.stn, rng)
    target = target + noise
    noise_sd = float(np.std(noise, ddof=1)) if noise.size > 1 else 0.0

    # 7) Observed data: (Intercept), nonlinear, linear, dummies, noise, y
    frames = []
    column_types = {}
    if icept is not None:
        frames.append(pd.DataFrame({INTERCEPT_NAME: np.ones(config.n)}))
        column_types[INTERCEPT_NAME] = ColumnType.intercept
    frames.append(raw.frame[structural])
    column_types.update({name: raw.tags[name] for name in structural})
    if dummies is not None:
        frames.append(dummies.block.frame)
        column_types.update(dummies.block.tags)
    frames.append(noise_block.frame)
    column_types.update(noise_block.tags)
    frames.append(pd.DataFrame({TARGET_NAME: apply_task(target, config.task)}))
    column_types[TARGET_NAME] = ColumnType.target
    data = pd.concat(frames, axis=1)

    # 8) Ground truth
    builder = PsiBuilder()
    if icept is not None:
        builder.add("intercept", [[icept]], [INTERCEPT_NAME])
    builder.add("interactions", interaction_matrix, structural)
    if dummies is not None:
        builder.add("dummies", dummies.weights, dummies.block.names(ColumnType.dummy))
    if variables.noise > 0:
        builder.add("noise", np.eye(variables.noise), noise_block.names(ColumnType.noise))
    builder.add("target", [[1.0]], [TARGET_NAME])
    psi = builder.build()

    equation = build_equation(psi, column_types)
    tgp = build_tgp(icept, terms, noise_sd)

    n_missing = int(data[TARGET_NAME].isna().sum())
    if n_missing > 0:
        logger.info(f"Dropping {n_missing} observation(s) with missing target values.")
    data = data.dropna()

    logger.info(f"Simulated {len(data)} observations with {data.shape[1] - 1} columns "
                f"(task: {getattr(config.task, 'name', 'custom')}).")
    logger.info(f"Target generating process: {tgp}")

    return SimulationResult(data=data,
                            psi=psi,
                            equation=equation,
                            tgp=tgp,
                            task=config.task,
                            control=config,
                            column_types=column_types,
                            noise_sd=noise_sd)


# ---------------------------------------------------------------------
# Ground truth effects
# ---------------------------------------------------------------------

def transform(result: SimulationResult, data: Optional[pd.DataFrame] = None) -> pd.DataFrame:
    """
    Per-column true effects of observed data.

    The nonlinear function of the simulation is applied to the nonlinear
    columns before the data are multiplied with psi. For the simulated data of
    a regression task the effects of the intercept, structural and dummy
    columns sum up to the target without noise.

    Parameters
    ----------
    result : SimulationResult
        Simulation providing psi and the nonlinear function.
    data : pd.DataFrame, optional
        Data with (at least) the columns of ``result.data``. Defaults to
        ``result.data``.

    Returns
    -------
    pd.DataFrame
        Effects, labeled like psi and indexed like ``data``.
    """
    if data is None:
        data = result.data
    columns = list(result.psi.columns)
    missing = [name for name in columns if name not in data.columns]
    if missing:
        raise ValueError(f"data is missing the columns {missing}.")

    frame = data[columns].astype(float)
    for name in result.columns_of(ColumnType.nonlinear):
        frame[name] = np.asarray(result.control.nlfun(frame[name].to_numpy()), dtype=float)

    effects = frame.to_numpy() @ result.psi.to_numpy()
    return pd.DataFrame(effects, index=data.index, columns=columns)
