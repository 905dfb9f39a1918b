import pytest
import numpy as np

from xysim import simulate


@pytest.fixture(scope="function")
def rng():
    """A freshly seeded random stream for every test."""
    return np.random.default_rng(42)


@pytest.fixture(scope="module")
def default_simulation():
    """
    Returns the default simulation used throughout the docs:
    n=1000, numvars=(2, 2), catvars=(1, 2), noisevars=5, seed 1337.
    """
    return simulate(n=1000, numvars=(2, 2), catvars=(1, 2), noisevars=5, random_state=1337)
