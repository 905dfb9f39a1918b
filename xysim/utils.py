from typing import List, Optional, Sequence, Union

import numpy as np
from numpy.random import Generator


def check_random_state(random_state: Optional[Union[int, Generator]]) -> Generator:
    """Return a NumPy Generator, creating a seeded one if needed."""
    if isinstance(random_state, Generator):
        return random_state
    return np.random.default_rng(random_state)


def index_width(counts: Sequence[int]) -> int:
    """Number of digits needed to zero-pad the largest of `counts`."""
    return len(str(max([int(c) for c in counts] + [1])))


def variable_names(prefix: str, count: int, width: int) -> List[str]:
    """
    Generate zero-padded column names for one block of variables.

    Examples
    --------
    >>> variable_names("LIN", 3, 2)
    ['LIN_01', 'LIN_02', 'LIN_03']
    """
    return [f"{prefix}_{i:0{width}d}" for i in range(1, count + 1)]


def format_weight(weight: float) -> str:
    """Render a weight rounded to two decimals without a trailing '.0'."""
    value = round(float(weight), 2)
    if value == int(value):
        return str(int(value))
    return repr(value)


def parenthesize_negative(term: str) -> str:
    # negative terms are bracketed so that the sign can be fixed after joining
    if "-" in term:
        return f"({term})"
    return term
