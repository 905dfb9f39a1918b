from .constants import ColumnType
from .config import SimulationConfig, VariableSpace, validate_parameters
from .exceptions import ConfigurationError, CovarianceError, ParameterWarning, TaskTransformError
from .logging import setup_logging
from .simulation import SimulationResult, run_simulation, simulate, transform
from .task import Task

__version__ = "0.1.0"
