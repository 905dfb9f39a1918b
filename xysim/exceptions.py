class ConfigurationError(ValueError):
    """Raised when a simulation parameter is invalid or malformed."""

    def __init__(self, parameter: str, message: str):
        self.parameter = parameter
        super().__init__(f"'{parameter}' {message}")


class CovarianceError(RuntimeError):
    """Raised when no positive definite covariance matrix is available."""


class TaskTransformError(RuntimeError):
    """Raised when the link or cutoff function of a task fails."""


class ParameterWarning(UserWarning):
    """Issued when a parameter was corrected automatically."""
