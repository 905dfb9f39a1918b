from enum import IntEnum


class ColumnType(IntEnum):
    intercept = 0
    linear = 1
    nonlinear = 2
    dummy = 3
    noise = 4
    target = 5


# column name prefixes per column type
PREFIXES = {
    ColumnType.linear: "LIN",
    ColumnType.nonlinear: "NLIN",
    ColumnType.dummy: "DUMMY",
    ColumnType.noise: "NOISE",
}

INTERCEPT_NAME = "(Intercept)"
TARGET_NAME = "y"

STRUCTURAL = (ColumnType.nonlinear, ColumnType.linear)

# attempts for sampling a positive definite covariance matrix
MAX_COVARIANCE_TRIES = 20
