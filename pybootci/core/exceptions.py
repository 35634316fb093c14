"""
Exception hierarchy for pybootci.

All exceptions inherit from PyBootCIError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyBootCIError(Exception):
    """Base exception for all pybootci errors."""
    pass


class ValidationError(PyBootCIError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class InvalidArgumentError(ValidationError):
    """
    An argument is outside its valid domain.

    Raised for bad sample sizes, replicate counts, miss rates, method
    names, or statistic outputs that are neither a scalar nor a
    (value, variance) pair.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when the sample is a scalar or has more than two dimensions.
    """
    pass


class StatisticUndefined(PyBootCIError):
    """
    The statistic has no value on a particular resample.

    Raised by user statistic functions (e.g. a correlation on a resample
    where one column is constant). Non-fatal: the replicate is recorded
    as missing and excluded from interval computations.
    """
    pass


class InsufficientDataError(PyBootCIError):
    """
    Too few observations or valid replicates for the requested operation.

    Attributes:
        n: Number of observations (or valid values) available
        required: Minimum number required
    """

    def __init__(
        self,
        message: str,
        n: int | None = None,
        required: int | None = None,
    ):
        super().__init__(message)
        self.n = n
        self.required = required


class NumericalError(PyBootCIError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class DegenerateIntervalError(NumericalError):
    """
    Interval computation is numerically unstable.

    Raised when BCa bias correction diverges, a BCa denominator nears
    zero, adjusted quantile levels leave (0, 1) or invert, or too few
    replicates remain to estimate a spread.

    Attributes:
        method: Interval method that failed
        reason: Short machine-readable reason
    """

    def __init__(
        self,
        message: str,
        method: str | None = None,
        reason: str | None = None,
    ):
        super().__init__(message)
        self.method = method
        self.reason = reason


class MissingVarianceError(PyBootCIError):
    """
    Studentized interval requested without usable variance estimates.

    Attributes:
        n_usable: Number of replicates with a finite, positive variance
    """

    def __init__(self, message: str, n_usable: int = 0):
        super().__init__(message)
        self.n_usable = n_usable


class BootstrapTimeoutError(PyBootCIError):
    """
    A bootstrap run exceeded the caller's time limit.

    The run is abandoned; no result is built from a partial replicate set.

    Attributes:
        timeout: The limit in seconds
        completed: Tasks finished before the limit
        total: Tasks requested
    """

    def __init__(
        self,
        message: str,
        timeout: float,
        completed: int | None = None,
        total: int | None = None,
    ):
        super().__init__(message)
        self.timeout = timeout
        self.completed = completed
        self.total = total
