"""
finprox Exception Classes
=========================

Custom exceptions for finprox error handling.

Optimization difficulty (running out of iterations, degenerate gradients)
is never raised; it is reported through ``Status`` on the returned result.
Only misuse of the API raises.
"""


class FinproxError(Exception):
    """Base exception for all finprox errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DimensionError(FinproxError):
    """
    Raised when vector dimensions are incompatible.

    Examples: adding vectors of different length, a covariance matrix that
    does not match the nominal vector, a trajectory of the wrong length.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Dimension mismatch: {message}")


class InvalidInputError(FinproxError):
    """
    Raised when input data is invalid.

    Examples: NaN values, negative probabilities, zero periods.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid input: {message}")
