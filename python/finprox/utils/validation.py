"""Input validation utilities."""

from typing import Any, Optional

import numpy as np

from ..exceptions import DimensionError, InvalidInputError


def as_float_array(
    values: Any,
    name: str,
    dim: Optional[int] = None,
    allow_empty: bool = False,
) -> np.ndarray:
    """
    Convert input to a finite 1-D float64 array.

    Args:
        values: Sequence, array or Vector
        name: Argument name used in error messages
        dim: Expected length, if known
        allow_empty: Accept zero-length input

    Returns:
        New 1-D float64 array

    Raises:
        DimensionError: If the input is not 1-D or has the wrong length
        InvalidInputError: If the input is empty or contains NaN/inf
    """
    arr = np.array(values, dtype=np.float64)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    if arr.ndim != 1:
        raise DimensionError(f"{name} must be 1-D, got shape {arr.shape}")
    if not allow_empty and arr.size == 0:
        raise InvalidInputError(f"{name} must not be empty")
    if dim is not None and arr.size != dim:
        raise DimensionError(f"{name} has {arr.size} elements, expected {dim}")
    if not np.all(np.isfinite(arr)):
        raise InvalidInputError(f"{name} contains NaN or infinite values")
    return arr


def as_float_matrix(values: Any, name: str, shape: Optional[tuple] = None) -> np.ndarray:
    """Convert input to a finite 2-D float64 array."""
    arr = np.array(values, dtype=np.float64)
    if arr.ndim != 2:
        raise DimensionError(f"{name} must be 2-D, got shape {arr.shape}")
    if shape is not None and arr.shape != shape:
        raise DimensionError(f"{name} must have shape {shape}, got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise InvalidInputError(f"{name} contains NaN or infinite values")
    return arr


def check_positive(value: float, name: str) -> float:
    """Require value > 0."""
    if not np.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{name} must be positive, got {value}")
    return float(value)


def check_non_negative(value: float, name: str) -> float:
    """Require value >= 0."""
    if not np.isfinite(value) or value < 0:
        raise InvalidInputError(f"{name} must be non-negative, got {value}")
    return float(value)


def check_count(value: int, name: str) -> int:
    """Require a positive integer count."""
    if isinstance(value, bool) or int(value) != value or value <= 0:
        raise InvalidInputError(f"{name} must be a positive integer, got {value}")
    return int(value)
