"""
Numerical Derivatives
=====================

Central finite differences for black-box objective and constraint
closures.
"""

from __future__ import annotations

from typing import Callable, Union

import numpy as np

from .vector import Vector


def numerical_gradient(
    function: Callable,
    point: Union[Vector, np.ndarray],
    step: float = 1e-6,
) -> Union[Vector, np.ndarray]:
    """
    Estimate the gradient of a scalar function by central differences.

    The step for component i is ``step * max(1, |x_i|)``, so large
    coordinates are perturbed proportionally.

    Args:
        function: Scalar function. Called with a Vector when ``point`` is a
            Vector, otherwise with a float64 array.
        point: Evaluation point
        step: Relative finite-difference step

    Returns:
        Gradient of the same kind as ``point``

    Example:
        >>> g = numerical_gradient(lambda x: x.dot(x), Vector([1.0, 2.0]))
        >>> g.to_list()  # approximately [2.0, 4.0]
    """
    if isinstance(point, Vector):
        grad = _central_difference(lambda z: function(Vector(z)), point.to_array(), step)
        return Vector(grad)
    return _central_difference(function, np.asarray(point, dtype=np.float64), step)


def _central_difference(function: Callable[[np.ndarray], float], x: np.ndarray, step: float) -> np.ndarray:
    grad = np.empty_like(x)
    work = x.copy()
    for i in range(x.size):
        h = step * max(1.0, abs(x[i]))
        work[i] = x[i] + h
        forward = function(work.copy())
        work[i] = x[i] - h
        backward = function(work.copy())
        work[i] = x[i]
        grad[i] = (forward - backward) / (2.0 * h)
    return grad
