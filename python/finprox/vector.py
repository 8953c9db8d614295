"""
Vector State
============

Immutable fixed-dimension real vector used as the decision variable
for every optimizer in finprox.

Example:
    >>> from finprox import Vector
    >>> w = Vector([0.2, 0.3, 0.5])
    >>> expected = w.dot([0.10, 0.15, 0.12])
    >>> (w + w).to_list()
    [0.4, 0.6, 1.0]
"""

from __future__ import annotations

from typing import Any, Iterator, List, Sequence, Union

import numpy as np

from .exceptions import DimensionError, InvalidInputError

ArrayLike = Union["Vector", Sequence[float], np.ndarray]


class Vector:
    """
    Immutable dense vector of float64 values.

    Operations never modify the receiver; they return new vectors. Binary
    operations require equal dimensions and raise ``DimensionError``
    otherwise.

    Args:
        values: Ordered real values (list, tuple, ndarray or Vector)
    """

    __slots__ = ("_data",)

    # Defer mixed ndarray arithmetic to the reflected Vector methods
    __array_ufunc__ = None

    def __init__(self, values: ArrayLike) -> None:
        if isinstance(values, Vector):
            data = values._data
        else:
            data = np.array(values, dtype=np.float64)
            if data.ndim == 0:
                data = data.reshape(1)
            if data.ndim != 1:
                raise DimensionError(f"vector values must be 1-D, got shape {data.shape}")
            data.flags.writeable = False
        self._data = data

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_array(cls, values: ArrayLike) -> "Vector":
        """Create a vector from an ordered array of reals."""
        return cls(values)

    @classmethod
    def zeros(cls, dimension: int) -> "Vector":
        """Zero vector of given dimension."""
        return cls(np.zeros(dimension))

    @classmethod
    def ones(cls, dimension: int) -> "Vector":
        """Vector of ones."""
        return cls(np.ones(dimension))

    @classmethod
    def basis(cls, dimension: int, index: int) -> "Vector":
        """Unit vector e_index."""
        if not 0 <= index < dimension:
            raise InvalidInputError(f"basis index {index} out of range for dimension {dimension}")
        data = np.zeros(dimension)
        data[index] = 1.0
        return cls(data)

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    @property
    def dimension(self) -> int:
        """Number of components."""
        return self._data.size

    def to_array(self) -> np.ndarray:
        """Return a writable copy of the components."""
        return self._data.copy()

    def to_list(self) -> List[float]:
        """Components as a list of Python floats."""
        return self._data.tolist()

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        if dtype is None:
            return self._data.copy()
        return self._data.astype(dtype)

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return self._data.size

    def __iter__(self) -> Iterator[float]:
        return iter(self._data.tolist())

    def __getitem__(self, index: Any) -> Union[float, "Vector"]:
        if isinstance(index, slice):
            return Vector(self._data[index])
        return float(self._data[index])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self._data.shape == other._data.shape and bool(np.array_equal(self._data, other._data))

    def __hash__(self) -> int:
        # -0.0 == 0.0, so signed zeros must hash alike
        return hash((self._data + 0.0).tobytes())

    def __repr__(self) -> str:
        values = ", ".join(f"{v:.6g}" for v in self._data)
        return f"Vector([{values}])"

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _operand(self, other: ArrayLike, op: str) -> np.ndarray:
        if isinstance(other, Vector):
            data = other._data
        else:
            data = np.asarray(other, dtype=np.float64)
            if data.ndim != 1:
                raise DimensionError(f"cannot {op} with operand of shape {data.shape}")
        if data.size != self._data.size:
            raise DimensionError(f"cannot {op} vectors of dimension {self._data.size} and {data.size}")
        return data

    def __add__(self, other: ArrayLike) -> "Vector":
        return Vector(self._data + self._operand(other, "add"))

    __radd__ = __add__

    def __sub__(self, other: ArrayLike) -> "Vector":
        return Vector(self._data - self._operand(other, "subtract"))

    def __rsub__(self, other: ArrayLike) -> "Vector":
        return Vector(self._operand(other, "subtract") - self._data)

    def __neg__(self) -> "Vector":
        return Vector(-self._data)

    def __mul__(self, scalar: float) -> "Vector":
        if not np.isscalar(scalar):
            return NotImplemented
        return Vector(self._data * float(scalar))

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vector":
        if not np.isscalar(scalar):
            return NotImplemented
        return Vector(self._data / float(scalar))

    def dot(self, other: ArrayLike) -> float:
        """Standard inner product."""
        return float(np.dot(self._data, self._operand(other, "dot")))

    def hadamard(self, other: ArrayLike) -> "Vector":
        """Componentwise product."""
        return Vector(self._data * self._operand(other, "multiply"))

    # ------------------------------------------------------------------
    # Reductions
    # ------------------------------------------------------------------

    def sum(self) -> float:
        return float(np.sum(self._data))

    def mean(self) -> float:
        return float(np.mean(self._data))

    def max(self) -> float:
        return float(np.max(self._data))

    def min(self) -> float:
        return float(np.min(self._data))

    def norm(self) -> float:
        """Euclidean norm."""
        return float(np.linalg.norm(self._data))

    def distance(self, other: ArrayLike) -> float:
        """Euclidean distance to another vector."""
        return float(np.linalg.norm(self._data - self._operand(other, "measure distance between")))
