"""
Trajectories
============

Ordered per-period states for multi-period optimization, plus the
flatten/unflatten mapping between a trajectory and the joint decision
vector handed to the single-state solver.
"""

from __future__ import annotations

from typing import Iterator, List, Sequence, Union

import numpy as np

from ..exceptions import DimensionError, InvalidInputError
from ..vector import Vector


class Trajectory:
    """
    Immutable sequence of per-period states.

    Index 0 is the first period; the last index is the terminal period.
    All states share one dimension.

    Args:
        states: Sequence of Vectors (or array rows), one per period

    Example:
        >>> traj = Trajectory([[0.5, 0.5], [0.4, 0.6]])
        >>> traj.terminal_state.to_list()
        [0.4, 0.6]
        >>> len(traj.turnover())
        1
    """

    __slots__ = ("_states",)

    def __init__(self, states: Sequence[Union[Vector, Sequence[float]]]) -> None:
        vectors = tuple(s if isinstance(s, Vector) else Vector(s) for s in states)
        if not vectors:
            raise InvalidInputError("trajectory must contain at least one period")
        dim = vectors[0].dimension
        for t, v in enumerate(vectors):
            if v.dimension != dim:
                raise DimensionError(f"period {t} has dimension {v.dimension}, expected {dim}")
        self._states = vectors

    @classmethod
    def from_flat(cls, flat: Union[Vector, np.ndarray], number_of_periods: int, dimension: int) -> "Trajectory":
        """Split a concatenated decision vector into per-period states."""
        data = np.asarray(flat, dtype=np.float64)
        if data.size != number_of_periods * dimension:
            raise DimensionError(
                f"flat vector has {data.size} elements, expected {number_of_periods} x {dimension}"
            )
        return cls(list(data.reshape(number_of_periods, dimension)))

    @classmethod
    def constant(cls, state: Union[Vector, Sequence[float]], number_of_periods: int) -> "Trajectory":
        """Repeat one state for every period."""
        v = state if isinstance(state, Vector) else Vector(state)
        return cls([v] * number_of_periods)

    @property
    def number_of_periods(self) -> int:
        return len(self._states)

    @property
    def dimension(self) -> int:
        return self._states[0].dimension

    @property
    def initial_state(self) -> Vector:
        return self._states[0]

    @property
    def terminal_state(self) -> Vector:
        return self._states[-1]

    @property
    def states(self) -> List[Vector]:
        return list(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[Vector]:
        return iter(self._states)

    def __getitem__(self, index: int) -> Vector:
        return self._states[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Trajectory):
            return NotImplemented
        return self._states == other._states

    def __repr__(self) -> str:
        return f"Trajectory(periods={self.number_of_periods}, dimension={self.dimension})"

    def to_array(self) -> np.ndarray:
        """States as a (T, n) array."""
        return np.vstack([s.to_array() for s in self._states])

    def flatten(self) -> np.ndarray:
        """Concatenated states, period-major."""
        return self.to_array().ravel()

    def turnover(self) -> List[float]:
        """Σ_i |x_{t+1}[i] - x_t[i]| for every consecutive pair."""
        arr = self.to_array()
        return np.abs(np.diff(arr, axis=0)).sum(axis=1).tolist()
