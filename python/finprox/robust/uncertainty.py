"""
Uncertainty Sets
================

Parameter uncertainty representations for robust optimization.

- Box:         nominal ± deviation in every coordinate
- Ellipsoidal: (p - nominal)' Σ⁻¹ (p - nominal) <= radius²
- Discrete:    explicit finite list of parameter vectors
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, Union

import numpy as np
from scipy import linalg

from ..exceptions import DimensionError, InvalidInputError
from ..utils.validation import as_float_array, as_float_matrix, check_count, check_positive
from ..vector import Vector

SeedLike = Optional[Union[int, np.random.Generator]]

# Membership tolerance for boundary and exact-match checks
CONTAINS_TOLERANCE = 1e-10

# Above this dimension the 2^d corners are no longer enumerated
MAX_CORNER_DIMENSION = 10


class UncertaintySet(ABC):
    """Base class for uncertainty sets."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Number of uncertain parameters."""

    @property
    @abstractmethod
    def nominal(self) -> Vector:
        """Nominal (expected) parameter vector."""

    @abstractmethod
    def contains(self, point: Any) -> bool:
        """Check if a parameter vector lies in the set."""

    @abstractmethod
    def sample_points(self, number_of_samples: int, seed: SeedLike = None) -> List[Vector]:
        """
        Draw parameter vectors from the set.

        Args:
            number_of_samples: Requested number of points
            seed: Integer seed or numpy Generator; None for fresh entropy
        """

    def _point(self, point: Any) -> np.ndarray:
        return as_float_array(point, "point", dim=self.dimension)


class BoxUncertaintySet(UncertaintySet):
    """
    Hyperrectangle nominal[i] ± deviations[i].

    Args:
        nominal: Nominal parameter vector
        deviations: Non-negative half-width per coordinate

    Example:
        >>> box = BoxUncertaintySet([0.10, 0.12, 0.08], [0.02, 0.03, 0.01])
        >>> box.contains([0.10, 0.12, 0.08])
        True
        >>> box.contains([0.15, 0.12, 0.08])
        False
    """

    def __init__(self, nominal: Any, deviations: Any) -> None:
        self._nominal = as_float_array(nominal, "nominal")
        self._deviations = as_float_array(deviations, "deviations", dim=self._nominal.size)
        if np.any(self._deviations < 0):
            raise InvalidInputError("deviations must be non-negative")

    @property
    def dimension(self) -> int:
        return self._nominal.size

    @property
    def nominal(self) -> Vector:
        return Vector(self._nominal)

    @property
    def deviations(self) -> Vector:
        return Vector(self._deviations)

    @property
    def lower_bounds(self) -> Vector:
        """nominal - deviations."""
        return Vector(self._nominal - self._deviations)

    @property
    def upper_bounds(self) -> Vector:
        """nominal + deviations."""
        return Vector(self._nominal + self._deviations)

    def contains(self, point: Any) -> bool:
        p = self._point(point)
        lower = self._nominal - self._deviations
        upper = self._nominal + self._deviations
        return bool(np.all(p >= lower - CONTAINS_TOLERANCE) and np.all(p <= upper + CONTAINS_TOLERANCE))

    def corners(self) -> List[Vector]:
        """All 2^d vertices of the box."""
        return [
            Vector(self._nominal + np.array(signs) * self._deviations)
            for signs in itertools.product((-1.0, 1.0), repeat=self.dimension)
        ]

    def sample_points(self, number_of_samples: int, seed: SeedLike = None) -> List[Vector]:
        """
        Corners first (up to 10 dimensions), then uniform interior points.

        At least ``number_of_samples`` points are returned; in low
        dimensions every corner is always included even if that exceeds
        the requested count.
        """
        check_count(number_of_samples, "number_of_samples")
        rng = np.random.default_rng(seed)
        points = self.corners() if self.dimension <= MAX_CORNER_DIMENSION else []
        remaining = number_of_samples - len(points)
        if remaining > 0:
            lower = self._nominal - self._deviations
            upper = self._nominal + self._deviations
            draws = rng.uniform(lower, upper, size=(remaining, self.dimension))
            points.extend(Vector(row) for row in draws)
        return points

    def __repr__(self) -> str:
        return f"BoxUncertaintySet(dimension={self.dimension})"


class EllipsoidalUncertaintySet(UncertaintySet):
    """
    Ellipsoid (p - nominal)' Σ⁻¹ (p - nominal) <= radius².

    Args:
        nominal: Center of the ellipsoid
        covariance: Symmetric positive definite shape matrix Σ
        radius: Positive scaling of the ellipsoid

    Example:
        >>> ellipsoid = EllipsoidalUncertaintySet(
        ...     nominal=[0.10, 0.12],
        ...     covariance=[[0.0004, 0.0001], [0.0001, 0.0009]],
        ...     radius=2.0,
        ... )
        >>> points = ellipsoid.sample_points(50, seed=42)
    """

    def __init__(self, nominal: Any, covariance: Any, radius: float = 1.0) -> None:
        self._nominal = as_float_array(nominal, "nominal")
        d = self._nominal.size
        self._covariance = as_float_matrix(covariance, "covariance", shape=(d, d))
        if not np.allclose(self._covariance, self._covariance.T):
            raise InvalidInputError("covariance must be symmetric")
        self.radius = check_positive(radius, "radius")
        try:
            self._cholesky = linalg.cholesky(self._covariance, lower=True)
        except linalg.LinAlgError as e:
            raise InvalidInputError("covariance must be positive definite") from e

    @property
    def dimension(self) -> int:
        return self._nominal.size

    @property
    def nominal(self) -> Vector:
        return Vector(self._nominal)

    @property
    def covariance(self) -> np.ndarray:
        return self._covariance.copy()

    def mahalanobis_distance(self, point: Any) -> float:
        """sqrt((p - nominal)' Σ⁻¹ (p - nominal))."""
        diff = self._point(point) - self._nominal
        y = linalg.solve_triangular(self._cholesky, diff, lower=True)
        return float(np.sqrt(y @ y))

    def contains(self, point: Any) -> bool:
        distance = self.mahalanobis_distance(point)
        return distance * distance <= self.radius ** 2 * (1.0 + CONTAINS_TOLERANCE) + CONTAINS_TOLERANCE

    def sample_points(self, number_of_samples: int, seed: SeedLike = None) -> List[Vector]:
        """
        Exactly ``number_of_samples`` points uniformly distributed in the ellipsoid.

        Points are nominal + radius · L u, where L is the Cholesky factor of
        Σ and u is uniform in the unit ball.
        """
        n = check_count(number_of_samples, "number_of_samples")
        rng = np.random.default_rng(seed)
        d = self.dimension
        directions = rng.standard_normal((n, d))
        directions /= np.linalg.norm(directions, axis=1, keepdims=True)
        radii = rng.uniform(size=n) ** (1.0 / d)
        unit_ball = directions * radii[:, None]
        points = self._nominal + self.radius * unit_ball @ self._cholesky.T
        return [Vector(row) for row in points]

    def __repr__(self) -> str:
        return f"EllipsoidalUncertaintySet(dimension={self.dimension}, radius={self.radius:g})"


class DiscreteUncertaintySet(UncertaintySet):
    """
    Finite set of candidate parameter vectors.

    Args:
        points: Non-empty list of parameter vectors of equal dimension.
            The first point is the nominal.

    Example:
        >>> scenarios = DiscreteUncertaintySet([
        ...     [0.20, 0.04],    # bull
        ...     [0.10, 0.05],    # base
        ...     [-0.05, 0.06],   # bear
        ... ])
        >>> len(scenarios.sample_points(1))
        3
    """

    def __init__(self, points: Sequence[Any]) -> None:
        if len(points) == 0:
            raise InvalidInputError("discrete uncertainty set requires at least one point")
        first = as_float_array(points[0], "points[0]")
        arrays = [first]
        for i, p in enumerate(points[1:], start=1):
            try:
                arrays.append(as_float_array(p, f"points[{i}]", dim=first.size))
            except DimensionError as e:
                raise DimensionError(f"all points must have dimension {first.size}") from e
        self._points = np.vstack(arrays)

    @property
    def dimension(self) -> int:
        return self._points.shape[1]

    @property
    def nominal(self) -> Vector:
        return Vector(self._points[0])

    @property
    def points(self) -> List[Vector]:
        return [Vector(row) for row in self._points]

    def __len__(self) -> int:
        return self._points.shape[0]

    def contains(self, point: Any) -> bool:
        p = self._point(point)
        return bool(np.any(np.all(np.abs(self._points - p) <= CONTAINS_TOLERANCE, axis=1)))

    def sample_points(self, number_of_samples: Optional[int] = None, seed: SeedLike = None) -> List[Vector]:
        """Every point of the set, whatever the requested count."""
        return self.points

    def __repr__(self) -> str:
        return f"DiscreteUncertaintySet(points={len(self)}, dimension={self.dimension})"
