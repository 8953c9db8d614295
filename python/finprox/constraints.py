"""
Constraints
===========

Constraint representation for the single-state solver.

A constraint wraps a residual function r(x):
- equality:   satisfied when |r(x)| <= tol
- inequality: satisfied when r(x) <= tol

Example:
    >>> from finprox import Constraint, Vector, all_satisfied
    >>> constraints = [Constraint.budget(), *Constraint.non_negativity(3)]
    >>> w = Vector([0.2, 0.3, 0.5])
    >>> all_satisfied(constraints, w)
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Union

import numpy as np

from .exceptions import InvalidInputError
from .numerics import numerical_gradient
from .vector import Vector


class ConstraintType(Enum):
    """Constraint sense."""
    EQUALITY = "equality"
    INEQUALITY = "inequality"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Constraint:
    """
    Residual constraint over a single vector state.

    Args:
        kind: EQUALITY (r(x) == 0) or INEQUALITY (r(x) <= 0)
        function: Residual function r(x) -> float
        gradient: Optional analytic gradient of r
        name: Optional label used in summaries
    """
    kind: ConstraintType
    function: Callable[[Vector], float]
    gradient: Optional[Callable[[Vector], Vector]] = None
    name: Optional[str] = None

    @classmethod
    def equality(
        cls,
        function: Callable[[Vector], float],
        gradient: Optional[Callable[[Vector], Vector]] = None,
        name: Optional[str] = None,
    ) -> "Constraint":
        """Constraint r(x) == 0."""
        return cls(ConstraintType.EQUALITY, function, gradient, name)

    @classmethod
    def inequality(
        cls,
        function: Callable[[Vector], float],
        gradient: Optional[Callable[[Vector], Vector]] = None,
        name: Optional[str] = None,
    ) -> "Constraint":
        """Constraint r(x) <= 0."""
        return cls(ConstraintType.INEQUALITY, function, gradient, name)

    @property
    def is_equality(self) -> bool:
        return self.kind is ConstraintType.EQUALITY

    def evaluate(self, x: Vector) -> float:
        """Residual at x."""
        return float(self.function(x))

    def violation(self, x: Vector) -> float:
        """Amount by which x violates the constraint (0 when satisfied)."""
        r = self.evaluate(x)
        return abs(r) if self.is_equality else max(r, 0.0)

    def is_satisfied(self, x: Vector, tolerance: float = 1e-6) -> bool:
        """Check if x satisfies the constraint within tolerance."""
        return self.violation(x) <= tolerance

    def gradient_at(self, x: Vector, step: float = 1e-6) -> Vector:
        """Analytic gradient if available, otherwise central differences."""
        if self.gradient is not None:
            return Vector(self.gradient(x))
        return numerical_gradient(self.function, x, step)

    # ------------------------------------------------------------------
    # Common portfolio constraints
    # ------------------------------------------------------------------

    @classmethod
    def budget(cls) -> "Constraint":
        """Weights sum to one: Σx - 1 == 0."""
        return cls.equality(
            budget_residual,
            gradient=lambda x: Vector.ones(x.dimension),
            name="budget",
        )

    @classmethod
    def non_negativity(cls, dimension: int) -> List["Constraint"]:
        """x_i >= 0 for every component (long-only)."""
        return [
            cls.inequality(lambda x, i=i: -x[i], gradient=lambda x, i=i: -Vector.basis(x.dimension, i),
                           name=f"non_negativity[{i}]")
            for i in range(dimension)
        ]

    @classmethod
    def position_limit(cls, maximum: float, dimension: int) -> List["Constraint"]:
        """x_i <= maximum for every component."""
        return [
            cls.inequality(lambda x, i=i: x[i] - maximum, gradient=lambda x, i=i: Vector.basis(x.dimension, i),
                           name=f"position_limit[{i}]")
            for i in range(dimension)
        ]

    @classmethod
    def position_minimum(cls, minimum: float, dimension: int) -> List["Constraint"]:
        """x_i >= minimum for every component."""
        return [
            cls.inequality(lambda x, i=i: minimum - x[i], gradient=lambda x, i=i: -Vector.basis(x.dimension, i),
                           name=f"position_minimum[{i}]")
            for i in range(dimension)
        ]

    @classmethod
    def box_constraints(cls, minimum: float, maximum: float, dimension: int) -> List["Constraint"]:
        """minimum <= x_i <= maximum for every component."""
        if minimum > maximum:
            raise InvalidInputError(f"minimum {minimum} exceeds maximum {maximum}")
        return cls.position_minimum(minimum, dimension) + cls.position_limit(maximum, dimension)

    @classmethod
    def target_return(cls, expected_returns: Sequence[float], target: float) -> "Constraint":
        """Portfolio return w·r >= target."""
        returns = Vector(expected_returns)
        return cls.inequality(
            lambda x: target - x.dot(returns),
            gradient=lambda x: -returns,
            name="target_return",
        )

    @classmethod
    def leverage_limit(cls, maximum: float) -> "Constraint":
        """Gross exposure Σ|x_i| <= maximum."""
        return cls.inequality(
            lambda x: float(np.sum(np.abs(x.to_array()))) - maximum,
            name="leverage_limit",
        )


def budget_residual(x: Vector) -> float:
    """Σx - 1, shared by the single-period and per-period budget constraints."""
    return x.sum() - 1.0


ConstraintLike = Union[Constraint, Sequence[Constraint]]


def flatten_constraints(constraints: Optional[Sequence[ConstraintLike]]) -> List[Constraint]:
    """
    Flatten a list that may mix constraints and lists of constraints.

    Factories such as ``Constraint.non_negativity`` return lists, so
    callers can write ``[Constraint.budget(), Constraint.non_negativity(3)]``.
    """
    flat: List[Constraint] = []
    for item in constraints or ():
        if isinstance(item, Constraint):
            flat.append(item)
        elif isinstance(item, (list, tuple)):
            flat.extend(flatten_constraints(item))
        else:
            raise InvalidInputError(f"expected Constraint, got {type(item).__name__}")
    return flat


def constraint_violations(constraints: Sequence[ConstraintLike], x: Vector) -> List[float]:
    """Violation amount of each constraint at x."""
    return [c.violation(x) for c in flatten_constraints(constraints)]


def max_violation(constraints: Sequence[ConstraintLike], x: Vector) -> float:
    """Largest violation at x (0 for an empty list)."""
    return max(constraint_violations(constraints, x), default=0.0)


def all_satisfied(constraints: Sequence[ConstraintLike], x: Vector, tolerance: float = 1e-6) -> bool:
    """True if every constraint is satisfied at x."""
    return all(c.is_satisfied(x, tolerance) for c in flatten_constraints(constraints))
