"""
Multi-Period Constraints
========================

Constraints over a trajectory of per-period states.

Supports:
- Per-period constraints (applied at every period)
- Terminal constraints (final period only)
- Transition constraints (consecutive pairs, e.g. inventory balance)
- Trajectory aggregates (whole trajectory, e.g. average return)
- Cumulative constraints (every running prefix of the trajectory)

Every constraint can be checked directly against a trajectory with
``is_satisfied``; ``to_constraints`` lowers it onto the flat decision
vector used by the solver.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Union

import numpy as np

from ..constraints import Constraint, budget_residual
from ..vector import Vector
from .trajectory import Trajectory

TrajectoryLike = Union[Trajectory, Sequence[Vector], Sequence[Sequence[float]]]


class PeriodConstraintType(Enum):
    """Which states a multi-period constraint reads."""
    EACH_PERIOD = "each_period"
    TERMINAL = "terminal"
    TRANSITION = "transition"
    TRAJECTORY = "trajectory"
    CUMULATIVE = "cumulative"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PeriodConstraint:
    """
    Constraint spanning one or more periods of a trajectory.

    The residual function signature depends on ``kind``:

    - EACH_PERIOD: ``fn(t, x_t)``
    - TERMINAL:    ``fn(x_last)``
    - TRANSITION:  ``fn(t, x_t, x_t1)``
    - TRAJECTORY:  ``fn(states)``
    - CUMULATIVE:  ``fn(t, states[:t + 1])``

    Residual == 0 is required for equality constraints, residual <= 0 for
    inequality constraints.

    Example:
        >>> inventory = PeriodConstraint.transition(
        ...     lambda t, x, x_next: x_next[1] - (x[1] + x[0] - 10.0),
        ...     is_equality=True,
        ... )
        >>> constraints = [
        ...     PeriodConstraint.budget_each_period(),
        ...     PeriodConstraint.non_negativity_each_period(3),
        ...     PeriodConstraint.turnover_limit(0.2),
        ... ]
    """
    kind: PeriodConstraintType
    function: Callable[..., float]
    is_equality: bool = False
    name: Optional[str] = None

    # ------------------------------------------------------------------
    # Generic constructors
    # ------------------------------------------------------------------

    @classmethod
    def each_period(cls, function: Callable[[int, Vector], float], is_equality: bool = False) -> "PeriodConstraint":
        return cls(PeriodConstraintType.EACH_PERIOD, function, is_equality)

    @classmethod
    def terminal(cls, function: Callable[[Vector], float], is_equality: bool = False) -> "PeriodConstraint":
        return cls(PeriodConstraintType.TERMINAL, function, is_equality)

    @classmethod
    def transition(
        cls,
        function: Callable[[int, Vector, Vector], float],
        is_equality: bool = False,
    ) -> "PeriodConstraint":
        return cls(PeriodConstraintType.TRANSITION, function, is_equality)

    @classmethod
    def trajectory(cls, function: Callable[[List[Vector]], float], is_equality: bool = False) -> "PeriodConstraint":
        return cls(PeriodConstraintType.TRAJECTORY, function, is_equality)

    @classmethod
    def cumulative(
        cls,
        function: Callable[[int, List[Vector]], float],
        is_equality: bool = False,
    ) -> "PeriodConstraint":
        return cls(PeriodConstraintType.CUMULATIVE, function, is_equality)

    # ------------------------------------------------------------------
    # Common constraints
    # ------------------------------------------------------------------

    @classmethod
    def budget_each_period(cls) -> "PeriodConstraint":
        """Σ_i x_t[i] == 1 at every period."""
        return cls(PeriodConstraintType.EACH_PERIOD, lambda t, x: budget_residual(x), True, "budget")

    @classmethod
    def non_negativity_each_period(cls, dimension: int) -> List["PeriodConstraint"]:
        """x_t[i] >= 0 for every period and component."""
        return [
            cls(PeriodConstraintType.EACH_PERIOD, lambda t, x, i=i: -x[i], False, f"non_negativity[{i}]")
            for i in range(dimension)
        ]

    @classmethod
    def turnover_limit(cls, limit: float) -> "PeriodConstraint":
        """Σ_i |x_{t+1}[i] - x_t[i]| <= limit for every consecutive pair."""
        return cls(
            PeriodConstraintType.TRANSITION,
            lambda t, x, x_next: float(np.abs((x_next - x).to_array()).sum()) - limit,
            False,
            "turnover_limit",
        )

    @classmethod
    def average_constraint(cls, metric: Callable[[Vector], float], minimum_average: float) -> "PeriodConstraint":
        """Mean of metric(x_t) over the trajectory >= minimum_average."""
        return cls(
            PeriodConstraintType.TRAJECTORY,
            lambda states: minimum_average - float(np.mean([metric(x) for x in states])),
            False,
            "average_constraint",
        )

    @classmethod
    def cumulative_limit(cls, metric: Callable[[Vector], float], maximum: float) -> "PeriodConstraint":
        """Running sum Σ_{s<=t} metric(x_s) <= maximum at every period t."""
        return cls(
            PeriodConstraintType.CUMULATIVE,
            lambda t, history: float(sum(metric(x) for x in history)) - maximum,
            False,
            "cumulative_limit",
        )

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, trajectory: TrajectoryLike) -> List[float]:
        """Residual of every instance of this constraint along the trajectory."""
        states = _as_trajectory(trajectory).states
        fn = self.function
        if self.kind is PeriodConstraintType.EACH_PERIOD:
            return [float(fn(t, x)) for t, x in enumerate(states)]
        if self.kind is PeriodConstraintType.TERMINAL:
            return [float(fn(states[-1]))]
        if self.kind is PeriodConstraintType.TRANSITION:
            return [float(fn(t, states[t], states[t + 1])) for t in range(len(states) - 1)]
        if self.kind is PeriodConstraintType.TRAJECTORY:
            return [float(fn(states))]
        return [float(fn(t, states[:t + 1])) for t in range(len(states))]

    def violations(self, trajectory: TrajectoryLike) -> List[float]:
        """Violation amount of every instance (0 when satisfied)."""
        residuals = self.evaluate(trajectory)
        if self.is_equality:
            return [abs(r) for r in residuals]
        return [max(r, 0.0) for r in residuals]

    def is_satisfied(self, trajectory: TrajectoryLike, tolerance: float = 1e-6) -> bool:
        """Check the trajectory against this constraint without solving."""
        return all(v <= tolerance for v in self.violations(trajectory))

    def to_constraints(self, number_of_periods: int, dimension: int) -> List[Constraint]:
        """
        Lower onto the concatenated decision vector.

        The flat vector holds period t in ``z[t*dimension:(t+1)*dimension]``.
        """
        make = Constraint.equality if self.is_equality else Constraint.inequality
        fn = self.function
        n = dimension
        T = number_of_periods

        def period(z: Vector, t: int) -> Vector:
            return z[t * n:(t + 1) * n]

        def unflatten(z: Vector, periods: int) -> List[Vector]:
            return [period(z, t) for t in range(periods)]

        if self.kind is PeriodConstraintType.EACH_PERIOD:
            return [make(lambda z, t=t: fn(t, period(z, t)), name=self.name) for t in range(T)]
        if self.kind is PeriodConstraintType.TERMINAL:
            return [make(lambda z: fn(period(z, T - 1)), name=self.name)]
        if self.kind is PeriodConstraintType.TRANSITION:
            return [
                make(lambda z, t=t: fn(t, period(z, t), period(z, t + 1)), name=self.name)
                for t in range(T - 1)
            ]
        if self.kind is PeriodConstraintType.TRAJECTORY:
            return [make(lambda z: fn(unflatten(z, T)), name=self.name)]
        return [make(lambda z, t=t: fn(t, unflatten(z, t + 1)), name=self.name) for t in range(T)]


def flatten_period_constraints(
    constraints: Optional[Sequence[Union[PeriodConstraint, Sequence[PeriodConstraint]]]],
) -> List[PeriodConstraint]:
    """Flatten a list that may mix constraints and constraint families."""
    flat: List[PeriodConstraint] = []
    for item in constraints or ():
        if isinstance(item, PeriodConstraint):
            flat.append(item)
        else:
            flat.extend(flatten_period_constraints(item))
    return flat


def _as_trajectory(trajectory: TrajectoryLike) -> Trajectory:
    if isinstance(trajectory, Trajectory):
        return trajectory
    return Trajectory(trajectory)
