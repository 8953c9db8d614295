"""
finprox Result Classes
======================

Data classes for solver results and status.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

import numpy as np

from .vector import Vector


class Status(Enum):
    """
    Solver status codes.

    Attributes:
        OPTIMAL: Constraints and stopping tolerances met
        MAX_ITERATIONS: Iteration budget exhausted before convergence
        NUMERICAL_ERROR: Non-finite objective or degenerate constraint gradient
        INTERRUPTED: Stopped by a progress callback
    """
    OPTIMAL = "optimal"
    MAX_ITERATIONS = "max_iterations"
    NUMERICAL_ERROR = "numerical_error"
    INTERRUPTED = "interrupted"

    def __str__(self) -> str:
        return self.value

    @property
    def is_successful(self) -> bool:
        """True if an optimal solution was found."""
        return self == Status.OPTIMAL

    @property
    def has_solution(self) -> bool:
        """True if a (possibly suboptimal) solution is available."""
        return self in (
            Status.OPTIMAL,
            Status.MAX_ITERATIONS,
            Status.INTERRUPTED,
        )


@dataclass(frozen=True)
class IterationSnapshot:
    """
    Solver state after one outer iteration.

    Passed to progress callbacks and stored in ``OptimizationResult.history``.
    """
    iteration: int
    objective_value: float
    constraint_violation: float
    gradient_norm: float
    penalty: float


@dataclass
class OptimizationResult:
    """
    Result of a single-state constrained optimization.

    Attributes:
        status: Solver status
        solution: Final state
        objective_value: Objective at the solution, in the caller's sense
        iterations: Outer (multiplier update) iterations performed
        constraint_violation: Largest constraint violation at the solution
        multipliers: Lagrange multiplier per constraint, minimization convention
        solve_time: Wall clock time in seconds
        history: Per-iteration snapshots when history recording is enabled

    Example:
        >>> result = optimizer.maximize(objective, x0, constraints)
        >>> if result.converged:
        ...     print(f"Optimal value: {result.objective_value}")
    """

    status: Status
    solution: Vector
    objective_value: float
    iterations: int
    constraint_violation: float = 0.0
    multipliers: np.ndarray = field(default_factory=lambda: np.zeros(0))
    solve_time: float = 0.0
    history: List[IterationSnapshot] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        """Whether all tolerances were met."""
        return self.status.is_successful

    def __repr__(self) -> str:
        return (
            f"OptimizationResult(status={self.status}, "
            f"objective={self.objective_value:.6g}, "
            f"iterations={self.iterations}, "
            f"time={self.solve_time:.4f}s)"
        )

    def summary(self) -> str:
        """Return a formatted summary of the solve result."""
        lines = [
            "=" * 50,
            "finprox Solve Summary",
            "=" * 50,
            f"Status:           {self.status}",
            f"Objective:        {self.objective_value:.10g}",
            f"Iterations:       {self.iterations}",
            f"Solve time:       {self.solve_time:.4f} s",
            "-" * 50,
            f"Max violation:    {self.constraint_violation:.6e}",
            f"Dimension:        {self.solution.dimension}",
            "=" * 50,
        ]
        return "\n".join(lines)
