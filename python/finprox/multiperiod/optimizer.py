"""
Multi-Period Optimizer
======================

Optimizes a trajectory of per-period states under a discounted additive
objective:

    maximize    Σ_{t=0}^{T-1} δ^t f(t, x_t),     δ = 1 / (1 + r)
    subject to  per-period, transition, terminal, trajectory and
                cumulative constraints

The whole trajectory is stacked into one decision vector
z = [x_0, x_1, ..., x_{T-1}] and handed to ConstrainedOptimizer, so
coupling from transition constraints is seen by every gradient.
"""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from ..exceptions import DimensionError, InvalidInputError
from ..result import Status
from ..solver import ConstrainedOptimizer
from ..utils.validation import as_float_array, check_count, check_non_negative
from ..vector import Vector
from .constraints import flatten_period_constraints
from .trajectory import Trajectory

logger = logging.getLogger(__name__)


@dataclass
class MultiPeriodResult:
    """
    Multi-period solution.

    Attributes:
        status: Solver status
        trajectory: Optimal per-period states
        period_objectives: Undiscounted objective of each period
        total_objective: Σ δ^t period_objectives[t]
        iterations: Solver outer iterations
        constraint_violations: Violation of every constraint instance
        discount_factor: δ = 1 / (1 + discount_rate)
        solve_time: Wall clock time in seconds
    """
    status: Status
    trajectory: Trajectory
    period_objectives: List[float]
    total_objective: float
    iterations: int
    constraint_violations: List[float] = field(default_factory=list)
    discount_factor: float = 1.0
    solve_time: float = 0.0

    @property
    def converged(self) -> bool:
        return self.status.is_successful

    @property
    def number_of_periods(self) -> int:
        return len(self.trajectory)

    @property
    def initial_state(self) -> Vector:
        """State of the first period."""
        return self.trajectory.initial_state

    @property
    def terminal_state(self) -> Vector:
        """State of the final period."""
        return self.trajectory.terminal_state

    @property
    def max_violation(self) -> float:
        return max(self.constraint_violations, default=0.0)

    def __repr__(self) -> str:
        return (
            f"MultiPeriodResult(\n"
            f"  status={self.status},\n"
            f"  total_objective={self.total_objective:.6g},\n"
            f"  periods={self.number_of_periods},\n"
            f"  iterations={self.iterations}\n"
            f")"
        )

    def summary(self) -> str:
        """Formatted summary with one line per period."""
        lines = [
            "=" * 50,
            "Multi-Period Solution Summary",
            "=" * 50,
            f"Status:           {self.status}",
            f"Total objective:  {self.total_objective:.10g}",
            f"Discount factor:  {self.discount_factor:.6g}",
            f"Iterations:       {self.iterations}",
            f"Max violation:    {self.max_violation:.6e}",
            "-" * 50,
        ]
        for t, (state, value) in enumerate(zip(self.trajectory, self.period_objectives)):
            lines.append(f"t={t:<3d} objective={value:<12.6g} state={state.to_list()}")
        lines.append("=" * 50)
        return "\n".join(lines)


class MultiPeriodOptimizer:
    """
    Trajectory optimizer with discounting.

    Args:
        number_of_periods: Number of periods T (> 0)
        discount_rate: Per-period discount rate r (>= 0)
        max_iterations: Maximum solver outer iterations
        tolerance: Constraint, gradient and objective-change tolerance
        max_inner_iterations: L-BFGS-B iterations per outer iteration

    Example:
        >>> returns = Vector([0.10, 0.15, 0.12])
        >>> optimizer = MultiPeriodOptimizer(number_of_periods=3, discount_rate=0.05)
        >>> result = optimizer.optimize(
        ...     lambda w: w.dot(returns),
        ...     initial_state=Vector([1/3, 1/3, 1/3]),
        ...     constraints=[
        ...         PeriodConstraint.budget_each_period(),
        ...         PeriodConstraint.non_negativity_each_period(3),
        ...     ],
        ... )
        >>> result.terminal_state  # concentrated on asset 1
    """

    def __init__(
        self,
        number_of_periods: int,
        discount_rate: float = 0.0,
        max_iterations: int = 100,
        tolerance: float = 1e-6,
        max_inner_iterations: int = 500,
    ) -> None:
        self.number_of_periods = check_count(number_of_periods, "number_of_periods")
        self.discount_rate = check_non_negative(discount_rate, "discount_rate")
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.solver = ConstrainedOptimizer(
            max_iterations=max_iterations,
            tolerance=tolerance,
            constraint_tolerance=tolerance,
            gradient_tolerance=tolerance,
            max_inner_iterations=max_inner_iterations,
        )

    @property
    def discount_factor(self) -> float:
        """δ = 1 / (1 + discount_rate)."""
        return 1.0 / (1.0 + self.discount_rate)

    def optimize(
        self,
        objective: Callable[..., float],
        initial_state: Any,
        constraints: Sequence[Any] = (),
        minimize: bool = False,
        initial_trajectory: Optional[Sequence[Any]] = None,
        period_aware: Optional[bool] = None,
    ) -> MultiPeriodResult:
        """
        Optimize the discounted trajectory objective.

        Args:
            objective: Per-period objective ``f(x)`` or ``f(t, x)``
            initial_state: Starting state, repeated for every period
            constraints: PeriodConstraints, or lists of them
            minimize: Minimize when True; maximize (the default) otherwise
            initial_trajectory: Optional per-period starting states;
                overrides the repeated ``initial_state``
            period_aware: Force the ``f(t, x)`` calling convention. Detected
                from the signature when None.

        Returns:
            MultiPeriodResult

        Raises:
            DimensionError: If the initial trajectory has the wrong shape
        """
        start_time = time.perf_counter()
        x0 = as_float_array(initial_state, "initial_state")
        dimension = x0.size
        T = self.number_of_periods

        if initial_trajectory is not None:
            start = Trajectory(initial_trajectory)
            if start.number_of_periods != T or start.dimension != dimension:
                raise DimensionError(
                    f"initial_trajectory is {start.number_of_periods} x {start.dimension}, "
                    f"expected {T} x {dimension}"
                )
        else:
            start = Trajectory.constant(Vector(x0), T)

        if period_aware is None:
            period_aware = _takes_period(objective)
        period_objective = objective if period_aware else (lambda t, x: objective(x))

        period_constraints = flatten_period_constraints(constraints)
        flat_constraints = []
        for pc in period_constraints:
            flat_constraints.extend(pc.to_constraints(T, dimension))

        weights = [self.discount_factor ** t for t in range(T)]

        def total(z: Vector) -> float:
            value = 0.0
            for t in range(T):
                value += weights[t] * float(period_objective(t, z[t * dimension:(t + 1) * dimension]))
            return value

        logger.debug(
            "Solving %d periods x %d dimensions with %d constraint instances",
            T, dimension, len(flat_constraints),
        )
        solved = self.solver.optimize(total, start.flatten(), flat_constraints, minimize)

        trajectory = Trajectory.from_flat(solved.solution, T, dimension)
        period_values = [float(period_objective(t, x)) for t, x in enumerate(trajectory)]
        total_objective = 0.0
        for t, value in enumerate(period_values):
            total_objective += weights[t] * value
        violations: List[float] = []
        for pc in period_constraints:
            violations.extend(pc.violations(trajectory))
        logger.info(
            "Multi-period solve finished: status=%s periods=%d total=%.8g",
            solved.status, T, total_objective,
        )

        return MultiPeriodResult(
            status=solved.status,
            trajectory=trajectory,
            period_objectives=period_values,
            total_objective=total_objective,
            iterations=solved.iterations,
            constraint_violations=violations,
            discount_factor=self.discount_factor,
            solve_time=time.perf_counter() - start_time,
        )

    def is_satisfied(
        self,
        trajectory: Any,
        constraints: Sequence[Any],
        tolerance: Optional[float] = None,
    ) -> bool:
        """Check a trajectory against constraints without solving."""
        traj = trajectory if isinstance(trajectory, Trajectory) else Trajectory(trajectory)
        if traj.number_of_periods != self.number_of_periods:
            raise DimensionError(
                f"trajectory has {traj.number_of_periods} periods, expected {self.number_of_periods}"
            )
        tol = self.tolerance if tolerance is None else tolerance
        return all(pc.is_satisfied(traj, tol) for pc in flatten_period_constraints(constraints))


def _takes_period(objective: Callable[..., float]) -> bool:
    """True if the objective expects (t, x) rather than (x)."""
    try:
        signature = inspect.signature(objective)
    except (TypeError, ValueError):
        return False
    positional = [
        p for p in signature.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty
    ]
    if any(p.kind is p.VAR_POSITIONAL for p in signature.parameters.values()):
        return False
    if len(positional) > 2:
        raise InvalidInputError("objective must take (x) or (t, x)")
    return len(positional) == 2
