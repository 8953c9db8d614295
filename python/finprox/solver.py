"""
finprox Constrained Solver
==========================

Augmented Lagrangian solver for smooth objectives over a single vector
state with equality and inequality residual constraints.

Each outer iteration minimizes

    L(x) = f(x) + Σ λ_i h_i(x) + (μ/2) Σ h_i(x)²
                + (1/2μ) Σ [max(0, ν_j + μ g_j(x))² - ν_j²]

with L-BFGS-B, then updates the multipliers

    λ ← λ + μ h(x)        ν ← max(0, ν + μ g(x))

and raises the penalty μ when the violation stalls. Gradients are
analytic when the objective and every constraint provide one, otherwise
central finite differences.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np
from scipy.optimize import minimize as scipy_minimize

from .constraints import Constraint, ConstraintLike, flatten_constraints
from .exceptions import InvalidInputError
from .numerics import numerical_gradient
from .result import IterationSnapshot, OptimizationResult, Status
from .utils.validation import as_float_array, check_count, check_positive
from .vector import Vector

logger = logging.getLogger(__name__)

Objective = Callable[[Vector], float]
Gradient = Callable[[Vector], Any]
ProgressCallback = Callable[[IterationSnapshot], Optional[bool]]


class ConstrainedOptimizer:
    """
    Penalty/Lagrangian solver for constrained nonlinear problems.

    Args:
        max_iterations: Maximum outer (multiplier update) iterations
        tolerance: Relative objective change between outer iterations
        constraint_tolerance: Maximum allowed constraint violation
        gradient_tolerance: Augmented Lagrangian gradient norm for stopping
        max_inner_iterations: L-BFGS-B iteration limit per outer iteration
        initial_penalty: Starting penalty parameter μ
        penalty_increase: Factor applied to μ when the violation stalls
        max_penalty: Upper bound on μ
        min_derivative: Squared gradient norm below which a violated
            constraint is considered degenerate
        finite_difference_step: Relative step for numerical gradients
        record_history: Keep a snapshot of every outer iteration

    Example:
        >>> from finprox import ConstrainedOptimizer, Constraint, Vector
        >>> returns = Vector([0.10, 0.15, 0.12])
        >>> optimizer = ConstrainedOptimizer()
        >>> result = optimizer.maximize(
        ...     lambda w: w.dot(returns),
        ...     Vector([1/3, 1/3, 1/3]),
        ...     [Constraint.budget(), Constraint.non_negativity(3)],
        ... )
        >>> result.converged
        True
    """

    def __init__(
        self,
        max_iterations: int = 100,
        tolerance: float = 1e-6,
        constraint_tolerance: float = 1e-6,
        gradient_tolerance: float = 1e-6,
        max_inner_iterations: int = 500,
        initial_penalty: float = 10.0,
        penalty_increase: float = 10.0,
        max_penalty: float = 1e6,
        min_derivative: float = 1e-12,
        finite_difference_step: float = 1e-6,
        record_history: bool = False,
    ) -> None:
        self.max_iterations = check_count(max_iterations, "max_iterations")
        self.tolerance = check_positive(tolerance, "tolerance")
        self.constraint_tolerance = check_positive(constraint_tolerance, "constraint_tolerance")
        self.gradient_tolerance = check_positive(gradient_tolerance, "gradient_tolerance")
        self.max_inner_iterations = check_count(max_inner_iterations, "max_inner_iterations")
        self.initial_penalty = check_positive(initial_penalty, "initial_penalty")
        self.penalty_increase = check_positive(penalty_increase, "penalty_increase")
        if self.penalty_increase <= 1.0:
            raise InvalidInputError(f"penalty_increase must exceed 1, got {penalty_increase}")
        self.max_penalty = check_positive(max_penalty, "max_penalty")
        self.min_derivative = check_positive(min_derivative, "min_derivative")
        self.finite_difference_step = check_positive(finite_difference_step, "finite_difference_step")
        self.record_history = record_history

    def __repr__(self) -> str:
        return (
            f"ConstrainedOptimizer(max_iterations={self.max_iterations}, "
            f"tolerance={self.tolerance:g}, "
            f"constraint_tolerance={self.constraint_tolerance:g})"
        )

    def minimize(
        self,
        objective: Objective,
        initial_state: Any,
        constraints: Sequence[ConstraintLike] = (),
        gradient: Optional[Gradient] = None,
        callback: Optional[ProgressCallback] = None,
    ) -> OptimizationResult:
        """Minimize objective subject to constraints."""
        return self.optimize(objective, initial_state, constraints, True, gradient, callback)

    def maximize(
        self,
        objective: Objective,
        initial_state: Any,
        constraints: Sequence[ConstraintLike] = (),
        gradient: Optional[Gradient] = None,
        callback: Optional[ProgressCallback] = None,
    ) -> OptimizationResult:
        """Maximize objective subject to constraints."""
        return self.optimize(objective, initial_state, constraints, False, gradient, callback)

    def optimize(
        self,
        objective: Objective,
        initial_state: Any,
        constraints: Sequence[ConstraintLike] = (),
        minimize: bool = True,
        gradient: Optional[Gradient] = None,
        callback: Optional[ProgressCallback] = None,
    ) -> OptimizationResult:
        """
        Solve the constrained problem.

        Args:
            objective: Scalar function f(x) of a Vector
            initial_state: Starting point (Vector or sequence of floats)
            constraints: Constraints, or lists of constraints
            minimize: Minimize when True, maximize otherwise
            gradient: Optional analytic gradient of the objective
            callback: Called with an IterationSnapshot after every outer
                iteration; returning True stops the solve

        Returns:
            OptimizationResult. Non-convergence is reported through
            ``status``/``converged``, never raised.

        Raises:
            InvalidInputError: If the initial state is empty or not finite
        """
        start_time = time.perf_counter()
        x = as_float_array(initial_state, "initial_state")
        flat = flatten_constraints(constraints)
        lagrangian = _AugmentedLagrangian(
            objective, flat, 1.0 if minimize else -1.0, gradient, self.finite_difference_step,
        )
        lagrangian.penalty = self.initial_penalty

        history: List[IterationSnapshot] = []
        objective_value = lagrangian.objective(x)
        violation = lagrangian.max_violation(x)
        if not np.isfinite(objective_value):
            logger.info("Objective is not finite at the initial state")
            return self._result(Status.NUMERICAL_ERROR, x, objective_value, 0, violation,
                                lagrangian, history, start_time)

        status = Status.MAX_ITERATIONS
        previous_objective: Optional[float] = None
        previous_violation = np.inf
        iterations = 0

        for iteration in range(1, self.max_iterations + 1):
            iterations = iteration
            inner = scipy_minimize(
                lagrangian.value,
                x,
                jac=lagrangian.gradient,
                method="L-BFGS-B",
                options={
                    "maxiter": self.max_inner_iterations,
                    "gtol": self.gradient_tolerance,
                    "ftol": 1e-12,
                },
            )
            candidate = np.asarray(inner.x, dtype=np.float64)
            if not np.all(np.isfinite(candidate)):
                status = Status.NUMERICAL_ERROR
                break
            x = candidate

            objective_value = lagrangian.objective(x)
            violation = lagrangian.max_violation(x)
            gradient_norm = float(np.linalg.norm(inner.jac)) if inner.jac is not None else np.inf
            if not (np.isfinite(objective_value) and np.isfinite(violation)):
                status = Status.NUMERICAL_ERROR
                break

            lagrangian.update_multipliers(x)
            snapshot = IterationSnapshot(
                iteration=iteration,
                objective_value=objective_value,
                constraint_violation=violation,
                gradient_norm=gradient_norm,
                penalty=lagrangian.penalty,
            )
            if self.record_history:
                history.append(snapshot)
            logger.debug(
                "iter %d: objective=%.8g violation=%.3e grad=%.3e penalty=%.1e",
                iteration, objective_value, violation, gradient_norm, lagrangian.penalty,
            )

            if violation <= self.constraint_tolerance:
                stalled = previous_objective is not None and abs(objective_value - previous_objective) <= (
                    self.tolerance * max(1.0, abs(previous_objective))
                )
                if gradient_norm <= self.gradient_tolerance or stalled:
                    status = Status.OPTIMAL
                    break
            else:
                if lagrangian.has_degenerate_violation(x, self.constraint_tolerance, self.min_derivative):
                    logger.info("Violated constraint has a vanishing gradient; stopping")
                    status = Status.NUMERICAL_ERROR
                    break
                if violation > 0.25 * previous_violation:
                    lagrangian.penalty = min(lagrangian.penalty * self.penalty_increase, self.max_penalty)

            if callback is not None and callback(snapshot):
                status = Status.INTERRUPTED
                break

            previous_objective = objective_value
            previous_violation = violation

        result = self._result(status, x, objective_value, iterations, violation,
                              lagrangian, history, start_time)
        logger.info(
            "Solve finished: status=%s iterations=%d objective=%.8g violation=%.3e",
            status, iterations, objective_value, violation,
        )
        return result

    def _result(
        self,
        status: Status,
        x: np.ndarray,
        objective_value: float,
        iterations: int,
        violation: float,
        lagrangian: "_AugmentedLagrangian",
        history: List[IterationSnapshot],
        start_time: float,
    ) -> OptimizationResult:
        return OptimizationResult(
            status=status,
            solution=Vector(x),
            objective_value=objective_value,
            iterations=iterations,
            constraint_violation=violation,
            multipliers=lagrangian.multipliers(),
            solve_time=time.perf_counter() - start_time,
            history=history,
        )


class _AugmentedLagrangian:
    """Augmented Lagrangian of one problem with mutable multiplier state."""

    def __init__(
        self,
        objective: Objective,
        constraints: List[Constraint],
        sign: float,
        gradient: Optional[Gradient],
        step: float,
    ) -> None:
        self._objective = objective
        self._sign = sign
        self._gradient = gradient
        self._step = step
        self._constraints = constraints
        self._equalities = [c for c in constraints if c.is_equality]
        self._inequalities = [c for c in constraints if not c.is_equality]
        self._analytic = gradient is not None and all(c.gradient is not None for c in constraints)
        self.equality_multipliers = np.zeros(len(self._equalities))
        self.inequality_multipliers = np.zeros(len(self._inequalities))
        self.penalty = 1.0

    def objective(self, x: np.ndarray) -> float:
        """Objective in the caller's sense."""
        return float(self._objective(Vector(x)))

    def residuals(self, state: Vector):
        h = np.array([c.evaluate(state) for c in self._equalities], dtype=np.float64)
        g = np.array([c.evaluate(state) for c in self._inequalities], dtype=np.float64)
        return h, g

    def max_violation(self, x: np.ndarray) -> float:
        h, g = self.residuals(Vector(x))
        worst = 0.0
        if h.size:
            worst = max(worst, float(np.max(np.abs(h))))
        if g.size:
            worst = max(worst, float(np.max(g)))
        return worst

    def value(self, x: np.ndarray) -> float:
        state = Vector(x)
        total = self._sign * float(self._objective(state))
        h, g = self.residuals(state)
        mu = self.penalty
        if h.size:
            total += float(self.equality_multipliers @ h) + 0.5 * mu * float(h @ h)
        if g.size:
            nu = self.inequality_multipliers
            shifted = np.maximum(0.0, nu + mu * g)
            total += (float(shifted @ shifted) - float(nu @ nu)) / (2.0 * mu)
        return total

    def gradient(self, x: np.ndarray) -> np.ndarray:
        if not self._analytic:
            return numerical_gradient(self.value, x, self._step)

        state = Vector(x)
        mu = self.penalty
        grad = self._sign * np.asarray(self._gradient(state), dtype=np.float64)
        for c, lam in zip(self._equalities, self.equality_multipliers):
            weight = lam + mu * c.evaluate(state)
            grad = grad + weight * np.asarray(c.gradient(state), dtype=np.float64)
        for c, nu in zip(self._inequalities, self.inequality_multipliers):
            weight = max(0.0, nu + mu * c.evaluate(state))
            if weight > 0.0:
                grad = grad + weight * np.asarray(c.gradient(state), dtype=np.float64)
        return grad

    def update_multipliers(self, x: np.ndarray) -> None:
        h, g = self.residuals(Vector(x))
        mu = self.penalty
        if h.size:
            self.equality_multipliers = self.equality_multipliers + mu * h
        if g.size:
            self.inequality_multipliers = np.maximum(0.0, self.inequality_multipliers + mu * g)

    def has_degenerate_violation(self, x: np.ndarray, tolerance: float, min_derivative: float) -> bool:
        """True if some violated constraint has a (numerically) zero gradient."""
        state = Vector(x)
        for c in self._constraints:
            if c.violation(state) <= tolerance:
                continue
            grad = c.gradient_at(state, self._step).to_array()
            if float(grad @ grad) <= min_derivative:
                return True
        return False

    def multipliers(self) -> np.ndarray:
        """Multipliers in the order the constraints were given."""
        out = np.zeros(len(self._constraints))
        eq = iter(self.equality_multipliers)
        ineq = iter(self.inequality_multipliers)
        for i, c in enumerate(self._constraints):
            out[i] = next(eq) if c.is_equality else next(ineq)
        return out


def solve(
    objective: Objective,
    initial_state: Any,
    constraints: Optional[Sequence[ConstraintLike]] = None,
    minimize: bool = True,
    params: Optional[Dict[str, Any]] = None,
) -> OptimizationResult:
    """
    Solve a constrained problem with settings taken from a params dict.

    Recognized keys: ``max_iterations`` (or ``max_iters``), ``tolerance``
    (or ``tol``), ``constraint_tolerance``, ``gradient_tolerance``,
    ``max_inner_iterations``, ``record_history``.
    """
    params = params or {}
    optimizer = ConstrainedOptimizer(
        max_iterations=params.get('max_iterations', params.get('max_iters', 100)),
        tolerance=params.get('tolerance', params.get('tol', 1e-6)),
        constraint_tolerance=params.get('constraint_tolerance', 1e-6),
        gradient_tolerance=params.get('gradient_tolerance', 1e-6),
        max_inner_iterations=params.get('max_inner_iterations', 500),
        record_history=params.get('record_history', False),
    )
    return optimizer.optimize(objective, initial_state, constraints or (), minimize)
