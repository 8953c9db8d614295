"""
Robust Optimizer
================

Worst-case optimization over an uncertainty set:

    minimize_x  max_{p ∈ U}  f(x, p)        (or maximize_x min_{p ∈ U})

Solved by alternating two steps until the candidate stabilizes:

1. Solve the epigraph problem over a working set of parameter points
       minimize t  subject to  f(x, p_k) <= t  for every p_k, user constraints
2. Sample fresh points from U and add any that are worse at the new
   candidate than the current worst case.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

import numpy as np

from ..constraints import Constraint, ConstraintLike, flatten_constraints
from ..exceptions import InvalidInputError
from ..result import OptimizationResult, Status
from ..solver import ConstrainedOptimizer
from ..utils.validation import as_float_array, check_count, check_positive
from ..vector import Vector
from .uncertainty import (
    BoxUncertaintySet,
    DiscreteUncertaintySet,
    SeedLike,
    UncertaintySet,
)

logger = logging.getLogger(__name__)

RobustObjective = Callable[[Vector, Vector], float]


@dataclass
class RobustResult:
    """
    Robust solution.

    Attributes:
        status: Solver status
        solution: Robust decision
        worst_case_objective: Objective at the worst parameters found
        nominal_objective: Objective at the nominal parameters
        worst_case_parameters: Parameters attaining the worst case
        iterations: Minimax rounds performed
        number_of_scenarios_evaluated: Size of the final working set
        solve_time: Wall clock time in seconds
    """
    status: Status
    solution: Vector
    worst_case_objective: float
    nominal_objective: float
    worst_case_parameters: Vector
    iterations: int
    number_of_scenarios_evaluated: int = 0
    solve_time: float = 0.0

    @property
    def converged(self) -> bool:
        return self.status.is_successful

    @property
    def objective_value(self) -> float:
        """The robust objective, i.e. the worst case."""
        return self.worst_case_objective

    @property
    def robustness_cost(self) -> float:
        """Gap between nominal and worst-case performance."""
        return abs(self.nominal_objective - self.worst_case_objective)

    def __repr__(self) -> str:
        return (
            f"RobustResult(\n"
            f"  status={self.status},\n"
            f"  worst_case={self.worst_case_objective:.6g},\n"
            f"  nominal={self.nominal_objective:.6g},\n"
            f"  iterations={self.iterations}\n"
            f")"
        )

    def summary(self) -> str:
        """Formatted summary."""
        return (
            "=" * 50 + "\n"
            "Robust Solution Summary\n"
            "=" * 50 + "\n"
            f"Status:               {self.status}\n"
            f"Worst-case objective: {self.worst_case_objective:.6g}\n"
            f"Nominal objective:    {self.nominal_objective:.6g}\n"
            f"Robustness cost:      {self.robustness_cost:.6g}\n"
            "-" * 50 + "\n"
            f"Worst-case params:    {self.worst_case_parameters.to_list()}\n"
            f"Scenarios evaluated:  {self.number_of_scenarios_evaluated}\n"
            f"Iterations:           {self.iterations}\n"
            f"Solve time:           {self.solve_time:.4f}s\n"
            "=" * 50
        )


class RobustOptimizer:
    """
    Minimax optimizer over an uncertainty set.

    "Worst" always hurts the chosen sense: the maximum objective when
    minimizing, the minimum when maximizing.

    Args:
        uncertainty_set: Set of possible parameter vectors
        samples_per_iteration: Points drawn from the set per round
        max_iterations: Maximum minimax rounds
        tolerance: Improvement in the worst case that counts as a new
            worst-case point; also the inner solver tolerance
        seed: Seed for sampling; None for fresh entropy
        solver_iterations: Outer iteration budget of each inner solve

    Example:
        >>> box = BoxUncertaintySet([0.10, 0.12, 0.08], [0.02, 0.03, 0.01])
        >>> optimizer = RobustOptimizer(box, seed=42)
        >>> result = optimizer.optimize(
        ...     lambda w, r: w.dot(r),
        ...     initial_solution=Vector([1/3, 1/3, 1/3]),
        ...     constraints=[Constraint.budget(), Constraint.non_negativity(3)],
        ...     minimize=False,
        ... )
        >>> result.worst_case_objective  # ≈ 0.09
    """

    def __init__(
        self,
        uncertainty_set: UncertaintySet,
        samples_per_iteration: int = 100,
        max_iterations: int = 50,
        tolerance: float = 1e-6,
        seed: SeedLike = None,
        solver_iterations: int = 100,
    ) -> None:
        if not isinstance(uncertainty_set, UncertaintySet):
            raise InvalidInputError(f"expected UncertaintySet, got {type(uncertainty_set).__name__}")
        self.uncertainty_set = uncertainty_set
        self.samples_per_iteration = check_count(samples_per_iteration, "samples_per_iteration")
        self.max_iterations = check_count(max_iterations, "max_iterations")
        self.tolerance = check_positive(tolerance, "tolerance")
        self.seed = seed
        self.solver = ConstrainedOptimizer(
            max_iterations=solver_iterations,
            tolerance=tolerance,
            constraint_tolerance=tolerance,
            gradient_tolerance=tolerance,
        )

    def optimize(
        self,
        objective: RobustObjective,
        initial_solution: Any,
        constraints: Sequence[ConstraintLike] = (),
        minimize: bool = True,
        nominal_parameters: Optional[Any] = None,
    ) -> RobustResult:
        """
        Find the decision with the best worst-case objective.

        Args:
            objective: f(solution, parameters) -> float
            initial_solution: Starting decision
            constraints: Scenario-independent constraints on the decision
            minimize: Minimize the worst case (True) or maximize it
            nominal_parameters: Reference parameters for
                ``nominal_objective``; defaults to the set's nominal

        Returns:
            RobustResult
        """
        start_time = time.perf_counter()
        rng = np.random.default_rng(self.seed)
        x = as_float_array(initial_solution, "initial_solution")
        dim = self.uncertainty_set.dimension
        if nominal_parameters is None:
            nominal = self.uncertainty_set.nominal
        else:
            nominal = Vector(as_float_array(nominal_parameters, "nominal_parameters", dim=dim))
        flat = flatten_constraints(constraints)

        def worse(a: float, b: float) -> bool:
            return a > b if minimize else a < b

        working_set = _unique(self.uncertainty_set.sample_points(self.samples_per_iteration, rng))
        status = Status.MAX_ITERATIONS
        iterations = 0

        for iteration in range(1, self.max_iterations + 1):
            iterations = iteration
            solved = self._solve_epigraph(objective, working_set, x, flat, minimize)
            if not solved.status.has_solution:
                status = solved.status
                break
            x = solved.solution.to_array()[:x.size]

            candidate = Vector(x)
            current_worst = _worst(objective, candidate, working_set, minimize)[0]
            margin = self.tolerance * max(1.0, abs(current_worst))
            threshold = current_worst + margin if minimize else current_worst - margin

            fresh = self.uncertainty_set.sample_points(self.samples_per_iteration, rng)
            known = set(working_set)
            additions = [
                p for p in fresh
                if p not in known and worse(float(objective(candidate, p)), threshold)
            ]
            logger.debug(
                "round %d: worst=%.8g working_set=%d new_points=%d",
                iteration, current_worst, len(working_set), len(additions),
            )
            if not additions:
                status = solved.status
                break
            working_set.extend(_unique(additions))

        solution = Vector(x)
        worst_value, worst_params = _worst(objective, solution, working_set, minimize)
        nominal_value = float(objective(solution, nominal))
        logger.info(
            "Robust solve finished: status=%s rounds=%d worst=%.8g nominal=%.8g",
            status, iterations, worst_value, nominal_value,
        )
        return RobustResult(
            status=status,
            solution=solution,
            worst_case_objective=worst_value,
            nominal_objective=nominal_value,
            worst_case_parameters=worst_params,
            iterations=iterations,
            number_of_scenarios_evaluated=len(working_set),
            solve_time=time.perf_counter() - start_time,
        )

    def _solve_epigraph(
        self,
        objective: RobustObjective,
        working_set: List[Vector],
        x: np.ndarray,
        constraints: List[Constraint],
        minimize: bool,
    ) -> OptimizationResult:
        """Optimize the bound t over z = [x, t]."""
        n = x.size
        sign = 1.0 if minimize else -1.0

        lifted = [
            Constraint(c.kind, lambda z, c=c: c.function(z[:n]), name=c.name)
            for c in constraints
        ]
        for p in working_set:
            lifted.append(Constraint.inequality(lambda z, p=p: sign * (float(objective(z[:n], p)) - z[n])))

        bound = _worst(objective, Vector(x), working_set, minimize)[0]
        return self.solver.optimize(lambda z: z[n], np.append(x, bound), lifted, minimize)

    @staticmethod
    def optimize_box(
        objective: RobustObjective,
        nominal: Any,
        deviations: Any,
        initial_solution: Any,
        constraints: Sequence[ConstraintLike] = (),
        minimize: bool = True,
        samples_per_iteration: int = 100,
        max_iterations: int = 50,
        tolerance: float = 1e-6,
        seed: SeedLike = None,
    ) -> RobustResult:
        """Robust solve over the box nominal ± deviations."""
        optimizer = RobustOptimizer(
            BoxUncertaintySet(nominal, deviations),
            samples_per_iteration=samples_per_iteration,
            max_iterations=max_iterations,
            tolerance=tolerance,
            seed=seed,
        )
        return optimizer.optimize(objective, initial_solution, constraints, minimize, nominal)

    @staticmethod
    def optimize_discrete(
        objective: RobustObjective,
        uncertain_points: Sequence[Any],
        initial_solution: Any,
        constraints: Sequence[ConstraintLike] = (),
        minimize: bool = True,
        nominal_index: int = 0,
        max_iterations: int = 50,
        tolerance: float = 1e-6,
    ) -> RobustResult:
        """Robust solve over an explicit list of parameter vectors."""
        uncertainty_set = DiscreteUncertaintySet(uncertain_points)
        if not 0 <= nominal_index < len(uncertainty_set):
            raise InvalidInputError(
                f"nominal_index {nominal_index} out of range for {len(uncertainty_set)} points"
            )
        optimizer = RobustOptimizer(
            uncertainty_set,
            samples_per_iteration=len(uncertainty_set),
            max_iterations=max_iterations,
            tolerance=tolerance,
        )
        nominal = uncertainty_set.points[nominal_index]
        return optimizer.optimize(objective, initial_solution, constraints, minimize, nominal)


def _unique(points: Sequence[Vector]) -> List[Vector]:
    return list(dict.fromkeys(points))


def _worst(
    objective: RobustObjective,
    solution: Vector,
    points: Sequence[Vector],
    minimize: bool,
):
    """Worst objective value over points and the point attaining it."""
    values = np.array([float(objective(solution, p)) for p in points])
    index = int(np.argmax(values)) if minimize else int(np.argmin(values))
    return float(values[index]), points[index]
