"""
Scenario and Stochastic Optimizers
==================================

Optimize the probability-weighted expected objective

    optimize_x  Σ_s w_s f(x, ξ_s),     w_s = p_s / Σ p

over a finite list of scenarios (ScenarioOptimizer) or a sample drawn
from a generator (StochasticOptimizer, i.e. sample average
approximation). The decision x is chosen before the scenario is
revealed, so constraints apply to x directly.
"""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..constraints import Constraint
from ..exceptions import InvalidInputError
from ..result import Status
from ..solver import ConstrainedOptimizer
from ..utils.validation import as_float_array, check_count
from ..vector import Vector
from .distributions import SeedLike
from .evaluation import confidence_interval, normalized_weights, weighted_mean, weighted_variance
from .scenarios import Scenario, ScenarioConstraint, parameters_from_values

logger = logging.getLogger(__name__)

ScenarioObjective = Callable[[Vector, Scenario], float]


@dataclass
class ScenarioResult:
    """
    Scenario-based solution with per-scenario breakdown.

    Attributes:
        status: Solver status
        solution: Decision optimizing the expected objective
        expected_objective: Probability-weighted mean objective
        scenario_objectives: Objective of each scenario at the solution
        objective_variance: Probability-weighted variance across scenarios
        iterations: Solver outer iterations
        scenarios: Scenarios the solution was computed for
        minimize: Optimization sense
        solve_time: Wall clock time in seconds
    """
    status: Status
    solution: Vector
    expected_objective: float
    scenario_objectives: Dict[str, float]
    objective_variance: float
    iterations: int
    scenarios: List[Scenario]
    minimize: bool = False
    solve_time: float = 0.0

    @property
    def converged(self) -> bool:
        return self.status.is_successful

    @property
    def objective_std_dev(self) -> float:
        return float(np.sqrt(self.objective_variance))

    def objective_for(self, name: str) -> float:
        """Objective of the named scenario at the solution."""
        return self.scenario_objectives[name]

    def scenario_named(self, name: str) -> Scenario:
        """Look up a scenario by name."""
        for scenario in self.scenarios:
            if scenario.name == name:
                return scenario
        raise KeyError(name)

    def best_scenario(self) -> str:
        """Name of the scenario with the most favorable objective."""
        pick = min if self.minimize else max
        return pick(self.scenario_objectives, key=self.scenario_objectives.__getitem__)

    def worst_scenario(self) -> str:
        """Name of the scenario with the least favorable objective."""
        pick = max if self.minimize else min
        return pick(self.scenario_objectives, key=self.scenario_objectives.__getitem__)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(\n"
            f"  status={self.status},\n"
            f"  expected_objective={self.expected_objective:.6g},\n"
            f"  std_dev={self.objective_std_dev:.6g},\n"
            f"  scenarios={len(self.scenarios)}\n"
            f")"
        )

    def summary(self) -> str:
        """Formatted summary."""
        return (
            "=" * 50 + "\n"
            "Scenario Solution Summary\n"
            "=" * 50 + "\n"
            f"Status:              {self.status}\n"
            f"Expected objective:  {self.expected_objective:.6g}\n"
            f"Std deviation:       {self.objective_std_dev:.6g}\n"
            f"Best scenario:       {self.best_scenario()}\n"
            f"Worst scenario:      {self.worst_scenario()}\n"
            "-" * 50 + "\n"
            f"Scenarios:           {len(self.scenarios)}\n"
            f"Iterations:          {self.iterations}\n"
            f"Solve time:          {self.solve_time:.4f}s\n"
            "=" * 50
        )


@dataclass(repr=False)
class StochasticResult(ScenarioResult):
    """Sample-average solution with sampling error estimates."""

    @property
    def number_of_scenarios(self) -> int:
        return len(self.scenarios)

    @property
    def standard_error(self) -> float:
        """Standard error of the sample-average objective."""
        return self.objective_std_dev / np.sqrt(self.number_of_scenarios)

    def confidence_interval(self, level: float = 0.95) -> Tuple[float, float]:
        """Normal-approximation interval for the true expected objective."""
        return confidence_interval(self.expected_objective, self.standard_error, level)


class ScenarioOptimizer:
    """
    Expected-value optimizer over an explicit scenario list.

    Probabilities need not sum to one; they are normalized by their total.
    Zero-probability scenarios are reported but never influence the
    optimum or the expectation.

    Args:
        scenarios: Non-empty list of uniquely named scenarios
        max_iterations: Maximum solver outer iterations
        tolerance: Solver tolerance
        max_inner_iterations: L-BFGS-B iterations per outer iteration

    Example:
        >>> scenarios = [
        ...     Scenario("Bull", 0.30, {"return": 0.20}),
        ...     Scenario("Base", 0.50, {"return": 0.10}),
        ...     Scenario("Bear", 0.20, {"return": -0.05}),
        ... ]
        >>> optimizer = ScenarioOptimizer(scenarios)
        >>> result = optimizer.optimize(
        ...     lambda x, s: x[0] * s["return"],
        ...     initial_solution=Vector([0.5]),
        ...     constraints=Constraint.box_constraints(0.0, 1.0, 1),
        ... )
        >>> result.objective_for("Bear")
    """

    def __init__(
        self,
        scenarios: Sequence[Scenario],
        max_iterations: int = 100,
        tolerance: float = 1e-6,
        max_inner_iterations: int = 500,
    ) -> None:
        scenarios = list(scenarios)
        if not scenarios:
            raise InvalidInputError("at least one scenario is required")
        for s in scenarios:
            if not isinstance(s, Scenario):
                raise InvalidInputError(f"expected Scenario, got {type(s).__name__}")
        names = [s.name for s in scenarios]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise InvalidInputError(f"duplicate scenario names: {duplicates}")
        self._mask, self._weights = normalized_weights([s.probability for s in scenarios])
        self.scenarios = scenarios
        self.solver = ConstrainedOptimizer(
            max_iterations=max_iterations,
            tolerance=tolerance,
            constraint_tolerance=tolerance,
            gradient_tolerance=tolerance,
            max_inner_iterations=max_inner_iterations,
        )

    @property
    def probabilities(self) -> np.ndarray:
        return np.array([s.probability for s in self.scenarios])

    @property
    def total_probability(self) -> float:
        return float(self.probabilities.sum())

    def optimize(
        self,
        objective: ScenarioObjective,
        initial_solution: Any,
        constraints: Sequence[Any] = (),
        minimize: bool = False,
    ) -> ScenarioResult:
        """
        Optimize the expected objective.

        Args:
            objective: f(solution, scenario) -> float
            initial_solution: Starting decision
            constraints: Constraints or ScenarioConstraints (or lists of them)
            minimize: Minimize when True; maximize (the default) otherwise

        Returns:
            ScenarioResult
        """
        start_time = time.perf_counter()
        x0 = as_float_array(initial_solution, "initial_solution")
        active = [s for s, keep in zip(self.scenarios, self._mask) if keep]
        weights = self._weights

        def expected(x: Vector) -> float:
            value = 0.0
            for w, s in zip(weights, active):
                value += w * float(objective(x, s))
            return value

        solved = self.solver.optimize(expected, x0, self._constraints(constraints), minimize)

        solution = solved.solution
        values = {s.name: float(objective(solution, s)) for s in self.scenarios}
        probabilities = [s.probability for s in self.scenarios]
        result = ScenarioResult(
            status=solved.status,
            solution=solution,
            expected_objective=weighted_mean(list(values.values()), probabilities),
            scenario_objectives=values,
            objective_variance=weighted_variance(list(values.values()), probabilities),
            iterations=solved.iterations,
            scenarios=list(self.scenarios),
            minimize=minimize,
            solve_time=time.perf_counter() - start_time,
        )
        logger.info(
            "Scenario solve finished: status=%s scenarios=%d expected=%.8g std=%.4g",
            result.status, len(self.scenarios), result.expected_objective, result.objective_std_dev,
        )
        return result

    def _constraints(self, constraints: Sequence[Any]) -> List[Constraint]:
        """Resolve scenario scoping into plain solver constraints."""
        known = {s.name for s in self.scenarios}
        possible = {s.name for s, keep in zip(self.scenarios, self._mask) if keep}
        resolved: List[Constraint] = []
        for item in _flatten(constraints):
            if isinstance(item, Constraint):
                resolved.append(item)
                continue
            unknown = [n for n in item.scenario_names if n not in known]
            if unknown:
                raise InvalidInputError(f"constraint refers to unknown scenarios: {unknown}")
            if any(item.applies_to(name) for name in possible):
                resolved.append(item.to_constraint())
        return resolved

    @classmethod
    def optimize_weighted(
        cls,
        scenario_values: Sequence[Tuple[str, float, Callable[[Vector], float]]],
        initial_solution: Any,
        constraints: Sequence[Any] = (),
        minimize: bool = False,
        max_iterations: int = 100,
        tolerance: float = 1e-6,
    ) -> ScenarioResult:
        """
        One-shot solve where each scenario carries its own objective.

        Args:
            scenario_values: (name, probability, f(solution)) triples
        """
        scenarios = [Scenario(name, probability) for name, probability, _ in scenario_values]
        functions = {name: fn for name, _, fn in scenario_values}
        optimizer = cls(scenarios, max_iterations=max_iterations, tolerance=tolerance)
        return optimizer.optimize(
            lambda x, s: functions[s.name](x),
            initial_solution,
            constraints,
            minimize,
        )


class StochasticOptimizer:
    """
    Sample average approximation optimizer.

    Draws ``number_of_samples`` scenarios from a generator (or takes a
    pre-generated list), weights them equally and optimizes the sample
    average objective.

    Args:
        number_of_samples: Scenarios to draw from a generator
        seed: Seed for the generator's random stream
        max_iterations: Maximum solver outer iterations
        tolerance: Solver tolerance
        max_inner_iterations: L-BFGS-B iterations per outer iteration

    Example:
        >>> optimizer = StochasticOptimizer(number_of_samples=200, seed=42)
        >>> result = optimizer.optimize(
        ...     lambda w, s: w[0] * s["param_0"] + w[1] * s["param_1"],
        ...     initial_solution=Vector([0.5, 0.5]),
        ...     constraints=[Constraint.budget(), Constraint.non_negativity(2)],
        ...     scenario_generator=lambda rng: rng.normal([0.08, 0.12], [0.15, 0.20]),
        ... )
        >>> lo, hi = result.confidence_interval(0.95)
    """

    def __init__(
        self,
        number_of_samples: int = 1000,
        seed: SeedLike = None,
        max_iterations: int = 100,
        tolerance: float = 1e-6,
        max_inner_iterations: int = 500,
    ) -> None:
        self.number_of_samples = check_count(number_of_samples, "number_of_samples")
        self.seed = seed
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.max_inner_iterations = max_inner_iterations

    def optimize(
        self,
        objective: ScenarioObjective,
        initial_solution: Any,
        constraints: Sequence[Any] = (),
        minimize: bool = False,
        scenario_generator: Optional[Callable[..., Any]] = None,
        scenarios: Optional[Sequence[Scenario]] = None,
    ) -> StochasticResult:
        """
        Optimize the sample-average objective.

        Exactly one of ``scenario_generator`` and ``scenarios`` is required.

        Args:
            objective: f(solution, scenario) -> float
            initial_solution: Starting decision
            constraints: Constraints or ScenarioConstraints
            minimize: Minimize when True; maximize (the default) otherwise
            scenario_generator: Callable taking no argument or a numpy
                Generator, returning a Scenario, a mapping of parameters or
                a sequence of values (keyed param_0, param_1, ...)
            scenarios: Pre-generated scenarios, used as given

        Returns:
            StochasticResult
        """
        if (scenario_generator is None) == (scenarios is None):
            raise InvalidInputError("provide exactly one of scenario_generator or scenarios")
        if scenarios is None:
            scenarios = self.generate_scenarios(scenario_generator)

        inner = ScenarioOptimizer(
            scenarios,
            max_iterations=self.max_iterations,
            tolerance=self.tolerance,
            max_inner_iterations=self.max_inner_iterations,
        ).optimize(objective, initial_solution, constraints, minimize)
        return StochasticResult(**{f.name: getattr(inner, f.name) for f in fields(inner)})

    def generate_scenarios(self, scenario_generator: Callable[..., Any]) -> List[Scenario]:
        """Draw equally weighted scenarios named scenario_0, scenario_1, ..."""
        rng = np.random.default_rng(self.seed)
        takes_rng = _accepts_argument(scenario_generator)
        n = self.number_of_samples
        scenarios = []
        for i in range(n):
            draw = scenario_generator(rng) if takes_rng else scenario_generator()
            scenarios.append(Scenario(f"scenario_{i}", 1.0 / n, _as_parameters(draw)))
        return scenarios


def _as_parameters(draw: Any) -> Dict[str, float]:
    if isinstance(draw, Scenario):
        return dict(draw.parameters)
    if isinstance(draw, Mapping):
        return {str(k): float(v) for k, v in draw.items()}
    return parameters_from_values(np.atleast_1d(np.asarray(draw, dtype=np.float64)))


def _accepts_argument(fn: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return False
    required = [
        p for p in signature.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty
    ]
    return len(required) >= 1


def _flatten(items: Any) -> List[Any]:
    if isinstance(items, (Constraint, ScenarioConstraint)):
        return [items]
    flat: List[Any] = []
    for item in items or ():
        if isinstance(item, (list, tuple)):
            flat.extend(_flatten(item))
        elif isinstance(item, (Constraint, ScenarioConstraint)):
            flat.append(item)
        else:
            raise InvalidInputError(f"expected Constraint or ScenarioConstraint, got {type(item).__name__}")
    return flat
