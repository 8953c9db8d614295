"""
Scenario Management
===================

Named, probability-weighted scenarios and the constraints that may be
attached to them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..constraints import Constraint
from ..exceptions import InvalidInputError
from ..utils.validation import as_float_array, check_count
from ..vector import Vector
from .distributions import (
    Distribution,
    EmpiricalDistribution,
    NormalDistribution,
    SeedLike,
    UniformDistribution,
)


@dataclass
class Scenario:
    """
    A single scenario: a named realization of the uncertain parameters.

    Args:
        name: Scenario identifier
        probability: Scenario weight in [0, 1]
        parameters: Mapping from parameter name to value

    Example:
        >>> bull = Scenario("Bull", 0.3, {"return": 0.20})
        >>> bull["return"]
        0.2
    """

    name: str
    probability: float
    parameters: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        """Validate probability and convert parameter values."""
        self.probability = float(self.probability)
        self.parameters = {str(k): float(v) for k, v in dict(self.parameters).items()}
        self._validate()

    def _validate(self):
        if not np.isfinite(self.probability) or not (0 <= self.probability <= 1):
            raise InvalidInputError(f"Probability must be in [0,1], got {self.probability}")

    def __getitem__(self, key: str) -> float:
        return self.parameters[key]

    def get(self, key: str, default: Optional[float] = None) -> Optional[float]:
        return self.parameters.get(key, default)

    @property
    def parameter_names(self) -> List[str]:
        return list(self.parameters)

    def to_array(self, keys: Optional[Sequence[str]] = None) -> np.ndarray:
        """Parameter values in ``keys`` order (insertion order by default)."""
        keys = self.parameter_names if keys is None else keys
        return np.array([self.parameters[k] for k in keys], dtype=np.float64)

    def with_probability(self, probability: float) -> Scenario:
        """Return a copy with a different probability."""
        return Scenario(self.name, probability, dict(self.parameters))


class ScenarioConstraintType(Enum):
    """Which scenarios a constraint belongs to."""
    ALL = "all"
    IN_SCENARIO = "in_scenario"
    IN_SCENARIOS = "in_scenarios"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ScenarioConstraint:
    """
    Decision constraint tagged with the scenarios it belongs to.

    Decisions are taken before the scenario is revealed, so a constraint
    scoped to a scenario binds whenever that scenario can occur
    (positive probability).

    Example:
        >>> budget = ScenarioConstraint.all(lambda x: x.sum() - 1.0, is_equality=True)
        >>> crash_cap = ScenarioConstraint.in_scenario("Crash", lambda x: x[0] - 0.5)
    """
    kind: ScenarioConstraintType
    function: Callable[[Vector], float]
    is_equality: bool = False
    scenario_names: Tuple[str, ...] = ()

    @classmethod
    def all(cls, function: Callable[[Vector], float], is_equality: bool = False) -> "ScenarioConstraint":
        return cls(ScenarioConstraintType.ALL, function, is_equality)

    @classmethod
    def in_scenario(
        cls,
        name: str,
        function: Callable[[Vector], float],
        is_equality: bool = False,
    ) -> "ScenarioConstraint":
        return cls(ScenarioConstraintType.IN_SCENARIO, function, is_equality, (name,))

    @classmethod
    def in_scenarios(
        cls,
        names: Iterable[str],
        function: Callable[[Vector], float],
        is_equality: bool = False,
    ) -> "ScenarioConstraint":
        names = tuple(names)
        if not names:
            raise InvalidInputError("in_scenarios requires at least one scenario name")
        return cls(ScenarioConstraintType.IN_SCENARIOS, function, is_equality, names)

    def applies_to(self, scenario_name: str) -> bool:
        if self.kind is ScenarioConstraintType.ALL:
            return True
        return scenario_name in self.scenario_names

    def to_constraint(self) -> Constraint:
        if self.is_equality:
            return Constraint.equality(self.function)
        return Constraint.inequality(self.function)


class ScenarioGenerator:
    """
    Generate scenario lists from parametric or empirical distributions.

    Every generator returns ``number_of_scenarios`` scenarios named
    ``scenario_0, scenario_1, ...`` with probability 1/n and parameters
    keyed ``param_0, param_1, ...``.

    Example:
        >>> scenarios = ScenarioGenerator.normal(
        ...     mean=[0.08, 0.12],
        ...     standard_deviation=[0.15, 0.20],
        ...     number_of_scenarios=500,
        ...     seed=42,
        ... )
        >>> scenarios[0]["param_1"]  # second asset return in scenario 0
    """

    @staticmethod
    def normal(
        mean: Any,
        standard_deviation: Optional[Any] = None,
        number_of_scenarios: int = 1000,
        seed: SeedLike = None,
        covariance: Optional[Any] = None,
    ) -> List[Scenario]:
        """Independent normal draws (or correlated when ``covariance`` is given)."""
        mean = as_float_array(mean, "mean")
        if covariance is None and standard_deviation is None:
            raise InvalidInputError("normal scenarios need standard_deviation or covariance")
        if covariance is not None:
            dist = NormalDistribution(mean_=mean, cov=covariance)
        else:
            std = as_float_array(standard_deviation, "standard_deviation", dim=len(mean))
            dist = NormalDistribution(mean_=mean, std=std)
        return ScenarioGenerator.from_distribution(dist, number_of_scenarios, seed)

    @staticmethod
    def uniform(
        lower_bounds: Any,
        upper_bounds: Any,
        number_of_scenarios: int,
        seed: SeedLike = None,
    ) -> List[Scenario]:
        """Uniform draws inside [lower_bounds, upper_bounds]."""
        dist = UniformDistribution(low=lower_bounds, high=upper_bounds)
        return ScenarioGenerator.from_distribution(dist, number_of_scenarios, seed)

    @staticmethod
    def bootstrap(
        historical_data: Any,
        number_of_scenarios: int,
        seed: SeedLike = None,
    ) -> List[Scenario]:
        """Resample whole observation rows with replacement."""
        dist = EmpiricalDistribution(observations=historical_data)
        return ScenarioGenerator.from_distribution(dist, number_of_scenarios, seed)

    @staticmethod
    def from_distribution(
        distribution: Distribution,
        number_of_scenarios: int,
        seed: SeedLike = None,
    ) -> List[Scenario]:
        """Equal-probability scenarios drawn from any Distribution."""
        n = check_count(number_of_scenarios, "number_of_scenarios")
        draws = np.atleast_2d(distribution.sample(n, seed))
        probability = 1.0 / n
        return [
            Scenario(f"scenario_{i}", probability, parameters_from_values(row))
            for i, row in enumerate(draws)
        ]


def parameters_from_values(values: Iterable[float]) -> Dict[str, float]:
    """Key a sequence of values as param_0, param_1, ..."""
    return {f"param_{j}": float(v) for j, v in enumerate(values)}
