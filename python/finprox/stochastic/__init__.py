"""
finprox Stochastic Optimization
===============================

Expected-value optimization over probability-weighted scenarios.

Scenario Optimization
---------------------
>>> from finprox import Constraint, Vector
>>> from finprox.stochastic import Scenario, ScenarioOptimizer
>>>
>>> scenarios = [
...     Scenario("Bull", 0.30, {"return": 0.20}),
...     Scenario("Base", 0.50, {"return": 0.10}),
...     Scenario("Bear", 0.20, {"return": -0.05}),
... ]
>>> result = ScenarioOptimizer(scenarios).optimize(
...     lambda x, s: x[0] * s["return"],
...     initial_solution=Vector([0.5]),
...     constraints=Constraint.box_constraints(0.0, 1.0, 1),
... )
>>> print(result.summary())

Sample Average Approximation
----------------------------
>>> from finprox.stochastic import ScenarioGenerator, StochasticOptimizer
>>>
>>> scenarios = ScenarioGenerator.normal([0.08, 0.12], [0.15, 0.20], 1000, seed=42)
>>> result = StochasticOptimizer(seed=42).optimize(
...     lambda w, s: w[0] * s["param_0"] + w[1] * s["param_1"],
...     initial_solution=Vector([0.5, 0.5]),
...     constraints=[Constraint.budget(), Constraint.non_negativity(2)],
...     scenarios=scenarios,
... )
>>> lo, hi = result.confidence_interval(0.95)

Classes
-------
Scenario
    Named, probability-weighted parameter realization
ScenarioOptimizer
    Expected-value optimizer over explicit scenarios
StochasticOptimizer
    Sample average approximation
ScenarioGenerator
    Scenario lists from normal, uniform or historical data
"""

from .distributions import (
    Distribution,
    EmpiricalDistribution,
    NormalDistribution,
    UniformDistribution,
)
from .evaluation import confidence_interval, weighted_mean, weighted_variance
from .optimizer import (
    ScenarioOptimizer,
    ScenarioResult,
    StochasticOptimizer,
    StochasticResult,
)
from .scenarios import (
    Scenario,
    ScenarioConstraint,
    ScenarioConstraintType,
    ScenarioGenerator,
)

__all__ = [
    # Scenarios
    "Scenario",
    "ScenarioConstraint",
    "ScenarioConstraintType",
    "ScenarioGenerator",
    # Optimizers
    "ScenarioOptimizer",
    "ScenarioResult",
    "StochasticOptimizer",
    "StochasticResult",
    # Distributions
    "Distribution",
    "NormalDistribution",
    "UniformDistribution",
    "EmpiricalDistribution",
    # Statistics
    "weighted_mean",
    "weighted_variance",
    "confidence_interval",
]
