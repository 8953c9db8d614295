"""
finprox: Constrained Nonlinear Optimization for Finance
=======================================================

finprox optimizes smooth objectives over vectors of real numbers subject
to equality and inequality constraints, and builds multi-period, robust
and scenario-based optimizers on top of one augmented Lagrangian solver.

Quick Start
-----------
>>> import finprox
>>> from finprox import Constraint, Vector
>>>
>>> returns = Vector([0.10, 0.15, 0.12])
>>> optimizer = finprox.ConstrainedOptimizer()
>>> result = optimizer.maximize(
...     lambda w: w.dot(returns),
...     initial_state=Vector([1/3, 1/3, 1/3]),
...     constraints=[Constraint.budget(), Constraint.non_negativity(3)],
... )
>>> result.status.is_successful

Or with a params dict:

>>> result = finprox.solve(
...     lambda x: (x[0] - 2.0) ** 2,
...     initial_state=[0.0],
...     params={"max_iters": 50, "tol": 1e-8},
... )

Subpackages
-----------
finprox.multiperiod
    Discounted trajectory optimization
finprox.robust
    Worst-case optimization over uncertainty sets
finprox.stochastic
    Scenario and sample average optimization
"""

import logging

__version__ = "0.1.0"
__author__ = "finprox Contributors"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Import public API
from .vector import Vector
from .constraints import Constraint, ConstraintType, all_satisfied, max_violation
from .solver import ConstrainedOptimizer, solve
from .result import IterationSnapshot, OptimizationResult, Status
from .exceptions import DimensionError, FinproxError, InvalidInputError
from .multiperiod import (
    MultiPeriodOptimizer,
    MultiPeriodResult,
    PeriodConstraint,
    Trajectory,
)
from .robust import (
    BoxUncertaintySet,
    DiscreteUncertaintySet,
    EllipsoidalUncertaintySet,
    RobustOptimizer,
    RobustResult,
    UncertaintySet,
)
from .stochastic import (
    Scenario,
    ScenarioConstraint,
    ScenarioGenerator,
    ScenarioOptimizer,
    ScenarioResult,
    StochasticOptimizer,
    StochasticResult,
)

__all__ = [
    # Version
    "__version__",

    # Core types
    "Vector",
    "Constraint",
    "ConstraintType",
    "all_satisfied",
    "max_violation",

    # Solving
    "ConstrainedOptimizer",
    "solve",

    # Results
    "OptimizationResult",
    "IterationSnapshot",
    "Status",

    # Multi-period
    "MultiPeriodOptimizer",
    "MultiPeriodResult",
    "PeriodConstraint",
    "Trajectory",

    # Robust
    "UncertaintySet",
    "BoxUncertaintySet",
    "EllipsoidalUncertaintySet",
    "DiscreteUncertaintySet",
    "RobustOptimizer",
    "RobustResult",

    # Stochastic
    "Scenario",
    "ScenarioConstraint",
    "ScenarioGenerator",
    "ScenarioOptimizer",
    "ScenarioResult",
    "StochasticOptimizer",
    "StochasticResult",

    # Exceptions
    "FinproxError",
    "DimensionError",
    "InvalidInputError",
]


def info() -> str:
    """Return information about the finprox installation."""
    import platform

    import numpy
    import scipy

    lines = [
        f"finprox version: {__version__}",
        f"Python version: {platform.python_version()}",
        f"Platform: {platform.platform()}",
        f"NumPy version: {numpy.__version__}",
        f"SciPy version: {scipy.__version__}",
    ]
    return "\n".join(lines)
