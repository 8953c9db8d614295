"""
finprox Multi-Period Optimization
=================================

Trajectory optimization over T periods with a discounted additive
objective and constraints that span periods.

    maximize    Σ_t δ^t f(t, x_t)
    subject to  g(t, x_t) <= 0                (each period)
                h(t, x_t, x_{t+1}) == 0       (transitions)
                c(x_{T-1}) <= 0               (terminal)
                a(x_0, ..., x_{T-1}) <= 0     (trajectory aggregates)

>>> from finprox import Vector
>>> from finprox.multiperiod import MultiPeriodOptimizer, PeriodConstraint
>>>
>>> returns = Vector([0.10, 0.15, 0.12])
>>> optimizer = MultiPeriodOptimizer(number_of_periods=4, discount_rate=0.05)
>>> result = optimizer.optimize(
...     lambda w: w.dot(returns),
...     initial_state=Vector([1/3, 1/3, 1/3]),
...     constraints=[
...         PeriodConstraint.budget_each_period(),
...         PeriodConstraint.non_negativity_each_period(3),
...         PeriodConstraint.turnover_limit(0.2),
...     ],
... )
>>> print(result.summary())

Classes
-------
MultiPeriodOptimizer
    Discounted trajectory optimizer
MultiPeriodResult
    Trajectory solution with per-period objectives
PeriodConstraint
    Constraint over one or more periods
Trajectory
    Immutable sequence of per-period states
"""

from .constraints import PeriodConstraint, PeriodConstraintType
from .optimizer import MultiPeriodOptimizer, MultiPeriodResult
from .trajectory import Trajectory

__all__ = [
    # Optimizer
    "MultiPeriodOptimizer",
    "MultiPeriodResult",
    # Constraints
    "PeriodConstraint",
    "PeriodConstraintType",
    # Trajectories
    "Trajectory",
]
