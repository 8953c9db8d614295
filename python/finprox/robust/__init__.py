"""
finprox Robust Optimization
===========================

Worst-case optimization over box, ellipsoidal and discrete uncertainty sets.

>>> from finprox import Constraint, Vector
>>> from finprox.robust import BoxUncertaintySet, RobustOptimizer
>>>
>>> box = BoxUncertaintySet([0.10, 0.12, 0.08], [0.02, 0.03, 0.01])
>>> result = RobustOptimizer(box, seed=42).optimize(
...     lambda w, r: w.dot(r),
...     initial_solution=Vector([1/3, 1/3, 1/3]),
...     constraints=[Constraint.budget(), Constraint.non_negativity(3)],
...     minimize=False,
... )
>>> print(result.summary())

Classes
-------
UncertaintySet
    Abstract set of possible parameter vectors
BoxUncertaintySet
    nominal ± deviations per coordinate
EllipsoidalUncertaintySet
    Mahalanobis ball around the nominal
DiscreteUncertaintySet
    Finite list of parameter vectors
RobustOptimizer
    Minimax optimizer
"""

from .optimizer import RobustOptimizer, RobustResult
from .uncertainty import (
    BoxUncertaintySet,
    DiscreteUncertaintySet,
    EllipsoidalUncertaintySet,
    UncertaintySet,
)

__all__ = [
    "UncertaintySet",
    "BoxUncertaintySet",
    "EllipsoidalUncertaintySet",
    "DiscreteUncertaintySet",
    "RobustOptimizer",
    "RobustResult",
]
