"""
Tests for single-state constraints.
"""

import numpy as np
import pytest


class TestConstraint:
    """Test Constraint evaluation."""

    def test_equality_violation(self):
        from finprox import Constraint, Vector

        c = Constraint.equality(lambda x: x[0] - 1.0)
        assert c.is_equality
        assert c.violation(Vector([1.5])) == 0.5
        assert c.violation(Vector([0.5])) == 0.5
        assert c.is_satisfied(Vector([1.0]))

    def test_inequality_violation(self):
        from finprox import Constraint, Vector

        c = Constraint.inequality(lambda x: x[0] - 1.0)
        assert not c.is_equality
        assert c.violation(Vector([0.0])) == 0.0
        assert c.violation(Vector([3.0])) == 2.0
        assert not c.is_satisfied(Vector([3.0]))

    def test_tolerance(self):
        from finprox import Constraint, Vector

        c = Constraint.equality(lambda x: x[0])
        assert c.is_satisfied(Vector([1e-7]))
        assert not c.is_satisfied(Vector([1e-7]), tolerance=1e-8)

    def test_gradient_at(self):
        from finprox import Constraint, Vector

        analytic = Constraint.budget()
        numeric = Constraint.equality(lambda x: x.sum() - 1.0)
        x = Vector([0.2, 0.3, 0.5])
        np.testing.assert_allclose(analytic.gradient_at(x).to_array(), [1.0, 1.0, 1.0])
        np.testing.assert_allclose(numeric.gradient_at(x).to_array(), [1.0, 1.0, 1.0], atol=1e-6)


class TestFactories:
    """Test portfolio constraint factories."""

    def test_budget(self):
        from finprox import Constraint, Vector

        c = Constraint.budget()
        assert c.is_satisfied(Vector([0.2, 0.3, 0.5]))
        np.testing.assert_allclose(c.evaluate(Vector([0.5, 0.3, 0.5])), 0.3)

    def test_non_negativity(self):
        from finprox import Constraint, Vector

        cs = Constraint.non_negativity(3)
        assert len(cs) == 3
        x = Vector([0.5, -0.1, 0.6])
        assert [c.is_satisfied(x) for c in cs] == [True, False, True]

    def test_box_constraints(self):
        from finprox import Vector, all_satisfied
        from finprox import Constraint

        cs = Constraint.box_constraints(0.0, 0.4, 2)
        assert len(cs) == 4
        assert all_satisfied(cs, Vector([0.1, 0.4]))
        assert not all_satisfied(cs, Vector([0.1, 0.5]))

    def test_box_constraints_invalid(self):
        from finprox import Constraint, InvalidInputError

        with pytest.raises(InvalidInputError, match="exceeds"):
            Constraint.box_constraints(1.0, 0.0, 2)

    def test_target_return(self):
        from finprox import Constraint, Vector

        c = Constraint.target_return([0.10, 0.20], 0.15)
        assert c.is_satisfied(Vector([0.5, 0.5]))
        assert not c.is_satisfied(Vector([1.0, 0.0]))

    def test_leverage_limit(self):
        from finprox import Constraint, Vector

        c = Constraint.leverage_limit(1.5)
        assert c.is_satisfied(Vector([1.2, -0.3]))
        assert not c.is_satisfied(Vector([1.5, -0.5]))


class TestHelpers:
    """Test constraint list helpers."""

    def test_flatten_nested(self):
        from finprox import Constraint
        from finprox.constraints import flatten_constraints

        flat = flatten_constraints([Constraint.budget(), Constraint.non_negativity(2), (Constraint.budget(),)])
        assert len(flat) == 4

    def test_flatten_rejects_other_types(self):
        from finprox import InvalidInputError
        from finprox.constraints import flatten_constraints

        with pytest.raises(InvalidInputError, match="expected Constraint"):
            flatten_constraints([lambda x: x[0]])

    def test_max_violation(self):
        from finprox import Constraint, Vector, max_violation

        x = Vector([0.7, -0.2])
        constraints = [Constraint.budget(), Constraint.non_negativity(2)]
        np.testing.assert_allclose(max_violation(constraints, x), 0.5)
        assert max_violation([], x) == 0.0
