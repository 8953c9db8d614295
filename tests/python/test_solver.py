"""
Tests for the augmented Lagrangian constrained solver.

Tests covering:
1. Unconstrained and equality/inequality constrained problems
2. Maximization and analytic gradients
3. Failure reporting through status (never raised)
4. The params-dict ``solve`` entry point
"""

import numpy as np
import pytest


class TestUnconstrained:
    """Problems without constraints."""

    def test_quadratic(self):
        from finprox import ConstrainedOptimizer

        result = ConstrainedOptimizer().minimize(
            lambda x: (x[0] - 1.0) ** 2 + (x[1] - 2.0) ** 2,
            [0.0, 0.0],
        )

        assert result.converged
        np.testing.assert_allclose(result.solution.to_array(), [1.0, 2.0], atol=1e-4)
        assert result.objective_value < 1e-8

    def test_maximize_concave(self):
        from finprox import ConstrainedOptimizer

        result = ConstrainedOptimizer().maximize(lambda x: -(x[0] - 3.0) ** 2 + 5.0, [0.0])

        assert result.converged
        np.testing.assert_allclose(result.solution[0], 3.0, atol=1e-4)
        np.testing.assert_allclose(result.objective_value, 5.0, atol=1e-8)


class TestConstrained:
    """Equality and inequality constrained problems."""

    def test_equality(self):
        """min x² + y² s.t. x + y = 1 -> (0.5, 0.5)."""
        from finprox import ConstrainedOptimizer, Constraint

        result = ConstrainedOptimizer().minimize(
            lambda x: x.dot(x),
            [1.0, 0.0],
            [Constraint.equality(lambda x: x[0] + x[1] - 1.0)],
        )

        assert result.converged
        np.testing.assert_allclose(result.solution.to_array(), [0.5, 0.5], atol=1e-4)
        assert result.constraint_violation <= 1e-6

    def test_active_inequality(self):
        """min (x - 2)² s.t. x <= 1 -> x = 1."""
        from finprox import ConstrainedOptimizer, Constraint

        result = ConstrainedOptimizer().minimize(
            lambda x: (x[0] - 2.0) ** 2,
            [0.0],
            [Constraint.inequality(lambda x: x[0] - 1.0)],
        )

        assert result.converged
        np.testing.assert_allclose(result.solution[0], 1.0, atol=1e-4)

    def test_inactive_inequality(self):
        """min (x - 2)² s.t. x <= 5 -> x = 2."""
        from finprox import ConstrainedOptimizer, Constraint

        result = ConstrainedOptimizer().minimize(
            lambda x: (x[0] - 2.0) ** 2,
            [0.0],
            [Constraint.inequality(lambda x: x[0] - 5.0)],
        )

        assert result.converged
        np.testing.assert_allclose(result.solution[0], 2.0, atol=1e-4)

    def test_long_only_portfolio(self, three_asset_returns, equal_weights, long_only_constraints):
        """Fully invested long-only maximizer concentrates in the best asset."""
        from finprox import ConstrainedOptimizer

        returns = three_asset_returns
        result = ConstrainedOptimizer().maximize(
            lambda w: w.dot(returns),
            equal_weights,
            long_only_constraints,
        )

        assert result.status.has_solution
        assert result.solution[1] > 0.9
        np.testing.assert_allclose(result.solution.sum(), 1.0, atol=1e-5)
        np.testing.assert_allclose(result.objective_value, 0.15, atol=1e-3)

    def test_mean_variance(self):
        """Closed-form minimum-variance weights for a diagonal covariance."""
        from finprox import ConstrainedOptimizer, Constraint

        variances = np.array([0.04, 0.01])
        result = ConstrainedOptimizer().minimize(
            lambda w: float(np.sum(variances * w.to_array() ** 2)),
            [0.5, 0.5],
            [Constraint.budget()],
        )

        # w_i proportional to 1 / variance_i
        expected = (1 / variances) / np.sum(1 / variances)
        assert result.converged
        np.testing.assert_allclose(result.solution.to_array(), expected, atol=1e-4)

    def test_analytic_gradient(self):
        from finprox import ConstrainedOptimizer, Constraint

        result = ConstrainedOptimizer().minimize(
            lambda x: x.dot(x),
            [1.0, 0.0],
            [Constraint.budget()],
            gradient=lambda x: 2.0 * x,
        )

        assert result.converged
        np.testing.assert_allclose(result.solution.to_array(), [0.5, 0.5], atol=1e-4)

    def test_multipliers_in_constraint_order(self):
        from finprox import ConstrainedOptimizer, Constraint

        constraints = [
            Constraint.inequality(lambda x: x[0] - 5.0),
            Constraint.equality(lambda x: x[0] + x[1] - 1.0),
        ]
        result = ConstrainedOptimizer().minimize(lambda x: x.dot(x), [1.0, 0.0], constraints)

        assert result.multipliers.shape == (2,)
        # slack inequality has a zero multiplier; equality λ = -2 * 0.5
        np.testing.assert_allclose(result.multipliers[0], 0.0, atol=1e-8)
        np.testing.assert_allclose(result.multipliers[1], -1.0, atol=1e-3)


class TestStatusReporting:
    """Failures are reported, never raised."""

    def test_contradictory_equalities(self):
        from finprox import ConstrainedOptimizer, Constraint, Status

        result = ConstrainedOptimizer(max_iterations=20).minimize(
            lambda x: x[0] ** 2,
            [0.0],
            [
                Constraint.equality(lambda x: x[0] - 1.0),
                Constraint.equality(lambda x: x[0] - 2.0),
            ],
        )

        assert result.status == Status.MAX_ITERATIONS
        assert not result.converged
        assert result.constraint_violation > 0.1
        assert result.iterations == 20

    def test_constant_residual(self):
        """A violated constraint that does not depend on x cannot be fixed."""
        from finprox import ConstrainedOptimizer, Constraint, Status

        result = ConstrainedOptimizer().minimize(
            lambda x: x[0] ** 2,
            [0.0],
            [Constraint.equality(lambda x: 1.0)],
        )

        assert result.status == Status.NUMERICAL_ERROR

    def test_non_finite_objective(self):
        from finprox import ConstrainedOptimizer, Status

        result = ConstrainedOptimizer().minimize(lambda x: np.nan, [0.0])

        assert result.status == Status.NUMERICAL_ERROR
        assert result.iterations == 0

    def test_callback_interrupts(self):
        from finprox import ConstrainedOptimizer, Constraint, Status

        seen = []

        def stop_immediately(snapshot):
            seen.append(snapshot)
            return True

        result = ConstrainedOptimizer().minimize(
            lambda x: x.dot(x),
            [1.0, 0.0],
            [Constraint.equality(lambda x: x[0] + x[1] - 1.0)],
            callback=stop_immediately,
        )

        assert result.status == Status.INTERRUPTED
        assert result.iterations == 1
        assert len(seen) == 1
        assert seen[0].iteration == 1

    def test_history(self):
        from finprox import ConstrainedOptimizer, Constraint

        result = ConstrainedOptimizer(record_history=True).minimize(
            lambda x: x.dot(x),
            [1.0, 0.0],
            [Constraint.budget()],
        )

        assert len(result.history) == result.iterations
        assert [s.iteration for s in result.history] == list(range(1, result.iterations + 1))


class TestValidation:
    """Misuse raises."""

    def test_invalid_settings(self):
        from finprox import ConstrainedOptimizer, InvalidInputError

        with pytest.raises(InvalidInputError):
            ConstrainedOptimizer(max_iterations=0)
        with pytest.raises(InvalidInputError):
            ConstrainedOptimizer(tolerance=-1.0)
        with pytest.raises(InvalidInputError, match="penalty_increase"):
            ConstrainedOptimizer(penalty_increase=1.0)

    def test_invalid_initial_state(self):
        from finprox import ConstrainedOptimizer, InvalidInputError

        with pytest.raises(InvalidInputError, match="NaN"):
            ConstrainedOptimizer().minimize(lambda x: x[0], [np.nan])
        with pytest.raises(InvalidInputError, match="empty"):
            ConstrainedOptimizer().minimize(lambda x: 0.0, [])


class TestSolveFunction:
    """Test the params-dict entry point."""

    def test_solve_defaults(self):
        from finprox import solve

        result = solve(lambda x: (x[0] - 2.0) ** 2, [0.0])
        assert result.converged
        np.testing.assert_allclose(result.solution[0], 2.0, atol=1e-4)

    def test_solve_param_aliases(self):
        from finprox import Constraint, Status, solve

        result = solve(
            lambda x: x[0] ** 2,
            [0.0],
            [Constraint.equality(lambda x: x[0] - 1.0), Constraint.equality(lambda x: x[0] - 2.0)],
            params={"max_iters": 3, "tol": 1e-8},
        )
        assert result.status == Status.MAX_ITERATIONS
        assert result.iterations == 3

    def test_summary(self):
        from finprox import solve

        result = solve(lambda x: x.dot(x), [1.0, 1.0])
        summary = result.summary()
        assert "finprox Solve Summary" in summary
        assert "Status:" in summary
