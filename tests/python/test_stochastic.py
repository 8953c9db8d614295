"""
Tests for scenario generation and sample average approximation.

Tests covering:
1. Distributions
2. ScenarioGenerator
3. StochasticOptimizer with generators and pre-built scenarios
"""

import numpy as np
import pytest


class TestDistributions:
    """Test distribution classes."""

    def test_normal_scalar_std(self):
        from finprox.stochastic import NormalDistribution

        dist = NormalDistribution(mean_=np.array([0.0, 1.0]), std=0.5)

        np.testing.assert_array_equal(dist.std, [0.5, 0.5])
        assert dist.dim == 2
        assert dist.sample(10, seed=0).shape == (10, 2)

    def test_normal_with_covariance(self):
        from finprox.stochastic import NormalDistribution

        cov = np.array([[0.04, 0.01], [0.01, 0.09]])
        dist = NormalDistribution(mean_=np.array([0.1, 0.2]), cov=cov)
        draws = dist.sample(20000, seed=42)

        np.testing.assert_allclose(dist.std, [0.2, 0.3])
        np.testing.assert_allclose(np.cov(draws.T), cov, atol=5e-3)

    def test_normal_invalid(self):
        from finprox import InvalidInputError
        from finprox.stochastic import NormalDistribution

        with pytest.raises(InvalidInputError, match="non-negative"):
            NormalDistribution(mean_=np.zeros(2), std=np.array([0.1, -0.1]))
        with pytest.raises(InvalidInputError, match="symmetric"):
            NormalDistribution(mean_=np.zeros(2), cov=np.array([[1.0, 0.5], [0.0, 1.0]]))

    def test_uniform(self):
        from finprox.stochastic import UniformDistribution

        dist = UniformDistribution(low=[0.0, -1.0], high=[1.0, 1.0])
        draws = dist.sample(500, seed=0)

        assert np.all(draws >= [0.0, -1.0]) and np.all(draws <= [1.0, 1.0])
        np.testing.assert_array_equal(dist.mean(), [0.5, 0.0])

    def test_uniform_invalid(self):
        from finprox import InvalidInputError
        from finprox.stochastic import UniformDistribution

        with pytest.raises(InvalidInputError, match="lower bounds"):
            UniformDistribution(low=[1.0], high=[0.0])

    def test_empirical(self):
        from finprox.stochastic import EmpiricalDistribution

        history = [[0.02, 0.01], [-0.01, 0.03], [0.04, -0.02]]
        dist = EmpiricalDistribution(observations=history)
        draws = dist.sample(50, seed=0)

        assert dist.n_observations == 3
        rows = {tuple(r) for r in np.asarray(history)}
        assert all(tuple(d) in rows for d in draws)

    def test_empirical_ragged(self):
        from finprox import DimensionError
        from finprox.stochastic import EmpiricalDistribution

        with pytest.raises(DimensionError):
            EmpiricalDistribution(observations=[[0.1, 0.2], [0.3]])


class TestScenarioGenerator:
    """Test ScenarioGenerator."""

    def test_normal(self):
        from finprox.stochastic import ScenarioGenerator

        scenarios = ScenarioGenerator.normal([0.08, 0.12], [0.15, 0.20], 4000, seed=42)

        assert len(scenarios) == 4000
        assert scenarios[0].name == "scenario_0"
        assert scenarios[-1].name == "scenario_3999"
        assert scenarios[0].parameter_names == ["param_0", "param_1"]
        assert all(s.probability == 1 / 4000 for s in scenarios)

        draws = np.array([s.to_array() for s in scenarios])
        np.testing.assert_allclose(draws.mean(axis=0), [0.08, 0.12], atol=0.015)
        np.testing.assert_allclose(draws.std(axis=0), [0.15, 0.20], atol=0.015)

    def test_seed_reproducible(self):
        from finprox.stochastic import ScenarioGenerator

        a = ScenarioGenerator.normal([0.0], [1.0], 10, seed=3)
        b = ScenarioGenerator.normal([0.0], [1.0], 10, seed=3)
        assert [s.parameters for s in a] == [s.parameters for s in b]

    def test_normal_dimension_mismatch(self):
        from finprox import DimensionError
        from finprox.stochastic import ScenarioGenerator

        with pytest.raises(DimensionError):
            ScenarioGenerator.normal([0.08, 0.12], [0.15], 10)

    def test_normal_covariance_only(self):
        from finprox.stochastic import ScenarioGenerator

        cov = [[0.04, 0.01], [0.01, 0.09]]
        scenarios = ScenarioGenerator.normal([0.1, 0.2], covariance=cov, number_of_scenarios=5000, seed=7)
        draws = np.array([s.to_array() for s in scenarios])

        assert len(scenarios) == 5000
        np.testing.assert_allclose(np.cov(draws.T), cov, atol=1e-2)

    def test_normal_requires_spread(self):
        from finprox import InvalidInputError
        from finprox.stochastic import ScenarioGenerator

        with pytest.raises(InvalidInputError, match="standard_deviation or covariance"):
            ScenarioGenerator.normal([0.1, 0.2], number_of_scenarios=10)

    def test_uniform(self):
        from finprox.stochastic import ScenarioGenerator

        scenarios = ScenarioGenerator.uniform([0.0, 0.0], [1.0, 2.0], 100, seed=1)
        values = np.array([s.to_array() for s in scenarios])

        assert np.all(values >= 0.0)
        assert np.all(values[:, 0] <= 1.0) and np.all(values[:, 1] <= 2.0)

    def test_bootstrap(self):
        from finprox.stochastic import ScenarioGenerator

        history = np.array([[0.01, 0.02], [0.03, -0.01]])
        scenarios = ScenarioGenerator.bootstrap(history, 20, seed=0)

        assert len(scenarios) == 20
        for s in scenarios:
            assert any(np.array_equal(s.to_array(), row) for row in history)

    def test_invalid_count(self):
        from finprox import InvalidInputError
        from finprox.stochastic import ScenarioGenerator

        with pytest.raises(InvalidInputError, match="number_of_scenarios"):
            ScenarioGenerator.uniform([0.0], [1.0], 0)


class TestStochasticOptimizer:
    """Test sample average approximation."""

    def test_generator_with_rng(self):
        from finprox import Constraint
        from finprox.stochastic import StochasticOptimizer, StochasticResult

        optimizer = StochasticOptimizer(number_of_samples=1000, seed=42)
        result = optimizer.optimize(
            lambda w, s: w[0] * s["param_0"] + w[1] * s["param_1"],
            initial_solution=[0.5, 0.5],
            constraints=[Constraint.budget(), Constraint.non_negativity(2)],
            scenario_generator=lambda rng: rng.normal([0.08, 0.12], [0.15, 0.20]),
        )

        assert isinstance(result, StochasticResult)
        assert result.status.has_solution
        assert result.number_of_scenarios == 1000
        assert result.solution[1] > 0.9

        lo, hi = result.confidence_interval(0.95)
        assert lo < result.expected_objective < hi
        np.testing.assert_allclose(
            result.standard_error, result.objective_std_dev / np.sqrt(1000), rtol=1e-12,
        )

    def test_generator_without_argument(self):
        from finprox.stochastic import StochasticOptimizer

        optimizer = StochasticOptimizer(number_of_samples=5)
        scenarios = optimizer.generate_scenarios(lambda: {"target": 2.0})

        assert [s.name for s in scenarios] == [f"scenario_{i}" for i in range(5)]
        assert all(s["target"] == 2.0 and s.probability == 0.2 for s in scenarios)

    def test_generator_returning_scenario(self):
        from finprox.stochastic import Scenario, StochasticOptimizer

        optimizer = StochasticOptimizer(number_of_samples=4, seed=0)
        scenarios = optimizer.generate_scenarios(
            lambda rng: Scenario("draw", 1.0, {"x": float(rng.uniform())}),
        )

        assert [s.name for s in scenarios] == ["scenario_0", "scenario_1", "scenario_2", "scenario_3"]
        assert all(s.probability == 0.25 for s in scenarios)
        assert all(0.0 <= s["x"] <= 1.0 for s in scenarios)

    def test_generate_scenarios_reproducible(self):
        from finprox.stochastic import StochasticOptimizer

        def draw(rng):
            return rng.normal(size=2)

        a = StochasticOptimizer(number_of_samples=10, seed=7).generate_scenarios(draw)
        b = StochasticOptimizer(number_of_samples=10, seed=7).generate_scenarios(draw)
        assert [s.parameters for s in a] == [s.parameters for s in b]

    def test_prebuilt_scenarios(self):
        from finprox.stochastic import ScenarioGenerator, StochasticOptimizer

        scenarios = ScenarioGenerator.normal([1.5], [0.5], 200, seed=42)
        sample_mean = np.mean([s["param_0"] for s in scenarios])

        result = StochasticOptimizer().optimize(
            lambda x, s: (x[0] - s["param_0"]) ** 2,
            initial_solution=[0.0],
            minimize=True,
            scenarios=scenarios,
        )

        # sample average of squared error is minimized at the sample mean
        assert result.converged
        assert result.number_of_scenarios == 200
        np.testing.assert_allclose(result.solution[0], sample_mean, atol=1e-4)

    def test_requires_exactly_one_source(self):
        from finprox import InvalidInputError
        from finprox.stochastic import Scenario, StochasticOptimizer

        optimizer = StochasticOptimizer(number_of_samples=10)
        with pytest.raises(InvalidInputError, match="exactly one"):
            optimizer.optimize(lambda x, s: x[0], [0.0])
        with pytest.raises(InvalidInputError, match="exactly one"):
            optimizer.optimize(
                lambda x, s: x[0], [0.0],
                scenario_generator=lambda: [1.0],
                scenarios=[Scenario("A", 1.0)],
            )

    def test_invalid_sample_count(self):
        from finprox import InvalidInputError
        from finprox.stochastic import StochasticOptimizer

        with pytest.raises(InvalidInputError, match="number_of_samples"):
            StochasticOptimizer(number_of_samples=0)
