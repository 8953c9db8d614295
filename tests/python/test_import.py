"""
Test that finprox can be imported and the public API is exposed.
"""

import pytest


def test_import_finprox():
    """Verify finprox package can be imported."""
    import finprox
    assert hasattr(finprox, "__version__")


def test_version_format():
    """Verify version string is properly formatted."""
    import finprox
    version = finprox.__version__

    parts = version.split(".")
    assert len(parts) >= 2
    assert all(p.isdigit() or "-" in p for p in parts)


def test_import_core():
    """Verify core types can be imported."""
    from finprox import ConstrainedOptimizer, Constraint, Vector, solve
    assert callable(solve)
    assert Vector is not None
    assert Constraint is not None
    assert ConstrainedOptimizer is not None


def test_import_result():
    """Verify result classes can be imported."""
    from finprox import OptimizationResult, Status
    assert OptimizationResult is not None
    assert Status is not None


def test_import_subpackages():
    """Verify subpackage optimizers can be imported."""
    from finprox.multiperiod import MultiPeriodOptimizer
    from finprox.robust import RobustOptimizer
    from finprox.stochastic import ScenarioOptimizer, StochasticOptimizer

    assert MultiPeriodOptimizer is not None
    assert RobustOptimizer is not None
    assert ScenarioOptimizer is not None
    assert StochasticOptimizer is not None


def test_import_exceptions():
    """Verify exception classes can be imported."""
    from finprox import DimensionError, FinproxError, InvalidInputError

    assert issubclass(DimensionError, FinproxError)
    assert issubclass(InvalidInputError, FinproxError)


def test_exception_message():
    """Exceptions carry a prefixed message."""
    from finprox import DimensionError

    err = DimensionError("3 vs 4")
    assert err.message == "Dimension mismatch: 3 vs 4"
    assert str(err) == "Dimension mismatch: 3 vs 4"


def test_status_values():
    """Verify Status enum has expected values."""
    from finprox import Status

    assert str(Status.OPTIMAL) == "optimal"
    assert Status.OPTIMAL.is_successful
    assert not Status.MAX_ITERATIONS.is_successful
    assert Status.MAX_ITERATIONS.has_solution
    assert not Status.NUMERICAL_ERROR.has_solution


def test_info():
    """Verify info() function works."""
    import finprox
    info = finprox.info()
    assert "finprox version" in info
    assert "NumPy version" in info


@pytest.mark.parametrize("name", [
    "Vector", "Constraint", "ConstrainedOptimizer", "MultiPeriodOptimizer",
    "RobustOptimizer", "ScenarioOptimizer", "StochasticOptimizer", "ScenarioGenerator",
])
def test_public_names_in_all(name):
    """Main classes are listed in __all__."""
    import finprox
    assert name in finprox.__all__
