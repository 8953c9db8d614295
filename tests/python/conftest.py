"""
pytest configuration and fixtures for finprox tests.
"""

import numpy as np
import pytest


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def three_asset_returns():
    """
    Expected returns for a three-asset universe.

    Asset 1 has the highest return, so a long-only fully invested
    maximizer puts (almost) all weight there.
    """
    return np.array([0.10, 0.15, 0.12])


@pytest.fixture
def equal_weights():
    """Equal-weight starting portfolio for three assets."""
    from finprox import Vector

    return Vector([1 / 3, 1 / 3, 1 / 3])


@pytest.fixture
def long_only_constraints():
    """Budget plus non-negativity for three assets."""
    from finprox import Constraint

    return [Constraint.budget(), Constraint.non_negativity(3)]


@pytest.fixture
def market_scenarios():
    """
    Bull/Base/Bear single-asset scenarios.

    Expected return: 0.3 * 0.20 + 0.5 * 0.10 + 0.2 * -0.05 = 0.10
    """
    from finprox.stochastic import Scenario

    return [
        Scenario("Bull", 0.30, {"return": 0.20}),
        Scenario("Base", 0.50, {"return": 0.10}),
        Scenario("Bear", 0.20, {"return": -0.05}),
    ]


@pytest.fixture
def discrete_returns():
    """
    Two-asset bull/base/bear return vectors.

    Worst case of w0*r0 + (1-w0)*r1 is maximized where the bull and bear
    lines cross: w0 = 0.02/0.27, worst = 0.04 + 0.16 * w0.
    """
    return [[0.20, 0.04], [0.10, 0.05], [-0.05, 0.06]]


# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")
