"""
Probability Distributions for Scenario Generation
=================================================

Distribution classes that draw parameter vectors for scenarios.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from ..exceptions import DimensionError, InvalidInputError
from ..utils.validation import as_float_array, as_float_matrix, check_count

SeedLike = Optional[Union[int, np.random.Generator]]


class Distribution(ABC):
    """Base class for distributions."""

    @property
    @abstractmethod
    def dim(self) -> int:
        """Dimension of one draw."""

    @abstractmethod
    def sample(self, size: int, seed: SeedLike = None) -> np.ndarray:
        """Generate ``size`` draws as a (size, dim) array."""

    @abstractmethod
    def mean(self) -> np.ndarray:
        """Distribution mean."""


@dataclass
class NormalDistribution(Distribution):
    """
    Multivariate normal distribution.

    Args:
        mean_: Mean vector
        std: Standard deviation (scalar or vector)
        cov: Covariance matrix (optional, overrides std)

    Example:
        >>> dist = NormalDistribution(mean_=np.array([0.08, 0.12]), std=np.array([0.15, 0.20]))
        >>> draws = dist.sample(100, seed=42)
    """
    mean_: np.ndarray
    std: Optional[Union[float, np.ndarray]] = None
    cov: Optional[np.ndarray] = None

    def __post_init__(self):
        self.mean_ = as_float_array(self.mean_, "mean")
        d = len(self.mean_)

        if self.cov is not None:
            self.cov = as_float_matrix(self.cov, "covariance", shape=(d, d))
            if not np.allclose(self.cov, self.cov.T):
                raise InvalidInputError("covariance must be symmetric")
            self.std = np.sqrt(np.diag(self.cov))
        else:
            if self.std is None:
                self.std = np.ones(d)
            elif np.isscalar(self.std):
                self.std = np.full(d, float(self.std))
            else:
                self.std = as_float_array(self.std, "standard_deviation", dim=d)
            if np.any(self.std < 0):
                raise InvalidInputError("standard deviations must be non-negative")

    @property
    def dim(self) -> int:
        return len(self.mean_)

    def sample(self, size: int, seed: SeedLike = None) -> np.ndarray:
        """Sample from the normal distribution."""
        rng = np.random.default_rng(seed)
        if self.cov is not None:
            return rng.multivariate_normal(self.mean_, self.cov, size=size)
        return rng.normal(self.mean_, self.std, size=(size, self.dim))

    def mean(self) -> np.ndarray:
        return self.mean_.copy()


@dataclass
class UniformDistribution(Distribution):
    """
    Uniform distribution on [low, high] per coordinate.

    Args:
        low: Lower bounds
        high: Upper bounds
    """
    low: np.ndarray
    high: np.ndarray

    def __post_init__(self):
        self.low = as_float_array(self.low, "lower_bounds")
        self.high = as_float_array(self.high, "upper_bounds", dim=len(self.low))
        if np.any(self.low > self.high):
            raise InvalidInputError("lower bounds must not exceed upper bounds")

    @property
    def dim(self) -> int:
        return len(self.low)

    def sample(self, size: int, seed: SeedLike = None) -> np.ndarray:
        rng = np.random.default_rng(seed)
        return rng.uniform(self.low, self.high, size=(size, self.dim))

    def mean(self) -> np.ndarray:
        return (self.low + self.high) / 2


@dataclass
class EmpiricalDistribution(Distribution):
    """
    Empirical distribution over historical observations.

    Sampling draws whole rows with replacement (bootstrap), so the
    cross-sectional dependence of each observation is preserved.

    Args:
        observations: Historical data (n_observations, dim)

    Example:
        >>> history = [[0.02, 0.01], [-0.01, 0.03], [0.04, -0.02]]
        >>> dist = EmpiricalDistribution(observations=history)
        >>> resampled = dist.sample(10, seed=0)
    """
    observations: np.ndarray

    def __post_init__(self):
        try:
            data = np.asarray(self.observations, dtype=np.float64)
        except ValueError as e:
            raise DimensionError("historical observations must all have the same length") from e
        if data.ndim == 1:
            data = data.reshape(-1, 1)
        if data.ndim != 2:
            raise DimensionError(f"historical data must be 2-D, got shape {data.shape}")
        if data.shape[0] == 0:
            raise InvalidInputError("historical data must contain at least one observation")
        if not np.all(np.isfinite(data)):
            raise InvalidInputError("historical data contains NaN or infinite values")
        self.observations = data

    @property
    def dim(self) -> int:
        return self.observations.shape[1]

    @property
    def n_observations(self) -> int:
        return self.observations.shape[0]

    def sample(self, size: int, seed: SeedLike = None) -> np.ndarray:
        check_count(size, "size")
        rng = np.random.default_rng(seed)
        idx = rng.integers(0, self.n_observations, size=size)
        return self.observations[idx]

    def mean(self) -> np.ndarray:
        return self.observations.mean(axis=0)
