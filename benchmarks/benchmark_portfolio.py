#!/usr/bin/env python3
"""
finprox Portfolio Benchmark: Compare against scipy.optimize SLSQP

Run after installing the package:
    pip install -e .
    python benchmarks/benchmark_portfolio.py
"""

import time

import numpy as np
from scipy.optimize import minimize

import finprox
from finprox import ConstrainedOptimizer, Constraint

print(f"finprox version: {finprox.__version__}")
print()


def generate_portfolio(n_assets, n_factors=5, seed=42):
    """Random factor-model covariance and expected returns."""
    rng = np.random.default_rng(seed)
    loadings = rng.standard_normal((n_assets, n_factors)) / np.sqrt(n_factors)
    sigma = 0.04 * (loadings @ loadings.T) + np.eye(n_assets) * 0.01
    mu = 0.05 + 0.05 * rng.random(n_assets)
    return mu, sigma


def solve_finprox(mu, sigma, risk_aversion=2.0):
    """Mean-variance with budget and long-only constraints."""
    n = mu.size
    optimizer = ConstrainedOptimizer(max_iterations=200)

    start = time.perf_counter()
    result = optimizer.maximize(
        lambda w: w.dot(mu) - risk_aversion * float(w.to_array() @ sigma @ w.to_array()),
        np.full(n, 1.0 / n),
        [Constraint.budget(), Constraint.non_negativity(n)],
        gradient=lambda w: mu - 2.0 * risk_aversion * (sigma @ w.to_array()),
    )
    elapsed = time.perf_counter() - start
    return {
        'time': elapsed,
        'objective': result.objective_value,
        'status': str(result.status),
        'iterations': result.iterations,
    }


def solve_slsqp(mu, sigma, risk_aversion=2.0):
    """Same problem with scipy SLSQP."""
    n = mu.size

    start = time.perf_counter()
    result = minimize(
        lambda w: -(w @ mu - risk_aversion * w @ sigma @ w),
        np.full(n, 1.0 / n),
        jac=lambda w: -(mu - 2.0 * risk_aversion * (sigma @ w)),
        method='SLSQP',
        bounds=[(0.0, None)] * n,
        constraints=[{'type': 'eq', 'fun': lambda w: w.sum() - 1.0}],
        options={'maxiter': 500, 'ftol': 1e-10},
    )
    elapsed = time.perf_counter() - start
    return {
        'time': elapsed,
        'objective': -result.fun,
        'status': 'optimal' if result.success else 'failed',
        'iterations': result.nit,
    }


def benchmark_scaling():
    """Benchmark across portfolio sizes."""
    print("=" * 70)
    print("Mean-Variance Scaling Benchmark")
    print("=" * 70)

    all_results = []
    for n in [5, 10, 25, 50]:
        mu, sigma = generate_portfolio(n)
        fp = solve_finprox(mu, sigma)
        sl = solve_slsqp(mu, sigma)
        print(f"\n  {n} assets")
        print(f"    SLSQP:    {sl['time']*1000:8.1f} ms, obj={sl['objective']:10.6f}, "
              f"iters={sl['iterations']}, status={sl['status']}")
        print(f"    finprox:  {fp['time']*1000:8.1f} ms, obj={fp['objective']:10.6f}, "
              f"iters={fp['iterations']}, status={fp['status']}")
        all_results.append((n, fp, sl))

    print("\n" + "=" * 70)
    print("Summary")
    print("=" * 70)
    print(f"{'n':>8} {'SLSQP (ms)':>12} {'finprox (ms)':>14} {'obj gap':>12}")
    print("-" * 70)
    for n, fp, sl in all_results:
        gap = abs(fp['objective'] - sl['objective'])
        print(f"{n:>8} {sl['time']*1000:>12.1f} {fp['time']*1000:>14.1f} {gap:>12.2e}")


if __name__ == "__main__":
    benchmark_scaling()
