"""Benchmark optimizer runs on synthetic regression data."""

import time
from typing import Dict

import numpy as np

from gradopt import LeastSquaresLoss, OptimizerConfig
from gradopt.optimize import create_optimizer


def benchmark_optimizer(
    name: str,
    n_samples: int = 1000,
    n_features: int = 20,
    repeats: int = 5,
    **options,
) -> Dict[str, float]:
    """Benchmark repeated optimizer runs.

    Args:
        name: Optimizer name ("lbfgs", "sgd" or "scd").
        n_samples: Number of rows in the design matrix.
        n_features: Number of columns in the design matrix.
        repeats: Number of timed runs.
        **options: Extra :class:`OptimizerConfig` options.

    Returns:
        Dictionary with timing results.
    """
    rng = np.random.default_rng(0)
    X = rng.normal(size=(n_samples, n_features))
    y = X @ rng.normal(size=n_features) + 0.1 * rng.normal(size=n_samples)
    config = OptimizerConfig.from_options(name, **options)
    loss = LeastSquaresLoss()

    # Warmup
    create_optimizer(config, np.zeros(n_features), loss, rng=rng).optimize(X, y)

    start = time.perf_counter()
    for _ in range(repeats):
        result = create_optimizer(config, np.zeros(n_features), loss, rng=rng).optimize(X, y)
    end = time.perf_counter()

    total_time = end - start
    return {
        "n_samples": n_samples,
        "n_features": n_features,
        "total_time_sec": total_time,
        "time_per_run_sec": total_time / repeats,
        "final_loss": result.fun,
        "nfev": result.nfev,
    }


if __name__ == "__main__":
    print("Benchmarking optimizers...")

    cases = {
        "lbfgs": {"tol": 1e-6},
        "sgd": {"batch_size": 50, "alpha": 0.05, "max_iter": 20},
        "scd": {"max_iter": 500, "lambda": 0.01, "rho": 1.5},
    }
    for name, options in cases.items():
        results = benchmark_optimizer(name, **options)
        print(f"{name} ({results['n_samples']} x {results['n_features']}):")
        print(f"  Time per run: {results['time_per_run_sec']*1e3:.2f} ms")
        print(f"  Final loss: {results['final_loss']:.6g} ({results['nfev']} evaluations)")
