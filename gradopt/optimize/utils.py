"""Data and numerical helpers shared by the optimizers.

Pure NumPy; randomness always comes from an explicit
``numpy.random.Generator`` so runs are reproducible.
"""

from __future__ import annotations

from typing import Iterator, Optional

import numpy as np

from .core import Array, LossFunction


def shuffle_data(
    X: Array, y: Array, rng: Optional[np.random.Generator] = None
) -> tuple[Array, Array]:
    """Apply one random row permutation to ``X`` and ``y`` jointly.

    Row ``i`` of the returned matrix and element ``i`` of the returned targets
    always come from the same original sample. The inputs are not modified.
    """
    if rng is None:
        rng = np.random.default_rng()
    perm = rng.permutation(X.shape[0])
    return X[perm], y[perm]


def iter_batches(X: Array, y: Array, batch_size: int) -> Iterator[tuple[Array, Array]]:
    """Yield contiguous ``(X_batch, y_batch)`` mini-batches.

    Only ``len(X) // batch_size`` full batches are produced; trailing samples
    that do not fill a batch are dropped.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    num_batches = X.shape[0] // batch_size
    for j in range(num_batches):
        begin = j * batch_size
        yield X[begin : begin + batch_size], y[begin : begin + batch_size]


def approx_grad(
    loss: LossFunction, X: Array, y: Array, w: Array, eps: float = 1e-6
) -> Array:
    """Central-difference approximation of ``loss.gradient(X, y, w)``.

    Useful to check a hand-written gradient against its ``evaluate``.
    """
    if eps <= 0:
        raise ValueError("eps must be positive")
    w = np.asarray(w, dtype=float)
    grad = np.zeros_like(w)
    for i in range(w.size):
        ei = np.zeros_like(w)
        ei[i] = eps
        f_plus = loss.evaluate(X, y, w + ei)
        f_minus = loss.evaluate(X, y, w - ei)
        grad[i] = (f_plus - f_minus) / (2.0 * eps)
    return grad


__all__ = ["shuffle_data", "iter_batches", "approx_grad"]
