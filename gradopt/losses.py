"""Reference loss functions for linear models.

Each class implements the ``evaluate(X, y, w)`` / ``gradient(X, y, w)``
contract consumed by the optimizers. The model is linear, ``z = X @ w``; an
intercept is obtained by appending a column of ones to ``X``.
"""

from __future__ import annotations

import numpy as np


def sigmoid(z: np.ndarray) -> np.ndarray:
    """Numerically stable logistic function ``1 / (1 + exp(-z))``."""
    return np.exp(-np.logaddexp(0.0, -z))


class LeastSquaresLoss:
    """Mean squared error ``0.5 / n * ||X w - y||^2``.

    The coordinate-wise curvature is ``||X[:, j]||^2 / n``, which is the
    ``rho`` bound coordinate descent needs.
    """

    def evaluate(self, X: np.ndarray, y: np.ndarray, w: np.ndarray) -> float:
        residual = X @ w - y
        return float(0.5 * residual @ residual / X.shape[0])

    def gradient(self, X: np.ndarray, y: np.ndarray, w: np.ndarray) -> np.ndarray:
        return X.T @ (X @ w - y) / X.shape[0]


class LogisticLoss:
    """Mean binary cross-entropy for labels in ``{0, 1}``.

    Args:
        l2: Optional ridge penalty ``0.5 * l2 * ||w||^2``.
    """

    def __init__(self, l2: float = 0.0):
        if l2 < 0:
            raise ValueError(f"l2 must be >= 0, got {l2}")
        self.l2 = float(l2)

    def evaluate(self, X: np.ndarray, y: np.ndarray, w: np.ndarray) -> float:
        z = X @ w
        # log(1 + exp(z)) - y * z, written to avoid overflow
        losses = np.logaddexp(0.0, z) - y * z
        return float(losses.mean() + 0.5 * self.l2 * (w @ w))

    def gradient(self, X: np.ndarray, y: np.ndarray, w: np.ndarray) -> np.ndarray:
        return X.T @ (sigmoid(X @ w) - y) / X.shape[0] + self.l2 * w

    @staticmethod
    def predict(X: np.ndarray, w: np.ndarray) -> np.ndarray:
        """Hard ``{0, 1}`` labels."""
        return (X @ w >= 0.0).astype(float)


class PerceptronLoss:
    """Mean perceptron criterion ``max(0, -t * x.w)`` for labels ``t`` in ``{-1, +1}``.

    Misclassified samples (``t * x.w <= 0``) contribute ``-t * x`` to the
    gradient, which makes a gradient step the classic perceptron update.
    """

    def evaluate(self, X: np.ndarray, y: np.ndarray, w: np.ndarray) -> float:
        margins = y * (X @ w)
        return float(np.maximum(0.0, -margins).mean())

    def gradient(self, X: np.ndarray, y: np.ndarray, w: np.ndarray) -> np.ndarray:
        mistakes = (y * (X @ w)) <= 0.0
        return -(X[mistakes].T @ y[mistakes]) / X.shape[0]

    @staticmethod
    def predict(X: np.ndarray, w: np.ndarray) -> np.ndarray:
        """Hard ``{-1, +1}`` labels."""
        return np.where(X @ w >= 0.0, 1.0, -1.0)


__all__ = ["sigmoid", "LeastSquaresLoss", "LogisticLoss", "PerceptronLoss"]
