"""Mini-batch stochastic gradient descent."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .core import Array, BaseOptimizer, LossFunction, OptimizeResult
from .errors import InvalidConfiguration
from .policies import UpdatePolicy, VanillaUpdate
from .utils import iter_batches, shuffle_data

_LOG_EVERY = 20


class SGD(BaseOptimizer):
    """Mini-batch SGD driven by an :class:`UpdatePolicy`.

    Every epoch optionally shuffles the samples, walks ``n // batch_size``
    contiguous batches (the trailing remainder is dropped), applies one update
    per batch and averages the post-update batch losses. The run stops once
    two consecutive epoch averages differ by less than ``tol``.

    Args:
        x0: Initial parameter vector.
        loss: Loss function collaborator.
        update_policy: Update rule. Defaults to ``VanillaUpdate(alpha)``.
        max_iter: Maximum number of epochs.
        batch_size: Samples per mini-batch.
        alpha: Learning rate of the default update policy.
        tol: Threshold on the change of the average epoch loss.
        shuffle: Shuffle ``(X, y)`` jointly before each epoch.
        verbose: Log progress every 20 epochs at INFO.
        rng: Random generator used for shuffling. Defaults to
            ``np.random.default_rng(0)``.
        history: Record the parameters after every epoch.
    """

    def __init__(
        self,
        x0: Array,
        loss: LossFunction,
        update_policy: Optional[UpdatePolicy] = None,
        max_iter: int = 200,
        batch_size: int = 1,
        alpha: float = 0.001,
        tol: float = 1e-4,
        shuffle: bool = True,
        verbose: bool = False,
        rng: Optional[np.random.Generator] = None,
        history: bool = False,
    ):
        super().__init__(x0, loss, max_iter, tol, shuffle, verbose, history)
        if batch_size < 1:
            raise InvalidConfiguration(f"batch_size must be >= 1, got {batch_size}.")
        self.batch_size = int(batch_size)
        self.update_policy = update_policy if update_policy is not None else VanillaUpdate(alpha)
        self.rng = rng if rng is not None else np.random.default_rng(0)

    @property
    def alpha(self) -> float:
        return self.update_policy.alpha

    def optimize(self, X: Array, y: Array) -> OptimizeResult:
        """Run SGD on ``(X, y)`` from ``x0``.

        The working parameter vector is updated in place by the update policy
        and returned as ``result.x``.
        """
        X, y = self._check_data(X, y)
        num_samples = X.shape[0]
        if self.batch_size > num_samples:
            raise InvalidConfiguration(
                f"batch_size ({self.batch_size}) exceeds the number of samples "
                f"({num_samples})."
            )
        num_batches = num_samples // self.batch_size
        if num_samples % self.batch_size:
            self.logger.debug(
                "dropping %d trailing sample(s) per epoch", num_samples % self.batch_size
            )

        self.update_policy.reset()
        w = self.x0.copy()
        grad = np.zeros_like(w)
        previous = np.inf
        average = np.inf
        nfev = njev = nit = 0
        fun_history: list[float] = []
        hist = [w.copy()] if self.history else []
        success = False
        message = "Maximum iterations reached."

        while nit < self.max_iter:
            if self.shuffle:
                X, y = shuffle_data(X, y, self.rng)

            error = 0.0
            for X_batch, y_batch in iter_batches(X, y, self.batch_size):
                grad = np.asarray(self.loss.gradient(X_batch, y_batch, w), dtype=float)
                self.update_policy.update(w, grad)
                error += float(self.loss.evaluate(X_batch, y_batch, w))
            nfev += num_batches
            njev += num_batches

            average = error / num_batches
            fun_history.append(average)
            if self.history:
                hist.append(w.copy())

            if nit % _LOG_EVERY == 0:
                self._report("iter = %d, loss value = %.6g", nit, average)
            nit += 1

            if abs(previous - average) < self.tol:
                success = True
                message = "Loss change tolerance satisfied."
                break
            previous = average

        if nit == 0:
            # No epoch ran; report the full-data loss at x0.
            average = float(self.loss.evaluate(X, y, w))
            nfev += 1

        return OptimizeResult(
            x=w,
            fun=float(average),
            nit=nit,
            success=success,
            message=message,
            grad_norm=float(np.linalg.norm(grad)),
            nfev=nfev,
            njev=njev,
            fun_history=fun_history,
            history=hist,
        )


__all__ = ["SGD"]
