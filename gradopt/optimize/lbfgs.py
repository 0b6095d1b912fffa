"""Limited-memory BFGS with pluggable line search."""

from __future__ import annotations

from typing import Optional, Union

import numpy as np

from .core import Array, BaseOptimizer, LossFunction, OptimizeResult
from .errors import InvalidConfiguration
from .history import LBFGSHistory, ObjectiveWindow
from .line_search import (
    LineSearchParams,
    LineSearchPolicy,
    LineSearchState,
    create_line_search,
)

_TINY = np.finfo(float).tiny


def two_loop(history: LBFGSHistory, g: Array) -> Array:
    """Return ``H_k g`` for the inverse-Hessian approximation in ``history``.

    The first loop runs newest pair first, the second chronologically; the
    initial matrix is ``gamma * I`` with ``gamma = (s . y) / (y . y)`` taken
    from the newest pair. ``H_k`` is never formed.
    """
    q = np.array(g, dtype=float, copy=True)
    alphas = []
    for s, y, rho in history.newest_first():
        alpha = rho * float(np.dot(s, q))
        q -= alpha * y
        alphas.append(alpha)

    s_new, y_new, _ = history.newest()
    gamma = float(np.dot(s_new, y_new) / np.dot(y_new, y_new))
    r = gamma * q

    for (s, y, rho), alpha in zip(history, reversed(alphas)):
        beta = rho * float(np.dot(y, r))
        r += s * (alpha - beta)
    return r


class LBFGS(BaseOptimizer):
    """Limited-memory quasi-Newton optimizer.

    Args:
        x0: Initial parameter vector.
        loss: Loss function collaborator.
        linesearch_params: Line-search coefficients. Defaults to
            :class:`LineSearchParams`.
        linesearch_policy: ``"backtracking"``, ``"bracketing"`` or a
            :class:`LineSearchPolicy`.
        max_iter: Maximum number of accepted steps; ``0`` runs until
            convergence or failure.
        mem_size: Number of curvature pairs retained.
        past: Lookback distance for the relative-decrease test; ``0``
            disables it.
        tol: Converged once ``||g|| / max(1, ||x||) <= tol``.
        delta: Threshold on the relative decrease over ``past`` iterations.
        shuffle: Stored for interface parity; the full-batch objective does
            not depend on sample order.
        verbose: Log every iteration at INFO.
        history: Record every iterate in the result.

    Raises:
        InvalidConfiguration: On an unknown line-search policy or
            out-of-range options.
    """

    def __init__(
        self,
        x0: Array,
        loss: LossFunction,
        linesearch_params: Optional[LineSearchParams] = None,
        linesearch_policy: Union[LineSearchPolicy, str] = "backtracking",
        max_iter: int = 100,
        mem_size: int = 8,
        past: int = 3,
        tol: float = 1e-5,
        delta: float = 1e-6,
        shuffle: bool = False,
        verbose: bool = False,
        history: bool = False,
    ):
        super().__init__(x0, loss, max_iter, tol, shuffle, verbose, history)
        if mem_size < 1:
            raise InvalidConfiguration(f"mem_size must be >= 1, got {mem_size}.")
        if past < 0:
            raise InvalidConfiguration(f"past must be >= 0, got {past}.")
        if delta < 0:
            raise InvalidConfiguration(f"delta must be >= 0, got {delta}.")
        self.linesearch_policy = LineSearchPolicy.parse(linesearch_policy)
        self.linesearch_params = (
            linesearch_params if linesearch_params is not None else LineSearchParams()
        )
        self.mem_size = int(mem_size)
        self.past = int(past)
        self.delta = float(delta)

    def _gradient_converged(self, x: Array, g: Array) -> bool:
        xnorm = max(1.0, float(np.linalg.norm(x)))
        return float(np.linalg.norm(g)) / xnorm <= self.tol

    def optimize(self, X: Array, y: Array) -> OptimizeResult:
        """Run L-BFGS on ``(X, y)`` from ``x0``.

        Line-search failures are not caught: they propagate and end the run.
        """
        X, y = self._check_data(X, y)
        linesearch = create_line_search(
            self.linesearch_policy, X, y, self.loss, self.linesearch_params
        )
        mem = LBFGSHistory(self.mem_size, self.x0.size)
        window = ObjectiveWindow(self.past) if self.past >= 1 else None

        x = self.x0.copy()
        fx = float(self.loss.evaluate(X, y, x))
        g = np.asarray(self.loss.gradient(X, y, x), dtype=float)
        nfev, njev, nit = 1, 1, 0
        fun_history = [fx]
        hist = [x.copy()] if self.history else []

        success = False
        message = "Maximum iterations reached."
        if self._gradient_converged(x, g):
            success = True
            message = "Gradient tolerance satisfied."

        if window is not None:
            window.push(fx)

        while not success and (self.max_iter == 0 or nit < self.max_iter):
            if len(mem) == 0:
                d = -g
                step = 1.0 / float(np.linalg.norm(d))
            else:
                d = -two_loop(mem, g)
                step = 1.0

            xp, gp = x, g
            result = linesearch.search(LineSearchState(x=xp, fx=fx, g=gp, d=d, step=step))
            x, fx, g = result.x, result.fx, result.g
            nfev += result.n_evals
            njev += result.n_evals
            nit += 1
            fun_history.append(fx)
            if self.history:
                hist.append(x.copy())

            self._report(
                "iter = %d, loss value = %.6g, param norm = %.6g, step = %.3g",
                nit,
                fx,
                float(np.linalg.norm(x)),
                result.step,
            )

            if self._gradient_converged(x, g):
                success = True
                message = "Gradient tolerance satisfied."
                break

            if window is not None:
                if window.full:
                    rate = abs(window.oldest() - fx) / max(abs(fx), _TINY)
                    if rate < self.delta:
                        success = True
                        message = "Relative decrease tolerance satisfied."
                        break
                window.push(fx)

            if not mem.push(x - xp, g - gp):
                self.logger.debug("iter = %d: skipped degenerate curvature pair", nit)

        return OptimizeResult(
            x=x,
            fun=fx,
            nit=nit,
            success=success,
            message=message,
            grad_norm=float(np.linalg.norm(g)),
            nfev=nfev,
            njev=njev,
            fun_history=fun_history,
            history=hist,
        )


__all__ = ["LBFGS", "two_loop"]
