"""Core interfaces shared across the optimizers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Protocol

import numpy as np

from ..logging import get_logger
from .errors import InvalidConfiguration

Array = np.ndarray


class LossFunction(Protocol):
    """Loss evaluated over a feature matrix and a target vector.

    ``evaluate`` must be pure and deterministic, and ``gradient`` must be
    consistent with it and return an array shaped like ``w``.
    """

    def evaluate(self, X: Array, y: Array, w: Array) -> float:
        ...

    def gradient(self, X: Array, y: Array, w: Array) -> Array:
        ...


@dataclass
class OptimizeResult:
    """Standard result object returned by every optimizer in this module.

    Attributes:
        x: Final parameter vector.
        fun: Objective value at ``x`` (for SGD, the last average epoch loss).
        nit: Number of outer iterations (epochs for SGD) performed.
        success: True if a convergence criterion fired.
        message: Human-readable termination reason.
        grad_norm: Euclidean norm of the last computed gradient.
        nfev: Number of loss evaluations.
        njev: Number of gradient evaluations.
        fun_history: Objective trace. LBFGS and SCD record the starting value
            and then the value after every iteration; SGD records the
            average batch loss of every epoch.
        history: Iterates, recorded only when the optimizer was built with
            ``history=True``.
    """

    x: Array
    fun: float
    nit: int
    success: bool
    message: str
    grad_norm: float
    nfev: int
    njev: int
    fun_history: List[float] = field(default_factory=list)
    history: List[Array] = field(default_factory=list)


class BaseOptimizer(ABC):
    """Configuration storage common to all optimizers.

    Args:
        x0: Initial parameter vector; copied, never mutated.
        loss: Loss function collaborator.
        max_iter: Iteration budget. Must be non-negative.
        tol: Convergence tolerance. Must be non-negative.
        shuffle: Whether samples are jointly shuffled every iteration.
        verbose: Log progress at INFO instead of DEBUG.
        history: Record every iterate in the result.
    """

    def __init__(
        self,
        x0: Array,
        loss: LossFunction,
        max_iter: int,
        tol: float,
        shuffle: bool = False,
        verbose: bool = False,
        history: bool = False,
    ):
        x0 = np.asarray(x0, dtype=float)
        if x0.ndim != 1 or x0.size == 0:
            raise InvalidConfiguration(
                f"x0 must be a non-empty 1-D array, got shape {x0.shape}."
            )
        if max_iter < 0:
            raise InvalidConfiguration(f"max_iter must be >= 0, got {max_iter}.")
        if tol < 0:
            raise InvalidConfiguration(f"tol must be >= 0, got {tol}.")

        self.x0 = x0.copy()
        self.loss = loss
        self.max_iter = int(max_iter)
        self.tol = float(tol)
        self.shuffle = bool(shuffle)
        self.verbose = bool(verbose)
        self.history = bool(history)
        self.logger = get_logger(type(self).__module__)

    @abstractmethod
    def optimize(self, X: Array, y: Array) -> OptimizeResult:
        """Minimize the loss over ``(X, y)`` starting from ``x0``."""

    def _check_data(self, X: Array, y: Array) -> tuple[Array, Array]:
        X = np.asarray(X, dtype=float)
        y = np.asarray(y, dtype=float)
        if X.ndim != 2:
            raise InvalidConfiguration(f"X must be 2-D, got shape {X.shape}.")
        if y.shape[0] != X.shape[0]:
            raise InvalidConfiguration(
                f"X and y disagree on the number of samples: "
                f"{X.shape[0]} != {y.shape[0]}."
            )
        return X, y

    def _report(self, message: str, *args: object) -> None:
        if self.verbose:
            self.logger.info(message, *args)
        else:
            self.logger.debug(message, *args)


__all__ = ["Array", "LossFunction", "OptimizeResult", "BaseOptimizer"]
