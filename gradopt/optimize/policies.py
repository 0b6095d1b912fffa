"""Parameter update rules and learning-rate schedules for SGD.

An update policy turns a gradient into a parameter update and keeps whatever
state the rule needs (a velocity for momentum). A decay policy maps the
update step index to a learning rate.

Update rules:
    vanilla:  w <- w - lr_k * grad
    momentum: v <- mu * v - lr_k * grad;  w <- w + v
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from .core import Array
from .errors import InvalidConfiguration


class DecayPolicy(ABC):
    """Learning-rate schedule indexed by update step."""

    def __init__(self, alpha: float):
        if alpha <= 0.0:
            raise InvalidConfiguration(f"Learning rate must be positive, got {alpha}.")
        self.alpha = float(alpha)

    @abstractmethod
    def rate(self, step_index: int) -> float:
        """Learning rate for the ``step_index``-th update (0-based)."""


class ConstantDecay(DecayPolicy):
    """Constant learning rate."""

    def rate(self, step_index: int) -> float:
        return self.alpha


class StepDecay(DecayPolicy):
    """Multiply the rate by ``drop`` every ``steps_per_drop`` updates."""

    def __init__(self, alpha: float, drop: float = 0.5, steps_per_drop: int = 10):
        super().__init__(alpha)
        if not (0.0 < drop <= 1.0):
            raise InvalidConfiguration(f"drop must lie in (0, 1], got {drop}.")
        if steps_per_drop < 1:
            raise InvalidConfiguration(
                f"steps_per_drop must be >= 1, got {steps_per_drop}."
            )
        self.drop = float(drop)
        self.steps_per_drop = int(steps_per_drop)

    def rate(self, step_index: int) -> float:
        return self.alpha * self.drop ** (step_index // self.steps_per_drop)


class ExponentialDecay(DecayPolicy):
    """``alpha * exp(-decay * k)``."""

    def __init__(self, alpha: float, decay: float = 0.01):
        super().__init__(alpha)
        if decay < 0.0:
            raise InvalidConfiguration(f"decay must be >= 0, got {decay}.")
        self.decay = float(decay)

    def rate(self, step_index: int) -> float:
        return self.alpha * math.exp(-self.decay * step_index)


class UpdatePolicy(ABC):
    """Stateful parameter update rule.

    Args:
        alpha: Constant learning rate, used when ``decay`` is None.
        decay: Optional schedule; supersedes ``alpha``.
    """

    def __init__(self, alpha: float = 0.001, decay: Optional[DecayPolicy] = None):
        self.decay = decay if decay is not None else ConstantDecay(alpha)
        self.step_index = 0

    @property
    def alpha(self) -> float:
        return self.decay.alpha

    def reset(self) -> None:
        """Forget accumulated state and restart the schedule."""
        self.step_index = 0

    def update(self, params: Array, grad: Array, out: Optional[Array] = None) -> Array:
        """Write the updated parameters into ``out`` and return it.

        ``out`` defaults to ``params``, i.e. the update happens in place.
        """
        if out is None:
            out = params
        lr = self.decay.rate(self.step_index)
        self._apply(params, np.asarray(grad, dtype=float), lr, out)
        self.step_index += 1
        return out

    @abstractmethod
    def _apply(self, params: Array, grad: Array, lr: float, out: Array) -> None:
        ...


class VanillaUpdate(UpdatePolicy):
    """Plain gradient step ``w <- w - lr * grad``."""

    def _apply(self, params, grad, lr, out):
        np.subtract(params, lr * grad, out=out)


class MomentumUpdate(UpdatePolicy):
    """Heavy-ball momentum with an exponentially weighted velocity.

    Args:
        alpha: Constant learning rate, used when ``decay`` is None.
        mu: Momentum factor in ``[0, 1)``. ``mu = 0`` reduces to
            :class:`VanillaUpdate`.
        decay: Optional schedule; supersedes ``alpha``.
    """

    def __init__(
        self, alpha: float = 0.001, mu: float = 0.9, decay: Optional[DecayPolicy] = None
    ):
        super().__init__(alpha, decay)
        if not (0.0 <= mu < 1.0):
            raise InvalidConfiguration(f"mu must lie in [0, 1), got {mu}.")
        self.mu = float(mu)
        self.velocity: Optional[Array] = None

    def reset(self) -> None:
        super().reset()
        self.velocity = None

    def _apply(self, params, grad, lr, out):
        if self.velocity is None or self.velocity.shape != params.shape:
            self.velocity = np.zeros_like(params, dtype=float)
        self.velocity *= self.mu
        self.velocity -= lr * grad
        np.add(params, self.velocity, out=out)


__all__ = [
    "DecayPolicy",
    "ConstantDecay",
    "StepDecay",
    "ExponentialDecay",
    "UpdatePolicy",
    "VanillaUpdate",
    "MomentumUpdate",
]
