"""Exceptions raised by the optimizers and line searches."""

from __future__ import annotations

from typing import Optional


class OptimizerError(Exception):
    """Base class for all gradopt optimization errors."""


class InvalidConfiguration(OptimizerError, ValueError):
    """Options are out of range, inconsistent, or name an unknown strategy.

    Raised at construction or at the start of a run, before any iteration.
    """


class LineSearchError(OptimizerError, RuntimeError):
    """A line search could not produce an acceptable step."""


class NonDescentDirection(LineSearchError):
    """The search direction does not decrease the objective."""

    def __init__(self, directional_derivative: float) -> None:
        self.directional_derivative = float(directional_derivative)
        super().__init__(
            "Search direction is not a descent direction "
            f"(d.g = {self.directional_derivative:.6g}, expected a finite negative value)."
        )


class StepOutOfBounds(LineSearchError):
    """The trial step left the ``[min_step, max_step]`` interval."""

    def __init__(self, step: float, bound: float, message: Optional[str] = None) -> None:
        self.step = float(step)
        self.bound = float(bound)
        if message is None:
            side = "smaller than the minimum" if self.step < self.bound else "larger than the maximum"
            message = (
                f"Line search step {self.step:.6g} became {side} "
                f"value allowed ({self.bound:.6g})."
            )
        super().__init__(message)


class LineSearchExhausted(LineSearchError):
    """The line search used up its trial budget."""

    def __init__(self, count: int) -> None:
        self.count = int(count)
        super().__init__(
            f"Line search reached the maximum number of trials ({self.count})."
        )


__all__ = [
    "OptimizerError",
    "InvalidConfiguration",
    "LineSearchError",
    "NonDescentDirection",
    "StepOutOfBounds",
    "LineSearchExhausted",
]
