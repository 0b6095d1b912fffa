"""Line-search strategies for quasi-Newton directions.

A line search receives an immutable :class:`LineSearchState` snapshot
``(x, fx, g, d, step)`` and returns a :class:`LineSearchResult` describing the
accepted trial point. Trial points are ``x + step * d``; the loss and its
gradient are re-evaluated at every trial.

Two strategies are provided, selected through :class:`LineSearchPolicy`:

* ``BACKTRACKING`` shrinks the step until the Armijo sufficient-decrease
  condition holds.
* ``BRACKETING`` shrinks or grows the step until the Armijo condition and,
  depending on :class:`LineSearchCondition`, the regular or strong Wolfe
  curvature condition hold.

References:
    Nocedal & Wright, *Numerical Optimization* (2006), Chapter 3.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np

from ..logging import get_logger
from .core import Array, LossFunction
from .errors import (
    InvalidConfiguration,
    LineSearchExhausted,
    NonDescentDirection,
    StepOutOfBounds,
)

logger = get_logger(__name__)


class LineSearchCondition(Enum):
    """Acceptance criterion used by the bracketing line search."""

    ARMIJO = "armijo"
    WOLFE = "wolfe"
    STRONG_WOLFE = "strong_wolfe"

    @classmethod
    def parse(cls, value: Union["LineSearchCondition", str]) -> "LineSearchCondition":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            supported = [member.name for member in cls]
            raise InvalidConfiguration(
                f"Unknown line search condition '{value}'. Supported: {supported}"
            ) from None


class LineSearchPolicy(Enum):
    """Available line-search strategies."""

    BACKTRACKING = "backtracking"
    BRACKETING = "bracketing"

    @classmethod
    def parse(cls, value: Union["LineSearchPolicy", str]) -> "LineSearchPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            supported = [member.value for member in cls]
            raise InvalidConfiguration(
                f"Cannot find line search policy '{value}'. Supported: {supported}"
            ) from None


@dataclass(frozen=True)
class LineSearchParams:
    """
    Line-search coefficients and limits.

    Args:
        ftol: Armijo sufficient-decrease coefficient, in ``(0, 0.5)``.
        wolfe: Curvature coefficient, in ``(ftol, 1)``.
        min_step: Smallest trial step allowed.
        max_step: Largest trial step allowed.
        decrease_factor: Factor applied when the step is too long, in ``(0, 1)``.
        increase_factor: Factor applied when the step is too short, ``> 1``.
        condition: Acceptance criterion for the bracketing search. Accepts a
            :class:`LineSearchCondition` or its name.
        max_linesearch: Maximum number of trials per search.
    """

    ftol: float = 1e-4
    wolfe: float = 0.9
    min_step: float = 1e-20
    max_step: float = 1e20
    decrease_factor: float = 0.5
    increase_factor: float = 2.1
    condition: LineSearchCondition = LineSearchCondition.WOLFE
    max_linesearch: int = 40

    def __post_init__(self) -> None:
        object.__setattr__(self, "condition", LineSearchCondition.parse(self.condition))
        if not (0.0 < self.ftol < 0.5):
            raise InvalidConfiguration(f"ftol must lie in (0, 0.5), got {self.ftol}.")
        if not (self.ftol < self.wolfe < 1.0):
            raise InvalidConfiguration(
                f"wolfe must lie in (ftol, 1), got wolfe={self.wolfe}, ftol={self.ftol}."
            )
        if not (0.0 < self.min_step < self.max_step):
            raise InvalidConfiguration(
                f"Require 0 < min_step < max_step, got "
                f"min_step={self.min_step}, max_step={self.max_step}."
            )
        if not (0.0 < self.decrease_factor < 1.0):
            raise InvalidConfiguration(
                f"decrease_factor must lie in (0, 1), got {self.decrease_factor}."
            )
        if self.increase_factor <= 1.0:
            raise InvalidConfiguration(
                f"increase_factor must be > 1, got {self.increase_factor}."
            )
        if self.max_linesearch < 1:
            raise InvalidConfiguration(
                f"max_linesearch must be >= 1, got {self.max_linesearch}."
            )


@dataclass(frozen=True)
class LineSearchState:
    """Snapshot handed to a line search: start point, its value and gradient,
    the search direction and the initial trial step."""

    x: Array
    fx: float
    g: Array
    d: Array
    step: float


@dataclass(frozen=True)
class LineSearchResult:
    """Accepted trial point and the number of loss evaluations it took."""

    step: float
    x: Array
    fx: float
    g: Array
    n_evals: int


class LineSearch(ABC):
    """Shared trial loop; subclasses decide how each trial is judged.

    Args:
        X: Feature matrix passed through to the loss.
        y: Targets passed through to the loss.
        loss: Loss function collaborator.
        params: Coefficients and limits. Defaults to :class:`LineSearchParams`.
    """

    def __init__(
        self,
        X: Array,
        y: Array,
        loss: LossFunction,
        params: Optional[LineSearchParams] = None,
    ):
        self.X = X
        self.y = y
        self.loss = loss
        self.params = params if params is not None else LineSearchParams()

    def search(self, state: LineSearchState) -> LineSearchResult:
        """Search along ``state.d`` starting from ``state.step``.

        Raises:
            InvalidConfiguration: If the initial step is not positive.
            NonDescentDirection: If ``d . g`` is not a finite negative number;
                the loss is not evaluated.
            StepOutOfBounds: If a rejected trial step lies outside
                ``[min_step, max_step]``.
            LineSearchExhausted: If ``max_linesearch`` trials were rejected.
        """
        if state.step <= 0.0:
            raise InvalidConfiguration(f"'step' must be positive, got {state.step}.")

        dg_init = float(np.dot(state.d, state.g))
        if not -np.inf < dg_init < 0.0:
            raise NonDescentDirection(dg_init)

        step = float(state.step)
        count = 0
        while True:
            x = state.x + step * state.d
            fx = float(self.loss.evaluate(self.X, self.y, x))
            g = np.asarray(self.loss.gradient(self.X, self.y, x), dtype=float)
            count += 1

            width = self._next_width(state, step, fx, g, dg_init)
            if width is None:
                logger.debug("accepted step=%.6g after %d trial(s), f=%.6g", step, count, fx)
                return LineSearchResult(step=step, x=x, fx=fx, g=g, n_evals=count)

            self._check_limits(step, count)
            logger.debug("rejected step=%.6g (f=%.6g), scaling by %.3g", step, fx, width)
            step *= width

    def _sufficient_decrease(
        self, state: LineSearchState, step: float, fx: float, dg_init: float
    ) -> bool:
        # Non-finite trial values count as a failed Armijo test.
        if not np.isfinite(fx):
            return False
        return fx <= state.fx + step * self.params.ftol * dg_init

    def _check_limits(self, step: float, count: int) -> None:
        params = self.params
        if step < params.min_step:
            raise StepOutOfBounds(step, params.min_step)
        if step > params.max_step:
            raise StepOutOfBounds(step, params.max_step)
        if count >= params.max_linesearch:
            raise LineSearchExhausted(count)

    @abstractmethod
    def _next_width(
        self,
        state: LineSearchState,
        step: float,
        fx: float,
        g: Array,
        dg_init: float,
    ) -> Optional[float]:
        """Return the factor for the next trial, or None to accept ``step``."""


class BacktrackingLineSearch(LineSearch):
    """Armijo backtracking: shrink until sufficient decrease holds."""

    def _next_width(self, state, step, fx, g, dg_init):
        if self._sufficient_decrease(state, step, fx, dg_init):
            return None
        return self.params.decrease_factor


class BracketingLineSearch(LineSearch):
    """Shrink/grow search enforcing Armijo plus an optional curvature test."""

    def _next_width(self, state, step, fx, g, dg_init):
        params = self.params
        if not self._sufficient_decrease(state, step, fx, dg_init):
            return params.decrease_factor
        if params.condition is LineSearchCondition.ARMIJO:
            return None

        dg = float(np.dot(state.d, g))
        if dg < params.wolfe * dg_init:
            return params.increase_factor
        if params.condition is LineSearchCondition.WOLFE:
            return None

        if dg > -params.wolfe * dg_init:
            return params.decrease_factor
        return None


_LINE_SEARCHES: dict[LineSearchPolicy, type[LineSearch]] = {
    LineSearchPolicy.BACKTRACKING: BacktrackingLineSearch,
    LineSearchPolicy.BRACKETING: BracketingLineSearch,
}


def create_line_search(
    policy: Union[LineSearchPolicy, str],
    X: Array,
    y: Array,
    loss: LossFunction,
    params: Optional[LineSearchParams] = None,
) -> LineSearch:
    """Instantiate the line search registered for ``policy``.

    Raises:
        InvalidConfiguration: If ``policy`` names no known strategy.
    """
    return _LINE_SEARCHES[LineSearchPolicy.parse(policy)](X, y, loss, params)


__all__ = [
    "LineSearchCondition",
    "LineSearchPolicy",
    "LineSearchParams",
    "LineSearchState",
    "LineSearchResult",
    "LineSearch",
    "BacktrackingLineSearch",
    "BracketingLineSearch",
    "create_line_search",
]
