"""Factory for creating optimizers from a flat set of named options."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Optional, Union

import numpy as np

from .core import Array, BaseOptimizer, LossFunction
from .errors import InvalidConfiguration
from .lbfgs import LBFGS
from .line_search import LineSearchParams, LineSearchPolicy
from .policies import MomentumUpdate, VanillaUpdate
from .scd import SCD
from .sgd import SGD

_SUPPORTED = ("lbfgs", "sgd", "scd")

# Option spellings accepted by from_options that differ from field names.
_ALIASES = {"lambda": "lambda_"}


@dataclass(frozen=True)
class OptimizerConfig:
    """
    Configuration for creating an optimizer.

    Options that do not apply to the selected optimizer are ignored by it.

    Args:
        name: Optimizer name. Supported values: "lbfgs", "sgd", "scd".
        max_iter: Iteration budget (epochs for SGD). Defaults to 100.
        tol: Convergence tolerance. Defaults to 1e-5.
        shuffle: Shuffle samples every iteration (SGD, SCD). Defaults to True.
        verbose: Log progress at INFO. Defaults to False.
        mem_size: LBFGS history size. Defaults to 8.
        past: LBFGS lookback distance for the relative-decrease test.
            Defaults to 3.
        delta: LBFGS relative-decrease threshold. Defaults to 1e-6.
        linesearch_policy: "backtracking" or "bracketing". Defaults to
            "backtracking".
        linesearch_params: LBFGS line-search coefficients. Defaults to None,
            which uses :class:`LineSearchParams` defaults.
        batch_size: SGD mini-batch size. Defaults to 1.
        alpha: SGD learning rate. Must be positive. Defaults to 0.001.
        momentum: SGD momentum factor; a positive value selects
            :class:`MomentumUpdate`. Defaults to 0.0.
        rho: SCD curvature estimate. Must be positive. Defaults to 1.0.
        lambda_: SCD L1 regularization strength. Defaults to 0.001.
    """

    name: str
    max_iter: int = 100
    tol: float = 1e-5
    shuffle: bool = True
    verbose: bool = False
    mem_size: int = 8
    past: int = 3
    delta: float = 1e-6
    linesearch_policy: Union[LineSearchPolicy, str] = LineSearchPolicy.BACKTRACKING
    linesearch_params: Optional[LineSearchParams] = None
    batch_size: int = 1
    alpha: float = 0.001
    momentum: float = 0.0
    rho: float = 1.0
    lambda_: float = 0.001

    def __post_init__(self) -> None:
        """Validate option ranges and normalize names."""
        name = self.name.lower() if isinstance(self.name, str) else self.name
        if name not in _SUPPORTED:
            raise InvalidConfiguration(
                f"Unsupported optimizer name '{self.name}'. "
                f"Supported names: {list(_SUPPORTED)}"
            )
        object.__setattr__(self, "name", name)
        object.__setattr__(
            self, "linesearch_policy", LineSearchPolicy.parse(self.linesearch_policy)
        )
        if self.max_iter < 0:
            raise InvalidConfiguration(f"max_iter must be >= 0, got {self.max_iter}.")
        if self.tol < 0.0:
            raise InvalidConfiguration(f"tol must be >= 0, got {self.tol}.")
        if self.alpha <= 0.0:
            raise InvalidConfiguration("Learning rate must be positive.")
        if not (0.0 <= self.momentum < 1.0):
            raise InvalidConfiguration(
                f"momentum must lie in [0, 1), got {self.momentum}."
            )

    @classmethod
    def from_options(cls, name: str, **options: Any) -> "OptimizerConfig":
        """Build a config from flat keyword options.

        ``lambda`` is accepted as an alias of ``lambda_``.

        Example:
            >>> cfg = OptimizerConfig.from_options("scd", **{"lambda": 0.1, "rho": 2.0})
            >>> cfg.lambda_
            0.1
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in options.items():
            key = _ALIASES.get(key, key)
            if key not in known:
                raise InvalidConfiguration(f"Unknown optimizer option '{key}'.")
            kwargs[key] = value
        return cls(name=name, **kwargs)


def create_optimizer(
    config: OptimizerConfig,
    x0: Array,
    loss: LossFunction,
    rng: Optional[np.random.Generator] = None,
) -> BaseOptimizer:
    """
    Create an optimizer from a configuration.

    Args:
        config: Optimizer configuration.
        x0: Initial parameter vector.
        loss: Loss function collaborator.
        rng: Random generator used for shuffling (SGD, SCD).

    Returns:
        An :class:`LBFGS`, :class:`SGD` or :class:`SCD` instance.

    Raises:
        InvalidConfiguration: If an option is out of range for the selected
            optimizer.
    """
    if config.name == "lbfgs":
        return LBFGS(
            x0,
            loss,
            linesearch_params=config.linesearch_params,
            linesearch_policy=config.linesearch_policy,
            max_iter=config.max_iter,
            mem_size=config.mem_size,
            past=config.past,
            tol=config.tol,
            delta=config.delta,
            shuffle=config.shuffle,
            verbose=config.verbose,
        )
    if config.name == "sgd":
        if config.momentum > 0.0:
            policy = MomentumUpdate(config.alpha, mu=config.momentum)
        else:
            policy = VanillaUpdate(config.alpha)
        return SGD(
            x0,
            loss,
            update_policy=policy,
            max_iter=config.max_iter,
            batch_size=config.batch_size,
            tol=config.tol,
            shuffle=config.shuffle,
            verbose=config.verbose,
            rng=rng,
        )
    return SCD(
        x0,
        loss,
        max_iter=config.max_iter,
        rho=config.rho,
        lambda_=config.lambda_,
        tol=config.tol,
        shuffle=config.shuffle,
        verbose=config.verbose,
        rng=rng,
    )


__all__ = ["OptimizerConfig", "create_optimizer"]
