"""Gradient-based optimizers for fitting parametric models.

Example
-------
>>> import numpy as np
>>> from gradopt.losses import LeastSquaresLoss
>>> from gradopt.optimize import LBFGS
>>> X = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
>>> y = np.array([1.0, 2.0, 3.0])
>>> res = LBFGS(np.zeros(2), LeastSquaresLoss(), tol=1e-10).optimize(X, y)
>>> np.round(res.x, 6)
array([1., 2.])
"""

from .core import Array, BaseOptimizer, LossFunction, OptimizeResult
from .errors import (
    InvalidConfiguration,
    LineSearchError,
    LineSearchExhausted,
    NonDescentDirection,
    OptimizerError,
    StepOutOfBounds,
)
from .factory import OptimizerConfig, create_optimizer
from .history import LBFGSHistory, ObjectiveWindow
from .lbfgs import LBFGS, two_loop
from .line_search import (
    BacktrackingLineSearch,
    BracketingLineSearch,
    LineSearch,
    LineSearchCondition,
    LineSearchParams,
    LineSearchPolicy,
    LineSearchResult,
    LineSearchState,
    create_line_search,
)
from .policies import (
    ConstantDecay,
    DecayPolicy,
    ExponentialDecay,
    MomentumUpdate,
    StepDecay,
    UpdatePolicy,
    VanillaUpdate,
)
from .scd import SCD, CoordinateStep, select_coordinate
from .sgd import SGD
from .utils import approx_grad, iter_batches, shuffle_data

__all__ = [
    "Array",
    "LossFunction",
    "OptimizeResult",
    "BaseOptimizer",
    # Errors
    "OptimizerError",
    "InvalidConfiguration",
    "LineSearchError",
    "NonDescentDirection",
    "StepOutOfBounds",
    "LineSearchExhausted",
    # Line search
    "LineSearchCondition",
    "LineSearchPolicy",
    "LineSearchParams",
    "LineSearchState",
    "LineSearchResult",
    "LineSearch",
    "BacktrackingLineSearch",
    "BracketingLineSearch",
    "create_line_search",
    # L-BFGS
    "LBFGS",
    "LBFGSHistory",
    "ObjectiveWindow",
    "two_loop",
    # SGD
    "SGD",
    "UpdatePolicy",
    "VanillaUpdate",
    "MomentumUpdate",
    "DecayPolicy",
    "ConstantDecay",
    "StepDecay",
    "ExponentialDecay",
    # SCD
    "SCD",
    "CoordinateStep",
    "select_coordinate",
    # Factory
    "OptimizerConfig",
    "create_optimizer",
    # Helpers
    "approx_grad",
    "iter_batches",
    "shuffle_data",
]
