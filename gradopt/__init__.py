"""gradopt - gradient-based optimizers for fitting linear models with NumPy."""

__version__ = "0.1.0"

from .logging import configure_logging, get_logger, set_log_level
from .losses import LeastSquaresLoss, LogisticLoss, PerceptronLoss
from .optimize import (
    LBFGS,
    SCD,
    SGD,
    InvalidConfiguration,
    LineSearchCondition,
    LineSearchExhausted,
    LineSearchParams,
    LineSearchPolicy,
    MomentumUpdate,
    NonDescentDirection,
    OptimizeResult,
    OptimizerConfig,
    OptimizerError,
    StepOutOfBounds,
    VanillaUpdate,
    create_optimizer,
)

__all__ = [
    "__version__",
    # Logging
    "configure_logging",
    "get_logger",
    "set_log_level",
    # Losses
    "LeastSquaresLoss",
    "LogisticLoss",
    "PerceptronLoss",
    # Optimizers
    "LBFGS",
    "SGD",
    "SCD",
    "OptimizeResult",
    "OptimizerConfig",
    "create_optimizer",
    "LineSearchCondition",
    "LineSearchParams",
    "LineSearchPolicy",
    "MomentumUpdate",
    "VanillaUpdate",
    # Errors
    "OptimizerError",
    "InvalidConfiguration",
    "NonDescentDirection",
    "StepOutOfBounds",
    "LineSearchExhausted",
]
