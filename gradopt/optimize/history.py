"""Bounded ring buffers used by L-BFGS.

Both buffers preallocate a fixed arena and keep a write cursor plus a fill
count, so the oldest entry is overwritten once capacity is reached.
"""

from __future__ import annotations

from typing import Iterator

import numpy as np

from .core import Array
from .errors import InvalidConfiguration

CurvaturePair = tuple[Array, Array, float]

# Below this, 1 / (y . s) or the two-loop scaling s.y / y.y overflows.
_MIN_CURVATURE = np.finfo(float).tiny


class LBFGSHistory:
    """The last ``mem_size`` curvature pairs ``(s_k, y_k, rho_k)``.

    ``s_k = x_{k+1} - x_k``, ``y_k = g_{k+1} - g_k`` and
    ``rho_k = 1 / (y_k . s_k)``. Pairs whose ``y_k . s_k`` or ``y_k . y_k`` is
    not a positive normal float are rejected so the implicit inverse-Hessian
    approximation stays positive definite and finite.

    Example:
        >>> import numpy as np
        >>> hist = LBFGSHistory(mem_size=2, dim=1)
        >>> for k in range(3):
        ...     _ = hist.push(np.array([1.0 + k]), np.array([1.0]))
        >>> [float(s[0]) for s, _, _ in hist]
        [2.0, 3.0]
    """

    def __init__(self, mem_size: int, dim: int):
        if mem_size < 1:
            raise InvalidConfiguration(f"mem_size must be >= 1, got {mem_size}.")
        self.mem_size = int(mem_size)
        self.dim = int(dim)
        self._s = np.zeros((self.mem_size, self.dim))
        self._y = np.zeros((self.mem_size, self.dim))
        self._rho = np.zeros(self.mem_size)
        self._cursor = 0
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def _slot(self, i: int) -> int:
        """Arena index of the ``i``-th oldest stored pair."""
        return (self._cursor - self._count + i) % self.mem_size

    def push(self, s: Array, y: Array) -> bool:
        """Store a pair, evicting the oldest one when full.

        Returns:
            False if the pair was rejected because ``y . s`` or ``y . y`` is
            below the smallest normal float (non-positive curvature included).
        """
        ys = float(np.dot(y, s))
        yy = float(np.dot(y, y))
        if not (ys >= _MIN_CURVATURE and yy >= _MIN_CURVATURE):
            return False
        self._s[self._cursor] = s
        self._y[self._cursor] = y
        self._rho[self._cursor] = 1.0 / ys
        self._cursor = (self._cursor + 1) % self.mem_size
        self._count = min(self._count + 1, self.mem_size)
        return True

    def clear(self) -> None:
        self._cursor = 0
        self._count = 0

    def newest(self) -> CurvaturePair:
        if self._count == 0:
            raise IndexError("history is empty")
        return self[self._count - 1]

    def __getitem__(self, i: int) -> CurvaturePair:
        if not -self._count <= i < self._count:
            raise IndexError(f"history index {i} out of range")
        slot = self._slot(i % self._count)
        return self._s[slot], self._y[slot], float(self._rho[slot])

    def __iter__(self) -> Iterator[CurvaturePair]:
        """Oldest pair first."""
        for i in range(self._count):
            yield self[i]

    def newest_first(self) -> Iterator[CurvaturePair]:
        for i in reversed(range(self._count)):
            yield self[i]


class ObjectiveWindow:
    """The last ``size`` objective values, for lookback convergence tests."""

    def __init__(self, size: int):
        if size < 1:
            raise InvalidConfiguration(f"window size must be >= 1, got {size}.")
        self.size = int(size)
        self._values = np.zeros(self.size)
        self._cursor = 0
        self._count = 0

    def __len__(self) -> int:
        return self._count

    @property
    def full(self) -> bool:
        return self._count == self.size

    def push(self, value: float) -> None:
        self._values[self._cursor] = value
        self._cursor = (self._cursor + 1) % self.size
        self._count = min(self._count + 1, self.size)

    def oldest(self) -> float:
        """Value pushed ``len(self)`` pushes ago."""
        if self._count == 0:
            raise IndexError("window is empty")
        return float(self._values[(self._cursor - self._count) % self.size])


__all__ = ["CurvaturePair", "LBFGSHistory", "ObjectiveWindow"]
