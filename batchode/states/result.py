"""
batchode: Result Buffer
-----------------------
Owned output of one solve call: the final batch plus an optional recorded
history, in the backend's array type.

Behavior
--------
- ``final`` has exactly the shape of the input batch ``(n_traj, dim)``.
- ``history`` is ``(n_traj, n_keep, dim)`` when recording was requested, with
  ``n_keep = steps // record_every + 1`` and sample 0 equal to ``x0``.
- Nothing in the buffer aliases caller-owned arrays.
"""

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from ..core.xputil import to_numpy

__all__ = [
    "ResultBuffer",
]


@dataclass
class ResultBuffer:
    """Final states and optional history of a batch solve.

    Attributes
    ----------
    final : Any
        Final states, shape ``(n_traj, dim)``.
    dt : float
        Step size of the solve.
    steps : int
        Number of steps applied.
    scheme : str
        Canonical name of the stepper that ran.
    history : Any or None
        Recorded states ``(n_traj, n_keep, dim)`` or None.
    record_every : int or None
        Recording stride in steps.
    backend : str
        Backend identifier.
    strategy : str
        Execution strategy identifier.
    elapsed : float
        Wall-clock seconds spent in the step loop.
    meta : dict
        Free-form metadata carried into manifests.
    """

    final: Any
    dt: float
    steps: int
    scheme: str
    history: Any | None = None
    record_every: int | None = None
    backend: str = "numpy"
    strategy: str = "vectorized"
    elapsed: float = 0.0
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def n_traj(self) -> int:
        return int(self.final.shape[0])

    @property
    def dim(self) -> int:
        return int(self.final.shape[1])

    @property
    def n_keep(self) -> int:
        return 0 if self.history is None else int(self.history.shape[1])

    def times(self) -> np.ndarray:
        """Sample times ``k * dt * record_every`` of the recorded history.

        Raises
        ------
        ValueError
            No history was recorded.
        """
        if self.history is None or self.record_every is None:
            raise ValueError("No history recorded; pass record_every to solve()")
        return np.arange(self.n_keep, dtype=float) * (self.dt * self.record_every)

    def to_numpy(self) -> "ResultBuffer":
        """Host copy of the buffer with NumPy arrays."""
        return ResultBuffer(
            final=to_numpy(self.final),
            dt=self.dt,
            steps=self.steps,
            scheme=self.scheme,
            history=None if self.history is None else to_numpy(self.history),
            record_every=self.record_every,
            backend=self.backend,
            strategy=self.strategy,
            elapsed=self.elapsed,
            meta=dict(self.meta),
        )
