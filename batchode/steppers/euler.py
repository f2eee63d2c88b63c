"""
batchode: Explicit Euler
------------------------
First-order explicit Euler rule ``x' = x + dt * f(x, g)``; the accuracy
baseline every other scheme is measured against.
"""

from typing import Any

from ..core.protocols import BackendBase as Backend
from ..core.protocols import VectorField
from ..core.registry import register
from .base import StepperBase

__all__ = [
    "Euler",
]


@register("scheme", "euler", tags=["explicit"])
class Euler(StepperBase):
    """Explicit (forward) Euler stepper.

    Examples
    --------
    >>> import numpy as np
    >>> from batchode.backends.numpy_backend import NumpyBackend
    >>> Euler().step(np.array([[1.0]]), lambda x, g: -x, None, 0.1, NumpyBackend())
    array([[0.9]])
    """

    name = "euler"
    order = 1
    n_evals = 1

    def _advance(self, x: Any, field: VectorField, guidance: Any, dt: float, backend: Backend) -> Any:
        return x + dt * self._eval(field, x, guidance, backend)
