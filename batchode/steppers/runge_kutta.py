"""
batchode: Explicit Runge-Kutta Steppers
---------------------------------------
Midpoint (RK2), Heun and classical fourth-order Runge-Kutta rules.

Behavior
--------
- Stages are evaluated left to right and combined with fixed weights so that
  identical inputs always give bit-identical outputs.
- ``rk2`` is registered as an alias of ``midpoint``.

References
----------
- Hairer, E., Norsett, S. P., & Wanner, G. (1993). Solving Ordinary
  Differential Equations I: Nonstiff Problems (2nd ed.). Springer.
"""

from typing import Any

from ..core.protocols import BackendBase as Backend
from ..core.protocols import VectorField
from ..core.registry import register
from .base import StepperBase

__all__ = [
    "Midpoint",
    "Heun",
    "RK4",
]


@register("scheme", "rk2", tags=["explicit", "alias"], alias_of="midpoint")
@register("scheme", "midpoint", tags=["explicit"])
class Midpoint(StepperBase):
    """Explicit midpoint rule ``x' = x + dt * f(x + dt/2 * k1, g)``."""

    name = "midpoint"
    order = 2
    n_evals = 2

    def _advance(self, x: Any, field: VectorField, guidance: Any, dt: float, backend: Backend) -> Any:
        k1 = self._eval(field, x, guidance, backend)
        k2 = self._eval(field, x + (0.5 * dt) * k1, guidance, backend)
        return x + dt * k2


@register("scheme", "heun", tags=["explicit"])
class Heun(StepperBase):
    """Heun's method (explicit trapezoid), second order."""

    name = "heun"
    order = 2
    n_evals = 2

    def _advance(self, x: Any, field: VectorField, guidance: Any, dt: float, backend: Backend) -> Any:
        k1 = self._eval(field, x, guidance, backend)
        k2 = self._eval(field, x + dt * k1, guidance, backend)
        return x + (0.5 * dt) * (k1 + k2)


@register("scheme", "rk4", tags=["explicit"])
class RK4(StepperBase):
    """Classical Runge-Kutta method with weights ``(1, 2, 2, 1) / 6``.

    Examples
    --------
    >>> import numpy as np
    >>> from batchode.backends.numpy_backend import NumpyBackend
    >>> x = RK4().step(np.array([[1.0]]), lambda x, g: -x, None, 0.1, NumpyBackend())
    >>> round(float(x[0, 0]), 9)
    0.9048375
    """

    name = "rk4"
    order = 4
    n_evals = 4

    def _advance(self, x: Any, field: VectorField, guidance: Any, dt: float, backend: Backend) -> Any:
        half = 0.5 * dt
        k1 = self._eval(field, x, guidance, backend)
        k2 = self._eval(field, x + half * k1, guidance, backend)
        k3 = self._eval(field, x + half * k2, guidance, backend)
        k4 = self._eval(field, x + dt * k3, guidance, backend)
        return x + (dt / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
