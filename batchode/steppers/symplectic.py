"""
batchode: Symplectic Steppers
-----------------------------
Partitioned rules for states laid out as ``[q, p]`` halves, suited to
separable Hamiltonian systems where energy drift must stay bounded.

Behavior
--------
- The field is evaluated on the full state and returns the full derivative
  ``[dq, dp]``; each sub-step keeps only the half it needs.
- Both rules require an even state dimension; the integrator rejects odd
  dimensions before stepping.
- ``verlet`` is registered as an alias of ``leapfrog``.
"""

from typing import Any

from ..core.protocols import BackendBase as Backend
from ..core.protocols import VectorField
from ..core.registry import register
from .base import StepperBase

__all__ = [
    "SymplecticEuler",
    "Leapfrog",
]


def _split(x: Any) -> tuple[Any, Any, int]:
    n = x.shape[-1] // 2
    return x[:, :n], x[:, n:], n


@register("scheme", "symplectic_euler", tags=["symplectic"])
class SymplecticEuler(StepperBase):
    """Symplectic Euler: kick ``p`` at ``(q, p)``, then drift ``q`` at ``(q, p')``."""

    name = "symplectic_euler"
    order = 1
    n_evals = 2
    requires_even_dim = True

    def _advance(self, x: Any, field: VectorField, guidance: Any, dt: float, backend: Backend) -> Any:
        q, p, n = _split(x)
        p_new = p + dt * self._eval(field, x, guidance, backend)[:, n:]
        mid = backend.concatenate((q, p_new), axis=-1)
        q_new = q + dt * self._eval(field, mid, guidance, backend)[:, :n]
        return backend.concatenate((q_new, p_new), axis=-1)


@register("scheme", "verlet", tags=["symplectic", "alias"], alias_of="leapfrog")
@register("scheme", "leapfrog", tags=["symplectic"])
class Leapfrog(StepperBase):
    """Kick-drift-kick leapfrog (velocity Verlet), second order.

    Notes
    -----
    Three evaluations per step: the closing kick is not fused with the next
    step's opening kick, so each step depends only on its input state.
    """

    name = "leapfrog"
    order = 2
    n_evals = 3
    requires_even_dim = True

    def _advance(self, x: Any, field: VectorField, guidance: Any, dt: float, backend: Backend) -> Any:
        half = 0.5 * dt
        q, p, n = _split(x)
        p_half = p + half * self._eval(field, x, guidance, backend)[:, n:]
        q_new = q + dt * self._eval(field, backend.concatenate((q, p_half), axis=-1), guidance, backend)[:, :n]
        p_new = p_half + half * self._eval(field, backend.concatenate((q_new, p_half), axis=-1), guidance, backend)[:, n:]
        return backend.concatenate((q_new, p_new), axis=-1)
