"""
batchode: Built-in Vector Fields
--------------------------------
Small library of vector fields used by jobs, examples and tests. Each field
is a frozen dataclass registered under the ``field`` namespace; the registry
builds an instance from the job parameters.

Behavior
--------
- Fields act on ``(rows, dim)`` blocks and return a new array of the same
  shape; they never mutate ``x`` or ``guidance``.
- Array functions go through ``get_xp`` so the same field runs on NumPy and
  PyTorch backends.

Registry keys
-------------
`field:linear_decay` | `field:goal_attractor` | `field:harmonic_oscillator` |
`field:van_der_pol`
"""

from dataclasses import dataclass
from typing import Any

from .core.registry import register
from .core.xputil import get_xp

__all__ = [
    "LinearDecay",
    "GoalAttractor",
    "HarmonicOscillator",
    "VanDerPol",
]


@register("field", "linear_decay")
@dataclass(frozen=True)
class LinearDecay:
    """``dx/dt = -rate * x``; guidance is ignored.

    Examples
    --------
    >>> import numpy as np
    >>> LinearDecay(rate=2.0)(np.array([[1.0, -1.0]]), None).tolist()
    [[-2.0, 2.0]]
    """

    rate: float = 1.0

    def __call__(self, x: Any, guidance: Any) -> Any:
        return -self.rate * x


@register("field", "goal_attractor")
@dataclass(frozen=True)
class GoalAttractor:
    """``dx/dt = gain * (goal - x)`` with the goal taken from guidance.

    Guidance may be a scalar, a ``(dim,)`` target shared by all trajectories,
    or ``(rows, dim)`` targets when solved with per-trajectory guidance.
    ``None`` means the origin.
    """

    gain: float = 1.0

    def __call__(self, x: Any, guidance: Any) -> Any:
        goal = 0.0 if guidance is None else guidance
        return self.gain * (goal - x)


@register("field", "harmonic_oscillator")
@dataclass(frozen=True)
class HarmonicOscillator:
    """Separable oscillator on ``[q, p]`` halves: ``dq = p / m``, ``dp = -k q``.

    Energy ``H = p^2 / (2 m) + k q^2 / 2`` is available via :meth:`energy`.
    """

    k: float = 1.0
    m: float = 1.0

    def __call__(self, x: Any, guidance: Any) -> Any:
        n = x.shape[-1] // 2
        q, p = x[:, :n], x[:, n:]
        return get_xp(x).concatenate((p / self.m, -self.k * q), axis=-1)

    def energy(self, x: Any) -> Any:
        n = x.shape[-1] // 2
        q, p = x[..., :n], x[..., n:]
        return (0.5 / self.m * p * p + 0.5 * self.k * q * q).sum(-1)


@register("field", "van_der_pol")
@dataclass(frozen=True)
class VanDerPol:
    """Van der Pol oscillator on ``[x, y]``: ``dx = y``, ``dy = mu (1 - x^2) y - x``."""

    mu: float = 1.0

    def __call__(self, x: Any, guidance: Any) -> Any:
        u, v = x[:, :1], x[:, 1:2]
        return get_xp(x).concatenate((v, self.mu * (1.0 - u * u) * v - u), axis=-1)
