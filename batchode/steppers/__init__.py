"""
batchode: Steppers Subpackage
-----------------------------
Fixed-step update rules registered under the ``scheme`` namespace on import.

Registry keys
-------------
`scheme:euler` | `scheme:midpoint` | `scheme:rk2` | `scheme:heun` |
`scheme:rk4` | `scheme:symplectic_euler` | `scheme:leapfrog` | `scheme:verlet`
"""

from .base import StepperBase
from .euler import Euler
from .runge_kutta import RK4, Heun, Midpoint
from .schemes import Scheme, SchemeRegistry, default_schemes
from .symplectic import Leapfrog, SymplecticEuler

__all__ = [
    "StepperBase",
    "Euler",
    "Midpoint",
    "Heun",
    "RK4",
    "SymplecticEuler",
    "Leapfrog",
    "Scheme",
    "SchemeRegistry",
    "default_schemes",
]
