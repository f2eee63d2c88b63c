"""
batchode
--------
Batched fixed-step ODE integration with pluggable schemes, array backends and
execution strategies.

Examples
--------
>>> import numpy as np
>>> import batchode
>>> res = batchode.solve(lambda x, g: -x, np.ones((4, 1)), None, 0.01, 100, "rk4")
>>> res.final.shape
(4, 1)
"""

from . import backends, fields, strategies  # noqa: F401  (registration on import)
from .core.errors import (
    BatchODEError,
    DeadlineExceededError,
    FieldContractError,
    InvalidArgumentError,
    NonFiniteStateError,
    UnknownSchemeError,
)
from .core.integrator import BatchIntegrator, solve
from .core.protocols import VectorField
from .states.result import ResultBuffer
from .steppers import Scheme, SchemeRegistry

__version__ = "0.1.0"

__all__ = [
    "solve",
    "BatchIntegrator",
    "Scheme",
    "SchemeRegistry",
    "ResultBuffer",
    "VectorField",
    "BatchODEError",
    "InvalidArgumentError",
    "UnknownSchemeError",
    "NonFiniteStateError",
    "FieldContractError",
    "DeadlineExceededError",
    "__version__",
]
