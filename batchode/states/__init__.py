"""
batchode: States Subpackage
---------------------------
Owned output containers returned by the integrator.
"""

from .result import ResultBuffer

__all__ = ["ResultBuffer"]
