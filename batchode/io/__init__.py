"""
batchode: IO Subpackage
-----------------------
Persistence of solve results under a run directory.
"""

from .results import load_result, save_manifest, save_result

__all__ = ["save_result", "load_result", "save_manifest"]
