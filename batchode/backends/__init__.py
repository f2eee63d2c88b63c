"""
batchode: Backends Subpackage
-----------------------------
Array backends implementing the minimal Backend protocol across CPU/GPU.
Registrations are lazy to avoid importing heavy deps until needed.

Registry keys
-------------
`backend:numpy` | `backend:np` | `backend:torch` | `backend:pt`

Factory
-------
>>> from batchode.backends.factory import get_backend
>>> be = get_backend("numpy")
"""

from ..core.registry import namespaced

register, register_lazy = namespaced("backend")

register_lazy("numpy", "batchode.backends.numpy_backend:NumpyBackend", tags=["builtin"])
register_lazy("np", "batchode.backends.numpy_backend:NumpyBackend", tags=["builtin", "alias"])

# PyTorch backend (CPU/CUDA), optional dependency
register_lazy("torch", "batchode.backends.torch_backend:TorchBackend", tags=["builtin", "torch"])
register_lazy("pt", "batchode.backends.torch_backend:TorchBackend", tags=["builtin", "torch", "alias"])

__all__ = []
