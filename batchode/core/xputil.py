"""
batchode: Array Namespace Utilities
-----------------------------------
Helpers to select a NumPy-like array namespace for field code and to convert
arrays to NumPy when needed, keeping vector fields backend-agnostic.

Behavior
--------
- Expose ``get_xp`` and ``to_numpy``. Torch tensors are detected from their
  type without importing torch when the caller never created one.
"""

from types import SimpleNamespace
from typing import Any

import numpy as np

__all__ = [
    "get_xp",
    "to_numpy",
]


def _is_torch_tensor(arr: Any) -> bool:
    return type(arr).__module__.split(".", 1)[0] == "torch"


def get_xp(arr: Any):
    """Select a NumPy-like array namespace for a given array.

    Parameters
    ----------
    arr : Any
        ``numpy.ndarray`` or ``torch.Tensor``. Other inputs fall back to
        ``numpy``.

    Returns
    -------
    Any
        - A ``types.SimpleNamespace`` shim when ``arr`` is a PyTorch tensor,
          providing ``concatenate``.
        - ``numpy`` module otherwise.

    Examples
    --------
    >>> xp = get_xp(np.zeros((2, 2)))
    >>> xp is np
    True
    """
    if not _is_torch_tensor(arr):
        return np
    import torch as th

    return SimpleNamespace(
        concatenate=lambda arrays, axis=-1: th.cat(tuple(arrays), dim=axis),
    )


def to_numpy(x: Any) -> np.ndarray:
    """Convert a torch/numpy array to a NumPy ``ndarray``.

    Examples
    --------
    >>> to_numpy(np.array([1.0, 2.0])).tolist()
    [1.0, 2.0]
    """
    if _is_torch_tensor(x):
        return x.detach().cpu().numpy()
    return np.asarray(x)
