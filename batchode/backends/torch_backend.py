"""
batchode: PyTorch Backend
-------------------------
Backend implementing the Backend protocol with torch tensors for CPU/CUDA.
Fields written against the NumPy-like operators (``+``, ``*``, slicing) run
unchanged on this backend; fields that need array functions can select a
namespace with ``batchode.core.xputil.get_xp``.

Behavior
--------
- Arrays are created on the backend device; CUDA is used when available
  unless a device is passed explicitly.
- dtype names accepted by the integrator (``"float64"``, ``"float32"``) and
  NumPy dtypes are mapped to torch dtypes.

Notes
-----
- Requires PyTorch (``pip install batchode[torch]``). The module is registered
  lazily and only imported when the ``torch`` backend is requested.
"""

from typing import Any

import numpy as np
import torch

from ..core.protocols import BackendBase as Backend

__all__ = [
    "TorchBackend",
]

_DTYPES = {
    "float64": torch.float64,
    "float32": torch.float32,
    "float16": torch.float16,
}


def _to_torch_dtype(dtype: Any | None):
    """Map common Python/NumPy dtypes to torch dtypes (internal helper).

    Returns the input unchanged when it is already a torch dtype.
    """
    if dtype is None or isinstance(dtype, torch.dtype):
        return dtype
    if dtype is float:
        return torch.float64
    key = np.dtype(dtype).name
    if key not in _DTYPES:
        raise TypeError(f"Unsupported dtype for torch backend: {dtype!r}")
    return _DTYPES[key]


class TorchBackend(Backend):
    """PyTorch implementation of the Backend protocol (CPU/CUDA).

    Parameters
    ----------
    device : str, optional
        Torch device string such as ``"cpu"`` or ``"cuda:0"``. Defaults to the
        current CUDA device when available, else ``"cpu"``.

    Examples
    --------
    >>> be = TorchBackend(device="cpu")
    >>> x = be.asarray([[1.0, 2.0]], dtype="float64")
    >>> x.dtype
    torch.float64
    """

    def __init__(self, device: str | None = None) -> None:
        if device is None:
            device = f"cuda:{torch.cuda.current_device()}" if torch.cuda.is_available() else "cpu"
        self._device = torch.device(device)

    def backend_name(self) -> str:
        return "torch"

    def device(self) -> str | None:
        return str(self._device)

    # Array creation / conversion
    def asarray(self, obj: Any, dtype: Any | None = None) -> Any:
        return torch.as_tensor(obj, dtype=_to_torch_dtype(dtype), device=self._device)

    def empty(self, shape: tuple[int, ...], dtype: Any) -> Any:
        return torch.empty(shape, dtype=_to_torch_dtype(dtype), device=self._device)

    def empty_like(self, x: Any) -> Any:
        return torch.empty_like(x)

    def copy(self, x: Any) -> Any:
        return x.clone()

    def concatenate(self, arrays: tuple[Any, ...], axis: int = -1) -> Any:
        return torch.cat(arrays, dim=axis)

    def nonfinite_rows(self, x: Any) -> list[int]:
        finite = torch.isfinite(x).reshape(x.shape[0], -1).all(dim=1)
        if bool(finite.all()):
            return []
        return torch.nonzero(~finite).flatten().tolist()

    def to_numpy(self, x: Any) -> np.ndarray:
        if isinstance(x, torch.Tensor):
            return x.detach().cpu().numpy()
        return np.asarray(x)

    def capabilities(self) -> dict:
        return {
            "device": self.device(),
            "cuda": self._device.type == "cuda",
            "threads_release_gil": True,
            "torch": True,
        }
