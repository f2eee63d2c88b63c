"""
batchode: NumPy Backend
-----------------------
Reference CPU backend implementing the Backend protocol with NumPy arrays;
serves as the compatibility baseline for other backends.

Behavior
--------
- Provide NumPy-based array creation, joining and finiteness inspection
  consistent with the Backend protocol; semantics are documented by
  class/method docs.
"""

from typing import Any

import numpy as np

from ..core.protocols import BackendBase as Backend

__all__ = [
    "NumpyBackend",
]


class NumpyBackend(Backend):
    """NumPy implementation of the Backend protocol (CPU only).

    Methods
    -------
    backend_name() -> str
        Return backend identifier ("numpy").
    device() -> Optional[str]
        Return device (None for CPU).
    asarray/empty/empty_like/copy
        Array creation and conversion helpers.
    concatenate(arrays, axis) -> Any
        Join arrays along an existing axis.
    nonfinite_rows(x) -> list[int]
        Rows holding NaN or infinite values.
    to_numpy(x) -> numpy.ndarray
        Identity conversion.

    Examples
    --------
    >>> be = NumpyBackend()
    >>> be.nonfinite_rows(be.asarray([[1.0, 2.0], [float("nan"), 0.0]]))
    [1]
    """

    def backend_name(self) -> str:
        return "numpy"

    def device(self) -> str | None:
        return None

    def asarray(self, obj: Any, dtype: Any | None = None) -> Any:
        return np.asarray(obj, dtype=dtype) if dtype is not None else np.asarray(obj)

    def empty(self, shape: tuple[int, ...], dtype: Any) -> Any:
        return np.empty(shape, dtype=dtype)

    def empty_like(self, x: Any) -> Any:
        return np.empty_like(x)

    def copy(self, x: Any) -> Any:
        return np.copy(x)

    def concatenate(self, arrays: tuple[Any, ...], axis: int = -1) -> Any:
        return np.concatenate(arrays, axis=axis)

    def nonfinite_rows(self, x: Any) -> list[int]:
        finite = np.isfinite(x)
        if finite.all():
            return []
        return np.flatnonzero(~finite.reshape(finite.shape[0], -1).all(axis=1)).tolist()

    def to_numpy(self, x: Any) -> np.ndarray:
        return np.asarray(x)

    def capabilities(self) -> dict:
        return {
            "device": None,
            "threads_release_gil": True,
            "numpy": True,
        }
