"""
batchode: Backend Factory
-------------------------
Instantiate array backends by name via the central registry, enabling runtime
selection of the NumPy or PyTorch implementation.
"""

from typing import Any

from ..core.errors import BackendError, RegistryError
from ..core.protocols import BackendBase
from ..core.registry import registry

__all__ = [
    "get_backend",
    "resolve_backend",
]


def get_backend(name: str, **kwargs: Any) -> BackendBase:
    """Instantiate a backend by name via the central registry.

    Parameters
    ----------
    name : str
        Backend identifier, either the short name (``"numpy"``) or the fully
        qualified key (``"backend:numpy"``).
    **kwargs : Any
        Keyword arguments forwarded to the backend constructor (for example
        ``device="cpu"`` for the torch backend).

    Raises
    ------
    BackendError
        - [201] Unknown backend name.
        - [202] The backend module cannot be imported (missing dependency).

    Examples
    --------
    >>> get_backend("numpy").backend_name()
    'numpy'
    """
    full = name if ":" in name else f"backend:{name}"
    _, short = full.split(":", 1)
    if not registry.contains("backend", short):
        available = ", ".join(sorted(registry.list("backend")))
        raise BackendError(f"[201] Unsupported backend '{name}'. Available: {available}")
    try:
        return registry.create(full, **kwargs)
    except RegistryError as e:
        raise BackendError(f"[202] Backend '{name}' is unavailable: {e}") from e


def resolve_backend(backend: str | BackendBase) -> BackendBase:
    """Return ``backend`` unchanged when it is an instance, else look it up."""
    if isinstance(backend, str):
        return get_backend(backend)
    return backend
