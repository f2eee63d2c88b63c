"""batchode: Core Protocols
------------------------
Minimal abstract interfaces shared across the package: array backends, vector
fields, steppers and execution strategies. This module is dependency-light and
must not import numpy, torch, or similar libraries.

Behavior
--------
- (*Design principles*) Keep interface surfaces minimal and stable; express
  only capabilities required by the integrator and place third-party
  dependencies in the backend modules.
- (*Mutation and purity*) Fields and steppers are pure: they never mutate
  their inputs and always return new arrays. Only the integrator writes into
  the buffers it owns.
- (*Thread-safety*) Fields, guidance and stepper instances are shared
  read-only across the workers of an execution strategy.
"""

from collections.abc import Callable
from typing import Any, ClassVar, Protocol, runtime_checkable

__all__ = [
    "BackendBase",
    "VectorField",
    "Stepper",
    "ExecutionStrategy",
    "RowKernel",
    "ProgressCallback",
]


class BackendBase(Protocol):
    """Minimal backend protocol for array creation and inspection.

    Concrete backends live under ``backends/`` and must implement the methods
    below. The integrator relies only on this interface.

    Methods
    -------
    backend_name() -> str
        Return backend identifier.
    device() -> Optional[str]
        Return device string when applicable (e.g., "cuda:0"), else None.
    capabilities() -> dict
        Report backend features for discovery.
    asarray(obj, dtype) / copy(x) / empty_like(x) / empty(shape, dtype)
        Array creation and conversion helpers.
    concatenate(arrays, axis=-1) -> Any
        Concatenate along a given axis.
    nonfinite_rows(x) -> list[int]
        Indices of rows of a 2-D array holding any NaN or infinite value.
    to_numpy(x) -> numpy.ndarray
        Host copy of an array for persistence and reporting.
    """

    def backend_name(self) -> str: ...
    def device(self) -> str | None: ...
    def capabilities(self) -> dict[str, Any]: ...

    def asarray(self, obj: Any, dtype: Any | None = None) -> Any: ...
    def empty(self, shape: tuple[int, ...], dtype: Any) -> Any: ...
    def empty_like(self, x: Any) -> Any: ...
    def copy(self, x: Any) -> Any: ...
    def concatenate(self, arrays: tuple[Any, ...], axis: int = -1) -> Any: ...

    def nonfinite_rows(self, x: Any) -> list[int]: ...
    def to_numpy(self, x: Any) -> Any: ...


@runtime_checkable
class VectorField(Protocol):
    """Caller-supplied right-hand side ``dx/dt = field(x, guidance)``.

    Parameters
    ----------
    x : Any
        Block of states with shape ``(rows, dim)`` in the backend array type.
    guidance : Any
        Auxiliary data fixed for the whole solve call. For per-trajectory
        guidance the block holds the rows matching ``x``.

    Returns
    -------
    Any
        Derivative with exactly the shape of ``x``.

    Notes
    -----
    Fields must be free of side effects: the integrator may call them from
    several threads and in any row order within a step.
    """

    def __call__(self, x: Any, guidance: Any) -> Any: ...


class Stepper(Protocol):
    """Protocol for single fixed-step update rules.

    Attributes
    ----------
    name : str
        Canonical scheme name.
    order : int
        Global order of accuracy.
    n_evals : int
        Field evaluations per step.
    requires_even_dim : bool
        True for partitioned schemes acting on ``[q, p]`` halves.
    """

    name: ClassVar[str]
    order: ClassVar[int]
    n_evals: ClassVar[int]
    requires_even_dim: ClassVar[bool]

    def step(self, x: Any, field: VectorField, guidance: Any, dt: float, backend: BackendBase) -> Any:
        """Return the state one step ahead without mutating ``x``."""
        ...


RowKernel = Callable[[int, int], None]
"""Kernel advancing rows ``[start, stop)`` of the batch by one step."""

ProgressCallback = Callable[[int, int, float], None]
"""Progress callback ``(step_done, steps_total, eta_seconds)``."""


class ExecutionStrategy(Protocol):
    """Policy mapping a row kernel over the batch dimension.

    Implementations must call ``kernel`` on disjoint row ranges covering
    ``[0, n_rows)`` exactly once and return only after every range has been
    processed. Strategies are context managers so that pooled resources live
    for one solve call.
    """

    name: ClassVar[str]

    def run(self, kernel: RowKernel, n_rows: int) -> None: ...
    def __enter__(self) -> "ExecutionStrategy": ...
    def __exit__(self, *exc: Any) -> None: ...
