"""
batchode: Stepper Base
----------------------
Shared plumbing for fixed-step update rules: field evaluation with a shape
contract and the finiteness check applied to every produced state.

Behavior
--------
- ``_eval`` calls the field and rejects derivatives whose shape differs from
  the state block (``FieldContractError``) or that hold NaN/Inf values
  (``NonFiniteStateError``).
- ``_checked`` raises ``NonFiniteStateError`` naming the first offending row of
  the block; the integrator translates it to a global batch index.
- Subclasses implement ``_advance`` only and never mutate their inputs.
"""

from typing import Any, ClassVar

from ..core.errors import FieldContractError, NonFiniteStateError
from ..core.protocols import BackendBase as Backend
from ..core.protocols import VectorField

__all__ = [
    "StepperBase",
]


class StepperBase:
    """Base class for deterministic, stateless steppers.

    Attributes
    ----------
    name : str
        Canonical scheme name.
    order : int
        Global order of accuracy.
    n_evals : int
        Field evaluations per step.
    requires_even_dim : bool
        True for partitioned ``[q, p]`` schemes.
    """

    name: ClassVar[str] = ""
    order: ClassVar[int] = 0
    n_evals: ClassVar[int] = 0
    requires_even_dim: ClassVar[bool] = False

    def step(self, x: Any, field: VectorField, guidance: Any, dt: float, backend: Backend) -> Any:
        """Advance a block of states by one step.

        Parameters
        ----------
        x : Any
            State block with shape ``(rows, dim)``.
        field : VectorField
            Right-hand side evaluated as ``field(x, guidance)``.
        guidance : Any
            Auxiliary data passed unchanged to every evaluation.
        dt : float
            Positive step size.
        backend : Backend
            Active array backend.

        Returns
        -------
        Any
            New state block with the shape of ``x``.

        Raises
        ------
        FieldContractError
            [311] The field returned a derivative of the wrong shape.
        NonFiniteStateError
            [310] A derivative or the produced state holds NaN or infinite
            values.
        """
        return self._checked(self._advance(x, field, guidance, dt, backend), backend)

    def _advance(self, x: Any, field: VectorField, guidance: Any, dt: float, backend: Backend) -> Any:
        raise NotImplementedError

    def _eval(self, field: VectorField, x: Any, guidance: Any, backend: Backend) -> Any:
        dx = field(x, guidance)
        shape = getattr(dx, "shape", None)
        if shape is None or tuple(shape) != tuple(x.shape):
            raise FieldContractError(
                f"[311] Field returned shape {None if shape is None else tuple(shape)}, "
                f"expected {tuple(x.shape)}",
                scheme=self.name,
            )
        # Whole derivative, partitioned rules only keep half of it
        rows = backend.nonfinite_rows(dx)
        if rows:
            raise NonFiniteStateError(
                "[310] Non-finite derivative",
                batch_index=rows[0],
                scheme=self.name,
            )
        return dx

    def _checked(self, x_new: Any, backend: Backend) -> Any:
        rows = backend.nonfinite_rows(x_new)
        if rows:
            raise NonFiniteStateError(
                "[310] Non-finite state",
                batch_index=rows[0],
                scheme=self.name,
            )
        return x_new

    def __repr__(self) -> str:
        return f"{type(self).__name__}(order={self.order}, n_evals={self.n_evals})"
