"""
batchode: Batch Integrator
--------------------------
Fixed-step integration loop over a batch of independent trajectories with a
pluggable stepper, backend and execution strategy.

Behavior
--------
- Validate every argument before the first field evaluation; violations raise
  ``InvalidArgumentError`` and no work is performed.
- Resolve the scheme once per call (also when ``steps == 0``), then advance
  the owned state ``steps`` times. Each step reads one buffer and writes the
  other; buffers are swapped only after every row of the step is committed.
- Optionally record history every ``record_every`` steps, abort between steps
  when a wall-clock deadline elapses, and report progress with an EMA-based
  ETA.
- A stepper failure aborts the call; ``NonFiniteStateError`` and
  ``FieldContractError`` are re-raised with the step index, global batch
  index and scheme name. Partial results are never returned.

Notes
-----
- Deterministic by construction: no randomness, fixed stage order, and the
  same per-row arithmetic under every strategy.
"""

import math
import numbers
import time as _time
from functools import partial
from typing import Any

from ..states.result import ResultBuffer
from .errors import (
    DeadlineExceededError,
    InvalidArgumentError,
    StepError,
    get_logger,
)
from .protocols import BackendBase, ExecutionStrategy, ProgressCallback, Stepper, VectorField

__all__ = [
    "BatchIntegrator",
    "solve",
]


def _check_dt(dt: Any) -> float:
    if isinstance(dt, bool) or not isinstance(dt, numbers.Real):
        raise InvalidArgumentError(f"[300] dt must be a real number, got {dt!r}")
    dt = float(dt)
    if not math.isfinite(dt) or dt <= 0.0:
        raise InvalidArgumentError(f"[300] dt must be finite and > 0, got {dt!r}")
    return dt


def _check_count(value: Any, what: str, code: int, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidArgumentError(f"[{code}] {what} must be an integer, got {value!r}")
    value = int(value)
    if value < minimum:
        raise InvalidArgumentError(f"[{code}] {what} must be >= {minimum}, got {value}")
    return value


class BatchIntegrator:
    """Batched fixed-step ODE integrator.

    Parameters
    ----------
    backend : str or Backend, default "numpy"
        Array backend name or instance.
    strategy : str or ExecutionStrategy, default "vectorized"
        Execution strategy name or instance.
    dtype : Any, default "float64"
        Floating dtype of the owned state.
    schemes : SchemeRegistry, optional
        Scheme resolver; defaults to the process-wide registry.

    Examples
    --------
    >>> import numpy as np
    >>> integ = BatchIntegrator()
    >>> res = integ.solve(lambda x, g: -x, np.ones((2, 1)), None, 0.1, 1, "euler")
    >>> res.final.tolist()
    [[0.9], [0.9]]
    """

    def __init__(
        self,
        backend: str | BackendBase = "numpy",
        strategy: str | ExecutionStrategy = "vectorized",
        dtype: Any = "float64",
        schemes: Any | None = None,
    ) -> None:
        from ..backends.factory import resolve_backend
        from ..steppers.schemes import default_schemes
        from ..strategies import get_strategy

        self.backend = resolve_backend(backend)
        self.strategy = get_strategy(strategy)
        self.dtype = dtype
        self.schemes = default_schemes if schemes is None else schemes

    def __repr__(self) -> str:
        return (
            f"BatchIntegrator(backend={self.backend.backend_name()!r}, "
            f"strategy={self.strategy.name!r}, dtype={self.dtype!r})"
        )

    # --------------------------- validation ---------------------------
    def _prepare_batch(self, x0: Any) -> Any:
        be = self.backend
        try:
            x = be.asarray(x0, dtype=self.dtype)
        except (TypeError, ValueError, RuntimeError) as e:
            raise InvalidArgumentError(f"[302] x0 is not a rectangular numeric batch: {e}") from e
        if getattr(x, "ndim", 0) != 2:
            raise InvalidArgumentError(
                f"[302] x0 must be 2-D (n_traj, dim), got shape {tuple(getattr(x, 'shape', ()))}"
            )
        if x.shape[0] == 0 or x.shape[1] == 0:
            raise InvalidArgumentError(f"[303] x0 must be non-empty, got shape {tuple(x.shape)}")
        bad = be.nonfinite_rows(x)
        if bad:
            raise InvalidArgumentError(f"[304] x0 row {bad[0]} holds non-finite values")
        # Owned copy, never aliased with the caller's array
        return be.copy(x)

    @staticmethod
    def _check_guidance(guidance: Any, n_traj: int) -> None:
        shape = getattr(guidance, "shape", None)
        if shape is None or len(shape) == 0:
            raise InvalidArgumentError("[305] Per-trajectory guidance must be an array with a batch dimension")
        if int(shape[0]) != n_traj:
            raise InvalidArgumentError(
                f"[305] Per-trajectory guidance has leading dimension {shape[0]}, expected {n_traj}"
            )

    # --------------------------- solve ---------------------------
    def solve(
        self,
        field: VectorField,
        x0: Any,
        guidance: Any,
        dt: float,
        steps: int,
        scheme: Any,
        *,
        guidance_per_trajectory: bool = False,
        record_every: int | None = None,
        deadline: float | None = None,
        progress_cb: ProgressCallback | None = None,
        progress_interval_seconds: float = 1.0,
    ) -> ResultBuffer:
        """Integrate a batch of trajectories for a fixed number of steps.

        Parameters
        ----------
        field : VectorField
            Pure callable ``field(x, guidance) -> dx`` on ``(rows, dim)`` blocks.
        x0 : Any
            Initial batch ``(n_traj, dim)``; copied, never mutated.
        guidance : Any
            Opaque auxiliary data passed unchanged to every evaluation.
        dt : float
            Positive finite step size.
        steps : int
            Non-negative number of steps.
        scheme : str or Scheme
            Exact registered scheme name.
        guidance_per_trajectory : bool, default False
            When True, ``guidance`` is an array with leading dimension
            ``n_traj`` and each row block receives its matching rows.
        record_every : int, optional
            Record the state every ``record_every`` steps (sample 0 is ``x0``).
        deadline : float, optional
            Wall-clock budget in seconds, checked between steps.
        progress_cb : callable, optional
            ``(step_done, steps_total, eta_seconds)`` called periodically and
            once at completion.
        progress_interval_seconds : float, default 1.0
            Minimum wall time between periodic progress reports.

        Returns
        -------
        ResultBuffer
            Final batch (same shape as ``x0``) and optional history.

        Raises
        ------
        InvalidArgumentError
            [300-306] Invalid arguments; raised before any field evaluation.
        UnknownSchemeError
            [404] ``scheme`` is not registered.
        FieldContractError
            [311] The field returned a wrongly shaped derivative; carries
            ``step``, ``batch_index`` (first row of the failing block) and
            ``scheme``.
        NonFiniteStateError
            [310] A derivative or state held NaN/Inf; carries ``step``,
            ``batch_index`` and ``scheme``.
        DeadlineExceededError
            [320] The deadline elapsed between two steps.
        """
        dt = _check_dt(dt)
        steps = _check_count(steps, "steps", 301, 0)
        if record_every is not None:
            record_every = _check_count(record_every, "record_every", 306, 1)
        if deadline is not None and not (isinstance(deadline, numbers.Real) and deadline > 0):
            raise InvalidArgumentError(f"[306] deadline must be a positive number of seconds, got {deadline!r}")
        x = self._prepare_batch(x0)
        n_traj, dim = int(x.shape[0]), int(x.shape[1])
        if guidance_per_trajectory:
            self._check_guidance(guidance, n_traj)

        stepper: Stepper = self.schemes.resolve(scheme)
        if stepper.requires_even_dim and dim % 2:
            raise InvalidArgumentError(f"[303] Scheme '{stepper.name}' requires an even state dimension, got {dim}")

        be = self.backend
        log = get_logger()
        log.debug(
            f"solve: scheme={stepper.name} n_traj={n_traj} dim={dim} dt={dt} steps={steps} "
            f"backend={be.backend_name()} strategy={self.strategy.name}"
        )

        history = None
        if record_every is not None:
            history = be.empty((n_traj, steps // record_every + 1, dim), dtype=x.dtype)
            history[:, 0, :] = x
        keep_counter = 1

        cur, nxt = x, be.empty_like(x)

        def _advance(step_idx: int, start: int, stop: int) -> None:
            g = guidance[start:stop] if guidance_per_trajectory else guidance
            try:
                nxt[start:stop] = stepper.step(cur[start:stop], field, g, dt, be)
            except StepError as e:
                row = start + (e.batch_index or 0)
                raise type(e)(
                    f"{e} at step {step_idx}, batch index {row}, scheme '{stepper.name}'",
                    step=step_idx,
                    batch_index=row,
                    scheme=stepper.name,
                ) from e

        # Progress tracking state
        start_time = _time.monotonic()
        last_report_step = 0
        last_report_time = start_time
        next_report_time = start_time + max(0.1, float(progress_interval_seconds))
        s_ema = None  # seconds per step (EMA)
        alpha = 0.2

        with self.strategy as strategy:
            for k in range(steps):
                if deadline is not None and _time.monotonic() - start_time > deadline:
                    raise DeadlineExceededError(
                        f"[320] Deadline of {deadline}s exceeded after {k} of {steps} steps", step=k
                    )
                strategy.run(partial(_advance, k), n_traj)
                cur, nxt = nxt, cur

                done = k + 1
                if history is not None and done % record_every == 0:
                    history[:, keep_counter, :] = cur
                    keep_counter += 1

                if progress_cb is not None and done < steps:
                    now = _time.monotonic()
                    if now >= next_report_time:
                        s_inst = (now - last_report_time) / (done - last_report_step)
                        s_ema = s_inst if s_ema is None else alpha * s_inst + (1.0 - alpha) * s_ema
                        last_report_step, last_report_time = done, now
                        next_report_time = now + max(0.1, float(progress_interval_seconds))
                        self._report(progress_cb, done, steps, (steps - done) * s_ema)

        elapsed = _time.monotonic() - start_time
        if progress_cb is not None:
            self._report(progress_cb, steps, steps, 0.0)

        return ResultBuffer(
            final=cur,
            dt=dt,
            steps=steps,
            scheme=stepper.name,
            history=history,
            record_every=record_every,
            backend=be.backend_name(),
            strategy=self.strategy.name,
            elapsed=elapsed,
        )

    @staticmethod
    def _report(progress_cb: ProgressCallback, done: int, total: int, eta: float) -> None:
        try:
            progress_cb(done, total, eta)
        except Exception as e:
            # Progress reporting never aborts the integration
            get_logger().warning(f"[930] progress callback raised {type(e).__name__}: {e}")


def solve(
    field: VectorField,
    x0: Any,
    guidance: Any,
    dt: float,
    steps: int,
    scheme: Any,
    *,
    backend: str | BackendBase = "numpy",
    strategy: str | ExecutionStrategy = "vectorized",
    dtype: Any = "float64",
    **kwargs: Any,
) -> ResultBuffer:
    """Convenience wrapper building a ``BatchIntegrator`` for one call.

    Keyword arguments beyond ``backend``, ``strategy`` and ``dtype`` are
    forwarded to :meth:`BatchIntegrator.solve`.

    Examples
    --------
    >>> import numpy as np
    >>> solve(lambda x, g: -x, np.array([[1.0]]), None, 0.1, 0, "euler").final.tolist()
    [[1.0]]
    """
    return BatchIntegrator(backend=backend, strategy=strategy, dtype=dtype).solve(
        field, x0, guidance, dt, steps, scheme, **kwargs
    )
