"""
batchode: Execution Strategies
------------------------------
Injected parallel-for over the batch dimension. A strategy receives a row
kernel ``kernel(start, stop)`` that advances rows ``[start, stop)`` by one step
and decides how those ranges are scheduled.

Behavior
--------
- ``sequential`` runs one row at a time in order, intended for tests and
  debugging.
- ``vectorized`` hands the whole batch to the kernel as one block so the
  backend performs data-parallel work.
- ``threaded`` splits the batch into contiguous chunks executed on a
  ``ThreadPoolExecutor``. All chunks are joined before ``run`` returns; when
  several chunks fail, the error of the chunk with the lowest start row is
  raised.
- The stepping math is the same under every strategy; only the row blocking
  changes.

Registry keys
-------------
`strategy:sequential` | `strategy:vectorized` | `strategy:threaded`
"""

import os
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, ClassVar

from .core.errors import InvalidArgumentError
from .core.protocols import ExecutionStrategy, RowKernel
from .core.registry import registry, register

__all__ = [
    "SequentialStrategy",
    "VectorizedStrategy",
    "ThreadedStrategy",
    "get_strategy",
]


class _StrategyBase:
    name: ClassVar[str] = ""

    def run(self, kernel: RowKernel, n_rows: int) -> None:
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, *exc: Any) -> None:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


@register("strategy", "sequential")
class SequentialStrategy(_StrategyBase):
    """Advance one row per kernel call, in row order."""

    name = "sequential"

    def run(self, kernel: RowKernel, n_rows: int) -> None:
        for i in range(n_rows):
            kernel(i, i + 1)


@register("strategy", "vectorized")
class VectorizedStrategy(_StrategyBase):
    """Advance the whole batch in a single kernel call."""

    name = "vectorized"

    def run(self, kernel: RowKernel, n_rows: int) -> None:
        kernel(0, n_rows)


@register("strategy", "threaded")
class ThreadedStrategy(_StrategyBase):
    """Advance contiguous row chunks on a thread pool.

    Parameters
    ----------
    max_workers : int, optional
        Pool size; defaults to ``min(32, os.cpu_count() + 4)``.
    chunk_size : int, optional
        Rows per chunk; defaults to an even split across workers.

    Notes
    -----
    The pool lives between ``__enter__`` and ``__exit__``; the integrator opens
    it once per solve call. Calling ``run`` outside a ``with`` block creates a
    temporary pool for that call.
    """

    name = "threaded"

    def __init__(self, max_workers: int | None = None, chunk_size: int | None = None) -> None:
        if max_workers is not None and int(max_workers) < 1:
            raise InvalidArgumentError(f"[308] max_workers must be >= 1, got {max_workers}")
        if chunk_size is not None and int(chunk_size) < 1:
            raise InvalidArgumentError(f"[308] chunk_size must be >= 1, got {chunk_size}")
        self.max_workers = int(max_workers) if max_workers is not None else min(32, (os.cpu_count() or 1) + 4)
        self.chunk_size = int(chunk_size) if chunk_size is not None else None
        self._pool: ThreadPoolExecutor | None = None

    def __enter__(self) -> "ThreadedStrategy":
        self._pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="batchode")
        return self

    def __exit__(self, *exc: Any) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def chunks(self, n_rows: int) -> list[tuple[int, int]]:
        """Contiguous ``(start, stop)`` ranges covering ``[0, n_rows)``."""
        size = self.chunk_size or max(1, -(-n_rows // self.max_workers))
        return [(s, min(s + size, n_rows)) for s in range(0, n_rows, size)]

    def run(self, kernel: RowKernel, n_rows: int) -> None:
        if self._pool is None:
            with self:
                return self.run(kernel, n_rows)
        futures: list[tuple[int, Future]] = [
            (start, self._pool.submit(kernel, start, stop)) for start, stop in self.chunks(n_rows)
        ]
        wait([f for _, f in futures])
        for _, f in sorted(futures, key=lambda item: item[0]):
            err = f.exception()
            if err is not None:
                raise err

    def __repr__(self) -> str:
        return f"ThreadedStrategy(max_workers={self.max_workers}, chunk_size={self.chunk_size})"


def get_strategy(strategy: str | ExecutionStrategy, **kwargs: Any) -> ExecutionStrategy:
    """Return ``strategy`` unchanged when it is an instance, else create it by name.

    Raises
    ------
    InvalidArgumentError
        - [307] Unknown strategy name.
        - [308] Options rejected by the strategy constructor.
    """
    if not isinstance(strategy, str):
        return strategy
    if not registry.contains("strategy", strategy):
        available = ", ".join(sorted(registry.list("strategy")))
        raise InvalidArgumentError(f"[307] Unknown strategy '{strategy}'. Available: {available}")
    try:
        return registry.create(f"strategy:{strategy}", **kwargs)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"[308] Invalid options for strategy '{strategy}': {e}") from e
