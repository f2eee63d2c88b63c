"""
batchode: Results IO
--------------------
Persist and load solve results using a predictable layout under each run
directory: ``result.npz`` for arrays and ``manifest.json`` for run metadata.

Behavior
--------
- Arrays are moved to the host and written with ``numpy.savez_compressed``;
  ``history`` is stored only when it was recorded.
- Scalar metadata (dt, steps, scheme, backend, strategy) is stored alongside
  the arrays so a result can be reconstructed without the manifest.
"""

import json
from pathlib import Path

import numpy as np

from ..core.errors import BatchODEIOError
from ..states.result import ResultBuffer

__all__ = [
    "save_result",
    "load_result",
    "save_manifest",
]

RESULT_FILE = "result.npz"
MANIFEST_FILE = "manifest.json"


def save_result(result: ResultBuffer, run_dir: str | Path, filename: str = RESULT_FILE) -> Path:
    """Save a result buffer to ``run_dir/<filename>`` as NPZ.

    Returns
    -------
    pathlib.Path
        Path to the written file.

    Raises
    ------
    BatchODEIOError
        - [103] Failed to save the NPZ due to an IO error.
    """
    host = result.to_numpy()
    payload = {
        "final": host.final,
        "dt": np.float64(host.dt),
        "steps": np.int64(host.steps),
        "scheme": np.str_(host.scheme),
        "backend": np.str_(host.backend),
        "strategy": np.str_(host.strategy),
        "record_every": np.int64(host.record_every or 0),
    }
    if host.history is not None:
        payload["history"] = host.history
    try:
        run_dir = Path(run_dir)
        run_dir.mkdir(parents=True, exist_ok=True)
        fpath = run_dir / filename
        np.savez_compressed(fpath, **payload)
    except OSError as e:
        raise BatchODEIOError(f"[103] Failed to save result: {e}") from e
    return fpath


def load_result(run_dir: str | Path, filename: str = RESULT_FILE) -> ResultBuffer:
    """Load a result saved by ``save_result`` as a NumPy-backed buffer.

    Raises
    ------
    BatchODEIOError
        - [101] Result file not found.
        - [102] Failed to parse or load the NPZ file.
    """
    fpath = Path(run_dir) / filename
    if not fpath.exists():
        raise BatchODEIOError(f"[101] Result file not found: {fpath}")
    try:
        with np.load(fpath) as npz:
            record_every = int(npz["record_every"])
            return ResultBuffer(
                final=npz["final"],
                dt=float(npz["dt"]),
                steps=int(npz["steps"]),
                scheme=str(npz["scheme"]),
                history=npz["history"] if "history" in npz.files else None,
                record_every=record_every or None,
                backend=str(npz["backend"]),
                strategy=str(npz["strategy"]),
            )
    except (OSError, KeyError, ValueError) as e:
        raise BatchODEIOError(f"[102] Failed to load result: {e}") from e


def save_manifest(run_dir: str | Path, manifest: dict) -> Path:
    """Write ``manifest.json`` with run information into ``run_dir``.

    Raises
    ------
    BatchODEIOError
        - [103] Failed to write the manifest.
    """
    try:
        run_dir = Path(run_dir)
        run_dir.mkdir(parents=True, exist_ok=True)
        fpath = run_dir / MANIFEST_FILE
        with open(fpath, "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=2, default=str)
    except (OSError, TypeError) as e:
        raise BatchODEIOError(f"[103] Failed to write manifest: {e}") from e
    return fpath
