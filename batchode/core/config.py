"""
batchode: Job Configuration Models
----------------------------------
Pydantic models describing a batch-solve job as read from YAML, plus the
loader and the conversion of YAML values into backend arrays.

Public API
----------
``FieldSpec`` : Vector field selection by registry name or dotted target
``SolveConfig`` : Step parameters, scheme, backend and strategy
``JobConfig`` : Root job model (field, x0, guidance, solve, output_dir)
``load_job`` : Parse a YAML file into a ``JobConfig``

Notes
-----
- This is the boundary layer: x0 and guidance are validated and converted
  here before they reach the integrator.
"""

from pathlib import Path
from typing import Any

import numpy as np
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .errors import ConfigError, RegistryError
from .registry import import_target, registry

__all__ = [
    "FieldSpec",
    "SolveConfig",
    "JobConfig",
    "load_job",
]


class FieldSpec(BaseModel):
    """Vector field selection.

    Exactly one of ``name`` (a registered built-in) or ``target`` (a dotted
    ``module:attr`` path) must be given. With ``params`` the target is called
    as a factory ``target(**params)``; without, it is used as the field.
    """

    name: str | None = Field(default=None, description="Registered field name, e.g. 'linear_decay'.")
    target: str | None = Field(default=None, description="Dotted path 'pkg.module:attr' to a field or factory.")
    params: dict[str, Any] = Field(default_factory=dict, description="Keyword arguments for the field factory.")

    @model_validator(mode="after")
    def _one_source(self) -> "FieldSpec":
        if (self.name is None) == (self.target is None):
            raise ValueError("field requires exactly one of 'name' or 'target'")
        return self

    def build(self) -> Any:
        """Instantiate the field.

        Raises
        ------
        ConfigError
            [504] The field cannot be resolved or built.
        """
        try:
            if self.name is not None:
                if not registry.contains("field", self.name):
                    available = ", ".join(sorted(registry.list("field")))
                    raise ConfigError(f"[504] Unknown field '{self.name}'. Available: {available}")
                fn = registry.create(f"field:{self.name}", **self.params)
            else:
                obj = import_target(self.target)
                fn = obj(**self.params) if self.params else obj
        except (RegistryError, TypeError) as e:
            raise ConfigError(f"[504] Cannot build field: {e}") from e
        if not callable(fn):
            raise ConfigError(f"[504] Field '{self.name or self.target}' is not callable")
        return fn


class SolveConfig(BaseModel):
    """Step parameters and execution choices for one solve call."""

    scheme: str = Field(description="Exact registered scheme name; there is no default.")
    dt: float = Field(description="Positive step size.")
    steps: int = Field(description="Number of steps (>= 0).")
    backend: str = Field(default="numpy", description="Array backend name.")
    strategy: str = Field(default="vectorized", description="Execution strategy name.")
    strategy_options: dict[str, Any] = Field(
        default_factory=dict, description="Keyword arguments for the strategy, e.g. max_workers."
    )
    dtype: str = Field(default="float64", description="Floating dtype of the state.")
    record_every: int | None = Field(default=None, description="History stride in steps.")
    deadline: float | None = Field(default=None, description="Wall-clock budget in seconds.")
    guidance_per_trajectory: bool = Field(
        default=False, description="Slice guidance rows per trajectory block."
    )

    @field_validator("dt")
    @classmethod
    def validate_dt(cls, v: float) -> float:
        if not np.isfinite(v) or v <= 0:
            raise ValueError("dt must be finite and > 0")
        return v

    @field_validator("steps")
    @classmethod
    def validate_steps(cls, v: int) -> int:
        if v < 0:
            raise ValueError("steps must be >= 0")
        return v

    @field_validator("record_every")
    @classmethod
    def validate_record_every(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("record_every must be >= 1")
        return v


class JobConfig(BaseModel):
    """Root job configuration.

    Attributes
    ----------
    name : str
        Job name, used for the run directory.
    field : FieldSpec
        Vector field selection.
    x0 : list
        A single state ``[..]`` broadcast to ``n_traj`` rows, or a batch
        ``[[..], ..]``.
    n_traj : int or None
        Number of trajectories when ``x0`` is a single state.
    guidance : Any
        Scalar, list (converted to an array) or null.
    solve : SolveConfig
        Step parameters.
    output_dir : str
        Parent directory of run folders.
    """

    name: str = Field(default="job", description="Job name.")
    field: FieldSpec
    x0: list[float] | list[list[float]] = Field(description="Initial state or batch.")
    n_traj: int | None = Field(default=None, description="Trajectories when x0 is a single state.")
    guidance: Any = Field(default=None, description="Opaque guidance passed to the field.")
    solve: SolveConfig
    output_dir: str = Field(default="./runs", description="Parent directory for run folders.")

    @field_validator("name", "output_dir")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("value cannot be empty")
        return v

    @field_validator("n_traj")
    @classmethod
    def validate_n_traj(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("n_traj must be >= 1")
        return v

    def build_batch(self, backend: Any) -> Any:
        """Return x0 as a ``(n_traj, dim)`` backend array.

        Raises
        ------
        ConfigError
            [505] ``x0`` is ragged or ``n_traj`` conflicts with its rows.
        """
        try:
            x0 = np.asarray(self.x0, dtype=self.solve.dtype)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"[505] x0 is not a rectangular batch: {e}") from e
        if x0.ndim == 1:
            x0 = np.tile(x0, (self.n_traj or 1, 1))
        elif self.n_traj is not None and self.n_traj != x0.shape[0]:
            raise ConfigError(f"[505] n_traj={self.n_traj} but x0 has {x0.shape[0]} rows")
        return backend.asarray(x0, dtype=self.solve.dtype)

    def build_guidance(self, backend: Any) -> Any:
        """Convert list guidance to a backend array; other values pass through."""
        if isinstance(self.guidance, list):
            return backend.asarray(np.asarray(self.guidance, dtype=self.solve.dtype), dtype=self.solve.dtype)
        return self.guidance


def load_job(path: str | Path) -> JobConfig:
    """Load and validate a job YAML file.

    Raises
    ------
    ConfigError
        - [501] File not found.
        - [502] YAML cannot be parsed or is not a mapping.
        - [503] Schema validation failed.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"[501] Job file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"[502] Failed to parse YAML {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"[502] Job file {path} must contain a mapping")
    try:
        return JobConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"[503] Invalid job configuration in {path}: {e}") from e
