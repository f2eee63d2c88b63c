"""
batchode: CLI Entry Point
-------------------------
Typer application behind the ``batchode`` console script.

Commands
--------
``run`` : Execute a YAML job and write ``result.npz`` plus ``manifest.json``
``schemes`` : List registered schemes with order and evaluation count
``backends`` : List registered array backends
"""

import math
import sys
from datetime import datetime
from pathlib import Path

import typer

from .backends.factory import get_backend
from .core.config import JobConfig, load_job
from .core.errors import BatchODEError, configure_logging, get_logger
from .core.integrator import BatchIntegrator
from .core.registry import registry
from .io.results import save_manifest, save_result
from .states.result import ResultBuffer
from .steppers.schemes import default_schemes
from .strategies import get_strategy

app = typer.Typer(help="batchode: batched fixed-step ODE integration")


@app.callback()
def main():
    """batchode command line interface."""
    pass


def run_job(job: JobConfig, output_dir: Path | None = None) -> tuple[ResultBuffer, Path]:
    """Execute a job and persist its result; return the buffer and run directory."""
    log = get_logger()
    cfg = job.solve
    backend = get_backend(cfg.backend)
    strategy = get_strategy(cfg.strategy, **cfg.strategy_options)
    integrator = BatchIntegrator(backend=backend, strategy=strategy, dtype=cfg.dtype)

    field = job.field.build()
    x0 = job.build_batch(backend)
    guidance = job.build_guidance(backend)

    def _progress(done: int, total: int, eta: float) -> None:
        eta_txt = "--" if math.isnan(eta) else f"{eta:.1f}s"
        log.info(f"[{job.name}] step {done}/{total} eta {eta_txt}")

    log.info(
        f"Running job '{job.name}': scheme={cfg.scheme} n_traj={x0.shape[0]} dim={x0.shape[1]} "
        f"dt={cfg.dt} steps={cfg.steps} backend={cfg.backend} strategy={cfg.strategy}"
    )
    result = integrator.solve(
        field,
        x0,
        guidance,
        cfg.dt,
        cfg.steps,
        cfg.scheme,
        guidance_per_trajectory=cfg.guidance_per_trajectory,
        record_every=cfg.record_every,
        deadline=cfg.deadline,
        progress_cb=_progress,
    )

    stamp = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
    run_dir = Path(output_dir or job.output_dir) / f"{job.name}_{stamp}"
    save_result(result, run_dir)
    save_manifest(
        run_dir,
        {
            "job": job.model_dump(mode="json"),
            "scheme": result.scheme,
            "backend": result.backend,
            "device": backend.device(),
            "strategy": result.strategy,
            "n_traj": result.n_traj,
            "dim": result.dim,
            "elapsed_seconds": result.elapsed,
            "created_at": datetime.now().isoformat(),
        },
    )
    log.info(f"Job '{job.name}' finished in {result.elapsed:.3f}s -> {run_dir}")
    return result, run_dir


@app.command()
def run(
    job_file: Path = typer.Argument(..., help="Path to a job YAML file"),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Override output_dir"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: str | None = typer.Option(None, help="Write logs to file path"),
    log_json: bool = typer.Option(False, help="Log in JSON format"),
    suppress_warnings: bool = typer.Option(False, help="Suppress warnings output"),
):
    """Run a batch-solve job described by JOB_FILE.

    Job file format:
        name: decay
        field: {name: linear_decay, params: {rate: 1.0}}
        x0: [1.0]
        n_traj: 4
        solve: {scheme: rk4, dt: 0.01, steps: 100}
    """
    configure_logging(
        verbose=verbose,
        log_file=log_file,
        as_json=log_json,
        suppress_warnings=suppress_warnings,
    )
    log = get_logger()
    try:
        job = load_job(job_file)
        # Make modules next to the job file importable for dotted field targets
        job_dir = str(job_file.resolve().parent)
        if job_dir not in sys.path:
            sys.path.insert(0, job_dir)
        _, run_dir = run_job(job, output_dir)
    except BatchODEError as e:
        log.error(str(e))
        raise typer.Exit(code=1) from e
    typer.echo(str(run_dir))


@app.command()
def schemes():
    """List registered integration schemes."""
    for row in default_schemes.describe():
        alias = f" (alias of {row['alias_of']})" if row["alias_of"] else ""
        even = ", even dim" if row["requires_even_dim"] else ""
        typer.echo(f"{row['name']}: order {row['order']}, {row['n_evals']} evals{even}{alias}")


@app.command()
def backends():
    """List registered array backends."""
    for name, meta in sorted(registry.list("backend").items()):
        typer.echo(f"{name}: {meta.get('module_path', meta.get('builder_type'))}")


if __name__ == "__main__":
    app()
