"""Tests for the command line interface."""

import math

import numpy as np
import pytest
import yaml
from typer.testing import CliRunner

from batchode.io.results import load_result
from batchode.main import app

runner = CliRunner()


def write_job(tmp_path, **overrides):
    data = {
        "name": "decay",
        "field": {"name": "linear_decay", "params": {"rate": 1.0}},
        "x0": [1.0],
        "n_traj": 3,
        "solve": {"scheme": "rk4", "dt": 0.01, "steps": 100, "record_every": 25},
        "output_dir": str(tmp_path / "runs"),
    }
    data.update(overrides)
    path = tmp_path / "job.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_run_job_writes_results(tmp_path):
    job = write_job(tmp_path)
    result = runner.invoke(app, ["run", str(job)])
    assert result.exit_code == 0, result.output
    run_dirs = list((tmp_path / "runs").glob("decay_*"))
    assert len(run_dirs) == 1
    assert (run_dirs[0] / "manifest.json").exists()
    loaded = load_result(run_dirs[0])
    assert loaded.final.shape == (3, 1)
    assert np.allclose(loaded.final, math.exp(-1.0), atol=1e-5)
    assert loaded.history.shape == (3, 5, 1)


def test_run_output_dir_override(tmp_path):
    job = write_job(tmp_path)
    out = tmp_path / "elsewhere"
    result = runner.invoke(app, ["run", str(job), "--output-dir", str(out), "--verbose"])
    assert result.exit_code == 0, result.output
    assert len(list(out.glob("decay_*/result.npz"))) == 1


def test_run_threaded_with_options(tmp_path):
    job = write_job(
        tmp_path,
        solve={
            "scheme": "leapfrog",
            "dt": 0.1,
            "steps": 10,
            "strategy": "threaded",
            "strategy_options": {"max_workers": 2},
        },
        field={"name": "harmonic_oscillator"},
        x0=[1.0, 0.0],
    )
    result = runner.invoke(app, ["run", str(job)])
    assert result.exit_code == 0, result.output


def test_run_unknown_scheme_fails(tmp_path):
    job = write_job(tmp_path, solve={"scheme": "rk5", "dt": 0.1, "steps": 10})
    result = runner.invoke(app, ["run", str(job)])
    assert result.exit_code == 1
    assert not (tmp_path / "runs").exists()


@pytest.mark.parametrize(
    "strategy, options",
    [("vectorized", {"max_workers": 2}), ("threaded", {"max_workers": "abc"})],
)
def test_run_bad_strategy_options_fails_cleanly(tmp_path, strategy, options):
    job = write_job(
        tmp_path,
        solve={"scheme": "euler", "dt": 0.1, "steps": 2, "strategy": strategy, "strategy_options": options},
    )
    log_file = tmp_path / "run.log"
    result = runner.invoke(app, ["run", str(job), "--log-file", str(log_file)])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "[308]" in log_file.read_text(encoding="utf-8")
    assert not (tmp_path / "runs").exists()


def test_run_missing_file_fails(tmp_path):
    result = runner.invoke(app, ["run", str(tmp_path / "missing.yaml")])
    assert result.exit_code == 1


def test_run_with_log_file(tmp_path):
    job = write_job(tmp_path)
    log_file = tmp_path / "run.log"
    result = runner.invoke(app, ["run", str(job), "--log-file", str(log_file), "--log-json"])
    assert result.exit_code == 0, result.output
    text = log_file.read_text(encoding="utf-8")
    assert "Running job 'decay'" in text
    assert text.lstrip().startswith("{")


def test_schemes_command():
    result = runner.invoke(app, ["schemes"])
    assert result.exit_code == 0
    assert "rk4: order 4, 4 evals" in result.output
    assert "rk2: order 2, 2 evals (alias of midpoint)" in result.output
    assert "leapfrog: order 2, 3 evals, even dim" in result.output


def test_backends_command():
    result = runner.invoke(app, ["backends"])
    assert result.exit_code == 0
    assert "numpy: batchode.backends.numpy_backend:NumpyBackend" in result.output
    assert "torch" in result.output
