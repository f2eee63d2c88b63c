"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from batchode.backends.numpy_backend import NumpyBackend
from batchode.core.errors import configure_logging


class CountingField:
    """Vector field wrapper recording how often it was evaluated."""

    def __init__(self, fn=None):
        self.calls = 0
        self.fn = fn if fn is not None else (lambda x, g: -x)

    def __call__(self, x, g):
        self.calls += 1
        return self.fn(x, g)


@pytest.fixture
def backend():
    return NumpyBackend()


@pytest.fixture
def decay():
    return lambda x, g: -x


@pytest.fixture
def counting_field():
    return CountingField()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture(autouse=True)
def reset_logging():
    """Rebuild logger handlers so streams swapped by CliRunner do not leak."""
    yield
    configure_logging()
