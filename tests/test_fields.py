"""Tests for built-in vector fields."""

import numpy as np
import pytest

from batchode.core.protocols import VectorField
from batchode.core.registry import registry
from batchode.fields import GoalAttractor, HarmonicOscillator, LinearDecay, VanDerPol


@pytest.mark.parametrize("name", ["linear_decay", "goal_attractor", "harmonic_oscillator", "van_der_pol"])
def test_fields_registered_and_satisfy_protocol(name):
    f = registry.create(f"field:{name}")
    assert isinstance(f, VectorField)
    x = np.ones((3, 2))
    assert f(x, None).shape == x.shape


def test_registry_forwards_params():
    f = registry.create("field:linear_decay", rate=3.0)
    assert f == LinearDecay(rate=3.0)


def test_goal_attractor_guidance_forms():
    f = GoalAttractor(gain=2.0)
    x = np.zeros((2, 2))
    assert np.array_equal(f(x, None), np.zeros((2, 2)))
    assert np.array_equal(f(x, 1.0), np.full((2, 2), 2.0))
    assert np.array_equal(f(x, np.array([1.0, -1.0])), [[2.0, -2.0], [2.0, -2.0]])
    rows = np.array([[1.0, 1.0], [3.0, 3.0]])
    assert np.array_equal(f(x, rows), 2.0 * rows)


def test_harmonic_oscillator_derivative_and_energy():
    osc = HarmonicOscillator(k=4.0, m=2.0)
    x = np.array([[1.0, 2.0]])
    assert osc(x, None).tolist() == [[1.0, -4.0]]
    # p^2 / 2m + k q^2 / 2 = 1 + 2
    assert osc.energy(x).tolist() == [3.0]


def test_van_der_pol_derivative():
    f = VanDerPol(mu=0.5)
    x = np.array([[2.0, 1.0]])
    # dy = 0.5 * (1 - 4) * 1 - 2
    assert f(x, None).tolist() == [[1.0, -3.5]]


def test_fields_do_not_mutate_input():
    x = np.array([[1.0, 2.0], [3.0, 4.0]])
    before = x.copy()
    for f in (LinearDecay(), GoalAttractor(), HarmonicOscillator(), VanDerPol()):
        f(x, None)
    assert np.array_equal(x, before)
