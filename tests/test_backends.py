"""Tests for array backends and namespace helpers."""

import importlib.util

import numpy as np
import pytest

from batchode import solve
from batchode.backends.factory import get_backend, resolve_backend
from batchode.backends.numpy_backend import NumpyBackend
from batchode.core.errors import BackendError
from batchode.core.xputil import get_xp, to_numpy
from batchode.fields import HarmonicOscillator, VanDerPol


@pytest.mark.parametrize("name", ["numpy", "np", "backend:numpy"])
def test_get_numpy_backend(name):
    be = get_backend(name)
    assert isinstance(be, NumpyBackend)
    assert be.backend_name() == "numpy"
    assert be.device() is None


def test_unknown_backend():
    with pytest.raises(BackendError, match=r"\[201\]"):
        get_backend("jax")


def test_resolve_backend_passthrough():
    be = NumpyBackend()
    assert resolve_backend(be) is be
    assert isinstance(resolve_backend("numpy"), NumpyBackend)


def test_numpy_nonfinite_rows(backend):
    x = backend.asarray([[1.0, 2.0], [np.nan, 0.0], [0.0, 0.0], [0.0, -np.inf]])
    assert backend.nonfinite_rows(x) == [1, 3]
    assert backend.nonfinite_rows(np.ones((3, 2))) == []


def test_numpy_array_helpers(backend):
    x = backend.asarray([[1, 2]], dtype="float64")
    assert x.dtype == np.float64
    y = backend.copy(x)
    y[0, 0] = 5.0
    assert x[0, 0] == 1.0
    assert backend.concatenate((x, y), axis=-1).shape == (1, 4)
    assert backend.empty((2, 3), dtype="float32").dtype == np.float32
    assert backend.empty_like(x).shape == x.shape
    assert backend.capabilities()["numpy"] is True


def test_get_xp_numpy():
    assert get_xp(np.zeros(2)) is np
    assert to_numpy([1.0, 2.0]).tolist() == [1.0, 2.0]


def test_torch_backend_unavailable_without_torch():
    if importlib.util.find_spec("torch") is not None:
        pytest.skip("torch is installed")
    with pytest.raises(BackendError, match=r"\[202\]"):
        get_backend("torch")


class TestTorchBackend:
    @pytest.fixture(autouse=True)
    def _torch(self):
        self.torch = pytest.importorskip("torch")

    def test_basic_ops(self):
        be = get_backend("torch", device="cpu")
        assert be.backend_name() == "torch"
        assert be.device() == "cpu"
        x = be.asarray([[1.0, float("nan")], [0.0, 1.0]], dtype="float64")
        assert x.dtype == self.torch.float64
        assert be.nonfinite_rows(x) == [0]
        assert be.nonfinite_rows(be.asarray(np.ones((2, 2)), dtype=np.float32)) == []
        assert be.concatenate((x, x), axis=-1).shape == (2, 4)
        assert isinstance(be.to_numpy(x), np.ndarray)

    def test_unsupported_dtype(self):
        be = get_backend("torch", device="cpu")
        with pytest.raises(TypeError):
            be.asarray([1.0], dtype="complex64")

    @pytest.mark.parametrize("scheme", ["rk4", "heun"])
    def test_parity_with_numpy(self, scheme, rng):
        x0 = rng.normal(size=(6, 2))
        ref = solve(VanDerPol(), x0, None, 0.01, 100, scheme).final
        res = solve(VanDerPol(), x0, None, 0.01, 100, scheme, backend=get_backend("torch", device="cpu"))
        assert res.backend == "torch"
        assert isinstance(res.final, self.torch.Tensor)
        assert np.allclose(res.to_numpy().final, ref, rtol=1e-12, atol=1e-12)

    def test_symplectic_on_torch(self):
        x0 = np.array([[1.0, 0.0]])
        ref = solve(HarmonicOscillator(), x0, None, 0.1, 50, "leapfrog", record_every=10)
        res = solve(
            HarmonicOscillator(), x0, None, 0.1, 50, "leapfrog", record_every=10, backend=get_backend("torch", device="cpu")
        )
        host = res.to_numpy()
        assert host.history.shape == (1, 6, 2)
        assert np.allclose(host.history, ref.history, rtol=1e-12, atol=1e-12)

    def test_nonfinite_on_torch(self):
        from batchode.core.errors import NonFiniteStateError

        def field(x, g):
            return x * float("inf")

        with pytest.raises(NonFiniteStateError):
            solve(field, np.ones((2, 1)), None, 0.1, 2, "euler", backend=get_backend("torch", device="cpu"))

    def test_xputil_torch(self):
        t = self.torch.ones(2, 2)
        xp = get_xp(t)
        assert xp.concatenate((t, t), axis=-1).shape == (2, 4)
        assert set(vars(xp)) == {"concatenate"}
        assert isinstance(to_numpy(t), np.ndarray)
