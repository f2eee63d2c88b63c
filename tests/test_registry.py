"""Tests for the central registry and scheme resolution."""

import pytest

from batchode.core.errors import RegistryError, UnknownSchemeError
from batchode.core.registry import RegistryCenter, import_target
from batchode.fields import LinearDecay
from batchode.steppers import RK4, Euler, Leapfrog, Midpoint, Scheme, SchemeRegistry, StepperBase


def test_register_and_create_callable():
    rc = RegistryCenter()
    rc.register("field", "zero", lambda x, g: 0 * x, return_callable=True)
    f = rc.create("field:zero")
    assert f(3.0, None) == 0.0


def test_create_instantiates_with_kwargs():
    rc = RegistryCenter()
    rc.register("field", "decay", LinearDecay)
    f = rc.create("field:decay", rate=2.0)
    assert isinstance(f, LinearDecay)
    assert f.rate == 2.0


def test_duplicate_registration_raises():
    rc = RegistryCenter()
    rc.register("scheme", "euler", Euler)
    with pytest.raises(RegistryError, match=r"\[400\]"):
        rc.register("scheme", "euler", RK4)
    rc.register("scheme", "euler", RK4, overwrite=True)
    assert isinstance(rc.create("scheme:euler"), RK4)


def test_lazy_registration_imports_on_create():
    rc = RegistryCenter()
    rc.register_lazy("field", "decay", "batchode.fields:LinearDecay")
    meta = rc.list("field")["decay"]
    assert meta["delayed_import"] is True
    assert meta["kind"] == "dotted"
    assert isinstance(rc.create("field:decay"), LinearDecay)
    with pytest.raises(RegistryError, match=r"\[401\]"):
        rc.register_lazy("field", "decay", "batchode.fields:LinearDecay")


def test_lazy_registration_import_errors():
    rc = RegistryCenter()
    rc.register_lazy("field", "missing_mod", "batchode.no_such_module:Thing")
    rc.register_lazy("field", "missing_attr", "batchode.fields:NoSuchField")
    with pytest.raises(RegistryError, match=r"\[402\]"):
        rc.create("field:missing_mod")
    with pytest.raises(RegistryError, match=r"\[403\]"):
        rc.create("field:missing_attr")


def test_unknown_key_and_missing_namespace():
    rc = RegistryCenter()
    with pytest.raises(RegistryError, match=r"\[404\]"):
        rc.create("scheme:nope")
    with pytest.raises(RegistryError, match=r"\[404\]"):
        rc.create("nope")


def test_namespace_case_insensitive_names_exact():
    rc = RegistryCenter()
    rc.register("Scheme", "rk4", RK4)
    assert rc.contains("SCHEME", "rk4")
    assert not rc.contains("scheme", "RK4")
    assert isinstance(rc.create("SCHEME:rk4"), RK4)


def test_adhoc_namespace_stays_on_its_instance():
    rc = RegistryCenter()
    rc.register("custom_ns", "thing", LinearDecay)
    assert "custom_ns" in rc.VALID_NAMESPACES
    assert "custom_ns" not in RegistryCenter.VALID_NAMESPACES
    other = RegistryCenter()
    assert "custom_ns" not in other.VALID_NAMESPACES
    assert other.list("custom_ns") == {}


def test_decorator_and_list():
    rc = RegistryCenter()

    @rc.decorator("strategy", "custom", tags=["test"])
    class Custom:
        pass

    assert rc.list("strategy")["custom"]["tags"] == ["test"]
    assert rc.list()["strategy"] == ["custom"]
    assert rc.list("strategy")["custom"]["builder_type"] == "class"


def test_import_target_forms():
    assert import_target("batchode.fields:LinearDecay") is LinearDecay
    assert import_target("batchode.fields.LinearDecay") is LinearDecay


@pytest.mark.parametrize(
    "name,cls",
    [
        ("euler", Euler),
        ("midpoint", Midpoint),
        ("rk2", Midpoint),
        ("rk4", RK4),
        ("leapfrog", Leapfrog),
        ("verlet", Leapfrog),
        (Scheme.RK4, RK4),
        (Scheme.EULER, Euler),
    ],
)
def test_scheme_resolve(name, cls):
    assert isinstance(SchemeRegistry().resolve(name), cls)


@pytest.mark.parametrize("name", ["RK4", "Euler", "rk 4", "", "backend:numpy", 4, None])
def test_scheme_resolve_is_exact_and_strict(name):
    with pytest.raises(UnknownSchemeError, match=r"\[404\]"):
        SchemeRegistry().resolve(name)


def test_unknown_scheme_is_registry_error():
    with pytest.raises(RegistryError):
        SchemeRegistry().resolve("nope")


def test_available_lists_builtin_schemes():
    names = SchemeRegistry().available()
    for s in Scheme:
        assert s.value in names
    assert "rk2" in names and "verlet" in names


def test_describe_reports_order_and_alias():
    rows = {r["name"]: r for r in SchemeRegistry().describe()}
    assert rows["rk4"]["order"] == 4 and rows["rk4"]["n_evals"] == 4
    assert rows["rk2"]["alias_of"] == "midpoint"
    assert rows["leapfrog"]["requires_even_dim"] is True
    assert rows["euler"]["alias_of"] is None


def test_private_scheme_registry():
    class Doubler(StepperBase):
        name = "doubler"
        order = 0
        n_evals = 0

        def _advance(self, x, field, guidance, dt, backend):
            return 2.0 * x

    schemes = SchemeRegistry(RegistryCenter())
    schemes.register("doubler", Doubler)
    assert schemes.available() == ["doubler"]
    assert isinstance(schemes.resolve("doubler"), Doubler)
    with pytest.raises(UnknownSchemeError):
        schemes.resolve("rk4")
