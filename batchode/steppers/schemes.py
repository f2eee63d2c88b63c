"""
batchode: Scheme Registry
-------------------------
Name-to-stepper resolution on top of the central registry's ``scheme``
namespace, plus the ``Scheme`` enumeration of built-in rules.

Behavior
--------
- ``resolve`` accepts a ``Scheme`` member or an exact registered name; there is
  no case folding and no default. Unknown names raise ``UnknownSchemeError``.
- Resolution happens once per solve call; the returned stepper is shared
  read-only across workers.
"""

from enum import Enum
from typing import Any

from ..core.errors import UnknownSchemeError
from ..core.protocols import Stepper
from ..core.registry import RegistryCenter, registry

__all__ = [
    "Scheme",
    "SchemeRegistry",
    "default_schemes",
]


class Scheme(str, Enum):
    """Built-in integration schemes."""

    EULER = "euler"
    MIDPOINT = "midpoint"
    HEUN = "heun"
    RK4 = "rk4"
    SYMPLECTIC_EULER = "symplectic_euler"
    LEAPFROG = "leapfrog"


class SchemeRegistry:
    """Resolve scheme names to stepper instances.

    Parameters
    ----------
    center : RegistryCenter, optional
        Registry holding the ``scheme`` namespace. Defaults to the global
        registry populated at import time.

    Examples
    --------
    >>> schemes = SchemeRegistry()
    >>> schemes.resolve("rk4").order
    4
    >>> schemes.resolve(Scheme.EULER).name
    'euler'
    """

    NAMESPACE = "scheme"

    def __init__(self, center: RegistryCenter | None = None) -> None:
        self._center = registry if center is None else center

    def resolve(self, name: str | Scheme) -> Stepper:
        """Return a stepper for ``name``.

        Raises
        ------
        UnknownSchemeError
            [404] No stepper is registered under ``name``.
        """
        key = name.value if isinstance(name, Scheme) else name
        if not isinstance(key, str) or not self._center.contains(self.NAMESPACE, key):
            raise UnknownSchemeError(
                f"[404] Unknown scheme {key!r}. Available: {', '.join(self.available())}"
            )
        return self._center.create(f"{self.NAMESPACE}:{key}")

    def available(self) -> list[str]:
        """Sorted list of registered scheme names, aliases included."""
        return sorted(self._center.list(self.NAMESPACE))

    def describe(self) -> list[dict[str, Any]]:
        """Scheme table for discovery: name, order, evaluations and alias target."""
        rows = []
        for name, meta in sorted(self._center.list(self.NAMESPACE).items()):
            stepper = self.resolve(name)
            rows.append(
                {
                    "name": name,
                    "order": stepper.order,
                    "n_evals": stepper.n_evals,
                    "requires_even_dim": stepper.requires_even_dim,
                    "alias_of": meta.get("alias_of"),
                }
            )
        return rows

    def register(self, name: str, stepper_cls: type, **meta: Any) -> None:
        """Register an additional stepper class under ``name``.

        Raises
        ------
        RegistryError
            [400] ``name`` is already registered.
        """
        self._center.register(self.NAMESPACE, name, stepper_cls, **meta)


default_schemes = SchemeRegistry()
