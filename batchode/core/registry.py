"""batchode: Registry
------------------
Lightweight, centralized registries for classes and functions across batchode
namespaces (scheme, backend, strategy, field) with a unified factory
interface.

Behavior
--------
- Provide a single source of truth per namespace using keys of the form
  "namespace:name"; support eager registration and dotted-path lazy
  registration; the factory resolves entries and returns either the callable
  itself or an instantiated object according to metadata.
- Namespaces are case-insensitive; names are matched exactly.
- Registration is expected at import time. Writes are serialized by a lock,
  lookups are plain dictionary reads and safe for concurrent callers.

Notes
-----
- Dotted import supports both ``module:attr`` and ``module.attr`` forms.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from importlib import import_module
from typing import Any

from .errors import RegistryError

__all__ = [
    "RegistryCenter",
    "registry",
    "register",
    "register_lazy",
    "namespaced",
    "import_target",
]

Namespace = str
Name = str
FullName = str
Builder = Callable[..., Any]


@dataclass
class _Entry:
    """Internal record describing a registry entry.

    Stores either a direct builder (callable) or a dotted import target with
    associated metadata. Not part of the public API.
    """

    kind: str  # "callable" | "dotted"
    builder: Builder | None = None
    target: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)


def import_target(target: str) -> Any:
    """Import a dotted target supporting ``module:attr`` or ``module.attr``.

    Parameters
    ----------
    target : str
        Dotted path such as ``"pkg.mod:factory"`` or ``"pkg.mod.factory"``.

    Returns
    -------
    Any
        The imported attribute, or the module itself when no attribute part
        is present.

    Raises
    ------
    RegistryError
        - [402] The module cannot be imported.
        - [403] Target not found in the imported module.
    """
    attr_name: str | None
    if ":" in target:
        module_name, attr_name = target.split(":", 1)
    elif "." in target:
        module_name, attr_name = target.rsplit(".", 1)
    else:
        module_name, attr_name = target, None
    try:
        mod = import_module(module_name)
    except ImportError as e:
        raise RegistryError(f"[402] Failed to import '{module_name}': {e}") from e
    if attr_name is None:
        return mod
    if not hasattr(mod, attr_name):
        raise RegistryError(f"[403] Target '{target}' not found")
    return getattr(mod, attr_name)


class RegistryCenter:
    """Central registry for plugin types with factory-style lookup.

    Maintains per-namespace tables that map names to either callables or dotted
    import targets. Provides registration, lazy registration, decorator helpers,
    factory creation, and introspection.

    Attributes
    ----------
    VALID_NAMESPACES : set[str]
        Known namespaces. Ad-hoc namespaces are permitted and added on demand.

    Examples
    --------
    >>> rc = RegistryCenter()
    >>> rc.register("field", "zero", lambda x, g: 0 * x, return_callable=True)
    >>> f = rc.create("field:zero")
    >>> f(3.0, None)
    0.0
    """

    VALID_NAMESPACES = {"scheme", "backend", "strategy", "field"}

    def __init__(self) -> None:
        # Per-instance copy; _ensure_ns extends it
        self.VALID_NAMESPACES = set(type(self).VALID_NAMESPACES)
        self._tables: dict[Namespace, dict[Name, _Entry]] = {}
        self._lock = threading.Lock()

    # --------------------------- utilities ---------------------------
    @staticmethod
    def _split(full_name: FullName) -> tuple[Namespace, Name]:
        """Split ``"namespace:name"`` into its parts.

        The namespace is normalized to lowercase; the name is kept verbatim.
        """
        if ":" not in full_name:
            raise RegistryError(f"[404] Registry key '{full_name}' has no namespace")
        ns, nm = full_name.split(":", 1)
        return ns.strip().lower(), nm

    def _ensure_ns(self, namespace: Namespace) -> dict[Name, _Entry]:
        ns = namespace.strip().lower()
        self.VALID_NAMESPACES.add(ns)
        return self._tables.setdefault(ns, {})

    # --------------------------- registration ---------------------------
    def register(
        self,
        namespace: Namespace,
        name: Name,
        builder: Builder,
        *,
        overwrite: bool = False,
        **meta: Any,
    ) -> None:
        """Register a callable builder immediately under a namespace.

        Parameters
        ----------
        namespace : str
            Target namespace (e.g., ``"scheme"``, ``"backend"``).
        name : str
            Public key under which to register the builder (exact match).
        builder : Callable[..., Any]
            Class or function that constructs/returns the registered object.
        overwrite : bool, default False
            When False, duplicate keys raise a conflict; when True, existing
            entries are replaced.
        **meta : Any
            Optional metadata stored with the entry (e.g., ``return_callable``,
            ``tags``). ``registered_at``, ``builder_type`` and
            ``delayed_import`` are filled automatically.

        Raises
        ------
        RegistryError
            - [400] Duplicate registration for the same ``namespace:name`` when
              ``overwrite`` is False.
        """
        full_meta = dict(meta)
        full_meta.setdefault("registered_at", datetime.now(timezone.utc).isoformat())
        full_meta.setdefault("builder_type", self._infer_builder_type(builder))
        full_meta.setdefault("delayed_import", False)
        with self._lock:
            table = self._ensure_ns(namespace)
            if not overwrite and name in table:
                raise RegistryError(f"[400] Duplicate registration: {namespace}:{name}")
            table[name] = _Entry(kind="callable", builder=builder, meta=full_meta)

    def register_lazy(
        self,
        namespace: Namespace,
        name: Name,
        target: str,
        *,
        overwrite: bool = False,
        **meta: Any,
    ) -> None:
        """Register by dotted path without importing until ``create()``.

        Raises
        ------
        RegistryError
            - [401] Duplicate lazy registration for the same ``namespace:name``
              when ``overwrite`` is False.

        Examples
        --------
        >>> rc = RegistryCenter()
        >>> rc.register_lazy("backend", "numpy", "batchode.backends.numpy_backend:NumpyBackend")
        >>> rc.create("backend:numpy").backend_name()  # doctest: +SKIP
        'numpy'
        """
        full_meta = dict(meta)
        full_meta.setdefault("registered_at", datetime.now(timezone.utc).isoformat())
        full_meta.setdefault("builder_type", "dotted")
        full_meta.setdefault("delayed_import", True)
        full_meta.setdefault("module_path", target)
        with self._lock:
            table = self._ensure_ns(namespace)
            if not overwrite and name in table:
                raise RegistryError(f"[401] Duplicate lazy registration: {namespace}:{name}")
            table[name] = _Entry(kind="dotted", target=str(target), meta=full_meta)

    # --------------------------- decorators ---------------------------
    def decorator(self, namespace: Namespace, name: Name, **meta: Any):
        """Return a decorator that registers the object on import."""

        def _wrap(obj: Any):
            self.register(namespace, name, obj, **meta)
            return obj

        return _wrap

    # --------------------------- factory ---------------------------
    def contains(self, namespace: Namespace, name: Name) -> bool:
        """Return True when ``name`` is registered under ``namespace``."""
        return name in self._tables.get(namespace.strip().lower(), {})

    def create(self, full_name: FullName, /, **kwargs: Any) -> Any:
        """Resolve and construct entries given ``"namespace:name"`` keys.

        Parameters
        ----------
        full_name : str
            Key of the form ``"namespace:name"``.
        **kwargs : Any
            Keyword arguments forwarded to the builder/constructor when the
            entry refers to a callable object and ``return_callable`` is not set.

        Returns
        -------
        Any
            The callable itself when the entry metadata includes
            ``return_callable=True``; otherwise the instantiated object.

        Raises
        ------
        RegistryError
            - [404] Unknown registry key.
            - [402] Failed to import a registered target from its dotted path.
            - [403] Target not found in the imported module.
        """
        ns, nm = self._split(full_name)
        entry = self._tables.get(ns, {}).get(nm)
        if entry is None:
            raise RegistryError(f"[404] Unknown registry key: {ns}:{nm}")
        if entry.kind == "callable":
            assert entry.builder is not None
            obj = entry.builder
        else:
            assert entry.target is not None
            obj = import_target(entry.target)
        if entry.meta.get("return_callable"):
            return obj
        return obj(**kwargs) if callable(obj) else obj

    # --------------------------- introspection ---------------------------
    def list(self, namespace: Namespace | None = None) -> dict[str, Any]:
        """List available entries with metadata.

        Parameters
        ----------
        namespace : str or None, default None
            When provided, list entries only for the given namespace; otherwise
            return a mapping of namespace to sorted entry-name lists.
        """
        if namespace is None:
            return {ns: sorted(tbl.keys()) for ns, tbl in self._tables.items()}
        table = self._tables.get(namespace.strip().lower(), {})
        return {name: {"kind": e.kind, **e.meta} for name, e in table.items()}

    @staticmethod
    def _infer_builder_type(obj: Any) -> str:
        if callable(obj):
            return "class" if isinstance(obj, type) else "function"
        return type(obj).__name__.lower()


# Global singleton
registry = RegistryCenter()


def register(namespace: Namespace, name: Name, **meta: Any):
    """Decorator form registration on the global registry.

    Raises
    ------
    RegistryError
        - [400] Duplicate registration for the same namespace/name.
    """
    return registry.decorator(namespace, name, **meta)


def register_lazy(namespace: Namespace, name: Name, target: str, **meta: Any) -> None:
    """Register by dotted path on the global registry without importing."""
    registry.register_lazy(namespace, name, target, **meta)


def namespaced(namespace: Namespace):
    """Create ``(register, register_lazy)`` helpers bound to one namespace.

    Examples
    --------
    >>> register_backend, register_backend_lazy = namespaced("backend")
    """

    def _register(name: Name, builder: Builder, **meta: Any) -> None:
        registry.register(namespace, name, builder, **meta)

    def _register_lazy(name: Name, target: str, **meta: Any) -> None:
        registry.register_lazy(namespace, name, target, **meta)

    return _register, _register_lazy
