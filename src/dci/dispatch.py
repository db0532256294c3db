"""
Dynamic role dispatcher.

Routes a call the receiver's own class cannot satisfy to the provider of the
first declared capability interface offering that method.

Resolution (per receiver type, method name):
  1) walk type(receiver).__capabilities__ in declared order
  2) first interface whose role methods contain the name wins
  3) provider = registry entry for <interface.name>Actions
  4) function = provider.<method name>

Only successful resolutions are cached. A failure is recomputed, and raised
again, on every call.
"""

from __future__ import annotations

import functools
import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from dci.capability import CapabilityInterface
from dci.config import DCIConfig, load_config
from dci.errors import MethodNotFound, RoleImplementationMissing, RoleIsolationError, RoleProviderMissing
from dci.providers import ProviderRegistry, default_registry, provider_name

logger = logging.getLogger(__name__)

Resolution = Tuple[CapabilityInterface, Callable[..., Any]]


class RoleView:
    """
    Receiver as seen through one capability interface.

    Only the interface's primitives and role methods are reachable.
    """

    __slots__ = ("_receiver", "_interface")

    def __init__(self, receiver: Any, interface: CapabilityInterface) -> None:
        object.__setattr__(self, "_receiver", receiver)
        object.__setattr__(self, "_interface", interface)

    def __getattr__(self, attr: str) -> Any:
        interface = object.__getattribute__(self, "_interface")
        if not interface.exposes(attr):
            raise RoleIsolationError(interface.name, attr)
        return getattr(object.__getattribute__(self, "_receiver"), attr)

    def __setattr__(self, attr: str, value: Any) -> None:
        raise RoleIsolationError(object.__getattribute__(self, "_interface").name, attr)

    def __repr__(self) -> str:
        receiver = object.__getattribute__(self, "_receiver")
        interface = object.__getattribute__(self, "_interface")
        return f"<RoleView {interface.name} of {receiver!r}>"


def declared_capabilities(receiver_type: type) -> Tuple[CapabilityInterface, ...]:
    return tuple(getattr(receiver_type, "__capabilities__", ()) or ())


class Dispatcher:
    def __init__(self, registry: Optional[ProviderRegistry] = None, config: Optional[DCIConfig] = None) -> None:
        self.registry = registry if registry is not None else default_registry()
        self.config = config if config is not None else DCIConfig()
        self._cache: Dict[Tuple[type, str], Resolution] = {}
        self._cache_generation = self.registry.generation
        self._lock = threading.Lock()

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
            self._cache_generation = self.registry.generation

    def _cached(self, key: Tuple[type, str]) -> Optional[Resolution]:
        with self._lock:
            if self._cache_generation != self.registry.generation:
                self._cache.clear()
                self._cache_generation = self.registry.generation
            return self._cache.get(key)

    def _discover(self, receiver_type: type, method_name: str) -> Resolution:
        interface = None
        for candidate in declared_capabilities(receiver_type):
            if candidate.declares(method_name):
                interface = candidate
                break
        if interface is None:
            raise MethodNotFound(receiver_type, method_name)

        pname = provider_name(interface)
        try:
            provider = self.registry.lookup(interface)
        except Exception as e:
            raise RoleProviderMissing(interface.name, pname, method_name) from e
        if provider is None:
            raise RoleProviderMissing(interface.name, pname, method_name)

        fn = getattr(provider, method_name, None)
        if fn is None or not callable(fn):
            raise RoleImplementationMissing(pname, method_name)

        logger.debug("resolved %s.%s -> %s.%s", receiver_type.__name__, method_name, pname, method_name)
        return interface, fn

    def lookup(self, receiver_type: type, method_name: str) -> Resolution:
        """(interface, provider function) that method_name resolves to for receiver_type."""
        if not self.config.cache_resolutions:
            return self._discover(receiver_type, method_name)

        key = (receiver_type, method_name)
        hit = self._cached(key)
        if hit is not None:
            return hit

        resolved = self._discover(receiver_type, method_name)
        with self._lock:
            # Idempotent write: concurrent resolvers computed the same entry.
            return self._cache.setdefault(key, resolved)

    def bind(self, receiver: Any, method_name: str) -> Callable[..., Any]:
        interface, fn = self.lookup(type(receiver), method_name)
        target = RoleView(receiver, interface) if self.config.isolate_roles else receiver
        bound = functools.partial(fn, target)
        functools.update_wrapper(bound, fn)
        return bound

    def resolve(self, receiver: Any, method_name: str, *args: Any, **kwargs: Any) -> Any:
        return self.bind(receiver, method_name)(*args, **kwargs)


_DEFAULT_DISPATCHER: Optional[Dispatcher] = None
_DEFAULT_LOCK = threading.Lock()


def default_dispatcher() -> Dispatcher:
    """Process-wide dispatcher over default_registry(), configured by load_config()."""
    global _DEFAULT_DISPATCHER
    with _DEFAULT_LOCK:
        if _DEFAULT_DISPATCHER is None:
            _DEFAULT_DISPATCHER = Dispatcher(default_registry(), load_config())
        return _DEFAULT_DISPATCHER


def reset_default_dispatcher() -> None:
    """Drop the process-wide dispatcher; the next call rebuilds it from current config."""
    global _DEFAULT_DISPATCHER
    with _DEFAULT_LOCK:
        _DEFAULT_DISPATCHER = None
