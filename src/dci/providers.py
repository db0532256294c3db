"""
Role action provider registry.

A provider is a stateless namespace (normally a class of staticmethods) whose
functions implement the role methods of exactly one CapabilityInterface.
Its identity is fixed by convention: interface name + PROVIDER_SUFFIX.

Registration is explicit. Lazy loaders are resolved on first lookup and the
result is kept for the life of the registry.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from dci.capability import CapabilityInterface
from dci.errors import RegistrationError

logger = logging.getLogger(__name__)

PROVIDER_SUFFIX = "Actions"


def provider_name(interface: CapabilityInterface) -> str:
    return f"{interface.name}{PROVIDER_SUFFIX}"


class ProviderRegistry:
    def __init__(self) -> None:
        self._providers: Dict[str, Any] = {}
        self._loaders: Dict[str, Callable[[], Any]] = {}
        self._lock = threading.Lock()
        # Bumped on every mapping change; dispatchers drop cached resolutions when it moves.
        self._generation = 0

    def register(self, interface: CapabilityInterface, provider: Any, *, overwrite: bool = False) -> Any:
        if provider is None:
            raise RegistrationError(f"provider is None for {interface.name}")
        key = provider_name(interface)
        with self._lock:
            if not overwrite and (key in self._providers or key in self._loaders):
                raise RegistrationError(f"duplicate_provider:{key}")
            self._loaders.pop(key, None)
            self._providers[key] = provider
            self._generation += 1
        logger.debug("registered provider %s", key)
        return provider

    def register_loader(self, interface: CapabilityInterface, loader: Callable[[], Any], *, overwrite: bool = False) -> None:
        if not callable(loader):
            raise RegistrationError(f"loader is not callable for {interface.name}")
        key = provider_name(interface)
        with self._lock:
            if not overwrite and (key in self._providers or key in self._loaders):
                raise RegistrationError(f"duplicate_provider:{key}")
            self._providers.pop(key, None)
            self._loaders[key] = loader
            self._generation += 1

    def unregister(self, interface: CapabilityInterface) -> None:
        key = provider_name(interface)
        with self._lock:
            self._providers.pop(key, None)
            self._loaders.pop(key, None)
            self._generation += 1

    @property
    def generation(self) -> int:
        return self._generation

    def lookup(self, interface: CapabilityInterface) -> Optional[Any]:
        """
        Return the provider registered for interface, or None.

        A loader returning None leaves the interface unresolved and is retried
        on the next lookup. A loader that raises propagates its error.
        """
        key = provider_name(interface)
        with self._lock:
            if key in self._providers:
                return self._providers[key]
            loader = self._loaders.get(key)
        if loader is None:
            return None

        provider = loader()
        if provider is None:
            return None

        with self._lock:
            # Another thread may have won the race; first stored value is kept.
            provider = self._providers.setdefault(key, provider)
            self._loaders.pop(key, None)
        logger.debug("loaded provider %s", key)
        return provider

    def names(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(sorted(set(self._providers) | set(self._loaders)))

    def __contains__(self, interface: CapabilityInterface) -> bool:
        key = provider_name(interface)
        with self._lock:
            return key in self._providers or key in self._loaders


_DEFAULT_REGISTRY = ProviderRegistry()


def default_registry() -> ProviderRegistry:
    return _DEFAULT_REGISTRY


def role_actions(
    interface: CapabilityInterface,
    *,
    registry: Optional[ProviderRegistry] = None,
    overwrite: bool = False,
) -> Callable[[type], type]:
    """
    Class decorator registering a provider for interface.

    The class must be named <interface.name>Actions.
    """

    def deco(cls: type) -> type:
        expected = provider_name(interface)
        if cls.__name__ != expected:
            raise RegistrationError(f"provider_name_mismatch:expected {expected}, got {cls.__name__}")
        (registry or default_registry()).register(interface, cls, overwrite=overwrite)
        return cls

    return deco
