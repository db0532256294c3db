"""
DataObject: base for every DCI participant.

A subclass owns intrinsic state plus the primitive operations on it, and
declares the capability interfaces it conforms to:

    class Account(DataObject, capabilities=[MONEY_SOURCE, MONEY_SINK]):
        ...

Any attribute normal lookup cannot find is handed to the dispatcher, so the
class's own members (including overrides) always win over role methods.
Declared order is fixed at class creation and drives resolution.
"""

from __future__ import annotations

import threading
from typing import Any, ClassVar, Dict, Iterable, Optional, Tuple

from dci.capability import CapabilityInterface
from dci.dispatch import Dispatcher, default_dispatcher


def _merge(inherited: Iterable[CapabilityInterface], declared: Iterable[CapabilityInterface]) -> Tuple[CapabilityInterface, ...]:
    out: list[CapabilityInterface] = []
    for iface in list(inherited) + list(declared):
        if not isinstance(iface, CapabilityInterface):
            raise TypeError(f"capabilities must be CapabilityInterface instances, got {type(iface).__name__}")
        if iface not in out:
            out.append(iface)
    return tuple(out)


class DataObject:
    __capabilities__: ClassVar[Tuple[CapabilityInterface, ...]] = ()
    # Dispatcher override for a class hierarchy; None means default_dispatcher().
    __dispatcher__: ClassVar[Optional[Dispatcher]] = None

    def __init_subclass__(cls, capabilities: Iterable[CapabilityInterface] = (), **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        # Nearest and leftmost bases first, same precedence as attribute lookup.
        inherited: list[CapabilityInterface] = []
        for base in cls.__mro__[1:]:
            inherited.extend(getattr(base, "__capabilities__", ()))
        cls.__capabilities__ = _merge(inherited, capabilities)

    @classmethod
    def capabilities(cls) -> Tuple[CapabilityInterface, ...]:
        return cls.__capabilities__

    @classmethod
    def conforms_to(cls, interface: CapabilityInterface) -> bool:
        return interface in cls.__capabilities__

    @classmethod
    def role_table(cls) -> Dict[str, str]:
        """Role method name -> name of the interface that wins resolution for it."""
        table: Dict[str, str] = {}
        for iface in cls.__capabilities__:
            for name in iface.method_names():
                table.setdefault(name, iface.name)
        return table

    @classmethod
    def _dispatcher(cls) -> Dispatcher:
        return cls.__dispatcher__ if cls.__dispatcher__ is not None else default_dispatcher()

    @property
    def guard(self) -> threading.RLock:
        """Per-instance re-entrant lock around primitive-operation boundaries."""
        lock = self.__dict__.get("_dci_guard")
        if lock is None:
            lock = self.__dict__.setdefault("_dci_guard", threading.RLock())
        return lock

    def __getattr__(self, name: str) -> Any:
        # Only reached after normal lookup failed.
        if name.startswith("_"):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return type(self)._dispatcher().bind(self, name)
