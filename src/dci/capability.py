from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class MethodSignature:
    """
    name + positional arity, receiver excluded.

    arity=None means variadic (the declaration used *args).
    """
    name: str
    arity: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.name or not isinstance(self.name, str):
            raise ValueError("method name must be a non-empty string")
        if self.arity is not None and (not isinstance(self.arity, int) or self.arity < 0):
            raise ValueError(f"invalid arity for {self.name}: {self.arity!r}")


SignatureSpec = Union[MethodSignature, str, Tuple[str, Optional[int]]]


def _as_signatures(items: Union[Iterable[SignatureSpec], Mapping[str, Optional[int]], None]) -> Tuple[MethodSignature, ...]:
    if items is None:
        return ()
    if isinstance(items, Mapping):
        items = list(items.items())
    out: list[MethodSignature] = []
    seen: set[str] = set()
    for it in items:
        if isinstance(it, MethodSignature):
            sig = it
        elif isinstance(it, str):
            sig = MethodSignature(it)
        else:
            name, arity = it
            sig = MethodSignature(name, arity)
        if sig.name in seen:
            raise ValueError(f"duplicate method: {sig.name}")
        seen.add(sig.name)
        out.append(sig)
    return tuple(out)


def positional_arity(fn: Any, *, skip_receiver: bool = True) -> Optional[int]:
    """Positional parameter count of fn (receiver excluded); None if it takes *args."""
    params = list(inspect.signature(fn).parameters.values())
    if skip_receiver and params:
        params = params[1:]
    n = 0
    for p in params:
        if p.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            n += 1
    return n


@dataclass(frozen=True)
class CapabilityInterface:
    """
    Named contract a DataObject declares conformance to.

    methods:    role methods offered by the matching <name>Actions provider;
                these are what the dispatcher resolves.
    primitives: operations the conforming object supplies itself; the only
                members role functions may call back on the receiver.
    """
    name: str
    methods: Tuple[MethodSignature, ...] = ()
    primitives: Tuple[MethodSignature, ...] = ()
    protocol: Optional[type] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name or not isinstance(self.name, str) or not self.name.isidentifier():
            raise ValueError(f"interface name must be an identifier: {self.name!r}")
        object.__setattr__(self, "methods", _as_signatures(self.methods))
        object.__setattr__(self, "primitives", _as_signatures(self.primitives))
        clash = set(self.method_names()) & set(self.primitive_names())
        if clash:
            raise ValueError(f"{self.name}: names declared as both role method and primitive: {sorted(clash)}")

    @classmethod
    def from_protocol(
        cls,
        protocol: type,
        *,
        roles: Union[Iterable[SignatureSpec], Mapping[str, Optional[int]], None] = None,
        name: Optional[str] = None,
    ) -> "CapabilityInterface":
        """
        Build an interface from a typing.Protocol.

        Public functions defined in the protocol body become primitives; role
        methods are listed explicitly in `roles`.
        """
        prims: list[MethodSignature] = []
        for attr, value in vars(protocol).items():
            if attr.startswith("_") or not inspect.isfunction(value):
                continue
            prims.append(MethodSignature(attr, positional_arity(value)))
        return cls(
            name=name or protocol.__name__,
            methods=_as_signatures(roles),
            primitives=tuple(prims),
            protocol=protocol,
        )

    def method_names(self) -> Tuple[str, ...]:
        return tuple(m.name for m in self.methods)

    def primitive_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.primitives)

    def declares(self, method_name: str) -> bool:
        return any(m.name == method_name for m in self.methods)

    def signature(self, method_name: str) -> Optional[MethodSignature]:
        for m in self.methods:
            if m.name == method_name:
                return m
        return None

    def exposes(self, attr: str) -> bool:
        return self.declares(attr) or any(p.name == attr for p in self.primitives)
