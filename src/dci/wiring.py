"""
Static wiring check for DataObject types.

Reports, without calling any role function, every defect that would otherwise
surface as a structural error on first call:
  - missing_provider:<Type>:<Provider>
  - missing_implementation:<Provider>.<method>
  - arity_mismatch:<Provider>.<method>:expected=<n>:got=<m>
  - missing_primitive:<Type>.<name>:<Interface>
  - loader_failed:<Provider>:<ExcType>:<message>

Shadowed role methods (declared by more than one interface of a type) are not
defects; they are listed in `shadowed` so resolution order stays visible.
"""

from __future__ import annotations

import hashlib
import inspect
import json
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Dict, Iterable, List, Optional

from dci.capability import positional_arity
from dci.data import DataObject
from dci.providers import ProviderRegistry, default_registry, provider_name


def canonical_json(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass
class WiringReport:
    issues: List[str] = field(default_factory=list)
    shadowed: List[str] = field(default_factory=list)
    role_tables: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.issues

    def fingerprint(self) -> str:
        """sha256 over the resolution tables; changes whenever resolution order would."""
        return hashlib.sha256(canonical_json(self.role_tables).encode("utf-8")).hexdigest()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "issues": list(self.issues),
            "shadowed": list(self.shadowed),
            "role_tables": self.role_tables,
            "fingerprint": self.fingerprint(),
        }


def _arity_of(fn: Any) -> Optional[int]:
    try:
        return positional_arity(fn)
    except (TypeError, ValueError):
        return None


def check_wiring(types: Iterable[type], registry: Optional[ProviderRegistry] = None) -> WiringReport:
    reg = registry if registry is not None else default_registry()
    report = WiringReport()
    issues: set[str] = set()
    shadowed: set[str] = set()

    for cls in sorted(set(types), key=lambda c: f"{c.__module__}.{c.__qualname__}"):
        if not (isinstance(cls, type) and issubclass(cls, DataObject)):
            raise TypeError(f"not a DataObject type: {cls!r}")

        table = cls.role_table()
        report.role_tables[cls.__qualname__] = table

        for iface in cls.capabilities():
            for prim in iface.primitives:
                if not callable(getattr(cls, prim.name, None)):
                    issues.add(f"missing_primitive:{cls.__qualname__}.{prim.name}:{iface.name}")

            pname = provider_name(iface)
            active = [m for m in iface.methods if table.get(m.name) == iface.name]
            for m in iface.methods:
                if table.get(m.name) != iface.name:
                    shadowed.add(f"{cls.__qualname__}.{m.name}:{iface.name}->{table[m.name]}")
            if not active:
                continue

            try:
                provider = reg.lookup(iface)
            except Exception as e:
                issues.add(f"loader_failed:{pname}:{type(e).__name__}:{e}")
                continue
            if provider is None:
                issues.add(f"missing_provider:{cls.__qualname__}:{pname}")
                continue

            for m in active:
                fn = getattr(provider, m.name, None)
                if fn is None or not callable(fn):
                    issues.add(f"missing_implementation:{pname}.{m.name}")
                    continue
                got = _arity_of(fn)
                if m.arity is not None and got is not None and got != m.arity:
                    issues.add(f"arity_mismatch:{pname}.{m.name}:expected={m.arity}:got={got}")

    report.issues = sorted(issues)
    report.shadowed = sorted(shadowed)
    return report


def data_types_in(module: ModuleType) -> List[type]:
    """DataObject subclasses defined (not merely imported) in module."""
    out: List[type] = []
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if obj is not DataObject and issubclass(obj, DataObject) and obj.__module__ == module.__name__:
            out.append(obj)
    return out
