"""
DCI error taxonomy.

Three disjoint kinds:
- structural (DispatchError and subclasses): wiring/configuration defects
- domain (DomainError): business-rule violations raised by role logic
- usage (ContextUsageError): bad calls detected at a Context boundary

Nothing in this package recovers from any of them.
"""

from __future__ import annotations

from typing import Any


class DispatchError(RuntimeError):
    """Base for structural role-dispatch failures. Never a business failure."""


class MethodNotFound(DispatchError, AttributeError):
    def __init__(self, receiver_type: type, method_name: str):
        super().__init__(f"method_not_found:{receiver_type.__name__}.{method_name}")
        self.receiver_type = receiver_type
        self.method_name = method_name


class RoleProviderMissing(DispatchError):
    def __init__(self, interface_name: str, provider_name: str, method_name: str):
        super().__init__(f"role_provider_missing:{provider_name} (interface={interface_name}, method={method_name})")
        self.interface_name = interface_name
        self.provider_name = provider_name
        self.method_name = method_name


class RoleImplementationMissing(DispatchError):
    def __init__(self, provider_name: str, method_name: str):
        super().__init__(f"role_implementation_missing:{provider_name}.{method_name}")
        self.provider_name = provider_name
        self.method_name = method_name


class RegistrationError(ValueError):
    pass


class RoleIsolationError(AttributeError):
    def __init__(self, interface_name: str, attr: str):
        super().__init__(f"role_isolation:{interface_name} does not expose {attr!r}")
        self.interface_name = interface_name
        self.attr = attr


class ContextUsageError(TypeError):
    pass


class ConfigError(RuntimeError):
    pass


class DomainError(Exception):
    """
    Business-rule violation signaled by a role function.

    kind is the symbolic title (e.g. "Insufficient Funds"), detail is the
    human-readable explanation and may embed the offending values.
    """

    def __init__(self, kind: str, detail: str = ""):
        if not kind or not isinstance(kind, str):
            raise ValueError("kind must be a non-empty string")
        super().__init__(kind, detail)
        self.kind = kind
        self.detail = detail

    def __str__(self) -> str:
        if not self.detail:
            return self.kind
        return f"{self.kind}: {self.detail}"

    def as_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "detail": self.detail}
