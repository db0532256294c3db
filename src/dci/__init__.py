"""
DCI (Data, Context, Interaction) runtime.

Data objects declare capability interfaces; calls they cannot satisfy are
dispatched to stateless <Interface>Actions providers. Contexts start
interactions.
"""

from dci.capability import CapabilityInterface, MethodSignature
from dci.config import DCIConfig, load_config
from dci.context import Context, hold_guards
from dci.data import DataObject
from dci.dispatch import Dispatcher, RoleView, default_dispatcher
from dci.errors import (
    ConfigError,
    ContextUsageError,
    DispatchError,
    DomainError,
    MethodNotFound,
    RegistrationError,
    RoleImplementationMissing,
    RoleIsolationError,
    RoleProviderMissing,
)
from dci.providers import PROVIDER_SUFFIX, ProviderRegistry, default_registry, provider_name, role_actions

__all__ = [
    "CapabilityInterface",
    "ConfigError",
    "Context",
    "ContextUsageError",
    "DCIConfig",
    "DataObject",
    "DispatchError",
    "Dispatcher",
    "DomainError",
    "MethodNotFound",
    "MethodSignature",
    "PROVIDER_SUFFIX",
    "ProviderRegistry",
    "RegistrationError",
    "RoleImplementationMissing",
    "RoleIsolationError",
    "RoleProviderMissing",
    "RoleView",
    "default_dispatcher",
    "default_registry",
    "hold_guards",
    "load_config",
    "provider_name",
    "role_actions",
]
