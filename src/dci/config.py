"""
Runtime configuration for the DCI dispatcher.

Sources, lowest to highest precedence:
  1) DCIConfig defaults
  2) YAML mapping at `path` (or $DCI_CONFIG when no path is given)
  3) DCI_* environment overrides

Fail-closed: unknown keys, non-mapping documents and wrong value types raise
ConfigError.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from dci.errors import ConfigError

CONFIG_ENV = "DCI_CONFIG"

ENV_OVERRIDES = {
    "DCI_CACHE_RESOLUTIONS": "cache_resolutions",
    "DCI_ISOLATE_ROLES": "isolate_roles",
    "DCI_SERIALIZE_PARTICIPANTS": "serialize_participants",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class DCIConfig:
    # Cache (receiver type, method) -> provider function resolutions.
    cache_resolutions: bool = True
    # Hand providers a RoleView limited to the interface instead of the raw receiver.
    isolate_roles: bool = False
    # Default for Context.serialize_participants when a Context does not set it.
    serialize_participants: bool = False


def _parse_bool(key: str, raw: str) -> bool:
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ConfigError(f"invalid_bool:{key}:{raw!r}")


def _from_mapping(data: Any) -> Dict[str, bool]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("config must be a mapping")

    known = {f.name for f in fields(DCIConfig)}
    unknown = set(data.keys()) - known
    if unknown:
        raise ConfigError(f"unknown_keys:{sorted(str(k) for k in unknown)}")

    out: Dict[str, bool] = {}
    for k, v in data.items():
        if not isinstance(v, bool):
            raise ConfigError(f"invalid_type:{k}")
        out[k] = v
    return out


def load_config(path: Optional[Union[str, Path]] = None) -> DCIConfig:
    if path is None:
        env_path = os.environ.get(CONFIG_ENV)
        path = Path(env_path) if env_path else None

    values: Dict[str, bool] = {}
    if path is not None:
        p = Path(path)
        if not p.exists():
            raise ConfigError(f"config_missing:{p}")
        try:
            data = yaml.safe_load(p.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid_yaml:{p}:{e}") from e
        values.update(_from_mapping(data))

    for env_key, field_name in ENV_OVERRIDES.items():
        raw = os.environ.get(env_key)
        if raw is not None:
            values[field_name] = _parse_bool(env_key, raw)

    return replace(DCIConfig(), **values)
