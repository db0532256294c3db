from pathlib import Path

import pytest

from dci.config import DCIConfig, load_config
from dci.dispatch import default_dispatcher, reset_default_dispatcher
from dci.errors import ConfigError


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "dci.yaml"
    p.write_text(text, encoding="utf-8")
    return p


def test_defaults_without_any_source():
    assert load_config() == DCIConfig()
    assert DCIConfig().cache_resolutions is True
    assert DCIConfig().isolate_roles is False


def test_yaml_file(tmp_path):
    p = _write(tmp_path, "isolate_roles: true\ncache_resolutions: false\n")
    cfg = load_config(p)
    assert cfg.isolate_roles is True
    assert cfg.cache_resolutions is False
    assert cfg.serialize_participants is False


def test_empty_yaml_is_defaults(tmp_path):
    assert load_config(_write(tmp_path, "")) == DCIConfig()


def test_config_path_from_env(tmp_path, monkeypatch):
    p = _write(tmp_path, "serialize_participants: true\n")
    monkeypatch.setenv("DCI_CONFIG", str(p))
    assert load_config().serialize_participants is True


def test_env_overrides_file(tmp_path, monkeypatch):
    p = _write(tmp_path, "isolate_roles: true\n")
    monkeypatch.setenv("DCI_ISOLATE_ROLES", "off")
    monkeypatch.setenv("DCI_CACHE_RESOLUTIONS", "0")
    cfg = load_config(p)
    assert cfg.isolate_roles is False
    assert cfg.cache_resolutions is False


@pytest.mark.parametrize(
    "text,reason",
    [
        ("- a\n- b\n", "config must be a mapping"),
        ("isolate: true\n", "unknown_keys:['isolate']"),
        ("isolate_roles: 'yes'\n", "invalid_type:isolate_roles"),
        ("isolate_roles: [\n", "invalid_yaml:"),
    ],
)
def test_invalid_files_fail_closed(tmp_path, text, reason):
    with pytest.raises(ConfigError) as ei:
        load_config(_write(tmp_path, text))
    assert reason in str(ei.value)


def test_missing_file_fails_closed(tmp_path):
    with pytest.raises(ConfigError) as ei:
        load_config(tmp_path / "nope.yaml")
    assert "config_missing" in str(ei.value)


def test_bad_env_bool_fails_closed(monkeypatch):
    monkeypatch.setenv("DCI_CACHE_RESOLUTIONS", "maybe")
    with pytest.raises(ConfigError) as ei:
        load_config()
    assert "invalid_bool:DCI_CACHE_RESOLUTIONS" in str(ei.value)


def test_default_dispatcher_picks_up_config(monkeypatch):
    monkeypatch.setenv("DCI_ISOLATE_ROLES", "true")
    reset_default_dispatcher()
    d = default_dispatcher()
    assert d.config.isolate_roles is True
    assert default_dispatcher() is d
