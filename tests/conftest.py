import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import dci.providers as providers  # noqa: E402
from dci.dispatch import reset_default_dispatcher  # noqa: E402

ENV_KEYS = ("DCI_CONFIG", "DCI_CACHE_RESOLUTIONS", "DCI_ISOLATE_ROLES", "DCI_SERIALIZE_PARTICIPANTS")


@pytest.fixture(autouse=True)
def _hermetic_runtime(monkeypatch):
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)
    monkeypatch.setattr(providers, "_DEFAULT_REGISTRY", providers.ProviderRegistry())
    reset_default_dispatcher()
    yield
    reset_default_dispatcher()


@pytest.fixture
def bank():
    from dci.examples import banking

    banking.register()
    return banking


@pytest.fixture
def fee_rate():
    return 0.1
