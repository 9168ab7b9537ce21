import pytest

ENV_VARS = (
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "PIN_TABLE",
    "PIN_RANDOM_RPC",
    "PIN_RESET_RPC",
    "PIN_STORE",
    "PIN_MAX_ROLLOVERS",
    "PIN_REQUEST_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep tests independent of the developer's .env and config files."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PIN_CONFIG_PATH", str(tmp_path / "missing.yaml"))
    monkeypatch.chdir(tmp_path)
