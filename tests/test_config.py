from __future__ import annotations

import pytest

from solana_event_indexer.config import IndexerSettings, load_settings
from solana_event_indexer.errors import ConfigError
from solana_event_indexer.indexer import ErrorPolicy

ENV_VARS = ["SOLANA_RPC_URL", "INDEXER_PROGRAM", "INDEXER_ERROR_POLICY", "INDEXER_LOG_LEVEL", "INDEXER_LOG_FILE"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    assert load_settings() == IndexerSettings()


def test_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("SOLANA_RPC_URL", "https://api.mainnet-beta.solana.com")
    monkeypatch.setenv("INDEXER_PROGRAM", "SPL_TOKEN")
    monkeypatch.setenv("INDEXER_ERROR_POLICY", "skip")
    monkeypatch.setenv("INDEXER_LOG_LEVEL", "debug")
    monkeypatch.setenv("INDEXER_LOG_FILE", "indexer.log")

    settings = load_settings()

    assert settings.rpc_url == "https://api.mainnet-beta.solana.com"
    assert settings.program == "spl_token"
    assert settings.error_policy is ErrorPolicy.SKIP
    assert settings.log_level == "DEBUG"
    assert settings.log_file == "indexer.log"


@pytest.mark.parametrize("name, value", [("INDEXER_PROGRAM", "raydium"), ("INDEXER_ERROR_POLICY", "retry")])
def test_rejects_unsupported_values(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigError):
        load_settings()
