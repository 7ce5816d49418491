"""
Tests for chain and ledger configuration.
"""

import pytest

from onchain_adapters.config import chain_config_from_env
from onchain_adapters.models import Chain
from tx_ledger.config import DEFAULT_DATABASE_URL, LedgerConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "LEDGER_CHAIN",
        "LEDGER_RPC_URL",
        "LEDGER_CHAIN_ID",
        "LEDGER_NATIVE_SYMBOL",
        "LEDGER_RPC_TIMEOUT",
        "DATABASE_URL",
        "LEDGER_HISTORY_LIMIT",
        "LEDGER_CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)


class TestChainConfig:

    def test_default_is_bsc_testnet(self):
        config = chain_config_from_env()

        assert config.chain == Chain.BSC_TESTNET
        assert config.chain_id == 97
        assert config.native_symbol == "BNB"
        assert config.native_decimals == 18

    def test_chain_selection_and_overrides(self, monkeypatch):
        monkeypatch.setenv("LEDGER_CHAIN", "ethereum")
        monkeypatch.setenv("LEDGER_RPC_URL", "http://localhost:8545")
        monkeypatch.setenv("LEDGER_RPC_TIMEOUT", "3")

        config = chain_config_from_env()

        assert config.chain == Chain.ETHEREUM
        assert config.native_symbol == "ETH"
        assert config.rpc_url == "http://localhost:8545"
        assert config.request_timeout_seconds == 3.0

    def test_unknown_chain(self, monkeypatch):
        monkeypatch.setenv("LEDGER_CHAIN", "dogechain")

        with pytest.raises(ValueError):
            chain_config_from_env()


class TestLedgerConfig:

    def test_defaults(self):
        config = LedgerConfig.from_env()

        assert config.database_url == DEFAULT_DATABASE_URL
        assert config.history_limit == 50
        assert config.cors_origins == ["*"]
        assert config.unknown_asset_name == "Unknown"
        assert config.contract_call_name == "Contract Call"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://user:secret@db/ledger")
        monkeypatch.setenv("LEDGER_HISTORY_LIMIT", "10")
        monkeypatch.setenv("LEDGER_CORS_ORIGINS", "http://a.example, http://b.example")

        config = LedgerConfig.from_env()

        assert config.history_limit == 10
        assert config.cors_origins == ["http://a.example", "http://b.example"]
        assert "secret" not in str(config.to_dict())

    def test_invalid_history_limit(self):
        with pytest.raises(ValueError):
            LedgerConfig(history_limit=0)
