"""
Transaction Ledger Configuration.

Everything is read from environment variables (a .env file is honoured)
and then passed explicitly into constructors. Only entry points use the
process default returned by get_config().
"""

import os
from dataclasses import dataclass, field
from typing import Any, Optional

from dotenv import load_dotenv

from onchain_adapters.config import ChainConfig, chain_config_from_env


DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./tx_ledger.db"

# Asset names used when no token symbol can be shown
UNKNOWN_ASSET_NAME = "Unknown"
CONTRACT_CALL_NAME = "Contract Call"


@dataclass
class LedgerConfig:
    """Main configuration for the transaction ledger service."""

    chain: ChainConfig = field(default_factory=chain_config_from_env)

    # Database
    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False

    # History queries
    history_limit: int = 50

    # Sentinels
    unknown_asset_name: str = UNKNOWN_ASSET_NAME
    contract_call_name: str = CONTRACT_CALL_NAME

    # HTTP boundary
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self) -> None:
        if self.history_limit < 1:
            raise ValueError("history_limit must be >= 1")

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Build configuration from environment variables."""
        load_dotenv()

        cors = os.environ.get("LEDGER_CORS_ORIGINS", "*")
        return cls(
            chain=chain_config_from_env(),
            database_url=os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL),
            database_echo=os.environ.get("DATABASE_ECHO", "").lower() in ("1", "true", "yes"),
            history_limit=int(os.environ.get("LEDGER_HISTORY_LIMIT", "50")),
            cors_origins=[origin.strip() for origin in cors.split(",") if origin.strip()],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain": self.chain.to_dict(),
            "database_url": self.database_url.split("@")[-1],
            "history_limit": self.history_limit,
            "unknown_asset_name": self.unknown_asset_name,
            "contract_call_name": self.contract_call_name,
            "cors_origins": self.cors_origins,
        }


# Default configuration instance
_default_config: Optional[LedgerConfig] = None


def get_config() -> LedgerConfig:
    """Get the default configuration."""
    global _default_config
    if _default_config is None:
        _default_config = LedgerConfig.from_env()
    return _default_config


def set_config(config: LedgerConfig) -> None:
    """Set the default configuration."""
    global _default_config
    _default_config = config
