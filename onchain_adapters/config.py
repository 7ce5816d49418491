"""
Chain Configuration - Node endpoint and native coin settings.

RPC endpoints can be overridden from environment variables.
"""

import os
from dataclasses import dataclass, replace
from typing import Any, Optional

from onchain_adapters.models import Chain


@dataclass(frozen=True)
class ChainConfig:
    """Configuration for a specific EVM network."""
    chain: Chain
    chain_id: int
    rpc_url: str

    # Native coin
    native_symbol: str
    native_decimals: int = 18

    # Transport
    request_timeout_seconds: float = 15.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain": self.chain.value,
            "chain_id": self.chain_id,
            "rpc_url": self.rpc_url,
            "native_symbol": self.native_symbol,
            "native_decimals": self.native_decimals,
            "request_timeout_seconds": self.request_timeout_seconds,
        }


DEFAULT_CHAINS: dict[Chain, ChainConfig] = {
    Chain.BSC_TESTNET: ChainConfig(
        chain=Chain.BSC_TESTNET,
        chain_id=97,
        rpc_url="https://bsc-testnet-dataseed.bnbchain.org",
        native_symbol="BNB",
    ),
    Chain.BSC: ChainConfig(
        chain=Chain.BSC,
        chain_id=56,
        rpc_url="https://bsc-dataseed.bnbchain.org",
        native_symbol="BNB",
    ),
    Chain.ETHEREUM: ChainConfig(
        chain=Chain.ETHEREUM,
        chain_id=1,
        rpc_url="https://eth.llamarpc.com",
        native_symbol="ETH",
    ),
    Chain.POLYGON: ChainConfig(
        chain=Chain.POLYGON,
        chain_id=137,
        rpc_url="https://polygon-rpc.com",
        native_symbol="POL",
    ),
    Chain.ARBITRUM: ChainConfig(
        chain=Chain.ARBITRUM,
        chain_id=42161,
        rpc_url="https://arb1.arbitrum.io/rpc",
        native_symbol="ETH",
    ),
    Chain.BASE: ChainConfig(
        chain=Chain.BASE,
        chain_id=8453,
        rpc_url="https://mainnet.base.org",
        native_symbol="ETH",
    ),
}


def chain_config_from_env(default_chain: Chain = Chain.BSC_TESTNET) -> ChainConfig:
    """
    Build the chain configuration from environment variables.

    LEDGER_CHAIN selects the defaults; LEDGER_RPC_URL, LEDGER_CHAIN_ID,
    LEDGER_NATIVE_SYMBOL and LEDGER_RPC_TIMEOUT override single fields.
    """
    chain_name = os.environ.get("LEDGER_CHAIN", default_chain.value).lower()
    try:
        chain = Chain(chain_name)
    except ValueError:
        supported = ", ".join(c.value for c in Chain)
        raise ValueError(f"Unsupported LEDGER_CHAIN '{chain_name}' (supported: {supported})")

    config = DEFAULT_CHAINS[chain]
    overrides: dict[str, Any] = {}

    rpc_url: Optional[str] = os.environ.get("LEDGER_RPC_URL")
    if rpc_url:
        overrides["rpc_url"] = rpc_url
    if os.environ.get("LEDGER_CHAIN_ID"):
        overrides["chain_id"] = int(os.environ["LEDGER_CHAIN_ID"])
    if os.environ.get("LEDGER_NATIVE_SYMBOL"):
        overrides["native_symbol"] = os.environ["LEDGER_NATIVE_SYMBOL"]
    if os.environ.get("LEDGER_RPC_TIMEOUT"):
        overrides["request_timeout_seconds"] = float(os.environ["LEDGER_RPC_TIMEOUT"])

    return replace(config, **overrides) if overrides else config
