"""
Asset Resolver - Token symbol and decimals from the token contract.

symbol() and decimals() are independent view calls and are issued
concurrently. Both must succeed for a resolution to succeed.
"""

import asyncio
import logging

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from eth_utils import keccak

from onchain_adapters.base import BaseChainReader
from onchain_adapters.exceptions import RpcError
from tx_ledger.exceptions import AssetResolutionError
from tx_ledger.models import AssetInfo
from tx_ledger.units import format_units


logger = logging.getLogger(__name__)


def _selector(signature: str) -> str:
    return "0x" + keccak(text=signature)[:4].hex()


SYMBOL_SELECTOR = _selector("symbol()")
DECIMALS_SELECTOR = _selector("decimals()")

# ERC-20 caps decimals at uint8
MAX_DECIMALS = 255


def decode_symbol(raw: bytes) -> str:
    """
    Decode a symbol() return value.

    Standard tokens return an ABI string; some legacy tokens (MKR, SAI)
    return bytes32.
    """
    try:
        (symbol,) = abi_decode(["string"], raw)
    except (DecodingError, OverflowError, UnicodeDecodeError, ValueError):
        if len(raw) != 32:
            raise
        symbol = raw.decode("utf-8", errors="replace")
    # NUL is not storable in PostgreSQL text
    return symbol.replace("\x00", "")


def decode_decimals(raw: bytes) -> int:
    """Decode a decimals() return value."""
    (decimals,) = abi_decode(["uint256"], raw)
    if decimals > MAX_DECIMALS:
        raise ValueError(f"decimals out of range: {decimals}")
    return int(decimals)


class AssetResolver:
    """
    Resolves display symbol and precision of token contracts.

    Every resolution re-reads the chain; the reader is injected.
    """

    def __init__(self, reader: BaseChainReader) -> None:
        self._reader = reader

    async def resolve(self, contract_address: str) -> AssetInfo:
        """
        Resolve symbol and decimals of a token contract.

        Raises:
            AssetResolutionError: If either call reverts or returns garbage
            ChainUnavailableError: If the node cannot answer
        """
        address = contract_address.lower()
        raw_symbol, raw_decimals = await asyncio.gather(
            self._reader.call(address, SYMBOL_SELECTOR),
            self._reader.call(address, DECIMALS_SELECTOR),
            return_exceptions=True,
        )
        results = (raw_symbol, raw_decimals)
        # Node faults propagate; only call-level errors (reverts) fall back
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, RpcError):
                raise result
        for result in results:
            if isinstance(result, RpcError):
                raise AssetResolutionError(
                    f"Contract call failed: {result.message}",
                    contract_address=address,
                    original_error=result,
                )

        try:
            symbol = decode_symbol(raw_symbol).strip()
            decimals = decode_decimals(raw_decimals)
        except (DecodingError, OverflowError, UnicodeDecodeError, ValueError) as e:
            raise AssetResolutionError(
                f"Undecodable token metadata: {e}",
                contract_address=address,
                original_error=e,
            )

        if not symbol:
            raise AssetResolutionError("Empty token symbol", contract_address=address)

        logger.debug(f"Resolved {address}: symbol={symbol} decimals={decimals}")
        return AssetInfo(contract_address=address, symbol=symbol, decimals=decimals)

    @staticmethod
    def scale(raw_value: int, asset: AssetInfo) -> str:
        """Scale a raw token amount by the asset's decimals."""
        return format_units(raw_value, asset.decimals)
