"""
Transaction Classifier - Turns a transaction hash into a TransactionRecord.

============================================================
ALGORITHM
============================================================
1. Receipt (missing -> TransactionNotMinedError)
2. Confirming block and transaction body, read concurrently
3. Payload shape:
   - no call data: native transfer, scaled by native decimals
   - call data + Transfer log: token transfer, recipient taken
     from the event, asset resolved from the emitting contract
   - call data, no Transfer log: contract call sentinel
4. Status from the receipt, timestamp from the block

Classification never writes anything.
============================================================
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from onchain_adapters.base import BaseChainReader
from onchain_adapters.config import ChainConfig
from onchain_adapters.models import BlockHeader, Receipt, TransactionBody
from tx_ledger.asset_resolver import AssetResolver
from tx_ledger.config import CONTRACT_CALL_NAME, UNKNOWN_ASSET_NAME
from tx_ledger.event_decoder import TRANSFER_TOPIC, decode_transfer, find_transfer_log
from tx_ledger.exceptions import (
    AssetResolutionError,
    EventDecodeError,
    TransactionNotMinedError,
)
from tx_ledger.models import TransactionRecord, TxStatus
from tx_ledger.units import format_units


logger = logging.getLogger(__name__)


class TransactionClassifier:
    """
    Classifies transactions as native transfers, token transfers or
    plain contract calls.
    """

    def __init__(
        self,
        reader: BaseChainReader,
        chain_config: ChainConfig,
        asset_resolver: Optional[AssetResolver] = None,
        unknown_asset_name: str = UNKNOWN_ASSET_NAME,
        contract_call_name: str = CONTRACT_CALL_NAME,
    ) -> None:
        self._reader = reader
        self._chain_config = chain_config
        self._asset_resolver = asset_resolver or AssetResolver(reader)
        self._unknown_asset_name = unknown_asset_name
        self._contract_call_name = contract_call_name

    async def classify(self, tx_hash: str) -> TransactionRecord:
        """
        Classify a transaction.

        Raises:
            TransactionNotMinedError: If no receipt exists yet
            ChainAdapterError: If the node cannot answer
        """
        receipt = await self._reader.fetch_receipt(tx_hash)
        if receipt is None:
            raise TransactionNotMinedError(tx_hash)

        block, tx = await asyncio.gather(
            self._reader.fetch_block(receipt.block_number),
            self._reader.fetch_transaction(tx_hash),
        )

        if tx.has_call_data:
            recipient, amount, asset_name = await self._classify_contract_call(receipt)
        else:
            recipient, amount, asset_name = self._classify_native_transfer(receipt, tx)

        return TransactionRecord(
            identifier=receipt.tx_hash,
            sender=receipt.sender,
            recipient=recipient,
            amount=amount,
            asset_name=asset_name,
            block_height=receipt.block_number,
            status=TxStatus.SUCCESS if receipt.succeeded else TxStatus.FAILED,
            observed_at=self._observed_at(block),
        )

    def _classify_native_transfer(
        self,
        receipt: Receipt,
        tx: TransactionBody,
    ) -> tuple[Optional[str], str, str]:
        amount = format_units(tx.value, self._chain_config.native_decimals)
        return self._default_recipient(receipt), amount, self._chain_config.native_symbol

    async def _classify_contract_call(
        self,
        receipt: Receipt,
    ) -> tuple[Optional[str], str, str]:
        log = find_transfer_log(receipt, TRANSFER_TOPIC)
        if log is None:
            return self._default_recipient(receipt), "0", self._contract_call_name

        try:
            transfer = decode_transfer(log)
        except EventDecodeError as e:
            logger.warning(f"Transfer log in {receipt.tx_hash} not decodable, recording as contract call: {e}")
            return self._default_recipient(receipt), "0", self._contract_call_name

        try:
            asset = await self._asset_resolver.resolve(transfer.token_address)
        except AssetResolutionError as e:
            logger.warning(
                f"Asset resolution failed for {transfer.token_address} in {receipt.tx_hash}, "
                f"recording as {self._unknown_asset_name}: {e}"
            )
            return transfer.to, str(transfer.raw_value), self._unknown_asset_name

        return transfer.to, AssetResolver.scale(transfer.raw_value, asset), asset.symbol

    @staticmethod
    def _default_recipient(receipt: Receipt) -> Optional[str]:
        return receipt.to or receipt.contract_address

    @staticmethod
    def _observed_at(block: BlockHeader) -> datetime:
        return datetime.fromtimestamp(block.timestamp, tz=timezone.utc)
