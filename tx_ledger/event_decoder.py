"""
Event Decoder - Finds and decodes ERC-20 Transfer logs.

Transfer(address indexed from, address indexed to, uint256 value):
- topics[0]: event signature hash
- topics[1]: from (left-padded to 32 bytes)
- topics[2]: to (left-padded to 32 bytes)
- data: value as uint256
"""

import logging
from typing import Iterable, Optional

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from eth_utils import keccak

from onchain_adapters.models import LogEntry, Receipt
from tx_ledger.exceptions import EventDecodeError
from tx_ledger.models import TransferEvent


logger = logging.getLogger(__name__)


TRANSFER_EVENT_SIGNATURE = "Transfer(address,address,uint256)"
TRANSFER_TOPIC = "0x" + keccak(text=TRANSFER_EVENT_SIGNATURE).hex()


def _hex_to_bytes(value: str) -> bytes:
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def find_transfer_log(
    receipt: Receipt,
    event_topic: str = TRANSFER_TOPIC,
) -> Optional[LogEntry]:
    """
    Return the first log whose topic0 equals ``event_topic``.

    Logs are scanned in receipt order. When a transaction emits several
    Transfer events (routers, fee-on-transfer tokens) only the first one
    is returned.
    """
    return next(iter_matching_logs(receipt.logs, event_topic), None)


def iter_matching_logs(logs: Iterable[LogEntry], event_topic: str) -> Iterable[LogEntry]:
    topic = event_topic.lower()
    for log in logs:
        if log.topic0 is not None and log.topic0.lower() == topic:
            yield log


def decode_transfer(log: LogEntry) -> TransferEvent:
    """
    Decode a log already matched against TRANSFER_TOPIC.

    Raises:
        EventDecodeError: If the log has the Transfer signature but not the
            ERC-20 layout (e.g. an ERC-721 Transfer with an indexed tokenId)
    """
    if len(log.topics) != 3:
        raise EventDecodeError(
            f"Transfer log has {len(log.topics)} topics, expected 3",
            log_address=log.address,
        )

    try:
        (sender,) = abi_decode(["address"], _hex_to_bytes(log.topics[1]))
        (to,) = abi_decode(["address"], _hex_to_bytes(log.topics[2]))
        (raw_value,) = abi_decode(["uint256"], _hex_to_bytes(log.data))
    except (DecodingError, ValueError) as e:
        raise EventDecodeError(
            f"Undecodable Transfer payload: {e}",
            log_address=log.address,
            original_error=e,
        )

    return TransferEvent(
        token_address=log.address.lower(),
        sender=sender.lower(),
        to=to.lower(),
        raw_value=int(raw_value),
    )
