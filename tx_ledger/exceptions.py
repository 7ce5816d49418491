"""
Transaction Ledger Exceptions.

Custom exception hierarchy for classification and ingestion.
"""

from typing import Any, Optional

from core.exceptions import ErrorClassification, ErrorKind, LedgerError


class TransactionLedgerError(LedgerError):
    """Base exception for the transaction ledger domain."""

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, context, original_error)
        self.tx_hash = tx_hash

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["tx_hash"] = self.tx_hash
        return data


class TransactionNotMinedError(TransactionLedgerError):
    """
    The transaction has no receipt yet.

    Not a fault: the caller is expected to retry later.
    """

    kind = ErrorKind.NOT_MINED
    classification = ErrorClassification.TRANSIENT

    def __init__(self, tx_hash: str) -> None:
        super().__init__("Transaction not yet mined", tx_hash=tx_hash)


class AssetResolutionError(TransactionLedgerError):
    """Token symbol or decimals could not be read from the contract."""

    kind = ErrorKind.ASSET_RESOLUTION_FAILED
    classification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        message: str,
        contract_address: str,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message,
            context={"contract_address": contract_address},
            original_error=original_error,
        )
        self.contract_address = contract_address


class EventDecodeError(TransactionLedgerError):
    """A log matched the Transfer signature but its payload is not decodable."""

    kind = ErrorKind.EVENT_DECODE_FAILED
    classification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        message: str,
        log_address: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message,
            context={"log_address": log_address},
            original_error=original_error,
        )
        self.log_address = log_address


class InvalidIdentifierError(TransactionLedgerError):
    """Caller supplied something that is not a transaction hash or address."""

    kind = ErrorKind.INVALID_INPUT
    classification = ErrorClassification.NON_RECOVERABLE

    def __init__(self, value: str, expected: str = "transaction hash") -> None:
        super().__init__(f"Invalid {expected}: {value!r}", context={"value": value})
        self.value = value
        self.expected = expected
