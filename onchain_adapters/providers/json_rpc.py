"""
JSON-RPC Chain Reader - Direct node access over HTTP.

Uses the standard Ethereum JSON-RPC methods, so any EVM node works:
- eth_getTransactionReceipt
- eth_getTransactionByHash
- eth_getBlockByNumber
- eth_call
- eth_blockNumber (health check)

No caching: every call goes to the node.
"""

import asyncio
import itertools
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import aiohttp

from onchain_adapters.base import BaseChainReader
from onchain_adapters.config import ChainConfig
from onchain_adapters.exceptions import (
    ChainAdapterError,
    ChainUnavailableError,
    RpcError,
)
from onchain_adapters.models import (
    AdapterHealth,
    BlockHeader,
    LogEntry,
    Receipt,
    TransactionBody,
)


logger = logging.getLogger(__name__)


def hex_to_int(value: Any) -> int:
    """Decode a JSON-RPC quantity ("0x1a") into an int."""
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Not a hex quantity: {value!r}")
    return int(value, 16)


def _lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value else None


class JsonRpcChainReader(BaseChainReader):
    """
    Chain reader talking JSON-RPC to a single node endpoint.

    The aiohttp session is created lazily and owned by the reader unless
    one is injected.
    """

    def __init__(
        self,
        config: ChainConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        super().__init__()
        self._config = config
        self._session = session
        self._owns_session = session is None
        self._request_ids = itertools.count(1)

    @property
    def name(self) -> str:
        return f"json_rpc:{self._config.chain.value}"

    @property
    def config(self) -> ChainConfig:
        return self._config

    # ─────────────────────────────────────────────────────────────
    # Chain Reads
    # ─────────────────────────────────────────────────────────────

    async def fetch_receipt(self, tx_hash: str) -> Optional[Receipt]:
        return await self._rpc("eth_getTransactionReceipt", [tx_hash], self._parse_receipt)

    async def fetch_transaction(self, tx_hash: str) -> TransactionBody:
        return await self._rpc(
            "eth_getTransactionByHash", [tx_hash], self._parse_transaction, required=True
        )

    async def fetch_block(self, height: int) -> BlockHeader:
        return await self._rpc(
            "eth_getBlockByNumber", [hex(height), False], self._parse_block, required=True
        )

    async def call(self, to: str, data: str) -> bytes:
        return await self._rpc(
            "eth_call", [{"to": to, "data": data}, "latest"], self._parse_call_result, required=True
        )

    async def health_check(self) -> AdapterHealth:
        self._health.last_check = datetime.now(timezone.utc)
        try:
            self._health.latest_block = await self._rpc(
                "eth_blockNumber", [], hex_to_int, required=True
            )
        except ChainAdapterError as e:
            logger.warning(f"[{self.name}] Health check failed: {e}")
        return self._health

    # ─────────────────────────────────────────────────────────────
    # Parsing
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def _parse_call_result(raw: Any) -> bytes:
        if not isinstance(raw, str) or not raw.startswith("0x"):
            raise ValueError(f"not 0x-prefixed hex: {str(raw)[:100]}")
        return bytes.fromhex(raw[2:])

    def _parse(self, parser, raw: Any, method: str):
        try:
            return parser(raw)
        except (KeyError, TypeError, ValueError) as e:
            raise ChainUnavailableError(
                f"Malformed {method} response: {e}",
                adapter_name=self.name,
                method=method,
                original_error=e,
            )

    @staticmethod
    def _parse_log(raw: dict[str, Any]) -> LogEntry:
        return LogEntry(
            address=raw["address"].lower(),
            topics=tuple(topic.lower() for topic in raw.get("topics", [])),
            data=raw.get("data") or "0x",
            log_index=hex_to_int(raw.get("logIndex") or "0x0"),
        )

    @classmethod
    def _parse_receipt(cls, raw: dict[str, Any]) -> Receipt:
        return Receipt(
            tx_hash=raw["transactionHash"].lower(),
            block_number=hex_to_int(raw["blockNumber"]),
            sender=raw["from"].lower(),
            to=_lower(raw.get("to")),
            status=hex_to_int(raw["status"]),
            logs=tuple(cls._parse_log(log) for log in raw.get("logs", [])),
            contract_address=_lower(raw.get("contractAddress")),
            gas_used=hex_to_int(raw.get("gasUsed") or "0x0"),
        )

    @staticmethod
    def _parse_transaction(raw: dict[str, Any]) -> TransactionBody:
        block_number = raw.get("blockNumber")
        return TransactionBody(
            tx_hash=raw["hash"].lower(),
            sender=raw["from"].lower(),
            to=_lower(raw.get("to")),
            value=hex_to_int(raw.get("value") or "0x0"),
            input=raw.get("input") or raw.get("data") or "0x",
            block_number=hex_to_int(block_number) if block_number else None,
            nonce=hex_to_int(raw.get("nonce") or "0x0"),
        )

    @staticmethod
    def _parse_block(raw: dict[str, Any]) -> BlockHeader:
        return BlockHeader(
            number=hex_to_int(raw["number"]),
            timestamp=hex_to_int(raw["timestamp"]),
            block_hash=(raw.get("hash") or "").lower(),
        )

    # ─────────────────────────────────────────────────────────────
    # HTTP Helpers
    # ─────────────────────────────────────────────────────────────

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.request_timeout_seconds),
                headers={"Content-Type": "application/json", "Accept": "application/json"},
            )
            self._owns_session = True
        return self._session

    async def _rpc(
        self,
        method: str,
        params: list[Any],
        parser: Optional[Callable[[Any], Any]] = None,
        required: bool = False,
    ) -> Any:
        """
        Make a JSON-RPC call and return its (parsed) result field.

        Args:
            method: JSON-RPC method name
            params: Positional params
            parser: Applied to a non-null result; KeyError/TypeError/ValueError
                become ChainUnavailableError
            required: Treat a null result as a node fault

        Every node fault, including an unparseable answer, counts against
        reader health. A JSON-RPC error object counts as an answer.
        """
        start_time = time.time()
        try:
            result = await self._post(method, params)
            if result is None:
                if required:
                    raise ChainUnavailableError(
                        f"Node returned null for {method} {params}",
                        adapter_name=self.name,
                        method=method,
                    )
            elif parser is not None:
                result = self._parse(parser, result, method)
        except RpcError:
            # The node answered; a call-level error is not a node fault
            self._on_success((time.time() - start_time) * 1000)
            raise
        except ChainUnavailableError as e:
            self._on_error(e)
            raise

        latency_ms = (time.time() - start_time) * 1000
        self._on_success(latency_ms)
        logger.debug(f"[{self.name}] {method} answered in {latency_ms:.0f}ms")
        return result

    async def _post(self, method: str, params: list[Any]) -> Any:
        session = await self._get_session()
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }

        try:
            async with session.post(self._config.rpc_url, json=payload) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise ChainUnavailableError(
                        f"HTTP {response.status}: {body[:200]}",
                        adapter_name=self.name,
                        method=method,
                        status_code=response.status,
                        request_url=self._config.rpc_url,
                    )
                body = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise ChainUnavailableError(
                "Timeout",
                adapter_name=self.name,
                method=method,
                request_url=self._config.rpc_url,
                original_error=e,
            )
        except aiohttp.ClientError as e:
            raise ChainUnavailableError(
                f"Connection error: {e}",
                adapter_name=self.name,
                method=method,
                request_url=self._config.rpc_url,
                original_error=e,
            )
        except ValueError as e:
            raise ChainUnavailableError(
                "Response is not valid JSON",
                adapter_name=self.name,
                method=method,
                original_error=e,
            )

        if not isinstance(body, dict):
            raise ChainUnavailableError(
                "Response is not a JSON-RPC object",
                adapter_name=self.name,
                method=method,
            )

        error = body.get("error")
        if error:
            raise RpcError(
                str(error.get("message", error)) if isinstance(error, dict) else str(error),
                adapter_name=self.name,
                method=method,
                code=error.get("code") if isinstance(error, dict) else None,
                data=error.get("data") if isinstance(error, dict) else None,
            )

        if "result" not in body:
            raise ChainUnavailableError(
                "Response has neither result nor error",
                adapter_name=self.name,
                method=method,
            )

        return body["result"]

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
