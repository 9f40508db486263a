"""
chains/endpoints.py - One JSON-RPC endpoint.

Provides the four read primitives the query service needs:
- eth_getTransactionByHash
- eth_getTransactionReceipt
- eth_getBlockByNumber / eth_getBlockByHash
- eth_blockNumber

No failover here: an endpoint either answers or raises ProviderError.
Rotation across endpoints is FailoverExecutor's job.
"""

import os
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

import httpx

from core.constants import DEFAULT_TIMEOUT_SECONDS
from core.exceptions import MalformedResponseError, ProviderError, ProviderTimeoutError
from core.logging import get_logger

logger = get_logger("chain_query.endpoints")


@dataclass
class RPCStats:
    """Statistics for an RPC endpoint."""
    url: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None
    last_success_ts: int | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests


def _resolve_url(url: str) -> str:
    """Resolve ${VAR} placeholders (API keys) from the environment."""
    return os.path.expandvars(url)


def redact_url(url: str) -> str:
    """Scheme and host only, so API keys in paths never reach logs."""
    parts = urlsplit(url)
    if not parts.netloc:
        return url
    return f"{parts.scheme}://{parts.netloc}"


def _block_param(number_or_hash: int | str) -> tuple[str, Any]:
    """Pick the RPC method and first param for a block lookup."""
    if isinstance(number_or_hash, bool):
        raise TypeError("Block selector must be an int, a tag, or a hash")
    if isinstance(number_or_hash, int):
        return "eth_getBlockByNumber", hex(number_or_hash)
    if isinstance(number_or_hash, str) and len(number_or_hash) == 66:
        return "eth_getBlockByHash", number_or_hash
    # Tags ("latest", "finalized") and pre-encoded hex quantities
    return "eth_getBlockByNumber", number_or_hash


class RPCEndpoint:
    """
    One JSON-RPC endpoint over HTTP.

    Payloads are returned as provider-native dicts (hex quantities);
    RecordNormalizer turns them into canonical records.
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = _resolve_url(url)
        self.label = redact_url(self.url)
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._request_id = 0
        self.stats = RPCStats(url=self.label)

    def __repr__(self) -> str:
        return f"RPCEndpoint({self.label!r})"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(max_connections=10),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def call(self, method: str, params: list | None = None) -> Any:
        """
        Make a single RPC call against this endpoint.

        Returns:
            The JSON-RPC "result" member (may be None)

        Raises:
            ProviderTimeoutError: transport timeout
            ProviderError: HTTP or JSON-RPC error
            MalformedResponseError: body is not a JSON-RPC response
        """
        client = await self._get_client()
        self.stats.total_requests += 1

        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": self._next_request_id(),
        }
        details = {"endpoint": self.label, "method": method}

        start_ms = int(time.time() * 1000)
        try:
            resp = await client.post(self.url, json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.TimeoutException as e:
            latency_ms = int(time.time() * 1000) - start_ms
            self._record_failure(f"Timeout after {latency_ms}ms")
            raise ProviderTimeoutError(
                f"RPC timeout after {latency_ms}ms", details=details
            ) from e
        except httpx.HTTPError as e:
            reason = self._transport_error_text(e)
            self._record_failure(reason)
            raise ProviderError(f"RPC transport error: {reason}", details=details) from e
        except ValueError as e:
            self._record_failure("Invalid JSON body")
            raise MalformedResponseError(
                "RPC response is not valid JSON", details=details
            ) from e

        latency_ms = int(time.time() * 1000) - start_ms

        if not isinstance(body, dict):
            self._record_failure("Response is not a JSON object")
            raise MalformedResponseError(
                "RPC response is not a JSON object", details=details
            )

        if "error" in body:
            error = body["error"]
            error_msg = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            self._record_failure(error_msg)
            logger.debug(
                "RPC error response",
                extra={"context": {**details, "error": error_msg}},
            )
            raise ProviderError(f"RPC error: {error_msg}", details=details)

        if "result" not in body:
            self._record_failure("Response has neither result nor error")
            raise MalformedResponseError(
                "RPC response has neither result nor error", details=details
            )

        self.stats.successful_requests += 1
        self.stats.total_latency_ms += latency_ms
        self.stats.last_success_ts = int(time.time() * 1000)

        return body["result"]

    def _transport_error_text(self, error: httpx.HTTPError) -> str:
        """Error text without the request URL, which may carry an API key."""
        if isinstance(error, httpx.HTTPStatusError):
            return f"HTTP {error.response.status_code}"
        return f"{type(error).__name__}: {str(error).replace(self.url, self.label)}"

    def _record_failure(self, message: str) -> None:
        self.stats.failed_requests += 1
        self.stats.last_error = message

    # -------------------------------------------------------------------------
    # Read primitives
    # -------------------------------------------------------------------------

    async def get_transaction(self, tx_hash: str) -> dict | None:
        return await self.call("eth_getTransactionByHash", [tx_hash])

    async def get_transaction_receipt(self, tx_hash: str) -> dict | None:
        return await self.call("eth_getTransactionReceipt", [tx_hash])

    async def get_block(
        self,
        number_or_hash: int | str,
        include_transactions: bool = False,
    ) -> dict | None:
        """
        Get a block by number, tag, or hash.

        With include_transactions=True the "transactions" list holds full
        transaction objects instead of hashes.
        """
        method, selector = _block_param(number_or_hash)
        return await self.call(method, [selector, include_transactions])

    async def get_block_number(self) -> int:
        result = await self.call("eth_blockNumber")
        if isinstance(result, int) and not isinstance(result, bool):
            return result
        if not isinstance(result, str):
            raise MalformedResponseError(
                "eth_blockNumber returned a non-quantity",
                details={"endpoint": self.label, "result": result},
            )
        try:
            return int(result, 16)
        except ValueError as e:
            raise MalformedResponseError(
                f"eth_blockNumber returned {result!r}",
                details={"endpoint": self.label},
            ) from e

    def get_stats_summary(self) -> dict:
        return {
            "total_requests": self.stats.total_requests,
            "success_rate": round(self.stats.success_rate, 3),
            "avg_latency_ms": self.stats.avg_latency_ms,
            "last_error": self.stats.last_error,
        }
