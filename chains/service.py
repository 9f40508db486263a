"""
chains/service.py - Public query surface.

Each network operation is exactly one FailoverExecutor.execute call, so one
logical read never finishes on a different endpoint than the one it ran on,
except through the documented rotation.

Outcomes:
- record            -> found
- None              -> well-formed request, data legitimately absent
- InvalidArgumentError          -> bad input, no endpoint contacted
- AllProvidersUnavailableError  -> every endpoint failed
"""

from typing import Any, Optional, Sequence

from core.constants import (
    DEFAULT_SCAN_LIMIT,
    DEFAULT_SCAN_WINDOW,
    DEFAULT_TIMEOUT_SECONDS,
)
from core.exceptions import (
    ChainQueryError,
    IncompleteDataError,
    MalformedResponseError,
)
from core.logging import get_logger
from core.models import BlockRecord, TransactionRecord
from core.validators import (
    require_address,
    require_block_number,
    require_positive_int,
    require_tx_hash,
    same_address,
)
from chains.failover import FailoverExecutor, Waiter
from chains.normalizer import to_block_record, to_int, to_transaction_record
from chains.pool import EndpointPool

logger = get_logger("chain_query.service")


def scan_range(height: int, window: int) -> range:
    """Block numbers to scan, newest first: at most `window` blocks ending at height."""
    lowest = max(0, height - window + 1)
    return range(height, lowest - 1, -1)


class ChainQueryService:
    """
    Read-only chain queries with endpoint failover.

    Usage:
        async with ChainQueryService.from_urls(urls) as service:
            record = await service.get_transaction_by_hash(tx_hash)
    """

    def __init__(
        self,
        pool: EndpointPool,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        scan_window: int = DEFAULT_SCAN_WINDOW,
        scan_timeout_seconds: Optional[float] = None,
        waiter: Optional[Waiter] = None,
    ):
        self.pool = pool
        self.executor = FailoverExecutor(pool, timeout_seconds, waiter=waiter)
        self.scan_window = require_positive_int(scan_window, "scan_window")
        self.scan_timeout_seconds = scan_timeout_seconds

    @classmethod
    def from_urls(
        cls,
        urls: Sequence[str],
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        scan_window: int = DEFAULT_SCAN_WINDOW,
        scan_timeout_seconds: Optional[float] = None,
    ) -> "ChainQueryService":
        pool = EndpointPool.from_urls(urls, timeout_seconds)
        return cls(pool, timeout_seconds, scan_window, scan_timeout_seconds)

    @classmethod
    def from_config(cls, config: Any) -> "ChainQueryService":
        """Build from a config.QueryConfig."""
        return cls.from_urls(
            config.rpc_urls,
            timeout_seconds=config.timeout_seconds,
            scan_window=config.scan_window,
            scan_timeout_seconds=config.scan_timeout_seconds,
        )

    async def close(self) -> None:
        await self.pool.close_all()

    async def __aenter__(self) -> "ChainQueryService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def endpoint_stats(self) -> dict:
        """Per-endpoint request statistics keyed by endpoint label."""
        summary = {}
        for endpoint in self.pool.endpoints:
            get_summary = getattr(endpoint, "get_stats_summary", None)
            if get_summary is not None:
                summary[endpoint.label] = get_summary()
        return summary

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def get_transaction_by_hash(self, tx_hash: str) -> Optional[TransactionRecord]:
        """
        Fetch a mined transaction with its receipt and block.

        Returns None when the transaction is unknown, pending, or has no
        receipt yet.
        """
        require_tx_hash(tx_hash)

        async def operation(endpoint: Any) -> Optional[TransactionRecord]:
            tx = await endpoint.get_transaction(tx_hash)
            if tx is None:
                return None
            if not isinstance(tx, dict):
                raise MalformedResponseError(
                    "Transaction payload must be an object",
                    details={"tx_hash": tx_hash, "type": type(tx).__name__},
                )
            receipt = await endpoint.get_transaction_receipt(tx_hash)
            if receipt is None:
                return None
            block_number = tx.get("blockNumber")
            if block_number is None:
                return None
            block = await endpoint.get_block(to_int(block_number, "blockNumber"), False)
            try:
                return to_transaction_record(tx, receipt, block)
            except IncompleteDataError as e:
                logger.debug(
                    "Transaction data incomplete",
                    extra={"context": {"tx_hash": tx_hash, "reason": e.message}},
                )
                return None

        return await self.executor.execute(operation, label="get_transaction_by_hash")

    async def scan_transactions_by_address(
        self,
        address: str,
        limit: int = DEFAULT_SCAN_LIMIT,
    ) -> list[TransactionRecord]:
        """
        Best-effort recent history for an address, newest first.

        Walks back from the current height over at most scan_window blocks,
        matching sender or recipient, and stops at `limit` matches. A block
        that cannot be read is skipped; partial results are not an error.
        """
        require_address(address)
        require_positive_int(limit, "limit")
        window = self.scan_window

        async def operation(endpoint: Any) -> list[TransactionRecord]:
            height = await endpoint.get_block_number()
            blocks = scan_range(height, window)
            logger.info(
                "Scanning recent blocks for address",
                extra={"context": {
                    "address": address,
                    "from_block": blocks.start,
                    "to_block": blocks.stop + 1,
                    "limit": limit,
                }},
            )

            matches: list[TransactionRecord] = []
            skipped = 0
            for block_number in blocks:
                if len(matches) >= limit:
                    break
                try:
                    found = await self._scan_block(
                        endpoint, block_number, address, limit - len(matches)
                    )
                except (ChainQueryError, OSError) as e:
                    skipped += 1
                    logger.warning(
                        "Skipping unreadable block",
                        extra={"context": {"block_number": block_number, "error": str(e)}},
                    )
                    continue
                matches.extend(found)

            logger.info(
                "Address scan complete",
                extra={"context": {
                    "address": address,
                    "matches": len(matches),
                    "skipped_blocks": skipped,
                }},
            )
            return matches

        return await self.executor.execute(
            operation,
            timeout_seconds=self.scan_timeout_seconds,
            label="scan_transactions_by_address",
        )

    async def _scan_block(
        self,
        endpoint: Any,
        block_number: int,
        address: str,
        remaining: int,
    ) -> list[TransactionRecord]:
        """Matches from one block, in block order, at most `remaining`."""
        block = await endpoint.get_block(block_number, True)
        if block is None:
            return []
        found: list[TransactionRecord] = []
        for tx in block.get("transactions") or []:
            # Hash-only entries carry no sender/recipient to match on
            if not isinstance(tx, dict):
                continue
            if not (same_address(tx.get("from"), address) or same_address(tx.get("to"), address)):
                continue
            try:
                receipt = await endpoint.get_transaction_receipt(tx.get("hash"))
                if receipt is None:
                    continue
                found.append(to_transaction_record(tx, receipt, block))
            except (ChainQueryError, OSError) as e:
                logger.warning(
                    "Skipping unreadable transaction",
                    extra={"context": {
                        "block_number": block_number,
                        "tx_hash": tx.get("hash"),
                        "error": str(e),
                    }},
                )
                continue
            if len(found) >= remaining:
                break
        return found

    async def get_block_by_number(self, number: int) -> Optional[BlockRecord]:
        """Fetch a block header summary, or None if not produced yet."""
        require_block_number(number)

        async def operation(endpoint: Any) -> Optional[BlockRecord]:
            raw = await endpoint.get_block(number, False)
            try:
                return to_block_record(raw)
            except IncompleteDataError:
                return None

        return await self.executor.execute(operation, label="get_block_by_number")

    async def get_current_height(self) -> int:
        async def operation(endpoint: Any) -> int:
            return await endpoint.get_block_number()

        return await self.executor.execute(operation, label="get_current_height")
