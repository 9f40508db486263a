"""
indexer/subgraph.py - Event indexer (subgraph) query client.

The indexer is an external data source with its own schema:

    TransferRecord { id, recordId, from { address }, to { address },
                     value, message, timestamp, blockNumber, transactionHash }
    _meta { block { number } }

It only knows about transfers emitted by the transfer contract, and it
trails the chain head by however far indexing has progressed.
"""

from typing import Any

import httpx

from core.constants import DEFAULT_INDEXER_PAGE_SIZE, DEFAULT_TIMEOUT_SECONDS
from core.exceptions import ChainQueryError, IndexerError
from core.logging import get_logger
from core.models import IndexedTransfer
from core.validators import require_address, require_positive_int, require_tx_hash
from chains.normalizer import to_indexed_transfer, to_int

logger = get_logger("chain_query.indexer")

TRANSFER_FIELDS = """
      id
      recordId
      from {
        address
      }
      to {
        address
      }
      value
      message
      timestamp
      blockNumber
      transactionHash
"""

GET_TRANSFERS_BY_HASH = f"""
  query GetTransaction($hash: Bytes!) {{
    transferRecords(where: {{ transactionHash: $hash }}) {{{TRANSFER_FIELDS}    }}
  }}
"""

GET_RECENT_TRANSFERS = f"""
  query GetTransactions($first: Int!, $skip: Int!) {{
    transferRecords(first: $first, skip: $skip, orderBy: blockNumber, orderDirection: desc) {{{TRANSFER_FIELDS}    }}
  }}
"""

GET_TRANSFERS_BY_ADDRESS = f"""
  query GetAddressTransactions($address: String!, $first: Int!) {{
    sent: transferRecords(first: $first, where: {{ from: $address }}, orderBy: blockNumber, orderDirection: desc) {{{TRANSFER_FIELDS}    }}
    received: transferRecords(first: $first, where: {{ to: $address }}, orderBy: blockNumber, orderDirection: desc) {{{TRANSFER_FIELDS}    }}
  }}
"""

GET_META = """
  query GetMeta {
    _meta {
      block {
        number
      }
    }
  }
"""


class SubgraphClient:
    """
    GraphQL client for the transfer indexer.

    Single endpoint, no failover: an indexer outage surfaces as IndexerError.
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "SubgraphClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def query(self, document: str, variables: dict | None = None) -> dict:
        """
        Run a GraphQL query.

        Returns:
            The "data" member of the response

        Raises:
            IndexerError: transport failure, timeout, or GraphQL errors
        """
        client = await self._get_client()
        try:
            resp = await client.post(
                self.url,
                json={"query": document, "variables": variables or {}},
            )
            resp.raise_for_status()
            body = resp.json()
        except httpx.TimeoutException as e:
            raise IndexerError(
                f"Indexer timeout after {self.timeout_seconds}s", details={"url": self.url}
            ) from e
        except httpx.HTTPError as e:
            raise IndexerError(f"Indexer request failed: {e}", details={"url": self.url}) from e
        except ValueError as e:
            raise IndexerError("Indexer response is not valid JSON", details={"url": self.url}) from e

        if not isinstance(body, dict):
            raise IndexerError("Indexer response is not a JSON object")

        errors = body.get("errors")
        if errors:
            messages = [err.get("message", str(err)) if isinstance(err, dict) else str(err) for err in errors]
            logger.warning(
                "Indexer returned GraphQL errors",
                extra={"context": {"errors": messages}},
            )
            raise IndexerError(f"GraphQL error: {'; '.join(messages)}", details={"errors": messages})

        data = body.get("data")
        if not isinstance(data, dict):
            raise IndexerError("Indexer response has no data")
        return data

    def _transfers(self, data: dict, key: str) -> list[IndexedTransfer]:
        entries = data.get(key) or []
        try:
            return [to_indexed_transfer(entry) for entry in entries]
        except ChainQueryError as e:
            raise IndexerError(f"Malformed transfer record: {e.message}") from e

    async def get_transfers_by_hash(self, tx_hash: str) -> list[IndexedTransfer]:
        """Transfer events emitted by one transaction (empty if not indexed)."""
        require_tx_hash(tx_hash)
        # Bytes filters match on lowercase hex
        data = await self.query(GET_TRANSFERS_BY_HASH, {"hash": tx_hash.lower()})
        return self._transfers(data, "transferRecords")

    async def get_recent_transfers(
        self,
        first: int = DEFAULT_INDEXER_PAGE_SIZE,
        skip: int = 0,
    ) -> list[IndexedTransfer]:
        """Latest transfers, newest block first."""
        require_positive_int(first, "first")
        if skip < 0:
            skip = 0
        data = await self.query(GET_RECENT_TRANSFERS, {"first": first, "skip": skip})
        return self._transfers(data, "transferRecords")

    async def get_transfers_by_address(
        self,
        address: str,
        first: int = DEFAULT_INDEXER_PAGE_SIZE,
    ) -> list[IndexedTransfer]:
        """Transfers sent or received by address, newest first, at most `first`."""
        require_address(address)
        require_positive_int(first, "first")
        data = await self.query(
            GET_TRANSFERS_BY_ADDRESS, {"address": address.lower(), "first": first}
        )
        merged: dict[str, IndexedTransfer] = {}
        for transfer in self._transfers(data, "sent") + self._transfers(data, "received"):
            merged[transfer.id] = transfer
        ordered = sorted(merged.values(), key=lambda t: (t.block_number, t.id), reverse=True)
        return ordered[:first]

    async def get_indexed_block(self) -> int:
        """Latest block the indexer has processed."""
        data = await self.query(GET_META)
        try:
            number = data["_meta"]["block"]["number"]
        except (KeyError, TypeError) as e:
            raise IndexerError("Indexer _meta has no block number") from e
        try:
            return to_int(number, "_meta.block.number")
        except ChainQueryError as e:
            raise IndexerError(e.message) from e
