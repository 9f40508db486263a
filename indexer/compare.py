"""
indexer/compare.py - Line up RPC reads against indexer reads.

The two paths should agree on sender, recipient, value, block and time for
any transfer the indexer has processed. Disagreement usually means the
indexer has not caught up, or the transaction did not go through the
transfer contract (the event's `from`/`to` then differ from the
transaction's).
"""

from dataclasses import dataclass, field
from typing import Optional

from core.models import IndexedTransfer, SyncStatus, TransactionRecord
from core.validators import same_address


@dataclass(frozen=True)
class FieldMismatch:
    field: str
    rpc_value: str
    indexed_value: str


@dataclass(frozen=True)
class TransferComparison:
    """Result of comparing one transaction with its indexed transfers."""
    tx_hash: str
    found_on_chain: bool
    indexed: bool
    mismatches: tuple = field(default_factory=tuple)

    @property
    def consistent(self) -> bool:
        return self.found_on_chain and self.indexed and not self.mismatches

    def to_dict(self) -> dict:
        return {
            "tx_hash": self.tx_hash,
            "found_on_chain": self.found_on_chain,
            "indexed": self.indexed,
            "consistent": self.consistent,
            "mismatches": [
                {"field": m.field, "rpc": m.rpc_value, "indexer": m.indexed_value}
                for m in self.mismatches
            ],
        }


def compare_with_indexer(
    tx_hash: str,
    record: Optional[TransactionRecord],
    transfers: list[IndexedTransfer],
) -> TransferComparison:
    """
    Compare an RPC transaction record with the indexer's transfer records.

    Only the first transfer is compared; a transaction emitting several
    transfer events still shares block and timestamp across them.
    """
    if record is None or not transfers:
        return TransferComparison(
            tx_hash=tx_hash,
            found_on_chain=record is not None,
            indexed=bool(transfers),
        )

    indexed = transfers[0]
    mismatches = []

    if not same_address(record.sender, indexed.sender):
        mismatches.append(FieldMismatch("from", record.sender, indexed.sender))
    if not same_address(record.recipient, indexed.recipient):
        mismatches.append(FieldMismatch("to", str(record.recipient), indexed.recipient))
    if record.value != indexed.value:
        mismatches.append(FieldMismatch("value", str(record.value), str(indexed.value)))
    if record.block_number != indexed.block_number:
        mismatches.append(
            FieldMismatch("block_number", str(record.block_number), str(indexed.block_number))
        )
    if record.timestamp != indexed.timestamp:
        mismatches.append(FieldMismatch("timestamp", str(record.timestamp), str(indexed.timestamp)))

    return TransferComparison(
        tx_hash=tx_hash,
        found_on_chain=True,
        indexed=True,
        mismatches=tuple(mismatches),
    )


def sync_status(indexed_block: int, chain_height: int) -> SyncStatus:
    return SyncStatus(indexed_block=indexed_block, chain_height=chain_height)
