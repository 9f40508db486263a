# PATH: core/models.py
"""
Canonical records returned by the query client.

NUMERIC CONTRACT:
- value, gas and block quantities are Python ints (arbitrary precision)
- they never pass through float
- to_dict() renders them as decimal strings so JSON consumers do not
  lose precision on large wei values

All records are frozen and created fresh per successful query.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.constants import TxStatus
from core.hexdata import decode_memo


@dataclass(frozen=True)
class TransactionRecord:
    """A mined transaction joined with its receipt and containing block."""
    hash: str
    sender: str
    recipient: Optional[str]  # None = contract creation
    value: int
    gas_used: int
    gas_price: int
    block_number: int
    block_hash: str
    timestamp: int
    status: TxStatus
    transaction_index: int
    input_data: Optional[str] = None

    @property
    def is_contract_creation(self) -> bool:
        return self.recipient is None

    @property
    def succeeded(self) -> bool:
        return self.status == TxStatus.SUCCEEDED

    @property
    def fee(self) -> int:
        """Fee paid in wei (gas_used * gas_price)."""
        return self.gas_used * self.gas_price

    @property
    def memo(self) -> Optional[str]:
        """Text memo carried in call data, if any."""
        return decode_memo(self.input_data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "from": self.sender,
            "to": self.recipient,
            "value": str(self.value),
            "gas_used": str(self.gas_used),
            "gas_price": str(self.gas_price),
            "block_number": str(self.block_number),
            "block_hash": self.block_hash,
            "timestamp": str(self.timestamp),
            "status": self.status.value,
            "transaction_index": str(self.transaction_index),
            "input_data": self.input_data,
            "memo": self.memo,
        }


@dataclass(frozen=True)
class BlockRecord:
    """Block header summary."""
    hash: str
    number: int
    timestamp: int
    gas_used: int
    gas_limit: int
    transaction_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "number": str(self.number),
            "timestamp": str(self.timestamp),
            "gas_used": str(self.gas_used),
            "gas_limit": str(self.gas_limit),
            "transaction_count": str(self.transaction_count),
        }


@dataclass(frozen=True)
class IndexedTransfer:
    """
    Transfer record served by the event indexer.

    id is "{transaction_hash}-{log_index}"; one transaction can emit
    several transfer events.
    """
    id: str
    record_id: str
    sender: str
    recipient: str
    value: int
    message: str
    timestamp: int
    block_number: int
    transaction_hash: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "record_id": self.record_id,
            "from": self.sender,
            "to": self.recipient,
            "value": str(self.value),
            "message": self.message,
            "timestamp": str(self.timestamp),
            "block_number": str(self.block_number),
            "transaction_hash": self.transaction_hash,
        }


@dataclass(frozen=True)
class SyncStatus:
    """How far the indexer trails the chain head."""
    indexed_block: int
    chain_height: int

    @property
    def lag_blocks(self) -> int:
        return max(0, self.chain_height - self.indexed_block)

    @property
    def is_synced(self) -> bool:
        return self.lag_blocks == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "indexed_block": self.indexed_block,
            "chain_height": self.chain_height,
            "lag_blocks": self.lag_blocks,
            "is_synced": self.is_synced,
        }
