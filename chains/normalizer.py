"""
chains/normalizer.py - Provider payloads to canonical records.

This is the only place that knows provider field names. Providers disagree
on types for the same field (hex quantity, decimal string, plain int), so
every quantity goes through to_int().

Absent inputs raise IncompleteDataError (the service maps it to not-found).
Present but unusable inputs raise MalformedResponseError, which the
failover executor treats like any other failed attempt.
"""

from typing import Any, Mapping, Optional

from core.constants import EMPTY_CALL_DATA, TxStatus
from core.exceptions import IncompleteDataError, MalformedResponseError
from core.models import BlockRecord, IndexedTransfer, TransactionRecord


def to_int(value: Any, field: str) -> int:
    """
    Parse a provider quantity losslessly.

    Accepts int, "0x"-prefixed hex, or a decimal string. Never goes
    through float.
    """
    if isinstance(value, bool) or value is None:
        raise MalformedResponseError(
            f"Field {field!r} is not a quantity", details={"field": field, "value": value}
        )
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            if text[:2].lower() == "0x":
                result = int(text, 16)
            else:
                result = int(text, 10)
        except ValueError as e:
            raise MalformedResponseError(
                f"Field {field!r} is not a quantity: {value!r}",
                details={"field": field},
            ) from e
    else:
        raise MalformedResponseError(
            f"Field {field!r} has unsupported type {type(value).__name__}",
            details={"field": field},
        )
    if result < 0:
        raise MalformedResponseError(
            f"Field {field!r} is negative", details={"field": field, "value": value}
        )
    return result


def _first(raw: Mapping[str, Any], *names: str) -> Any:
    """First present, non-None value among alternative field names."""
    for name in names:
        value = raw.get(name)
        if value is not None:
            return value
    return None


def _require(raw: Mapping[str, Any], *names: str) -> Any:
    value = _first(raw, *names)
    if value is None:
        raise MalformedResponseError(
            f"Missing field {names[0]!r}", details={"field": names[0]}
        )
    return value


def _require_str(raw: Mapping[str, Any], *names: str) -> str:
    value = _require(raw, *names)
    if not isinstance(value, str):
        raise MalformedResponseError(
            f"Field {names[0]!r} must be a string", details={"field": names[0]}
        )
    return value


def _require_mapping(raw: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise MalformedResponseError(
            f"{what} payload must be an object, got {type(raw).__name__}"
        )
    return raw


def to_status(value: Any) -> TxStatus:
    """
    Receipt status to TxStatus.

    "0x1", 1 and True mean success; anything else (including a missing
    status) is a failure.
    """
    if value is None:
        return TxStatus.FAILED
    if isinstance(value, bool):
        return TxStatus.SUCCEEDED if value else TxStatus.FAILED
    return TxStatus.SUCCEEDED if to_int(value, "status") == 1 else TxStatus.FAILED


def _optional_address(value: Any) -> Optional[str]:
    # Contract creation: keep None, never a zero-address placeholder
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise MalformedResponseError("Field 'to' must be a string or null")
    return value


def to_transaction_record(
    raw: Optional[Mapping[str, Any]],
    receipt: Optional[Mapping[str, Any]],
    block: Optional[Mapping[str, Any]],
) -> TransactionRecord:
    """
    Join a transaction, its receipt, and its containing block.

    Raises:
        IncompleteDataError: any input is absent, or the transaction is
            not in a block yet
        MalformedResponseError: a present payload has unusable fields
    """
    if raw is None:
        raise IncompleteDataError("Transaction not found")
    if receipt is None:
        raise IncompleteDataError("Transaction has no receipt yet")
    if block is None:
        raise IncompleteDataError("Containing block not available")

    raw = _require_mapping(raw, "Transaction")
    receipt = _require_mapping(receipt, "Receipt")
    block = _require_mapping(block, "Block")

    if raw.get("blockNumber") is None:
        raise IncompleteDataError("Transaction is pending")

    gas_price = _first(raw, "gasPrice", "gas_price")
    if gas_price is None:
        gas_price = _first(receipt, "effectiveGasPrice", "effective_gas_price")

    input_data = _first(raw, "input", "data")
    if input_data is not None and not isinstance(input_data, str):
        raise MalformedResponseError("Field 'input' must be a string")

    return TransactionRecord(
        hash=_require_str(raw, "hash"),
        sender=_require_str(raw, "from"),
        recipient=_optional_address(raw.get("to")),
        value=to_int(_require(raw, "value"), "value"),
        gas_used=to_int(_require(receipt, "gasUsed", "gas_used"), "gasUsed"),
        gas_price=to_int(gas_price, "gasPrice") if gas_price is not None else 0,
        block_number=to_int(_require(raw, "blockNumber"), "blockNumber"),
        block_hash=_require_str(block, "hash"),
        timestamp=to_int(_require(block, "timestamp"), "timestamp"),
        status=to_status(receipt.get("status")),
        transaction_index=to_int(
            _require(raw, "transactionIndex", "index"), "transactionIndex"
        ),
        input_data=input_data or EMPTY_CALL_DATA,
    )


def to_block_record(raw: Optional[Mapping[str, Any]]) -> BlockRecord:
    """
    Map a block payload to BlockRecord.

    Raises:
        IncompleteDataError: the provider has no such block yet
    """
    if raw is None:
        raise IncompleteDataError("Block not found")
    raw = _require_mapping(raw, "Block")

    transactions = raw.get("transactions")
    if transactions is None:
        transactions = []
    if not isinstance(transactions, list):
        raise MalformedResponseError("Field 'transactions' must be a list")

    return BlockRecord(
        hash=_require_str(raw, "hash"),
        number=to_int(_require(raw, "number"), "number"),
        timestamp=to_int(_require(raw, "timestamp"), "timestamp"),
        gas_used=to_int(_require(raw, "gasUsed", "gas_used"), "gasUsed"),
        gas_limit=to_int(_require(raw, "gasLimit", "gas_limit"), "gasLimit"),
        transaction_count=len(transactions),
    )


def _account_address(value: Any, field: str) -> str:
    # Indexer nests accounts as {"address": "0x..."}
    if isinstance(value, Mapping):
        value = value.get("address")
    if not isinstance(value, str):
        raise MalformedResponseError(
            f"Indexer field {field!r} has no address", details={"field": field}
        )
    return value


def to_indexed_transfer(raw: Mapping[str, Any]) -> IndexedTransfer:
    """Map one indexer transferRecords entry to IndexedTransfer."""
    raw = _require_mapping(raw, "Transfer record")
    return IndexedTransfer(
        id=_require_str(raw, "id"),
        record_id=str(_require(raw, "recordId")),
        sender=_account_address(raw.get("from"), "from"),
        recipient=_account_address(raw.get("to"), "to"),
        value=to_int(_require(raw, "value"), "value"),
        message=raw.get("message") or "",
        timestamp=to_int(_require(raw, "timestamp"), "timestamp"),
        block_number=to_int(_require(raw, "blockNumber"), "blockNumber"),
        transaction_hash=_require_str(raw, "transactionHash"),
    )
