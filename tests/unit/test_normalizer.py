"""
tests/unit/test_normalizer.py - Provider payload normalization tests.
"""

import pytest

from chains.normalizer import (
    to_block_record,
    to_indexed_transfer,
    to_int,
    to_status,
    to_transaction_record,
)
from core.constants import TxStatus
from core.exceptions import IncompleteDataError, MalformedResponseError, ProviderError

from conftest import ALICE, BOB


def raw_tx(**overrides):
    tx = {
        "hash": "0x" + "ab" * 32,
        "from": ALICE,
        "to": BOB,
        "value": "0xde0b6b3a7640000",
        "gasPrice": "0x77359400",
        "blockNumber": "0x10",
        "transactionIndex": "0x3",
        "input": "0x",
    }
    tx.update(overrides)
    return tx


def raw_receipt(**overrides):
    receipt = {"gasUsed": "0x5208", "status": "0x1", "effectiveGasPrice": "0x3b9aca00"}
    receipt.update(overrides)
    return receipt


def raw_block(**overrides):
    block = {
        "hash": "0x" + "cd" * 32,
        "number": "0x10",
        "timestamp": "0x6553f100",
        "gasUsed": "0x5208",
        "gasLimit": "0x1c9c380",
        "transactions": ["0x" + "ab" * 32],
    }
    block.update(overrides)
    return block


class TestToInt:
    """Quantity parsing."""

    def test_hex(self):
        assert to_int("0x10", "f") == 16

    def test_decimal_string(self):
        assert to_int("1000000000000000000", "value") == 10**18

    def test_plain_int(self):
        assert to_int(42, "f") == 42

    def test_huge_value_is_lossless(self):
        big = 2**256 - 1
        assert to_int(hex(big), "value") == big
        assert to_int(str(big), "value") == big

    @pytest.mark.parametrize("bad", [1.5, True, None, "0xZZ", "", "abc", -1, "-5", [1]])
    def test_rejects_non_quantities(self, bad):
        with pytest.raises(MalformedResponseError):
            to_int(bad, "value")

    def test_malformed_is_a_provider_error(self):
        """Malformed payloads rotate like any other provider failure."""
        with pytest.raises(ProviderError):
            to_int(1.0, "value")


class TestStatus:

    @pytest.mark.parametrize("value", ["0x1", 1, True, "1"])
    def test_success(self, value):
        assert to_status(value) == TxStatus.SUCCEEDED

    @pytest.mark.parametrize("value", ["0x0", 0, False, None])
    def test_failure(self, value):
        assert to_status(value) == TxStatus.FAILED


class TestTransactionRecord:
    """to_transaction_record mapping."""

    def test_full_mapping(self):
        record = to_transaction_record(raw_tx(), raw_receipt(), raw_block())

        assert record.hash == "0x" + "ab" * 32
        assert record.sender == ALICE
        assert record.recipient == BOB
        assert record.value == 10**18
        assert record.gas_used == 21000
        assert record.gas_price == 2 * 10**9
        assert record.block_number == 16
        assert record.block_hash == "0x" + "cd" * 32
        assert record.timestamp == 0x6553F100
        assert record.status == TxStatus.SUCCEEDED
        assert record.transaction_index == 3
        assert record.input_data == "0x"

    def test_one_eth_value_round_trips_exactly(self):
        """Decimal-string wei survives normalization without float rounding."""
        record = to_transaction_record(
            raw_tx(value="1000000000000000000"), raw_receipt(), raw_block()
        )
        assert isinstance(record.value, int)
        assert str(record.value) == "1000000000000000000"
        assert record.to_dict()["value"] == "1000000000000000000"

    def test_contract_creation_keeps_recipient_absent(self):
        record = to_transaction_record(raw_tx(to=None), raw_receipt(), raw_block())
        assert record.recipient is None
        assert record.is_contract_creation
        assert record.to_dict()["to"] is None

    def test_missing_to_key_is_contract_creation(self):
        tx = raw_tx()
        del tx["to"]
        record = to_transaction_record(tx, raw_receipt(), raw_block())
        assert record.recipient is None

    def test_failed_status(self):
        record = to_transaction_record(raw_tx(), raw_receipt(status="0x0"), raw_block())
        assert record.status == TxStatus.FAILED
        assert not record.succeeded

    def test_gas_price_falls_back_to_receipt(self):
        tx = raw_tx()
        del tx["gasPrice"]
        record = to_transaction_record(tx, raw_receipt(), raw_block())
        assert record.gas_price == 10**9

    def test_gas_price_defaults_to_zero(self):
        tx = raw_tx()
        del tx["gasPrice"]
        receipt = raw_receipt()
        del receipt["effectiveGasPrice"]
        record = to_transaction_record(tx, receipt, raw_block())
        assert record.gas_price == 0

    def test_alternate_field_names(self):
        """Some providers use 'data' and 'index'."""
        tx = raw_tx()
        tx["data"] = tx.pop("input")
        tx["index"] = tx.pop("transactionIndex")
        record = to_transaction_record(tx, raw_receipt(), raw_block())
        assert record.transaction_index == 3
        assert record.input_data == "0x"

    @pytest.mark.parametrize("missing", ["raw", "receipt", "block"])
    def test_absent_input_is_incomplete(self, missing):
        args = {"raw": raw_tx(), "receipt": raw_receipt(), "block": raw_block()}
        args[missing] = None
        with pytest.raises(IncompleteDataError):
            to_transaction_record(args["raw"], args["receipt"], args["block"])

    def test_pending_transaction_is_incomplete(self):
        with pytest.raises(IncompleteDataError):
            to_transaction_record(raw_tx(blockNumber=None), raw_receipt(), raw_block())

    def test_missing_required_field_is_malformed(self):
        tx = raw_tx()
        del tx["from"]
        with pytest.raises(MalformedResponseError):
            to_transaction_record(tx, raw_receipt(), raw_block())

    def test_float_value_is_malformed(self):
        with pytest.raises(MalformedResponseError):
            to_transaction_record(raw_tx(value=1e18), raw_receipt(), raw_block())

    def test_non_dict_payload_is_malformed(self):
        with pytest.raises(MalformedResponseError):
            to_transaction_record("0xdeadbeef", raw_receipt(), raw_block())

    def test_fee(self):
        record = to_transaction_record(raw_tx(), raw_receipt(), raw_block())
        assert record.fee == 21000 * 2 * 10**9


class TestBlockRecord:

    def test_mapping(self):
        record = to_block_record(raw_block())
        assert record.hash == "0x" + "cd" * 32
        assert record.number == 16
        assert record.gas_used == 21000
        assert record.gas_limit == 30_000_000
        assert record.transaction_count == 1

    def test_full_transaction_objects_are_counted(self):
        record = to_block_record(raw_block(transactions=[raw_tx(), raw_tx()]))
        assert record.transaction_count == 2

    def test_no_block_is_incomplete(self):
        with pytest.raises(IncompleteDataError):
            to_block_record(None)

    def test_to_dict_uses_decimal_strings(self):
        d = to_block_record(raw_block()).to_dict()
        assert d["number"] == "16"
        assert d["gas_limit"] == "30000000"
        assert d["transaction_count"] == "1"


class TestIndexedTransfer:

    def test_mapping(self):
        transfer = to_indexed_transfer({
            "id": "0xabc-0",
            "recordId": "0x01",
            "from": {"address": ALICE},
            "to": {"address": BOB},
            "value": "1000000000000000000",
            "message": "rent",
            "timestamp": "1700000000",
            "blockNumber": "9045041",
            "transactionHash": "0x" + "ab" * 32,
        })
        assert transfer.sender == ALICE
        assert transfer.recipient == BOB
        assert transfer.value == 10**18
        assert transfer.block_number == 9045041
        assert transfer.message == "rent"

    def test_missing_account_is_malformed(self):
        with pytest.raises(MalformedResponseError):
            to_indexed_transfer({
                "id": "x",
                "recordId": "1",
                "from": None,
                "to": {"address": BOB},
                "value": "1",
                "timestamp": "1",
                "blockNumber": "1",
                "transactionHash": "0x",
            })
