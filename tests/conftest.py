"""
Pytest configuration and fixtures for chain query tests.

FakeChain/FakeEndpoint stand in for JSON-RPC providers: payloads use the
same hex-quantity shapes a real node returns.
"""

import asyncio
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.exceptions import ProviderError  # noqa: E402

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


def tx_hash_for(n: int) -> str:
    return "0x" + format(n, "064x")


def block_hash_for(number: int) -> str:
    return "0x" + format(0xB10C0000 + number, "064x")


class FakeChain:
    """In-memory chain: blocks with full transaction objects plus receipts."""

    def __init__(self, height: int):
        self.height = height
        self.blocks: dict[int, dict] = {}
        self.receipts: dict[str, dict] = {}
        self.transactions: dict[str, dict] = {}
        self._next_tx = 1

    def block(self, number: int) -> dict:
        if number not in self.blocks:
            self.blocks[number] = {
                "hash": block_hash_for(number),
                "number": hex(number),
                "timestamp": hex(1_700_000_000 + number * 12),
                "gasUsed": hex(21000),
                "gasLimit": hex(30_000_000),
                "transactions": [],
            }
        return self.blocks[number]

    def add_tx(
        self,
        block_number: int,
        sender: str,
        recipient: str | None,
        value: int = 10**18,
        status: str = "0x1",
        with_receipt: bool = True,
        data: str = "0x",
    ) -> dict:
        block = self.block(block_number)
        tx_hash = tx_hash_for(self._next_tx)
        self._next_tx += 1
        tx = {
            "hash": tx_hash,
            "from": sender,
            "to": recipient,
            "value": hex(value),
            "gasPrice": hex(2 * 10**9),
            "blockNumber": hex(block_number),
            "blockHash": block["hash"],
            "transactionIndex": hex(len(block["transactions"])),
            "input": data,
        }
        block["transactions"].append(tx)
        self.transactions[tx_hash] = tx
        if with_receipt:
            self.receipts[tx_hash] = {
                "transactionHash": tx_hash,
                "gasUsed": hex(21000),
                "effectiveGasPrice": hex(2 * 10**9),
                "status": status,
            }
        return tx

    def add_pending_tx(self, sender: str, recipient: str) -> dict:
        tx_hash = tx_hash_for(self._next_tx)
        self._next_tx += 1
        tx = {
            "hash": tx_hash,
            "from": sender,
            "to": recipient,
            "value": hex(1),
            "gasPrice": hex(10**9),
            "blockNumber": None,
            "blockHash": None,
            "transactionIndex": None,
            "input": "0x",
        }
        self.transactions[tx_hash] = tx
        return tx


class FakeEndpoint:
    """
    Provider double exposing the four read primitives.

    fail=True raises ProviderError on every call; hang=True never answers
    until release() is called; unreadable_blocks and unreadable_receipts
    fail only those lookups.
    """

    def __init__(
        self,
        chain: FakeChain | None = None,
        label: str = "fake",
        fail: bool = False,
        hang: bool = False,
        unreadable_blocks: set | None = None,
        unreadable_receipts: set | None = None,
    ):
        self.chain = chain or FakeChain(height=0)
        self.label = label
        self.fail = fail
        self.hang = hang
        self.unreadable_blocks = unreadable_blocks or set()
        self.unreadable_receipts = unreadable_receipts or set()
        self.calls: list[tuple] = []
        self._released = asyncio.Event()

    def release(self) -> None:
        self._released.set()

    async def _enter(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        if self.hang:
            await self._released.wait()
        if self.fail:
            raise ProviderError(f"{self.label} is down", details={"endpoint": self.label})

    async def get_transaction(self, tx_hash):
        await self._enter("get_transaction", tx_hash)
        return self.chain.transactions.get(tx_hash)

    async def get_transaction_receipt(self, tx_hash):
        await self._enter("get_transaction_receipt", tx_hash)
        if tx_hash in self.unreadable_receipts:
            raise ProviderError(f"receipt {tx_hash} unreadable")
        return self.chain.receipts.get(tx_hash)

    async def get_block(self, number_or_hash, include_transactions=False):
        await self._enter("get_block", number_or_hash, include_transactions)
        number = number_or_hash
        if isinstance(number, str):
            number = int(number, 16)
        if number in self.unreadable_blocks:
            raise ProviderError(f"block {number} unreadable")
        block = self.chain.blocks.get(number)
        if block is None:
            if 0 <= number <= self.chain.height:
                return self.chain.block(number)
            return None
        if include_transactions:
            return block
        return {**block, "transactions": [tx["hash"] for tx in block["transactions"]]}

    async def get_block_number(self):
        await self._enter("get_block_number")
        return self.chain.height


class FakeClock:
    """
    Waiter double: lets ready tasks finish, otherwise "waits" the full
    timeout instantly and reports it.
    """

    def __init__(self):
        self.waits: list[float] = []
        self.elapsed = 0.0
        self.timeouts = 0

    async def waiter(self, task, timeout: float) -> bool:
        self.waits.append(timeout)
        for _ in range(20):
            if task.done():
                return True
            await asyncio.sleep(0)
        if task.done():
            return True
        self.elapsed += timeout
        self.timeouts += 1
        return False


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def chain():
    return FakeChain(height=100)
