# PATH: core/validators.py
"""
Input validators for the chain query client.

is_* functions never raise. require_* functions raise InvalidArgumentError
and are called before any endpoint is contacted.
"""

import re
from typing import Any

from core.constants import ADDRESS_HEX_LENGTH, TX_HASH_HEX_LENGTH
from core.exceptions import InvalidArgumentError

_TX_HASH_RE = re.compile(rf"0x[0-9a-fA-F]{{{TX_HASH_HEX_LENGTH}}}")
_ADDRESS_RE = re.compile(rf"0x[0-9a-fA-F]{{{ADDRESS_HEX_LENGTH}}}")


def is_valid_tx_hash(value: Any) -> bool:
    """
    Check if value is a 0x-prefixed 32-byte hex transaction hash.
    """
    if not isinstance(value, str):
        return False
    return bool(_TX_HASH_RE.fullmatch(value))


def is_valid_address(value: Any) -> bool:
    """
    Check if value is a 0x-prefixed 20-byte hex address.

    Checksum casing is not verified.
    """
    if not isinstance(value, str):
        return False
    return bool(_ADDRESS_RE.fullmatch(value))


def require_tx_hash(value: Any) -> str:
    if not is_valid_tx_hash(value):
        raise InvalidArgumentError(
            "Transaction hash must be 0x followed by 64 hex characters",
            details={"tx_hash": value},
        )
    return value


def require_address(value: Any) -> str:
    if not is_valid_address(value):
        raise InvalidArgumentError(
            "Address must be 0x followed by 40 hex characters",
            details={"address": value},
        )
    return value


def require_block_number(value: Any) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(
            "Block number must be a non-negative integer",
            details={"block_number": value},
        )
    return value


def require_positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidArgumentError(
            f"{name} must be a positive integer",
            details={name: value},
        )
    return value


def same_address(a: Any, b: Any) -> bool:
    """Case-insensitive address comparison; None never matches."""
    if not isinstance(a, str) or not isinstance(b, str):
        return False
    return a.lower() == b.lower()
