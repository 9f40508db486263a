# PATH: core/constants.py
"""
Constants for the chain query client.

Contains enums, defaults, and policy constants shared by the RPC path
and the indexer path.
"""

from enum import Enum
from typing import Final


# =============================================================================
# POLICY DEFAULTS
# =============================================================================

# Per-attempt wait before the executor moves to the next endpoint
DEFAULT_TIMEOUT_SECONDS: Final[float] = 10.0

# Most recent blocks inspected by the address scan
DEFAULT_SCAN_WINDOW: Final[int] = 1000

# Default number of matches returned by the address scan
DEFAULT_SCAN_LIMIT: Final[int] = 20

# Default page size for indexer list queries
DEFAULT_INDEXER_PAGE_SIZE: Final[int] = 10

# Identifier shapes (hex chars after the 0x prefix)
TX_HASH_HEX_LENGTH: Final[int] = 64
ADDRESS_HEX_LENGTH: Final[int] = 40

EMPTY_CALL_DATA: Final[str] = "0x"


class TxStatus(str, Enum):
    """Execution outcome of a mined transaction."""
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class ErrorCode(str, Enum):
    """
    Error codes for the query client.

    INFRA_* codes are per-attempt and never reach callers on their own;
    they end up inside ALL_PROVIDERS_UNAVAILABLE details.
    """
    # Caller errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    # Data absent or partial
    INCOMPLETE_DATA = "INCOMPLETE_DATA"

    # Per-attempt infrastructure errors
    INFRA_RPC_ERROR = "INFRA_RPC_ERROR"
    INFRA_TIMEOUT = "INFRA_TIMEOUT"
    INFRA_MALFORMED_RESPONSE = "INFRA_MALFORMED_RESPONSE"

    # Terminal
    ALL_PROVIDERS_UNAVAILABLE = "ALL_PROVIDERS_UNAVAILABLE"

    # Indexer path
    INDEXER_ERROR = "INDEXER_ERROR"

    # Setup
    CONFIG_ERROR = "CONFIG_ERROR"
