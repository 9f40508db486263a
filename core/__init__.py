"""
core - Core utilities and models for the chain query client.

This package contains:
- models.py: Canonical records (TransactionRecord, BlockRecord, ...)
- constants.py: Enums and policy defaults
- exceptions.py: Typed exceptions with error codes
- validators.py: Input validation (hash, address, block number)
- hexdata.py: Memo encoding in call data
- logging.py: Structured JSON logging
"""

from core.constants import (
    DEFAULT_SCAN_LIMIT,
    DEFAULT_SCAN_WINDOW,
    DEFAULT_TIMEOUT_SECONDS,
    ErrorCode,
    TxStatus,
)
from core.exceptions import (
    AllProvidersUnavailableError,
    ChainQueryError,
    ConfigError,
    IncompleteDataError,
    IndexerError,
    InvalidArgumentError,
    MalformedResponseError,
    ProviderError,
    ProviderTimeoutError,
)
from core.logging import get_logger, setup_logging
from core.models import (
    BlockRecord,
    IndexedTransfer,
    SyncStatus,
    TransactionRecord,
)

__all__ = [
    # Constants
    "DEFAULT_SCAN_LIMIT",
    "DEFAULT_SCAN_WINDOW",
    "DEFAULT_TIMEOUT_SECONDS",
    "ErrorCode",
    "TxStatus",
    # Exceptions
    "AllProvidersUnavailableError",
    "ChainQueryError",
    "ConfigError",
    "IncompleteDataError",
    "IndexerError",
    "InvalidArgumentError",
    "MalformedResponseError",
    "ProviderError",
    "ProviderTimeoutError",
    # Models
    "BlockRecord",
    "IndexedTransfer",
    "SyncStatus",
    "TransactionRecord",
    # Logging
    "get_logger",
    "setup_logging",
]
