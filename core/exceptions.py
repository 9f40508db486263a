# PATH: core/exceptions.py
"""
Typed exceptions for the chain query client.

Per-attempt errors (ProviderError and subclasses) are recovered by the
failover executor. Only InvalidArgumentError and
AllProvidersUnavailableError cross the public service boundary.
"""

from typing import Any, Dict, Optional

from core.constants import ErrorCode


class ChainQueryError(Exception):
    """Base exception for the query client."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for logs and CLI output."""
        return {
            "error_code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidArgumentError(ChainQueryError):
    """Malformed caller input. Raised before any network call."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.INVALID_ARGUMENT, message, details)


class ProviderError(ChainQueryError):
    """One endpoint's call failed."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.INFRA_RPC_ERROR,
    ):
        super().__init__(code, message, details)


class ProviderTimeoutError(ProviderError):
    """One endpoint exceeded the per-attempt wait."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code=ErrorCode.INFRA_TIMEOUT)


class MalformedResponseError(ProviderError):
    """An endpoint answered with a payload that cannot be normalized."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code=ErrorCode.INFRA_MALFORMED_RESPONSE)


class IncompleteDataError(ChainQueryError):
    """
    Provider answered successfully but the data is absent or partial.

    The service maps this to a not-found result.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.INCOMPLETE_DATA, message, details)


class AllProvidersUnavailableError(ChainQueryError):
    """Every configured endpoint failed or timed out for one call."""

    def __init__(
        self,
        last_error: str,
        endpoints_tried: int,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = {
            "endpoints_tried": endpoints_tried,
            "last_error": last_error,
            **(details or {}),
        }
        super().__init__(
            ErrorCode.ALL_PROVIDERS_UNAVAILABLE,
            f"All {endpoints_tried} RPC endpoints failed. Last error: {last_error}",
            details,
        )
        self.last_error = last_error
        self.endpoints_tried = endpoints_tried


class IndexerError(ChainQueryError):
    """Indexer query endpoint failed or returned GraphQL errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.INDEXER_ERROR, message, details)


class ConfigError(ChainQueryError):
    """Invalid or missing configuration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.CONFIG_ERROR, message, details)
