"""
chains/pool.py - Ordered endpoint pool with a last-good cursor.

The cursor is a best-effort hint: concurrent callers may race on it, and a
stale read only costs one extra failed attempt before the rotation
corrects itself on the next success.
"""

import threading
from typing import Any, Sequence

from core.constants import DEFAULT_TIMEOUT_SECONDS
from core.exceptions import ConfigError
from chains.endpoints import RPCEndpoint


class EndpointPool:
    """
    Endpoints in configured order plus the index of the last one that worked.

    Invariant: 0 <= start_index() < len(endpoints).
    """

    def __init__(self, endpoints: Sequence[Any], start_index: int = 0):
        if not endpoints:
            raise ConfigError("At least one RPC endpoint must be configured")
        self._endpoints = tuple(endpoints)
        self._lock = threading.Lock()
        self._last_good_index = 0
        self.record_success(start_index)

    @classmethod
    def from_urls(
        cls,
        urls: Sequence[str],
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> "EndpointPool":
        """Build RPCEndpoints for each URL, keeping configured order."""
        return cls([RPCEndpoint(url, timeout_seconds) for url in urls])

    @property
    def endpoints(self) -> tuple:
        return self._endpoints

    def __len__(self) -> int:
        return len(self._endpoints)

    def start_index(self) -> int:
        with self._lock:
            return self._last_good_index

    def record_success(self, index: int) -> None:
        if not 0 <= index < len(self._endpoints):
            raise ValueError(
                f"Endpoint index {index} out of range for {len(self._endpoints)} endpoints"
            )
        with self._lock:
            self._last_good_index = index

    async def close_all(self) -> None:
        """Close every endpoint that holds a connection."""
        for endpoint in self._endpoints:
            close = getattr(endpoint, "close", None)
            if close is not None:
                await close()
