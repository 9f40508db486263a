"""
chains/failover.py - Run one logical read against endpoints in rotation.

Rotation starts at the pool's last-good endpoint, not endpoint 0, so a dead
primary is not retried first on every call.

Per attempt:
    Attempting(endpoint_i) -> Success -> Done
                           -> Error/Timeout -> Attempting(endpoint_i+1)
After n failed attempts the call ends in AllProvidersUnavailableError.

A timed-out attempt is abandoned, not cancelled: its task keeps running and
its eventual result is discarded. All operations are read-only, so this is
safe.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from core.constants import DEFAULT_TIMEOUT_SECONDS
from core.exceptions import (
    AllProvidersUnavailableError,
    InvalidArgumentError,
    ProviderTimeoutError,
)
from core.logging import get_logger
from chains.pool import EndpointPool

logger = get_logger("chain_query.failover")

T = TypeVar("T")

Operation = Callable[[Any], Awaitable[T]]
Waiter = Callable[["asyncio.Future[Any]", float], Awaitable[bool]]


async def wait_with_timeout(task: "asyncio.Future[Any]", timeout: float) -> bool:
    """
    Wait for task up to timeout seconds without cancelling it.

    Returns:
        True if the task finished (successfully or not), False on timeout
    """
    done, _ = await asyncio.wait({task}, timeout=timeout)
    return task in done


def _endpoint_label(endpoint: Any) -> str:
    return getattr(endpoint, "label", None) or repr(endpoint)


@dataclass(frozen=True)
class AttemptRecord:
    """One failed attempt, kept for diagnostics."""
    index: int
    endpoint: str
    error: str
    timed_out: bool = False

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "endpoint": self.endpoint,
            "error": self.error,
            "timed_out": self.timed_out,
        }


class FailoverExecutor:
    """
    Tries an operation on each endpoint in rotation until one succeeds.

    Endpoints are tried strictly one at a time. Only InvalidArgumentError
    escapes an attempt early; every other exception moves the rotation on.
    """

    def __init__(
        self,
        pool: EndpointPool,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        waiter: Optional[Waiter] = None,
    ):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.pool = pool
        self.timeout_seconds = timeout_seconds
        self._waiter = waiter or wait_with_timeout
        # Abandoned tasks stay referenced until they finish
        self._abandoned: set = set()

    @property
    def abandoned_count(self) -> int:
        return len(self._abandoned)

    def _abandon(self, task: "asyncio.Future[Any]") -> None:
        self._abandoned.add(task)
        task.add_done_callback(self._discard_abandoned)

    def _discard_abandoned(self, task: "asyncio.Future[Any]") -> None:
        self._abandoned.discard(task)
        if not task.cancelled():
            # Consume the outcome so late failures are not reported as unhandled
            task.exception()

    async def execute(
        self,
        operation: Operation,
        timeout_seconds: Optional[float] = None,
        label: str = "rpc_call",
    ) -> Any:
        """
        Run operation(endpoint) with failover.

        Args:
            operation: async callable taking one endpoint
            timeout_seconds: per-attempt wait (defaults to the executor's)
            label: operation name for logs and error details

        Returns:
            Whatever the first successful attempt returned (None included)

        Raises:
            InvalidArgumentError: raised by the operation, never retried
            AllProvidersUnavailableError: every endpoint failed or timed out
        """
        timeout = timeout_seconds if timeout_seconds is not None else self.timeout_seconds
        endpoints = self.pool.endpoints
        n = len(endpoints)
        start = self.pool.start_index()

        attempts: list[AttemptRecord] = []
        last_error: Optional[BaseException] = None

        for i in range(n):
            idx = (start + i) % n
            endpoint = endpoints[idx]
            task = asyncio.ensure_future(operation(endpoint))

            try:
                finished = await self._waiter(task, timeout)
            except asyncio.CancelledError:
                task.cancel()
                raise

            if not finished:
                self._abandon(task)
                error: BaseException = ProviderTimeoutError(
                    f"No response within {timeout}s",
                    details={"endpoint": _endpoint_label(endpoint), "operation": label},
                )
            else:
                try:
                    result = task.result()
                except InvalidArgumentError:
                    raise
                except Exception as e:
                    error = e
                else:
                    self.pool.record_success(idx)
                    if i > 0:
                        logger.info(
                            f"{label} succeeded after failover",
                            extra={"context": {
                                "endpoint": _endpoint_label(endpoint),
                                "index": idx,
                                "failed_attempts": i,
                            }},
                        )
                    else:
                        logger.debug(
                            f"{label} succeeded",
                            extra={"context": {"endpoint": _endpoint_label(endpoint)}},
                        )
                    return result

            record = AttemptRecord(
                index=idx,
                endpoint=_endpoint_label(endpoint),
                error=str(error),
                timed_out=isinstance(error, ProviderTimeoutError),
            )
            attempts.append(record)
            last_error = error
            logger.warning(
                f"{label} attempt failed",
                extra={"context": {**record.to_dict(), "attempt": i + 1, "of": n}},
            )

        raise AllProvidersUnavailableError(
            last_error=str(last_error) if last_error else "unknown error",
            endpoints_tried=n,
            details={
                "operation": label,
                "attempts": [a.to_dict() for a in attempts],
            },
        )
