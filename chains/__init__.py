"""
chains/ - Blockchain read layer.

Modules:
- endpoints: one JSON-RPC endpoint and its request statistics
- pool: ordered endpoints with the last-good cursor
- failover: rotation with per-attempt timeout
- normalizer: provider payloads to canonical records
- service: public query surface
"""

from chains.endpoints import RPCEndpoint, RPCStats
from chains.failover import AttemptRecord, FailoverExecutor, wait_with_timeout
from chains.normalizer import (
    to_block_record,
    to_indexed_transfer,
    to_int,
    to_transaction_record,
)
from chains.pool import EndpointPool
from chains.service import ChainQueryService

__all__ = [
    # Endpoints
    "RPCEndpoint",
    "RPCStats",
    "EndpointPool",
    # Failover
    "AttemptRecord",
    "FailoverExecutor",
    "wait_with_timeout",
    # Normalizer
    "to_block_record",
    "to_indexed_transfer",
    "to_int",
    "to_transaction_record",
    # Service
    "ChainQueryService",
]
