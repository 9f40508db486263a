"""
indexer/ - Indexed-query path (event indexer over GraphQL).

Modules:
- subgraph: GraphQL client for transfer records and sync metadata
- compare: RPC vs indexer consistency checks
"""

from indexer.compare import (
    FieldMismatch,
    TransferComparison,
    compare_with_indexer,
    sync_status,
)
from indexer.subgraph import SubgraphClient

__all__ = [
    "FieldMismatch",
    "SubgraphClient",
    "TransferComparison",
    "compare_with_indexer",
    "sync_status",
]
