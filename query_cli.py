#!/usr/bin/env python3
"""
query_cli.py - CLI entrypoint for chain queries.

Usage:
    chain-query tx 0x<64 hex>
    chain-query address 0x<40 hex> --limit 5
    chain-query block 5000000
    chain-query height
    chain-query --network sepolia compare 0x<64 hex>

Exit codes:
    0  found
    1  not found
    2  invalid input or configuration
    3  all RPC endpoints (or the indexer) unreachable
"""

import asyncio
import json
import sys
from typing import Any, Awaitable, Callable

import click

from core.exceptions import (
    AllProvidersUnavailableError,
    ConfigError,
    IndexerError,
    InvalidArgumentError,
)
from core.logging import get_logger, set_global_context, setup_logging
from chains.service import ChainQueryService
from config import DEFAULT_NETWORK, QueryConfig, load_query_config
from indexer.compare import compare_with_indexer, sync_status
from indexer.subgraph import SubgraphClient

logger = get_logger("chain_query.cli")

EXIT_NOT_FOUND = 1
EXIT_INVALID = 2
EXIT_UNAVAILABLE = 3


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _run(
    config: QueryConfig,
    query: Callable[[ChainQueryService], Awaitable[Any]],
) -> Any:
    """Run one query against a fresh service, mapping errors to exit codes."""

    async def runner() -> Any:
        async with ChainQueryService.from_config(config) as service:
            return await query(service)

    try:
        return asyncio.run(runner())
    except InvalidArgumentError as e:
        click.echo(f"Invalid input: {e.message}", err=True)
        sys.exit(EXIT_INVALID)
    except AllProvidersUnavailableError as e:
        logger.error(
            "All RPC endpoints unreachable",
            extra={"context": {"error": e}},
        )
        click.echo(
            f"Service unreachable: {e.endpoints_tried} endpoints tried. Last error: {e.last_error}",
            err=True,
        )
        sys.exit(EXIT_UNAVAILABLE)
    except IndexerError as e:
        click.echo(f"Indexer unreachable: {e.message}", err=True)
        sys.exit(EXIT_UNAVAILABLE)


def _not_found(what: str) -> None:
    click.echo(f"Not found: {what}", err=True)
    sys.exit(EXIT_NOT_FOUND)


@click.group()
@click.option(
    "--network",
    "-n",
    default=DEFAULT_NETWORK,
    help="Network key from config/query.yaml",
)
@click.option(
    "--log-level",
    "-l",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Use JSON log format",
)
@click.pass_context
def main(ctx: click.Context, network: str, log_level: str, json_logs: bool) -> None:
    """
    Read transactions and blocks through failover RPC endpoints.
    """
    setup_logging(level=log_level, json_output=json_logs)
    set_global_context(service="chain-query", network=network)

    try:
        ctx.obj = load_query_config(network)
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(EXIT_INVALID)


@main.command("tx")
@click.argument("tx_hash")
@click.pass_obj
def tx_command(config: QueryConfig, tx_hash: str) -> None:
    """Fetch a transaction by hash."""
    record = _run(config, lambda s: s.get_transaction_by_hash(tx_hash))
    if record is None:
        _not_found(f"transaction {tx_hash} (unknown or not yet mined)")
    _echo_json(record.to_dict())


@main.command("address")
@click.argument("address")
@click.option("--limit", "-n", default=20, show_default=True, help="Maximum matches")
@click.pass_obj
def address_command(config: QueryConfig, address: str, limit: int) -> None:
    """Scan recent blocks for an address's transactions."""
    records = _run(config, lambda s: s.scan_transactions_by_address(address, limit))
    _echo_json({
        "address": address,
        "scan_window": config.scan_window,
        "count": len(records),
        "transactions": [r.to_dict() for r in records],
    })


@main.command("block")
@click.argument("number", type=int)
@click.pass_obj
def block_command(config: QueryConfig, number: int) -> None:
    """Fetch a block by number."""
    record = _run(config, lambda s: s.get_block_by_number(number))
    if record is None:
        _not_found(f"block {number}")
    _echo_json(record.to_dict())


@main.command("height")
@click.pass_obj
def height_command(config: QueryConfig) -> None:
    """Print the current block height."""
    height = _run(config, lambda s: s.get_current_height())
    _echo_json({"network": config.network, "height": height})


@main.command("compare")
@click.argument("tx_hash")
@click.pass_obj
def compare_command(config: QueryConfig, tx_hash: str) -> None:
    """Compare an RPC read with the indexer's record of the same transaction."""
    if not config.subgraph_url:
        click.echo(f"No indexer configured for {config.network}", err=True)
        sys.exit(EXIT_INVALID)

    async def query(service: ChainQueryService) -> dict:
        async with SubgraphClient(config.subgraph_url, config.timeout_seconds) as subgraph:
            record = await service.get_transaction_by_hash(tx_hash)
            transfers = await subgraph.get_transfers_by_hash(tx_hash)
            height = await service.get_current_height()
            indexed_block = await subgraph.get_indexed_block()
        comparison = compare_with_indexer(tx_hash, record, transfers)
        return {
            "comparison": comparison.to_dict(),
            "rpc": record.to_dict() if record else None,
            "indexer": [t.to_dict() for t in transfers],
            "sync": sync_status(indexed_block, height).to_dict(),
        }

    _echo_json(_run(config, query))


if __name__ == "__main__":
    main()
