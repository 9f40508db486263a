"""
Configuration loading for the chain query client.

Networks are defined in config/query.yaml. Environment variables (and a
.env file, via python-dotenv) override the file:

    CHAIN_QUERY_RPC_URLS         comma-separated endpoint URLs
    CHAIN_QUERY_SUBGRAPH_URL     indexer GraphQL endpoint
    CHAIN_QUERY_TIMEOUT_SECONDS  per-attempt timeout
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from core.constants import DEFAULT_SCAN_WINDOW, DEFAULT_TIMEOUT_SECONDS
from core.exceptions import ConfigError


CONFIG_DIR = Path(__file__).parent
DEFAULT_CONFIG_FILE = "query.yaml"
DEFAULT_NETWORK = "sepolia"


@dataclass(frozen=True)
class QueryConfig:
    """Resolved settings for one network."""
    network: str
    rpc_urls: tuple
    subgraph_url: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    scan_window: int = DEFAULT_SCAN_WINDOW
    scan_timeout_seconds: Optional[float] = None


def load_yaml(filename: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of file in config directory, or an absolute path

    Returns:
        Parsed YAML as dict
    """
    filepath = Path(filename)
    if not filepath.is_absolute():
        filepath = CONFIG_DIR / filename
    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_networks(filename: str = DEFAULT_CONFIG_FILE) -> Dict[str, Any]:
    """Load the networks section of the query config."""
    data = load_yaml(filename)
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {filename} must hold a mapping")
    return data.get("networks", {})


def _positive_number(value: Any, name: str, cast: type) -> Any:
    try:
        number = cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e
    if number <= 0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
    return number


def load_query_config(
    network: str = DEFAULT_NETWORK,
    filename: str = DEFAULT_CONFIG_FILE,
    use_env: bool = True,
) -> QueryConfig:
    """
    Resolve configuration for a network.

    Args:
        network: Network key in the config file
        filename: Config file name or path
        use_env: Apply .env / environment overrides

    Raises:
        ConfigError: missing or unparsable file, unknown network, no
            endpoints, or invalid numbers
    """
    if use_env:
        load_dotenv()

    try:
        networks = load_networks(filename)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(
            f"Cannot read config file {filename}: {e}",
            details={"filename": str(filename)},
        ) from e
    if not isinstance(networks, dict):
        raise ConfigError(f"networks in {filename} must be a mapping")
    if network not in networks:
        raise ConfigError(
            f"Unknown network: {network}",
            details={"available": sorted(networks)},
        )
    section = networks[network] or {}

    rpc_urls = list(section.get("rpc_urls") or [])
    subgraph_url = section.get("subgraph_url")
    timeout = section.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)

    if use_env:
        env_urls = os.getenv("CHAIN_QUERY_RPC_URLS")
        if env_urls:
            rpc_urls = [u.strip() for u in env_urls.split(",") if u.strip()]
        subgraph_url = os.getenv("CHAIN_QUERY_SUBGRAPH_URL") or subgraph_url
        timeout = os.getenv("CHAIN_QUERY_TIMEOUT_SECONDS") or timeout

    if not rpc_urls:
        raise ConfigError(f"No RPC endpoints configured for {network}")

    scan_timeout = section.get("scan_timeout_seconds")

    return QueryConfig(
        network=network,
        rpc_urls=tuple(rpc_urls),
        subgraph_url=subgraph_url,
        timeout_seconds=_positive_number(timeout, "timeout_seconds", float),
        scan_window=_positive_number(
            section.get("scan_window", DEFAULT_SCAN_WINDOW), "scan_window", int
        ),
        scan_timeout_seconds=(
            _positive_number(scan_timeout, "scan_timeout_seconds", float)
            if scan_timeout is not None else None
        ),
    )
