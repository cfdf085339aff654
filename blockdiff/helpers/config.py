"""Configuration management and environment variable utilities."""

import os

from dotenv import load_dotenv

from blockdiff.helpers.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
)


# Load environment variables from .env file
load_dotenv()


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default
    """
    return os.getenv(key, default)


def get_eth_rpc_url(rpc_url: str | None = None) -> str:
    """Get Ethereum RPC URL from parameter or environment.

    Args:
        rpc_url: Optional RPC URL to use directly

    Returns:
        Ethereum RPC URL

    Raises:
        ValueError: If RPC URL is not provided and ETH_RPC_URL env var is not set

    Example:
        ```python
        from blockdiff.helpers.config import get_eth_rpc_url

        # Get from environment
        rpc_url = get_eth_rpc_url()

        # Or provide explicitly
        rpc_url = get_eth_rpc_url("https://eth.llamarpc.com")
        ```
    """
    if rpc_url:
        return rpc_url

    env_rpc_url = os.getenv("ETH_RPC_URL")
    if not env_rpc_url:
        msg = "ETH_RPC_URL must be provided or set in environment variables"
        raise ValueError(msg)

    return env_rpc_url


def _get_positive_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        msg = f"{key} must be an integer, got {raw!r}"
        raise ValueError(msg) from None
    if value < 1:
        msg = f"{key} must be at least 1, got {value}"
        raise ValueError(msg)
    return value


def get_rpc_timeout() -> float:
    """Get the per-request RPC timeout in seconds from RPC_TIMEOUT.

    Raises:
        ValueError: If RPC_TIMEOUT is not a positive number
    """
    raw = os.getenv("RPC_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        msg = f"RPC_TIMEOUT must be a number, got {raw!r}"
        raise ValueError(msg) from None
    if value <= 0:
        msg = f"RPC_TIMEOUT must be positive, got {value}"
        raise ValueError(msg)
    return value


def get_concurrency_limit() -> int:
    """Get the maximum number of in-flight RPC queries from ANALYSIS_CONCURRENCY."""
    return _get_positive_int("ANALYSIS_CONCURRENCY", DEFAULT_CONCURRENCY)


def get_max_retries() -> int:
    """Get the number of attempts per RPC call from RPC_MAX_RETRIES."""
    return _get_positive_int("RPC_MAX_RETRIES", DEFAULT_MAX_RETRIES)


def get_log_level() -> str:
    """Get the log level name from LOG_LEVEL (default INFO)."""
    return (get_optional_env("LOG_LEVEL", "INFO") or "INFO").upper()


__all__ = [
    "get_concurrency_limit",
    "get_eth_rpc_url",
    "get_log_level",
    "get_max_retries",
    "get_optional_env",
    "get_rpc_timeout",
]
