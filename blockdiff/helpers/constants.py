"""Common configuration constants used across the application."""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

# Retry Configuration
DEFAULT_MAX_RETRIES = 1
"""Default number of attempts per RPC call (1 means no retry)"""

RETRY_BASE_DELAY = 1.0
"""Base delay for exponential backoff in seconds"""

RETRY_MAX_DELAY = 60.0
"""Maximum delay between retries in seconds"""

# Concurrency Limits
DEFAULT_CONCURRENCY = 10
"""Default number of RPC queries allowed in flight at once"""

# HTTP Connection Pooling
MAX_KEEPALIVE_CONNECTIONS = 5
"""Maximum number of keepalive connections in pool"""

MAX_CONNECTIONS = 10
"""Maximum total number of connections"""

# Chain Constants
UINT256_BITS = 256
"""Bit width of EVM account balances and nonces"""

WEI_PER_ETH = 10**18
"""Number of wei in one ether"""

LATEST_BLOCK = "latest"
"""Block tag resolving to the chain head"""


__all__ = [
    "DEFAULT_CONCURRENCY",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "LATEST_BLOCK",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "RETRY_BASE_DELAY",
    "RETRY_MAX_DELAY",
    "UINT256_BITS",
    "WEI_PER_ETH",
]
