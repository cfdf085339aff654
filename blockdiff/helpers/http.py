"""HTTP client utilities and helpers."""

from __future__ import annotations

from asyncio import sleep
from functools import wraps

from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar

import httpx

from blockdiff.helpers.constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
)
from blockdiff.helpers.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def retry_with_backoff(
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
    max_delay: float = RETRY_MAX_DELAY,
    *,
    log_errors: bool = True,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator to retry async functions with exponential backoff.

    Only httpx transport failures are retried. Anything else, including
    JSON-RPC errors raised by the wrapped function, propagates immediately.

    Args:
        max_retries: Total number of attempts (default: 1, i.e. no retry)
        base_delay: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay between retries (default: 60.0)
        log_errors: Whether to log retry attempts (default: True)

    Returns:
        Decorated function that retries on httpx.HTTPError

    Example:
        ```python
        from blockdiff.helpers.http import retry_with_backoff

        @retry_with_backoff(max_retries=3, base_delay=2.0)
        async def post_rpc(client: httpx.AsyncClient, url: str, body: dict) -> dict:
            response = await client.post(url, json=body)
            response.raise_for_status()
            return response.json()

        # Will try up to 3 times, sleeping 2s then 4s between attempts
        ```
    """
    if max_retries < 1:
        msg = f"max_retries must be at least 1, got {max_retries}"
        raise ValueError(msg)

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)
                except httpx.TimeoutException:
                    if attempt == max_retries - 1:
                        raise
                    if log_errors:
                        logger.warning(
                            "%s timeout (attempt %d/%d)",
                            func.__name__,
                            attempt + 1,
                            max_retries,
                        )
                except httpx.HTTPError as e:
                    if attempt == max_retries - 1:
                        raise
                    if log_errors:
                        logger.warning(
                            "%s HTTP error (attempt %d/%d): %s",
                            func.__name__,
                            attempt + 1,
                            max_retries,
                            e,
                        )

                # Exponential backoff with max_delay cap
                delay = min(base_delay * (2**attempt), max_delay)
                await sleep(delay)

            # range(max_retries) is never empty, so the loop always returns or raises
            msg = f"{func.__name__} failed without exception"
            raise RuntimeError(msg)

        return wrapper

    return decorator


def create_http_client(
    timeout: float = DEFAULT_TIMEOUT, **kwargs: Any
) -> httpx.AsyncClient:
    """Create a configured httpx AsyncClient.

    Connection pooling is capped at MAX_CONNECTIONS unless limits is passed.

    Args:
        timeout: Default timeout in seconds (default: DEFAULT_TIMEOUT)
        **kwargs: Additional httpx.AsyncClient kwargs

    Returns:
        Configured AsyncClient instance

    Example:
        ```python
        from blockdiff.helpers.http import create_http_client

        async with create_http_client(timeout=60.0) as client:
            response = await client.post(rpc_url, json=payload)
        ```
    """
    kwargs.setdefault(
        "limits",
        httpx.Limits(
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            max_connections=MAX_CONNECTIONS,
        ),
    )
    return httpx.AsyncClient(timeout=timeout, **kwargs)


__all__ = [
    "create_http_client",
    "retry_with_backoff",
]
