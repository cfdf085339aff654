"""Ethereum JSON-RPC client utilities."""

from __future__ import annotations

import itertools

from typing import TYPE_CHECKING, Any, Self, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from blockdiff.helpers.constants import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT
from blockdiff.helpers.errors import ProtocolViolationError, RPCError, TransportError
from blockdiff.helpers.http import create_http_client, retry_with_backoff
from blockdiff.helpers.logging import get_logger
from blockdiff.helpers.parsers import parse_hex_int
from blockdiff.helpers.rpc_models import (
    EthGetBalanceRequest,
    EthGetBlockByNumberRequest,
    EthGetTransactionCountRequest,
    EthGetTransactionReceiptRequest,
    JsonRpcRequest,
    RawBlock,
    RawReceipt,
)


if TYPE_CHECKING:
    from types import TracebackType


logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def format_block_param(block: int | str) -> str:
    """Render a block identifier as a JSON-RPC parameter.

    Ints become hex quantities; tags such as "latest" pass through unchanged.

    Raises:
        ValueError: If block is a negative int
    """
    if isinstance(block, int):
        if block < 0:
            msg = f"Block number cannot be negative: {block}"
            raise ValueError(msg)
        return hex(block)
    return block


class RPCClient:
    """Ethereum JSON-RPC client."""

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        """Initialize RPC client.

        Args:
            rpc_url: Ethereum JSON-RPC endpoint URL
            timeout: Default timeout for requests in seconds
            max_retries: Attempts per call on HTTP transport failures

        Raises:
            ValueError: If rpc_url is empty or None
        """
        if not rpc_url:
            msg = "RPC URL cannot be empty"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.timeout = timeout
        self.max_retries = max_retries
        self._ids = itertools.count(1)
        self._post = retry_with_backoff(max_retries=max_retries)(self._post_once)

    async def _post_once(
        self, client: httpx.AsyncClient, payload: dict[str, Any], timeout: float
    ) -> Any:
        response = await client.post(self.rpc_url, json=payload, timeout=timeout)
        response.raise_for_status()
        return response.json()

    async def send(
        self,
        client: httpx.AsyncClient,
        request: JsonRpcRequest,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a prepared JSON-RPC request and return its result.

        Args:
            client: HTTP client instance
            request: Request model (method, params and id)
            timeout: Optional timeout override

        Returns:
            RPC result value (None when the node returns null)

        Raises:
            TransportError: If the HTTP request fails or the body is not JSON-RPC
            RPCError: If the RPC response contains an error
        """
        logger.debug("RPC %s %s", request.method, request.params)
        try:
            body = await self._post(
                client, request.model_dump(), timeout or self.timeout
            )
        except httpx.HTTPError as e:
            raise TransportError(
                request.method, request.params, str(e) or type(e).__name__
            ) from e
        except ValueError as e:
            # response.json() raises json.JSONDecodeError, a ValueError subclass
            raise TransportError(
                request.method, request.params, f"invalid JSON response: {e}"
            ) from e

        if not isinstance(body, dict):
            raise TransportError(
                request.method, request.params, "response is not a JSON-RPC object"
            )

        if body.get("error") is not None:
            raise RPCError(request.method, request.params, body["error"])

        return body.get("result")

    async def call(
        self,
        client: httpx.AsyncClient,
        method: str,
        params: list[Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Make a single JSON-RPC call.

        Args:
            client: HTTP client instance
            method: RPC method name (e.g., "eth_blockNumber")
            params: Method parameters list
            timeout: Optional timeout override

        Returns:
            RPC result value
        """
        request = JsonRpcRequest(method=method, params=params or [], id=next(self._ids))
        return await self.send(client, request, timeout=timeout)

    async def get_block_by_number(
        self,
        client: httpx.AsyncClient,
        block: int | str,
        *,
        full_transactions: bool = True,
    ) -> RawBlock | None:
        """Fetch a block by number or tag.

        Args:
            client: HTTP client instance
            block: Block number (int) or tag such as "latest"
            full_transactions: Embed transaction objects instead of hashes

        Returns:
            Parsed block, or None if the node has no such block

        Raises:
            ProtocolViolationError: If the node returns something that is not a block
        """
        request = EthGetBlockByNumberRequest(
            params=[format_block_param(block), full_transactions], id=next(self._ids)
        )
        result = await self.send(client, request)
        if result is None:
            return None
        return _validate(RawBlock, result, f"eth_getBlockByNumber({block!r})")

    async def get_transaction_receipt(
        self, client: httpx.AsyncClient, tx_hash: str
    ) -> RawReceipt | None:
        """Fetch the receipt for a transaction, or None if it is unknown."""
        request = EthGetTransactionReceiptRequest(params=[tx_hash], id=next(self._ids))
        result = await self.send(client, request)
        if result is None:
            return None
        return _validate(RawReceipt, result, f"eth_getTransactionReceipt({tx_hash})")

    async def get_balance(
        self,
        client: httpx.AsyncClient,
        address: str,
        block: int | str = "latest",
    ) -> int:
        """Get ETH balance for an address at a specific block.

        Args:
            client: HTTP client instance
            address: Ethereum address
            block: Block number (int) or tag

        Returns:
            Balance in wei

        Raises:
            ProtocolViolationError: If the node returns null
        """
        request = EthGetBalanceRequest(
            params=[address, format_block_param(block)], id=next(self._ids)
        )
        return _require_quantity(await self.send(client, request), request)

    async def get_transaction_count(
        self,
        client: httpx.AsyncClient,
        address: str,
        block: int | str = "latest",
    ) -> int:
        """Get the nonce (number of sent transactions) of an address at a block."""
        request = EthGetTransactionCountRequest(
            params=[address, format_block_param(block)], id=next(self._ids)
        )
        return _require_quantity(await self.send(client, request), request)


def _validate(model: type[M], result: Any, what: str) -> M:
    if not isinstance(result, dict):
        msg = f"{what} returned {type(result).__name__}, expected an object"
        raise ProtocolViolationError(msg)
    try:
        return model.model_validate(result)
    except ValidationError as e:
        msg = f"{what} returned a malformed object: {e}"
        raise ProtocolViolationError(msg) from e


def _require_quantity(result: Any, request: JsonRpcRequest) -> int:
    if not isinstance(result, str):
        msg = (
            f"{request.method}({request.params}) returned {result!r}, "
            "expected a hex quantity"
        )
        raise ProtocolViolationError(msg)
    try:
        return parse_hex_int(result)
    except ValueError as e:
        msg = f"{request.method}({request.params}) returned invalid quantity {result!r}"
        raise ProtocolViolationError(msg) from e


class NodeClient:
    """Chain-query client bound to one node endpoint.

    Owns an httpx.AsyncClient and exposes the four queries the block analysis
    needs, without an HTTP client argument.

    Example:
        ```python
        async with NodeClient(get_eth_rpc_url()) as node:
            analysis = await analyze_block(node, 7408000)
        ```
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the node client.

        Args:
            rpc_url: Ethereum JSON-RPC endpoint URL
            timeout: Default timeout for requests in seconds
            max_retries: Attempts per call on HTTP transport failures
            http_client: Existing client to use; it is not closed by this object
        """
        self.rpc = RPCClient(rpc_url, timeout=timeout, max_retries=max_retries)
        self._owns_client = http_client is None
        self.http_client = http_client or create_http_client(timeout=timeout)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this object created it."""
        if self._owns_client:
            await self.http_client.aclose()

    async def get_block_by_number(
        self, block: int | str, full_transactions: bool = True
    ) -> RawBlock | None:
        return await self.rpc.get_block_by_number(
            self.http_client, block, full_transactions=full_transactions
        )

    async def get_transaction_receipt(self, tx_hash: str) -> RawReceipt | None:
        return await self.rpc.get_transaction_receipt(self.http_client, tx_hash)

    async def get_balance(self, address: str, block: int | str) -> int:
        return await self.rpc.get_balance(self.http_client, address, block)

    async def get_transaction_count(self, address: str, block: int | str) -> int:
        return await self.rpc.get_transaction_count(self.http_client, address, block)


__all__ = [
    "NodeClient",
    "RPCClient",
    "format_block_param",
]
